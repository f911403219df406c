"""
API response models.

Pydantic models for FastAPI response serialization and OpenAPI schema
generation. The registration request itself is a multipart form and is
declared as Form/File parameters on the route.
"""

from pydantic import BaseModel, Field

from src.domain.ports import RegistrationStatus


class RegisterResponse(BaseModel):
    """Response model for a successful registration or reconciliation."""

    message: str = "OK"
    status: RegistrationStatus = Field(..., description="created or reconciled")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str
