"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
the persistence gateway and the credential hasher into routes.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository
from src.config.settings import get_settings
from src.domain.credentials import BcryptCredentialHasher


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresAccountRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAccountRepository(pool)


def get_credential_hasher() -> BcryptCredentialHasher:
    """Create bcrypt hasher with the configured work factor."""
    return BcryptCredentialHasher(rounds=get_settings().bcrypt_cost)
