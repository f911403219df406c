"""
API v1 routes.

Defines the self-registration endpoint. The route only adapts the
multipart form to a RegistrationRequest and the RegistrationResult to an
HTTP response; every decision is made by the domain orchestrator.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from src.api.dependencies import get_credential_hasher, get_repository
from src.api.models import ErrorResponse, RegisterResponse
from src.domain.models import RegistrationRequest, UploadedDocument
from src.domain.ports import AccountRepository, CredentialHasher
from src.domain.registration import register

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or identity already registered"},
        415: {"model": ErrorResponse, "description": "Unsupported identity document type"},
        500: {"model": ErrorResponse, "description": "Persistence or internal failure"},
    },
    summary="Register a new account",
    description="Submit identity fields and an optional identity document "
    "(JPEG, PNG or PDF). A re-submission for an email whose account is not yet "
    "fully confirmed confirms that account instead of creating a new one.",
)
async def register_account(
    name: str | None = Form(None),
    address: str | None = Form(None),
    city: str | None = Form(None),
    phone_number: str | None = Form(None, alias="phoneNumber"),
    postcode: str | None = Form(None),
    country: str | None = Form(None),
    username: str | None = Form(None),
    email: str | None = Form(None),
    password: str | None = Form(None),
    date_of_birth: str | None = Form(None, alias="dateOfBirth"),
    id_confirmation: UploadFile | None = File(None, alias="idConfirmation"),
    repository: AccountRepository = Depends(get_repository),
    hasher: CredentialHasher = Depends(get_credential_hasher),
) -> RegisterResponse:
    """
    Register a new account or reconcile an existing one.

    - **idConfirmation**: optional identity document, checked by media type only

    Returns 200 with status `created` or `reconciled`.
    """
    document = None
    # Browsers submit an empty, unnamed part for an untouched file input
    if id_confirmation is not None and id_confirmation.filename:
        document = UploadedDocument(
            media_type=id_confirmation.content_type,
            filename=id_confirmation.filename,
            stream=id_confirmation.file,
        )

    registration_request = RegistrationRequest(
        name=name,
        address=address,
        city=city,
        phone_number=phone_number,
        postcode=postcode,
        country=country,
        username=username,
        email=email,
        password=password,
        date_of_birth=date_of_birth,
        document=document,
    )

    try:
        # bcrypt and the blocking database driver run off the event loop
        result = await run_in_threadpool(
            register, registration_request, repository=repository, hasher=hasher
        )
    finally:
        if id_confirmation is not None:
            await id_confirmation.close()

    if not result.ok:
        raise HTTPException(status_code=result.error.status_code, detail=result.error.message)

    return RegisterResponse(message="OK", status=result.status)
