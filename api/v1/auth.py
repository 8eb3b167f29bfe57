"""
Authentication endpoints.

Handles sign up, sign in and the authenticated profile routes.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, status
from pydantic import BaseModel, ConfigDict, Field

from ..deps import ServicesDep, CurrentAuth

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response models

class SignUpRequest(BaseModel):
    """
    Sign up request.

    Fields are optional here so that missing values reach the service and get
    its validation message instead of a generic 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password (min 6 chars)")
    confirm_password: Optional[str] = Field(None, alias="confirmPassword")


class SignInRequest(BaseModel):
    """Sign in request."""
    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")


class UserSummary(BaseModel):
    """Account summary returned with a token."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    phone: Optional[Any] = None
    preferred_language: str = Field("en", alias="preferredLanguage")


class AuthResponse(BaseModel):
    """Token plus account summary."""
    message: str
    token: str
    user: UserSummary


# Endpoints

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignUpRequest, services: ServicesDep):
    """
    Register a new account.

    Returns a bearer token and the account summary.
    """
    result = services.account_service.sign_up(request.model_dump(by_alias=True))

    return AuthResponse(
        message="User created successfully",
        token=result.token,
        user=UserSummary.model_validate(result.account.to_summary_dict())
    )


@router.post("/signin", response_model=AuthResponse)
async def signin(request: SignInRequest, services: ServicesDep):
    """
    Sign in with email and password.

    Unknown email and wrong password give the same 401 response.
    """
    result = services.account_service.sign_in(request.email, request.password)

    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=UserSummary.model_validate(result.account.to_summary_dict())
    )


@router.get("/profile")
async def get_profile(auth: CurrentAuth, services: ServicesDep) -> Dict[str, Any]:
    """
    Get the authenticated account's profile.

    Requires valid access token.
    """
    account = services.account_service.get_profile(auth.account_id)
    return {"user": account.to_public_dict()}


@router.put("/profile")
async def update_profile(
    auth: CurrentAuth,
    services: ServicesDep,
    updates: Dict[str, Any] = Body(...)
) -> Dict[str, Any]:
    """
    Update the authenticated account's profile.

    ``password`` and ``email`` in the body are ignored.
    """
    account = services.account_service.update_profile(auth.account_id, updates)
    return {
        "message": "Profile updated successfully",
        "user": account.to_public_dict()
    }


@router.put("/update-medical-info")
async def update_medical_info(
    auth: CurrentAuth,
    services: ServicesDep,
    form: Dict[str, Any] = Body(...)
) -> Dict[str, Any]:
    """
    Save the flat medical form into the nested profile structure.

    Returns the full updated profile.
    """
    account = services.account_service.update_medical_info(auth.account_id, form)
    return account.to_public_dict()
