"""
Chat endpoints.

Stream Chat token issuance for patient consultations.
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..deps import ServicesDep

router = APIRouter()


class ChatTokenRequest(BaseModel):
    """Chat token request."""
    model_config = ConfigDict(populate_by_name=True)

    patient_name: Optional[str] = Field(None, alias="patientName")


class ChatTokenResponse(BaseModel):
    """Chat token response."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    token: str
    user_id: str = Field(..., alias="userId")
    patient_name: str = Field(..., alias="patientName")


@router.post("/token", response_model=ChatTokenResponse)
async def create_chat_token(request: ChatTokenRequest, services: ServicesDep):
    """
    Generate a Stream Chat token for a patient.

    Returns 503 when chat is not configured.
    """
    result = services.chat.create_patient_token(request.patient_name)
    return ChatTokenResponse.model_validate(result)


@router.get("/health")
async def chat_health(services: ServicesDep):
    """Stream Chat status."""
    return services.chat.health()
