"""
Chat service using Stream Chat.

Mints Stream user tokens so the web client can open a consultation chat.
Disabled when Stream credentials are not configured.
"""

import logging
import secrets
import time
from typing import Any, Optional
from urllib.parse import quote

from ..config import ChatConfig
from ..errors import ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)

AVATAR_URL = "https://getstream.io/random_png/?id={user_id}&name={name}"


class ChatService:
    """Service wrapping the Stream Chat server SDK."""

    def __init__(self, config: ChatConfig, client: Optional[Any] = None):
        """
        Initialize chat service.

        Args:
            config: Stream credentials and demo doctor identity
            client: Pre-built Stream client (skips SDK construction)
        """
        self.config = config
        self._client = client

        if self._client is None and config.enabled:
            try:
                from stream_chat import StreamChat
                self._client = StreamChat(api_key=config.api_key, api_secret=config.api_secret)
                logger.info("StreamChat client initialized")
            except ImportError:
                logger.warning("stream-chat library not installed, chat disabled")

    def is_configured(self) -> bool:
        """Check if Stream Chat is available."""
        return self._client is not None

    def create_patient_token(self, patient_name: Optional[str]) -> dict:
        """
        Create a Stream user for a patient and return a chat token.

        The demo doctor user is upserted as well so the consultation has
        someone to talk to.

        Args:
            patient_name: Display name of the patient

        Returns:
            dict with token, userId and patientName

        Raises:
            ServiceUnavailableError: Stream Chat is not configured
            ValidationError: Patient name is blank
        """
        if not self.is_configured():
            raise ServiceUnavailableError("StreamChat service not available")

        if not patient_name or not isinstance(patient_name, str) or not patient_name.strip():
            raise ValidationError("Patient name is required")

        name = patient_name.strip()
        patient_id = f"patient-{int(time.time() * 1000)}-{secrets.token_hex(5)}"

        self._client.upsert_user({
            "id": patient_id,
            "name": name,
            "role": "user",
            "image": AVATAR_URL.format(user_id=patient_id, name=quote(name)),
        })
        self._client.upsert_user({
            "id": self.config.doctor_id,
            "name": self.config.doctor_name,
            "role": "admin",
        })

        token = self._client.create_token(patient_id)
        if isinstance(token, bytes):
            token = token.decode("utf-8")

        logger.info(f"Generated StreamChat token for patient: {patient_id}")
        return {
            "token": token,
            "userId": patient_id,
            "patientName": name,
        }

    def health(self) -> dict:
        """Report whether chat is enabled without exposing credentials."""
        return {
            "streamChatEnabled": self.is_configured(),
            "apiKey": "configured" if self.config.api_key else "missing",
            "status": "ready" if self.is_configured() else "disabled",
        }
