"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- JWT authentication
- Account storage and services
- Stream Chat mocking
- API clients
"""

import os
import sys
import json
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["JWT_SECRET"] = "test_jwt_secret_key_for_testing_only_32bytes!"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["USERS_FILE"] = str(Path(tempfile.mkdtemp()) / "users.json")
os.environ["STREAM_CHAT_API_KEY"] = ""
os.environ["STREAM_CHAT_API_SECRET"] = ""

from virtualdoc.auth import JWTHandler, AccountStore, PasswordHandler
from virtualdoc.config import AuthConfig, ChatConfig, Config
from virtualdoc.services import AccountService, create_services


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="session")
def test_config():
    """Test configuration values."""
    return {
        "jwt_secret": "test_jwt_secret_key_for_testing_only_32bytes!",
        "test_email": "jane.doe@example.com",
        "test_password": "TestPassword123!",
        "test_first_name": "Jane",
        "test_last_name": "Doe",
    }


@pytest.fixture
def signup_fields(test_config) -> dict:
    """Valid sign up body."""
    return {
        "firstName": test_config["test_first_name"],
        "lastName": test_config["test_last_name"],
        "email": test_config["test_email"],
        "password": test_config["test_password"],
        "confirmPassword": test_config["test_password"],
    }


# =============================================================================
# JWT Fixtures
# =============================================================================

@pytest.fixture
def jwt_handler(test_config) -> JWTHandler:
    """Create a JWTHandler with test secret."""
    return JWTHandler(secret_key=test_config["jwt_secret"])


@pytest.fixture
def valid_access_token(jwt_handler, test_config) -> str:
    """Create a valid access token."""
    return jwt_handler.create_access_token(
        user_id="test-user-id-123",
        email=test_config["test_email"]
    )


@pytest.fixture
def expired_token(jwt_handler, test_config) -> str:
    """Create an expired access token."""
    return jwt_handler.create_access_token(
        user_id="test-user-id-123",
        email=test_config["test_email"],
        expires_in=-1  # Already expired
    )


# =============================================================================
# Account Store Fixtures
# =============================================================================

@pytest.fixture
def temp_user_file() -> Generator[Path, None, None]:
    """Create a temporary file for account storage."""
    with tempfile.NamedTemporaryFile(
        mode='w', suffix='.json', delete=False
    ) as f:
        json.dump({}, f)
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def password_handler() -> PasswordHandler:
    """Create a PasswordHandler (low cost to keep tests fast)."""
    return PasswordHandler(rounds=4)


@pytest.fixture
def account_store(temp_user_file, password_handler) -> AccountStore:
    """Create an AccountStore with temporary file."""
    return AccountStore(file_path=temp_user_file, password_handler=password_handler)


@pytest.fixture
def account_service(jwt_handler, account_store) -> AccountService:
    """Create an AccountService over the temporary store."""
    return AccountService(jwt_handler, account_store)


@pytest.fixture
def sample_account(account_store, test_config):
    """Create a sample account in the store."""
    return account_store.create_account(
        email=test_config["test_email"],
        password=test_config["test_password"],
        first_name=test_config["test_first_name"],
        last_name=test_config["test_last_name"]
    )


# =============================================================================
# Chat Fixtures
# =============================================================================

@pytest.fixture
def mock_stream_client() -> MagicMock:
    """Mock Stream Chat server client."""
    client = MagicMock()
    client.upsert_user = MagicMock(return_value={})
    client.create_token = MagicMock(return_value="stream_test_token")
    return client


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def app_config(temp_user_file, test_config) -> Config:
    """Config pointing at the temporary store."""
    return Config(
        auth=AuthConfig(jwt_secret=test_config["jwt_secret"], bcrypt_rounds=4),
        chat=ChatConfig(api_key="", api_secret=""),
        environment="test",
        users_file=temp_user_file
    )


@pytest.fixture
def api_app(app_config):
    """Create FastAPI app for testing."""
    from api.main import create_app
    return create_app(config=app_config)


@pytest.fixture
def api_client(api_app) -> TestClient:
    """Create synchronous test client for API."""
    return TestClient(api_app)


@pytest.fixture
def chat_api_client(app_config, mock_stream_client) -> TestClient:
    """Test client for an app with Stream Chat enabled (mocked client)."""
    from api.main import create_app

    app_config.chat = ChatConfig(api_key="stream_key", api_secret="stream_secret")
    services = create_services(app_config, chat_client=mock_stream_client)
    return TestClient(create_app(services=services))


@pytest.fixture
def signed_up(api_client, signup_fields) -> dict:
    """Sign up the test account through the API and return the response body."""
    response = api_client.post("/api/v1/auth/signup", json=signup_fields)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def authenticated_client(api_client, signed_up) -> TestClient:
    """Create authenticated test client."""
    api_client.headers["Authorization"] = f"Bearer {signed_up['token']}"
    return api_client
