"""
Integration tests for Auth API endpoints.

Tests sign up, sign in, the bearer gate and profile updates end to end.
"""

import time

import pytest

SIGNUP = "/api/v1/auth/signup"
SIGNIN = "/api/v1/auth/signin"
PROFILE = "/api/v1/auth/profile"
MEDICAL = "/api/v1/auth/update-medical-info"


class TestSignUp:
    """Tests for the sign up endpoint."""

    @pytest.mark.api
    def test_signup_success(self, api_client, signup_fields):
        """Test successful sign up."""
        response = api_client.post(SIGNUP, json=signup_fields)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User created successfully"
        assert data["token"]
        assert data["user"]["email"] == signup_fields["email"]
        assert data["user"]["firstName"] == signup_fields["firstName"]
        assert data["user"]["preferredLanguage"] == "en"
        assert "password" not in str(data["user"]).lower()

    @pytest.mark.api
    def test_signup_password_mismatch(self, api_client, signup_fields):
        signup_fields["confirmPassword"] = "Different123!"
        response = api_client.post(SIGNUP, json=signup_fields)

        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"

        signin = api_client.post(SIGNIN, json={
            "email": signup_fields["email"],
            "password": signup_fields["password"]
        })
        assert signin.status_code == 401

    @pytest.mark.api
    def test_signup_missing_fields(self, api_client):
        response = api_client.post(SIGNUP, json={"email": "a@b.com"})

        assert response.status_code == 400
        assert response.json()["detail"] == "All required fields must be provided"

    @pytest.mark.api
    def test_signup_short_password(self, api_client, signup_fields):
        signup_fields["password"] = signup_fields["confirmPassword"] = "12345"
        response = api_client.post(SIGNUP, json=signup_fields)

        assert response.status_code == 400
        assert "at least 6" in response.json()["detail"]

    @pytest.mark.api
    def test_signup_duplicate_email(self, api_client, signup_fields):
        """Test registration with an existing (differently cased) email fails."""
        signup_fields["email"] = "A@x.com"
        assert api_client.post(SIGNUP, json=signup_fields).status_code == 201

        signup_fields["email"] = "a@x.com "
        response = api_client.post(SIGNUP, json=signup_fields)

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]


class TestSignIn:
    """Tests for the sign in endpoint."""

    @pytest.mark.api
    def test_signin_success(self, api_client, signed_up, signup_fields):
        response = api_client.post(SIGNIN, json={
            "email": signup_fields["email"],
            "password": signup_fields["password"]
        })

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["token"] != signed_up["token"]
        assert data["user"]["id"] == signed_up["user"]["id"]

    @pytest.mark.api
    def test_wrong_password_and_unknown_email_are_identical(self, api_client, signed_up, signup_fields):
        """Test the two credential failures cannot be told apart."""
        wrong_password = api_client.post(SIGNIN, json={
            "email": signup_fields["email"],
            "password": "WrongPassword1"
        })
        unknown_email = api_client.post(SIGNIN, json={
            "email": "nobody@example.com",
            "password": signup_fields["password"]
        })

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid email or password"}

    @pytest.mark.api
    def test_signin_missing_fields(self, api_client):
        response = api_client.post(SIGNIN, json={"email": "a@b.com"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Email and password are required"


class TestAuthGate:
    """Tests for the bearer-token gate."""

    @pytest.mark.api
    def test_no_token_is_401(self, api_client):
        response = api_client.get(PROFILE)

        assert response.status_code == 401
        assert response.json()["detail"] == "Access token required"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.api
    def test_non_bearer_scheme_is_401(self, api_client):
        response = api_client.get(PROFILE, headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401

    @pytest.mark.api
    def test_corrupted_token_is_403(self, api_client):
        response = api_client.get(PROFILE, headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid or expired token"

    @pytest.mark.api
    def test_expired_token_is_403(self, api_client, jwt_handler):
        token = jwt_handler.create_access_token(
            "user-123", "a@b.com", issued_at=int(time.time()) - 8 * 86400
        )
        response = api_client.get(PROFILE, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid or expired token"

    @pytest.mark.api
    def test_token_for_deleted_account_is_404(self, api_client, api_app, signed_up):
        api_app.state.services.accounts.delete_account(signed_up["user"]["id"])

        response = api_client.get(PROFILE, headers={"Authorization": f"Bearer {signed_up['token']}"})

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"


class TestProfile:
    """Tests for the profile endpoints."""

    @pytest.mark.api
    def test_end_to_end(self, api_client):
        """Sign up, sign in, then read the profile with the first token."""
        signup = api_client.post(SIGNUP, json={
            "firstName": "A",
            "lastName": "B",
            "email": "a@b.com",
            "password": "secret1",
            "confirmPassword": "secret1"
        })
        assert signup.status_code == 201
        t1 = signup.json()["token"]

        signin = api_client.post(SIGNIN, json={"email": "a@b.com", "password": "secret1"})
        assert signin.status_code == 200
        t2 = signin.json()["token"]
        assert t1 != t2

        profile = api_client.get(PROFILE, headers={"Authorization": f"Bearer {t1}"})
        assert profile.status_code == 200
        user = profile.json()["user"]
        assert user["id"] == signup.json()["user"]["id"]
        assert user["email"] == "a@b.com"
        assert "password_hash" not in user

        assert api_client.get(PROFILE).status_code == 401

    @pytest.mark.api
    def test_update_profile_ignores_password(self, authenticated_client, signup_fields):
        response = authenticated_client.put(PROFILE, json={
            "firstName": "Jo",
            "password": "hijacked",
            "email": "other@example.com",
            "phone": "+27 21 000 0000"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Profile updated successfully"
        assert data["user"]["firstName"] == "Jo"
        assert data["user"]["email"] == signup_fields["email"]
        assert data["user"]["phone"] == "+27 21 000 0000"

        old = authenticated_client.post(SIGNIN, json={
            "email": signup_fields["email"],
            "password": signup_fields["password"]
        })
        new = authenticated_client.post(SIGNIN, json={
            "email": signup_fields["email"],
            "password": "hijacked"
        })
        assert old.status_code == 200
        assert new.status_code == 401

    @pytest.mark.api
    def test_update_profile_blank_name(self, authenticated_client):
        response = authenticated_client.put(PROFILE, json={"lastName": ""})
        assert response.status_code == 400

    @pytest.mark.api
    def test_update_profile_requires_token(self, api_client):
        response = api_client.put(PROFILE, json={"firstName": "Jo"})
        assert response.status_code == 401

    @pytest.mark.api
    def test_update_medical_info(self, authenticated_client):
        response = authenticated_client.put(MEDICAL, json={
            "gender": "female",
            "allergies": ["latex"],
            "emergencyContactPhone": "+27 82 000 0000",
            "insuranceProvider": "Discovery"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["gender"] == "female"
        assert data["medicalHistory"] == {"allergies": ["latex"]}
        assert data["emergencyContact"] == {"phone": "+27 82 000 0000"}
        assert data["insurance"] == {"provider": "Discovery"}
        assert "password_hash" not in data

        profile = authenticated_client.get(PROFILE).json()["user"]
        assert profile["medicalHistory"] == {"allergies": ["latex"]}
