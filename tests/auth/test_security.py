"""Tests for JWT verification."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from learnhub.auth.permissions import UserRole
from learnhub.auth.security import create_access_token, decode_access_token
from learnhub.config.settings import Settings, get_settings


def claims(role: UserRole = UserRole.STUDENT) -> dict[str, str]:
    return {"sub": str(uuid4()), "email": "test@example.com", "role": role.value}


class TestAccessToken:
    """Tests for access token creation and decoding."""

    def test_decode_access_token(self) -> None:
        """Should decode token and return payload."""
        data = claims(UserRole.TEACHER)
        payload = decode_access_token(create_access_token(data))

        assert payload["sub"] == data["sub"]
        assert payload["role"] == "teacher"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token(self) -> None:
        token = create_access_token(claims(), expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_invalid_token(self) -> None:
        with pytest.raises(JWTError):
            decode_access_token("invalid.token.here")

    def test_wrong_signature(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {**claims(), "type": "access"},
            "another-secret",
            algorithm=settings.auth_algorithm,
        )

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_token_type(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {**claims(), "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )

        with pytest.raises(JWTError, match="expected 'access'"):
            decode_access_token(token)

    def test_missing_role_claim(self) -> None:
        token = create_access_token({"sub": str(uuid4())})

        with pytest.raises(JWTError, match="sub or role"):
            decode_access_token(token)


class TestAudience:
    """Audience is enforced only when configured."""

    @pytest.fixture
    def audience_settings(self, monkeypatch) -> Settings:
        settings = Settings(auth_audience="learnhub-api")
        monkeypatch.setattr("learnhub.auth.security.get_settings", lambda: settings)
        return settings

    def test_matching_audience(self, audience_settings) -> None:
        payload = decode_access_token(create_access_token(claims()))

        assert payload["aud"] == "learnhub-api"

    def test_foreign_audience_rejected(self, audience_settings) -> None:
        token = create_access_token({**claims(), "aud": "other-service"})

        with pytest.raises(JWTError):
            decode_access_token(token)
