"""
Unit tests for utils/security.py: password hashing, access tokens and
generated identifiers.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest

import config
from enums.user_role import UserRole
from exceptions.auth import InvalidTokenException, TokenExpiredException
from models.user import UserDTO
from utils.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    generate_otp,
    generate_reference,
)


@pytest.fixture
def user():
    return UserDTO(id=42, username="jane", email="jane@example.com", role=UserRole.ADMIN)


class TestPasswords:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert hashed.startswith("$2")
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_non_bcrypt_value_never_verifies(self):
        assert verify_password("secret123", "secret123") is False


class TestAccessTokens:

    def test_round_trip_claims(self, user):
        claims = decode_access_token(create_access_token(user))

        assert claims["userId"] == 42
        assert claims["email"] == "jane@example.com"
        assert claims["username"] == "jane"
        assert claims["role"] == "ADMIN"
        assert claims["exp"] - claims["iat"] == config.JWT_EXPIRES_HOURS * 3600

    def test_expired_token(self, user):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode({"userId": user.id, "iat": past, "exp": past + timedelta(hours=1)},
                           config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

        with pytest.raises(TokenExpiredException):
            decode_access_token(token)

    def test_token_signed_with_other_secret(self, user):
        token = jwt.encode({"userId": user.id}, "another-secret", algorithm=config.JWT_ALGORITHM)

        with pytest.raises(InvalidTokenException):
            decode_access_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenException):
            decode_access_token("not-a-token")

    def test_secret_rotation_invalidates_tokens(self, user):
        token = create_access_token(user)

        with patch.object(config, "JWT_SECRET", "rotated-secret"):
            with pytest.raises(InvalidTokenException):
                decode_access_token(token)


class TestGeneratedValues:

    @pytest.mark.parametrize("digits", [4, 6])
    def test_otp_has_exact_digit_count(self, digits):
        for _ in range(50):
            otp = generate_otp(digits)
            assert len(otp) == digits
            assert otp.isdigit()
            assert otp[0] != "0"

    def test_reference_format(self):
        reference = generate_reference("TKT")

        assert reference.startswith("TKT")
        assert reference[3:].isdigit()
        # epoch milliseconds (13 digits) + 3 random digits
        assert len(reference) == 3 + 13 + 3

    def test_references_are_distinct(self):
        assert len({generate_reference("ORD") for _ in range(100)}) > 1
