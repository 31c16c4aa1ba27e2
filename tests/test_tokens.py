"""Unit tests for auth/tokens.py -- password hashing, JWT issue/verify, login check.

Covers:
- bcrypt hashing round-trip and malformed-hash handling
- create_access_token / verify_access_token: identity round-trip, default
  one-hour expiry, expired tokens, foreign signatures, missing claims
- bearer_token header parsing
- authenticate_user: same Unauthorized for unknown email and wrong password
"""

from datetime import timedelta

import pytest
from jose import jwt

from auth.models import Identity
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    bearer_token,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)
from core.errors import InvalidToken, Unauthenticated, Unauthorized


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)

    def test_wrong_password_does_not_verify(self) -> None:
        hashed = hash_password("secret1")
        assert not verify_password("secret2", hashed)

    def test_hashes_are_salted(self) -> None:
        assert hash_password("secret1") != hash_password("secret1")

    def test_malformed_hash_returns_false(self) -> None:
        assert verify_password("secret1", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    def test_round_trip_returns_identity(self) -> None:
        identity = Identity(id=7, email="a@x.com")
        token = create_access_token(identity)
        assert verify_access_token(token) == identity

    def test_default_expiry_is_one_hour(self) -> None:
        token = create_access_token(Identity(id=1, email="a@x.com"))
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] - claims["iat"] == 3600

    def test_expired_token_is_invalid(self) -> None:
        token = create_access_token(Identity(id=1, email="a@x.com"), expires_delta=timedelta(seconds=-5))
        with pytest.raises(InvalidToken):
            verify_access_token(token)

    def test_token_signed_with_other_key_is_invalid(self) -> None:
        forged = jwt.encode({"user_id": 1, "email": "a@x.com"}, "x" * 64, algorithm="HS256")
        with pytest.raises(InvalidToken):
            verify_access_token(forged)

    def test_garbage_token_is_invalid(self) -> None:
        with pytest.raises(InvalidToken):
            verify_access_token("not.a.jwt")

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token_is_unauthenticated(self, token) -> None:
        with pytest.raises(Unauthenticated):
            verify_access_token(token)

    def test_token_without_identity_claims_is_invalid(self) -> None:
        from core.config import get_settings

        token = jwt.encode({"sub": "a@x.com"}, get_settings().secret_key, algorithm="HS256")
        with pytest.raises(InvalidToken):
            verify_access_token(token)


class TestBearerToken:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("Bearer ", None),
            ("Basic dXNlcjpwdw==", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parsing(self, header, expected) -> None:
        assert bearer_token(header) == expected


class TestAuthenticateUser:
    def test_valid_credentials_return_identity(self, user_store: UserStore) -> None:
        user_id = user_store.register("a@x.com", "secret1")
        assert authenticate_user(user_store, "a@x.com", "secret1") == Identity(id=user_id, email="a@x.com")

    def test_unknown_email_and_wrong_password_look_the_same(self, user_store: UserStore) -> None:
        user_store.register("a@x.com", "secret1")

        with pytest.raises(Unauthorized) as unknown:
            authenticate_user(user_store, "nobody@x.com", "secret1")
        with pytest.raises(Unauthorized) as wrong:
            authenticate_user(user_store, "a@x.com", "wrong-password")

        assert unknown.value.message == wrong.value.message
        assert unknown.value.code == wrong.value.code
