"""Tests for access token generation and verification."""

import time

import pytest
from authlib.jose import jwt

from src.storefront.core.errors import AuthenticationError, StorefrontError
from src.storefront.core.services import JwtGeneratorService, JwtVerificationService
from src.storefront.runtime.config.config_data import ConfigData, JWTConfig
from src.storefront.runtime.context import get_config, with_context


class TestJwtRoundTrip:
    def test_generated_token_verifies(self):
        token = JwtGeneratorService().generate_access_token(
            "user-1", email="a@example.com", roles=["admin"]
        )

        claims = JwtVerificationService().verify_jwt(token)

        assert claims.subject == "user-1"
        assert claims.email == "a@example.com"
        assert claims.roles == {"admin"}
        assert claims.issuer == get_config().jwt.gen_issuer
        assert claims.jti

    def test_reserved_claims_cannot_be_overridden(self):
        token = JwtGeneratorService().generate_jwt("user-1", claims={"sub": "evil", "x": 1})

        claims = JwtVerificationService().verify_jwt(token)

        assert claims.subject == "user-1"
        assert claims.raw["x"] == 1

    def test_expired_token_is_rejected(self):
        token = JwtGeneratorService().generate_access_token(
            "user-1", expires_in_seconds=-3600
        )

        with pytest.raises(AuthenticationError):
            JwtVerificationService().verify_jwt(token)

    def test_wrong_secret_is_rejected(self):
        token = JwtGeneratorService().generate_jwt("user-1", secret="another-secret")

        with pytest.raises(AuthenticationError):
            JwtVerificationService().verify_jwt(token)

    def test_wrong_audience_is_rejected(self):
        token = JwtGeneratorService().generate_jwt("user-1", audience="someone-else")

        with pytest.raises(AuthenticationError):
            JwtVerificationService().verify_jwt(token)

    def test_wrong_issuer_is_rejected(self):
        now = int(time.time())
        payload = {
            "iss": "https://elsewhere",
            "sub": "user-1",
            "aud": get_config().jwt.audiences,
            "exp": now + 60,
            "iat": now,
        }
        token = jwt.encode({"alg": "HS256"}, payload, get_config().jwt.signing_secret)

        with pytest.raises(AuthenticationError):
            JwtVerificationService().verify_jwt(token.decode())

    def test_garbage_token_is_rejected(self):
        with pytest.raises(AuthenticationError):
            JwtVerificationService().verify_jwt("not.a.token")

    def test_disallowed_algorithm_cannot_be_generated(self):
        with pytest.raises(StorefrontError):
            JwtGeneratorService().generate_jwt("user-1", algorithm="HS512")

    def test_missing_secret(self):
        override = ConfigData(jwt=JWTConfig(signing_secret=""))
        with with_context(override):
            with pytest.raises(StorefrontError, match="not configured"):
                JwtGeneratorService().generate_jwt("user-1")
