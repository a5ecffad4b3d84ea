import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.storefront.core.errors import StorefrontError
from src.storefront.runtime.config.config_data import JWTConfig
from src.storefront.runtime.context import get_config

REGISTERED_CLAIMS = frozenset({"iss", "sub", "aud", "exp", "iat", "nbf", "jti"})


def _signing_key(algorithm: str, secret: str | None, settings: JWTConfig) -> str:
    if algorithm not in settings.allowed_algorithms:
        logger.bind(algorithm=algorithm, allowed=settings.allowed_algorithms).debug(
            "Refusing to sign with a disallowed algorithm"
        )
        raise StorefrontError(f"Algorithm {algorithm} not allowed")

    key = secret or settings.signing_secret
    if not key:
        raise StorefrontError("JWT signing secret not configured")
    return key


class JwtGeneratorService:
    """Issues the HMAC-signed access tokens handed out at login."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        issuer: str | None = None,
        audience: str | list[str] | None = None,
        algorithm: str = "HS256",
        include_jti: bool = True,
        secret: str | None = None,
    ) -> str:
        """Sign a token for ``subject``.

        Registered claims are always derived from the arguments and the
        ``jwt`` configuration; entries in ``claims`` cannot override them.

        Raises:
            StorefrontError: If the algorithm is not allowed or no secret is set
        """
        settings = get_config().jwt
        key = _signing_key(algorithm, secret, settings)

        issued_at = int(time.time())
        lifetime = (
            settings.access_token_ttl_seconds
            if expires_in_seconds is None
            else expires_in_seconds
        )
        payload: dict[str, Any] = {
            name: value
            for name, value in (claims or {}).items()
            if name not in REGISTERED_CLAIMS
        }
        payload.update(
            iss=issuer or settings.gen_issuer,
            sub=subject,
            aud=audience or settings.audiences,
            iat=issued_at,
            nbf=issued_at,
            exp=issued_at + lifetime,
        )
        if include_jti:
            payload["jti"] = generate_token(16)

        try:
            token = jwt.encode({"alg": algorithm, "typ": "JWT"}, payload, key)
        except JoseError as e:
            raise StorefrontError(f"JWT encoding failed: {e}") from e
        return token.decode("ascii") if isinstance(token, bytes) else token

    def generate_access_token(
        self,
        user_id: str,
        email: str | None = None,
        roles: list[str] | None = None,
        expires_in_seconds: int | None = None,
        **extra_claims: Any,
    ) -> str:
        claims = {"email": email, "roles": roles, **extra_claims}
        return self.generate_jwt(
            subject=user_id,
            claims={name: value for name, value in claims.items() if value},
            expires_in_seconds=expires_in_seconds,
        )
