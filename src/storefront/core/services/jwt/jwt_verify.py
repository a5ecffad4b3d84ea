"""JWT verification service."""

import time

from authlib.jose import JoseError, jwt
from loguru import logger

from src.storefront.core.errors import AuthenticationError, StorefrontError
from src.storefront.core.models.claims import TokenClaims
from src.storefront.runtime.context import get_config


class JwtVerificationService:
    """Verifies access tokens issued by :class:`JwtGeneratorService`."""

    def verify_jwt(self, token: str, *, key: str | None = None) -> TokenClaims:
        cfg = get_config()
        verification_key = key or cfg.jwt.signing_secret
        if not verification_key:
            raise StorefrontError("JWT signing secret not configured")

        claims_options = {
            "iss": {"essential": True, "values": [cfg.jwt.gen_issuer]},
            "aud": {"essential": True, "values": list(cfg.jwt.audiences)},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }

        try:
            claims = jwt.decode(token, verification_key, claims_options=claims_options)
            if claims.header.get("alg") not in cfg.jwt.allowed_algorithms:
                raise AuthenticationError("Disallowed JWT algorithm")
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Rejected access token: {}", exc)
            raise AuthenticationError(f"JWT error: {exc}") from exc

        # extra temporal sanity
        now = int(time.time())
        for k, check in (
            ("exp", lambda v: now > int(v) + cfg.jwt.clock_skew),
            ("nbf", lambda v: now < int(v) - cfg.jwt.clock_skew),
            ("iat", lambda v: int(v) > now + cfg.jwt.clock_skew),
        ):
            v = claims.get(k)
            if v is not None and check(v):
                raise AuthenticationError(f"Invalid {k} with skew")

        return TokenClaims.from_payload(dict(claims))
