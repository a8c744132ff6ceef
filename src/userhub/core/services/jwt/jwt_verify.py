"""JWT verification service."""

from authlib.jose import JoseError, JsonWebToken
from fastapi import HTTPException
from loguru import logger

from src.userhub.core.models.auth import TokenClaims
from src.userhub.runtime.context import get_config


class JwtVerificationService:
    def verify_jwt(self, token: str) -> TokenClaims:
        """Verify signature, issuer, audience and lifetime of an access token.

        Raises:
            HTTPException: 401 for any invalid token, 500 if no secret is configured
        """
        cfg = get_config()
        secret = cfg.jwt.secret
        if not secret:
            raise HTTPException(status_code=500, detail="JWT signing secret not configured")

        claims_options = {
            "iss": {"essential": True, "value": cfg.jwt.issuer},
            "aud": {"essential": True, "value": cfg.jwt.audience},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }

        try:
            # Only the configured algorithm is accepted
            claims = JsonWebToken([cfg.jwt.algorithm]).decode(
                token,
                secret,
                claims_options=claims_options,
            )
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug(f"Rejected access token: {exc}")
            raise HTTPException(status_code=401, detail=f"JWT error: {exc}") from exc

        role = claims.get("role")
        return TokenClaims(
            subject=str(claims["sub"]),
            name=claims.get("name"),
            email=claims.get("email"),
            role=int(role) if role is not None else None,
            issued_at=claims.get("iat"),
            expires_at=claims.get("exp"),
            all_claims=dict(claims),
        )
