import time
from datetime import UTC, datetime
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from fastapi import HTTPException

from src.userhub.entities.core.user import User
from src.userhub.runtime.config.config_data import ConfigData
from src.userhub.runtime.context import get_config

_REGISTERED_CLAIMS = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}


class JwtGeneratorService:
    """Service for generating JWT tokens for API authentication."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        include_jti: bool = True,
    ) -> tuple[str, int]:
        """Generate a signed JWT token using authlib.

        Args:
            subject: Subject (sub) claim, typically the user id
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime (defaults to the configured one)
            include_jti: Whether to include a unique JWT ID claim

        Returns:
            Tuple of (signed token, expiry as a unix timestamp)

        Raises:
            HTTPException: If the signing secret is missing or encoding fails
        """
        config: ConfigData = get_config()
        secret = config.jwt.secret
        if not secret:
            raise HTTPException(
                status_code=500, detail="JWT signing secret not configured"
            )

        if expires_in_seconds is None:
            expires_in_seconds = config.jwt.access_token_minutes * 60

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": config.jwt.issuer,
            "sub": subject,
            "aud": config.jwt.audience,
            "exp": now + expires_in_seconds,
            "iat": now,
            "nbf": now,
        }

        # Add unique JWT ID for token tracking/revocation if requested
        if include_jti:
            payload["jti"] = generate_token(16)

        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS}
            )

        try:
            header = {"alg": config.jwt.algorithm, "typ": "JWT"}
            token = jwt.encode(header, payload, secret)
            # authlib returns bytes, decode to string
            token = token.decode() if isinstance(token, bytes) else token
        except JoseError as e:
            raise HTTPException(
                status_code=500, detail=f"JWT encoding failed: {str(e)}"
            ) from e

        return token, payload["exp"]

    def generate_access_token(self, user: User) -> tuple[str, datetime]:
        """Generate an access token carrying the user's name, email and role.

        Returns:
            Tuple of (signed token, expiry in UTC)
        """
        token, expires = self.generate_jwt(
            subject=str(user.id),
            claims={"name": user.full_name, "email": user.email, "role": user.role},
        )
        return token, datetime.fromtimestamp(expires, tz=UTC)
