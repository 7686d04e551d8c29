"""JWT session management for the climb planner API."""

import os
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError


class AuthenticationError(Exception):
    """Authentication error."""

    pass


class AuthService:
    """Issues and verifies access/refresh tokens.

    Sign-in itself happens upstream; this service only deals with the
    session tokens handed to clients afterwards.
    """

    # JWT settings
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRATION_HOURS = 24 * 7  # 7 days
    JWT_REFRESH_EXPIRATION_DAYS = 30

    def __init__(self, jwt_secret: str | None = None):
        """Initialize auth service.

        Args:
            jwt_secret: Secret for signing JWTs (defaults to JWT_SECRET_KEY)
        """
        self.jwt_secret = jwt_secret or os.environ.get(
            "JWT_SECRET_KEY", "dev-secret-change-in-prod"
        )

    def create_session_tokens(self, user_id: str) -> dict[str, Any]:
        """Create access and refresh tokens for a user.

        Args:
            user_id: User ID

        Returns:
            Dict with access_token, refresh_token, token_type and expires_in
        """
        now = datetime.now(UTC)

        access_payload = {
            "sub": user_id,
            "type": "access",
            "iat": now,
            "exp": now + timedelta(hours=self.JWT_EXPIRATION_HOURS),
        }
        refresh_payload = {
            "sub": user_id,
            "type": "refresh",
            "iat": now,
            "exp": now + timedelta(days=self.JWT_REFRESH_EXPIRATION_DAYS),
        }

        return {
            "access_token": jwt.encode(
                access_payload, self.jwt_secret, algorithm=self.JWT_ALGORITHM
            ),
            "refresh_token": jwt.encode(
                refresh_payload, self.jwt_secret, algorithm=self.JWT_ALGORITHM
            ),
            "token_type": "Bearer",
            "expires_in": self.JWT_EXPIRATION_HOURS * 3600,
        }

    def _decode(self, token: str, expected_type: str) -> str:
        payload = jwt.decode(
            token,
            self.jwt_secret,
            algorithms=[self.JWT_ALGORITHM],
            options={"verify_exp": True},
        )

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token type")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Missing user ID in token")
        return user_id

    def verify_access_token(self, token: str) -> str:
        """Verify an access token and return the user ID.

        Raises:
            AuthenticationError: If token is invalid, expired or not an access token
        """
        try:
            return self._decode(token, "access")
        except ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}")

    def refresh_tokens(self, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If refresh token is invalid
        """
        try:
            user_id = self._decode(refresh_token, "refresh")
        except ExpiredSignatureError:
            raise AuthenticationError("Refresh token has expired")
        except JWTError as e:
            raise AuthenticationError(f"Invalid refresh token: {str(e)}")

        return self.create_session_tokens(user_id)
