"""
Bearer token verification.

Tokens are issued by the account service (HS256, ``userId`` and ``email``
claims, shared secret). This module only verifies them and exposes the
authenticated user id to endpoints; it never issues tokens.
"""

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings
from app.utils.logger import auth_logger

# auto_error=False so a token in the cookie can stand in for the header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/users/login", auto_error=False)


class AsyncAuthService:
    """Verification of access tokens issued by the account service."""

    @staticmethod
    def decode_access_token(token: str) -> Dict[str, Any]:
        """Decode and verify a token. Raises ``jwt.PyJWTError`` when invalid or expired."""
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

    @staticmethod
    def get_user_id(claims: Dict[str, Any]) -> int:
        """Read the user id from ``userId``, falling back to ``sub``."""
        raw_user_id = claims.get("userId", claims.get("sub"))
        if raw_user_id is None or isinstance(raw_user_id, bool):
            raise ValueError("Token has no user id claim")
        return int(raw_user_id)

    @classmethod
    async def get_current_user(
        cls, request: Request, token: Optional[str] = Depends(oauth2_scheme)
    ) -> Dict[str, Any]:
        """
        Resolve the authenticated user from the Authorization header or the
        ``token`` cookie.

        Raises:
            HTTPException: 401 when no token is sent, 403 when it does not verify
        """
        final_token = token or request.cookies.get(settings.AUTH_COOKIE_NAME)
        if not final_token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Access token required",
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            claims = cls.decode_access_token(final_token)
            user_id = cls.get_user_id(claims)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            auth_logger.warning(f"Token rejected: {e}", "VERIFY")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid or expired token",
            )

        return {"id": user_id, "email": claims.get("email")}
