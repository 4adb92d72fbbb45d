from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Any
import logging

from messagely.config import JWTConfig
from .errors import InvalidTokenError


class TokenIssuer:
    """
    Signs and verifies stateless JWT access tokens.
    Attributes:
        SECRET_KEY (str): Secret key for JWT token signing
        ALGORITHM (str): JWT signing algorithm
        ACCESS_TOKEN_EXPIRE_MINUTES (int): Token lifetime, 0 for tokens without expiry
    """
    def __init__(self, config: JWTConfig, logger: logging.Logger | None = None):
        self.SECRET_KEY = config.secret_key
        self.ALGORITHM = config.algorithm
        self.ACCESS_TOKEN_EXPIRE_MINUTES: int = config.access_token_expire_minutes
        self.logger = logger or logging.getLogger(__name__)

    def issue(self, username: str, extra: dict[str, Any] | None = None) -> str:
        """
        Create an access token asserting the given username.
        Args:
            username: Username to include in the token payload
            extra: Additional claims
        Returns:
            str: Encoded JWT access token
        """
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "username": username,
            "sub": username,
            "type": "access",
            "iat": now,
        }
        if self.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
            payload["exp"] = now + timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)
        if extra:
            payload.update(extra)

        try:
            return jwt.encode(payload, self.SECRET_KEY, algorithm=self.ALGORITHM)
        except Exception as e:
            self.logger.error("Error creating access token: %s", str(e), exc_info=True)
            raise

    def verify(self, token: str) -> dict[str, Any]:
        """
        Validate token signature and expiry.
        Args:
            token: JWT token string
        Returns:
            dict: Claims embedded in the token
        Raises:
            InvalidTokenError: If the token is tampered, expired, malformed or has no username
        """
        try:
            payload = jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token expired", cause=e) from e
        except JWTError as e:
            raise InvalidTokenError("Invalid token", cause=e) from e
        except Exception as e:
            self.logger.critical("Error validating token: %s", str(e), exc_info=True)
            raise

        if payload.get("type") != "access":
            raise InvalidTokenError("Invalid token type")
        if not payload.get("username"):
            raise InvalidTokenError("Invalid authentication credentials")
        return payload
