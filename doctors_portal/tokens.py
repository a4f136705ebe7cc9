"""
tokens.py
=========
Signed identity tokens (HS256 JWT) carrying the user's email claim.
Tokens are stateless: nothing is persisted, every request re-verifies.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger(__name__)


class TokenVerificationError(Exception):
    """Token cannot be trusted."""


class InvalidToken(TokenVerificationError):
    """Malformed or tampered token, or a token without an email claim."""


class TokenExpired(TokenVerificationError):
    """Signature is fine but the token is past its expiration."""


class TokenService:
    """Issues and verifies email-bearing access tokens."""

    def __init__(self, secret: str, expires_in: timedelta = timedelta(hours=1), algorithm: str = "HS256"):
        self.secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm

    def issue(self, email: str) -> str:
        expire = datetime.now(timezone.utc) + self.expires_in
        return jwt.encode({"email": email, "exp": expire}, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Return the email embedded in `token`.

        Raises:
            TokenExpired: token signature is valid but `exp` has passed
            InvalidToken: anything else (bad signature, garbage, missing claim)
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            logger.info(f"Rejected expired token: {e}")
            raise TokenExpired(str(e)) from e
        except JWTError as e:
            logger.info(f"Rejected invalid token: {e}")
            raise InvalidToken(str(e)) from e

        email = payload.get("email")
        if not email:
            raise InvalidToken("token has no email claim")
        return email
