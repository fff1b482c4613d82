"""
Password hashing (bcrypt) and signed access tokens (JWT via python-jose).
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import bcrypt
from jose import JWTError, jwt

from playerfeed.errors import BadRequestError, UnauthorizedError

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


@dataclass
class PasswordHasher:
    rounds: int = 10

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise BadRequestError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode(
            "utf-8"
        )

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash or an over-long candidate password.
            return False


@dataclass
class TokenService:
    """Issues and verifies HS256 access tokens."""

    secret: str
    algorithm: str = "HS256"
    ttl_seconds: int = 21600

    def issue(self, user_id: str, email: str) -> str:
        issued_at = int(time.time())
        claims = {
            "id": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise UnauthorizedError("Invalid or expired token") from exc
