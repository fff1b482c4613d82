"""
User record store: registration, login and profile access over the user table.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from playerfeed.db import DbClient
from playerfeed.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from playerfeed.pagination import decode_cursor, encode_cursor
from playerfeed.schemas import CreateUserRequest, UserUpdate
from playerfeed.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserStore:
    def __init__(
        self,
        db: DbClient,
        table: str,
        *,
        email_index: str,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.db = db
        self.table = table
        self.email_index = email_index
        self.hasher = hasher
        self.tokens = tokens

    def create(self, fields: CreateUserRequest) -> dict:
        """
        Register a user and return its id plus the submitted profile fields.

        The password is stored as a bcrypt hash and is never returned.
        """
        if self.get_by_email(fields.email):
            raise ConflictError("Email is already registered")

        user_id = str(uuid.uuid4())
        profile = fields.model_dump(exclude_none=True, exclude={"password"})
        now = _utcnow_iso()
        item = {
            "id": user_id,
            **profile,
            "password": self.hasher.hash(fields.password),
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            self.db.put_item(self.table, item)
        except UpstreamError as exc:
            logger.exception("Failed to create user %s", user_id)
            raise UpstreamError("Failed to create user") from exc

        logger.info("Created user %s", user_id)
        return {"id": user_id, **profile}

    def get_by_id(self, user_id: str) -> dict:
        try:
            item = self.db.get_item(self.table, {"id": user_id})
        except UpstreamError as exc:
            logger.exception("Failed to retrieve user %s", user_id)
            raise UpstreamError("Failed to retrieve user") from exc
        if not item:
            raise NotFoundError("User not found")
        return item

    def get_by_email(self, email: str) -> list[dict]:
        try:
            return self.db.query_index(self.table, self.email_index, "email", email)
        except UpstreamError as exc:
            logger.exception("Failed to query users by email")
            raise UpstreamError("Failed to query users by email") from exc

    def update(self, user_id: str, changes: UserUpdate) -> dict:
        # Attribute names come from the UserUpdate schema, never from raw input.
        values = {**changes.changes(), "updatedAt": _utcnow_iso()}
        try:
            updated = self.db.update_item(self.table, {"id": user_id}, values)
        except UpstreamError as exc:
            logger.exception("Failed to update user %s", user_id)
            raise UpstreamError("Failed to update user") from exc
        if not updated:
            raise NotFoundError("User not found")
        return {"success": True}

    def delete(self, user_id: str) -> dict:
        try:
            self.db.delete_item(self.table, {"id": user_id})
        except UpstreamError as exc:
            logger.exception("Failed to delete user %s", user_id)
            raise UpstreamError("Failed to delete user") from exc
        logger.info("Deleted user %s", user_id)
        return {"message": "User deleted successfully"}

    def list_users(self, limit: int = 10, cursor: Optional[str] = None) -> dict:
        """Scan one page of users; items are returned in raw wire format."""
        start_key = decode_cursor(cursor)
        try:
            page = self.db.scan(self.table, int(limit), start_key)
        except UpstreamError as exc:
            logger.exception("Failed to list users")
            raise UpstreamError("Failed to list users") from exc
        return {
            "users": page.items or [],
            "nextPage": encode_cursor(page.last_evaluated_key),
        }

    def login(self, email: str, password: str) -> dict:
        matches = self.get_by_email(email)
        if not matches:
            raise NotFoundError("User not found")

        user = matches[0]
        if not self.hasher.verify(password, user.get("password", "")):
            raise UnauthorizedError("Invalid login")

        return {"accessToken": self.tokens.issue(user["id"], email)}
