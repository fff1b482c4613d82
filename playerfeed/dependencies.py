"""
Dependency wiring for the FastAPI app.

Clients are built once per process from settings and passed into the
record stores; the stores themselves never read configuration.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends

from playerfeed.config import Settings, get_settings
from playerfeed.db import DbClient, DynamoDbClient, InMemoryDbClient
from playerfeed.feeds import FeedStore
from playerfeed.security import PasswordHasher, TokenService
from playerfeed.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from playerfeed.users import UserStore

logger = logging.getLogger(__name__)

DEFAULT_USER_TABLE = "users"
DEFAULT_FEED_TABLE = "feeds"

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_token_service: TokenService | None = None


def _tables_unconfigured(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not (
        settings.user_table and settings.feed_table
    )


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so in-memory state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if _tables_unconfigured(settings):
        _db_client = InMemoryDbClient()
    else:
        _db_client = DynamoDbClient(
            region=settings.aws_region,
            endpoint=settings.dynamodb_endpoint,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.bucket,
            region=settings.aws_region,
            endpoint=settings.s3_endpoint,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return _storage_client


def get_token_service() -> TokenService:
    global _token_service
    if _token_service:
        return _token_service

    settings = get_settings()
    secret = settings.jwt_secret
    if not secret:
        if not _tables_unconfigured(settings):
            raise RuntimeError("JWT_SECRET must be set")
        # Tokens will not survive a restart; fine for local runs.
        logger.warning("JWT_SECRET not set, using a random per-process secret")
        secret = secrets.token_urlsafe(32)
    _token_service = TokenService(
        secret=secret,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.access_token_ttl_seconds,
    )
    return _token_service


def get_user_store(
    db: DbClient = Depends(get_db_client),
    tokens: TokenService = Depends(get_token_service),
) -> UserStore:
    settings = get_settings()
    return UserStore(
        db,
        settings.user_table or DEFAULT_USER_TABLE,
        email_index=settings.user_email_index,
        hasher=PasswordHasher(rounds=settings.password_hash_rounds),
        tokens=tokens,
    )


def get_feed_store(
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
) -> FeedStore:
    settings = get_settings()
    return FeedStore(
        db,
        settings.feed_table or DEFAULT_FEED_TABLE,
        storage=storage,
        cdn_domain=settings.cdn_domain,
    )
