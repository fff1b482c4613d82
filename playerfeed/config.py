"""
Configuration and settings for the player feed backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # AWS credentials shared by the DynamoDB and S3 clients
    aws_region: str = Field(default="us-east-1")
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "AWS_SECRET_ACCESS_KEY", "AWS_ACCESS_KEY_SECRET"
        ),
    )

    # DynamoDB
    dynamodb_endpoint: Optional[str] = Field(default=None)
    user_table: Optional[str] = Field(
        default=None, validation_alias="DYNAMODB_PLAYER_TABLE"
    )
    feed_table: Optional[str] = Field(
        default=None, validation_alias="DYNAMODB_FEED_TABLE"
    )
    user_email_index: str = Field(default="email-index")

    # S3 + CloudFront
    bucket: Optional[str] = Field(default=None, validation_alias="AWS_BUCKET_NAME")
    s3_endpoint: Optional[str] = Field(default=None)
    cdn_domain: str = Field(
        default="localhost", validation_alias="CLOUDFRONT_DOMAIN"
    )

    # Access tokens
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    access_token_ttl_seconds: int = Field(default=21600)
    password_hash_rounds: int = Field(default=10)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="PLAYERFEED_USE_IN_MEMORY_BACKENDS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
