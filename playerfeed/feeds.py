"""
Feed record store: video uploads to S3 and the feed table.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from playerfeed.attributes import convert_scan_response
from playerfeed.db import DbClient
from playerfeed.errors import BadRequestError, UpstreamError
from playerfeed.pagination import decode_cursor, encode_cursor
from playerfeed.schemas import CreateFeedRequest
from playerfeed.storage import StorageClient

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_TYPES = ("video/mp4", "video/quicktime", "video/x-msvideo")
MAX_VIDEO_BYTES = 500 * 1024 * 1024
VIDEO_KEY_TEMPLATE = "players/{owner_id}/videos/{token}.{extension}"
VIDEO_ACL = "public-read-write"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UploadedVideo:
    """A video received from a client. ``size`` is the byte count reported by the upload."""

    filename: str
    content_type: str
    data: bytes
    size: int


@dataclass
class VideoMetadata:
    owner_id: str
    title: str


@dataclass
class VideoUpload:
    video_id: str
    original_file_name: str
    cdn_url: str
    uploaded_at: str


@dataclass
class CallerIdentity:
    """The authenticated user making a request."""

    id: str
    email: str
    name: Optional[str] = None
    profilePicture: Optional[str] = None


def video_key(owner_id: str, filename: str) -> str:
    extension = filename.rsplit(".", 1)[-1]
    return VIDEO_KEY_TEMPLATE.format(
        owner_id=owner_id, token=uuid.uuid4(), extension=extension
    )


class FeedStore:
    def __init__(
        self,
        db: DbClient,
        table: str,
        *,
        storage: StorageClient,
        cdn_domain: str,
    ):
        self.db = db
        self.table = table
        self.storage = storage
        self.cdn_domain = cdn_domain

    def upload_video(
        self, file: Optional[UploadedVideo], metadata: VideoMetadata
    ) -> VideoUpload:
        if file is None:
            raise BadRequestError("No file uploaded")
        if file.content_type not in ALLOWED_VIDEO_TYPES:
            raise BadRequestError("Invalid file type. Only video files are allowed.")
        if file.size > MAX_VIDEO_BYTES:
            raise BadRequestError("File size exceeds maximum limit of 500MB")

        key = video_key(metadata.owner_id, file.filename)
        uploaded_at = _utcnow_iso()
        try:
            self.storage.put_object(
                key,
                file.data,
                content_type=file.content_type,
                metadata={
                    "id": metadata.owner_id,
                    "title": metadata.title,
                    "uploadedAt": uploaded_at,
                },
                acl=VIDEO_ACL,
            )
        except UpstreamError as exc:
            logger.exception("Video upload failed for %s", key)
            raise UpstreamError("Video upload failed") from exc

        logger.info("Uploaded video %s (%d bytes)", key, file.size)
        return VideoUpload(
            video_id=key,
            original_file_name=file.filename,
            cdn_url=f"https://{self.cdn_domain}/{key}",
            uploaded_at=uploaded_at,
        )

    def create(
        self,
        file: Optional[UploadedVideo],
        fields: CreateFeedRequest,
        caller: CallerIdentity,
    ) -> dict:
        """
        Upload the video, then write the feed record pointing at it.

        If the record write fails the uploaded object is deleted again so no
        orphaned video is left in the bucket.
        """
        if file is None:
            raise BadRequestError("Video File is required")

        upload = self.upload_video(
            file, VideoMetadata(owner_id=caller.id, title=fields.caption)
        )

        now = _utcnow_iso()
        item = {
            "id": str(uuid.uuid4()),
            **fields.model_dump(),
            "videoUrl": upload.cdn_url,
            "profilePictureUrl": caller.profilePicture,
            "userId": caller.id,
            "userName": caller.name,
            "createdAt": now,
            "updatedAt": now,
        }
        item = {name: value for name, value in item.items() if value is not None}
        try:
            self.db.put_item(self.table, item)
        except UpstreamError as exc:
            logger.exception("Failed to create feed %s", item["id"])
            self._discard_upload(upload.video_id)
            raise UpstreamError("Failed to create feed") from exc
        return item

    def _discard_upload(self, key: str) -> None:
        try:
            self.storage.delete_object(key)
        except UpstreamError:
            logger.error("Could not remove orphaned video %s", key, exc_info=True)
        else:
            logger.info("Removed orphaned video %s", key)

    def list_feeds(self, limit: int = 10, cursor: Optional[str] = None) -> dict:
        start_key = decode_cursor(cursor)
        try:
            page = self.db.scan(self.table, int(limit), start_key)
        except UpstreamError as exc:
            logger.exception("Failed to list feeds")
            raise UpstreamError("Failed to list feeds") from exc
        return {
            "feeds": convert_scan_response(page.items),
            "nextPage": encode_cursor(page.last_evaluated_key),
        }
