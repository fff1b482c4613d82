import re
import unittest
from unittest.mock import patch

from playerfeed.db import InMemoryDbClient
from playerfeed.errors import BadRequestError, UpstreamError
from playerfeed.feeds import (
    MAX_VIDEO_BYTES,
    CallerIdentity,
    FeedStore,
    UploadedVideo,
    VideoMetadata,
    video_key,
)
from playerfeed.schemas import CreateFeedRequest
from playerfeed.storage import InMemoryStorageClient


def _video(content_type="video/mp4", filename="goal.mp4", size=None) -> UploadedVideo:
    data = b"\x00\x00\x00\x18ftypmp42"
    return UploadedVideo(
        filename=filename,
        content_type=content_type,
        data=data,
        size=len(data) if size is None else size,
    )


CALLER = CallerIdentity(
    id="user-1",
    email="jane@clubmail.org",
    name="Jane Striker",
    profilePicture="https://cdn.test/jane.png",
)


class UploadVideoTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryStorageClient()
        self.store = FeedStore(
            InMemoryDbClient(), "feeds", storage=self.storage, cdn_domain="cdn.test"
        )
        self.metadata = VideoMetadata(owner_id="user-1", title="Goal of the week")

    def test_accepts_mp4_and_builds_cdn_url(self):
        upload = self.store.upload_video(_video(), self.metadata)
        self.assertRegex(
            upload.video_id, r"^players/user-1/videos/[0-9a-f-]{36}\.mp4$"
        )
        self.assertEqual(upload.cdn_url, f"https://cdn.test/{upload.video_id}")
        self.assertEqual(upload.original_file_name, "goal.mp4")

        stored = self.storage.stored_objects[upload.video_id]
        self.assertEqual(stored.acl, "public-read-write")
        self.assertEqual(stored.content_type, "video/mp4")
        self.assertEqual(stored.metadata["id"], "user-1")
        self.assertEqual(stored.metadata["title"], "Goal of the week")
        self.assertEqual(stored.metadata["uploadedAt"], upload.uploaded_at)

    def test_rejects_disallowed_mime_type(self):
        with self.assertRaises(BadRequestError):
            self.store.upload_video(
                _video(content_type="image/png", filename="x.png"), self.metadata
            )
        self.assertEqual(self.storage.stored_objects, {})

    def test_accepts_other_allowed_types(self):
        for content_type, filename in (
            ("video/quicktime", "clip.mov"),
            ("video/x-msvideo", "clip.avi"),
        ):
            upload = self.store.upload_video(
                _video(content_type=content_type, filename=filename), self.metadata
            )
            self.assertTrue(upload.video_id.endswith(filename.rsplit(".", 1)[1]))

    def test_size_limit_is_inclusive(self):
        self.store.upload_video(_video(size=MAX_VIDEO_BYTES), self.metadata)
        with self.assertRaises(BadRequestError):
            self.store.upload_video(_video(size=MAX_VIDEO_BYTES + 1), self.metadata)

    def test_missing_file(self):
        with self.assertRaises(BadRequestError):
            self.store.upload_video(None, self.metadata)

    def test_storage_failure_is_upstream_error(self):
        with patch.object(
            self.storage, "put_object", side_effect=UpstreamError("S3 put_object failed")
        ):
            with self.assertRaises(UpstreamError) as ctx:
                self.store.upload_video(_video(), self.metadata)
        self.assertNotIsInstance(ctx.exception, BadRequestError)
        self.assertEqual(ctx.exception.status_code, 500)


class FeedStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.store = FeedStore(
            self.db, "feeds", storage=self.storage, cdn_domain="cdn.test"
        )

    def test_create_denormalizes_author(self):
        entry = self.store.create(_video(), CreateFeedRequest(caption="Hat-trick"), CALLER)
        self.assertEqual(entry["caption"], "Hat-trick")
        self.assertEqual(entry["userId"], "user-1")
        self.assertEqual(entry["userName"], "Jane Striker")
        self.assertEqual(entry["profilePictureUrl"], "https://cdn.test/jane.png")
        self.assertTrue(entry["videoUrl"].startswith("https://cdn.test/players/user-1/videos/"))
        self.assertEqual(self.db.get_item("feeds", {"id": entry["id"]}), entry)
        self.assertEqual(len(self.storage.stored_objects), 1)

    def test_create_requires_file(self):
        with self.assertRaises(BadRequestError):
            self.store.create(None, CreateFeedRequest(caption="Hat-trick"), CALLER)

    def test_failed_write_removes_uploaded_video(self):
        with patch.object(
            self.db, "put_item", side_effect=UpstreamError("DynamoDB put_item failed")
        ):
            with self.assertRaises(UpstreamError) as ctx:
                self.store.create(_video(), CreateFeedRequest(caption="Hat-trick"), CALLER)
        self.assertEqual(ctx.exception.detail, "Failed to create feed")
        self.assertEqual(self.storage.stored_objects, {})

    def test_failed_cleanup_still_reports_write_failure(self):
        with patch.object(
            self.db, "put_item", side_effect=UpstreamError("DynamoDB put_item failed")
        ), patch.object(
            self.storage,
            "delete_object",
            side_effect=UpstreamError("S3 delete_object failed"),
        ):
            with self.assertRaises(UpstreamError) as ctx:
                self.store.create(_video(), CreateFeedRequest(caption="Hat-trick"), CALLER)
        self.assertEqual(ctx.exception.detail, "Failed to create feed")

    def test_list_feeds_paginates_with_opaque_cursor(self):
        captions = [f"clip {index}" for index in range(5)]
        for caption in captions:
            self.store.create(_video(), CreateFeedRequest(caption=caption), CALLER)

        first = self.store.list_feeds(limit=2)
        self.assertEqual([f["caption"] for f in first["feeds"]], captions[:2])
        self.assertIsInstance(first["nextPage"], str)
        self.assertIsNone(re.search(r"[{}\"]", first["nextPage"]))

        second = self.store.list_feeds(limit=10, cursor=first["nextPage"])
        self.assertEqual([f["caption"] for f in second["feeds"]], captions[2:])
        self.assertIsNone(second["nextPage"])

    def test_list_feeds_decodes_items(self):
        self.store.create(_video(), CreateFeedRequest(caption="solo"), CALLER)
        feeds = self.store.list_feeds()["feeds"]
        self.assertEqual(feeds[0]["caption"], "solo")
        self.assertEqual(feeds[0]["userName"], "Jane Striker")

    def test_list_feeds_empty_table(self):
        self.assertEqual(self.store.list_feeds(), {"feeds": [], "nextPage": None})

    def test_list_feeds_rejects_garbage_cursor(self):
        with self.assertRaises(BadRequestError):
            self.store.list_feeds(cursor="%%%not-a-cursor")


class VideoKeyTests(unittest.TestCase):
    def test_extension_is_text_after_last_dot(self):
        self.assertRegex(
            video_key("user-1", "match.final.mov"),
            r"^players/user-1/videos/[0-9a-f-]{36}\.mov$",
        )
        self.assertRegex(
            video_key("user-1", ".mp4"), r"^players/user-1/videos/[0-9a-f-]{36}\.mp4$"
        )


if __name__ == "__main__":
    unittest.main()
