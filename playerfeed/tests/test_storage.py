import unittest
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from playerfeed.errors import UpstreamError
from playerfeed.storage import InMemoryStorageClient, S3StorageClient


class S3StorageClientTests(unittest.TestCase):
    def setUp(self):
        self.storage = S3StorageClient(
            bucket="player-videos",
            region="us-east-1",
            access_key_id="testing",
            secret_access_key="testing",
        )
        self.storage._client = MagicMock()

    def test_put_object_forwards_acl_and_metadata(self):
        self.storage.put_object(
            "players/u1/videos/abc.mp4",
            b"video-bytes",
            content_type="video/mp4",
            metadata={"id": "u1", "title": "Goal", "uploadedAt": "now"},
            acl="public-read-write",
        )
        self.storage._client.put_object.assert_called_once_with(
            Bucket="player-videos",
            Key="players/u1/videos/abc.mp4",
            Body=b"video-bytes",
            ACL="public-read-write",
            ContentType="video/mp4",
            Metadata={"id": "u1", "title": "Goal", "uploadedAt": "now"},
        )

    def test_put_object_failure(self):
        self.storage._client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        with self.assertRaises(UpstreamError) as ctx:
            self.storage.put_object(
                "k", b"", content_type="video/mp4", metadata={}
            )
        self.assertNotIn("denied", ctx.exception.detail)
        self.assertIsInstance(ctx.exception.__cause__, ClientError)

    def test_delete_object(self):
        self.storage.delete_object("players/u1/videos/abc.mp4")
        self.storage._client.delete_object.assert_called_once_with(
            Bucket="player-videos", Key="players/u1/videos/abc.mp4"
        )


class InMemoryStorageClientTests(unittest.TestCase):
    def test_put_and_delete(self):
        storage = InMemoryStorageClient()
        storage.put_object("k", b"data", content_type="video/mp4", metadata={"id": "u1"})
        self.assertEqual(storage.stored_objects["k"].body, b"data")
        self.assertEqual(storage.stored_objects["k"].acl, "private")
        storage.delete_object("k")
        storage.delete_object("k")
        self.assertEqual(storage.stored_objects, {})


if __name__ == "__main__":
    unittest.main()
