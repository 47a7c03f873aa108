"""
Shared fixtures: an isolated config dir, a temp bucket catalog and an
in-memory S3 client wired into the app through dependency overrides.
"""
import os
import tempfile

os.environ.setdefault("S3DECK_CONFIG_DIR", tempfile.mkdtemp(prefix="s3deck-test-"))
os.environ.setdefault("S3DECK_LOG_TO_FILE", "false")

from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from main import app
from s3deck.controllers.dependencies import get_bucket_catalog, get_s3_client_factory
from s3deck.database.catalog import BucketCatalog
from s3deck.models.bucket_config.bucket_config import BucketConfigOut

LAST_MODIFIED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeS3Client:
    """Minimal in-memory stand-in for the boto3 S3 client calls the sidecar makes"""

    def __init__(self, objects=None, page_size=1000):
        self.objects = {key: body for key, body in (objects or {}).items()}
        self.content_types = {}
        self.page_size = page_size
        self.failures = {}
        self.list_calls = 0

    def fail(self, operation: str, error: ClientError, key: str = None):
        self.failures[(operation, key)] = error

    def _check(self, operation: str, key: str = None):
        error = self.failures.get((operation, None)) or self.failures.get((operation, key))
        if error is not None:
            raise error

    def list_objects_v2(self, Bucket, Prefix="", Delimiter=None, MaxKeys=1000, ContinuationToken=None):
        self._check("list_objects_v2")
        self.list_calls += 1

        entries = []
        seen_prefixes = set()
        for key in sorted(self.objects):
            if not key.startswith(Prefix):
                continue
            if Delimiter:
                rest = key[len(Prefix):]
                index = rest.find(Delimiter)
                if index >= 0:
                    common_prefix = Prefix + rest[:index + 1]
                    if common_prefix not in seen_prefixes:
                        seen_prefixes.add(common_prefix)
                        entries.append(("prefix", common_prefix))
                    continue
            entries.append(("object", key))

        page_size = min(MaxKeys, self.page_size)
        start = int(ContinuationToken or 0)
        page = entries[start:start + page_size]
        truncated = start + page_size < len(entries)

        response = {"IsTruncated": truncated, "KeyCount": len(page)}
        contents = [
            {
                "Key": key,
                "Size": len(self.objects[key]),
                "LastModified": LAST_MODIFIED,
                "ETag": '"d41d8cd98f00b204e9800998ecf8427e"',
            }
            for kind, key in page if kind == "object"
        ]
        prefixes = [{"Prefix": value} for kind, value in page if kind == "prefix"]
        if contents:
            response["Contents"] = contents
        if prefixes:
            response["CommonPrefixes"] = prefixes
        if truncated:
            response["NextContinuationToken"] = str(start + page_size)
        return response

    def put_object(self, Bucket, Key, Body=b"", ContentType=None):
        self._check("put_object", Key)
        data = Body.read() if hasattr(Body, "read") else Body
        self.objects[Key] = data
        self.content_types[Key] = ContentType
        return {"ETag": '"etag"'}

    def copy_object(self, Bucket, Key, CopySource, ContentType=None, MetadataDirective=None):
        self._check("copy_object", CopySource["Key"])
        source_key = CopySource["Key"]
        if source_key not in self.objects:
            raise client_error("NoSuchKey", "The specified key does not exist.", "CopyObject")
        self.objects[Key] = self.objects[source_key]
        self.content_types[Key] = ContentType
        return {"CopyObjectResult": {"ETag": '"etag"'}}

    def delete_object(self, Bucket, Key):
        self._check("delete_object", Key)
        self.objects.pop(Key, None)
        return {}

    def delete_objects(self, Bucket, Delete):
        self._check("delete_objects")
        deleted = []
        for entry in Delete["Objects"]:
            self.objects.pop(entry["Key"], None)
            deleted.append({"Key": entry["Key"]})
        return {"Deleted": deleted}

    def head_object(self, Bucket, Key):
        self._check("head_object", Key)
        if Key not in self.objects:
            raise client_error("404", "Not Found", "HeadObject")
        return {
            "ContentLength": len(self.objects[Key]),
            "ContentType": self.content_types.get(Key) or "binary/octet-stream",
            "LastModified": LAST_MODIFIED,
            "ETag": '"etag"',
            "StorageClass": "STANDARD",
            "Metadata": {"owner": "tests"},
        }


class FakeClientFactory:
    """Hands out the fake client and records released bucket IDs"""

    def __init__(self, client):
        self.client = client
        self.discarded = []

    def __call__(self, bucket_config):
        return self.client

    def discard(self, bucket_id):
        self.discarded.append(bucket_id)


@pytest.fixture
def catalog(tmp_path):
    bucket_catalog = BucketCatalog(str(tmp_path / "config.json"))
    bucket_catalog.load()
    return bucket_catalog


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def bucket(catalog):
    return catalog.add(
        BucketConfigOut(
            id="a1b2c3d4",
            name="media-bucket",
            display_name="Media",
            region="us-east-1",
            access_key="AKIATEST",
            secret_key="secret",
        )
    )


@pytest.fixture
def client_factory(fake_s3):
    return FakeClientFactory(fake_s3)


@pytest.fixture
def client(catalog, client_factory):
    app.dependency_overrides[get_bucket_catalog] = lambda: catalog
    app.dependency_overrides[get_s3_client_factory] = lambda: client_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
