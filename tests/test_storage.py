from __future__ import annotations

import io

import pytest
from botocore.exceptions import ClientError

from layout_maker.exceptions import StorageError
from layout_maker.settings import StorageSettings
from layout_maker.storage import get_storage
from layout_maker.storage.local import LocalStorage
from layout_maker.storage.memory import MemoryStorage
from layout_maker.storage.s3 import S3Storage


class FakeS3Client:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_with: str | None = None

    def _raise(self, operation: str) -> None:
        if self.fail_with:
            raise ClientError({"Error": {"Code": self.fail_with, "Message": "boom"}}, operation)

    def get_object(self, Bucket: str, Key: str):
        self._raise("GetObject")
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str):
        self._raise("PutObject")
        self.objects[(Bucket, Key)] = Body

    def delete_object(self, Bucket: str, Key: str):
        self._raise("DeleteObject")
        self.objects.pop((Bucket, Key), None)


@pytest.fixture()
def s3() -> S3Storage:
    storage = S3Storage(bucket="layouts", prefix="/tenant-a/", region="eu-central-1")
    storage.client = FakeS3Client()
    return storage


def test_s3_round_trip_under_prefix(s3):
    uri = s3.put_bytes("layout-maker:scenes", b"[]")

    assert uri == "s3://layouts/tenant-a/layout-maker:scenes"
    assert s3.get_bytes("layout-maker:scenes") == b"[]"
    s3.delete("layout-maker:scenes")
    assert s3.get_bytes("layout-maker:scenes") is None


def test_s3_errors_become_storage_errors(s3):
    s3.client.fail_with = "AccessDenied"

    with pytest.raises(StorageError):
        s3.get_bytes("k")
    with pytest.raises(StorageError):
        s3.put_bytes("k", b"x")


def test_local_storage_missing_key(tmp_path):
    storage = LocalStorage(tmp_path)

    assert storage.get_bytes("nothing") is None
    storage.put_bytes("scene", b"{}")
    assert storage.get_bytes("scene") == b"{}"


def test_get_storage_picks_backend(tmp_path):
    assert isinstance(get_storage(StorageSettings(backend="memory")), MemoryStorage)
    assert isinstance(get_storage(StorageSettings(backend="local", root=str(tmp_path))), LocalStorage)
