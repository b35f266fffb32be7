from __future__ import annotations

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from layout_maker.exceptions import StorageError

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3Storage:
    def __init__(self, bucket: str, prefix: str = "", region: Optional[str] = None) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
        self.client = session.client("s3")

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def get_bytes(self, key: str) -> bytes | None:
        s3_key = self._key(key)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=s3_key)
            return response["Body"].read()
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return None
            raise StorageError(f"cannot read s3://{self.bucket}/{s3_key}", {"key": key}) from exc
        except BotoCoreError as exc:
            raise StorageError(f"cannot read s3://{self.bucket}/{s3_key}", {"key": key}) from exc

    def put_bytes(self, key: str, data: bytes) -> str:
        s3_key = self._key(key)
        try:
            self.client.put_object(Bucket=self.bucket, Key=s3_key, Body=data, ContentType="application/json")
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"cannot write s3://{self.bucket}/{s3_key}", {"key": key}) from exc
        return f"s3://{self.bucket}/{s3_key}"

    def delete(self, key: str) -> None:
        s3_key = self._key(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=s3_key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"cannot delete s3://{self.bucket}/{s3_key}", {"key": key}) from exc


__all__ = ["S3Storage"]
