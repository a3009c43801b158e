# juridico/services/storage_service.py

import os
import time
import uuid
from typing import BinaryIO, Callable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.utils.exceptions import UploadFailedError


class StorageService:
    """
    Service layer for case-file uploads to S3.

    Small payloads go up in a single ``put_object``; anything above the
    resumable threshold goes through a multipart upload whose parts are
    retried on a fixed delay schedule.
    """

    def __init__(
        self,
        s3_client=None,
        bucket: Optional[str] = None,
        threshold_bytes: Optional[int] = None,
        chunk_size_bytes: Optional[int] = None,
        retry_delays: Optional[List[float]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.s3_client = s3_client or boto3.client(
            's3',
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        )
        self.bucket = bucket or settings.STORAGE_BUCKET_NAME
        self.threshold_bytes = threshold_bytes or settings.UPLOAD_RESUMABLE_THRESHOLD_BYTES
        self.chunk_size_bytes = chunk_size_bytes or settings.UPLOAD_CHUNK_SIZE_BYTES
        self.retry_delays = retry_delays if retry_delays is not None else settings.upload_retry_delays
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Keys & URLs
    # ------------------------------------------------------------------

    @staticmethod
    def build_object_key(owner_id, filename: str) -> str:
        """``{owner}/{epoch_ms}_{random}.{ext}`` - unique per upload, grouped by owner."""
        ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
        stem = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"
        return f"{owner_id}/{stem}.{ext}" if ext else f"{owner_id}/{stem}"

    def public_url(self, key: str) -> str:
        base = settings.STORAGE_PUBLIC_BASE_URL
        if base:
            return f"{base.rstrip('/')}/{key}"
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_file(
        self,
        owner_id,
        filename: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
        size: Optional[int] = None,
    ) -> str:
        """
        Store one file and return its public URL.
        Raises ``UploadFailedError`` naming the file on any storage failure.
        """
        if size is None:
            fileobj.seek(0, os.SEEK_END)
            size = fileobj.tell()
        fileobj.seek(0)

        key = self.build_object_key(owner_id, filename)
        content_type = content_type or "application/octet-stream"

        try:
            if size > self.threshold_bytes:
                self._multipart_upload(key, fileobj, content_type)
            else:
                self.s3_client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=fileobj.read(),
                    ContentType=content_type,
                    CacheControl=settings.STORAGE_CACHE_CONTROL,
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload of {filename} to {key} failed: {str(e)}")
            raise UploadFailedError(filename=filename, reason=str(e))

        logger.info(f"Uploaded {filename} ({size} bytes) to {key}")
        return self.public_url(key)

    def _multipart_upload(self, key: str, fileobj: BinaryIO, content_type: str) -> None:
        response = self.s3_client.create_multipart_upload(
            Bucket=self.bucket,
            Key=key,
            ContentType=content_type,
            CacheControl=settings.STORAGE_CACHE_CONTROL,
        )
        upload_id = response['UploadId']
        logger.info(f"Multipart upload initiated: {upload_id} for {key}")

        parts = []
        try:
            part_number = 1
            while True:
                chunk = fileobj.read(self.chunk_size_bytes)
                if not chunk:
                    break
                etag = self._upload_part_with_retry(key, upload_id, part_number, chunk)
                parts.append({"PartNumber": part_number, "ETag": etag})
                part_number += 1

            self.s3_client.complete_multipart_upload(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={'Parts': parts},
            )
            logger.info(f"Multipart upload completed: {key} ({len(parts)} parts)")
        except (ClientError, BotoCoreError):
            self._abort(key, upload_id)
            raise

    def _upload_part_with_retry(self, key: str, upload_id: str, part_number: int, chunk: bytes) -> str:
        # one immediate attempt, then one retry per scheduled delay
        schedule = [None] + list(self.retry_delays)
        last_error = None
        for attempt, delay in enumerate(schedule, start=1):
            if delay is not None:
                self._sleep(delay)
            try:
                response = self.s3_client.upload_part(
                    Bucket=self.bucket,
                    Key=key,
                    UploadId=upload_id,
                    PartNumber=part_number,
                    Body=chunk,
                )
                return response['ETag']
            except (ClientError, BotoCoreError) as e:
                last_error = e
                logger.warning(
                    f"Part {part_number} of {key} failed (attempt {attempt}/{len(schedule)}): {str(e)}"
                )
        raise last_error

    def _abort(self, key: str, upload_id: str) -> None:
        try:
            self.s3_client.abort_multipart_upload(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
            )
            logger.info(f"Multipart upload aborted: {upload_id}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to abort multipart upload {upload_id}: {str(e)}")


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Shared instance, built on first use so importing needs no AWS config."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
