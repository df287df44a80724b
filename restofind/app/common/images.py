"""Remote image storage.

Uploaded listing photos go to S3 under ``IMAGE_FOLDER``. When a CloudFront
distribution fronts the bucket, deletes can also invalidate the cached copy.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import Flask, current_app, g, request
from werkzeug.datastructures import FileStorage

from restofind.app.common.errors import AppError, ErrorKind

logger = logging.getLogger(__name__)

EXTENSION_KEY = "image_store"


class ImageStoreError(AppError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.INTERNAL, message)


@dataclass(frozen=True)
class StoredImage:
    url: str
    key: str


class ImageStore(Protocol):
    def upload(self, file: FileStorage) -> StoredImage: ...

    def destroy(self, key: str, invalidate: bool = True) -> None: ...


def file_extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


class S3ImageStore:
    def __init__(
        self,
        bucket: str,
        folder: str = "RestoFind",
        region: Optional[str] = None,
        public_base_url: str = "",
        distribution_id: str = "",
        s3_client=None,
        cloudfront_client=None,
    ):
        self.bucket = bucket
        self.folder = folder.strip("/")
        self.region = region
        self.public_base_url = public_base_url
        self.distribution_id = distribution_id
        self._s3 = s3_client
        self._cloudfront = cloudfront_client

    # Clients are created lazily so the app boots without AWS credentials
    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = boto3.client("s3", region_name=self.region)
        return self._s3

    @property
    def cloudfront(self):
        if self._cloudfront is None:
            self._cloudfront = boto3.client("cloudfront")
        return self._cloudfront

    def url_for(self, key: str) -> str:
        base = self.public_base_url or f"https://{self.bucket}.s3.{self.region}.amazonaws.com"
        return f"{base.rstrip('/')}/{key}"

    def upload(self, file: FileStorage) -> StoredImage:
        ext = file_extension(file.filename)
        key = f"{self.folder}/{uuid.uuid4().hex}.{ext}" if ext else f"{self.folder}/{uuid.uuid4().hex}"
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=file.stream,
                ContentType=file.mimetype or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed bucket=%s key=%s: %s", self.bucket, key, exc)
            raise ImageStoreError(f"Image upload failed: {exc}") from exc

        logger.info("Uploaded image bucket=%s key=%s", self.bucket, key)
        return StoredImage(url=self.url_for(key), key=key)

    def destroy(self, key: str, invalidate: bool = True) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
            if invalidate and self.distribution_id:
                self.cloudfront.create_invalidation(
                    DistributionId=self.distribution_id,
                    InvalidationBatch={
                        "Paths": {"Quantity": 1, "Items": [f"/{key}"]},
                        "CallerReference": uuid.uuid4().hex,
                    },
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 delete failed bucket=%s key=%s: %s", self.bucket, key, exc)
            raise ImageStoreError(f"Image delete failed: {exc}") from exc

        logger.info("Deleted image bucket=%s key=%s invalidate=%s", self.bucket, key, invalidate)


def init_image_store(app: Flask, store: Optional[ImageStore] = None) -> None:
    if store is None:
        store = S3ImageStore(
            bucket=app.config["S3_BUCKET"],
            folder=app.config["IMAGE_FOLDER"],
            region=app.config["S3_REGION"],
            public_base_url=app.config["S3_PUBLIC_BASE_URL"],
            distribution_id=app.config["CLOUDFRONT_DISTRIBUTION_ID"],
        )
    app.extensions[EXTENSION_KEY] = store


def get_image_store() -> ImageStore:
    return current_app.extensions[EXTENSION_KEY]


def parse_image_uploads():
    """Guard: collect the multipart ``images`` files into ``g.uploads``."""
    allowed = current_app.config["ALLOWED_IMAGE_EXTENSIONS"]
    uploads: List[FileStorage] = [f for f in request.files.getlist("images") if f and f.filename]
    rejected = [f.filename for f in uploads if file_extension(f.filename) not in allowed]
    if rejected:
        raise AppError.client(
            f"Unsupported image type: {', '.join(rejected)} (allowed: {', '.join(allowed)})"
        )
    g.uploads = uploads
    return None
