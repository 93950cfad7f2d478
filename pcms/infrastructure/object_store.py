"""
S3-compatible object storage for patient attachments.

Uploads and deletes propagate their errors to the caller; presigned URL
generation degrades to an empty string so a listing never fails because one
link could not be signed.
"""
from functools import lru_cache
from typing import Optional, Protocol
from urllib.parse import urlsplit, urlunsplit
import logging

import boto3
from botocore.config import Config
from fastapi.concurrency import run_in_threadpool

from pcms.core.config import settings

logger = logging.getLogger(__name__)

# Host name of the S3 endpoint inside the docker network
INTERNAL_HOST = "localstack"


class ObjectStore(Protocol):
    """Operations the patient service needs from an object store"""

    async def put_object(self, data: bytes, key: str, content_type: Optional[str]) -> None:
        ...

    async def delete_object(self, key: str) -> None:
        ...

    def generate_presigned_url(self, key: str, expires_in: int) -> str:
        ...


class S3ObjectStore:
    """boto3-backed object store"""

    def __init__(self, client, bucket_name: str, public_host: Optional[str] = None):
        self.client = client
        self.bucket_name = bucket_name
        self.public_host = public_host

    async def put_object(self, data: bytes, key: str, content_type: Optional[str]) -> None:
        """Upload bytes under ``key``"""
        params = {"Bucket": self.bucket_name, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            await run_in_threadpool(self.client.put_object, **params)
        except Exception as e:
            logger.error(f"Error uploading file to S3 {key}: {e}")
            raise
        logger.info(f"Uploaded file to S3: {key}")

    async def delete_object(self, key: str) -> None:
        """Delete the object stored under ``key``"""
        try:
            await run_in_threadpool(self.client.delete_object, Bucket=self.bucket_name, Key=key)
        except Exception as e:
            logger.error(f"Error deleting file from S3 {key}: {e}")
            raise
        logger.info(f"Deleted file from S3: {key}")

    def generate_presigned_url(self, key: str, expires_in: int) -> str:
        """Return a time-limited GET link for ``key``, or "" when signing fails"""
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )
        except Exception as e:
            logger.error(f"Failed to generate pre-signed URL for key {key}: {e}")
            return ""

        if self.public_host:
            url = self._with_public_host(url)
        logger.debug(f"Generated pre-signed URL: {url}")
        return url

    def _with_public_host(self, url: str) -> str:
        """Swap the docker-internal host for one reachable by clients; path and query stay untouched"""
        parts = urlsplit(url)
        host = parts.hostname or ""
        if host == INTERNAL_HOST:
            host = self.public_host
        elif host.endswith("." + INTERNAL_HOST):
            # Virtual-hosted style: bucket name stays as the subdomain
            host = host[: -len(INTERNAL_HOST)] + self.public_host
        else:
            return url
        netloc = host if parts.port is None else f"{host}:{parts.port}"
        return urlunsplit(parts._replace(netloc=netloc))


def create_s3_client():
    """Build the boto3 S3 client from settings"""
    config = Config(s3={"addressing_style": "path" if settings.S3_FORCE_PATH_STYLE else "auto"})
    return boto3.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        region_name=settings.S3_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        config=config,
    )


@lru_cache
def get_object_store() -> ObjectStore:
    """Dependency returning the shared object store"""
    return S3ObjectStore(
        client=create_s3_client(),
        bucket_name=settings.S3_BUCKET_NAME,
        public_host=settings.S3_PUBLIC_HOST,
    )
