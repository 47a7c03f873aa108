import threading
from typing import Dict, Tuple

import boto3
from botocore.client import Config

from s3deck.models.bucket_config.bucket_config import BucketConfigOut
from s3deck.utils.logger_utils import logger


class S3ClientFactory:
    """Builds (and caches) one boto3 S3 client per bucket ID"""

    def __init__(self):
        self._clients: Dict[str, Tuple[Tuple, object]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _fingerprint(bucket_config: BucketConfigOut) -> Tuple:
        return (
            bucket_config.region,
            bucket_config.access_key,
            bucket_config.secret_key,
            bucket_config.endpoint or "",
        )

    def __call__(self, bucket_config: BucketConfigOut):
        fingerprint = self._fingerprint(bucket_config)
        with self._lock:
            cached = self._clients.get(bucket_config.id)
            if cached is not None and cached[0] == fingerprint:
                return cached[1]

            # Edited credentials or endpoint replace the cached client
            client = self._create(bucket_config)
            self._clients[bucket_config.id] = (fingerprint, client)
            return client

    @staticmethod
    def _create(bucket_config: BucketConfigOut):
        """Initialize boto3 S3 client"""
        client_kwargs = {
            "region_name": bucket_config.region,
            "aws_access_key_id": bucket_config.access_key,
            "aws_secret_access_key": bucket_config.secret_key,
            "config": Config(signature_version="s3v4"),
        }

        # Non-AWS providers (MinIO, R2, Wasabi, ...) need an explicit endpoint
        if bucket_config.endpoint:
            client_kwargs["endpoint_url"] = bucket_config.endpoint

        client = boto3.client("s3", **client_kwargs)
        logger.info(
            f"S3 client initialized for bucket {bucket_config.name} "
            f"(region: {bucket_config.region}, endpoint: {bucket_config.endpoint or 'default'})"
        )
        return client

    def discard(self, bucket_id: str):
        """Drop the cached client of a bucket removed from the catalog."""
        with self._lock:
            if self._clients.pop(bucket_id, None) is not None:
                logger.info(f"S3 client released for bucket ID {bucket_id}")


# Singleton instance
s3_client_factory = S3ClientFactory()
