import json
import os
import secrets
import tempfile
import threading
from typing import Callable, List, Optional

from s3deck.models.bucket_config.bucket_config import BucketCatalogDocument, BucketConfigOut
from s3deck.utils.errors import NotFoundError, UpstreamError
from s3deck.utils.logger_utils import logger


class BucketCatalog:
    """Bucket credential registry backed by a single JSON document.

    Mutations are applied to a copy of the bucket list which only replaces the
    in-memory list once the copy has been written to disk.
    """

    def __init__(self, path: str):
        self._path = path
        self._buckets: List[BucketConfigOut] = []
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def load(self):
        """Load the catalog, creating an empty document on first run."""
        with self._lock:
            if not os.path.exists(self._path):
                os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
                self._write([])
                self._buckets = []
                logger.info(f"Created empty bucket catalog at {self._path}")
                return

            with open(self._path, "r", encoding="utf-8") as f:
                document = BucketCatalogDocument.model_validate(json.load(f))
            self._buckets = document.buckets
            logger.info(f"Loaded {len(self._buckets)} bucket configs from {self._path}")

    def list_all(self) -> List[BucketConfigOut]:
        with self._lock:
            return list(self._buckets)

    def find(self, bucket_id: str) -> Optional[BucketConfigOut]:
        with self._lock:
            for bucket in self._buckets:
                if bucket.id == bucket_id:
                    return bucket
            return None

    def new_id(self) -> str:
        with self._lock:
            taken = {bucket.id for bucket in self._buckets}
            bucket_id = secrets.token_hex(4)
            while bucket_id in taken:
                bucket_id = secrets.token_hex(4)
            return bucket_id

    def add(self, bucket: BucketConfigOut) -> BucketConfigOut:
        def mutate(buckets: List[BucketConfigOut]):
            buckets.append(bucket)

        self._commit(mutate)
        return bucket

    def update(self, bucket: BucketConfigOut) -> BucketConfigOut:
        def mutate(buckets: List[BucketConfigOut]):
            for i, existing in enumerate(buckets):
                if existing.id == bucket.id:
                    buckets[i] = bucket
                    return
            raise NotFoundError(f"bucket with ID {bucket.id} not found", {"id": bucket.id})

        self._commit(mutate)
        return bucket

    def remove(self, bucket_id: str):
        def mutate(buckets: List[BucketConfigOut]):
            for i, existing in enumerate(buckets):
                if existing.id == bucket_id:
                    del buckets[i]
                    return
            raise NotFoundError(f"bucket with ID {bucket_id} not found", {"id": bucket_id})

        self._commit(mutate)

    def _commit(self, mutate: Callable[[List[BucketConfigOut]], None]):
        with self._lock:
            updated = list(self._buckets)
            mutate(updated)
            try:
                self._write(updated)
            except OSError as e:
                logger.error(f"Failed to save bucket catalog to {self._path}: {e}")
                raise UpstreamError(f"Failed to save config: {e}", {"path": self._path}) from e
            self._buckets = updated

    def _write(self, buckets: List[BucketConfigOut]):
        document = BucketCatalogDocument(buckets=buckets)
        data = json.dumps(document.model_dump(by_alias=True, exclude_none=True), indent=2)

        directory = os.path.dirname(self._path) or "."
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".config-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
