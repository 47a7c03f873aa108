from fastapi import APIRouter, Depends
from typing import Callable

from s3deck.controllers.dependencies import get_bucket_catalog, get_s3_client_factory
from s3deck.database.catalog import BucketCatalog
from s3deck.models.upload.upload import (
    CountFilesOut,
    CountFilesRequest,
    UploadFromPathOut,
    UploadFromPathRequest,
)
from s3deck.services.bucket_config.bucket_config import resolve_bucket
from s3deck.services.upload.upload import count_files_helper, upload_from_paths_helper
from s3deck.utils.errors import ValidationError


router = APIRouter()


@router.post("/upload-paths", response_model=UploadFromPathOut, response_model_exclude_none=True)
def upload_from_paths(
    payload: UploadFromPathRequest,
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    """Upload local files and directory trees, preserving relative structure."""
    if not payload.bucket:
        raise ValidationError("missing bucket ID")
    if not payload.files:
        raise ValidationError("no files provided")

    bucket = resolve_bucket(catalog, payload.bucket)
    return upload_from_paths_helper(client_factory(bucket), bucket, payload)


@router.post("/count-files", response_model=CountFilesOut)
def count_files(payload: CountFilesRequest):
    """Recursive count of the files a local path denotes."""
    return count_files_helper(payload.path)
