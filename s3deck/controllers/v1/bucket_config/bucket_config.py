from fastapi import APIRouter, Depends, Query
from typing import List

from s3deck.controllers.dependencies import get_bucket_catalog, get_s3_client_factory
from s3deck.database.catalog import BucketCatalog
from s3deck.models.bucket_config.bucket_config import (
    BucketConfig,
    BucketConfigOut,
    BucketConfigUpdate,
    BucketMutationOut,
)
from s3deck.services.bucket_config.bucket_config import (
    create_bucket_config_helper,
    get_bucket_config_helper,
    get_bucket_configs_helper,
    update_bucket_config_helper,
    delete_bucket_config_helper
)
from s3deck.services.s3.s3_client import S3ClientFactory


router = APIRouter()

# ---------- BUCKET CONFIG CRUD OPERATIONS ----------

@router.get("/buckets", response_model=List[BucketConfigOut], response_model_exclude_none=True)
def list_bucket_configs(catalog: BucketCatalog = Depends(get_bucket_catalog)):
    """List every bucket configuration in the catalog."""
    return get_bucket_configs_helper(catalog)

@router.get("/bucket", response_model=BucketConfigOut, response_model_exclude_none=True)
def get_bucket_config(
    id: str = Query("", description="Bucket ID"),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
):
    return get_bucket_config_helper(catalog, id)

@router.post("/add-bucket", response_model=BucketMutationOut)
def add_bucket_config(payload: BucketConfig, catalog: BucketCatalog = Depends(get_bucket_catalog)):
    """Add a bucket configuration; the ID is generated."""
    return create_bucket_config_helper(catalog, payload)

@router.put("/update-bucket", response_model=BucketMutationOut)
def update_bucket_config(
    payload: BucketConfigUpdate,
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: S3ClientFactory = Depends(get_s3_client_factory),
):
    """Replace a bucket configuration by the ID in the body."""
    return update_bucket_config_helper(catalog, client_factory, payload)

@router.delete("/bucket", response_model=BucketMutationOut)
def delete_bucket_config(
    id: str = Query("", description="Bucket ID"),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: S3ClientFactory = Depends(get_s3_client_factory),
):
    return delete_bucket_config_helper(catalog, client_factory, id)
