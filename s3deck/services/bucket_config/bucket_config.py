from typing import List

from s3deck.database.catalog import BucketCatalog
from s3deck.models.bucket_config.bucket_config import (
    BucketConfig,
    BucketConfigOut,
    BucketConfigUpdate,
    BucketMutationOut,
)
from s3deck.services.s3.s3_client import S3ClientFactory
from s3deck.utils.errors import NotFoundError, ValidationError, require_fields
from s3deck.utils.logger_utils import logger

REQUIRED_FIELDS_MESSAGE = "Name, AccessKey, SecretKey, and Region are required"


def _validate_bucket_fields(payload: BucketConfig):
    require_fields(
        {
            "name": payload.name,
            "accessKey": payload.access_key,
            "secretKey": payload.secret_key,
            "region": payload.region,
        },
        REQUIRED_FIELDS_MESSAGE,
    )


def resolve_bucket(catalog: BucketCatalog, bucket_id: str) -> BucketConfigOut:
    """Look up the bucket an object request targets."""
    if not bucket_id:
        raise ValidationError("missing bucket ID")

    bucket = catalog.find(bucket_id)
    if bucket is None:
        raise NotFoundError("bucket configuration not found", {"id": bucket_id})
    return bucket


def create_bucket_config_helper(catalog: BucketCatalog, payload: BucketConfig) -> BucketMutationOut:
    logger.info("Creating bucket config")
    _validate_bucket_fields(payload)

    bucket_doc = payload.model_dump()
    if not bucket_doc["display_name"]:
        bucket_doc["display_name"] = payload.name
    bucket_doc["id"] = catalog.new_id()

    bucket = catalog.add(BucketConfigOut(**bucket_doc))
    logger.info(f"Bucket config created successfully with ID: {bucket.id}")
    return BucketMutationOut(message="Bucket configuration added successfully", id=bucket.id)


def get_bucket_configs_helper(catalog: BucketCatalog) -> List[BucketConfigOut]:
    return catalog.list_all()


def get_bucket_config_helper(catalog: BucketCatalog, bucket_id: str) -> BucketConfigOut:
    return resolve_bucket(catalog, bucket_id)


def update_bucket_config_helper(
    catalog: BucketCatalog,
    client_factory: S3ClientFactory,
    payload: BucketConfigUpdate,
) -> BucketMutationOut:
    if not payload.id:
        raise ValidationError("missing bucket ID")
    logger.info(f"Updating bucket config: {payload.id}")
    _validate_bucket_fields(payload)

    bucket_doc = payload.model_dump()
    if not bucket_doc["display_name"]:
        bucket_doc["display_name"] = payload.name

    catalog.update(BucketConfigOut(**bucket_doc))
    client_factory.discard(payload.id)
    logger.info(f"Bucket config {payload.id} updated successfully")
    return BucketMutationOut(message="Bucket configuration updated successfully", id=payload.id)


def delete_bucket_config_helper(
    catalog: BucketCatalog,
    client_factory: S3ClientFactory,
    bucket_id: str,
) -> BucketMutationOut:
    if not bucket_id:
        raise ValidationError("missing bucket ID")
    logger.info(f"Deleting bucket config: {bucket_id}")

    catalog.remove(bucket_id)
    client_factory.discard(bucket_id)
    logger.info(f"Bucket config {bucket_id} deleted successfully")
    return BucketMutationOut(message="Bucket configuration deleted successfully", id=bucket_id)
