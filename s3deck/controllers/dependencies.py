from fastapi import Request

from s3deck.database.catalog import BucketCatalog
from s3deck.services.s3 import s3_client_factory


def get_bucket_catalog(request: Request) -> BucketCatalog:
    """Catalog loaded by the application lifespan."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise RuntimeError("Bucket catalog is not initialized. Start the app through its lifespan.")
    return catalog


def get_s3_client_factory():
    return s3_client_factory
