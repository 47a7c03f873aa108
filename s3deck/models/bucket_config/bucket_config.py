from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional

# ---------- Bucket Config Models ----------#

class BucketConfig(BaseModel):
    # Empty defaults so that missing fields are reported as 400 by the service, not 422
    name: str = ""
    display_name: str = ""
    region: str = ""
    access_key: str = ""
    secret_key: str = ""
    endpoint: Optional[str] = None
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class BucketConfigUpdate(BucketConfig):
    id: str = ""

class BucketConfigOut(BucketConfig):
    id: str

class BucketCatalogDocument(BaseModel):
    buckets: List[BucketConfigOut] = []

class BucketMutationOut(BaseModel):
    message: str
    id: str
