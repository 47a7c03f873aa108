from pydantic import Field
from typing import Annotated, List, Literal, Optional, Union

from s3deck.models.objects.objects import CamelModel
from s3deck.utils.errors import ErrorKind

# ---------- Upload Models ----------#

class UploadFromPathRequest(CamelModel):
    bucket: str = ""
    base_path: str = ""
    current_path: str = ""
    files: List[str] = []

class CountFilesRequest(CamelModel):
    path: str = ""

class CountFilesOut(CamelModel):
    count: int
    path: str

class UploadPlanEntry(CamelModel):
    """One collected local file and the key it will be uploaded to."""
    local_path: str
    remote_key: str
    size: int

class UploadSucceeded(CamelModel):
    status: Literal["succeeded"] = "succeeded"
    path: str
    key: str
    size: int

class UploadFailed(CamelModel):
    status: Literal["failed"] = "failed"
    path: str
    key: Optional[str] = None
    error: str
    kind: ErrorKind = ErrorKind.PARTIAL_BATCH

UploadResult = Annotated[Union[UploadSucceeded, UploadFailed], Field(discriminator="status")]

class UploadFromPathOut(CamelModel):
    message: str
    uploaded_files: List[UploadSucceeded] = []
    failed_files: List[UploadFailed] = []
    total_files: int = 0
