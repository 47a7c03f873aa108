from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

# ---------- Object Models ----------#

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class FileItem(CamelModel):
    key: str
    name: str
    size: int = 0
    is_folder: bool = False
    last_modified: Optional[datetime] = None

class ObjectMetadata(CamelModel):
    key: str
    content_type: str = ""
    content_length: int = 0
    last_modified: Optional[datetime] = None
    etag: str = ""
    storage_class: str = ""
    metadata: Dict[str, str] = {}
    last_modified_formatted: Optional[str] = None
    size_formatted: Optional[str] = None

class DeleteOut(CamelModel):
    message: str
    key: str
    count: Optional[int] = None

class UploadOut(CamelModel):
    message: str
    key: str
    size: int

class CreateFolderRequest(CamelModel):
    bucket: str = ""
    folder_path: str = ""

class CreateFolderOut(CamelModel):
    message: str
    key: str

class RenameRequest(CamelModel):
    bucket: str = ""
    old_key: str = ""
    new_key: str = ""
    is_folder: bool = False

class RenameOut(CamelModel):
    message: str
    old_key: str
    new_key: str
    moved_files: Optional[List[str]] = None
    failed_files: Optional[List[str]] = None
    total_moved: Optional[int] = None
