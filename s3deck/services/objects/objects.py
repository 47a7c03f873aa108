from typing import BinaryIO, Callable, List, Optional

from s3deck.database.catalog import BucketCatalog
from s3deck.models.objects.objects import (
    CreateFolderOut,
    CreateFolderRequest,
    DeleteOut,
    FileItem,
    ObjectMetadata,
    RenameOut,
    RenameRequest,
    UploadOut,
)
from s3deck.services.bucket_config.bucket_config import resolve_bucket
from s3deck.services.s3 import s3_helper, s3_operations
from s3deck.utils.errors import ValidationError


def list_objects_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    bucket_id: str,
    prefix: Optional[str] = None,
) -> List[FileItem]:
    bucket = resolve_bucket(catalog, bucket_id)
    client = client_factory(bucket)
    return s3_operations.list_objects(client, bucket.name, prefix or None)


def upload_file_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    bucket_id: str,
    key: str,
    file: Optional[BinaryIO],
) -> UploadOut:
    if not bucket_id:
        raise ValidationError("missing bucket ID")
    if not key:
        raise ValidationError("missing object key")

    bucket = resolve_bucket(catalog, bucket_id)
    if file is None:
        raise ValidationError("failed to get file from request")

    file_content = file.read()
    client = client_factory(bucket)
    s3_operations.upload_object(client, bucket.name, key, file_content, s3_helper.detect_content_type(key))

    return UploadOut(message="File uploaded successfully", key=key, size=len(file_content))


def delete_object_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    bucket_id: str,
    key: str,
) -> DeleteOut:
    if not bucket_id:
        raise ValidationError("missing bucket ID")
    if not key:
        raise ValidationError("missing object key")

    bucket = resolve_bucket(catalog, bucket_id)
    client = client_factory(bucket)

    # A key ending in '/' is a folder: remove everything sharing the prefix
    if s3_helper.is_folder(key):
        count = s3_operations.delete_folder(client, bucket.name, key)
        return DeleteOut(message="Folder deleted successfully", key=key, count=count)

    s3_operations.delete_object(client, bucket.name, key)
    return DeleteOut(message="Object deleted successfully", key=key)


def get_object_metadata_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    bucket_id: str,
    key: str,
) -> ObjectMetadata:
    if not bucket_id:
        raise ValidationError("missing bucket ID")
    if not key:
        raise ValidationError("missing object key")

    bucket = resolve_bucket(catalog, bucket_id)
    client = client_factory(bucket)
    return s3_operations.get_object_metadata(client, bucket.name, key)


def create_folder_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    payload: CreateFolderRequest,
) -> CreateFolderOut:
    if not payload.bucket:
        raise ValidationError("missing bucket ID")
    if not payload.folder_path.strip("/"):
        raise ValidationError("missing folder path")

    bucket = resolve_bucket(catalog, payload.bucket)
    client = client_factory(bucket)
    key = s3_operations.create_folder(client, bucket.name, payload.folder_path)

    return CreateFolderOut(message="Folder created successfully", key=key)


def rename_object_helper(
    catalog: BucketCatalog,
    client_factory: Callable,
    payload: RenameRequest,
) -> RenameOut:
    if not payload.bucket:
        raise ValidationError("missing bucket ID")
    if not payload.old_key or not payload.new_key:
        raise ValidationError("missing old or new key")

    new_name = payload.new_key.rstrip("/").rsplit("/", 1)[-1]
    if not s3_helper.is_valid_object_name(new_name):
        raise ValidationError("Invalid filename: contains invalid characters or reserved names")
    if payload.old_key.rstrip("/") == payload.new_key.rstrip("/"):
        raise ValidationError("New name must be different from the current name")
    if payload.is_folder and payload.new_key.rstrip("/").startswith(payload.old_key.rstrip("/") + "/"):
        raise ValidationError("cannot move a folder into itself")

    bucket = resolve_bucket(catalog, payload.bucket)
    client = client_factory(bucket)

    if payload.is_folder:
        return s3_operations.rename_folder(client, bucket.name, payload.old_key, payload.new_key)
    return s3_operations.rename_file(client, bucket.name, payload.old_key, payload.new_key)
