from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import Callable, List, Optional

from s3deck.controllers.dependencies import get_bucket_catalog, get_s3_client_factory
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
from s3deck.services.objects.objects import (
    create_folder_helper,
    delete_object_helper,
    get_object_metadata_helper,
    list_objects_helper,
    rename_object_helper,
    upload_file_helper,
)


router = APIRouter()


@router.get("/objects", response_model=List[FileItem], response_model_exclude_none=True)
def list_objects(
    bucket: str = Query("", description="Bucket ID"),
    prefix: str = Query("", description="Folder prefix, '/'-terminated"),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    """One-level listing of folders and files under prefix."""
    return list_objects_helper(catalog, client_factory, bucket, prefix)


@router.post("/upload", response_model=UploadOut)
def upload_file(
    bucket: str = Form(""),
    key: str = Form(""),
    file: Optional[UploadFile] = File(None),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    return upload_file_helper(catalog, client_factory, bucket, key, file.file if file else None)


@router.delete("/delete", response_model=DeleteOut, response_model_exclude_none=True)
def delete_object(
    bucket: str = Query("", description="Bucket ID"),
    key: str = Query("", description="Object key; a trailing '/' deletes the whole folder"),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    return delete_object_helper(catalog, client_factory, bucket, key)


@router.get("/metadata", response_model=ObjectMetadata, response_model_exclude_none=True)
def get_object_metadata(
    bucket: str = Query("", description="Bucket ID"),
    key: str = Query("", description="Object key"),
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    return get_object_metadata_helper(catalog, client_factory, bucket, key)


@router.post("/create-folder", response_model=CreateFolderOut)
def create_folder(
    payload: CreateFolderRequest,
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    return create_folder_helper(catalog, client_factory, payload)


@router.post("/rename", response_model=RenameOut, response_model_exclude_none=True)
def rename_object(
    payload: RenameRequest,
    catalog: BucketCatalog = Depends(get_bucket_catalog),
    client_factory: Callable = Depends(get_s3_client_factory),
):
    """Rename a file, or move every object of a folder, by copy + delete."""
    return rename_object_helper(catalog, client_factory, payload)
