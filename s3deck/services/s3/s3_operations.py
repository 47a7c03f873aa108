from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from botocore.exceptions import BotoCoreError, ClientError

from config import S3_CONFIG
from s3deck.models.objects.objects import FileItem, ObjectMetadata, RenameOut
from s3deck.services.s3.s3_helper import S3Helper
from s3deck.utils.errors import NotFoundError, UpstreamError
from s3deck.utils.logger_utils import logger


class S3Operations:
    """S3 operations for listing, upload, deletion and metadata of a single bucket"""

    @staticmethod
    def list_page_entries(
        client,
        bucket_name: str,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
    ) -> Tuple[List[Dict], List[Dict]]:
        """
        Fetch every page of a listing

        Args:
            client: boto3 S3 client
            bucket_name: Bucket name at the provider
            prefix: Key prefix to list under
            delimiter: Character to use to group keys

        Returns:
            Tuple of (common prefixes, contents) accumulated across pages
        """
        common_prefixes: List[Dict] = []
        contents: List[Dict] = []
        continuation_token = None

        while True:
            list_params = {
                'Bucket': bucket_name,
                'MaxKeys': S3_CONFIG["MAX_KEYS_PER_PAGE"]
            }

            if prefix:
                list_params['Prefix'] = prefix

            if delimiter:
                list_params['Delimiter'] = delimiter

            if continuation_token:
                list_params['ContinuationToken'] = continuation_token

            response = client.list_objects_v2(**list_params)

            common_prefixes.extend(response.get('CommonPrefixes', []))
            contents.extend(response.get('Contents', []))

            continuation_token = response.get('NextContinuationToken')
            if not response.get('IsTruncated', False) or not continuation_token:
                break

        return common_prefixes, contents

    @staticmethod
    def list_objects(client, bucket_name: str, prefix: Optional[str] = None) -> List[FileItem]:
        """One-level folder/file listing under prefix."""
        try:
            common_prefixes, contents = S3Operations.list_page_entries(
                client, bucket_name, prefix=prefix, delimiter=S3_CONFIG["DELIMITER"]
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error listing objects in {bucket_name} under '{prefix or ''}': {str(e)}")
            raise UpstreamError(f"failed to list objects: {e}", {"bucket": bucket_name, "prefix": prefix})

        items = S3Helper.translate_listing(prefix, common_prefixes, contents)
        logger.info(f"Listed {len(items)} items from {bucket_name} under '{prefix or ''}'")
        return items

    @staticmethod
    def upload_object(
        client,
        bucket_name: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ):
        """Upload a single object, detecting the content type from the key when not given."""
        upload_params = {
            'Bucket': bucket_name,
            'Key': key,
            'Body': body,
            'ContentType': content_type or S3Helper.detect_content_type(key)
        }

        try:
            client.put_object(**upload_params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {key} to {bucket_name}: {str(e)}")
            raise UpstreamError(f"failed to upload: {e}", {"bucket": bucket_name, "key": key})

        logger.info(f"Uploaded s3://{bucket_name}/{key} ({upload_params['ContentType']})")

    @staticmethod
    def delete_object(client, bucket_name: str, key: str):
        try:
            client.delete_object(Bucket=bucket_name, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting {key} from {bucket_name}: {str(e)}")
            raise UpstreamError(f"failed to delete object: {e}", {"bucket": bucket_name, "key": key})

        logger.info(f"Deleted s3://{bucket_name}/{key}")

    @staticmethod
    def delete_folder(client, bucket_name: str, prefix: str) -> int:
        """
        Delete every object under prefix

        Args:
            client: boto3 S3 client
            bucket_name: Bucket name at the provider
            prefix: Folder key, ending in '/'

        Returns:
            Number of objects deleted
        """
        try:
            _, contents = S3Operations.list_page_entries(client, bucket_name, prefix=prefix)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error listing {prefix} in {bucket_name} for deletion: {str(e)}")
            raise UpstreamError(f"failed to list objects: {e}", {"bucket": bucket_name, "prefix": prefix})

        keys = [obj['Key'] for obj in contents]
        if not keys:
            logger.info(f"No objects found to delete under s3://{bucket_name}/{prefix}")
            return 0

        deleted_count = 0
        batch_size = S3_CONFIG["DELETE_BATCH_SIZE"]

        # S3 supports up to 1000 objects per delete_objects call
        for i in range(0, len(keys), batch_size):
            batch = keys[i:i + batch_size]

            try:
                response = client.delete_objects(
                    Bucket=bucket_name,
                    Delete={
                        'Objects': [{'Key': key} for key in batch]
                    }
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Error deleting batch under {prefix}: {str(e)}")
                raise UpstreamError(
                    f"failed to delete objects under {prefix}: {e}",
                    {"bucket": bucket_name, "prefix": prefix, "deleted": deleted_count},
                )

            deleted_count += len(response.get('Deleted', []))

            errors = response.get('Errors', [])
            if errors:
                for error in errors:
                    logger.error(f"Failed to delete {error.get('Key')}: {error.get('Message')}")
                first = errors[0]
                raise UpstreamError(
                    f"failed to delete object {first.get('Key')}: {first.get('Message')}",
                    {"bucket": bucket_name, "prefix": prefix, "deleted": deleted_count},
                )

        logger.info(f"Deleted {deleted_count} objects under s3://{bucket_name}/{prefix}")
        return deleted_count

    @staticmethod
    def get_object_metadata(client, bucket_name: str, key: str) -> ObjectMetadata:
        try:
            response = client.head_object(Bucket=bucket_name, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                raise NotFoundError(f"object not found: {key}", {"bucket": bucket_name, "key": key})
            logger.error(f"Error getting metadata for {key}: {str(e)}")
            raise UpstreamError(f"failed to get object metadata: {e}", {"bucket": bucket_name, "key": key})
        except BotoCoreError as e:
            logger.error(f"Error getting metadata for {key}: {str(e)}")
            raise UpstreamError(f"failed to get object metadata: {e}", {"bucket": bucket_name, "key": key})

        size = response.get('ContentLength')
        last_modified = response.get('LastModified')

        return ObjectMetadata(
            key=key,
            content_type=response.get('ContentType', ''),
            content_length=size or 0,
            last_modified=last_modified,
            etag=response.get('ETag', ''),
            storage_class=response.get('StorageClass', ''),
            metadata=response.get('Metadata', {}),
            last_modified_formatted=S3Helper.format_timestamp(last_modified),
            size_formatted=S3Helper.format_file_size(size) if size is not None else None,
        )

    @staticmethod
    def create_folder(client, bucket_name: str, folder_path: str) -> str:
        """Create a zero-byte folder marker and return its key."""
        key = folder_path if S3Helper.is_folder(folder_path) else folder_path + S3_CONFIG["DELIMITER"]

        try:
            client.put_object(Bucket=bucket_name, Key=key, Body=b'')
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to create folder {key}: {str(e)}")
            raise UpstreamError(f"failed to create folder: {e}", {"bucket": bucket_name, "key": key})

        logger.info(f"Created S3 folder: s3://{bucket_name}/{key}")
        return key

    @staticmethod
    def copy_object(client, bucket_name: str, source_key: str, target_key: str):
        """Server-side copy, re-deriving the content type from the target key."""
        try:
            client.copy_object(
                Bucket=bucket_name,
                Key=target_key,
                CopySource={'Bucket': bucket_name, 'Key': source_key},
                ContentType=S3Helper.detect_content_type(target_key),
                MetadataDirective='REPLACE'
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error copying {source_key} to {target_key} in {bucket_name}: {str(e)}")
            raise UpstreamError(
                f"failed to copy object: {e}",
                {"bucket": bucket_name, "source": source_key, "target": target_key},
            )

    @staticmethod
    def rename_file(client, bucket_name: str, old_key: str, new_key: str) -> RenameOut:
        # 404 when the source is gone
        S3Operations.get_object_metadata(client, bucket_name, old_key)

        S3Operations.copy_object(client, bucket_name, old_key, new_key)
        S3Operations.delete_object(client, bucket_name, old_key)

        old_name = old_key.rsplit('/', 1)[-1]
        new_name = new_key.rsplit('/', 1)[-1]
        logger.info(f"Renamed s3://{bucket_name}/{old_key} to {new_key}")

        return RenameOut(
            message=f"File renamed from '{old_name}' to '{new_name}'",
            old_key=old_key,
            new_key=new_key,
        )

    @staticmethod
    def rename_folder(client, bucket_name: str, old_prefix: str, new_prefix: str) -> RenameOut:
        """
        Move every object under old_prefix to new_prefix, one copy + delete each

        Objects that fail to move are reported in failed_files; the rest
        of the folder is still moved.

        Args:
            client: boto3 S3 client
            bucket_name: Bucket name at the provider
            old_prefix: Current folder key
            new_prefix: Target folder key

        Returns:
            RenameOut with moved ("old -> new") and failed keys
        """
        delimiter = S3_CONFIG["DELIMITER"]
        old_prefix = old_prefix if old_prefix.endswith(delimiter) else old_prefix + delimiter
        new_prefix = new_prefix if new_prefix.endswith(delimiter) else new_prefix + delimiter

        try:
            _, contents = S3Operations.list_page_entries(client, bucket_name, prefix=old_prefix)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error listing {old_prefix} in {bucket_name} for rename: {str(e)}")
            raise UpstreamError(f"failed to list objects: {e}", {"bucket": bucket_name, "prefix": old_prefix})

        if not contents:
            raise NotFoundError("folder not found or is empty", {"bucket": bucket_name, "prefix": old_prefix})

        moved_files: List[str] = []
        failed_files: List[str] = []

        for obj in contents:
            object_key = obj['Key']
            new_object_key = new_prefix + object_key[len(old_prefix):]
            try:
                S3Operations.copy_object(client, bucket_name, object_key, new_object_key)
                S3Operations.delete_object(client, bucket_name, object_key)
            except UpstreamError as e:
                logger.warning(f"Failed to move {object_key}: {e.message}")
                failed_files.append(object_key)
                continue
            moved_files.append(f"{object_key} -> {new_object_key}")

        old_name = old_prefix.rstrip(delimiter).rsplit(delimiter, 1)[-1]
        new_name = new_prefix.rstrip(delimiter).rsplit(delimiter, 1)[-1]
        if failed_files:
            message = (
                f"Folder partially renamed from '{old_name}' to '{new_name}'. "
                f"Moved {len(moved_files)} files, {len(failed_files)} failed."
            )
        else:
            message = f"Folder renamed from '{old_name}' to '{new_name}'. Moved {len(moved_files)} files."
        logger.info(f"Rename of s3://{bucket_name}/{old_prefix} to {new_prefix}: {message}")

        return RenameOut(
            message=message,
            old_key=old_prefix.rstrip(delimiter),
            new_key=new_prefix.rstrip(delimiter),
            moved_files=moved_files,
            failed_files=failed_files,
            total_moved=len(moved_files),
        )


# Singleton instance
s3_operations = S3Operations()
