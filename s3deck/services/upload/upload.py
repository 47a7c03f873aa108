import os
import stat
from typing import List, Optional, Tuple

from s3deck.models.bucket_config.bucket_config import BucketConfigOut
from s3deck.models.upload.upload import (
    CountFilesOut,
    UploadFailed,
    UploadFromPathOut,
    UploadFromPathRequest,
    UploadPlanEntry,
    UploadResult,
    UploadSucceeded,
)
from s3deck.services.s3 import s3_helper, s3_operations
from s3deck.utils.errors import ErrorKind, PathCollectionError, UpstreamError, ValidationError
from s3deck.utils.logger_utils import logger


# ---------- Path collection ----------

def collect_files_from_path(path: str) -> List[str]:
    """
    Collect the regular files a local path denotes.

    A regular file yields itself; a directory yields every regular file below
    it, walked top-down with names sorted inside each directory. FIFOs,
    sockets and device nodes found in the walk are skipped.
    """
    try:
        stat_result = os.stat(path)
    except OSError as e:
        raise PathCollectionError(path, f"failed to stat path {path}: {e}")

    if stat.S_ISREG(stat_result.st_mode):
        return [path]
    if not stat.S_ISDIR(stat_result.st_mode):
        raise PathCollectionError(path, f"not a regular file or directory: {path}")

    def raise_walk_error(error: OSError):
        raise error

    files: List[str] = []
    try:
        for dirpath, dirnames, filenames in os.walk(path, onerror=raise_walk_error):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = os.path.join(dirpath, filename)
                if os.path.isfile(file_path):
                    files.append(file_path)
                else:
                    logger.debug(f"Skipping non-regular file {file_path}")
    except OSError as e:
        raise PathCollectionError(path, f"failed to walk directory {path}: {e}")

    return files


def count_files_helper(path: str) -> CountFilesOut:
    if not path:
        raise ValidationError("missing path")

    files = collect_files_from_path(path)
    logger.info(f"Counted {len(files)} files under {path}")
    return CountFilesOut(count=len(files), path=path)


# ---------- Key mapping ----------

def _to_key_segments(relative_path: str) -> str:
    if os.sep != "/":
        relative_path = relative_path.replace(os.sep, "/")
    return relative_path


def single_directory_root(input_paths: List[str]) -> Optional[str]:
    """Return the lone input path when exactly one was given and it is a directory."""
    if len(input_paths) == 1 and os.path.isdir(input_paths[0]):
        return input_paths[0]
    return None


def resolve_remote_key(
    file_path: str,
    base_path: str = "",
    current_path: str = "",
    directory_root: Optional[str] = None,
) -> str:
    """
    Compute the destination key for one collected file

    Args:
        file_path: Collected local file path
        base_path: Explicit common root to strip from file_path
        current_path: Remote folder being browsed, prepended to the key
        directory_root: The single directory input of the batch, if any

    Returns:
        Remote object key
    """
    if base_path:
        key = _to_key_segments(s3_helper.trim_path_prefix(file_path, base_path)).removeprefix("/")
    elif directory_root is not None:
        trimmed_root = directory_root.rstrip("/" + os.sep) or directory_root
        dir_name = os.path.basename(trimmed_root)
        relative = s3_helper.trim_path_prefix(file_path, directory_root)
        relative = _to_key_segments(relative).removeprefix("/")
        key = f"{dir_name}/{relative}"
    else:
        key = os.path.basename(file_path)

    if current_path:
        key = s3_helper.build_s3_key(current_path, key)

    return key


def build_upload_plan(
    input_paths: List[str],
    base_path: str = "",
    current_path: str = "",
) -> Tuple[List[UploadPlanEntry], List[UploadFailed], int]:
    """
    Collect every file under input_paths and resolve its remote key.

    Returns:
        (plan entries, failures, number of collected files)
    """
    plan: List[UploadPlanEntry] = []
    failures: List[UploadFailed] = []
    collected: List[str] = []

    for input_path in input_paths:
        try:
            collected.extend(collect_files_from_path(input_path))
        except PathCollectionError as e:
            logger.warning(f"Skipping {input_path}: {e.message}")
            failures.append(UploadFailed(path=input_path, error=f"failed to process path: {e.message}"))

    directory_root = None if base_path else single_directory_root(input_paths)

    for file_path in collected:
        try:
            stat_result = os.stat(file_path)
        except OSError as e:
            failures.append(UploadFailed(path=file_path, error=f"failed to get file info: {e}"))
            continue

        # Replaced on disk since collection
        if not stat.S_ISREG(stat_result.st_mode):
            failures.append(UploadFailed(path=file_path, error="failed to get file info: not a regular file"))
            continue

        plan.append(
            UploadPlanEntry(
                local_path=file_path,
                remote_key=resolve_remote_key(file_path, base_path, current_path, directory_root),
                size=stat_result.st_size,
            )
        )

    return plan, failures, len(collected)


# ---------- Upload ----------

def upload_plan_entry(client, bucket_name: str, entry: UploadPlanEntry) -> UploadResult:
    try:
        f = open(entry.local_path, "rb")
    except OSError as e:
        return UploadFailed(path=entry.local_path, error=f"failed to open file: {e}")

    with f:
        try:
            s3_operations.upload_object(client, bucket_name, entry.remote_key, f)
        except UpstreamError as e:
            return UploadFailed(
                path=entry.local_path,
                key=entry.remote_key,
                error=e.message,
                kind=ErrorKind.UPSTREAM,
            )

    return UploadSucceeded(path=entry.local_path, key=entry.remote_key, size=entry.size)


def upload_from_paths_helper(client, bucket: BucketConfigOut, payload: UploadFromPathRequest) -> UploadFromPathOut:
    logger.info(
        f"Uploading {len(payload.files)} paths to {bucket.name} "
        f"(basePath: '{payload.base_path}', currentPath: '{payload.current_path}')"
    )

    plan, failed_files, total_files = build_upload_plan(payload.files, payload.base_path, payload.current_path)
    uploaded_files: List[UploadSucceeded] = []

    for entry in plan:
        result = upload_plan_entry(client, bucket.name, entry)
        if isinstance(result, UploadSucceeded):
            uploaded_files.append(result)
        else:
            failed_files.append(result)

    message = f"Uploaded {len(uploaded_files)} files, {len(failed_files)} failed"
    logger.info(f"Batch upload completed for {bucket.name}: {message}")

    return UploadFromPathOut(
        message=message,
        uploaded_files=uploaded_files,
        failed_files=failed_files,
        total_files=total_files,
    )
