import mimetypes
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from config import S3_CONFIG
from s3deck.models.objects.objects import FileItem

INVALID_NAME_CHARS = '<>:"|?*\0'
RESERVED_NAMES = {"CON", "PRN", "AUX", "NUL"} | {f"COM{i}" for i in range(1, 10)} | {f"LPT{i}" for i in range(1, 10)}


class S3Helper:
    """Helper class for S3 key and listing manipulation"""

    @staticmethod
    def strip_query_prefix(key: str, prefix: Optional[str]) -> str:
        """
        Remove the query prefix from the front of a key.

        Stripping is length-based rather than path-aware, matching how the
        provider computes common prefixes for a delimiter listing.
        """
        if not prefix:
            return key
        return key[len(prefix):]

    @staticmethod
    def translate_listing(
        prefix: Optional[str],
        common_prefixes: Iterable[Dict],
        contents: Iterable[Dict],
    ) -> List[FileItem]:
        """
        Turn a delimiter-based listing into a one-level folder/file view

        Args:
            prefix: Query prefix the listing was made with ("" or None for the bucket root)
            common_prefixes: Provider 'CommonPrefixes' entries ({"Prefix": ...})
            contents: Provider 'Contents' entries ({"Key", "Size", "LastModified"})

        Returns:
            Folders in provider order followed by files in provider order
        """
        items: List[FileItem] = []

        for common_prefix in common_prefixes:
            folder_key = common_prefix["Prefix"]
            folder_name = S3Helper.strip_query_prefix(folder_key, prefix)
            folder_name = folder_name.removesuffix(S3_CONFIG["DELIMITER"])

            if folder_name:
                items.append(FileItem(key=folder_key, name=folder_name, size=0, is_folder=True))

        for obj in contents:
            key = obj["Key"]
            file_name = S3Helper.strip_query_prefix(key, prefix)

            # The directory marker object for the prefix itself
            if file_name == "" or file_name == S3_CONFIG["DELIMITER"]:
                continue

            items.append(
                FileItem(
                    key=key,
                    name=file_name,
                    size=obj.get("Size") or 0,
                    is_folder=False,
                    last_modified=obj.get("LastModified"),
                )
            )

        return items

    @staticmethod
    def is_folder(key: str) -> bool:
        return key.endswith(S3_CONFIG["DELIMITER"])

    @staticmethod
    def is_valid_object_name(name: str) -> bool:
        """
        Check the last segment of a key a user typed in.

        Rejects characters and device names that desktop filesystems refuse,
        plus names with leading/trailing spaces or a leading dot.
        """
        if not name:
            return False
        if any(c in INVALID_NAME_CHARS for c in name):
            return False
        if name.split(".")[0].upper() in RESERVED_NAMES:
            return False
        if name.startswith((" ", ".")) or name.endswith(" "):
            return False
        return True

    @staticmethod
    def build_s3_key(current_path: str, file_name: str) -> str:
        """Place a key under the remote folder currently being browsed."""
        if not current_path:
            return file_name
        return current_path.removesuffix("/") + "/" + file_name

    @staticmethod
    def trim_path_prefix(full_path: str, prefix: str) -> str:
        if not prefix:
            return full_path
        return full_path.removeprefix(prefix).removeprefix("/")

    @staticmethod
    def detect_content_type(key: str) -> str:
        lowered = key.lower()
        if lowered.endswith(".map") or lowered.endswith(".js.map"):
            return "application/json"

        content_type, _ = mimetypes.guess_type(key)
        return content_type or S3_CONFIG["DEFAULT_CONTENT_TYPE"]

    @staticmethod
    def format_file_size(size: int) -> str:
        unit = 1024
        if size < unit:
            return f"{size} B"

        div, exp = unit, 0
        n = size // unit
        while n >= unit:
            div *= unit
            exp += 1
            n //= unit
        return f"{size / div:.1f} {'KMGTPE'[exp]}B"

    @staticmethod
    def format_timestamp(value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%d %H:%M:%S UTC")


# Singleton instance
s3_helper = S3Helper()
