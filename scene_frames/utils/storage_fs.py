import logging
from pathlib import Path
import posixpath
import re
from typing import Any, Callable, Dict, Optional, Tuple

import fsspec

logger = logging.getLogger(__name__)


def create_storage(config: dict) -> Tuple[fsspec.AbstractFileSystem, Callable[[str], str]]:
    """Create filesystem and path resolver from config."""
    storage_type = config["type"]
    base_data_dir = config["base_data_dir"]

    if base_data_dir is None:
        raise ValueError(f"Missing base_data_dir for storage environment: {storage_type}")

    # Create filesystem
    fs = fsspec.filesystem(storage_type, **config.get("fs_kwargs", {}))

    # Create path resolver
    if storage_type == "file":

        def resolve_path(relative_path: str) -> str:
            relative_path = _normalize_path(relative_path)
            return str(Path(base_data_dir) / relative_path)

    else:

        def resolve_path(relative_path: str) -> str:
            relative_path = _normalize_path(relative_path)
            return f"{storage_type}://{posixpath.join(base_data_dir, relative_path)}"

    return fs, resolve_path


def _normalize_path(path: str) -> str:
    """Normalize path for cross-platform compatibility."""
    normalized = path.replace("\\", "/")
    normalized = normalized.strip("/")
    normalized = re.sub(r"/{2,}", "/", normalized)

    return normalized


class StorageClient:
    """
    Handle on a blob store, built once per run and passed to the publishing stage.

    Attributes:
        fs (fsspec.AbstractFileSystem): Filesystem the objects are written to.
        resolve_path (Callable): Maps an object key to a full path on the filesystem.
        storage_type (str): fsspec protocol name (e.g. "s3", "file", "memory").
        acl (str | None): Canned ACL applied to uploaded objects where supported.
    """

    def __init__(
        self,
        fs: fsspec.AbstractFileSystem,
        resolve_path: Callable[[str], str],
        storage_type: str,
        acl: Optional[str] = None,
    ):
        self.fs = fs
        self.resolve_path = resolve_path
        self.storage_type = storage_type
        self.acl = acl

    @classmethod
    def from_config(cls, config: dict) -> "StorageClient":
        fs, resolve_path = create_storage(config)
        logger.info(f"Storage client created for '{config['type']}://{config['base_data_dir']}'")

        return cls(fs, resolve_path, config["type"], config.get("acl"))

    def _upload_kwargs(self, content_type: str) -> Dict[str, Any]:
        # Only S3 understands object metadata on put
        if self.storage_type != "s3":
            return {}

        kwargs = {"ContentType": content_type}
        if self.acl:
            kwargs["ACL"] = self.acl

        return kwargs

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """
        Write bytes under the given key. Raises on failure, never retries.

        Returns:
            str: Full path of the stored object
        """
        path = self.resolve_path(key)

        if self.storage_type == "file":
            self.fs.makedirs(str(Path(path).parent), exist_ok=True)

        self.fs.pipe_file(path, data, **self._upload_kwargs(content_type))
        logger.debug(f"Uploaded {len(data)} bytes to {path}")

        return path
