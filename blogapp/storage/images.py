"""
Image storage for blog pictures.

Blogs only keep the public URL of their image. The store asks the image
storage to remove the underlying object when a blog is deleted or its image
is replaced or cleared.
"""
import os
import secrets
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from ..logging_config import storage_logger


class ImageStorage(ABC):
    """Object storage for uploaded blog images."""

    @abstractmethod
    def upload(self, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store the image and return its public URL."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove the object at ``path`` (relative to the bucket)."""

    @abstractmethod
    def path_from_public_url(self, public_url: str) -> Optional[str]:
        """Map a public URL back to an object path, or None if it is not ours."""

    def remove_by_url(self, public_url: Optional[str]) -> bool:
        if not public_url:
            return False
        path = self.path_from_public_url(public_url)
        if not path:
            storage_logger.debug("Skipping image outside storage", url=public_url)
            return False
        self.remove(path)
        return True


def _unique_name(filename: str) -> str:
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(5)}.{extension}"


class LocalImageStorage(ImageStorage):
    """Stores images under ``media_root/<bucket>`` and serves them from ``/media``."""

    URL_MARKER = "/media/"

    def __init__(self, media_root: str, public_base_url: str, bucket: str = "blog-images"):
        self.media_root = Path(media_root)
        self.public_base_url = public_base_url.rstrip("/")
        self.bucket = bucket

    @property
    def bucket_dir(self) -> Path:
        return self.media_root / self.bucket

    def upload(self, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        name = _unique_name(filename)
        self.bucket_dir.mkdir(parents=True, exist_ok=True)
        (self.bucket_dir / name).write_bytes(data)

        storage_logger.info(
            "Stored image",
            path=f"{self.bucket}/{name}",
            size=len(data),
            content_type=content_type,
        )
        return f"{self.public_base_url}{self.URL_MARKER}{self.bucket}/{name}"

    def remove(self, path: str) -> None:
        target = (self.bucket_dir / path).resolve()
        if self.bucket_dir.resolve() not in target.parents:
            raise ValueError(f"Refusing to remove path outside bucket: {path}")
        try:
            os.remove(target)
        except FileNotFoundError:
            storage_logger.warning("Image already removed", path=path)
            return
        storage_logger.info("Removed image", path=path)

    def path_from_public_url(self, public_url: str) -> Optional[str]:
        try:
            url_path = urlparse(public_url).path
        except ValueError:
            return None

        index = url_path.find(self.URL_MARKER)
        if index == -1:
            return None

        # "<bucket>/<object path>" -> "<object path>"
        segments = url_path[index + len(self.URL_MARKER):].split("/")
        if len(segments) <= 1 or segments[0] != self.bucket:
            return None
        object_path = segments[1:]
        if any(part in ("", ".", "..") for part in object_path):
            return None
        return "/".join(object_path)
