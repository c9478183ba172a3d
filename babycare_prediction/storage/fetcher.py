"""
Resolve an image reference (URL-like string) to raw image bytes.

The object key is the trailing path segment after the last "/"; query strings
and fragments are not normalized. Bytes are never cached locally.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

from ..error_handling import InvalidReferenceError
from .abstract import StorageClient

logger = logging.getLogger("babycare.fetcher")

IMAGE_CONTENT_TYPE = "application/x-image"


@dataclass(frozen=True)
class RawImage:
    data: bytes
    key: str
    content_type: str = IMAGE_CONTENT_TYPE

    def __len__(self) -> int:
        return len(self.data)


def object_key_from_reference(reference: str) -> str:
    """
    Return the substring after the last "/" (the whole string if there is none).

    >>> object_key_from_reference("https://bucket.example/images/cat1.jpg")
    'cat1.jpg'
    """
    if not reference:
        raise InvalidReferenceError("image reference is empty")
    key = reference[reference.rfind("/") + 1:]
    if not key:
        raise InvalidReferenceError(f"image reference has no object key: {reference!r}")
    return key


class ImageFetcher:
    def __init__(self, storage: StorageClient):
        self.storage = storage

    def fetch(self, reference: str) -> RawImage:
        key = object_key_from_reference(reference)
        data = self.storage.get_object(key)
        logger.info("fetched image key=%s bytes=%d", key, len(data))
        return RawImage(data=data, key=key)
