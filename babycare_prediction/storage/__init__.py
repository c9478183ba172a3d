from .abstract import StorageClient
from .factory import create_storage_client
from .fetcher import IMAGE_CONTENT_TYPE, ImageFetcher, RawImage, object_key_from_reference

__all__ = [
    "StorageClient",
    "create_storage_client",
    "IMAGE_CONTENT_TYPE",
    "ImageFetcher",
    "RawImage",
    "object_key_from_reference",
]
