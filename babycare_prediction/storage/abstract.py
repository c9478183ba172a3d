#!/usr/bin/env python3
"""
Storage abstraction for uploaded images.

Define a StorageClient interface that the fetcher uses.
Implementations (S3, MinIO) should implement this interface.
"""
from __future__ import annotations
from typing import Protocol


class StorageClient(Protocol):
    """
    Minimal read-only storage client interface.

    - get_object(key) -> bytes            (NotFoundError / StorageUnavailableError)
    """
    bucket: str

    def get_object(self, key: str) -> bytes:
        ...
