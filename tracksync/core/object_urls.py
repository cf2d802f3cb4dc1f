"""Object URL store for locally supplied subtitle files.

A local file is handed to the retrieval pipeline as an opaque ``blob:`` URL.
The URL stays resolvable until revoked; the retriever revokes it right after
its single fetch.
"""

import logging
import uuid

logger = logging.getLogger(__name__)

BLOB_SCHEME = "blob:"


class ObjectUrlStore:
    """In-memory registry of ``blob:`` URLs and their payloads."""

    def __init__(self, origin: str = "tracksync") -> None:
        self._origin = origin
        self._payloads: dict[str, bytes] = {}

    @staticmethod
    def is_object_url(url: str) -> bool:
        return url.startswith(BLOB_SCHEME)

    def create(self, payload: bytes) -> str:
        """Register a payload and return its object URL."""
        url = f"{BLOB_SCHEME}{self._origin}/{uuid.uuid4()}"
        self._payloads[url] = payload
        return url

    def resolve(self, url: str) -> bytes | None:
        return self._payloads.get(url)

    def revoke(self, url: str) -> None:
        """Release the payload behind ``url``; unknown URLs are ignored."""
        if self._payloads.pop(url, None) is not None:
            logger.debug(f"Revoked object URL {url}")

    def __len__(self) -> int:
        return len(self._payloads)

    def __contains__(self, url: object) -> bool:
        return url in self._payloads
