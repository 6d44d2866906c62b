"""Cache-aware access to a content gateway."""

from typing import List

from ..errors import GatewayError
from ..gateway.interface import ContentGateway
from ..models.repository import DirEntry, FileSnapshot, RepositoryCoordinate, Unchanged
from ..utils.logger_utils import LoggerUtils
from .store import CacheKind, CacheStore

logger = LoggerUtils.get_logger(__name__)


class CachedContentSource:
    """
    Serves listings and file contents from the cache, falling back to the gateway.

    Directory listings are deduplicated in the short-lived listing tier.
    File reads use the file tier while it is fresh; once it expires, the last
    snapshot's revision tag is sent upstream and an Unchanged answer reuses
    the stored bytes without another transfer.
    """

    def __init__(self, gateway: ContentGateway, store: CacheStore):
        self.gateway = gateway
        self.store = store

    async def list_directory(self, coordinate: RepositoryCoordinate, path: str) -> List[DirEntry]:
        """List a directory, reusing an identical recent listing."""
        cached = self.store.get(CacheKind.LISTING, coordinate.owner, coordinate.repo, path)
        if cached is not None:
            logger.debug("Using cached listing for %s/%s", coordinate.full_name, path or "root")
            return list(cached)

        entries = await self.gateway.list_directory(coordinate, path)
        self.store.set(CacheKind.LISTING, coordinate.owner, coordinate.repo, tuple(entries), path=path)
        return entries

    async def read_file(self, coordinate: RepositoryCoordinate, path: str) -> FileSnapshot:
        """Read a file, revalidating an expired snapshot by its revision tag."""
        owner, repo = coordinate.owner, coordinate.repo

        fresh = self.store.get(CacheKind.FILE, owner, repo, path)
        if fresh is not None:
            return fresh

        previous = self.store.get_fallback(CacheKind.FILE, owner, repo, path)
        result = await self.gateway.read_file(
            coordinate, path, etag=previous.etag if previous else None
        )

        if isinstance(result, Unchanged):
            if previous is None:
                raise GatewayError(f"Unexpected 304 for {coordinate.full_name}/{path}")
            logger.debug("Revalidated %s/%s - content unchanged", coordinate.full_name, path)
            self.store.set(CacheKind.FILE, owner, repo, previous, path=path)
            return previous

        snapshot = FileSnapshot(content=result.content, etag=result.etag)
        self.store.set(CacheKind.FILE, owner, repo, snapshot, path=path)
        if snapshot.etag:
            self.store.set_fallback(CacheKind.FILE, owner, repo, snapshot, path=path)
        return snapshot

    async def read_text(self, coordinate: RepositoryCoordinate, path: str) -> str:
        snapshot = await self.read_file(coordinate, path)
        return snapshot.text
