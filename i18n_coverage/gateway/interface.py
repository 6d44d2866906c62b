"""Contract of a remote repository content provider."""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from ..models.repository import DirEntry, RepositoryCoordinate, Unchanged, Updated

FetchResult = Union[Unchanged, Updated]


class ContentGateway(ABC):
    """
    Abstract file-tree and file-content service.

    Implementations raise RepoNotFoundError for missing listings,
    RemoteFileNotFoundError for missing files, RateLimitedError when no
    credential has budget left and GatewayError when retries are exhausted.
    """

    @abstractmethod
    async def list_directory(self, coordinate: RepositoryCoordinate, path: str) -> List[DirEntry]:
        """List the entries of a directory."""

    @abstractmethod
    async def read_file(
        self,
        coordinate: RepositoryCoordinate,
        path: str,
        etag: Optional[str] = None,
    ) -> FetchResult:
        """
        Read a file, revalidating against a previously seen revision tag.

        Returns Unchanged when etag still matches upstream, otherwise
        Updated(content, etag).
        """

    async def close(self) -> None:
        """Release network resources."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
