"""GitHub REST implementation of the content gateway."""

import asyncio
import base64
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping, Optional
from urllib.parse import quote

import aiohttp

from ..config import Config, config as default_config
from ..errors import (
    GatewayError,
    InvalidStructureError,
    RateLimitedError,
    RemoteFileNotFoundError,
    RepoNotFoundError,
)
from ..models.repository import DirEntry, EntryType, RepositoryCoordinate, Unchanged, Updated
from ..utils.logger_utils import LoggerUtils
from .credentials import Credential, CredentialPool
from .interface import ContentGateway, FetchResult

logger = LoggerUtils.get_logger(__name__)

TRANSIENT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ConnectionResetError)


def _header_seconds(headers: Mapping[str, str], name: str) -> Optional[float]:
    """Numeric header value; HTTP-date forms and garbage read as absent."""
    value = headers.get(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass
class GatewayResponse:
    """Status, headers and raw body of a completed upstream call."""
    status: int
    headers: Mapping[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class GitHubGateway(ContentGateway):
    """
    Reads repository trees and files through the GitHub contents API.

    Every call draws a credential from the pool and feeds the rate-limit
    headers of the response back into it. Transient failures (network errors,
    timeouts, 5xx) are retried with linear backoff; 404 and 401 fail at once.
    A 403/429 with an empty budget exhausts the credential and the call moves
    on to the next one.
    """

    API_VERSION = "2022-11-28"
    USER_AGENT = "i18n-coverage-badge"

    def __init__(
        self,
        pool: Optional[CredentialPool] = None,
        settings: Optional[Config] = None,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the gateway.

        Args:
            pool: Credential pool. Built from settings.github_tokens if not provided.
            settings: Configuration (uses the global config if not provided)
            session: aiohttp session to reuse; one is created lazily otherwise
            sleep: Coroutine used for retry backoff
        """
        self.settings = settings or default_config
        self.pool = pool or CredentialPool(
            self.settings.github_tokens,
            low_threshold=self.settings.low_quota_threshold,
        )
        self.api_url = self.settings.github_api_url.rstrip("/")
        self.max_attempts = max(1, self.settings.max_attempts)
        self.backoff = self.settings.retry_backoff
        self._timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep

        if self.pool.is_authenticated:
            logger.info("Using %d GitHub token(s)", len(self.pool))
        else:
            logger.warning(
                "No GITHUB_TOKEN provided - using unauthenticated requests (60 req/hour limit)"
            )

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session if this gateway created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def list_directory(self, coordinate: RepositoryCoordinate, path: str) -> List[DirEntry]:
        response = await self._request(self._contents_url(coordinate, path))
        if response.status == 404:
            raise RepoNotFoundError(f"{coordinate.full_name}/{path} not found")

        data = response.json()
        if not isinstance(data, list):
            raise InvalidStructureError(f"{coordinate.full_name}/{path} is not a directory")

        entries = []
        for item in data:
            kind = item.get("type")
            if kind not in ("file", "dir"):
                continue
            entries.append(
                DirEntry(name=item["name"], path=item["path"], type=EntryType(kind))
            )
        logger.debug(
            "Listed %s/%s (%d entries)", coordinate.full_name, path or "root", len(entries)
        )
        return entries

    async def read_file(
        self,
        coordinate: RepositoryCoordinate,
        path: str,
        etag: Optional[str] = None,
    ) -> FetchResult:
        response = await self._request(self._contents_url(coordinate, path), etag=etag)
        if response.status == 304:
            logger.debug("Content not modified for %s/%s", coordinate.full_name, path)
            return Unchanged()
        if response.status == 404:
            raise RemoteFileNotFoundError(f"{coordinate.full_name}/{path} not found")

        data = response.json()
        if not isinstance(data, dict) or data.get("type") != "file":
            raise InvalidStructureError(f"{coordinate.full_name}/{path} is not a file")

        new_etag = response.headers.get("ETag")
        if data.get("encoding") == "base64":
            content = base64.b64decode(data.get("content", ""))
        elif data.get("download_url"):
            # Files over the inline size limit come without content
            raw = await self._request(data["download_url"])
            if raw.status == 404:
                raise RemoteFileNotFoundError(f"{coordinate.full_name}/{path} not found")
            content = raw.body
        else:
            content = b""

        logger.debug(
            "Fetched %s/%s (%d bytes, %s)",
            coordinate.full_name, path, len(content), "with ETag" if new_etag else "no ETag",
        )
        return Updated(content=content, etag=new_etag)

    async def refresh_quota(self) -> Credential:
        """Query /rate_limit for the current credential and record the result."""
        cred = self.pool.acquire()
        response = await self._request(f"{self.api_url}/rate_limit", credential=cred)
        rate = response.json().get("rate", {})
        self.pool.record(
            cred,
            remaining=rate.get("remaining"),
            reset_at=rate.get("reset"),
            limit=rate.get("limit"),
        )
        return cred

    def _contents_url(self, coordinate: RepositoryCoordinate, path: str) -> str:
        base = f"{self.api_url}/repos/{quote(coordinate.owner)}/{quote(coordinate.repo)}/contents"
        path = path.strip("/")
        return f"{base}/{quote(path, safe='/')}" if path else base

    def _headers(self, cred: Credential, etag: Optional[str]) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": self.USER_AGENT,
        }
        if cred.token:
            headers["Authorization"] = f"Bearer {cred.token}"
        if etag:
            headers["If-None-Match"] = etag
        return headers

    def _record_quota(self, cred: Credential, headers: Mapping[str, str]) -> None:
        remaining = headers.get("X-RateLimit-Remaining")
        reset = headers.get("X-RateLimit-Reset")
        limit = headers.get("X-RateLimit-Limit")
        self.pool.record(
            cred,
            remaining=int(remaining) if remaining is not None else None,
            reset_at=float(reset) if reset is not None else None,
            limit=int(limit) if limit is not None else None,
        )

    @staticmethod
    def _is_quota_exhausted(status: int, headers: Mapping[str, str]) -> bool:
        if status == 429:
            return True
        return status == 403 and headers.get("X-RateLimit-Remaining") == "0"

    async def _request(
        self,
        url: str,
        etag: Optional[str] = None,
        credential: Optional[Credential] = None,
    ) -> GatewayResponse:
        """
        GET a URL with retry, backoff and credential rotation.

        Returns the response for 200, 304 and 404; raises for everything else.
        """
        attempt = 1
        rotations = 0
        while True:
            cred = credential or self.pool.acquire()
            try:
                async with self.session.get(
                    url, headers=self._headers(cred, etag), timeout=self._timeout
                ) as resp:
                    response = GatewayResponse(
                        status=resp.status, headers=resp.headers, body=await resp.read()
                    )
            except TRANSIENT_ERRORS as err:
                failure = err
            else:
                self._record_quota(cred, response.headers)
                status = response.status

                if status in (200, 304, 404):
                    return response
                if status == 401:
                    raise GatewayError(f"Authentication failed for {cred.label}", status=status)
                if self._is_quota_exhausted(status, response.headers):
                    reset_at = self.pool.mark_exhausted(
                        cred,
                        reset_at=_header_seconds(response.headers, "X-RateLimit-Reset"),
                        retry_after=_header_seconds(response.headers, "Retry-After"),
                    )
                    rotations += 1
                    if credential is not None or rotations >= len(self.pool):
                        raise RateLimitedError("Rate limit exceeded", reset_at=reset_at)
                    continue
                if status < 500 and not (status == 403 and "Retry-After" in response.headers):
                    raise GatewayError(f"Unexpected status {status} for {url}", status=status)
                failure = GatewayError(f"Upstream status {status}", status=status)

            if attempt >= self.max_attempts:
                raise GatewayError(
                    f"Request to {url} failed after {attempt} attempts: {failure}"
                ) from failure

            delay = self.backoff * attempt
            logger.info(
                "GitHub API attempt %d/%d failed for %s: %s, retrying in %.1fs",
                attempt, self.max_attempts, url, failure, delay,
            )
            await self._sleep(delay)
            attempt += 1
