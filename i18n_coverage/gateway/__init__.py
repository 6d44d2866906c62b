"""Remote content gateways."""

from .interface import ContentGateway, FetchResult
from .credentials import Credential, CredentialPool
from .github import GitHubGateway

__all__ = ["ContentGateway", "FetchResult", "Credential", "CredentialPool", "GitHubGateway"]
