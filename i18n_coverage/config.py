"""Configuration management for the i18n coverage service."""

import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _github_tokens_from_env() -> List[str]:
    """
    Collect GitHub tokens from the environment.

    GITHUB_TOKENS holds a comma-separated pool; GITHUB_TOKEN and
    GITHUB_TOKEN_2..GITHUB_TOKEN_5 are read as well. Duplicates are dropped,
    order is preserved.
    """
    candidates = os.getenv("GITHUB_TOKENS", "").split(",")
    candidates.append(os.getenv("GITHUB_TOKEN", ""))
    for index in range(2, 6):
        candidates.append(os.getenv(f"GITHUB_TOKEN_{index}", ""))

    tokens = []
    for token in candidates:
        token = token.strip()
        if token and token not in tokens:
            tokens.append(token)
    return tokens


@dataclass
class Config:
    """Application configuration."""

    # GitHub access
    github_tokens: List[str] = field(default_factory=_github_tokens_from_env)
    github_api_url: str = field(
        default_factory=lambda: os.getenv("GITHUB_API_URL", "https://api.github.com")
    )

    # Gateway behaviour
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "10"))
    )
    max_attempts: int = field(default_factory=lambda: int(os.getenv("MAX_ATTEMPTS", "3")))
    retry_backoff: float = field(
        default_factory=lambda: float(os.getenv("RETRY_BACKOFF", "1.0"))
    )
    low_quota_threshold: int = field(
        default_factory=lambda: int(os.getenv("LOW_QUOTA_THRESHOLD", "50"))
    )

    # Parsing
    namespace_batch_size: int = field(
        default_factory=lambda: int(os.getenv("NAMESPACE_BATCH_SIZE", "4"))
    )
    batch_pause: float = field(default_factory=lambda: float(os.getenv("BATCH_PAUSE", "0.1")))
    language_batch_size: int = field(
        default_factory=lambda: int(os.getenv("LANGUAGE_BATCH_SIZE", "3"))
    )

    # Cache TTLs (seconds)
    structure_ttl: int = field(default_factory=lambda: int(os.getenv("STRUCTURE_TTL", "172800")))
    file_ttl: int = field(default_factory=lambda: int(os.getenv("FILE_TTL", "86400")))
    listing_ttl: int = field(default_factory=lambda: int(os.getenv("LISTING_TTL", "3600")))
    coverage_ttl: int = field(default_factory=lambda: int(os.getenv("COVERAGE_TTL", "14400")))
    key_counts_ttl: int = field(
        default_factory=lambda: int(os.getenv("KEY_COUNTS_TTL", "14400"))
    )

    # HTTP responses
    badge_max_age: int = field(default_factory=lambda: int(os.getenv("BADGE_MAX_AGE", "300")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))

    # Candidate i18n roots, most likely first
    search_paths: List[str] = field(default_factory=lambda: [
        "public/i18n",
        "src/locales",
        "public/locales",
        "locales",
        "src/i18n",
        "i18n",
        "src/assets/i18n",
        "assets/i18n",
    ])

    # Preferred base languages, in order
    BASE_LANGUAGES: tuple = ("en", "en-US", "en_US")

    def validate(self) -> List[str]:
        """Validate configuration and return list of warnings."""
        warnings = []
        if not self.github_tokens:
            warnings.append(
                "No GITHUB_TOKEN provided - using unauthenticated requests (60 req/hour limit)"
            )
        if self.max_attempts < 1:
            warnings.append("MAX_ATTEMPTS must be at least 1")
        if self.namespace_batch_size < 1:
            warnings.append("NAMESPACE_BATCH_SIZE must be at least 1")
        return warnings


# Global config instance
config = Config()
