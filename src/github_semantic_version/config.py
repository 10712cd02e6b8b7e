"""Configuration management using Pydantic BaseSettings.

Transport settings for the GitHub API layer (API location, page size,
timeouts, pagination ceiling) are loaded from environment variables with
validation and clamping. Credentials are deliberately not part of the
settings; see ``auth.resolve_credential``.
"""

import logging
import math
from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar, cast

from annotated_types import Ge, Le
from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_core import Url
from pydantic_settings import BaseSettings, SettingsConfigDict

from .git_remote import api_base_for_host
from .github_api_constants import GITHUB_DOTCOM_HOST, GITHUB_MAX_PER_PAGE

logger = logging.getLogger(__name__)

# Type variable for numeric clamping (int or float)
T = TypeVar("T", int, float)


def _clamp_numeric_value(
    v: Any,
    field_info: FieldInfo,
    cast_fn: Callable[[Any], T],
    validity_check: Callable[[T], bool] = lambda x: True,
) -> T:
    """Clamp a numeric setting into its field's ge/le bounds.

    Missing, unparsable or invalid (per ``validity_check``) values fall back
    to the field default.

    Args:
        v: The value to validate and clamp
        field_info: Field metadata containing default and constraints
        cast_fn: Function to cast value to target type (int or float)
        validity_check: Optional predicate to check validity (e.g., math.isfinite)

    Returns:
        Clamped numeric value within field constraints
    """
    ge = _get_ge_constraint(field_info)
    le = _get_le_constraint(field_info)

    if v is None:
        default_val: T = field_info.default
        return default_val

    try:
        numeric_val = cast_fn(v)
    except (TypeError, ValueError):
        default_val = field_info.default
        return default_val

    if not validity_check(numeric_val):
        default_val = field_info.default
        return default_val

    if ge is not None:
        numeric_val = max(cast_fn(ge), numeric_val)
    if le is not None:
        numeric_val = min(cast_fn(le), numeric_val)

    return numeric_val


class ClientSettings(BaseSettings):
    """GitHub client configuration with validation and clamping.

    Out-of-range numbers are clamped to their bounds rather than rejected.

    Environment Variables:
        GITHUB_API_URL: REST API base URL override (optional, HTTPS only)
        GH_HOST: GitHub hostname (default: "github.com")
        HTTP_PER_PAGE: Items per page for list endpoints (default: 100, range: 1-100)
        HTTP_TIMEOUT: Total HTTP timeout in seconds
            (default: 30.0, range: 1.0-300.0)
        HTTP_CONNECT_TIMEOUT: HTTP connection timeout in seconds
            (default: 10.0, range: 1.0-60.0)
        GSV_MAX_PAGES: Optional ceiling on pages per paginated request
            (default: unbounded, range: 1-10000)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
        frozen=True,
    )

    github_api_url: str | None = Field(
        default=None,
        description="Override for GitHub REST API base URL (for enterprise instances)",
    )
    gh_host: str = Field(
        default=GITHUB_DOTCOM_HOST,
        description="GitHub hostname (use custom domain for GitHub Enterprise)",
    )

    http_per_page: int = Field(
        default=GITHUB_MAX_PER_PAGE,
        ge=1,
        le=GITHUB_MAX_PER_PAGE,
        description="Number of items per page for list requests",
    )
    http_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Total HTTP timeout in seconds",
    )
    http_connect_timeout: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="HTTP connection timeout in seconds",
    )
    gsv_max_pages: int | None = Field(
        default=None,
        ge=1,
        le=10000,
        description="Fail paginated requests that report more pages than this",
    )

    @field_validator("gh_host", mode="before")
    @classmethod
    def normalize_host(cls, v: Any) -> Any:
        """Normalize host to lowercase, falling back to github.com when blank."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return GITHUB_DOTCOM_HOST
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("github_api_url", mode="before")
    @classmethod
    def validate_url_format(cls, v: Any) -> str | None:
        """Validate the API URL override if provided (HTTPS only).

        Returns:
            The stripped URL, or None if not provided (empty/None)

        Raises:
            ValueError: If the URL is not a string, contains spaces, is not
                HTTPS or has no hostname
        """
        if v is None or v == "":
            return None

        if not isinstance(v, str):
            msg = (
                f"URL must be a string, got {type(v).__name__}. "
                "Please provide a valid HTTPS URL."
            )
            raise ValueError(msg)

        if " " in v.strip():
            msg = f"URL contains spaces: {v!r}. Please provide a valid HTTPS URL."
            raise ValueError(msg)
        v = v.strip()

        try:
            parsed = Url(v)
        except Exception as e:
            msg = f"Failed to parse URL {v!r}: {e}"
            raise ValueError(msg) from e

        if parsed.scheme != "https":
            msg = f"Invalid URL scheme '{parsed.scheme}': {v!r}. Only HTTPS URLs are allowed."
            raise ValueError(msg)

        if not parsed.host:
            msg = (
                f"URL is missing hostname: {v!r}. "
                "Please provide a complete HTTPS URL with a hostname."
            )
            raise ValueError(msg)

        # Keep the caller's spelling; Url() would add a trailing slash
        return cast(str, v)

    @field_validator("http_per_page", "gsv_max_pages", mode="before")
    @classmethod
    def clamp_int_values(cls, v: Any, info: ValidationInfo) -> int | None:
        """Clamp integer values to their field constraints."""
        field_name = info.field_name
        if field_name is None:
            msg = "Missing field_name in ValidationInfo"
            raise RuntimeError(msg)
        field_info = cls.model_fields[field_name]

        # An empty GSV_MAX_PAGES means "no ceiling"
        if isinstance(v, str) and not v.strip():
            v = None
        return _clamp_numeric_value(v, field_info, int)

    @field_validator("http_timeout", "http_connect_timeout", mode="before")
    @classmethod
    def clamp_float_values(cls, v: Any, info: ValidationInfo) -> float:
        """Clamp float values to their field constraints.

        NaN and infinite values are replaced with the field default.
        """
        field_name = info.field_name
        if field_name is None:
            msg = "Missing field_name in ValidationInfo"
            raise RuntimeError(msg)
        field_info = cls.model_fields[field_name]

        return _clamp_numeric_value(v, field_info, float, math.isfinite)

    @model_validator(mode="after")
    def validate_timeout_consistency(self) -> "ClientSettings":
        """Clamp the connect timeout so it never exceeds the total timeout."""
        if self.http_connect_timeout > self.http_timeout:
            old_connect_timeout = self.http_connect_timeout
            # Model is frozen
            object.__setattr__(self, "http_connect_timeout", self.http_timeout)
            logger.warning(
                "http_connect_timeout (%s) exceeded http_timeout (%s); clamped to %s",
                old_connect_timeout,
                self.http_timeout,
                self.http_timeout,
            )

        return self

    @property
    def api_base_url(self) -> str:
        """REST API base URL for the configured host."""
        return api_base_for_host(self.gh_host, self.github_api_url)

    @property
    def max_pages(self) -> int | None:
        return self.gsv_max_pages


@lru_cache
def get_settings() -> ClientSettings:
    """Get or create the global settings instance (thread-safe via lru_cache).

    Returns:
        ClientSettings instance loaded from environment
    """
    return ClientSettings()


def _get_ge_constraint(field_info: FieldInfo) -> int | float | None:
    """Extract the >= constraint value from field metadata."""
    for meta in field_info.metadata:
        if isinstance(meta, Ge):
            return cast(float | int | None, meta.ge)
    return None


def _get_le_constraint(field_info: FieldInfo) -> int | float | None:
    """Extract the <= constraint value from field metadata."""
    for meta in field_info.metadata:
        if isinstance(meta, Le):
            return cast(float | int | None, meta.le)
    return None
