"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
In a workflow the GITHUB_* values are provided by the runner; the rest
are passed in through the step's `env:` block.

Mock mode enables local runs without an R2 bucket.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.videos.models import DisplayMode
from ..core.videos.publisher import (
    DEFAULT_COMMENT_HEADER,
    DEFAULT_SPEC_PATTERN,
    DEFAULT_VIDEO_DIR,
    PublishOptions,
)

# Longest expiry a SigV4 presigned URL accepts
MAX_URL_EXPIRY_SECONDS = 7 * 24 * 3600


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    # GitHub Configuration
    github_token: str = Field(
        default="",
        description="Token with pull-requests: write permission. Required."
    )
    github_repository: str = Field(
        default="",
        description="Repository as owner/name. Set by the Actions runner."
    )
    github_event_path: Optional[str] = Field(
        default=None,
        description="Path to the triggering event payload. Set by the Actions runner."
    )
    github_output: Optional[str] = Field(
        default=None,
        description="Path to the step outputs file. Set by the Actions runner."
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="REST API base URL. Override for GitHub Enterprise Server."
    )

    # Spec and Video Discovery
    spec_pattern: str = Field(
        default=DEFAULT_SPEC_PATTERN,
        description="Glob for changed files that count as specs. Supports ** and {a,b}."
    )
    video_dir: str = Field(
        default=DEFAULT_VIDEO_DIR,
        description="Directory Cypress writes videos to."
    )

    # Comment
    comment_header: str = Field(
        default=DEFAULT_COMMENT_HEADER,
        description="Markdown heading shown at the top of the PR comment."
    )
    inline_videos: bool = Field(
        default=True,
        description="Render each video as an expanded block. False renders a link table."
    )

    # Uploads
    url_expiry_seconds: int = Field(
        default=259200,
        ge=1,
        le=MAX_URL_EXPIRY_SECONDS,
        description="Lifetime of signed video URLs. Defaults to 72 hours."
    )
    max_concurrent_uploads: int = Field(
        default=5,
        ge=1,
        description="Upper bound on simultaneous uploads."
    )

    # R2/S3 Storage Configuration
    r2_account_id: str = Field(
        default="",
        description="Cloudflare account ID for R2"
    )
    r2_access_key_id: str = Field(
        default="",
        description="R2 access key ID"
    )
    r2_secret_access_key: str = Field(
        default="",
        description="R2 secret access key"
    )
    r2_bucket_name: str = Field(
        default="",
        description="R2 bucket name for video storage"
    )
    r2_endpoint_url: Optional[str] = Field(
        default=None,
        description="R2 endpoint URL. Auto-constructed from account_id if not provided."
    )
    r2_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real R2. Enables local runs without object storage."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def r2_endpoint(self) -> str:
        """
        Construct R2 endpoint URL from account ID.

        R2 endpoints follow the pattern: https://{account_id}.r2.cloudflarestorage.com
        """
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    @property
    def display_mode(self) -> DisplayMode:
        return DisplayMode.INLINE if self.inline_videos else DisplayMode.TABLE

    def publish_options(self) -> PublishOptions:
        """Pipeline options derived from these settings."""
        return PublishOptions(
            spec_pattern=self.spec_pattern,
            video_dir=self.video_dir,
            comment_header=self.comment_header,
            url_expiry_seconds=self.url_expiry_seconds,
            max_concurrent_uploads=self.max_concurrent_uploads,
            display_mode=self.display_mode,
        )

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.github_token:
            missing.append("GITHUB_TOKEN")

        # R2 only required if not in mock mode
        if not self.r2_mock_mode:
            if not self.r2_account_id and not self.r2_endpoint_url:
                missing.append("R2_ACCOUNT_ID")
            if not self.r2_access_key_id:
                missing.append("R2_ACCESS_KEY_ID")
            if not self.r2_secret_access_key:
                missing.append("R2_SECRET_ACCESS_KEY")
            if not self.r2_bucket_name:
                missing.append("R2_BUCKET_NAME")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
