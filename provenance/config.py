"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    SIGHTENGINE_API_USER=123 uvicorn provenance.main:app
    export AI_LIKELIHOOD_THRESHOLD=0.6

A `.env` file at the project root is loaded automatically.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # SIGHTENGINE_API_USER == sightengine_api_user
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # External verification (Sightengine genAI model)                     #
    # ------------------------------------------------------------------ #
    sightengine_api_url: str = Field(
        "https://api.sightengine.com/1.0/check.json",
        description="Remote AI-likelihood classifier endpoint",
    )
    sightengine_api_user: str = Field(
        "", description="API user; empty disables the external fallback"
    )
    sightengine_api_secret: str = Field(
        "", description="API secret; empty disables the external fallback"
    )
    sightengine_models: str = Field(
        "genai", description="Capability selector sent with every request"
    )
    sightengine_timeout_sec: int = Field(
        30, description="Total timeout for one verification request (seconds)"
    )

    # ------------------------------------------------------------------ #
    # AI Decision Threshold                                               #
    # ------------------------------------------------------------------ #
    ai_likelihood_threshold: float = Field(
        0.5, description="Remote score above this → classified as AI-generated"
    )

    # ------------------------------------------------------------------ #
    # Metadata scanning limits                                            #
    # ------------------------------------------------------------------ #
    general_field_max_length: int = Field(
        500, description="General-field scanner ignores strings this long or longer"
    )
    search_string_max_length: int = Field(
        1000, description="Keyword search skips string values longer than this"
    )
    search_array_item_max_length: int = Field(
        500, description="Keyword search skips array items this long or longer"
    )
    search_max_depth: int = Field(
        5, description="Max nesting depth walked by the keyword search"
    )
    search_preview_length: int = Field(
        500, description="Chars of the searchable string kept for audit"
    )

    # ------------------------------------------------------------------ #
    # File Size Limits                                                    #
    # ------------------------------------------------------------------ #
    max_image_upload_mb: int = Field(
        20, description="Max MB for multipart image uploads"
    )
    pil_max_image_pixels: int = Field(
        20_000_000, description="PIL decompression-bomb guard (pixels)"
    )

    # ------------------------------------------------------------------ #
    # Shared HTTP session                                                 #
    # ------------------------------------------------------------------ #
    http_timeout_sec: int = Field(
        30, description="Default total timeout for the shared aiohttp session"
    )

    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024

    @property
    def sightengine_configured(self) -> bool:
        return bool(self.sightengine_api_user and self.sightengine_api_secret)


# Single shared instance; import this everywhere.
settings = Settings()
