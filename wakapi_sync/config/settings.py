"""
Configuration settings for the Wakapi daily summary sync.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
at startup, ensuring fail-fast behavior if configuration is missing or invalid.

**Why centralized config?**
  - Single source of truth for all settings (server URL, API key, output paths).
  - Easy to test (inject fake settings instead of reading from environment).
  - Fail-fast validation (missing API key → clear error at startup, not mid-run).

The variable names (WAKAPI_URL, WAKAPI_API_KEY, WAKAPI_OUT_DIR,
WAKAPI_TOP_N_PROJECTS, WAKAPI_TOP_N_LANGUAGES) are what cron jobs and CI
workflows already export, so they are kept stable.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (no-op when the file is absent)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


DEFAULT_API_PREFIX = "/api/compat/wakatime/v1"
DEFAULT_OUT_DIR = "data/wakapi"
DEFAULT_TOP_N = 10


def _read_int(name: str, default: str) -> int:
    """Read an integer environment variable, naming the variable on failure."""
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")


@dataclass(frozen=True)
class WakapiSettings:
    """
    Configuration for the Wakapi (WakaTime-compatible) API.

    **Conceptual**: Wakapi is a self-hosted WakaTime-compatible server. This
    settings object stores the server URL, API key and request timeout needed
    to call its statusbar and summaries endpoints.

    **Security note**: the API key is a secret and should:
      - Be loaded from environment variables (WAKAPI_API_KEY).
      - Never be hardcoded in source code.
      - Never be committed to git (use .env file in .gitignore).

    Attributes:
        base_url: Server root, e.g. "https://wakapi.example.com".
                 REQUIRED - raises ValueError if not provided.
        api_key: Wakapi API key. REQUIRED - raises ValueError if not provided.
        api_prefix: Path of the WakaTime-compatible API under base_url
                   (default "/api/compat/wakatime/v1").
        timeout_seconds: HTTP request timeout in seconds (default 30).
    """
    base_url: str
    api_key: str
    api_prefix: str = DEFAULT_API_PREFIX
    timeout_seconds: int = 30

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.base_url:
            raise ValueError(
                "WAKAPI_URL is required but not set. "
                "Please set it in your .env file or environment variables."
            )
        if not self.api_key:
            raise ValueError(
                "WAKAPI_API_KEY is required but not set. "
                "Please set it in your .env file or environment variables."
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @property
    def api_root(self) -> str:
        """Base URL joined with the API prefix, without a trailing slash."""
        prefix = self.api_prefix.strip("/")
        root = self.base_url.rstrip("/")
        return f"{root}/{prefix}" if prefix else root

    @classmethod
    def from_env(cls) -> "WakapiSettings":
        """
        Load Wakapi settings from environment variables.

        **Environment variables**:
          - WAKAPI_URL (required): Server root URL.
          - WAKAPI_API_KEY (required): Your Wakapi API key.
          - WAKAPI_API_PREFIX (optional): Defaults to "/api/compat/wakatime/v1".
          - WAKAPI_TIMEOUT_SECONDS (optional): Defaults to 30.

        Returns:
            WakapiSettings object with values loaded from environment.

        Raises:
            ValueError: If WAKAPI_URL or WAKAPI_API_KEY is missing, or the
                        timeout is not a positive integer.

        Usage example:
            >>> # In .env file:
            >>> # WAKAPI_URL=https://wakapi.example.com
            >>> # WAKAPI_API_KEY=your_key_here
            >>>
            >>> settings = WakapiSettings.from_env()
            >>> settings.api_root
            'https://wakapi.example.com/api/compat/wakatime/v1'
        """
        return cls(
            base_url=os.getenv("WAKAPI_URL", "").strip(),
            api_key=os.getenv("WAKAPI_API_KEY", "").strip(),
            api_prefix=os.getenv("WAKAPI_API_PREFIX", DEFAULT_API_PREFIX),
            timeout_seconds=_read_int("WAKAPI_TIMEOUT_SECONDS", "30"),
        )


@dataclass(frozen=True)
class OutputSettings:
    """
    Where the CSV files go and how many ranked rows each day gets.

    Attributes:
        out_dir: Directory holding daily-total.csv, daily-top-projects.csv
                and daily-top-languages.csv (created on first write).
        top_n_projects: Maximum ranked project rows per day (default 10).
        top_n_languages: Maximum ranked language rows per day (default 10).
    """
    out_dir: Path = Path(DEFAULT_OUT_DIR)
    top_n_projects: int = DEFAULT_TOP_N
    top_n_languages: int = DEFAULT_TOP_N

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.top_n_projects <= 0:
            raise ValueError(
                f"WAKAPI_TOP_N_PROJECTS must be a positive integer, got: {self.top_n_projects}"
            )
        if self.top_n_languages <= 0:
            raise ValueError(
                f"WAKAPI_TOP_N_LANGUAGES must be a positive integer, got: {self.top_n_languages}"
            )

    @classmethod
    def from_env(cls) -> "OutputSettings":
        """
        Load output settings from environment variables.

        **Environment variables** (all optional):
          - WAKAPI_OUT_DIR: Defaults to "data/wakapi".
          - WAKAPI_TOP_N_PROJECTS: Defaults to 10.
          - WAKAPI_TOP_N_LANGUAGES: Defaults to 10.

        Raises:
            ValueError: If a top-N value is not a positive integer.
        """
        return cls(
            out_dir=Path(os.getenv("WAKAPI_OUT_DIR", DEFAULT_OUT_DIR)),
            top_n_projects=_read_int("WAKAPI_TOP_N_PROJECTS", str(DEFAULT_TOP_N)),
            top_n_languages=_read_int("WAKAPI_TOP_N_LANGUAGES", str(DEFAULT_TOP_N)),
        )


@dataclass(frozen=True)
class Settings:
    """
    Global settings for the sync.

    **Conceptual**: Top-level object aggregating the Wakapi connection and the
    output settings, so scripts load configuration once at startup.

    Attributes:
        wakapi: Wakapi API settings. None if not configured (e.g. when only
               reading existing CSVs for a report).
        output: Output directory and top-N limits. Always available.
    """
    wakapi: Optional[WakapiSettings] = None
    output: OutputSettings = field(default_factory=OutputSettings)

    @classmethod
    def from_env(cls, require_wakapi: bool = False) -> "Settings":
        """
        Load global settings from environment variables.

        Args:
            require_wakapi: If True, raise error if Wakapi settings are missing.
                           If False (default), Wakapi settings are optional.

        Returns:
            Settings object with all subsystem settings loaded from environment.

        Raises:
            ValueError: If require_wakapi=True and WAKAPI_URL/WAKAPI_API_KEY are
                       missing, or if any output setting is invalid.
        """
        wakapi_settings = None
        try:
            wakapi_settings = WakapiSettings.from_env()
        except ValueError as e:
            if require_wakapi:
                raise ValueError(
                    f"Wakapi settings are required but could not be loaded: {e}"
                )
            # Otherwise Wakapi is optional - continue without it

        return cls(
            wakapi=wakapi_settings,
            output=OutputSettings.from_env(),
        )


_default_settings: Optional[Settings] = None


def get_settings(require_wakapi: bool = False) -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Tests can bypass this by constructing their own Settings objects.

    Args:
        require_wakapi: If True, raise error if Wakapi settings are missing.

    Returns:
        Global Settings singleton.

    Raises:
        ValueError: If require_wakapi=True and Wakapi is not configured.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env(require_wakapi=require_wakapi)

    # If already loaded but require_wakapi is True, check that Wakapi is present
    if require_wakapi and _default_settings.wakapi is None:
        raise ValueError(
            "Wakapi settings are required but not configured. "
            "Please set WAKAPI_URL and WAKAPI_API_KEY in your .env file."
        )

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    Clears the cached settings so the next get_settings() call reloads them
    from the environment.
    """
    global _default_settings
    _default_settings = None
