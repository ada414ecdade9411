"""Bootstrap failure taxonomy and process exit codes."""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class BootstrapError(RuntimeError):
    """Base class for every failure that aborts a bootstrap run."""


class FetchError(BootstrapError):
    """Release API could not be reached or returned an unusable response."""


class AssetNotFoundError(BootstrapError):
    def __init__(self, asset_name: str, available: list[str] | None = None) -> None:
        self.asset_name = asset_name
        self.available = list(available or [])
        super().__init__(f"No release asset named {asset_name!r}")


class BootstrapIOError(BootstrapError):
    """Download, checksum, extraction or filesystem failure."""


class LaunchError(BootstrapError):
    """Bundled executable is missing or could not be started."""
