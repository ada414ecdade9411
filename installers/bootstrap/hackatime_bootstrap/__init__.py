"""Bootstrap that downloads and runs the latest hackatime_setup release."""

from .config import VERSION as __version__
from .config import BootstrapConfig, load_config
from .errors import AssetNotFoundError, BootstrapError, BootstrapIOError, FetchError, LaunchError
from .resolver import (
    Asset,
    PlatformTarget,
    Release,
    asset_name_for,
    executable_name_for,
    parse_release,
    resolve_target,
    select_asset,
    select_asset_url,
)
from .service import (
    RunResult,
    build_launch_args,
    download_file,
    extract_archive,
    fetch_latest_release,
    launch_setup,
    run_bootstrap,
    staging_directory,
)

__all__ = [
    "Asset",
    "AssetNotFoundError",
    "BootstrapConfig",
    "BootstrapError",
    "BootstrapIOError",
    "FetchError",
    "LaunchError",
    "PlatformTarget",
    "Release",
    "RunResult",
    "__version__",
    "asset_name_for",
    "build_launch_args",
    "download_file",
    "executable_name_for",
    "extract_archive",
    "fetch_latest_release",
    "launch_setup",
    "load_config",
    "parse_release",
    "resolve_target",
    "run_bootstrap",
    "select_asset",
    "select_asset_url",
    "staging_directory",
]
