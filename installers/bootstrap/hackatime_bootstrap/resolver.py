"""Release asset resolution for OS/architecture specific setup archives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import AssetNotFoundError

TOOL_NAME = "hackatime_setup"


@dataclass(frozen=True)
class PlatformTarget:
    os_name: str
    arch: str


@dataclass(frozen=True)
class Asset:
    name: str
    url: str


@dataclass(frozen=True)
class Release:
    tag_name: str | None
    assets: tuple[Asset, ...]


def _normalize_os(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("darwin") or s.startswith("mac"):
        return "macos"
    return "linux"


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "x86_64"
    if m in ("aarch64", "arm64"):
        return "aarch64"
    return m


def resolve_target(system: str, machine: str) -> PlatformTarget:
    return PlatformTarget(os_name=_normalize_os(system), arch=_normalize_arch(machine))


def archive_extension(target: PlatformTarget) -> str:
    return ".zip" if target.os_name == "windows" else ".tar.gz"


def asset_name_for(target: PlatformTarget) -> str:
    """Name of the release archive built for ``target``.

    >>> asset_name_for(PlatformTarget("windows", "x86_64"))
    'hackatime_setup-windows-x86_64.zip'
    """
    return f"{TOOL_NAME}-{target.os_name}-{target.arch}{archive_extension(target)}"


def executable_name_for(target: PlatformTarget) -> str:
    return f"{TOOL_NAME}.exe" if target.os_name == "windows" else TOOL_NAME


def parse_release(payload: Any) -> Release:
    """Build a Release from the GitHub ``releases/latest`` JSON body.

    Entries without both ``name`` and ``browser_download_url`` are skipped.
    """
    if not isinstance(payload, dict):
        raise ValueError("release payload must be a JSON object")

    raw_assets = payload.get("assets")
    if raw_assets is None:
        raw_assets = []
    elif not isinstance(raw_assets, list):
        raise ValueError("release assets must be a list")

    assets: list[Asset] = []
    for item in raw_assets:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        url = item.get("browser_download_url")
        if isinstance(name, str) and isinstance(url, str) and name and url:
            assets.append(Asset(name=name, url=url))

    tag = payload.get("tag_name")
    return Release(tag_name=tag if isinstance(tag, str) else None, assets=tuple(assets))


def select_asset(assets: list[Asset] | tuple[Asset, ...], asset_name: str) -> Asset:
    # Exact, case-sensitive match only. No fallback candidates.
    for asset in assets:
        if asset.name == asset_name:
            return asset
    raise AssetNotFoundError(asset_name, [a.name for a in assets])


def select_asset_url(assets: list[Asset] | tuple[Asset, ...], asset_name: str) -> str:
    return select_asset(assets, asset_name).url


def find_checksums_asset(assets: list[Asset] | tuple[Asset, ...]) -> Asset | None:
    for asset in assets:
        if asset.name.lower() == "checksums.txt":
            return asset
    return None
