"""Bootstrap service: fetch the latest setup release, stage it, and run it."""

from __future__ import annotations

import hashlib
import http.client
import json
import logging
import platform
import shutil
import ssl
import subprocess
import tarfile
import tempfile
import urllib.error
import urllib.request
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

import certifi

from .config import VERSION, BootstrapConfig, load_config
from .errors import BootstrapIOError, FetchError, LaunchError
from .logging_setup import get_logger, redact_args
from .resolver import (
    Asset,
    PlatformTarget,
    Release,
    asset_name_for,
    executable_name_for,
    find_checksums_asset,
    parse_release,
    resolve_target,
    select_asset,
)


ProgressCallback = Callable[[str], None]

GITHUB_API = "https://api.github.com"
USER_AGENT = f"hackatime-bootstrap/{VERSION} (+https://github.com/hackclub/hackatime-setup)"
WORKDIR_PREFIX = "hackatime-setup-"
_CHUNK_SIZE = 1024 * 1024

logger = get_logger()


def _build_ssl_context(config: BootstrapConfig) -> ssl.SSLContext:
    """Create TLS context for release downloads with explicit CA handling."""
    if config.allow_insecure_tls:
        return ssl._create_unverified_context()

    if config.ca_bundle:
        return ssl.create_default_context(cafile=config.ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


def _urlopen(
    url: str,
    timeout: float,
    config: BootstrapConfig,
    accept: str = "*/*",
    headers: dict[str, str] | None = None,
):
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": accept,
            **(headers or {}),
        },
    )
    return urllib.request.urlopen(request, timeout=timeout, context=_build_ssl_context(config))


def fetch_latest_release(repo: str, config: BootstrapConfig) -> Release:
    url = f"{GITHUB_API}/repos/{repo}/releases/latest"
    headers: dict[str, str] = {}
    if config.github_token:
        headers["Authorization"] = f"Bearer {config.github_token}"

    try:
        with _urlopen(
            url,
            timeout=config.api_timeout_s,
            config=config,
            accept="application/vnd.github+json",
            headers=headers,
        ) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        raise FetchError(f"Release lookup for {repo} failed: HTTP {exc.code}") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise FetchError(f"Release lookup for {repo} failed: {exc}") from exc
    except ValueError as exc:
        raise FetchError(f"Release lookup for {repo} returned invalid JSON") from exc

    try:
        release = parse_release(payload)
    except ValueError as exc:
        raise FetchError(f"Release lookup for {repo} failed: {exc}") from exc

    logger.debug(
        "latest release %s has %d assets",
        release.tag_name or "<untagged>",
        len(release.assets),
        extra={"event": "release_fetched"},
    )
    return release


def download_file(url: str, dest: Path, config: BootstrapConfig) -> Path:
    try:
        with _urlopen(url, timeout=config.download_timeout_s, config=config) as response, dest.open("wb") as fh:
            shutil.copyfileobj(response, fh, _CHUNK_SIZE)
    except (OSError, http.client.HTTPException) as exc:
        raise BootstrapIOError(f"Download of {dest.name} failed: {exc}") from exc
    return dest


def parse_checksums(path: Path) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as exc:
        raise BootstrapIOError(f"Could not read {path.name}: {exc}") from exc

    out: dict[str, str] = {}
    for line in text.splitlines():
        parts = line.strip().split()
        if len(parts) >= 2:
            # sha256sum marks binary mode with a leading '*'
            out[parts[1].lstrip("*")] = parts[0]
    return out


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(archive_path: Path, checksums_path: Path) -> bool:
    """True unless ``checksums_path`` lists the archive with a different digest."""
    checksums = parse_checksums(checksums_path)
    expected = checksums.get(archive_path.name)
    if not expected:
        return True
    return sha256_file(archive_path).lower() == expected.lower()


def extract_archive(archive_path: Path, destination: Path) -> Path:
    """Unpack a .zip or .tar.gz archive into ``destination``, overwriting existing entries."""
    name = archive_path.name.lower()
    try:
        if name.endswith(".zip"):
            with zipfile.ZipFile(archive_path) as zf:
                zf.extractall(destination)
        elif name.endswith((".tar.gz", ".tgz")):
            with tarfile.open(archive_path, "r:gz") as tf:
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(destination, filter="data")
                else:
                    tf.extractall(destination)
        else:
            raise BootstrapIOError(f"Unsupported archive format: {archive_path.name}")
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as exc:
        raise BootstrapIOError(f"Extraction of {archive_path.name} failed: {exc}") from exc
    return destination


def find_executable(root: Path, name: str) -> Path:
    candidate = root / name
    if candidate.is_file():
        return candidate

    # Some archives wrap the binary in a top-level folder.
    for path in sorted(root.rglob(name)):
        if path.is_file():
            return path

    raise LaunchError(f"Executable {name} not found in extracted archive")


def build_launch_args(executable: Path, api_key: str, api_url: str | None = None) -> list[str]:
    args = [str(executable), "--key", api_key]
    if api_url is not None:
        args.extend(["--api-url", api_url])
    return args


def launch_setup(executable: Path, api_key: str, api_url: str | None = None) -> int:
    args = build_launch_args(executable, api_key, api_url)
    logger.debug("launching %s", " ".join(redact_args(args)), extra={"event": "setup_launched"})
    try:
        if not platform.system().lower().startswith("win"):
            executable.chmod(executable.stat().st_mode | 0o111)
        return subprocess.call(args)
    except OSError as exc:
        raise LaunchError(f"Could not start {executable.name}: {exc}") from exc


@contextmanager
def staging_directory(prefix: str = WORKDIR_PREFIX) -> Iterator[Path]:
    """Yield a fresh, uniquely named temp directory and always try to remove it."""
    try:
        path = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as exc:
        raise BootstrapIOError(f"Could not create working directory: {exc}") from exc

    logger.debug("created working directory %s", path, extra={"event": "workdir_created"})
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            logger.warning("could not fully remove working directory %s", path, extra={"event": "workdir_leftover"})
        else:
            logger.debug("removed working directory %s", path, extra={"event": "workdir_removed"})


@dataclass(frozen=True)
class RunResult:
    target: PlatformTarget
    asset: Asset
    workdir: Path
    executable: Path
    exit_code: int


def run_bootstrap(
    api_key: str,
    api_url: str | None = None,
    config: BootstrapConfig | None = None,
    target: PlatformTarget | None = None,
    progress: ProgressCallback | None = None,
) -> RunResult:
    config = config or load_config()
    progress = progress or (lambda _msg: None)
    target = target or resolve_target(platform.system(), platform.machine())

    progress(f"Resolving latest release of {config.repo}")
    release = fetch_latest_release(config.repo, config)

    asset = select_asset(release.assets, asset_name_for(target))
    logger.debug("selected asset %s", asset.name, extra={"event": "asset_selected"})
    checksums_asset = find_checksums_asset(release.assets)

    with staging_directory() as workdir:
        archive_path = workdir / asset.name
        progress(f"Downloading {asset.name}")
        download_file(asset.url, archive_path, config)
        logger.debug("downloaded %s", archive_path.name, extra={"event": "download_complete"})

        if checksums_asset is not None:
            progress("Verifying checksum")
            checksums_path = download_file(checksums_asset.url, workdir / checksums_asset.name, config)
            if not verify_checksum(archive_path, checksums_path):
                raise BootstrapIOError(f"Checksum verification failed for {asset.name}")

        progress(f"Extracting {asset.name}")
        extract_archive(archive_path, workdir)
        logger.debug("extracted %s", archive_path.name, extra={"event": "archive_extracted"})

        executable = find_executable(workdir, executable_name_for(target))
        progress(f"Running {executable.name}")
        exit_code = launch_setup(executable, api_key, api_url)

    level = logging.INFO if exit_code == 0 else logging.WARNING
    logger.log(level, "%s exited with code %d", executable.name, exit_code, extra={"event": "setup_exited"})
    return RunResult(
        target=target,
        asset=asset,
        workdir=workdir,
        executable=executable,
        exit_code=exit_code,
    )
