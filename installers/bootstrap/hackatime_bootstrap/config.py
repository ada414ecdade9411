"""Runtime settings resolved from the process environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


VERSION = "0.1.0"

DEFAULT_REPO = "hackclub/hackatime-setup"
DEFAULT_API_TIMEOUT_S = 30.0
DEFAULT_DOWNLOAD_TIMEOUT_S = 300.0
DEFAULT_LOG_LEVEL = "INFO"

REPO_ENV = "HACKATIME_SETUP_REPO"
API_TIMEOUT_ENV = "HACKATIME_BOOTSTRAP_API_TIMEOUT"
DOWNLOAD_TIMEOUT_ENV = "HACKATIME_BOOTSTRAP_DOWNLOAD_TIMEOUT"
LOG_LEVEL_ENV = "HACKATIME_BOOTSTRAP_LOG_LEVEL"
LOG_DIR_ENV = "HACKATIME_BOOTSTRAP_LOG_DIR"
CA_BUNDLE_ENV = "HACKATIME_CA_BUNDLE"
INSECURE_TLS_ENV = "HACKATIME_ALLOW_INSECURE_TLS"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


@dataclass(frozen=True)
class BootstrapConfig:
    repo: str = DEFAULT_REPO
    api_timeout_s: float = DEFAULT_API_TIMEOUT_S
    download_timeout_s: float = DEFAULT_DOWNLOAD_TIMEOUT_S
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Path | None = None
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False
    github_token: str | None = None


def _get(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key, "").strip()
    return value or None


def _normalize_repo(raw: str | None) -> str:
    if not raw:
        return DEFAULT_REPO
    owner, sep, name = raw.strip("/").partition("/")
    if not sep or not owner or not name or "/" in name:
        return DEFAULT_REPO
    return f"{owner}/{name}"


def _normalize_timeout(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _normalize_level(raw: str | None) -> str:
    level = (raw or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


def load_config(environ: Mapping[str, str] | None = None) -> BootstrapConfig:
    env = os.environ if environ is None else environ
    log_dir = _get(env, LOG_DIR_ENV)
    return BootstrapConfig(
        repo=_normalize_repo(_get(env, REPO_ENV)),
        api_timeout_s=_normalize_timeout(_get(env, API_TIMEOUT_ENV), DEFAULT_API_TIMEOUT_S),
        download_timeout_s=_normalize_timeout(_get(env, DOWNLOAD_TIMEOUT_ENV), DEFAULT_DOWNLOAD_TIMEOUT_S),
        log_level=_normalize_level(_get(env, LOG_LEVEL_ENV)),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        ca_bundle=_get(env, CA_BUNDLE_ENV),
        allow_insecure_tls=_get(env, INSECURE_TLS_ENV) == "1",
        github_token=_get(env, GITHUB_TOKEN_ENV),
    )
