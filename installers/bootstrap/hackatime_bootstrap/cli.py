"""CLI bootstrap that downloads the latest hackatime_setup and runs it."""

from __future__ import annotations

import argparse

from .config import load_config
from .errors import EXIT_FAILURE, EXIT_INTERRUPTED, AssetNotFoundError, BootstrapError
from .logging_setup import configure_logging
from .service import run_bootstrap


def _exit_status(code: int) -> int:
    # subprocess reports death by signal N as -N
    return 128 - code if code < 0 else code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackatime-bootstrap",
        description="Download the latest hackatime_setup release and run it",
    )
    parser.add_argument("key", help="Hackatime API key, forwarded as --key")
    parser.add_argument("api_url", nargs="?", default=None, help="Optional API base URL, forwarded as --api-url")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    logger = configure_logging(level=config.log_level, log_dir=config.log_dir)

    try:
        result = run_bootstrap(args.key, args.api_url, config=config, progress=logger.info)
    except AssetNotFoundError as exc:
        logger.error("%s (available: %s)", exc, ", ".join(exc.available) or "none")
        return EXIT_FAILURE
    except BootstrapError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("interrupted")
        return EXIT_INTERRUPTED

    return _exit_status(result.exit_code)


if __name__ == "__main__":
    raise SystemExit(main())
