"""CLI bootstrap entry point for infrachat."""

import argparse
import asyncio
import logging
import sys
import time

from .config import load_config
from .logging import build_run_log_path, log_event, setup_logging
from .repl import repl_loop

__all__ = ["main", "build_parser"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="infrachat",
        description="infrachat - terminal client for the infrastructure chat backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to JSON config file (optional; defaults apply if omitted)",
    )
    parser.add_argument(
        "-u",
        "--base-url",
        help="Backend base URL (overrides config file and INFRACHAT_BASE_URL)",
    )
    parser.add_argument(
        "-l",
        "--log",
        help="Path to log file (optional; defaults to a new file in logs_dir)",
    )
    return parser


def main() -> None:
    """Main entry point for infrachat CLI."""
    args = build_parser().parse_args()
    app_started = time.perf_counter()

    try:
        config = load_config(args.config, base_url=args.base_url)
        effective_log_path = args.log or build_run_log_path(config.logs_dir)
        setup_logging(effective_log_path)

        log_event(
            "app_start",
            level=logging.INFO,
            config_file=args.config,
            log_file=effective_log_path,
            base_url=config.base_url,
            timeout=config.timeout,
        )

        asyncio.run(repl_loop(config, log_file=effective_log_path))
        log_event(
            "app_stop",
            level=logging.INFO,
            reason="normal",
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )

    except KeyboardInterrupt:
        log_event(
            "app_stop",
            level=logging.INFO,
            reason="keyboard_interrupt",
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )
        print("\nInterrupted")
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}")
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="fatal_error",
            error_type=type(e).__name__,
            error=str(e),
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )
        logging.error("Fatal error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
