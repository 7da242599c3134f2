"""
Diagnostics for the config adapter: fetch, save, inspect or reset the remote config.

    dashkv-adapter get
    dashkv-adapter save conf.yml
    dashkv-adapter meta
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

from dashkv_core.logging_config import setup_structlog

from .adapter import ConfigAdapter
from .config import settings
from .exceptions import APIError

log = structlog.get_logger(__name__)


async def _run(args: argparse.Namespace, adapter: ConfigAdapter | None = None) -> int:
    adapter = adapter or ConfigAdapter(settings)
    adapter.set_debug(args.debug or settings.debug)
    try:
        if args.command == "get":
            sys.stdout.write(await adapter.load_config())
        elif args.command == "save":
            text = Path(args.file).read_text(encoding="utf-8")
            print(json.dumps(await adapter.save_config(text), indent=2))
        elif args.command == "meta":
            meta = await adapter.get_meta()
            if meta is None:
                return 1
            print(json.dumps(meta, indent=2))
        elif args.command == "reset":
            print(json.dumps(await adapter.reset_config(), indent=2))
        elif args.command == "health":
            print(json.dumps(await adapter.service.health(), indent=2))
    except APIError as e:
        log.error("Command failed", command=args.command, status_code=e.status_code, detail=e.detail)
        return 1
    finally:
        await adapter.aclose()
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Inspect and change the dashboard config stored in the config service.",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log every adapter step."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("get", help="Print the config the dashboard would load.")
    save_parser = subparsers.add_parser("save", help="Upload a YAML file as the config.")
    save_parser.add_argument("file", help="Path to the YAML file to upload.")
    subparsers.add_parser("meta", help="Print the stored config's metadata.")
    subparsers.add_parser("reset", help="Delete the stored config.")
    subparsers.add_parser("health", help="Print the config service health.")
    args = parser.parse_args()

    setup_structlog(
        json_logs=settings.json_logs,
        log_level="DEBUG" if args.debug else "INFO",
        service_name=settings.service_name,
    )
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
