"""Development entrypoint for the hexfog HTTP API."""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from hexfog.api.app import create_app
from hexfog.config import get_settings


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve hexfog map sessions over HTTP")
    parser.add_argument("--host", default="127.0.0.1", help="Host interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="TCP port to listen on")
    parser.add_argument("--hex-size", type=float, help="Override HEXFOG_HEX_SIZE")
    parser.add_argument(
        "--local-player",
        help="Player whose view is mirrored onto tiles (overrides HEXFOG_LOCAL_PLAYER)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable autoreload (dev mode)",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()

    # Overrides go through the environment so reloaded workers see them too.
    if args.hex_size is not None:
        os.environ["HEXFOG_HEX_SIZE"] = str(args.hex_size)
    if args.local_player:
        os.environ["HEXFOG_LOCAL_PLAYER"] = args.local_player
    get_settings.cache_clear()
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.reload:
        uvicorn.run("hexfog.api.app:app", host=args.host, port=args.port, reload=True)
    else:
        uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
