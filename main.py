"""Atomic Fizz Caps — API launcher."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="Atomic Fizz Caps API server")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=int(PORT))
    parser.add_argument("--store-url", default=None,
                        help="State store URL: memory:// or redis://host:6379/0 (default: $STORE_URL)")
    parser.add_argument("--locations", type=Path, default=None,
                        help="JSON catalog replacing the built-in spots (default: $LOCATIONS_PATH)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # backend.config reads these at import time, inside the uvicorn process
    if args.store_url:
        os.environ["STORE_URL"] = args.store_url
    if args.locations:
        os.environ["LOCATIONS_PATH"] = str(args.locations.resolve())

    print(f"Starting API on http://localhost:{args.port} ...")
    uvicorn.run("backend.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
