"""Run the API server: ``python -m docsearch.serving``."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from docsearch.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Document search API server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3001)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("docsearch.serving.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
