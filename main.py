#!/usr/bin/env python3
"""
Entry point for the repetition-counting API.

Serves api.app:app with uvicorn; session defaults come from REPTRACK_* environment variables.
"""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(
        level=os.getenv("REPTRACK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "api.app:app",
        host=os.getenv("REPTRACK_HOST", "127.0.0.1"),
        port=int(os.getenv("REPTRACK_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
