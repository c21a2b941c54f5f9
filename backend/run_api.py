#!/usr/bin/env python
"""
Run the UW Go Rides API server.

Usage:
    uv run python run_api.py
    uv run python run_api.py --reload          # Development mode
    uv run python run_api.py --memory          # In-memory backends, no Supabase
"""

import argparse
import os

import uvicorn

from shared.config import get_settings


def main():
    parser = argparse.ArgumentParser(description="Run UW Go Rides API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use in-memory auth and storage instead of Supabase",
    )
    args = parser.parse_args()

    if args.memory:
        # Read by the settings loader in this process and any reload workers.
        os.environ["GORIDES_STORAGE_BACKEND"] = "memory"
        get_settings.cache_clear()

    settings = get_settings()

    uvicorn.run(
        "api:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
