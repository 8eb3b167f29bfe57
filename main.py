#!/usr/bin/env python3
"""
VirtualDoc backend server.

Runs the FastAPI app with uvicorn on the configured host and port.
"""

import argparse

import uvicorn

from virtualdoc.config import load_config


def main():
    config = load_config()

    parser = argparse.ArgumentParser(description="Run the VirtualDoc API server")
    parser.add_argument("--host", default=config.host, help=f"Bind address (default: {config.host})")
    parser.add_argument("--port", "-p", type=int, default=config.port, help=f"Port (default: {config.port})")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
