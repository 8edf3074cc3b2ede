"""Main entry point for the shopping list API."""

import argparse

import uvicorn

from shoplist.app import create_app
from shoplist.config import load_config_from_env


def main() -> None:
    """Run the FastAPI application using Uvicorn."""
    parser = argparse.ArgumentParser(
        description="Run the Shopping List API FastAPI application.",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment configuration file.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the FastAPI application on.",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to run the FastAPI application on.",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes to run.",
    )
    args = parser.parse_args()

    if args.workers > 1 and not load_config_from_env(args.env_file).has_shared_secret:
        # each worker would sign tokens with its own random key
        parser.error("JWT_SECRET must be set to run more than one worker")

    if args.reload or args.workers > 1:
        # uvicorn needs an import string to reload or fork workers
        uvicorn.run(
            "shoplist.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers,
            env_file=args.env_file,
        )
        return

    app = create_app(args.env_file)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
