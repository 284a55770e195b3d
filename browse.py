#!/usr/bin/env python3
"""
Browse mappings from the command line, falling back to the local cache when offline.

Usage:
    python browse.py versions [--refresh]        # Versions per loader
    python browse.py namespaces                  # Namespaces and their versions
    python browse.py search yarn 1.20 Block      # Search mappings
    python browse.py search yarn 1.20 --no-fields --no-methods
    python browse.py source yarn 1.20 net.minecraft.block.Block
    python browse.py warm yarn [1.20]            # Cache all mappings of a version
    python browse.py clear                       # Drop every cached record

Flags:
    --offline    Treat the client as offline (serve from cache only where possible)
    --verbose    Debug logging
"""

import asyncio
import json
import sys

from app.container import container
from app.repositories import close_db
from linkie_client import LinkieClient, LinkieError, SearchParams, set_api_config
from settings import (
    API_BASE_URL,
    API_TIMEOUT,
    LOCAL_API_BASE_URL,
    MAX_CONCURRENT,
    SEARCH_LIMIT,
    USE_LOCAL_BACKEND,
)
from settings.logging import setup_logging

FLAGS = ("--offline", "--verbose", "--refresh", "--no-classes", "--no-fields", "--no-methods")


def _print(data) -> None:
    if hasattr(data, "model_dump"):
        data = data.model_dump()
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def run(command: str, args: list[str], flags: set[str]) -> int:
    """Execute one command; returns the process exit code."""
    async with LinkieClient(max_concurrent=MAX_CONCURRENT) as client:
        backend = container.backend(client)

        if command == "versions":
            _print(await (backend.refresh_versions() if "--refresh" in flags else backend.get_versions()))
        elif command == "namespaces":
            _print(await backend.get_namespaces())
        elif command == "search" and len(args) >= 2:
            params = SearchParams(
                namespace=args[0],
                version=args[1],
                query=args[2] if len(args) > 2 else "",
                allow_classes="--no-classes" not in flags,
                allow_fields="--no-fields" not in flags,
                allow_methods="--no-methods" not in flags,
                limit=SEARCH_LIMIT,
            )
            _print(await container.search_slot(client).search(params))
        elif command == "source" and len(args) == 3:
            _print(await client.source(*args))
        elif command == "warm" and args:
            if len(args) > 1:
                ok = await backend.warm_cache(args[0], args[1])
            else:
                ok = await backend.warm_namespace(args[0]) is not None
            return 0 if ok else 1
        elif command == "clear":
            await backend.clear_cache("all")
        else:
            print(__doc__)
            return 2
    return 0


def main():
    argv = sys.argv[1:]
    flags = {a for a in argv if a in FLAGS}
    args = [a for a in argv if a not in FLAGS]

    logger = setup_logging(level="DEBUG" if "--verbose" in flags else None)
    if not args:
        print(__doc__)
        sys.exit(2)

    set_api_config(LOCAL_API_BASE_URL if USE_LOCAL_BACKEND else API_BASE_URL, API_TIMEOUT)
    container.init(online="--offline" not in flags)

    try:
        code = asyncio.run(run(args[0], args[1:], flags))
    except LinkieError as e:
        logger.error("Failed to fetch {}: {}", args[0], e.message)
        code = 1
    finally:
        close_db()
    sys.exit(code)


if __name__ == "__main__":
    main()
