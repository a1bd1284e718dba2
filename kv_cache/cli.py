from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from kv_cache.domain.errors import CacheError, CacheMiss
from kv_cache.domain.models import Item
from kv_cache.infrastructure.config import load_settings
from kv_cache.infrastructure.redis_store import RedisStoreClient
from kv_cache.main import build_cache

EXIT_OK = 0
EXIT_MISS = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kv-cache")
    parser.add_argument(
        "--redis-url",
        default=None,
        help="override CACHE_REDIS_URL (e.g. redis://localhost:6379/0)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="get a value and print it as json")
    get_parser.add_argument("key")

    set_parser = subparsers.add_parser("set", help="set a value")
    set_parser.add_argument("key")
    set_parser.add_argument("value", help="value as JSON text")
    set_parser.add_argument(
        "--ttl",
        type=float,
        default=0,
        help="ttl seconds (values below the minimum use the default ttl)",
    )
    set_parser.add_argument(
        "--string",
        action="store_true",
        help="store the value verbatim as a JSON string instead of parsing it",
    )

    subparsers.add_parser("ping", help="check that the store is reachable")

    return parser


def _parse_set_value(args: argparse.Namespace) -> object:
    if args.string:
        return args.value
    try:
        return json.loads(args.value)
    except ValueError as exc:
        raise ValueError(f"value is not valid JSON (use --string for plain text): {exc}") from exc


def run(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = load_settings()
        if args.redis_url:
            settings = settings.model_copy(update={"redis_url": args.redis_url})
        store = RedisStoreClient.from_settings(settings)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    cache = build_cache(settings, store)
    try:
        if args.command == "get":
            value = cache.get(args.key)
            print(json.dumps(value, ensure_ascii=False))
            return EXIT_OK

        if args.command == "set":
            value = _parse_set_value(args)
            cache.set(Item(key=args.key, object=value, expiration=args.ttl))
            print("OK")
            return EXIT_OK

        if args.command == "ping":
            if not store.ping():
                print("ERROR", file=sys.stderr)
                return EXIT_ERROR
            print("PONG")
            return EXIT_OK
    except CacheMiss:
        print(f"miss: {args.key}", file=sys.stderr)
        return EXIT_MISS
    except CacheError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        store.close()


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
