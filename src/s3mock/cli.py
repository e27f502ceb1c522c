"""s3mock CLI - inspect and edit a filesystem bucket from the shell.

Usage:
    python -m s3mock [--root-dir DIR] BUCKET put KEY [--file PATH | --data TEXT]
                     [--content-type TYPE] [--if-match ETAG]
    python -m s3mock [--root-dir DIR] BUCKET get KEY [--if-match ETAG]
    python -m s3mock [--root-dir DIR] BUCKET head KEY
    python -m s3mock [--root-dir DIR] BUCKET rm KEY [--if-match ETAG]
    python -m s3mock [--root-dir DIR] BUCKET ls [PREFIX]

`put` creates the key unless --if-match is given, in which case it replaces
the object only when the stored etag matches. Without --file or --data the
body is read from stdin.

Exit codes:
    0: Success
    1: Storage error (key exists, stale etag, not found, invalid key, I/O)
    2: Usage error
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from s3mock.observability.tracing import configure_tracing
from s3mock.storage.errors import ObjectStorageError
from s3mock.storage.filesystem_store import FilesystemObjectStore, create_s3_store
from s3mock.storage.models import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)


def _output_json(data: Any) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _error_result(error: ObjectStorageError) -> dict[str, Any]:
    return {"error": {"code": error.code, "message": error.message}}


def _read_body(args: argparse.Namespace) -> bytes:
    if args.file is not None:
        return Path(args.file).read_bytes()
    if args.data is not None:
        return args.data.encode("utf-8")
    return sys.stdin.buffer.read()


async def cmd_put(store: FilesystemObjectStore, args: argparse.Namespace) -> int:
    body = _read_body(args)
    if args.if_match is None:
        response = await store.create_object(args.key, body, args.content_type)
    else:
        response = await store.put_object_if_match(
            args.key, body, args.if_match, args.content_type
        )
    _output_json(
        {"key": args.key, "etag": response.etag, "content_type": response.content_type}
    )
    return 0


async def cmd_get(store: FilesystemObjectStore, args: argparse.Namespace) -> int:
    if args.if_match is None:
        response = await store.get_object(args.key)
    else:
        response = await store.get_object_if_match(args.key, args.if_match)
    sys.stdout.flush()
    sys.stdout.buffer.write(response.as_bytes())
    sys.stdout.buffer.flush()
    return 0


async def cmd_head(store: FilesystemObjectStore, args: argparse.Namespace) -> int:
    response = await store.get_object(args.key)
    _output_json(
        {
            "content_type": response.content_type,
            "etag": response.etag,
            "key": args.key,
            "size": response.size,
        }
    )
    return 0


async def cmd_rm(store: FilesystemObjectStore, args: argparse.Namespace) -> int:
    if args.if_match is None:
        await store.delete_object(args.key)
    else:
        await store.delete_object_if_match(args.key, args.if_match)
    _output_json({"deleted": True, "key": args.key})
    return 0


async def cmd_ls(store: FilesystemObjectStore, args: argparse.Namespace) -> int:
    entries = []
    async for batch in store.list(args.prefix):
        entries.extend(batch)
    entries.sort(key=lambda entry: entry.key)
    _output_json([entry.to_dict() for entry in entries])
    return 0


COMMAND_DISPATCH = {
    "put": cmd_put,
    "get": cmd_get,
    "head": cmd_head,
    "rm": cmd_rm,
    "ls": cmd_ls,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="s3mock",
        description="S3-style object store on the local file system",
    )
    parser.add_argument(
        "--root-dir",
        metavar="DIR",
        help="Folder holding bucket directories (default: $S3MOCK_ROOT_DIR or ./.s3StoreMock)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr (default: WARNING)",
    )
    parser.add_argument("bucket", help="Bucket name")

    subparsers = parser.add_subparsers(dest="command", required=True)

    put_parser = subparsers.add_parser("put", help="Create or conditionally replace an object")
    put_parser.add_argument("key", help="Object key")
    source = put_parser.add_mutually_exclusive_group()
    source.add_argument("--file", metavar="PATH", help="Read the body from a file")
    source.add_argument("--data", metavar="TEXT", help="Use TEXT (UTF-8) as the body")
    put_parser.add_argument(
        "--content-type",
        default=DEFAULT_CONTENT_TYPE,
        help=f"Content type to record (default: {DEFAULT_CONTENT_TYPE})",
    )
    put_parser.add_argument(
        "--if-match",
        metavar="ETAG",
        help="Replace only if the stored etag equals ETAG",
    )

    get_parser = subparsers.add_parser("get", help="Write an object's body to stdout")
    get_parser.add_argument("key", help="Object key")
    get_parser.add_argument(
        "--if-match",
        metavar="ETAG",
        help="Read only if the stored etag equals ETAG",
    )

    head_parser = subparsers.add_parser("head", help="Show an object's etag, type and size")
    head_parser.add_argument("key", help="Object key")

    rm_parser = subparsers.add_parser("rm", help="Delete an object")
    rm_parser.add_argument("key", help="Object key")
    rm_parser.add_argument(
        "--if-match",
        metavar="ETAG",
        help="Delete only if the stored etag equals ETAG",
    )

    ls_parser = subparsers.add_parser("ls", help="List objects under a prefix")
    ls_parser.add_argument("prefix", nargs="?", default="", help="Key prefix (directory)")

    return parser


async def _run(args: argparse.Namespace) -> int:
    store = create_s3_store(args.bucket, root_dir=args.root_dir)
    return await COMMAND_DISPATCH[args.command](store, args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Storage error
        2: Usage error (raised by argparse as SystemExit)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    configure_tracing()

    try:
        return asyncio.run(_run(args))
    except ObjectStorageError as e:
        logger.debug("Command %s failed: %s", args.command, e)
        _output_json(_error_result(e))
        return 1
    except OSError as e:
        # Local input file for `put --file` could not be read
        _output_json({"error": {"code": "InputError", "message": str(e)}})
        return 1


if __name__ == "__main__":
    sys.exit(main())
