"""
filebox command line interface.

Pack files into containers, inspect their headers and unpack them again.

Usage::

    python -m filebox pack photo.png photo.fbx --mime-type image/png --api-key-id 1
    python -m filebox inspect photo.fbx
    python -m filebox unpack photo.fbx restored.png
    python -m filebox unpack photo.fbx payload.gz --raw
    python -m filebox name 12

Commands:
    pack      Wrap SOURCE into a container at DEST
    unpack    Write the payload of container SOURCE to DEST
    inspect   Print the header of a container as JSON
    name      Print a random human-friendly file name

Environment:
    FILEBOX_COMPRESSION_LEVEL  gzip level 0-9 (default 6)
    FILEBOX_COPY_BUFFER_SIZE   copy chunk size in bytes (default 65536)
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
import os
import sys
import tempfile
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from filebox.config import ContainerConfig
from filebox.container import FileHeader, ReadMode, open_container, write_container
from filebox.names import generate_random_name
from filebox.types import ContainerError

DEFAULT_MIME_TYPE = "application/octet-stream"
"""MIME type recorded when none is given and none can be guessed."""

DEFAULT_NAME_LENGTH = 8
"""Length of names printed by the `name` command."""

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
"""Layout of every log line the CLI writes to stderr."""


class SeverityColorFormatter(logging.Formatter):
    """Colors whole log lines by severity. INFO lines stay plain."""

    RESET = "\x1b[0m"

    COLORS = {
        logging.DEBUG: "\x1b[2m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[1;31m",
    }

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.COLORS.get(record.levelno)
        return line if color is None else f"{color}{line}{self.RESET}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Send log records to stderr, colored when stderr is a terminal."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if no_color or not handler.stream.isatty():
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler.setFormatter(SeverityColorFormatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def parse_upload_date(value: str) -> datetime:
    """Parse an ISO 8601 timestamp. Naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 timestamp: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def pack(
    source: Path,
    destination: Path,
    *,
    mime_type: str | None,
    original_name: str | None,
    api_key_id: int,
    upload_date: datetime | None,
    config: ContainerConfig,
) -> int:
    """
    Write `source` into a container at `destination`.

    The container is written to a temporary file next to `destination` and
    renamed into place only when complete.

    Returns:
        Bytes written.
    """
    if mime_type is None:
        mime_type = mimetypes.guess_type(source.name)[0] or DEFAULT_MIME_TYPE
    header = FileHeader(
        upload_date=upload_date or datetime.now(timezone.utc),
        api_key_id=api_key_id,
        mime_type=mime_type,
        original_name=original_name if original_name is not None else source.name,
    )

    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=f".{destination.name}.")
    try:
        with os.fdopen(fd, "wb") as out, source.open("rb") as src:
            written = write_container(out, header, src, config=config)
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Packed %s -> %s (%d bytes)", source, destination, written)
    return written


def unpack(source: Path, destination: Path, *, raw: bool, config: ContainerConfig) -> int:
    """
    Write the payload of the container at `source` to `destination`.

    Returns:
        Bytes written.
    """
    handle = open_container(source, config=config)
    try:
        if not raw:
            handle.set_mode(ReadMode.DECOMPRESSED)
        with destination.open("wb") as out:
            written = handle.write_to(out)
    finally:
        handle.close()

    logger.info("Unpacked %s -> %s (%d bytes, %s)", source, destination, written, handle.mode.value)
    return written


def inspect(source: Path, *, config: ContainerConfig) -> str:
    """Return the header of the container at `source` as JSON."""
    with open_container(source, config=config) as handle:
        return handle.header.model_dump_json(by_alias=True, indent=2)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        prog="filebox",
        description="Store uploaded files with their metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    pack_parser = commands.add_parser("pack", help="Wrap a file into a container")
    pack_parser.add_argument("source", type=Path, help="File to store")
    pack_parser.add_argument("destination", type=Path, help="Container to write")
    pack_parser.add_argument(
        "--mime-type",
        default=None,
        help="MIME type to record (default: guessed from the file name)",
    )
    pack_parser.add_argument(
        "--name",
        dest="original_name",
        default=None,
        help="Original name to record (default: the source file name)",
    )
    pack_parser.add_argument(
        "--api-key-id",
        type=int,
        default=0,
        help="Index of the API key used for the upload, 0-255 (default: 0)",
    )
    pack_parser.add_argument(
        "--upload-date",
        type=parse_upload_date,
        default=None,
        help="Upload time as ISO 8601 (default: now)",
    )

    unpack_parser = commands.add_parser("unpack", help="Extract the payload of a container")
    unpack_parser.add_argument("source", type=Path, help="Container to read")
    unpack_parser.add_argument("destination", type=Path, help="File to write")
    unpack_parser.add_argument(
        "--raw",
        action="store_true",
        help="Write the compressed payload as stored instead of decompressing it",
    )

    inspect_parser = commands.add_parser("inspect", help="Print a container header as JSON")
    inspect_parser.add_argument("source", type=Path, help="Container to read")

    name_parser = commands.add_parser("name", help="Print a random file name")
    name_parser.add_argument(
        "length",
        type=int,
        nargs="?",
        default=DEFAULT_NAME_LENGTH,
        help=f"Number of characters (default: {DEFAULT_NAME_LENGTH})",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.no_color)

    try:
        config = ContainerConfig.from_env()
        match args.command:
            case "pack":
                pack(
                    args.source,
                    args.destination,
                    mime_type=args.mime_type,
                    original_name=args.original_name,
                    api_key_id=args.api_key_id,
                    upload_date=args.upload_date,
                    config=config,
                )
            case "unpack":
                unpack(args.source, args.destination, raw=args.raw, config=config)
            case "inspect":
                print(inspect(args.source, config=config))
            case "name":
                print(generate_random_name(args.length))
    except (ContainerError, OSError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
