"""Command-line interface: transcode a document between wire formats.

WHY: The quickest way to see what a document looks like in another format
(or to move a config file from YAML to TOML) is a single command. The CLI
reads the document schema-less, as the backend's native tree, and writes
it back out through every requested backend.

HOW: Uses argparse to accept an input file, the input format (guessed
from the suffix when not given), the target formats and an output
directory. Every target is converted before anything is written, so a
failing format leaves no partial output behind. Status messages go to
stderr; output files are saved next to the source (or to --output-dir).

RULES:
- Positional argument: input document path
- --from: input format key (default: guessed from the file suffix)
- --to: comma-separated format keys (default: every format but the input's)
- Output naming: {stem}{ext}, numeric suffix for conflicts (config-2.json)
- --print writes to stdout instead of saving; binary output as hex
- Status output goes to stderr (not stdout)
- Any error → "Error: <message>" on stderr and exit code 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

from serde_hub import config
from serde_hub.backends import BACKENDS, get_backend
from serde_hub.backends.base import BaseBackend, Data
from serde_hub.core.api import from_file, to_string

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: The input and output may share a directory, and a previous run
    may have left files behind. Overwriting them would lose work.

    RULES:
    - First attempt: {stem}{suffix} (e.g. config.json)
    - Conflict: insert a counter before the extension (config-2.json)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Output file extension, with the dot (e.g. ".json").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, suffix)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(content: Data, stem: str, suffix: str, output_dir: Path) -> Path:
    """Write one converted document and return where it went.

    RULES:
    - str content written as text in config.FILE_ENCODING
    - bytes content written in binary mode
    """
    path = _resolve_output_path(stem, suffix, output_dir)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding=config.FILE_ENCODING)
    return path


def _print_output(backend: BaseBackend, content: Data) -> None:
    print("# {}".format(backend.name))
    if isinstance(content, bytes):
        print(content.hex())
    else:
        print(content, end="" if content.endswith("\n") else "\n")


def _target_keys(spec: Optional[str], input_key: str) -> List[str]:
    if not spec:
        return [key for key in BACKENDS if key != input_key]
    keys = [k.strip().lower() for k in spec.split(",") if k.strip()]
    for key in keys:
        if key not in BACKENDS:
            _fail("Unknown format '{}'. Available formats: {}".format(key, ", ".join(BACKENDS)))
    return keys


def _convert(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    if args.from_format:
        input_key = args.from_format.lower()
        if input_key not in BACKENDS:
            _fail("Unknown format '{}'. Available formats: {}".format(input_key, ", ".join(BACKENDS)))
    else:
        try:
            input_key = config.format_for_path(input_path)
        except ValueError as e:
            _fail(str(e))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not args.print and not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    target_keys = _target_keys(args.to, input_key)

    _status("Reading {} as {}...".format(input_path.name, input_key))
    document = from_file(input_key, Any, input_path)
    if not document:
        _fail(document.error)

    converted: List[Tuple[BaseBackend, Data]] = []
    for key in target_keys:
        backend = get_backend(key)
        result = to_string(backend, document.value, Any)
        if not result:
            _fail("{}: {}".format(key, result.error))
        logger.debug("Converted %s to %s", input_path.name, key)
        converted.append((backend, result.value))

    if args.print:
        for backend, content in converted:
            _print_output(backend, content)
        return

    saved_files: List[Path] = []
    for backend, content in converted:
        path = _save_output(content, input_path.stem, backend.extensions[0], output_dir)
        saved_files.append(path)
        _status("  Saved: {}".format(path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without converting anything.
    """
    parser = argparse.ArgumentParser(
        prog="serde_hub",
        description="Convert a structured document (JSON, CBOR, MessagePack, "
                    "UBJSON, TOML, YAML) into other formats.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the document to convert.",
    )

    parser.add_argument(
        "--from",
        dest="from_format",
        default=None,
        help="Input format. Default: guessed from the file extension.",
    )

    parser.add_argument(
        "--to",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all except the input format.".format(", ".join(BACKENDS)),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--print",
        action="store_true",
        help="Write the converted documents to stdout instead of saving them.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    _convert(args)


if __name__ == "__main__":
    main()
