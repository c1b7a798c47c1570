"""
Command-line interface for trackpick.

Usage:
  trackpick movie.mkv                     # Show selected streams
  trackpick -c rules.yaml movie.mkv       # Use a specific rule file
  trackpick --command movie.mkv           # Print the ffmpeg encode command
  trackpick -o report.json *.mkv          # JSON export
  trackpick --status                      # Check ffprobe/ffmpeg
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys

from trackpick._version import __version__
from trackpick.command import build_encode_command
from trackpick.config import load_config
from trackpick.exceptions import TrackpickError
from trackpick.formatters import format_default, format_json_list, format_quiet
from trackpick.ingest import ingest_file
from trackpick.utils import print_dependency_status

logger = logging.getLogger("trackpick")


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for trackpick CLI."""
    parser = argparse.ArgumentParser(
        prog="trackpick",
        description="Pick the video, audio and subtitle streams to keep from a media file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Selection rules come from the config file (-c, ~/.trackpick/config.yaml or
.trackpick.yaml). Selected bitmap subtitles (PGS, VobSub) are OCR'd into
SRT files written to --caption-dir (default: next to the media file).

Examples:
  trackpick movie.mkv
  trackpick -c rules.yaml --caption-dir /tmp/captions movie.mkv
  trackpick --command movie.mkv
  trackpick -q -o report.json *.mkv
        """,
    )
    parser.add_argument("files", nargs="*", help="Media file(s) to process")
    parser.add_argument("-c", "--config", help="Path to a YAML config file")
    parser.add_argument("--caption-dir", help="Directory for generated SRT files")
    parser.add_argument("-o", "--output", help="Save selections to JSON file")
    parser.add_argument(
        "--command",
        action="store_true",
        help="Print the ffmpeg encode command instead of the stream listing",
    )
    parser.add_argument("--status", action="store_true", help="Show ffprobe/ffmpeg availability")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="One-line summary, warnings only")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if args.status:
        print_dependency_status()
        return 0

    if not args.files:
        parser.error("the following arguments are required: files")

    try:
        config = load_config(args.config)
    except (TrackpickError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    selections = []
    errors = 0

    for file_path in args.files:
        try:
            selection = ingest_file(file_path, config=config, caption_dir=args.caption_dir)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            errors += 1
            continue
        except TrackpickError as e:
            logger.debug("Ingestion of %s failed", file_path, exc_info=True)
            print(f"Error processing {file_path}: {e}", file=sys.stderr)
            errors += 1
            continue

        selections.append(selection)
        if args.command:
            cmd = build_encode_command(selection, config.output, ffmpeg=config.tools.ffmpeg)
            print(shlex.join(cmd))
        elif args.quiet:
            print(format_quiet(selection))
        else:
            print(format_default(selection))
            print()

    # JSON export
    if args.output and selections:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(format_json_list(selections))
        print(f"Report saved to: {args.output}")

    return 1 if errors > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
