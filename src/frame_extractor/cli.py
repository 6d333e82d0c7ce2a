"""CLI interface for frame-extractor.

Usage:
    # Extract framed messages (stdin: hex or base64, stdout: JSON result)
    echo '01 48 45 4C 4C 4F 03' | \\
        python -m frame_extractor.cli extract --delimiter SOH/ETX

    # Every method at once, with filter verdicts per sequence
    echo 'AUhFTExPAw==' | \\
        python -m frame_extractor.cli extract --encoding base64 \\
            --method hybridMode --screen --ban spam

    # Filter / score plain text
    echo 'the the the the the the' | python -m frame_extractor.cli filter
    echo 'the the the the the the' | python -m frame_extractor.cli score

    # Catalogs
    python -m frame_extractor.cli delimiters
    python -m frame_extractor.cli methods
    python -m frame_extractor.cli controls
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import Any

from .config import create_pipeline, load_config, load_from_yaml
from .delimiters import CONTROL_CHARACTERS, STANDARD_DELIMITERS
from .pipeline import ExtractionPipeline
from .types import ExtractionError, ExtractionMethod

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = os.environ.get("FRAME_EXTRACTOR_CONFIG", "")


def _emit(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def _base_config(args: argparse.Namespace) -> dict[str, Any]:
    if args.config:
        return load_from_yaml(args.config)
    return load_config({})


def _build_pipeline(args: argparse.Namespace) -> ExtractionPipeline:
    """Config file first, then command-line overrides."""
    cfg = _base_config(args)
    if getattr(args, "delimiter", None):
        cfg["delimiter"] = args.delimiter
    if getattr(args, "start", None) is not None and getattr(args, "end", None) is not None:
        cfg["delimiter"] = None
        cfg["custom_start"], cfg["custom_end"] = args.start, args.end
    if getattr(args, "min_length", None) is not None:
        cfg["min_length"] = args.min_length
    if getattr(args, "max_length", None) is not None:
        cfg["max_length"] = args.max_length
    if getattr(args, "ascii_only", False):
        cfg["ascii_only"] = True
    if getattr(args, "method", None):
        cfg["methods"] = args.method
    if args.ban:
        cfg["ban_list"] = cfg["ban_list"] + [p for p in args.ban.split(",") if p]
    if args.no_ban:
        cfg["ban_enabled"] = False
    if args.no_repetition:
        cfg["repetition_enabled"] = False
    if args.threshold is not None:
        cfg["threshold"] = args.threshold

    return create_pipeline(cfg)


def cmd_extract(args: argparse.Namespace) -> None:
    """Extract messages from hex/base64 on stdin."""
    pipeline = _build_pipeline(args)
    result = pipeline.extract_encoded(sys.stdin.read(), args.encoding)

    output = result.to_dict()
    if args.screen:
        output["filter"] = {seq: v.to_dict() for seq, v in pipeline.screen(result).items()}
    _emit(output)


def cmd_filter(args: argparse.Namespace) -> None:
    """Ban/repetition verdict for text on stdin."""
    pipeline = _build_pipeline(args)
    _emit(pipeline.check(sys.stdin.read()).to_dict())


def cmd_score(args: argparse.Namespace) -> None:
    """Repetition score for text on stdin."""
    pipeline = _build_pipeline(args)
    score = pipeline.filter_engine.score(sys.stdin.read())
    _emit({"score": score, "percentage": int(score * 100)})


def cmd_delimiters(args: argparse.Namespace) -> None:
    _emit([d.to_dict() for d in STANDARD_DELIMITERS])


def cmd_methods(args: argparse.Namespace) -> None:
    _emit([
        {"id": m.value, "displayName": m.display_name, "description": m.description}
        for m in ExtractionMethod
    ])


def cmd_controls(args: argparse.Namespace) -> None:
    _emit([
        {
            "code": c.code,
            "abbreviation": c.abbreviation,
            "fullName": c.full_name,
            "description": c.description,
            "display": c.display,
        }
        for c in CONTROL_CHARACTERS
    ])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frame_extractor",
        description="Extract delimiter-framed messages from raw byte streams",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--ban", default="", help="Comma-separated phrases to ban")
    parser.add_argument("--no-ban", action="store_true", help="Disable the ban check")
    parser.add_argument("--no-repetition", action="store_true", help="Disable repetition scoring")
    parser.add_argument("--threshold", type=float, default=None, help="Repetition threshold")

    sub = parser.add_subparsers(dest="command", required=True)

    ext = sub.add_parser("extract", help="Extract messages (hex/base64 stdin)")
    ext.add_argument("--encoding", choices=("hex", "base64"), default="hex")
    ext.add_argument("--delimiter", help="Preset name, e.g. SOH/ETX")
    ext.add_argument("--start", help="Custom start byte, e.g. 0x01")
    ext.add_argument("--end", help="Custom end byte, e.g. 0x03")
    ext.add_argument("--min-length", type=int, default=None)
    ext.add_argument("--max-length", type=int, default=None)
    ext.add_argument("--ascii-only", action="store_true")
    ext.add_argument(
        "--method", action="append",
        choices=[m.value for m in ExtractionMethod],
        help="Extraction method (repeatable; hybridMode = all)",
    )
    ext.add_argument("--screen", action="store_true", help="Attach filter verdicts")

    sub.add_parser("filter", help="Filter plain text (stdin)")
    sub.add_parser("score", help="Repetition score of plain text (stdin)")
    sub.add_parser("delimiters", help="List delimiter presets")
    sub.add_parser("methods", help="List extraction methods")
    sub.add_parser("controls", help="List ASCII control characters")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger.debug("running %s", args.command)

    cmds = {
        "extract": cmd_extract,
        "filter": cmd_filter,
        "score": cmd_score,
        "delimiters": cmd_delimiters,
        "methods": cmd_methods,
        "controls": cmd_controls,
    }
    try:
        cmds[args.command](args)
    except (ExtractionError, ValueError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
