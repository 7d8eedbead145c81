#!/usr/bin/env python3
"""
UI Diff Inspector
Command line entry point: pixel diff two screenshots, extract a live
element's styles, or compare style snapshots.
"""

import argparse
import functools
import json
import logging
import sys
from pathlib import Path

from comparator.report_builder import ReportBuilder
from comparator.style_comparator import StyleComparator
from core.config import load_settings
from core.errors import UIDiffError
from core.style_extractor import ElementStyleExtractor
from core.style_snapshot import StyleSnapshot
from core.visual_diff import VisualDiff
from utils.file_utils import read_json_file
from utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def run_diff(args, settings) -> int:
    visual_diff = VisualDiff(target_width=args.width or settings.target_width)
    threshold = settings.threshold if args.threshold is None else args.threshold
    comparison = visual_diff.compare(Path(args.design).read_bytes(), Path(args.actual).read_bytes(), threshold)
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(comparison.diff.image.to_png_bytes())
    print(ReportBuilder().diff_summary(comparison.diff, threshold))
    print(f"Diff image written to {out}")
    return 0


def run_extract(args, settings) -> int:
    from visual.playwright_driver import PlaywrightDriver

    extractor = ElementStyleExtractor(
        functools.partial(PlaywrightDriver, viewport=settings.viewport),
        output_dir=Path(args.output_dir) if args.output_dir else settings.output_dir,
        screenshot_dir=Path(args.screenshot_dir) if args.screenshot_dir else None,
        navigation_timeout_ms=settings.navigation_timeout_ms,
        selector_timeout_ms=settings.selector_timeout_ms,
    )
    result = extractor.extract(args.url, args.selector)
    print(json.dumps(result.snapshot.to_dict(), indent=2, sort_keys=True))
    print(f"Styles saved to {result.snapshot_path}", file=sys.stderr)
    if result.screenshot_path is not None:
        print(f"Screenshot saved to {result.screenshot_path}", file=sys.stderr)
    return 0


def run_compare_styles(args, settings) -> int:
    expected = read_json_file(Path(args.expected))
    actual = StyleSnapshot.from_dict(read_json_file(Path(args.actual)))
    mismatches = StyleComparator().compare(expected, actual)
    print(ReportBuilder().style_report(mismatches))
    return 1 if mismatches else 0


def run_serve(args, settings) -> int:
    from web.app import create_app

    create_app(settings).run(host=args.host, port=args.port or settings.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compare design mock-ups against live UI.")
    sub = parser.add_subparsers(dest='command', required=True)

    diff = sub.add_parser('diff', help='pixel diff two screenshots')
    diff.add_argument('design')
    diff.add_argument('actual')
    diff.add_argument('--out', default='diff.png')
    diff.add_argument('--width', type=int)
    diff.add_argument('--threshold', type=float)
    diff.set_defaults(func=run_diff)

    extract = sub.add_parser('extract', help='extract computed styles of a live element')
    extract.add_argument('url')
    extract.add_argument('selector')
    extract.add_argument('--output-dir')
    extract.add_argument('--screenshot-dir', help='also keep the element screenshot in this directory')
    extract.set_defaults(func=run_extract)

    compare = sub.add_parser('compare-styles', help='compare expected style JSON against an extracted snapshot file')
    compare.add_argument('expected')
    compare.add_argument('actual')
    compare.set_defaults(func=run_compare_styles)

    serve = sub.add_parser('serve', help='run the HTTP API')
    serve.add_argument('--host', default='0.0.0.0')
    serve.add_argument('--port', type=int)
    serve.set_defaults(func=run_serve)
    return parser


def main(argv=None) -> int:
    """Main execution function."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except (UIDiffError, OSError, ValueError) as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
