"""CLI entry point: python -m server serve | timing-report"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from lib.clip_validator import batch_validate_clips
from lib.settings import get_settings
from lib.store import StoreError, build_store


def _serve(args):
    import uvicorn

    uvicorn.run("server.app:app", host=args.host, port=args.port, reload=args.reload)


def _timing_report(args):
    store = build_store(get_settings())
    try:
        clips = store.all_clips(args.limit)
    except StoreError as e:
        print(f"Error: could not read clips ({e.kind.value}): {e}")
        sys.exit(1)

    report = batch_validate_clips(clips)
    print(json.dumps(report.summary(), indent=2))
    for item in report.flagged_clips:
        v = item.validation
        print(f"\n[{v.severity}] {item.clip.id} {item.clip.episode} {item.clip.title_short}")
        for issue in v.issues:
            print(f"  - {issue}")
        print(f"  -> {v.suggested_action}")


def main():
    parser = argparse.ArgumentParser(description="Testimony Library API")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.set_defaults(func=_serve)

    report = sub.add_parser("timing-report", help="Flag clips with suspicious start/end times")
    report.add_argument("--limit", type=int, default=1000, help="Max clips to inspect")
    report.set_defaults(func=_timing_report)

    args = parser.parse_args()

    # Configure logging
    level = logging.DEBUG if args.verbose else getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    args.func(args)


if __name__ == "__main__":
    main()
