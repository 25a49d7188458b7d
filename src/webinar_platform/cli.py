"""Command-line interface for offline presentation import and administration."""

import argparse
import asyncio
import json
import shutil
import sys
import uuid
from pathlib import Path

import structlog

from webinar_platform import __version__
from webinar_platform.config import configure_logging, get_settings
from webinar_platform.errors import WebinarPlatformError
from webinar_platform.ingestion.analyzer import SlideAnalyzer
from webinar_platform.storage.audit import AuditLog
from webinar_platform.storage.json_store import initialize_storage
from webinar_platform.webinars.service import WebinarService

logger = structlog.get_logger(__name__)


def stage_upload(file_path: Path, uploads_dir: Path) -> str:
    """Copy a deck into the uploads directory unless it already lives there."""
    uploads_dir.mkdir(parents=True, exist_ok=True)
    target = uploads_dir / file_path.name
    if file_path.resolve() != target.resolve():
        shutil.copy2(file_path, target)
    return file_path.name


def cmd_analyze(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.no_filter:
        analysis = settings.analysis.model_copy(update={"filter_repetitive": False})
        settings = settings.model_copy(update={"analysis": analysis})

    file_path = Path(args.file)
    if not file_path.is_file():
        print(f"File not found: {file_path}", file=sys.stderr)
        return 1

    filename = stage_upload(file_path, settings.storage.uploads_dir)
    session_id = args.session_id or uuid.uuid4().hex
    analyzer = SlideAnalyzer(settings)

    slides = asyncio.run(analyzer.analyze_presentation(filename, args.webinar_id, session_id))
    analyzer.progress.delete(session_id)

    output = json.dumps([slide.to_dict() for slide in slides], indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Wrote {len(slides)} slides to {args.output}")
    else:
        print(output)
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    service = WebinarService(get_settings())
    path = service.render_webinar(args.webinar_id)
    print(f"Presentation written to {path}")
    return 0


def cmd_export_results(args: argparse.Namespace) -> int:
    service = WebinarService(get_settings())
    csv_text = service.export_results_csv()
    if args.output:
        Path(args.output).write_text(csv_text, encoding="utf-8")
        print(f"Results exported to {args.output}")
    else:
        sys.stdout.write(csv_text.lstrip("\ufeff") + "\n")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    audit = AuditLog(get_settings().storage.data_dir)
    for entry in audit.read(limit=args.limit):
        print(json.dumps(entry, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webinar-platform",
        description="Import slide decks and manage webinar data",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Extract slides from a PPTX or PDF deck")
    analyze.add_argument("file", help="Deck to analyze")
    analyze.add_argument("--webinar-id", required=True, help="Webinar receiving the extracted images")
    analyze.add_argument("--session-id", help="Progress session id (random by default)")
    analyze.add_argument(
        "--no-filter",
        action="store_true",
        help="Keep repeated headers, footers and logos",
    )
    analyze.add_argument("--output", help="Write slides JSON to this file instead of stdout")
    analyze.set_defaults(func=cmd_analyze)

    render = subparsers.add_parser("render", help="Regenerate a webinar's reveal.js presentation")
    render.add_argument("webinar_id", help="Webinar id")
    render.set_defaults(func=cmd_render)

    export = subparsers.add_parser("export-results", help="Export quiz results as CSV")
    export.add_argument("--output", help="CSV file to write (stdout by default)")
    export.set_defaults(func=cmd_export_results)

    audit = subparsers.add_parser("audit", help="Show recent audit log entries")
    audit.add_argument("--limit", type=int, default=100, help="Number of entries (default: 100)")
    audit.set_defaults(func=cmd_audit)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.logging)
    initialize_storage(settings.storage.data_dir)

    try:
        return args.func(args)
    except WebinarPlatformError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
