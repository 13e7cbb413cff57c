"""
Module: cli

Purpose:
    Command-line entry point (`worksheet-builder`).

    build  Read a problem list (JSON) and write the worksheet PDF
    view   Open a PDF in the preview window

Key Functions:
    - main(): Parse arguments and dispatch
    - load_problem_file(): JSON problem list -> records + worksheet info

Dependencies:
    - argparse (std)
    - builder.controller: generate_worksheet_sync
    - gui.viewer: Preview window (imported only when needed)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Tuple

from worksheet_toolkit import __version__
from worksheet_toolkit.builder import (
    BuilderConfig,
    GenerationProgress,
    GenerationTracker,
    WorksheetError,
    WorksheetInfo,
    generate_worksheet_sync,
)
from worksheet_toolkit.core.models import ProblemRecord

logger = logging.getLogger(__name__)


def load_problem_file(path: Path) -> Tuple[list[ProblemRecord], WorksheetInfo]:
    """
    Load a problem list.

    Format:
        {"title": ..., "author": ..., "subject": ..., "created_at": "2025-03-01",
         "problems": [{"id": ..., "image": ..., "answer_image": ...,
                       "answer_id": ..., "metadata": {...}}]}
    A bare list of problems is accepted too. Relative image paths are
    resolved against the file's directory.

    Raises:
        ValueError: If the file is not valid JSON or a problem is malformed
        OSError: If the file cannot be read
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"problems": data}
    if not isinstance(data, dict) or not isinstance(data.get("problems"), list):
        raise ValueError(f"{path}: expected an object with a 'problems' list")

    base_dir = Path(path).resolve().parent
    problems = [ProblemRecord.from_dict(entry, base_dir) for entry in data["problems"]]

    info = WorksheetInfo(
        title=str(data.get("title") or ""),
        author=str(data.get("author") or ""),
        subject=str(data.get("subject") or WorksheetInfo().subject),
        created_at=_parse_date(data.get("created_at")),
    )
    return problems, info


def _parse_date(value) -> datetime:
    if not isinstance(value, str) or not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable created_at {value!r}")
        return datetime.now()


def find_fonts(directory: Path) -> Tuple[Optional[Path], Optional[Path]]:
    """
    Pick a regular and a bold TrueType font from a directory.

    Files with "bold" in the name are bold candidates; the first other
    .ttf (alphabetically) is the regular font.
    """
    fonts = sorted(p for p in Path(directory).iterdir() if p.suffix.lower() == ".ttf")
    bold = next((p for p in fonts if "bold" in p.stem.lower()), None)
    regular = next((p for p in fonts if "bold" not in p.stem.lower()), None)
    if regular is None and fonts:
        logger.warning(f"No regular font in {directory}, fonts not registered")
    return regular, bold


def _print_progress(progress: GenerationProgress) -> None:
    logger.info(f"[{progress.percent:3d}%] {progress.message or progress.stage.value}")


def _cmd_build(args: argparse.Namespace) -> int:
    problems, info = load_problem_file(args.problems)
    info = WorksheetInfo(
        title=args.title if args.title is not None else info.title,
        author=args.author if args.author is not None else info.author,
        subject=args.subject if args.subject is not None else info.subject,
        created_at=info.created_at,
    )

    options = {}
    if args.proxy_url:
        options["proxy_url"] = args.proxy_url
    if args.fonts_dir:
        options["font_path"], options["bold_font_path"] = find_fonts(args.fonts_dir)
    config = BuilderConfig(**options)

    tracker = GenerationTracker()

    def generate() -> bytes:
        request = tracker.next_request(problems, info, include_answers=not args.no_answers)
        result = generate_worksheet_sync(request, config, on_progress=_print_progress)
        output = args.output or Path(result.filename)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(result.pdf_bytes)
        print(
            f"Wrote {output} ({result.page_count} pages: {result.problem_page_count} problem, "
            f"{result.answer_page_count} answer; {result.placeholder_count} images unavailable)"
        )
        return result.pdf_bytes

    if not args.preview:
        generate()
        return 0

    from worksheet_toolkit.gui.viewer import show_viewer

    try:
        pdf_bytes = generate()
    except WorksheetError as e:
        logger.error(str(e))
        return show_viewer(None, error=str(e), title=info.title, author=info.author, on_retry=generate)
    return show_viewer(pdf_bytes, title=info.title, author=info.author, on_retry=generate)


def _cmd_view(args: argparse.Namespace) -> int:
    from worksheet_toolkit.gui.viewer import show_viewer

    pdf_bytes = Path(args.pdf).read_bytes()
    return show_viewer(pdf_bytes, title=Path(args.pdf).stem)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worksheet-builder",
        description="Build two-column worksheet PDFs with an answer key",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Generate a worksheet PDF from a problem list")
    build.add_argument("problems", type=Path, help="JSON problem list")
    build.add_argument("-o", "--output", type=Path, help="Output PDF (default: {title}_{author}.pdf)")
    build.add_argument("--title", help="Worksheet title")
    build.add_argument("--author", help="Worksheet creator")
    build.add_argument("--subject", help="Subject heading")
    build.add_argument("--proxy-url", help="Image proxy endpoint (default: $WORKSHEET_IMAGE_PROXY_URL)")
    build.add_argument("--no-answers", action="store_true", help="Leave out the answer key")
    build.add_argument("--fonts-dir", type=Path, help="Directory with TrueType fonts")
    build.add_argument("--preview", action="store_true", help="Open the result in the viewer")
    build.set_defaults(func=_cmd_build)

    view = sub.add_parser("view", help="Open a PDF in the viewer")
    view.add_argument("pdf", type=Path)
    view.set_defaults(func=_cmd_view)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (WorksheetError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
