import argparse
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

from .core import amend_file, grab_album
from .state import SessionFactory
from .types import AMEND_PREFIX, IMAGE_EXTENSION, TransportError, ValidationError
from .ui import TerminalUI
from .utils import ensure_album_url, ensure_source_file, write_lines

T = TypeVar("T")

MODES = ("fetch", "amend")
MODE_CHOICES = {"1": "fetch", "2": "amend", "fetch": "fetch", "amend": "amend"}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect direct image URLs from an imgur album, or amend a URL list file.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="",
        help="Album URL, or text file path (1 URL per line) to amend. Prompts when omitted.",
    )
    parser.add_argument("--mode", choices=MODES, help="Force fetch or amend mode")
    parser.add_argument(
        "--suffix",
        default="",
        help="Suffix appended to every fetched URL, e.g. .png (required on every result when set)",
    )
    parser.add_argument("-o", "--output", default="", help="Also save fetched URLs to this file")
    parser.add_argument("--timeout", type=float, default=30, help="Request timeout in seconds")
    parser.add_argument("--retries", type=int, default=0, help="Retry count for network errors")
    parser.add_argument(
        "--full-page",
        action="store_true",
        help='Parse the whole page instead of only lines containing "hash"',
    )
    parser.add_argument(
        "--amend-suffix",
        default=IMAGE_EXTENSION,
        help=f"Suffix appended to each line in amend mode (default: {IMAGE_EXTENSION})",
    )
    parser.add_argument(
        "--amend-prefix",
        default=AMEND_PREFIX,
        help=f"Prefix of the amended file name (default: {AMEND_PREFIX})",
    )
    parser.add_argument("--no-pretty", action="store_true", help="Disable colored output")
    return parser.parse_args(argv)


def parse_mode(value: str) -> str:
    mode = MODE_CHOICES.get(value.strip().lower())
    if mode is None:
        raise ValidationError(f"Unknown mode: {value.strip()!r}")
    return mode


def ask_until_valid(ui: TerminalUI, question: str, check: Callable[[str], T]) -> T:
    while True:
        raw = ui.prompt(question)
        try:
            return check(raw)
        except ValidationError as exc:
            ui.warn(f"{exc}, please try again")


def resolve_target(args: argparse.Namespace, ui: TerminalUI) -> tuple[str, object]:
    if args.input:
        mode = args.mode
        if mode is None:
            mode = "amend" if Path(args.input).is_file() else "fetch"
        if mode == "amend":
            return mode, ensure_source_file(args.input)
        return mode, ensure_album_url(args.input)

    mode = args.mode or ask_until_valid(ui, "Mode: 1) fetch album links  2) amend URL file:", parse_mode)
    if mode == "amend":
        return mode, ask_until_valid(ui, "Text file of image URLs to amend:", ensure_source_file)
    return mode, ask_until_valid(ui, "imgur album link to obtain image URLs from:", ensure_album_url)


def run_fetch(args: argparse.Namespace, ui: TerminalUI, album_url: str) -> int:
    sessions = SessionFactory()
    ui.info("Fetching links...")
    try:
        result = grab_album(
            session=sessions.get(),
            album_url=album_url,
            suffix=args.suffix,
            timeout=args.timeout,
            retries=args.retries,
            hash_lines_only=not args.full_page,
        )
    except TransportError as exc:
        ui.error(f"Unable to open URL: {exc}")
        return 1
    finally:
        sessions.close()

    for url in result.urls:
        ui.emit(url)
    if not result.urls:
        ui.warn("No image links found; the album may be empty, private, or the page layout changed")
    ui.info(f"Found {len(result.urls)} image link(s) in {result.elapsed_ms} ms")

    if args.output:
        output_path = Path(args.output)
        try:
            count = write_lines(output_path, result.urls)
        except OSError as exc:
            ui.error(f"Cannot write {output_path}: {exc}")
            return 1
        ui.ok(f"Saved {count} link(s) to {output_path}")
    return 0


def run_amend(args: argparse.Namespace, ui: TerminalUI, source: Path) -> int:
    try:
        result = amend_file(source, suffix=args.amend_suffix, prefix=args.amend_prefix)
    except ValidationError as exc:
        ui.error(str(exc))
        return 2
    except OSError as exc:
        ui.error(f"Cannot amend {source}: {exc}")
        return 1
    ui.ok(f"Wrote {result.count} line(s) to {result.output_path}")
    return 0


def main(argv: Optional[Sequence[str]] = None, ui: Optional[TerminalUI] = None) -> int:
    args = parse_args(argv)
    args.retries = max(0, args.retries)
    args.timeout = max(1.0, args.timeout)
    if ui is None:
        ui = TerminalUI(pretty=not args.no_pretty)

    try:
        mode, target = resolve_target(args, ui)
    except ValidationError as exc:
        ui.error(str(exc))
        return 2
    except EOFError:
        ui.error("No input given")
        return 2

    if mode == "amend":
        return run_amend(args, ui, target)
    return run_fetch(args, ui, target)
