import re
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from .types import ALBUM_PREFIX, IMAGE_EXTENSION, IMGUR_PREFIX, LinkKind, ValidationError


ALBUM_FORMAT = re.compile(re.escape(ALBUM_PREFIX) + r"\S+")


def image_format(extension: str, require_extension: bool) -> "re.Pattern[str]":
    pattern = re.escape(IMGUR_PREFIX) + r"[a-zA-Z0-9]+"
    if extension:
        ext = re.escape(extension)
        pattern += ext if require_extension else f"(?:{ext})?"
    return re.compile(pattern)


def is_link(
    url: str,
    kind: LinkKind,
    extension: str = IMAGE_EXTENSION,
    require_extension: bool = False,
) -> bool:
    """Check ``url`` against the album or single-image link shape."""
    if kind is LinkKind.ALBUM:
        fmt = ALBUM_FORMAT
    else:
        fmt = image_format(extension, require_extension)
    return fmt.fullmatch(url) is not None


def ensure_album_url(url: str) -> str:
    url = url.strip()
    if not url:
        raise ValidationError("Empty URL")
    parsed = urlparse(url)
    if not parsed.scheme:
        url = "https://" + url
    if not is_link(url, LinkKind.ALBUM):
        raise ValidationError(f"Not an imgur album URL: {url}")
    return url


def ensure_source_file(value: str) -> Path:
    value = value.strip()
    if not value:
        raise ValidationError("Empty file name")
    path = Path(value)
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    return path


def ensure_amend_prefix(prefix: str) -> str:
    if not prefix:
        raise ValidationError("Amend prefix must not be empty")
    if "/" in prefix or "\\" in prefix:
        raise ValidationError(f"Amend prefix must not contain a path separator: {prefix!r}")
    return prefix


def amended_path(source: Path, prefix: str) -> Path:
    return source.with_name(ensure_amend_prefix(prefix) + source.name)


def read_lines(path: Path) -> list[str]:
    lines: list[str] = []
    with path.open("r", encoding="utf-8", errors="ignore") as f:
        for raw in f:
            line = raw[:-1] if raw.endswith("\n") else raw
            lines.append(line.lstrip("\ufeff"))
    return lines


def write_lines(path: Path, lines: Iterable[str]) -> int:
    count = 0
    with path.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
            count += 1
    return count
