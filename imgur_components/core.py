import random
import time
from pathlib import Path
from typing import Iterable, Iterator

import requests

from .types import (
    AMEND_PREFIX,
    HASH_FIELD_PREFIX,
    HASH_LINE_TOKEN,
    IMAGE_EXTENSION,
    IMAGE_MARKER,
    IMGUR_PREFIX,
    RECORD_DELIMITER,
    RETRY_HTTP_STATUS,
    AmendResult,
    FormatError,
    GrabResult,
    LinkKind,
    RetryableHTTPError,
    TransportError,
)
from .utils import amended_path, is_link, read_lines, write_lines


def request_with_retry(
    session: requests.Session,
    method: str,
    url: str,
    timeout: float,
    retries: int,
    **kwargs,
) -> requests.Response:
    for attempt in range(retries + 1):
        try:
            resp = session.request(method=method, url=url, timeout=timeout, **kwargs)
            if resp.status_code in RETRY_HTTP_STATUS:
                status = resp.status_code
                resp.close()
                raise RetryableHTTPError(f"Retryable HTTP status: {status}")
            return resp
        except (requests.RequestException, RetryableHTTPError):
            if attempt >= retries:
                raise
            wait = min(20.0, 1.25 * (2**attempt) + random.uniform(0.1, 0.45))
            time.sleep(wait)
    raise RuntimeError("unreachable")


def keep_hash_lines(page_text: str) -> str:
    return "".join(line for line in page_text.splitlines() if HASH_LINE_TOKEN in line)


def fetch_page(
    session: requests.Session,
    url: str,
    timeout: float,
    retries: int = 0,
    hash_lines_only: bool = True,
) -> str:
    """Download ``url`` and return its body as text.

    Every transport failure, including a non-2xx answer, is raised as
    ``TransportError``. With ``hash_lines_only`` the body is reduced to the
    lines carrying image records, joined without separators.
    """
    try:
        r = request_with_retry(
            session=session,
            method="GET",
            url=url,
            timeout=timeout,
            retries=retries,
        )
        try:
            r.raise_for_status()
            page_text = r.text
        finally:
            r.close()
    except (requests.RequestException, RetryableHTTPError) as exc:
        raise TransportError(str(exc)) from exc
    if hash_lines_only:
        return keep_hash_lines(page_text)
    return page_text


def extract_image_block(page_text: str) -> str:
    # The second copy of the block, when present, is the front-end duplicate.
    parts = IMAGE_MARKER.split(page_text, maxsplit=2)
    if len(parts) < 2:
        raise FormatError("marker not found")
    return parts[1]


def split_records(block: str) -> list[str]:
    return block.split(RECORD_DELIMITER)


def extract_hash(record: str) -> str:
    record = record.replace(HASH_FIELD_PREFIX, "")
    return record.split('"', 1)[0]


def iter_hashes(block: str) -> Iterator[str]:
    for record in split_records(block):
        yield extract_hash(record)


def build_urls(hashes: Iterable[str], suffix: str = "") -> list[str]:
    unique: list[str] = []
    seen: set[str] = set()
    for image_hash in hashes:
        url = IMGUR_PREFIX + image_hash + suffix
        if url in seen:
            continue
        if not is_link(url, LinkKind.IMAGE, extension=suffix, require_extension=bool(suffix)):
            continue
        seen.add(url)
        unique.append(url)
    return unique


def find_links(page_text: str, suffix: str = "") -> list[str]:
    try:
        block = extract_image_block(page_text)
    except FormatError:
        return []
    return build_urls(iter_hashes(block), suffix=suffix)


def grab_album(
    session: requests.Session,
    album_url: str,
    suffix: str = "",
    timeout: float = 30,
    retries: int = 0,
    hash_lines_only: bool = True,
) -> GrabResult:
    started = time.monotonic()
    page_text = fetch_page(
        session=session,
        url=album_url,
        timeout=timeout,
        retries=retries,
        hash_lines_only=hash_lines_only,
    )
    urls = find_links(page_text, suffix=suffix)
    elapsed_ms = int((time.monotonic() - started) * 1000)
    return GrabResult(album_url=album_url, urls=urls, elapsed_ms=elapsed_ms)


def amend_file(
    source: Path,
    suffix: str = IMAGE_EXTENSION,
    prefix: str = AMEND_PREFIX,
) -> AmendResult:
    """Append ``suffix`` to every line of ``source`` into ``<prefix><name>``.

    Lines are copied in order without validation or deduplication.
    """
    output_path = amended_path(source, prefix)
    amended = [line + suffix for line in read_lines(source)]
    count = write_lines(output_path, amended)
    return AmendResult(source=source, output_path=output_path, count=count)
