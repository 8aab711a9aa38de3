from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import re


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)
IMGUR_PREFIX = "https://imgur.com/"
ALBUM_PREFIX = IMGUR_PREFIX + "a/"
IMAGE_EXTENSION = ".png"
AMEND_PREFIX = "amended_"

# Album pages embed the image array twice, each copy introduced by this text.
IMAGE_MARKER = re.compile(r'"count":[0-9]+,"images":\[')
RECORD_DELIMITER = "},"
HASH_FIELD_PREFIX = '{"hash":"'
HASH_LINE_TOKEN = '"hash"'

RETRY_HTTP_STATUS = {408, 425, 429, 500, 502, 503, 504}


class LinkKind(Enum):
    ALBUM = "album"
    IMAGE = "image"


class ValidationError(ValueError):
    pass


class FormatError(Exception):
    pass


class TransportError(Exception):
    pass


class RetryableHTTPError(Exception):
    pass


@dataclass
class GrabResult:
    album_url: str
    urls: list[str] = field(default_factory=list)
    elapsed_ms: int = 0


@dataclass
class AmendResult:
    source: Path
    output_path: Path
    count: int = 0
