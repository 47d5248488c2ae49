import hashlib
import re
from urllib.parse import urlsplit
from ..errors import InvalidURL

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"^[a-z0-9_-]+(\.[a-z0-9_-]+)*\.?$", re.IGNORECASE)

CANONICAL_SCHEME = "https"


def ensure_scheme(url: str) -> str:
    url = (url or "").strip()
    return url if _SCHEME_RE.match(url) else f"https://{url}"


def normalize_url(url: str) -> str:
    """Canonical form used for dedup: lowercase https://host/path.

    Query string, fragment, port and trailing slashes are dropped and
    ``http`` is folded into ``https``, so ``HTTP://Example.com/Path/?a=1#x``
    and ``example.com/path`` collapse to the same value.
    Non-ASCII host names are IDNA-encoded, so ``münchen.de`` becomes
    ``https://xn--mnchen-3ya.de``.
    """
    try:
        parts = urlsplit(ensure_scheme(url))
        parts.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidURL("Invalid URL") from e
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    else:
        # internationalized names are stored in their punycode form
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise InvalidURL("Invalid URL") from e
        if not _HOST_RE.match(host):
            raise InvalidURL("Invalid URL")
    path = parts.path.rstrip("/")
    return f"{CANONICAL_SCHEME}://{host}{path}".lower()


def validate_url(url: str) -> bool:
    try:
        normalize_url(url)
    except InvalidURL:
        return False
    return True


def generate_fingerprint(canonical_url: str, tier: str) -> str:
    return hashlib.sha256(f"{canonical_url}:{tier}".encode("utf-8")).hexdigest()
