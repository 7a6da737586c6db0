import logging
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote, unquote

log = logging.getLogger(__name__)

CookieWriteHook = Callable[[str, Optional[str]], None]


def _decode_pairs(pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    cookies: Dict[str, str] = {}
    for key, value in pairs:
        key = key.strip()
        if not key:
            continue
        try:
            cookies[key] = unquote(value.strip(), errors="strict")
        except UnicodeDecodeError:
            log.warning(f"Could not decode cookie value for key={key}")
    return cookies


def parse_cookie_header(header: str) -> Dict[str, str]:
    """Parse a `k=v; k2=v2` header. Values are URL-decoded, malformed pairs skipped."""
    return _decode_pairs(
        pair.split("=", 1) for pair in (header or "").split(";") if "=" in pair
    )


class CookieJarStorage:
    """Browser-style credential storage backed by an in-process cookie jar.

    Values arrive URL-encoded whether they come as a raw header or as the
    request's cookie mapping, and are decoded on the way in.
    """

    def __init__(
        self,
        cookies: Union[str, Mapping[str, str], None] = None,
        on_write: Optional[CookieWriteHook] = None,
    ):
        if isinstance(cookies, str):
            self._cookies = parse_cookie_header(cookies)
        else:
            self._cookies = _decode_pairs((cookies or {}).items())
        self._on_write = on_write

    def get(self, key: str) -> Optional[str]:
        return self._cookies.get(key)

    def set(self, key: str, value: str) -> None:
        self._cookies[key] = value
        if self._on_write:
            self._on_write(key, value)

    def clear(self, key: str) -> None:
        self._cookies.pop(key, None)
        if self._on_write:
            self._on_write(key, None)

    def header(self) -> str:
        return "; ".join(f"{k}={quote(v, safe='')}" for k, v in self._cookies.items())
