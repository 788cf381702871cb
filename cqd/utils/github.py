"""GitHub source URL helpers."""

from urllib.parse import urlsplit, urlunsplit

GITHUB_HOSTS = {"github.com", "www.github.com"}
RAW_HOST = "raw.githubusercontent.com"


def to_raw_url(url: str, allowed_hosts: set[str]) -> str:
    """
    Rewrite a GitHub browse URL to its raw-content equivalent.

    ``https://github.com/o/r/blob/main/a.py`` becomes
    ``https://raw.githubusercontent.com/o/r/main/a.py``. URLs already on the
    raw host pass through. Raises ValueError for non-http(s) URLs and hosts
    outside ``allowed_hosts``.
    """
    parts = urlsplit(url.strip())
    host = (parts.hostname or "").lower()
    if parts.scheme not in ("http", "https") or not host:
        raise ValueError(f"Not an http(s) URL: {url}")
    if host not in allowed_hosts:
        raise ValueError(f"Host not allowed for source fetch: {host}")
    if host in GITHUB_HOSTS:
        return urlunsplit(("https", RAW_HOST, parts.path.replace("/blob/", "/", 1), "", ""))
    return urlunsplit(("https", parts.netloc, parts.path, parts.query, ""))
