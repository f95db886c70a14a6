"""Link normalization for HTML stored in content records.

Anchors that point at ``*.html`` pages of the site itself are rewritten to the
extension-less, host-relative form the CMS serves them under:

- ``https://www.example.org/a/b.html#x`` -> ``/a/b#x`` (when the site host is
  ``www.example.org``)
- ``../b.html?y=1`` -> ``../b?y=1``

Anything else (other hosts, ``mailto:``, ``javascript:``, protocol-relative
URLs, hrefs that do not parse) is left exactly as written.

The transform is a pure function: parse with BeautifulSoup's ``html.parser``
tree builder, rewrite ``href`` attributes, serialize. When nothing was
rewritten the caller gets the original string back, so untouched records are
never reformatted.

Known formatting drift when a fragment *is* rewritten: attribute values are
re-emitted in double quotes, void elements are written as ``<br/>``, and bare
``&``/``<``/``>`` in text are escaped. Character references such as ``&nbsp;``
come back as the literal character.

The rewritten href is cut from the text as written, so embedded whitespace and
the query and fragment survive verbatim. Only one trailing ``.html`` is removed
per pass: ``/a.html.html`` becomes ``/a.html``, and ``/a`` on the next run.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import suppress
from enum import Enum
from typing import NamedTuple
from urllib.parse import SplitResult, urlsplit

from bs4 import BeautifulSoup, ParserRejectedMarkup

HTML_SUFFIX = ".html"
LOCAL_SCHEMES = frozenset({"http", "https"})

RewriteCallback = Callable[[str, str], None] | None


class LinkKind(Enum):
    """Classification of an anchor target relative to the site."""

    ABSOLUTE_LOCAL = "absolute-local"  # http(s) URL on the site's own host
    RELATIVE = "relative"  # no scheme, no host
    OTHER = "other"  # never touched


class LinkFixResult(NamedTuple):
    html: str
    changed: bool


def _split(href: str | None) -> SplitResult | None:
    if not href or not href.strip():
        return None
    try:
        return urlsplit(href)
    except ValueError:
        return None


def _kind_of(parts: SplitResult | None, site_host: str) -> LinkKind:
    if parts is None:
        return LinkKind.OTHER
    if parts.scheme:
        if parts.scheme.lower() not in LOCAL_SCHEMES:
            return LinkKind.OTHER
        # hostname is already lowercased and stripped of port/userinfo
        if parts.hostname and parts.hostname == site_host.strip().lower():
            return LinkKind.ABSOLUTE_LOCAL
        return LinkKind.OTHER
    if parts.netloc:
        # protocol-relative //host/path
        return LinkKind.OTHER
    return LinkKind.RELATIVE


def classify_href(href: str | None, site_host: str) -> LinkKind:
    """Classify an ``href`` value as absolute-local, relative, or other.

    Host matching is exact but case-insensitive; ports are ignored.
    """

    return _kind_of(_split(href), site_host)


def rewrite_href(href: str | None, site_host: str) -> str | None:
    """Return the rewritten href, or None when the href must be left alone.

    Only absolute-local and relative targets whose path ends in exactly
    ``.html`` qualify. The new href is the path without the suffix, followed by
    the original query (if any) and fragment (if any).
    """

    parts = _split(href)
    kind = _kind_of(parts, site_host)
    if href is None or kind is LinkKind.OTHER:
        return None

    # cut from the text as written; urlsplit drops embedded tabs and newlines
    path, query, fragment = _raw_pieces(href.strip())
    if kind is LinkKind.ABSOLUTE_LOCAL:
        path = _path_after_authority(path)

    if not path.endswith(HTML_SUFFIX):
        return None
    new_href = path[: -len(HTML_SUFFIX)]
    if not new_href:
        # a bare ".html" would collapse to an empty href
        return None

    if query:
        new_href += "?" + query
    if fragment:
        new_href += "#" + fragment
    return new_href


def _raw_pieces(text: str) -> tuple[str, str, str]:
    """Split ``text`` into (path part, query, fragment) without normalizing it."""
    path_end = len(text)
    for marker in "?#":
        index = text.find(marker)
        if index != -1:
            path_end = min(path_end, index)
    path, rest = text[:path_end], text[path_end:]
    if rest.startswith("?"):
        query, _, fragment = rest[1:].partition("#")
        return path, query, fragment
    return path, "", rest[1:]


def _path_after_authority(text: str) -> str:
    """``http://host:80/a/b`` -> ``/a/b``; empty when there is no path."""
    authority = text.find("//")
    if authority == -1:
        return ""
    slash = text.find("/", authority + 2)
    return text[slash:] if slash != -1 else ""


def _safe_notify(on_rewrite: RewriteCallback, old: str, new: str) -> None:
    if on_rewrite is None:
        return
    with suppress(Exception):
        on_rewrite(old, new)


def normalize_links(
    html: str,
    site_host: str,
    on_rewrite: RewriteCallback = None,
) -> LinkFixResult:
    """Rewrite local ``.html`` links in an HTML fragment.

    Args:
        html: HTML fragment, possibly malformed, possibly without anchors.
        site_host: Hostname considered local, e.g. ``www.example.org``.
        on_rewrite: Optional callback invoked as ``on_rewrite(old_href, new_href)``
            for every rewritten anchor, in document order.

    Returns:
        ``(html, changed)``. When ``changed`` is False, ``html`` is the input
        string itself.
    """

    if not html or "<a" not in html.lower():
        return LinkFixResult(html, False)

    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup:
        return LinkFixResult(html, False)

    changed = False
    for anchor in soup.find_all("a"):
        href = anchor.get("href")
        if not isinstance(href, str):
            continue
        new_href = rewrite_href(href, site_host)
        if new_href is None:
            continue
        anchor["href"] = new_href
        changed = True
        _safe_notify(on_rewrite, href, new_href)

    if not changed:
        return LinkFixResult(html, False)
    return LinkFixResult(str(soup), True)


__all__ = [
    "HTML_SUFFIX",
    "LinkFixResult",
    "LinkKind",
    "classify_href",
    "normalize_links",
    "rewrite_href",
]
