from __future__ import annotations

from html import escape
from typing import Optional
from urllib.parse import quote

from bucketindex.models.storage import DirectoryListing


def normalize_prefix(raw_prefix: Optional[str]) -> str:
    """
    "/a/b//" -> "a/b/", "" or "/" -> "".
    """
    if not raw_prefix:
        return ""
    trimmed = raw_prefix.lstrip("/").rstrip("/")
    return f"{trimmed}/" if trimmed else ""


def parent_prefix(prefix: str) -> str:
    if not prefix:
        return ""
    without_slash = prefix[:-1]
    idx = without_slash.rfind("/")
    if idx == -1:
        return ""
    return without_slash[: idx + 1]


def name_from_key(key: str, prefix: str) -> str:
    return key[len(prefix):] if key.startswith(prefix) else key


def _sort_key(value: str) -> tuple[str, str]:
    # case-insensitive first, raw value breaks ties ("a" < "B" < "b")
    return value.casefold(), value


def build_listing(prefix: str, folders: list[str], files: list[str]) -> DirectoryListing:
    return DirectoryListing(
        prefix=prefix,
        parent=parent_prefix(prefix),
        folders=sorted(set(folders), key=_sort_key),
        files=sorted(files, key=_sort_key),
    )


def _link(href: str, text: str) -> str:
    return f'<div><a href="{href}">{escape(text)}</a></div>'


def render_index(listing: DirectoryListing) -> str:
    prefix = listing.prefix
    lines = [
        "<!doctype html>",
        '<meta charset="utf-8">',
        f"<h3>Index of /{escape(prefix)}</h3>",
    ]

    if prefix:
        lines.append(_link(f"/?path={quote(listing.parent, safe='')}", ".."))

    for folder in listing.folders:
        folder_name = name_from_key(folder, prefix).rstrip("/") + "/"
        lines.append(_link(f"/?path={quote(folder, safe='')}", folder_name))

    for key in listing.files:
        lines.append(_link(f"/download?key={quote(key, safe='')}", name_from_key(key, prefix)))

    if listing.is_empty:
        lines.append("<div>(empty)</div>")

    return "\n".join(lines)
