# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Markup writer shared by every domain descriptor.

All attribute and text values go through :func:`xml_escape`; tag names are
validated instead of escaped. Attributes are passed as ordered pairs so the
rendered attribute order is fixed, and pairs whose value is ``None`` are
skipped.

Example:
    >>> open_tag("disk", [("device", "disk"), ("type", "file")])
    "<disk device='disk' type='file'>"
    >>> empty_tag("target", [("dev", "vda"), ("bus", None)])
    "<target dev='vda'/>"
    >>> text_elem("name", "a<b")
    '<name>a&lt;b</name>'
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Optional, Sequence, Tuple
from xml.sax.saxutils import escape as _sax_escape

Attr = Tuple[str, Any]
Attrs = Optional[Iterable[Attr]]

NL = "\n"

_TAG_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.:-]*$")


def xml_escape(s: object) -> str:
    """Escape for XML text and attribute contexts (&, <, >, ', ")."""
    return _sax_escape(str(s), entities={"'": "&apos;", '"': "&quot;"})


def check_tag(tag: str) -> str:
    if not isinstance(tag, str) or not _TAG_RE.match(tag):
        raise ValueError(f"invalid XML element name: {tag!r}")
    return tag


def xml_attrs(attrs: Attrs) -> str:
    if not attrs:
        return ""
    parts = []
    for name, value in attrs:
        if value is None:
            continue
        parts.append(f" {check_tag(name)}='{xml_escape(value)}'")
    return "".join(parts)


def open_tag(tag: str, attrs: Attrs = None) -> str:
    return f"<{check_tag(tag)}{xml_attrs(attrs)}>"


def close_tag(tag: str) -> str:
    return f"</{check_tag(tag)}>"


def empty_tag(tag: str, attrs: Attrs = None) -> str:
    return f"<{check_tag(tag)}{xml_attrs(attrs)}/>"


def text_elem(tag: str, text: object, attrs: Attrs = None) -> str:
    return f"{open_tag(tag, attrs)}{xml_escape(text)}{close_tag(tag)}"


def block(tag: str, body: Sequence[str], attrs: Attrs = None) -> list[str]:
    """Wrap already-rendered lines in an open/close pair."""
    return [open_tag(tag, attrs), *body, close_tag(tag)]


def join_lines(lines: Iterable[str]) -> str:
    """Join rendered lines, one per line, with a trailing newline."""
    out = [ln.rstrip(NL) for ln in lines if ln]
    return NL.join(out) + NL if out else ""


__all__ = [
    "Attr",
    "NL",
    "block",
    "check_tag",
    "close_tag",
    "empty_tag",
    "join_lines",
    "open_tag",
    "text_elem",
    "xml_attrs",
    "xml_escape",
]
