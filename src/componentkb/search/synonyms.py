"""Static synonym groups mapping user phrasing to canonical component names."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Each family pairs lower-case lookup keys with the canonical component names
# they stand for. No string of one family is a substring of a key in another,
# so expanding any member yields the whole family and nothing else. The one
# exception is "Search form", which also reaches the closed "form" family.
_FAMILIES: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("input", "text input", "textbox", "text field", "textarea", "text area", "multiline"),
        ("Text field", "Text area"),
    ),
    (("select", "dropdown", "combobox"), ("Select",)),
    (("checkbox", "tickbox"), ("Checkbox",)),
    (("radio", "radio group"), ("Radio",)),
    (("datepicker", "date picker", "calendar", "date"), ("Datepicker",)),
    (("file upload", "upload", "file"), ("File upload",)),
    (("form", "forms", "complete form", "complete forms"), ("Complete forms",)),
    (("modal", "dialog", "popup", "lightbox"), ("Modal",)),
    (
        ("accordion", "expandable", "expand", "collapse", "collapsible", "toggle"),
        ("Accordion", "Expandable"),
    ),
    (("tabs",), ("Tabs",)),
    (
        (
            "navigation",
            "nav",
            "menu",
            "mega menu",
            "breadcrumb",
            "breadcrumbs",
            "pagination",
            "paging",
            "inpage navigation",
        ),
        ("Menu", "Mega menu", "Breadcrumb", "Inpage navigation", "Pagination"),
    ),
    (
        ("header", "site header", "page header", "hero", "banner", "logo"),
        ("Site header", "Page header", "Banner"),
    ),
    (("footer", "site footer"), ("Site footer",)),
    (("button", "btn"), ("Button",)),
    (("link", "anchor", "hyperlink"), ("Link",)),
    (("card", "tile", "content item"), ("Card", "Content item")),
    (("media container", "image", "picture", "video", "gallery"), ("Media container", "Gallery")),
    (("carousel", "slider", "slideshow"), ("Carousel",)),
    (("notification", "alert", "toast", "message"), ("Notification", "Message")),
    (("popover", "tooltip"), ("Popover",)),
    (("label", "badge"), ("Label",)),
    (("tag", "chip"), ("Tag",)),
    (("spinner", "loader", "loading"), ("Spinner",)),
    (
        ("list", "unordered list", "ordered list", "description list"),
        ("Unordered list", "Ordered list", "Description list"),
    ),
    (("blockquote", "quote"), ("Blockquote",)),
    (("search", "search bar", "search box"), ("Search form",)),
    (("share", "social share", "social media share"), ("Social media share",)),
    (("timeline",), ("Timeline",)),
    (("icon", "icons"), ("Icon",)),
    (("grid", "layout", "columns"), ("Grid",)),
    (("table", "data table"), ("Table",)),
)


def _build_groups() -> dict[str, tuple[str, ...]]:
    groups: dict[str, tuple[str, ...]] = {}
    for keys, canonical in _FAMILIES:
        members = (*canonical, *keys)
        for key in keys:
            # The key leads its group, followed by canonical names then sibling keys
            groups[key] = (key, *(m for m in members if m != key))
    return groups


_GROUPS = _build_groups()

SYNONYMS: Mapping[str, tuple[str, ...]] = MappingProxyType(_GROUPS)

__all__ = ["SYNONYMS"]
