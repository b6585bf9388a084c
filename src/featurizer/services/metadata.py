# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Cleaning of teaser metadata before it is stored."""

import re
from urllib.parse import urlsplit

import nh3

_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def clean_title(value: str | None) -> str:
    """Plain-text title: markup removed, whitespace collapsed."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", _TAG.sub("", value)).strip()


def clean_html(value: str | None) -> str:
    """Teaser body restricted to post markup.

    nh3's allow-list drops ``<script>``/``<style>`` with their content and
    any attribute it does not know, ``on*`` handlers included.
    """
    if not value:
        return ""
    return nh3.clean(value.strip())


def clean_url(value: str | None) -> str:
    """Absolute http(s) URL, or "" for anything else.

    A bare host such as ``hive.it/sso`` is read as ``http://hive.it/sso``.
    """
    if not value:
        return ""
    value = value.strip()
    if ":" not in value and not value.startswith(("/", "#", "?")):
        value = f"http://{value}"
    parts = urlsplit(value)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return ""
    return value
