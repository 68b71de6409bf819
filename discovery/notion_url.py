"""Notion page URL recognition and page ID normalization."""

import re
from typing import Optional

NOTION_URL_PATTERN = re.compile(
    r'^https?://(?:www\.)?notion\.(?:so|site)/(?:[^/]+/)*[^?#]*?([0-9a-f]{32})(?:[?#].*)?$',
    re.IGNORECASE
)


def extract_page_id(url: str) -> Optional[str]:
    """
    Extract the canonical page ID from a Notion page URL.

    Args:
        url: Candidate URL (e.g. "https://www.notion.so/team/Roadmap-0123...cdef")

    Returns:
        Dashed lowercase UUID (8-4-4-4-12), or None if the string is not a
        Notion page URL
    """
    match = NOTION_URL_PATTERN.match(url)
    if not match:
        return None

    hex_id = match.group(1).lower()
    return '-'.join((
        hex_id[0:8],
        hex_id[8:12],
        hex_id[12:16],
        hex_id[16:20],
        hex_id[20:32],
    ))


def is_valid_notion_url(url: str) -> bool:
    return NOTION_URL_PATTERN.match(url) is not None


__all__ = ['NOTION_URL_PATTERN', 'extract_page_id', 'is_valid_notion_url']
