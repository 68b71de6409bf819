"""Extraction of Notion page properties into plain values."""

import logging
from typing import Any, Dict, List, Optional

from models import PropertyValue

logger = logging.getLogger('spoketome.converters.properties')

UNTITLED = 'Untitled'

# Kinds whose value is stored under the kind key and passed through unchanged
PASSTHROUGH_KINDS = frozenset({
    'number', 'checkbox', 'url', 'email', 'phone_number',
    'created_time', 'last_edited_time',
})


def _join_plain_text(items: Optional[List[Dict[str, Any]]]) -> str:
    return ''.join(item.get('plain_text', '') for item in (items or []))


def _display_name(item: Optional[Dict[str, Any]]) -> Optional[str]:
    """Best available display string for a person, page or file reference."""
    if not item:
        return None
    return (
        item.get('name')
        or item.get('id')
        or (item.get('external') or {}).get('url')
        or (item.get('file') or {}).get('url')
    )


def _format_date(date: Optional[Dict[str, Any]]) -> Optional[str]:
    if not date:
        return None
    start = date.get('start')
    end = date.get('end')
    if end:
        return f"{start} → {end}"
    return start


def extract_title(properties: Dict[str, Any]) -> str:
    """Return the page title from its title-kind property, or 'Untitled'."""
    for prop in properties.values():
        if prop.get('type') == 'title' and prop.get('title'):
            return _join_plain_text(prop['title'])
    return UNTITLED


def extract_property_value(prop: Dict[str, Any]) -> PropertyValue:
    """
    Map one typed Notion property to a PropertyValue.

    Unknown kinds map to null instead of failing.
    """
    kind = prop.get('type')
    data = prop.get(kind) if kind else None

    if kind in PASSTHROUGH_KINDS:
        return PropertyValue.scalar(data)

    if kind in ('rich_text', 'title'):
        return PropertyValue.scalar(_join_plain_text(data) or None)

    if kind in ('select', 'status'):
        return PropertyValue.scalar((data or {}).get('name'))

    if kind == 'multi_select':
        return PropertyValue.of_list([option.get('name', '') for option in data or []])

    if kind == 'date':
        return PropertyValue.scalar(_format_date(data))

    if kind == 'formula':
        return _extract_computed(data)

    if kind == 'rollup':
        return _extract_computed(data)

    if kind == 'people':
        return PropertyValue.of_list([n for n in map(_display_name, data or []) if n])

    if kind == 'relation':
        return PropertyValue.of_list([n for n in map(_display_name, data or []) if n])

    if kind == 'files':
        return PropertyValue.of_list([
            (f.get('external') or {}).get('url') or (f.get('file') or {}).get('url') or f.get('name', '')
            for f in data or []
        ])

    if kind in ('created_by', 'last_edited_by'):
        return PropertyValue.scalar(_display_name(data))

    if kind == 'unique_id':
        if not data or data.get('number') is None:
            return PropertyValue.null()
        prefix = data.get('prefix')
        return PropertyValue.scalar(f"{prefix}-{data['number']}" if prefix else f"{data['number']}")

    logger.debug(f"Unsupported property kind: {kind}")
    return PropertyValue.null()


def _extract_computed(result: Optional[Dict[str, Any]]) -> PropertyValue:
    """Unwrap a formula or rollup result to its underlying typed value."""
    if not result:
        return PropertyValue.null()

    kind = result.get('type')

    if kind in ('string', 'number', 'boolean'):
        return PropertyValue.scalar(result.get(kind))

    if kind == 'date':
        return PropertyValue.scalar(_format_date(result.get('date')))

    if kind == 'array':
        items = []
        for item in result.get('array') or []:
            value = extract_property_value(item).to_plain()
            if value is None:
                continue
            if isinstance(value, list):
                items.extend(value)
            else:
                items.append(value)
        return PropertyValue.of_list(items)

    return PropertyValue.null()


def extract_properties(properties: Dict[str, Any]) -> Dict[str, PropertyValue]:
    """
    Extract all non-title properties of a page.

    Args:
        properties: The page's ``properties`` mapping from the API

    Returns:
        Property name to PropertyValue, in API order
    """
    extracted = {}

    for name, prop in properties.items():
        # The title is surfaced as the document title
        if prop.get('type') == 'title':
            continue
        extracted[name] = extract_property_value(prop)

    return extracted


__all__ = ['UNTITLED', 'extract_title', 'extract_property_value', 'extract_properties']
