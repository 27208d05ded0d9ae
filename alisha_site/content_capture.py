"""Build a nested draft object from the editor's tagged editable surface.

The editing UI posts its surface as a list of section boundaries, each with
the leaf fields tagged inside it::

    [{"section": "about-hero",
      "fields": [{"field": "about-hero-title", "value": "About Us", "type": "text"}]}]

``extract_draft`` turns that into ``{section: {key: value}}`` using the
canonical names from ``content_paths``.
"""
import copy
import html
from collections import namedtuple

import bleach

try:
    from .content_paths import canonical_section, normalize_asset_url, normalize_field
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_paths import canonical_section, normalize_asset_url, normalize_field

FIELD_TEXT = 'text'
FIELD_IMAGE = 'image'
FIELD_TYPES = (FIELD_TEXT, FIELD_IMAGE)
MAX_FIELD_LENGTH = 20000

SurfaceSection = namedtuple('SurfaceSection', ['raw_section', 'fields'])
SurfaceField = namedtuple('SurfaceField', ['raw_field', 'value', 'field_type'])


class SurfaceFormatError(ValueError):
    """The posted editable surface does not have the expected shape."""


def parse_editable_surface(payload):
    """Validate a posted surface (a list, or a mapping with a ``sections`` list)."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get('sections', [])
    if not isinstance(payload, list):
        raise SurfaceFormatError('Editable surface must be a list of sections.')

    sections = []
    for index, raw_section in enumerate(payload):
        if not isinstance(raw_section, dict):
            raise SurfaceFormatError(f'Section #{index} must be an object.')
        section_id = raw_section.get('section')
        if section_id is not None and not isinstance(section_id, str):
            raise SurfaceFormatError(f'Section #{index} identifier must be a string.')
        raw_fields = raw_section.get('fields') or []
        if not isinstance(raw_fields, list):
            raise SurfaceFormatError(f'Section #{index} fields must be a list.')
        fields = []
        for field_index, raw_field in enumerate(raw_fields):
            fields.append(_parse_field(raw_field, index, field_index))
        sections.append(SurfaceSection(section_id or '', fields))
    return sections


def coerce_surface(surface):
    """Accept a raw posted surface or one already run through ``parse_editable_surface``."""
    if isinstance(surface, list) and all(isinstance(item, SurfaceSection) for item in surface):
        return surface
    return parse_editable_surface(surface)


def _parse_field(raw_field, section_index, field_index):
    where = f'Field #{field_index} of section #{section_index}'
    if not isinstance(raw_field, dict):
        raise SurfaceFormatError(f'{where} must be an object.')
    field_id = raw_field.get('field')
    if not isinstance(field_id, str) or not field_id.strip():
        raise SurfaceFormatError(f'{where} needs a non-empty "field" identifier.')
    field_type = str(raw_field.get('type') or FIELD_TEXT).strip().lower()
    if field_type not in FIELD_TYPES:
        raise SurfaceFormatError(f'{where} has unsupported type "{field_type}".')
    value = raw_field.get('value')
    if value is not None and not isinstance(value, (str, int, float)):
        raise SurfaceFormatError(f'{where} value must be text.')
    return SurfaceField(field_id, value, field_type)


def plain_text(value):
    """Reduce captured markup to the text a reader sees."""
    if value is None or isinstance(value, bool):
        return ''
    text = bleach.clean(str(value), tags=[], attributes={}, strip=True)
    return html.unescape(text).strip()[:MAX_FIELD_LENGTH]


def capture_value(field, asset_origins=()):
    if field.field_type == FIELD_IMAGE:
        return normalize_asset_url(plain_text(field.value), asset_origins)
    return plain_text(field.value)


def extract_draft(page_name, surface, working_content=None, asset_origins=()):
    """Return ``{section: {key: value}}`` for one edit pass over ``surface``.

    Each section is first seeded with the nested objects and lists already in
    ``working_content`` for that canonical section, since those are edited
    through dedicated controls rather than tagged fields.  Empty field values
    mean "not edited" and are left out.
    """
    working_content = working_content or {}
    draft = {}
    for section in surface:
        section_name = canonical_section(page_name, section.raw_section)
        target = draft.setdefault(section_name, {})
        _seed_nested_values(target, working_content.get(section_name))
        for field in section.fields:
            value = capture_value(field, asset_origins)
            if value == '':
                continue
            normalized = normalize_field(page_name, section.raw_section, field.raw_field, value)
            target[normalized.key] = normalized.value
    return {name: values for name, values in draft.items() if values}


def _seed_nested_values(target, working_section):
    if not isinstance(working_section, dict):
        return
    for key, value in working_section.items():
        if isinstance(value, (dict, list)) and key not in target:
            target[key] = copy.deepcopy(value)
