"""Normalize raw editor identifiers into canonical (section, key) pairs.

Editor markup tags sections and fields with dash-cased identifiers that may
carry the page name as a prefix (``about-hero``, ``about-hero-title``).  The
public renderer reads camel-cased keys under canonical section names, and
several pages historically used alternate section names for the same logical
section.  Everything here is a pure table lookup.
"""
import re
from collections import namedtuple
from urllib.parse import urlparse

DEFAULT_SECTION = 'content'
_DASH_LOWER_RE = re.compile(r'-([a-z])')

HEADER_PAGE_KINDS = ('services', 'products', 'projects')
HEADER_SECTION = 'header'
CONTACT_PAGE = 'contact'
CONTACT_INFO_SECTION = 'info'
CONTACT_SECTION_ALIASES = {
    'content': CONTACT_INFO_SECTION,
    'contactContent': CONTACT_INFO_SECTION,
    'hero': 'hero',
    'contactHero': 'hero',
    'form': 'form',
    'contactForm': 'form',
    'map': 'map',
    'contactMap': 'map',
}
# (page, canonical section, normalized key) -> key the renderer reads.
KEY_RENAMES = {
    ('home', 'hero', 'heroTitle'): 'title',
    ('about', 'hero', 'heroTitle'): 'title',
}

NormalizedField = namedtuple('NormalizedField', ['section', 'key', 'value'])


def dash_to_camel(value):
    """``read-more-button`` -> ``readMoreButton``; digits after a dash are kept as-is."""
    return _DASH_LOWER_RE.sub(lambda match: match.group(1).upper(), value or '')


def strip_page_prefix(identifier, page_name):
    prefix = f'{page_name}-'
    if page_name and identifier.startswith(prefix):
        return identifier[len(prefix):]
    return identifier


def normalize_identifier(raw_identifier, page_name):
    return dash_to_camel(strip_page_prefix((raw_identifier or '').strip(), page_name))


def route_section(page_name, section_name):
    """Map a page-local section name to the section the renderer consumes."""
    if page_name in HEADER_PAGE_KINDS:
        if section_name in ('hero', 'content', f'{page_name}Content'):
            return HEADER_SECTION
        return section_name
    if page_name == CONTACT_PAGE:
        if 'info' in section_name:
            return CONTACT_INFO_SECTION
        return CONTACT_SECTION_ALIASES.get(section_name, section_name)
    return section_name


def route_key(page_name, section_name, key):
    return KEY_RENAMES.get((page_name, section_name, key), key)


def canonical_section(page_name, raw_section):
    return route_section(page_name, normalize_identifier(raw_section, page_name) or DEFAULT_SECTION)


def normalize_field(page_name, raw_section, raw_field, value):
    section = canonical_section(page_name, raw_section)
    key = route_key(page_name, section, normalize_identifier(raw_field, page_name))
    return NormalizedField(section, key, value)


def normalize_asset_url(value, asset_origins=()):
    """Strip a known asset origin so only the root-relative path is stored.

    ``http://localhost:3001/uploads/x.jpg`` -> ``/uploads/x.jpg`` when
    ``http://localhost:3001`` is a known origin.  Foreign URLs are untouched.
    """
    raw = (value or '').strip()
    parsed = urlparse(raw)
    if not parsed.scheme or not parsed.netloc:
        return raw
    known = set()
    for origin in asset_origins or ():
        origin_parts = urlparse((origin or '').strip())
        if origin_parts.scheme and origin_parts.netloc:
            known.add((origin_parts.scheme.lower(), origin_parts.netloc.lower()))
    if (parsed.scheme.lower(), parsed.netloc.lower()) not in known:
        return raw
    path = parsed.path or '/'
    if parsed.query:
        path = f'{path}?{parsed.query}'
    if parsed.fragment:
        path = f'{path}#{parsed.fragment}'
    return path
