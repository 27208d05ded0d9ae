"""Audit an editor surface against the sections the public renderer reads.

A field whose normalized (section, key) does not exist in the page's
canonical schema is saved but never shown on the live site.  The canonical
schema is the page's default template merged with its stored document.
"""
try:
    from .content_capture import coerce_surface
    from .content_merge import merge_sections
    from .content_paths import KEY_RENAMES, canonical_section, normalize_identifier, route_key
    from .content_defaults import default_page_sections
    from .content_store import get_page_document
    from .utils import utc_now_naive
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_capture import coerce_surface
    from content_merge import merge_sections
    from content_paths import KEY_RENAMES, canonical_section, normalize_identifier, route_key
    from content_defaults import default_page_sections
    from content_store import get_page_document
    from utils import utc_now_naive

AUDIT_MAPPED = 'mapped'
AUDIT_RENAMED = 'renamed'
AUDIT_UNKNOWN_SECTION = 'unknown_section'
AUDIT_UNKNOWN_KEY = 'unknown_key'
AUDIT_STATUSES = (AUDIT_MAPPED, AUDIT_RENAMED, AUDIT_UNKNOWN_SECTION, AUDIT_UNKNOWN_KEY)


def canonical_schema(page_name, stored_sections=None):
    return merge_sections(default_page_sections(page_name), stored_sections or {})


def _audit_state(page_name, section, raw_key, key, schema):
    if section not in schema or not isinstance(schema[section], dict):
        return AUDIT_UNKNOWN_SECTION, f'Section "{section}" is not read by the "{page_name}" page.'
    if key not in schema[section]:
        return AUDIT_UNKNOWN_KEY, f'Key "{section}.{key}" is not read by the "{page_name}" page.'
    if raw_key != key:
        return AUDIT_RENAMED, f'Key "{raw_key}" is stored as "{key}".'
    return AUDIT_MAPPED, ''


def run_page_field_audit(page_name, surface, schema=None):
    """Report how every tagged field on ``surface`` lands in the canonical schema."""
    now = utc_now_naive()
    if schema is None:
        schema = canonical_schema(page_name, get_page_document(page_name)['sections'])
    sections = coerce_surface(surface)

    rows = []
    targeted = set()
    for section in sections:
        section_name = canonical_section(page_name, section.raw_section)
        for field in section.fields:
            raw_key = normalize_identifier(field.raw_field, page_name)
            key = route_key(page_name, section_name, raw_key)
            status, issue = _audit_state(page_name, section_name, raw_key, key, schema)
            targeted.add((section_name, key))
            rows.append(
                {
                    'raw_section': section.raw_section,
                    'raw_field': field.raw_field,
                    'section': section_name,
                    'key': key,
                    'status': status,
                    'issue': issue,
                }
            )

    unedited_keys = []
    for section_name, values in schema.items():
        if not isinstance(values, dict):
            continue
        for key, value in values.items():
            if isinstance(value, (dict, list)) or (section_name, key) in targeted:
                continue
            unedited_keys.append(f'{section_name}.{key}')
    unedited_keys.sort()

    totals = {status: sum(1 for row in rows if row['status'] == status) for status in AUDIT_STATUSES}
    totals['fields_scanned'] = len(rows)
    totals['unedited_keys'] = len(unedited_keys)
    return {
        'generated_at': now.isoformat(),
        'page_name': page_name,
        'totals': totals,
        'fields': rows,
        'unedited_keys': unedited_keys,
        'known_renames': sorted(
            f'{section}.{raw_key} -> {section}.{key}'
            for (page, section, raw_key), key in KEY_RENAMES.items()
            if page == page_name
        ),
    }
