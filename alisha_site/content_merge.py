"""Non-destructive deep merge of an editor draft into stored page sections.

Rules, applied key by key over the union of both mappings:

* key only in ``stored``: kept unchanged
* key only in ``draft``: taken from the draft
* draft value is a list: replaces the stored value wholesale (lists are never
  merged element-wise)
* both values are mappings: merged recursively
* anything else, including a type change between mapping, list and scalar:
  the draft value wins

Type changes never raise.  Callers that want to know about them pass a list
as ``diagnostics`` and receive one ``MergeTypeChange`` per occurrence.
Inputs are never mutated; the result shares no mutable state with them.
"""
import copy
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

KIND_SECTION = 'section'
KIND_LIST = 'list'
KIND_SCALAR = 'scalar'

MergeTypeChange = namedtuple('MergeTypeChange', ['path', 'stored_kind', 'draft_kind'])


def value_kind(value):
    if isinstance(value, dict):
        return KIND_SECTION
    if isinstance(value, (list, tuple)):
        return KIND_LIST
    return KIND_SCALAR


def merge_sections(stored, draft, diagnostics=None):
    """Merge ``draft`` into ``stored`` and return the combined sections."""
    stored = stored if isinstance(stored, dict) else {}
    draft = draft if isinstance(draft, dict) else {}
    return _merge_mapping(stored, draft, (), diagnostics)


def _merge_mapping(stored, draft, path, diagnostics):
    merged = {}
    for key, stored_value in stored.items():
        if key in draft:
            merged[key] = _merge_value(stored_value, draft[key], path + (key,), diagnostics)
        else:
            merged[key] = copy.deepcopy(stored_value)
    for key, draft_value in draft.items():
        if key not in stored:
            merged[key] = _copy_draft_value(draft_value)
    return merged


def _merge_value(stored_value, draft_value, path, diagnostics):
    stored_kind = value_kind(stored_value)
    draft_kind = value_kind(draft_value)
    if stored_kind == KIND_SECTION and draft_kind == KIND_SECTION:
        return _merge_mapping(stored_value, draft_value, path, diagnostics)
    if stored_kind != draft_kind and stored_value is not None:
        _note_type_change(path, stored_kind, draft_kind, diagnostics)
    return _copy_draft_value(draft_value)


def _copy_draft_value(value):
    if isinstance(value, tuple):
        return copy.deepcopy(list(value))
    return copy.deepcopy(value)


def _note_type_change(path, stored_kind, draft_kind, diagnostics):
    dotted = '.'.join(str(part) for part in path)
    logger.debug('Draft replaced %s value with %s value at %s.', stored_kind, draft_kind, dotted)
    if diagnostics is not None:
        diagnostics.append(MergeTypeChange(dotted, stored_kind, draft_kind))
