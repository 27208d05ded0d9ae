"""Per-page content documents backed by the ``page_content`` table.

Documents are exposed as plain dicts shaped like the page API payload::

    {'pageName', 'sections', 'published', 'createdAt', 'updatedAt'}

Reads never write: a page without a stored row is synthesized from its
default template.  Writes are upserts; ``expected_updated_at`` turns a write
into a compare-and-swap on the stored ``updatedAt``.
"""
import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

try:
    from .content_defaults import default_page_sections
    from .models import PageContent, db
    from .utils import isoformat_or_none, utc_now_naive
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_defaults import default_page_sections
    from models import PageContent, db
    from utils import isoformat_or_none, utc_now_naive

logger = logging.getLogger(__name__)

# Passed as expected_updated_at to skip the compare-and-swap (last writer wins).
ANY_VERSION = object()


class ContentStoreError(Exception):
    """Reading or writing a page document failed."""


class ContentConflictError(ContentStoreError):
    """The stored document changed since the caller loaded it."""

    def __init__(self, page_name, expected_updated_at, current_updated_at):
        self.page_name = page_name
        self.expected_updated_at = expected_updated_at
        self.current_updated_at = current_updated_at
        super().__init__(
            f'Page "{page_name}" was updated at {current_updated_at or "(never)"}, '
            f'expected {expected_updated_at or "(never)"}.'
        )


def default_page_document(page_name):
    return {
        'pageName': page_name,
        'sections': default_page_sections(page_name),
        'published': False,
        'createdAt': None,
        'updatedAt': None,
    }


def get_page_document(page_name):
    try:
        row = PageContent.query.filter_by(page_name=page_name).first()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Failed to load content for page "%s".', page_name)
        raise ContentStoreError(f'Could not load page "{page_name}".') from exc
    if row is None:
        return default_page_document(page_name)
    return row.to_dict()


def put_page_document(page_name, sections, published=True, expected_updated_at=ANY_VERSION):
    """Upsert the document for ``page_name`` and return it as stored."""
    if not isinstance(sections, dict):
        raise ValueError('sections must be a mapping of section name to section.')
    try:
        row = PageContent.query.filter_by(page_name=page_name).with_for_update().first()
        if expected_updated_at is not ANY_VERSION:
            expected = isoformat_or_none(expected_updated_at)
            current = isoformat_or_none(row.updated_at) if row else None
            if current != expected:
                db.session.rollback()
                raise ContentConflictError(page_name, expected, current)

        now = utc_now_naive()
        if row is None:
            row = PageContent(page_name=page_name, created_at=now)
            db.session.add(row)
        elif row.updated_at and now <= row.updated_at:
            # updatedAt doubles as the concurrency token, so it must always move.
            now = row.updated_at + timedelta(microseconds=1)
        row.sections = sections
        row.published = bool(published)
        row.updated_at = now
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Failed to persist content for page "%s".', page_name)
        raise ContentStoreError(f'Could not save page "{page_name}".') from exc
    return row.to_dict()
