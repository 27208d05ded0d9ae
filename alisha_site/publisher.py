"""Editor sessions and the draft/publish pipeline.

An ``EditorSession`` is one editor's in-memory working copy of a page: the
document it was loaded from (the merge base), the working content edited
through dedicated controls and draft saves, an optional pending field edit,
and a transient status message.  Only ``PublishController.publish`` writes to
the content store; ``save_draft`` is a local checkpoint.

Publish states: idle -> capturing -> merging -> persisting ->
{published | failed} -> idle.
"""
import copy
import logging
import threading
from collections import namedtuple

try:
    from .content_capture import coerce_surface, extract_draft
    from .content_events import notify_content_changed
    from .content_merge import merge_sections
    from .content_store import (
        ANY_VERSION,
        ContentConflictError,
        ContentStoreError,
        get_page_document,
        put_page_document,
    )
    from .utils import utc_now_naive
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_capture import coerce_surface, extract_draft
    from content_events import notify_content_changed
    from content_merge import merge_sections
    from content_store import (
        ANY_VERSION,
        ContentConflictError,
        ContentStoreError,
        get_page_document,
        put_page_document,
    )
    from utils import utc_now_naive

logger = logging.getLogger(__name__)

STATE_IDLE = 'idle'
STATE_CAPTURING = 'capturing'
STATE_MERGING = 'merging'
STATE_PERSISTING = 'persisting'
STATE_PUBLISHED = 'published'
STATE_FAILED = 'failed'

STATUS_NONE = ''
STATUS_SAVED = 'saved'
STATUS_SUCCESS = 'success'
STATUS_ERROR = 'error'
STATUS_CONFLICT = 'conflict'

PublishResult = namedtuple('PublishResult', ['ok', 'status', 'document', 'draft', 'diagnostics', 'states', 'error'])


class EditorSession:
    def __init__(self, page_name, document):
        self.page_name = page_name
        self.base_sections = copy.deepcopy(document.get('sections') or {})
        self.base_updated_at = document.get('updatedAt')
        self.published = bool(document.get('published'))
        self.working = copy.deepcopy(self.base_sections)
        self.pending_edit = None
        self.status = STATUS_NONE
        self.status_set_at = None
        self.status_seconds = 0.0
        self.last_outcome = None

    def set_value(self, section, key, value):
        """Write a value straight into the working content (dedicated controls)."""
        target = self.working.get(section)
        if not isinstance(target, dict):
            target = {}
            self.working[section] = target
        target[key] = copy.deepcopy(value)

    def stage_edit(self, section, key, value):
        self.pending_edit = (section, key, value)

    def flush(self):
        """Commit the in-progress field edit, if any."""
        if self.pending_edit is None:
            return False
        section, key, value = self.pending_edit
        self.pending_edit = None
        self.set_value(section, key, value)
        return True

    def rebase(self, document):
        self.base_sections = copy.deepcopy(document.get('sections') or {})
        self.base_updated_at = document.get('updatedAt')
        self.published = bool(document.get('published'))
        self.working = copy.deepcopy(self.base_sections)

    def show_status(self, status, seconds, now=None):
        self.status = status
        self.status_set_at = now or utc_now_naive()
        self.status_seconds = seconds

    def status_at(self, now=None):
        """Current status message; it clears itself once its display time is up."""
        if not self.status:
            return STATUS_NONE
        now = now or utc_now_naive()
        if (now - self.status_set_at).total_seconds() >= self.status_seconds:
            self.status = STATUS_NONE
            self.status_set_at = None
        return self.status

    def to_dict(self, now=None):
        return {
            'pageName': self.page_name,
            'sections': copy.deepcopy(self.working),
            'baseUpdatedAt': self.base_updated_at,
            'published': self.published,
            'pendingEdit': self.pending_edit is not None,
            'status': self.status_at(now),
            'lastOutcome': self.last_outcome,
        }


class PublishController:
    def __init__(
        self,
        asset_origins=(),
        publish_status_seconds=3.0,
        draft_status_seconds=2.5,
        check_conflicts=True,
        clock=utc_now_naive,
    ):
        self.asset_origins = tuple(asset_origins or ())
        self.publish_status_seconds = publish_status_seconds
        self.draft_status_seconds = draft_status_seconds
        self.check_conflicts = check_conflicts
        self.clock = clock
        self.state = STATE_IDLE
        self._states = []

    @classmethod
    def from_config(cls, config):
        return cls(
            asset_origins=config.get('ASSET_ORIGINS', ()),
            publish_status_seconds=float(config.get('PUBLISH_STATUS_SECONDS', 3.0)),
            draft_status_seconds=float(config.get('DRAFT_STATUS_SECONDS', 2.5)),
            check_conflicts=bool(config.get('CONTENT_CONFLICT_CHECK', True)),
        )

    def _enter(self, state):
        self.state = state
        self._states.append(state)

    def load_page_content(self, page_name):
        return EditorSession(page_name, get_page_document(page_name))

    def capture(self, session, surface):
        return extract_draft(session.page_name, coerce_surface(surface), session.working, self.asset_origins)

    def save_draft(self, session, surface=None):
        draft = self.capture(session, surface)
        session.working = merge_sections(session.working, draft)
        session.show_status(STATUS_SAVED, self.draft_status_seconds, self.clock())
        return draft

    def publish(self, session, surface=None, sender=None):
        self._states = []
        diagnostics = []
        draft = {}
        try:
            session.flush()
            self._enter(STATE_CAPTURING)
            draft = self.capture(session, surface)

            self._enter(STATE_MERGING)
            session.working = merge_sections(session.working, draft, diagnostics)
            merged = merge_sections(session.base_sections, session.working, diagnostics)

            self._enter(STATE_PERSISTING)
            expected = session.base_updated_at if self.check_conflicts else ANY_VERSION
            document = put_page_document(session.page_name, merged, published=True, expected_updated_at=expected)
        except ContentConflictError as exc:
            logger.warning('Publish of page "%s" rejected: %s', session.page_name, exc)
            return self._fail(session, STATUS_CONFLICT, draft, diagnostics, exc)
        except ContentStoreError as exc:
            logger.error('Publish of page "%s" failed: %s', session.page_name, exc)
            return self._fail(session, STATUS_ERROR, draft, diagnostics, exc)

        session.rebase(document)
        self._enter(STATE_PUBLISHED)
        session.last_outcome = STATE_PUBLISHED
        if sender is not None:
            notify_content_changed(sender, page_name=session.page_name)
        session.show_status(STATUS_SUCCESS, self.publish_status_seconds, self.clock())
        logger.info('Published page "%s" (updatedAt=%s).', session.page_name, document.get('updatedAt'))
        self._enter(STATE_IDLE)
        return PublishResult(True, STATUS_SUCCESS, document, draft, diagnostics, tuple(self._states), None)

    def _fail(self, session, status, draft, diagnostics, error):
        self._enter(STATE_FAILED)
        session.last_outcome = STATE_FAILED
        session.show_status(status, self.publish_status_seconds, self.clock())
        self._enter(STATE_IDLE)
        return PublishResult(False, status, None, draft, diagnostics, tuple(self._states), error)


class EditorSessionRegistry:
    """In-memory editor sessions keyed by (user id, page name); never persisted."""

    def __init__(self):
        self._sessions = {}
        self._lock = threading.Lock()

    def get(self, user_id, page_name):
        with self._lock:
            return self._sessions.get((user_id, page_name))

    def put(self, user_id, session):
        with self._lock:
            self._sessions[(user_id, session.page_name)] = session
        return session

    def discard(self, user_id, page_name=None):
        with self._lock:
            for key in list(self._sessions):
                if key[0] == user_id and (page_name is None or key[1] == page_name):
                    del self._sessions[key]
