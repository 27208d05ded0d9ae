"""Process-wide "content changed" notification and the public content cache.

Publishing emits ``content_changed`` with the Flask app as sender.  Content
consumers subscribe when they are mounted, unsubscribe on teardown, and
re-fetch the pages they display whenever the signal fires.
"""
import copy
import logging
import threading

from blinker import ANY, Namespace

try:
    from .content_store import get_page_document
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_store import get_page_document

logger = logging.getLogger(__name__)

_content_signals = Namespace()
content_changed = _content_signals.signal('content-changed')


def subscribe(receiver, sender=ANY):
    content_changed.connect(receiver, sender=sender)
    return receiver


def unsubscribe(receiver, sender=ANY):
    content_changed.disconnect(receiver, sender=sender)


def notify_content_changed(sender, page_name=None):
    """Call every receiver; one failing receiver does not stop the others."""
    delivered = 0
    for receiver in list(content_changed.receivers_for(sender)):
        try:
            receiver(sender, page_name=page_name)
            delivered += 1
        except Exception:
            logger.exception('Content change receiver %r failed.', receiver)
    return delivered


class SiteContentCache:
    """Sections of every public page, re-fetched on each content change."""

    def __init__(self, app, page_names):
        self._app = app
        self._page_names = tuple(page_names)
        self._content = {}
        self._loaded = False
        self._lock = threading.Lock()
        self.refresh_count = 0

    @property
    def page_names(self):
        return self._page_names

    def attach(self):
        subscribe(self._on_content_changed, sender=self._app)

    def detach(self):
        unsubscribe(self._on_content_changed, sender=self._app)

    def _on_content_changed(self, sender, **extra):
        self.refresh()

    def refresh(self):
        with self._app.app_context():
            content = {name: get_page_document(name)['sections'] for name in self._page_names}
        with self._lock:
            self._content = content
            self._loaded = True
            self.refresh_count += 1
        logger.debug('Site content cache refreshed (%d pages).', len(content))

    def get(self, page_name=None):
        if not self._loaded:
            self.refresh()
        with self._lock:
            if page_name is None:
                return copy.deepcopy(self._content)
            return copy.deepcopy(self._content.get(page_name, {}))
