try:
    from alisha_site.content_events import (
        SiteContentCache,
        notify_content_changed,
        subscribe,
        unsubscribe,
    )
    from alisha_site.content_store import put_page_document
except ModuleNotFoundError:  # pragma: no cover - fallback for direct alisha_site/ cwd test runs
    from content_events import (
        SiteContentCache,
        notify_content_changed,
        subscribe,
        unsubscribe,
    )
    from content_store import put_page_document


def test_failing_receiver_does_not_block_others(app):
    calls = []

    def broken(sender, **extra):
        raise RuntimeError("boom")

    def healthy(sender, **extra):
        calls.append(extra["page_name"])

    subscribe(broken, sender=app)
    subscribe(healthy, sender=app)
    try:
        delivered = notify_content_changed(app, page_name="about")
    finally:
        unsubscribe(broken, sender=app)
        unsubscribe(healthy, sender=app)

    assert calls == ["about"]
    # The app's own content cache is subscribed too.
    assert delivered == 2


def test_unsubscribed_receiver_is_not_called(app):
    calls = []

    def receiver(sender, **extra):
        calls.append(sender)

    subscribe(receiver, sender=app)
    unsubscribe(receiver, sender=app)
    notify_content_changed(app)

    assert calls == []


def test_cache_loads_lazily_and_refreshes_on_change(app):
    cache = SiteContentCache(app, ("home", "contact"))
    cache.attach()
    try:
        assert cache.refresh_count == 0
        content = cache.get()
        assert set(content) == {"home", "contact"}
        assert cache.refresh_count == 1

        with app.app_context():
            put_page_document("contact", {"info": {"phone": "999"}})
        assert cache.get("contact")["info"]["phone"] == "+012 345 6789"

        notify_content_changed(app, page_name="contact")
        assert cache.refresh_count == 2
        assert cache.get("contact") == {"info": {"phone": "999"}}
    finally:
        cache.detach()

    notify_content_changed(app, page_name="contact")
    assert cache.refresh_count == 2


def test_cache_ignores_other_apps(app, tmp_path, monkeypatch):
    from conftest import build_test_app

    other = build_test_app(tmp_path, monkeypatch)
    cache = SiteContentCache(app, ("home",))
    cache.attach()
    try:
        cache.get()
        notify_content_changed(other, page_name="home")
        assert cache.refresh_count == 1
    finally:
        cache.detach()
        other.extensions["site_content_cache"].detach()


def test_cache_returns_private_copies(app):
    cache = app.extensions["site_content_cache"]
    content = cache.get("home")
    content["hero"]["title"] = "mutated"
    assert cache.get("home")["hero"]["title"] != "mutated"
