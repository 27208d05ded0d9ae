"""WSGI entry point: ``gunicorn alisha_site.wsgi:app``."""
try:
    from . import create_app
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from __init__ import create_app

app = create_app()
