import logging
import os
import secrets

try:
    from .models import db, User, ROLE_OWNER
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from models import db, User, ROLE_OWNER

logger = logging.getLogger(__name__)


def seed_database():
    """Create the owner account on first start; page documents are created by publishing."""
    env_password = os.environ.get('ADMIN_PASSWORD') or ''

    # Always sync admin password with env var on startup
    if env_password:
        try:
            existing_admin = User.query.filter_by(username='admin').first()
            if existing_admin:
                existing_admin.set_password(env_password)
                db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception('Failed to sync admin password from ADMIN_PASSWORD.')

    if User.query.order_by(User.id.asc()).first():
        return

    if not env_password:
        env_password = secrets.token_urlsafe(16)
        logger.warning(
            'ADMIN_PASSWORD not set. Seeded admin with a random password. '
            'Set ADMIN_PASSWORD and restart to rotate it to a known value.'
        )
    admin = User(username='admin', email='admin@example.com', role=ROLE_OWNER)
    admin.set_password(env_password)
    db.session.add(admin)
    db.session.commit()
