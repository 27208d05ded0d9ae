from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

try:
    from .utils import isoformat_or_none, safe_json_loads, to_json, utc_now_naive
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from utils import isoformat_or_none, safe_json_loads, to_json, utc_now_naive

db = SQLAlchemy()

ROLE_OWNER = 'owner'
ROLE_ADMIN = 'admin'
ROLE_EDITOR = 'editor'
USER_ROLE_CHOICES = (
    ROLE_OWNER,
    ROLE_ADMIN,
    ROLE_EDITOR,
)
ROLE_DEFAULT = ROLE_ADMIN
PERMISSION_CONTENT_EDIT = 'content:edit'
PERMISSION_CONTENT_PUBLISH = 'content:publish'
PERMISSION_MEDIA_UPLOAD = 'media:upload'
ROLE_PERMISSIONS = {
    ROLE_OWNER: {
        PERMISSION_CONTENT_EDIT,
        PERMISSION_CONTENT_PUBLISH,
        PERMISSION_MEDIA_UPLOAD,
    },
    ROLE_ADMIN: {
        PERMISSION_CONTENT_EDIT,
        PERMISSION_CONTENT_PUBLISH,
        PERMISSION_MEDIA_UPLOAD,
    },
    ROLE_EDITOR: {
        PERMISSION_CONTENT_EDIT,
        PERMISSION_MEDIA_UPLOAD,
    },
}


def normalize_user_role(value, default=ROLE_DEFAULT):
    candidate = (value or '').strip().lower()
    if candidate in USER_ROLE_CHOICES:
        return candidate
    return default


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(30), nullable=False, default=ROLE_DEFAULT, index=True)
    last_login_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def role_key(self):
        return normalize_user_role(self.role, default=ROLE_DEFAULT)

    def has_permission(self, permission):
        return permission in ROLE_PERMISSIONS.get(self.role_key, ROLE_PERMISSIONS[ROLE_DEFAULT])


class Media(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(300), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utc_now_naive)


class AuthRateLimitBucket(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    scope = db.Column(db.String(80), nullable=False, index=True)
    ip = db.Column(db.String(64), nullable=False, index=True)
    count = db.Column(db.Integer, nullable=False, default=0)
    reset_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    __table_args__ = (
        db.UniqueConstraint('scope', 'ip', name='uq_auth_rate_limit_scope_ip'),
    )


class PageContent(db.Model):
    """Published content document for one page, keyed by page name."""

    __tablename__ = 'page_content'

    id = db.Column(db.Integer, primary_key=True)
    page_name = db.Column(db.String(50), unique=True, nullable=False, index=True)
    sections_json = db.Column(db.Text, nullable=False, default='{}')
    published = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive)

    @property
    def sections(self):
        sections = safe_json_loads(self.sections_json, {})
        return sections if isinstance(sections, dict) else {}

    @sections.setter
    def sections(self, value):
        self.sections_json = to_json(value if isinstance(value, dict) else {}, {})

    def to_dict(self):
        return {
            'pageName': self.page_name,
            'sections': self.sections,
            'published': bool(self.published),
            'createdAt': isoformat_or_none(self.created_at),
            'updatedAt': isoformat_or_none(self.updated_at),
        }
