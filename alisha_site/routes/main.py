import os

from flask import Blueprint, abort, current_app, jsonify, request, send_from_directory
from flask_login import current_user, login_required
from slugify import slugify
from werkzeug.utils import secure_filename

try:
    from ..content_events import notify_content_changed
    from ..content_store import (
        ANY_VERSION,
        ContentConflictError,
        ContentStoreError,
        get_page_document,
        put_page_document,
    )
    from ..models import PERMISSION_CONTENT_PUBLISH
    from ..utils import clean_text
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from content_events import notify_content_changed
    from content_store import (
        ANY_VERSION,
        ContentConflictError,
        ContentStoreError,
        get_page_document,
        put_page_document,
    )
    from models import PERMISSION_CONTENT_PUBLISH
    from utils import clean_text

main_bp = Blueprint('main', __name__)
PAGE_NAME_MAX_LENGTH = 50
IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def normalize_page_name(raw_name):
    """Canonical page name for the store; 404 when nothing usable remains."""
    name = slugify(clean_text(raw_name, 200))
    if not name or len(name) > PAGE_NAME_MAX_LENGTH:
        abort(404)
    return name


def _safe_upload_path(stored_name):
    upload_root = os.path.abspath(current_app.config['UPLOAD_FOLDER'])
    raw_name = (stored_name or '').strip()
    safe_name = secure_filename(raw_name)
    if not safe_name or safe_name != raw_name:
        return None, None
    full_path = os.path.abspath(os.path.join(upload_root, safe_name))
    try:
        if os.path.commonpath([upload_root, full_path]) != upload_root:
            return None, None
    except ValueError:
        return None, None
    return safe_name, full_path


@main_bp.route('/api/pages/<page_name>')
def page_document(page_name):
    name = normalize_page_name(page_name)
    try:
        document = get_page_document(name)
    except ContentStoreError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 502
    return jsonify({'success': True, 'data': document})


@main_bp.route('/api/pages/<page_name>', methods=['POST'])
@login_required
def save_page_document(page_name):
    if not current_user.has_permission(PERMISSION_CONTENT_PUBLISH):
        abort(403)
    name = normalize_page_name(page_name)
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not isinstance(payload.get('sections'), dict):
        abort(400, description='Request body must be an object with a "sections" object.')

    expected = payload['baseUpdatedAt'] if 'baseUpdatedAt' in payload else ANY_VERSION
    if expected is not ANY_VERSION and expected is not None and not isinstance(expected, str):
        abort(400, description='"baseUpdatedAt" must be a string or null.')
    published = payload.get('published', True)
    if not isinstance(published, bool):
        abort(400, description='"published" must be true or false.')

    try:
        document = put_page_document(
            name,
            payload['sections'],
            published=published,
            expected_updated_at=expected,
        )
    except ContentConflictError as exc:
        return jsonify({
            'success': False,
            'error': str(exc),
            'conflict': True,
            'currentUpdatedAt': exc.current_updated_at,
        }), 409
    except ContentStoreError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 502

    current_app.logger.info('Page "%s" saved by %s.', name, current_user.username)
    notify_content_changed(current_app._get_current_object(), page_name=name)
    return jsonify({'success': True, 'data': document})


@main_bp.route('/api/content')
def site_content():
    cache = current_app.extensions['site_content_cache']
    try:
        content = cache.get()
    except ContentStoreError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 502
    return jsonify({'success': True, 'data': content})


@main_bp.route('/uploads/<filename>')
def uploaded_file(filename):
    safe_filename, full_path = _safe_upload_path(filename)
    if not safe_filename or not full_path or not os.path.exists(full_path):
        abort(404)
    response = send_from_directory(current_app.config['UPLOAD_FOLDER'], safe_filename, conditional=True, etag=True)
    extension = safe_filename.rsplit('.', 1)[1].lower() if '.' in safe_filename else ''
    if extension not in IMAGE_EXTENSIONS:
        response.headers['Content-Disposition'] = f'attachment; filename="{safe_filename}"'
    return response
