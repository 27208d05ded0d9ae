from datetime import timedelta
import os
import uuid

from flask import Blueprint, abort, current_app, jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user
from PIL import Image, UnidentifiedImageError
from werkzeug.security import check_password_hash, generate_password_hash
from werkzeug.utils import secure_filename

try:
    from .. import get_csrf_token
    from ..content_audit import run_page_field_audit
    from ..content_capture import SurfaceFormatError, capture_value, parse_editable_surface
    from ..content_paths import normalize_field, route_section
    from ..content_store import ContentStoreError
    from ..models import (
        db,
        User,
        Media,
        AuthRateLimitBucket,
        PERMISSION_CONTENT_EDIT,
        PERMISSION_CONTENT_PUBLISH,
        PERMISSION_MEDIA_UPLOAD,
    )
    from ..publisher import STATUS_CONFLICT, PublishController
    from ..utils import utc_now_naive, clean_text, get_request_ip
    from .main import normalize_page_name
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from __init__ import get_csrf_token
    from content_audit import run_page_field_audit
    from content_capture import SurfaceFormatError, capture_value, parse_editable_surface
    from content_paths import normalize_field, route_section
    from content_store import ContentStoreError
    from models import (
        db,
        User,
        Media,
        AuthRateLimitBucket,
        PERMISSION_CONTENT_EDIT,
        PERMISSION_CONTENT_PUBLISH,
        PERMISSION_MEDIA_UPLOAD,
    )
    from publisher import STATUS_CONFLICT, PublishController
    from utils import utc_now_naive, clean_text, get_request_ip
    from routes.main import normalize_page_name

admin_bp = Blueprint('admin', __name__)
LOGIN_SCOPE = 'admin_login'
IDENTIFIER_MAX_LENGTH = 80
AUTH_DUMMY_HASH = generate_password_hash('AlishaSite::dummy-auth-check')


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in current_app.config['ALLOWED_EXTENSIONS']


def _login_limit():
    return int(current_app.config.get('ADMIN_LOGIN_LIMIT', 5))


def _login_window():
    return timedelta(seconds=int(current_app.config.get('ADMIN_LOGIN_WINDOW_SECONDS', 300)))


def get_login_bucket():
    ip = get_request_ip()
    now = utc_now_naive()
    bucket = AuthRateLimitBucket.query.filter_by(scope=LOGIN_SCOPE, ip=ip).first()
    if not bucket:
        bucket = AuthRateLimitBucket(scope=LOGIN_SCOPE, ip=ip, count=0, reset_at=now + _login_window())
        db.session.add(bucket)
        db.session.commit()
        return bucket
    if bucket.reset_at <= now:
        bucket.count = 0
        bucket.reset_at = now + _login_window()
        db.session.commit()
    return bucket


def is_admin_login_rate_limited():
    bucket = get_login_bucket()
    if bucket.count < _login_limit():
        return False, 0
    seconds = max(1, int((bucket.reset_at - utc_now_naive()).total_seconds()))
    return True, seconds


def register_admin_login_failure():
    bucket = get_login_bucket()
    bucket.count += 1
    db.session.commit()
    return bucket.count


def clear_admin_login_failures():
    ip = get_request_ip()
    bucket = AuthRateLimitBucket.query.filter_by(scope=LOGIN_SCOPE, ip=ip).first()
    if bucket:
        db.session.delete(bucket)
        db.session.commit()


def validate_uploaded_file(file):
    if not file or not file.filename:
        return False

    filename = secure_filename(file.filename)
    if not filename or len(filename) > 180 or not allowed_file(filename):
        return False

    extension = filename.rsplit('.', 1)[1].lower()
    mime_type = (file.mimetype or '').split(';', 1)[0].lower()
    allowed_mimes = current_app.config.get('ALLOWED_UPLOAD_MIME_TYPES', set())
    extension_allowed_mimes = {
        'png': {'image/png'},
        'jpg': {'image/jpeg'},
        'jpeg': {'image/jpeg'},
        'gif': {'image/gif'},
        'webp': {'image/webp'},
    }
    if (
        mime_type not in allowed_mimes
        or extension not in extension_allowed_mimes
        or mime_type not in extension_allowed_mimes[extension]
    ):
        return False

    max_pixels = max(1, int(current_app.config.get('MAX_UPLOAD_IMAGE_PIXELS', 40_000_000)))
    file.stream.seek(0)
    try:
        with Image.open(file.stream) as image:
            width, height = image.size
            if width < 1 or height < 1 or (width * height) > max_pixels:
                return False
            image.verify()
        return True
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return False
    finally:
        file.stream.seek(0)


def save_upload(file):
    if not validate_uploaded_file(file):
        return None
    filename = secure_filename(file.filename)
    unique_name = f"{uuid.uuid4().hex[:16]}_{filename}"
    full_path = os.path.join(current_app.config['UPLOAD_FOLDER'], unique_name)
    file.save(full_path)
    file_size = os.path.getsize(full_path)
    media = Media(filename=filename, file_path=unique_name, file_size=file_size, mime_type=(file.mimetype or ''))
    db.session.add(media)
    db.session.commit()
    return media


def require_permission(permission):
    if not current_user.has_permission(permission):
        abort(403, description='Your role does not allow this action.')


def _json_body():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        abort(400, description='Request body must be a JSON object.')
    return payload


def _identifier(value, label):
    cleaned = clean_text(value if isinstance(value, str) else '', IDENTIFIER_MAX_LENGTH)
    if not cleaned:
        abort(400, description=f'"{label}" is required.')
    return cleaned


def _controller():
    return PublishController.from_config(current_app.config)


def _sessions():
    return current_app.extensions['editor_sessions']


def editor_session_for(page_name, reload=False):
    """The caller's working copy of ``page_name``, loading it on first use."""
    registry = _sessions()
    editor_session = None if reload else registry.get(current_user.id, page_name)
    if editor_session is None:
        editor_session = registry.put(current_user.id, _controller().load_page_content(page_name))
    return editor_session


def _session_response(editor_session, status_code=200, **extra):
    payload = {'success': status_code < 400, 'data': editor_session.to_dict()}
    payload.update(extra)
    return jsonify(payload), status_code


@admin_bp.errorhandler(SurfaceFormatError)
def handle_surface_error(error):
    return jsonify({'success': False, 'error': str(error)}), 400


@admin_bp.errorhandler(ContentStoreError)
def handle_store_error(error):
    current_app.logger.error('Content store unavailable: %s', error)
    return jsonify({'success': False, 'error': str(error)}), 502


# Auth
@admin_bp.route('/session')
def session_state():
    data = {
        'authenticated': bool(current_user.is_authenticated),
        'csrfToken': get_csrf_token(),
    }
    if current_user.is_authenticated:
        data['username'] = current_user.username
        data['role'] = current_user.role_key
    return jsonify({'success': True, 'data': data})


@admin_bp.route('/login', methods=['POST'])
def login():
    limited, seconds = is_admin_login_rate_limited()
    if limited:
        return jsonify({
            'success': False,
            'error': f'Too many login attempts. Try again in {seconds} seconds.',
            'retryAfter': seconds,
        }), 429

    payload = request.get_json(silent=True) if request.is_json else request.form
    payload = payload or {}
    username = clean_text(payload.get('username'), 80)
    password = payload.get('password') or ''
    if not isinstance(password, str):
        password = ''
    user = User.query.filter_by(username=username).first()
    password_ok = False
    if user:
        password_ok = user.check_password(password)
    else:
        # Keep response timing closer for unknown usernames.
        check_password_hash(AUTH_DUMMY_HASH, password)
    if user and password_ok:
        clear_admin_login_failures()
        session.clear()
        login_user(user)
        user.last_login_at = utc_now_naive()
        db.session.commit()
        current_app.logger.info('Admin login for %s.', user.username)
        return jsonify({
            'success': True,
            'data': {'username': user.username, 'role': user.role_key, 'csrfToken': get_csrf_token()},
        })

    attempts = register_admin_login_failure()
    remaining = max(0, _login_limit() - attempts)
    return jsonify({
        'success': False,
        'error': 'Invalid credentials.',
        'attemptsRemaining': remaining,
    }), 401


@admin_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    _sessions().discard(current_user.id)
    logout_user()
    session.clear()
    return jsonify({'success': True})


# Editor
@admin_bp.route('/editor/<page_name>')
@login_required
def editor_load(page_name):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    reload = (request.args.get('reload') or '').strip().lower() in {'1', 'true', 'yes'}
    return _session_response(editor_session_for(name, reload=reload))


@admin_bp.route('/editor/<page_name>/sections/<section>/<key>', methods=['PUT'])
@login_required
def editor_set_value(page_name, section, key):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    payload = _json_body()
    if 'value' not in payload:
        abort(400, description='"value" is required.')
    editor_session = editor_session_for(name)
    section_name = route_section(name, _identifier(section, 'section'))
    editor_session.set_value(section_name, _identifier(key, 'key'), payload['value'])
    return _session_response(editor_session)


@admin_bp.route('/editor/<page_name>/pending', methods=['POST'])
@login_required
def editor_stage_edit(page_name):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    payload = _json_body()
    raw_section = payload.get('section') or ''
    parsed = parse_editable_surface([{
        'section': raw_section,
        'fields': [{'field': payload.get('field'), 'value': payload.get('value'), 'type': payload.get('type')}],
    }])
    field = parsed[0].fields[0]
    editor_session = editor_session_for(name)
    value = capture_value(field, current_app.config.get('ASSET_ORIGINS', ()))
    if value == '':
        editor_session.pending_edit = None
    else:
        normalized = normalize_field(name, parsed[0].raw_section, field.raw_field, value)
        editor_session.stage_edit(normalized.section, normalized.key, normalized.value)
    return _session_response(editor_session)


@admin_bp.route('/editor/<page_name>/draft', methods=['POST'])
@login_required
def editor_save_draft(page_name):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    surface = parse_editable_surface(_json_body())
    editor_session = editor_session_for(name)
    draft = _controller().save_draft(editor_session, surface)
    return _session_response(editor_session, draft=draft)


@admin_bp.route('/editor/<page_name>/publish', methods=['POST'])
@login_required
def editor_publish(page_name):
    require_permission(PERMISSION_CONTENT_PUBLISH)
    name = normalize_page_name(page_name)
    surface = parse_editable_surface(_json_body())
    editor_session = editor_session_for(name)
    result = _controller().publish(editor_session, surface, sender=current_app._get_current_object())
    extra = {
        'status': result.status,
        'states': list(result.states),
        'diagnostics': [change._asdict() for change in result.diagnostics],
    }
    if result.ok:
        current_app.logger.info('Page "%s" published by %s.', name, current_user.username)
        return _session_response(editor_session, document=result.document, **extra)
    if result.status == STATUS_CONFLICT:
        return _session_response(
            editor_session,
            409,
            error=str(result.error),
            conflict=True,
            currentUpdatedAt=result.error.current_updated_at,
            **extra,
        )
    return _session_response(editor_session, 502, error=str(result.error), **extra)


@admin_bp.route('/editor/<page_name>/status')
@login_required
def editor_status(page_name):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    editor_session = _sessions().get(current_user.id, name)
    if editor_session is None:
        return jsonify({'success': True, 'data': {'pageName': name, 'status': '', 'loaded': False}})
    return jsonify({
        'success': True,
        'data': {
            'pageName': name,
            'status': editor_session.status_at(),
            'lastOutcome': editor_session.last_outcome,
            'pendingEdit': editor_session.pending_edit is not None,
            'loaded': True,
        },
    })


@admin_bp.route('/editor/<page_name>/audit', methods=['POST'])
@login_required
def editor_audit(page_name):
    require_permission(PERMISSION_CONTENT_EDIT)
    name = normalize_page_name(page_name)
    report = run_page_field_audit(name, parse_editable_surface(_json_body()))
    return jsonify({'success': True, 'data': report})


# Media
@admin_bp.route('/uploads', methods=['POST'])
@login_required
def media_upload():
    require_permission(PERMISSION_MEDIA_UPLOAD)
    file = request.files.get('file')
    if not file:
        abort(400, description='Please choose a file to upload.')
    media = save_upload(file)
    if media is None:
        abort(400, description='Invalid file type or unsafe file content.')
    return jsonify({
        'success': True,
        'data': {
            'url': f'/uploads/{media.file_path}',
            'filename': media.filename,
            'size': media.file_size,
        },
    }), 201
