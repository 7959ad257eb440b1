"""
Uploads Module - Storage for admin-uploaded images

Images reach the API as base64 data URIs inside JSON bodies. They are decoded,
checked, written under UPLOAD_FOLDER and referenced from then on by their
public path (``/uploads/<filename>``).
"""

import base64
import binascii
import os
import re
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from .errors import ValidationError


DATA_URI = re.compile(r'^data:([A-Za-z0-9.+/-]+);base64,(.+)$', re.S)

# MIME subtypes whose name is not the usual extension
MIME_EXTENSIONS = {
    'image/jpeg': 'jpg',
    'image/svg+xml': 'svg',
}


def allowed_file(filename):
    """Check if file extension is allowed"""
    allowed_extensions = current_app.config.get('ALLOWED_EXTENSIONS', {'png', 'jpg', 'jpeg', 'gif', 'webp'})
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


def get_upload_folder():
    """Absolute path of the upload folder, created on demand"""
    folder = current_app.config.get('UPLOAD_FOLDER', os.path.join('public', 'uploads'))
    if not os.path.isabs(folder):
        folder = os.path.join(current_app.root_path, folder)
    os.makedirs(folder, exist_ok=True)
    return folder


def get_url_prefix():
    return current_app.config.get('UPLOAD_URL_PREFIX', '/uploads').rstrip('/')


def is_upload_path(value):
    """True when ``value`` references a file stored by this module"""
    return isinstance(value, str) and value.startswith(get_url_prefix() + '/')


def is_data_uri(value):
    return isinstance(value, str) and value.startswith('data:image')


def _upload_error(message, field='base64Data'):
    return ValidationError('Invalid file data', [{'field': field, 'message': message}])


def save_data_uri(data_uri, filename=None, field='base64Data'):
    """
    Decode a base64 image data URI and store it.

    Args:
        data_uri (str): ``data:image/<type>;base64,<payload>``
        filename (str, optional): Original filename, kept as a suffix
        field (str): Field name reported on validation errors

    Returns:
        str: Public path of the stored file
    """
    match = DATA_URI.match(data_uri or '')
    if not match:
        raise _upload_error('Expected a base64 encoded data URI', field)

    content_type = match.group(1).lower()
    if not content_type.startswith('image/'):
        raise _upload_error('Only image uploads are allowed', field)

    try:
        payload = base64.b64decode(re.sub(r'\s+', '', match.group(2)), validate=True)
    except (binascii.Error, ValueError):
        raise _upload_error('File data is not valid base64', field) from None

    max_size = current_app.config.get('MAX_UPLOAD_SIZE', 10 * 1024 * 1024)
    if len(payload) > max_size:
        raise _upload_error(f'File size exceeds the maximum limit of {max_size // (1024 * 1024)}MB', field)

    extension = MIME_EXTENSIONS.get(content_type, content_type.split('/', 1)[1])
    if filename:
        safe_name = secure_filename(filename)
        if not safe_name or not allowed_file(safe_name):
            raise _upload_error('File type is not allowed', field)
        final_name = f"{uuid.uuid4().hex[:12]}_{safe_name}"
    else:
        final_name = f"{uuid.uuid4()}.{extension}"
        if not allowed_file(final_name):
            raise _upload_error('File type is not allowed', field)

    with open(os.path.join(get_upload_folder(), final_name), 'wb') as f:
        f.write(payload)

    current_app.logger.info(f"Stored upload {final_name} ({len(payload)} bytes)")
    return f"{get_url_prefix()}/{final_name}"


def store_image_value(value, field):
    """Persist a data URI and return its path; other references pass through"""
    if is_data_uri(value):
        return save_data_uri(value, field=field)
    return value


def delete_upload(path):
    """Remove a stored upload; references to external images are ignored"""
    if not is_upload_path(path):
        return False
    filename = os.path.basename(path)
    file_path = os.path.join(get_upload_folder(), filename)
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            current_app.logger.info(f"Deleted upload {filename}")
            return True
        return False
    except OSError as e:
        current_app.logger.error(f"Error deleting upload {filename}: {str(e)}")
        return False


__all__ = [
    'allowed_file',
    'get_upload_folder',
    'is_upload_path',
    'is_data_uri',
    'save_data_uri',
    'store_image_value',
    'delete_upload'
]
