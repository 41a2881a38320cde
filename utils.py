from flask import current_app, request
from flask_login import current_user
from werkzeug.utils import secure_filename

from blobs import ALLOWED_IMAGE_EXTENSIONS
from errors import ValidationError

ALLOWED_EXTENSIONS = {ext.lstrip('.') for ext in ALLOWED_IMAGE_EXTENSIONS}


def allowed_file(filename):
    """Check if the file has an allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def collect_uploads(field='images'):
    """Read uploaded images from the current request as ``(filename, bytes)`` pairs.

    Every rejected file is reported at once; nothing is read into storage here.
    """
    files = [f for f in request.files.getlist(field) if f and f.filename]
    max_files = current_app.config.get('MAX_FILES', 10)
    max_size = current_app.config.get('MAX_FILE_SIZE', 10 * 1024 * 1024)

    if len(files) > max_files:
        raise ValidationError({field: f'at most {max_files} images per request'})

    uploads, problems = [], []
    for file in files:
        filename = secure_filename(file.filename)
        if not allowed_file(filename):
            problems.append(f'{file.filename}: only jpg, jpeg, png, webp are allowed')
            continue
        content = file.read()
        if len(content) > max_size:
            problems.append(f'{file.filename}: larger than {max_size} bytes')
            continue
        uploads.append((filename, content))

    if problems:
        raise ValidationError({field: '; '.join(problems)}, 'Invalid image upload')
    return uploads


def request_payload():
    """JSON body, or the form fields of a multipart/urlencoded request."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError({'_': 'malformed JSON body'})
        return data
    return request.form.to_dict()


def principal_name():
    """Username of the caller, used to stamp createdBy / updatedBy."""
    return getattr(current_user, 'username', None)
