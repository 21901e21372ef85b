"""
Bucket-style file storage on top of Django's default storage.

Objects live at <bucket>/<user_id>/[<sub>/]<timestamp>.<ext>, so a user's
uploads are grouped under their own prefix inside each bucket. Image
thumbnails for designs are rendered with Pillow.
"""
import io
import logging
import mimetypes
import os
import time
from typing import Optional, Dict, Any

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DOCUMENTS_BUCKET = 'documents'
DESIGNS_BUCKET = 'designs'
ADVERTISING_BUCKET = 'advertising-assets'
CHAT_ATTACHMENTS_BUCKET = 'chat-attachments'

BUCKETS = {DOCUMENTS_BUCKET, DESIGNS_BUCKET, ADVERTISING_BUCKET, CHAT_ATTACHMENTS_BUCKET}

THUMBNAIL_SIZE = (400, 400)
THUMBNAIL_SUBDIR = 'thumbnails'


def file_extension(filename: str) -> str:
    _, ext = os.path.splitext(filename or '')
    return ext.lstrip('.').lower() or 'bin'


def build_object_path(bucket: str, user_id, filename: str, sub: Optional[str] = None,
                      timestamp_ms: Optional[int] = None) -> str:
    """Object key for an upload: <bucket>/<user_id>/[<sub>/]<timestamp>.<ext>"""
    if bucket not in BUCKETS:
        raise ValueError(f"Unknown storage bucket: {bucket}")
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    parts = [bucket, str(user_id)]
    if sub:
        parts.append(str(sub).strip('/'))
    parts.append(f"{timestamp_ms}.{file_extension(filename)}")
    return '/'.join(parts)


def guess_content_type(uploaded_file) -> str:
    content_type = getattr(uploaded_file, 'content_type', None)
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(getattr(uploaded_file, 'name', '') or '')
    return guessed or 'application/octet-stream'


def upload_to_bucket(bucket: str, user_id, uploaded_file, sub: Optional[str] = None) -> Dict[str, Any]:
    """
    Store an uploaded file in a bucket.

    Returns the stored path together with the original file name, size and
    content type, ready to be copied onto a model row.
    """
    path = build_object_path(bucket, user_id, uploaded_file.name, sub=sub)
    stored_path = default_storage.save(path, uploaded_file)
    logger.info(f"Stored {uploaded_file.name} ({uploaded_file.size} bytes) at {stored_path}")
    return {
        'file_path': stored_path,
        'file_name': uploaded_file.name,
        'file_size': uploaded_file.size,
        'file_type': guess_content_type(uploaded_file),
    }


def public_url(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return default_storage.url(path)


def object_exists(path: Optional[str]) -> bool:
    return bool(path) and default_storage.exists(path)


def open_object(path: str):
    return default_storage.open(path, 'rb')


def remove_object(path: Optional[str]) -> bool:
    """
    Delete a stored object.
    Failures are logged and reported as False; row deletion goes ahead regardless.
    """
    if not path:
        return False
    try:
        if default_storage.exists(path):
            default_storage.delete(path)
            logger.info(f"Removed stored object {path}")
            return True
        logger.warning(f"Stored object {path} was already missing")
        return False
    except Exception as e:
        logger.error(f"Failed to remove stored object {path}: {str(e)}", exc_info=True)
        return False


def is_image(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith('image/')


def detect_asset_type(uploaded_file) -> Optional[str]:
    """'image' or 'video' from the upload's content type, None for anything else"""
    content_type = guess_content_type(uploaded_file)
    if content_type.startswith('image/'):
        return 'image'
    if content_type.startswith('video/'):
        return 'video'
    return None


def create_thumbnail(source_path: str, user_id) -> Optional[str]:
    """
    Render a PNG thumbnail for a stored image.
    Returns the thumbnail path, or None when the object is not a readable image.
    """
    try:
        with default_storage.open(source_path, 'rb') as source:
            img = Image.open(source)
            img.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not create thumbnail for {source_path}: {str(e)}")
        return None

    if img.mode not in ('RGB', 'RGBA'):
        img = img.convert('RGBA')
    img.thumbnail(THUMBNAIL_SIZE, Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    img.close()

    thumb_path = build_object_path(DESIGNS_BUCKET, user_id, 'thumbnail.png', sub=THUMBNAIL_SUBDIR)
    stored_path = default_storage.save(thumb_path, ContentFile(buffer.getvalue()))
    buffer.close()
    logger.debug(f"Created thumbnail {stored_path} for {source_path}")
    return stored_path
