"""Blob storage for recorded audio.

Blobs live either in a local directory or in an S3 bucket
(``STORAGE_BACKEND``). Whatever the backend, the locator handed back to
clients is ``<PUBLIC_BASE_URL>/storage/<bucket>/<key>``, served by the public
blueprint, so locators stay stable if the backend changes.
"""
import mimetypes
import os
import re
from urllib.parse import urlparse, unquote

from flask import current_app
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import UpstreamFailure, ValidationFailed, NotFound

_LOCATOR_RE = re.compile(r"/storage/([^/]+)/(.+)$")


def _ensure_local_dir():
    d = current_app.config['LOCAL_STORAGE_DIR']
    os.makedirs(d, exist_ok=True)
    return d


def _local_path(bucket, key):
    base = os.path.abspath(_ensure_local_dir())
    root = os.path.abspath(os.path.join(base, bucket))
    path = os.path.abspath(os.path.join(root, key))
    # bucket and key come from URLs; never resolve outside the bucket directory
    if not root.startswith(base + os.sep) or not path.startswith(root + os.sep):
        raise ValidationFailed('Invalid storage key')
    return path


def _s3_client():
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    s3_config = Config(signature_version='s3v4', s3={'addressing_style': 'virtual'})
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=s3_config,
        **s3_kwargs,
    )


def _s3_key(bucket, key):
    # one physical S3 bucket holds every logical bucket as a prefix
    return f"{bucket}/{key}"


def content_type_for(name):
    # browsers record webm audio; mimetypes maps .webm to video/webm
    if (name or '').lower().endswith('.webm'):
        return 'audio/webm'
    return mimetypes.guess_type(name or '')[0] or 'application/octet-stream'


def public_url(bucket, key):
    base = (current_app.config.get('PUBLIC_BASE_URL') or '').rstrip('/')
    return f"{base}/storage/{bucket}/{key}"


def save_bytes(data: bytes, key: str, bucket: str = None, content_type: str = 'application/octet-stream') -> str:
    """Store ``data`` under ``bucket/key`` and return its public locator."""
    bucket = bucket or current_app.config.get('AUDIO_BUCKET', 'audio')
    backend = current_app.config.get('STORAGE_BACKEND', 'local')

    if backend == 's3':
        try:
            _s3_client().put_object(
                Bucket=current_app.config.get('S3_BUCKET'),
                Key=_s3_key(bucket, key),
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            current_app.logger.exception('S3 upload failed for %s/%s', bucket, key)
            raise UpstreamFailure() from e
    else:
        path = _local_path(bucket, key)
        if os.path.exists(path):
            # uploads never overwrite an existing blob
            raise ValidationFailed('A file already exists at this path')
        os.makedirs(os.path.dirname(path), exist_ok=True)
        try:
            with open(path, 'wb') as fh:
                fh.write(data)
        except OSError as e:
            current_app.logger.exception('Local storage write failed for %s', path)
            raise UpstreamFailure() from e
    return public_url(bucket, key)


def parse_locator(url: str):
    """Split a public locator into ``(bucket, key)``.

    Raises ValidationFailed when the URL does not have the storage shape.
    """
    path = urlparse(url or '').path
    m = _LOCATOR_RE.search(path)
    if not m:
        raise ValidationFailed('Invalid audio URL format')
    return m.group(1), unquote(m.group(2))


def read_bytes(bucket: str, key: str) -> bytes:
    backend = current_app.config.get('STORAGE_BACKEND', 'local')
    if backend == 's3':
        try:
            obj = _s3_client().get_object(Bucket=current_app.config.get('S3_BUCKET'), Key=_s3_key(bucket, key))
            return obj['Body'].read()
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code in ('NoSuchKey', '404'):
                raise NotFound('File not found') from e
            current_app.logger.exception('S3 download failed for %s/%s', bucket, key)
            raise UpstreamFailure() from e
        except BotoCoreError as e:
            current_app.logger.exception('S3 download failed for %s/%s', bucket, key)
            raise UpstreamFailure() from e

    path = _local_path(bucket, key)
    if not os.path.isfile(path):
        raise NotFound('File not found')
    with open(path, 'rb') as f:
        return f.read()