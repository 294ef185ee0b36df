"""Speech-to-text wrappers.

The Whisper and Deepgram HTTP APIs are called directly with ``requests``.
Each call is single-shot: any failure becomes ``UpstreamFailure`` and the
respondent decides whether to try again.
"""
from flask import current_app
import requests

from ..errors import UpstreamFailure
from .storage import content_type_for

OPENAI_TRANSCRIBE_URL = 'https://api.openai.com/v1/audio/transcriptions'
DEEPGRAM_LISTEN_URL = 'https://api.deepgram.com/v1/listen'


def _content_type(filename):
    return content_type_for(filename or 'audio.webm')


def transcribe_openai(audio_bytes: bytes, filename: str = 'audio.webm', language: str = None) -> str:
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key:
        current_app.logger.error('OPENAI_API_KEY is not configured; cannot transcribe')
        raise UpstreamFailure()

    data = {'model': current_app.config.get('OPENAI_TRANSCRIBE_MODEL', 'whisper-1')}
    if language:
        data['language'] = language
    files = {'file': (filename, audio_bytes, _content_type(filename))}
    headers = {'Authorization': f'Bearer {api_key}'}
    try:
        r = requests.post(OPENAI_TRANSCRIBE_URL, headers=headers, data=data, files=files,
                          timeout=current_app.config.get('TRANSCRIBE_TIMEOUT', 60))
        r.raise_for_status()
        jr = r.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        current_app.logger.exception('Whisper transcription failed')
        raise UpstreamFailure() from e

    text = jr.get('text') if isinstance(jr, dict) else None
    if text is None:
        current_app.logger.error('Whisper response had no text: %s', str(jr)[:500])
        raise UpstreamFailure()
    return text


def transcribe_deepgram(audio_bytes: bytes, filename: str = 'audio.webm', language: str = None) -> str:
    dg_key = current_app.config.get('DEEPGRAM_API_KEY')
    if not dg_key:
        current_app.logger.error('DEEPGRAM_API_KEY is not configured; cannot transcribe')
        raise UpstreamFailure()

    opts = current_app.config.get('DEEPGRAM_OPTIONS', {}) or {}
    params = {k: ('true' if v is True else 'false' if v is False else v) for k, v in opts.items()}
    if language:
        params['language'] = language
    headers = {
        'Authorization': f'Token {dg_key}',
        'Content-Type': _content_type(filename),
    }
    try:
        r = requests.post(DEEPGRAM_LISTEN_URL, headers=headers, params=params, data=audio_bytes,
                          timeout=current_app.config.get('TRANSCRIBE_TIMEOUT', 60))
        r.raise_for_status()
        jr = r.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        current_app.logger.exception('Deepgram transcription failed')
        raise UpstreamFailure() from e

    # Deepgram typical shape: {results: {channels: [{alternatives:[{transcript:...}]}]}}
    try:
        return jr['results']['channels'][0]['alternatives'][0]['transcript']
    except (KeyError, IndexError, TypeError) as e:
        current_app.logger.error('Deepgram response had no transcript: %s', str(jr)[:500])
        raise UpstreamFailure() from e


BACKENDS = {
    'openai': transcribe_openai,
    'deepgram': transcribe_deepgram,
}


def transcribe(audio_bytes: bytes, filename: str = 'audio.webm', language: str = None) -> str:
    name = current_app.config.get('TRANSCRIBE_BACKEND', 'openai')
    backend = BACKENDS.get(name)
    if backend is None:
        current_app.logger.error('Unknown TRANSCRIBE_BACKEND %r', name)
        raise UpstreamFailure()
    return backend(audio_bytes, filename=filename, language=language)
