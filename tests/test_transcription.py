import pytest
import requests

from voiceforms.errors import UpstreamFailure, ValidationFailed
from voiceforms.services import storage
from voiceforms.services.transcription import transcribe


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f'{self.status} error')

    def json(self):
        return self.payload


def test_whisper_request(app, monkeypatch):
    app.config['OPENAI_API_KEY'] = 'sk-test'
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return FakeResponse({'text': 'hello world'})

    monkeypatch.setattr('voiceforms.services.transcription.requests.post', fake_post)
    with app.app_context():
        assert transcribe(b'audio', filename='q.webm', language='en') == 'hello world'

    url, kwargs = calls[0]
    assert url.endswith('/audio/transcriptions')
    assert kwargs['headers'] == {'Authorization': 'Bearer sk-test'}
    assert kwargs['data'] == {'model': 'whisper-1', 'language': 'en'}
    assert kwargs['files']['file'] == ('q.webm', b'audio', 'audio/webm')


def test_deepgram_request(app, monkeypatch):
    app.config.update(TRANSCRIBE_BACKEND='deepgram', DEEPGRAM_API_KEY='dg-test',
                      DEEPGRAM_OPTIONS={'punctuate': True, 'smart_format': False})
    calls = []

    def fake_post(url, **kwargs):
        calls.append(kwargs)
        return FakeResponse({'results': {'channels': [{'alternatives': [{'transcript': 'hola'}]}]}})

    monkeypatch.setattr('voiceforms.services.transcription.requests.post', fake_post)
    with app.app_context():
        assert transcribe(b'audio', filename='q.webm') == 'hola'
    assert calls[0]['params'] == {'punctuate': 'true', 'smart_format': 'false'}
    assert calls[0]['headers']['Authorization'] == 'Token dg-test'


@pytest.mark.parametrize('outcome', [
    requests.exceptions.ConnectionError('down'),
    FakeResponse({'error': 'bad'}, status=500),
    FakeResponse({'unexpected': True}),
])
def test_whisper_failures_are_upstream(app, monkeypatch, outcome):
    app.config['OPENAI_API_KEY'] = 'sk-test'

    def fake_post(url, **kwargs):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr('voiceforms.services.transcription.requests.post', fake_post)
    with app.app_context():
        with pytest.raises(UpstreamFailure):
            transcribe(b'audio')


def test_unknown_backend(app):
    app.config['TRANSCRIBE_BACKEND'] = 'carrier-pigeon'
    with app.app_context():
        with pytest.raises(UpstreamFailure):
            transcribe(b'audio')


def test_parse_locator():
    assert storage.parse_locator('http://testserver/storage/audio/forms/f/q.webm') == ('audio', 'forms/f/q.webm')
    with pytest.raises(ValidationFailed):
        storage.parse_locator('https://example.com/audio.webm')


def test_local_storage_stays_in_bucket(app):
    with app.app_context():
        with pytest.raises(ValidationFailed):
            storage.read_bytes('audio', '../../etc/passwd')
        url = storage.save_bytes(b'abc', 'forms/f/q.webm')
        assert url == 'http://testserver/storage/audio/forms/f/q.webm'
        assert storage.read_bytes('audio', 'forms/f/q.webm') == b'abc'
        # uploads never overwrite
        with pytest.raises(ValidationFailed):
            storage.save_bytes(b'xyz', 'forms/f/q.webm')
