import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from voiceforms import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app('config.TestConfig')
    app.config['LOCAL_STORAGE_DIR'] = str(tmp_path / 'storage')
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup():
    def _signup(client, email='owner@example.com', password='secret-pass'):
        r = client.post('/auth/signup', json={'email': email, 'password': password, 'confirm': password})
        assert r.status_code == 201, r.get_json()
        return r.get_json()
    return _signup


@pytest.fixture
def owner(client, signup):
    return signup(client)


@pytest.fixture
def make_form(client, owner):
    """Create a form through the API and give it ``questions``."""
    def _make(questions, title='Customer survey', published=True, settings=None):
        body = {'title': title, 'published': published}
        if settings is not None:
            body['settings'] = settings
        r = client.post('/api/forms', json=body)
        assert r.status_code == 201, r.get_json()
        form = r.get_json()
        r = client.post(f"/api/forms/{form['id']}/questions", json={'questions': questions})
        assert r.status_code == 200, r.get_json()
        return form, r.get_json()['questions']
    return _make
