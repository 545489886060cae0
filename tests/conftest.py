import json

import pytest

from app import create_app
from config import TestConfig
from database import db
from frontend.api import ApiClient

API_BASE = 'http://localhost/api'

USER_PAYLOAD = {
    'fullName': 'Jane Donor',
    'email': 'jane@example.com',
    'phone': '+15551234567',
    'password': 'secret123',
    'role': 'UNASSIGNED',
    'homeAddress': '1 Main St',
    'bloodType': 'O',
    'rhesus': '-',
}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(**overrides):
        payload = dict(USER_PAYLOAD, **overrides)
        response = client.post('/api/auth/register', json=payload)
        assert response.status_code == 200, response.get_json()
        return response.get_json()
    return _register


@pytest.fixture
def user(register):
    return register()


@pytest.fixture
def donor_profile(client, user):
    response = client.post('/api/Donor_Profiles', json={
        'bloodType': 'O',
        'rhesus': '-',
        'availabilityStatus': 'Available',
        'homeAddress': '1 Main St',
        'location': '1 Main St',
        'preferredRadiusKm': 25,
        'user': {'userId': user['userId']},
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def blood_request(client, user):
    response = client.post('/api/Blood_Requests', json={
        'neededBloodType': 'O',
        'neededRhesus': '-',
        'unitsNeeded': 3,
        'hospitalName': 'General Hospital',
        'hospitalAddress': '99 Care Rd',
        'urgency': 'HIGH',
        'neededBefore': '2030-01-15T08:30:00',
        'notes': 'Surgery',
        'user': {'userId': user['userId']},
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


class _TestResponse:
    def __init__(self, response):
        self.status_code = response.status_code
        self.text = response.get_data(as_text=True)

    def json(self):
        return json.loads(self.text)


class FlaskTestSession:
    """Stands in for requests.Session by sending calls to the Flask test client."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append((method, url))
        path = url[len('http://localhost'):]
        return _TestResponse(self.client.open(path, method=method, json=json, headers=headers))


@pytest.fixture
def api_session(client):
    return FlaskTestSession(client)


@pytest.fixture
def api_client(api_session):
    return ApiClient(base_url=API_BASE, session=api_session)
