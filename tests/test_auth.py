import datetime

import jwt
import pytest

from database import User, db
from tests.conftest import USER_PAYLOAD


def test_register_returns_token_and_user_fields(client):
    response = client.post('/api/auth/register', json=USER_PAYLOAD)

    assert response.status_code == 200
    body = response.get_json()
    assert body['token']
    assert body['userId'] is not None
    assert body['fullName'] == 'Jane Donor'
    assert body['email'] == 'jane@example.com'
    assert body['role'] == 'UNASSIGNED'
    assert body['bloodType'] == 'O'
    assert body['rhesus'] == '-'
    assert body['homeAddress'] == '1 Main St'
    assert 'password' not in body
    assert 'passwordHash' not in body


def test_register_stores_hashed_password(app, user):
    with app.app_context():
        stored = db.session.get(User, user['userId'])
        assert stored.password_hash != USER_PAYLOAD['password']
        assert USER_PAYLOAD['password'] not in stored.password_hash


def test_register_duplicate_email(client, user):
    response = client.post('/api/auth/register', json=dict(USER_PAYLOAD, email='JANE@example.com'))

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Registration failed: Email already registered'}


def test_register_missing_field(client):
    payload = dict(USER_PAYLOAD)
    payload['phone'] = '   '

    response = client.post('/api/auth/register', json=payload)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Registration failed: phone is required'


@pytest.mark.parametrize('field, value', [
    ('email', 12345),
    ('fullName', 7),
    ('phone', 5551234567),
    ('homeAddress', ['1 Main St']),
    ('password', 123456),
])
def test_register_rejects_non_string_fields(client, field, value):
    response = client.post('/api/auth/register', json=dict(USER_PAYLOAD, **{field: value}))

    assert response.status_code == 400
    assert response.get_json()['error'] == f'Registration failed: {field} must be a string'


def test_register_rejects_malformed_email(client):
    response = client.post('/api/auth/register', json=dict(USER_PAYLOAD, email='not-an-email'))

    assert response.status_code == 400
    assert 'email' in response.get_json()['error']


def test_login_success(client, user):
    response = client.post('/api/auth/login', json={'email': 'jane@example.com', 'password': 'secret123'})

    assert response.status_code == 200
    body = response.get_json()
    assert body['userId'] == user['userId']
    assert body['token']


def test_login_unknown_user(client):
    response = client.post('/api/auth/login', json={'email': 'nobody@example.com', 'password': 'secret123'})

    assert response.status_code == 401
    assert response.get_json() == {'error': 'User not found'}


def test_login_wrong_password(client, user):
    response = client.post('/api/auth/login', json={'email': 'jane@example.com', 'password': 'wrong-pass'})

    assert response.status_code == 401
    assert response.get_json() == {'error': 'Invalid password'}


def test_login_requires_both_fields(client):
    response = client.post('/api/auth/login', json={'email': 'jane@example.com'})

    assert response.status_code == 400


@pytest.mark.parametrize('body', [
    {'email': 'jane@example.com', 'password': 123456},
    {'email': 12345, 'password': 'secret123'},
])
def test_login_rejects_non_string_credentials(client, user, body):
    response = client.post('/api/auth/login', json=body)

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Email and password must be strings'}


def test_token_claims(app, user):
    claims = jwt.decode(user['token'], app.config['JWT_SECRET_KEY'], algorithms=['HS256'])

    assert claims['user_id'] == user['userId']
    assert claims['email'] == 'jane@example.com'
    assert claims['exp'] > claims['iat']


def test_me_with_token(client, user):
    response = client.get('/api/auth/me', headers={'Authorization': f"Bearer {user['token']}"})

    assert response.status_code == 200
    assert response.get_json()['email'] == 'jane@example.com'


def test_me_without_token(client):
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.get_json() == {'error': 'Token is missing'}


def test_me_with_bad_token(client):
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not.a.token'})

    assert response.status_code == 401
    assert response.get_json() == {'error': 'Invalid token'}


def test_me_with_expired_token(app, client, user):
    past = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(hours=2)
    token = jwt.encode({
        'user_id': user['userId'],
        'email': user['email'],
        'iat': past - datetime.timedelta(hours=1),
        'exp': past
    }, app.config['JWT_SECRET_KEY'], algorithm='HS256')

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 401
    assert response.get_json() == {'error': 'Token has expired'}
