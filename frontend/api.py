import logging
import os

import requests

from frontend.models import User

logger = logging.getLogger(__name__)

API_URL = os.environ.get('BLOODLINK_API_URL', 'http://localhost:3002/api')


class ApiError(Exception):
    """Raised when the backend rejects a call or cannot be reached (status_code -1)."""

    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response, default):
    try:
        body = response.json()
    except ValueError:
        return response.text or default
    if isinstance(body, dict) and body.get('error'):
        return body['error']
    return default


class ApiClient:
    def __init__(self, base_url=None, session=None, timeout=10):
        self.base_url = (base_url or API_URL).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    @staticmethod
    def ensure_bearer(token):
        return token if token.startswith('Bearer ') else f'Bearer {token}'

    @classmethod
    def auth_headers(cls, jwt):
        if not jwt or not jwt.strip():
            return None
        return {
            'Authorization': cls.ensure_bearer(jwt),
            'Content-Type': 'application/json',
        }

    def request(self, method, path, payload=None, headers=None):
        url = f'{self.base_url}{path}'
        try:
            return self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(f'Unable to reach {url}: {e}', -1)


class AuthApi:
    def __init__(self, client):
        self.client = client

    def register(self, user, password):
        payload = {
            'fullName': user.full_name,
            'email': user.email,
            'phone': user.phone,
            'password': password,
            'role': user.role,
            'homeAddress': user.home_address,
            'bloodType': user.blood_type,
            'rhesus': user.rhesus,
        }
        response = self.client.request('POST', '/auth/register', payload)
        if response.status_code in (200, 201):
            logger.info(f"Registration successful for {user.email}")
            return True
        message = _error_message(response, 'Registration failed')
        logger.warning(f"Registration failed ({response.status_code}): {message}")
        raise ApiError(message, response.status_code)

    def login(self, email, password):
        """Return the login payload (token plus user fields), or None if the server refused."""
        try:
            response = self.client.request('POST', '/auth/login', {'email': email, 'password': password})
        except ApiError:
            return None
        if response.status_code != 200:
            logger.warning(f"Login failed ({response.status_code}): {_error_message(response, 'unknown error')}")
            return None
        body = response.json()
        if not body.get('token'):
            return None
        logger.info(f"Login successful for {email}")
        return body

    def me(self, token):
        response = self.client.request('GET', '/auth/me', headers=self.client.auth_headers(token))
        if response.status_code != 200:
            raise ApiError(_error_message(response, 'Not authenticated'), response.status_code)
        return User.model_validate(response.json())


class UsersApi:
    def __init__(self, client):
        self.client = client

    def get_all_users(self):
        try:
            response = self.client.request('GET', '/Users')
        except ApiError:
            return []
        if response.status_code != 200:
            logger.warning(f"Listing users failed ({response.status_code})")
            return []
        return [User.model_validate(u) for u in response.json()]

    def delete_user(self, user_id):
        try:
            response = self.client.request('DELETE', f'/Users/{user_id}')
        except ApiError:
            return False
        logger.info(f"Deleted user {user_id}: {response.status_code}")
        return response.status_code == 204

    def find_by_email(self, email):
        wanted = email.lower()
        for user in self.get_all_users():
            if user.email and user.email.lower() == wanted:
                return user
        return None


class DonorProfilesApi:
    def __init__(self, client):
        self.client = client

    def submit_profile(self, form):
        if form.donor_id is None:
            raise ApiError('Donor ID is required', 400)
        if form.blood_type is None or form.rhesus is None:
            raise ApiError('Blood type and rhesus factor are required', 400)

        try:
            response = self.client.request('POST', '/Donor_Profiles', form.to_payload(),
                                           headers={'Content-Type': 'application/json'})
        except ApiError as e:
            raise ApiError(f'Unable to reach donor profile endpoint: {e}', 500)

        if response.status_code in (200, 201):
            return True
        raise ApiError(_error_message(response, 'Profile submission failed'), response.status_code)
