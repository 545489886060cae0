from frontend.api import ApiError
from frontend.models import User


class Session:
    """Logged-in user and token for the running client."""

    def __init__(self):
        self.current_user = None
        self.token = None

    @property
    def is_authenticated(self):
        return self.token is not None

    def start(self, user, token):
        self.current_user = user
        self.token = token

    def start_from_login(self, payload, auth_api, users_api, fallback_user=None):
        """Start from a login payload; asks ``/auth/me`` when the payload has no user fields."""
        token = payload['token']
        user = User.model_validate(payload)
        if user.user_id is None:
            try:
                user = auth_api.me(token)
            except ApiError:
                user = users_api.find_by_email(payload.get('email') or '') or fallback_user
        self.start(user, token)
        return user

    def clear(self):
        self.current_user = None
        self.token = None
