import datetime
import logging
from functools import wraps

import jwt
from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest, Unauthorized
from werkzeug.security import check_password_hash, generate_password_hash

from database import db, User
from validators import get_json_body, is_valid_email, require_fields

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

REGISTER_FIELDS = ['fullName', 'email', 'phone', 'password', 'role', 'homeAddress', 'bloodType', 'rhesus']


# ------------------------- #
# Passwords & Tokens
# ------------------------- #
def hash_password(password):
    return generate_password_hash(password)


def verify_password(password, password_hash):
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def generate_token(user):
    now = datetime.datetime.now(datetime.timezone.utc)
    hours = current_app.config['JWT_EXPIRATION_HOURS']
    return jwt.encode({
        'user_id': user.user_id,
        'email': user.email,
        'iat': now,
        'exp': now + datetime.timedelta(hours=hours)
    }, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')


def decode_token(token):
    return jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])


def token_required(f):
    """Decorator to require a Bearer JWT; passes the current user to the view"""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        parts = auth_header.split(' ')
        if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
            raise Unauthorized('Token is missing')

        try:
            data = decode_token(parts[1])
        except jwt.ExpiredSignatureError:
            raise Unauthorized('Token has expired')
        except jwt.InvalidTokenError:
            raise Unauthorized('Invalid token')

        user_id = data.get('user_id')
        current_user = db.session.get(User, user_id) if user_id is not None else None
        if current_user is None:
            raise Unauthorized('Invalid token')
        return f(current_user, *args, **kwargs)

    return decorated


def build_auth_response(user, token):
    return {
        'token': token,
        'userId': user.user_id,
        'fullName': user.full_name,
        'email': user.email,
        'role': user.role,
        'bloodType': user.blood_type,
        'rhesus': user.rhesus,
        'homeAddress': user.home_address
    }


# ------------------------- #
# Auth Routes
# ------------------------- #
@auth_bp.route('/register', methods=['POST'])
def register():
    data = get_json_body()
    require_fields(data, REGISTER_FIELDS, prefix='Registration failed: ')

    email = data['email'].strip().lower()
    if not is_valid_email(email):
        raise BadRequest('Registration failed: email is not a valid address')
    if User.query.filter_by(email=email).first():
        raise BadRequest('Registration failed: Email already registered')

    user = User(
        full_name=data['fullName'].strip(),
        email=email,
        phone=data['phone'].strip(),
        password_hash=hash_password(data['password']),
        role=data['role'],
        home_address=data['homeAddress'].strip(),
        blood_type=data['bloodType'],
        rhesus=data['rhesus']
    )
    db.session.add(user)
    db.session.commit()
    logger.info(f"Registered user {user.user_id}")

    return jsonify(build_auth_response(user, generate_token(user))), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body()
    email, password = data.get('email'), data.get('password')
    if not email or not password:
        raise BadRequest('Email and password are required')
    if not isinstance(email, str) or not isinstance(password, str):
        raise BadRequest('Email and password must be strings')

    user = User.query.filter_by(email=email.strip().lower()).first()
    if not user:
        logger.info("Login failed: unknown email")
        raise Unauthorized('User not found')

    if not verify_password(password, user.password_hash):
        logger.info(f"Login failed: wrong password for user {user.user_id}")
        raise Unauthorized('Invalid password')

    logger.info(f"User {user.user_id} logged in")
    return jsonify(build_auth_response(user, generate_token(user))), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me(current_user):
    return jsonify(current_user.to_dict())
