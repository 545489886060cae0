"""Field checks for the sign-up and donor profile screens.

Each ``validate_*`` function takes raw widget values and returns either the
cleaned object or raises ``FormError`` with the message to show the user.
Nothing here touches tkinter, so the rules can be tested headless.
"""
import re
from datetime import date, datetime, time

from frontend.models import DonorProfileForm, User

EMAIL_RE = re.compile(r'^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$')
PHONE_RE = re.compile(r'^\+?[0-9]{7,15}$')
TIME_RE = re.compile(r'^([01][0-9]|2[0-3]):[0-5][0-9]$')

BLOOD_TYPES = ('A', 'B', 'AB', 'O')
RHESUS_FACTORS = ('+', '-')
AVAILABILITY_OPTIONS = ('Available', 'Unavailable', 'Do Not Disturb')
MIN_PASSWORD_LENGTH = 6
NEW_USER_ROLE = 'UNASSIGNED'


class FormError(ValueError):
    pass


def validate_login(email, password):
    email = (email or '').strip()
    if not email or not password:
        raise FormError('Please enter email and password.')
    return email, password


def validate_sign_up(full_name, email, phone, password, home_address, blood_type, rhesus):
    """Return ``(user, password)`` for a valid sign-up form."""
    full_name = (full_name or '').strip()
    email = (email or '').strip()
    phone = (phone or '').strip()
    home_address = (home_address or '').strip()
    password = password or ''

    if not full_name:
        raise FormError('Full name is required.')
    if not email:
        raise FormError('Email is required.')
    if not EMAIL_RE.match(email):
        raise FormError('Please enter a valid email address.')
    if not phone:
        raise FormError('Phone number is required.')
    if not PHONE_RE.match(phone):
        raise FormError('Please enter a valid phone number (7-15 digits, optional +country code).')
    if not password:
        raise FormError('Password is required.')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise FormError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.')
    if not home_address:
        raise FormError('Home address is required.')
    if blood_type not in BLOOD_TYPES:
        raise FormError('Please select a blood type.')
    if rhesus not in RHESUS_FACTORS:
        raise FormError('Please select a Rhesus factor (+ or -).')

    user = User(
        full_name=full_name,
        email=email,
        phone=phone,
        role=NEW_USER_ROLE,
        home_address=home_address,
        blood_type=blood_type,
        rhesus=rhesus,
    )
    return user, password


def parse_picker_date(raw):
    """Turn a ``YYYY-MM-DD`` entry into a date; blank means no date."""
    raw = (raw or '').strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise FormError('Invalid date format. Please use YYYY-MM-DD.')


def combine_date_and_time(raw_date, raw_time=None):
    day = parse_picker_date(raw_date)
    if day is None:
        return None
    raw_time = (raw_time or '').strip()
    if not raw_time:
        return datetime.combine(day, time.min)
    if not TIME_RE.match(raw_time):
        raise FormError('Invalid time format. Please use HH:MM (24h).')
    hours, minutes = raw_time.split(':')
    return datetime.combine(day, time(int(hours), int(minutes)))


def validate_donor_profile(donor_id, blood_type, rhesus, availability, home_address,
                           radius_km=None, date_of_birth=None,
                           dnd_date=None, dnd_time=None,
                           available_by_date=None, available_by_time=None,
                           last_donation_date=None):
    donor_id = (donor_id or '').strip()
    if not donor_id:
        raise FormError('Donor ID is required.')
    if not (donor_id.isascii() and donor_id.isdigit()):
        raise FormError('Donor ID must be numeric.')

    home_address = (home_address or '').strip()
    if not blood_type or not rhesus or not availability or not home_address:
        raise FormError('Please complete all required profile fields.')
    if blood_type not in BLOOD_TYPES or rhesus not in RHESUS_FACTORS or availability not in AVAILABILITY_OPTIONS:
        raise FormError('Please complete all required profile fields.')

    return DonorProfileForm(
        donor_id=int(donor_id),
        blood_type=blood_type,
        rhesus=rhesus,
        availability_status=availability,
        home_address=home_address,
        preferred_radius_km=int(round(radius_km)) if radius_km is not None else None,
        date_of_birth=parse_picker_date(date_of_birth),
        do_not_disturb_until=combine_date_and_time(dnd_date, dnd_time),
        available_by=combine_date_and_time(available_by_date, available_by_time),
        last_donation_date=combine_date_and_time(last_donation_date),
    )


def format_radius(value):
    return f'{int(float(value))} km'
