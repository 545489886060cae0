import logging

from flask import Blueprint, jsonify
from sqlalchemy.orm import joinedload
from werkzeug.exceptions import BadRequest, NotFound

from auth import hash_password
from database import db, User, DonorProfile, BloodRequest, DonorPledge, Donation
from validators import (
    get_json_body, require_fields, optional_str, is_valid_email, nested_id,
    parse_date, parse_datetime, parse_int, parse_bool
)

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)
donor_profiles_bp = Blueprint('donor_profiles', __name__)
blood_requests_bp = Blueprint('blood_requests', __name__)
donor_pledges_bp = Blueprint('donor_pledges', __name__)
donations_bp = Blueprint('donations', __name__)


def _delete(instance):
    db.session.delete(instance)
    db.session.commit()
    return '', 204


# ------------------------- #
# Users
# ------------------------- #
@users_bp.route('', methods=['GET'])
def get_users():
    users = User.query.order_by(User.user_id).all()
    return jsonify([u.to_dict() for u in users])


@users_bp.route('', methods=['POST'])
def create_user():
    data = get_json_body()
    require_fields(data, ['fullName', 'email'])

    email = data['email'].strip().lower()
    if not is_valid_email(email):
        raise BadRequest('email is not a valid address')
    if User.query.filter_by(email=email).first():
        raise BadRequest('Email already registered')

    password = optional_str(data, 'password')
    user = User(
        full_name=data['fullName'].strip(),
        email=email,
        phone=optional_str(data, 'phone'),
        password_hash=hash_password(password) if password else None,
        role=optional_str(data, 'role') or 'UNASSIGNED',
        home_address=optional_str(data, 'homeAddress'),
        blood_type=optional_str(data, 'bloodType'),
        rhesus=optional_str(data, 'rhesus')
    )
    db.session.add(user)
    db.session.commit()
    logger.info(f"Created user {user.user_id}")
    return jsonify(user.to_dict()), 201


@users_bp.route('/<int:user_id>', methods=['DELETE'])
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound(f'User not found with ID: {user_id}')
    logger.info(f"Deleting user {user_id}")
    return _delete(user)


# ------------------------- #
# Donor Profiles
# ------------------------- #
@donor_profiles_bp.route('', methods=['GET'])
def get_donor_profiles():
    donors = DonorProfile.query.options(joinedload(DonorProfile.user)).order_by(DonorProfile.donor_id).all()
    return jsonify([d.to_dict() for d in donors])


@donor_profiles_bp.route('', methods=['POST'])
def create_donor_profile():
    data = get_json_body()

    user_id = nested_id(data, 'user', 'userId')
    if user_id is None:
        raise BadRequest('User ID is required when creating a donor profile.')
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound(f'User not found with ID: {user_id}')

    donor = DonorProfile(
        user=user,
        blood_type=data.get('bloodType'),
        rhesus=data.get('rhesus'),
        date_of_birth=parse_date(data.get('dateOfBirth'), 'dateOfBirth'),
        last_donation_date=parse_datetime(data.get('lastDonationDate'), 'lastDonationDate'),
        available_by=parse_datetime(data.get('availableBy'), 'availableBy'),
        do_not_disturb_until=parse_datetime(data.get('doNotDisturbUntil'), 'doNotDisturbUntil'),
        availability_status=data.get('availabilityStatus'),
        preferred_radius_km=parse_int(data.get('preferredRadiusKm'), 'preferredRadiusKm'),
        donations_count=parse_int(data.get('donationsCount'), 'donationsCount', default=0),
        location=data.get('location'),
        home_address=data.get('homeAddress')
    )
    db.session.add(donor)
    db.session.commit()
    logger.info(f"Created donor profile {donor.donor_id} for user {user_id}")
    return jsonify(donor.to_dict()), 201


@donor_profiles_bp.route('/<int:donor_id>', methods=['GET'])
def get_donor_profile(donor_id):
    donor = db.session.get(DonorProfile, donor_id)
    if not donor:
        raise NotFound(f'Donor not found with ID: {donor_id}')
    return jsonify(donor.to_dict())


@donor_profiles_bp.route('/<int:donor_id>', methods=['DELETE'])
def delete_donor_profile(donor_id):
    donor = db.session.get(DonorProfile, donor_id)
    if not donor:
        raise NotFound(f'Donor not found with ID: {donor_id}')
    logger.info(f"Deleting donor profile {donor_id}")
    return _delete(donor)


# ------------------------- #
# Blood Requests
# ------------------------- #
@blood_requests_bp.route('', methods=['GET'])
def get_blood_requests():
    requests = BloodRequest.query.options(joinedload(BloodRequest.user)).order_by(BloodRequest.request_id).all()
    return jsonify([r.to_dict() for r in requests])


@blood_requests_bp.route('', methods=['POST'])
def create_blood_request():
    data = get_json_body()

    user_id = nested_id(data, 'user', 'userId')
    if user_id is None:
        raise BadRequest('User ID is required when creating a blood request.')
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound(f'User not found with ID: {user_id}')

    blood_request = BloodRequest(
        user=user,
        needed_blood_type=data.get('neededBloodType'),
        needed_rhesus=data.get('neededRhesus'),
        units_needed=parse_int(data.get('unitsNeeded'), 'unitsNeeded', default=0),
        hospital_name=data.get('hospitalName'),
        hospital_address=data.get('hospitalAddress'),
        urgency=data.get('urgency'),
        status=data.get('status') or 'OPEN',
        needed_before=parse_datetime(data.get('neededBefore'), 'neededBefore'),
        notes=data.get('notes')
    )
    db.session.add(blood_request)
    db.session.commit()
    logger.info(f"Created blood request {blood_request.request_id} for user {user_id}")
    return jsonify(blood_request.to_dict()), 201


@blood_requests_bp.route('/<int:request_id>', methods=['GET'])
def get_blood_request(request_id):
    blood_request = db.session.get(BloodRequest, request_id)
    if not blood_request:
        raise NotFound(f'Blood request not found with ID: {request_id}')
    return jsonify(blood_request.to_dict())


@blood_requests_bp.route('/<int:request_id>', methods=['DELETE'])
def delete_blood_request(request_id):
    blood_request = db.session.get(BloodRequest, request_id)
    if not blood_request:
        raise NotFound(f'Blood request not found with ID: {request_id}')
    logger.info(f"Deleting blood request {request_id}")
    return _delete(blood_request)


# ------------------------- #
# Donor Pledges
# ------------------------- #
def _pledges_with_details():
    return DonorPledge.query.options(
        joinedload(DonorPledge.donor_profile).joinedload(DonorProfile.user),
        joinedload(DonorPledge.matched_request).joinedload(BloodRequest.user)
    )


@donor_pledges_bp.route('', methods=['POST'])
def create_donor_pledge():
    data = get_json_body()

    donor_id = nested_id(data, 'donorProfile', 'donorId')
    request_id = nested_id(data, 'matchedRequest', 'requestId')
    if donor_id is None or request_id is None:
        raise BadRequest('donorProfile and matchedRequest are required')

    donor = db.session.get(DonorProfile, donor_id)
    blood_request = db.session.get(BloodRequest, request_id)
    if not donor or not blood_request:
        raise BadRequest('Invalid donorId or requestId')

    pledge = DonorPledge(
        donor_profile=donor,
        matched_request=blood_request,
        pledge_status=data.get('pledgeStatus') or 'PENDING',
        pledged_units=parse_int(data.get('pledgedUnits'), 'pledgedUnits', default=0),
        message=data.get('message')
    )
    db.session.add(pledge)
    db.session.commit()
    logger.info(f"Donor {donor_id} pledged to request {request_id}")

    full = _pledges_with_details().filter(DonorPledge.pledge_id == pledge.pledge_id).first()
    return jsonify((full or pledge).to_dict()), 200


@donor_pledges_bp.route('', methods=['GET'])
def get_donor_pledges():
    pledges = _pledges_with_details().order_by(DonorPledge.pledge_id).all()
    return jsonify([p.to_dict() for p in pledges])


@donor_pledges_bp.route('/<int:pledge_id>', methods=['GET'])
def get_donor_pledge(pledge_id):
    pledge = _pledges_with_details().filter(DonorPledge.pledge_id == pledge_id).first()
    if not pledge:
        raise NotFound(f'Pledge not found with ID: {pledge_id}')
    return jsonify(pledge.to_dict())


@donor_pledges_bp.route('/byRequest/<int:request_id>', methods=['GET'])
def get_pledges_by_request(request_id):
    pledges = _pledges_with_details().filter(DonorPledge.request_id == request_id) \
        .order_by(DonorPledge.pledge_id).all()
    return jsonify([p.to_dict() for p in pledges])


# ------------------------- #
# Donations
# ------------------------- #
@donations_bp.route('', methods=['POST'])
def create_donation():
    data = get_json_body()

    donor_id = nested_id(data, 'donorProfile', 'donorId')
    request_id = nested_id(data, 'fulfilledRequest', 'requestId')
    if donor_id is None or request_id is None:
        raise BadRequest('Missing donorProfile or fulfilledRequest IDs')

    donor = db.session.get(DonorProfile, donor_id)
    blood_request = db.session.get(BloodRequest, request_id)
    if not donor or not blood_request:
        raise BadRequest('Invalid donorId or requestId')

    donation = Donation(
        donor_profile=donor,
        fulfilled_request=blood_request,
        units_donated=parse_int(data.get('unitsDonated'), 'unitsDonated', default=0),
        outcome=data.get('outcome'),
        donation_time=parse_datetime(data.get('donationTime'), 'donationTime'),
        confirmed_by_requester=parse_bool(data.get('confirmedByRequester'), 'confirmedByRequester', default=False)
    )
    db.session.add(donation)
    db.session.commit()
    logger.info(f"Recorded donation {donation.donation_id} from donor {donor_id} for request {request_id}")
    return jsonify(donation.to_dict()), 200


@donations_bp.route('', methods=['GET'])
def get_donations():
    donations = Donation.query.order_by(Donation.donation_id).all()
    return jsonify([d.to_dict() for d in donations])


@donations_bp.route('/<int:donation_id>', methods=['DELETE'])
def delete_donation(donation_id):
    donation = db.session.get(Donation, donation_id)
    if not donation:
        raise NotFound('Donation not found')
    logger.info(f"Deleting donation {donation_id}")
    return _delete(donation)
