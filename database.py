from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(20))
    password_hash = db.Column(db.String(255))
    role = db.Column(db.String(20), default='UNASSIGNED')
    home_address = db.Column(db.String(255))
    blood_type = db.Column(db.String(5))
    rhesus = db.Column(db.String(1))
    created_at = db.Column(db.DateTime, default=datetime.now)

    donor_profiles = db.relationship('DonorProfile', back_populates='user', cascade='all, delete-orphan')
    blood_requests = db.relationship('BloodRequest', back_populates='user', cascade='all, delete-orphan')

    def to_dict(self):
        # password_hash stays server side
        return {
            'userId': self.user_id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'role': self.role,
            'homeAddress': self.home_address,
            'bloodType': self.blood_type,
            'rhesus': self.rhesus,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.user_id} - {self.email}>"


class DonorProfile(db.Model):
    __tablename__ = 'donor_profiles'

    donor_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'))
    blood_type = db.Column(db.String(5))
    rhesus = db.Column(db.String(1))
    date_of_birth = db.Column(db.Date)
    last_donation_date = db.Column(db.DateTime)
    available_by = db.Column(db.DateTime)
    do_not_disturb_until = db.Column(db.DateTime)
    availability_status = db.Column(db.String(20))
    preferred_radius_km = db.Column(db.Integer)
    donations_count = db.Column(db.Integer, nullable=False, default=0)
    location = db.Column(db.String(255))
    home_address = db.Column(db.String(255))

    user = db.relationship('User', back_populates='donor_profiles')
    pledges = db.relationship('DonorPledge', back_populates='donor_profile', cascade='all, delete-orphan')
    donations = db.relationship('Donation', back_populates='donor_profile', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'donorId': self.donor_id,
            'bloodType': self.blood_type,
            'rhesus': self.rhesus,
            'dateOfBirth': _iso(self.date_of_birth),
            'lastDonationDate': _iso(self.last_donation_date),
            'availableBy': _iso(self.available_by),
            'doNotDisturbUntil': _iso(self.do_not_disturb_until),
            'availabilityStatus': self.availability_status,
            'preferredRadiusKm': self.preferred_radius_km,
            'donationsCount': self.donations_count,
            'location': self.location,
            'homeAddress': self.home_address,
            'user': self.user.to_dict() if self.user else None,
        }

    def __repr__(self):
        return f"<DonorProfile {self.donor_id} - user {self.user_id}>"


class BloodRequest(db.Model):
    __tablename__ = 'blood_requests'

    request_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    needed_blood_type = db.Column(db.String(5))
    needed_rhesus = db.Column(db.String(1))
    units_needed = db.Column(db.Integer, nullable=False, default=0)
    hospital_name = db.Column(db.String(200))
    hospital_address = db.Column(db.String(255))
    urgency = db.Column(db.String(20))
    status = db.Column(db.String(20))
    needed_before = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.now)

    user = db.relationship('User', back_populates='blood_requests')
    pledges = db.relationship('DonorPledge', back_populates='matched_request', cascade='all, delete-orphan')
    donations = db.relationship('Donation', back_populates='fulfilled_request', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'requestId': self.request_id,
            'neededBloodType': self.needed_blood_type,
            'neededRhesus': self.needed_rhesus,
            'unitsNeeded': self.units_needed,
            'hospitalName': self.hospital_name,
            'hospitalAddress': self.hospital_address,
            'urgency': self.urgency,
            'status': self.status,
            'neededBefore': _iso(self.needed_before),
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
            'user': self.user.to_dict() if self.user else None,
        }

    def __repr__(self):
        return f"<BloodRequest {self.request_id} - {self.needed_blood_type}{self.needed_rhesus}>"


class DonorPledge(db.Model):
    __tablename__ = 'donor_pledges'

    pledge_id = db.Column(db.Integer, primary_key=True)
    donor_id = db.Column(db.Integer, db.ForeignKey('donor_profiles.donor_id'), nullable=False)
    request_id = db.Column(db.Integer, db.ForeignKey('blood_requests.request_id'), nullable=False)
    pledge_status = db.Column(db.String(20))
    pledged_units = db.Column(db.Integer, nullable=False, default=0)
    message = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    donor_profile = db.relationship('DonorProfile', back_populates='pledges')
    matched_request = db.relationship('BloodRequest', back_populates='pledges')

    def to_dict(self):
        return {
            'pledgeId': self.pledge_id,
            'pledgeStatus': self.pledge_status,
            'pledgedUnits': self.pledged_units,
            'message': self.message,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'donorProfile': self.donor_profile.to_dict() if self.donor_profile else None,
            'matchedRequest': self.matched_request.to_dict() if self.matched_request else None,
        }


class Donation(db.Model):
    __tablename__ = 'donations'

    donation_id = db.Column(db.Integer, primary_key=True)
    donor_id = db.Column(db.Integer, db.ForeignKey('donor_profiles.donor_id'), nullable=False)
    request_id = db.Column(db.Integer, db.ForeignKey('blood_requests.request_id'), nullable=False)
    units_donated = db.Column(db.Integer, nullable=False, default=0)
    outcome = db.Column(db.String(50))
    donation_time = db.Column(db.DateTime)
    confirmed_by_requester = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    donor_profile = db.relationship('DonorProfile', back_populates='donations')
    fulfilled_request = db.relationship('BloodRequest', back_populates='donations')

    def to_dict(self):
        return {
            'donationId': self.donation_id,
            'unitsDonated': self.units_donated,
            'outcome': self.outcome,
            'donationTime': _iso(self.donation_time),
            'confirmedByRequester': self.confirmed_by_requester,
            'createdAt': _iso(self.created_at),
            'donorProfile': self.donor_profile.to_dict() if self.donor_profile else None,
            'fulfilledRequest': self.fulfilled_request.to_dict() if self.fulfilled_request else None,
        }
