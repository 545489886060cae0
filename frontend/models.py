from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A user as returned by the API (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    user_id: Optional[int] = Field(None, alias='userId')
    full_name: Optional[str] = Field(None, alias='fullName')
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    home_address: Optional[str] = Field(None, alias='homeAddress')
    blood_type: Optional[str] = Field(None, alias='bloodType')
    rhesus: Optional[str] = None
    created_at: Optional[str] = Field(None, alias='createdAt')


class DonorProfileForm(BaseModel):
    """Values collected from the donor profile screen."""
    donor_id: Optional[int] = None
    blood_type: Optional[str] = None
    rhesus: Optional[str] = None
    availability_status: Optional[str] = None
    date_of_birth: Optional[date] = None
    available_by: Optional[datetime] = None
    do_not_disturb_until: Optional[datetime] = None
    last_donation_date: Optional[datetime] = None
    preferred_radius_km: Optional[int] = None
    home_address: Optional[str] = None

    def to_payload(self):
        payload = {
            'bloodType': self.blood_type,
            'rhesus': self.rhesus,
            'availabilityStatus': self.availability_status,
            'homeAddress': self.home_address,
            'location': self.home_address,
            'donationsCount': 0,
            'user': {'userId': self.donor_id},
        }
        if self.date_of_birth is not None:
            payload['dateOfBirth'] = self.date_of_birth.isoformat()
        for key, value in (('availableBy', self.available_by),
                           ('doNotDisturbUntil', self.do_not_disturb_until),
                           ('lastDonationDate', self.last_donation_date)):
            if value is not None:
                payload[key] = value.isoformat()
        if self.preferred_radius_km is not None:
            payload['preferredRadiusKm'] = self.preferred_radius_km
        return payload
