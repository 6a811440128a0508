"""Health profile create-or-update and lookup for the signed-in user."""

from __future__ import annotations

import logging
from typing import Optional

from facescan.core.tokens import Clock, utcnow
from facescan.db.models import Profile, User
from facescan.domain.passwords import is_valid_email
from facescan.domain.profiles import (
    ACTIVITY_LEVELS,
    BLOOD_GROUPS,
    HEIGHT_RANGE,
    MINIMUM_AGE,
    NAME_MAX_LENGTH,
    SEXES,
    UNITS,
    WEIGHT_RANGE,
    age_on,
    compute_bmi,
    parse_birth_date,
)
from facescan.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

# Request field names, in the order they are reported when missing.
REQUIRED_FIELDS = (
    ("first_name", "firstName"),
    ("last_name", "lastName"),
    ("email", "email"),
    ("date_of_birth", "dateOfBirth"),
    ("gender", "gender"),
    ("height", "height"),
    ("weight", "weight"),
)


class ProfileError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"message": self.message}


class MissingProfileFieldsError(ProfileError):
    def __init__(self, missing: list[str]):
        super().__init__("Required profile fields are missing")
        self.missing = missing

    def payload(self) -> dict:
        return {"message": self.message, "missing": self.missing}


class ProfileValidationError(ProfileError):
    pass


class ProfileOwnerNotFoundError(ProfileError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


def _clean_list(values: Optional[list]) -> list[str]:
    return [str(item).strip() for item in values or [] if str(item).strip()]


def serialize_profile(profile: Profile) -> dict:
    return {
        "id": profile.id,
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "email": profile.email,
        "phone": profile.phone,
        "dateOfBirth": profile.date_of_birth.isoformat(),
        "sex": profile.sex,
        "height": profile.height,
        "weight": profile.weight,
        "unit": profile.unit,
        "bloodGroup": profile.blood_group,
        "allergies": list(profile.allergies or []),
        "medications": list(profile.medications or []),
        "emergencyContact": dict(profile.emergency_contact or {}),
        "activityLevel": profile.activity_level,
        "bmi": profile.bmi,
        "bmiCategory": profile.bmi_category,
        "createdAt": profile.created_at.isoformat() if profile.created_at else None,
        "updatedAt": profile.updated_at.isoformat() if profile.updated_at else None,
    }


def serialize_owner(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "userName": user.username,
        "isVerified": user.is_verified,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


class ProfileService:
    """Each user owns at most one profile; saving twice overwrites it."""

    def __init__(self, repository: SQLRepository, *, clock: Clock = utcnow) -> None:
        self.repository = repository
        self.clock = clock

    def save_profile(
        self,
        user_id: int,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        gender: Optional[str] = None,
        height: Optional[float] = None,
        weight: Optional[float] = None,
        unit: Optional[str] = None,
        blood_type: Optional[str] = None,
        allergies: Optional[list] = None,
        medications: Optional[list] = None,
        emergency_contact: Optional[dict] = None,
        activity_level: Optional[str] = None,
    ) -> tuple[Profile, bool]:
        """Validate and store the profile. Returns (profile, created)."""
        supplied = {
            "first_name": (first_name or "").strip(),
            "last_name": (last_name or "").strip(),
            "email": (email or "").strip().lower(),
            "date_of_birth": (date_of_birth or "").strip(),
            "gender": (gender or "").strip().lower(),
            "height": height,
            "weight": weight,
        }
        missing = [public for name, public in REQUIRED_FIELDS if not supplied[name]]
        if missing:
            raise MissingProfileFieldsError(missing)

        birth = parse_birth_date(supplied["date_of_birth"])
        if birth is None:
            raise ProfileValidationError("Invalid date of birth")
        if age_on(birth, self.clock().date()) < MINIMUM_AGE:
            raise ProfileValidationError(f"User must be at least {MINIMUM_AGE} years old")
        if len(supplied["first_name"]) > NAME_MAX_LENGTH or len(supplied["last_name"]) > NAME_MAX_LENGTH:
            raise ProfileValidationError(f"Names must be at most {NAME_MAX_LENGTH} characters")
        if not is_valid_email(supplied["email"]):
            raise ProfileValidationError("Invalid email format")
        if supplied["gender"] not in SEXES:
            raise ProfileValidationError(f"Gender must be one of: {', '.join(SEXES)}")

        unit_value = (unit or "metric").strip().lower()
        if unit_value not in UNITS:
            raise ProfileValidationError(f"Unit must be one of: {', '.join(UNITS)}")
        if not HEIGHT_RANGE[0] <= height <= HEIGHT_RANGE[1]:
            raise ProfileValidationError(f"Height must be between {HEIGHT_RANGE[0]} and {HEIGHT_RANGE[1]}")
        if not WEIGHT_RANGE[0] <= weight <= WEIGHT_RANGE[1]:
            raise ProfileValidationError(f"Weight must be between {WEIGHT_RANGE[0]} and {WEIGHT_RANGE[1]}")

        blood_group = (blood_type or "").strip().upper() or None
        if blood_group and blood_group not in BLOOD_GROUPS:
            raise ProfileValidationError("Invalid blood type")
        activity = (activity_level or "moderate").strip().lower()
        if activity not in ACTIVITY_LEVELS:
            raise ProfileValidationError(f"Activity level must be one of: {', '.join(ACTIVITY_LEVELS)}")

        if self.repository.get_user(user_id) is None:
            raise ProfileOwnerNotFoundError()

        bmi, bmi_category = compute_bmi(height, weight, unit_value)
        profile, created = self.repository.upsert_profile(
            user_id,
            {
                "first_name": supplied["first_name"],
                "last_name": supplied["last_name"],
                "email": supplied["email"],
                "phone": (phone or "").strip(),
                "date_of_birth": birth,
                "sex": supplied["gender"],
                "height": height,
                "weight": weight,
                "unit": unit_value,
                "blood_group": blood_group,
                "allergies": _clean_list(allergies),
                "medications": _clean_list(medications),
                "emergency_contact": {
                    key: str(value).strip()
                    for key, value in (emergency_contact or {}).items()
                    if key in ("name", "phone") and value
                },
                "activity_level": activity,
                "bmi": bmi,
                "bmi_category": bmi_category,
            },
        )
        logger.info("Profile %s for user %s", "created" if created else "updated", user_id)
        return profile, created

    def get_profile(self, user_id: int) -> tuple[User, Optional[Profile]]:
        user = self.repository.get_user(user_id)
        if user is None:
            raise ProfileOwnerNotFoundError()
        return user, self.repository.get_profile(user_id)
