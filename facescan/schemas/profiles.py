from typing import List, Optional

from pydantic import BaseModel, Field


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class ProfilePayload(BaseModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth")
    gender: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    unit: Optional[str] = None
    blood_type: Optional[str] = Field(default=None, alias="bloodType")
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContact] = Field(default=None, alias="emergencyContact")
    activity_level: Optional[str] = Field(default=None, alias="activityLevel")
