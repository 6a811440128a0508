"""Domain rules for health profiles: age, BMI and the accepted enum values."""
from __future__ import annotations

from datetime import date

MINIMUM_AGE = 18
NAME_MAX_LENGTH = 50
HEIGHT_RANGE = (50, 300)
WEIGHT_RANGE = (20, 500)

SEXES = ("male", "female", "other")
UNITS = ("metric", "imperial")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
ACTIVITY_LEVELS = ("sedentary", "light", "moderate", "active", "very_active")


def parse_birth_date(value: str | None) -> date | None:
    """Accept `YYYY-MM-DD` or a full ISO timestamp; None when unparseable."""
    text = (value or "").strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def age_on(birth: date, today: date) -> int:
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def compute_bmi(height: float, weight: float, unit: str = "metric") -> tuple[float, str]:
    """BMI rounded to one decimal, with its category.

    Metric takes centimetres and kilograms, imperial inches and pounds.
    """
    if unit == "imperial":
        meters = height * 2.54 / 100
        kilograms = weight * 0.453592
    else:
        meters = height / 100
        kilograms = weight
    bmi = round(kilograms / (meters * meters), 1)
    if bmi < 18.5:
        category = "underweight"
    elif bmi < 25:
        category = "normal"
    elif bmi < 30:
        category = "overweight"
    else:
        category = "obese"
    return bmi, category
