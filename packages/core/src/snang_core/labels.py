"""Label and range mapping helpers shared by redaction and display code.

These are the sanctioned ways sensitive numbers become something a person
may see: a confidence float becomes a three-way label, an exact salary
becomes an income band, and contact details are masked down to their
trailing characters.
"""

import re
from decimal import Decimal
from typing import Optional, Union

from .exceptions import ValidationError
from .models.case import ConfidenceLevel
from .models.readiness import IncomeRange

Number = Union[int, float, Decimal]


# =============================================================================
# DOCUMENT CONFIDENCE
# =============================================================================

HIGH_CONFIDENCE_MIN = 0.90
LOW_CONFIDENCE_MIN = 0.70


def confidence_to_label(confidence: float) -> ConfidenceLevel:
    """Map a 0-1 extraction confidence to its display label.

    Args:
        confidence: Continuous confidence value

    Returns:
        HIGH_CONFIDENCE at 0.90 and above, LOW_CONFIDENCE from 0.70,
        otherwise NEEDS_REVIEW
    """
    if confidence >= HIGH_CONFIDENCE_MIN:
        return ConfidenceLevel.HIGH_CONFIDENCE
    if confidence >= LOW_CONFIDENCE_MIN:
        return ConfidenceLevel.LOW_CONFIDENCE
    return ConfidenceLevel.NEEDS_REVIEW


# =============================================================================
# INCOME BANDS
# =============================================================================

# (inclusive ceiling in RM, band), checked in order
INCOME_BAND_CEILINGS = (
    (Decimal("3000"), IncomeRange.UP_TO_3000),
    (Decimal("4000"), IncomeRange.FROM_3001_TO_4000),
    (Decimal("5000"), IncomeRange.FROM_4001_TO_5000),
    (Decimal("6000"), IncomeRange.FROM_5001_TO_6000),
    (Decimal("8000"), IncomeRange.FROM_6001_TO_8000),
)

INCOME_RANGE_LABELS = {
    IncomeRange.UP_TO_3000: "RM 3,000 ke bawah",
    IncomeRange.FROM_3001_TO_4000: "RM 3,001 - RM 4,000",
    IncomeRange.FROM_4001_TO_5000: "RM 4,001 - RM 5,000",
    IncomeRange.FROM_5001_TO_6000: "RM 5,001 - RM 6,000",
    IncomeRange.FROM_6001_TO_8000: "RM 6,001 - RM 8,000",
    IncomeRange.ABOVE_8000: "RM 8,001 ke atas",
}


def income_band_for_salary(salary: Number) -> IncomeRange:
    """Map an exact monthly salary to its income band.

    Only used at the point of data capture; afterwards the band is the
    durable value and the exact figure is not consulted again.

    Raises:
        ValidationError: If the salary is not a finite number
    """
    amount = Decimal(str(salary))
    if not amount.is_finite():
        raise ValidationError(
            "salary must be a finite amount",
            field="basic_salary",
            constraint="finite",
        )
    for ceiling, band in INCOME_BAND_CEILINGS:
        if amount <= ceiling:
            return band
    return IncomeRange.ABOVE_8000


def income_range_label(income_range: IncomeRange) -> str:
    """Get the display label for an income band."""
    return INCOME_RANGE_LABELS[income_range]


def salary_to_range(salary: Number) -> str:
    """Convert an exact salary to its income range label.

    Example:
        >>> salary_to_range(4500)
        'RM 4,001 - RM 5,000'
    """
    return income_range_label(income_band_for_salary(salary))


# =============================================================================
# CONTACT MASKING
# =============================================================================

_NON_DIGIT = re.compile(r"\D")


def mask_phone(phone: Optional[str]) -> str:
    """Mask a phone number, keeping the last four digits.

    Example:
        >>> mask_phone("012-3456789")
        '012-XXX-6789'
    """
    if not phone:
        return "-"

    digits = _NON_DIGIT.sub("", phone)
    if len(digits) < 4:
        return phone

    visible = digits[-4:]
    hidden = digits[:-4]

    # Malaysian mobile format keeps the operator prefix
    if "-" in phone and len(hidden) >= 3:
        return f"{hidden[:3]}-{'X' * (len(hidden) - 3)}-{visible}"

    return "X" * len(hidden) + visible


def mask_ic(ic: Optional[str]) -> str:
    """Mask a MyKad number, keeping the last four digits.

    Example:
        >>> mask_ic("880515-14-5678")
        'XXXXXX-XX-5678'
    """
    if not ic:
        return "-"

    digits = _NON_DIGIT.sub("", ic)
    if len(digits) < 4:
        return ic

    visible = digits[-4:]
    hidden_length = len(digits) - 4

    if hidden_length == 8:
        return f"XXXXXX-XX-{visible}"

    return "X" * hidden_length + visible


def mask_email(email: Optional[str]) -> str:
    """Mask the local part of an email address.

    Example:
        >>> mask_email("ahmad@gmail.com")
        'a***d@gmail.com'
    """
    if not email or "@" not in email:
        return "-"

    local, _, domain = email.partition("@")
    if not local:
        return "-"

    if len(local) <= 2:
        return f"{local[0]}***@{domain}"

    return f"{local[0]}{'*' * min(len(local) - 2, 3)}{local[-1]}@{domain}"
