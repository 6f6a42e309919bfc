"""
Input validation functions for the discipline tracker.

All validation functions follow the pattern:
1. Accept raw user input
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError
"""

from disciplinetracker.grievances.types import GrievanceType

MAX_STUDENT_CODE_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 2000


class ValidationError(Exception):
    """Raised when user input fails validation."""

    pass


class InvalidGrievanceTypeError(ValidationError):
    """Raised when a grievance type is not one of the fixed set."""

    pass


# ============================================================================
# Student Code Validation
# ============================================================================


def validate_student_code(code: str | None) -> str:
    """
    Normalize a scanned or typed student code.

    QR readers frequently append a trailing newline or pad the payload, so
    surrounding whitespace is stripped. Case is preserved: codes are matched
    exactly.

    Raises:
        ValidationError: If the code is empty or implausibly long
    """
    if code is None:
        raise ValidationError("Student code cannot be empty")

    cleaned = code.strip()
    if not cleaned:
        raise ValidationError("Student code cannot be empty")

    if len(cleaned) > MAX_STUDENT_CODE_LENGTH:
        raise ValidationError(
            f"Student code too long (max {MAX_STUDENT_CODE_LENGTH} characters)"
        )

    return cleaned


# ============================================================================
# Grievance Validation
# ============================================================================


def validate_grievance_type(value: str | GrievanceType | None) -> GrievanceType:
    """
    Check a grievance type against the fixed enumeration.

    Accepts the enum itself or its display value (e.g. "Hair Cut").

    Raises:
        InvalidGrievanceTypeError: If the value is not a known type
    """
    if isinstance(value, GrievanceType):
        return value

    if value is None or not value.strip():
        raise InvalidGrievanceTypeError("Grievance type is required")

    try:
        return GrievanceType(value.strip())
    except ValueError:
        allowed = ", ".join(t.value for t in GrievanceType)
        raise InvalidGrievanceTypeError(
            f"Unknown grievance type {value!r} (expected one of: {allowed})"
        ) from None


def validate_description(description: str | None) -> str | None:
    """
    Normalize the optional free-text description.

    Blank descriptions are stored as NULL.

    Raises:
        ValidationError: If the description exceeds the maximum length
    """
    if description is None:
        return None

    cleaned = description.strip()
    if not cleaned:
        return None

    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description too long (max {MAX_DESCRIPTION_LENGTH} characters)"
        )

    return cleaned
