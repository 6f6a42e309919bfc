"""Grievance type enumeration."""

from enum import StrEnum


class GrievanceType(StrEnum):
    """The fixed set of grievance types staff can record."""

    UNIFORM = "Uniform"
    SHOES = "Shoes"
    HAIR_CUT = "Hair Cut"
    LATE_ARRIVAL = "Late Arrival"
    ID_CARD_MISSING = "ID Card Missing"
    OTHER = "Other"


GRIEVANCE_TYPES: list[str] = [t.value for t in GrievanceType]
