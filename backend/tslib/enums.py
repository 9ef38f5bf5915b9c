"""Enumerated column values shared by the schema, the services and the form layer."""
from enum import Enum
from typing import Optional, Type


class WorkType(str, Enum):
    EMPLOYMENT = "Employment"
    CONSULTANCY = "Consultancy"
    INTERNSHIP = "Internship"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    SUSPENDED = "Suspended"


class TaskStation(str, Enum):
    OFFICE = "Office"
    FIELD = "Field"
    REMOTE = "Remote"


class TaskType(str, Enum):
    CREATIVE = "Creative"
    PROJECT_MANAGEMENT = "Project management"
    ACCOUNTS_FINANCE = "Accounts & Finance"
    CLIENT_SERVICE = "Client service"
    ADMIN = "Admin"
    ADMIN_MEETING = "Admin meeting"
    DISCOVERY_MEETING = "Discovery meeting"
    BUSINESS_DEVELOPMENT_MEETING = "Business development meeting"
    PROJECT_MEETING = "Project meeting"
    PROCUREMENT = "Procurement"
    HR = "HR"
    PROPOSAL_DEVELOPMENT = "Proposal development"
    REPORT_REVIEW = "Report Review"
    REPORT_WRITING = "Report writing"
    PRESENTATION_DEVELOPMENT = "Presentation development"


class ClientSector(str, Enum):
    NON_PROFIT = "Non-profit"
    INDIVIDUAL = "Individual"
    STARTUP = "Startup"
    GOVERNMENT = "Government"


class ClientCategory(str, Enum):
    CONVERTED = "Converted"
    PROSPECT = "Prospect"


class ProjectCluster(str, Enum):
    STONE = "Stone"
    BALLAST = "Ballast"
    SAND = "Sand"
    WATER = "Water"


class CompletionStatus(str, Enum):
    COMPLETE = "Complete"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"


def values(enum_cls: Type[Enum]) -> list[str]:
    return [m.value for m in enum_cls]


def match_value(enum_cls: Type[Enum], value, *, ignore_case: bool = False) -> Optional[str]:
    """Return the canonical spelling of ``value`` in ``enum_cls`` or None.

    With ``ignore_case`` the comparison is case-insensitive, so the browser's
    "Report review" resolves to "Report Review".
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    for member in enum_cls:
        if member.value == candidate:
            return member.value
        if ignore_case and member.value.lower() == candidate.lower():
            return member.value
    return None
