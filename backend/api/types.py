"""Common type aliases for the Timesheet API."""
from typing import Any

# Domain record aliases
StaffRecord = dict[str, Any]
DepartmentRecord = dict[str, Any]
ClientRecord = dict[str, Any]
ProjectRecord = dict[str, Any]
TimesheetRecord = dict[str, Any]
HoursSummary = dict[str, Any]

# List aliases
StaffList = list[StaffRecord]
TimesheetList = list[TimesheetRecord]
