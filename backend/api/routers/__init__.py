"""API Routers package."""
from . import health, staff, departments, clients, projects, timesheets

__all__ = ['health', 'staff', 'departments', 'clients', 'projects', 'timesheets']
