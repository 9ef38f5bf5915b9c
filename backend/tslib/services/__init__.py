"""Service layer: validation plus one parameterized statement per operation."""
from . import staff, departments, clients, projects, timesheets

__all__ = ['staff', 'departments', 'clients', 'projects', 'timesheets']
