"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.data_import import DataImport
from db.models.task import Task
from db.models.team_member import TeamMember

__all__ = [
    "DataImport",
    "Task",
    "TeamMember",
]
