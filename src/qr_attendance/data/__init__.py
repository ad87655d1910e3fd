from .database import Database, StorageError
from .stores import AttendanceStore, RosterStore

__all__ = ["AttendanceStore", "Database", "RosterStore", "StorageError"]
