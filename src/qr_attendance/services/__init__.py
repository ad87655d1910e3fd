from .attendance_service import AttendanceService, DuplicateAttendanceError, StudentNotFoundError
from .decision import DecisionKind, ScanDecision, evaluate
from .qr_scanner import QRScanner
from .resolver import resolve_student
from .roster_service import RosterService, StudentNotInRosterError, StudentValidationError
from .stats import attendance_shares, daily_breakdown, recent_records, summarize

__all__ = [
	"AttendanceService",
	"DecisionKind",
	"DuplicateAttendanceError",
	"QRScanner",
	"RosterService",
	"ScanDecision",
	"StudentNotFoundError",
	"StudentNotInRosterError",
	"StudentValidationError",
	"attendance_shares",
	"daily_breakdown",
	"evaluate",
	"recent_records",
	"resolve_student",
	"summarize",
]
