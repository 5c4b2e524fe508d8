from sqlalchemy.orm import declarative_base
from enum import Enum

Base = declarative_base()

# Enums
class SessionType(str, Enum):
    AM = "AM"
    PM = "PM"

class EmployeeRole(str, Enum):
    DRIVER = "Driver"
    PASSENGER_ASSISTANT = "Passenger Assistant"
    COORDINATOR = "Coordinator"

class MediaType(str, Enum):
    VIDEO = "video"
    IMAGE = "image"

class ExpiryStatusKind(str, Enum):
    NOT_SET = "NOT_SET"
    EXPIRED = "EXPIRED"
    CRITICAL = "CRITICAL"   # 0-14 days
    WARNING = "WARNING"     # 15-30 days
    OK = "OK"

class ExpiryPeriod(str, Enum):
    EXPIRED = "expired"
    DAYS_14 = "14-days"
    DAYS_30 = "30-days"

class CertificateEntityType(str, Enum):
    EMPLOYEES = "employees"
    VEHICLES = "vehicles"

class TardinessReason(str, Enum):
    TRAFFIC = "traffic"
    VEHICLE_ISSUE = "vehicle_issue"
    WEATHER = "weather"
    ROAD_CLOSURE = "road_closure"
    PERSONAL_EMERGENCY = "personal_emergency"
    OTHER = "other"

class TardinessStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

class BreakdownStatus(str, Enum):
    REPORTED = "reported"
    REPLACEMENT_ASSIGNED = "replacement_assigned"
    RESOLVED = "resolved"

class NotificationType(str, Enum):
    DRIVER_TARDINESS = "driver_tardiness"
    VEHICLE_BREAKDOWN = "vehicle_breakdown"

class NotificationStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"

class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

class PreCheckState(str, Enum):
    EDITING = "EDITING"
    RECORDING = "RECORDING"
    SUBMITTING = "SUBMITTING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

class WorkflowState(str, Enum):
    LOADING_DRIVER = "LOADING_DRIVER"
    READY = "READY"
    CHOOSING_PRE_CHECK = "CHOOSING_PRE_CHECK"
    STARTING_SESSION = "STARTING_SESSION"
    STARTED = "STARTED"
    FAILED = "FAILED"
