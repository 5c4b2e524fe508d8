from transport_admin.models.fleet.employee import Employee
from transport_admin.models.fleet.driver import Driver
from transport_admin.models.fleet.vehicle import Vehicle
from transport_admin.models.fleet.route import Route
from transport_admin.models.fleet.route_session import RouteSession
from transport_admin.models.fleet.vehicle_pre_check import VehiclePreCheck
from transport_admin.models.incident.tardiness_report import TardinessReport
from transport_admin.models.incident.vehicle_breakdown import VehicleBreakdown
from transport_admin.models.incident.notification import Notification
from transport_admin.models.system.audit_log import AuditLog
