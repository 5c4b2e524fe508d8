import logging
import httpx

from transport_admin.core.exceptions import ValidationError
from transport_admin.models.shared.enums import TardinessReason
from transport_admin.schemas.incident.tardiness_schema import (
    TardinessReportOutcome, TardinessReportPayload, TardinessReportRequest
)

logger = logging.getLogger(__name__)

REASON_VALUES = {reason.value for reason in TardinessReason}


class TardinessReporter:
    """Driver-side client for POST /api/tardiness/report"""

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    @staticmethod
    def validate_reason(reason: str) -> None:
        if not reason:
            raise ValidationError("Please select a reason for the delay")
        if reason not in REASON_VALUES:
            raise ValidationError(f"Invalid tardiness reason: {reason}")

    async def report(self, request: TardinessReportRequest) -> TardinessReportOutcome:
        self.validate_reason(request.reason)

        payload = TardinessReportPayload(
            driverId=request.driver_id,
            routeId=request.route_id,
            routeSessionId=request.session_id,
            sessionType=request.session_type.value,
            reason=request.reason,
            additionalNotes=request.notes or None,
        )

        try:
            response = await self.http_client.post("/api/tardiness/report", json=payload.model_dump())
        except httpx.HTTPError as e:
            logger.error(f"Error reporting tardiness for driver {request.driver_id}: {e}")
            return TardinessReportOutcome(success=False, error="Failed to report tardiness")

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error:
            error = body.get("error") or body.get("detail") or "Failed to report tardiness"
            logger.error(f"Tardiness report rejected ({response.status_code}): {error}")
            return TardinessReportOutcome(success=False, error=str(error))

        logger.info(f"⏰ Tardiness reported for driver {request.driver_id} ({request.reason})")
        return TardinessReportOutcome(
            success=True,
            tardiness_report_id=body.get("tardinessReportId"),
            message=body.get("message") or "Tardiness reported successfully",
        )
