import json
import httpx
import pytest

from transport_admin.core.exceptions import ValidationError
from transport_admin.models.shared.enums import SessionType
from transport_admin.schemas.incident.tardiness_schema import TardinessReportRequest
from transport_admin.services.incident.tardiness_reporter import TardinessReporter


@pytest.fixture
def sent():
    return []


@pytest.fixture
def make_reporter(sent):
    def _make(status_code=200, body=None):
        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(status_code, json=body if body is not None else {
                "success": True, "tardinessReportId": 42, "message": "Tardiness report submitted successfully",
            })
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend.test")
        return TardinessReporter(client)
    return _make


def make_request(**overrides):
    values = dict(driver_id=1, route_id=12, session_id=501, session_type=SessionType.AM,
                  reason="traffic", notes="Roadworks on the high street")
    values.update(overrides)
    return TardinessReportRequest(**values)


@pytest.mark.asyncio
class TestTardinessReporter:
    async def test_empty_reason_makes_no_request(self, make_reporter, sent):
        reporter = make_reporter()
        with pytest.raises(ValidationError) as exc:
            await reporter.report(make_request(reason=""))
        assert "reason" in exc.value.detail
        assert sent == []

    async def test_unknown_reason_makes_no_request(self, make_reporter, sent):
        reporter = make_reporter()
        with pytest.raises(ValidationError):
            await reporter.report(make_request(reason="overslept"))
        assert sent == []

    async def test_sends_camel_case_payload(self, make_reporter, sent):
        reporter = make_reporter()
        outcome = await reporter.report(make_request())

        assert outcome.success
        assert outcome.tardiness_report_id == 42
        assert len(sent) == 1
        assert sent[0].url.path == "/api/tardiness/report"
        assert json.loads(sent[0].content) == {
            "driverId": 1,
            "routeId": 12,
            "routeSessionId": 501,
            "sessionType": "AM",
            "reason": "traffic",
            "additionalNotes": "Roadworks on the high street",
        }

    @pytest.mark.parametrize("reason", [
        "traffic", "vehicle_issue", "weather", "road_closure", "personal_emergency", "other",
    ])
    async def test_all_reasons_accepted(self, make_reporter, reason):
        outcome = await make_reporter().report(make_request(reason=reason))
        assert outcome.success

    async def test_rejected_report_returns_error(self, make_reporter):
        reporter = make_reporter(status_code=400, body={"detail": "Missing required fields"})
        outcome = await reporter.report(make_request())
        assert not outcome.success
        assert outcome.error == "Missing required fields"

    async def test_non_object_body_on_success(self, make_reporter):
        outcome = await make_reporter(body=["ok"]).report(make_request())
        assert outcome.success
        assert outcome.tardiness_report_id is None
        assert outcome.message == "Tardiness reported successfully"

    async def test_non_object_body_on_error(self, make_reporter):
        outcome = await make_reporter(status_code=500, body="Internal Server Error").report(make_request())
        assert not outcome.success
        assert outcome.error == "Failed to report tardiness"
