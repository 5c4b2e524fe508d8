import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import select

from transport_admin.models import Driver


@pytest.mark.asyncio
class TestDriverQRCode:
    async def test_qr_code_png(self, client: AsyncClient, seed):
        response = await client.get(f"/api/v1/drivers/{seed.driver_id}/qr-code")
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    async def test_unknown_driver(self, client: AsyncClient, seed):
        response = await client.get("/api/v1/drivers/9999/qr-code")
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = await client.post("/api/v1/drivers/9999/qr-token/rotate")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_rotate_invalidates_old_token(self, client: AsyncClient, seed, session_maker):
        response = await client.post(f"/api/v1/drivers/{seed.driver_id}/qr-token/rotate")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["qr_token"] != seed.driver_token
        assert data["start_session_url"].endswith(f"/start-session/{data['qr_token']}")

        async with session_maker() as session:
            driver = (await session.execute(
                select(Driver).where(Driver.employee_id == seed.driver_id)
            )).scalar_one()
            assert driver.qr_token == data["qr_token"]

        response = await client.post(f"/api/v1/start-session/{seed.driver_token}")
        assert response.json()["error_kind"] == "DRIVER_NOT_FOUND"

        response = await client.post(f"/api/v1/start-session/{data['qr_token']}")
        assert response.json()["state"] == "READY"


@pytest.mark.asyncio
class TestCertificateExpiry:
    async def test_driver_certificates_due_within_30_days(self, client: AsyncClient, seed):
        response = await client.get("/api/v1/compliance/certificates-expiry")
        assert response.status_code == status.HTTP_200_OK
        certificates = response.json()

        assert [c["certificate_type"] for c in certificates] == ["DBS"]
        assert certificates[0]["entity_name"] == "Sam Carter"
        assert certificates[0]["entity_identifier"] == "TAS-1001"
        assert certificates[0]["expiry"]["status_kind"] == "CRITICAL"
        assert certificates[0]["expiry"]["label"] == "14 days remaining"

    async def test_expired_driver_certificates(self, client: AsyncClient, seed):
        response = await client.get(
            "/api/v1/compliance/certificates-expiry", params={"period": "expired"}
        )
        certificates = response.json()
        assert [c["certificate_type"] for c in certificates] == ["Passport"]
        assert certificates[0]["expiry"]["label"] == "3 days overdue"
        assert certificates[0]["expiry"]["color"] == "red"

    async def test_vehicle_certificates(self, client: AsyncClient, seed):
        response = await client.get(
            "/api/v1/compliance/certificates-expiry",
            params={"period": "30-days", "entity_type": "vehicles"},
        )
        certificates = response.json()
        assert [c["certificate_type"] for c in certificates] == ["MOT"]
        assert certificates[0]["entity_identifier"] == "AB12 CDE"
        assert certificates[0]["expiry"]["status_kind"] == "WARNING"

        response = await client.get(
            "/api/v1/compliance/certificates-expiry",
            params={"period": "14-days", "entity_type": "vehicles"},
        )
        assert response.json() == []

    async def test_unknown_period(self, client: AsyncClient, seed):
        response = await client.get(
            "/api/v1/compliance/certificates-expiry", params={"period": "90-days"}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
class TestVehiclePreCheckList:
    async def test_empty_day(self, client: AsyncClient, seed):
        response = await client.get("/api/v1/vehicle-pre-checks/", params={"check_date": "2020-01-01"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []


@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == status.HTTP_200_OK
