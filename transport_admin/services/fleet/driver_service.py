import logging
import uuid
from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from transport_admin.models.fleet.driver import Driver

logger = logging.getLogger(__name__)


class DriverService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_driver(self, employee_id: int) -> Optional[Driver]:
        result = await self.session.execute(
            select(Driver)
            .options(selectinload(Driver.employee))
            .where(Driver.employee_id == employee_id, Driver.is_deleted == False)
        )
        return result.scalar_one_or_none()

    async def ensure_qr_token(self, employee_id: int) -> Driver:
        """Return the driver, issuing a QR token first if they have none"""
        driver = await self.get_driver(employee_id)
        if not driver:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Driver not found")
        if driver.qr_token:
            return driver
        return await self.rotate_qr_token(employee_id)

    async def rotate_qr_token(self, employee_id: int, current_user_id: Optional[int] = None) -> Driver:
        """Replace the driver's QR token; the previous token stops resolving immediately"""
        try:
            driver = await self.get_driver(employee_id)
            if not driver:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Driver not found")

            driver.qr_token = str(uuid.uuid4())
            driver.updated_by = current_user_id
            await self.session.commit()
            await self.session.refresh(driver)

            logger.info(f"🔑 QR token rotated for driver {employee_id}")
            return driver

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error rotating QR token for driver {employee_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error rotating QR token"
            )
