import io
import logging
import qrcode
from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


def start_session_url(public_app_url: str, qr_token: str) -> str:
    return f"{public_app_url.rstrip('/')}/start-session/{qr_token}"


def generate_qr_png(data: str, box_size: int = 10, border: int = 4) -> bytes:
    """Render data as a QR code PNG"""
    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"Error generating QR code: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate QR code"
        )
