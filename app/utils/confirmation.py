import qrcode
import io
import base64
import uuid
from datetime import datetime


def generate_confirmation_number(now: datetime) -> str:
    suffix = uuid.uuid4().hex[:8].upper()
    return f"REG-{now.strftime('%y%m%d')}-{suffix}"


def generate_qr_code(data: str) -> str:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )

    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    img_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')

    return f"data:image/png;base64,{img_base64}"
