import base64
import io

import qrcode

from app.core.config import settings

def event_landing_url(slug: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/e/{slug}"

def certificate_url(qr_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/cert/{qr_id}"

def qr_png_bytes(text: str, *, box_size: int = 8, border: int = 1) -> bytes:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image()
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

def qr_data_uri(text: str) -> str:
    b64 = base64.b64encode(qr_png_bytes(text)).decode("ascii")
    return f"data:image/png;base64,{b64}"
