# app_core/qr.py
import io
import base64

import qrcode
from qrcode.image.pil import PilImage


def qr_png(data: str, box_size: int = 8, border: int = 2) -> bytes:
    """PNG con el QR de ``data`` (qrcode + Pillow)."""
    qr = qrcode.QRCode(
        version=None,  # auto
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
        image_factory=PilImage,
    )
    qr.add_data(data)
    qr.make(fit=True)
    buf = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buf, format="PNG")
    return buf.getvalue()


def qr_data_uri(data: str, **kwargs) -> str:
    """data:image/png;base64,... listo para un <img src>; vacío si no hay datos."""
    if not data:
        return ""
    return "data:image/png;base64," + base64.b64encode(qr_png(data, **kwargs)).decode("ascii")
