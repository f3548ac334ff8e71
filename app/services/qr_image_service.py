"""PNG rendering of QR codes for previews and the public image endpoint."""
import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M

# qrcode's default module count for short URLs is ~29 + 2*border
_MODULES_ESTIMATE = 33


def render_qr_png(data: str, size: int = 200, border: int = 2) -> bytes:
    """Encode `data` as a QR code and return PNG bytes roughly size x size pixels."""
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=max(size // _MODULES_ESTIMATE, 1),
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color='black', back_color='white')

    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def render_qr_data_url(data: str, size: int = 200) -> str:
    """QR code as a data:image/png;base64 URL for inline previews."""
    encoded = base64.b64encode(render_qr_png(data, size)).decode('ascii')
    return f"data:image/png;base64,{encoded}"
