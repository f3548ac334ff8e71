"""
Serial key and QR token generation.

Both identifiers are drawn from the `secrets` module. Uniqueness is not
guaranteed here: the product_unit table carries unique indexes on both
columns and the caller regenerates on conflict.
"""
import secrets
import string
from urllib.parse import quote

SERIAL_KEY_ALPHABET = string.ascii_uppercase + string.digits
SERIAL_KEY_LENGTH = 12

QR_TOKEN_ALPHABET = string.ascii_letters + string.digits
QR_TOKEN_LENGTH = 32


def _random_string(alphabet: str, length: int) -> str:
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def generate_serial_key() -> str:
    """12 characters from [A-Z0-9], printed under the QR code."""
    return _random_string(SERIAL_KEY_ALPHABET, SERIAL_KEY_LENGTH)


def generate_qr_token() -> str:
    """32 characters from [a-zA-Z0-9], the activation credential."""
    return _random_string(QR_TOKEN_ALPHABET, QR_TOKEN_LENGTH)


def build_activation_url(qr_token: str, base_url: str) -> str:
    """Public URL a scanned QR code opens."""
    return f"{base_url.rstrip('/')}/product/{quote(qr_token, safe='')}"
