"""QR Code generation from text, binary data or custom segments, with a terminal front end."""

__version__ = "1.0.0"

__all__ = ["app", "ecc", "matrix", "qrcode", "segment"]