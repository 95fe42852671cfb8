"""QR Track: accounts and trackable QR code projects."""

__version__ = "0.1.0"
