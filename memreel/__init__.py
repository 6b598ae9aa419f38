"""Text chunking, QR payload encoding, frame-sequence storage and concept relationship analysis."""

__version__ = "0.1.0"
__all__ = ["qr", "relationships", "text", "utils", "video"]