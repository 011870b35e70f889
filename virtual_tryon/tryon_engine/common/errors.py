# virtual_tryon/tryon_engine/common/errors.py

class CameraAccessError(IOError):
    """Raised when a camera device is denied, busy or missing."""

    def __init__(self, source, reason: str = "Camera access denied or not available"):
        super().__init__(f"{reason} (source: {source})")
        self.source = source
        self.reason = reason
