"""
Error types for metadata stamping and transcoding.

All errors inherit from RayBanError so callers can catch one base class.
"""


class RayBanError(Exception):
    """Base exception for all rayban-meta failures."""
    pass


class UnsupportedFileType(RayBanError):
    """Raised when a file's extension is not a recognized video type."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File is not a supported video: {path}")


class ExternalToolUnavailable(RayBanError):
    """Raised when ffmpeg, ffprobe or exiftool cannot be started."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} is not available")


class ExternalToolFailure(RayBanError):
    """Raised when an external tool exits with an error."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        self.message = message
        super().__init__(f"{tool} failed: {message}")


class InsufficientInputsError(RayBanError):
    """Raised when a merge is requested with fewer than two inputs."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"At least 2 videos required for merging, got {count}")


class ReadError(RayBanError):
    """Raised when a file's metadata or streams cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")
