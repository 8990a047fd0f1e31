"""
Blob download exceptions for azuredl.
"""


class BlobError(Exception):
    """Base exception for blob operations."""
    
    def __init__(self, message: str, error_code: str = "BlobOperationFailed"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class DownloadError(BlobError):
    """Raised when the service answers a download with a non-200 status."""
    
    def __init__(self, status_code: int, reason: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(
            f"Download failed with HTTP {status_code} {reason}",
            "DownloadFailed"
        )


class TransportError(BlobError):
    """Raised when the request could not be delivered to the service."""
    
    def __init__(self, message: str):
        super().__init__(message, "TransportFailed")
