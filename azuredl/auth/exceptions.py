"""
Signing exceptions for azuredl.
"""


class SigningError(Exception):
    """Base exception for request signing errors."""
    
    def __init__(self, message: str, error_code: str = "SigningFailed"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidKeyError(SigningError):
    """Raised when the account key is not valid base64."""
    
    def __init__(self, message: str = "Account key is not valid base64"):
        super().__init__(message, "InvalidKey")


class CryptoUnavailableError(SigningError):
    """Raised when the HMAC-SHA256 primitive is not available."""
    
    def __init__(self, message: str = "HMAC-SHA256 is not available on this platform"):
        super().__init__(message, "CryptoUnavailable")
