"""
Core exceptions for azuredl.
"""


class MalformedDateError(ValueError):
    """Raised when a date string does not match the RFC-1123 grammar."""

    def __init__(self, text: str, reason: str = "does not match RFC-1123 grammar"):
        self.text = text
        self.reason = reason
        super().__init__(f"Malformed date '{text}': {reason}")
