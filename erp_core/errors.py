"""
Error taxonomy for ERP calls.

  TransportError → network / DNS / timeout, no usable response
  BackendError   → the backend answered with an error (non-2xx or bad body)
"""


class ErpError(RuntimeError):
    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TransportError(ErpError):
    """The request never produced a response."""


class BackendError(ErpError):
    """The backend rejected the request; message is the backend's own if it sent one."""
