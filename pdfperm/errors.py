"""
Error classes raised by the permission tooling.
"""

__all__ = [
    'PdfPermError',
    'AlreadyEncryptedError',
    'UnsupportedSecurityHandlerError',
    'PasswordRequiredError',
]


class PdfPermError(Exception):
    def __init__(self, msg: str, *args):
        self.msg = msg
        super().__init__(msg, *args)


class AlreadyEncryptedError(PdfPermError):
    """
    Raised when permissions are committed to a document that is already
    encrypted.
    """

    def __init__(self, msg: str = "Document is already encrypted"):
        super().__init__(msg)


class UnsupportedSecurityHandlerError(PdfPermError):
    """
    Raised when the permissions of an encrypted document cannot be read
    without credentials.
    """

    pass


class PasswordRequiredError(PdfPermError):
    pass
