"""
Bridge between :class:`.DocumentPermissions` and PDF documents.

Parsing, serialisation and the construction of encryption dictionaries are
handled by pyHanko. This module only adds the permission-specific rules:

* documents without encryption dictionary report a configurable default;
* permissions can only be committed to documents that are not encrypted;
* committing installs an AES-256 standard security handler with empty
  owner and user passwords, so the document still opens without prompting.
"""

import logging
import os
from io import BytesIO
from typing import BinaryIO, Optional, Union

from pyhanko.pdf_utils.crypt import AuthStatus, StandardSecurityHandler
from pyhanko.pdf_utils.reader import PdfFileReader
from pyhanko.pdf_utils.writer import PdfFileWriter, copy_into_new_writer

from .errors import (
    AlreadyEncryptedError,
    PasswordRequiredError,
    UnsupportedSecurityHandlerError,
)
from .permissions import DocumentPermissions

__all__ = ['PermissionDocument', 'DEFAULT_PERMISSIONS']

logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS = DocumentPermissions.allow_everything()
"""
Permissions reported for documents without encryption dictionary.
"""


class PermissionDocument:
    """
    A PDF document whose permissions can be inspected and set.

    :param reader:
        Reader for the input document.
    :param name:
        Name used to identify the document in diagnostics.
    """

    def __init__(self, reader: PdfFileReader, name: Optional[str] = None):
        self.reader = reader
        self.name = name or '<stream>'
        self._writer: Optional[PdfFileWriter] = None

    @classmethod
    def load(
        cls, source: Union[str, os.PathLike, bytes], strict: bool = True
    ) -> 'PermissionDocument':
        """
        Load a document from a file or from bytes.

        The input is read into memory entirely, so the document may be
        written back to the file it came from.

        :param source:
            A file path or the document's bytes.
        :param strict:
            Whether to parse the file in strict mode.
        :raises pyhanko.pdf_utils.misc.PdfReadError:
            if the file is not a valid PDF document.
        """
        if isinstance(source, bytes):
            data, name = source, None
        else:
            with open(source, 'rb') as inf:
                data = inf.read()
            name = os.fspath(source)
        reader = PdfFileReader(BytesIO(data), strict=strict)
        logger.debug(
            f"Loaded {name or 'document'}; "
            f"security handler: {type(reader.security_handler).__name__}"
        )
        return cls(reader, name=name)

    @property
    def encrypted(self) -> bool:
        """
        ``True`` if the document is encrypted, taking into account pending
        changes from :meth:`commit_permissions` and :meth:`decrypt`.
        """
        if self._writer is not None:
            return self._writer.security_handler is not None
        return self.reader.encrypted

    def read_permissions(
        self, default: DocumentPermissions = DEFAULT_PERMISSIONS
    ) -> DocumentPermissions:
        """
        Read the permissions from the document's encryption dictionary.

        :param default:
            Value returned for documents that are not encrypted.
        :raises UnsupportedSecurityHandlerError:
            if the document is encrypted with a security handler other than
            the standard one.
        """
        sh = self.reader.security_handler
        if sh is None:
            return default
        if not isinstance(sh, StandardSecurityHandler):
            raise UnsupportedSecurityHandlerError(
                f"Cannot read permissions of {self.name}: security handler "
                f"{type(sh).__name__} requires credentials"
            )
        return DocumentPermissions.from_pdf_permissions(sh.perms)

    def commit_permissions(self, permissions: DocumentPermissions):
        """
        Encrypt the document with the given permissions.

        The result only materialises when the document is written.

        :raises AlreadyEncryptedError:
            if the document is already encrypted.
        """
        if self.encrypted:
            raise AlreadyEncryptedError(f"{self.name} is already encrypted")
        w = self._writer
        if w is None:
            w = copy_into_new_writer(self.reader)
        w.encrypt('', '', perms=permissions.as_pdf_permissions())
        logger.debug(
            f"Encryption dictionary: "
            f"/P {w.security_handler.as_pdf_object()['/P']}"
        )
        self._writer = w

    def decrypt(self):
        """
        Remove the encryption of a document that opens without a password.

        :raises PasswordRequiredError:
            if the document's user password is not empty.
        """
        if not self.reader.encrypted:
            logger.info(f"{self.name} is not encrypted")
            self._writer = copy_into_new_writer(self.reader)
            return
        result = self.reader.decrypt('')
        if result.status == AuthStatus.FAILED:
            raise PasswordRequiredError(
                f"{self.name} cannot be opened without a password"
            )
        self._writer = copy_into_new_writer(self.reader)

    def write(self, stream: BinaryIO):
        """
        Serialise the document, including committed changes, to a stream.
        """
        w = self._writer
        if w is None:
            w = copy_into_new_writer(self.reader)
        w.write(stream)

    def save(self, path: Union[str, os.PathLike]):
        """
        Write the document to a file.

        The output is produced in memory first, so the file is left
        untouched if serialisation fails.
        """
        buf = BytesIO()
        self.write(buf)
        with open(path, 'wb') as outf:
            outf.write(buf.getvalue())
