import struct
from enum import Flag

from pyhanko.pdf_utils.crypt.permissions import StandardPermissions

from .shortflags import ShortFlags, short_flags

__all__ = ['DocumentPermissions', 'RESERVED_BITS']


RESERVED_BITS = 0xFFFFF0C0
"""
Bits of the ``/P`` entry that are not managed here. They are always set,
so undefined or later-defined flags default to "allow".
"""


@short_flags('pmcafxsq')
class DocumentPermissions(ShortFlags, Flag):
    """
    Access permissions of the standard security handler.

    The values are the bit positions used in the ``/P`` entry of the
    encryption dictionary, see Table 22 in ISO 32000-2:2020.
    """

    PRINTABLE = 4
    MODIFIABLE = 8
    COPYABLE = 16
    ANNOTABLE = 32
    FILLABLE = 256
    COPYABLE_FOR_ACCESSIBILITY = 512
    ASSEMBLABLE = 1024
    PRINTABLE_HIGH_QUALITY = 2048

    @classmethod
    def from_uint(cls, uint_flags: int) -> 'DocumentPermissions':
        """
        Convert a 32-bit unsigned integer into permission flags.
        Bits that do not correspond to a permission are discarded.
        """

        result = cls(0)
        for flag in cls:
            if uint_flags & flag.value:
                result |= flag
        return result

    @classmethod
    def from_sint32(cls, sint32_flags: int) -> 'DocumentPermissions':
        """
        Convert the signed integer found in a ``/P`` entry into
        permission flags.
        """

        return cls.from_uint(sint32_flags & 0xFFFFFFFF)

    @classmethod
    def from_pdf_permissions(
        cls, perms: StandardPermissions
    ) -> 'DocumentPermissions':
        return cls.from_uint(perms.as_uint32())

    def as_uint32(self) -> int:
        return self.value | RESERVED_BITS

    def as_sint32(self) -> int:
        return struct.unpack('>i', struct.pack('>I', self.as_uint32()))[0]

    def as_pdf_permissions(self) -> StandardPermissions:
        """
        Convert to the permission flags understood by pyHanko's standard
        security handler.

        Flags outside the ones managed here, such as the PDF MAC tolerance
        flag, are set.
        """
        return StandardPermissions.from_uint(self.as_uint32())
