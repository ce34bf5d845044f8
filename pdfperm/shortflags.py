"""
Single-character notation for :class:`enum.Flag` types.

A flag type opts in by subclassing :class:`ShortFlags` and registering its
character table with the :func:`short_flags` decorator. The table pairs
every member of the flag type with exactly one character, in declaration
order.

Three textual forms are derived from the table:

* flag strings such as ``pmc``, where every character selects one flag and
  ``*`` selects all of them;
* modification expressions such as ``+pc``, ``-m`` or ``=*``, which add,
  remove or replace flags;
* summaries such as ``pm-a----``, which render a value with one slot
  per flag.

Characters that cannot be decoded never abort processing. They are
reported as :class:`IgnoredToken` values to a diagnostic sink, which logs
a warning unless the caller supplies its own.
"""

import enum
import logging
import operator
from dataclasses import dataclass
from functools import reduce
from typing import (
    Callable,
    Generic,
    Iterator,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

__all__ = [
    'WILDCARD',
    'UNSET_MARKER',
    'TokenKind',
    'IgnoredToken',
    'DiagnosticSink',
    'log_ignored_token',
    'ShortFlagTable',
    'ShortFlags',
    'short_flags',
    'ModificationOperator',
    'FlagModification',
]

logger = logging.getLogger(__name__)

WILDCARD = '*'
"""
Character standing for every flag of a type.
"""

UNSET_MARKER = '-'
"""
Character used in summaries for flags that are not set.
"""

SF = TypeVar('SF', bound='ShortFlags')


class TokenKind(enum.Enum):
    FLAG = enum.auto()
    OPERATOR = enum.auto()


@dataclass(frozen=True)
class IgnoredToken:
    """
    Describes a piece of input that was skipped while decoding.
    """

    kind: TokenKind
    """
    Whether the token was meant as a flag character or as an operator.
    """

    token: str
    """
    The offending character.
    """

    position: int
    """
    Index of the token in :attr:`source`.
    """

    source: str
    """
    The full string being processed.
    """

    def __str__(self):
        if self.kind == TokenKind.OPERATOR:
            return f"Invalid modification: {self.source}"
        return f"Invalid permission character: {self.token}"


DiagnosticSink = Callable[[IgnoredToken], None]


def log_ignored_token(token: IgnoredToken):
    logger.warning(str(token))


@dataclass(frozen=True)
class ShortFlagTable:
    """
    Ordered pairing of flag members and their short characters.

    :raises TypeError:
        if the table does not cover every member exactly once, or if
        any character is duplicated, reserved or longer than one character.
    """

    flags: Tuple[enum.Flag, ...]
    chars: Tuple[str, ...]

    def __post_init__(self):
        if len(self.flags) != len(self.chars):
            raise TypeError(
                f"Short flag table has {len(self.chars)} entries, "
                f"but there are {len(self.flags)} flags."
            )
        if len(set(self.flags)) != len(self.flags):
            raise TypeError("Flags in a short flag table must be distinct.")
        for c in self.chars:
            if not isinstance(c, str) or len(c) != 1:
                raise TypeError(
                    f"Short flags must be single characters, not {c!r}."
                )
            if c in (WILDCARD, UNSET_MARKER):
                raise TypeError(f"'{c}' is reserved and cannot be a short flag.")
        if len(set(self.chars)) != len(self.chars):
            raise TypeError("Short flags must not be reused.")

    def __len__(self):
        return len(self.chars)

    def __iter__(self) -> Iterator[Tuple[str, enum.Flag]]:
        return zip(self.chars, self.flags)

    def lookup(self, c: str) -> Optional[enum.Flag]:
        try:
            return self.flags[self.chars.index(c)]
        except ValueError:
            return None


class ShortFlags(enum.Flag):
    """
    Mixin for flag types that have a short flag table.
    """

    @classmethod
    def short_flag_table(cls) -> ShortFlagTable:
        try:
            return cls._short_flag_table
        except AttributeError:
            raise TypeError(
                f"{cls.__name__} does not define short flags; "
                f"register them with @short_flags."
            ) from None

    @classmethod
    def none(cls: Type[SF]) -> SF:
        """
        The value with no flags set.
        """
        return cls(0)

    @classmethod
    def allow_everything(cls: Type[SF]) -> SF:
        """
        The value with every flag set.
        """
        return reduce(operator.or_, cls.__members__.values(), cls(0))

    @classmethod
    def from_char(cls: Type[SF], c: str) -> Optional[SF]:
        """
        Decode a single short flag.

        :param c:
            A short flag character, or ``*`` for all flags.
        :return:
            The corresponding value, or ``None`` if ``c`` is not a short
            flag of this type. Lookup is case-sensitive.
        """
        if c == WILDCARD:
            return cls.allow_everything()
        return cls.short_flag_table().lookup(c)

    @classmethod
    def from_str(
        cls: Type[SF], s: str, on_ignored: Optional[DiagnosticSink] = None
    ) -> SF:
        """
        Decode a string of short flags into the union of the flags it names.

        :param s:
            The flag string. The empty string decodes to :meth:`none`.
        :param on_ignored:
            Callback receiving an :class:`IgnoredToken` for every character
            that is not a short flag. Such characters are skipped.
            By default, a warning is logged.
        """
        return cls._decode(s, on_ignored or log_ignored_token)

    @classmethod
    def _decode(
        cls: Type[SF], s: str, sink: DiagnosticSink, source=None, offset=0
    ) -> SF:
        result = cls.none()
        for ix, c in enumerate(s):
            flag = cls.from_char(c)
            if flag is None:
                sink(
                    IgnoredToken(
                        kind=TokenKind.FLAG,
                        token=c,
                        position=ix + offset,
                        source=s if source is None else source,
                    )
                )
            else:
                result |= flag
        return result

    def difference(self: SF, other: SF) -> SF:
        return self & ~other

    def apply_modification(
        self: SF, modification: str, on_ignored: Optional[DiagnosticSink] = None
    ) -> SF:
        """
        Apply a modification expression to this value.

        :param modification:
            An expression of the form ``<op><flags>``. The operator ``+``
            adds the flags, ``-`` removes them and ``=`` replaces the current
            value with them.
        :param on_ignored:
            Diagnostic callback, see :meth:`from_str`. Expressions with an
            unknown operator are reported to it and leave the value as-is.
        :return:
            The modified value.
        :raises ValueError:
            if ``modification`` is empty.
        """
        mod = FlagModification.parse(type(self), modification, on_ignored)
        return mod.apply(self)

    def summary(self) -> str:
        """
        Render this value with one character per short flag slot: the short
        flag if the flag is set, ``-`` otherwise.
        """
        return ''.join(
            c if flag in self else UNSET_MARKER
            for c, flag in self.short_flag_table()
        )

    def legend(self) -> Iterator[Tuple[str, enum.Flag, bool]]:
        """
        Iterate over ``(char, flag, is_set)`` triples in table order.
        """
        for c, flag in self.short_flag_table():
            yield c, flag, flag in self


def short_flags(chars: str):
    """
    Class decorator registering the short flag table of a
    :class:`ShortFlags` type.

    :param chars:
        One character per member, in the order in which the members are
        declared.
    """

    def _decorate(cls):
        if not issubclass(cls, ShortFlags):
            raise TypeError(
                f"@short_flags requires a ShortFlags subclass, "
                f"not {cls.__name__}."
            )
        cls._short_flag_table = ShortFlagTable(
            flags=tuple(cls.__members__.values()), chars=tuple(chars)
        )
        return cls

    return _decorate


class ModificationOperator(enum.Enum):
    ADD = '+'
    REMOVE = '-'
    REPLACE = '='


@dataclass(frozen=True)
class FlagModification(Generic[SF]):
    """
    A parsed modification expression.
    """

    operator: Optional[ModificationOperator]
    """
    The operator, or ``None`` if the expression's operator was not
    recognised. Such modifications do nothing.
    """

    flags: SF
    """
    The flags named by the expression.
    """

    @classmethod
    def parse(
        cls,
        flag_type: Type[SF],
        expression: str,
        on_ignored: Optional[DiagnosticSink] = None,
    ) -> 'FlagModification[SF]':
        if not expression:
            raise ValueError("Modification expression must not be empty")
        sink = on_ignored or log_ignored_token
        first, rest = expression[0], expression[1:]
        flags = flag_type._decode(rest, sink, source=expression, offset=1)
        try:
            op: Optional[ModificationOperator] = ModificationOperator(first)
        except ValueError:
            op = None
            sink(
                IgnoredToken(
                    kind=TokenKind.OPERATOR,
                    token=first,
                    position=0,
                    source=expression,
                )
            )
        return cls(operator=op, flags=flags)

    def apply(self, current: SF) -> SF:
        if self.operator == ModificationOperator.ADD:
            return current | self.flags
        elif self.operator == ModificationOperator.REMOVE:
            return current.difference(self.flags)
        elif self.operator == ModificationOperator.REPLACE:
            return self.flags
        return current
