r"""
exbridge utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the bridge, the command proxies and the
  stock parameter handlers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name)
  • Assign stable __name__/__qualname__ to generated handlers for clean reprs and tracebacks.

- ordinal(number)
  • Human-friendly ordinal label ("first", "second", "11th") for argument positions in messages.

- escape(text, chars) / fnameescape(text)
  • Backslash escaping in the manner of the editor's escape() and fnameescape() functions.

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> escape("a b", " ")
    'a\\ b'
    >>> ordinal(3)
    'third'
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used for constructor options where None is a legitimate value (for example
    a proxy without a catch-all handler), so "not provided" needs its own marker.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations and isinstance() (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(callable, name, /):
    """
    Set a stable __name__/__qualname__ on a callable and return it.

    Handler factories use it so that generated closures show up as
    "star(plusplusopt)" instead of "star.<locals>.handler" in reprs and logs.
    """
    if not builtins.callable(callable):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        callable.__qualname__ = name
        callable.__name__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() first argument must be a updatable callable") from None
    return callable


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def escape(text, chars, /):
    """
    Prefix every occurrence of a character from `chars` in `text` with a backslash.

    Mirrors the editor's escape(): characters are escaped one by one, a
    backslash listed in `chars` is doubled like any other character.
    """
    if not isinstance(chars, str):
        raise TypeError("escape() second argument must be a string")
    return "".join("\\" + char if char in chars else char for char in text)


# Characters the editor treats specially inside a file name argument.
FNAME_SPECIAL = " \t\n*?[{`$\\%#'\"|!<"


def fnameescape(text, /):
    """
    Escape `text` for use as a file name argument of an Ex command.

    rules
    - every character in FNAME_SPECIAL is backslash-escaped.
    - a leading '+' or '>' is escaped as well, and so is a lone '-'.
    """
    escaped = escape(text, FNAME_SPECIAL)
    if escaped.startswith(("+", ">")) or escaped == "-":
        escaped = "\\" + escaped
    return escaped


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Typical pattern: value = coalesce(user_value, default) to materialize a fallback
only when user_value is Unset (None and other falsey values are preserved).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "ordinal",
    "escape",
    "fnameescape",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "FNAME_SPECIAL",
)
