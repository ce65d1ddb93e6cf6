"""
exbridge faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the bridge
  can surface. Codes are grouped by domain so logs and searches stay predictable.
- BridgeException / BridgeWarning: base types that carry a message plus options
  (title, code, hint, ...) and know how to render themselves with rich.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- configuration faults: a pipeline or namespace is missing a required piece
  (no catch-all handler for excess arguments, no reachability generator,
  unknown option key). Always surfaced: they point at a setup bug.
- value faults: an argument breaks a structural precondition (wrong type,
  forbidden character for a quoting style, non-callable where a callable is
  required). Surfaced immediately, aborting the current formatting pass.
- execution faults: the substrate refused a command.
- running out of arguments is NOT a fault (see exbridge.void).

Integration
- Library code raises through trigger(fault, **options).
- In non-shell mode exceptions are raised and warnings go through warnings.warn;
  in shell mode (the command-line preview) they are rendered via rich on stderr.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the bridge (stable identifiers).

    grouping (by high-level domain)
    - configuration (211xx)
      • TOO_MANY_ARGUMENTS, STALLED_HANDLER, MISSING_REACHABILITY, UNKNOWN_OPTION
    - values (221xx)
      • INVALID_TYPE, NOT_CALLABLE, UNQUOTABLE_VALUE
    - execution (231xx)
      • EXECUTION_FAILED
    - warnings (3xxxx)
      • BROKEN_AUTOLOAD

    normalize() lets a host application remap codes to its own labels.
    """
    # --- configuration errors (211xx) ---
    TOO_MANY_ARGUMENTS          = 21101
    STALLED_HANDLER             = 21102
    MISSING_REACHABILITY        = 21111
    UNKNOWN_OPTION              = 21121

    # --- value errors (221xx) ---
    INVALID_TYPE                = 22101
    NOT_CALLABLE                = 22102
    UNQUOTABLE_VALUE            = 22111

    # --- execution errors (231xx) ---
    EXECUTION_FAILED            = 23101

    # --- warnings (3xxxx) ---
    BROKEN_AUTOLOAD             = 31101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body:   the message, then " → hint" when a hint was given.
    - footer: the "docs" option (see getdoc()) when the host application has one.
    - fancy:  the same content inside a Panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "exbridge"), "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    body = [text(fault.message, "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    if docs := options.get("docs"):
        body.append(text(docs, "docs"))

    if options.get("fancy"):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class BridgeException(Exception):
    """
    base class of every error surfaced by the bridge.

    - message: one short, lowercased sentence.
    - options: read-only mapping (title, code, hint, plus any payload such as
      the offending argument or its position).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim #8A8AA0",  # muted documentation footer
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class TooManyArgumentsError(BridgeException): ...
class StalledHandlerError(BridgeException): ...
class MissingReachabilityError(BridgeException): ...
class UnknownOptionError(BridgeException): ...
class InvalidTypeError(BridgeException): ...
class NotCallableError(BridgeException): ...
class QuotingError(BridgeException): ...
class ExecutionError(BridgeException): ...


class BridgeWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
            "docs": "dim #9A9AB0",  # muted documentation footer
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class BrokenAutoloadWarning(BridgeWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise exceptions
      are raised and warnings are emitted.

    typical options
    - title, code, hint, docs, shell, fancy, colorful, and any payload the
      reporter may want to show (e.g., argument/index/name/identity).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "BridgeException",
    "TooManyArgumentsError",
    "StalledHandlerError",
    "MissingReachabilityError",
    "UnknownOptionError",
    "InvalidTypeError",
    "NotCallableError",
    "QuotingError",
    "ExecutionError",
    "BridgeWarning",
    "BrokenAutoloadWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
