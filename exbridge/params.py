r"""
exbridge stock parameter handlers.

Handlers and handler factories for Proxy.params / Proxy.rest (see exbridge.commands).

One argument in, one token out
- default: escapes only space and backslash.
- fname:   escapes as a file name.
- quote:   double quotes, escaping the contents.
- squote:  single quotes (fails on a value containing a single quote).
- raw:     no escaping.

Option-shaped arguments
- plusplusopt / plusopt / minusopt: emit a "++opt", "+opt" or "-opt" string
  verbatim and return True; otherwise put the argument back and return False.
  Built by prefixed(prefix) and meant for star().

Factories
- star(inner): run `inner` until it returns a falsy value.
- call(func):  pass one argument through `func`, emit the result raw.
- cmd(namespace=None): trailing Ex command, either a callable (bridged through
  `namespace` and invoked with no arguments) or the remaining arguments as raw tokens.

Example (the vim-plug `Plug` command):

    commands.Plug.configure(params=[squote, call(repr)], separator=", ")
"""
import builtins

from .faults import *
from .utils import rename
from .void import void


def default(ctx):
    ctx.escape(ctx.take(), " \\")


def fname(ctx):
    ctx.fname(ctx.take())


def quote(ctx):
    ctx.quote(ctx.take())


def squote(ctx):
    ctx.squote(ctx.take())


def raw(ctx):
    ctx.raw(ctx.take())


def prefixed(prefix, /):
    """
    Build a handler that emits a string argument starting with `prefix` verbatim.

    The handler reports whether it consumed the argument, which is what star()
    needs to stop at the first argument that does not look like an option.
    """
    if not isinstance(prefix, str) or not prefix:
        trigger(InvalidTypeError(
            "prefixed() argument must be a non-empty string",
            title="invalid prefix",
            code=FaultCode.INVALID_TYPE,
            argument=prefix,
        ))

    def handler(ctx):
        argument = ctx.take()
        if isinstance(argument, str) and argument.startswith(prefix):
            ctx.raw(argument)
            return True
        ctx.untake(argument)
        return False

    return rename(handler, "%sopt" % {"+": "plus", "++": "plusplus", "-": "minus"}.get(prefix, repr(prefix)))


plusplusopt = prefixed("++")
plusopt = prefixed("+")
minusopt = prefixed("-")


def _ensure_callable(object, factory, /):
    if not builtins.callable(object):
        trigger(NotCallableError(
            "%s() argument must be callable, got %s" % (factory, type(object).__name__),
            title="not callable",
            code=FaultCode.NOT_CALLABLE,
            argument=object,
        ))


def star(inner, /):
    """
    Kleene-star combinator: run `inner` until it reports non-consumption.
    """
    _ensure_callable(inner, "star")

    def handler(ctx):
        while inner(ctx) and not ctx.exhausted:
            pass

    return rename(handler, "star(%s)" % getattr(inner, "__name__", "handler"))


def call(func, /):
    """
    Handle one argument by passing it to `func` and emitting the result raw.
    """
    _ensure_callable(func, "call")

    def handler(ctx):
        if (argument := ctx.take()) is void:
            return
        ctx.raw(func(argument))

    return rename(handler, "call(%s)" % getattr(func, "__name__", "func"))


def cmd(namespace=None, /):
    """
    Handler for a trailing Ex command (autocmd and friends).

    With a bridge namespace, a callable argument becomes "call <identity>()".
    Anything else, and every argument after it, is emitted as a raw token.
    """

    def handler(ctx):
        if (argument := ctx.take()) is void:
            return
        if namespace is not None and builtins.callable(argument):
            ctx.raw("call %s()" % namespace[argument])
            return
        ctx.untake(argument)
        while ctx.remaining():
            ctx.raw(ctx.take())

    return rename(handler, "cmd(%s)" % getattr(namespace, "name", ""))


__all__ = (
    "default",
    "fname",
    "quote",
    "squote",
    "raw",
    "prefixed",
    "plusplusopt",
    "plusopt",
    "minusopt",
    "star",
    "call",
    "cmd",
)
