"""
`command` with callable replacement text and custom completion.

The replacement text may be a callable. It is invoked with an Invocation built
from the editor's escape sequences (<q-args>, <f-args>, <line1>, ...):

    def greet(invocation):
        print("hello", *invocation.fargs)

    commands["command!"]("-nargs=*", "Greet", greet)

"-complete=custom" and "-complete=customlist" take the completion callable
as the following argument; it is invoked with the usual (lead, line, position).
"""
import collections

from ..faults import *
from ..params import default, star
from ..void import void

Invocation = collections.namedtuple("Invocation", (
    "args",
    "fargs",
    "line1",
    "line2",
    "count",
    "bang",
    "mods",
    "range",
    "reg",
))

TEMPLATE = (
    '{"args": <q-args>, "fargs": [<f-args>], "line1": <q-line1>, "line2": <q-line2>, '
    '"count": <q-count>, "bang": <q-bang>, "mods": <q-mods>, "range": <q-range>, "reg": <q-reg>}'
)


def _nilify(value):
    return value if value != "" else None


def _numify(value):
    return int(value) if value != "" else None


def invocation(mapping, /):
    """Build an Invocation out of the escape-sequence dictionary the host passes."""
    return Invocation(
        args=_nilify(mapping.get("args", "")),
        fargs=list(mapping.get("fargs", [])),
        line1=_numify(mapping.get("line1", "")),
        line2=_numify(mapping.get("line2", "")),
        count=_numify(mapping.get("count", "")),
        bang=mapping.get("bang", "") != "",
        mods=frozenset(mapping.get("mods", "").split()),
        range=_numify(mapping.get("range", "")),
        reg=_nilify(mapping.get("reg", "")),
    )


class Trampoline:
    """
    Host-facing wrapper turning the escape-sequence dictionary into an Invocation.

    Trampolines compare and hash like the wrapped callable, so bridging the same
    callable twice yields the same identity.
    """
    __slots__ = ("function",)

    def __init__(self, function, /):
        self.function = function

    def __repr__(self):
        return "trampoline(%r)" % (self.function,)

    def __call__(self, mapping, /):
        return self.function(invocation(mapping))

    def __eq__(self, other):
        if not isinstance(other, Trampoline):
            return NotImplemented
        return self.function == other.function

    def __hash__(self):
        return hash(self.function)


def option(ctx):
    argument = ctx.take()
    if not isinstance(argument, str) or not argument.startswith("-"):
        ctx.untake(argument)
        return False
    if argument in ("-complete=custom", "-complete=customlist"):
        if not callable(function := ctx.take()):
            trigger(NotCallableError(
                "custom completion function is not callable: %r" % (function,),
                title="not callable",
                code=FaultCode.NOT_CALLABLE,
                hint="pass the completion callable right after %s" % argument,
                argument=function,
            ))
        ctx.raw("%s,%s" % (argument, ctx.proxy.bridge.command[function]))
    else:
        ctx.escape(argument, " \\")
    return True


def replacement(ctx):
    if (argument := ctx.take()) is void:
        return
    if callable(argument):
        identity = ctx.proxy.bridge.command[Trampoline(argument)]
        ctx.raw("call %s(%s)" % (identity, TEMPLATE))
        return
    ctx.untake(argument)
    while ctx.remaining():
        ctx.raw(ctx.take())


def reachable(namespace, /):
    haystack = []
    for command in namespace.host.usercommands():
        haystack.append(command.get("definition") or "")
        haystack.append(command.get("complete_arg") or "")

    def predicate(identity):
        return identity == namespace.pending or any(identity in hay for hay in haystack)

    return predicate


def autoload(commands, name, /):
    namespace = commands.bridge.command
    namespace.reachability(reachable)
    for proxy in (commands.command, commands["command!"]):
        proxy.configure(params=[star(option), default, replacement], rest=None)
