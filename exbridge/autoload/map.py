"""
Map commands with a callable right-hand side.

Every member of the family (map, nnoremap, unmap!, imapclear, ...) takes leading
map arguments such as <buffer> or <silent>, then the lhs. For mapping commands,
the rhs may be a callable bridged through the "keymap" namespace:

    commands.nnoremap("<silent>", "<leader>w", lambda: print("write"))

With <expr> the rhs becomes an expression call whose result is used as the keys.
"""
import re

from ..params import raw, star
from ..void import void
from . import MAP_MODES

ARGUMENT = re.compile(r"<(?:buffer|nowait|silent|script|expr|unique|special)>", re.IGNORECASE)


def option(ctx):
    argument = ctx.take()
    if isinstance(argument, str) and ARGUMENT.fullmatch(argument):
        ctx.raw(argument)
        if argument.lower() == "<expr>":
            ctx.expr = True
        return True
    ctx.untake(argument)
    return False


def rhs(ctx):
    if (argument := ctx.take()) is void:
        return
    if callable(argument):
        identity = ctx.proxy.bridge.keymap[argument]
        if getattr(ctx, "expr", False):
            ctx.raw("%s()" % identity)
        else:
            ctx.raw("<cmd>call %s()<cr>" % identity)
        return
    ctx.untake(argument)
    while ctx.remaining():
        ctx.raw(ctx.take())


def reachable(namespace, /):
    haystack = [mapping.get("rhs") or "" for mapping in namespace.host.keymaps()]
    return lambda identity: identity == namespace.pending or any(identity in hay for hay in haystack)


def _family(kinds, /):
    for kind in kinds:
        for mode in MAP_MODES:
            yield mode + kind
        # insert and command-line modes together
        yield kind + "!"


def autoload(commands, name, /):
    commands.bridge.keymap.reachability(reachable)
    for command in _family(("map", "noremap")):
        commands[command].configure(params=[star(option), raw, rhs], rest=None)
    for command in _family(("unmap",)):
        commands[command].configure(params=[star(option), raw], rest=None)
    for command in _family(("mapclear",)):
        commands[command].configure(params=[star(option)], rest=None)
