"""
`autocmd` with a callable command.

The command to run may be a callable instead of raw text; it is bridged through
the "autocmd" namespace and invoked with no arguments:

    commands.autocmd("DirChanged", "*", lambda: print("changed"))

A leading group name is recognized by asking the host for its augroups.
"""
from ..params import default, star, plusplusopt, cmd
from ..void import void


def group(ctx):
    if (argument := ctx.take()) is void:
        return
    groups = ctx.proxy.host.execute("augroup", output=True) or ""
    if isinstance(argument, str) and argument in groups.split():
        ctx.escape(argument, " \\")
    else:
        # an event, for the next handler
        ctx.untake(argument)


def reachable(namespace, /):
    listing = namespace.host.execute("autocmd", output=True) or ""
    return lambda identity: identity == namespace.pending or identity in listing


def autoload(commands, name, /):
    namespace = commands.bridge.autocmd
    namespace.reachability(reachable)
    commands.autocmd.configure(
        params=[group, default, default, star(plusplusopt), cmd(namespace)],
        rest=None,
    )
    commands["autocmd!"].configure(params=[group, default, default], rest=None)
