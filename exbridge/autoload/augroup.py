"""
`augroup` with a body.

The second argument may be a callable. It runs right after the group is entered,
and "augroup END" is executed afterwards whether or not it raised:

    def body():
        commands["autocmd!"]()
        commands.autocmd("BufWritePost", "*.py", lambda: print("saved"))

    commands.augroup("my_group", body)
"""
from ..faults import *
from ..params import default
from ..void import void


def body(ctx):
    if (argument := ctx.take()) is void:
        return
    if not callable(argument):
        trigger(NotCallableError(
            "augroup body must be callable, got %s" % type(argument).__name__,
            title="not callable",
            code=FaultCode.NOT_CALLABLE,
            argument=argument,
        ))
    ctx.body = argument


def post(ctx, result, /):
    if (function := getattr(ctx, "body", None)) is None:
        return result
    try:
        function()
    finally:
        ctx.proxy.host.execute("augroup END")
    return result


def autoload(commands, name, /):
    commands.augroup.configure(params=[default, body], rest=None, post=post)
