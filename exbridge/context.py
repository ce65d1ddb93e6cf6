r"""
exbridge formatting context: argument cursor and token sink for one invocation.

A parameter handler is any callable taking a Context. It takes arguments off the
cursor and emits tokens; there is no one-to-one correspondence between the two:

    def default(ctx):
        ctx.escape(ctx.take(), " \\")

Cursor
- take():   next argument in call order, or `void` when none remains.
- peek():   like take() without consuming (and without marking exhaustion).
- untake(): put an argument back so a later handler receives it first.
- remaining(): count of arguments left.

Exhaustion
- take() returning `void` marks the context as exhausted; the pipeline finishes
  the current handler and stops. Emission primitives ignore `void`, so handlers
  written for "one argument in, one token out" need no guard.

Emission primitives
- raw(argument): no escaping.
- escape(argument, chars): backslash-escape every character found in `chars`.
- fname(argument): escape as a file name.
- squote(argument): wrap in single quotes; a value containing one is rejected
  since there is no escaping inside this form.
- quote(argument): wrap in double quotes, backslash-escaping '"' and '\'.

Handlers may store extra attributes on the context (e.g., ctx.body) to hand
information over to the proxy's pre/post hooks.
"""
from .faults import *
from .utils import escape, fnameescape, ordinal
from .void import void


class Context:
    def __init__(self, proxy, arguments, /):
        self.proxy = proxy
        self.arguments = tuple(arguments)
        self.exhausted = False
        # last argument on top: popping yields arguments in call order
        self._stack = list(reversed(self.arguments))
        self._tokens = []

    def __repr__(self):
        return "context(proxy=%r, remaining=%d, tokens=%r, exhausted=%r)" % (
            getattr(self.proxy, "name", self.proxy), len(self._stack), self._tokens, self.exhausted
        )

    @property
    def tokens(self):
        return tuple(self._tokens)

    @property
    def position(self):
        """1-based position (in call order) of the next argument take() would return."""
        return len(self.arguments) - len(self._stack) + 1

    # --- cursor ---

    def take(self):
        try:
            return self._stack.pop()
        except IndexError:
            self.exhausted = True
            return void

    def peek(self):
        try:
            return self._stack[-1]
        except IndexError:
            return void

    def untake(self, argument, /):
        if argument is void:
            return
        self._stack.append(argument)

    def remaining(self):
        return len(self._stack)

    def __len__(self):
        return len(self._stack)

    # --- emission ---

    def raw(self, argument, /):
        if argument is void:
            return
        self._tokens.append(str(argument))

    def escape(self, argument, chars, /):
        if argument is void:
            return
        self._tokens.append(escape(str(argument), chars))

    def fname(self, argument, /):
        if argument is void:
            return
        self._tokens.append(fnameescape(str(argument)))

    def squote(self, argument, /):
        if argument is void:
            return
        if "'" in (argument := str(argument)):
            trigger(QuotingError(
                "can't single-quote argument with single quote character: %s" % argument,
                title="unquotable value",
                code=FaultCode.UNQUOTABLE_VALUE,
                hint="use a double-quoting handler for values containing \"'\"",
                docs=getdoc(FaultCode.UNQUOTABLE_VALUE),
                argument=argument,
                position=ordinal(max(self.position - 1, 1)),
            ))
        self._tokens.append("'" + argument + "'")

    def quote(self, argument, /):
        if argument is void:
            return
        self._tokens.append('"' + escape(str(argument), '"\\') + '"')


__all__ = ("Context",)
