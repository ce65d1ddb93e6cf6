# python
"""
Exhaustion marker for the argument cursor.

This module exposes a single instance: `void`. Context.take() and Context.peek()
return it when a handler asks for an argument that was never passed. It is falsy,
prints as "(void)", and renders with colors in Rich.

Exhaustion
- Running out of arguments is not a failure. The context records the exhaustion
  and the pipeline stops after the current handler.

Common patterns (inside handlers)
    argument = ctx.take()
    if argument is void:
        return False
    ctx.raw(argument)

Notes
- `void` is a cached singleton (per-process).
- The emission primitives of the context ignore `void`, so the one-liner
  `ctx.escape(ctx.take(), " \\\\")` needs no guard.
"""
from rich.text import Text

void = type("void-type", (), {
    "__module__": None,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("void", "red"), (")", "yellow")),
    "__repr__": lambda self: "(void)",
    "__bool__": lambda self: False,
    "__doc__": "exhaustion marker returned by the argument cursor when no argument remains",
    # Cache the singleton creation so repeated instantiation returns the same object.
    "__new__": __import__("functools").cache(lambda cls: super(type, cls).__new__(cls)),
})()


__all__ = ("void",)
