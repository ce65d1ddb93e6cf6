"""
exbridge command layer: call Ex commands as Python functions.

What this module provides
- Proxy: one Ex command name with its own parameter pipeline:
  • params: ordered handlers, each consuming arguments and emitting tokens.
  • rest: catch-all handler draining the arguments `params` left over.
  • separator: string joining the tokens (a single space by default).
  • pre / post: hooks around execution.
- Commands: lazily creates proxies by name and loads optional per-command
  extension modules ("autoload") on first access.

Quick start
    from exbridge import Commands, MemoryHost, params

    commands = Commands(MemoryHost())
    commands.echo.configure(params=[params.quote], rest=params.quote)
    commands.echo.output("Hello, world!")       # -> 'Hello, world!'
    commands.echo.format("Hello, world!")       # -> 'echo "Hello, world!"'

Pipeline
- handlers run in order over a shared Context (see exbridge.context).
- a handler asking for an argument when none remains gets `void`; the pipeline
  stops after that handler. Optional trailing parameters need no special casing.
- leftover arguments are drained by `rest`; with no `rest` they are an error.
- the command string is "<name> <token><sep><token>..." (or "<name>" alone when
  no token was emitted); `pre(ctx, source)` may rewrite it, the host executes it,
  and `post(ctx, result)` produces the return value.

Autoload
- on first access to "<name>" (or "<name>!"), the module "<package>.<base>" is
  imported, where base is the name without "!" resolved through the package's
  optional `aliases` mapping. Its `autoload(commands, name)` hook then
  configures whatever proxies it customizes. This happens once per base name.
- a missing module is not an error (most commands need no customization).
  A module that fails to import, or a hook that raises, emits
  BrokenAutoloadWarning and leaves the proxy with its defaults.
"""
import builtins
import importlib
import logging

from . import params
from .bridge import Bridge
from .context import Context
from .faults import *
from .utils import Unset, ordinal

logger = logging.getLogger(__name__)


def _passthrough(ctx, value, /):
    return value


_OPTIONS = ("params", "rest", "separator", "pre", "post")


class Proxy:
    """
    One command name and the pipeline that formats its arguments.

    Calling the proxy executes the command and discards output; `output(...)`
    captures it. Both return whatever the post hook returns.
    """

    def __init__(self, commands, name, /):
        self.commands = commands
        self.name = name
        self.reset()

    def __repr__(self):
        return "proxy(name=%r, params=[%s], rest=%s, separator=%r)" % (
            self.name,
            ", ".join(getattr(handler, "__name__", repr(handler)) for handler in self.params),
            getattr(self.rest, "__name__", repr(self.rest)),
            self.separator,
        )

    @property
    def host(self):
        return self.commands.host

    @property
    def bridge(self):
        return self.commands.bridge

    @property
    def bang(self):
        """The proxy of "<name>!": a separate command with its own pipeline."""
        if self.name.endswith("!"):
            return self
        return self.commands[self.name + "!"]

    def reset(self):
        self.params = []
        self.rest = params.default
        self.separator = " "
        self.pre = _passthrough
        self.post = _passthrough

    def configure(self, **options):
        """
        Replace parts of the pipeline; returns the proxy.

        Accepted keys: params (iterable of handlers), rest (handler or None),
        separator (str), pre and post (hooks). Anything else is rejected.
        """
        for key in options:
            if key not in _OPTIONS:
                trigger(UnknownOptionError(
                    "unknown option %r for command %r" % (key, self.name),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    hint="valid options are %s" % ", ".join(_OPTIONS),
                    option=key,
                ))

        if "params" in options:
            handlers = list(options["params"])
            for index, handler in enumerate(handlers, start=1):
                self._ensure_callable(handler, "%s parameter handler" % ordinal(index))
            self.params = handlers
        if "rest" in options:
            if options["rest"] is not None:
                self._ensure_callable(options["rest"], "catch-all handler")
            self.rest = options["rest"]
        if "separator" in options:
            if not isinstance(options["separator"], str):
                trigger(InvalidTypeError(
                    "separator of command %r must be a string, got %s" % (
                        self.name, type(options["separator"]).__name__
                    ),
                    title="invalid separator",
                    code=FaultCode.INVALID_TYPE,
                    argument=options["separator"],
                ))
            self.separator = options["separator"]
        for hook in ("pre", "post"):
            if hook in options:
                self._ensure_callable(options[hook], "%s hook" % hook)
                setattr(self, hook, options[hook])
        return self

    def _ensure_callable(self, object, role, /):
        if not builtins.callable(object):
            trigger(NotCallableError(
                "%s of command %r must be callable, got %s" % (role, self.name, type(object).__name__),
                title="not callable",
                code=FaultCode.NOT_CALLABLE,
                argument=object,
            ))

    def _format(self, ctx, /):
        for handler in self.params:
            handler(ctx)
            if ctx.exhausted:
                break

        if not ctx.exhausted and ctx.remaining():
            if self.rest is None:
                trigger(TooManyArgumentsError(
                    "too many arguments for command %r: unexpected %s argument" % (
                        self.name, ordinal(ctx.position)
                    ),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    hint="configure a catch-all handler (rest=...) to accept extra arguments",
                    docs=getdoc(FaultCode.TOO_MANY_ARGUMENTS),
                    position=ordinal(ctx.position),
                ))
            while ctx.remaining() and not ctx.exhausted:
                before = ctx.remaining()
                self.rest(ctx)
                if ctx.remaining() >= before:
                    trigger(StalledHandlerError(
                        "catch-all handler %s of command %r consumed nothing from %s argument" % (
                            getattr(self.rest, "__name__", repr(self.rest)), self.name, ordinal(ctx.position)
                        ),
                        title="stalled handler",
                        code=FaultCode.STALLED_HANDLER,
                        hint="a catch-all handler must take at least one argument per run",
                        position=ordinal(ctx.position),
                    ))

        if not ctx.tokens:
            return self.name
        return self.name + " " + self.separator.join(ctx.tokens)

    def format(self, *args):
        """Return the command string for `args` without executing it."""
        ctx = Context(self, args)
        return self.pre(ctx, self._format(ctx))

    def _run(self, args, capture, /):
        ctx = Context(self, args)
        source = self.pre(ctx, self._format(ctx))
        logger.debug("run %r (output=%s)", source, capture)
        result = self.host.execute(source, output=capture)
        return self.post(ctx, result)

    def __call__(self, *args):
        return self._run(args, False)

    def output(self, *args):
        return self._run(args, True)


class Commands:
    """
    Lazily populated table of command proxies over one host.

    - commands.<name> / commands["<name>"]: the proxy of that command.
    - bridge: the Bridge handlers use to reference callables (one is created over
      the same host when not given).
    - package: where extension modules are looked up.
    """

    def __init__(self, host, /, *, bridge=Unset, package="exbridge.autoload"):
        self.host = host
        self.bridge = Bridge(host) if bridge is Unset else bridge
        self.package = package
        self._proxies = {}
        self._loaded = set()

    def __repr__(self):
        return "commands(host=%r, package=%r, proxies=%r)" % (self.host, self.package, tuple(self._proxies))

    def __getitem__(self, name, /):
        if not isinstance(name, str) or not name:
            trigger(InvalidTypeError(
                "command name must be a non-empty string, got %r" % (name,),
                title="invalid command name",
                code=FaultCode.INVALID_TYPE,
                argument=name,
            ))
        try:
            return self._proxies[name]
        except KeyError:
            proxy = self._proxies[name] = Proxy(self, name)
            self._autoload(proxy)
            return proxy

    def __getattr__(self, name, /):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __contains__(self, name, /):
        return name in self._proxies

    def __iter__(self):
        return iter(tuple(self._proxies.values()))

    def _autoload(self, proxy, /):
        base = proxy.name[:-1] if proxy.name.endswith("!") else proxy.name
        try:
            package = importlib.import_module(self.package)
        except ModuleNotFoundError as error:
            if error.name != self.package:
                return self._broken(proxy, self.package, error)
            logger.debug("autoload package %r not found", self.package)
            return
        except Exception as error:
            return self._broken(proxy, self.package, error)
        base = getattr(package, "aliases", {}).get(base, base)

        # marked before the hook runs: the hook accesses sibling proxies
        if base in self._loaded:
            return
        self._loaded.add(base)

        module = "%s.%s" % (self.package, base)
        try:
            extension = importlib.import_module(module)
        except ModuleNotFoundError as error:
            if error.name == module:
                logger.debug("no autoload extension for %r", proxy.name)
                return
            return self._broken(proxy, module, error)
        except Exception as error:
            return self._broken(proxy, module, error)

        if (hook := getattr(extension, "autoload", None)) is None:
            return
        logger.debug("autoload %s for %r", module, proxy.name)
        try:
            hook(self, proxy.name)
        except Exception as error:
            return self._broken(proxy, module, error)

    def _broken(self, proxy, module, error, /):
        proxy.reset()
        logger.warning("broken autoload extension %s: %s", module, error)
        trigger(BrokenAutoloadWarning(
            "autoload extension %s failed (%s: %s); %r keeps its defaults" % (
                module, type(error).__name__, error, proxy.name
            ),
            title="broken autoload",
            code=FaultCode.BROKEN_AUTOLOAD,
            hint="fix or remove the module; a missing module is not an error",
            module=module,
        ))


__all__ = (
    "Proxy",
    "Commands",
)
