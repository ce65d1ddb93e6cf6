"""
exbridge bridge: expose Python callables to the host under synthetic names.

Host callable storage is string-addressed (commands, mappings and autocommands
reference functions by name, not by value), so every callable handed to the host
needs a name. A Bridge hands out those names ("identities") per namespace:

    bridge = Bridge(host)
    identity = bridge.autocmd[lambda: print("saved")]
    host.execute("autocmd BufWritePost * call %s()" % identity)

Indexing a namespace with the same callable again returns the same identity.
Callables that cannot be hashed are told apart by object identity.

Collection
- Registrations can be created dynamically and without bound (one per mapping,
  say), so a namespace can reclaim identities the host no longer references.
  There is no reference tracking: each call-site category supplies its own
  "is this identity still referenced" oracle by re-scanning host state.

        @bridge.autocmd.reachability
        def reachable(namespace):
            listing = namespace.host.execute("autocmd", output=True)
            return lambda identity: identity == namespace.pending or identity in listing

- Collection runs every `interval` registrations (20 by default) when an oracle is
  set, or explicitly through namespace.gc().
- Automatic collection happens inside the registration that reaches the interval,
  before the host references the new identity. That identity is exposed as
  `namespace.pending` for the duration of the collection (None otherwise), so
  oracles can keep it.
- A wrong "unreachable" verdict breaks the next invocation of that identity; a wrong
  "reachable" verdict only keeps it alive longer. Oracles should err on the side of
  "reachable".

Lifetimes
- Namespaces are created on first reference and live as long as their Bridge,
  unless cleared with namespace.clear() or bridge.clear().
- Identities come from one process-wide counter shared by every Bridge and are
  never reused.
"""
import builtins
import itertools
import logging

from .faults import *
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

# Reserved by the double-underscore prefix and suffix; valid unescaped in a command.
IDENTITY = "__exbridge_%d__"

# Host function forwarding to the dispatch entry of the same identity.
ENDPOINT = """\
function! {identity}(...)
    return call(g:Py{identity}, a:000)
endfun"""

# process-wide: bridges over the same host never hand out the same identity
_counter = itertools.count()


class _Unhashable:
    """Dictionary key standing for an unhashable callable, compared by object identity."""
    __slots__ = ("callable",)

    def __init__(self, callable, /):
        self.callable = callable

    def __eq__(self, other):
        if not isinstance(other, _Unhashable):
            return NotImplemented
        return self.callable is other.callable

    def __hash__(self):
        return id(self.callable)


def _key(callable, /):
    try:
        hash(callable)
    except TypeError:
        return _Unhashable(callable)
    return callable


def _unkey(key, /):
    return key.callable if isinstance(key, _Unhashable) else key


class Namespace:
    """
    Named collection of callable -> identity bindings sharing one collection policy.

    Attributes
    - name: the namespace name (e.g., "keymap", "autocmd").
    - interval: registrations between automatic collections.
    - tick: registrations since the last collection.
    - reachable: None, or a generator `reachable(namespace) -> predicate`, where
      `predicate(identity)` tells whether the identity may still be referenced.
    - pending: the identity whose registration triggered the running collection,
      None outside automatic collection.
    """

    def __init__(self, bridge, name, /, *, interval=Unset):
        self.bridge = bridge
        self.name = name
        self.interval = coalesce(interval, bridge.interval)
        self.tick = 0
        self.reachable = None
        self.pending = None
        self._entries = {}

    def __repr__(self):
        return "namespace(name=%r, entries=%d, tick=%d, interval=%d, reachable=%r)" % (
            self.name, len(self._entries), self.tick, self.interval, self.reachable
        )

    @property
    def host(self):
        return self.bridge.host

    @property
    def identities(self):
        return tuple(self._entries.values())

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(map(_unkey, self._entries)))

    def __contains__(self, callable, /):
        return _key(callable) in self._entries

    def items(self):
        return tuple((_unkey(key), identity) for key, identity in self._entries.items())

    def reachability(self, generator, /):
        """
        Decorator form of `namespace.reachable = generator`; returns the generator.
        """
        if not callable(generator):
            trigger(NotCallableError(
                "reachability generator of namespace %r must be callable" % self.name,
                title="not callable",
                code=FaultCode.NOT_CALLABLE,
                hint="pass a function taking the namespace and returning a predicate",
                namespace=self.name,
            ))
        self.reachable = generator
        return generator

    def __getitem__(self, callable, /):
        if not builtins.callable(callable):
            trigger(NotCallableError(
                "namespace %r can only bridge callables, got %s" % (self.name, type(callable).__name__),
                title="not callable",
                code=FaultCode.NOT_CALLABLE,
                hint="pass a function, a bound method or any object implementing __call__",
                namespace=self.name,
                argument=callable,
            ))
        key = _key(callable)
        try:
            return self._entries[key]
        except KeyError:
            pass

        identity = self.bridge._allocate(callable)
        self._entries[key] = identity
        logger.debug("bridged %r as %s in namespace %r", callable, identity, self.name)

        self.tick += 1
        if self.reachable is not None and self.tick >= self.interval:
            self.pending = identity
            try:
                self.gc()
            finally:
                self.pending = None
            self.tick = 0
        return identity

    def gc(self):
        """
        Drop every binding whose identity the reachability predicate rejects.

        All bindings are examined in one pass. Returns the collected identities.
        Raises MissingReachabilityError, removing nothing, when no generator is set.
        """
        if self.reachable is None:
            trigger(MissingReachabilityError(
                "no reachability predicate generator set on namespace %r" % self.name,
                title="missing reachability",
                code=FaultCode.MISSING_REACHABILITY,
                hint="set namespace.reachable (or decorate a function with @namespace.reachability) first",
                docs=getdoc(FaultCode.MISSING_REACHABILITY),
                namespace=self.name,
            ))
        predicate = self.reachable(self)
        collected = []
        for key, identity in tuple(self._entries.items()):
            if not predicate(identity):
                del self._entries[key]
                self.bridge._release(identity)
                collected.append(identity)
        logger.debug("collected %d of %d identities in namespace %r",
                     len(collected), len(collected) + len(self._entries), self.name)
        return collected

    def clear(self):
        """
        Drop every binding unconditionally (teardown).
        """
        for identity in self._entries.values():
            self.bridge._release(identity)
        self._entries.clear()
        self.tick = 0


class Bridge:
    """
    Process-scoped registry of namespaces over one host.

    - bridge.<name> / bridge["<name>"]: the namespace of that name, created lazily.
    - slots: identity -> callable for every live registration of every namespace.
    - interval: default collection interval of new namespaces.
    """

    def __init__(self, host, /, *, interval=20):
        if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
            raise ValueError("bridge interval must be a positive integer")
        self.host = host
        self.interval = interval
        self.slots = {}
        self._namespaces = {}

    def __repr__(self):
        return "bridge(host=%r, namespaces=%r)" % (self.host, tuple(self._namespaces))

    def __getitem__(self, name, /):
        if not isinstance(name, str):
            trigger(InvalidTypeError(
                "namespace name must be a string, got %s" % type(name).__name__,
                title="invalid namespace name",
                code=FaultCode.INVALID_TYPE,
                argument=name,
            ))
        try:
            return self._namespaces[name]
        except KeyError:
            namespace = self._namespaces[name] = Namespace(self, name)
            return namespace

    def __getattr__(self, name, /):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __contains__(self, name, /):
        return name in self._namespaces

    def __iter__(self):
        return iter(tuple(self._namespaces.values()))

    def clear(self):
        """
        Clear every namespace and forget them.
        """
        for namespace in self._namespaces.values():
            namespace.clear()
        self._namespaces.clear()

    def _allocate(self, callable, /):
        identity = IDENTITY % next(_counter)
        self.slots[identity] = callable
        try:
            self.host.register(identity, callable)
            self.host.execute(ENDPOINT.format(identity=identity))
        except Exception:
            # unregister ignores identities the host never accepted
            del self.slots[identity]
            self.host.unregister(identity)
            raise
        return identity

    def _release(self, identity, /):
        self.slots.pop(identity, None)
        self.host.unregister(identity)
        self.host.execute("delfunction! " + identity)


__all__ = (
    "Namespace",
    "Bridge",
    "IDENTITY",
    "ENDPOINT",
)
