"""
exbridge host layer: the execution substrate the bridge talks to.

What this module provides
- Dispatchable: the string-keyed dispatch table contract (register/unregister/invoke).
- Host: a Dispatchable that also executes Ex command strings and answers the
  read-only introspection queries reachability predicates rely on.
- MemoryHost: an in-process Host that interprets the subset of Ex needed to keep
  track of definitions (functions, autocommands and their groups, user commands,
  mappings). It backs the test-suite and the command-line preview.

Dispatch convention
- An entry registered under `identity` must be reachable from Ex as the global
  variable `g:Py<identity>`; the bridge defines a host function named `identity`
  that forwards its arguments to that variable.

Design notes
- MemoryHost only understands full command names (no abbreviations), exactly the
  names the proxies emit.
- Unknown commands are recorded in `history` and otherwise ignored.
"""
import ast
import logging
import re
import shlex
from abc import ABC, abstractmethod

from .faults import *

logger = logging.getLogger(__name__)


class Dispatchable(ABC):
    """
    string-keyed registry the substrate consults to resolve an identity to a callable.
    """

    @abstractmethod
    def register(self, identity, callable, /):
        """define the entry `identity`, invocable with positional arguments."""

    @abstractmethod
    def unregister(self, identity, /):
        """drop the entry `identity`; unknown identities are ignored."""

    @abstractmethod
    def invoke(self, identity, /, *args):
        """call the entry `identity` with positional arguments and return its result."""


class Host(Dispatchable):
    """
    execution substrate plus the introspection surface used during collection.

    contract
    - execute(source, output=False): run one or more newline-separated Ex lines;
      return the captured text when `output` is true, otherwise None.
    - keymaps(): every installed mapping (global and buffer-local) as mappings
      with at least "mode", "lhs" and "rhs" keys.
    - usercommands(): every user command as mappings with at least "name",
      "definition" and "complete_arg" keys.
    """

    @abstractmethod
    def execute(self, source, /, output=False):
        ...

    @abstractmethod
    def keymaps(self):
        ...

    @abstractmethod
    def usercommands(self):
        ...


# "<name>[!] <rest>" for a single Ex line, names are letters only (no abbreviations)
_LINE = re.compile(r"(?P<name>[A-Za-z]+)(?P<bang>!?)\s*(?P<rest>.*)", re.DOTALL)
_CALL = re.compile(r"(?P<function>[\w:#.]+)\((?P<arguments>.*)\)\s*", re.DOTALL)
_FORWARD = re.compile(r"call\(g:(?P<variable>\w+),\s*a:000\)")
_MAPS = re.compile(r"(?P<mode>[nvxsoilct]?)(?P<kind>(?:nore)?map|unmap|mapclear)")
_MAPARG = re.compile(r"<(?:buffer|nowait|silent|script|expr|unique|special)>", re.IGNORECASE)


class MemoryHost(Host):
    """
    In-process substrate that keeps editor state in plain Python containers.

    State
    - variables: global variables (dispatch entries live here as "Py<identity>").
    - functions: host functions, name -> body lines.
    - history: every executed line, in order.
    - groups / autocmds / commands / mappings: the definitions installed so far.

    Output
    - echo, the bare augroup/autocmd/command forms and a map command without
      rhs produce text; it is returned when execute(..., output=True).
    """

    def __init__(self):
        self.variables = {}
        self.functions = {}
        self.history = []
        self.groups = []
        self.autocmds = []
        self.commands = {}
        self.mappings = []
        self._group = None

    def __repr__(self):
        return "%s(functions=%d, autocmds=%d, commands=%d, mappings=%d)" % (
            type(self).__name__, len(self.functions), len(self.autocmds), len(self.commands), len(self.mappings)
        )

    # --- Dispatchable ---

    def register(self, identity, callable, /):
        self.variables["Py" + identity] = callable

    def unregister(self, identity, /):
        self.variables.pop("Py" + identity, None)

    def invoke(self, identity, /, *args):
        try:
            callable = self.variables["Py" + identity]
        except KeyError:
            raise ExecutionError(
                "E121: undefined variable g:Py%s" % identity,
                title="undefined dispatch entry",
                code=FaultCode.EXECUTION_FAILED,
                identity=identity,
            ) from None
        return callable(*args)

    # --- introspection ---

    def keymaps(self):
        return [dict(mapping) for mapping in self.mappings]

    def usercommands(self):
        return [dict(command) for command in self.commands.values()]

    # --- execution ---

    def execute(self, source, /, output=False):
        logger.debug("execute %r (output=%s)", source, output)
        captured = []
        lines = iter(source.splitlines())
        for line in lines:
            if not (line := line.strip()):
                continue
            self.history.append(line)
            match = _LINE.fullmatch(line)
            if not match:
                self._fail("E492: not an editor command: %s" % line, line)
            name, bang, rest = match["name"], bool(match["bang"]), match["rest"].strip()
            if name in ("function", "fun", "func"):
                self._function(rest, lines)
                continue
            if maps := _MAPS.fullmatch(name):
                text = self._map(maps["mode"] or ("!" if bang else ""), maps["kind"], rest)
            else:
                try:
                    method = getattr(self, "_do_" + name)
                except AttributeError:
                    continue
                text = method(bang, rest)
            if text is not None:
                captured.append(text)
        return "\n".join(captured) if output else None

    def _fail(self, message, line, /):
        trigger(ExecutionError(
            message,
            title="execution failed",
            code=FaultCode.EXECUTION_FAILED,
            line=line,
        ))

    def _function(self, rest, lines):
        match = _CALL.fullmatch(rest)
        if not match:
            self._fail("E124: missing '(': %s" % rest, rest)
        body = []
        for line in lines:
            if (line := line.strip()).startswith("endf"):
                break
            body.append(line)
        self.functions[match["function"]] = body

    def _do_delfunction(self, bang, rest):
        if self.functions.pop(rest, None) is None and not bang:
            self._fail("E130: unknown function: %s" % rest, rest)

    def _do_call(self, bang, rest):
        match = _CALL.fullmatch(rest)
        if not match:
            self._fail("E107: missing parentheses: %s" % rest, rest)
        try:
            body = self.functions[function := match["function"]]
        except KeyError:
            self._fail("E117: unknown function: %s" % function, rest)
        try:
            arguments = ast.literal_eval("[%s]" % match["arguments"])
        except (ValueError, SyntaxError):
            self._fail("E116: invalid arguments for function %s" % function, rest)
        # the result of :call is discarded, as in the editor
        for line in body:
            if forward := _FORWARD.search(line):
                self.invoke(forward["variable"][2:], *arguments)
        return None

    def _do_echo(self, bang, rest):
        try:
            return " ".join(shlex.split(rest))
        except ValueError:
            self._fail("E114: missing quote: %s" % rest, rest)

    def _do_augroup(self, bang, rest):
        if not rest:
            return "  ".join(self.groups)
        if bang:
            if rest not in self.groups:
                self._fail("E367: no such group: %s" % rest, rest)
            self.groups.remove(rest)
            self.autocmds = [autocmd for autocmd in self.autocmds if autocmd["group"] != rest]
            return None
        if rest.lower() == "end":
            self._group = None
            return None
        if rest not in self.groups:
            self.groups.append(rest)
        self._group = rest
        return None

    def _split_group(self, rest):
        head, _, tail = rest.partition(" ")
        if head in self.groups:
            return head, tail.strip()
        return self._group, rest

    def _do_autocmd(self, bang, rest):
        group, rest = self._split_group(rest)
        tokens = rest.split(None, 2)
        event, pattern = (tokens + [None, None])[:2]

        if bang:
            self.autocmds = [
                autocmd for autocmd in self.autocmds
                if not (
                    autocmd["group"] == group and
                    (event is None or autocmd["event"] == event) and
                    (pattern is None or autocmd["pattern"] == pattern)
                )
            ]
            if len(tokens) < 3:
                return None
        if len(tokens) < 3:
            return "\n".join(["--- Autocommands ---"] + [
                "%s  %s  %s  %s" % (autocmd["group"] or "", autocmd["event"], autocmd["pattern"], autocmd["command"])
                for autocmd in self.autocmds
                if (event is None or autocmd["event"] == event) and (pattern is None or autocmd["pattern"] == pattern)
            ])
        self.autocmds.append({"group": group, "event": event, "pattern": pattern, "command": tokens[2]})
        return None

    def _do_command(self, bang, rest):
        if not rest:
            return "\n".join(sorted(self.commands))
        options = []
        while match := re.match(r"(-\S+)\s*", rest):
            options.append(match[1])
            rest = rest[match.end():]
        name, _, definition = rest.partition(" ")
        if not name:
            self._fail("E183: user defined commands must start with an uppercase letter", rest)
        if name in self.commands and not bang:
            self._fail("E174: command already exists: add ! to replace it: %s" % name, rest)
        complete = next((option.split(",", 1)[1] for option in options if option.startswith("-complete=custom")), "")
        self.commands[name] = {
            "name": name,
            "definition": definition.strip(),
            "complete_arg": complete,
            "options": tuple(options),
        }
        return None

    def _do_delcommand(self, bang, rest):
        if self.commands.pop(rest, None) is None:
            self._fail("E184: no such user-defined command: %s" % rest, rest)

    def _map(self, mode, kind, rest):
        arguments = []
        while match := _MAPARG.match(rest):
            arguments.append(match[0].lower())
            rest = rest[match.end():].lstrip()

        if kind == "mapclear":
            self.mappings = [
                mapping for mapping in self.mappings
                if not (mapping["mode"] == mode and mapping["buffer"] == ("<buffer>" in arguments))
            ]
            return None

        lhs, _, rhs = rest.partition(" ")
        if kind == "unmap":
            before = len(self.mappings)
            self.mappings = [mapping for mapping in self.mappings if not (mapping["mode"] == mode and mapping["lhs"] == lhs)]
            if len(self.mappings) == before:
                self._fail("E31: no such mapping: %s" % lhs, rest)
            return None

        if not (rhs := rhs.strip()):
            return "\n".join(
                "%s  %s  %s" % (mapping["mode"] or " ", mapping["lhs"], mapping["rhs"])
                for mapping in self.mappings
                if mapping["mode"] == mode and (not lhs or mapping["lhs"].startswith(lhs))
            )
        self.mappings = [mapping for mapping in self.mappings if not (mapping["mode"] == mode and mapping["lhs"] == lhs)]
        self.mappings.append({
            "mode": mode,
            "lhs": lhs,
            "rhs": rhs,
            "noremap": kind == "noremap",
            "buffer": "<buffer>" in arguments,
            "expr": "<expr>" in arguments,
        })
        return None


__all__ = (
    "Dispatchable",
    "Host",
    "MemoryHost",
)
