"""
Command proxy tests (lazy creation, configuration, hooks, execution, autoload).

Scope
- Proxies are created lazily and persist; "<name>!" is a separate proxy.
- configure() validates its options.
- pre/post hooks wrap execution; hook failures propagate unchanged.
- Autoload: extension modules are imported once per base name; a missing
  module is silent, a broken one warns and leaves the defaults in place.

Conventions
- Autoload extensions are written to a temporary package put on sys.path.
"""
import importlib
import sys
import tempfile
import textwrap
import unittest
import warnings
from pathlib import Path
from unittest import TestCase

from exbridge import (
    Commands,
    MemoryHost,
    BrokenAutoloadWarning,
    InvalidTypeError,
    NotCallableError,
    UnknownOptionError,
    params,
)

PACKAGE = "exbridge_fixture_extensions"

EXTENSIONS = {
    "__init__": """
        aliases = {"Alias": "good"}
    """,
    "good": """
        calls = []

        def autoload(commands, name):
            calls.append(name)
            commands.good.configure(separator=", ")
            commands["good!"].configure(separator="; ")
    """,
    "nohook": """
        loaded = True
    """,
    "broken": """
        raise RuntimeError("broken on import")
    """,
    "dependency": """
        import exbridge_fixture_missing_dependency
    """,
    "failing": """
        def autoload(commands, name):
            commands[name].configure(separator="|")
            raise RuntimeError("broken hook")
    """,
}


class TestProxy(TestCase):
    def setUp(self):
        self.host = MemoryHost()
        self.commands = Commands(self.host)

    def testLazyAndPersistent(self):
        self.assertNotIn("Foo", self.commands)
        self.assertIs(self.commands.Foo, self.commands["Foo"])
        self.assertIn("Foo", self.commands)

    def testBangIsSeparateProxy(self):
        proxy = self.commands.Foo
        self.assertIs(proxy.bang, self.commands["Foo!"])
        self.assertIsNot(proxy.bang, proxy)
        self.assertIs(proxy.bang.bang, proxy.bang)

        proxy.bang.configure(separator=",")
        self.assertEqual(proxy.separator, " ")
        self.assertEqual(proxy.bang.format("a", "b"), "Foo! a,b")

    def testInvalidName(self):
        with self.assertRaises(InvalidTypeError):
            self.commands[1]
        with self.assertRaises(InvalidTypeError):
            self.commands[""]
        with self.assertRaises(AttributeError):
            self.commands._private

    def testDefaults(self):
        proxy = self.commands.Foo
        self.assertEqual(proxy.params, [])
        self.assertIs(proxy.rest, params.default)
        self.assertEqual(proxy.separator, " ")

    def testConfigureRejectsUnknownOption(self):
        with self.assertRaises(UnknownOptionError):
            self.commands.Foo.configure(handlers=[])

    def testConfigureValidates(self):
        with self.assertRaises(NotCallableError):
            self.commands.Foo.configure(params=[params.raw, "raw"])
        with self.assertRaises(NotCallableError):
            self.commands.Foo.configure(post=None)
        with self.assertRaises(InvalidTypeError):
            self.commands.Foo.configure(separator=None)
        self.assertEqual(self.commands.Foo.params, [])

    def testFormatDoesNotExecute(self):
        self.assertEqual(self.commands.Foo.format("a"), "Foo a")
        self.assertEqual(self.host.history, [])

    def testCallDiscardsOutput(self):
        self.commands.echo.configure(rest=params.quote, post=lambda ctx, result: (result,))
        self.assertEqual(self.commands.echo("hi"), (None,))
        self.assertEqual(self.commands.echo.output("hi"), ("hi",))
        self.assertEqual(self.host.history, ['echo "hi"', 'echo "hi"'])

    def testPreHookRewritesCommand(self):
        self.commands.echo.configure(rest=params.quote, pre=lambda ctx, source: source.upper())
        self.assertEqual(self.commands.echo.format("hi"), 'ECHO "HI"')
        self.commands.echo("hi")
        self.assertEqual(self.host.history, ['ECHO "HI"'])

    def testHooksSeeContext(self):
        seen = {}

        def pre(ctx, source):
            seen["arguments"] = ctx.arguments
            return source

        def post(ctx, result):
            seen["tokens"] = ctx.tokens
            return result

        self.commands.Foo.configure(pre=pre, post=post)
        self.commands.Foo("a", "b")
        self.assertEqual(seen, {"arguments": ("a", "b"), "tokens": ("a", "b")})

    def testHookFailurePropagates(self):
        def pre(ctx, source):
            raise KeyError("pre")

        self.commands.Foo.configure(pre=pre)
        with self.assertRaises(KeyError):
            self.commands.Foo("a")
        self.assertEqual(self.host.history, [])


class TestAutoload(TestCase):
    @classmethod
    def setUpClass(cls):
        cls.directory = tempfile.TemporaryDirectory()
        package = Path(cls.directory.name) / PACKAGE
        package.mkdir()
        for name, source in EXTENSIONS.items():
            (package / ("%s.py" % name)).write_text(textwrap.dedent(source))
        sys.path.insert(0, cls.directory.name)
        importlib.invalidate_caches()

    @classmethod
    def tearDownClass(cls):
        sys.path.remove(cls.directory.name)
        cls.directory.cleanup()

    def setUp(self):
        self.commands = Commands(MemoryHost(), package=PACKAGE)

    def tearDown(self):
        for name in tuple(sys.modules):
            if name == PACKAGE or name.startswith(PACKAGE + "."):
                del sys.modules[name]

    def testHookRunsOncePerBaseName(self):
        self.assertEqual(self.commands.good.separator, ", ")
        self.assertEqual(self.commands["good!"].separator, "; ")
        self.commands.Alias
        self.assertEqual(sys.modules[PACKAGE + ".good"].calls, ["good"])

    def testHookReceivesAccessedName(self):
        self.commands["good!"]
        self.assertEqual(sys.modules[PACKAGE + ".good"].calls, ["good!"])

    def testAliases(self):
        self.commands.Alias
        self.assertEqual(sys.modules[PACKAGE + ".good"].calls, ["Alias"])
        self.assertEqual(self.commands.good.separator, ", ")

    def testHookIsPerCommands(self):
        self.commands.good
        Commands(MemoryHost(), package=PACKAGE).good
        self.assertEqual(sys.modules[PACKAGE + ".good"].calls, ["good", "good"])

    def testMissingExtensionIsSilent(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            proxy = self.commands.missing
            self.commands.nohook
        self.assertEqual(proxy.separator, " ")

    def testMissingPackageIsSilent(self):
        commands = Commands(MemoryHost(), package="exbridge_fixture_missing_package")
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            self.assertEqual(commands.good.separator, " ")

    def testBrokenModuleWarns(self):
        with self.assertWarns(BrokenAutoloadWarning):
            proxy = self.commands.broken
        self.assertIs(proxy.rest, params.default)

    def testMissingDependencyWarns(self):
        with self.assertWarns(BrokenAutoloadWarning):
            self.commands.dependency

    def testBrokenHookWarnsAndKeepsDefaults(self):
        with self.assertWarns(BrokenAutoloadWarning):
            proxy = self.commands.failing
        self.assertEqual(proxy.separator, " ")
        self.assertEqual(proxy.format("a", "b"), "failing a b")


if __name__ == "__main__":
    unittest.main()
