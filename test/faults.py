"""
Tests for fault codes, triggering and rich rendering.

Conventions
- The module console is swapped for an in-memory one to inspect shell-mode output.
"""
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from exbridge import faults
from exbridge.faults import *


def capture():
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestFaults(TestCase):
    def testCodesAreStable(self):
        self.assertEqual(FaultCode.TOO_MANY_ARGUMENTS, 21101)
        self.assertEqual(FaultCode.BROKEN_AUTOLOAD.normalize(), "31101")

    def testTriggerMergesOptions(self):
        with self.assertRaises(QuotingError) as error:
            trigger(QuotingError("bad quote", title="unquotable value"), code=FaultCode.UNQUOTABLE_VALUE)
        self.assertEqual(str(error.exception), "bad quote")
        self.assertEqual(dict(error.exception.options), {
            "title": "unquotable value",
            "code": FaultCode.UNQUOTABLE_VALUE,
        })

    def testReplaceKeepsType(self):
        fault = ExecutionError("failed", line="x")
        replaced = fault.__replace__(line="y")
        self.assertIsInstance(replaced, ExecutionError)
        self.assertEqual(replaced.options["line"], "y")
        self.assertEqual(fault.options["line"], "x")

    def testTriggerRequiresFault(self):
        with self.assertRaises(TypeError):
            trigger(object())

    def testShellModeRendersAndExits(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as error:
                trigger(TooManyArgumentsError(
                    "too many arguments",
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    hint="configure a catch-all handler",
                ), shell=True)
        self.assertEqual(error.exception.code, 1)
        output = console.file.getvalue()
        for fragment in ("21101", "Too Many Arguments", "too many arguments", "configure a catch-all handler"):
            self.assertIn(fragment, output)

    def testFancyRendering(self):
        console = capture()
        console.print(NotCallableError("not callable", code=FaultCode.NOT_CALLABLE, fancy=True))
        self.assertIn("22102", console.file.getvalue())
        self.assertIn("─", console.file.getvalue())

    def testWarningsWarnOutsideShell(self):
        with self.assertWarns(BrokenAutoloadWarning):
            trigger(BrokenAutoloadWarning("broken", code=FaultCode.BROKEN_AUTOLOAD))

    def testWarningsPrintInShell(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            trigger(BrokenAutoloadWarning("broken", code=FaultCode.BROKEN_AUTOLOAD), shell=True)
        self.assertIn("31101", console.file.getvalue())

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.NOT_CALLABLE))
        with self.assertRaises(TypeError):
            getdoc(22102)

    def testDocsFooter(self):
        docs = {FaultCode.MISSING_REACHABILITY: "see :help exbridge-gc"}
        with mock.patch.object(__import__("__main__"), "__docs__", docs, create=True):
            fault = MissingReachabilityError(
                "no reachability", code=FaultCode.MISSING_REACHABILITY,
                docs=getdoc(FaultCode.MISSING_REACHABILITY),
            )
        for fancy in (False, True):
            console = capture()
            console.print(fault.__replace__(fancy=fancy))
            self.assertIn("see :help exbridge-gc", console.file.getvalue())

    def testNoDocsNoFooter(self):
        console = capture()
        console.print(MissingReachabilityError("no reachability", docs=None))
        self.assertEqual(console.file.getvalue().count("\n"), 2)


if __name__ == "__main__":
    unittest.main()
