"""
MemoryHost tests: the in-process Ex subset the bridge and the extensions rely on.
"""
import unittest
from unittest import TestCase

from exbridge import ENDPOINT, Dispatchable, ExecutionError, Host, MemoryHost


class TestMemoryHost(TestCase):
    def setUp(self):
        self.host = MemoryHost()

    def testIsHost(self):
        self.assertIsInstance(self.host, Host)
        self.assertIsInstance(self.host, Dispatchable)

    def testAbstractHostCannotBeInstantiated(self):
        with self.assertRaises(TypeError):
            Host()

    def testEcho(self):
        self.assertEqual(self.host.execute('echo "a b" c', output=True), "a b c")
        self.assertIsNone(self.host.execute('echo "a b" c'))
        with self.assertRaises(ExecutionError):
            self.host.execute('echo "unterminated')

    def testHistoryAndUnknownCommands(self):
        self.host.execute("set number\n\nwincmd p")
        self.assertEqual(self.host.history, ["set number", "wincmd p"])

    def testNotAnEditorCommand(self):
        with self.assertRaises(ExecutionError):
            self.host.execute("123")

    def testDispatch(self):
        calls = []
        self.host.register("__f__", lambda *args: calls.append(args) or "done")
        self.assertEqual(self.host.invoke("__f__", 1), "done")

        self.host.execute(ENDPOINT.format(identity="__f__"))
        self.host.execute("call __f__(1, 'two', [3])")
        self.assertEqual(calls, [(1,), (1, "two", [3])])

        self.host.unregister("__f__")
        self.host.unregister("__f__")
        with self.assertRaises(ExecutionError):
            self.host.invoke("__f__")
        with self.assertRaises(ExecutionError):
            self.host.execute("call __f__()")

    def testCallUnknownFunction(self):
        with self.assertRaises(ExecutionError):
            self.host.execute("call Missing()")

    def testDelfunction(self):
        self.host.execute("function! Named(...)\n    return 1\nendfun")
        self.assertEqual(self.host.functions, {"Named": ["return 1"]})
        self.host.execute("delfunction Named")
        self.host.execute("delfunction! Named")
        with self.assertRaises(ExecutionError):
            self.host.execute("delfunction Named")

    def testAugroups(self):
        self.host.execute("augroup one\naugroup END\naugroup two\naugroup END")
        self.assertEqual(self.host.execute("augroup", output=True), "one  two")
        self.host.execute("augroup! one")
        self.assertEqual(self.host.groups, ["two"])
        with self.assertRaises(ExecutionError):
            self.host.execute("augroup! one")

    def testAutocmdListing(self):
        self.host.execute("autocmd BufRead *.py echo 1\nautocmd BufWrite * echo 2")
        listing = self.host.execute("autocmd", output=True)
        self.assertEqual(listing.splitlines(), [
            "--- Autocommands ---",
            "  BufRead  *.py  echo 1",
            "  BufWrite  *  echo 2",
        ])
        self.assertEqual(len(self.host.execute("autocmd BufWrite", output=True).splitlines()), 2)

    def testUserCommands(self):
        self.host.execute("command -nargs=* -complete=customlist,Complete Run echo run")
        self.assertEqual(self.host.usercommands(), [{
            "name": "Run",
            "definition": "echo run",
            "complete_arg": "Complete",
            "options": ("-nargs=*", "-complete=customlist,Complete"),
        }])
        with self.assertRaises(ExecutionError):
            self.host.execute("command Run echo again")
        self.host.execute("command! Run echo again")
        self.assertEqual(self.host.execute("command", output=True), "Run")

        self.host.execute("delcommand Run")
        with self.assertRaises(ExecutionError):
            self.host.execute("delcommand Run")

    def testMappings(self):
        self.host.execute("nnoremap <silent> j gj\nnmap k gk")
        self.assertEqual(self.host.execute("nmap", output=True).splitlines(), ["n  j  gj", "n  k  gk"])
        self.host.execute("nmap j gjzz")
        self.assertEqual([mapping["rhs"] for mapping in self.host.keymaps()], ["gk", "gjzz"])

        self.host.keymaps()[0]["rhs"] = "changed"
        self.assertEqual(self.host.mappings[0]["rhs"], "gk")

        with self.assertRaises(ExecutionError):
            self.host.execute("iunmap j")


if __name__ == "__main__":
    unittest.main()
