"""
Dispatcher behavioral tests (action calls and the process boundary).

Scope
- select/dispatch/adispatch, including coroutine actions.
- invoke: exit statuses and console output for help, parse failures, user
  errors and unexpected exceptions.
- run: exits the process with invoke's status.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with an off-screen rich Console.
"""

from __future__ import annotations

import asyncio
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argtree import (
    Command,
    command,
    option,
    argument,
    parse,
    select,
    dispatch,
    adispatch,
    invoke,
    run,
    error,
)


def capture():
    return Console(file=io.StringIO(), width=79, color_system=None)


class TestDispatch(TestCase):
    """Calling the selected action."""

    def setUp(self):
        self.calls = []

        @command(arguments=[argument("SRC")], options=[option("out", default="public")])
        def build(opts, source):
            """Build the site from SRC."""
            self.calls.append(("build", opts["out"], source))
            return "built"

        @command
        async def serve(opts):
            """Serve the generated site."""
            await asyncio.sleep(0)
            self.calls.append(("serve",))
            return "served"

        @command
        def fail(opts):
            error("nothing to do")

        @command
        def crash(opts):
            raise RuntimeError("boom")

        self.site = Command("site", doc="Static site toolkit.", commands=[build, serve, fail, crash])

    def testSelectFollowsNext(self):
        result = parse(self.site, ["build", "src"], {})
        self.assertEqual(select(result).command.name, "build")
        self.assertIs(select(select(result)), select(result))

    def testDispatchCallsActionWithOptsAndArgs(self):
        self.assertEqual(dispatch(parse(self.site, ["build", "src"], {})), "built")
        self.assertEqual(self.calls, [("build", "public", "src")])

    def testDispatchRunsCoroutineActions(self):
        self.assertEqual(dispatch(parse(self.site, ["serve"], {})), "served")
        self.assertEqual(self.calls, [("serve",)])

    def testAdispatchAwaitsInRunningLoop(self):
        result = parse(self.site, ["serve"], {})
        self.assertEqual(asyncio.run(adispatch(result)), "served")
        result = parse(self.site, ["build", "src"], {})
        self.assertEqual(asyncio.run(adispatch(result)), "built")

    def testInvokeSuccess(self):
        console = capture()
        self.assertEqual(invoke(self.site, ["build", "src", "--out", "dist"], environ={}, console=console), 0)
        self.assertEqual(self.calls, [("build", "dist", "src")])
        self.assertEqual(console.file.getvalue(), "")

    def testInvokeHelp(self):
        console = capture()
        self.assertEqual(invoke(self.site, "build --help", environ={}, console=console), 0)
        output = console.file.getvalue()
        self.assertTrue(output.startswith("usage: site build [OPTIONS] SRC\n\nBuild the site from SRC.\n"))
        self.assertEqual(self.calls, [])

    def testInvokeParseFailure(self):
        console = capture()
        self.assertEqual(invoke(self.site, ["deploy"], environ={}, console=console), 1)
        self.assertEqual(
            console.file.getvalue(),
            "usage: site [OPTIONS] COMMAND\nerror: unknown subcommand deploy\n",
        )

    def testInvokeUserError(self):
        console = capture()
        self.assertEqual(invoke(self.site, ["fail"], environ={}, console=console), 1)
        self.assertEqual(console.file.getvalue(), "error: nothing to do\n")

    def testInvokeUnexpectedException(self):
        console = capture()
        self.assertEqual(invoke(self.site, ["crash"], environ={}, console=console), 1)
        output = console.file.getvalue()
        self.assertIn("RuntimeError", output)
        self.assertIn("boom", output)

    def testInvokeWrapsPlainCallable(self):
        received = []
        console = capture()
        self.assertEqual(invoke(lambda opts: received.append(dict(opts)), [], environ={}, console=console), 0)
        self.assertEqual(received, [{"help": False}])

    def testInvokeRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            invoke(42, [])

    def testRunExitsWithStatus(self):
        with self.assertRaises(SystemExit) as context:
            run(self.site, ["fail"], environ={}, console=capture())
        self.assertEqual(context.exception.code, 1)
        with self.assertRaises(SystemExit) as context:
            run(self.site, ["build", "src"], environ={}, console=capture())
        self.assertEqual(context.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
