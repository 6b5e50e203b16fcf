#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import unittest
from contextlib import redirect_stdout
from mchip.debugger import Debugger
from mchip.machine import Machine


class TestDebugger(unittest.TestCase):
    def setUp(self):
        self.debugger = Debugger()
        self.machine = Machine(b"\x6F\x12\x22\x06", self.debugger)

    def test_debugger_not_live_by_default(self):
        self.assertFalse(self.debugger.is_live())

    def test_debugger_format(self):
        self.machine.step()
        debug_str = self.debugger.debug(self.machine, "TEST")
        self.assertTrue(debug_str.startswith("V: 0x12" + "00" * 15))
        self.assertIn("PC: 0x200 OP: 0x6f12 IN: TEST", debug_str)
        self.assertNotIn("Stack", debug_str)

    def test_debugger_verbose_stack(self):
        self.assertIn("Stack: (Empty)", self.debugger.debug(self.machine, "TEST", verbose=True))
        self.machine.step()
        self.machine.step()
        self.assertIn("Stack: 0x202", self.debugger.debug(self.machine, "TEST", verbose=True))

    def test_debugger_live_output(self):
        self.debugger.set_live(True)
        machine = Machine(b"\x6F\x12\x22\x06", self.debugger)
        output = io.StringIO()

        with redirect_stdout(output):
            machine.step()
            machine.step()

        lines = output.getvalue().splitlines()
        self.assertEqual(2, len(lines))
        self.assertTrue(lines[0].endswith("IN: LD Vf, 0x12"))
        self.assertTrue(lines[1].endswith("IN: CALL 0x206"))
