#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from mchip.constants import APP_NAME, DEFAULT_KEYMAP, VIDEO_WIDTH, VIDEO_HEIGHT
from mchip.driver import Driver
from mchip.inputs.i_null import Inputs
from mchip.machine import Machine
from mchip.renderers.r_null import Renderer


class RecordingRenderer(Renderer):
    def __init__(self):
        self.pixels = {}
        self.refreshes = 0
        self.titles = []
        super().__init__()

    def set_pixel(self, location, colour):
        self.pixels[location] = colour

    def refresh_display(self, content_changed=False):
        if content_changed:
            self.refreshes += 1

    def set_title(self, title):
        self.titles.append(title)


class ScriptedInputs(Inputs):
    def __init__(self, renderer, quit_program=False):
        self.quit_program = quit_program
        self.scripted_events = []
        super().__init__(DEFAULT_KEYMAP, renderer)

    def process_messages(self):
        # Everything scripted so far arrives in a single poll
        for down, key in self.scripted_events:
            if down:
                self.queue_press(key)
            else:
                self.queue_release(key)

        self.scripted_events = []
        return self.quit_program


class TestDriver(unittest.TestCase):
    def setUp(self):
        self.renderer = RecordingRenderer()
        self.inputs = ScriptedInputs(self.renderer)

    def _driver(self, program, max_cycles):
        self.machine = Machine(program)
        return Driver(self.machine, self.renderer, self.inputs, cycle_delay=0, max_cycles=max_cycles)

    def test_driver_sets_resolution_and_title(self):
        self._driver(b"\x12\x00", 1)
        self.assertEqual((VIDEO_WIDTH, VIDEO_HEIGHT), (self.renderer.width, self.renderer.height))
        self.assertTrue(self.renderer.titles[0].startswith(APP_NAME))

    def test_driver_runs_max_cycles(self):
        driver = self._driver(b"\x12\x00", 25)  # Jump to self
        self.assertEqual(25, driver.run())
        self.assertEqual(0x200, self.machine.pc)

    def test_driver_quits(self):
        self.inputs.quit_program = True
        driver = self._driver(b"\x12\x00", 0)
        self.assertEqual(0, driver.run())

    def test_driver_presents_frames(self):
        # LD I, 0x50 ; DRW V0, V0, 5 ; JP 0x204
        driver = self._driver(b"\xA0\x50\xD0\x05\x12\x04", 3)
        driver.run()
        self.assertEqual(1, self.renderer.refreshes)
        self.assertFalse(self.machine.is_dirty())
        self.assertEqual(VIDEO_WIDTH * VIDEO_HEIGHT, len(self.renderer.pixels))
        self.assertEqual(1, self.renderer.pixels[0])
        self.assertEqual(0, self.renderer.pixels[4])
        self.assertEqual(1, self.renderer.pixels[VIDEO_WIDTH])

    def test_driver_passes_keys(self):
        # LD V0, K ; JP 0x202
        driver = self._driver(b"\xF0\x0A\x12\x02", 2)
        self.inputs.scripted_events = [(True, 0x7)]
        driver.run()
        self.assertEqual(0x7, self.machine.v[0x0])
        self.assertEqual(0x202, self.machine.pc)
        self.assertTrue(self.machine.is_key_down(0x7))

    def test_driver_tap_within_one_poll(self):
        # LD V0, K ; JP 0x202
        driver = self._driver(b"\xF0\x0A\x12\x02", 5)
        self.inputs.scripted_events = [(True, 0x1), (False, 0x1)]
        driver.run()
        self.assertEqual(0x1, self.machine.v[0x0])
        self.assertEqual(0x202, self.machine.pc)
        self.assertFalse(self.machine.is_key_down(0x1))

    def test_driver_release_after_step(self):
        driver = self._driver(b"\x12\x00", 1)
        self.inputs.queue_press(0xA)
        self.inputs.queue_release(0xA)
        driver.apply_presses()
        self.assertTrue(self.machine.is_key_down(0xA))
        driver.apply_releases()
        self.assertFalse(self.machine.is_key_down(0xA))
        self.assertEqual([], self.inputs.take_presses())
        self.assertEqual([], self.inputs.take_releases())
