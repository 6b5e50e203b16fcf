#!/usr/bin/env python3

"""
Machine Driver

The machine itself has no sense of time, so this is where the pacing happens.
The driver steps the machine once every 'cycle_delay' milliseconds, applies
queued key presses before each step and queued releases after it, and hands
the framebuffer to the renderer whenever it has changed.

Host input is only polled at 60Hz, as PyGame can lower speed substantially when
its event queue is checked too often.  Frame and step rates are reported in the
window title once a second.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from .constants import APP_NAME, DEFAULT_CYCLE_DELAY, DISPLAY_FREQ

DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ


class Driver:
    def __init__(self, machine, renderer, inputs, cycle_delay=DEFAULT_CYCLE_DELAY, max_cycles=0):
        self.machine = machine
        self.renderer = renderer
        self.inputs = inputs
        self.cycle_interval = max(0, cycle_delay) / 1000.0
        self.max_cycles = max_cycles
        self.cycles = 0

        vid_width, vid_height = machine.framebuffer.get_vid_size()
        self.renderer.set_resolution(vid_width, vid_height)

        # Performance-related vars
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0
        self.next_perf_report_time = 0
        self.report_perf()

    def run(self):
        next_input_time = 0
        next_cycle_time = 0

        while not self.max_cycles or self.cycles < self.max_cycles:
            this_time = perf_counter()

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = int(this_time) + 1.0
                self.report_perf(self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            if this_time >= next_input_time:
                if self.inputs.process_messages():
                    break
                next_input_time = this_time + DISPLAY_INTERVAL

            if this_time >= next_cycle_time:
                next_cycle_time = this_time + self.cycle_interval
                self.apply_presses()
                self.machine.step()
                self.apply_releases()
                self.cycles += 1
                self.perf_counter_ops += 1

            if self.machine.is_dirty():
                self.present_frame()
                self.perf_counter_fps += 1

        return self.cycles

    def apply_presses(self):
        machine = self.machine

        for key in self.inputs.take_presses():
            machine.press(key)

    def apply_releases(self):
        # Released after the step, so even the shortest tap is held for one instruction
        machine = self.machine

        for key in self.inputs.take_releases():
            machine.release(key)

    def present_frame(self):
        renderer = self.renderer

        for location, cell in enumerate(self.machine.view()):
            renderer.set_pixel(location, cell)

        renderer.refresh_display(True)
        self.machine.set_clean()

    def report_perf(self, fps=0, ops=0):
        title = "{} - {} FPS, {} OPS".format(APP_NAME, fps, ops)
        self.renderer.set_title(title)
