#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins.  The driver hands
over the machine's framebuffer one cell at a time through set_pixel, where
each location is a row-major index into the 64x32 display and each colour is
the cell value itself (0 for unlit, 1 for lit).  refresh_display(True) follows
once a whole frame has been copied.

Used on its own, nothing is shown: programs run headless, with only debug
output (if enabled) to watch.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def set_pixel(self, location, colour):  # pylint: disable=unused-argument
        pass

    def refresh_display(self, content_changed=False):
        pass

    def set_title(self, title):
        pass

    def shutdown(self):
        pass
