#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and the driver copies them to the actual display (the
host rendering system) whenever they have changed.  Programs cannot write
directly into video RAM.  Instead, sprites are drawn to the screen using an XOR
method, 8 pixels per sprite row, with the most significant bit on the left.

Sprites wrap around both edges of the screen independently.  Collisions (where
any pixel was set, but was unset by an XOR), are reported as a single flag for
the whole sprite.

Every change marks the framebuffer as dirty.  It stays dirty until the consumer
acknowledges the frame with set_clean().
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import VIDEO_WIDTH, VIDEO_HEIGHT
from .ram import RAM


class FramebufferError(Exception):
    pass


class Framebuffer:
    def __init__(self, vid_width=VIDEO_WIDTH, vid_height=VIDEO_HEIGHT):
        if vid_width <= 0 or vid_height <= 0:
            raise FramebufferError("Framebuffer dimensions must be positive")

        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.plane = RAM()
        self.plane.resize(self.vid_size)
        self.dirty = False

    def clear(self):
        self.plane.clear()
        self.dirty = True

    def xor_pixel(self, x, y):
        # Returns flagging any collision
        vram_loc = (y % self.vid_height) * self.vid_width + (x % self.vid_width)
        pixel = self.plane.read(vram_loc)
        self.plane.write(vram_loc, pixel ^ 1)
        self.dirty = True

        return pixel != 0

    def draw(self, x, y, sprite):
        vid_width = self.vid_width
        vid_height = self.vid_height
        vx_pos = x % vid_width
        vy_pos = y % vid_height
        collided = False

        for row, spr_data in enumerate(sprite):
            for col in range(8):
                if spr_data & (0x80 >> col):
                    if self.xor_pixel(vx_pos + col, vy_pos + row):
                        # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                        collided = True

        # An empty sprite still counts as a draw
        self.dirty = True

        return int(collided)

    def get_pixel(self, x, y):
        return self.plane.read(y * self.vid_width + x)

    def view(self):
        return self.plane.mem.toreadonly()

    def is_dirty(self):
        return self.dirty

    def set_clean(self):
        self.dirty = False

    def get_vid_size(self):
        return self.vid_width, self.vid_height
