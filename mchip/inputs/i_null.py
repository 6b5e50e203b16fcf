#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

Key presses and releases are queued as they arrive, so a tap that starts and
ends between two polls still reaches the machine.

Keymaps are 16 comma-separated decimal host key codes, one for each of the
emulated keys 0-F in order.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from ..constants import NUM_KEYS


class InputsError(Exception):
    pass


class Inputs:
    def __init__(self, keymap, renderer):
        self.keymap_dict = {}
        self.renderer = renderer
        self.key_down = [False] * NUM_KEYS
        self.pending_presses = []
        self.pending_releases = []
        keymap_split = keymap.split(",")

        if len(keymap_split) != NUM_KEYS:
            raise InputsError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

        for key_num, key_defined in enumerate(keymap_split):
            try:
                key_defined_ord = int(key_defined)
            except ValueError:
                raise InputsError("Defined keys are not all integer values") from None

            if key_defined_ord in self.keymap_dict:
                raise InputsError("Duplicate keys defined")

            self.keymap_dict[key_defined_ord] = key_num

    def process_messages(self):
        return False  # Don't exit the program

    def is_key_down(self, key):
        return self.key_down[key]

    def queue_press(self, key):
        self.key_down[key] = True
        self.pending_presses.append(key)

    def queue_release(self, key):
        self.key_down[key] = False
        self.pending_releases.append(key)

    def take_presses(self):
        presses = self.pending_presses
        self.pending_presses = []
        return presses

    def take_releases(self):
        releases = self.pending_releases
        self.pending_releases = []
        return releases

    def shutdown(self):
        pass
