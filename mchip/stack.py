#!/usr/bin/env python3

"""
Stack Emulator

The call stack holds return addresses outside of system RAM.  There is no
stack pointer exposed to the running program, so a list wrapped with a fixed
capacity is enough.  Filling or draining it past its limits halts the machine.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    def push(self, item):
        if len(self.items) >= self.size:
            raise StackError("Stack overflow")

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackError("Stack underflow") from None

    @property
    def depth(self):
        return len(self.items)

    def get_items(self):
        # For debugging
        return self.items
