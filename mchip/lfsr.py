#!/usr/bin/env python3

"""
Random Byte Source

A 16-bit linear-feedback shift register, used by the RND instruction.  It is
always seeded with the same value, so a given program will draw the same
pixels on every run and every host.  Nothing here is suitable for
cryptography.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

LFSR_SEED = 0x1234


class RandomByteSource:
    def __init__(self):
        self.state = LFSR_SEED

    def get_bit(self):
        # Taps at bits 0, 2, 3 and 5, fed back into bit 15
        state = self.state
        bit = (state ^ (state >> 2) ^ (state >> 3) ^ (state >> 5)) & 1
        self.state = (state >> 1) | (bit << 15)
        return bit

    def gen(self):
        # Least-significant bit first
        byte = 0

        for i in range(8):
            byte |= self.get_bit() << i

        return byte
