#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from mchip.lfsr import RandomByteSource, LFSR_SEED


class TestRandomByteSource(unittest.TestCase):
    def setUp(self):
        self.rng = RandomByteSource()

    def test_lfsr_seed(self):
        self.assertEqual(LFSR_SEED, self.rng.state)

    def test_lfsr_first_bits(self):
        self.assertEqual([0, 1, 1, 1, 0], [self.rng.get_bit() for _ in range(5)])

    def test_lfsr_first_bytes(self):
        self.assertEqual([110, 36, 219, 80, 112], [self.rng.gen() for _ in range(5)])

    def test_lfsr_repeatable(self):
        other = RandomByteSource()
        self.assertEqual([self.rng.gen() for _ in range(64)], [other.gen() for _ in range(64)])

    def test_lfsr_state_stays_16_bit(self):
        for _ in range(1000):
            self.assertTrue(0 <= self.rng.gen() <= 0xFF)
            self.assertTrue(0 <= self.rng.state <= 0xFFFF)
