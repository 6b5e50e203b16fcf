#!/usr/bin/env python3

__author__ = "Gregory Maynard-Hoare"
__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"
__version__ = "1.0.0"

from argparse import ArgumentParser
from mchip import main
from mchip.constants import DEFAULT_CYCLE_DELAY, DEFAULT_KEYMAP


def parse_args(argv=None):
    parser = ArgumentParser()
    parser.add_argument("filename", help="program image to execute (normally ending in .ch8 or .c8)")
    parser.add_argument(
        "-c", "--cycle_delay", type=int, default=DEFAULT_CYCLE_DELAY,
        help="milliseconds to wait between instructions (default {}, 0 = uncapped)".format(DEFAULT_CYCLE_DELAY)
    )
    parser.add_argument(
        "-n", "--cycles", type=int, default=0,
        help="stop after this many instructions (default 0 = run until the window is closed)"
    )
    parser.add_argument(
        "-r", "--renderer", choices=["pygame", "null"],
        help="set the rendering and input systems (pygame by default if available, otherwise null)"
    )
    parser.add_argument(
        "-s", "--scale", type=int,
        help="set the window width in PyGame mode (default 512)"
    )
    parser.add_argument(
        "-k", "--keymap", default=DEFAULT_KEYMAP,
        help="redefine the 16 keyscan codes for keys 0-F.  Separate each decimal with a comma"
    )
    parser.add_argument(
        "--palette",
        help="redefine the unlit and lit colours for the PyGame renderer in comma-separated hex, e.g. 000000,FFFFFF"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False,
        help="print every instruction with the machine state as it executes.  Slows execution"
    )
    return parser.parse_args(argv)  # Can call sys.exit(2) if args are incorrect


if __name__ == "__main__":
    args = vars(parse_args())
    # It is possible to start the emulator from a GUI by calling this with a dictionary
    main(args)
