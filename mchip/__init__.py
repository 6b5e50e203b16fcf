#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_INTRO, APP_COPYRIGHT, DEFAULT_CYCLE_DELAY, DEFAULT_KEYMAP
from .debugger import Debugger
from .driver import Driver
from .hostio import Loader
from .machine import Machine


class StartupError(Exception):
    pass


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))

    opt_renderer = args["renderer"]
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then run headless.

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "null"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer

    # Set up debugger and live output if necessary
    debugger = Debugger()
    debugger.set_live(args["debug"])

    # Read the program image and build a fresh machine around it
    loader = Loader()
    machine = Machine(loader.load_binary(args["filename"]), debugger)

    renderer = Renderer(scale=args["scale"], palette=args["palette"])

    try:
        # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
        inputs = Inputs(args["keymap"] or DEFAULT_KEYMAP, renderer)

        try:
            cycle_delay = args["cycle_delay"]
            driver = Driver(
                machine, renderer, inputs,
                cycle_delay=DEFAULT_CYCLE_DELAY if cycle_delay is None else cycle_delay,
                max_cycles=args["cycles"] or 0
            )
            return driver.run()
        finally:
            inputs.shutdown()
    finally:
        # The machine has stopped, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        renderer.shutdown()
