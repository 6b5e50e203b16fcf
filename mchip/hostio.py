#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading program images from the host for later writing into RAM.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class LoadError(Exception):
    pass


class Loader:
    def load_binary(self, filename):
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as err:
            raise LoadError("Unable to read program image '{}': {}".format(filename, err.strerror)) from err
