# Copyright Red Hat
#
# cfgm/__init__.py - Configuration Manager package initialisation
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Cfgm top-level package.
"""
from ._cfgm import *  # noqa: F401, F403
from ._cfgm import __all__  # noqa: F401

__version__ = "0.1.0"
