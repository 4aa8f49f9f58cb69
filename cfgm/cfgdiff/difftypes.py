# Copyright Red Hat
#
# cfgm/cfgdiff/difftypes.py - Configuration Manager config diff types
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration diff types
"""
from enum import Enum


class DiffType(Enum):
    """
    Enum for different difference types.
    """

    UNCHANGED = "unchanged"
    ADDED = "added"
    DELETED = "deleted"
    CHANGED = "changed"
