# Copyright Red Hat
#
# cfgm/cfgdiff/__init__.py - Configuration Manager config differ package
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration tree diff package.

Provides configuration tree comparison facilities: the ``CfgNode`` tree,
the ``DiffEngine`` tree differ, command list extraction and application,
and text rendering of trees, diffs and command lists. The main entry
points are ``ConfigDiffer`` and ``DiffOptions``.
"""
from .cfgdiffer import ConfigDiffer, MemoryTreeSource, TreeSource
from .commands import (
    Command,
    CommandExtractor,
    CommandList,
    CommandType,
    apply_cmds,
    get_cmds,
    get_cmds_diff,
)
from .difftypes import DiffType
from .engine import CfgDiff, CfgDiffNode, DiffEngine, NodeChange, ValueDiff, diff_trees
from .node import CfgNode
from .options import DiffOptions
from .render import DiffRenderer, show_cfg, show_cfg_diff, show_cmds, show_cmds_diff

__all__ = [
    "CfgDiff",
    "CfgDiffNode",
    "CfgNode",
    "Command",
    "CommandExtractor",
    "CommandList",
    "CommandType",
    "ConfigDiffer",
    "DiffEngine",
    "DiffOptions",
    "DiffRenderer",
    "DiffType",
    "MemoryTreeSource",
    "NodeChange",
    "TreeSource",
    "ValueDiff",
    "apply_cmds",
    "diff_trees",
    "get_cmds",
    "get_cmds_diff",
    "show_cfg",
    "show_cfg_diff",
    "show_cmds",
    "show_cmds_diff",
]
