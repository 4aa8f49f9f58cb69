# Copyright Red Hat
#
# cfgm/cfgdiff/commands.py - Configuration Manager command lists
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Command list extraction and application.

A ``CommandList`` holds the ordered delete, set, comment and activation
commands that describe a configuration tree, or transform one tree into
another. Commands are applied as separate passes in that order.
"""
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from dataclasses import dataclass
from itertools import chain
from enum import Enum
import logging
import shlex
import json

from cfgm import (
    CFGM_SUBSYSTEM_COMMANDS,
    CfgmArgumentError,
    CfgmNotFoundError,
)

from .difftypes import DiffType
from .engine import CfgDiff, CfgDiffNode, DiffEngine
from .node import CfgNode

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_cmds(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": CFGM_SUBSYSTEM_COMMANDS}, **kwargs)


class CommandType(Enum):
    """
    Enum for configuration command types.
    """

    DELETE = "delete"
    SET = "set"
    COMMENT = "comment"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


def quote_value(value: str) -> str:
    """
    Quote a value or comment argument: always single quoted, with embedded
    single quotes escaped for the shell.

    :param value: The value to quote.
    :type value: ``str``
    :rtype: ``str``
    """
    return "'" + value.replace("'", "'\"'\"'") + "'"


@dataclass(frozen=True)
class Command:
    """
    A single configuration command.
    """

    #: The command type
    cmd_type: CommandType
    #: The absolute node path
    path: Tuple[str, ...]
    #: Value for set/delete, comment text for comment, else ``None``
    value: Optional[str] = None
    #: Default flag of the target node (set commands only)
    default: bool = False
    #: Secret flag of the target node (set commands only)
    secret: bool = False

    def __str__(self) -> str:
        words = [self.cmd_type.value, *(shlex.quote(part) for part in self.path)]
        if self.value is not None:
            words.append(quote_value(self.value))
        return " ".join(words)

    @property
    def args(self) -> List[str]:
        """
        The command as a path vector: the path optionally followed by the
        value or comment text.
        """
        if self.value is None:
            return list(self.path)
        return [*self.path, self.value]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Command`` into a dictionary.
        """
        out = {"command": self.cmd_type.value, "path": list(self.path)}
        if self.value is not None:
            out["value"] = self.value
        if self.default:
            out["default"] = True
        if self.secret:
            out["secret"] = True
        return out


class CommandList:
    """
    Ordered delete, set, comment and activation command sequences.
    """

    def __init__(
        self,
        deletes: Optional[List[Command]] = None,
        sets: Optional[List[Command]] = None,
        comments: Optional[List[Command]] = None,
        activations: Optional[List[Command]] = None,
    ):
        self.deletes: List[Command] = list(deletes or [])
        self.sets: List[Command] = list(sets or [])
        self.comments: List[Command] = list(comments or [])
        self.activations: List[Command] = list(activations or [])

    def __repr__(self) -> str:
        return (
            f"CommandList(deletes={self.deletes!r}, sets={self.sets!r}, "
            f"comments={self.comments!r}, activations={self.activations!r})"
        )

    def __str__(self) -> str:
        return "\n".join(self.lines())

    def __iter__(self) -> Iterator[Command]:
        """
        Iterate over all commands in application order.
        """
        return chain(self.deletes, self.sets, self.comments, self.activations)

    def __len__(self) -> int:
        return (
            len(self.deletes)
            + len(self.sets)
            + len(self.comments)
            + len(self.activations)
        )

    def __bool__(self) -> bool:
        return len(self) > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandList):
            return NotImplemented
        return (
            self.deletes == other.deletes
            and self.sets == other.sets
            and self.comments == other.comments
            and self.activations == other.activations
        )

    __hash__ = None

    @property
    def del_list(self) -> List[List[str]]:
        """
        Delete commands as path vectors.
        """
        return [cmd.args for cmd in self.deletes]

    @property
    def set_list(self) -> List[List[str]]:
        """
        Set commands as path vectors.
        """
        return [cmd.args for cmd in self.sets]

    @property
    def com_list(self) -> List[List[str]]:
        """
        Comment commands as path vectors ending in the comment text.
        """
        return [cmd.args for cmd in self.comments]

    def lines(self) -> List[str]:
        """
        Return one shell-like command string per command in application
        order.

        :rtype: ``List[str]``
        """
        return [str(cmd) for cmd in self]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``CommandList`` into a dictionary.
        """
        return {
            "deletes": [cmd.to_dict() for cmd in self.deletes],
            "sets": [cmd.to_dict() for cmd in self.sets],
            "comments": [cmd.to_dict() for cmd in self.comments],
            "activations": [cmd.to_dict() for cmd in self.activations],
        }

    def json(self, pretty: bool = False) -> str:
        """
        Return a JSON representation of this ``CommandList``.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)


class CommandExtractor:
    """
    Walks configuration trees and diff results to emit command lists.
    """

    def __init__(self, show_def: bool = True, effective: bool = False):
        """
        Initialise a new ``CommandExtractor``.

        :param show_def: Emit commands for nodes holding default values. With
                         ``False`` the commands no longer reproduce the
                         target tree exactly.
        :type show_def: ``bool``
        :param effective: Omit deactivated subtrees when extracting a single
                          tree (the active-effect configuration).
        :type effective: ``bool``
        """
        self.show_def = show_def
        self.effective = effective

    def _hidden(self, node: CfgNode) -> bool:
        return node.is_default and not self.show_def

    @staticmethod
    def _set(node: CfgNode, path: Tuple[str, ...], value: Optional[str]) -> Command:
        return Command(
            CommandType.SET,
            path,
            value,
            default=node.is_default,
            secret=node.is_secret,
        )

    @staticmethod
    def _needs_bare_set(node: CfgNode) -> bool:
        # Valueless nodes with children are created by their descendants.
        if node.values:
            return False
        return not node.children or node.is_default or node.is_secret

    def _emit_tree(self, node: CfgNode, path: Tuple[str, ...], cmds: CommandList):
        """
        Emit the complete content of ``node`` and its subtree.
        """
        if self._hidden(node):
            _log_debug_cmds("Skipping default node: %s", " ".join(path))
            return
        if node.is_deactivated and self.effective:
            _log_debug_cmds("Skipping deactivated node: %s", " ".join(path))
            return

        if node.values:
            cmds.sets.extend(self._set(node, path, value) for value in node.values)
        elif self._needs_bare_set(node):
            cmds.sets.append(self._set(node, path, None))
        if node.comment:
            cmds.comments.append(Command(CommandType.COMMENT, path, node.comment))
        if node.is_deactivated:
            cmds.activations.append(Command(CommandType.DEACTIVATE, path))

        for child in node.iter_children():
            self._emit_tree(child, (*path, child.name), cmds)

    def _emit_changed(self, dnode: CfgDiffNode, cmds: CommandList):
        """
        Emit the commands that change the own state of a node present in
        both trees.
        """
        new, change = dnode.new, dnode.change
        path = dnode.path
        if self._hidden(new):
            return

        cmds.deletes.extend(
            Command(CommandType.DELETE, path, value) for value in change.values.removed
        )
        if change.flags_changed:
            # Re-set every value so the new flags are applied.
            if new.values:
                cmds.sets.extend(self._set(new, path, value) for value in new.values)
            else:
                cmds.sets.append(self._set(new, path, None))
        else:
            cmds.sets.extend(
                self._set(new, path, value) for value in change.values.added
            )
        if change.comment_changed:
            cmds.comments.append(Command(CommandType.COMMENT, path, new.comment))
        if change.deactivation_changed:
            cmd_type = (
                CommandType.DEACTIVATE if new.is_deactivated else CommandType.ACTIVATE
            )
            cmds.activations.append(Command(cmd_type, path))

    def _emit_diff(self, dnode: CfgDiffNode, cmds: CommandList):
        if dnode.diff_type == DiffType.DELETED:
            if not self._hidden(dnode.old):
                _log_debug_cmds("Delete: %s", " ".join(dnode.path))
                cmds.deletes.append(Command(CommandType.DELETE, dnode.path))
            return
        if dnode.diff_type == DiffType.ADDED:
            _log_debug_cmds("Add: %s", " ".join(dnode.path))
            self._emit_tree(dnode.new, dnode.path, cmds)
            return
        if dnode.diff_type == DiffType.CHANGED:
            _log_debug_cmds("Change: %s", " ".join(dnode.path))
            self._emit_changed(dnode, cmds)
        for child in dnode.iter_children():
            self._emit_diff(child, cmds)

    def extract_tree(self, cfg: CfgNode, path: Sequence[str] = ()) -> CommandList:
        """
        Emit set, comment and activation commands describing ``cfg`` in
        full.

        :param cfg: The configuration tree (or subtree) to describe.
        :type cfg: ``CfgNode``
        :param path: The absolute path of ``cfg``; the empty path means
                     ``cfg`` is a tree root, whose own state is not emitted.
        :type path: ``Sequence[str]``
        :returns: A ``CommandList`` with no delete commands.
        :rtype: ``CommandList``
        """
        if cfg is None:
            raise CfgmArgumentError("Configuration tree is required")
        path = tuple(path)
        cmds = CommandList()
        if path:
            self._emit_tree(cfg, path, cmds)
        else:
            for child in cfg.iter_children():
                self._emit_tree(child, (child.name,), cmds)
        _log_debug("Extracted %d commands from tree", len(cmds))
        return cmds

    def extract_diff(self, diff: CfgDiff) -> CommandList:
        """
        Emit the commands that transform the source tree of ``diff`` into
        its target tree.

        :param diff: The diff result to walk.
        :type diff: ``CfgDiff``
        :returns: A new ``CommandList``.
        :rtype: ``CommandList``
        """
        if diff is None:
            raise CfgmArgumentError("Diff result is required")
        cmds = CommandList()
        self._emit_diff(diff.root, cmds)
        _log_debug(
            "Extracted %d delete, %d set, %d comment and %d activation commands",
            len(cmds.deletes),
            len(cmds.sets),
            len(cmds.comments),
            len(cmds.activations),
        )
        return cmds


def get_cmds(
    cfg: CfgNode,
    show_def: bool = True,
    effective: bool = False,
    path: Sequence[str] = (),
) -> CommandList:
    """
    Return the commands describing configuration tree ``cfg`` in full.

    :param cfg: The configuration tree.
    :type cfg: ``CfgNode``
    :param show_def: Include nodes holding default values.
    :type show_def: ``bool``
    :param effective: Omit deactivated subtrees.
    :type effective: ``bool``
    :param path: The absolute path of ``cfg`` if it is a subtree.
    :type path: ``Sequence[str]``
    :rtype: ``CommandList``
    """
    extractor = CommandExtractor(show_def=show_def, effective=effective)
    return extractor.extract_tree(cfg, path)


def get_cmds_diff(
    cfg1: CfgNode,
    cfg2: CfgNode,
    show_def: bool = True,
    path: Sequence[str] = (),
) -> CommandList:
    """
    Return the commands that transform ``cfg1`` into ``cfg2``.

    :param cfg1: The source configuration tree.
    :type cfg1: ``CfgNode``
    :param cfg2: The target configuration tree.
    :type cfg2: ``CfgNode``
    :param show_def: Include nodes holding default values.
    :type show_def: ``bool``
    :param path: Optional path of the subtree to compare.
    :type path: ``Sequence[str]``
    :rtype: ``CommandList``
    """
    diff = DiffEngine().compute_diff(cfg1, cfg2, path=path)
    return CommandExtractor(show_def=show_def).extract_diff(diff)


def _find_or_raise(tree: CfgNode, cmd: Command) -> CfgNode:
    node = tree.find(cmd.path)
    if node is None:
        raise CfgmNotFoundError(f"No such configuration path for '{cmd}'")
    return node


def apply_cmds(cfg: CfgNode, cmds: CommandList) -> CfgNode:
    """
    Apply ``cmds`` to a copy of ``cfg`` and return the copy.

    Deletes are applied first, then sets, comments and activation
    commands. ``cfg`` is not modified.

    :param cfg: The configuration tree to start from.
    :type cfg: ``CfgNode``
    :param cmds: The commands to apply.
    :type cmds: ``CommandList``
    :returns: The resulting configuration tree.
    :rtype: ``CfgNode``
    """
    if cfg is None or cmds is None:
        raise CfgmArgumentError("A configuration tree and command list are required")

    tree = cfg.copy()

    for cmd in cmds.deletes:
        _log_debug_cmds("Applying: %s", cmd)
        if cmd.value is None:
            if not cmd.path:
                raise CfgmArgumentError("Cannot delete the configuration root")
            parent = tree.find(cmd.path[:-1])
            if parent is None or parent.remove_child(cmd.path[-1]) is None:
                raise CfgmNotFoundError(f"No such configuration path for '{cmd}'")
        elif not _find_or_raise(tree, cmd).remove_value(cmd.value):
            raise CfgmNotFoundError(f"No such configuration value for '{cmd}'")

    for cmd in cmds.sets:
        _log_debug_cmds("Applying: %s", cmd)
        node = tree.ensure_path(cmd.path)
        if cmd.value is not None:
            node.add_value(cmd.value)
        node.is_default = cmd.default
        node.is_secret = cmd.secret

    for cmd in cmds.comments:
        _log_debug_cmds("Applying: %s", cmd)
        _find_or_raise(tree, cmd).comment = cmd.value or ""

    for cmd in cmds.activations:
        _log_debug_cmds("Applying: %s", cmd)
        node = _find_or_raise(tree, cmd)
        node.is_deactivated = cmd.cmd_type == CommandType.DEACTIVATE

    return tree


__all__ = [
    "Command",
    "CommandExtractor",
    "CommandList",
    "CommandType",
    "apply_cmds",
    "get_cmds",
    "get_cmds_diff",
    "quote_value",
]
