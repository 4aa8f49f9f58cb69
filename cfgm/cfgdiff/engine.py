# Copyright Red Hat
#
# cfgm/cfgdiff/engine.py - Configuration Manager config diff engine
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration tree diff engine
"""
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
import logging
import json

from cfgm import CFGM_SUBSYSTEM_DIFF, CfgmArgumentError, CfgmPathError
from cfgm.term import TermControl

from .difftypes import DiffType
from .node import CfgNode
from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_diff(msg, *args, **kwargs):
    """A wrapper for diff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": CFGM_SUBSYSTEM_DIFF}, **kwargs)


@dataclass(frozen=True)
class ValueDiff:
    """
    Set difference of the values of a node present in both trees.
    """

    #: Values present only in the source node, in source order
    removed: Tuple[str, ...] = field(default_factory=tuple)
    #: Values present only in the target node, in target order
    added: Tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.removed or self.added)

    def swapped(self) -> "ValueDiff":
        """
        Return the value difference for the opposite comparison direction.
        """
        return ValueDiff(removed=self.added, added=self.removed)

    @classmethod
    def between(cls, old: Sequence[str], new: Sequence[str]) -> "ValueDiff":
        """
        Compute the value difference between ``old`` and ``new``.

        :param old: Source values.
        :type old: ``Sequence[str]``
        :param new: Target values.
        :type new: ``Sequence[str]``
        :returns: A new ``ValueDiff`` instance.
        :rtype: ``ValueDiff``
        """
        old_set = frozenset(old)
        new_set = frozenset(new)
        return cls(
            removed=tuple(v for v in old if v not in new_set),
            added=tuple(v for v in new if v not in old_set),
        )


@dataclass(frozen=True)
class NodeChange:
    """
    Description of how a node present in both trees changed.
    """

    #: Leaf value differences
    values: ValueDiff = field(default_factory=ValueDiff)
    #: The node comment differs
    comment_changed: bool = False
    #: The node was activated or deactivated
    deactivation_changed: bool = False
    #: The default or secret flag differs
    flags_changed: bool = False

    def __bool__(self) -> bool:
        return bool(
            self.values
            or self.comment_changed
            or self.deactivation_changed
            or self.flags_changed
        )

    @classmethod
    def between(cls, old: CfgNode, new: CfgNode) -> "NodeChange":
        """
        Compare the own state of two nodes, ignoring their children.

        :param old: The source node.
        :type old: ``CfgNode``
        :param new: The target node.
        :type new: ``CfgNode``
        :returns: A new ``NodeChange`` (false if nothing changed).
        :rtype: ``NodeChange``
        """
        return cls(
            values=ValueDiff.between(old.values, new.values),
            comment_changed=old.comment != new.comment,
            deactivation_changed=old.is_deactivated != new.is_deactivated,
            flags_changed=(
                old.is_default != new.is_default or old.is_secret != new.is_secret
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``NodeChange`` into a dictionary.
        """
        return {
            "values_removed": list(self.values.removed),
            "values_added": list(self.values.added),
            "comment_changed": self.comment_changed,
            "deactivation_changed": self.deactivation_changed,
            "flags_changed": self.flags_changed,
        }


class CfgDiffNode:
    """
    A node of the structural difference between two configuration trees.
    """

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        name: str,
        diff_type: DiffType,
        path: Sequence[str] = (),
        old: Optional[CfgNode] = None,
        new: Optional[CfgNode] = None,
        change: Optional[NodeChange] = None,
    ):
        """
        Initialise a new ``CfgDiffNode``.

        :param name: The name of this node.
        :type name: ``str``
        :param diff_type: The classification of this node.
        :type diff_type: ``DiffType``
        :param path: The absolute path of this node.
        :type path: ``Sequence[str]``
        :param old: The source tree node, if present.
        :type old: ``Optional[CfgNode]``
        :param new: The target tree node, if present.
        :type new: ``Optional[CfgNode]``
        :param change: The node change: required for ``DiffType.CHANGED``
                       and invalid for all other types.
        :type change: ``Optional[NodeChange]``
        """
        if diff_type == DiffType.ADDED and (new is None or old is not None):
            raise ValueError(f"ADDED node '{name}' requires only a new node")
        if diff_type == DiffType.DELETED and (old is None or new is not None):
            raise ValueError(f"DELETED node '{name}' requires only an old node")
        if diff_type in (DiffType.UNCHANGED, DiffType.CHANGED) and (
            old is None or new is None
        ):
            raise ValueError(
                f"{diff_type.name} node '{name}' requires both old and new nodes"
            )
        if diff_type == DiffType.CHANGED and not change:
            raise ValueError(f"CHANGED node '{name}' requires a non-empty change")
        if diff_type != DiffType.CHANGED and change is not None:
            raise ValueError(
                f"Invalid change argument for {diff_type.name} node '{name}'"
            )

        self.name: str = name
        self.diff_type: DiffType = diff_type
        self.path: Tuple[str, ...] = tuple(path)
        self.old: Optional[CfgNode] = old
        self.new: Optional[CfgNode] = new
        self.change: Optional[NodeChange] = change
        self.children: Dict[str, CfgDiffNode] = {}
        self._has_changes: Optional[bool] = None

    def __repr__(self) -> str:
        return (
            f"CfgDiffNode({self.name!r}, {self.diff_type}, path={self.path!r}, "
            f"change={self.change!r})"
        )

    def __str__(self) -> str:
        change = ""
        if self.change and self.change.values:
            change = (
                f" (-{list(self.change.values.removed)}"
                f" +{list(self.change.values.added)})"
            )
        return f"{' '.join(self.path) or '/'}: {self.diff_type.value}{change}"

    @property
    def node(self) -> CfgNode:
        """
        The configuration node this difference describes: the target node
        if present, otherwise the source node.
        """
        return self.new if self.new is not None else self.old

    @property
    def has_changes(self) -> bool:
        """
        ``True`` if this node or any descendant is not ``UNCHANGED``.
        """
        if self._has_changes is None:
            self._has_changes = self.diff_type != DiffType.UNCHANGED or any(
                child.has_changes for child in self.children.values()
            )
        return self._has_changes

    def add_child(self, child: "CfgDiffNode") -> "CfgDiffNode":
        """
        Attach a child difference node.

        :param child: The child to attach.
        :type child: ``CfgDiffNode``
        :returns: ``child``
        """
        if self.diff_type in (DiffType.ADDED, DiffType.DELETED):
            raise ValueError(
                f"Cannot add children to {self.diff_type.name} node '{self.name}'"
            )
        self.children[child.name] = child
        self._has_changes = None
        return child

    def iter_children(self) -> Iterator["CfgDiffNode"]:
        """
        Iterate over child difference nodes in comparison order.
        """
        return iter(self.children.values())

    def walk(self) -> Iterator["CfgDiffNode"]:
        """
        Pre-order walk of this node and all descendant difference nodes.
        """
        yield self
        for child in self.children.values():
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``CfgDiffNode`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        out = {
            "name": self.name,
            "path": list(self.path),
            "diff_type": self.diff_type.value,
        }
        if self.change:
            out["change"] = self.change.to_dict()
        if self.children:
            out["children"] = [child.to_dict() for child in self.children.values()]
        return out


class CfgDiff:
    """Container for configuration diff results with summary methods."""

    def __init__(
        self,
        root: CfgDiffNode,
        options: Optional[DiffOptions] = None,
    ):
        """
        Initialise a new ``CfgDiff``.

        :param root: The root difference node.
        :type root: ``CfgDiffNode``
        :param options: The options the comparison was requested with.
        :type options: ``Optional[DiffOptions]``
        """
        if root is None:
            raise ValueError("Root node is undefined")
        self.root = root
        self.options = options or DiffOptions()
        self._records: List[CfgDiffNode] = [
            dnode
            for dnode in root.walk()
            if dnode.diff_type != DiffType.UNCHANGED
        ]

    def __repr__(self) -> str:
        return f"CfgDiff({self.root!r}, {self.options!r})"

    @property
    def path(self) -> Tuple[str, ...]:
        """
        The path the comparison started from.
        """
        return self.root.path

    # List-like interface over the non-UNCHANGED nodes
    def __iter__(self) -> Iterator[CfgDiffNode]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> CfgDiffNode:
        return self._records[index]

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def added(self) -> List[CfgDiffNode]:
        """
        Return added nodes in this ``CfgDiff`` instance.

        :rtype: ``List[CfgDiffNode]``
        """
        return [r for r in self._records if r.diff_type == DiffType.ADDED]

    @property
    def deleted(self) -> List[CfgDiffNode]:
        """
        Return deleted nodes in this ``CfgDiff`` instance.

        :rtype: ``List[CfgDiffNode]``
        """
        return [r for r in self._records if r.diff_type == DiffType.DELETED]

    @property
    def changed(self) -> List[CfgDiffNode]:
        """
        Return changed nodes in this ``CfgDiff`` instance.

        :rtype: ``List[CfgDiffNode]``
        """
        return [r for r in self._records if r.diff_type == DiffType.CHANGED]

    def find(self, path: Sequence[str]) -> Optional[CfgDiffNode]:
        """
        Return the difference node at absolute ``path``, or ``None`` if the
        path was not visited (for example below an added or deleted node).

        :param path: The absolute node path.
        :type path: ``Sequence[str]``
        """
        path = tuple(path)
        if path[: len(self.path)] != self.path:
            return None
        dnode = self.root
        for part in path[len(self.path) :]:
            dnode = dnode.children.get(part)
            if dnode is None:
                return None
        return dnode

    def paths(self) -> List[str]:
        """
        Return the space separated paths of all nodes that differ.

        :rtype: ``List[str]``
        """
        return [" ".join(record.path) for record in self._records]

    def summary(
        self, color: str = "never", term_control: Optional[TermControl] = None
    ) -> str:
        """
        Return a summary of this ``CfgDiff`` instance.

        :param color: A string to control color rendering: "auto", "always", or
                      "never".
        :type color: ``str``
        :param term_control: An optional ``TermControl`` instance that
                             overrides ``color`` if set.
        :type term_control: ``Optional[TermControl]``
        :returns: A string summarizing this instance.
        :rtype: ``str``
        """
        tc = term_control or TermControl(color=color)
        return (
            f"Total changes:   {len(self)}\n"
            f"  Nodes {tc.colorize('GREEN', 'added:  ')} {len(self.added)}\n"
            f"  Nodes {tc.colorize('RED', 'deleted:')} {len(self.deleted)}\n"
            f"  Nodes {tc.colorize('YELLOW', 'changed:')} {len(self.changed)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``CfgDiff`` into a dictionary.
        """
        return {
            "path": list(self.path),
            "total_changes": len(self),
            "root": self.root.to_dict(),
        }

    def json(self, pretty: bool = False) -> str:
        """
        Return a JSON representation of this ``CfgDiff``.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)


def merge_child_names(old: CfgNode, new: CfgNode) -> List[str]:
    """
    Return the union of the child names of ``old`` and ``new`` in
    comparison order.

    If neither node records an explicit display order the union is sorted.
    Otherwise it is the source order followed by the names found only in
    the target, in target order.

    :param old: The source node.
    :type old: ``CfgNode``
    :param new: The target node.
    :type new: ``CfgNode``
    :rtype: ``List[str]``
    """
    if not old.is_ordered and not new.is_ordered:
        return sorted(old.children.keys() | new.children.keys())
    names = old.child_names()
    names.extend(name for name in new.child_names() if name not in old.children)
    return names


class DiffEngine:
    """
    Core class for generating configuration tree comparisons.
    """

    def _compare(
        self,
        name: str,
        path: Tuple[str, ...],
        old: Optional[CfgNode],
        new: Optional[CfgNode],
    ) -> CfgDiffNode:
        """
        Recursively compare ``old`` and ``new`` at ``path``.
        """
        if old is None:
            _log_debug_diff("Added: %s", " ".join(path))
            return CfgDiffNode(name, DiffType.ADDED, path, new=new)
        if new is None:
            _log_debug_diff("Deleted: %s", " ".join(path))
            return CfgDiffNode(name, DiffType.DELETED, path, old=old)

        change = NodeChange.between(old, new)
        if change:
            _log_debug_diff("Changed: %s (%s)", " ".join(path), change)
            dnode = CfgDiffNode(name, DiffType.CHANGED, path, old, new, change)
        else:
            dnode = CfgDiffNode(name, DiffType.UNCHANGED, path, old, new)

        for child_name in merge_child_names(old, new):
            dnode.add_child(
                self._compare(
                    child_name,
                    (*path, child_name),
                    old.get_child(child_name),
                    new.get_child(child_name),
                )
            )
        return dnode

    def compute_diff(
        self,
        cfg_a: CfgNode,
        cfg_b: CfgNode,
        options: Optional[DiffOptions] = None,
        path: Sequence[str] = (),
    ) -> CfgDiff:
        """
        Compare configuration tree ``cfg_a`` (source) against ``cfg_b``
        (target).

        The roots of both trees are always treated as present. If ``path``
        is given the comparison is restricted to the subtree at ``path``;
        a path present in only one tree is reported as an added or
        deleted root.

        :param cfg_a: The source (active) configuration tree.
        :type cfg_a: ``CfgNode``
        :param cfg_b: The target (working) configuration tree.
        :type cfg_b: ``CfgNode``
        :param options: Options recorded in the result for rendering.
        :type options: ``Optional[DiffOptions]``
        :param path: Optional path of the subtree to compare.
        :type path: ``Sequence[str]``
        :returns: A ``CfgDiff`` instance.
        :rtype: ``CfgDiff``
        """
        if cfg_a is None or cfg_b is None:
            raise CfgmArgumentError("Both configuration trees are required")
        if not isinstance(cfg_a, CfgNode) or not isinstance(cfg_b, CfgNode):
            raise CfgmArgumentError("Configuration trees must be CfgNode instances")

        path = tuple(path)
        old = cfg_a.find(path)
        new = cfg_b.find(path)
        if old is None and new is None:
            raise CfgmPathError(path)

        _log_debug("Starting compute_diff at '%s'", " ".join(path) or "/")
        name = path[-1] if path else ""
        root = self._compare(name, path, old, new)
        results = CfgDiff(root, options)
        _log_debug("Found %d differences", len(results))
        return results


def diff_trees(
    cfg_a: CfgNode,
    cfg_b: CfgNode,
    options: Optional[DiffOptions] = None,
    path: Sequence[str] = (),
) -> CfgDiff:
    """
    Compare two configuration trees: shorthand for
    ``DiffEngine().compute_diff()``.
    """
    return DiffEngine().compute_diff(cfg_a, cfg_b, options=options, path=path)


__all__ = [
    "CfgDiff",
    "CfgDiffNode",
    "DiffEngine",
    "NodeChange",
    "ValueDiff",
    "diff_trees",
    "merge_child_names",
]
