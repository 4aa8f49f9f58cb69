# Copyright Red Hat
#
# cfgm/cfgdiff/node.py - Configuration Manager configuration tree nodes
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration tree node.
"""
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence
import logging

from cfgm import CFGM_SUBSYSTEM_NODE, CfgmArgumentError, CfgmExistsError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_node(msg, *args, **kwargs):
    """A wrapper for node subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": CFGM_SUBSYSTEM_NODE}, **kwargs)


# pylint: disable=too-many-instance-attributes
class CfgNode:
    """
    A vertex in a configuration tree.

    A node has a name that is unique among its siblings, an ordered list of
    leaf values, an insertion-ordered mapping of child nodes, an optional
    comment, and the deactivated, default and secret status flags.

    Children are iterated in lexicographic name order unless the node is
    created with ``ordered=True``, in which case insertion order is the
    display order.
    """

    def __init__(
        self,
        name: str = "",
        values: Optional[Iterable[str]] = None,
        comment: str = "",
        deactivated: bool = False,
        default: bool = False,
        secret: bool = False,
        ordered: bool = False,
    ):
        """
        Initialise a new ``CfgNode``.

        :param name: The name of this node.
        :type name: ``str``
        :param values: Leaf values for this node. Duplicates are dropped,
                       keeping the first occurrence.
        :type values: ``Optional[Iterable[str]]``
        :param comment: Comment text attached to this node.
        :type comment: ``str``
        :param deactivated: ``True`` if this node is administratively disabled.
        :type deactivated: ``bool``
        :param default: ``True`` if this node holds a system default.
        :type default: ``bool``
        :param secret: ``True`` if this node's values are secret.
        :type secret: ``bool``
        :param ordered: ``True`` if children keep insertion order for display.
        :type ordered: ``bool``
        """
        if name is None:
            raise CfgmArgumentError("CfgNode name cannot be None")
        self.name: str = name
        self.values: List[str] = []
        self.children: Dict[str, "CfgNode"] = {}
        self.comment: str = comment or ""
        self.is_deactivated: bool = deactivated
        self.is_default: bool = default
        self.is_secret: bool = secret
        self.is_ordered: bool = ordered
        for value in values or ():
            self.add_value(value)

    def __repr__(self) -> str:
        return (
            f"CfgNode({self.name!r}, values={self.values!r}, "
            f"comment={self.comment!r}, deactivated={self.is_deactivated}, "
            f"default={self.is_default}, secret={self.is_secret}, "
            f"ordered={self.is_ordered})"
        )

    def __str__(self) -> str:
        lines = []

        def _format(node: "CfgNode", depth: int):
            indent = "    " * depth
            values = f" [{', '.join(node.values)}]" if node.values else ""
            lines.append(f"{indent}{node.name}{values}")
            for child in node.iter_children():
                _format(child, depth + 1)

        _format(self, 0)
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        """
        Tree equality: same value sets, comment and flags at this node, and
        equal children under the same names. Child order is not compared.
        """
        if not isinstance(other, CfgNode):
            return NotImplemented
        return (
            self.same_content(other)
            and self.children.keys() == other.children.keys()
            and all(
                child == other.children[name] for name, child in self.children.items()
            )
        )

    __hash__ = None

    def same_content(self, other: "CfgNode") -> bool:
        """
        Compare this node's own state with ``other``, ignoring children.

        :param other: The node to compare against.
        :type other: ``CfgNode``
        :returns: ``True`` if values, comment and flags are equal.
        :rtype: ``bool``
        """
        return (
            self.value_set == other.value_set
            and self.comment == other.comment
            and self.is_deactivated == other.is_deactivated
            and self.is_default == other.is_default
            and self.is_secret == other.is_secret
        )

    @property
    def value_set(self) -> FrozenSet[str]:
        """
        The values of this node as a set.
        """
        return frozenset(self.values)

    @property
    def is_leaf(self) -> bool:
        """
        ``True`` if this node has no children.
        """
        return not self.children

    @property
    def is_empty(self) -> bool:
        """
        ``True`` if this node holds no values and has no children.
        """
        return not self.values and not self.children

    def add_value(self, value: str):
        """
        Add ``value`` to this node's values if not already present.

        :param value: The value to add.
        :type value: ``str``
        """
        if value is None:
            raise CfgmArgumentError(f"Cannot add None value to node '{self.name}'")
        if value not in self.values:
            self.values.append(value)

    def remove_value(self, value: str) -> bool:
        """
        Remove ``value`` from this node's values.

        :param value: The value to remove.
        :type value: ``str``
        :returns: ``True`` if the value was present.
        :rtype: ``bool``
        """
        if value in self.values:
            self.values.remove(value)
            return True
        return False

    def add_child(self, child: "CfgNode") -> "CfgNode":
        """
        Attach ``child`` to this node.

        :param child: The node to attach.
        :type child: ``CfgNode``
        :returns: ``child``
        :rtype: ``CfgNode``
        """
        if not isinstance(child, CfgNode):
            raise CfgmArgumentError(f"Invalid child node: {child!r}")
        if child.name in self.children:
            raise CfgmExistsError(
                f"Node '{self.name}' already has a child named '{child.name}'"
            )
        self.children[child.name] = child
        return child

    def remove_child(self, name: str) -> Optional["CfgNode"]:
        """
        Detach and return the child named ``name``, or ``None`` if absent.

        :param name: The child name.
        :type name: ``str``
        """
        return self.children.pop(name, None)

    def get_child(self, name: str) -> Optional["CfgNode"]:
        """
        Return the child named ``name``, or ``None`` if absent.

        :param name: The child name.
        :type name: ``str``
        """
        return self.children.get(name)

    def child_names(self) -> List[str]:
        """
        Return the names of this node's children in display order.

        :returns: Child names, sorted unless this node is ordered.
        :rtype: ``List[str]``
        """
        if self.is_ordered:
            return list(self.children.keys())
        return sorted(self.children.keys())

    def iter_children(self) -> Iterator["CfgNode"]:
        """
        Iterate over this node's children in display order.
        """
        for name in self.child_names():
            yield self.children[name]

    def find(self, path: Sequence[str]) -> Optional["CfgNode"]:
        """
        Return the node at ``path`` relative to this node.

        :param path: A sequence of child names. The empty path is this node.
        :type path: ``Sequence[str]``
        :returns: The node found or ``None``.
        :rtype: ``Optional[CfgNode]``
        """
        node = self
        for part in path:
            node = node.children.get(part)
            if node is None:
                return None
        return node

    def ensure_path(self, path: Sequence[str]) -> "CfgNode":
        """
        Return the node at ``path``, creating missing nodes on the way.

        :param path: A sequence of child names.
        :type path: ``Sequence[str]``
        :returns: The existing or newly created node.
        :rtype: ``CfgNode``
        """
        node = self
        for part in path:
            child = node.children.get(part)
            if child is None:
                _log_debug_node("Creating node '%s' under '%s'", part, node.name)
                child = node.add_child(CfgNode(part))
            node = child
        return node

    def walk(self, path: Sequence[str] = ()) -> Iterator[tuple]:
        """
        Pre-order walk of the subtree below this node.

        :param path: The path of this node, used as the prefix for yielded
                     paths.
        :type path: ``Sequence[str]``
        :returns: An iterator of ``(path, node)`` tuples for every descendant.
        """
        for child in self.iter_children():
            child_path = (*path, child.name)
            yield child_path, child
            yield from child.walk(child_path)

    def copy(self) -> "CfgNode":
        """
        Return a deep copy of the subtree rooted at this node.
        """
        node = CfgNode(
            self.name,
            values=self.values,
            comment=self.comment,
            deactivated=self.is_deactivated,
            default=self.is_default,
            secret=self.is_secret,
            ordered=self.is_ordered,
        )
        for child in self.children.values():
            node.add_child(child.copy())
        return node

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the children of this node to nested dictionaries: the
        inverse of ``from_dict()``. Comments and flags are not included.

        :returns: A dictionary mapping child names to their content.
        :rtype: ``Dict[str, Any]``
        """
        out = {}
        for child in self.iter_children():
            if child.children:
                out[child.name] = child.to_dict()
            elif child.values:
                out[child.name] = list(child.values)
            else:
                out[child.name] = None
        return out

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], name: str = "", ordered: bool = False
    ) -> "CfgNode":
        """
        Build a configuration tree from nested dictionaries.

        Dictionary values become child containers, lists become leaf values,
        strings become a single leaf value and ``None`` a valueless node.

        :param data: The dictionary to convert.
        :type data: ``Dict[str, Any]``
        :param name: The name of the returned root node.
        :type name: ``str``
        :param ordered: Keep dictionary order as the display order.
        :type ordered: ``bool``
        :returns: A new ``CfgNode`` tree.
        :rtype: ``CfgNode``
        """
        if not isinstance(data, dict):
            raise CfgmArgumentError(f"Expected dict for node '{name}': {data!r}")
        root = cls(name, ordered=ordered)
        for key, value in data.items():
            key = str(key)
            if isinstance(value, dict):
                root.add_child(cls.from_dict(value, name=key, ordered=ordered))
            elif isinstance(value, (list, tuple)):
                root.add_child(cls(key, values=[str(v) for v in value]))
            elif value is None:
                root.add_child(cls(key))
            else:
                root.add_child(cls(key, values=[str(value)]))
        return root


__all__ = [
    "CfgNode",
]
