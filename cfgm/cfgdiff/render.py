# Copyright Red Hat
#
# cfgm/cfgdiff/render.py - Configuration Manager config diff renderer
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration tree and diff rendering.

Rendered configuration uses one line per node or leaf value, indented by
four spaces per level, with containers enclosed in braces. Every line
starts with a one character marker column:

    ' '  unchanged        '+'  added           '-'  deleted
    '>'  flags changed    '!'  deactivated
    'D'  deactivated by this change
    'A'  activated by this change
"""
from typing import List, Optional, Sequence
import logging

from cfgm import CFGM_SUBSYSTEM_RENDER, CfgmArgumentError
from cfgm.term import TermControl

from .commands import CommandList, CommandType, get_cmds, get_cmds_diff
from .difftypes import DiffType
from .engine import CfgDiff, CfgDiffNode, DiffEngine
from .node import CfgNode
from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_render(msg, *args, **kwargs):
    """A wrapper for render subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": CFGM_SUBSYSTEM_RENDER}, **kwargs)


PFX_NONE = " "
PFX_ADD = "+"
PFX_DEL = "-"
PFX_UPD = ">"
PFX_DEACT = "!"
PFX_DEACT_PENDING = "D"
PFX_ACT_PENDING = "A"

#: Indentation per tree level
INDENT = "    "

#: Marker text for elided unchanged siblings in context diffs
ELISION = "..."

_QUOTE_CHARS = set('{}";#\'')


def format_word(text: str) -> str:
    """
    Double quote ``text`` if it is empty or contains whitespace or
    characters that are significant in rendered configuration.

    :param text: A node name or value.
    :type text: ``str``
    :rtype: ``str``
    """
    if text and not any(c.isspace() or c in _QUOTE_CHARS for c in text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DiffRenderer:
    """Renders configuration trees, diff results and command lists as text."""

    def __init__(
        self,
        options: Optional[DiffOptions] = None,
        color: str = "auto",
        term_control: Optional[TermControl] = None,
    ):
        """
        Initialise a new ``DiffRenderer``.

        :param options: Display options: ``show_def``, ``hide_secret``,
                        ``context_lines`` and ``secret_placeholder`` are used.
        :type options: ``Optional[DiffOptions]``
        :param color: A string to control color rendering: "auto",
                      "always", or "never".
        :type color: ``str``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        """
        self.options: DiffOptions = options or DiffOptions()
        self.term_control: TermControl = term_control or TermControl(color=color)

        self.marker_map = {
            PFX_ADD: "GREEN",
            PFX_DEL: "RED",
            PFX_UPD: "YELLOW",
            PFX_DEACT_PENDING: "MAGENTA",
            PFX_ACT_PENDING: "CYAN",
        }
        self.command_map = {
            CommandType.DELETE: "RED",
            CommandType.SET: "GREEN",
            CommandType.COMMENT: "CYAN",
            CommandType.ACTIVATE: "YELLOW",
            CommandType.DEACTIVATE: "YELLOW",
        }

    #
    # Line formatting
    #

    def _line(self, marker: str, depth: int, text: str) -> str:
        line = f"{marker}{INDENT * depth}{text}"
        color = self.marker_map.get(marker)
        return self.term_control.colorize(color, line) if color else line

    def _visible(self, node: Optional[CfgNode]) -> bool:
        return node is not None and (self.options.show_def or not node.is_default)

    def _dvisible(self, dnode: CfgDiffNode) -> bool:
        return self._visible(dnode.old) or self._visible(dnode.new)

    def _value(self, node: CfgNode, value: str) -> str:
        if self.options.hide_secret and node.is_secret:
            return self.options.secret_placeholder
        return format_word(value)

    def _value_line(self, marker: str, depth: int, node: CfgNode, value: str) -> str:
        text = f"{format_word(node.name)} {self._value(node, value)}"
        return self._line(marker, depth, text)

    @staticmethod
    def _comment(node: CfgNode) -> str:
        return f"/* {node.comment} */"

    #
    # Single tree rendering
    #

    def _render_plain(self, node: CfgNode, depth: int, marker: str, lines: List[str]):
        """
        Render ``node`` and its subtree with a single marker.
        """
        if not self._visible(node):
            return
        if marker == PFX_NONE and node.is_deactivated:
            marker = PFX_DEACT

        if node.comment:
            lines.append(self._line(marker, depth, self._comment(node)))
        for value in node.values:
            lines.append(self._value_line(marker, depth, node, value))

        children = [child for child in node.iter_children() if self._visible(child)]
        name = format_word(node.name)
        if children:
            lines.append(self._line(marker, depth, f"{name} {{"))
            for child in children:
                self._render_plain(child, depth + 1, marker, lines)
            lines.append(self._line(marker, depth, "}"))
        elif not node.values:
            lines.append(self._line(marker, depth, name))

    def _render_collapsed(self, dnode: CfgDiffNode, depth: int, inherited: str, lines):
        """
        Render an unchanged node as context: leaf values in full, containers
        as a single elided line.
        """
        node = dnode.new
        marker = PFX_NONE
        if node.is_deactivated or inherited == PFX_DEACT:
            marker = PFX_DEACT
        for value in node.values:
            lines.append(self._value_line(marker, depth, node, value))
        name = format_word(node.name)
        if any(self._visible(child) for child in node.children.values()):
            lines.append(self._line(marker, depth, f"{name} {{ {ELISION} }}"))
        elif not node.values:
            lines.append(self._line(marker, depth, name))

    #
    # Diff rendering
    #

    @staticmethod
    def _head_marker(dnode: CfgDiffNode, inherited: str) -> str:
        change = dnode.change
        if change and change.deactivation_changed:
            return PFX_DEACT_PENDING if dnode.new.is_deactivated else PFX_ACT_PENDING
        if change and change.flags_changed:
            return PFX_UPD
        if dnode.new.is_deactivated or inherited == PFX_DEACT:
            return PFX_DEACT
        return PFX_NONE

    @staticmethod
    def _child_inherited(dnode: CfgDiffNode, inherited: str) -> str:
        if dnode.new.is_deactivated or inherited == PFX_DEACT:
            return PFX_DEACT
        return PFX_NONE

    def _render_own(self, dnode: CfgDiffNode, depth: int, head: str, lines: List[str]):
        """
        Render the comment and value lines of a node present in both trees.
        """
        old, new, change = dnode.old, dnode.new, dnode.change

        if change and change.comment_changed:
            if old.comment:
                lines.append(self._line(PFX_DEL, depth, self._comment(old)))
            if new.comment:
                lines.append(self._line(PFX_ADD, depth, self._comment(new)))
        elif new.comment:
            lines.append(self._line(head, depth, self._comment(new)))

        added = set(change.values.added) if change else set()
        if change:
            for value in change.values.removed:
                lines.append(self._value_line(PFX_DEL, depth, old, value))
        for value in new.values:
            marker = PFX_ADD if value in added else head
            lines.append(self._value_line(marker, depth, new, value))

    def _visible_children(self, dnode: CfgDiffNode) -> List[CfgDiffNode]:
        return [child for child in dnode.iter_children() if self._dvisible(child)]

    def _render_dnode(
        self, dnode: CfgDiffNode, depth: int, lines: List[str], inherited: str
    ):
        """
        Full-tree rendering of a difference node and its subtree.
        """
        if dnode.diff_type == DiffType.ADDED:
            self._render_plain(dnode.new, depth, PFX_ADD, lines)
            return
        if dnode.diff_type == DiffType.DELETED:
            self._render_plain(dnode.old, depth, PFX_DEL, lines)
            return
        if not self._dvisible(dnode):
            return

        head = self._head_marker(dnode, inherited)
        self._render_own(dnode, depth, head, lines)

        children = self._visible_children(dnode)
        name = format_word(dnode.name)
        if children:
            lines.append(self._line(head, depth, f"{name} {{"))
            child_inherited = self._child_inherited(dnode, inherited)
            for child in children:
                self._render_dnode(child, depth + 1, lines, child_inherited)
            lines.append(self._line(head, depth, "}"))
        elif not dnode.new.values:
            lines.append(self._line(head, depth, name))

    def _render_context(
        self, dnode: CfgDiffNode, depth: int, lines: List[str], inherited: str
    ):
        """
        Context rendering of a difference node that has changes.
        """
        children = self._visible_children(dnode)
        if dnode.diff_type in (DiffType.ADDED, DiffType.DELETED) or not children:
            self._render_dnode(dnode, depth, lines, inherited)
            return

        head = self._head_marker(dnode, inherited)
        self._render_own(dnode, depth, head, lines)
        name = format_word(dnode.name)
        lines.append(self._line(head, depth, f"{name} {{"))
        self._render_context_children(
            dnode, depth + 1, lines, self._child_inherited(dnode, inherited)
        )
        lines.append(self._line(head, depth, "}"))

    def _render_context_children(
        self, parent: CfgDiffNode, depth: int, lines: List[str], inherited: str
    ):
        children = self._visible_children(parent)
        changed = [i for i, child in enumerate(children) if child.has_changes]
        if not changed:
            lines.append(self._line(PFX_NONE, depth, ELISION))
            return

        window = self.options.context_lines
        shown = set()
        for i in changed:
            shown.update(range(max(0, i - window), min(len(children), i + window + 1)))

        last = -1
        for i in sorted(shown):
            if i != last + 1:
                lines.append(self._line(PFX_NONE, depth, ELISION))
            child = children[i]
            if child.has_changes:
                self._render_context(child, depth, lines, inherited)
            else:
                self._render_collapsed(child, depth, inherited, lines)
            last = i
        if last != len(children) - 1:
            lines.append(self._line(PFX_NONE, depth, ELISION))

    def render_diff(self, diff: CfgDiff, context_diff: Optional[bool] = None) -> str:
        """
        Render ``diff`` as configuration text with change markers.

        :param diff: The diff result to render.
        :type diff: ``CfgDiff``
        :param context_diff: Render only changed regions plus context. If
                             ``None`` the ``context_diff`` option is used.
        :type context_diff: ``Optional[bool]``
        :returns: The rendered diff.
        :rtype: ``str``
        """
        if diff is None:
            raise CfgmArgumentError("Diff result is required")
        if context_diff is None:
            context_diff = self.options.context_diff

        root = diff.root
        lines: List[str] = []
        inherited = PFX_DEACT if root.node.is_deactivated and root.path else PFX_NONE
        _log_debug_render(
            "Rendering %s diff at '%s'",
            "context" if context_diff else "full",
            " ".join(root.path) or "/",
        )

        if context_diff and not root.has_changes:
            return ""

        # A subtree root that is a leaf or that changed itself is shown as
        # the node.
        if root.path and (
            root.diff_type != DiffType.UNCHANGED or not self._visible_children(root)
        ):
            if context_diff:
                self._render_context(root, 0, lines, PFX_NONE)
            else:
                self._render_dnode(root, 0, lines, PFX_NONE)
            return "\n".join(lines)

        self._render_own(root, 0, self._head_marker(root, inherited), lines)
        if context_diff:
            self._render_context_children(root, 0, lines, inherited)
        else:
            for child in self._visible_children(root):
                self._render_dnode(child, 0, lines, inherited)
        return "\n".join(lines)

    def render_tree(self, cfg: CfgNode) -> str:
        """
        Render configuration tree ``cfg`` without change markers.

        :param cfg: The tree to render; the root's children are shown.
        :type cfg: ``CfgNode``
        :rtype: ``str``
        """
        if cfg is None:
            raise CfgmArgumentError("Configuration tree is required")
        lines: List[str] = []
        marker = PFX_DEACT if cfg.is_deactivated else PFX_NONE
        for child in cfg.iter_children():
            self._render_plain(child, 0, marker, lines)
        return "\n".join(lines)

    def render_cmds(self, cmds: CommandList) -> str:
        """
        Render a command list as one command per line. Secret values are
        never hidden.

        :param cmds: The commands to render.
        :type cmds: ``CommandList``
        :rtype: ``str``
        """
        if cmds is None:
            raise CfgmArgumentError("Command list is required")
        return "\n".join(
            self.term_control.colorize(self.command_map[cmd.cmd_type], str(cmd))
            for cmd in cmds
        )


# pylint: disable=too-many-arguments,too-many-positional-arguments
def show_cfg_diff(
    cfg1: CfgNode,
    cfg2: CfgNode,
    path: Sequence[str] = (),
    show_def: bool = False,
    hide_secret: bool = False,
    context_diff: bool = False,
    color: str = "auto",
) -> str:
    """
    Render the difference between ``cfg1`` and ``cfg2`` as text.

    :param cfg1: The source configuration tree.
    :param cfg2: The target configuration tree.
    :param path: Optional path of the subtree to compare.
    :param show_def: Include nodes holding default values.
    :param hide_secret: Replace secret values with a placeholder.
    :param context_diff: Render only changed regions plus context.
    :param color: "auto", "always", or "never".
    :rtype: ``str``
    """
    options = DiffOptions(
        show_def=show_def, hide_secret=hide_secret, context_diff=context_diff
    )
    diff = DiffEngine().compute_diff(cfg1, cfg2, options=options, path=path)
    return DiffRenderer(options, color=color).render_diff(diff)


def show_cfg(
    cfg: CfgNode, show_def: bool = False, hide_secret: bool = False, color="auto"
) -> str:
    """
    Render configuration tree ``cfg`` as text.
    """
    options = DiffOptions(show_def=show_def, hide_secret=hide_secret)
    return DiffRenderer(options, color=color).render_tree(cfg)


def show_cmds_diff(cfg1: CfgNode, cfg2: CfgNode, color: str = "auto") -> str:
    """
    Render the commands that transform ``cfg1`` into ``cfg2``.
    """
    return DiffRenderer(color=color).render_cmds(get_cmds_diff(cfg1, cfg2))


def show_cmds(cfg: CfgNode, color: str = "auto") -> str:
    """
    Render the commands that describe ``cfg``.
    """
    return DiffRenderer(color=color).render_cmds(get_cmds(cfg))


__all__ = [
    "DiffRenderer",
    "format_word",
    "show_cfg",
    "show_cfg_diff",
    "show_cmds",
    "show_cmds_diff",
]
