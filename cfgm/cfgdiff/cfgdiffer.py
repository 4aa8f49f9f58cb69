# Copyright Red Hat
#
# cfgm/cfgdiff/cfgdiffer.py - Configuration Manager config differ
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level cfgdiff interface.
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Optional, Sequence
import logging

from cfgm import (
    ACTIVE_CFG,
    WORKING_CFG,
    CfgmArgumentError,
    CfgmNotFoundError,
    CfgmPathError,
)
from cfgm.term import TermControl

from .commands import CommandExtractor, CommandList
from .engine import CfgDiff, DiffEngine
from .node import CfgNode
from .options import DiffOptions
from .render import DiffRenderer

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


class TreeSource(ABC):
    """
    Supplies materialized configuration trees by name, for example
    ``ACTIVE_CFG`` and ``WORKING_CFG``.
    """

    @abstractmethod
    def get_tree(self, name: str) -> CfgNode:
        """
        Return the configuration tree named ``name``.

        :param name: The configuration name.
        :type name: ``str``
        :returns: The root of the named configuration tree.
        :rtype: ``CfgNode``
        :raises CfgmNotFoundError: if no such configuration exists.
        """


class MemoryTreeSource(TreeSource):
    """
    A ``TreeSource`` holding already-built trees in memory.
    """

    def __init__(self, trees: Optional[Dict[str, CfgNode]] = None):
        """
        Initialise a new ``MemoryTreeSource``.

        :param trees: Initial mapping of configuration names to trees.
        :type trees: ``Optional[Dict[str, CfgNode]]``
        """
        self._trees: Dict[str, CfgNode] = dict(trees or {})

    def set_tree(self, name: str, tree: CfgNode):
        """
        Register ``tree`` under ``name``, replacing any previous tree.
        """
        if not isinstance(tree, CfgNode):
            raise CfgmArgumentError(f"Invalid configuration tree for '{name}'")
        self._trees[name] = tree

    def get_tree(self, name: str) -> CfgNode:
        try:
            return self._trees[name]
        except KeyError as err:
            raise CfgmNotFoundError(f"Unknown configuration: {name}") from err


class ConfigDiffer:
    """
    Top-level interface for comparing and showing named configurations.
    """

    def __init__(
        self,
        source: TreeSource,
        options: Optional[DiffOptions] = None,
        color: str = "auto",
        term_control: Optional[TermControl] = None,
    ):
        """
        Initialise a new ``ConfigDiffer``.

        :param source: The tree source used to resolve configuration names.
        :type source: ``TreeSource``
        :param options: Default options for this ``ConfigDiffer`` instance.
        :type options: ``Optional[DiffOptions]``
        :param color: A string to control color rendering: "auto",
                      "always", or "never".
        :type color: ``str``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        """
        if source is None:
            raise CfgmArgumentError("A tree source is required")
        self.source = source
        self.options = options or DiffOptions()
        self.term_control = term_control or TermControl(color=color)
        self.engine = DiffEngine()

    def compare(
        self,
        cfg1: str = ACTIVE_CFG,
        cfg2: str = WORKING_CFG,
        path: Sequence[str] = (),
        options: Optional[DiffOptions] = None,
    ) -> CfgDiff:
        """
        Compare two named configurations.

        Both trees are resolved before the comparison starts so that a
        failure to load either one is reported without doing any work.

        :param cfg1: The name of the source configuration.
        :type cfg1: ``str``
        :param cfg2: The name of the target configuration.
        :type cfg2: ``str``
        :param path: Optional path of the subtree to compare.
        :type path: ``Sequence[str]``
        :param options: Options overriding this instance's defaults.
        :type options: ``Optional[DiffOptions]``
        :returns: The comparison result.
        :rtype: ``CfgDiff``
        """
        tree1 = self.source.get_tree(cfg1)
        tree2 = self.source.get_tree(cfg2)
        _log_debug("Comparing '%s' to '%s'", cfg1, cfg2)
        return self.engine.compute_diff(
            tree1, tree2, options=options or self.options, path=path
        )

    def commands(
        self,
        cfg1: str = ACTIVE_CFG,
        cfg2: str = WORKING_CFG,
        path: Sequence[str] = (),
    ) -> CommandList:
        """
        Return the commands that transform configuration ``cfg1`` into
        ``cfg2``.
        """
        diff = self.compare(cfg1, cfg2, path=path)
        return CommandExtractor().extract_diff(diff)

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def show_config(
        self,
        cfg1: str = ACTIVE_CFG,
        cfg2: str = WORKING_CFG,
        path: Sequence[str] = (),
        show_def: Optional[bool] = None,
        hide_secret: Optional[bool] = None,
        context_diff: Optional[bool] = None,
        show_cmds: Optional[bool] = None,
    ) -> str:
        """
        Show a configuration, or the difference between two configurations.

        If ``cfg1`` and ``cfg2`` name the same configuration it is shown on
        its own, either as configuration text or as commands. Otherwise the
        difference is shown as a diff or as the commands that transform
        ``cfg1`` into ``cfg2``. Arguments left as ``None`` take the value
        from this instance's options.

        :param cfg1: The name of the source configuration.
        :param cfg2: The name of the target configuration.
        :param path: Optional path of the subtree to show.
        :param show_def: Include nodes holding default values in
                         configuration text. Commands always include them.
        :param hide_secret: Replace secret values with a placeholder.
        :param context_diff: Show only changed regions plus context.
        :param show_cmds: Show commands instead of configuration text.
        :returns: The rendered output.
        :rtype: ``str``
        """
        overrides = {
            name: value
            for name, value in (
                ("show_def", show_def),
                ("hide_secret", hide_secret),
                ("context_diff", context_diff),
                ("show_cmds", show_cmds),
            )
            if value is not None
        }
        options = replace(self.options, **overrides)
        renderer = DiffRenderer(options, term_control=self.term_control)
        path = tuple(path)

        if cfg1 == cfg2:
            tree = self.source.get_tree(cfg1)
            node = tree.find(path)
            if node is None:
                raise CfgmPathError(path)
            if options.show_cmds:
                cmds = CommandExtractor().extract_tree(node, path)
                return renderer.render_cmds(cmds)
            if path and node.is_leaf:
                diff = self.engine.compute_diff(tree, tree, options, path)
                return renderer.render_diff(diff, context_diff=False)
            return renderer.render_tree(node)

        diff = self.compare(cfg1, cfg2, path=path, options=options)
        if options.show_cmds:
            return renderer.render_cmds(CommandExtractor().extract_diff(diff))
        return renderer.render_diff(diff)


__all__ = [
    "ConfigDiffer",
    "MemoryTreeSource",
    "TreeSource",
]
