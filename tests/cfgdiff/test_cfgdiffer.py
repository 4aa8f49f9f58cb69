# Copyright Red Hat
#
# tests/cfgdiff/test_cfgdiffer.py - Configuration differ tests
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest

from cfgm import (
    ACTIVE_CFG,
    WORKING_CFG,
    CfgmArgumentError,
    CfgmNotFoundError,
    CfgmPathError,
)
from cfgm.cfgdiff import ConfigDiffer, DiffOptions, MemoryTreeSource
from cfgm.cfgdiff.node import CfgNode
from cfgm.term import TermControl

from ._util import make_active, make_working, make_rich, make_rich_changed


class TestMemoryTreeSource(unittest.TestCase):
    def test_get_tree(self):
        tree = make_active()
        source = MemoryTreeSource({ACTIVE_CFG: tree})
        self.assertIs(source.get_tree(ACTIVE_CFG), tree)

    def test_unknown(self):
        with self.assertRaises(CfgmNotFoundError):
            MemoryTreeSource().get_tree("missing")

    def test_set_tree_invalid(self):
        with self.assertRaises(CfgmArgumentError):
            MemoryTreeSource().set_tree(ACTIVE_CFG, {"a": None})


class TestConfigDiffer(unittest.TestCase):
    def setUp(self):
        source = MemoryTreeSource()
        source.set_tree(ACTIVE_CFG, make_active())
        source.set_tree(WORKING_CFG, make_working())
        source.set_tree("rich", make_rich())
        source.set_tree("rich-changed", make_rich_changed())
        self.differ = ConfigDiffer(source, term_control=TermControl(color="never"))

    def test_no_source(self):
        with self.assertRaises(CfgmArgumentError):
            ConfigDiffer(None)

    def test_compare(self):
        diff = self.differ.compare()
        self.assertEqual(diff.paths(), ["interfaces eth0 address"])

    def test_compare_unknown(self):
        with self.assertRaises(CfgmNotFoundError):
            self.differ.compare(ACTIVE_CFG, "candidate")

    def test_commands(self):
        cmds = self.differ.commands()
        self.assertEqual(
            cmds.lines(),
            [
                "delete interfaces eth0 address '10.0.0.1/24'",
                "set interfaces eth0 address '10.0.0.2/24'",
            ],
        )

    def test_show_config_diff(self):
        text = self.differ.show_config()
        self.assertIn("-        address 10.0.0.1/24", text.split("\n"))
        self.assertIn(" system {", text.split("\n"))

    def test_show_config_context(self):
        text = self.differ.show_config(context_diff=True)
        self.assertIn(" system { ... }", text.split("\n"))

    def test_show_config_cmds(self):
        text = self.differ.show_config(show_cmds=True)
        self.assertEqual(
            text,
            "delete interfaces eth0 address '10.0.0.1/24'\n"
            "set interfaces eth0 address '10.0.0.2/24'",
        )

    def test_show_config_path(self):
        text = self.differ.show_config(path=("system",))
        self.assertEqual(text, " host-name r1")

    def test_show_config_bad_path(self):
        with self.assertRaises(CfgmPathError) as cm:
            self.differ.show_config(path=("protocols", "bgp"))
        self.assertEqual(cm.exception.path, ("protocols", "bgp"))

    def test_show_single(self):
        text = self.differ.show_config(ACTIVE_CFG, ACTIVE_CFG)
        self.assertEqual(text.split("\n")[0], " interfaces {")
        self.assertFalse(any(line[0] in "+-" for line in text.split("\n")))

    def test_show_single_cmds(self):
        text = self.differ.show_config(
            ACTIVE_CFG, ACTIVE_CFG, path=("interfaces", "eth1"), show_cmds=True
        )
        self.assertEqual(text, "set interfaces eth1 address '10.0.1.1/24'")

    def test_show_single_leaf(self):
        text = self.differ.show_config(
            ACTIVE_CFG, ACTIVE_CFG, path=("system", "host-name")
        )
        self.assertEqual(text, " host-name r1")

    def test_show_single_bad_path(self):
        with self.assertRaises(CfgmPathError):
            self.differ.show_config(ACTIVE_CFG, ACTIVE_CFG, path=("nope",))

    def test_show_secret(self):
        text = self.differ.show_config("rich", "rich-changed", hide_secret=True)
        self.assertNotIn("hunter2", text)
        text = self.differ.show_config("rich", "rich-changed", show_cmds=True)
        self.assertIn("hunter2", text)

    def test_show_cmds_includes_defaults(self):
        text = self.differ.show_config("rich", "rich", show_cmds=True, show_def=False)
        self.assertIn("set interfaces eth0 mtu '1500'", text.split("\n"))

    def test_show_def_override(self):
        differ = ConfigDiffer(
            MemoryTreeSource({"rich": make_rich()}),
            options=DiffOptions(show_def=True),
            color="never",
        )
        self.assertIn("mtu 1500", differ.show_config("rich", "rich"))
        self.assertNotIn("mtu", differ.show_config("rich", "rich", show_def=False))

    def test_identical(self):
        self.assertEqual(
            self.differ.show_config("rich", "rich", context_diff=True, show_cmds=True),
            self.differ.show_config("rich", "rich", show_cmds=True),
        )
        source = MemoryTreeSource({"a": CfgNode(), "b": CfgNode()})
        differ = ConfigDiffer(source, color="never")
        self.assertEqual(differ.show_config("a", "b"), "")
        self.assertFalse(differ.commands("a", "b"))
