# Copyright Red Hat
#
# tests/cfgdiff/test_commands.py - Command list extraction tests
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import json

from cfgm import CfgmArgumentError, CfgmNotFoundError
from cfgm.cfgdiff.commands import (
    Command,
    CommandExtractor,
    CommandList,
    CommandType,
    apply_cmds,
    get_cmds,
    get_cmds_diff,
    quote_value,
)
from cfgm.cfgdiff.engine import DiffEngine
from cfgm.cfgdiff.node import CfgNode

from ._util import make_active, make_working, make_rich, make_rich_changed


class TestCommand(unittest.TestCase):
    def test_str(self):
        cmd = Command(CommandType.SET, ("interfaces", "eth0", "address"), "10.0.0.1/24")
        self.assertEqual(str(cmd), "set interfaces eth0 address '10.0.0.1/24'")

    def test_str_no_value(self):
        cmd = Command(CommandType.DELETE, ("service", "ssh"))
        self.assertEqual(str(cmd), "delete service ssh")

    def test_str_quotes_path(self):
        cmd = Command(CommandType.SET, ("description", "my host"))
        self.assertEqual(str(cmd), "set description 'my host'")

    def test_args(self):
        cmd = Command(CommandType.COMMENT, ("interfaces", "eth0"), "WAN")
        self.assertEqual(cmd.args, ["interfaces", "eth0", "WAN"])
        self.assertEqual(Command(CommandType.SET, ("a",)).args, ["a"])

    def test_to_dict(self):
        cmd = Command(CommandType.SET, ("pw",), "x", secret=True)
        self.assertEqual(
            cmd.to_dict(),
            {"command": "set", "path": ["pw"], "value": "x", "secret": True},
        )

    def test_quote_value(self):
        self.assertEqual(quote_value("abc"), "'abc'")
        self.assertEqual(quote_value(""), "''")
        self.assertEqual(quote_value("it's"), "'it'\"'\"'s'")


class TestCommandList(unittest.TestCase):
    def test_empty(self):
        cmds = CommandList()
        self.assertFalse(cmds)
        self.assertEqual(len(cmds), 0)
        self.assertEqual(str(cmds), "")

    def test_application_order(self):
        cmds = CommandList(
            deletes=[Command(CommandType.DELETE, ("a",))],
            sets=[Command(CommandType.SET, ("b",), "1")],
            comments=[Command(CommandType.COMMENT, ("b",), "note")],
            activations=[Command(CommandType.DEACTIVATE, ("b",))],
        )
        self.assertEqual(
            cmds.lines(),
            ["delete a", "set b '1'", "comment b 'note'", "deactivate b"],
        )
        self.assertEqual(len(cmds), 4)
        self.assertEqual(cmds.del_list, [["a"]])
        self.assertEqual(cmds.set_list, [["b", "1"]])
        self.assertEqual(cmds.com_list, [["b", "note"]])

    def test_json(self):
        cmds = CommandList(sets=[Command(CommandType.SET, ("b",), "1")])
        data = json.loads(cmds.json())
        self.assertEqual(
            data["sets"], [{"command": "set", "path": ["b"], "value": "1"}]
        )
        self.assertEqual(data["deletes"], [])


class TestGetCmdsDiff(unittest.TestCase):
    def test_changed_address(self):
        cmds = get_cmds_diff(make_active(), make_working())
        self.assertEqual(
            cmds.del_list, [["interfaces", "eth0", "address", "10.0.0.1/24"]]
        )
        self.assertEqual(
            cmds.set_list, [["interfaces", "eth0", "address", "10.0.0.2/24"]]
        )
        self.assertEqual(cmds.com_list, [])
        self.assertEqual(
            str(cmds),
            "delete interfaces eth0 address '10.0.0.1/24'\n"
            "set interfaces eth0 address '10.0.0.2/24'",
        )

    def test_added_subtree(self):
        working = make_active()
        working.ensure_path(("firewall", "rule", "1")).add_child(
            CfgNode("action", values=["accept"])
        )
        cmds = get_cmds_diff(make_active(), working)
        self.assertEqual(cmds.deletes, [])
        self.assertEqual(cmds.set_list, [["firewall", "rule", "1", "action", "accept"]])

    def test_deleted_subtree(self):
        working = make_active()
        working.find(("interfaces",)).remove_child("eth1")
        cmds = get_cmds_diff(make_active(), working)
        self.assertEqual(cmds.del_list, [["interfaces", "eth1"]])
        self.assertEqual(cmds.sets, [])

    def test_identity(self):
        self.assertFalse(get_cmds_diff(make_rich(), make_rich()))
        self.assertFalse(get_cmds_diff(CfgNode(), CfgNode()))

    def test_rich(self):
        cmds = get_cmds_diff(make_rich(), make_rich_changed())
        self.assertEqual(
            cmds.lines(),
            [
                "delete interfaces eth0 address '10.0.0.1/24'",
                "delete interfaces eth0 mtu '1500'",
                "delete service ssh",
                "delete system login password 'hunter2'",
                "set firewall rule 10 action 'accept'",
                "set interfaces eth0 address '10.0.0.9/24'",
                "set interfaces eth0 mtu '9000'",
                "set system login password 'correct horse'",
                "set system options reboot-on-panic",
                "comment firewall rule 10 'allow all'",
                "comment interfaces eth0 'WAN uplink'",
                "deactivate firewall rule 10",
                "activate interfaces lo",
            ],
        )
        self.assertTrue(cmds.sets[3].secret)

    def test_round_trip(self):
        source, target = make_rich(), make_rich_changed()
        cmds = get_cmds_diff(source, target)
        self.assertEqual(apply_cmds(source, cmds), target)

    def test_round_trip_reverse(self):
        source, target = make_rich_changed(), make_rich()
        cmds = get_cmds_diff(source, target)
        self.assertIn(
            Command(
                CommandType.SET, ("interfaces", "eth0", "mtu"), "1500", default=True
            ),
            cmds.sets,
        )
        self.assertEqual(apply_cmds(source, cmds), target)

    def test_default_change_hidden(self):
        cmds = get_cmds_diff(make_rich_changed(), make_rich(), show_def=False)
        self.assertNotIn(["interfaces", "eth0", "mtu", "1500"], cmds.set_list)
        self.assertNotIn(["interfaces", "eth0", "mtu", "9000"], cmds.del_list)

    def test_comment_removed(self):
        working = make_rich()
        working.find(("interfaces", "eth0")).comment = ""
        cmds = get_cmds_diff(make_rich(), working)
        self.assertEqual(cmds.com_list, [["interfaces", "eth0", ""]])
        self.assertEqual(str(cmds), "comment interfaces eth0 ''")
        self.assertEqual(apply_cmds(make_rich(), cmds), working)

    def test_flags_change_without_values(self):
        working = make_active()
        working.find(("interfaces", "eth1")).is_secret = True
        cmds = get_cmds_diff(make_active(), working)
        self.assertEqual(
            cmds.sets, [Command(CommandType.SET, ("interfaces", "eth1"), secret=True)]
        )
        self.assertEqual(apply_cmds(make_active(), cmds), working)

    def test_path_restricted(self):
        cmds = get_cmds_diff(make_rich(), make_rich_changed(), path=("system",))
        self.assertEqual(cmds.del_list, [["system", "login", "password", "hunter2"]])
        self.assertEqual(
            cmds.set_list,
            [
                ["system", "login", "password", "correct horse"],
                ["system", "options", "reboot-on-panic"],
            ],
        )

    def test_secret_values_not_redacted(self):
        cmds = get_cmds_diff(make_rich(), make_rich_changed())
        self.assertIn("set system login password 'correct horse'", cmds.lines())


class TestGetCmds(unittest.TestCase):
    def test_active(self):
        self.assertEqual(
            get_cmds(make_active()).lines(),
            [
                "set interfaces eth0 address '10.0.0.1/24'",
                "set interfaces eth0 description 'uplink'",
                "set interfaces eth1 address '10.0.1.1/24'",
                "set system host-name 'r1'",
            ],
        )

    def test_no_deletes(self):
        self.assertEqual(get_cmds(make_rich()).deletes, [])

    def test_default_hidden(self):
        cmds = get_cmds(make_rich(), show_def=False)
        self.assertNotIn(["interfaces", "eth0", "mtu", "1500"], cmds.set_list)
        cmds = get_cmds(make_rich())
        self.assertIn(["interfaces", "eth0", "mtu", "1500"], cmds.set_list)

    def test_comments_and_deactivation(self):
        cmds = get_cmds(make_rich())
        self.assertEqual(cmds.com_list, [["interfaces", "eth0", "WAN"]])
        self.assertEqual(cmds.lines()[-1], "deactivate interfaces lo")

    def test_valueless_leaf(self):
        cmds = get_cmds(make_rich())
        self.assertIn(["service", "ssh", "disable-password-auth"], cmds.set_list)
        self.assertNotIn(["service", "ssh"], cmds.set_list)

    def test_effective(self):
        cmds = get_cmds(make_rich(), effective=True)
        self.assertFalse(any(cmd.path[:2] == ("interfaces", "lo") for cmd in cmds))

    def test_secret(self):
        cmds = get_cmds(make_rich())
        password = [c for c in cmds.sets if c.path == ("system", "login", "password")]
        self.assertEqual(len(password), 1)
        self.assertEqual(password[0].value, "hunter2")
        self.assertTrue(password[0].secret)

    def test_subtree(self):
        tree = make_active()
        cmds = get_cmds(tree.find(("interfaces", "eth1")), path=("interfaces", "eth1"))
        self.assertEqual(cmds.lines(), ["set interfaces eth1 address '10.0.1.1/24'"])

    def test_rebuild(self):
        tree = make_rich()
        self.assertEqual(apply_cmds(CfgNode(), get_cmds(tree)), tree)

    def test_none(self):
        with self.assertRaises(CfgmArgumentError):
            get_cmds(None)
        with self.assertRaises(CfgmArgumentError):
            CommandExtractor().extract_diff(None)


class TestExtractor(unittest.TestCase):
    def test_extract_diff(self):
        diff = DiffEngine().compute_diff(make_active(), make_working())
        cmds = CommandExtractor().extract_diff(diff)
        self.assertEqual(cmds, get_cmds_diff(make_active(), make_working()))


class TestApplyCmds(unittest.TestCase):
    def test_does_not_modify_input(self):
        tree = make_active()
        result = apply_cmds(tree, get_cmds_diff(make_active(), make_working()))
        self.assertEqual(tree, make_active())
        self.assertEqual(result, make_working())

    def test_missing_delete(self):
        cmds = CommandList(deletes=[Command(CommandType.DELETE, ("nope",))])
        with self.assertRaises(CfgmNotFoundError):
            apply_cmds(make_active(), cmds)

    def test_missing_value(self):
        cmds = CommandList(
            deletes=[Command(CommandType.DELETE, ("system", "host-name"), "r9")]
        )
        with self.assertRaises(CfgmNotFoundError):
            apply_cmds(make_active(), cmds)

    def test_delete_root(self):
        cmds = CommandList(deletes=[Command(CommandType.DELETE, ())])
        with self.assertRaises(CfgmArgumentError):
            apply_cmds(make_active(), cmds)

    def test_missing_comment_path(self):
        cmds = CommandList(comments=[Command(CommandType.COMMENT, ("nope",), "x")])
        with self.assertRaises(CfgmNotFoundError):
            apply_cmds(make_active(), cmds)

    def test_none(self):
        with self.assertRaises(CfgmArgumentError):
            apply_cmds(make_active(), None)
