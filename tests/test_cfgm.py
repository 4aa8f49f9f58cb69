# Copyright Red Hat
#
# tests/test_cfgm.py - cfgm package unit tests
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import logging

import cfgm
import cfgm._cfgm


log = logging.getLogger()


class CfgmTestsSimple(unittest.TestCase):
    """Test cfgm module"""

    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.debug("Tearing down (%s)", self._testMethodName)
        cfgm.set_debug_mask(0)
        cfgm_log = logging.getLogger("cfgm")
        cfgm_log.handlers.clear()
        cfgm_log.setLevel(logging.NOTSET)

    def test_set_debug_mask(self):
        cfgm.set_debug_mask(cfgm.CFGM_DEBUG_ALL)
        self.assertEqual(cfgm.get_debug_mask(), cfgm.CFGM_DEBUG_ALL)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            cfgm.set_debug_mask(cfgm.CFGM_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            cfgm.set_debug_mask(-1)

    def test_parse_debug_mask(self):
        self.assertEqual(
            cfgm.parse_debug_mask("diff,render"),
            cfgm.CFGM_DEBUG_DIFF | cfgm.CFGM_DEBUG_RENDER,
        )
        self.assertEqual(cfgm.parse_debug_mask("all"), cfgm.CFGM_DEBUG_ALL)

    def test_parse_debug_mask_bad(self):
        with self.assertRaises(ValueError):
            cfgm.parse_debug_mask("diff,bogus")

    def test_SubsystemFilter(self):
        # Start with no subsystems enabled
        cfgm.set_debug_mask(0)
        sf = cfgm.SubsystemFilter("cfgm")
        self.assertEqual(sf.enabled_subsystems, set())
        # Enable a couple and ensure new filters initialise from cache
        cfgm.set_debug_mask(cfgm.CFGM_DEBUG_DIFF | cfgm.CFGM_DEBUG_COMMANDS)
        sf2 = cfgm.SubsystemFilter("cfgm")
        self.assertIn(cfgm.CFGM_SUBSYSTEM_DIFF, sf2.enabled_subsystems)
        self.assertIn(cfgm.CFGM_SUBSYSTEM_COMMANDS, sf2.enabled_subsystems)
        self.assertNotIn(cfgm.CFGM_SUBSYSTEM_NODE, sf2.enabled_subsystems)

    def test_SubsystemFilter_filter(self):
        sf = cfgm.SubsystemFilter("cfgm")
        sf.set_debug_subsystems([cfgm.CFGM_SUBSYSTEM_DIFF])

        def _record(level, subsystem=None):
            record = logging.LogRecord("cfgm", level, __file__, 1, "msg", (), None)
            if subsystem:
                record.subsystem = subsystem
            return record

        self.assertTrue(sf.filter(_record(logging.INFO, cfgm.CFGM_SUBSYSTEM_NODE)))
        self.assertTrue(sf.filter(_record(logging.DEBUG)))
        self.assertTrue(sf.filter(_record(logging.DEBUG, cfgm.CFGM_SUBSYSTEM_DIFF)))
        self.assertFalse(sf.filter(_record(logging.DEBUG, cfgm.CFGM_SUBSYSTEM_NODE)))

    def test_setup_logging(self):
        cfgm.setup_logging(verbose=2, debug="render")
        cfgm_log = logging.getLogger("cfgm")
        self.assertEqual(cfgm_log.level, logging.DEBUG)
        self.assertEqual(len(cfgm_log.handlers), 1)
        self.assertEqual(cfgm.get_debug_mask(), cfgm.CFGM_DEBUG_RENDER)

    def test_setup_logging_default(self):
        cfgm.setup_logging()
        self.assertEqual(logging.getLogger("cfgm").level, logging.WARNING)
        cfgm.setup_logging(verbose=1)
        self.assertEqual(logging.getLogger("cfgm").level, logging.INFO)
        self.assertEqual(len(logging.getLogger("cfgm").handlers), 1)

    def test_path_error(self):
        err = cfgm.CfgmPathError(["interfaces", "eth9"])
        self.assertEqual(err.path, ("interfaces", "eth9"))
        self.assertEqual(
            str(err), "Specified configuration path is not valid: interfaces eth9"
        )
        self.assertIsInstance(err, cfgm.CfgmError)

    def test_version(self):
        self.assertTrue(cfgm.__version__)

    def test_exports(self):
        import cfgm.term

        for module in (cfgm, cfgm.term):
            for name in module.__all__:
                self.assertTrue(hasattr(module, name), name)
        self.assertNotIn("shutdown_logging", cfgm.__all__)
        self.assertNotIn("write_output", cfgm.term.__all__)
