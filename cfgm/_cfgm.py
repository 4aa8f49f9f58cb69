# Copyright Red Hat
#
# cfgm/_cfgm.py - Configuration Manager global definitions
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level cfgm package.
"""
from typing import Optional
import logging
import sys

_log = logging.getLogger("cfgm")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Name of the active (committed) configuration.
ACTIVE_CFG = "active"
#: Name of the working (candidate) configuration.
WORKING_CFG = "working"

#: Default path of the cfgm configuration file.
CFGM_CONFIG_FILE = "/etc/cfgm/cfgm.conf"

#: Replacement text for secret values in rendered output.
SECRET_PLACEHOLDER = "****************"

# Cfgm debugging subsystem mask (legacy interface)
CFGM_DEBUG_NODE = 1
CFGM_DEBUG_DIFF = 2
CFGM_DEBUG_COMMANDS = 4
CFGM_DEBUG_RENDER = 8
CFGM_DEBUG_ALL = (
    CFGM_DEBUG_NODE | CFGM_DEBUG_DIFF | CFGM_DEBUG_COMMANDS | CFGM_DEBUG_RENDER
)

# Cfgm debugging subsystem names
CFGM_SUBSYSTEM_NODE = "cfgm.node"
CFGM_SUBSYSTEM_DIFF = "cfgm.diff"
CFGM_SUBSYSTEM_COMMANDS = "cfgm.commands"
CFGM_SUBSYSTEM_RENDER = "cfgm.render"

_DEBUG_MASK_TO_SUBSYSTEM = {
    CFGM_DEBUG_NODE: CFGM_SUBSYSTEM_NODE,
    CFGM_DEBUG_DIFF: CFGM_SUBSYSTEM_DIFF,
    CFGM_DEBUG_COMMANDS: CFGM_SUBSYSTEM_COMMANDS,
    CFGM_DEBUG_RENDER: CFGM_SUBSYSTEM_RENDER,
}

_DEBUG_NAME_TO_MASK = {
    "node": CFGM_DEBUG_NODE,
    "diff": CFGM_DEBUG_DIFF,
    "commands": CFGM_DEBUG_COMMANDS,
    "render": CFGM_DEBUG_RENDER,
    "all": CFGM_DEBUG_ALL,
}

_DEFAULT_LOG_LEVEL = logging.WARNING

_debug_subsystems = set()

_CONSOLE_HANDLER: Optional[logging.Handler] = None


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True
        subsystem = getattr(record, "subsystem", None)
        return subsystem is None or subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``cfgm`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    cfgm_log = logging.getLogger("cfgm")

    for handler in cfgm_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``cfgm`` package.

    :param mask: the logical OR of the ``CFGM_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > CFGM_DEBUG_ALL:
        raise ValueError(f"Invalid cfgm debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    cfgm_log = logging.getLogger("cfgm")
    for handler in cfgm_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def parse_debug_mask(debug_arg: str) -> int:
    """
    Convert a comma separated list of subsystem names into a debug mask.

    :param debug_arg: Subsystem names, e.g. ``"diff,render"`` or ``"all"``.
    :type debug_arg: ``str``
    :returns: The corresponding ``CFGM_DEBUG_*`` mask.
    :rtype: ``int``
    """
    mask = 0
    for name in debug_arg.split(","):
        name = name.strip()
        if name not in _DEBUG_NAME_TO_MASK:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= _DEBUG_NAME_TO_MASK[name]
    return mask


def setup_logging(verbose: int = 0, debug: Optional[str] = None):
    """
    Set up cfgm logging.

    :param verbose: Verbosity level: 1 for INFO, 2 or more for DEBUG.
    :type verbose: ``int``
    :param debug: Optional comma separated list of debug subsystems.
    :type debug: ``Optional[str]``
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if verbose and verbose > 1:
        level = logging.DEBUG
    elif verbose and verbose > 0:
        level = logging.INFO

    cfgm_log = logging.getLogger("cfgm")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    cfgm_log.setLevel(level)
    if cfgm_log.hasHandlers():
        cfgm_log.handlers.clear()

    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)
    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(SubsystemFilter("cfgm"))

    cfgm_log.addHandler(_CONSOLE_HANDLER)

    if debug:
        set_debug_mask(parse_debug_mask(debug))


#
# Cfgm exception types
#


class CfgmError(Exception):
    """
    Base class for configuration manager errors.
    """


class CfgmArgumentError(CfgmError):
    """
    An invalid argument was passed to a configuration manager API call.
    """


class CfgmNotFoundError(CfgmError):
    """
    The requested object does not exist.
    """


class CfgmPathError(CfgmError):
    """
    A configuration path does not exist in either configuration tree.
    """

    def __init__(self, path):
        """
        Initialise a new ``CfgmPathError`` exception.

        :param path: The path that could not be resolved.
        """
        self.path = tuple(path)
        super().__init__(
            f"Specified configuration path is not valid: {' '.join(self.path)}"
        )


class CfgmExistsError(CfgmError):
    """
    A node with the same name already exists at this level of the tree.
    """


class CfgmParseError(CfgmError):
    """
    An error parsing a configuration file value.
    """


__all__ = [
    "ACTIVE_CFG",
    "WORKING_CFG",
    "CFGM_CONFIG_FILE",
    "SECRET_PLACEHOLDER",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "CFGM_SUBSYSTEM_NODE",
    "CFGM_SUBSYSTEM_DIFF",
    "CFGM_SUBSYSTEM_COMMANDS",
    "CFGM_SUBSYSTEM_RENDER",
    # Debug logging - bitmask interface
    "CFGM_DEBUG_NODE",
    "CFGM_DEBUG_DIFF",
    "CFGM_DEBUG_COMMANDS",
    "CFGM_DEBUG_RENDER",
    "CFGM_DEBUG_ALL",
    "set_debug_mask",
    "get_debug_mask",
    "parse_debug_mask",
    "setup_logging",
    "CfgmError",
    "CfgmArgumentError",
    "CfgmNotFoundError",
    "CfgmPathError",
    "CfgmExistsError",
    "CfgmParseError",
]
