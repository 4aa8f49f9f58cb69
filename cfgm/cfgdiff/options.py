# Copyright Red Hat
#
# cfgm/cfgdiff/options.py - Configuration Manager config diff options
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration diff options.
"""
from dataclasses import dataclass, fields
from configparser import ConfigParser, Error as ConfigParserError
from argparse import Namespace
from os.path import exists
import logging

from cfgm import (
    CFGM_CONFIG_FILE,
    SECRET_PLACEHOLDER,
    CfgmArgumentError,
    CfgmParseError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

_CFGM_CFG_DIFF = "diff"

_BOOL_OPTIONS = ("show_def", "hide_secret", "context_diff", "show_cmds")
_INT_OPTIONS = ("context_lines",)
_STR_OPTIONS = ("secret_placeholder",)


@dataclass(frozen=True)
class DiffOptions:
    """
    Configuration comparison and display options.
    """

    #: Include nodes holding system default values in output
    show_def: bool = False
    #: Replace secret values with a placeholder in rendered text
    hide_secret: bool = False
    #: Render a context diff instead of the full tree
    context_diff: bool = False
    #: Render command lists instead of configuration text
    show_cmds: bool = False
    #: Number of unchanged sibling nodes shown around each change
    context_lines: int = 3
    #: Placeholder text used when hiding secret values
    secret_placeholder: str = SECRET_PLACEHOLDER

    def __post_init__(self):
        if self.context_lines < 0:
            raise CfgmArgumentError(
                f"context_lines must be non-negative: {self.context_lines}"
            )
        if not self.secret_placeholder:
            raise CfgmArgumentError("secret_placeholder cannot be empty")

    def __str__(self):
        """
        Return a human readable string representation of this
        ``DiffOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "DiffOptions":
        """
        Initialise DiffOptions from command line arguments.

        Construct a new ``DiffOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that are absent or ``None``
        take the default value.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``DiffOptions`` instance
        :rtype: ``DiffOptions``
        """
        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: getattr(cmd_args, name)
            for name in field_names
            if getattr(cmd_args, name, None) is not None
        }
        options = cls(**kwargs)
        _log_debug("Initialised DiffOptions from arguments: %s", repr(options))
        return options

    @classmethod
    def from_config_file(cls, config_file: str = CFGM_CONFIG_FILE) -> "DiffOptions":
        """
        Load ``DiffOptions`` defaults from the ``[diff]`` section of an
        INI-style configuration file located at ``config_file``.

        A missing file or section yields default options.

        :param config_file: path to cfgm.conf
        :type config_file: ``str``.
        :returns: A ``DiffOptions`` instance initialised from ``config_file``.
        :rtype: ``DiffOptions``
        """
        if not exists(config_file):
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise CfgmParseError(
                f"Error reading configuration file '{config_file}': {err}"
            ) from err

        if not cfg.has_section(_CFGM_CFG_DIFF):
            return cls()

        section = cfg[_CFGM_CFG_DIFF]
        kwargs = {}
        for name in section:
            try:
                if name in _BOOL_OPTIONS:
                    kwargs[name] = section.getboolean(name)
                elif name in _INT_OPTIONS:
                    kwargs[name] = section.getint(name)
                elif name in _STR_OPTIONS:
                    kwargs[name] = section[name]
                else:
                    _log_warn(
                        "Ignoring unknown option '%s' in %s", name, config_file
                    )
            except ValueError as err:
                raise CfgmParseError(
                    f"Invalid value for '{name}' in '{config_file}': {err}"
                ) from err

        try:
            options = cls(**kwargs)
        except CfgmArgumentError as err:
            raise CfgmParseError(f"Invalid options in '{config_file}': {err}") from err
        _log_debug("Initialised DiffOptions from %s: %s", config_file, repr(options))
        return options
