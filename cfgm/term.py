# Copyright Red Hat
#
# cfgm/term.py - Configuration Manager terminal control
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal color control.
"""
from typing import List, Optional, TextIO
import curses
import sys

#: Valid values for the ``color`` argument.
COLOR_MODES = ("auto", "always", "never")


class TermControl:
    """
    Terminal color sequences for diff output.

    Uses the curses package to look up the foreground color sequences for
    the current terminal. Each color attribute holds the control string
    for that color, or the empty string if the stream is not a terminal,
    color is disabled, or the terminal has no color support:

        >>> term = TermControl()
        >>> print(term.GREEN + "+ added" + term.NORMAL)

    Passing ``color="always"`` forces color output even when the stream
    is not a tty, falling back to plain ANSI sequences if no terminfo
    entry is available.
    """

    NORMAL: str = ""  #: Turn off all modes
    BOLD: str = ""  #: Turn on bold mode

    BLACK: str = ""  #: Black foreground color
    BLUE: str = ""  #: Blue foreground color
    GREEN: str = ""  #: Green foreground color
    CYAN: str = ""  #: Cyan foreground color
    RED: str = ""  #: Red foreground color
    MAGENTA: str = ""  #: Magenta foreground color
    YELLOW: str = ""  #: Yellow foreground color
    WHITE: str = ""  #: White foreground color

    _ANSI_COLORS: List[str] = "BLACK RED GREEN YELLOW BLUE MAGENTA CYAN WHITE".split()

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialize terminal color capabilities.

        :param term_stream: Output stream to probe for capabilities.
        :type term_stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always", or
                      "never".
        :type color: ``str``
        """
        if color not in COLOR_MODES:
            raise ValueError(f"Invalid color mode: {color}")

        if term_stream is None:
            term_stream = sys.stdout

        self.term_stream = term_stream
        self.color = color

        if color == "never":
            return

        if color != "always":
            if not hasattr(term_stream, "isatty") or not term_stream.isatty():
                return

        # curses.error does not behave as a normal exception class here.
        try:
            curses.setupterm()
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._force_ansi()
            return  # pragma: no cover

        self.NORMAL = self._tigetstr("sgr0")
        self.BOLD = self._tigetstr("bold")

        set_fg_ansi = self._tigetstr("setaf")
        if set_fg_ansi:
            set_fg_ansi = set_fg_ansi.encode("utf8")
            for i, name in enumerate(self._ANSI_COLORS):
                setattr(self, name, curses.tparm(set_fg_ansi, i).decode("utf8") or "")
        elif color == "always":
            self._force_ansi()

    def _force_ansi(self):
        for i, name in enumerate(self._ANSI_COLORS):
            setattr(self, name, f"\033[0;3{i}m")
        self.NORMAL = "\033[0m"

    @staticmethod
    def _tigetstr(cap_name):
        # Strip terminfo delay annotations of the form "$<2>".
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]

    def colorize(self, color: str, text: str) -> str:
        """
        Wrap ``text`` in the named color and a reset sequence.

        :param color: A color attribute name, e.g. ``"GREEN"``.
        :type color: ``str``
        :param text: The text to wrap.
        :type text: ``str``
        :returns: The wrapped text, or ``text`` unchanged if color is off.
        :rtype: ``str``
        """
        code = getattr(self, color, "")
        if not code:
            return text
        return f"{code}{text}{self.NORMAL}"


__all__ = [
    "COLOR_MODES",
    "TermControl",
]
