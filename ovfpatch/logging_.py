#!/usr/bin/env python
#
# logging_.py - ovfpatch infrastructure for logging
#
# October 2026
# Copyright (c) 2026 the ovfpatch project developers.
# See the COPYRIGHT.txt file at the top-level directory of this distribution.
#
# This file is part of the ovfpatch project.
# It is subject to the license terms in the LICENSE.txt file found in the
# top-level directory of this distribution. No part of ovfpatch, including
# this file, may be copied, modified, propagated, or distributed except
# according to the terms contained in the LICENSE.txt file.

"""Logging module for ovfpatch.

**Classes**

.. autosummary::
  :nosignatures:

  CLILoggingFormatter

**Functions**

.. autosummary::
  :nosignatures:

  verbosity_for
"""

import logging

from colorlog import ColoredFormatter
from verboselogs import VerboseLogger

# Adds the SPAM, VERBOSE and NOTICE levels used throughout ovfpatch
logging.setLoggerClass(VerboseLogger)

logger = logging.getLogger(__name__)

VERBOSITY_LEVELS = [
    logging.CRITICAL, logging.ERROR, logging.WARNING,  # quieter
    logging.NOTICE,                  # default
    logging.INFO, logging.VERBOSE,   # more verbose
    logging.DEBUG, logging.SPAM,     # really noisy
]
"""Logging levels selectable by ``-q`` and ``-v``, quietest first."""


def verbosity_for(delta):
    """Get the logging level offset from the default by ``delta`` steps.

    Args:
      delta (int): 0 = default verbosity (NOTICE); positive implies more
          verbose; negative implies less verbose.
    Returns:
      int: Logging level as defined by :mod:`logging`.
    Examples:
      ::

        >>> logging.getLevelName(verbosity_for(0))
        'NOTICE'
        >>> logging.getLevelName(verbosity_for(2))
        'VERBOSE'
        >>> logging.getLevelName(verbosity_for(-10))
        'CRITICAL'
    """
    index = VERBOSITY_LEVELS.index(logging.NOTICE) + delta
    index = max(0, min(index, len(VERBOSITY_LEVELS) - 1))
    return VERBOSITY_LEVELS[index]


class CLILoggingFormatter(ColoredFormatter):
    r"""Colorized log formatter whose detail grows with the verbosity.

    At the default verbosity only the level and message are shown. Each
    more verbose level adds detail about where the message came from.

    .. seealso:: :class:`logging.Formatter`

    Args:
      verbosity (int): Logging level as defined by :mod:`logging`.

    Examples::

      >>> record = logging.LogRecord(
      ... "ovfpatch.doctests",  # logger name
      ... logging.INFO,         # message level
      ... "/fakemodule.py",     # file reporting the message
      ... 22,                   # line number in file
      ... "Hello world!",       # message text
      ... None,                 # %-style args for message
      ... None,                 # exception info
      ... "test_func")          # function reporting the message
      >>> record.created = 0
      >>> record.msecs = 0
      >>> CLILoggingFormatter(logging.NOTICE).format(
      ... record) # doctest:+ELLIPSIS
      '...INFO    :... Hello world!...'
      >>> CLILoggingFormatter(logging.INFO).format(
      ... record) # doctest:+ELLIPSIS
      '...INFO    : fakemodule ... Hello world!...'
      >>> CLILoggingFormatter(logging.VERBOSE).format(
      ... record) # doctest:+ELLIPSIS
      '...INFO    : fakemodule ... test_func()... Hello world!...'
    """

    LOG_COLORS = {
        'SPAM':     '',
        'DEBUG':    'blue',
        'VERBOSE':  'cyan',
        'INFO':     'green',
        'NOTICE':   'yellow',
        'WARNING':  'red',
        'ERROR':    'fg_white,bg_red',
        'CRITICAL': 'purple,bold',
    }

    FIELDS = (
        # (quietest verbosity that shows the field, format)
        (logging.CRITICAL, "%(levelname)-7s"),
        (logging.DEBUG, "%(asctime)s.%(msecs)d"),
        # widest module name is 15 characters (data_validation)
        (logging.INFO, "%(module)-15s"),
        (logging.DEBUG, "%(lineno)4d"),
        (logging.VERBOSE, "%(funcName)31s()"),
    )

    def __init__(self, verbosity=logging.INFO):
        fields = [fmt for (level, fmt) in self.FIELDS if verbosity <= level]
        super(CLILoggingFormatter, self).__init__(
            "%(log_color)s" + " : ".join(fields) + " :%(reset)s %(message)s",
            datefmt=("%H:%M:%S" if verbosity <= logging.DEBUG else None),
            reset=False,
            log_colors=self.LOG_COLORS)


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
