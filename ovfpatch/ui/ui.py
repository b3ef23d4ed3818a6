#!/usr/bin/env python
#
# ui.py - abstraction between the CLI and library callers
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

"""How commands ask the user before doing something risky.

**Classes**

.. autosummary::
  :nosignatures:

  UI
"""

import logging
import sys

logger = logging.getLogger(__name__)


class UI(object):
    """Non-interactive user interface.

    Commands driven from library code or tests get this class, which never
    prompts: every question gets :attr:`default_confirm_response`. The CLI
    subclass asks on the terminal instead.

    Args:
      force (bool): See :attr:`force`.
    """

    def __init__(self, force=False):
        self.force = force
        """Agree to every prompt without asking."""
        self.default_confirm_response = True
        """Answer given by :meth:`ask` when nobody is asked."""

    def ask(self, prompt):   # pylint: disable=unused-argument
        """Get a yes/no answer to ``prompt``. Subclasses really ask.

        Returns:
          bool: :attr:`default_confirm_response`
        """
        return self.default_confirm_response

    def confirm(self, prompt):
        """Check whether the user agrees to the operation in ``prompt``.

        Args:
          prompt (str): Question for the user.
        Returns:
          bool: ``True`` if the user agrees (or :attr:`force` is set).
        """
        if self.force:
            logger.warning("Automatically agreeing to '%s'", prompt)
            return True
        return self.ask(prompt)

    def confirm_or_die(self, prompt):
        """Like :meth:`confirm`, but exit the program if the user declines.

        Raises:
          SystemExit: if the user declines.
        """
        if not self.confirm(prompt):
            sys.exit("Aborting.")
