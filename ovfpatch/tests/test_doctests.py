#!/usr/bin/env python
#
# test_doctests.py - test runner for ovfpatch doctests
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

"""Test runner for ovfpatch doctest tests."""

import doctest
import importlib
import logging
import unittest
from logging import NullHandler

logging.getLogger('ovfpatch').addHandler(NullHandler())


class TestDoctests(unittest.TestCase):
    """Run the examples embedded in each module's docstrings."""

    MODULES = [
        'ovfpatch.data_validation',
        'ovfpatch.fetch',
        'ovfpatch.logging_',
        'ovfpatch.manifest',
        'ovfpatch.ui.cli',
        'ovfpatch.utilities',
        'ovfpatch.xml_file',
    ]

    def test_doctests(self):
        """Every docstring example gives the documented output."""
        for name in self.MODULES:
            (failures, tests) = doctest.testmod(
                importlib.import_module(name), report=True)
            self.assertGreater(tests, 0, name)
            self.assertEqual(0, failures,
                             "{0} had {1} failing example(s)"
                             .format(name, failures))
