#!/usr/bin/env python
#
# data_validation.py - Helper libraries to validate data sanity
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

"""Checks applied to user-supplied values before any file is touched.

**Exceptions**

.. autosummary::
  :nosignatures:

  InvalidInputError
  ValueUnsupportedError
  ValueTooLowError
  ValueTooHighError

**Functions**

.. autosummary::
  :nosignatures:

  alphanum_split
  natural_sort
  validate_int
  validate_resource_type
  canonicalize_choice

**Constants**

.. autosummary::

  RESOURCE_TYPE_MAX
"""

import re

RESOURCE_TYPE_MAX = 65535
"""CIM ``ResourceType`` is a uint16 in the RASD schema."""

_DIGITS = re.compile('([0-9]+)')


def alphanum_split(key):
    """Split the key into alternating text and integer tokens.

    Examples:
      ::

        >>> alphanum_split("disk1part27")
        ['disk', 1, 'part', 27, '']
        >>> alphanum_split("1st.ovf")
        ['', 1, 'st.ovf']
    """
    tokens = _DIGITS.split(key)
    # re.split puts the captured digit runs at the odd indices
    tokens[1::2] = [int(token) for token in tokens[1::2]]
    return tokens


def natural_sort(iterable):
    """Sort file names so that embedded numbers compare by value.

    Examples:
      ::

        >>> natural_sort(["disk10.vmdk", "disk2.vmdk", "disk1.vmdk"])
        ['disk1.vmdk', 'disk2.vmdk', 'disk10.vmdk']
    """
    return sorted(iterable, key=alphanum_split)


def validate_int(string, minimum=None, maximum=None, label="input"):
    """Convert the given value to an integer and check its bounds.

    Args:
      string (str): Value to convert; surrounding whitespace is ignored.
      minimum (int): Lowest accepted value, if any.
      maximum (int): Highest accepted value, if any.
      label (str): Name of the value, for error messages.

    Returns:
      int: Validated integer value

    Raises:
      ValueUnsupportedError: if ``string`` is not an integer at all
      ValueTooLowError: if the value is below ``minimum``
      ValueTooHighError: if the value is above ``maximum``

    Examples:
      ::

        >>> validate_int('35')
        35
        >>> try:
        ...     validate_int('sound', label='resource type')
        ... except ValueUnsupportedError as e:
        ...     print(e)
        Unsupported value 'sound' for resource type - expected integer
        >>> try:
        ...     validate_int('100', label='x', maximum=10)
        ... except ValueTooHighError as e:
        ...     print(e)
        Value '100' for x is too high - must be at most 10
    """
    try:
        value = int(string)
    except (TypeError, ValueError):
        raise ValueUnsupportedError(label, string, "integer")
    if minimum is not None and value < minimum:
        raise ValueTooLowError(label, value, minimum)
    if maximum is not None and value > maximum:
        raise ValueTooHighError(label, value, maximum)
    return value


def validate_resource_type(value):
    """Validate a CIM ``ResourceType`` given by the user.

    Examples:
      ::

        >>> validate_resource_type(" 35 ")
        35
        >>> try:
        ...     validate_resource_type(-1)
        ... except ValueTooLowError as e:
        ...     print(e)
        Value '-1' for resource type is too low - must be at least 0
    """
    return validate_int(value, minimum=0, maximum=RESOURCE_TYPE_MAX,
                        label="resource type")


def canonicalize_choice(label, user_input, choices):
    """Match user input case-insensitively against a list of choices.

    Args:
      label (str): Name of the value, for error messages.
      user_input (str): User-provided string
      choices (list): Valid (lower-case) values
    Returns:
      str: The matching entry from ``choices``
    Raises:
      ValueUnsupportedError: if nothing in ``choices`` matches.
    Examples:
      ::

        >>> canonicalize_choice("method", "XML", ["auto", "xml", "text"])
        'xml'
    """
    value = str(user_input).strip().lower()
    if value not in choices:
        raise ValueUnsupportedError(label, user_input, choices)
    return value


class InvalidInputError(ValueError):
    """The user asked for something that cannot be done as stated."""


class ValueUnsupportedError(InvalidInputError):
    """A value was given that is not one of the supported ones.

    Args:
      value_type (str): What the value is for, e.g. ``"patch method"``.
      actual_value (object): The rejected value.
      expected_value (object): Accepted value(s) or a bound.
    """

    template = ("Unsupported value '{actual}' for {label} - "
                "expected {expected}")

    def __init__(self, value_type, actual_value, expected_value):
        """Create an instance of this class."""
        self.value_type = value_type
        self.actual_value = actual_value
        self.expected_value = expected_value
        super(ValueUnsupportedError, self).__init__(str(self))

    def __str__(self):
        return self.template.format(actual=self.actual_value,
                                    label=self.value_type,
                                    expected=self.expected_value)


class ValueTooLowError(ValueUnsupportedError):
    """A number was below the lowest supported value."""

    template = ("Value '{actual}' for {label} is too low - "
                "must be at least {expected}")


class ValueTooHighError(ValueUnsupportedError):
    """A number was above the highest supported value."""

    template = ("Value '{actual}' for {label} is too high - "
                "must be at most {expected}")


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
