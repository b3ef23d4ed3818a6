#!/usr/bin/env python
#
# cli.py - CLI handling for ovfpatch
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
#
# PYTHON_ARGCOMPLETE_OK

"""CLI entry point for ovfpatch.

**Classes**

.. autosummary::
  :nosignatures:

  CLI

**Functions**

.. autosummary::
  :nosignatures:

  main
  pack_tokens
"""

import argparse
import logging
import os
import re
import sys
import textwrap

from shutil import get_terminal_size

from ovfpatch import __version_long__
from ovfpatch.commands import command_classes
from ovfpatch.data_validation import InvalidInputError
from ovfpatch.logging_ import CLILoggingFormatter, verbosity_for
from .ui import UI

logger = logging.getLogger(__name__)

USAGE_GROUP = re.compile(r"""
  \(.*?\)+   |  # alternatives in (possibly nested) parens
  \[.*?\]+   |  # optional params in (possibly nested) brackets
  -\S+\s+\S+ |  # option with its metavar
  \S+           # positional
""", re.VERBOSE)
"""One unbreakable chunk of a usage string."""

EXAMPLE_PARAM = re.compile(r"""
  -\S+[ =]\S+   |  # option with a simple value
  -\S+[ =]".*?" |  # option with a quoted value
  \S+              # anything else
""", re.VERBOSE)
"""One unbreakable chunk of an example command line."""

GLOBAL_OPTIONS = ('_verbosity', '_quietude', '_force', '_subcommand')
"""Parsed args that belong to the CLI rather than to a command."""


def pack_tokens(tokens, first, indent, limit, continuation=""):
    r"""Lay out tokens on lines shorter than ``limit`` columns.

    Args:
      tokens (list): Strings that must not be split.
      first (str): Start of the first line.
      indent (str): Start of each following line.
      limit (int): A line is broken before reaching this length.
      continuation (str): Appended to every line that is broken.
    Returns:
      list: Output lines.
    Examples:
      ::

        >>> pack_tokens(["a", "bb", "ccc"], "$", "  ", 6, " \\")
        ['$ a bb \\', '   ccc']
    """
    lines = []
    line = first
    for token in tokens:
        if len(line) + len(token) >= limit:
            lines.append(line + continuation)
            line = indent
        line += " " + token
    lines.append(line)
    return lines


class CLI(UI):
    """Command-line user interface for ovfpatch.

    .. autosummary::
      :nosignatures:

      add_subparser
      adjust_verbosity
      ask
      fill_examples
      fill_usage
      main
      parse_args
      run
      set_verbosity
      stop_logging
    """

    def __init__(self, terminal_width=None):
        """Create the argument parsers for every registered command.

        Args:
          terminal_width (int): Wrap output to this many columns rather
              than the width of the actual terminal.
        """
        super(CLI, self).__init__(force=True)
        self.input = input
        """Function used to read answers to prompts."""
        self.log_handler = None
        self.package_logger = None
        self._terminal_width = terminal_width
        self.subparser_lookup = {}
        """Subcommand name or alias -> its parser."""

        self.parser = self.create_parser()
        self.subparsers = self.parser.add_subparsers(
            prog="ovfpatch", dest='_subcommand', metavar="<command>",
            title="commands")
        for klass in command_classes:
            # each subparser holds on to its instance (args.instance)
            klass(self).create_subparser()

        try:
            import argcomplete
            argcomplete.autocomplete(self.parser)
        except ImportError:
            pass

    @property
    def terminal_width(self):
        """The width of the terminal in columns."""
        if not self._terminal_width:
            try:
                self._terminal_width = get_terminal_size().columns
            except ValueError:
                # stdout has been detached
                pass
            if not self._terminal_width or self._terminal_width <= 0:
                self._terminal_width = 80
        return self._terminal_width

    def fill_usage(self, subcommand, usage_list):
        """Lay out the usage strings of a subcommand for ``--help``.

        Prepends ``ovfpatch <subcommand> --help`` and wraps each usage
        string to :attr:`terminal_width` without splitting a parameter
        group such as ``[-o OUTPUT]``.

        Examples:
          ::

            >>> print(CLI(60).fill_usage('remove-devices',
            ...       ["PACKAGE_DIR [-t N] [-m METHOD] [--no-manifest]"]))
            <BLANKLINE>
              ovfpatch remove-devices --help
              ovfpatch <opts> remove-devices PACKAGE_DIR [-t N]
                                             [-m METHOD] [--no-manifest]
        """
        output_lines = ["\n  ovfpatch {0} --help".format(subcommand)]
        prefix = "  ovfpatch <opts> {0}".format(subcommand)
        width = self.terminal_width
        for usage in usage_list:
            groups = USAGE_GROUP.findall(usage)
            # Hang wrapped groups under the subcommand name if they fit
            if len(prefix) + max(len(g) for g in groups) >= width:
                indent = " " * 10
            else:
                indent = " " * len(prefix)
            output_lines.extend(pack_tokens(groups, prefix, indent, width))
        return "\n".join(output_lines)

    def fill_examples(self, example_list):
        r"""Lay out (description, command line) examples for ``--help``.

        Descriptions are word-wrapped; single-line commands are wrapped with
        backslash continuations and a hanging indent. Multi-line commands
        are only indented.

        Examples:
          ::

            >>> print(CLI(60).fill_examples([
            ...  ("Download an appliance, strip its sound card, and write"
            ...   " the result beside the download.",
            ...   'ovfpatch prepare https://example.com/appliance.ova'
            ...   ' -o appliance-modified.ova'),
            ... ]))
            Examples:
              Download an appliance, strip its sound card, and write
              the result beside the download.
            <BLANKLINE>
                ovfpatch prepare https://example.com/appliance.ova \
                    -o appliance-modified.ova
        """
        output_lines = ["Examples:"]
        width = self.terminal_width
        for (desc, example) in example_list:
            if len(output_lines) > 1:
                output_lines.append("")
            output_lines.extend(textwrap.wrap(
                desc, width=width - 1, initial_indent="  ",
                subsequent_indent="  ", break_on_hyphens=False))
            output_lines.append("")
            if "\n" in example:
                output_lines.extend("    " + line
                                    for line in example.splitlines())
            else:
                output_lines.extend(pack_tokens(
                    EXAMPLE_PARAM.findall(example), "   ", " " * 7,
                    width - 4, continuation=" \\"))
        return "\n".join(output_lines)

    def adjust_verbosity(self, delta):
        """Set the logging level ``delta`` steps away from the default.

        Args:
          delta (int): Positive is more verbose, negative is quieter.
        """
        self.set_verbosity(verbosity_for(delta))

    def set_verbosity(self, level):
        """Log to stderr at the given level, via a colorized formatter.

        Args:
          level (int): Logging level as defined in :mod:`logging`.
        """
        if not self.log_handler:
            self.log_handler = logging.StreamHandler()
        self.log_handler.setLevel(level)
        self.log_handler.setFormatter(CLILoggingFormatter(level))
        if not self.package_logger:
            self.package_logger = logging.getLogger('ovfpatch')
            self.package_logger.addHandler(self.log_handler)
        self.package_logger.setLevel(level)
        logger.debug("Verbosity level is now %s",
                     logging.getLevelName(level))

    def stop_logging(self):
        """Detach the handler installed by :meth:`set_verbosity`, if any."""
        if self.package_logger:
            self.package_logger.removeHandler(self.log_handler)
            self.package_logger = None
            self.log_handler.close()
            self.log_handler = None

    def ask(self, prompt):
        """Ask a yes/no question on the terminal until answered.

        Args:
          prompt (str): Question, wrapped to the terminal width.
        Returns:
          bool: ``True`` for yes (the default), ``False`` for no.
        """
        lines = []
        for line in prompt.splitlines():
            lines.extend(textwrap.wrap(line, width=self.terminal_width - 1,
                                       break_on_hyphens=False))
        prompt = "\n".join(lines)

        while True:
            ans = self.input("{0} [y] ".format(prompt)).strip()
            if ans in ('', 'y', 'Y'):
                return True
            if ans in ('n', 'N'):
                return False
            print("Please enter 'y' or 'n'")

    def create_parser(self):
        """Build the top-level ``ovfpatch`` parser and its global options.

        Returns:
          argparse.ArgumentParser: The new parser.
        """
        # argparse wraps its own help text to $COLUMNS
        os.environ['COLUMNS'] = str(self.terminal_width)
        parser = argparse.ArgumentParser(
            prog="ovfpatch",
            usage="""
  ovfpatch --help
  ovfpatch --version
  ovfpatch <command> --help
  ovfpatch <options> <command> <command-options>""",
            description=(__version_long__ + "\n" + textwrap.fill(
                "A tool for removing unwanted virtual hardware (by default, "
                "sound cards) from Open Virtualization Format (.ovf, .ova) "
                "appliances so that they import cleanly into hypervisors "
                "that do not support that hardware.",
                width=self.terminal_width - 1)),
            formatter_class=argparse.RawDescriptionHelpFormatter)

        parser.add_argument('-V', '--version', action='version',
                            version=__version_long__)
        parser.add_argument('-f', '--force', dest='_force',
                            action='store_true',
                            help="Answer yes to every confirmation prompt")

        noise = parser.add_mutually_exclusive_group()
        noise.add_argument(
            '-q', '--quiet', dest='_quietude', action='count', default=0,
            help="Log less (repeatable)")
        noise.add_argument(
            '-v', '--verbose', dest='_verbosity', action='count', default=0,
            help="Log more (repeatable)")
        return parser

    def add_subparser(self, title, aliases=None, **kwargs):
        """Add the parser for a subcommand.

        Args:
          title (str): Canonical name of the subcommand.
          aliases (list): Other names accepted for it.
          kwargs (dict): Passed through to ``add_parser``.
        Returns:
          argparse.ArgumentParser: The subcommand's parser.
        """
        aliases = list(aliases or [])
        parser = self.subparsers.add_parser(title, aliases=aliases, **kwargs)
        for name in [title] + aliases:
            self.subparser_lookup[name] = parser
        return parser

    def parse_args(self, argv):
        """Parse the given CLI arguments (not including argv0).

        Without a terminal to prompt on, ``--force`` is implied.

        Returns:
          argparse.Namespace: Parser namespace object
        """
        args = self.parser.parse_args(argv)
        if not (sys.stdin.isatty() and sys.stdout.isatty()):
            args._force = True  # pylint: disable=protected-access
        return args

    def run(self, argv):
        """Parse ``argv`` and hand the result to :meth:`main`.

        Returns:
          int: Return code from :meth:`main`
        """
        return self.main(self.parse_args(argv))

    @staticmethod
    def configure(instance, args):
        """Copy a command's parsed arguments onto its instance.

        CAPITALIZED (positional) arguments go first, since the options
        may be validated against them.

        Raises:
          InvalidInputError: if the command rejects a value.
        """
        options = dict((key, value) for (key, value) in vars(args).items()
                       if key not in GLOBAL_OPTIONS + ('instance',) and
                       value is not None)
        for key in sorted(options, key=lambda k: not k[0].isupper()):
            setattr(instance, key.lower(), options[key])

    def main(self, args):
        """Run the subcommand selected by ``args`` and report any failure.

        Args:
          args (argparse.Namespace): Result of :meth:`parse_args`.

        Returns:
          int: 0 on success. Otherwise exits via :func:`sys.exit`, with
          2 for bad input, the ``errno`` of an environment error (else 1),
          or 1 for missing functionality or user abort.
        """
        # pylint: disable=protected-access
        self.force = args._force
        self.adjust_verbosity(args._verbosity - args._quietude)

        if not args._subcommand:
            self.parser.error("too few arguments")
        subparser = self.subparser_lookup[args._subcommand]

        try:
            self.configure(args.instance, args)
            args.instance.run()
            args.instance.finished()
        except InvalidInputError as exc:
            subparser.error(exc)
        except NotImplementedError as exc:
            sys.exit("Missing functionality:\n{0}".format(exc.args[0]))
        except EnvironmentError as exc:
            if exc.errno is None:
                print(exc.args[0])
                sys.exit(1)
            if exc.filename is not None:
                print("{0}: {1}".format(exc.filename, exc.strerror))
            else:
                print(exc)
            sys.exit(exc.errno)
        except (KeyboardInterrupt, EOFError):
            sys.exit("\nAborted by user.")
        finally:
            args.instance.destroy()
            self.stop_logging()
        return 0


def main():
    """Launch ovfpatch from the CLI."""
    CLI().run(sys.argv[1:])


if __name__ == "__main__":   # pragma: no cover
    main()
