#!/usr/bin/env python
#
# setup.py - installer script for ovfpatch package
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

"""ovfpatch - strip unsupported virtual hardware from OVF appliances."""

import os.path
import re

from setuptools import setup

HERE = os.path.dirname(os.path.abspath(__file__))
README_FILE = os.path.join(HERE, 'README.rst')


def read_version():
    """Get the version string from the package without importing it."""
    with open(os.path.join(HERE, 'ovfpatch', '__init__.py')) as fileobj:
        match = re.search(r"^__version__ = ['\"]([^'\"]+)['\"]",
                          fileobj.read(), re.MULTILINE)
    return match.group(1)


install_requires = [
    'colorlog>=2.5.0',
    'requests>=2.5.1',
    'verboselogs>=1.6',
]

tests_require = install_requires + ['mock', 'pytest']

extras_require = {
    'tab-completion': ['argcomplete>=1.3.0'],
    'tests': ['mock', 'pytest'],
}

with open(README_FILE) as readme:
    long_description = readme.read()

setup(
    # Package description
    name='ovfpatch',
    version=read_version(),
    description='Remove unsupported virtual hardware from OVF appliances',
    long_description=long_description,
    license='MIT',

    # Requirements
    python_requires='>=3.6',
    tests_require=tests_require,
    install_requires=install_requires,
    extras_require=extras_require,

    # Package contents
    packages=[
        'ovfpatch',
        'ovfpatch.commands',
        'ovfpatch.commands.tests',
        'ovfpatch.tests',
        'ovfpatch.ui',
        'ovfpatch.ui.tests',
    ],
    package_data={
        'ovfpatch.tests': ['*.ovf', '*.mf'],
    },
    entry_points={
        'console_scripts': [
            'ovfpatch = ovfpatch.ui.cli:main',
        ],
    },
    include_package_data=True,

    # PyPI search categories
    classifiers=[
        # Project status
        'Development Status :: 4 - Beta',
        # Target audience
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'Topic :: System :: Emulators',
        'Topic :: System :: Installation/Setup',
        'Topic :: System :: Systems Administration',
        # Licensing
        'License :: OSI Approved :: MIT License',
        # Environment
        'Environment :: Console',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: POSIX :: Linux',
        # Supported versions
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: Implementation :: CPython',
    ],
    keywords='virtualization ovf ova manifest vmware virtualbox',
)
