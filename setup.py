#!/usr/bin/env python
"""
SerialCollector - Network Device Serial Number Collection Tool

Polls a fleet of network devices over SSH, runs one diagnostic command on
each, extracts a single field from the output and writes it back into the
workbook the hosts were listed in.
"""

import os
from setuptools import setup, find_packages

# Read the README for long description
here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Version
VERSION = '0.1.0'

setup(
    name='serialcollector',
    version=VERSION,
    description='Concurrent SSH polling of network device serial numbers',
    long_description=long_description,
    long_description_content_type='text/markdown',

    license='MIT',

    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'Intended Audience :: Information Technology',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: System :: Networking',
        'Topic :: System :: Systems Administration',
    ],

    keywords='network automation ssh inventory serial-number xlsx',

    packages=find_packages(exclude=['tests', 'tests.*']),

    python_requires='>=3.10',

    install_requires=[
        'paramiko>=3.0',
        'PyYAML>=6.0',
        'openpyxl>=3.1',
    ],

    extras_require={
        'dev': [
            'pytest>=7.0',
        ],
    },

    # Entry points for CLI commands
    entry_points={
        'console_scripts': [
            'scollector=scollector.cli.main:main',
        ],
    },
)
