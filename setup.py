#!/usr/bin/env python3
"""
numsync Setup Script
====================
Allows installation of the numsync package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="numsync",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "numsync-server=numsync.server:main",
            "numsync-client=numsync.client:main",
        ],
    },
)
