#!/usr/bin/env python3
"""
KV-Loop Setup Script
====================
Allows installation of the kv-loop package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="kv-loop",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*", "scripts"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "kv-loop=kvloop.server:main",
            "kv-loop-client=kvloop.client:main",
        ],
    },
)
