#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Legacy entry point for rtarima.

All metadata (name, version, dependencies and the ``test`` extra) lives in
pyproject.toml; this file only lets older tooling run ``python setup.py``.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
