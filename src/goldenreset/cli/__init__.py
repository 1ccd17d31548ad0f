#!/usr/bin/env python3
"""
goldenreset CLI package.
"""

from .parsers import build_parser, main

__all__ = ["build_parser", "main"]
