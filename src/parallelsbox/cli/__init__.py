#!/usr/bin/env python3
"""
parallelsbox CLI package.
"""

from .parsers import build_parser, main
from .utils import build_driver, console

__all__ = ["build_parser", "build_driver", "console", "main"]
