"""
miniplc0 Command-Line Interface
===============================

This package provides the command-line tool for miniplc0:

- **plc0c**: compiler, with an option to run the result on the
  reference stack machine

The tool is a Click-based CLI application with help text and
consistent exit codes (see cli.errors).
"""

__all__ = ["plc0c"]
