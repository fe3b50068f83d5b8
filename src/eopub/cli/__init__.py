"""
eopub Command-Line Interface
============================

- **pubtool**: inspect, validate, convert and rewrite pub files

The tool is a Click application with per-command help and the exit codes
defined in ``eopub.cli.errors``.
"""

__all__ = ["pubtool"]
