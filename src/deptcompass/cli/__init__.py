"""
CLI Module - Command-line interface for DeptCompass.
====================================================

Usage:
    deptcompass --help
    deptcompass build
    deptcompass search "서울대"
    deptcompass detail 서울대학교 컴퓨터공학부

Components:
- main: Typer CLI application
"""

from deptcompass.cli.main import app, cli

__all__ = ["app", "cli"]
