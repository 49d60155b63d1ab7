"""
TenderBoard CLI module - shared console and commands.
"""
from tenderboard.cli.console import console, custom_theme
from tenderboard.cli.main import cli

__all__ = [
    'console',
    'custom_theme',
    'cli',
]
