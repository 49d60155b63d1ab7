#!/usr/bin/env python3
"""
TenderBoard CLI entry point (run from a checkout without installing).

Usage:
    python scripts/tenderboard.py intake hoja_resumen.pdf
    python scripts/tenderboard.py board
"""
import os
import sys

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tenderboard.cli import cli

if __name__ == '__main__':
    cli()
