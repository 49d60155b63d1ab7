"""Utility functions"""
from .text import normalize_text, sanitize_filename, contains_any
from .fallible import fallible
