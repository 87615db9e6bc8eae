"""Scanning, parsing, resolution and evaluation of lox programs."""
