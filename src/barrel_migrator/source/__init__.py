"""
Module Source Toolkit.

Parsing, printing and file-system access for JavaScript/TypeScript modules, plus
the ``package.json`` reader.
"""
