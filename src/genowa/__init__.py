"""
Genowa - template-driven generator for insurance rating programs.

Expands `&KEYWORD|param|` markers in COBOL and Java templates using
table, field and control-mapping metadata.
"""

__version__ = "0.1.0"
