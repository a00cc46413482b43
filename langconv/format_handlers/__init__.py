#!/usr/bin/env python3
"""
Format handlers for translation file formats.

Supported formats:
- LANG: JOSM *.lang files (one binary file per language)
- MO: GNU gettext binary *.mo files
- PO: GNU gettext textual *.po/*.pot files
"""

from .base import (
    I18nFormatHandler,
    FormatRegistry,
)
from .lang import LangHandler
from .mo import MoHandler, is_mo_file
from .po import PoHandler, shorten_po_file

# Register handlers (MO first, it is the only one detected by content)
FormatRegistry.register(MoHandler)
FormatRegistry.register(LangHandler)
FormatRegistry.register(PoHandler)

__all__ = [
    'I18nFormatHandler',
    'FormatRegistry',
    'LangHandler',
    'MoHandler',
    'PoHandler',
    'is_mo_file',
    'shorten_po_file',
]
