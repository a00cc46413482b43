"""
langconv - Encoders and decoders for the translation files of JOSM plugins

Reads and writes the JOSM *.lang format as well as GNU gettext *.mo and *.po
files, all through one in-memory model (MessageId -> MessageText).

Quick start:
    langconv mo2lang src/main/po build/i18n/data
    langconv lang2mo build/i18n/data build/mo
    langconv stats build/i18n/data
"""

__version__ = "1.0.0"

from .byte_quad import ByteQuad
from .errors import (
    InconsistentBaseLanguageError,
    InvalidArgumentError,
    LangconvError,
    LimitExceededError,
    MalformedDocumentError,
    PoSyntaxError,
    UnsupportedSentinelError,
)
from .format_handlers import FormatRegistry, LangHandler, MoHandler, PoHandler, shorten_po_file
from .model import MessageId, MessageText, ensure_utf8_header
from .translation_data import TranslationData

__all__ = [
    "ByteQuad",
    "MessageId",
    "MessageText",
    "ensure_utf8_header",
    "TranslationData",
    "FormatRegistry",
    "LangHandler",
    "MoHandler",
    "PoHandler",
    "shorten_po_file",
    "LangconvError",
    "InvalidArgumentError",
    "LimitExceededError",
    "MalformedDocumentError",
    "InconsistentBaseLanguageError",
    "UnsupportedSentinelError",
    "PoSyntaxError",
]
