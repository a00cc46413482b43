#!/usr/bin/env python3
"""
Error types raised by the codecs.

Every error derives from LangconvError, which is itself a ValueError, so
callers that only care about "bad input" can keep catching ValueError.
"""

from typing import Optional


class LangconvError(ValueError):
    """Base class for all errors raised while encoding or decoding."""


class InvalidArgumentError(LangconvError):
    """A value object was constructed from unusable input."""


class LimitExceededError(LangconvError):
    """The data can't be represented in the requested format (too long, too many forms)."""


class MalformedDocumentError(LangconvError):
    """The bytes can't be interpreted as a document of the expected format."""


class InconsistentBaseLanguageError(MalformedDocumentError):
    """A base *.lang document uses a sentinel that only translated documents may use."""


class UnsupportedSentinelError(MalformedDocumentError):
    """A reserved value without documented meaning was found."""


class PoSyntaxError(MalformedDocumentError):
    """
    Syntax error in a *.po document.

    Attributes:
        line: The offending source line (if the error is tied to one line)
        msgid: The msgid of the entry in which the error occurred (if known)
    """

    def __init__(self, message: str, line: Optional[str] = None, msgid: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.msgid = msgid
