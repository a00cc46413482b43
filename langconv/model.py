#!/usr/bin/env python3
"""
In-memory model shared by all file formats.

A translation table maps MessageId (the string in the base language, with an
optional context) to MessageText (the translation, with all its singular and
plural forms). All objects are immutable and hashable.

The message with the empty string as id and no context is reserved for the
gettext header (metadata like Content-Type and Plural-Forms).
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class MessageText:
    """
    A string in singular and optionally one or more plural forms.

    Attributes:
        strings: All grammatical forms. Index 0 is the singular,
            the following elements are the plurals in increasing grammatical number.
    """
    strings: tuple[str, ...]

    def __post_init__(self):
        strings = self.strings
        if isinstance(strings, str):
            strings = (strings,)
        try:
            strings = tuple(strings)
        except TypeError:
            raise InvalidArgumentError(
                f"A MessageText has to be created from strings, got {type(strings).__name__}!"
            ) from None
        if not strings:
            raise InvalidArgumentError("A MessageText has to consist of at least one string!")
        for s in strings:
            if not isinstance(s, str):
                raise InvalidArgumentError(f"A MessageText can only consist of strings, got {type(s).__name__}!")
        object.__setattr__(self, "strings", strings)

    @classmethod
    def of(cls, singular: str, *plurals: str) -> "MessageText":
        """Create from the singular and the plural forms given as separate arguments."""
        return cls((singular, *plurals))

    @property
    def singular(self) -> str:
        return self.strings[0]

    @property
    def num_forms(self) -> int:
        return len(self.strings)

    def __len__(self) -> int:
        return len(self.strings)


@dataclass(frozen=True)
class MessageId:
    """
    A translatable string in the base language with an optional context.

    Attributes:
        text: The string (with optional plural forms) that should be translated
        context: Disambiguates identical strings that are translated differently in different situations

    Ordering: fewer grammatical forms first, then entries without context before entries
    with context, then by context, then by the grammatical forms.
    """
    text: MessageText
    context: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.text, MessageText):
            raise InvalidArgumentError(f"A MessageId needs a MessageText, got {type(self.text).__name__}!")
        if self.context is not None and not isinstance(self.context, str):
            raise InvalidArgumentError(f"The context of a MessageId must be a string or None, got {type(self.context).__name__}!")

    @classmethod
    def of(cls, singular: str, *plurals: str, context: Optional[str] = None) -> "MessageId":
        return cls(MessageText.of(singular, *plurals), context)

    def sort_key(self) -> tuple:
        return (
            self.text.num_forms,
            self.context is not None,
            self.context or "",
            self.text.strings,
        )

    def __lt__(self, other):
        if not isinstance(other, MessageId):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __le__(self, other):
        if not isinstance(other, MessageId):
            return NotImplemented
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other):
        if not isinstance(other, MessageId):
            return NotImplemented
        return self.sort_key() > other.sort_key()

    def __ge__(self, other):
        if not isinstance(other, MessageId):
            return NotImplemented
        return self.sort_key() >= other.sort_key()


TranslationTable = dict[MessageId, MessageText]

CONTENT_TYPE_UTF8 = "Content-Type: text/plain; charset=UTF-8"

HEADER_ID = MessageId(MessageText(("",)))
DEFAULT_HEADER = MessageText((CONTENT_TYPE_UTF8 + "\n",))

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def is_header(msgid: MessageId) -> bool:
    return msgid == HEADER_ID


def _normalize_header_text(text: MessageText) -> MessageText:
    lines = [
        line for line in _LINE_BREAK.split(text.singular)
        if line and not line.startswith("Content-Type:")
    ]
    lines.append(CONTENT_TYPE_UTF8)
    return MessageText(("\n".join(lines) + "\n", *text.strings[1:]))


def ensure_utf8_header(table: Mapping[MessageId, MessageText]) -> TranslationTable:
    """
    Return a copy of the table whose header entry declares UTF-8 as charset.

    If there is no header entry, one is added that only contains the Content-Type line.
    Otherwise blank lines and existing Content-Type lines are dropped from the first form
    of the header and the UTF-8 Content-Type line is appended. Further forms stay unchanged.
    The header is always the first entry of the returned dict.
    """
    header = table.get(HEADER_ID)
    result: TranslationTable = {
        HEADER_ID: DEFAULT_HEADER if header is None else _normalize_header_text(header),
    }
    for msgid, text in table.items():
        if not is_header(msgid):
            result[msgid] = text
    return result


def base_table(messages: list[MessageId]) -> TranslationTable:
    """Map every base message to its own text, which is what a base language 'translation' is."""
    return {msgid: msgid.text for msgid in messages}

