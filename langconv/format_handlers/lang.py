#!/usr/bin/env python3
"""
Handler for the compact *.lang format read by JOSM at runtime.

A *.lang file never stands on its own: the file of the base language lists
all translatable strings, the files of the other languages only list the
translations, in exactly the same order as the base file.

Layout of a file:
```
<singular record>*  FF FF  <plural record>*
```

Singular record (messages with one grammatical form):
    2 bytes big-endian length + that many UTF-8 bytes.
    Length 0 means "no translation", length 0xFFFE means "same as base language"
    (both only allowed outside the base language).

Plural record (messages with two or more grammatical forms):
    1 byte number of forms, then each form as (2 byte length, UTF-8 bytes).
    Count 0 means "no translation", 0xFE means "same as base language",
    0xFF is reserved.

In the base language, the context of a message is stored in front of the
first form as "_:<context>\\n<first form>".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Union

from ..errors import (
    InconsistentBaseLanguageError,
    LimitExceededError,
    MalformedDocumentError,
    UnsupportedSentinelError,
)
from ..model import MessageId, MessageText, TranslationTable, base_table, is_header
from .base import I18nFormatHandler

DEFAULT_BASE_LANGUAGE = "en"

SINGULAR_PLURAL_SEPARATOR = b"\xff\xff"

# Reserved values of the 2-byte length of singular records
LENGTH_MISSING = 0x0000
LENGTH_SAME_AS_BASE = 0xFFFE
LENGTH_SECTION_END = 0xFFFF

# Reserved values of the 1-byte form count of plural records
COUNT_MISSING = 0x00
COUNT_SAME_AS_BASE = 0xFE
COUNT_RESERVED = 0xFF

MAX_STRING_BYTES = 0xFFFD
MAX_GRAMMATICAL_FORMS = 0xFD

CONTEXT_PREFIX = "_:"


class RecordKind(Enum):
    MISSING = "missing"
    SAME_AS_BASE = "same_as_base"
    EXPLICIT = "explicit"


@dataclass(frozen=True)
class LangRecord:
    """One decoded (or to be encoded) record of a *.lang file."""
    kind: RecordKind
    strings: tuple[str, ...] = ()

    @classmethod
    def explicit(cls, *strings: str) -> "LangRecord":
        return cls(RecordKind.EXPLICIT, strings)


MISSING = LangRecord(RecordKind.MISSING)
SAME_AS_BASE = LangRecord(RecordKind.SAME_AS_BASE)


class SectionEnd(Enum):
    """Returned instead of a record when a section of the file is over."""
    SEPARATOR = "separator"
    END_OF_STREAM = "end of stream"


ERROR_BASE_UNTRANSLATED = (
    "This is not a base language! There is a string in this supposed base language that indicates "
    "it is not translated from the base language (which does not make sense)."
)
ERROR_BASE_SAME_AS_BASE = (
    "This is not a base language! There is a string in this supposed base language that indicates "
    "it is the same as in the base language (which does not make sense)."
)


def partition_base_messages(
    base_messages: Iterable[MessageId],
    unique: bool = True,
) -> tuple[list[MessageId], list[MessageId]]:
    """
    Split the base messages into singular-only and plural messages.

    The header entry is dropped, otherwise the order of the input is kept.
    With unique=True only the first appearance of duplicates is kept. A decoder must pass
    unique=False, the records of a translated file line up with the base records by position
    and distinct base records can decode to equal MessageIds.
    """
    messages = dict.fromkeys(base_messages) if unique else base_messages
    messages = [msgid for msgid in messages if not is_header(msgid)]
    singulars = [msgid for msgid in messages if msgid.text.num_forms <= 1]
    plurals = [msgid for msgid in messages if msgid.text.num_forms > 1]
    return singulars, plurals


# --- Encoding ---------------------------------------------------------------

def _encode_string(string: str) -> bytes:
    string_bytes = string.encode("utf-8")
    if len(string_bytes) > MAX_STRING_BYTES:  # 0xFFFE and 0xFFFF are reserved values
        raise LimitExceededError(
            f"The *.lang format only supports strings up to {MAX_STRING_BYTES} UTF-8 bytes in length! "
            f"{len(string_bytes)} bytes were given."
        )
    return len(string_bytes).to_bytes(2, "big") + string_bytes


def _encode_form_count(num_forms: int) -> bytes:
    if num_forms > MAX_GRAMMATICAL_FORMS:
        raise LimitExceededError(
            f"The *.lang format “only” supports up to {MAX_GRAMMATICAL_FORMS} grammatical numbers "
            f"(singular and plural forms)! {num_forms} forms were provided."
        )
    return bytes((num_forms,))


def _base_strings(msgid: MessageId) -> list[str]:
    strings = list(msgid.text.strings)
    if msgid.context is not None:
        strings[0] = f"{CONTEXT_PREFIX}{msgid.context}\n{strings[0]}"
    return strings


def _encode_singular_record(record: LangRecord) -> bytes:
    if record.kind is RecordKind.MISSING:
        return LENGTH_MISSING.to_bytes(2, "big")
    if record.kind is RecordKind.SAME_AS_BASE:
        return LENGTH_SAME_AS_BASE.to_bytes(2, "big")
    return _encode_string(record.strings[0])


def _encode_plural_record(record: LangRecord) -> bytes:
    if record.kind is RecordKind.MISSING:
        return bytes((COUNT_MISSING,))
    if record.kind is RecordKind.SAME_AS_BASE:
        return bytes((COUNT_SAME_AS_BASE,))
    return _encode_form_count(len(record.strings)) + b"".join(_encode_string(s) for s in record.strings)


def _translation_record(msgid: MessageId, translation: Optional[MessageText]) -> LangRecord:
    if translation is None:
        return MISSING
    if translation == msgid.text:
        return SAME_AS_BASE
    if msgid.text.num_forms <= 1:
        # A singular record can only hold one string, an empty one would read as "no translation"
        if translation.singular == "":
            return MISSING
        return LangRecord.explicit(translation.singular)
    return LangRecord.explicit(*translation.strings)


class LangFileEncoder:
    """
    Encoder for one set of base messages.

    Args:
        base_messages: The messages of the base language. Their order (singulars first,
            then plurals, each in order of first appearance) determines the order
            of the records in all *.lang files created by this encoder.
    """

    def __init__(self, base_messages: Iterable[MessageId]):
        self.singular_messages, self.plural_messages = partition_base_messages(base_messages)

    @property
    def base_messages(self) -> list[MessageId]:
        return self.singular_messages + self.plural_messages

    def encode_base(self) -> bytes:
        """Encode the *.lang file of the base language."""
        return b"".join((
            b"".join(_encode_singular_record(LangRecord.explicit(*_base_strings(m))) for m in self.singular_messages),
            SINGULAR_PLURAL_SEPARATOR,
            b"".join(_encode_plural_record(LangRecord.explicit(*_base_strings(m))) for m in self.plural_messages),
        ))

    def encode(self, translations: Mapping[MessageId, MessageText]) -> bytes:
        """
        Encode the *.lang file of a translated language (never use this for the base language).

        Entries of translations that are not base messages are ignored.
        Base messages without an entry in translations are encoded as "no translation".
        """
        return b"".join((
            b"".join(
                _encode_singular_record(_translation_record(m, translations.get(m)))
                for m in self.singular_messages
            ),
            SINGULAR_PLURAL_SEPARATOR,
            b"".join(
                _encode_plural_record(_translation_record(m, translations.get(m)))
                for m in self.plural_messages
            ),
        ))


# --- Decoding ---------------------------------------------------------------

class _ByteReader:
    """Sequential reader over the bytes of one *.lang file."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def read_length(self) -> Optional[int]:
        """Read a 2-byte big-endian number, None if the data ended right before it."""
        if self.pos >= len(self.data):
            return None
        if self.pos + 1 >= len(self.data):
            raise MalformedDocumentError(
                f"Unexpected end of *.lang file in the middle of a two-byte length value (at index {self.pos})!"
            )
        value = int.from_bytes(self.data[self.pos:self.pos + 2], "big")
        self.pos += 2
        return value

    def read_count(self) -> Optional[int]:
        """Read one byte, None if the data ended right before it."""
        if self.pos >= len(self.data):
            return None
        value = self.data[self.pos]
        self.pos += 1
        return value

    def read_string(self, length: int) -> str:
        end = self.pos + length
        if end > len(self.data):
            raise MalformedDocumentError(
                f"Unexpected end of *.lang file: a string of {length} bytes starts at index {self.pos}, "
                f"but the file is only {len(self.data)} bytes long!"
            )
        try:
            string = self.data[self.pos:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"Invalid UTF-8 in the string at index {self.pos}: {e}") from e
        self.pos = end
        return string


def _read_singular_record(reader: _ByteReader) -> Union[LangRecord, SectionEnd]:
    length = reader.read_length()
    if length is None:
        return SectionEnd.END_OF_STREAM
    if length == LENGTH_SECTION_END:
        return SectionEnd.SEPARATOR
    if length == LENGTH_SAME_AS_BASE:
        return SAME_AS_BASE
    if length == LENGTH_MISSING:
        return MISSING
    return LangRecord.explicit(reader.read_string(length))


def _read_plural_record(reader: _ByteReader, message_index: int) -> Union[LangRecord, SectionEnd]:
    start = reader.pos
    count = reader.read_count()
    if count is None:
        return SectionEnd.END_OF_STREAM
    if count == COUNT_RESERVED:
        raise UnsupportedSentinelError(
            f"Illegal 0xFF byte at index {start}! The *.lang file format “only” supports up to "
            f"{MAX_GRAMMATICAL_FORMS} grammatical numbers (255 given)."
        )
    if count == COUNT_SAME_AS_BASE:
        return SAME_AS_BASE
    if count == COUNT_MISSING:
        return MISSING
    forms = []
    for form_index in range(count):
        length = reader.read_length()
        if length is None:
            raise MalformedDocumentError(
                f"File ended unexpectedly. Expected to find msgstr[{form_index}] "
                f"for message[{message_index}] at bytes[{reader.pos}]!"
            )
        forms.append(reader.read_string(length))
    return LangRecord.explicit(*forms)


def _split_context(first_string: str) -> tuple[Optional[str], str]:
    newline_index = first_string.find("\n")
    if first_string.startswith(CONTEXT_PREFIX) and newline_index > 1:
        return first_string[len(CONTEXT_PREFIX):newline_index], first_string[newline_index + 1:]
    return None, first_string


def _base_message(record: LangRecord) -> MessageId:
    if record.kind is RecordKind.MISSING:
        raise InconsistentBaseLanguageError(ERROR_BASE_UNTRANSLATED)
    if record.kind is RecordKind.SAME_AS_BASE:
        raise InconsistentBaseLanguageError(ERROR_BASE_SAME_AS_BASE)
    context, first = _split_context(record.strings[0])
    return MessageId(MessageText((first, *record.strings[1:])), context)


def decode_base_messages(data: bytes) -> list[MessageId]:
    """Decode the *.lang file of the base language into the list of its messages, in file order."""
    reader = _ByteReader(data)
    messages: list[MessageId] = []

    while True:
        record = _read_singular_record(reader)
        if record is SectionEnd.END_OF_STREAM:
            return messages
        if record is SectionEnd.SEPARATOR:
            break
        messages.append(_base_message(record))

    while True:
        record = _read_plural_record(reader, len(messages))
        if record is SectionEnd.END_OF_STREAM:
            return messages
        messages.append(_base_message(record))


def _add_translation(result: TranslationTable, msgid: MessageId, record: LangRecord) -> None:
    if record.kind is RecordKind.SAME_AS_BASE:
        result[msgid] = msgid.text
    elif record.kind is RecordKind.EXPLICIT:
        result[msgid] = MessageText(record.strings)


def decode_translations(base_messages: Iterable[MessageId], data: bytes) -> TranslationTable:
    """
    Decode the *.lang file of a translated language.

    Args:
        base_messages: The messages of the base language, e.g. from decode_base_messages()
        data: The bytes of the *.lang file

    Returns:
        Map of every base message that is translated -> its translation.
        Messages marked as "no translation" are left out.
    """
    singulars, plurals = partition_base_messages(base_messages, unique=False)
    reader = _ByteReader(data)
    result: TranslationTable = {}

    for msgid in singulars:
        record = _read_singular_record(reader)
        if record is SectionEnd.END_OF_STREAM:
            return result
        if record is SectionEnd.SEPARATOR:
            break
        _add_translation(result, msgid, record)
    else:
        if not plurals:
            return result
        marker = _read_singular_record(reader)
        if marker is SectionEnd.END_OF_STREAM:
            return result
        if marker is not SectionEnd.SEPARATOR:
            raise MalformedDocumentError(
                f"The *.lang file contains more singular strings than the {len(singulars)} of the base language "
                f"(expected the separator FF FF at index {reader.pos - 2})!"
            )

    for index, msgid in enumerate(plurals):
        record = _read_plural_record(reader, len(singulars) + index)
        if record is SectionEnd.END_OF_STREAM:
            return result
        _add_translation(result, msgid, record)

    return result


# --- Public API ---------------------------------------------------------------

def encode_base(translations: Mapping[MessageId, MessageText]) -> bytes:
    """Encode the base language *.lang file for the messages that are the keys of translations."""
    return LangFileEncoder(translations.keys()).encode_base()


def encode(base_messages: Iterable[MessageId], translations: Mapping[MessageId, MessageText]) -> bytes:
    """Encode a translated language *.lang file."""
    return LangFileEncoder(base_messages).encode(translations)


def decode_base(data: bytes) -> tuple[TranslationTable, list[MessageId]]:
    """
    Decode the base language *.lang file.

    Returns:
        Tuple of (table mapping each base message to its own text, list of base messages in file order)
    """
    messages = decode_base_messages(data)
    return base_table(messages), messages


def decode(base_messages: Iterable[MessageId], data: bytes) -> TranslationTable:
    """Decode a translated language *.lang file."""
    return decode_translations(base_messages, data)


def decode_multiple_languages(
    base_language: str,
    base_language_bytes: bytes,
    other_languages: Mapping[str, bytes],
) -> dict[str, TranslationTable]:
    """
    Decode a whole set of *.lang files at once.

    Args:
        base_language: Language code of the base language
        base_language_bytes: The *.lang file of the base language
        other_languages: Map of language code -> *.lang file for the translated languages

    Returns:
        Map of language code -> translation table, for all languages including the base language
    """
    table, messages = decode_base(base_language_bytes)
    result = {
        language: decode_translations(messages, data)
        for language, data in other_languages.items()
        if language != base_language
    }
    result[base_language] = table
    return result


class LangHandler(I18nFormatHandler):
    """
    Handler for JOSM *.lang files.

    Without base messages, the handler reads and writes the file of the base language.
    With base messages, it reads and writes files of translated languages.

    Args:
        base_messages: The messages of the base language (None for the base language itself)
    """

    def __init__(self, base_messages: Optional[Iterable[MessageId]] = None):
        self._base_messages: Optional[tuple[MessageId, ...]] = (
            None if base_messages is None else tuple(base_messages)
        )

    @property
    def name(self) -> str:
        return "lang"

    @property
    def file_extensions(self) -> list[str]:
        return ["lang"]

    @property
    def description(self) -> str:
        return "JOSM *.lang files (one per language, positional to the base language file)"

    @property
    def base_messages(self) -> Optional[tuple[MessageId, ...]]:
        return self._base_messages

    @property
    def is_base_language(self) -> bool:
        return self._base_messages is None

    def encode(self, translations: Mapping[MessageId, MessageText]) -> bytes:
        if self._base_messages is None:
            return encode_base(translations)
        return encode(self._base_messages, translations)

    def decode(self, data: bytes) -> TranslationTable:
        if self._base_messages is None:
            return decode_base(data)[0]
        return decode(self._base_messages, data)

    def decode_base(self, data: bytes) -> tuple[TranslationTable, list[MessageId]]:
        return decode_base(data)
