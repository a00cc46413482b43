#!/usr/bin/env python3
"""
GNU gettext MO format handler.

See https://www.gnu.org/software/gettext/manual/html_node/MO-Files.html

File layout (all numbers are unsigned 32 bit integers in the byte order of the file):
```
offset  0: magic number 0x950412de (bytes reversed for little-endian files)
offset  4: file format revision (0)
offset  8: number of strings N
offset 12: offset O of the table with the original strings
offset 16: offset T of the table with the translated strings
offset 20: size of the hashing table (0, no hashing table is written)
offset 24: offset of the hashing table
O:         N pairs (length, offset) of the original strings
T:         N pairs (length, offset) of the translated strings
...        the NUL terminated strings
```

An original string is "<context>\\x04<singular>\\x00<plural>..." (the context part
is optional), a translated string is "<form 0>\\x00<form 1>...".
"""

from typing import Mapping

from ..byte_quad import ByteQuad, bytes_to_quads, quads_to_bytes, read_quad_at
from ..errors import MalformedDocumentError
from ..model import MessageId, MessageText, TranslationTable, ensure_utf8_header
from .base import I18nFormatHandler

BE_MAGIC = bytes((0x95, 0x04, 0x12, 0xDE))
LE_MAGIC = BE_MAGIC[::-1]

# 7 x 4 bytes
HEADER_SIZE_IN_BYTES = 28

NULL_CHAR = "\x00"
CONTEXT_SEPARATOR = "\x04"


def message_text_to_bytes(text: MessageText) -> bytes:
    """All grammatical forms, separated by NUL bytes."""
    return NULL_CHAR.join(text.strings).encode("utf-8")


def message_id_to_bytes(msgid: MessageId) -> bytes:
    """The grammatical forms of the message, preceded by the context and the 0x04 separator (if there is a context)."""
    if msgid.context is None:
        return message_text_to_bytes(msgid.text)
    return msgid.context.encode("utf-8") + CONTEXT_SEPARATOR.encode("ascii") + message_text_to_bytes(msgid.text)


def _decode_utf8(data: bytes, what: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedDocumentError(f"The {what} is not valid UTF-8: {e}") from e


def bytes_to_message_text(data: bytes) -> MessageText:
    return MessageText(_decode_utf8(data, "translated string").split(NULL_CHAR))


def bytes_to_message_id(data: bytes) -> MessageId:
    """Inverse of message_id_to_bytes()."""
    string = _decode_utf8(data, "original string")
    separator_index = string.find(CONTEXT_SEPARATOR)
    if separator_index >= 0:
        return MessageId(
            MessageText(string[separator_index + 1:].split(NULL_CHAR)),
            string[:separator_index],
        )
    return MessageId(MessageText(string.split(NULL_CHAR)))


def is_mo_file(data: bytes) -> bool:
    """Whether the data starts with the magic bytes of a MO file (either byte order)."""
    return data[:4] in (BE_MAGIC, LE_MAGIC)


class MoHandler(I18nFormatHandler):
    """
    Handler for binary gettext *.mo files.

    Decoding accepts both byte orders. Encoding writes the byte order chosen at construction
    (little-endian by default). The instances hold no other state, use
    MoHandler.BIG_ENDIAN / MoHandler.LITTLE_ENDIAN or get_instance().
    """

    BIG_ENDIAN: "MoHandler"
    LITTLE_ENDIAN: "MoHandler"

    def __init__(self, big_endian: bool = False):
        self._big_endian = big_endian

    @classmethod
    def get_instance(cls, big_endian: bool = False) -> "MoHandler":
        return cls.BIG_ENDIAN if big_endian else cls.LITTLE_ENDIAN

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    @property
    def name(self) -> str:
        return "mo"

    @property
    def file_extensions(self) -> list[str]:
        return ["mo"]

    @property
    def description(self) -> str:
        return "GNU gettext binary *.mo files"

    def matches_content(self, data: bytes) -> bool:
        return is_mo_file(data)

    def encode(self, translations: Mapping[MessageId, MessageText]) -> bytes:
        """
        Encode the translations (plus a header entry declaring UTF-8) as MO file.

        The entries are sorted by MessageId, ties are broken by the bytes of the original string.
        """
        big_endian = self._big_endian
        entries = sorted(
            ensure_utf8_header(translations).items(),
            key=lambda entry: (entry[0].sort_key(), message_id_to_bytes(entry[0])),
        )

        num_strings = len(entries)
        originals_offset = HEADER_SIZE_IN_BYTES
        translations_offset = originals_offset + num_strings * 8
        hash_table_offset = translations_offset + num_strings * 8

        header = [
            ByteQuad.from_uint(0, big_endian),  # file format revision
            ByteQuad.from_uint(num_strings, big_endian),
            ByteQuad.from_uint(originals_offset, big_endian),
            ByteQuad.from_uint(translations_offset, big_endian),
            ByteQuad.from_uint(0, big_endian),  # size of hashing table
            ByteQuad.from_uint(hash_table_offset, big_endian),
        ]

        # Original strings first, then the translated strings. Both descriptor tables are
        # contiguous, so they can be written as one list.
        strings = [message_id_to_bytes(msgid) for msgid, _ in entries]
        strings += [message_text_to_bytes(text) for _, text in entries]

        descriptors = []
        offset = hash_table_offset
        for string in strings:
            descriptors.append(ByteQuad.from_uint(len(string), big_endian))
            descriptors.append(ByteQuad.from_uint(offset, big_endian))
            offset += len(string) + 1

        return b"".join((
            BE_MAGIC if big_endian else LE_MAGIC,
            quads_to_bytes(header),
            quads_to_bytes(descriptors),
            b"".join(string + b"\x00" for string in strings),
        ))

    def decode(self, data: bytes) -> TranslationTable:
        """Decode a MO file of either byte order."""
        if len(data) < HEADER_SIZE_IN_BYTES:
            raise MalformedDocumentError(
                f"This MO file is too short, must be at least {HEADER_SIZE_IN_BYTES} bytes long "
                f"(only {len(data)} bytes given)!"
            )

        magic = data[:4]
        if magic == BE_MAGIC:
            big_endian = True
        elif magic == LE_MAGIC:
            big_endian = False
        else:
            raise MalformedDocumentError(f"Not a MO file, magic bytes are incorrect ({magic.hex(' ')})!")

        (
            _revision,
            num_strings,
            originals_offset,
            translations_offset,
            _hash_table_size,
            _hash_table_offset,
        ) = [quad.uint_value(big_endian) for quad in bytes_to_quads(data[4:HEADER_SIZE_IN_BYTES])]

        originals = self._read_string_table(data, originals_offset, num_strings, big_endian)
        translated = self._read_string_table(data, translations_offset, num_strings, big_endian)

        return {
            bytes_to_message_id(original): bytes_to_message_text(translation)
            for original, translation in zip(originals, translated)
        }

    @staticmethod
    def _read_string_table(data: bytes, start: int, num_strings: int, big_endian: bool) -> list[bytes]:
        result = []
        for i in range(num_strings):
            index = start + i * 8
            try:
                length = read_quad_at(data, index).uint_value(big_endian)
                offset = read_quad_at(data, index + 4).uint_value(big_endian)
            except IndexError as e:
                raise MalformedDocumentError(
                    f"The string table entry at bytes {index}..{index + 7} is outside of the file!"
                ) from e
            if offset + length >= len(data):
                raise MalformedDocumentError(
                    f"The string length and offset at bytes {index}..{index + 7} are pointing to somewhere "
                    f"outside of the file (length is {length}, offset is {offset})!"
                )
            result.append(data[offset:offset + length])
        return result


MoHandler.BIG_ENDIAN = MoHandler(big_endian=True)
MoHandler.LITTLE_ENDIAN = MoHandler(big_endian=False)
