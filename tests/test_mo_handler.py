#!/usr/bin/env python3
"""
Tests for the GNU gettext *.mo format handler.
Tests both byte orders, the binary layout, malformed files and conversion to *.lang and back.
"""

import struct

import pytest

from langconv.errors import MalformedDocumentError
from langconv.format_handlers import FormatRegistry, MoHandler
from langconv.format_handlers import lang
from langconv.format_handlers.mo import (
    BE_MAGIC,
    LE_MAGIC,
    bytes_to_message_id,
    is_mo_file,
    message_id_to_bytes,
)
from langconv.model import CONTENT_TYPE_UTF8, HEADER_ID, MessageId, MessageText, ensure_utf8_header
from langconv.translation_data import TranslationData

CONTENT_TYPE = (CONTENT_TYPE_UTF8 + "\n").encode("utf-8")


def build_mo(entries, big_endian=False):
    """Build a *.mo file by hand: entries are (original bytes, translated bytes), already sorted."""
    order = ">" if big_endian else "<"
    n = len(entries)
    originals_offset = 28
    translations_offset = originals_offset + 8 * n
    offset = translations_offset + 8 * n

    descriptors = []
    strings = b""
    for string in [e[0] for e in entries] + [e[1] for e in entries]:
        descriptors.append((len(string), offset))
        strings += string + b"\x00"
        offset += len(string) + 1

    header = struct.pack(order + "I6I", 0x950412DE, 0, n, originals_offset, translations_offset, 0,
                         translations_offset + 8 * n)
    table = b"".join(struct.pack(order + "2I", *d) for d in descriptors)
    return header + table + strings


@pytest.fixture
def translations():
    """Translation table with header, context, plurals and non-ASCII text."""
    return {
        HEADER_ID: MessageText("Sing\nSing2\n" + CONTENT_TYPE_UTF8 + "\n"),
        MessageId.of("Flag"): MessageText("\U0001F1E9\U0001F1EA"),
        MessageId.of("Umlaut"): MessageText("ÄÖÜäöüß"),
        MessageId.of("Open", context="menu"): MessageText("Öffnen"),
        MessageId.of("Open", context="door"): MessageText("Aufmachen"),
        MessageId.of("One file", "{0} files"): MessageText.of("Eine Datei", "{0} Dateien"),
        MessageId.of("Many", "forms"): MessageText(tuple(f"form {i}" for i in range(253))),
        MessageId.of("Special"): MessageText("\u0007\u0008\u000C\n\r\t\u000B\\\""),
    }


def test_registration_and_detection():
    """Test 1: The handler is registered and detected by the magic bytes, whatever the file is called."""
    assert isinstance(FormatRegistry.get_handler_for_extension(".mo"), MoHandler)
    assert FormatRegistry.detect_format("de.bin", LE_MAGIC + bytes(24)).name == "mo"
    assert FormatRegistry.detect_format("de.bin", BE_MAGIC + bytes(24)).name == "mo"


def test_shared_instances():
    """Test 2: The byte order instances are shared."""
    assert MoHandler.get_instance(True) is MoHandler.BIG_ENDIAN
    assert MoHandler.get_instance(False) is MoHandler.LITTLE_ENDIAN
    assert MoHandler.BIG_ENDIAN.big_endian
    assert not MoHandler.LITTLE_ENDIAN.big_endian


def test_is_mo_file():
    """Test 3: Only the first four bytes are checked."""
    assert is_mo_file(bytes((0x95, 0x04, 0x12, 0xDE)))
    assert is_mo_file(bytes((0xDE, 0x12, 0x04, 0x95, 0x00)))
    assert not is_mo_file(b"msgid")
    assert not is_mo_file(b"")


def test_message_id_bytes():
    """Test 4: Context is separated by 0x04, grammatical forms by NUL."""
    singular = "SingularStringÄß"
    plural1 = "PluralString1Äß"
    plural2 = "PluralString2Äß"
    context = "someContext"

    assert bytes_to_message_id(singular.encode()) == MessageId.of(singular)
    assert bytes_to_message_id(f"{singular}\x00{plural1}\x00{plural2}".encode()) == \
        MessageId.of(singular, plural1, plural2)
    assert bytes_to_message_id(f"{context}\x04{singular}".encode()) == MessageId.of(singular, context=context)
    assert bytes_to_message_id(f"{context}\x04{singular}\x00{plural1}".encode()) == \
        MessageId.of(singular, plural1, context=context)

    assert message_id_to_bytes(MessageId.of("a", "b", context="c")) == b"c\x04a\x00b"


@pytest.mark.parametrize("big_endian", [True, False])
def test_encode_empty_table(big_endian):
    """Test 5: An empty table becomes a file with only the header entry."""
    expected = build_mo([(b"", CONTENT_TYPE)], big_endian)
    assert MoHandler.get_instance(big_endian).encode({}) == expected
    assert len(expected) == 86


@pytest.mark.parametrize("big_endian", [True, False])
def test_encode_layout(big_endian):
    """Test 6: Entries are sorted, singulars before plurals, no context before context."""
    table = {
        MessageId.of("b", "bs"): MessageText.of("x", "xs"),
        MessageId.of("a", context="ctx"): MessageText("y"),
        MessageId.of("b"): MessageText("z"),
    }
    expected = build_mo([
        (b"", CONTENT_TYPE),
        (b"b", b"z"),
        (b"ctx\x04a", b"y"),
        (b"b\x00bs", b"x\x00xs"),
    ], big_endian)
    assert MoHandler.get_instance(big_endian).encode(table) == expected


@pytest.mark.parametrize("big_endian", [True, False])
def test_decode_hand_built_file(big_endian):
    """Test 7: Files from other tools are decoded, including the header entry."""
    data = build_mo([
        (b"", b"Language: de\n"),
        (b"Hello", "Hallo Welt".encode()),
        (b"door\x04Open", b"Aufmachen"),
        (b"file\x00files", b"Datei\x00Dateien"),
    ], big_endian)
    assert MoHandler().decode(data) == {
        HEADER_ID: MessageText("Language: de\n"),
        MessageId.of("Hello"): MessageText("Hallo Welt"),
        MessageId.of("Open", context="door"): MessageText("Aufmachen"),
        MessageId.of("file", "files"): MessageText.of("Datei", "Dateien"),
    }


@pytest.mark.parametrize("big_endian", [True, False])
def test_round_trip(translations, big_endian):
    """Test 8: Decoding an encoded table gives the table with normalized header."""
    handler = MoHandler.get_instance(big_endian)
    data = handler.encode(translations)
    assert data[:4] == (BE_MAGIC if big_endian else LE_MAGIC)

    decoded = MoHandler().decode(data)
    assert decoded == ensure_utf8_header(translations)
    assert handler.encode(decoded) == data


def test_byte_orders_decode_to_same_table(translations):
    """Test 9: Big- and little-endian files of the same table decode identically."""
    assert MoHandler.BIG_ENDIAN.decode(MoHandler.BIG_ENDIAN.encode(translations)) == \
        MoHandler.LITTLE_ENDIAN.decode(MoHandler.LITTLE_ENDIAN.encode(translations))


def test_too_short():
    """Test 10: Files shorter than the header are rejected."""
    with pytest.raises(MalformedDocumentError):
        MoHandler().decode(LE_MAGIC + bytes(23))


def test_wrong_magic():
    """Test 11: Files without the magic bytes are rejected."""
    with pytest.raises(MalformedDocumentError):
        MoHandler().decode(b"\x00\x00\x00\x00" + bytes(24))


def test_string_outside_of_file():
    """Test 12: A length/offset pair pointing past the end is rejected."""
    data = bytearray(build_mo([(b"", CONTENT_TYPE)]))
    # length of the translated string
    data[36:40] = struct.pack("<I", 1000)
    with pytest.raises(MalformedDocumentError):
        MoHandler().decode(bytes(data))


def test_descriptor_table_outside_of_file():
    """Test 13: A string count larger than the descriptor table is rejected."""
    data = bytearray(build_mo([(b"", CONTENT_TYPE)]))
    data[8:12] = struct.pack("<I", 100)
    with pytest.raises(MalformedDocumentError):
        MoHandler().decode(bytes(data))


def test_invalid_utf8():
    """Test 14: Strings that are not UTF-8 are rejected."""
    with pytest.raises(MalformedDocumentError):
        MoHandler().decode(build_mo([(b"", CONTENT_TYPE), (b"a", b"\xff\xfe")]))


def test_mo_to_lang_to_mo():
    """Test 15: Converting to *.lang files and back gives the same *.mo files."""
    base = {
        MessageId.of("Hello"): MessageText("Hello"),
        MessageId.of("Bye"): MessageText("Bye"),
        MessageId.of("Open", context="door"): MessageText("Open"),
        MessageId.of("file", "files"): MessageText.of("file", "files"),
    }
    german = {
        MessageId.of("Hello"): MessageText("Hallo"),
        MessageId.of("Open", context="door"): MessageText("Open"),
        MessageId.of("file", "files"): MessageText.of("Datei", "Dateien"),
    }
    mo_files = {"en": MoHandler().encode(base), "de": MoHandler().encode(german)}

    decoded = {language: MoHandler().decode(data) for language, data in mo_files.items()}
    data = TranslationData(
        base_messages=list(decoded["en"]),
        translations={"de": decoded["de"]},
        base_language="en",
    )
    lang_files = data.encode_to_multiple_lang_files()

    from_lang = lang.decode_multiple_languages("en", lang_files["en"], {"de": lang_files["de"]})
    assert {language: MoHandler().encode(table) for language, table in from_lang.items()} == mo_files


def test_validate_content():
    """Test 16: Validation reports decoding errors instead of raising them."""
    assert MoHandler().validate_content(MoHandler().encode({})) == []
    errors = MoHandler().validate_content(b"not a mo file, but long enough to have a header")
    assert len(errors) == 1
    assert "magic bytes" in errors[0]
