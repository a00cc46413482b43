#!/usr/bin/env python3
"""
Tests for the JOSM *.lang format handler.
Tests base language files, translated files with sentinels, limits and malformed input.
"""

import pytest

from langconv.errors import (
    InconsistentBaseLanguageError,
    LimitExceededError,
    MalformedDocumentError,
    UnsupportedSentinelError,
)
from langconv.format_handlers import FormatRegistry
from langconv.format_handlers import lang
from langconv.format_handlers.lang import LangFileEncoder, LangHandler
from langconv.model import HEADER_ID, MessageId, MessageText


SINGULAR = MessageId.of("A")
PLURAL = MessageId.of("Singular", "Plural")


@pytest.fixture
def base_messages():
    """Base messages with and without context and plural forms."""
    return [
        MessageId.of("ASCII"),
        MessageId.of("Umlaut: ÄÖÜäöüß"),
        MessageId.of("Smiley: \U0001F609"),
        MessageId.of("Flag: \U0001F1EC\U0001F1E7"),
        MessageId.of("Singular", "Plural"),
        MessageId.of("Singular", "Plural1", "Plural 2", "Plural 3", "Plural 4"),
        MessageId.of("String with context", context="I'm the context"),
        MessageId.of("String", "Plural1", "Plural 2", "Plural 3", "Plural 4", context="Context"),
    ]


def test_registration():
    """Test 1: The handler is registered for the .lang extension."""
    handler = FormatRegistry.get_handler_for_extension("lang")
    assert isinstance(handler, LangHandler)
    assert handler.is_base_language


def test_encode_base_single_message():
    """Test 2: One singular message gives a length-prefixed record and the separator."""
    table = {SINGULAR: MessageText("A")}
    data = lang.encode_base(table)
    assert data == b"\x00\x01A\xff\xff"

    decoded, messages = lang.decode_base(data)
    assert decoded == table
    assert messages == [SINGULAR]


def test_encode_same_as_base():
    """Test 3: Translations equal to the base text are written as sentinels."""
    data = lang.encode([SINGULAR, PLURAL], {SINGULAR: SINGULAR.text, PLURAL: PLURAL.text})
    assert data == b"\xff\xfe" + b"\xff\xff" + b"\xfe"


def test_encode_missing_translations():
    """Test 4: Messages without translation are written as zero length / zero forms."""
    data = lang.encode([SINGULAR, PLURAL], {})
    assert data == b"\x00\x00" + b"\xff\xff" + b"\x00"
    assert lang.decode([SINGULAR, PLURAL], data) == {}


def test_encode_explicit_translations():
    """Test 5: Explicit translations are length-prefixed UTF-8, plurals get a form count."""
    translations = {
        SINGULAR: MessageText("Ä"),
        PLURAL: MessageText.of("x", "y", "z"),
    }
    data = lang.encode([SINGULAR, PLURAL], translations)
    assert data == (
        b"\x00\x02\xc3\x84"
        + b"\xff\xff"
        + b"\x03" + b"\x00\x01x" + b"\x00\x01y" + b"\x00\x01z"
    )
    assert lang.decode([SINGULAR, PLURAL], data) == translations


def test_empty_singular_translation_is_missing():
    """Test 6: An empty singular translation can't be told apart from "no translation"."""
    data = lang.encode([SINGULAR], {SINGULAR: MessageText("")})
    assert data == b"\x00\x00\xff\xff"


def test_translations_of_unknown_messages_are_ignored():
    """Test 7: Only base messages are written."""
    data = lang.encode([SINGULAR], {SINGULAR: MessageText("B"), MessageId.of("unknown"): MessageText("x")})
    assert data == b"\x00\x01B\xff\xff"


def test_context_is_stored_in_base_file():
    """Test 8: The context is prefixed to the first form in the base language file."""
    msgid = MessageId.of("S", context="ctx")
    data = lang.encode_base({msgid: msgid.text})
    assert data == b"\x00\x07_:ctx\nS\xff\xff"
    assert lang.decode_base(data)[1] == [msgid]


def test_base_order_singulars_first():
    """Test 9: Singulars come before plurals, each group keeps the order of first appearance."""
    b = MessageId.of("B")
    a = MessageId.of("A")
    encoder = LangFileEncoder([b, PLURAL, a, b, HEADER_ID])
    assert encoder.base_messages == [b, a, PLURAL]
    data = encoder.encode_base()
    assert data == b"\x00\x01B\x00\x01A\xff\xff\x02\x00\x08Singular\x00\x06Plural"
    assert lang.decode_base(data)[1] == [b, a, PLURAL]


def test_write_read_base_language(base_messages):
    """Test 10: All kinds of base messages survive writing and reading the base file."""
    data = LangFileEncoder(base_messages).encode_base()
    table, messages = lang.decode_base(data)
    assert set(messages) == set(base_messages)
    assert table == {msgid: msgid.text for msgid in base_messages}


def test_write_read_multiple_languages(base_messages):
    """Test 11: Files of several languages decode to the translations they were created from."""
    translations = {
        "de": {
            base_messages[0]: MessageText("ASCII (de)"),
            base_messages[1]: base_messages[1].text,
            base_messages[4]: MessageText.of("Einzahl", "Mehrzahl"),
            base_messages[6]: MessageText("Text mit Kontext"),
        },
        "ru": {
            base_messages[5]: MessageText.of("ru1", "ru2", "ru3"),
            base_messages[7]: base_messages[7].text,
        },
        "fr": {},
    }
    encoder = LangFileEncoder(base_messages)
    files = {language: encoder.encode(table) for language, table in translations.items()}

    result = lang.decode_multiple_languages("en", encoder.encode_base(), files)

    assert result["en"] == {msgid: msgid.text for msgid in base_messages}
    for language, table in translations.items():
        assert result[language] == table

    # encoding the decoded tables gives the same files again
    assert lang.encode_base(result["en"]) == encoder.encode_base()
    for language, data in files.items():
        assert encoder.encode(result[language]) == data


def test_empty_files():
    """Test 12: Empty files, files with only zeros and files with only the separator decode to nothing."""
    languages = ["de", "fr"]
    empty = {language: {} for language in languages + ["en"]}

    assert lang.decode_multiple_languages("en", b"", {l: b"" for l in languages}) == empty
    assert lang.decode_multiple_languages("en", b"", {l: bytes(4) for l in languages}) == empty
    assert lang.decode_multiple_languages("en", b"\xff\xff", {l: b"\xff\xff" for l in languages}) == empty


def test_longest_string():
    """Test 13: A string of 65533 bytes is the longest possible."""
    data = b"\xff\xfd" + b"a" * 65533
    result = lang.decode_multiple_languages("en", data, {"it": data, "ca-valencia": data})
    expected = {MessageId.of("a" * 65533): MessageText("a" * 65533)}
    assert result == {"en": expected, "it": expected, "ca-valencia": expected}


def test_string_length_limit():
    """Test 14: Encoding 65533 bytes works, 65534 bytes fail."""
    ok = MessageId.of("a" * 65533)
    assert len(lang.encode_base({ok: ok.text})) == 2 + 65533 + 2

    too_long = MessageId.of("a" * 65534)
    with pytest.raises(LimitExceededError):
        lang.encode_base({too_long: too_long.text})
    with pytest.raises(LimitExceededError):
        lang.encode([SINGULAR], {SINGULAR: MessageText("ä" * 32767)})


def test_form_count_limit():
    """Test 15: 253 grammatical forms can be encoded, 254 can't."""
    forms_253 = MessageId(MessageText(tuple(str(i) for i in range(253))))
    data = lang.encode_base({forms_253: forms_253.text})
    assert lang.decode_base(data)[1] == [forms_253]

    forms_254 = MessageId(MessageText(tuple(str(i) for i in range(254))))
    with pytest.raises(LimitExceededError):
        lang.encode_base({forms_254: forms_254.text})


def test_single_byte_is_malformed():
    """Test 16: A file of one byte ends in the middle of a length value."""
    with pytest.raises(MalformedDocumentError):
        lang.decode_base(b"\xff")


def test_base_language_with_sentinels():
    """Test 17: The base language file must not use "same as base" or "no translation"."""
    with pytest.raises(InconsistentBaseLanguageError):
        lang.decode_base(b"\xff\xfe" + b"a" * 65534)
    with pytest.raises(InconsistentBaseLanguageError):
        lang.decode_base(b"\x00\x00")
    with pytest.raises(InconsistentBaseLanguageError):
        lang.decode_base(b"\xff\xff\xfe")
    with pytest.raises(InconsistentBaseLanguageError):
        lang.decode_base(b"\xff\xff\x00")


def test_reserved_form_count():
    """Test 18: The form count 0xFF is reserved."""
    with pytest.raises(UnsupportedSentinelError):
        lang.decode_base(b"\xff\xff\xff")
    with pytest.raises(UnsupportedSentinelError):
        lang.decode([PLURAL], b"\xff\xff\xff")


@pytest.mark.parametrize("data", [
    b"\x00\x05ab",             # string shorter than its length
    b"\x00\x01\xff",           # invalid UTF-8
    b"\xff\xff\x02\x00\x01a",  # second plural form missing
    b"\xff\xff\x02\x00\x01a\x00",  # second plural form length cut off
])
def test_malformed_base_files(data):
    """Test 19: Truncated and undecodable files are rejected."""
    with pytest.raises(MalformedDocumentError):
        lang.decode_base(data)


def test_translated_file_ends_early():
    """Test 20: Base messages after the end of a translated file are untranslated."""
    b = MessageId.of("B")
    assert lang.decode([SINGULAR, b, PLURAL], b"\x00\x01x") == {SINGULAR: MessageText("x")}
    assert lang.decode([SINGULAR, b, PLURAL], b"\x00\x01x\xff\xff") == {SINGULAR: MessageText("x")}


def test_translated_file_with_too_many_singulars():
    """Test 21: More singular records than base singulars is an error if plurals follow."""
    with pytest.raises(MalformedDocumentError):
        lang.decode([SINGULAR, PLURAL], b"\x00\x01x\x00\x01y\xff\xff\x00")


def test_translated_file_without_separator_before_end():
    """Test 22: A file with exactly the singular records (no separator) is complete."""
    assert lang.decode([SINGULAR, PLURAL], b"\x00\x01x") == {SINGULAR: MessageText("x")}


def test_handler_with_base_messages():
    """Test 23: A handler with base messages reads and writes translated files."""
    base_handler = LangHandler()
    base_bytes = base_handler.encode({SINGULAR: SINGULAR.text, PLURAL: PLURAL.text})
    table, messages = base_handler.decode_base(base_bytes)

    handler = LangHandler(messages)
    assert not handler.is_base_language
    translations = {SINGULAR: MessageText("Ä"), PLURAL: PLURAL.text}
    assert handler.decode(handler.encode(translations)) == translations
    assert base_handler.decode(base_bytes) == table


def test_duplicate_messages_last_write_wins():
    """Test 24: Equal MessageIds collapse into one entry, the last translation wins."""
    translations = {}
    translations[MessageId.of("A")] = MessageText("first")
    translations[MessageId(MessageText(["A"]))] = MessageText("second")
    assert lang.encode([SINGULAR], translations) == b"\x00\x06second\xff\xff"


def test_base_records_decoding_to_equal_messages():
    """Test 25: Translated records line up with the base records by position, even if two base records are equal."""
    prefixed = MessageId.of("_:x\ny")
    with_context = MessageId.of("y", context="x")
    plural = MessageId.of("one", "many")

    _, messages = lang.decode_base(lang.encode_base({
        prefixed: prefixed.text,
        with_context: with_context.text,
        plural: plural.text,
    }))
    assert messages == [with_context, with_context, plural]

    translated = lang.encode([prefixed, with_context, plural], {
        prefixed: MessageText("erst"),
        with_context: MessageText("zweit"),
        plural: MessageText.of("eins", "viele"),
    })
    assert lang.decode(messages, translated) == {
        with_context: MessageText("zweit"),
        plural: MessageText.of("eins", "viele"),
    }

    untranslated_singulars = lang.encode([prefixed, with_context, plural], {plural: MessageText.of("eins", "viele")})
    assert lang.decode(messages, untranslated_singulars) == {plural: MessageText.of("eins", "viele")}


def test_empty_context():
    """Test 26: An empty context survives the base language file."""
    msgid = MessageId.of("S", context="")
    data = lang.encode_base({msgid: msgid.text})
    assert data == b"\x00\x04_:\nS\xff\xff"
    assert lang.decode_base(data)[1] == [msgid]
