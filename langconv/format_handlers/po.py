#!/usr/bin/env python3
"""
GNU gettext PO/POT format handler.

See https://www.gnu.org/software/gettext/manual/html_node/PO-Files.html

Only the messages themselves are kept. Comments (translator comments,
references, flags) are dropped when decoding and never written.
"""

import re
from typing import Mapping, Optional, Union

from ..errors import InvalidArgumentError, MalformedDocumentError, PoSyntaxError
from ..model import MessageId, MessageText, TranslationTable, ensure_utf8_header
from .base import I18nFormatHandler


class PoHandler(I18nFormatHandler):
    """
    Handler for GNU gettext PO/POT files.

    PO format structure:
    ```
    msgctxt "context"
    msgid "Source text"
    msgstr "Translated text"

    # Plural form
    msgid "One item"
    msgid_plural "%d items"
    msgstr[0] "Un élément"
    msgstr[1] "%d éléments"
    ```

    Strings containing line breaks are written over multiple lines:
    ```
    msgid ""
    "first line\\n"
    "second line"
    ```
    """

    REGEX_MSGCTXT = re.compile(r'msgctxt "(.*)"')
    REGEX_MSGID = re.compile(r'msgid "(.*)"')
    REGEX_MSGID_PLURAL = re.compile(r'msgid_plural "(.*)"')
    REGEX_MSGSTR = re.compile(r'msgstr "(.*)"')
    REGEX_MSGSTR_INDEXED = re.compile(r'msgstr\[([0-9]+)\] "(.*)"')

    # A string that ends on one line and continues on the next is joined into one line
    REGEX_MULTILINE_STRING_SEPARATOR = re.compile(r'"[ \t\r]*\n[ \t\r]*"')

    REGEX_LINE_BREAK = re.compile(r'\r\n|\r|\n')

    # Escape sequences understood when reading: single characters, octal and hexadecimal
    REGEX_ESCAPE = re.compile(r'\\(?:([0-7]{1,3})|x([0-9a-fA-F]{1,2})|(.))', re.DOTALL)

    UNESCAPE_MAP = {
        '\\': '\\',
        '"': '"',
        'r': '\r',
        't': '\t',
        'n': '\n',
        'a': '\a',
        'b': '\b',
        'f': '\f',
        'v': '\v',
        '?': '?',
        "'": "'",
    }

    # Characters that should not show up in messages of the base language
    DISCOURAGED_CHARACTERS = {
        '\a': '\\a',
        '\b': '\\b',
        '\f': '\\f',
        '\r': '\\r',
    }

    @property
    def name(self) -> str:
        return "po"

    @property
    def file_extensions(self) -> list[str]:
        return ["po", "pot"]

    @property
    def description(self) -> str:
        return "GNU gettext textual *.po/*.pot files"

    # --- Encoding -------------------------------------------------------

    def encode(self, translations: Mapping[MessageId, MessageText]) -> bytes:
        """
        Encode the translations (plus a header entry declaring UTF-8) as PO file.

        Raises:
            InvalidArgumentError: if a message has more than two forms in the base language
        """
        entries = sorted(ensure_utf8_header(translations).items(), key=lambda entry: entry[0].sort_key())
        blocks = []
        for msgid, msgstr in entries:
            lines = []
            if msgid.context is not None:
                lines.append(f'msgctxt "{self._escape_po_string(msgid.context)}"')
            lines.extend(self._encode_msgid_lines(msgid.text))
            lines.extend(self._encode_msgstr_lines(msgstr, msgid.text.num_forms >= 2))
            blocks.append('\n'.join(lines))
        return ('\n\n'.join(blocks) + '\n').encode('utf-8')

    def _encode_msgid_lines(self, text: MessageText) -> list[str]:
        if text.num_forms > 2:
            raise InvalidArgumentError(
                f"Only one or two msgids are allowed in PO files (found {text.num_forms} for '{text.singular}')!"
            )
        lines = self._format_po_string('msgid', text.singular)
        if text.num_forms == 2:
            lines.extend(self._format_po_string('msgid_plural', text.strings[1]))
        return lines

    def _encode_msgstr_lines(self, text: MessageText, has_plurals: bool) -> list[str]:
        if not has_plurals:
            return self._format_po_string('msgstr', text.singular)
        lines = []
        for i, form in enumerate(text.strings):
            lines.extend(self._format_po_string(f'msgstr[{i}]', form))
        return lines

    def _escape_po_string(self, s: str) -> str:
        """
        Escape string for PO format (C style).

        For compatibility with the `msgfmt` utility, `?`, `'`, the escape character 0x1B and
        unicode characters are left as they are.
        """
        return (
            s.replace('\\', '\\\\')
            .replace('\r', '\\r')
            .replace('\t', '\\t')
            .replace('\n', '\\n')
            .replace('\a', '\\a')
            .replace('\b', '\\b')
            .replace('\f', '\\f')
            .replace('\v', '\\v')
            .replace('"', '\\"')
        )

    def _format_po_string(self, prefix: str, s: str) -> list[str]:
        """
        Format a string for PO output.

        Strings without line breaks go on the same line as the prefix. Otherwise the first line
        is the empty string, followed by one line per line of the string:
        ```
        msgstr ""
        "first\\n"
        "second"
        ```
        """
        if '\n' not in s:
            return [f'{prefix} "{self._escape_po_string(s)}"']

        lines = [f'{prefix} ""']
        segments = s.split('\n')
        for segment in segments[:-1]:
            lines.append(f'"{self._escape_po_string(segment)}\\n"')
        if segments[-1]:
            lines.append(f'"{self._escape_po_string(segments[-1])}"')
        return lines

    # --- Decoding -------------------------------------------------------

    def decode(self, data: Union[bytes, str]) -> TranslationTable:
        """
        Decode PO content into a translation table.

        Args:
            data: Raw PO file content (UTF-8 bytes or already decoded text)

        Raises:
            PoSyntaxError: if the content does not follow the PO syntax
        """
        if isinstance(data, bytes):
            try:
                content = data.decode('utf-8')
            except UnicodeDecodeError as e:
                raise MalformedDocumentError(f"PO file is not valid UTF-8: {e}") from e
        else:
            content = data

        lines = [
            line.strip()
            for line in self.REGEX_LINE_BREAK.split(self.REGEX_MULTILINE_STRING_SEPARATOR.sub('', content))
        ]
        lines = [line for line in lines if line and not line.startswith('#')]

        result: TranslationTable = {}
        i = 0
        while i < len(lines):
            msgctxt = self._match_string(self.REGEX_MSGCTXT, lines, i)
            if msgctxt is not None:
                i += 1

            msgid = self._match_string(self.REGEX_MSGID, lines, i)
            if msgid is None:
                raise PoSyntaxError(
                    f"Syntax error on line `{self._line_or_eof(lines, i)}`: This line was expected to be a `msgid` line",
                    line=lines[i] if i < len(lines) else None,
                )
            i += 1

            msgid_plural = self._match_string(self.REGEX_MSGID_PLURAL, lines, i)
            if msgid_plural is not None:
                i += 1
                i, msgstr = self._read_plural_msgstr(lines, i, msgid)
                key = MessageId(MessageText((msgid, msgid_plural)), msgctxt)
            else:
                value = self._match_string(self.REGEX_MSGSTR, lines, i)
                if value is None:
                    raise PoSyntaxError(
                        f"Syntax error on line `{self._line_or_eof(lines, i)}`: "
                        f"This line was expected to be a `msgstr` line (for msgid '{msgid}')",
                        line=lines[i] if i < len(lines) else None,
                        msgid=msgid,
                    )
                i += 1
                msgstr = MessageText((value,))
                key = MessageId(MessageText((msgid,)), msgctxt)

            result[key] = msgstr

        return result

    def _read_plural_msgstr(self, lines: list[str], start: int, msgid: str) -> tuple[int, MessageText]:
        """Read the run of msgstr[n] lines beginning at start, returns the index after the run."""
        plural_forms = []
        i = start
        while i < len(lines):
            match = self.REGEX_MSGSTR_INDEXED.fullmatch(lines[i])
            if not match:
                break
            plural_forms.append((int(match.group(1)), self._unescape_po_string(match.group(2))))
            i += 1

        if not plural_forms:
            raise PoSyntaxError(
                f"The plural forms for '{msgid}' must not be empty!",
                line=lines[i] if i < len(lines) else None,
                msgid=msgid,
            )

        plural_forms.sort(key=lambda form: form[0])
        for actual_index, (found_index, _) in enumerate(plural_forms):
            if found_index != actual_index:
                found = ', '.join(str(index) for index, _ in plural_forms)
                raise PoSyntaxError(
                    f"Syntax error: The translations for '{msgid}' are missing msgstr[{actual_index}] "
                    f"(only found indices {found})",
                    msgid=msgid,
                )
        return i, MessageText(tuple(form for _, form in plural_forms))

    def _match_string(self, regex: re.Pattern, lines: list[str], i: int) -> Optional[str]:
        if i >= len(lines):
            return None
        match = regex.fullmatch(lines[i])
        if not match:
            return None
        return self._unescape_po_string(match.group(1))

    @staticmethod
    def _line_or_eof(lines: list[str], i: int) -> str:
        return lines[i] if i < len(lines) else "<end of file>"

    def _unescape_po_string(self, s: str) -> str:
        """Unescape C style escapes, including octal (\\nnn) and hexadecimal (\\xHH) escapes."""
        def replace(match: re.Match) -> str:
            octal, hexadecimal, char = match.groups()
            if octal is not None:
                return chr(int(octal, 8))
            if hexadecimal is not None:
                return chr(int(hexadecimal, 16))
            return self.UNESCAPE_MAP.get(char, '\\' + char)

        return self.REGEX_ESCAPE.sub(replace, s)

    # --- Checks ---------------------------------------------------------

    def check_translations(self, translations: Mapping[MessageId, MessageText]) -> list[str]:
        """
        Check the base language strings for common mistakes.

        Returns:
            Warning messages (empty if there are none)
        """
        warnings = []
        for char, label in self.DISCOURAGED_CHARACTERS.items():
            count = sum(
                1 for msgid in translations
                if any(char in s for s in msgid.text.strings)
            )
            if count >= 1:
                warnings.append(
                    f"Internationalized messages should not contain the '{label}' escape sequence! "
                    f"({count} of them do contain it)"
                )
        return warnings


REGEX_EMAIL_ADDRESS = re.compile(r' ?<[^@]+@[^>]+>')
REGEX_LAST_TRANSLATOR = re.compile(r'(msgid ""\nmsgstr ""\n("[^\n]+\n)*)"Last-Translator: [^\n]+\n')


def shorten_po_file(lines: list[str], title: str, copyright_holder: str, package_name: str) -> str:
    """
    Shorten the lines of a *.po file.

    The placeholders in the header comment are replaced, e-mail addresses are removed from it.
    Comments with source locations (#:) and flags (#,) are removed, as is the
    Last-Translator line of the header entry. Trailing whitespace is trimmed.

    Args:
        lines: All lines of the *.po file
        title: Replaces "SOME DESCRIPTIVE TITLE."
        copyright_holder: Replaces "THE PACKAGE'S COPYRIGHT HOLDER"
        package_name: Replaces "PACKAGE" in "PACKAGE package"

    Returns:
        The new content of the *.po file, ending with a single newline
    """
    body_start = next(
        (i for i, line in enumerate(lines) if not line.startswith('# ') and line != '#'),
        len(lines),
    )
    header_lines = [
        REGEX_EMAIL_ADDRESS.sub(
            '',
            line.replace("SOME DESCRIPTIVE TITLE.", title)
            .replace("THE PACKAGE'S COPYRIGHT HOLDER", copyright_holder)
            .replace("PACKAGE package", f"{package_name} package"),
        )
        for line in lines[:body_start]
    ]
    body_lines = [line for line in lines[body_start:] if not line.startswith(('#, ', '#: '))]

    content = '\n'.join(line.rstrip() for line in header_lines + body_lines).rstrip()
    return REGEX_LAST_TRANSLATOR.sub(r'\1', content) + '\n'
