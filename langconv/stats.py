#!/usr/bin/env python3
"""
Human readable statistics about how much of a project is translated.
"""

import math
from typing import Mapping

from .errors import InvalidArgumentError
from .model import MessageId, MessageText, is_header

PROGRESS_BAR_LENGTH = 25

# Index n is the block that is n/8 wide
EIGHTH_BLOCKS = ['', '▏', '▎', '▍', '▌', '▋', '▊', '▉', '█']


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _raw_progress_bar(proportion: float, length: int = PROGRESS_BAR_LENGTH) -> str:
    """Bar of block characters (eighth-block resolution), padded with spaces to exactly `length` characters."""
    proportion = min(max(proportion, 0.0), 1.0)
    full_blocks = int(proportion * length)
    partial = EIGHTH_BLOCKS[_round_half_up(proportion * length * 8 % 8)]
    return ('█' * full_blocks + partial).ljust(length, ' ')


def format_as_progress_bar(done: int, total: int) -> str:
    """
    Format progress as unicode progress bar of exactly 36 characters.

    ```
    ░██████████▌              ░  42.00 %
    ▓█████████████████████████▓ 100.00 %
    ```
    The bar is framed with ▓ when everything is done, otherwise with ░.

    Raises:
        InvalidArgumentError: if done > total (or one of them is negative)
    """
    if done < 0 or total < 0:
        raise InvalidArgumentError(f"Can't format progress bar for negative numbers!: {done} / {total}")
    if done > total:
        raise InvalidArgumentError(f"Can't format progress bar for more than 100%!: {done} / {total}")

    proportion = 1.0 if total == 0 else done / total
    frame = '▓' if done == total else '░'

    percentage = str(_round_half_up(proportion * 10000)).rjust(3, '0').rjust(5, ' ')
    return f"{frame}{_raw_progress_bar(proportion)}{frame} {percentage[:3]}.{percentage[3:]} %"


def _count_strings(table: Mapping[MessageId, MessageText]) -> int:
    return sum(1 for msgid in table if not is_header(msgid))


def translation_stats(
    translations: Mapping[str, Mapping[MessageId, MessageText]],
    base_language: str,
    needs_base_language: bool = False,
) -> str:
    """
    One line per language with the number of strings and the translation progress.

    The base language comes first, the other languages follow, most translated first.
    The gettext header is not counted.

    Args:
        translations: Map of language code -> translation table
        base_language: Language code of the base language
        needs_base_language: If True, a missing base language is an error. Otherwise all
            messages of all languages together are counted as base language.

    Raises:
        InvalidArgumentError: if the base language is missing and needs_base_language is set
    """
    if base_language in translations:
        base = translations[base_language]
    elif needs_base_language:
        raise InvalidArgumentError(f"No strings in base language '{base_language}' found!")
    else:
        base = {msgid: msgid.text for table in translations.values() for msgid in table}
    num_base_strings = _count_strings(base)

    key_width = max((len(language) for language in translations), default=0) + 2
    number_width = max((len(str(len(table))) for table in translations.values()), default=0)
    number_width = max(number_width, len(str(num_base_strings)))

    lines = [f"{base_language.rjust(key_width)}: {str(num_base_strings).rjust(number_width)} strings (base language)"]
    others = sorted(
        ((language, table) for language, table in translations.items() if language != base_language),
        key=lambda item: (-len(item[1]), item[0]),
    )
    for language, table in others:
        num_translated = _count_strings(table)
        progress = format_as_progress_bar(min(num_translated, num_base_strings), num_base_strings)
        lines.append(
            f"{language.rjust(key_width)}: {str(num_translated).rjust(number_width)} strings {progress} translated"
        )
    return '\n'.join(lines)
