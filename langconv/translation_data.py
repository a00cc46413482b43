#!/usr/bin/env python3
"""
A complete set of translations: one base language plus any number of translated languages.
"""

from dataclasses import dataclass, field

from .errors import InvalidArgumentError
from .format_handlers.lang import DEFAULT_BASE_LANGUAGE, LangFileEncoder
from .model import MessageId, TranslationTable, base_table


@dataclass
class TranslationData:
    """
    Translations of one project into several languages.

    Attributes:
        base_messages: All translatable messages of the base language
        translations: Map of language code -> translation table (without the base language)
        base_language: Language code of the base language
    """
    base_messages: list[MessageId]
    translations: dict[str, TranslationTable] = field(default_factory=dict)
    base_language: str = DEFAULT_BASE_LANGUAGE

    def __post_init__(self):
        if self.base_language in self.translations:
            raise InvalidArgumentError(
                f"The base language '{self.base_language}' must not be one of the translated languages!"
            )
        known = set(self.base_messages)
        for language, table in self.translations.items():
            unknown = [msgid for msgid in table if msgid not in known]
            if unknown:
                raise InvalidArgumentError(
                    f"The translations for '{language}' contain {len(unknown)} message(s) that are not "
                    f"in the base language, e.g. '{unknown[0].text.singular}'!"
                )

    @property
    def languages(self) -> list[str]:
        """All language codes, the base language first."""
        return [self.base_language, *sorted(self.translations)]

    def all_tables(self) -> dict[str, TranslationTable]:
        """Map of language code -> translation table, including the base language."""
        result = {self.base_language: base_table(self.base_messages)}
        result.update(self.translations)
        return result

    def encode_to_multiple_lang_files(self) -> dict[str, bytes]:
        """Encode one *.lang file per language (including the base language)."""
        encoder = LangFileEncoder(self.base_messages)
        result = {self.base_language: encoder.encode_base()}
        for language, table in self.translations.items():
            result[language] = encoder.encode(table)
        return result
