#!/usr/bin/env python3
"""
Reading and writing sets of translation files.

Every file holds the translations of one language, the language code is the
file name without extension (e.g. `de.lang`, `pt_BR.mo`).
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import InvalidArgumentError
from .format_handlers.base import I18nFormatHandler
from .format_handlers.lang import DEFAULT_BASE_LANGUAGE, LangHandler, decode_multiple_languages
from .format_handlers.mo import BE_MAGIC, is_mo_file
from .model import MessageId, MessageText, TranslationTable
from .translation_data import TranslationData

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _starts_with_mo_magic(path: Path) -> bool:
    with path.open('rb') as f:
        return is_mo_file(f.read(len(BE_MAGIC)))


def is_input_file(path: Path, handler: I18nFormatHandler) -> bool:
    """
    Whether the file in a directory should be converted by the given handler.

    *.mo files are recognized by their magic bytes, all other formats by file extension.
    """
    if not path.is_file():
        return False
    if handler.name == 'mo':
        return _starts_with_mo_magic(path)
    return path.suffix.lower().lstrip('.') in handler.file_extensions


def list_input_files(input_path: PathLike, handler: I18nFormatHandler) -> list[Path]:
    """
    List the files to convert.

    Args:
        input_path: A single file, or a directory whose files (not subdirectories)
            suitable for the handler are used
        handler: Handler of the input format

    Raises:
        FileNotFoundError: if input_path does not exist
        InvalidArgumentError: if two input files have the same name without extension
    """
    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(f"The given input file/directory does not exist: {path}")

    if path.is_dir():
        files = sorted(p for p in path.iterdir() if is_input_file(p, handler))
    else:
        files = [path]

    by_stem: dict[str, list[Path]] = {}
    for file in files:
        by_stem.setdefault(file.stem, []).append(file)
    collisions = [file.name for same in by_stem.values() if len(same) > 1 for file in same]
    if collisions:
        raise InvalidArgumentError(
            f"The given input directory contains more than one file with the same name "
            f"({', '.join(collisions)})! This would lead to name collisions with the output files."
        )

    logger.debug("Found %d %s input file(s) in %s", len(files), handler.name, path)
    return files


def output_directory(input_path: PathLike, output: Optional[PathLike] = None) -> Path:
    """
    The directory to write into: output if given, else the input directory
    (or the directory containing the input file). Created if it does not exist.

    Raises:
        InvalidArgumentError: if output exists but is not a directory
    """
    if output is not None:
        directory = Path(output)
    else:
        path = Path(input_path)
        directory = path if path.is_dir() else path.parent

    if directory.exists() and not directory.is_dir():
        raise InvalidArgumentError(f"The argument given as output directory is not a directory!: {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def read_files(files: list[Path]) -> dict[str, bytes]:
    """Read all files, keyed by language code (file name without extension)."""
    result = {}
    for file in files:
        data = file.read_bytes()
        logger.info("Read %s", file)
        logger.debug("%s: %d bytes", file.name, len(data))
        result[file.stem] = data
    return result


def decode_files(files: list[Path], handler: I18nFormatHandler) -> dict[str, TranslationTable]:
    """Decode each file on its own (formats that don't depend on a base language file)."""
    return {language: handler.decode(data) for language, data in read_files(files).items()}


def write_files(outputs: Mapping[str, bytes], output_dir: PathLike, extension: str) -> list[Path]:
    """
    Write one file per language into output_dir.

    Args:
        outputs: Map of language code -> file content
        output_dir: Target directory (must exist)
        extension: File extension without dot

    Returns:
        The written files, sorted by language code
    """
    written = []
    for language in sorted(outputs):
        path = Path(output_dir) / f"{language}.{extension}"
        path.write_bytes(outputs[language])
        logger.info("Wrote %s", path)
        logger.debug("%s: %d bytes", path.name, len(outputs[language]))
        written.append(path)
    return written


def decode_lang_files(input_path: PathLike, base_language: str = DEFAULT_BASE_LANGUAGE) -> dict[str, TranslationTable]:
    """
    Decode a set of *.lang files, one of which must be the file of the base language.

    Args:
        input_path: Directory containing the *.lang files (or a single *.lang file)
        base_language: Language code of the base language

    Returns:
        Map of language code -> translation table, including the base language

    Raises:
        InvalidArgumentError: if there is no file for the base language
    """
    contents = read_files(list_input_files(input_path, LangHandler()))
    if base_language not in contents:
        raise InvalidArgumentError(
            f"No {base_language}.lang file is given, the file of the base language '{base_language}' is needed!"
        )
    base_bytes = contents.pop(base_language)
    return decode_multiple_languages(base_language, base_bytes, contents)


def base_messages_of(
    translations: Mapping[str, Mapping[MessageId, MessageText]],
    base_language: str = DEFAULT_BASE_LANGUAGE,
) -> list[MessageId]:
    """
    The messages of the base language: the keys of the base language table if there is one,
    otherwise the sorted union of the keys of all languages.
    """
    if base_language in translations:
        return list(translations[base_language])
    return sorted({msgid for table in translations.values() for msgid in table})


def encode_to_lang_files(
    translations: Mapping[str, Mapping[MessageId, MessageText]],
    output_dir: PathLike,
    base_language: str = DEFAULT_BASE_LANGUAGE,
) -> list[Path]:
    """
    Write one *.lang file per language (including the base language) into output_dir.

    Raises:
        InvalidArgumentError: if a language contains messages that the base language does not have
    """
    data = TranslationData(
        base_messages=base_messages_of(translations, base_language),
        translations={
            language: dict(table)
            for language, table in translations.items()
            if language != base_language
        },
        base_language=base_language,
    )
    return write_files(data.encode_to_multiple_lang_files(), output_dir, 'lang')
