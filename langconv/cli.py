#!/usr/bin/env python3
"""
langconv - Converter between the translation file formats used by JOSM plugins

Supported Formats:
    - LANG (JOSM *.lang files, one per language)
    - MO (gettext binary *.mo files)
    - PO/POT (gettext textual *.po files)

Commands:
    mo2lang    - Convert *.mo files to *.lang files
    lang2mo    - Convert *.lang files to *.mo files
    po2mo      - Convert *.po files to *.mo files
    po2lang    - Convert *.po files to *.lang files
    mo2po      - Convert *.mo files to *.po files
    shorten-po - Strip noise from *.po files (in place)
    stats      - Show how much of each language is translated
    formats    - List supported formats

INPUT is a single file, or a directory in which all files suitable for the
command are converted (not subdirectories). OUTPUT is the directory to write
into, it defaults to the directory of INPUT.

All commands print JSON to stdout, log messages go to stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import LangconvConfig, load_config
from .errors import InvalidArgumentError
from .files import (
    decode_files,
    decode_lang_files,
    encode_to_lang_files,
    list_input_files,
    output_directory,
    write_files,
)
from .format_handlers import FormatRegistry, MoHandler, PoHandler, shorten_po_file
from .model import TranslationTable
from .stats import translation_stats

logger = logging.getLogger(__name__)

# (input format, output format) of the conversion commands
CONVERSIONS = {
    "mo2lang": ("mo", "lang"),
    "lang2mo": ("lang", "mo"),
    "po2mo": ("po", "mo"),
    "po2lang": ("po", "lang"),
    "mo2po": ("mo", "po"),
}


def _input_error(args, handler, config: LangconvConfig):
    """Check the input before converting, returns an error result or None."""
    input_path = Path(args.input)
    if not input_path.exists():
        return {
            "status": "error",
            "error_type": "INPUT_NOT_FOUND",
            "error": f"The given input file/directory does not exist: {args.input}",
            "suggestion": "Pass an existing file or a directory containing the files to convert",
        }

    try:
        files = list_input_files(input_path, handler)
    except InvalidArgumentError as e:
        return {
            "status": "error",
            "error_type": "NAME_COLLISION",
            "error": str(e),
            "suggestion": "Move files with the same name (but different extension) into separate directories",
        }

    if not files:
        return {
            "status": "error",
            "error_type": "NO_INPUT_FILES",
            "error": f"No *.{handler.file_extensions[0]} files found in {args.input}",
            "suggestion": f"Use a directory that contains *.{handler.file_extensions[0]} files",
        }

    if handler.name == "lang" and config.base_language not in {f.stem for f in files}:
        return {
            "status": "error",
            "error_type": "MISSING_BASE_LANGUAGE",
            "error": f"No {config.base_language}.lang file is given, the base language file is needed!",
            "suggestion": f"Add {config.base_language}.lang to the input or choose another --base-language",
        }
    return None


def _read_translations(input_path, input_format: str, config: LangconvConfig) -> dict[str, TranslationTable]:
    if input_format == "lang":
        return decode_lang_files(input_path, config.base_language)
    handler = FormatRegistry.get_handler(input_format)
    return decode_files(list_input_files(input_path, handler), handler)


def _write_translations(translations, output_format: str, output_dir: Path, config: LangconvConfig) -> list[Path]:
    if output_format == "lang":
        return encode_to_lang_files(translations, output_dir, config.base_language)
    if output_format == "mo":
        handler = MoHandler.get_instance(config.mo_big_endian)
    else:
        handler = FormatRegistry.get_handler(output_format)
    outputs = {language: handler.encode(table) for language, table in translations.items()}
    return write_files(outputs, output_dir, handler.file_extensions[0])


def cmd_convert(args, config: LangconvConfig) -> dict:
    """Convert all input files from one format to another."""
    input_format, output_format = CONVERSIONS[args.command]
    handler = FormatRegistry.get_handler(input_format)

    error = _input_error(args, handler, config)
    if error:
        return error

    translations = _read_translations(args.input, input_format, config)
    stats = translation_stats(translations, config.base_language, needs_base_language=input_format == "lang")
    logger.info("Decoded %d language(s):\n%s", len(translations), stats)

    output_dir = output_directory(args.input, args.output)
    written = _write_translations(translations, output_format, output_dir, config)

    result = {
        "status": "ok",
        "files": [str(path) for path in written],
        "stats": stats,
        "summary": f"{len(written)} *.{output_format} file(s) written to {output_dir}",
    }
    if input_format == "po":
        base_messages = {msgid: msgid.text for table in translations.values() for msgid in table}
        warnings = PoHandler().check_translations(base_messages)
        if warnings:
            result["warnings"] = warnings
    return result


def cmd_shorten_po(args, config: LangconvConfig) -> dict:
    """Shorten *.po files in place."""
    shorten = config.shorten
    title = args.title if args.title is not None else shorten.title
    copyright_holder = args.copyright_holder if args.copyright_holder is not None else shorten.copyright_holder
    package_name = args.package_name if args.package_name is not None else shorten.package_name

    missing = [f for f in args.files if not Path(f).is_file()]
    if missing:
        return {
            "status": "error",
            "error_type": "FILE_NOT_FOUND",
            "error": f"File(s) not found: {', '.join(missing)}",
            "suggestion": "Pass paths of existing *.po files",
        }

    files = []
    for filename in args.files:
        path = Path(filename)
        lines = path.read_text(encoding="utf-8").splitlines()
        path.write_text(shorten_po_file(lines, title, copyright_holder, package_name), encoding="utf-8")
        logger.info("Shortened %s", path)
        files.append(str(path))

    return {
        "status": "ok",
        "files": files,
        "summary": f"{len(files)} *.po file(s) shortened",
    }


def _detect_stats_format(input_path: Path) -> str:
    if input_path.is_file():
        return FormatRegistry.detect_format(str(input_path), input_path.read_bytes()[:4]).name
    for name in ("mo", "po", "lang"):
        if list_input_files(input_path, FormatRegistry.get_handler(name)):
            return name
    raise InvalidArgumentError(f"No translation files found in {input_path}")


def cmd_stats(args, config: LangconvConfig) -> dict:
    """Show translation statistics."""
    input_path = Path(args.input)
    if args.format != "auto":
        input_format = args.format
    elif input_path.exists():
        input_format = _detect_stats_format(input_path)
    else:
        input_format = "mo"
    handler = FormatRegistry.get_handler(input_format)

    error = _input_error(args, handler, config)
    if error:
        return error

    translations = _read_translations(args.input, input_format, config)
    stats = translation_stats(translations, config.base_language, needs_base_language=input_format == "lang")
    return {
        "status": "ok",
        "format": input_format,
        "languages": sorted(translations),
        "stats": stats,
        "summary": f"{len(translations)} language(s) in *.{input_format} format",
    }


def cmd_formats(args, config: LangconvConfig) -> dict:
    """List supported formats."""
    formats = FormatRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langconv",
        description="langconv - Convert between *.lang, *.mo and *.po translation files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Supported Formats:
  lang  - JOSM *.lang files (needs the file of the base language, en.lang by default)
  mo    - GNU gettext binary *.mo files (recognized by their magic bytes)
  po    - GNU gettext *.po/*.pot files

Examples:
  # Convert all *.mo files in a directory into *.lang files next to them
  langconv mo2lang src/main/po

  # Convert *.lang files into big-endian *.mo files in another directory
  langconv --big-endian lang2mo build/i18n/data build/mo

  # Shorten *.po files
  langconv shorten-po --title "Translations for my plugin" po/*.po

  # Translation statistics
  langconv stats build/i18n/data
        """,
    )
    parser.add_argument("--config", "-c", help="YAML config file (default: .langconv.yml if present)")
    parser.add_argument("--base-language", "-b", help="Language code of the base language (default: en)")
    parser.add_argument("--big-endian", action="store_true", default=None, help="Write *.mo files in big-endian byte order")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for command, (input_format, output_format) in CONVERSIONS.items():
        convert_parser = subparsers.add_parser(command, help=f"Convert *.{input_format} files to *.{output_format} files")
        convert_parser.add_argument("input", help="Input file or directory")
        convert_parser.add_argument("output", nargs="?", help="Output directory (default: directory of the input)")

    shorten_parser = subparsers.add_parser("shorten-po", help="Shorten *.po files in place")
    shorten_parser.add_argument("files", nargs="+", help="*.po files")
    shorten_parser.add_argument("--title", help="Replaces 'SOME DESCRIPTIVE TITLE.'")
    shorten_parser.add_argument("--copyright-holder", help="Replaces \"THE PACKAGE'S COPYRIGHT HOLDER\"")
    shorten_parser.add_argument("--package-name", help="Replaces 'PACKAGE' in 'PACKAGE package'")

    stats_parser = subparsers.add_parser("stats", help="Show translation statistics")
    stats_parser.add_argument("input", help="Input file or directory")
    stats_parser.add_argument("--format", "-f", default="auto", choices=["auto", "lang", "mo", "po"],
                              help="Input format (default: auto-detect)")

    subparsers.add_parser("formats", help="List supported formats")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config).with_overrides(
            base_language=args.base_language,
            mo_big_endian=args.big_endian,
        )
        if args.command in CONVERSIONS:
            result = cmd_convert(args, config)
        elif args.command == "shorten-po":
            result = cmd_shorten_po(args, config)
        elif args.command == "stats":
            result = cmd_stats(args, config)
        else:
            result = cmd_formats(args, config)
        print(json.dumps(result, indent=2))
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)

    if result.get("status") == "error":
        sys.exit(1)


if __name__ == "__main__":
    main()
