#!/usr/bin/env python3
"""
Base classes for format handlers.

I18nFormatHandler is the abstract base class that all format-specific handlers
must implement. The universal data structure they convert from and to is the
translation table of langconv.model (MessageId -> MessageText).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Optional

from ..errors import LangconvError
from ..model import MessageId, MessageText, TranslationTable


class I18nFormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    Each handler implements encoding and decoding for one i18n file format
    (*.lang, *.mo, *.po). Handlers hold no mutable state, one instance can be
    shared between threads.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short format name, used on the command line."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def encode(self, translations: Mapping[MessageId, MessageText]) -> bytes:
        """
        Encode a translation table.

        Args:
            translations: Map of base language message -> translated message

        Returns:
            The encoded file content
        """
        pass

    @abstractmethod
    def decode(self, data: bytes) -> TranslationTable:
        """
        Decode file content into a translation table.

        Args:
            data: Raw file content

        Returns:
            Map of base language message -> translated message

        Raises:
            MalformedDocumentError: if the content is not a valid document of this format
        """
        pass

    def matches_content(self, data: bytes) -> bool:
        """
        Whether the content is recognizably of this format, regardless of the file name.

        Default is False (format can only be detected by file extension).
        """
        return False

    def validate_content(self, data: bytes) -> list[str]:
        """
        Validate that content can be decoded by this handler.

        Args:
            data: Raw file content

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            self.decode(data)
        except LangconvError as e:
            return [str(e)]
        return []


class FormatRegistry:
    """Registry of available format handlers."""

    _handlers: dict[str, type[I18nFormatHandler]] = {}
    _extension_map: dict[str, str] = {}  # extension -> handler name

    @classmethod
    def register(cls, handler_class: type[I18nFormatHandler]) -> None:
        """Register a format handler class."""
        # Create instance to get properties
        handler = handler_class()
        cls._handlers[handler.name.lower()] = handler_class
        for ext in handler.file_extensions:
            cls._extension_map[ext.lower()] = handler.name.lower()

    @classmethod
    def get_handler(cls, name: str) -> I18nFormatHandler:
        """Get handler instance by name."""
        name_lower = name.lower()
        if name_lower not in cls._handlers:
            available = ', '.join(cls._handlers.keys())
            raise ValueError(f"Unknown format: {name}. Available: {available}")
        return cls._handlers[name_lower]()

    @classmethod
    def get_handler_for_extension(cls, extension: str) -> I18nFormatHandler:
        """Get handler instance by file extension."""
        ext = extension.lower().lstrip('.')
        if ext not in cls._extension_map:
            available = ', '.join(cls._extension_map.keys())
            raise ValueError(f"Unknown extension: .{ext}. Supported: {available}")
        return cls.get_handler(cls._extension_map[ext])

    @classmethod
    def detect_format(cls, filepath: str, content: Optional[bytes] = None) -> I18nFormatHandler:
        """
        Auto-detect format from file content (if given) or file path.

        Args:
            filepath: Path to the file
            content: Optional file content for content-based detection

        Returns:
            Appropriate I18nFormatHandler instance
        """
        if content is not None:
            for handler_class in cls._handlers.values():
                handler = handler_class()
                if handler.matches_content(content):
                    return handler

        return cls.get_handler_for_extension(Path(filepath).suffix)

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for name, handler_class in cls._handlers.items():
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
                'description': handler.description,
            })
        return result
