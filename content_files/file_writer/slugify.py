"""Slug generation for file names.

This module converts arbitrary field values into lowercase, hyphen-separated
slugs that are safe on every file system. It is the ``slugify`` utility
handed to decision functions.
"""

import re
import unicodedata
from typing import Any, Optional

from .errors import InvalidInputError


class SlugConverter:
    """Converts text to filesafe slugs.

    Conversion rules:
    - Unicode is transliterated to ASCII (accents dropped)
    - camelCase boundaries become word breaks
    - "&" becomes "and"
    - Any run of non-alphanumeric characters becomes a single hyphen
    - Leading/trailing hyphens are trimmed
    - Result is lowercased

    Examples:
        - "Hello World" → "hello-world"
        - "Café & Crème" → "cafe-and-creme"
        - "fooBar baz" → "foo-bar-baz"
    """

    _CAMEL_BOUNDARY = re.compile(r'([a-z\d])([A-Z])')
    _ACRONYM_BOUNDARY = re.compile(r'([A-Z]+)([A-Z][a-z\d]+)')
    _NON_ALNUM = re.compile(r'[^a-zA-Z\d]+')

    @classmethod
    def slugify(cls, value: Any, max_length: Optional[int] = None) -> str:
        """Convert a string to a slug.

        Args:
            value: Text to convert
            max_length: Optional maximum slug length (trailing hyphens
                        are trimmed after truncation)

        Returns:
            Lowercase slug

        Raises:
            InvalidInputError: If value is not a string, is empty, or
                               contains no sluggable characters

        Examples:
            >>> SlugConverter.slugify("Hello World")
            'hello-world'
            >>> SlugConverter.slugify("I ♥ Dogs & Cats")
            'i-dogs-and-cats'
        """
        if not isinstance(value, str):
            raise InvalidInputError(
                f"Expected a string to slugify, got {type(value).__name__}",
                value
            )
        if not value.strip():
            raise InvalidInputError("Cannot slugify an empty string", value)

        text = value.replace('&', ' and ')
        text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
        text = cls._ACRONYM_BOUNDARY.sub(r'\1 \2', text)
        text = cls._CAMEL_BOUNDARY.sub(r'\1 \2', text)
        slug = cls._NON_ALNUM.sub('-', text).strip('-').lower()

        if max_length is not None and len(slug) > max_length:
            slug = slug[:max_length].rstrip('-')

        if not slug:
            raise InvalidInputError(
                f"Value {value!r} has no characters usable in a slug",
                value
            )

        return slug


def slugify(value: Any) -> str:
    """Module-level shortcut for SlugConverter.slugify."""
    return SlugConverter.slugify(value)
