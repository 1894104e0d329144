"""Serializers for each supported file format.

This module implements the codec registry: a mapping from format tag to a
function that turns structured content into file text. Three formats are
registered by default:

- frontmatter-document: YAML frontmatter block followed by a markdown body
- json: indented JSON
- yaml: block-style YAML

Payloads are either a single value or, after appends, a list of values.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

import yaml

from .errors import CodecError, WriteFailedError
from .filesystem import FilesystemAdapter
from .models import FileFormat

logger = logging.getLogger(__name__)

Serializer = Callable[[Any], str]


def _to_plain(value: Any) -> Any:
    """Convert read-only mappings and tuples to plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


def _dump_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False
    )


def serialize_frontmatter_document(content: Any) -> str:
    """Serialize ``{body, frontmatter}`` to a markdown document.

    Output layout:
        ---
        <frontmatter as YAML>
        ---
        <body, trimmed>

    with a trailing newline. A missing or empty body produces an empty
    content section.

    Raises:
        CodecError: If content is not a single {body, frontmatter} mapping
    """
    if not isinstance(content, Mapping):
        raise CodecError(
            FileFormat.FRONTMATTER_DOCUMENT.value,
            f"expected a {{body, frontmatter}} mapping, got {type(content).__name__}"
        )

    frontmatter = content.get('frontmatter') or {}
    if not isinstance(frontmatter, Mapping):
        raise CodecError(
            FileFormat.FRONTMATTER_DOCUMENT.value,
            f"frontmatter must be a mapping, got {type(frontmatter).__name__}"
        )

    body = content.get('body')
    if body is None:
        body = ''
    elif not isinstance(body, str):
        body = str(body)

    try:
        yaml_str = _dump_yaml(_to_plain(frontmatter)).strip()
    except yaml.YAMLError as e:
        raise CodecError(FileFormat.FRONTMATTER_DOCUMENT.value, str(e))

    lines = [
        '---',
        yaml_str,
        '---',
        body.strip(),
        '',
    ]
    return '\n'.join(lines)


def serialize_json(content: Any) -> str:
    """Serialize a mapping or list of mappings to indented JSON."""
    try:
        return json.dumps(_to_plain(content), indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        raise CodecError(FileFormat.JSON.value, str(e))


def serialize_yaml(content: Any) -> str:
    """Serialize a mapping or list of mappings to block-style YAML."""
    try:
        return _dump_yaml(_to_plain(content))
    except yaml.YAMLError as e:
        raise CodecError(FileFormat.YAML.value, str(e))


class CodecRegistry:
    """Maps format tags to serializers and writes serialized content.

    Example:
        >>> registry = CodecRegistry()
        >>> registry.supports("json")
        True
        >>> registry.serialize(FileFormat.JSON, {"a": 1})
        '{\\n  "a": 1\\n}'
    """

    def __init__(self, serializers: Optional[Dict[FileFormat, Serializer]] = None):
        if serializers is None:
            serializers = {
                FileFormat.FRONTMATTER_DOCUMENT: serialize_frontmatter_document,
                FileFormat.JSON: serialize_json,
                FileFormat.YAML: serialize_yaml,
            }
        self._serializers: Dict[FileFormat, Serializer] = dict(serializers)

    def register(self, file_format: FileFormat, serializer: Serializer) -> None:
        self._serializers[file_format] = serializer

    def supports(self, file_format: Any) -> bool:
        parsed = FileFormat.parse(file_format)
        return parsed is not None and parsed in self._serializers

    def serialize(self, file_format: FileFormat, content: Any) -> str:
        """Serialize content with the serializer registered for the format.

        Raises:
            CodecError: If the format is not registered or serialization fails
        """
        serializer = self._serializers.get(FileFormat.parse(file_format))
        if serializer is None:
            raise CodecError(str(file_format), "no serializer registered")
        return serializer(content)

    def write(
        self,
        path: str,
        file_format: FileFormat,
        content: Any,
        filesystem: FilesystemAdapter,
    ) -> None:
        """Serialize content and write it to path.

        Raises:
            WriteFailedError: If serialization or the write fails
        """
        try:
            text = self.serialize(file_format, content)
        except CodecError as e:
            raise WriteFailedError(path, str(e))

        filesystem.write_text(path, text)
        logger.debug(f"Wrote {len(text)} character(s) of {FileFormat.parse(file_format).value} to {path}")
