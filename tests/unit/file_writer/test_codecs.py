"""Unit tests for file_writer.codecs module."""

import json
from types import MappingProxyType
from unittest.mock import Mock

import pytest
import yaml

from content_files.file_writer.codecs import (
    CodecRegistry,
    serialize_frontmatter_document,
    serialize_json,
    serialize_yaml,
)
from content_files.file_writer.errors import CodecError, WriteFailedError
from content_files.file_writer.models import FileFormat


class TestFrontmatterDocument:
    """Test cases for serialize_frontmatter_document."""

    def test_frontmatter_then_body(self):
        """Frontmatter block is followed by the trimmed body and a newline."""
        text = serialize_frontmatter_document(
            {"body": "\n  Hello\n", "frontmatter": {"title": "Hi", "layout": "post"}}
        )

        assert text == "---\ntitle: Hi\nlayout: post\n---\nHello\n"

    def test_frontmatter_keeps_key_order(self):
        """Keys are written in insertion order, not sorted."""
        text = serialize_frontmatter_document(
            {"body": "", "frontmatter": {"zeta": 1, "alpha": 2}}
        )

        assert text.index("zeta") < text.index("alpha")

    def test_missing_body_gives_empty_section(self):
        """A missing body leaves an empty content section."""
        text = serialize_frontmatter_document({"frontmatter": {"title": "Hi"}})

        assert text == "---\ntitle: Hi\n---\n\n"

    def test_unicode_is_not_escaped(self):
        """Non-ASCII frontmatter values are written as-is."""
        text = serialize_frontmatter_document({"body": "x", "frontmatter": {"title": "Café"}})

        assert "title: Café" in text

    def test_read_only_frontmatter_is_accepted(self):
        """Read-only mappings from content objects serialize like dicts."""
        frontmatter = MappingProxyType({"tags": ("a", "b")})

        text = serialize_frontmatter_document({"body": "", "frontmatter": frontmatter})

        assert yaml.safe_load(text.split("---")[1]) == {"tags": ["a", "b"]}

    def test_list_payload_raises(self):
        """Appended (list) payloads cannot be written as one document."""
        with pytest.raises(CodecError) as exc_info:
            serialize_frontmatter_document([{"body": "a"}, {"body": "b"}])

        assert exc_info.value.file_format == "frontmatter-document"

    def test_non_mapping_frontmatter_raises(self):
        """Frontmatter must be a mapping."""
        with pytest.raises(CodecError):
            serialize_frontmatter_document({"body": "", "frontmatter": ["title"]})


class TestDataFormats:
    """Test cases for serialize_json and serialize_yaml."""

    def test_json_is_indented_without_trailing_newline(self):
        """JSON uses two-space indentation and no trailing newline."""
        assert serialize_json({"a": 1}) == '{\n  "a": 1\n}'

    def test_json_keeps_unicode(self):
        """JSON output keeps non-ASCII characters."""
        assert "Café" in serialize_json({"name": "Café"})

    def test_json_list(self):
        """Appended payloads serialize as a JSON array."""
        assert json.loads(serialize_json([{"a": 1}, {"a": 2}])) == [{"a": 1}, {"a": 2}]

    def test_yaml_block_style(self):
        """YAML output uses block style."""
        assert serialize_yaml({"name": "Ann", "tags": ["x"]}) == "name: Ann\ntags:\n- x\n"

    def test_yaml_list(self):
        """Appended payloads serialize as a YAML sequence."""
        assert yaml.safe_load(serialize_yaml([{"a": 1}, {"a": 2}])) == [{"a": 1}, {"a": 2}]


class TestCodecRegistry:
    """Test cases for CodecRegistry."""

    def test_supports_builtin_formats(self):
        """All three built-in tags are supported, by value or enum."""
        registry = CodecRegistry()

        assert registry.supports("frontmatter-document")
        assert registry.supports("json")
        assert registry.supports(FileFormat.YAML)
        assert not registry.supports("toml")

    def test_custom_registry_limits_formats(self):
        """A registry built with explicit serializers supports only those."""
        registry = CodecRegistry({FileFormat.JSON: serialize_json})

        assert registry.supports("json")
        assert not registry.supports("yaml")
        with pytest.raises(CodecError):
            registry.serialize(FileFormat.YAML, {})

    def test_register_replaces_serializer(self):
        """register() installs a serializer for a format."""
        registry = CodecRegistry()
        registry.register(FileFormat.JSON, lambda content: "custom")

        assert registry.serialize("json", {"a": 1}) == "custom"

    def test_write_passes_text_to_filesystem(self):
        """write() serializes and hands the text to the filesystem adapter."""
        filesystem = Mock()

        CodecRegistry().write("/out/a.json", FileFormat.JSON, {"a": 1}, filesystem)

        filesystem.write_text.assert_called_once_with("/out/a.json", '{\n  "a": 1\n}')

    def test_write_wraps_codec_error(self):
        """Serialization failures surface as WriteFailedError."""
        filesystem = Mock()

        with pytest.raises(WriteFailedError) as exc_info:
            CodecRegistry().write("/out/a.md", FileFormat.FRONTMATTER_DOCUMENT, [1, 2], filesystem)

        assert exc_info.value.file_path == "/out/a.md"
        filesystem.write_text.assert_not_called()
