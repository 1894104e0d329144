"""YAML configuration loading and validation.

This module loads and saves the export configuration: where files are
written, where objects come from, and the rule set that maps objects to
files.
"""

import os
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, FilesystemError
from .models import ExportConfig, FileFormat
from .rules import (
    ContentMapping,
    LayoutSource,
    PathKind,
    PathTemplate,
    Rule,
    RuleMatch,
    RuleSet,
)


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        output_dir: .
        source: content.json
        decision_function: null
        rules:
          - match: {model_name: post, project_id: p1, source: sanity, exact: true}
            format: frontmatter-document
            append: false
            path: {kind: slug, directory: _posts, field: title, use_date: true}
            content: {body_field: body, layout_source: static, layout: post}
    """

    DEFAULT_CONFIG_PATH = '.content-files/config.yaml'

    DEFAULTS = {
        'output_dir': '.',
        'restrict_to_output_dir': True,
    }

    @classmethod
    def load(cls, config_path: str) -> ExportConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            ExportConfig with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: ExportConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            FilesystemError: If file cannot be written
        """
        config_dict: Dict[str, Any] = {
            'output_dir': config.output_dir,
            'source': config.source,
            'decision_function': config.decision_function,
        }
        if config.restrict_to_output_dir != cls.DEFAULTS['restrict_to_output_dir']:
            config_dict['restrict_to_output_dir'] = config.restrict_to_output_dir
        config_dict['rules'] = [
            cls._dump_rule(rule) for rule in (config.rules.rules if config.rules else [])
        ]

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise FilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> ExportConfig:
        output_dir = config_dict.get('output_dir', cls.DEFAULTS['output_dir'])
        if output_dir is None or not str(output_dir).strip():
            raise ConfigError("Field 'output_dir' cannot be empty", 'output_dir')

        source = cls._optional_str(config_dict, 'source')
        decision_function = cls._optional_str(config_dict, 'decision_function')

        restrict = config_dict.get(
            'restrict_to_output_dir',
            cls.DEFAULTS['restrict_to_output_dir']
        )
        if not isinstance(restrict, bool):
            raise ConfigError(
                "Field 'restrict_to_output_dir' must be a boolean",
                'restrict_to_output_dir'
            )

        rules_raw = config_dict.get('rules')
        if rules_raw is None:
            rules_raw = []
        if not isinstance(rules_raw, list):
            raise ConfigError("Field 'rules' must be a list", 'rules')

        rules = [cls._parse_rule(rule_dict, i) for i, rule_dict in enumerate(rules_raw)]

        if not rules and not decision_function:
            raise ConfigError(
                "At least one rule or a decision_function is required",
                'rules'
            )

        return ExportConfig(
            output_dir=str(output_dir),
            source=source,
            decision_function=decision_function,
            rules=RuleSet(rules) if rules else None,
            restrict_to_output_dir=restrict,
        )

    @classmethod
    def _parse_rule(cls, rule_dict: Any, i: int) -> Rule:
        where = f'rules[{i}]'
        if not isinstance(rule_dict, dict):
            raise ConfigError(f"Rule at index {i} must be a dictionary", where)

        match_raw = rule_dict.get('match') or {}
        if not isinstance(match_raw, dict):
            raise ConfigError(f"Field 'match' in rule {i} must be a dictionary", f'{where}.match')
        match = RuleMatch(
            model_name=cls._optional_str(match_raw, 'model_name'),
            project_id=cls._optional_str(match_raw, 'project_id'),
            source=cls._optional_str(match_raw, 'source'),
            exact=match_raw.get('exact', False),
        )
        if not isinstance(match.exact, bool):
            raise ConfigError(
                f"Field 'match.exact' in rule {i} must be a boolean",
                f'{where}.match.exact'
            )
        if match.model_name is None:
            raise ConfigError(
                f"Field 'match.model_name' in rule {i} is required",
                f'{where}.match.model_name'
            )

        file_format = FileFormat.parse(rule_dict.get('format'))
        if file_format is None:
            valid = ', '.join(f.value for f in FileFormat)
            raise ConfigError(
                f"Invalid format {rule_dict.get('format')!r} in rule {i} (expected one of: {valid})",
                f'{where}.format'
            )

        append = rule_dict.get('append', False)
        if not isinstance(append, bool):
            raise ConfigError(f"Field 'append' in rule {i} must be a boolean", f'{where}.append')

        path = cls._parse_path(rule_dict.get('path'), i)
        content = cls._parse_content(rule_dict.get('content'), i)

        return Rule(match=match, format=file_format, path=path, content=content, append=append)

    @classmethod
    def _parse_path(cls, path_raw: Any, i: int) -> PathTemplate:
        where = f'rules[{i}].path'
        if not isinstance(path_raw, dict):
            raise ConfigError(f"Field 'path' in rule {i} must be a dictionary", where)

        try:
            kind = PathKind(path_raw.get('kind'))
        except ValueError:
            valid = ', '.join(k.value for k in PathKind)
            raise ConfigError(
                f"Invalid path kind {path_raw.get('kind')!r} in rule {i} (expected one of: {valid})",
                f'{where}.kind'
            )

        template = PathTemplate(
            kind=kind,
            file_name=cls._optional_str(path_raw, 'file_name'),
            field=cls._optional_str(path_raw, 'field'),
            directory=cls._optional_str(path_raw, 'directory'),
            use_date=bool(path_raw.get('use_date', False)),
            extension=str(path_raw.get('extension', '.md')),
        )

        if kind == PathKind.STATIC and not template.file_name:
            raise ConfigError(f"Static path in rule {i} needs 'file_name'", f'{where}.file_name')
        if kind in (PathKind.FIELD, PathKind.SLUG) and not template.field:
            raise ConfigError(f"Path kind '{kind.value}' in rule {i} needs 'field'", f'{where}.field')

        return template

    @classmethod
    def _parse_content(cls, content_raw: Any, i: int) -> ContentMapping:
        where = f'rules[{i}].content'
        if content_raw is None:
            return ContentMapping()
        if not isinstance(content_raw, dict):
            raise ConfigError(f"Field 'content' in rule {i} must be a dictionary", where)

        layout_source = None
        if content_raw.get('layout_source') is not None:
            try:
                layout_source = LayoutSource(content_raw['layout_source'])
            except ValueError:
                raise ConfigError(
                    f"Invalid layout_source {content_raw['layout_source']!r} in rule {i}",
                    f'{where}.layout_source'
                )

        mapping = ContentMapping(
            body_field=cls._optional_str(content_raw, 'body_field'),
            layout_source=layout_source,
            layout=cls._optional_str(content_raw, 'layout'),
        )
        if mapping.layout_source is not None and not mapping.layout:
            raise ConfigError(f"Rule {i} sets layout_source but no layout", f'{where}.layout')
        return mapping

    @staticmethod
    def _dump_rule(rule: Rule) -> Dict[str, Any]:
        match = {
            key: value
            for key, value in (
                ('model_name', rule.match.model_name),
                ('project_id', rule.match.project_id),
                ('source', rule.match.source),
            )
            if value is not None
        }
        if rule.match.exact:
            match['exact'] = True

        path: Dict[str, Any] = {'kind': rule.path.kind.value}
        if rule.path.kind == PathKind.STATIC:
            path['file_name'] = rule.path.file_name
        else:
            path['field'] = rule.path.field
        if rule.path.kind == PathKind.SLUG:
            if rule.path.directory:
                path['directory'] = rule.path.directory
            path['use_date'] = rule.path.use_date
            path['extension'] = rule.path.extension

        rule_dict: Dict[str, Any] = {
            'match': match,
            'format': rule.format.value,
            'append': rule.append,
            'path': path,
        }

        if rule.format == FileFormat.FRONTMATTER_DOCUMENT:
            content: Dict[str, Any] = {'body_field': rule.content.body_field}
            if rule.content.layout_source is not None:
                content['layout_source'] = rule.content.layout_source.value
                content['layout'] = rule.content.layout
            rule_dict['content'] = content

        return rule_dict

    @staticmethod
    def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
        value = data.get(key)
        if value is None:
            return None
        value = str(value)
        return value if value.strip() else None


def rule_summaries(rules: Optional[RuleSet]) -> List[str]:
    """Describe each rule on one line, for display."""
    lines = []
    for rule in (rules.rules if rules else []):
        if rule.path.kind == PathKind.STATIC:
            target = rule.path.file_name
        elif rule.path.kind == PathKind.FIELD:
            target = f"<{rule.path.field}>"
        else:
            directory = f"{rule.path.directory}/" if rule.path.directory else ""
            date = "<date>-" if rule.path.use_date else ""
            target = f"{directory}{date}<{rule.path.field}>{rule.path.extension}"
        mode = " (append)" if rule.append else ""
        lines.append(f"{rule.match.model_name} → {target} [{rule.format.value}]{mode}")
    return lines
