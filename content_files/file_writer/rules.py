"""Rule-set interpreter for mapping objects to write specs.

A rule set is the serialized answer to "which file does this object go to?".
Each rule matches objects by model name, project and source, and maps a
matching object to a WriteSpec through a path template and a content
mapping. The first matching rule wins.

Rule sets are plain data (loaded from the YAML configuration) and are
evaluated here; no code is generated from the setup answers.
"""

import importlib
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from content_files.models.content_object import ContentModel, ContentObject, ObjectMetadata
from .errors import ConfigError
from .models import DecisionUtils, FileFormat, WriteSpec

logger = logging.getLogger(__name__)

# decide(obj, utils) -> WriteSpec | mapping | None
DecisionFunction = Callable[[ContentObject, DecisionUtils], Any]

DATA_EXTENSIONS = {
    FileFormat.JSON: "json",
    FileFormat.YAML: "yml",
}


class PathKind(str, Enum):
    """How a path template builds the file path."""
    STATIC = "static"
    FIELD = "field"
    SLUG = "slug"


class LayoutSource(str, Enum):
    """Where a document's layout value comes from."""
    FIELD = "field"
    STATIC = "static"


@dataclass
class RuleMatch:
    """Metadata filter for a rule.

    By default a None field matches any value. With ``exact`` set, every
    field is compared as-is, so None only matches metadata that lacks the
    value too.
    """
    model_name: Optional[str] = None
    project_id: Optional[str] = None
    source: Optional[str] = None
    exact: bool = False

    def matches(self, metadata: Optional[ObjectMetadata]) -> bool:
        if metadata is None:
            return False
        pairs = (
            (self.model_name, metadata.model_name),
            (self.project_id, metadata.project_id),
            (self.source, metadata.source),
        )
        if self.exact:
            return all(wanted == actual for wanted, actual in pairs)
        return all(wanted is None or wanted == actual for wanted, actual in pairs)


@dataclass
class PathTemplate:
    """Builds the file path for an object.

    Attributes:
        kind: STATIC (fixed file_name), FIELD (a field value used verbatim)
              or SLUG ([directory/][date-]slug(field)extension)
        file_name: Fixed path for STATIC templates
        field: Content field for FIELD and SLUG templates
        directory: Directory prefix for SLUG templates
        use_date: Prefix the slug with the object's creation date (YYYY-MM-DD-)
        extension: File extension appended to SLUG paths
    """
    kind: PathKind
    file_name: Optional[str] = None
    field: Optional[str] = None
    directory: Optional[str] = None
    use_date: bool = False
    extension: str = ".md"

    def render(self, obj: ContentObject, utils: DecisionUtils) -> Optional[str]:
        """Return the path for obj, or None if the object provides none.

        Raises:
            InvalidInputError: From utils.slugify when the slug field is
                               empty or not a string
        """
        if self.kind == PathKind.STATIC:
            return self.file_name

        value = obj.fields.get(self.field) if self.field else None

        if self.kind == PathKind.FIELD:
            return value if isinstance(value, str) and value.strip() else None

        slug = utils.slugify(value)
        prefix = f"{self.directory.rstrip('/')}/" if self.directory else ""
        created_at = obj.metadata.created_at if obj.metadata else ""
        date = f"{created_at[:10]}-" if self.use_date and created_at else ""
        return f"{prefix}{date}{slug}{self.extension}"


@dataclass
class ContentMapping:
    """Builds document content from an object's fields.

    Attributes:
        body_field: Field holding the document body (None for an empty body)
        layout_source: Where the layout comes from (None for no layout)
        layout: Static layout name, or the layout field name
    """
    body_field: Optional[str] = None
    layout_source: Optional[LayoutSource] = None
    layout: Optional[str] = None

    def render_document(self, obj: ContentObject) -> Dict[str, Any]:
        """Split fields into a body and frontmatter.

        The body field is removed from the frontmatter. When a layout is
        configured, any ``layout`` field is replaced by the configured value.
        """
        frontmatter = dict(obj.fields)
        body = frontmatter.pop(self.body_field, None) if self.body_field else None

        if self.layout_source is not None:
            frontmatter.pop("layout", None)
            if self.layout_source == LayoutSource.STATIC:
                layout_value = self.layout
            else:
                layout_value = obj.fields.get(self.layout) if self.layout else None
            frontmatter["layout"] = layout_value

        return {
            "body": body if body is not None else "",
            "frontmatter": frontmatter,
        }

    @staticmethod
    def render_data(obj: ContentObject) -> Dict[str, Any]:
        return dict(obj.fields)


@dataclass
class Rule:
    """One entry of a rule set.

    Attributes:
        match: Which objects the rule applies to
        format: Output format of the file
        path: Path template
        content: Content mapping (used by frontmatter documents)
        append: Collect all matching objects into one file
    """
    match: RuleMatch
    format: FileFormat
    path: PathTemplate
    content: ContentMapping = field(default_factory=ContentMapping)
    append: bool = False

    def evaluate(self, obj: ContentObject, utils: DecisionUtils) -> Optional[WriteSpec]:
        path = self.path.render(obj, utils)
        if not path:
            return None

        if self.format == FileFormat.FRONTMATTER_DOCUMENT:
            content = self.content.render_document(obj)
        else:
            content = self.content.render_data(obj)

        return WriteSpec(path=path, format=self.format, content=content, append=self.append)


@dataclass
class RuleSet:
    """Ordered rules; callable as a decision function.

    Example:
        >>> rules = RuleSet([Rule(RuleMatch("post"), FileFormat.JSON,
        ...                       PathTemplate(PathKind.STATIC, file_name="posts.json"),
        ...                       append=True)])
        >>> spec = rules(obj, DecisionUtils(slugify=slugify))
    """
    rules: List[Rule] = field(default_factory=list)

    def __call__(self, obj: ContentObject, utils: DecisionUtils) -> Optional[WriteSpec]:
        if obj.metadata is None:
            return None

        for rule in self.rules:
            if rule.match.matches(obj.metadata):
                return rule.evaluate(obj, utils)

        return None

    def __len__(self) -> int:
        return len(self.rules)


@dataclass
class PageAnswers:
    """Setup answers for a model written as markdown pages.

    Attributes:
        model: The content model
        page_type: "single" (one fixed file) or "collection" (one file per object)
        file_name: Location for single pages
        directory: Collection directory (e.g. "_posts")
        file_name_field: Field the collection file name is slugged from
        use_date: Prefix collection file names with the creation date
        content_field: Field holding the page body (None for no body)
        layout_source: "field", "static" or None
        layout: Layout field name or static layout value
    """
    model: ContentModel
    page_type: str = "collection"
    file_name: Optional[str] = None
    directory: Optional[str] = None
    file_name_field: Optional[str] = None
    use_date: bool = False
    content_field: Optional[str] = None
    layout_source: Optional[str] = None
    layout: Optional[str] = None


@dataclass
class DataAnswers:
    """Setup answers for a model written as a JSON or YAML data file.

    Attributes:
        model: The content model
        format: "json" or "yaml"
        file_name: Fixed file location (None when the location is a field)
        file_name_field: Field holding the file location
        is_multiple: Append all objects of the model to the same file
    """
    model: ContentModel
    format: str = "json"
    file_name: Optional[str] = None
    file_name_field: Optional[str] = None
    is_multiple: bool = True


def _match_for(model: ContentModel) -> RuleMatch:
    return RuleMatch(
        model_name=model.model_name,
        project_id=model.project_id,
        source=model.source,
        exact=True,
    )


def compile_answers(
    pages: List[PageAnswers],
    data: List[DataAnswers],
) -> RuleSet:
    """Compile setup answers into a rule set.

    Page rules come first, then data rules, in answer order.

    Raises:
        ConfigError: If an answer is incomplete
    """
    rules: List[Rule] = []

    for answers in pages:
        name = answers.model.model_name
        if answers.page_type == "single" or answers.file_name:
            if not answers.file_name:
                raise ConfigError(f"Single page '{name}' needs a file location", "file_name")
            path = PathTemplate(PathKind.STATIC, file_name=answers.file_name)
        else:
            if not answers.file_name_field:
                raise ConfigError(
                    f"Collection '{name}' needs a field to build file names from",
                    "file_name_field"
                )
            path = PathTemplate(
                PathKind.SLUG,
                field=answers.file_name_field,
                directory=answers.directory,
                use_date=answers.use_date,
            )

        layout_source = LayoutSource(answers.layout_source) if answers.layout_source else None
        rules.append(Rule(
            match=_match_for(answers.model),
            format=FileFormat.FRONTMATTER_DOCUMENT,
            path=path,
            content=ContentMapping(
                body_field=answers.content_field,
                layout_source=layout_source,
                layout=answers.layout,
            ),
        ))

    for answers in data:
        name = answers.model.model_name
        file_format = FileFormat.parse(answers.format)
        if file_format not in DATA_EXTENSIONS:
            raise ConfigError(f"Unsupported data format {answers.format!r} for '{name}'", "format")

        if answers.file_name:
            path = PathTemplate(PathKind.STATIC, file_name=answers.file_name)
        elif answers.file_name_field:
            path = PathTemplate(PathKind.FIELD, field=answers.file_name_field)
        else:
            raise ConfigError(f"Data model '{name}' needs a file location", "file_name")

        rules.append(Rule(
            match=_match_for(answers.model),
            format=file_format,
            path=path,
            append=answers.is_multiple,
        ))

    logger.debug(f"Compiled {len(rules)} rule(s) from setup answers")
    return RuleSet(rules)


def import_decision_function(reference: str) -> DecisionFunction:
    """Import a decision function from a "package.module:function" reference.

    Raises:
        ConfigError: If the reference is malformed, cannot be imported, or
                     does not name a callable
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name.strip() or not attr.strip():
        raise ConfigError(
            f"Expected 'module:function', got {reference!r}",
            "decision_function"
        )

    try:
        module = importlib.import_module(module_name.strip())
    except ImportError as e:
        raise ConfigError(f"Cannot import {module_name}: {e}", "decision_function")

    target: Union[Any, None] = module
    for part in attr.strip().split("."):
        target = getattr(target, part, None)
        if target is None:
            raise ConfigError(f"{reference} not found", "decision_function")

    if not callable(target):
        raise ConfigError(f"{reference} is not callable", "decision_function")

    return target
