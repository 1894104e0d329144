"""Content object and content model data models."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

# Reserved key carrying object metadata in source payloads
METADATA_KEY = "__metadata"


@dataclass(frozen=True)
class ObjectMetadata:
    """Reserved metadata attached to every object by the content source.

    Attributes:
        model_name: Name of the content model that owns the object
        project_id: Project identifier in the content source
        project_environment: Project environment (e.g., "master")
        source: Name of the content source (e.g., "sanity")
        created_at: ISO 8601 creation timestamp ("" when unknown)
        id: Object identifier in the content source
    """
    model_name: str
    project_id: Optional[str] = None
    project_environment: Optional[str] = None
    source: Optional[str] = None
    created_at: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectMetadata":
        """Build metadata from the camelCase keys used by content sources."""
        object_id = data.get("id")
        return cls(
            model_name=str(data.get("modelName", "")),
            project_id=_optional_str(data.get("projectId")),
            project_environment=_optional_str(data.get("projectEnvironment")),
            source=_optional_str(data.get("source")),
            created_at=str(data.get("createdAt") or ""),
            id=None if object_id is None else str(object_id),
        )


@dataclass(frozen=True)
class ContentObject:
    """One record from the content source.

    Objects are immutable for the duration of a run: ``fields`` is exposed
    as a read-only mapping.

    Attributes:
        metadata: Reserved metadata, or None when the record carries none
        fields: Named content fields (everything except ``__metadata``)
    """
    metadata: Optional[ObjectMetadata]
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentObject":
        raw_meta = data.get(METADATA_KEY)
        metadata = ObjectMetadata.from_dict(raw_meta) if isinstance(raw_meta, Mapping) else None
        fields = {key: value for key, value in data.items() if key != METADATA_KEY}
        return cls(metadata=metadata, fields=fields)

    @property
    def model_name(self) -> Optional[str]:
        return self.metadata.model_name if self.metadata else None


@dataclass
class ContentModel:
    """Description of a content model offered by the source.

    Used by the setup wizard to ask how each model maps to files.

    Attributes:
        model_name: Model identifier
        model_label: Human readable label (falls back to model_name)
        project_id: Project identifier
        project_environment: Project environment
        source: Content source name
        field_names: Names of the model's content fields
    """
    model_name: str
    model_label: Optional[str] = None
    project_id: Optional[str] = None
    project_environment: Optional[str] = None
    source: Optional[str] = None
    field_names: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.model_label or self.model_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentModel":
        return cls(
            model_name=str(data.get("modelName", "")),
            model_label=_optional_str(data.get("modelLabel")),
            project_id=_optional_str(data.get("projectId")),
            project_environment=_optional_str(data.get("projectEnvironment")),
            source=_optional_str(data.get("source")),
            field_names=[str(name) for name in data.get("fieldNames") or []],
        )

    def owns(self, obj: ContentObject) -> bool:
        """Return True if the object belongs to this model."""
        meta = obj.metadata
        return (
            meta is not None
            and meta.model_name == self.model_name
            and meta.project_id == self.project_id
            and meta.project_environment == self.project_environment
            and meta.source == self.source
        )


@dataclass
class Snapshot:
    """Object set fetched from the content source for one run.

    Attributes:
        objects: Objects in source order (order drives append order)
        models: Content model descriptions (may be empty)
    """
    objects: List[ContentObject] = field(default_factory=list)
    models: List[ContentModel] = field(default_factory=list)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
