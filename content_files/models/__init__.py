"""Data models for content-source objects and content models."""

from content_files.models.content_object import ContentModel, ContentObject, ObjectMetadata, Snapshot

__all__ = ['ContentModel', 'ContentObject', 'ObjectMetadata', 'Snapshot']
