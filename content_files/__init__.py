"""Export content-source objects to files on disk.

The package maps objects from an external content source to markdown, JSON
and YAML files, and keeps the written file set in sync with the source
across runs.
"""

__version__ = "0.1.0"
