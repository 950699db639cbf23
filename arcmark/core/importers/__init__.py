"""Importers producing node forests from other browsers' bookmark data."""

from arcmark.core.importers.arc import (
    ArcFileNotFoundError,
    ArcImportError,
    ArcImportResult,
    ArcInvalidJSONError,
    ArcNoDataContainerError,
    ImportWorkspace,
    import_arc_file,
    import_arc_file_sync,
    parse_arc_data,
)

__all__ = [
    "ArcFileNotFoundError",
    "ArcImportError",
    "ArcImportResult",
    "ArcInvalidJSONError",
    "ArcNoDataContainerError",
    "ImportWorkspace",
    "import_arc_file",
    "import_arc_file_sync",
    "parse_arc_data",
]
