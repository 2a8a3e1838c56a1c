"""Export and import of whole hunts as portable ZIP bundles."""

from .packager import ImportResult, export_hunt, import_hunt, resolve_entry_path

__all__ = [
    "ImportResult",
    "export_hunt",
    "import_hunt",
    "resolve_entry_path",
]
