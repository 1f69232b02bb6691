"""Import and export of media items."""

from mediatracker.transfer.exchange import (
    default_export_name,
    export_filename,
    export_media,
    import_media,
    parse_import,
    select_items,
)

__all__ = [
    "default_export_name",
    "export_filename",
    "export_media",
    "import_media",
    "parse_import",
    "select_items",
]
