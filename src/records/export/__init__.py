"""CSV export."""

from records.export.csv_exporter import EXPORT_FILES, export_csv

__all__ = ["EXPORT_FILES", "export_csv"]
