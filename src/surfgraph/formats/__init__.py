"""
URF Format Parsers, Serializers and Importers.

Supports:
- SURF (.surf) Simple URF text documents
- CSV (.csv) tabular import, one resource per row
"""

from surfgraph.formats.surf import SurfParser, SurfSerializer, parse_surf, serialize_surf
from surfgraph.formats.csv_import import CsvColumn, CsvParser, parse_csv

__all__ = [
    # SURF
    "SurfParser",
    "SurfSerializer",
    "parse_surf",
    "serialize_surf",
    # CSV
    "CsvColumn",
    "CsvParser",
    "parse_csv",
]
