"""
Ingestion: document normalization and coordinate projection.

The source loader (ingest.data_loader) builds layers and so depends on the
rest of the package; import it from its module.
"""

from fire_station_map.ingest.format_normalizer import normalize_document, parse_feature
from fire_station_map.ingest.projection import CoordinateProjector, mercator_to_latlng

__all__ = [
    "CoordinateProjector",
    "mercator_to_latlng",
    "normalize_document",
    "parse_feature",
]
