"""Row loaders for CSV and JSON files."""

from datainspect.loaders.base import DataLoader
from datainspect.loaders.csv_loader import CSVLoader, detect_delimiter, detect_encoding
from datainspect.loaders.json_loader import JSONLoader
from datainspect.loaders.factory import LoaderFactory

__all__ = [
    "DataLoader",
    "CSVLoader",
    "JSONLoader",
    "LoaderFactory",
    "detect_delimiter",
    "detect_encoding",
]
