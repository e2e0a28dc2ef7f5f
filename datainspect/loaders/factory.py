"""Loader factory: pick a loader from the file extension or an explicit format."""

import logging
from pathlib import Path
from typing import Dict, Optional, Type

from datainspect.core import constants
from datainspect.core.exceptions import DataFileNotFoundError, UnsupportedFormatError
from datainspect.loaders.base import DataLoader
from datainspect.loaders.csv_loader import CSVLoader
from datainspect.loaders.json_loader import JSONLoader

logger = logging.getLogger(__name__)


class LoaderFactory:
    """
    Create the right loader for a file.

    Example:
        >>> loader = LoaderFactory.create("orders.tsv")
        >>> type(loader).__name__
        'CSVLoader'
    """

    _loaders: Dict[str, Type[DataLoader]] = {
        "csv": CSVLoader,
        "json": JSONLoader,
    }

    @classmethod
    def detect_format(cls, file_path: str) -> str:
        suffix = Path(file_path).suffix.lower()
        file_format = constants.FILE_EXTENSION_MAP.get(suffix)
        if file_format is None:
            raise UnsupportedFormatError(
                str(file_path), suffix or "<no extension>", constants.SUPPORTED_FILE_FORMATS
            )
        return file_format

    @classmethod
    def create(cls, file_path: str, format: Optional[str] = None, **kwargs) -> DataLoader:
        """
        Args:
            file_path: Path to the data file
            format: 'csv' or 'json'; detected from the extension when None
            **kwargs: Passed to the loader (delimiter, encoding)

        Raises:
            DataFileNotFoundError: If the file does not exist
            UnsupportedFormatError: If the format is not supported
        """
        if not Path(file_path).exists():
            raise DataFileNotFoundError(str(file_path))

        file_format = format.lower() if format else cls.detect_format(file_path)
        loader_class = cls._loaders.get(file_format)
        if loader_class is None:
            raise UnsupportedFormatError(str(file_path), file_format, constants.SUPPORTED_FILE_FORMATS)

        if loader_class is JSONLoader:
            kwargs.pop("delimiter", None)
        loader_kwargs = {key: value for key, value in kwargs.items() if value is not None}

        logger.debug(f"Loading {file_path} as {file_format}")
        return loader_class(str(file_path), **loader_kwargs)
