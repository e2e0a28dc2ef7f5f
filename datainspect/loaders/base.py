"""Base class for row loaders."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List

from datainspect.core.exceptions import DataFileNotFoundError


class DataLoader(ABC):
    """
    Abstract loader turning a file into a header plus a stream of raw rows.

    Rows are lists of field strings in header order. Loaders never interpret
    values; classification happens in the engine.
    """

    def __init__(self, file_path: str, **kwargs):
        self.file_path = Path(file_path)
        self.kwargs = kwargs

        if not self.file_path.exists():
            raise DataFileNotFoundError(str(file_path))

    @property
    @abstractmethod
    def header(self) -> List[str]:
        """Column names in file order."""

    @abstractmethod
    def iter_rows(self) -> Iterator[List[str]]:
        """Yield data rows (header excluded) as lists of raw strings."""

    def get_file_size(self) -> int:
        return self.file_path.stat().st_size

    def is_empty(self) -> bool:
        return self.get_file_size() == 0
