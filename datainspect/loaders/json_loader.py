"""
JSON loader.

Accepts a top-level array of objects (one record per object) or a single
object (one record). Values are rendered back to the raw strings a CSV export
would contain so the engine classifies both formats the same way.
"""

import json
import logging
from typing import Any, Iterator, List, Optional

from datainspect.core.exceptions import DataLoadError, UnsupportedFormatError
from datainspect.loaders.base import DataLoader

logger = logging.getLogger(__name__)


def render_value(value: Any) -> str:
    """Render a decoded JSON value as a raw field string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(',', ':'), ensure_ascii=False)
    return str(value)


class JSONLoader(DataLoader):
    """
    Loader for JSON documents.

    The header is the key list of the first object. Missing keys become
    empty fields, keys absent from the header are ignored (and logged), and
    array elements that are not objects are yielded as empty rows so the
    engine counts them as malformed.
    """

    def __init__(self, file_path: str, encoding: str = "utf-8", **kwargs):
        super().__init__(file_path, **kwargs)
        self.encoding = encoding
        self._records: Optional[List[Any]] = None
        self._header: Optional[List[str]] = None

    def _load(self) -> List[Any]:
        if self._records is not None:
            return self._records

        try:
            with open(self.file_path, 'r', encoding=self.encoding) as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise DataLoadError(
                f"Invalid JSON in {self.file_path}: {e.msg}",
                file_path=str(self.file_path),
                line_number=e.lineno,
                original_exception=e
            ) from e
        except (UnicodeDecodeError, OSError) as e:
            raise DataLoadError(
                f"Cannot read {self.file_path}: {e}",
                file_path=str(self.file_path),
                original_exception=e
            ) from e

        if isinstance(document, dict):
            records = [document]
        elif isinstance(document, list):
            if any(isinstance(element, dict) for element in document):
                records = document
            else:
                records = [{}]
        else:
            raise UnsupportedFormatError(
                str(self.file_path),
                f"json ({type(document).__name__} at top level)",
                ["json array of objects", "json object"]
            )

        self._records = records
        return records

    @property
    def header(self) -> List[str]:
        if self._header is None:
            first = next(record for record in self._load() if isinstance(record, dict))
            self._header = [str(key) for key in first.keys()]
        return self._header

    def iter_rows(self) -> Iterator[List[str]]:
        header = self.header
        known = set(header)
        reported_extra = set()

        for index, record in enumerate(self._load()):
            if not isinstance(record, dict):
                yield []
                continue

            extra = [key for key in record if key not in known and key not in reported_extra]
            if extra:
                reported_extra.update(extra)
                logger.warning(f"Record {index} has keys not in the header, ignored: {extra}")

            yield [render_value(record.get(name)) for name in header]

