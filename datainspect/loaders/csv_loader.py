"""CSV loader streaming raw rows with delimiter and encoding detection."""

import codecs
import csv
import logging
from typing import Iterator, List, Optional

from datainspect.core import constants
from datainspect.core.exceptions import DataLoadError, StreamReadError
from datainspect.loaders.base import DataLoader

logger = logging.getLogger(__name__)


def detect_delimiter(file_path: str, sample_size: int = constants.SNIFF_SAMPLE_BYTES) -> str:
    """
    Auto-detect the delimiter used in a CSV file.

    Args:
        file_path: Path to the CSV file
        sample_size: Number of characters to sample for detection

    Returns:
        Detected delimiter character, defaults to ',' if detection fails
    """
    for encoding in constants.CANDIDATE_ENCODINGS:
        try:
            with open(file_path, 'r', newline='', encoding=encoding) as f:
                sample = f.read(sample_size)

            sniffer = csv.Sniffer()
            dialect = sniffer.sniff(sample, delimiters=constants.CANDIDATE_DELIMITERS)
            return dialect.delimiter
        except (UnicodeDecodeError, csv.Error):
            continue
        except OSError:
            break

    return ','


def detect_encoding(file_path: str, sample_size: int = constants.SNIFF_SAMPLE_BYTES) -> str:
    """
    Detect the encoding of a file by trying common encodings.

    A UTF-8 byte-order mark selects 'utf-8-sig' so the mark does not end up
    in the first column name.

    Returns:
        Detected encoding name, defaults to 'utf-8'
    """
    with open(file_path, 'rb') as f:
        raw = f.read(sample_size)

    if raw.startswith(codecs.BOM_UTF8):
        return 'utf-8-sig'

    for encoding in constants.CANDIDATE_ENCODINGS:
        try:
            raw.decode(encoding)
            return encoding
        except UnicodeDecodeError as e:
            # A multi-byte character cut at the end of the sample is fine
            if encoding.startswith('utf-8') and e.start >= len(raw) - 3 and e.reason == 'unexpected end of data':
                return encoding
            continue

    return 'utf-8'


def _first_nonblank_row(reader) -> Optional[List[str]]:
    """Advance past leading blank lines and return the first real row."""
    for row in reader:
        if row:
            return row
    return None


class CSVLoader(DataLoader):
    """
    Loader for CSV and delimited text files.

    Rows are streamed with ``csv.reader``; nothing beyond the current row is
    held in memory. Blank lines before the header are skipped. A blank line
    after it is an empty field in a one-column file and an empty (malformed)
    row otherwise, so it is always counted. Read failures part-way through
    the file surface as :class:`StreamReadError` carrying the index of the
    data row that could not be read.

    Example:
        >>> loader = CSVLoader("customers.csv")
        >>> loader.header
        ['customer_id', 'name', 'balance']
        >>> next(loader.iter_rows())
        ['1', 'Alice', '120.50']
    """

    def __init__(self, file_path: str, delimiter: Optional[str] = None,
                 encoding: Optional[str] = None, **kwargs):
        super().__init__(file_path, **kwargs)

        if self.is_empty():
            raise DataLoadError("File is empty: no header row", file_path=str(file_path))

        if delimiter is None:
            delimiter = detect_delimiter(str(self.file_path))
            if delimiter != ',':
                logger.info(f"Auto-detected delimiter: {repr(delimiter)}")
        if encoding is None:
            encoding = detect_encoding(str(self.file_path))
            if encoding != 'utf-8':
                logger.info(f"Auto-detected encoding: {encoding}")

        self.delimiter = delimiter
        self.encoding = encoding
        self._header: Optional[List[str]] = None

    @property
    def header(self) -> List[str]:
        if self._header is None:
            try:
                with open(self.file_path, 'r', newline='', encoding=self.encoding) as f:
                    first = _first_nonblank_row(csv.reader(f, delimiter=self.delimiter))
            except (csv.Error, UnicodeDecodeError, OSError) as e:
                raise DataLoadError(
                    f"Cannot read header of {self.file_path}: {e}",
                    file_path=str(self.file_path),
                    line_number=1,
                    original_exception=e
                ) from e
            if first is None:
                raise DataLoadError("File has no header row", file_path=str(self.file_path))
            self._header = [name.strip() for name in first]
        return self._header

    def iter_rows(self) -> Iterator[List[str]]:
        blank_row = [""] if len(self.header) == 1 else []
        row_index = 0
        try:
            with open(self.file_path, 'r', newline='', encoding=self.encoding) as f:
                reader = csv.reader(f, delimiter=self.delimiter)
                _first_nonblank_row(reader)
                for row in reader:
                    yield row or list(blank_row)
                    row_index += 1
        except (csv.Error, UnicodeDecodeError) as e:
            raise StreamReadError(
                f"Cannot parse row {row_index} of {self.file_path} "
                f"(delimiter {repr(self.delimiter)}, encoding {self.encoding}): {e}",
                file_path=str(self.file_path),
                row_index=row_index,
                original_exception=e
            ) from e
        except OSError as e:
            raise StreamReadError(
                f"Read failed at row {row_index} of {self.file_path}: {e}",
                file_path=str(self.file_path),
                row_index=row_index,
                original_exception=e
            ) from e
