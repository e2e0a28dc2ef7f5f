"""
JSON rendering of inspection reports.

Output is stable: keys are sorted, floats are already rounded by the report
records, and NaN/inf (including numpy scalars from the robust statistics)
become null. Identical input therefore yields byte-identical files.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any

import numpy as np

from datainspect.core.exceptions import ReporterError
from datainspect.profiler.profile_result import InspectionReport

logger = logging.getLogger(__name__)


class NumpyJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles numpy scalars and arrays.

    Converts:
    - numpy int types → Python int
    - numpy float types → Python float (NaN/inf → null)
    - numpy bool → Python bool
    - numpy arrays → Python lists
    - sets / frozensets → sorted lists
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            if np.isnan(obj) or np.isinf(obj):
                return None
            return float(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return super().default(obj)


def convert_to_json_serializable(obj: Any) -> Any:
    """
    Recursively replace values json cannot represent.

    Plain Python NaN/inf never reach ``JSONEncoder.default``, so they are
    mapped to None here before encoding.
    """
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    if isinstance(obj, np.floating) and (np.isnan(obj) or np.isinf(obj)):
        return None
    if isinstance(obj, dict):
        return {str(key): convert_to_json_serializable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [convert_to_json_serializable(item) for item in obj]
    return obj


class JSONReporter:
    """
    Render an InspectionReport as JSON.

    Example:
        >>> JSONReporter().write(report, "inspection.json")
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, report: InspectionReport) -> str:
        payload = convert_to_json_serializable(report.to_dict())
        return json.dumps(
            payload,
            cls=NumpyJSONEncoder,
            indent=self.indent,
            sort_keys=True,
            allow_nan=False,
            ensure_ascii=False
        )

    def write(self, report: InspectionReport, output_path: str) -> None:
        """
        Write the rendered report to a file, creating parent directories.

        Raises:
            ReporterError: If the file cannot be written
        """
        try:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(self.render(report))
                f.write("\n")
        except OSError as e:
            raise ReporterError(
                f"Cannot write JSON report to {output_path}: {e}",
                reporter_type="json",
                output_path=str(output_path),
                original_exception=e
            ) from e

        logger.info(f"JSON report written to {output_path}")
