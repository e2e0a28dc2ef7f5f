"""Report renderers (console and JSON)."""

from datainspect.reporters.console_reporter import ConsoleReporter
from datainspect.reporters.json_reporter import JSONReporter, NumpyJSONEncoder

__all__ = ["ConsoleReporter", "JSONReporter", "NumpyJSONEncoder"]
