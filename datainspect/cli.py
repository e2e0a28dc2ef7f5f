"""
Command-line interface for datainspect.

Provides commands for:
- Inspecting a CSV or JSON file (summary, type resolution, diagnosis)
- Writing a sample configuration file
- Showing version information
"""

import dataclasses
import sys
from pathlib import Path

import click

from datainspect import __version__
from datainspect.core.config import InspectionConfig, sample_config_yaml
from datainspect.core.exceptions import (
    ConfigError,
    DataFileNotFoundError,
    DataInspectException,
    StreamReadError,
)
from datainspect.core.logging_config import get_logger, setup_logging
from datainspect.core.pretty_output import PrettyOutput as po
from datainspect.loaders.factory import LoaderFactory
from datainspect.profiler.engine import InspectionEngine
from datainspect.reporters.console_reporter import ConsoleReporter
from datainspect.reporters.json_reporter import JSONReporter

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    datainspect - single-pass data-quality inspection.

    Reads a CSV or JSON file once, infers each column's type, computes
    bounded-memory statistics and flags missing values, identifier-like and
    near-constant columns, mixed types and extreme outliers.
    """
    pass


def _build_config(config_path, reservoir_size, seed) -> InspectionConfig:
    config = InspectionConfig.from_yaml(config_path) if config_path else InspectionConfig()
    overrides = {}
    if reservoir_size is not None:
        overrides['reservoir_size'] = reservoir_size
    if seed is not None:
        overrides['random_seed'] = seed
    return dataclasses.replace(config, **overrides) if overrides else config


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--summary', 'show_summary', is_flag=True, help='Show per-column statistics')
@click.option('--diagnose', 'show_diagnose', is_flag=True, help='Show data-quality findings')
@click.option('--types', 'show_types', is_flag=True, help='Show the type resolution table')
@click.option('--format', '-f', 'file_format', type=click.Choice(['csv', 'json'], case_sensitive=False),
              default=None, help='Input format (default: detect from extension)')
@click.option('--delimiter', '-d', default=None, help='Column delimiter for CSV files (default: auto-detect). Use "\\t" for tab.')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML configuration file (see init-config)')
@click.option('--json-output', '-j', type=click.Path(), help='Path for JSON report output')
@click.option('--reservoir-size', type=click.IntRange(min=1), default=None,
              help='Values retained per numeric column for median/MAD (overrides config)')
@click.option('--seed', type=int, default=None, help='Random seed for reservoir sampling (overrides config)')
@click.option('--fail-on-warning', is_flag=True, help='Exit with code 2 if warnings are found')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def inspect(file_path, show_summary, show_diagnose, show_types, file_format, delimiter, config_path,
            json_output, reservoir_size, seed, fail_on_warning, log_level, log_file):
    """
    Inspect a data file in a single pass.

    FILE_PATH: CSV/TSV/TXT or JSON file to inspect

    Without --summary, --diagnose or --types, the summary and the diagnosis
    are both shown.

    Exit codes: 0 clean, 1 critical findings or error, 2 warnings with
    --fail-on-warning.

    Examples:

    \b
    # Summary and diagnosis
    datainspect inspect data/customers.csv

    \b
    # Only the findings, semicolon-delimited file, JSON copy of the report
    datainspect inspect export.txt --diagnose -d ";" -j report.json

    \b
    # Exact median/MAD for files up to 5M rows
    datainspect inspect big.csv --reservoir-size 5000000
    """
    setup_logging(level=log_level, log_file=log_file)

    if not (show_summary or show_diagnose or show_types):
        show_summary = show_diagnose = True

    if delimiter == "\\t":
        delimiter = "\t"

    try:
        config = _build_config(config_path, reservoir_size, seed)
        loader = LoaderFactory.create(file_path, format=file_format, delimiter=delimiter)
        engine = InspectionEngine(loader.header, config=config, source=str(file_path))
        report = engine.profile(loader.iter_rows())

        ConsoleReporter().render(report, summary=show_summary, types=show_types, diagnose=show_diagnose)

        if json_output:
            JSONReporter().write(report, json_output)
            po.output_file("JSON", json_output)

        if show_diagnose and report.has_critical():
            po.blank_line()
            po.error("INSPECTION FOUND CRITICAL ISSUES")
            sys.exit(1)

        if fail_on_warning and report.has_warnings():
            po.blank_line()
            po.warning("Inspection completed with warnings (treating as failure)")
            sys.exit(2)

        po.blank_line()
        sys.exit(0)

    except DataFileNotFoundError as e:
        po.blank_line()
        po.error(str(e))
        sys.exit(1)

    except ConfigError as e:
        po.blank_line()
        po.error(f"Configuration error: {e}")
        sys.exit(1)

    except StreamReadError as e:
        po.blank_line()
        po.error(f"Reading stopped at data row {e.row_index}; no report produced:")
        click.echo(f"   {e.message}", err=True)
        if "delimiter" in e.message.lower():
            po.blank_line()
            po.info("Tip: Try specifying the delimiter with -d option:")
            click.echo(f"   datainspect inspect {file_path} -d \"|\"")
            click.echo(f"   datainspect inspect {file_path} -d \"\\t\"  # for tabs")
        sys.exit(1)

    except DataInspectException as e:
        po.blank_line()
        po.error("Error processing file:")
        click.echo(f"   {e.message}", err=True)
        logger.debug(f"Error details: {e.to_dict()}")
        sys.exit(1)


@cli.command('init-config')
@click.argument('output_path', type=click.Path(dir_okay=False))
def init_config(output_path):
    """
    Generate a sample configuration file.

    OUTPUT_PATH: Path where sample config should be written

    Example:

    \b
    datainspect init-config inspect.yaml
    """
    try:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(sample_config_yaml())

        click.echo(f"✓ Sample configuration written to: {output_path}")
        click.echo("\nEdit the file to tune thresholds, then run:")
        click.echo(f"  datainspect inspect data.csv --config {output_path}")

    except OSError as e:
        click.echo(f"❌ Error creating config file: {str(e)}", err=True)
        sys.exit(1)


@cli.command()
def version():
    """Display version information."""
    click.echo(f"datainspect v{__version__}")
    click.echo("Single-pass data-quality inspection for CSV and JSON files")


if __name__ == '__main__':
    cli()
