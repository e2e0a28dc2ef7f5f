"""Allow ``python -m datainspect``."""

from datainspect.cli import cli

if __name__ == "__main__":
    cli()
