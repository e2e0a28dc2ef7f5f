"""
Pretty output formatting for CLI.

Provides consistent terminal output for the inspect command: headers,
key/value lines, compact tables and severity-coloured findings.
"""

from colorama import Fore, Style, Back
import os


class PrettyOutput:
    """
    Pretty output formatter for the datainspect CLI.

    All methods print to stdout; colours come from colorama.
    """

    # Color scheme
    PRIMARY = Fore.CYAN
    SUCCESS = Fore.GREEN
    WARNING = Fore.YELLOW
    ERROR = Fore.RED
    INFO = Fore.BLUE
    HEADER = Fore.WHITE + Style.BRIGHT
    DIM = Style.DIM
    RESET = Style.RESET_ALL

    # Symbols
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    WARN = "⚠"
    INFO_SYMBOL = "ℹ"

    @staticmethod
    def get_terminal_width():
        """Get terminal width, default to 80 if cannot determine."""
        try:
            return os.get_terminal_size().columns
        except OSError:
            return 80

    @staticmethod
    def header(text, width=None):
        """
        Print a major header with box drawing.

        Args:
            text: Header text
            width: Box width (default: terminal width, max 80)
        """
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)
        width = max(width, len(text) + 2)

        padding = (width - len(text)) // 2
        line = "═" * width

        print(f"\n{PrettyOutput.PRIMARY}╔{line}╗")
        print(f"║{' ' * padding}{text}{' ' * (width - len(text) - padding)}║")
        print(f"╚{line}╝{PrettyOutput.RESET}\n")

    @staticmethod
    def section(text, width=None):
        """Print a section header framed by horizontal rules."""
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        line = "─" * width
        print(f"\n{PrettyOutput.HEADER}{line}")
        print(f"{PrettyOutput.ARROW} {text}")
        print(f"{line}{PrettyOutput.RESET}\n")

    @staticmethod
    def subsection(text):
        """Print a subsection header."""
        print(f"\n{PrettyOutput.HEADER}{text}:{PrettyOutput.RESET}")

    @staticmethod
    def success(message, indent=0):
        """Print a success message with checkmark."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {message}")

    @staticmethod
    def error(message, indent=0):
        """Print an error message with cross."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ERROR}{PrettyOutput.CROSS}{PrettyOutput.RESET} {message}")

    @staticmethod
    def warning(message, indent=0):
        """Print a warning message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.WARNING}{PrettyOutput.WARN}{PrettyOutput.RESET} {message}")

    @staticmethod
    def info(message, indent=0):
        """Print an info message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.INFO}{PrettyOutput.INFO_SYMBOL}{PrettyOutput.RESET} {message}")

    @staticmethod
    def key_value(key, value, indent=0, value_color=None):
        """
        Print a key-value pair.

        Args:
            key: Key text
            value: Value text
            indent: Indentation level
            value_color: Optional color for value
        """
        spaces = " " * indent
        if value_color:
            print(f"{spaces}{PrettyOutput.DIM}{key}:{PrettyOutput.RESET} {value_color}{value}{PrettyOutput.RESET}")
        else:
            print(f"{spaces}{PrettyOutput.DIM}{key}:{PrettyOutput.RESET} {value}")

    @staticmethod
    def status_badge(status_text, passed=True):
        """Return a coloured status badge string."""
        bg = Back.GREEN if passed else Back.RED
        return f"{bg}{Fore.BLACK} {status_text} {PrettyOutput.RESET}"

    @staticmethod
    def divider(char="─", width=None):
        """Print a horizontal divider."""
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)
        print(f"{PrettyOutput.DIM}{char * width}{PrettyOutput.RESET}")

    @staticmethod
    def blank_line():
        """Print a blank line."""
        print()

    @staticmethod
    def output_file(label, path, indent=2):
        """Print an output file path."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ARROW} {PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {path}")

    @staticmethod
    def finding(message, severity="info", indent=4):
        """
        Print a finding.

        Args:
            message: Finding text
            severity: One of "critical", "warning", "info"
            indent: Indentation spaces
        """
        spaces = " " * indent
        icons = {
            "critical": f"{Fore.RED}●{PrettyOutput.RESET}",
            "warning": f"{Fore.YELLOW}●{PrettyOutput.RESET}",
            "info": f"{PrettyOutput.DIM}•{PrettyOutput.RESET}"
        }
        icon = icons.get(severity, icons["info"])
        print(f"{spaces}{icon} {message}")

    @staticmethod
    def compact_table(headers, rows, col_widths=None):
        """
        Print a compact table.

        Args:
            headers: List of header strings
            rows: List of row tuples
            col_widths: Optional list of column widths
        """
        if not col_widths:
            col_widths = [max(len(str(h)), max(len(str(r[i])) for r in rows) if rows else 0)
                          for i, h in enumerate(headers)]

        header_str = "  ".join(f"{h:<{col_widths[i]}}" for i, h in enumerate(headers))
        print(f"  {PrettyOutput.HEADER}{header_str}{PrettyOutput.RESET}")
        print(f"  {PrettyOutput.DIM}{'─' * len(header_str)}{PrettyOutput.RESET}")

        for row in rows:
            row_str = "  ".join(f"{str(v):<{col_widths[i]}}" for i, v in enumerate(row))
            print(f"  {row_str}")
