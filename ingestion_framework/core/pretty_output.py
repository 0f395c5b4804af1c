"""
Pretty output formatting for CLI.

Provides consistent terminal output for the preview and ingest commands.
"""

import os

from colorama import Fore, Style


class PrettyOutput:
    """
    Pretty output formatter for the ingestion CLI.

    Colors, symbols and small layout helpers shared by every command.
    """

    # Color scheme
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
    DOT = "•"
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
    def section(text, width=None):
        """Print a section header."""
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        line = "─" * width
        print(f"\n{PrettyOutput.HEADER}{line}")
        print(f"{PrettyOutput.ARROW} {text}")
        print(f"{line}{PrettyOutput.RESET}\n")

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
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.WARNING}{PrettyOutput.WARN}{PrettyOutput.RESET} {message}")

    @staticmethod
    def info(message, indent=0):
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.INFO}{PrettyOutput.INFO_SYMBOL}{PrettyOutput.RESET} {message}")

    @staticmethod
    def item(message, indent=0):
        """Print a list item."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.DIM}{PrettyOutput.DOT}{PrettyOutput.RESET} {message}")

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
    def blank_line():
        print()

    @staticmethod
    def output_file(label, path, indent=2):
        """Print an output file location."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ARROW} {PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {path}")

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

    @staticmethod
    def column_stats_table(stats):
        """Print the per-column preview statistics of a PreviewResult."""
        rows = []
        for column, s in stats.items():
            fraction = f"{s.numeric_fraction:.0%}" if s.numeric_fraction is not None else "-"
            examples = ", ".join(s.example_placeholders) or "-"
            rows.append((column, s.inferred_type.value, s.missing, s.placeholder, s.unique, fraction, examples))
        PrettyOutput.compact_table(
            ["column", "type", "missing", "placeholder", "unique", "numeric", "placeholders"],
            rows,
        )

    @staticmethod
    def ingestion_summary(dataset):
        """Print the headline numbers of a finalized Dataset."""
        summary = dataset.imputation_summary
        parts = [
            f"{dataset.num_samples:,} samples",
            f"{dataset.num_features} features",
            f"target '{dataset.target}' ({dataset.target_type.value})",
        ]
        if dataset.num_classes is not None:
            parts.append(f"{dataset.num_classes} classes")
        print(f"\n{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {' │ '.join(parts)}")
        if summary.drop_applied:
            print(
                f"  {PrettyOutput.DIM}Dropped {summary.dropped_row_count:,} of "
                f"{summary.original_row_count:,} rows{PrettyOutput.RESET}"
            )
