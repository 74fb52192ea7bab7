"""CLI theme configuration - all colors in one place.

Colors use Rich style syntax (e.g., "green", "bold red", "dim italic").
"""


class Theme:
    """Terminal color theme for the execwrap CLI."""

    # -------------------------------------------------------------------------
    # Status colors
    # -------------------------------------------------------------------------
    SUCCESS = "green"
    ERROR = "red"
    WARNING = "yellow"
    INFO = "blue"
    VERBOSE = "blue"

    # -------------------------------------------------------------------------
    # Wrapped command output
    # -------------------------------------------------------------------------
    STDERR_MARKER = "red"

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------
    HEADER = "bold"
    TABLE_LABEL = "grey62"
    TABLE_VALUE = "bold"


# Default theme instance - import this in other modules
theme = Theme()
