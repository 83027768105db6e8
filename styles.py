"""
styles.py

Editor color themes.

Each theme provides the editor stylesheet colors plus the gutter colors
used by LispCodeEditor's line number and docstring areas.
"""

THEMES = {
    "Light": {
        "editor_bg": "#ffffff",
        "editor_fg": "#1f2328",
        "selection_bg": "#cce4ff",
        "marker": "#9a9a9a",
        "gutter": {
            "background": "#f0f0f0",      # Slightly darker than editor (#ffffff)
            "text": "#a0a0a0",            # Dimmed text
            "text_active": "#363636",     # Active line text
            "current_line_bg": "#e8e8e8", # Current line background
            "doc_marker": "#B9770E",      # Docstring gutter marker
        },
    },
    "Dark": {
        "editor_bg": "#1e1e1e",
        "editor_fg": "#d4d4d4",
        "selection_bg": "#264f78",
        "marker": "#6a6a6a",
        "gutter": {
            "background": "#1a1a1a",      # Slightly darker than editor (#1e1e1e)
            "text": "#606060",            # Dimmed text
            "text_active": "#ffffff",     # Active line text
            "current_line_bg": "#2d2d2d", # Current line background
            "doc_marker": "#D7BA7D",      # Docstring gutter marker
        },
    },
}

DEFAULT_THEME = "Light"


def editor_stylesheet(theme_name: str) -> str:
    """Qt stylesheet for the code editor in ``theme_name``."""
    theme = THEMES.get(theme_name, THEMES[DEFAULT_THEME])
    return (
        "QPlainTextEdit {"
        f" background-color: {theme['editor_bg']};"
        f" color: {theme['editor_fg']};"
        f" selection-background-color: {theme['selection_bg']};"
        " border: none; }"
    )
