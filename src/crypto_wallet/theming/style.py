"""Centralized theming and typography for the Crypto Wallet UI."""

from __future__ import annotations

# Palette
BACKGROUND = "#020617"
CARD = "#0F172A"
TEXT_MAIN = "#E5E7EB"
TEXT_MUTED = "#9CA3AF"
COLOR_POSITIVE = "#22C55E"  # Green
COLOR_NEGATIVE = "#EF4444"  # Red
BORDER = "#1F2937"

FONT_FAMILY = "Helvetica"
TITLE_FONT = (FONT_FAMILY, 20, "bold")
SUMMARY_VALUE_FONT = (FONT_FAMILY, 22, "bold")
SUMMARY_LABEL_FONT = (FONT_FAMILY, 10)
BODY_FONT = (FONT_FAMILY, 12)

SPACING_SMALL = 4
SPACING_MEDIUM = 8
SPACING_LARGE = 16
PADDING = 16

THEME_NAME = "darkly"


def setup_styles(root):
    """Configure ttk/ttkbootstrap styles for the dark card look.

    ttkbootstrap.Style is a singleton and does not take master; root is kept
    for API compatibility with callers.
    """
    import tkinter as tk

    import ttkbootstrap as tb  # Deferred so palette constants import without GUI deps

    style = tb.Style()
    style.configure("Vertical.TScrollbar", gripcount=0, width=8, arrowsize=0)
    try:
        style.configure("TButton", padding=(14, 8))
        style.configure("Mode.TButton", padding=(12, 4))
        style.configure("Positions.Treeview", font=(FONT_FAMILY, 11), rowheight=26)
        style.configure("Card.TFrame", background=CARD)
        style.configure("Card.TLabel", background=CARD, foreground=TEXT_MAIN)
        style.configure("Muted.TLabel", foreground=TEXT_MUTED, font=SUMMARY_LABEL_FONT)
    except tk.TclError:
        # Some environments may not support style reconfiguration; fail gracefully.
        pass
    return style
