"""
Theme definitions for the worksheet viewer.
"""


class Colors:
    # Primary Colors
    PRIMARY_BLUE = "#0364B8"
    PRIMARY_BLUE_HOVER = "#0A2767"
    PRIMARY_BLUE_PRESSED = "#0A2767"

    # Backgrounds
    BACKGROUND = "#f5f5f5"
    SURFACE = "#ffffff"
    HOVER = "#f0f0f0"
    DISABLED_BG = "#e0e0e0"
    PAGE_AREA = "#525659"  # Behind rendered pages

    # Text
    TEXT_PRIMARY = "#1f1f1f"
    TEXT_SECONDARY = "#666666"
    TEXT_DISABLED = "#757575"
    TEXT_ON_PRIMARY = "#ffffff"

    # Borders & Dividers
    BORDER = "#e0e0e0"
    DIVIDER = "#eeeeee"

    # Status
    ERROR = "#d32f2f"
    ERROR_BG = "#fdecea"


class Fonts:
    UI_FONT = "-apple-system, 'SF Pro Text', 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"

    BODY = "14pt"
    SMALL = "12pt"

    WEIGHT_REGULAR = "400"
    WEIGHT_MEDIUM = "500"


class Styles:
    # Common QSS fragments

    BUTTON_PRIMARY = f"""
        QPushButton {{
            background-color: {Colors.PRIMARY_BLUE};
            color: {Colors.TEXT_ON_PRIMARY};
            border-radius: 6px;
            padding: 6px 14px;
            font-weight: {Fonts.WEIGHT_MEDIUM};
            border: none;
            qproperty-iconSize: 18px 18px;
        }}
        QPushButton:hover {{
            background-color: {Colors.PRIMARY_BLUE_HOVER};
        }}
        QPushButton:pressed {{
            background-color: {Colors.PRIMARY_BLUE_PRESSED};
        }}
        QPushButton:disabled {{
            background-color: {Colors.DISABLED_BG};
            color: {Colors.TEXT_DISABLED};
        }}
    """

    BUTTON_ICON = f"""
        QToolButton {{
            background-color: transparent;
            border: none;
            border-radius: 4px;
            padding: 4px;
        }}
        QToolButton:hover {{
            background-color: {Colors.HOVER};
        }}
        QToolButton:disabled {{
            background-color: transparent;
        }}
    """

    TOOLBAR = f"""
        QFrame#viewerToolbar {{
            background-color: {Colors.SURFACE};
            border-bottom: 1px solid {Colors.BORDER};
        }}
        QLabel {{
            color: {Colors.TEXT_SECONDARY};
            font-size: {Fonts.SMALL};
        }}
    """

    PAGE_AREA = f"""
        QScrollArea {{
            background-color: {Colors.PAGE_AREA};
            border: none;
        }}
        QWidget#pageContainer {{
            background-color: {Colors.PAGE_AREA};
        }}
    """

    ERROR_PANE = f"""
        QFrame#errorPane {{
            background-color: {Colors.ERROR_BG};
            border: 1px solid {Colors.ERROR};
            border-radius: 8px;
        }}
        QLabel {{
            color: {Colors.ERROR};
            font-size: {Fonts.BODY};
        }}
    """


def apply_global_stylesheet(app) -> None:
    """
    Apply the default font to the QApplication.
    """
    from PySide6.QtGui import QFont

    font = QFont()
    font.setFamily(Fonts.UI_FONT.split(",")[0].strip(" '\""))
    font.setPointSize(int(Fonts.BODY.replace("pt", "")))
    app.setFont(font)
