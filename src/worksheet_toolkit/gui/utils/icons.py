"""Material Design icons via QtAwesome."""
import qtawesome as qta
from worksheet_toolkit.gui.styles.theme import Colors


class MaterialIcons:
    """Centralized Material Design icon definitions using QtAwesome."""

    # Zoom
    @staticmethod
    def zoom_in():
        return qta.icon('mdi6.magnify-plus-outline', color=Colors.TEXT_SECONDARY)

    @staticmethod
    def zoom_out():
        return qta.icon('mdi6.magnify-minus-outline', color=Colors.TEXT_SECONDARY)

    @staticmethod
    def fit_width():
        """Fit page to window width."""
        return qta.icon('mdi6.arrow-expand-horizontal', color=Colors.TEXT_SECONDARY)

    # Output
    @staticmethod
    def printer():
        return qta.icon('mdi6.printer-outline', color=Colors.TEXT_SECONDARY)

    @staticmethod
    def download(color=None):
        return qta.icon('mdi6.download', color=color or Colors.TEXT_ON_PRIMARY)

    # Status
    @staticmethod
    def refresh(color=None):
        """Retry icon."""
        return qta.icon('mdi6.refresh', color=color or Colors.TEXT_ON_PRIMARY)

    @staticmethod
    def alert():
        return qta.icon('mdi6.alert-circle-outline', color=Colors.ERROR)
