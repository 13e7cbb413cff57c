"""
Worksheet PDF viewer window.

Shows generated PDF pages in a continuous vertical scroll with zoom,
page jump, printing through the native print dialog and download.
When generation failed, an error pane with a Retry button replaces the
pages.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from PIL import Image
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QImage, QPainter, QPixmap
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import (
    QApplication, QFileDialog, QFrame, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QScrollArea, QSpinBox, QStackedWidget, QToolButton,
    QVBoxLayout, QWidget,
)

from worksheet_toolkit.builder.errors import WorksheetError
from worksheet_toolkit.builder.output.preview import PdfPreview, download_filename
from worksheet_toolkit.gui.styles.theme import Styles
from worksheet_toolkit.gui.utils.icons import MaterialIcons

logger = logging.getLogger(__name__)

PAGE_SPACING = 16
PRINT_ZOOM = 4.0  # 288 DPI

PAGES_VIEW = 0
ERROR_VIEW = 1


def pil_to_pixmap(image: Image.Image) -> QPixmap:
    """Convert an RGB PIL image to a QPixmap."""
    rgb = image.convert("RGB")
    data = rgb.tobytes("raw", "RGB")
    qimage = QImage(data, rgb.width, rgb.height, 3 * rgb.width, QImage.Format.Format_RGB888)
    # QImage does not own `data`; copy before it goes out of scope
    return QPixmap.fromImage(qimage.copy())


class PdfViewerWindow(QMainWindow):
    """Preview window for a generated worksheet."""

    retry_requested = Signal()

    def __init__(
        self,
        pdf_bytes: Optional[bytes] = None,
        *,
        title: str = "",
        author: str = "",
        on_retry: Optional[Callable[[], bytes]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._title = title
        self._author = author
        self._on_retry = on_retry
        self._preview: Optional[PdfPreview] = None
        self._page_labels: List[QLabel] = []

        self.setWindowTitle(title or "Worksheet")
        self.resize(900, 1000)
        self._setup_ui()

        if pdf_bytes is not None:
            self.load_pdf(pdf_bytes)

    def _setup_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self._build_toolbar())

        self._stack = QStackedWidget()
        self._stack.addWidget(self._build_pages_view())
        self._stack.addWidget(self._build_error_view())
        layout.addWidget(self._stack, 1)

        self.setCentralWidget(central)
        self._set_controls_enabled(False)

    def _build_toolbar(self) -> QFrame:
        toolbar = QFrame()
        toolbar.setObjectName("viewerToolbar")
        toolbar.setStyleSheet(Styles.TOOLBAR + Styles.BUTTON_ICON + Styles.BUTTON_PRIMARY)
        row = QHBoxLayout(toolbar)
        row.setContentsMargins(12, 6, 12, 6)
        row.setSpacing(6)

        self.zoom_out_btn = QToolButton()
        self.zoom_out_btn.setIcon(MaterialIcons.zoom_out())
        self.zoom_out_btn.setToolTip("Zoom out")
        self.zoom_out_btn.clicked.connect(self.zoom_out)
        row.addWidget(self.zoom_out_btn)

        self.zoom_label = QLabel("100%")
        self.zoom_label.setMinimumWidth(48)
        self.zoom_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        row.addWidget(self.zoom_label)

        self.zoom_in_btn = QToolButton()
        self.zoom_in_btn.setIcon(MaterialIcons.zoom_in())
        self.zoom_in_btn.setToolTip("Zoom in")
        self.zoom_in_btn.clicked.connect(self.zoom_in)
        row.addWidget(self.zoom_in_btn)

        self.fit_btn = QToolButton()
        self.fit_btn.setIcon(MaterialIcons.fit_width())
        self.fit_btn.setToolTip("Fit to width")
        self.fit_btn.clicked.connect(self.fit_to_width)
        row.addWidget(self.fit_btn)

        row.addSpacing(12)

        self.page_spin = QSpinBox()
        self.page_spin.setMinimum(1)
        self.page_spin.setMaximum(1)
        self.page_spin.valueChanged.connect(self.jump_to_page)
        row.addWidget(self.page_spin)

        self.page_total_label = QLabel("/ 0")
        row.addWidget(self.page_total_label)

        row.addStretch()

        self.print_btn = QToolButton()
        self.print_btn.setIcon(MaterialIcons.printer())
        self.print_btn.setToolTip("Print")
        self.print_btn.clicked.connect(self.print_pdf)
        row.addWidget(self.print_btn)

        self.download_btn = QPushButton("Download")
        self.download_btn.setIcon(MaterialIcons.download())
        self.download_btn.clicked.connect(self.download)
        row.addWidget(self.download_btn)

        return toolbar

    def _build_pages_view(self) -> QScrollArea:
        self._scroll = QScrollArea()
        self._scroll.setWidgetResizable(True)
        self._scroll.setStyleSheet(Styles.PAGE_AREA)

        container = QWidget()
        container.setObjectName("pageContainer")
        self._pages_layout = QVBoxLayout(container)
        self._pages_layout.setSpacing(PAGE_SPACING)
        self._pages_layout.setContentsMargins(PAGE_SPACING, PAGE_SPACING, PAGE_SPACING, PAGE_SPACING)
        self._pages_layout.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop)
        self._scroll.setWidget(container)

        self._scroll.verticalScrollBar().valueChanged.connect(self._sync_page_from_scroll)
        return self._scroll

    def _build_error_view(self) -> QWidget:
        wrapper = QWidget()
        outer = QVBoxLayout(wrapper)
        outer.setAlignment(Qt.AlignmentFlag.AlignCenter)

        pane = QFrame()
        pane.setObjectName("errorPane")
        pane.setStyleSheet(Styles.ERROR_PANE + Styles.BUTTON_PRIMARY)
        pane.setMaximumWidth(480)
        layout = QVBoxLayout(pane)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(16)

        icon = QLabel()
        icon.setPixmap(MaterialIcons.alert().pixmap(40, 40))
        icon.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(icon)

        self.error_label = QLabel()
        self.error_label.setWordWrap(True)
        self.error_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.error_label)

        self.retry_btn = QPushButton("Retry")
        self.retry_btn.setIcon(MaterialIcons.refresh())
        self.retry_btn.clicked.connect(self._on_retry_clicked)
        layout.addWidget(self.retry_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        outer.addWidget(pane)
        return wrapper

    # State

    @property
    def preview(self) -> Optional[PdfPreview]:
        return self._preview

    @property
    def showing_error(self) -> bool:
        return self._stack.currentIndex() == ERROR_VIEW

    @property
    def page_labels(self) -> List[QLabel]:
        return list(self._page_labels)

    def load_pdf(self, pdf_bytes: bytes) -> None:
        """Show new PDF bytes, or the error pane if they cannot be opened."""
        try:
            preview = PdfPreview(pdf_bytes)
        except WorksheetError as e:
            self.show_error(str(e))
            return

        if self._preview is not None:
            self._preview.close()
        self._preview = preview

        self.page_spin.blockSignals(True)
        self.page_spin.setMaximum(max(preview.page_count, 1))
        self.page_spin.setValue(1)
        self.page_spin.blockSignals(False)
        self.page_total_label.setText(f"/ {preview.page_count}")

        self._stack.setCurrentIndex(PAGES_VIEW)
        self._set_controls_enabled(True)
        self._render_pages()
        logger.info(f"Viewer loaded {preview.page_count} pages")

    def show_error(self, message: str) -> None:
        """Replace the pages with an error message and a Retry button."""
        self.error_label.setText(message)
        self.retry_btn.setVisible(self._on_retry is not None)
        self._stack.setCurrentIndex(ERROR_VIEW)
        self._set_controls_enabled(False)
        logger.warning(f"Viewer showing error: {message}")

    def _set_controls_enabled(self, enabled: bool) -> None:
        for widget in (
            self.zoom_in_btn, self.zoom_out_btn, self.fit_btn,
            self.page_spin, self.print_btn, self.download_btn,
        ):
            widget.setEnabled(enabled)

    def _on_retry_clicked(self):
        self.retry_requested.emit()
        if self._on_retry is None:
            return
        try:
            pdf_bytes = self._on_retry()
        except WorksheetError as e:
            self.show_error(str(e))
            return
        self.load_pdf(pdf_bytes)

    # Pages

    def _render_pages(self) -> None:
        while self._pages_layout.count():
            item = self._pages_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()
        self._page_labels = []

        if self._preview is None:
            return
        for index in range(self._preview.page_count):
            label = QLabel()
            label.setPixmap(pil_to_pixmap(self._preview.render_page(index)))
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self._pages_layout.addWidget(label)
            self._page_labels.append(label)
        self.zoom_label.setText(f"{round(self._preview.zoom * 100)}%")

    def zoom_in(self):
        if self._preview is not None:
            self._preview.zoom_in()
            self._render_pages()

    def zoom_out(self):
        if self._preview is not None:
            self._preview.zoom_out()
            self._render_pages()

    def fit_to_width(self):
        if self._preview is not None:
            available = self._scroll.viewport().width() - 2 * PAGE_SPACING
            self._preview.set_zoom(self._preview.fit_width_zoom(available))
            self._render_pages()

    def jump_to_page(self, page_number: int):
        """Scroll so the given 1-indexed page is at the top."""
        if self._preview is None:
            return
        index = self._preview.jump_to(page_number)
        if index < len(self._page_labels):
            self._scroll.verticalScrollBar().setValue(self._page_labels[index].y() - PAGE_SPACING)

    def _sync_page_from_scroll(self, value: int):
        if not self._page_labels:
            return
        current = 0
        for index, label in enumerate(self._page_labels):
            if label.y() - PAGE_SPACING <= value:
                current = index
        self.page_spin.blockSignals(True)
        self.page_spin.setValue(current + 1)
        self.page_spin.blockSignals(False)

    # Output

    def print_pdf(self):
        """Open the native print dialog and print every page."""
        if self._preview is None:
            return
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
        printer.setDocName(self._title or "Worksheet")
        dialog = QPrintDialog(printer, self)
        if dialog.exec() == QPrintDialog.DialogCode.Accepted:
            self.print_to(printer)

    def print_to(self, printer: QPrinter) -> None:
        """Rasterize each page onto the printer, scaled to fit."""
        painter = QPainter()
        if not painter.begin(printer):
            self.show_error("Could not start printing")
            return
        try:
            for index in range(self._preview.page_count):
                if index > 0:
                    printer.newPage()
                pixmap = pil_to_pixmap(self._preview.render_page(index, PRINT_ZOOM))
                target = painter.viewport()
                scaled = pixmap.scaled(
                    target.size(),
                    Qt.AspectRatioMode.KeepAspectRatio,
                    Qt.TransformationMode.SmoothTransformation,
                )
                painter.drawPixmap(0, 0, scaled)
        finally:
            painter.end()
        logger.info(f"Printed {self._preview.page_count} pages")

    def download(self):
        """Ask where to save and write the original PDF bytes."""
        if self._preview is None:
            return
        default_name = download_filename(self._title, self._author)
        path, _ = QFileDialog.getSaveFileName(self, "Save worksheet", default_name, "PDF files (*.pdf)")
        if path:
            self.save_to(Path(path))

    def save_to(self, path: Path) -> Path:
        path.write_bytes(self._preview.pdf_bytes)
        logger.info(f"Saved worksheet PDF to {path}")
        return path

    def closeEvent(self, event):
        if self._preview is not None:
            self._preview.close()
            self._preview = None
        super().closeEvent(event)


def show_viewer(pdf_bytes: Optional[bytes] = None, error: Optional[str] = None, **kwargs) -> int:
    """Run a standalone viewer until it is closed."""
    from worksheet_toolkit.gui.styles.theme import apply_global_stylesheet

    app = QApplication.instance() or QApplication([])
    apply_global_stylesheet(app)
    window = PdfViewerWindow(pdf_bytes, **kwargs)
    if error is not None:
        window.show_error(error)
    window.show()
    return app.exec()
