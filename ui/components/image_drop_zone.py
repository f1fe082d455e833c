"""Image drag-and-drop zone with preview of the loaded image."""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QDragEnterEvent, QDropEvent, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.utils import ImageAsset, format_file_size

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp *.tif *.tiff);;All files (*)"


class ImageDropZone(QWidget):
    """Drop or browse for a file; shows the accepted ImageAsset as a preview.

    The zone does not judge file types. It reports the chosen path through
    ``file_selected`` and the owner decides whether the file is usable.
    """

    file_selected = pyqtSignal(str)
    file_removed = pyqtSignal()

    def __init__(self, placeholder_text: str = "", parent=None):
        super().__init__(parent)
        self._placeholder_text = placeholder_text or "Drag and drop or click to select an image"
        self._asset = None
        self._drag_over = False
        self.setAcceptDrops(True)
        self.setObjectName("imageDropZone")
        self.setMinimumHeight(220)
        self._setup_ui()

    def _setup_ui(self):
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(20, 20, 20, 20)
        self._layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._icon_label = QLabel("⬆")
        self._icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._icon_label.setProperty("class", "dropZoneIcon")

        self._text_label = QLabel(self._placeholder_text)
        self._text_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._text_label.setWordWrap(True)
        self._text_label.setProperty("class", "dropZoneText")

        self._browse_btn = QPushButton("Select Image")
        self._browse_btn.setObjectName("primaryButton")
        self._browse_btn.clicked.connect(self.browse)

        self._preview_label = QLabel()
        self._preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preview_label.setMinimumHeight(200)
        self._preview_label.hide()

        self._file_info_label = QLabel()
        self._file_info_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._file_info_label.setProperty("class", "dropZoneFileInfo")
        self._file_info_label.hide()

        self._remove_row = QWidget()
        remove_layout = QHBoxLayout(self._remove_row)
        remove_layout.setContentsMargins(0, 0, 0, 0)
        remove_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._remove_btn = QPushButton("Remove")
        self._remove_btn.setFixedWidth(100)
        self._remove_btn.clicked.connect(self._on_remove)
        remove_layout.addWidget(self._remove_btn)
        self._remove_row.hide()

        self._layout.addWidget(self._icon_label)
        self._layout.addWidget(self._text_label)
        self._layout.addWidget(self._browse_btn, 0, Qt.AlignmentFlag.AlignCenter)
        self._layout.addWidget(self._preview_label)
        self._layout.addWidget(self._file_info_label)
        self._layout.addWidget(self._remove_row)

    def show_asset(self, asset: ImageAsset):
        """Swap the placeholder for a preview of ``asset``."""
        self._asset = asset
        info = f"{asset.name} ({format_file_size(asset.size_bytes)})"
        if asset.dimensions:
            info += f"  {asset.width}×{asset.height}"
        self._file_info_label.setText(info)
        self._file_info_label.show()

        pixmap = QPixmap()
        if pixmap.loadFromData(asset.content):
            scaled = pixmap.scaled(
                360, 240,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
            self._preview_label.setPixmap(scaled)
        else:
            self._preview_label.setText(asset.name)
        self._preview_label.show()

        self._icon_label.hide()
        self._text_label.hide()
        self._browse_btn.hide()
        self._remove_row.show()
        self.update()

    def reset(self):
        """Return to the placeholder state without emitting signals."""
        self._asset = None
        self._preview_label.hide()
        self._preview_label.clear()
        self._file_info_label.hide()
        self._remove_row.hide()
        self._icon_label.show()
        self._text_label.show()
        self._browse_btn.show()
        self._drag_over = False
        self.update()

    def browse(self):
        file_path, _ = QFileDialog.getOpenFileName(self, "Select Image", "", IMAGE_FILTER)
        if file_path:
            self.file_selected.emit(file_path)

    def _on_remove(self):
        self.reset()
        self.file_removed.emit()

    # --- Drag and drop ---

    def dragEnterEvent(self, event: QDragEnterEvent):
        if event.mimeData().hasUrls():
            urls = event.mimeData().urls()
            if urls and urls[0].isLocalFile():
                event.acceptProposedAction()
                self._drag_over = True
                self.update()

    def dragLeaveEvent(self, event):
        self._drag_over = False
        self.update()

    def dropEvent(self, event: QDropEvent):
        self._drag_over = False
        urls = event.mimeData().urls()
        if urls and urls[0].isLocalFile():
            self.file_selected.emit(urls[0].toLocalFile())
        self.update()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self._asset is None:
            self.browse()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        if self._drag_over:
            pen = QPen(QColor("#2563EB"), 2, Qt.PenStyle.DashLine)
        elif self._asset is not None:
            pen = QPen(QColor("#22C55E"), 2, Qt.PenStyle.SolidLine)
        else:
            pen = QPen(QColor("#888888"), 2, Qt.PenStyle.DashLine)

        pen.setDashPattern([8, 4])
        painter.setPen(pen)
        painter.drawRoundedRect(self.rect().adjusted(1, 1, -1, -1), 12, 12)
        painter.end()
