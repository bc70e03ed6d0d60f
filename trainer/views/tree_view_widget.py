"""Tree view widget displaying the move outline."""

from typing import Any, Dict, List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QMouseEvent
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QScrollArea, QVBoxLayout, QWidget

from trainer.models.outline import NodeCell, OutlineTree


class NodeCellLabel(QLabel):
    """Clickable label for one node cell."""

    def __init__(self, cell: NodeCell, annotation_color: List[int],
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.cell = cell
        self.annotation_color = annotation_color
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.update_text()

    def update_text(self) -> None:
        if self.cell.annotation is None:
            self.setText(self.cell.label)
        else:
            color = self.annotation_color
            self.setText(f"{self.cell.label} <span style='color: rgb({color[0]}, {color[1]}, {color[2]});'>"
                         f"{self.cell.annotation}</span>")

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        event.accept()
        # The click may refresh the outline and retire this label
        self.cell.click(event)


class TreeViewWidget(QScrollArea):
    """Scrollable outline of the repertoire tree.

    Rows are stacked vertically in display order and indented by their
    indent level. Annotations may resolve on worker threads, so cells
    notify the widget through a queued signal.
    """

    annotation_arrived = pyqtSignal(object)  # Emitted with the NodeCell whose annotation changed

    def __init__(self, config: Dict[str, Any], parent: Optional[QWidget] = None) -> None:
        """Initialize the tree view widget.

        Args:
            config: Configuration dictionary.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self.config = config
        self._labels: Dict[int, NodeCellLabel] = {}
        self._load_config()
        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.annotation_arrived.connect(self._on_annotation_arrived, Qt.ConnectionType.QueuedConnection)
        self._install_content(self._create_content())

    def _load_config(self) -> None:
        """Load configuration for the tree view."""
        tree_view_config = self.config.get('ui', {}).get('tree_view', {})
        self.padding_per_indent = tree_view_config.get('row_padding_px_per_indent', 15)
        self.row_spacing = tree_view_config.get('row_spacing', 2)
        self.cell_spacing = tree_view_config.get('cell_spacing', 6)
        self.selected_background = tree_view_config.get('selected_background_color', [70, 90, 130])
        self.text_color = tree_view_config.get('text_color', [200, 200, 200])
        self.annotation_color = tree_view_config.get('annotation_color', [140, 160, 200])

    def _create_content(self) -> QWidget:
        content = QWidget()
        self._content_layout = QVBoxLayout(content)
        self._content_layout.setContentsMargins(0, 0, 0, 0)
        self._content_layout.setSpacing(self.row_spacing)
        self._content_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        return content

    def _install_content(self, content: QWidget) -> None:
        # setWidget() deletes a widget it still holds, so retire the old one
        # first. A mouse press on one of its labels may still be in progress.
        retired = self.takeWidget()
        if retired is not None:
            retired.hide()
            retired.setParent(self)
            retired.deleteLater()
        self._content = content
        self.setWidget(content)
        # setWidget() sized the content from its layout; place the rows now so
        # cell positions are valid before the next event loop pass.
        self._content_layout.activate()

    def set_hidden(self, hidden: bool) -> None:
        self.setVisible(not hidden)

    def render_outline(self, outline: OutlineTree) -> None:
        """Replace the displayed outline.

        The new content is fully built before it is installed, so the
        scroll range and row positions are known as soon as this returns.

        Args:
            outline: Outline to display.
        """
        content = self._create_content()
        labels: Dict[int, NodeCellLabel] = {}

        for row in outline.iter_rows():
            row_widget = QWidget()
            row_layout = QHBoxLayout(row_widget)
            row_layout.setContentsMargins(row.indent * self.padding_per_indent, 0, 0, 0)
            row_layout.setSpacing(self.cell_spacing)
            for cell in row.cells:
                label = NodeCellLabel(cell, self.annotation_color)
                label.setStyleSheet(self._cell_stylesheet(cell))
                cell.on_annotation_changed = self.annotation_arrived.emit
                labels[id(cell)] = label
                row_layout.addWidget(label)
            row_layout.addStretch(1)
            self._content_layout.addWidget(row_widget)

        self._labels = labels
        self._install_content(content)

    def _cell_stylesheet(self, cell: NodeCell) -> str:
        text = self.text_color
        style = f"color: rgb({text[0]}, {text[1]}, {text[2]}); padding: 1px 3px;"
        if cell.is_selected:
            bg = self.selected_background
            style += f" background-color: rgb({bg[0]}, {bg[1]}, {bg[2]}); border-radius: 3px;"
        return style

    def _on_annotation_arrived(self, cell: NodeCell) -> None:
        label = self._labels.get(id(cell))
        # The outline may have been replaced while the signal was queued
        if label is None or label.cell is not cell or not cell.is_attached:
            return
        label.update_text()

    def labels(self) -> List[NodeCellLabel]:
        return list(self._labels.values())

    def container_offset_top(self) -> int:
        # Cell positions are measured in content coordinates, whose origin is
        # the top of the scroll container.
        return 0

    def scroll_top(self) -> int:
        return self.verticalScrollBar().value()

    def viewport_height(self) -> int:
        return self.viewport().height()

    def cell_offset_top(self, cell: NodeCell) -> int:
        label = self._labels.get(id(cell))
        if label is None:
            return 0
        # Rows are direct children of the content widget and are placed by its
        # layout, so the row position is valid right after render_outline().
        return label.parentWidget().y()

    def set_scroll_top(self, value: int) -> None:
        self.verticalScrollBar().setValue(value)
