"""Top-level window orchestration."""

from typing import Any, Dict

import chess
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QCloseEvent, QFont, QKeySequence
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QMainWindow, QSplitter, QWidget

from trainer.controllers.board_controller import BoardController
from trainer.controllers.tree_node_handler import SelectNodeHandler
from trainer.controllers.tree_view_controller import TreeViewController
from trainer.models.board_surface_model import BoardSurfaceModel, FeedbackState
from trainer.models.tree_model import RepertoireTreeModel
from trainer.services.annotation_service import ExecutorAnnotator, TextAnnotationRenderer
from trainer.services.logging_service import LoggingService
from trainer.services.sound_service import SoundPlayer
from trainer.views.tree_view_widget import TreeViewWidget


def count_replies(pgn: str, board: chess.Board) -> str:
    """Annotation shown next to each move: the number of legal replies."""
    return f"({board.legal_moves.count()})"


class BoardTextView(QLabel):
    """Text rendering of the board surface.

    Stands in for a graphical board: it observes the surface model and
    prints the position, orientation and current feedback.
    """

    def __init__(self, surface: BoardSurfaceModel) -> None:
        super().__init__()
        self._surface = surface
        self.setFont(QFont("Monospace"))
        self.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        surface.state_changed.connect(self._update)
        surface.orientation_changed.connect(lambda _: self._update())
        surface.feedback_changed.connect(lambda _: self._update())
        surface.shapes_changed.connect(lambda _: self._update())
        surface.redraw_requested.connect(self._update)
        self._update()

    def _update(self) -> None:
        board = chess.Board(self._surface.fen)
        text = board.unicode(orientation=self._surface.orientation)
        lines = [text, ""]
        if self._surface.last_move:
            lines.append("Last move: " + "-".join(self._surface.last_move))
        if self._surface.check:
            lines.append("Check")
        if self._surface.feedback != FeedbackState.NONE:
            lines.append(f"Feedback: {self._surface.feedback.name.lower()}")
        for shape in self._surface.auto_shapes:
            target = f"{shape.orig}-{shape.dest}" if shape.is_arrow else shape.orig
            lines.append(f"Hint: {target}")
        self.setText("\n".join(lines))


class MainWindow(QMainWindow):
    """Main window: repertoire outline on the left, board on the right."""

    def __init__(self, config: Dict[str, Any], tree_model: RepertoireTreeModel) -> None:
        """Initialize the main window.

        Args:
            config: Configuration dictionary loaded from ConfigLoader.
            tree_model: Repertoire to display.
        """
        super().__init__()
        self.config = config
        self.tree_model = tree_model

        logging_service = LoggingService.get_instance()
        logging_service.debug("MainWindow initialization started")

        self.board_surface = BoardSurfaceModel()
        self.board_controller = BoardController(SoundPlayer(config), config)
        self.board_controller.attach(self.board_surface)
        self.annotator = ExecutorAnnotator(count_replies)

        self._setup_window()
        self._setup_ui()
        self._setup_menu_bar()

        self.tree_view_controller = TreeViewController(
            tree_model,
            self.tree_view,
            self.board_controller,
            self.annotator,
            TextAnnotationRenderer(),
            SelectNodeHandler(tree_model),
            config,
        )
        self.tree_view_controller.refresh()
        logging_service.debug("MainWindow initialization finished")

    def _setup_window(self) -> None:
        """Setup window title and size from configuration."""
        window_config = self.config.get('ui', {}).get('window', {})
        self.setWindowTitle(window_config.get('title', 'Study Openings'))
        self.resize(window_config.get('width', 960), window_config.get('height', 640))

    def _setup_ui(self) -> None:
        """Setup the tree view and board panes."""
        central = QWidget()
        layout = QHBoxLayout(central)
        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.tree_view = TreeViewWidget(self.config)
        self.board_view = BoardTextView(self.board_surface)
        splitter.addWidget(self.tree_view)
        splitter.addWidget(self.board_view)
        layout.addWidget(splitter)
        self.setCentralWidget(central)

    def _setup_menu_bar(self) -> None:
        """Setup the Board menu."""
        board_menu = self.menuBar().addMenu("&Board")

        flip_action = QAction("Study as &Black", self)
        flip_action.setCheckable(True)
        flip_action.setShortcut(QKeySequence("Ctrl+F"))
        flip_action.toggled.connect(
            lambda checked: self.tree_model.set_repertoire_color(chess.BLACK if checked else chess.WHITE))
        board_menu.addAction(flip_action)

        reset_action = QAction("&Reset to start", self)
        reset_action.triggered.connect(lambda: self.tree_model.select_pgn(""))
        board_menu.addAction(reset_action)

        redraw_action = QAction("Re&draw", self)
        redraw_action.triggered.connect(self.board_controller.redraw)
        board_menu.addAction(redraw_action)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop background annotation work before closing."""
        self.annotator.shutdown()
        LoggingService.get_instance().shutdown()
        super().closeEvent(event)
