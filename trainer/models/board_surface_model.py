"""Visual board surface state."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import chess
from PyQt6.QtCore import QObject, pyqtSignal


class FeedbackState(Enum):
    """Transient feedback shown on the board after a training move."""

    NONE = "none"
    RIGHT = "rightMove"
    WRONG = "wrongMove"
    FINISH = "finishLine"


@dataclass(frozen=True)
class Shape:
    """Marker drawn over the board: a circle if dest is None, else an arrow."""

    orig: str
    dest: Optional[str] = None
    brush: str = "red"

    @property
    def is_arrow(self) -> bool:
        return self.dest is not None


class BoardSurfaceModel(QObject):
    """Model of what the visual chessboard displays.

    The board widget observes these signals and repaints. Position data
    (FEN, side to move, legal destinations, last move, check) is only ever
    changed through apply(), which emits a single state_changed signal per
    call so that observers never see a half-updated position.
    """

    # Signals emitted when the surface changes
    state_changed = pyqtSignal()  # Emitted once per apply() call
    orientation_changed = pyqtSignal(bool)  # Emitted when orientation changes (True=White at bottom)
    feedback_changed = pyqtSignal(object)  # Emitted when feedback changes (FeedbackState)
    shapes_changed = pyqtSignal(object)  # Emitted when auto shapes change (List[Shape])
    redraw_requested = pyqtSignal()  # Emitted when a full redraw is requested

    STATE_KEYS = frozenset({'fen', 'turn_color', 'dests', 'last_move', 'check'})

    def __init__(self) -> None:
        """Initialize the surface with the starting position, White at the bottom."""
        super().__init__()
        self._fen: str = chess.STARTING_FEN
        self._turn_color: chess.Color = chess.WHITE
        self._dests: Dict[str, Set[str]] = {}
        self._last_move: Optional[Tuple[str, str]] = None
        self._check: bool = False
        self._orientation: chess.Color = chess.WHITE
        self._feedback = FeedbackState.NONE
        self._auto_shapes: List[Shape] = []

    @property
    def fen(self) -> str:
        return self._fen

    @property
    def turn_color(self) -> chess.Color:
        return self._turn_color

    @property
    def dests(self) -> Dict[str, Set[str]]:
        """Legal destinations keyed by origin square name."""
        return self._dests

    @property
    def last_move(self) -> Optional[Tuple[str, str]]:
        """(origin, destination) square names of the last move, or None."""
        return self._last_move

    @property
    def check(self) -> bool:
        return self._check

    @property
    def orientation(self) -> chess.Color:
        return self._orientation

    @property
    def feedback(self) -> FeedbackState:
        return self._feedback

    @property
    def auto_shapes(self) -> List[Shape]:
        return list(self._auto_shapes)

    def apply(self, **changes) -> None:
        """Apply several position attributes as one update.

        Args:
            **changes: Any of fen, turn_color, dests, last_move, check.

        Raises:
            ValueError: If an unknown attribute is passed.
        """
        unknown = set(changes) - self.STATE_KEYS
        if unknown:
            raise ValueError(f"Unknown board state attributes: {', '.join(sorted(unknown))}")

        for key, value in changes.items():
            setattr(self, f"_{key}", value)
        self.state_changed.emit()

    def set_orientation(self, color: chess.Color) -> None:
        """Set which color is shown at the bottom of the board.

        Args:
            color: chess.WHITE or chess.BLACK.
        """
        self._orientation = color
        self.orientation_changed.emit(color == chess.WHITE)

    def set_feedback(self, feedback: FeedbackState) -> None:
        """Set the feedback state shown on the board.

        Args:
            feedback: New feedback state.
        """
        if self._feedback != feedback:
            self._feedback = feedback
            self.feedback_changed.emit(feedback)

    def set_auto_shapes(self, shapes: List[Shape]) -> None:
        """Replace the markers drawn over the board.

        Args:
            shapes: New list of shapes (empty to clear).
        """
        self._auto_shapes = list(shapes)
        self.shapes_changed.emit(list(self._auto_shapes))

    def redraw_all(self) -> None:
        """Request a full repaint of the board."""
        self.redraw_requested.emit()
