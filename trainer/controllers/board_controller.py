"""Board controller synchronizing positions onto the visual board."""

from typing import Any, Dict, Optional, Set, Tuple

import chess

from trainer.models.board_surface_model import BoardSurfaceModel, FeedbackState, Shape
from trainer.services.logging_service import LoggingService
from trainer.services.sound_service import SoundPlayer


class BoardNotReadyError(RuntimeError):
    """Raised when the board is used before a surface has been attached."""


def legal_destinations(board: chess.Board) -> Dict[str, Set[str]]:
    """Group the legal moves of a position by origin square.

    Args:
        board: Position to inspect.

    Returns:
        Dictionary mapping origin square names to the set of reachable
        destination square names.
    """
    dests: Dict[str, Set[str]] = {}
    for move in board.legal_moves:
        dests.setdefault(chess.square_name(move.from_square), set()).add(
            chess.square_name(move.to_square))
    return dests


def last_move_of(board: chess.Board) -> Optional[Tuple[chess.Move, str]]:
    """Get the most recent move of a position together with its SAN.

    Args:
        board: Position with move history.

    Returns:
        Tuple (move, san), or None if the position has no history.
    """
    if not board.move_stack:
        return None
    previous = board.copy(stack=True)
    move = previous.pop()
    return move, previous.san(move)


class BoardController:
    """Pushes chess positions and training feedback to the board surface.

    The controller derives everything the board displays from a
    python-chess position and plays the matching sound cues. Every board
    operation requires a surface; calling one before attach() raises
    BoardNotReadyError.
    """

    def __init__(self, sound_player: SoundPlayer, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the board controller.

        Args:
            sound_player: Player for move and feedback sounds.
            config: Configuration dictionary.
        """
        self.config = config or {}
        self._sound_player = sound_player
        self._surface: Optional[BoardSurfaceModel] = None

        board_config = self.config.get('board', {})
        self.hint_brush = board_config.get('hint_brush', 'red')

    def attach(self, surface: BoardSurfaceModel) -> None:
        """Attach the visual board surface.

        Args:
            surface: The surface model the board widget observes.
        """
        self._surface = surface

    @property
    def is_ready(self) -> bool:
        return self._surface is not None

    def get_surface(self) -> BoardSurfaceModel:
        """Get the attached surface.

        Raises:
            BoardNotReadyError: If no surface is attached.
        """
        if self._surface is None:
            raise BoardNotReadyError("BoardController not ready: no board surface attached.")
        return self._surface

    def redraw(self) -> None:
        """Clear feedback and hints and repaint the whole board."""
        surface = self.get_surface()
        surface.set_feedback(FeedbackState.NONE)
        self.remove_hints()
        surface.redraw_all()

    def set_state_from_chess(self, board: chess.Board) -> None:
        """Show a position on the board.

        Side to move, legal destinations, last move and check are pushed in
        one update. A capture sound is played if the last move captured, a
        move sound if there was a quiet last move, nothing for a position
        without history.

        Args:
            board: Position to display.
        """
        surface = self.get_surface()

        last = last_move_of(board)
        last_move = None
        if last is not None:
            move = last[0]
            last_move = (chess.square_name(move.from_square), chess.square_name(move.to_square))

        surface.apply(
            fen=board.fen(),
            turn_color=board.turn,
            dests=legal_destinations(board),
            last_move=last_move,
            check=board.is_check(),
        )

        if last is None:
            return
        if 'x' in last[1]:
            self._sound_player.play_capture()
        else:
            self._sound_player.play_move()

    def set_initial_position_immediately(self) -> None:
        """Reset the board to the starting position without sound or feedback."""
        surface = self.get_surface()
        self.remove_hints()
        start = chess.Board()
        surface.apply(
            fen=start.fen(),
            turn_color=chess.WHITE,
            dests=legal_destinations(start),
            last_move=None,
            check=False,
        )

    def set_orientation_for_color(self, color: chess.Color) -> None:
        """Show the given color at the bottom of the board.

        Args:
            color: chess.WHITE or chess.BLACK.
        """
        surface = self.get_surface()
        if surface.orientation != color:
            LoggingService.get_instance().debug(
                f"Board orientation: {chess.COLOR_NAMES[color]}")
            surface.set_orientation(color)

    def flash_right_move(self) -> None:
        self._flash(FeedbackState.RIGHT)

    def flash_wrong_move(self) -> None:
        self._flash(FeedbackState.WRONG)
        self._sound_player.play_wrong_move()

    def flash_finish_line(self) -> None:
        self._flash(FeedbackState.FINISH)
        self._sound_player.play_finish_line()

    def _flash(self, feedback: FeedbackState) -> None:
        # Clearing first makes re-entering the active state observable,
        # which restarts its animation.
        surface = self.get_surface()
        surface.set_feedback(FeedbackState.NONE)
        surface.set_feedback(feedback)

    def hint_square(self, square: str) -> None:
        """Highlight a single square, replacing any previous hint.

        Args:
            square: Square name (e.g. "e2").
        """
        self.hint_move(square, None)

    def hint_move(self, from_square: str, to_square: Optional[str]) -> None:
        """Highlight a move with an arrow, replacing any previous hint.

        Args:
            from_square: Origin square name.
            to_square: Destination square name, or None for a square hint.
        """
        self.get_surface().set_auto_shapes([Shape(from_square, to_square, self.hint_brush)])

    def remove_hints(self) -> None:
        self.get_surface().set_auto_shapes([])

    def draw_circle(self, square: str, color: str) -> None:
        """Add a circle marker to the board.

        Args:
            square: Square name.
            color: Brush color name.
        """
        surface = self.get_surface()
        surface.set_auto_shapes(surface.auto_shapes + [Shape(square, None, color)])

    def draw_arrow(self, from_square: str, to_square: str, color: str) -> None:
        """Add an arrow marker to the board.

        Args:
            from_square: Origin square name.
            to_square: Destination square name.
            color: Brush color name.
        """
        surface = self.get_surface()
        surface.set_auto_shapes(surface.auto_shapes + [Shape(from_square, to_square, color)])

    def remove_drawings(self) -> None:
        self.remove_hints()
