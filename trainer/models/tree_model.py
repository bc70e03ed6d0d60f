"""Repertoire move tree model."""

from typing import Callable, Dict, Iterable, List, Optional, Union

import chess
from PyQt6.QtCore import QObject, pyqtSignal

from trainer.models.view_info import ViewInfo


class _TreeNode:
    """A position in the repertoire, reached by the moves in its pgn."""

    def __init__(self, pgn: str, parent_pgn: Optional[str], san: Optional[str], ply: int) -> None:
        self.pgn = pgn
        self.parent_pgn = parent_pgn
        self.san = san
        self.ply = ply
        self.children: List[str] = []  # child pgns in insertion order


def pgn_for(sans: Iterable[str]) -> str:
    """Build the path identifier of a move sequence."""
    return " ".join(sans)


class RepertoireTreeModel(QObject):
    """Model holding an opening repertoire as a tree of moves.

    Nodes are keyed by their path identifier: the space-separated SAN moves
    from the starting position ("" for the root, "e4 e5" for 1. e4 e5).
    Moves are checked with python-chess when lines are added. The model
    also tracks the selected node and the color the repertoire is studied for.
    """

    # Signals emitted when the tree changes
    tree_changed = pyqtSignal()  # Emitted when lines, selection or repertoire color change

    def __init__(self, repertoire_color: chess.Color = chess.WHITE) -> None:
        """Initialize an empty repertoire.

        Args:
            repertoire_color: Color the repertoire is studied for.
        """
        super().__init__()
        self._nodes: Dict[str, _TreeNode] = {"": _TreeNode("", None, None, 0)}
        self._selected_pgn = ""
        self._repertoire_color = repertoire_color

    def is_empty(self) -> bool:
        """True if the repertoire has no moves."""
        return not self._nodes[""].children

    def add_line(self, moves: Union[str, Iterable[str]]) -> str:
        """Add a line of moves, creating any missing nodes.

        Args:
            moves: SAN moves, either as a sequence or a space-separated string.

        Returns:
            Path identifier of the last node of the line.

        Raises:
            ValueError: If a move is illegal or cannot be parsed.
        """
        sans = moves.split() if isinstance(moves, str) else list(moves)
        board = chess.Board()
        parent = self._nodes[""]
        played: List[str] = []
        for san in sans:
            move = board.parse_san(san)
            # Normalize so that "Nf3" and "Ngf3" map to the same node
            normalized = board.san(move)
            board.push(move)
            played.append(normalized)
            pgn = pgn_for(played)
            if pgn not in self._nodes:
                self._nodes[pgn] = _TreeNode(pgn, parent.pgn, normalized, len(played))
                parent.children.append(pgn)
            parent = self._nodes[pgn]
        self.tree_changed.emit()
        return parent.pgn

    def has_pgn(self, pgn: str) -> bool:
        return pgn in self._nodes

    def select_pgn(self, pgn: str) -> None:
        """Select a node.

        Args:
            pgn: Path identifier of an existing node.

        Raises:
            KeyError: If the node does not exist.
        """
        if pgn not in self._nodes:
            raise KeyError(f"No node for pgn '{pgn}'")
        if pgn != self._selected_pgn:
            self._selected_pgn = pgn
            self.tree_changed.emit()

    def get_selected_pgn(self) -> str:
        return self._selected_pgn

    def get_repertoire_color(self) -> chess.Color:
        return self._repertoire_color

    def set_repertoire_color(self, color: chess.Color) -> None:
        if color != self._repertoire_color:
            self._repertoire_color = color
            self.tree_changed.emit()

    def get_chess_for_state(self) -> chess.Board:
        """Get the position at the selected node, with its move history.

        Returns:
            A new chess.Board.
        """
        board = chess.Board()
        if self._selected_pgn:
            for san in self._selected_pgn.split(" "):
                board.push_san(san)
        return board

    def traverse_depth_first(self, visit: Callable[[ViewInfo], None], annotator=None) -> None:
        """Visit every node in depth-first pre-order.

        Args:
            visit: Called once per node with its ViewInfo.
            annotator: Optional Annotator asked for each node's annotation future.
        """
        board = chess.Board()
        self._traverse(self._nodes[""], board, visit, annotator)

    def _traverse(self, node: _TreeNode, board: chess.Board, visit, annotator) -> None:
        view_info = ViewInfo(
            pgn=node.pgn,
            parent_pgn=node.parent_pgn,
            last_move_ply=node.ply,
            num_children=len(node.children),
            is_selected=node.pgn == self._selected_pgn,
        )
        if node.san is not None:
            move = board.pop()
            view_info.last_move_color = board.turn
            view_info.last_move_string = node.san
            if board.turn == chess.WHITE:
                view_info.last_move_verbose_string = f"{board.fullmove_number}. {node.san}"
            else:
                view_info.last_move_verbose_string = f"{board.fullmove_number}... {node.san}"
            board.push(move)
        if annotator is not None:
            view_info.annotation_future = annotator.annotate(node.pgn, board)

        visit(view_info)

        for child_pgn in node.children:
            child = self._nodes[child_pgn]
            board.push_san(child.san)
            self._traverse(child, board, visit, annotator)
            board.pop()
