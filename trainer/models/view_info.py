"""Per-node descriptor produced by a depth-first traversal of the move tree."""

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

import chess


@dataclass
class ViewInfo:
    """Everything the tree view needs to know about one node of the move tree.

    Attributes:
        pgn: Path identifier of the node (space-separated SAN moves from the
             root). The root is the empty string, so checks for a missing
             identifier must use ``is None``.
        parent_pgn: Path identifier of the parent node, or None for the root.
        last_move_ply: Depth of the node in half-moves (0 for the root).
        num_children: Number of child nodes.
        is_selected: Whether this node is the current selection.
        last_move_string: Short SAN of the move leading to the node (e.g. "e5"),
                          None or empty for the root.
        last_move_verbose_string: SAN with the move number (e.g. "1... e5").
        last_move_color: Color that made the last move, None for the root.
        annotation_future: Optional future that resolves to an annotation value.
    """

    pgn: str
    parent_pgn: Optional[str]
    last_move_ply: int
    num_children: int
    is_selected: bool = False
    last_move_string: Optional[str] = None
    last_move_verbose_string: Optional[str] = None
    last_move_color: Optional[chess.Color] = None
    annotation_future: Optional[Future] = None

    @property
    def is_root(self) -> bool:
        """True if the node has no last move (the starting position)."""
        return not self.last_move_string
