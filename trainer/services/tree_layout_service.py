"""Layout of the move tree as an indented outline.

The tree model is traversed depth-first (pre-order). Linear runs of moves
are appended to the current row; every node with more than one child gets
a segment, and each of its children opens a new row inside that segment,
one indent level deeper than the row the branch started in.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import chess

from trainer.models.outline import NodeCell, OutlineTree, Row, Segment
from trainer.models.view_info import ViewInfo
from trainer.services.annotation_service import AnnotationBinder


DEFAULT_START_LABEL = "(start)"


class TraversalState:
    """Scratch bookkeeping for one layout pass. Never reused across passes."""

    def __init__(self) -> None:
        self.indent = 0
        # Sparse: index is a ply, value the indent a row resumed at that ply
        # must use, or None.
        self.ply_to_indent: List[Optional[int]] = []
        self.pgn_to_segment: Dict[str, Segment] = {}
        self.row: Optional[Row] = None

    def truncate(self, length: int) -> None:
        """Forget indentation recorded at plies >= length."""
        del self.ply_to_indent[length:]

    def get_indent(self, ply: int) -> Optional[int]:
        if ply < len(self.ply_to_indent):
            return self.ply_to_indent[ply]
        return None

    def set_indent(self, ply: int, indent: int) -> None:
        if ply >= len(self.ply_to_indent):
            self.ply_to_indent.extend([None] * (ply + 1 - len(self.ply_to_indent)))
        self.ply_to_indent[ply] = indent


@dataclass
class LayoutResult:
    """Outcome of a layout pass."""

    outline: OutlineTree
    selected_cell: Optional[NodeCell] = None


class TreeLayoutService:
    """Builds an OutlineTree from a depth-first stream of ViewInfo."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 annotation_binder: Optional[AnnotationBinder] = None,
                 click_handler=None) -> None:
        """Initialize the layout service.

        Args:
            config: Configuration dictionary.
            annotation_binder: Binder for pending annotations. Nodes carrying
                               an annotation future are ignored if None.
            click_handler: Optional callable(pgn, event) installed on every cell.
        """
        config = config or {}
        tree_view_config = config.get('ui', {}).get('tree_view', {})
        self.start_label = tree_view_config.get('start_label', DEFAULT_START_LABEL)
        self.annotation_binder = annotation_binder
        self.click_handler = click_handler

    def layout(self, tree_model, annotator) -> LayoutResult:
        """Lay out the whole tree model.

        Args:
            tree_model: Model exposing is_empty() and traverse_depth_first().
            annotator: Annotator passed through to the traversal.

        Returns:
            LayoutResult with the new outline and the selected cell, if any.
        """
        outline = OutlineTree()
        outline.is_hidden = tree_model.is_empty()
        state = TraversalState()
        result = LayoutResult(outline)

        def visit(view_info: ViewInfo) -> None:
            cell = self._visit(outline, state, view_info)
            if view_info.is_selected:
                result.selected_cell = cell

        tree_model.traverse_depth_first(visit, annotator)
        return result

    def _visit(self, outline: OutlineTree, state: TraversalState, view_info: ViewInfo) -> NodeCell:
        ply = view_info.last_move_ply

        if state.row is None:
            state.row = self._create_row(outline, state, view_info)
            state.set_indent(0, 0)

        state.truncate(ply + 1)

        # Indent 0 is the outline root level and never starts a new row.
        new_row = False
        resumed_indent = state.get_indent(ply)
        if resumed_indent:
            state.indent = resumed_indent
            state.row = self._create_row(outline, state, view_info)
            new_row = True

        cell = self._append_cell(state, view_info, new_row)

        if view_info.num_children > 1:
            self._create_segment(outline, state, view_info)
            state.set_indent(ply + 1, state.indent + 1)

        if view_info.annotation_future is not None and self.annotation_binder is not None:
            self.annotation_binder.bind(view_info.annotation_future, cell)

        return cell

    def _create_row(self, outline: OutlineTree, state: TraversalState, view_info: ViewInfo) -> Row:
        row = Row(indent=state.indent)
        # parent_pgn may be the empty string (the root), so compare with None.
        if view_info.parent_pgn is not None:
            segment = state.pgn_to_segment.get(view_info.parent_pgn)
            if segment is not None:
                return segment.add_row(row)
        return outline.add_row(row)

    def _create_segment(self, outline: OutlineTree, state: TraversalState, view_info: ViewInfo) -> Segment:
        segment = Segment(view_info.pgn)
        state.pgn_to_segment[view_info.pgn] = segment
        if state.row is not None:
            return state.row.add_segment(segment)
        return outline.add_segment(segment)

    def _append_cell(self, state: TraversalState, view_info: ViewInfo, new_row: bool) -> NodeCell:
        cell = NodeCell(view_info.pgn, self.label_for(view_info, new_row), view_info.is_selected)
        cell.click_handler = self.click_handler
        state.row.add_cell(cell)
        return cell

    def label_for(self, view_info: ViewInfo, new_row: bool) -> str:
        """Get the display label of a node.

        White moves always show the move number; Black moves only when they
        start a row, otherwise the number is implied by the preceding White move.

        Args:
            view_info: Node descriptor.
            new_row: Whether the node opens a new row.

        Returns:
            Label text.
        """
        if view_info.is_root:
            return self.start_label
        if view_info.last_move_color == chess.WHITE or new_row:
            return view_info.last_move_verbose_string or view_info.last_move_string
        return view_info.last_move_string


def compute_scroll_top(container_offset_top: int, container_scroll_top: int,
                       container_height: int, cell_offset_top: int) -> Optional[int]:
    """Compute the scroll position that brings a cell into view.

    The visible window spans from the container's offset plus its scroll
    position down by the container height. Cells outside the window are
    scrolled to the window's top edge in a single jump.

    Args:
        container_offset_top: Top of the scroll container in content coordinates.
        container_scroll_top: Current scroll position of the container.
        container_height: Visible height of the container.
        cell_offset_top: Top of the cell in content coordinates.

    Returns:
        The new scroll position, or None if the cell is already visible.
    """
    window_top = container_offset_top + container_scroll_top
    window_bottom = window_top + container_height
    if cell_offset_top < window_top or cell_offset_top > window_bottom:
        return cell_offset_top - container_offset_top
    return None
