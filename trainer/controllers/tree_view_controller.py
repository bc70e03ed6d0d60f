"""Tree view controller: rebuilds the move outline and syncs the board."""

from typing import Any, Dict, Optional

from trainer.controllers.board_controller import BoardController
from trainer.controllers.tree_node_handler import TreeNodeHandler
from trainer.models.outline import NodeCell, OutlineTree
from trainer.services.annotation_service import AnnotationBinder, AnnotationRenderer, Annotator
from trainer.services.logging_service import LoggingService
from trainer.services.tree_layout_service import LayoutResult, TreeLayoutService, compute_scroll_top


class TreeViewController:
    """Controller for the move tree view.

    On every refresh the previous outline is discarded and a new one is laid
    out from the tree model, handed to the view, and the board is synced to
    the model's selected position. The view is any object providing:

        set_hidden(hidden), render_outline(outline),
        container_offset_top(), scroll_top(), viewport_height(),
        cell_offset_top(cell), set_scroll_top(value)
    """

    def __init__(self, tree_model, tree_view, board_controller: BoardController,
                 annotator: Annotator, annotation_renderer: AnnotationRenderer,
                 node_handler: TreeNodeHandler,
                 config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the tree view controller.

        Args:
            tree_model: Tree model to lay out.
            tree_view: View rendering the outline.
            board_controller: Board to sync with the selected position.
            annotator: Annotator passed to the traversal.
            annotation_renderer: Renderer for resolved annotations.
            node_handler: Receives clicks on nodes.
            config: Configuration dictionary.
        """
        self.config = config or {}
        self._tree_model = tree_model
        self._tree_view = tree_view
        self._board_controller = board_controller
        self._annotator = annotator
        self._node_handler = node_handler
        self._layout_service = TreeLayoutService(
            self.config,
            annotation_binder=AnnotationBinder(annotation_renderer),
            click_handler=self._on_cell_clicked,
        )
        self._outline: Optional[OutlineTree] = None
        self._selected_cell: Optional[NodeCell] = None

        tree_changed = getattr(tree_model, 'tree_changed', None)
        if tree_changed is not None:
            tree_changed.connect(self.refresh)

    @property
    def outline(self) -> Optional[OutlineTree]:
        return self._outline

    @property
    def selected_cell(self) -> Optional[NodeCell]:
        return self._selected_cell

    def refresh(self) -> LayoutResult:
        """Rebuild the outline, sync the board and scroll to the selection.

        Returns:
            The layout result of this refresh.
        """
        if self._outline is not None:
            self._outline.detach()

        result = self._layout_service.layout(self._tree_model, self._annotator)
        self._outline = result.outline
        self._selected_cell = result.selected_cell

        self._tree_view.set_hidden(result.outline.is_hidden)
        self._tree_view.render_outline(result.outline)

        self._board_controller.set_state_from_chess(self._tree_model.get_chess_for_state())
        self._board_controller.set_orientation_for_color(self._tree_model.get_repertoire_color())

        if result.selected_cell is not None:
            self._scroll_to(result.selected_cell)
        return result

    def _scroll_to(self, cell: NodeCell) -> None:
        new_scroll_top = compute_scroll_top(
            self._tree_view.container_offset_top(),
            self._tree_view.scroll_top(),
            self._tree_view.viewport_height(),
            self._tree_view.cell_offset_top(cell),
        )
        if new_scroll_top is not None:
            self._tree_view.set_scroll_top(new_scroll_top)

    def _on_cell_clicked(self, pgn: str, event: Any) -> None:
        LoggingService.get_instance().debug(f"Tree node clicked: '{pgn}'")
        self._node_handler.on_click(pgn, event)
