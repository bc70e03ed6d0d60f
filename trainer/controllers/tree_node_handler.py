"""Handlers for clicks on tree view nodes."""

from typing import Any

from trainer.models.tree_model import RepertoireTreeModel
from trainer.services.logging_service import LoggingService


class TreeNodeHandler:
    """Receives clicks on tree view nodes, keyed by the node's pgn."""

    def on_click(self, pgn: str, event: Any = None) -> None:
        raise NotImplementedError


class SelectNodeHandler(TreeNodeHandler):
    """Selects the clicked node in the tree model."""

    def __init__(self, tree_model: RepertoireTreeModel) -> None:
        self._tree_model = tree_model

    def on_click(self, pgn: str, event: Any = None) -> None:
        # The click may come from a cell of an outline built before the model
        # changed; ignore nodes that no longer exist.
        if not self._tree_model.has_pgn(pgn):
            LoggingService.get_instance().debug(f"Ignoring click on unknown node '{pgn}'")
            return
        self._tree_model.select_pgn(pgn)
