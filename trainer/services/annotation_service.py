"""Annotation pipeline: annotators produce futures, renderers draw them into cells."""

import weakref
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

import chess

from trainer.models.outline import NodeCell
from trainer.services.error_handler import ErrorHandler
from trainer.services.logging_service import LoggingService


ErrorChannel = Callable[[BaseException, str], None]


class Annotator:
    """Supplies an optional future-valued annotation for a tree node."""

    def annotate(self, pgn: str, board: chess.Board) -> Optional[Future]:
        """Start computing the annotation for a node.

        Args:
            pgn: Path identifier of the node.
            board: Position at the node. Implementations must copy it if
                   they use it after returning.

        Returns:
            A future resolving to the annotation value, or None if the node
            has no annotation.
        """
        raise NotImplementedError


class NullAnnotator(Annotator):
    """Annotator that never annotates."""

    def annotate(self, pgn: str, board: chess.Board) -> Optional[Future]:
        return None


class ExecutorAnnotator(Annotator):
    """Runs an annotation function on a thread pool.

    The function receives the node's pgn and a private copy of the position.
    """

    def __init__(self, annotation_fn: Callable[[str, chess.Board], Any], max_workers: int = 2) -> None:
        self._annotation_fn = annotation_fn
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="annotator")

    def annotate(self, pgn: str, board: chess.Board) -> Optional[Future]:
        return self._executor.submit(self._annotation_fn, pgn, board.copy())

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


class AnnotationRenderer:
    """Renders a resolved annotation value into a node cell."""

    def render_annotation(self, annotation: Any, cell: NodeCell) -> None:
        raise NotImplementedError


class TextAnnotationRenderer(AnnotationRenderer):
    """Renders annotations as their string form."""

    def render_annotation(self, annotation: Any, cell: NodeCell) -> None:
        if annotation is None:
            return
        cell.set_annotation(str(annotation))


class AnnotationBinder:
    """Binds pending annotation futures to the cells they will render into.

    The completion callback only holds a weak reference to its cell. When the
    future resolves after the outline was rebuilt, the cell is either gone or
    detached and the update is dropped. Failures of the future or of the
    renderer go to the error channel and never reach the caller of bind().
    """

    def __init__(self, renderer: AnnotationRenderer,
                 error_channel: Optional[ErrorChannel] = None) -> None:
        """Initialize the binder.

        Args:
            renderer: Renderer used to draw resolved annotations.
            error_channel: Callable receiving (error, context) for failed
                           annotations. Defaults to ErrorHandler.report_error.
        """
        self._renderer = renderer
        self._error_channel = error_channel or ErrorHandler.report_error

    def bind(self, future: Future, cell: NodeCell) -> None:
        """Render the future's value into the cell once it is available.

        If the future is already done the callback runs immediately.

        Args:
            future: Pending annotation.
            cell: Target cell.
        """
        cell_ref = weakref.ref(cell)
        pgn = cell.pgn
        future.add_done_callback(lambda done: self._on_done(done, cell_ref, pgn))

    def _on_done(self, future: Future, cell_ref: weakref.ReferenceType, pgn: str) -> None:
        cell = cell_ref()
        if cell is None or not cell.is_attached:
            LoggingService.get_instance().debug(f"Dropping stale annotation for node '{pgn}'")
            return
        if future.cancelled():
            return

        context = f"Annotation for node '{pgn}'"
        error = future.exception()
        if error is not None:
            self._error_channel(error, context)
            return

        try:
            self._renderer.render_annotation(future.result(), cell)
        except Exception as e:
            self._error_channel(e, context)
