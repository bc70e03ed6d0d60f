"""Outline tree built by the tree layout service.

The outline is a small tree of value nodes:

    OutlineTree -> Row -> NodeCell
                       -> Segment -> Row -> ...

Ownership flows downwards only. Back-references (cell to row, row to its
container, segment to row) are weak so that a discarded outline is freed as
a whole and nothing outside it keeps it alive. Every refresh builds a new
outline; the previous one is detached and never patched.
"""

import weakref
from typing import Any, Callable, Iterator, List, Optional, Union


class NodeCell:
    """A single rendered move in a row."""

    def __init__(self, pgn: str, label: str, is_selected: bool = False) -> None:
        self.pgn = pgn
        self.label = label
        self.is_selected = is_selected
        self.annotation: Any = None
        self.click_handler: Optional[Callable[[str, Any], None]] = None
        # Set by views that need to repaint when an annotation arrives
        self.on_annotation_changed: Optional[Callable[['NodeCell'], None]] = None
        self._row_ref: Optional[weakref.ReferenceType] = None
        self._attached = True

    @property
    def row(self) -> Optional['Row']:
        """Row containing this cell, or None once the outline is gone."""
        return self._row_ref() if self._row_ref is not None else None

    @property
    def is_attached(self) -> bool:
        """False once the outline owning this cell has been discarded."""
        return self._attached

    def detach(self) -> None:
        self._attached = False
        self.click_handler = None
        self.on_annotation_changed = None

    def set_annotation(self, value: Any) -> bool:
        """Store a rendered annotation on the cell.

        Args:
            value: Annotation value to display.

        Returns:
            True if the cell was updated, False if it is detached.
        """
        if not self._attached:
            return False
        self.annotation = value
        if self.on_annotation_changed is not None:
            self.on_annotation_changed(self)
        return True

    def click(self, event: Any = None) -> bool:
        """Route a click on this cell to its handler.

        Args:
            event: Opaque event object passed through to the handler.

        Returns:
            True if a handler was invoked.
        """
        if not self._attached or self.click_handler is None:
            return False
        self.click_handler(self.pgn, event)
        return True

    def __repr__(self) -> str:
        return f"NodeCell(pgn={self.pgn!r}, label={self.label!r}, selected={self.is_selected})"


class Segment:
    """Branch container created for a node with more than one child."""

    def __init__(self, pgn: str) -> None:
        self.pgn = pgn
        self.rows: List['Row'] = []
        self._container_ref: Optional[weakref.ReferenceType] = None

    @property
    def container(self) -> Optional[Union['Row', 'OutlineTree']]:
        return self._container_ref() if self._container_ref is not None else None

    def add_row(self, row: 'Row') -> 'Row':
        row._container_ref = weakref.ref(self)
        self.rows.append(row)
        return row

    def __repr__(self) -> str:
        return f"Segment(pgn={self.pgn!r}, rows={len(self.rows)})"


class Row:
    """Horizontal run of node cells, possibly followed by nested segments."""

    def __init__(self, indent: int = 0) -> None:
        self.indent = indent
        # NodeCell and Segment items in insertion order
        self.items: List[Union[NodeCell, Segment]] = []
        self._container_ref: Optional[weakref.ReferenceType] = None

    @property
    def container(self) -> Optional[Union[Segment, 'OutlineTree']]:
        """Segment or outline root this row is anchored under."""
        return self._container_ref() if self._container_ref is not None else None

    @property
    def cells(self) -> List[NodeCell]:
        return [item for item in self.items if isinstance(item, NodeCell)]

    @property
    def segments(self) -> List[Segment]:
        return [item for item in self.items if isinstance(item, Segment)]

    @property
    def labels(self) -> List[str]:
        return [cell.label for cell in self.cells]

    def add_cell(self, cell: NodeCell) -> NodeCell:
        cell._row_ref = weakref.ref(self)
        self.items.append(cell)
        return cell

    def add_segment(self, segment: Segment) -> Segment:
        segment._container_ref = weakref.ref(self)
        self.items.append(segment)
        return segment

    def __repr__(self) -> str:
        return f"Row(indent={self.indent}, labels={self.labels})"


class OutlineTree:
    """Root of the outline: top-level rows and, rarely, a top-level segment."""

    def __init__(self) -> None:
        self.items: List[Union[Row, Segment]] = []
        self.is_hidden = False
        self._detached = False

    @property
    def rows(self) -> List[Row]:
        """Rows anchored directly under the outline root."""
        return [item for item in self.items if isinstance(item, Row)]

    @property
    def is_detached(self) -> bool:
        return self._detached

    def add_row(self, row: Row) -> Row:
        row._container_ref = weakref.ref(self)
        self.items.append(row)
        return row

    def add_segment(self, segment: Segment) -> Segment:
        segment._container_ref = weakref.ref(self)
        self.items.append(segment)
        return segment

    def iter_rows(self) -> Iterator[Row]:
        """Yield every row in display order (top to bottom)."""
        yield from self._iter_rows(self.items)

    def _iter_rows(self, items) -> Iterator[Row]:
        for item in items:
            if isinstance(item, Row):
                yield item
                yield from self._iter_rows(item.segments)
            else:
                yield from self._iter_rows(item.rows)

    def segments(self) -> List[Segment]:
        """All segments in the outline, in display order."""
        found = [item for item in self.items if isinstance(item, Segment)]
        for row in self.iter_rows():
            found.extend(row.segments)
        return found

    def cells(self) -> Iterator[NodeCell]:
        """Yield every cell in display order."""
        for row in self.iter_rows():
            yield from row.cells

    def line_index(self, cell: NodeCell) -> Optional[int]:
        """Get the vertical line (row position) of a cell.

        Args:
            cell: Cell to look up.

        Returns:
            Zero-based index of the cell's row in display order, or None if
            the cell is not part of this outline.
        """
        target = cell.row
        for index, row in enumerate(self.iter_rows()):
            if row is target:
                return index
        return None

    def detach(self) -> None:
        """Discard this outline: late writes to its cells become no-ops."""
        self._detached = True
        for cell in self.cells():
            cell.detach()
