"""Unit tests for the tree layout service.

Covers row continuation, branch segments, per-branch indentation, node
labels, selection tracking, annotation binding and scroll computation.
"""

import sys
import os
import unittest
from concurrent.futures import Future

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import chess

from trainer.models.tree_model import RepertoireTreeModel
from trainer.models.view_info import ViewInfo
from trainer.services.annotation_service import AnnotationBinder, AnnotationRenderer, TextAnnotationRenderer
from trainer.services.tree_layout_service import TraversalState, TreeLayoutService, compute_scroll_top


def node(pgn, parent, ply, children, san=None, color=None, verbose=None, selected=False, future=None):
    """Build a ViewInfo for hand-written traversals."""
    return ViewInfo(
        pgn=pgn,
        parent_pgn=parent,
        last_move_ply=ply,
        num_children=children,
        is_selected=selected,
        last_move_string=san,
        last_move_verbose_string=verbose,
        last_move_color=color,
        annotation_future=future,
    )


class NodeSequence:
    """Tree model stand-in that replays a fixed depth-first traversal."""

    def __init__(self, view_infos):
        self.view_infos = list(view_infos)

    def is_empty(self):
        return not self.view_infos or self.view_infos[0].num_children == 0

    def traverse_depth_first(self, visit, annotator=None):
        for view_info in self.view_infos:
            visit(view_info)


def layout(service, view_infos):
    return service.layout(NodeSequence(view_infos), None)


ROOT = node("", None, 0, 1)
E4 = node("e4", "", 1, 1, "e4", chess.WHITE, "1. e4")
E4_E5 = node("e4 e5", "e4", 2, 0, "e5", chess.BLACK, "1... e5")


class RecordingRenderer(AnnotationRenderer):
    """Renderer that records every call."""

    def __init__(self):
        self.calls = []

    def render_annotation(self, annotation, cell):
        self.calls.append((annotation, cell.pgn))
        cell.set_annotation(annotation)


class FailingRenderer(AnnotationRenderer):
    """Renderer that always raises."""

    def render_annotation(self, annotation, cell):
        raise RuntimeError("render failed")


class TestLinearLayout(unittest.TestCase):
    """Traversals without branching nodes."""

    def setUp(self):
        self.service = TreeLayoutService()

    def test_scenario_single_row(self):
        result = layout(self.service, [ROOT, E4, E4_E5])
        rows = list(result.outline.iter_rows())
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].labels, ["(start)", "1. e4", "e5"])
        self.assertEqual(rows[0].indent, 0)
        self.assertEqual(result.outline.segments(), [])

    def test_long_chain_stays_in_one_row(self):
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4 e5 Nf3 Nc6 Bb5 a6 Ba4 Nf6")
        result = self.service.layout(tree_model, None)
        rows = list(result.outline.iter_rows())
        self.assertEqual(len(rows), 1)
        self.assertEqual(
            rows[0].labels,
            ["(start)", "1. e4", "e5", "2. Nf3", "Nc6", "3. Bb5", "a6", "4. Ba4", "Nf6"])
        self.assertEqual([cell.pgn for cell in rows[0].cells][:3], ["", "e4", "e4 e5"])

    def test_single_root_node(self):
        result = layout(self.service, [node("", None, 0, 0)])
        rows = list(result.outline.iter_rows())
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].labels, ["(start)"])
        self.assertTrue(result.outline.is_hidden)

    def test_start_label_from_config(self):
        service = TreeLayoutService({'ui': {'tree_view': {'start_label': '*'}}})
        result = layout(service, [ROOT, E4])
        self.assertEqual(next(result.outline.iter_rows()).labels, ["*", "1. e4"])

    def test_every_cell_in_exactly_one_row(self):
        tree_model = RepertoireTreeModel()
        for line in ("e4 e5 Nf3", "e4 c5 Nf3 d6", "d4 d5", "d4 Nf6 c4"):
            tree_model.add_line(line)
        result = self.service.layout(tree_model, None)
        pgns = [cell.pgn for cell in result.outline.cells()]
        self.assertEqual(len(pgns), len(set(pgns)))
        visited = []
        tree_model.traverse_depth_first(lambda view_info: visited.append(view_info.pgn))
        self.assertEqual(sorted(pgns), sorted(visited))


class TestBranchLayout(unittest.TestCase):
    """Traversals containing branching nodes."""

    def setUp(self):
        self.service = TreeLayoutService()

    def test_scenario_two_branches(self):
        nodes = [
            ROOT,
            node("e4", "", 1, 2, "e4", chess.WHITE, "1. e4"),
            node("e4 e5", "e4", 2, 0, "e5", chess.BLACK, "1... e5"),
            node("e4 c5", "e4", 2, 0, "c5", chess.BLACK, "1... c5"),
        ]
        result = layout(self.service, nodes)
        outline = result.outline

        self.assertEqual(len(outline.rows), 1)
        first_row = outline.rows[0]
        self.assertEqual(first_row.labels, ["(start)", "1. e4"])

        segments = outline.segments()
        self.assertEqual(len(segments), 1)
        self.assertEqual(segments[0].pgn, "e4")
        self.assertIs(segments[0].container, first_row)
        self.assertEqual([row.labels for row in segments[0].rows], [["1... e5"], ["1... c5"]])
        self.assertEqual([row.indent for row in segments[0].rows], [1, 1])

    def test_branch_at_root_uses_empty_pgn_segment(self):
        nodes = [
            node("", None, 0, 2),
            node("e4", "", 1, 0, "e4", chess.WHITE, "1. e4"),
            node("d4", "", 1, 0, "d4", chess.WHITE, "1. d4"),
        ]
        result = layout(self.service, nodes)
        segments = result.outline.segments()
        self.assertEqual(len(segments), 1)
        self.assertEqual(segments[0].pgn, "")
        # Rows of both branches live in the root's segment, not at top level
        self.assertEqual(len(result.outline.rows), 1)
        self.assertEqual([row.labels for row in segments[0].rows], [["1. e4"], ["1. d4"]])

    def test_single_child_never_creates_segment(self):
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4 e5 Nf3")
        result = self.service.layout(tree_model, None)
        self.assertEqual(result.outline.segments(), [])
        self.assertEqual([row.indent for row in result.outline.iter_rows()], [0])

    def test_nested_branches_do_not_leak_indent_to_siblings(self):
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4 e5 Nf3 Nc6")
        tree_model.add_line("e4 e5 Nf3 Nf6")
        tree_model.add_line("e4 c5 Nf3")
        result = self.service.layout(tree_model, None)

        rows = list(result.outline.iter_rows())
        self.assertEqual(
            [(row.indent, row.labels) for row in rows],
            [
                (0, ["(start)", "1. e4"]),
                (1, ["1... e5", "2. Nf3"]),
                (2, ["2... Nc6"]),
                (2, ["2... Nf6"]),
                (1, ["1... c5", "2. Nf3"]),
            ])
        self.assertEqual([segment.pgn for segment in result.outline.segments()], ["e4", "e4 e5 Nf3"])

    def test_one_segment_per_branching_node(self):
        tree_model = RepertoireTreeModel()
        for line in ("e4 e5", "e4 c5", "e4 e6", "d4 d5 c4", "d4 d5 Nf3", "c4"):
            tree_model.add_line(line)
        result = self.service.layout(tree_model, None)
        segment_pgns = [segment.pgn for segment in result.outline.segments()]
        self.assertEqual(sorted(segment_pgns), sorted(["", "e4", "d4 d5"]))
        self.assertEqual(len(segment_pgns), len(set(segment_pgns)))

    def test_white_move_opening_row_is_verbose(self):
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4 e5 Nf3 Nc6")
        tree_model.add_line("e4 e5 Bc4")
        result = self.service.layout(tree_model, None)
        self.assertEqual(
            [row.labels for row in result.outline.iter_rows()],
            [["(start)", "1. e4", "e5"], ["2. Nf3", "Nc6"], ["2. Bc4"]])

    def test_selected_cell_is_returned(self):
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4 e5")
        tree_model.add_line("e4 c5")
        tree_model.select_pgn("e4 c5")
        result = self.service.layout(tree_model, None)
        self.assertIsNotNone(result.selected_cell)
        self.assertEqual(result.selected_cell.pgn, "e4 c5")
        self.assertTrue(result.selected_cell.is_selected)
        self.assertEqual([cell.pgn for cell in result.outline.cells() if cell.is_selected], ["e4 c5"])

    def test_no_selection(self):
        result = layout(self.service, [ROOT, E4, E4_E5])
        self.assertIsNone(result.selected_cell)

    def test_empty_model_hides_outline(self):
        result = self.service.layout(RepertoireTreeModel(), None)
        self.assertTrue(result.outline.is_hidden)
        tree_model = RepertoireTreeModel()
        tree_model.add_line("e4")
        self.assertFalse(self.service.layout(tree_model, None).outline.is_hidden)
        self.assertFalse(layout(self.service, [ROOT, E4]).outline.is_hidden)


class TestTraversalState(unittest.TestCase):
    """Sparse ply-to-indent bookkeeping."""

    def test_truncate_discards_deeper_plies(self):
        state = TraversalState()
        state.set_indent(0, 0)
        state.set_indent(3, 2)
        self.assertEqual(state.ply_to_indent, [0, None, None, 2])
        state.truncate(3)
        self.assertIsNone(state.get_indent(3))
        self.assertEqual(state.ply_to_indent, [0, None, None])

    def test_get_indent_beyond_end(self):
        self.assertIsNone(TraversalState().get_indent(5))


class TestAnnotationBinding(unittest.TestCase):
    """Annotation futures bound during layout."""

    def setUp(self):
        self.errors = []
        self.renderer = RecordingRenderer()
        self.service = TreeLayoutService(
            annotation_binder=AnnotationBinder(self.renderer, lambda error, context: self.errors.append(error)))

    def test_pending_annotation_renders_when_resolved(self):
        future = Future()
        result = layout(self.service, [ROOT, node("e4", "", 1, 0, "e4", chess.WHITE, "1. e4", future=future)])
        cell = list(result.outline.cells())[1]
        self.assertIsNone(cell.annotation)
        future.set_result("+0.3")
        self.assertEqual(cell.annotation, "+0.3")
        self.assertEqual(self.renderer.calls, [("+0.3", "e4")])

    def test_resolved_annotation_renders_immediately(self):
        future = Future()
        future.set_result(7)
        result = layout(self.service, [node("", None, 0, 0, future=future)])
        self.assertEqual(next(result.outline.cells()).annotation, 7)

    def test_stale_annotation_is_dropped(self):
        future = Future()
        result = layout(self.service, [node("", None, 0, 0, future=future)])
        cell = next(result.outline.cells())
        result.outline.detach()
        future.set_result("late")
        self.assertIsNone(cell.annotation)
        self.assertEqual(self.renderer.calls, [])
        self.assertEqual(self.errors, [])

    def test_render_failure_does_not_abort_layout(self):
        errors = []
        service = TreeLayoutService(
            annotation_binder=AnnotationBinder(FailingRenderer(), lambda error, context: errors.append(context)))
        done = Future()
        done.set_result("x")
        result = layout(service, [
            node("", None, 0, 1, future=done),
            node("e4", "", 1, 0, "e4", chess.WHITE, "1. e4"),
        ])
        self.assertEqual(next(result.outline.iter_rows()).labels, ["(start)", "1. e4"])
        self.assertEqual(len(errors), 1)
        self.assertIn("''", errors[0])

    def test_failed_future_goes_to_error_channel(self):
        future = Future()
        layout(self.service, [node("", None, 0, 0, future=future)])
        future.set_exception(ValueError("engine crashed"))
        self.assertEqual(len(self.errors), 1)
        self.assertIsInstance(self.errors[0], ValueError)
        self.assertEqual(self.renderer.calls, [])

    def test_text_renderer(self):
        future = Future()
        service = TreeLayoutService(annotation_binder=AnnotationBinder(TextAnnotationRenderer()))
        result = layout(service, [node("", None, 0, 0, future=future)])
        future.set_result(12)
        self.assertEqual(next(result.outline.cells()).annotation, "12")


class TestComputeScrollTop(unittest.TestCase):
    """Scroll adjustment for the selected cell."""

    def test_visible_cell_needs_no_scroll(self):
        self.assertIsNone(compute_scroll_top(0, 0, 100, 40))
        self.assertIsNone(compute_scroll_top(0, 0, 100, 100))

    def test_cell_below_window(self):
        self.assertEqual(compute_scroll_top(0, 0, 100, 250), 250)

    def test_cell_above_window(self):
        self.assertEqual(compute_scroll_top(0, 300, 100, 120), 120)

    def test_container_offset(self):
        # Window spans 50+200 .. 350; cell at 400 is scrolled to the window top.
        self.assertEqual(compute_scroll_top(50, 200, 100, 400), 350)
        self.assertIsNone(compute_scroll_top(50, 200, 100, 300))


if __name__ == '__main__':
    unittest.main()
