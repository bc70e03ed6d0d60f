"""Unit tests for the repertoire tree model."""

import sys
import os
import unittest
from concurrent.futures import Future

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import chess

from trainer.models.tree_model import RepertoireTreeModel
from trainer.services.annotation_service import Annotator, NullAnnotator


class PgnAnnotator(Annotator):
    """Annotator resolving every node to its pgn and position FEN."""

    def annotate(self, pgn, board):
        future = Future()
        future.set_result((pgn, board.fen()))
        return future


def collect(tree_model, annotator=None):
    visited = []
    tree_model.traverse_depth_first(visited.append, annotator)
    return visited


class TestRepertoireTreeModel(unittest.TestCase):
    """Line insertion, traversal and selection."""

    def setUp(self):
        self.model = RepertoireTreeModel()
        self.changes = []
        self.model.tree_changed.connect(lambda: self.changes.append(True))

    def test_empty_model(self):
        self.assertTrue(self.model.is_empty())
        visited = collect(self.model)
        self.assertEqual(len(visited), 1)
        root = visited[0]
        self.assertEqual(root.pgn, "")
        self.assertIsNone(root.parent_pgn)
        self.assertEqual(root.last_move_ply, 0)
        self.assertTrue(root.is_selected)
        self.assertTrue(root.is_root)

    def test_depth_first_pre_order(self):
        self.model.add_line("e4 e5 Nf3")
        self.model.add_line("e4 c5")
        self.model.add_line("d4")
        visited = collect(self.model)
        self.assertEqual(
            [view_info.pgn for view_info in visited],
            ["", "e4", "e4 e5", "e4 e5 Nf3", "e4 c5", "d4"])
        self.assertEqual(
            [view_info.num_children for view_info in visited],
            [2, 2, 1, 0, 0, 0])
        self.assertEqual(
            [view_info.parent_pgn for view_info in visited],
            [None, "", "e4", "e4 e5", "e4", ""])
        self.assertEqual([view_info.last_move_ply for view_info in visited], [0, 1, 2, 3, 2, 1])

    def test_move_strings(self):
        self.model.add_line("e4 e5 Nf3")
        root, e4, e5, nf3 = collect(self.model)
        self.assertEqual((e4.last_move_string, e4.last_move_verbose_string, e4.last_move_color),
                         ("e4", "1. e4", chess.WHITE))
        self.assertEqual((e5.last_move_string, e5.last_move_verbose_string, e5.last_move_color),
                         ("e5", "1... e5", chess.BLACK))
        self.assertEqual(nf3.last_move_verbose_string, "2. Nf3")
        self.assertIsNone(root.last_move_color)

    def test_equivalent_san_maps_to_same_node(self):
        self.model.add_line("e4 e5 Nf3")
        self.model.add_line(["e4", "e5", "Ngf3"])
        self.assertEqual(len(collect(self.model)), 4)

    def test_illegal_move_rejected(self):
        with self.assertRaises(ValueError):
            self.model.add_line("e4 e4")

    def test_add_line_returns_last_pgn_and_notifies(self):
        self.assertEqual(self.model.add_line("d4 d5"), "d4 d5")
        self.assertFalse(self.model.is_empty())
        self.assertEqual(len(self.changes), 1)

    def test_selection(self):
        self.model.add_line("e4 e5 Nf3")
        self.model.select_pgn("e4 e5")
        self.assertEqual(self.model.get_selected_pgn(), "e4 e5")
        selected = [view_info.pgn for view_info in collect(self.model) if view_info.is_selected]
        self.assertEqual(selected, ["e4 e5"])
        board = self.model.get_chess_for_state()
        self.assertEqual(len(board.move_stack), 2)
        self.assertEqual(board.turn, chess.WHITE)

    def test_select_unknown_pgn(self):
        with self.assertRaises(KeyError):
            self.model.select_pgn("e4")

    def test_reselecting_does_not_notify(self):
        self.model.add_line("e4")
        self.model.select_pgn("")
        self.assertEqual(len(self.changes), 1)

    def test_repertoire_color(self):
        self.assertEqual(self.model.get_repertoire_color(), chess.WHITE)
        self.model.set_repertoire_color(chess.BLACK)
        self.assertEqual(self.model.get_repertoire_color(), chess.BLACK)
        self.assertEqual(len(self.changes), 1)

    def test_annotator_receives_node_position(self):
        self.model.add_line("e4")
        visited = collect(self.model, PgnAnnotator())
        pgn, fen = visited[1].annotation_future.result()
        self.assertEqual(pgn, "e4")
        self.assertEqual(fen, chess.Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1").fen())

    def test_null_annotator(self):
        self.model.add_line("e4")
        self.assertTrue(all(view_info.annotation_future is None
                            for view_info in collect(self.model, NullAnnotator())))


if __name__ == '__main__':
    unittest.main()
