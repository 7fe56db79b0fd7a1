import unittest

from ucianalysis.buffers import PV_BUFF_SIZE, BoundedText, MoveText, PvText


class _NineBytes(BoundedText):
    capacity = 9
    __slots__ = ()


class BoundedTextTests(unittest.TestCase):
    def test_set_within_capacity_round_trips(self) -> None:
        for text in ("e2e4", "e7e8q", "a1"):
            self.assertEqual(str(MoveText().set(text)), text)

    def test_set_truncates_silently(self) -> None:
        cell = MoveText().set("e2e4e7e5")
        self.assertEqual(cell.length, 5)
        self.assertEqual(str(cell), "e2e4e")

    def test_to_option_is_none_when_empty(self) -> None:
        cell = MoveText()
        self.assertIsNone(cell.to_option())
        cell.set("g1f3")
        self.assertEqual(cell.to_option(), "g1f3")
        cell.reset()
        self.assertIsNone(cell.to_option())

    def test_set_empty_string_clears(self) -> None:
        cell = MoveText("e2e4")
        cell.set("")
        self.assertIsNone(cell.to_option())

    def test_set_trim_keeps_whole_tokens(self) -> None:
        cell = _NineBytes().set("e2e4")
        self.assertEqual(cell.length, 4)

        cell.set_trim("e2e4 e7e5 g1f3 b8c6", " ")

        self.assertEqual(cell.length, 9)
        self.assertEqual(str(cell), "e2e4 e7e5")

    def test_set_trim_leaves_fitting_text_alone(self) -> None:
        cell = _NineBytes().set_trim("e2e4", " ")
        self.assertEqual(str(cell), "e2e4")

    def test_set_trim_result_is_a_prefix_ending_at_a_boundary(self) -> None:
        text = "e2e4 e7e5 g1f3 b8c6 f1b5 a7a6"
        for capacity in range(1, len(text) + 1):
            cell_type = type("Cell", (BoundedText,), {"capacity": capacity, "__slots__": ()})
            kept = str(cell_type().set_trim(text, " "))
            self.assertTrue(text.startswith(kept))
            self.assertLessEqual(len(kept), capacity)
            if kept != text:
                self.assertTrue(kept == "" or text[len(kept)] == " ")

    def test_set_trim_single_oversized_token_gives_empty(self) -> None:
        cell = MoveText().set_trim("abcdefgh", " ")
        self.assertIsNone(cell.to_option())

    def test_pv_capacity_holds_ten_moves(self) -> None:
        moves = " ".join(["e2e4"] * 12)
        cell = PvText().set_trim(moves, " ")
        self.assertEqual(PV_BUFF_SIZE, 50)
        self.assertEqual(str(cell), " ".join(["e2e4"] * 10))

    def test_equality_compares_stored_text(self) -> None:
        self.assertEqual(MoveText("e2e4"), MoveText("e2e4"))
        self.assertNotEqual(MoveText("e2e4"), MoveText("d2d4"))
        self.assertNotEqual(MoveText("e2e4"), PvText("e2e4"))
        # bytes past the length do not count
        cell = MoveText("e7e8q")
        cell.set("e2e4")
        self.assertEqual(cell, MoveText("e2e4"))

    def test_repr_shows_type_length_and_text(self) -> None:
        self.assertEqual(repr(MoveText("e2e4")), "[MoveText[4]: 'e2e4']")
