import unittest

from pipeline.states import STATE3_ORDER, STATE8_ORDER, reduce_state, state_legend


class TestStateReduction(unittest.TestCase):
    def test_helix_family(self) -> None:
        for symbol in ("H", "G", "I"):
            self.assertEqual(reduce_state(symbol), "H")

    def test_strand_family(self) -> None:
        for symbol in ("E", "B"):
            self.assertEqual(reduce_state(symbol), "E")

    def test_coil_family(self) -> None:
        for symbol in ("T", "S", "C"):
            self.assertEqual(reduce_state(symbol), "C")

    def test_unknown_symbols_fall_into_coil(self) -> None:
        for symbol in ("X", "-", "", "h", "?"):
            self.assertEqual(reduce_state(symbol), "C")

    def test_reduction_lands_in_coarse_alphabet(self) -> None:
        self.assertTrue(all(reduce_state(symbol) in STATE3_ORDER for symbol in STATE8_ORDER))

    def test_legend_order(self) -> None:
        self.assertEqual(list(state_legend("8")), list(STATE8_ORDER))
        self.assertEqual(state_legend("3"), {"H": "helix", "E": "strand", "C": "coil"})
        self.assertEqual(state_legend("8")["G"], "3₁₀-helix")


if __name__ == "__main__":
    unittest.main()
