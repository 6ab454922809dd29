import unittest

from domain.models import Game, GameType, Player, PlayerResult
from domain.stats import SortKey, SortOrder
from interfaces.formatting import (
    format_amount,
    format_game_detail,
    format_game_list,
    format_roster,
    next_sort,
    parse_filter,
    parse_game_args,
    parse_game_id,
    parse_game_type,
    parse_player_result,
    parse_sort,
)


class ParsingTests(unittest.TestCase):
    def test_player_result(self):
        self.assertEqual(parse_player_result("Alice:50"), PlayerResult("Alice", 50))
        self.assertEqual(parse_player_result("Bob:-12,5"), PlayerResult("Bob", -12.5))
        self.assertEqual(parse_player_result("Dr:Who:3"), PlayerResult("Dr:Who", 3))

    def test_player_result_errors(self):
        bad_tokens = ["Alice", ":50", "Alice:lots", "Alice:nan", "Alice:inf", "Alice:-inf", "Alice:1e309"]
        for token in bad_tokens:
            with self.subTest(token=token):
                with self.assertRaises(ValueError):
                    parse_player_result(token)

    def test_game_type_aliases(self):
        self.assertIs(parse_game_type("Cash"), GameType.CASH_GAME)
        self.assertIs(parse_game_type("mtt"), GameType.TOURNAMENT)
        with self.assertRaises(ValueError):
            parse_game_type("bingo")

    def test_game_args(self):
        draft = parse_game_args(["tournament", "Alice:30", "Bob:-30"], game_id=7)
        self.assertIs(draft.type, GameType.TOURNAMENT)
        self.assertEqual(draft.players, [PlayerResult("Alice", 30), PlayerResult("Bob", -30)])
        self.assertEqual(draft.id, 7)
        with self.assertRaises(ValueError):
            parse_game_args([])

    def test_game_id(self):
        self.assertEqual(parse_game_id("#1727120096000"), 1727120096000)
        with self.assertRaises(ValueError):
            parse_game_id("latest")

    def test_filter(self):
        self.assertEqual(parse_filter(None), "all")
        self.assertEqual(parse_filter("Tournament"), "tournaments")
        with self.assertRaises(ValueError):
            parse_filter("spins")

    def test_sort(self):
        self.assertEqual(parse_sort([]), (SortKey.BALANCE, SortOrder.DESC))
        self.assertEqual(parse_sort(["name", "ASC"]), (SortKey.NAME, SortOrder.ASC))
        with self.assertRaises(ValueError):
            parse_sort(["height"])


class NextSortTests(unittest.TestCase):
    def test_same_column_flips_order(self):
        self.assertEqual(
            next_sort(SortKey.BALANCE, SortOrder.DESC, SortKey.BALANCE),
            (SortKey.BALANCE, SortOrder.ASC),
        )
        self.assertEqual(
            next_sort(SortKey.BALANCE, SortOrder.ASC, SortKey.BALANCE),
            (SortKey.BALANCE, SortOrder.DESC),
        )

    def test_new_column_starts_descending(self):
        self.assertEqual(
            next_sort(SortKey.BALANCE, SortOrder.ASC, SortKey.NAME),
            (SortKey.NAME, SortOrder.DESC),
        )


class RenderingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.game = Game(
            id=5,
            type=GameType.CASH_GAME,
            date="2024-09-23",
            players=(PlayerResult("Alice", 12.5), PlayerResult("Bob", -12.5)),
            total_value=12.5,
        )

    def test_amounts(self):
        self.assertEqual(format_amount(50.0), "50 CHF")
        self.assertEqual(format_amount(-12.5), "-12.50 CHF")

    def test_game_list(self):
        self.assertEqual(format_game_list([]), "No games recorded yet.")
        self.assertEqual(
            format_game_list([self.game]),
            "#5  2024-09-23  Cash Game  (12.50 CHF)",
        )

    def test_game_detail(self):
        text = format_game_detail(self.game)
        self.assertIn("Total Value: 12.50 CHF", text)
        self.assertIn("  Bob: -12.50 CHF", text)

    def test_roster(self):
        self.assertEqual(format_roster([]), "No players yet.")
        self.assertEqual(
            format_roster([Player("Alice", 1, 50), Player("Bob", 2, -50)]),
            "1. Alice - 1 game, 50 CHF\n2. Bob - 2 games, -50 CHF",
        )


if __name__ == "__main__":
    unittest.main()
