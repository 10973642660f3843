from __future__ import annotations

from klondike.engine.actions import DealAction, FlipAction, Foundation, MoveAction, Stock, Tableau, Waste
from klondike.engine.board import Board
from klondike.engine.cards import ACE, KING, QUEEN, Card, Suit
from klondike.engine.errors import CardNotFound, EmptyPile, InvalidMove
from klondike.engine.rules import ValidatedMove, can_place_on_foundation, can_place_on_tableau, is_run, validate
from klondike.engine.serialize import snapshot


def up(rank: int, suit: Suit) -> Card:
    return Card(suit, rank, True)


def down(rank: int, suit: Suit) -> Card:
    return Card(suit, rank, False)


def test_king_from_waste_to_empty_column() -> None:
    board = Board(waste=[up(KING, "Hearts")])
    res = validate(board, MoveAction(Waste(), Tableau(0)))
    assert isinstance(res, ValidatedMove)
    assert res.cards == (Card("Hearts", KING),)


def test_queen_from_waste_to_empty_column_rejected() -> None:
    board = Board(waste=[up(QUEEN, "Hearts")])
    res = validate(board, MoveAction(Waste(), Tableau(0)))
    assert isinstance(res, InvalidMove)
    assert res.source == Waste()
    assert res.destination == Tableau(0)
    assert "King" in res.reason and "empty" in res.reason


def test_tableau_placement_predicates() -> None:
    red_king = [up(KING, "Hearts")]
    assert can_place_on_tableau(up(QUEEN, "Spades"), red_king)
    assert not can_place_on_tableau(up(QUEEN, "Diamonds"), red_king)
    assert not can_place_on_tableau(up(11, "Spades"), red_king)
    assert not can_place_on_tableau(up(QUEEN, "Spades"), [down(KING, "Hearts")])


def test_foundation_placement_predicates() -> None:
    ace = [up(ACE, "Hearts")]
    assert can_place_on_foundation(up(ACE, "Hearts"), [])
    assert can_place_on_foundation(up(2, "Hearts"), ace)
    assert not can_place_on_foundation(up(2, "Spades"), ace)
    assert not can_place_on_foundation(up(3, "Hearts"), ace)
    assert not can_place_on_foundation(up(2, "Hearts"), [])


def test_run_detection() -> None:
    assert is_run([up(9, "Spades"), up(8, "Hearts"), up(7, "Clubs")])
    assert not is_run([up(9, "Spades"), up(8, "Clubs")])
    assert not is_run([up(9, "Spades"), up(7, "Hearts")])
    assert not is_run([down(9, "Spades"), up(8, "Hearts")])
    assert not is_run([])


def test_run_moves_as_a_unit() -> None:
    board = Board()
    board.tableau[0] = [down(5, "Clubs"), up(9, "Spades"), up(8, "Hearts"), up(7, "Clubs")]
    board.tableau[1] = [up(10, "Diamonds")]
    res = validate(board, MoveAction(Tableau(0, 1), Tableau(1, 1)))
    assert isinstance(res, ValidatedMove)
    assert [c.rank for c in res.cards] == [9, 8, 7]


def test_partial_run_can_move() -> None:
    board = Board()
    board.tableau[0] = [up(9, "Spades"), up(8, "Hearts"), up(7, "Clubs")]
    board.tableau[1] = [up(9, "Clubs")]
    res = validate(board, MoveAction(Tableau(0, 1), Tableau(1)))
    assert isinstance(res, ValidatedMove)
    assert len(res.cards) == 2


def test_broken_run_rejected() -> None:
    board = Board()
    board.tableau[0] = [up(9, "Spades"), up(8, "Spades")]
    board.tableau[1] = [up(10, "Hearts")]
    res = validate(board, MoveAction(Tableau(0, 0), Tableau(1)))
    assert isinstance(res, InvalidMove)
    assert "run" in res.reason


def test_face_down_source_rejected() -> None:
    board = Board()
    board.tableau[0] = [down(KING, "Spades"), up(4, "Hearts")]
    res = validate(board, MoveAction(Tableau(0, 0), Tableau(1)))
    assert isinstance(res, InvalidMove)
    assert "face down" in res.reason


def test_wrong_color_and_rank_rejected() -> None:
    board = Board()
    board.tableau[0] = [up(9, "Hearts")]
    board.tableau[1] = [up(10, "Diamonds")]
    board.tableau[2] = [up(KING, "Clubs")]
    same_color = validate(board, MoveAction(Tableau(0), Tableau(1)))
    assert isinstance(same_color, InvalidMove)
    assert "color" in same_color.reason
    wrong_rank = validate(board, MoveAction(Tableau(0), Tableau(2)))
    assert isinstance(wrong_rank, InvalidMove)
    assert "rank" in wrong_rank.reason


def test_same_column_rejected() -> None:
    board = Board()
    board.tableau[0] = [up(KING, "Clubs")]
    res = validate(board, MoveAction(Tableau(0), Tableau(0)))
    assert isinstance(res, InvalidMove)


def test_tableau_to_foundation() -> None:
    board = Board()
    board.tableau[0] = [up(2, "Hearts"), up(ACE, "Clubs")]
    assert isinstance(validate(board, MoveAction(Tableau(0, 1), Foundation(0))), ValidatedMove)

    board.foundations[1] = [up(ACE, "Hearts")]
    not_top = validate(board, MoveAction(Tableau(0, 0), Foundation(1)))
    assert isinstance(not_top, InvalidMove)
    assert "single" in not_top.reason


def test_foundation_rejects_wrong_suit_and_gap() -> None:
    board = Board(waste=[up(3, "Hearts")])
    board.foundations[0] = [up(ACE, "Hearts")]
    board.foundations[1] = [up(ACE, "Spades"), up(2, "Spades")]
    assert isinstance(validate(board, MoveAction(Waste(), Foundation(0))), InvalidMove)
    assert isinstance(validate(board, MoveAction(Waste(), Foundation(1))), InvalidMove)
    assert isinstance(validate(board, MoveAction(Waste(), Foundation(2))), InvalidMove)


def test_foundation_to_tableau_is_a_house_rule() -> None:
    board = Board()
    board.foundations[0] = [up(ACE, "Hearts"), up(2, "Hearts")]
    board.tableau[0] = [up(3, "Spades")]
    action = MoveAction(Foundation(0), Tableau(0))
    assert isinstance(validate(board, action), ValidatedMove)
    refused = validate(board, action, allow_foundation_to_tableau=False)
    assert isinstance(refused, InvalidMove)


def test_foundation_to_foundation_rejected() -> None:
    board = Board()
    board.foundations[0] = [up(ACE, "Hearts")]
    assert isinstance(validate(board, MoveAction(Foundation(0), Foundation(1))), InvalidMove)


def test_missing_cards_and_piles() -> None:
    board = Board()
    board.tableau[0] = [up(KING, "Clubs"), up(QUEEN, "Hearts")]
    assert validate(board, MoveAction(Tableau(0, 5), Tableau(1))) == CardNotFound(Tableau(0, 5))
    assert validate(board, MoveAction(Tableau(9, 0), Tableau(1))) == CardNotFound(Tableau(9, 0))
    assert validate(board, MoveAction(Tableau(3), Tableau(1))) == EmptyPile(Tableau(3))
    assert validate(board, MoveAction(Waste(), Tableau(1))) == EmptyPile(Waste())
    assert validate(board, MoveAction(Foundation(2), Tableau(1))) == EmptyPile(Foundation(2))


def test_stock_and_waste_are_not_move_endpoints() -> None:
    board = Board(stock=[down(5, "Clubs")], waste=[up(KING, "Clubs")])
    assert isinstance(validate(board, MoveAction(Stock(), Tableau(0))), InvalidMove)
    board.tableau[0] = [up(QUEEN, "Hearts")]
    assert isinstance(validate(board, MoveAction(Tableau(0), Waste())), InvalidMove)
    assert isinstance(validate(board, MoveAction(Tableau(0), Stock())), InvalidMove)


def test_deal_rules() -> None:
    stock = [down(r, "Clubs") for r in (1, 2, 3, 4)]
    board = Board(stock=list(stock), draw_count=3)
    res = validate(board, DealAction())
    assert isinstance(res, ValidatedMove)
    assert res.kind == "deal"
    assert [c.rank for c in res.cards] == [4, 3, 2]

    board = Board(stock=[], waste=[up(1, "Clubs"), up(2, "Clubs")])
    res = validate(board, DealAction())
    assert isinstance(res, ValidatedMove)
    assert res.kind == "recycle"

    assert validate(Board(), DealAction()) == EmptyPile(Stock())


def test_flip_rules() -> None:
    board = Board()
    board.tableau[0] = [down(3, "Clubs"), down(KING, "Hearts")]
    board.tableau[1] = [up(4, "Clubs")]
    assert isinstance(validate(board, FlipAction(Tableau(0, 1))), ValidatedMove)
    assert isinstance(validate(board, FlipAction(Tableau(0, 0))), InvalidMove)
    assert isinstance(validate(board, FlipAction(Tableau(1, 0))), InvalidMove)
    assert validate(board, FlipAction(Tableau(2, 0))) == EmptyPile(Tableau(2, 0))
    assert isinstance(validate(board, FlipAction(Waste())), InvalidMove)


def test_validate_never_mutates() -> None:
    board = Board(waste=[up(QUEEN, "Hearts")], stock=[down(2, "Clubs")])
    board.tableau[0] = [down(3, "Clubs"), up(9, "Spades")]
    before = snapshot(board)
    validate(board, MoveAction(Waste(), Tableau(1)))
    validate(board, MoveAction(Tableau(0, 1), Foundation(0)))
    validate(board, DealAction())
    validate(board, FlipAction(Tableau(0, 1)))
    assert snapshot(board) == before


def test_violation_messages_name_the_positions() -> None:
    board = Board(waste=[up(QUEEN, "Hearts")])
    res = validate(board, MoveAction(Waste(), Tableau(0)))
    assert isinstance(res, InvalidMove)
    assert res.message.startswith("Waste -> Tableau(0):")
    assert "Q♥" in res.message


def test_tableau_without_index_addresses_the_top_card() -> None:
    board = Board()
    board.tableau[0] = [down(3, "Clubs"), down(KING, "Hearts")]
    board.tableau[1] = [up(9, "Hearts"), up(ACE, "Spades")]
    assert isinstance(validate(board, FlipAction(Tableau(0))), ValidatedMove)

    res = validate(board, MoveAction(Tableau(1), Foundation(0)))
    assert isinstance(res, ValidatedMove)
    assert res.cards == (Card("Spades", ACE),)
