import random

import pytest

from four_game.backend.errors import InvalidBoardError
from four_game.backend.game_logic import Piece, create_board, index_to_coord
from four_game.framework import Alg3D, RuleAI


def make_board(blacks=(), whites=()):
    board = create_board()
    for cells, value in ((blacks, 1), (whites, 2)):
        for i in cells:
            x, y, z = index_to_coord(i)
            board[z][y][x] = value
    return board


def test_alg3d_is_abstract():
    with pytest.raises(TypeError):
        Alg3D()


def test_empty_board_gives_a_legal_coordinate():
    ai = RuleAI(1000, random.Random(0))
    x, y, z = ai.get_move(make_board())
    assert all(0 <= c < 4 for c in (x, y, z))


def test_completes_the_row():
    ai = RuleAI(1, random.Random(0))
    assert ai.get_move(make_board([0, 1, 2], [16, 17, 18])) == (3, 0, 0)


def test_white_to_move_blocks():
    ai = RuleAI(1, random.Random(0))
    assert ai.get_index(make_board([0, 1, 2], [16, 17])) == 3


def test_finished_board_is_rejected():
    with pytest.raises(InvalidBoardError):
        RuleAI(1).get_move(make_board([0, 1, 2, 3], [16, 17, 18]))


@pytest.mark.parametrize(
    "board",
    [
        [[[0] * 4] * 4] * 3,
        make_board([0, 1], []),
        make_board([], [5]),
    ],
)
def test_malformed_board_is_rejected(board):
    with pytest.raises(InvalidBoardError):
        RuleAI(1).get_move(board)


def test_bad_cell_value_is_rejected():
    board = make_board()
    board[1][2][3] = 7
    with pytest.raises(InvalidBoardError):
        RuleAI(1).get_index(board)


def test_suggest_reports_the_side_to_move():
    ai = RuleAI(1, random.Random(0))
    assert ai.suggest(make_board([0, 1, 2], [16, 17])) == (3, Piece.WHITE)
    assert ai.suggest(make_board())[1] == Piece.BLACK
