# === framework.py ===
import random
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .backend.combo_set import ComboSet
from .backend.errors import InvalidBoardError
from .backend.game_logic import Board, GameBoard, Piece, index_to_coord
from .backend.settings import DEFAULT_DIFFICULTY
from .backend.strategy import StrategyEngine


class Alg3D(ABC):
    @abstractmethod
    def get_move(self, board: Board) -> Tuple[int, int, int]:
        """(x, y, z) を返す。0 <= x, y, z < 4"""
        ...


class RuleAI(Alg3D):
    """
    ルールベースAI。盤面スナップショット board[z][y][x] から
    勝ちライン集合を作り直し、StrategyEngine に手番側の手を選ばせる。
    """

    def __init__(
        self, difficulty: int = DEFAULT_DIFFICULTY, rng: Optional[random.Random] = None
    ):
        self.engine = StrategyEngine(difficulty, rng)

    def suggest(self, board: Board) -> Tuple[int, Piece]:
        """(マス番号, 手番) を返す。盤面の解析は 1 回だけ"""
        gb = GameBoard.from_list(board)
        cs = ComboSet.from_board(gb)
        if cs.decided:
            gb.declare_winner(cs.winner)
        who = gb.whose_turn()
        if gb.game_over():
            raise InvalidBoardError("game is already over")
        return self.engine.make_move(gb, cs, who), who

    def get_index(self, board: Board) -> int:
        return self.suggest(board)[0]

    def get_move(self, board: Board) -> Tuple[int, int, int]:
        return index_to_coord(self.get_index(board))
