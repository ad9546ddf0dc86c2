"""
コンピュータの戦略

ルールを優先順位順に適用する。最初に空でない結果を返したルールの集合が
候補になり、以降のルールはその候補の最高スコア部分を絞り込むだけに使う
（絞り込みで候補が空になる場合は無視）。最後に最高スコアのマスから
ランダムに 1 つ選ぶ。難易度は「どのルールを使うか」だけで決まる。
"""
import logging
import random
from typing import Optional, Tuple

from .combo_set import ComboSet
from .game_logic import GameBoard, Piece
from .rules import Rule, rules_for
from .value_set import ValueSet

logger = logging.getLogger(__name__)


class StrategyEngine:
    def __init__(self, difficulty: int, rng: Optional[random.Random] = None):
        self.rng = rng
        self.set_difficulty(difficulty)

    def set_difficulty(self, difficulty: int) -> None:
        self.difficulty = difficulty
        self._rules: Tuple[Rule, ...] = rules_for(difficulty)
        logger.debug(
            f"difficulty={difficulty} rules={[r.name for r in self._rules]}"
        )

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def candidates(self, board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
        """ルールを順に適用して、最終的な候補集合を作る"""
        spots = ValueSet()
        rules = self._rules

        # 1) 最初に何か返したルールが基準になる
        n = 0
        while n < len(rules):
            spots = rules[n].apply(board, cs, who)
            if not spots.is_empty():
                logger.debug(f"base rule {rules[n].name}: {spots.active} spots")
                break
            n += 1
        n += 1

        # 2) 残りのルールで絞り込む。1 マスになったら終わり
        while n < len(rules) and spots.active > 1:
            others = rules[n].apply(board, cs, who)
            spots.combine(others)
            logger.debug(f"refine {rules[n].name}: {spots.active} spots")
            n += 1

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("\n" + spots.render())
        return spots

    def make_move(self, board: GameBoard, cs: ComboSet, who: Piece) -> int:
        spots = self.candidates(board, cs, who)
        move = spots.pick_member(self.rng)
        logger.debug(f"{who.name} moves to {move}")
        return move
