"""
勝ちラインの集合（combo set）

76 本の勝ちラインを持ち、着手のたびに差分で更新する。
lines[:live_count] が「まだ勝負を決めうるライン」、それ以降は死んだライン。
死んだラインは末尾と入れ替えて live_count を縮めるので、各ルールは
生きているラインだけを走査すればよい。
"""
import logging
from typing import List, Optional

from .combo_row import ComboRow, LineEvent
from .game_logic import (
    LINES,
    NUM_SQUARES,
    Board,
    Coord3,
    GameBoard,
    Piece,
    coord_to_index,
)

logger = logging.getLogger(__name__)

NUM_COMBOROWS = len(LINES)  # 76


class ComboSet:
    def __init__(self):
        self.lines: List[ComboRow] = [
            ComboRow(*(coord_to_index(x, y, z) for (x, y, z) in line))
            for line in LINES
        ]
        self.live_count = NUM_COMBOROWS
        self.winning_index: Optional[int] = None

    def reset(self) -> None:
        for cr in self.lines:
            cr.refresh()
        self.live_count = NUM_COMBOROWS
        self.winning_index = None

    @property
    def live_lines(self) -> List[ComboRow]:
        return self.lines[: self.live_count]

    @property
    def decided(self) -> bool:
        return self.winning_index is not None

    @property
    def winning_line(self) -> Optional[ComboRow]:
        if self.winning_index is None:
            return None
        return self.lines[self.winning_index]

    @property
    def winner(self) -> Piece:
        cr = self.winning_line
        if cr is None or cr.owner is None:
            return Piece.NOONE
        return cr.owner

    def place(self, who: Piece, where: int) -> bool:
        """who の where への着手を全ラインに登録する。勝負が決まっていれば True"""
        if self.winning_index is not None:
            return True

        i = 0
        while i < self.live_count:
            event = self.lines[i].register(who, where)
            if event is LineEvent.WON:
                if self.winning_index is None:
                    self.winning_index = i
                    logger.info(
                        f"{who.name} completed line {self.lines[i].coords()}"
                    )
            elif event is LineEvent.BLOCKED:
                last = self.live_count - 1
                if i != last:
                    self.lines[i], self.lines[last] = self.lines[last], self.lines[i]
                self.live_count -= 1
                # 入れ替わって来たラインをもう一度見る
                continue
            i += 1

        return self.winning_index is not None

    def lines_as_coords(self) -> List[List[Coord3]]:
        return [cr.coords() for cr in self.lines]

    @classmethod
    def from_board(cls, board: GameBoard) -> "ComboSet":
        """盤面スナップショットから登録し直す（ラインの状態は着手順によらない）"""
        cs = cls()
        for where in range(NUM_SQUARES):
            who = board.piece_at(where)
            if who in (Piece.BLACK, Piece.WHITE):
                cs.place(who, where)
        return cs

    @classmethod
    def from_cells(cls, cells: Board) -> "ComboSet":
        return cls.from_board(GameBoard.from_list(cells))
