"""
勝ちライン 1 本（combo row）

4 マスの組み合わせと、その所有者・埋まった数・まだ勝負に使えるか（interesting）を持つ。
spots は常に「空きマスが前、埋まったマスが後ろ」に並ぶので、
空きマスだけを見たいときは spots[:4 - nfilled] を見ればよい。
"""
from enum import Enum
from typing import List, Optional

from .game_logic import SIZE, Coord3, Piece, index_to_coord


class LineEvent(Enum):
    NONE = "none"  # 新しい情報なし（無関係なマス・初めての石・続きの石）
    WON = "won"  # 持ち主が 4 つ目を埋めた
    BLOCKED = "blocked"  # 相手の石が入り、このラインは死んだ


class ComboRow:
    __slots__ = ("spots", "nfilled", "owner", "interesting")

    def __init__(self, one: int, two: int, three: int, four: int):
        self.spots: List[int] = [one, two, three, four]
        self.nfilled = 0
        self.owner: Optional[Piece] = None
        self.interesting = True
        self.refresh()

    def refresh(self) -> None:
        """新しいゲーム用に戻す（並べ直し・所有者なし・埋まり 0）"""
        self.spots.sort()
        self.nfilled = 0
        self.owner = None
        self.interesting = True

    @property
    def unfilled(self) -> List[int]:
        return self.spots[: SIZE - self.nfilled]

    @property
    def filled(self) -> List[int]:
        return self.spots[SIZE - self.nfilled :]

    def register(self, who: Piece, where: int) -> LineEvent:
        """who が where に置いたことを記録する"""
        if not self.interesting:
            return LineEvent.NONE

        nc = SIZE - self.nfilled
        for i in range(nc):
            if self.spots[i] != where:
                continue

            # 埋まったマスを空き部分の末尾と入れ替える
            self.nfilled += 1
            boundary = SIZE - self.nfilled
            self.spots[i], self.spots[boundary] = self.spots[boundary], where

            if self.owner == who:
                if self.nfilled == SIZE:
                    return LineEvent.WON
                return LineEvent.NONE
            if self.owner is not None:
                # 両者の石が入った → もう誰も勝てない
                self.interesting = False
                self.owner = None
                return LineEvent.BLOCKED
            self.owner = who
            return LineEvent.NONE

        return LineEvent.NONE

    def is_playable(self, where: int) -> bool:
        return where in self.unfilled

    def is_reserved(self, where: int) -> bool:
        """spots の先頭 nfilled 個に入っているか（詰めの要として最後まで取っておくマス）"""
        return where in self.spots[: self.nfilled]

    def intersects(self, other: "ComboRow") -> bool:
        """両方とも生きていて、空きマスを共有しているか"""
        if not self.interesting or not other.interesting:
            return False
        mine = self.unfilled
        return any(s in mine for s in other.unfilled)

    def is_owned_by(self, who: Piece) -> bool:
        return self.interesting and self.owner == who

    def coords(self) -> List[Coord3]:
        return [index_to_coord(s) for s in sorted(self.spots)]

    def __repr__(self) -> str:
        owner = self.owner.name if self.owner is not None else None
        return (
            f"ComboRow(spots={self.spots}, nfilled={self.nfilled}, "
            f"owner={owner}, interesting={self.interesting})"
        )
