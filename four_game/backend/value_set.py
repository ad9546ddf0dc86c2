"""
スコア付き集合（ValueSet）

盤の 64 マスそれぞれにスコアを持たせる。スコア 0 は「集合に含まれない」、
正のスコアは「含まれていて、その値の評価を持つ」を意味する。
ルールはすべてこの集合を返し、戦略側は combine で候補を絞り込んでいく。
"""
import random
from typing import Iterator, List, Optional

from .errors import EmptyValueSetError
from .game_logic import NUM_SQUARES, SIZE, coord_to_index


def _in_range(spot: int) -> bool:
    return 0 <= spot < NUM_SQUARES


class ValueSet:
    __slots__ = ("_data", "_active")

    def __init__(self):
        self._data: List[int] = [0] * NUM_SQUARES
        self._active = 0

    # ---- 基本操作 ----
    def clear(self) -> None:
        self._data = [0] * NUM_SQUARES
        self._active = 0

    def copy(self) -> "ValueSet":
        vs = ValueSet()
        vs.set_from(self)
        return vs

    def set_from(self, other: "ValueSet") -> None:
        self._data = list(other._data)
        self._active = other._active

    @property
    def active(self) -> int:
        return self._active

    def is_empty(self) -> bool:
        return self._active == 0

    def is_able(self, spot: int) -> bool:
        if not _in_range(spot):
            return False
        return self._data[spot] > 0

    def score(self, spot: int) -> int:
        if not _in_range(spot):
            return 0
        return self._data[spot]

    def members(self) -> Iterator[int]:
        return (i for i, v in enumerate(self._data) if v > 0)

    # ---- スコア加減 ----
    def add_score(self, spot: int, delta: int) -> None:
        if not _in_range(spot) or delta == 0:
            return
        if delta < 0:
            self.sub_score(spot, -delta)
            return
        if self._data[spot] == 0:
            self._active += 1
        self._data[spot] += delta

    def inc_score(self, spot: int) -> None:
        self.add_score(spot, 1)

    def sub_score(self, spot: int, delta: int) -> None:
        # 現在値より大きい delta は無視する（0 に丸めない）
        if not _in_range(spot) or delta == 0:
            return
        if delta < 0:
            self.add_score(spot, -delta)
            return
        if self._data[spot] >= delta:
            self._data[spot] -= delta
            if self._data[spot] == 0:
                self._active -= 1

    def dec_score(self, spot: int) -> None:
        self.sub_score(spot, 1)

    def disable(self, spot: int) -> None:
        if not _in_range(spot):
            return
        if self._data[spot] != 0:
            self._active -= 1
        self._data[spot] = 0

    # ---- 集合演算 ----
    def num_active(self) -> int:
        """全走査で有効マス数を数え直す"""
        return sum(1 for v in self._data if v > 0)

    def add(self, other: "ValueSet") -> None:
        for i in range(NUM_SQUARES):
            self._data[i] += other._data[i]
        self._active = self.num_active()

    def sub(self, other: "ValueSet") -> None:
        for i in range(NUM_SQUARES):
            if other._data[i] > self._data[i]:
                self._data[i] = 0
            else:
                self._data[i] -= other._data[i]
        self._active = self.num_active()

    def combine(self, other: "ValueSet") -> None:
        """
        other による絞り込み。

        自分の最高スコアのマスだけを残し、そのうち other に含まれるマスを
        other のスコアで置き換える。結果が空になる場合は何もしない
        （候補を全部捨てることはない）。other が空、または全マスを含むときも何もしない。
        """
        if other._active <= 0 or other._active >= NUM_SQUARES:
            return

        highscore = max(self._data)
        if highscore <= 0:
            return

        refined = ValueSet()
        for i in range(NUM_SQUARES):
            if self._data[i] == highscore:
                refined._data[i] = other._data[i]
        refined._active = refined.num_active()

        if refined._active > 0:
            self.set_from(refined)

    def pick_member(self, rng: Optional[random.Random] = None) -> int:
        """最高スコアのマスの中から一様ランダムに 1 つ選ぶ"""
        if self._active <= 0:
            raise EmptyValueSetError("cannot pick from an empty ValueSet")
        highscore = max(self._data)
        best = [i for i, v in enumerate(self._data) if v == highscore]
        return (rng or random).choice(best)

    def render(self) -> str:
        """デバッグ用の表示（盤と同じ並び、10 以上は *）"""
        out = [f"VSET: NUMBER ACTIVE = {self._active}"]
        for y in range(SIZE):
            layers = []
            for z in range(SIZE):
                row = ""
                for x in range(SIZE):
                    v = self._data[coord_to_index(x, y, z)]
                    if v <= 0:
                        row += "-"
                    elif v <= 9:
                        row += str(v)
                    else:
                        row += "*"
                layers.append(row)
            out.append("  ".join(layers))
        return "\n".join(out) + "\n"

    def __len__(self) -> int:
        return self._active

    def __contains__(self, spot: object) -> bool:
        return isinstance(spot, int) and self.is_able(spot)

    def __repr__(self) -> str:
        cells = {i: v for i, v in enumerate(self._data) if v > 0}
        return f"ValueSet({cells})"
