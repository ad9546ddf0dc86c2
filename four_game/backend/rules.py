"""
ルール一覧

各ルールは (盤, 勝ちライン集合, 手番) から ValueSet を作る純粋関数。
スコアが高いほど打ちたいマス。RULESET の並びが優先順位で、
難易度しきい値の順ではない（例: KBLOCK-1 は FORCE より先に評価される）。
"""
from dataclasses import dataclass
from typing import Callable, List, Tuple

from .combo_set import ComboSet
from .game_logic import NUM_SQUARES, SIZE, GameBoard, Piece, coord_to_index, opponent
from .value_set import ValueSet

RuleFn = Callable[[GameBoard, ComboSet, Piece], ValueSet]


@dataclass(frozen=True)
class Rule:
    name: str
    level: int
    fn: RuleFn

    def apply(self, board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
        return self.fn(board, cs, who)


# ========== 補助 ==========
def _sum(cs: ComboSet, who: Piece, nfilled: int) -> ValueSet:
    """who が持つ、nfilled 個埋まったラインの空きマスを数える"""
    spots = ValueSet()
    for cr in cs.live_lines:
        if cr.nfilled == nfilled and cr.owner == who:
            for s in cr.unfilled:
                spots.inc_score(s)
    return spots


def _find_pivots(
    cs: ComboSet, who: Piece, twos: int, ones: int
) -> List[Tuple[int, int, int]]:
    """
    who が「要」に使えるラインを探す。

    相手に取られていない、4 - ones - twos 個埋まったラインのうち、
    空きマスがすべて who の 2 個ライン（twos）か 1 個ライン（ones）につながっているもの。
    どこにもつながらない空きマスが 1 つでもあれば対象外。
    戻り値は (ライン番号, found_ones, found_twos) のリスト。
    """
    onesum = _sum(cs, who, 1)
    twosum = _sum(cs, who, 2)

    if onesum.active < ones * 3:
        return []
    if twosum.active < twos * 2:
        return []

    opp = opponent(who)
    matches: List[Tuple[int, int, int]] = []
    for i, cr in enumerate(cs.live_lines):
        if cr.owner == opp:
            continue
        if cr.nfilled != SIZE - ones - twos:
            continue

        found_twos = found_ones = found_zeros = 0
        for s in cr.unfilled:
            # 自分自身が 2 個ラインなら自分の分を除いて数える
            if cr.nfilled == 2:
                if twosum.score(s) > 1:
                    found_twos += 1
                    continue
            elif twosum.score(s) > 0:
                found_twos += 1
                continue

            if cr.nfilled == 3:
                if onesum.score(s) > 1:
                    found_ones += 1
                    continue
            elif onesum.score(s) > 0:
                found_ones += 1
                continue

            found_zeros += 1

        if found_zeros > 0:
            continue
        if found_ones == ones and found_twos >= twos:
            matches.append((i, found_ones, found_twos))
    return matches


def killn(cs: ComboSet, who: Piece, twos: int, ones: int) -> ValueSet:
    """
    詰めの準備。要のラインに交差するライン（要のマス以外）を育てる。
    1 個ラインが残っていれば 3 個埋まりの交差ラインを、2 個ラインだけなら
    2 個埋まりの交差ラインを対象にする。要のマス（is_reserved）は最後まで取っておく。
    1 個埋まりの要では先頭の空きマスだけが温存され、残り 2 つは交差ライン側から育てる。
    """
    spots = ValueSet()
    opp = opponent(who)
    lines = cs.live_lines
    for pivot_index, fo, ft in _find_pivots(cs, who, twos, ones):
        pivot = lines[pivot_index]
        for j, cr in enumerate(lines):
            if j == pivot_index:
                continue
            if cr.owner == opp:
                continue
            if fo != 0:
                if cr.nfilled != 3:
                    continue
            elif ft != 0:
                if cr.nfilled != 2:
                    continue
            if not cr.intersects(pivot):
                continue
            for s in cr.unfilled:
                if pivot.is_reserved(s):
                    continue
                spots.inc_score(s)
    return spots


def live(cs: ComboSet, who: Piece, twos: int, ones: int) -> ValueSet:
    """killn の裏返し。相手の要のラインのマスに先に打って詰めを崩す"""
    spots = ValueSet()
    lines = cs.live_lines
    for pivot_index, _fo, _ft in _find_pivots(cs, opponent(who), twos, ones):
        for s in lines[pivot_index].unfilled:
            spots.inc_score(s)
    return spots


# ========== ルール本体 ==========
def any_move(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    """合法手すべて。以降のルールはこの集合の中で絞り込む"""
    spots = ValueSet()
    for i in range(NUM_SQUARES):
        if board.legal(who, i):
            spots.inc_score(i)
    return spots


def win(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, who, 3)


def block(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, opponent(who), 3)


def make_three(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, who, 2)


def block_two(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, opponent(who), 2)


def make_two(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, who, 1)


def block_one(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return _sum(cs, opponent(who), 1)


def force(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    """自分の 2 個ライン 2 本が交わる空きマス（取れば両取り）"""
    spots = _sum(cs, who, 2)
    for i in range(NUM_SQUARES):
        if spots.score(i) < 2:
            spots.disable(i)
    return spots


def block_force(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return force(board, cs, opponent(who))


def setup_force(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    """
    両取りの 1 手前。2 個ラインと 1 個ラインが交わる空きマス（要）を通る
    自分の 3 個ラインについて、要以外の空きマスを育てる。
    3 個ラインの空きマスは要の 1 つだけなので、実際には何も返さない。
    """
    spots = ValueSet()
    onesum = _sum(cs, who, 1)
    twosum = _sum(cs, who, 2)

    for i in range(NUM_SQUARES):
        if not onesum.is_able(i) or not twosum.is_able(i):
            continue
        for cr in cs.live_lines:
            if cr.nfilled != 3 or cr.owner != who:
                continue
            if not cr.is_playable(i):
                continue
            for s in cr.unfilled:
                if s != i:
                    spots.inc_score(s)
    return spots


def nix_setup(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    """相手の setup_force の要に先回りする"""
    spots = ValueSet()
    opp = opponent(who)
    onesum = _sum(cs, opp, 1)
    twosum = _sum(cs, opp, 2)
    for i in range(NUM_SQUARES):
        if onesum.is_able(i) and twosum.is_able(i):
            spots.inc_score(i)
    return spots


def new_force(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 1, 0)


def new_block_force(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return live(cs, who, 1, 0)


def kill_setup_1(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 2, 1)


def kill_block_1(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return live(cs, who, 2, 1)


def kill_setup_2(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 3, 2)


def kill_block_2(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return live(cs, who, 3, 2)


def kill_setup_3(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 4, 3)


def kill_block_3(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return live(cs, who, 4, 3)


def prekill(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 1, 1)


def prekill_1(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    return killn(cs, who, 0, 2)


CORNER_CELLS = tuple(
    coord_to_index(x, y, z) for z in (0, 3) for y in (0, 3) for x in (0, 3)
)


def corners(board: GameBoard, cs: ComboSet, who: Piece) -> ValueSet:
    """他に決め手がないときは角を取る"""
    spots = ValueSet()
    for s in CORNER_CELLS:
        spots.inc_score(s)
    return spots


# 優先順位順。しきい値順に並べ替えないこと
RULESET: Tuple[Rule, ...] = (
    Rule("ANY", 0, any_move),
    Rule("WIN", 1, win),
    Rule("BLOCK", 1, block),
    Rule("NEW-FORCE", 6, new_force),
    Rule("NWBK-FORCE", 6, new_block_force),
    Rule("KBLOCK-1", 7, kill_block_1),
    Rule("KSETUP-1", 7, kill_setup_1),
    Rule("KBLOCK-2", 8, kill_block_2),
    Rule("KBLOCK-3", 9, kill_block_3),
    Rule("KSETUP-2", 7, kill_setup_2),
    Rule("KSETUP-3", 7, kill_setup_3),
    Rule("PREK", 10, prekill),
    Rule("PREK-1", 10, prekill_1),
    Rule("FORCE", 4, force),
    Rule("BLOCK-FORCE", 4, block_force),
    Rule("SETUP-FORCE", 5, setup_force),
    Rule("NIX-SETUP", 5, nix_setup),
    Rule("MAKE-THREE", 2, make_three),
    Rule("BLOCK-TWO", 2, block_two),
    Rule("MAKE-TWO", 3, make_two),
    Rule("BLOCK-ONE", 3, block_one),
    Rule("CORNERS", 9, corners),
)

def rules_for(difficulty: int) -> Tuple[Rule, ...]:
    """しきい値が difficulty 以下のルールを、優先順位を保ったまま返す"""
    return tuple(r for r in RULESET if r.level <= difficulty)
