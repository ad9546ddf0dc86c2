import copy
import logging
from enum import IntEnum
from typing import List, Optional, Tuple

from .errors import InvalidBoardError, InvalidMoveError

logger = logging.getLogger(__name__)

SIZE = 4
NUM_SQUARES = SIZE * SIZE * SIZE
INVALID_CELL = -1

Board = List[List[List[int]]]  # board[z][y][x]（0=空, 1=黒, 2=白）
Coord3 = Tuple[int, int, int]


class Piece(IntEnum):
    NOONE = 0
    BLACK = 1
    WHITE = 2
    TIE = 3


def create_board() -> Board:
    """4x4x4の立体ボードを作成（z, y, x）
    z: 高さ（0が最下段）
    y: 奥行き（0が手前）
    x: 横方向（0が左）
    """
    return [[[0 for x in range(SIZE)] for y in range(SIZE)] for z in range(SIZE)]


# ========== 座標 <-> マス番号 ==========
def coord_to_index(x: int, y: int, z: int) -> int:
    """(x, y, z) → 0..63。範囲外は -1"""
    if not (0 <= x < SIZE and 0 <= y < SIZE and 0 <= z < SIZE):
        return INVALID_CELL
    return (z * SIZE + y) * SIZE + x


def xcoord(idx: int) -> int:
    if not 0 <= idx < NUM_SQUARES:
        return INVALID_CELL
    return idx % SIZE


def ycoord(idx: int) -> int:
    if not 0 <= idx < NUM_SQUARES:
        return INVALID_CELL
    return (idx // SIZE) % SIZE


def zcoord(idx: int) -> int:
    if not 0 <= idx < NUM_SQUARES:
        return INVALID_CELL
    return idx // (SIZE * SIZE)


def index_to_coord(idx: int) -> Coord3:
    """0..63 → (x, y, z)。範囲外は (-1, -1, -1)"""
    return (xcoord(idx), ycoord(idx), zcoord(idx))


def opponent(who: Piece) -> Piece:
    if who == Piece.WHITE:
        return Piece.BLACK
    if who == Piece.BLACK:
        return Piece.WHITE
    return Piece.NOONE


# ========== 勝ちライン（76本） ==========
def generate_lines() -> List[List[Coord3]]:
    directions = [
        (1, 0, 0),
        (0, 1, 0),
        (0, 0, 1),
        (1, 1, 0),
        (1, -1, 0),
        (1, 0, 1),
        (1, 0, -1),
        (0, 1, 1),
        (0, 1, -1),
        (1, 1, 1),
        (1, 1, -1),
        (1, -1, 1),
        (-1, 1, 1),
    ]
    lines: List[List[Coord3]] = []
    for x in range(SIZE):
        for y in range(SIZE):
            for z in range(SIZE):
                for dx, dy, dz in directions:
                    line: List[Coord3] = []
                    for i in range(SIZE):
                        nx, ny, nz = x + dx * i, y + dy * i, z + dz * i
                        if 0 <= nx < SIZE and 0 <= ny < SIZE and 0 <= nz < SIZE:
                            line.append((nx, ny, nz))
                        else:
                            break
                    if len(line) == SIZE:
                        lines.append(line)
    return lines


LINES = generate_lines()


def is_full(board: Board) -> bool:
    """盤面がすべて埋まっているかを確認"""
    return all(cell != 0 for layer in board for row in layer for cell in row)


_MARKS = {Piece.BLACK: "x", Piece.WHITE: "o"}


def render_board(board: Board, winner: Piece = Piece.NOONE) -> str:
    """4層を横に並べたテキスト表示（左から z=0..3、各層は y 行 × x 列）"""
    filled = sum(1 for layer in board for row in layer for cell in row if cell)
    if filled == 0:
        title = "Current Board: (Empty)"
    elif winner == Piece.BLACK:
        title = "Current Board: (X wins)"
    elif winner == Piece.WHITE:
        title = "Current Board: (O wins)"
    else:
        title = "Current Board:"

    out = [title]
    for y in range(SIZE):
        layers = []
        for z in range(SIZE):
            layers.append(
                "".join(_MARKS.get(board[z][y][x], "-") for x in range(SIZE))
            )
        out.append("  ".join(layers))
    return "\n".join(out) + "\n"


# ========== 盤（手番・合法手の管理） ==========
class GameBoard:
    """盤面と手番の記録。勝敗判定は WinLineRegistry 側で行い、結果を declare_winner で受け取る"""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.cells: Board = create_board()
        # 黒が先手なので「直前は白」から始める
        self.last_turn = Piece.WHITE
        self.winner = Piece.NOONE
        self.nfilled = 0

    def piece_at(self, where: int) -> Piece:
        if not 0 <= where < NUM_SQUARES:
            return Piece.NOONE
        x, y, z = index_to_coord(where)
        return Piece(self.cells[z][y][x])

    def in_use(self, where: int) -> bool:
        if not 0 <= where < NUM_SQUARES:
            return True
        return self.piece_at(where) != Piece.NOONE

    def whose_turn(self) -> Piece:
        if self.winner != Piece.NOONE:
            return Piece.NOONE
        return opponent(self.last_turn)

    def game_over(self) -> bool:
        return self.whose_turn() == Piece.NOONE or self.nfilled >= NUM_SQUARES

    def legal(self, who: Piece, where: int) -> bool:
        if self.winner != Piece.NOONE:
            return False
        if who not in (Piece.BLACK, Piece.WHITE):
            return False
        if who == self.last_turn:
            return False
        if not 0 <= where < NUM_SQUARES:
            return False
        return not self.in_use(where)

    def legal_cells(self, who: Piece) -> List[int]:
        return [i for i in range(NUM_SQUARES) if self.legal(who, i)]

    def place(self, who: Piece, where: int) -> None:
        if not self.legal(who, where):
            raise InvalidMoveError(f"illegal move: {who.name} -> {where}")
        x, y, z = index_to_coord(where)
        self.cells[z][y][x] = int(who)
        self.last_turn = who
        self.nfilled += 1

    def declare_winner(self, who: Piece) -> None:
        self.winner = who
        logger.info(f"winner declared: {who.name}")

    def to_list(self) -> Board:
        return copy.deepcopy(self.cells)

    def render(self) -> str:
        return render_board(self.cells, self.winner)

    @classmethod
    def from_list(cls, board: Board) -> "GameBoard":
        """board[z][y][x] のスナップショットから復元。手番は石数から推定する"""
        if len(board) != SIZE or any(
            len(layer) != SIZE or any(len(row) != SIZE for row in layer)
            for layer in board
        ):
            raise InvalidBoardError("board must be 4x4x4 (board[z][y][x])")

        gb = cls()
        blacks = whites = 0
        for z in range(SIZE):
            for y in range(SIZE):
                for x in range(SIZE):
                    v = board[z][y][x]
                    if v not in (Piece.NOONE, Piece.BLACK, Piece.WHITE):
                        raise InvalidBoardError(f"bad cell value {v!r} at ({x}, {y}, {z})")
                    gb.cells[z][y][x] = int(v)
                    if v == Piece.BLACK:
                        blacks += 1
                    elif v == Piece.WHITE:
                        whites += 1

        if blacks - whites not in (0, 1):
            raise InvalidBoardError(
                f"piece counts do not alternate: black={blacks}, white={whites}"
            )
        gb.nfilled = blacks + whites
        gb.last_turn = Piece.BLACK if blacks > whites else Piece.WHITE
        return gb
