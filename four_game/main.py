# main.py (FastAPI): 4x4x4 立体四目並べ 対コンピュータ サーバー
import copy
import logging
import random
import threading
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .backend.combo_set import ComboSet
from .backend.errors import InvalidBoardError, InvalidMoveError
from .backend.game_logic import (
    NUM_SQUARES,
    GameBoard,
    Piece,
    coord_to_index,
    index_to_coord,
)
from .backend.models import (
    AlgoMoveOut,
    AlgoMoveRequest,
    AutoStepBody,
    BoardState,
    LinesOut,
    MoveIn,
    MoveOut,
    NewGameIn,
    NewGameOut,
)
from .backend.settings import HOST, LOG_LEVEL, PORT, RANDOM_SEED
from .backend.strategy import StrategyEngine
from .framework import RuleAI

# ========== ログ ==========
logger = logging.getLogger(__name__)
logging.basicConfig(level=LOG_LEVEL)

# ========== 乱数 ==========
if RANDOM_SEED is not None:
    random.seed(RANDOM_SEED)

# ========== FastAPI ==========
app = FastAPI()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _move_dict(where: int) -> Dict[str, int]:
    x, y, z = index_to_coord(where)
    return {"x": x, "y": y, "z": z, "index": where}


# ========== ゲーム箱 ==========
class Game:
    def __init__(
        self,
        difficulty: int,
        computer: Optional[Piece] = Piece.WHITE,
        seed: Optional[int] = None,
    ):
        self.board = GameBoard()
        self.combos = ComboSet()
        self.difficulty = difficulty
        self.computer = computer
        # seed 指定時はゲームごとの乱数、なければプロセス共通の random
        self.rng = random.Random(seed) if seed is not None else None
        self.engine = StrategyEngine(difficulty, self.rng)
        # 盤と勝ちライン集合を同時に更新するので、1 ゲーム 1 リクエストずつ
        self.lock = threading.RLock()

    @property
    def game_over(self) -> bool:
        return self.board.game_over()

    @property
    def current_player(self) -> Piece:
        return self.board.whose_turn()

    def state_dict(self) -> Dict[str, Any]:
        return {
            "board": copy.deepcopy(self.board.cells),
            "current_player": int(self.current_player),
            "game_over": self.game_over,
            "move_count": self.board.nfilled,
            "difficulty": self.difficulty,
            "computer": int(self.computer) if self.computer is not None else None,
        }

    def _play(self, who: Piece, where: int) -> str:
        """盤と勝ちライン集合の両方に着手を反映し、結果の status を返す"""
        self.board.place(who, where)
        if self.combos.place(who, where):
            self.board.declare_winner(who)
            return "win"
        if self.board.nfilled >= NUM_SQUARES:
            return "draw"
        return "ok"

    def _outcome(self, status: str, who: Piece, where: int) -> Dict[str, Any]:
        out = {"status": status, **self.state_dict(), "last_move": _move_dict(where)}
        if status == "win":
            out.update(
                {
                    "winner": int(who),
                    "player": f"Player {int(who)}",
                    "winning_coords": [
                        list(c) for c in self.combos.winning_line.coords()
                    ],
                }
            )
        return out

    def suggest(self, engine: Optional[StrategyEngine] = None) -> int:
        """手番側のおすすめの手（置かない）"""
        return (engine or self.engine).make_move(
            self.board, self.combos, self.current_player
        )

    def engine_move(self, engine: Optional[StrategyEngine] = None) -> Dict[str, Any]:
        who = self.current_player
        where = self.suggest(engine)
        status = self._play(who, where)
        logger.info(f"[engine] {who.name} -> {index_to_coord(where)} ({status})")
        return self._outcome(status, who, where)

    def make_move(self, x: int, y: int, z: int) -> Dict[str, Any]:
        if self.game_over:
            return {"status": "finished", **self.state_dict()}

        who = self.current_player
        where = coord_to_index(x, y, z)
        if who == self.computer or not self.board.legal(who, where):
            return {"status": "invalid", **self.state_dict()}

        status = self._play(who, where)
        out = self._outcome(status, who, where)

        # コンピュータの番なら続けて応手する
        if status == "ok" and self.current_player == self.computer:
            reply = self.engine_move()
            out = {**reply, "last_move": out["last_move"]}
            out["computer_move"] = reply["last_move"]
        return out


# ========== ゲームレジストリ ==========
games: Dict[str, Game] = {}


def _get_game(game_id: str) -> Game:
    game = games.get(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Invalid game_id")
    return game


# ========== エンドポイント ==========
@app.post("/games", response_model=NewGameOut)
def create_game(body: Optional[NewGameIn] = None):
    body = body or NewGameIn()
    computer = Piece(body.computer) if body.computer is not None else None
    game = Game(body.difficulty, computer, body.seed)
    game_id = str(uuid.uuid4())
    logger.info(
        f"[games] new {game_id} difficulty={body.difficulty} computer={computer}"
    )

    # コンピュータが先手なら初手を打ってから登録する
    if computer == Piece.BLACK:
        game.engine_move()
    games[game_id] = game
    return {"game_id": game_id, "state": game.state_dict()}


@app.get("/games/{game_id}", response_model=BoardState)
def get_state(game_id: str):
    game = _get_game(game_id)
    with game.lock:
        return game.state_dict()


@app.post("/games/{game_id}/move")
def move(game_id: str, payload: MoveIn):
    game = _get_game(game_id)
    try:
        with game.lock:
            return game.make_move(payload.x, payload.y, payload.z)
    except InvalidMoveError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/games/{game_id}")
def delete_game(game_id: str):
    if game_id in games:
        del games[game_id]
        return {"status": "deleted"}
    raise HTTPException(status_code=404, detail="Invalid game_id")


# ========== /games/{id}/auto-step（AI vs AI を1手だけ進める） ==========
@app.post("/games/{game_id}/auto-step")
def auto_step_game(game_id: str, body: Optional[AutoStepBody] = None):
    game = _get_game(game_id)
    body = body or AutoStepBody()
    with game.lock:
        if game.game_over:
            state = game.state_dict()
            state.update({"status": "finished"})
            return state

        level = body.player1 if game.current_player == Piece.BLACK else body.player2
        engine = None
        if level is not None and level != game.difficulty:
            engine = StrategyEngine(level, game.rng)
        return game.engine_move(engine)


@app.post("/games/{game_id}/algo-move", response_model=AlgoMoveOut)
def algo_move_for_game(game_id: str):
    """手番側へのおすすめ手を返す（盤には置かない）"""
    game = _get_game(game_id)
    with game.lock:
        if game.game_over:
            raise HTTPException(status_code=400, detail="game is already over")
        where = game.suggest()
        player = game.current_player
    return {"status": "ok", "move": MoveOut(**_move_dict(where)), "player": int(player)}


@app.post("/algo-move", response_model=AlgoMoveOut)
def algo_move(req: AlgoMoveRequest):
    """board[z][y][x] のスナップショットに対する手番側の手"""
    ai = RuleAI(req.difficulty)
    try:
        where, player = ai.suggest(req.board)
    except InvalidBoardError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "ok", "move": MoveOut(**_move_dict(where)), "player": int(player)}


@app.get("/lines", response_model=LinesOut)
def list_lines():
    lines: List[List[List[int]]] = [
        [list(c) for c in line] for line in ComboSet().lines_as_coords()
    ]
    return {"count": len(lines), "lines": lines}


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
