from pydantic import BaseModel, Field
from typing import List, Optional

from .settings import DEFAULT_DIFFICULTY


class NewGameIn(BaseModel):
    difficulty: int = Field(default=DEFAULT_DIFFICULTY, ge=0)
    # コンピュータの手番（1=黒/先手, 2=白/後手, None=コンピュータなし）
    computer: Optional[int] = Field(default=2, ge=1, le=2)
    seed: Optional[int] = None


class MoveIn(BaseModel):
    x: int
    y: int
    z: int


class AutoStepBody(BaseModel):
    # 黒番・白番それぞれの難易度（未指定ならゲームの難易度）
    player1: Optional[int] = Field(default=None, ge=0)
    player2: Optional[int] = Field(default=None, ge=0)


class AlgoMoveRequest(BaseModel):
    board: List[List[List[int]]]
    difficulty: int = Field(default=DEFAULT_DIFFICULTY, ge=0)


class MoveOut(BaseModel):
    x: int
    y: int
    z: int
    index: int


class AlgoMoveOut(BaseModel):
    status: str
    move: MoveOut
    player: int


class BoardState(BaseModel):
    board: List[List[List[int]]]
    current_player: int
    game_over: bool
    move_count: int
    difficulty: int
    computer: Optional[int] = None


class NewGameOut(BaseModel):
    game_id: str
    state: BoardState


class LinesOut(BaseModel):
    count: int
    lines: List[List[List[int]]]
