import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from four_game import main
from four_game.backend.combo_set import ComboSet
from four_game.backend.game_logic import GameBoard, create_board, index_to_coord
from four_game.backend.models import MoveIn
from four_game.backend.settings import DEFAULT_DIFFICULTY

client = TestClient(main.app)


@pytest.fixture(autouse=True)
def clear_games():
    main.games.clear()
    yield
    main.games.clear()


def new_game(**body):
    r = client.post("/games", json=body)
    assert r.status_code == 200
    return r.json()


def play(game_id, where):
    x, y, z = index_to_coord(where)
    return client.post(f"/games/{game_id}/move", json={"x": x, "y": y, "z": z})


def test_create_default_game():
    data = new_game()
    state = data["state"]
    assert data["game_id"] in main.games
    assert state["move_count"] == 0
    assert state["current_player"] == 1
    assert state["computer"] == 2
    assert state["difficulty"] == DEFAULT_DIFFICULTY
    assert not state["game_over"]


def test_create_without_body():
    r = client.post("/games")
    assert r.status_code == 200
    assert r.json()["state"]["computer"] == 2


def test_computer_moves_first_as_black():
    state = new_game(computer=1, difficulty=3, seed=1)["state"]
    assert state["move_count"] == 1
    assert state["current_player"] == 2


def test_bad_difficulty_is_rejected():
    r = client.post("/games", json={"difficulty": -1})
    assert r.status_code == 422


def test_unknown_game():
    assert client.get("/games/nope").status_code == 404
    assert play("nope", 0).status_code == 404
    assert client.delete("/games/nope").status_code == 404


def test_move_gets_a_reply():
    game_id = new_game(difficulty=1, seed=7)["game_id"]
    r = play(game_id, 0)
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["last_move"] == {"x": 0, "y": 0, "z": 0, "index": 0}
    assert data["computer_move"]["index"] != 0
    assert data["move_count"] == 2
    assert data["board"][0][0][0] == 1
    assert data["current_player"] == 1


def test_occupied_and_out_of_range_moves_are_invalid():
    game_id = new_game(difficulty=1, seed=7)["game_id"]
    play(game_id, 0)
    assert play(game_id, 0).json()["status"] == "invalid"
    r = client.post(f"/games/{game_id}/move", json={"x": 4, "y": 0, "z": 0})
    assert r.json()["status"] == "invalid"
    assert client.get(f"/games/{game_id}").json()["move_count"] == 2


def test_two_player_win():
    game_id = new_game(computer=None, difficulty=0)["game_id"]
    for b, w in zip([0, 1, 2], [16, 17, 18]):
        assert play(game_id, b).json()["status"] == "ok"
        assert play(game_id, w).json()["status"] == "ok"
    data = play(game_id, 3).json()
    assert data["status"] == "win"
    assert data["winner"] == 1
    assert data["player"] == "Player 1"
    assert data["winning_coords"] == [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]]
    assert data["game_over"]
    assert data["current_player"] == 0

    assert play(game_id, 40).json()["status"] == "finished"


def test_auto_step_plays_to_the_end():
    game_id = new_game(computer=None, difficulty=1000, seed=3)["game_id"]
    status = None
    for _ in range(64):
        data = client.post(f"/games/{game_id}/auto-step", json={"player2": 2}).json()
        status = data["status"]
        if status != "ok":
            break
    assert status in ("win", "draw")
    assert client.get(f"/games/{game_id}").json()["game_over"]
    done = client.post(f"/games/{game_id}/auto-step").json()
    assert done["status"] == "finished"


def test_algo_move_does_not_place():
    game_id = new_game(computer=None, difficulty=1, seed=0)["game_id"]
    for b, w in zip([0, 1, 2], [16, 17, 18]):
        play(game_id, b)
        play(game_id, w)
    data = client.post(f"/games/{game_id}/algo-move").json()
    assert data == {
        "status": "ok",
        "move": {"x": 3, "y": 0, "z": 0, "index": 3},
        "player": 1,
    }
    assert client.get(f"/games/{game_id}").json()["move_count"] == 6


def test_algo_move_after_game_over():
    game_id = new_game(computer=None, difficulty=0)["game_id"]
    for where in [0, 16, 1, 17, 2, 18, 3]:
        play(game_id, where)
    assert client.post(f"/games/{game_id}/algo-move").status_code == 400


def _snapshot(blacks, whites):
    board = create_board()
    for cells, value in ((blacks, 1), (whites, 2)):
        for i in cells:
            x, y, z = index_to_coord(i)
            board[z][y][x] = value
    return board


def test_stateless_algo_move():
    r = client.post(
        "/algo-move",
        json={"board": _snapshot([0, 1, 2], [16, 17]), "difficulty": 1},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["player"] == 2
    assert data["move"]["index"] == 3


@pytest.mark.parametrize(
    "board",
    [
        [[[0] * 4] * 4] * 2,
        _snapshot([0, 1, 2], []),
        _snapshot([0, 1, 2, 3], [16, 17, 18]),
    ],
)
def test_stateless_algo_move_rejects_bad_boards(board):
    r = client.post("/algo-move", json={"board": board})
    assert r.status_code == 400


def test_lines():
    data = client.get("/lines").json()
    assert data["count"] == 76
    assert all(len(line) == 4 for line in data["lines"])
    assert [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]] in data["lines"]


def test_delete_game():
    game_id = new_game()["game_id"]
    assert client.delete(f"/games/{game_id}").json() == {"status": "deleted"}
    assert client.get(f"/games/{game_id}").status_code == 404


def test_stateless_algo_move_reads_the_board_once(monkeypatch):
    calls = []
    from_list = GameBoard.from_list.__func__

    def counting(cls, board):
        calls.append(board)
        return from_list(cls, board)

    monkeypatch.setattr(GameBoard, "from_list", classmethod(counting))
    r = client.post("/algo-move", json={"board": _snapshot([0], []), "difficulty": 0})
    assert r.status_code == 200
    assert r.json()["player"] == 2
    assert len(calls) == 1


def test_move_waits_for_the_game_lock():
    game_id = new_game(difficulty=1, seed=7)["game_id"]
    game = main.games[game_id]
    results = []

    with game.lock:
        t = threading.Thread(
            target=lambda: results.append(main.move(game_id, MoveIn(x=0, y=0, z=0)))
        )
        t.start()
        t.join(timeout=0.2)
        assert t.is_alive()
        assert game.board.nfilled == 0
    t.join(timeout=5)
    assert not t.is_alive()
    assert results[0]["status"] == "ok"
    assert game.board.nfilled == 2


def test_concurrent_auto_steps_keep_board_and_lines_in_step():
    game_id = new_game(computer=None, difficulty=1000, seed=11)["game_id"]
    game = main.games[game_id]

    with ThreadPoolExecutor(max_workers=8) as pool:
        steps = pool.map(lambda _: main.auto_step_game(game_id), range(80))
        statuses = [s["status"] for s in steps]

    assert game.game_over
    assert statuses.count("win") + statuses.count("draw") == 1
    assert statuses.count("ok") + 1 == game.board.nfilled
    filled = sum(1 for i in range(64) if game.board.in_use(i))
    assert filled == game.board.nfilled
    rebuilt = ComboSet.from_board(game.board)
    if not game.combos.decided:
        assert rebuilt.live_count == game.combos.live_count
    assert rebuilt.winner == game.combos.winner == game.board.winner
