# 環境変数から読む設定（起動時に一度だけ）
import os
from typing import Optional

# ========== AI ==========
# ルールの難易度しきい値。1000 なら全ルールが有効
DEFAULT_DIFFICULTY = int(os.environ.get("FOUR_GAME_DIFFICULTY", "1000"))


def _optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else None


# 乱数シード（未指定ならシードしない）
RANDOM_SEED: Optional[int] = _optional_int("FOUR_GAME_SEED")

# ========== ログ ==========
LOG_LEVEL = os.environ.get("FOUR_GAME_LOG_LEVEL", "INFO").upper()

# ========== サーバー ==========
HOST = os.environ.get("FOUR_GAME_HOST", "127.0.0.1")
PORT = int(os.environ.get("FOUR_GAME_PORT", "8000"))

# ========== クライアント ==========
SERVER_URL = os.environ.get("FOUR_GAME_SERVER", f"http://{HOST}:{PORT}")
