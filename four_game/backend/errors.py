class InvalidMoveError(ValueError):
    """無効な着手（範囲外・埋まっているマス・手番違いなど）"""

    pass


class InvalidBoardError(ValueError):
    """盤面スナップショットの形式不正（サイズ・値・石数の不整合）"""

    pass


class EmptyValueSetError(RuntimeError):
    """空の ValueSet から手を選ぼうとした（呼び出し側の契約違反）"""

    pass
