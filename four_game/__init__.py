"""4x4x4 立体四目並べ（ルールベースAI＋対戦サーバー）"""

__version__ = "0.1.0"
