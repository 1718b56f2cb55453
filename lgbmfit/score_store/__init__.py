from .score_store import ScoreStore

__all__ = ['ScoreStore']
