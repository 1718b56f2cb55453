import logging
from typing import Dict, List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from lgbmfit.engine import BoostingEngine


def scripted_engine(metric_names: Sequence[str],
                    scores_by_slot: Dict[int, List[Sequence[float]]],
                    converge_at: Optional[int] = None) -> MagicMock:
    """
    MagicMock engine replaying per-iteration scores.

    scores_by_slot maps a dataset slot to one entry per iteration; each entry
    holds the scores of every metric in `metric_names` order.
    """
    engine = MagicMock(spec=BoostingEngine)
    state = {'iteration': 0}

    def update(booster):
        state['iteration'] += 1
        return converge_at is not None and state['iteration'] >= converge_at

    def get_eval(booster, slot):
        return list(scores_by_slot[slot][state['iteration'] - 1])

    engine.update_one_iteration.side_effect = update
    engine.get_eval.side_effect = get_eval
    engine.get_eval_names.return_value = list(metric_names)
    engine.create_dataset.side_effect = lambda *args, **kwargs: MagicMock(name="dataset")
    engine.create_booster.return_value = MagicMock(name="booster")
    engine.state = state
    return engine


@pytest.fixture
def make_engine():
    """Factory for scripted MagicMock engines."""
    return scripted_engine


@pytest.fixture
def mock_logger():
    """Provides a mock logger."""
    return MagicMock(spec=logging.Logger)
