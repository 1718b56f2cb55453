import logging
from typing import Any, List, Optional, Sequence

import numpy as np

from lgbmfit.engine import BoostingEngine
from lgbmfit.score_store import ScoreStore
from lgbmfit.utils import constants


def metric_direction(metric_name: str) -> float:
    """+1 when larger values of `metric_name` are better, -1 otherwise."""
    base_name = metric_name.split("@", 1)[0]
    return 1.0 if base_name in constants.MAXIMIZE_METRICS else -1.0


class BestScoreLedger:
    """
    Best direction-normalized score and the iteration it occurred at, for
    every (metric, validation set) pair.
    """

    def __init__(self, metric_names: Sequence[str], n_tests: int):
        self.directions = np.array([metric_direction(name) for name in metric_names], dtype=float)
        self.best_score = np.full((len(metric_names), n_tests), -np.inf)
        self.best_iter = np.ones((len(metric_names), n_tests), dtype=int)

    def improve(self, metric_idx: int, test_idx: int, raw_score: float, iteration: int) -> bool:
        """Record `raw_score` if it strictly beats the best so far. Ties do not count."""
        score = self.directions[metric_idx] * raw_score
        if score > self.best_score[metric_idx, test_idx]:
            self.best_score[metric_idx, test_idx] = score
            self.best_iter[metric_idx, test_idx] = iteration
            return True
        return False

    def best_iteration(self, metric_idx: int, test_idx: int) -> int:
        return int(self.best_iter[metric_idx, test_idx])


class MetricEvaluator:
    """
    Evaluates the booster after each iteration.

    On evaluation rounds the training set (when tracked) and every validation
    set are scored, recorded and reported. When early stopping is enabled the
    validation sets are scored on every iteration so patience is counted in
    iterations rather than rounds.
    """

    def __init__(self, estimator: Any, engine: BoostingEngine, booster: Any,
                 tests_names: Sequence[str], metric_names: Sequence[str],
                 score_store: ScoreStore, ledger: BestScoreLedger, logger: logging.Logger):
        self.estimator = estimator
        self.engine = engine
        self.booster = booster
        self.tests_names = list(tests_names)
        self.metric_names = list(metric_names)
        self.score_store = score_store
        self.ledger = ledger
        self.logger = logger
        self.best_iteration: Optional[int] = None

    def is_eval_iteration(self, iteration: int) -> bool:
        return (iteration - 1) % self.estimator.metric_freq == 0

    def evaluate(self, iteration: int) -> bool:
        """
        Evaluate after `iteration`. Returns True when early stopping fired,
        in which case the score store has already been truncated to the best
        iteration.
        """
        on_frequency = self.is_eval_iteration(iteration)
        patience = self.estimator.early_stopping_round

        if on_frequency and self.estimator.is_training_metric:
            scores = self.engine.get_eval(self.booster, constants.TRAINING_SLOT)
            self._store_and_report(iteration, constants.TRAINING_SET_NAME, scores)

        if not (on_frequency or patience > 0):
            return False

        for test_idx, test_name in enumerate(self.tests_names):
            scores = self.engine.get_eval(self.booster, test_idx + 1)

            if on_frequency:
                self._store_and_report(iteration, test_name, scores)

            if patience > 0 and self._patience_exhausted(iteration, test_idx, scores):
                return True

        return False

    def _patience_exhausted(self, iteration: int, test_idx: int, scores: Sequence[float]) -> bool:
        patience = self.estimator.early_stopping_round
        for metric_idx in range(len(self.metric_names)):
            if self.ledger.improve(metric_idx, test_idx, scores[metric_idx], iteration):
                continue

            best_iter = self.ledger.best_iteration(metric_idx, test_idx)
            if iteration - best_iter >= patience:
                self.score_store.truncate(best_iter)
                self.best_iteration = best_iter
                self.logger.info(
                    f"Early stopping at iteration {iteration}, "
                    f"the best iteration round is {best_iter}"
                )
                return True
        return False

    def _store_and_report(self, iteration: int, dataset_name: str, scores: Sequence[float]) -> None:
        self.score_store.record_scores(dataset_name, iteration, self.metric_names, scores)
        self.logger.info(self._format_scores(iteration, dataset_name, scores))

    def _format_scores(self, iteration: int, dataset_name: str, scores: Sequence[float]) -> str:
        pairs: List[str] = [
            f"{metric_name}: {score}" for metric_name, score in zip(self.metric_names, scores)
        ]
        return f"Iteration: {iteration}, {dataset_name}'s {', '.join(pairs)}"
