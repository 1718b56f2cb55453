import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from lgbmfit.engine import BoostingEngine
from lgbmfit.metric_evaluator import BestScoreLedger, MetricEvaluator
from lgbmfit.score_store import ScoreStore


class TrainingState(Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    EARLY_STOPPED = "early_stopped"
    EXHAUSTED = "exhausted"


@dataclass
class TrainingResult:
    """Outcome of one training loop run."""
    scores: ScoreStore
    state: TrainingState
    iterations_run: int
    best_iteration: Optional[int] = None

    def to_dict(self) -> Dict[str, Dict[str, List[float]]]:
        return self.scores.to_dict()


class TrainingLoop:
    """
    Drives boosting iterations until the budget is spent, the engine reports
    that no split is possible, or early stopping fires.
    """

    def __init__(self, estimator: Any, engine: BoostingEngine, booster: Any,
                 tests_names: Sequence[str], logger: logging.Logger):
        self.estimator = estimator
        self.engine = engine
        self.booster = booster
        self.tests_names = list(tests_names)
        self.logger = logger
        self.state = TrainingState.RUNNING

    def run(self) -> TrainingResult:
        start_time = time.perf_counter()
        self.state = TrainingState.RUNNING

        metric_names = self.engine.get_eval_names(self.booster)
        score_store = ScoreStore(self.estimator.num_iterations, self.estimator.metric_freq)
        ledger = BestScoreLedger(metric_names, len(self.tests_names))
        evaluator = MetricEvaluator(
            self.estimator, self.engine, self.booster, self.tests_names,
            metric_names, score_store, ledger, self.logger,
        )

        for iteration in range(1, self.estimator.num_iterations + 1):
            is_finished = self.engine.update_one_iteration(self.booster)
            self.logger.debug(
                f"{time.perf_counter() - start_time:.3f}s elapsed, finished iteration {iteration}"
            )

            if is_finished:
                # The iteration that reported convergence added nothing worth keeping
                score_store.truncate(iteration - 1)
                self.logger.info(
                    "Stopped training because there are no more leaves that meet the split requirements."
                )
                return self._finish(TrainingState.CONVERGED, score_store, iteration - 1)

            if evaluator.evaluate(iteration):
                return self._finish(
                    TrainingState.EARLY_STOPPED, score_store, iteration, evaluator.best_iteration
                )

        return self._finish(TrainingState.EXHAUSTED, score_store, self.estimator.num_iterations)

    def _finish(self, state: TrainingState, score_store: ScoreStore,
                iterations_run: int, best_iteration: Optional[int] = None) -> TrainingResult:
        self.state = state
        self.logger.debug(f"Training finished in state {state.value} after {iterations_run} iterations")
        return TrainingResult(score_store, state, iterations_run, best_iteration)
