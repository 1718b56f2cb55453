import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.utils import check_consistent_length
from sklearn.utils.validation import column_or_1d

from lgbmfit.base import BaseEngine
from lgbmfit.engine import BoostingEngine, LightGBMEngine
from lgbmfit.estimators import LGBMEstimator
from lgbmfit.logging_config import get_training_logger
from lgbmfit.param_serializer import BOOSTER_PARAMS, DATASET_PARAMS, stringify_params
from lgbmfit.training_loop import TrainingLoop, TrainingResult
from lgbmfit.utils import constants
from lgbmfit.utils.error_handling import handle_engine_errors
from lgbmfit.utils.exceptions import ConfigError
from lgbmfit.utils.file_io import save_dataframe, save_json

ValidationPair = Tuple[Any, Any]


def _as_matrix(X: Any, what: str) -> np.ndarray:
    if isinstance(X, pd.DataFrame):
        X = X.to_numpy()
    matrix = np.asarray(X)
    if matrix.ndim != 2:
        raise ConfigError(f"{what} must be a 2D matrix, got {matrix.ndim} dimension(s)")
    if not np.issubdtype(matrix.dtype, np.number):
        raise ConfigError(f"{what} must be numeric, got dtype {matrix.dtype}")
    return matrix


def _as_labels(y: Any, what: str) -> np.ndarray:
    try:
        labels = column_or_1d(np.asarray(y))
    except ValueError as e:
        raise ConfigError(f"{what} must be a 1D vector: {e}") from e
    if not np.issubdtype(labels.dtype, np.number):
        raise ConfigError(f"{what} must be numeric, got dtype {labels.dtype}")
    return labels


def _check_pair(X: np.ndarray, y: np.ndarray, what: str) -> None:
    try:
        check_consistent_length(X, y)
    except ValueError as e:
        raise ConfigError(f"{what}: {e}") from e


def _check_schedule(estimator: LGBMEstimator) -> None:
    """Iteration budget, evaluation frequency and patience must be usable before anything is built."""
    if estimator.num_iterations < 1:
        raise ConfigError(f"num_iterations must be >= 1, got {estimator.num_iterations}")
    if estimator.metric_freq < 1:
        raise ConfigError(f"metric_freq must be >= 1, got {estimator.metric_freq}")
    if estimator.early_stopping_round < 0:
        raise ConfigError(
            f"early_stopping_round must be >= 0 (0 disables), got {estimator.early_stopping_round}"
        )


class FitOrchestrator(BaseEngine):
    """
    Fits an estimator: builds the training and validation datasets, creates
    the booster and runs the training loop.

    Validation sets are named test_1, test_2, ... in the order given, which is
    also the engine slot order used during evaluation.
    """

    def __init__(self, config: Dict[str, Any], logger: logging.Logger,
                 engine: Optional[BoostingEngine] = None):
        super().__init__(config, logger)
        self.engine = engine or LightGBMEngine(logger)
        self.last_result: Optional[TrainingResult] = None

    def _get_engine_directory_name(self) -> str:
        return constants.TRAINING_DIR

    @handle_engine_errors("Training")
    def execute(self, estimator: LGBMEstimator, X: Any, y: Any, *test: ValidationPair,
                verbosity: int = 1, is_row_major: bool = False) -> Dict[str, Dict[str, List[float]]]:
        """
        Fit `estimator` on X/y, evaluating on each (X, y) pair in `test`.

        Returns:
            dataset name -> metric name -> one score per evaluation round.
        """
        start_time = time.time()
        _check_schedule(estimator)
        train_X, train_y, tests = self._validate_inputs(X, y, test)

        self.logger.debug("Started creating LGBM training dataset")
        ds_parameters = stringify_params(estimator, DATASET_PARAMS)
        train_ds = self.engine.create_dataset(train_X, ds_parameters, row_major=is_row_major)
        self.engine.set_field(train_ds, constants.LABEL_FIELD, train_y)

        self.logger.debug("Started creating LGBM booster")
        bst_parameters = f"{stringify_params(estimator, BOOSTER_PARAMS)} verbosity={verbosity}".strip()
        estimator.booster = self.engine.create_booster(train_ds, bst_parameters)

        tests_names = []
        if tests:
            self.logger.debug("Started creating LGBM test datasets")
        for test_idx, (test_X, test_y) in enumerate(tests, start=1):
            test_name = constants.validation_set_name(test_idx)
            test_ds = self.engine.create_dataset(
                test_X, ds_parameters, reference=train_ds, row_major=is_row_major
            )
            self.engine.set_field(test_ds, constants.LABEL_FIELD, test_y)
            self.engine.add_validation_data(estimator.booster, test_ds, test_name)
            tests_names.append(test_name)

        self.logger.debug("Started training...")
        loop = TrainingLoop(estimator, self.engine, estimator.booster, tests_names, self.logger)
        result = loop.run()
        self.last_result = result

        duration = time.time() - start_time
        self.logger.debug(
            f"Training ended in state {result.state.value} after {result.iterations_run} "
            f"iterations ({duration:.2f} seconds)"
        )

        if self.output_dir is not None and self.config.get('outputs', {}).get('save_history', True):
            self._save_artifacts(estimator, result, train_X.shape, tests_names, duration)

        return result.to_dict()

    def _validate_inputs(self, X: Any, y: Any,
                         test: Tuple[ValidationPair, ...]) -> Tuple[np.ndarray, np.ndarray, List[Tuple[np.ndarray, np.ndarray]]]:
        train_X = _as_matrix(X, "Training features")
        train_y = _as_labels(y, "Training labels")
        _check_pair(train_X, train_y, "Training set")

        tests = []
        for test_idx, pair in enumerate(test, start=1):
            if len(pair) != 2:
                raise ConfigError(f"Validation set {test_idx} must be an (X, y) pair")
            test_X = _as_matrix(pair[0], f"Validation features {test_idx}")
            test_y = _as_labels(pair[1], f"Validation labels {test_idx}")
            _check_pair(test_X, test_y, f"Validation set {test_idx}")

            if test_X.dtype != train_X.dtype or test_y.dtype != train_y.dtype:
                raise ConfigError(
                    f"Validation set {test_idx} types ({test_X.dtype}, {test_y.dtype}) do not match "
                    f"training types ({train_X.dtype}, {train_y.dtype})"
                )
            if test_X.shape[1] != train_X.shape[1]:
                raise ConfigError(
                    f"Validation set {test_idx} has {test_X.shape[1]} features, "
                    f"training set has {train_X.shape[1]}"
                )
            tests.append((test_X, test_y))
        return train_X, train_y, tests

    def _save_artifacts(self, estimator: LGBMEstimator, result: TrainingResult,
                        input_shape: Tuple[int, ...], tests_names: List[str], duration: float) -> None:
        try:
            save_json(result.to_dict(), self.output_dir / constants.SCORE_HISTORY_FILE)
            save_dataframe(result.scores.to_frame(), self.output_dir / constants.SCORE_TABLE_FILE)
            metadata = {
                'estimator': type(estimator).__name__,
                'application': estimator.application,
                'num_iterations': estimator.num_iterations,
                'metric_freq': estimator.metric_freq,
                'early_stopping_round': estimator.early_stopping_round,
                'state': result.state.value,
                'iterations_run': result.iterations_run,
                'best_iteration': result.best_iteration,
                'validation_sets': tests_names,
                'input_shape': list(input_shape),
                'training_time_sec': duration,
                'timestamp': time.strftime("%Y-%m-%d %H:%M:%S"),
            }
            save_json(metadata, self.output_dir / constants.TRAINING_METADATA_FILE)
            self.logger.info(f"Training history saved to {self.output_dir}")
        except OSError as e:
            self.logger.warning(f"Failed to save training artifacts. Error: {e}")


def fit(estimator: LGBMEstimator, X: Any, y: Any, *test: ValidationPair, verbosity: int = 1,
        is_row_major: bool = False, engine: Optional[BoostingEngine] = None,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None) -> Dict[str, Dict[str, List[float]]]:
    """
    Fit `estimator` with features `X` and labels `y`, using each (X, y) pair
    in `test` as a validation set.

    Returns a dict with an entry per evaluated dataset ("training" when the
    estimator tracks the training set, then "test_1", "test_2", ...). Each
    entry maps metric names to the metric's value at every evaluation round.

    `verbosity` < 0 logs fatal messages only, 0 adds warnings, 1 adds info
    and > 1 adds debug output.

    Only the logger level is set here; progress and early-stopping messages
    are printed once the caller attaches a handler, e.g. with
    `logging.basicConfig()` or `LoggingConfigurator(config).setup()`.
    """
    logger = logger or get_training_logger(verbosity)
    orchestrator = FitOrchestrator(config or {}, logger, engine)
    return orchestrator.execute(estimator, X, y, *test, verbosity=verbosity, is_row_major=is_row_major)
