import logging
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from lgbmfit.base import BaseEngine
from lgbmfit.engine import BoostingEngine, LightGBMEngine
from lgbmfit.estimators import LGBMEstimator
from lgbmfit.logging_config import get_training_logger
from lgbmfit.utils import constants
from lgbmfit.utils.error_handling import handle_engine_errors
from lgbmfit.utils.exceptions import PredictionError
from lgbmfit.utils.file_io import save_dataframe

class PredictionEngine(BaseEngine):
    """
    Generates predictions with the booster attached to a fitted estimator.
    """

    def __init__(self, config: Dict[str, Any], logger: logging.Logger,
                 engine: Optional[BoostingEngine] = None):
        super().__init__(config, logger)
        self.engine = engine or LightGBMEngine(logger)

    def _get_engine_directory_name(self) -> str:
        return constants.PREDICTIONS_DIR

    @handle_engine_errors("Prediction", PredictionError)
    def execute(self, estimator: LGBMEstimator, X: Any, split_name: str = "predict") -> np.ndarray:
        """
        Predict for every row of X.

        Parameters:
            estimator: Estimator fitted by `fit`.
            X: Feature matrix with the training column layout.
            split_name: Label used for the saved predictions file.

        Returns:
            Array of predictions; one column per class for multiclass models.
        """
        if not estimator.is_fitted():
            raise PredictionError("Estimator has no booster; call fit first.")

        matrix = X.to_numpy() if isinstance(X, pd.DataFrame) else np.asarray(X)
        if matrix.ndim != 2:
            raise PredictionError(f"Features must be a 2D matrix, got {matrix.ndim} dimension(s)")

        self.logger.info(f"Generating predictions for {split_name} set ({len(matrix)} samples)...")
        preds = self.engine.predict(estimator.booster, matrix)

        if self.output_dir is not None and self.config.get('outputs', {}).get('save_predictions', True):
            frame = pd.DataFrame(preds.reshape(len(matrix), -1))
            frame.columns = [f"pred_{i}" for i in range(frame.shape[1])]
            save_path = self.output_dir / f"predictions_{split_name}.csv"
            save_dataframe(frame, save_path, index=False)
            self.logger.info(f"Predictions saved to {save_path}")

        return preds


def predict(estimator: LGBMEstimator, X: Any, verbosity: int = 1,
            engine: Optional[BoostingEngine] = None) -> np.ndarray:
    """Predict with a fitted estimator."""
    logger = get_training_logger(verbosity)
    return PredictionEngine({}, logger, engine).execute(estimator, X)
