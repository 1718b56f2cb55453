"""
lgbmfit
=======

Gradient-boosting training driver: runs boosting iterations, evaluates
metrics on the training and validation sets, records score history and
applies early stopping.
"""

from lgbmfit.estimators import LGBMEstimator, LGBMRegression, LGBMBinary, LGBMMulticlass
from lgbmfit.fit_orchestrator import FitOrchestrator, fit
from lgbmfit.prediction_engine import PredictionEngine, predict
from lgbmfit.training_loop import TrainingLoop, TrainingResult, TrainingState
from lgbmfit.score_store import ScoreStore
from lgbmfit.utils.exceptions import LGBMFitException, ConfigError, EngineError, PredictionError

__version__ = "0.1.0"

__all__ = [
    'LGBMEstimator', 'LGBMRegression', 'LGBMBinary', 'LGBMMulticlass',
    'FitOrchestrator', 'fit', 'PredictionEngine', 'predict',
    'TrainingLoop', 'TrainingResult', 'TrainingState', 'ScoreStore',
    'LGBMFitException', 'ConfigError', 'EngineError', 'PredictionError',
]
