import logging
from typing import Any, Dict, List, Optional, Sequence

import lightgbm as lgb
import numpy as np

from lgbmfit.engine.base_engine import BoostingEngine
from lgbmfit.utils.error_handling import handle_engine_errors
from lgbmfit.utils.exceptions import ConfigError, EngineError
from lgbmfit.utils import constants


def parse_param_string(param_string: str) -> Dict[str, str]:
    """Split a `name=value name=value` string into a parameter dict."""
    params = {}
    for token in param_string.split():
        name, sep, value = token.partition("=")
        if not sep or not name:
            raise ConfigError(f"Malformed parameter token: {token!r}")
        params[name] = value
    return params


class LightGBMEngine(BoostingEngine):
    """
    BoostingEngine backed by the `lightgbm` package.

    Every LightGBM failure is logged and re-raised as EngineError.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @handle_engine_errors("Dataset construction", EngineError)
    def create_dataset(self, matrix: Any, param_string: str,
                       reference: Optional[lgb.Dataset] = None, row_major: bool = False) -> lgb.Dataset:
        data = np.asarray(matrix, order="C" if row_major else "F")
        dataset = lgb.Dataset(
            data,
            params=parse_param_string(param_string),
            reference=reference,
            free_raw_data=False,
        )
        return dataset.construct()

    @handle_engine_errors("Setting dataset field", EngineError)
    def set_field(self, dataset: lgb.Dataset, field_name: str, values: Sequence[float]) -> None:
        if field_name == constants.LABEL_FIELD:
            # Keeps the Python-side label in sync with the native handle
            dataset.set_label(values)
        else:
            dataset.set_field(field_name, np.asarray(values))

    @handle_engine_errors("Booster construction", EngineError)
    def create_booster(self, dataset: lgb.Dataset, param_string: str) -> lgb.Booster:
        return lgb.Booster(params=parse_param_string(param_string), train_set=dataset)

    @handle_engine_errors("Adding validation data", EngineError)
    def add_validation_data(self, booster: lgb.Booster, dataset: lgb.Dataset,
                            name: Optional[str] = None) -> None:
        if name is None:
            name = constants.validation_set_name(len(booster.valid_sets) + 1)
        booster.add_valid(dataset, name)

    @handle_engine_errors("Boosting iteration", EngineError)
    def update_one_iteration(self, booster: lgb.Booster) -> bool:
        return bool(booster.update())

    @handle_engine_errors("Reading evaluation names", EngineError)
    def get_eval_names(self, booster: lgb.Booster) -> List[str]:
        return [entry[1] for entry in self._eval_slot(booster, constants.TRAINING_SLOT)]

    @handle_engine_errors("Reading evaluation scores", EngineError)
    def get_eval(self, booster: lgb.Booster, slot: int) -> List[float]:
        return [float(entry[2]) for entry in self._eval_slot(booster, slot)]

    @handle_engine_errors("Prediction", EngineError)
    def predict(self, booster: lgb.Booster, matrix: Any) -> np.ndarray:
        return np.asarray(booster.predict(np.asarray(matrix)))

    def _eval_slot(self, booster: lgb.Booster, slot: int) -> list:
        # Entries are (dataset name, metric name, value, is_higher_better)
        if slot == constants.TRAINING_SLOT:
            return booster.eval(booster.train_set, constants.TRAINING_SET_NAME)
        if not 1 <= slot <= len(booster.valid_sets):
            raise EngineError(f"No dataset registered in slot {slot}")
        return booster.eval(booster.valid_sets[slot - 1], booster.name_valid_sets[slot - 1])
