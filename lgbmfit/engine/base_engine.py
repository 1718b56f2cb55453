import abc
from typing import Any, List, Optional, Sequence

import numpy as np


class BoostingEngine(abc.ABC):
    """
    Operations the training driver calls on the external boosting engine.

    Dataset and booster handles are opaque to the driver. Dataset slot 0 is
    the training set; validation sets occupy slots 1..n in the order they were
    added.
    """

    @abc.abstractmethod
    def create_dataset(self, matrix: Any, param_string: str,
                       reference: Optional[Any] = None, row_major: bool = False) -> Any:
        """Build a dataset, sharing `reference`'s binning when given."""

    @abc.abstractmethod
    def set_field(self, dataset: Any, field_name: str, values: Sequence[float]) -> None:
        """Attach a per-row field such as the label."""

    @abc.abstractmethod
    def create_booster(self, dataset: Any, param_string: str) -> Any:
        """Create the booster bound to the training dataset."""

    @abc.abstractmethod
    def add_validation_data(self, booster: Any, dataset: Any, name: Optional[str] = None) -> None:
        """Register a validation dataset in the next free slot."""

    @abc.abstractmethod
    def update_one_iteration(self, booster: Any) -> bool:
        """Run one boosting iteration. True means no further splits are possible."""

    @abc.abstractmethod
    def get_eval_names(self, booster: Any) -> List[str]:
        """Ordered metric names reported by `get_eval`."""

    @abc.abstractmethod
    def get_eval(self, booster: Any, slot: int) -> List[float]:
        """Metric values for dataset `slot`, aligned with `get_eval_names`."""

    @abc.abstractmethod
    def predict(self, booster: Any, matrix: Any) -> np.ndarray:
        """Raw predictions of the booster for `matrix`."""
