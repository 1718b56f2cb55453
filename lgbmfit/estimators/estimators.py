from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


@dataclass
class LGBMEstimator:
    """
    Hyperparameters shared by every boosting objective.

    Field names follow the engine's parameter names so they can be serialized
    directly. `categorical_feature` holds one-based column positions.
    """
    application: str = field(default="regression", init=False)

    # Training budget and evaluation
    num_iterations: int = 10
    metric: List[str] = field(default_factory=list)
    metric_freq: int = 1
    is_training_metric: bool = False
    early_stopping_round: int = 0
    ndcg_at: List[int] = field(default_factory=list)

    # Tree growth
    learning_rate: float = 0.1
    num_leaves: int = 31
    max_depth: int = -1
    tree_learner: str = "serial"
    num_threads: int = 0
    histogram_pool_size: float = -1.0
    min_data_in_leaf: int = 20
    min_sum_hessian_in_leaf: float = 1e-3
    lambda_l1: float = 0.0
    lambda_l2: float = 0.0
    min_gain_to_split: float = 0.0

    # Sampling
    feature_fraction: float = 1.0
    feature_fraction_seed: int = 2
    bagging_fraction: float = 1.0
    bagging_freq: int = 0
    bagging_seed: int = 3

    # Dataset construction
    max_bin: int = 255
    data_random_seed: int = 1
    is_sparse: bool = True
    categorical_feature: List[int] = field(default_factory=list)

    booster: Optional[Any] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def parameter_names(cls) -> List[str]:
        """Names accepted by the constructor."""
        return [f.name for f in fields(cls) if f.init]

    def is_fitted(self) -> bool:
        return self.booster is not None


@dataclass
class LGBMRegression(LGBMEstimator):
    application: str = field(default="regression", init=False)
    metric: List[str] = field(default_factory=lambda: ["l2"])


@dataclass
class LGBMBinary(LGBMEstimator):
    application: str = field(default="binary", init=False)
    metric: List[str] = field(default_factory=lambda: ["binary_logloss"])
    sigmoid: float = 1.0
    is_unbalance: bool = False


@dataclass
class LGBMMulticlass(LGBMEstimator):
    application: str = field(default="multiclass", init=False)
    metric: List[str] = field(default_factory=lambda: ["multi_logloss"])
    num_class: int = 2


ESTIMATOR_TYPES: Dict[str, type] = {
    'regression': LGBMRegression,
    'binary': LGBMBinary,
    'multiclass': LGBMMulticlass,
}
