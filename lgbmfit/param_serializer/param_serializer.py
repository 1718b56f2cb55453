from dataclasses import fields, is_dataclass
from operator import attrgetter
from typing import Any, Callable, List, NamedTuple, Sequence, Set

import numpy as np


class ParamSpec(NamedTuple):
    """One engine parameter: its name, how to read it, and whether it is a one-based index."""
    name: str
    getter: Callable[[Any], Any]
    is_index: bool = False


def _spec(name: str, is_index: bool = False) -> ParamSpec:
    return ParamSpec(name, attrgetter(name), is_index)


# Parameters whose values are one-based positions; the engine counts from zero.
INDEX_PARAMS = frozenset({'categorical_feature'})

DATASET_PARAMS: List[ParamSpec] = [
    _spec(name, name in INDEX_PARAMS)
    for name in ('is_sparse', 'max_bin', 'data_random_seed', 'categorical_feature')
]

BOOSTER_PARAMS: List[ParamSpec] = [
    _spec(name, name in INDEX_PARAMS)
    for name in (
        'application', 'learning_rate', 'num_leaves', 'max_depth', 'tree_learner',
        'num_threads', 'histogram_pool_size', 'min_data_in_leaf', 'min_sum_hessian_in_leaf',
        'lambda_l1', 'lambda_l2', 'min_gain_to_split', 'feature_fraction',
        'feature_fraction_seed', 'bagging_fraction', 'bagging_freq', 'bagging_seed',
        'early_stopping_round', 'sigmoid', 'is_unbalance', 'metric', 'is_training_metric',
        'ndcg_at', 'num_class',
    )
]


def _recognized_fields(config: Any) -> Set[str]:
    if is_dataclass(config):
        return {f.name for f in fields(config)}
    return set(vars(config))


def _format_value(value: Any) -> str:
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    return str(value)


def stringify_params(config: Any, params: Sequence[ParamSpec]) -> str:
    """
    Serialize `config` into the engine's space separated `name=value` format.

    Parameters missing from the config are skipped, array values are comma
    joined (empty arrays are omitted) and index parameters are shifted to
    zero-based positions.
    """
    valid_names = _recognized_fields(config)
    tokens = []
    for spec in params:
        if spec.name not in valid_names:
            continue
        value = spec.getter(config)

        if isinstance(value, (list, tuple, np.ndarray)):
            entries = [entry - 1 if spec.is_index else entry for entry in value]
            if not entries:
                continue
            tokens.append(f"{spec.name}={','.join(_format_value(entry) for entry in entries)}")
        else:
            if spec.is_index:
                value -= 1
            tokens.append(f"{spec.name}={_format_value(value)}")
    return " ".join(tokens)
