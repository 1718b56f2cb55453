from typing import Dict, Iterator, List, Sequence

import numpy as np
import pandas as pd


class ScoreStore:
    """
    Score history indexed by evaluation round.

    Maps dataset name -> metric name -> float array with one slot per
    evaluation round. An array is created the first time its (dataset, metric)
    pair is written and is sized for every round the iteration budget allows,
    so unwritten slots hold NaN until `truncate` trims them away.
    """

    def __init__(self, num_iterations: int, metric_freq: int):
        if num_iterations < 1 or metric_freq < 1:
            raise ValueError("num_iterations and metric_freq must be positive")
        self.num_iterations = num_iterations
        self.metric_freq = metric_freq
        self.max_rounds = self.round_of(num_iterations)
        self._scores: Dict[str, Dict[str, np.ndarray]] = {}

    def round_of(self, iteration: int) -> int:
        """One-based evaluation round that `iteration` falls into."""
        return -(-iteration // self.metric_freq)

    def record(self, dataset_name: str, metric_name: str, iteration: int, value: float) -> None:
        series = self._scores.setdefault(dataset_name, {})
        if metric_name not in series:
            series[metric_name] = np.full(self.max_rounds, np.nan)

        values = series[metric_name]
        eval_round = self.round_of(iteration)
        if not 1 <= eval_round <= len(values):
            raise IndexError(
                f"Round {eval_round} (iteration {iteration}) is outside the "
                f"{len(values)} rounds allocated for {dataset_name}/{metric_name}"
            )
        values[eval_round - 1] = value

    def record_scores(self, dataset_name: str, iteration: int,
                      metric_names: Sequence[str], scores: Sequence[float]) -> None:
        """Record one evaluation of every metric for `dataset_name`."""
        for metric_name, score in zip(metric_names, scores):
            self.record(dataset_name, metric_name, iteration, score)

    def truncate(self, upto_iteration: int) -> None:
        """Drop every round after the one containing `upto_iteration`."""
        keep = max(self.round_of(upto_iteration), 0)
        for series in self._scores.values():
            for metric_name, values in series.items():
                series[metric_name] = values[:keep].copy()

    def __getitem__(self, dataset_name: str) -> Dict[str, np.ndarray]:
        return self._scores[dataset_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def to_dict(self) -> Dict[str, Dict[str, List[float]]]:
        return {
            dataset_name: {metric_name: values.tolist() for metric_name, values in series.items()}
            for dataset_name, series in self._scores.items()
        }

    def to_frame(self) -> pd.DataFrame:
        """Long-form history: one row per dataset, metric and round."""
        rows = []
        for dataset_name, series in self._scores.items():
            for metric_name, values in series.items():
                for round_idx, score in enumerate(values, start=1):
                    rows.append({
                        'dataset': dataset_name,
                        'metric': metric_name,
                        'round': round_idx,
                        'iteration': (round_idx - 1) * self.metric_freq + 1,
                        'score': score,
                    })
        return pd.DataFrame(rows, columns=['dataset', 'metric', 'round', 'iteration', 'score'])
