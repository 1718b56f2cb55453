import math

import pytest

from lgbmfit.estimators import LGBMBinary, LGBMRegression
from lgbmfit.training_loop import TrainingLoop, TrainingState

# --- Helpers ---

def rows(values):
    return [[value] for value in values]


def run_loop(estimator, engine, tests_names, logger):
    booster = engine.create_booster(None, "")
    loop = TrainingLoop(estimator, engine, booster, tests_names, logger)
    return loop, loop.run()

# --- Test Cases ---

class TestTrainingLoop:

    @pytest.mark.parametrize("num_iterations, metric_freq", [(10, 1), (10, 3), (7, 7), (5, 2), (1, 4)])
    def test_runs_full_budget_without_patience(self, make_engine, mock_logger, num_iterations, metric_freq):
        estimator = LGBMRegression(
            num_iterations=num_iterations, metric_freq=metric_freq, is_training_metric=True
        )
        scores = rows([1.0 + i for i in range(num_iterations)])
        engine = make_engine(["l2"], {0: scores, 1: scores})

        loop, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        expected_rounds = math.ceil(num_iterations / metric_freq)
        assert engine.update_one_iteration.call_count == num_iterations
        assert result.state is TrainingState.EXHAUSTED
        assert loop.state is TrainingState.EXHAUSTED
        assert result.iterations_run == num_iterations
        for series in result.to_dict().values():
            assert len(series["l2"]) == expected_rounds

    def test_early_stopping_scenario(self, make_engine, mock_logger):
        """budget=10, freq=1, patience=3, raw [1,2,3,2,1,0,...] stops at 6 keeping [1,2,3]."""
        estimator = LGBMBinary(num_iterations=10, metric=["auc"], early_stopping_round=3)
        engine = make_engine(["auc"], {1: rows([1, 2, 3, 2, 1, 0, 0, 0, 0, 0])})

        _, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        assert engine.update_one_iteration.call_count == 6
        assert result.state is TrainingState.EARLY_STOPPED
        assert result.iterations_run == 6
        assert result.best_iteration == 3
        assert result.to_dict() == {"test_1": {"auc": [1.0, 2.0, 3.0]}}

    def test_early_stopping_truncation_with_frequency(self, make_engine, mock_logger):
        """Best at 5 with patience 4 stops at 9; every sequence keeps ceil(5/2) rounds."""
        estimator = LGBMBinary(
            num_iterations=20, metric=["auc"], metric_freq=2,
            early_stopping_round=4, is_training_metric=True,
        )
        scores = rows([1, 2, 3, 4, 5] + [5] * 15)
        engine = make_engine(["auc"], {0: scores, 1: scores})

        _, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        assert result.state is TrainingState.EARLY_STOPPED
        assert result.iterations_run == 9
        assert result.best_iteration == 5
        assert result.to_dict() == {
            "training": {"auc": [1.0, 3.0, 5.0]},
            "test_1": {"auc": [1.0, 3.0, 5.0]},
        }

    def test_decreasing_loss_never_stops(self, make_engine, mock_logger):
        estimator = LGBMRegression(num_iterations=10, early_stopping_round=1)
        engine = make_engine(["l2"], {1: rows([1.0 / i for i in range(1, 11)])})

        _, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        assert result.state is TrainingState.EXHAUSTED
        assert len(result.to_dict()["test_1"]["l2"]) == 10

    def test_ties_advance_patience(self, make_engine, mock_logger):
        estimator = LGBMBinary(num_iterations=10, metric=["auc"], early_stopping_round=2)
        engine = make_engine(["auc"], {1: rows([0.5] * 10)})

        _, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        assert result.state is TrainingState.EARLY_STOPPED
        assert result.iterations_run == 3
        assert result.to_dict() == {"test_1": {"auc": [0.5]}}

    @pytest.mark.parametrize("converge_at, metric_freq, expected_len", [(4, 1, 3), (6, 2, 3), (5, 2, 2)])
    def test_engine_convergence_truncates_to_previous_iteration(
            self, make_engine, mock_logger, converge_at, metric_freq, expected_len):
        estimator = LGBMRegression(num_iterations=10, metric_freq=metric_freq)
        engine = make_engine(["l2"], {1: rows([1.0] * 10)}, converge_at=converge_at)

        _, result = run_loop(estimator, engine, ["test_1"], mock_logger)

        assert result.state is TrainingState.CONVERGED
        assert result.iterations_run == converge_at - 1
        assert engine.update_one_iteration.call_count == converge_at
        assert len(result.to_dict()["test_1"]["l2"]) == expected_len
        mock_logger.info.assert_any_call(
            "Stopped training because there are no more leaves that meet the split requirements."
        )

    def test_convergence_on_first_iteration_records_nothing(self, make_engine, mock_logger):
        estimator = LGBMRegression(num_iterations=10, is_training_metric=True)
        engine = make_engine(["l2"], {0: rows([1.0] * 10)}, converge_at=1)

        _, result = run_loop(estimator, engine, [], mock_logger)

        assert result.state is TrainingState.CONVERGED
        assert result.iterations_run == 0
        assert result.to_dict() == {}
        engine.get_eval.assert_not_called()

    def test_training_only_scenario(self, make_engine, mock_logger):
        """budget=5, freq=2, training tracked: three rounds from iterations 1, 3 and 5."""
        estimator = LGBMRegression(num_iterations=5, metric_freq=2, is_training_metric=True)
        engine = make_engine(["l2"], {0: rows([0.5, 0.4, 0.3, 0.2, 0.1])})

        _, result = run_loop(estimator, engine, [], mock_logger)

        assert result.state is TrainingState.EXHAUSTED
        assert result.to_dict() == {"training": {"l2": [0.5, 0.3, 0.1]}}

    def test_elapsed_time_logged_per_iteration(self, make_engine, mock_logger):
        estimator = LGBMRegression(num_iterations=3)
        engine = make_engine(["l2"], {})

        run_loop(estimator, engine, [], mock_logger)

        iteration_lines = [
            c.args[0] for c in mock_logger.debug.call_args_list if "finished iteration" in c.args[0]
        ]
        assert len(iteration_lines) == 3
        assert iteration_lines[-1].endswith("finished iteration 3")
