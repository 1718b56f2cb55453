import logging
import json
from pathlib import Path
from unittest.mock import ANY, call

import numpy as np
import pandas as pd
import pytest

from lgbmfit.estimators import LGBMBinary, LGBMRegression
from lgbmfit.fit_orchestrator import FitOrchestrator, fit
from lgbmfit.training_loop import TrainingState
from lgbmfit.utils.exceptions import ConfigError, EngineError

# --- Fixtures ---

@pytest.fixture
def train_data():
    rng = np.random.default_rng(0)
    return rng.random((30, 4)), rng.random(30)


@pytest.fixture
def valid_data():
    rng = np.random.default_rng(1)
    return rng.random((10, 4)), rng.random(10)


def rows(values):
    return [[value] for value in values]

# --- Test Cases ---

class TestFitOrchestrator:

    def test_datasets_and_booster_wiring(self, make_engine, mock_logger, train_data, valid_data):
        estimator = LGBMRegression(num_iterations=3, categorical_feature=[2])
        engine = make_engine(["l2"], {1: rows([0.3, 0.2, 0.1]), 2: rows([0.3, 0.2, 0.1])})
        orchestrator = FitOrchestrator({}, mock_logger, engine)

        orchestrator.execute(estimator, *train_data, valid_data, valid_data, verbosity=2)

        ds_params = "is_sparse=true max_bin=255 data_random_seed=1 categorical_feature=1"
        create_calls = engine.create_dataset.call_args_list
        assert len(create_calls) == 3
        assert create_calls[0] == call(ANY, ds_params, row_major=False)
        train_ds = engine.set_field.call_args_list[0].args[0]
        for test_call in create_calls[1:]:
            assert test_call.args[1] == ds_params
            assert test_call.kwargs['reference'] is train_ds

        booster_params = engine.create_booster.call_args.args[1]
        assert booster_params.startswith("application=regression ")
        assert booster_params.endswith(" verbosity=2")

        assert estimator.booster is engine.create_booster.return_value
        assert [c.args[2] for c in engine.add_validation_data.call_args_list] == ["test_1", "test_2"]
        assert all(c.args[1] == "label" for c in engine.set_field.call_args_list)

    def test_returns_score_history(self, make_engine, mock_logger, train_data, valid_data):
        estimator = LGBMBinary(num_iterations=10, metric=["auc"], early_stopping_round=3)
        engine = make_engine(["auc"], {1: rows([1, 2, 3, 2, 1, 0, 0, 0, 0, 0])})
        orchestrator = FitOrchestrator({}, mock_logger, engine)

        results = orchestrator.execute(estimator, *train_data, valid_data)

        assert results == {"test_1": {"auc": [1.0, 2.0, 3.0]}}
        assert orchestrator.last_result.state is TrainingState.EARLY_STOPPED

    def test_accepts_dataframes(self, make_engine, mock_logger, train_data):
        X, y = train_data
        estimator = LGBMRegression(num_iterations=2, is_training_metric=True)
        engine = make_engine(["l2"], {0: rows([0.2, 0.1])})

        results = FitOrchestrator({}, mock_logger, engine).execute(
            estimator, pd.DataFrame(X), pd.Series(y)
        )

        assert results == {"training": {"l2": [0.2, 0.1]}}
        passed = engine.create_dataset.call_args.args[0]
        assert isinstance(passed, np.ndarray) and passed.shape == (30, 4)

    def test_mismatched_validation_types(self, make_engine, mock_logger, train_data, valid_data):
        engine = make_engine(["l2"], {})
        bad_X = valid_data[0].astype(np.float32)

        with pytest.raises(ConfigError, match="do not match"):
            FitOrchestrator({}, mock_logger, engine).execute(
                LGBMRegression(), *train_data, (bad_X, valid_data[1])
            )
        engine.create_dataset.assert_not_called()

    def test_mismatched_feature_count(self, make_engine, mock_logger, train_data, valid_data):
        engine = make_engine(["l2"], {})
        with pytest.raises(ConfigError, match="3 features"):
            FitOrchestrator({}, mock_logger, engine).execute(
                LGBMRegression(), *train_data, (valid_data[0][:, :3], valid_data[1])
            )

    def test_inconsistent_lengths(self, make_engine, mock_logger, train_data):
        engine = make_engine(["l2"], {})
        X, y = train_data
        with pytest.raises(ConfigError, match="Training set"):
            FitOrchestrator({}, mock_logger, engine).execute(LGBMRegression(), X, y[:-1])

    def test_non_matrix_features(self, make_engine, mock_logger):
        engine = make_engine(["l2"], {})
        with pytest.raises(ConfigError, match="2D matrix"):
            FitOrchestrator({}, mock_logger, engine).execute(LGBMRegression(), np.ones(5), np.ones(5))

    def test_non_numeric_features(self, make_engine, mock_logger):
        engine = make_engine(["l2"], {})
        X = np.array([["a", "b"], ["c", "d"]])
        with pytest.raises(ConfigError, match="numeric"):
            FitOrchestrator({}, mock_logger, engine).execute(LGBMRegression(), X, np.ones(2))

    def test_engine_error_propagates_unchanged(self, make_engine, mock_logger, train_data):
        engine = make_engine(["l2"], {})
        engine.create_booster.side_effect = EngineError("booster exploded")

        with pytest.raises(EngineError, match="booster exploded"):
            FitOrchestrator({}, mock_logger, engine).execute(LGBMRegression(), *train_data)
        engine.update_one_iteration.assert_not_called()

    def test_artifacts_saved_to_output_dir(self, make_engine, mock_logger, train_data, tmp_path):
        config = {'outputs': {'base_results_dir': str(tmp_path), 'save_history': True}}
        estimator = LGBMRegression(num_iterations=2, is_training_metric=True)
        engine = make_engine(["l2"], {0: rows([0.2, 0.1])})

        FitOrchestrator(config, mock_logger, engine).execute(estimator, *train_data)

        output_dir = Path(tmp_path) / "02_TrainingHistory"
        with open(output_dir / "score_history.json") as f:
            assert json.load(f) == {"training": {"l2": [0.2, 0.1]}}
        with open(output_dir / "training_metadata.json") as f:
            metadata = json.load(f)
        assert metadata['state'] == "exhausted"
        assert metadata['iterations_run'] == 2
        assert metadata['input_shape'] == [30, 4]

        table = pd.read_csv(output_dir / "score_history.csv")
        assert table["iteration"].tolist() == [1, 2]
        assert table["score"].tolist() == [0.2, 0.1]

    @pytest.mark.parametrize("params, message", [
        ({"num_iterations": 0}, "num_iterations must be >= 1"),
        ({"metric_freq": 0}, "metric_freq must be >= 1"),
        ({"early_stopping_round": -1}, "early_stopping_round must be >= 0"),
    ])
    def test_schedule_rejected_before_engine_calls(self, make_engine, mock_logger, train_data,
                                                    valid_data, params, message):
        estimator = LGBMRegression(**params)
        engine = make_engine(["l2"], {})

        with pytest.raises(ConfigError, match=message):
            FitOrchestrator({}, mock_logger, engine).execute(estimator, *train_data, valid_data)

        engine.create_dataset.assert_not_called()
        engine.create_booster.assert_not_called()
        assert not estimator.is_fitted()

    def test_no_artifacts_without_output_dir(self, make_engine, mock_logger):
        orchestrator = FitOrchestrator({}, mock_logger, make_engine(["l2"], {}))
        assert orchestrator.output_dir is None


class TestFitFunction:

    def test_fit_returns_dict(self, make_engine, train_data, valid_data):
        estimator = LGBMRegression(num_iterations=3, metric_freq=2)
        engine = make_engine(["l2"], {1: rows([0.3, 0.2, 0.1])})

        results = fit(estimator, *train_data, valid_data, verbosity=-1, engine=engine)

        assert results == {"test_1": {"l2": [0.3, 0.1]}}
        assert estimator.is_fitted()
        assert engine.create_booster.call_args.args[1].endswith("verbosity=-1")

    def test_fit_rejects_zero_metric_freq(self, make_engine, train_data, valid_data):
        engine = make_engine(["l2"], {})
        with pytest.raises(ConfigError, match="metric_freq must be >= 1"):
            fit(LGBMRegression(metric_freq=0), *train_data, valid_data, verbosity=-1, engine=engine)
        engine.create_booster.assert_not_called()

    def test_progress_reaches_caller_handlers(self, make_engine, train_data, valid_data, caplog):
        engine = make_engine(["l2"], {1: rows([0.3, 0.2])})

        with caplog.at_level(logging.INFO, logger="lgbmfit.training"):
            fit(LGBMRegression(num_iterations=2), *train_data, valid_data, verbosity=1, engine=engine)

        assert "Iteration: 1, test_1's l2: 0.3" in caplog.text
        assert logging.getLogger("lgbmfit.training").level == logging.INFO
