#!/usr/bin/env python
"""
lgbmfit - Main Entry Point
Fits a gradient-boosting estimator from tabular files and reports its score history.
"""
import sys
import argparse
import traceback
from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

from lgbmfit.config_manager import ConfigurationManager
from lgbmfit.logging_config import LoggingConfigurator, get_training_logger
from lgbmfit.fit_orchestrator import FitOrchestrator
from lgbmfit.prediction_engine import PredictionEngine
from lgbmfit.score_store import ScoreStore
from lgbmfit.utils.exceptions import LGBMFitException, ConfigError
from lgbmfit.utils.file_io import read_dataframe


def parse_arguments(argv=None):
    """
    Parse command-line arguments for a training run.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="lgbmfit - gradient boosting training driver",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )

    parser.add_argument(
        "--train",
        type=str,
        required=True,
        help="Training data file (.csv or .parquet)"
    )

    parser.add_argument(
        "--valid",
        type=str,
        action="append",
        default=[],
        help="Validation data file; repeat for several validation sets (test_1, test_2, ...)"
    )

    parser.add_argument(
        "--label-column",
        type=str,
        default="label",
        help="Name of the label column in every data file"
    )

    parser.add_argument(
        "--predict",
        type=str,
        default=None,
        help="Optional data file to predict after training"
    )

    parser.add_argument(
        "--verbosity",
        type=int,
        default=None,
        help="Override training.verbosity (<0 fatal, 0 warnings, 1 info, >1 debug)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration without training"
    )

    return parser.parse_args(argv)


def load_xy(path: str, label_column: str) -> Tuple[np.ndarray, np.ndarray]:
    """Split a data file into a float64 feature matrix and label vector."""
    df = read_dataframe(Path(path))
    if label_column not in df.columns:
        raise ConfigError(f"Label column '{label_column}' not found in {path}")
    X = df.drop(columns=[label_column]).to_numpy(dtype=np.float64)
    y = df[label_column].to_numpy(dtype=np.float64)
    return X, y


def load_features(path: str, label_column: str) -> np.ndarray:
    """Feature matrix of a data file, ignoring the label column when present."""
    df = read_dataframe(Path(path))
    return df.drop(columns=[label_column], errors="ignore").to_numpy(dtype=np.float64)


def summarize(scores: ScoreStore) -> pd.DataFrame:
    """Final score of every recorded dataset/metric pair."""
    rows = []
    for dataset_name in scores:
        for metric_name, values in scores[dataset_name].items():
            rows.append({
                'dataset': dataset_name,
                'metric': metric_name,
                'rounds': len(values),
                'final_score': values[-1] if len(values) else np.nan,
            })
    return pd.DataFrame(rows, columns=['dataset', 'metric', 'rounds', 'final_score'])


def main(argv=None):
    """
    Main orchestration function.

    Returns:
        int: Exit code (0 for success, 1 for errors)
    """
    logger = None

    try:
        args = parse_arguments(argv)

        # 1. Load and validate configuration
        config_manager = ConfigurationManager(config_path=args.config)
        config = config_manager.load_and_validate()
        estimator = config_manager.build_estimator()

        training_cfg = config.get('training', {})
        verbosity = args.verbosity if args.verbosity is not None else training_cfg.get('verbosity', 1)

        # 2. Setup logging
        LoggingConfigurator(config).setup()
        logger = get_training_logger(verbosity)
        logger.info(f"Configuration loaded from: {args.config}")

        run_id = config_manager.generate_run_id()
        base_dir = config.get('outputs', {}).get('base_results_dir')
        if base_dir:
            config_manager.save_artifacts(base_dir)
            logger.info(f"Run ID: {run_id}, output directory: {base_dir}")

        if args.dry_run:
            logger.info("Dry run mode: validation complete. Exiting without training.")
            print("\n[SUCCESS] Configuration validated successfully.")
            return 0

        # 3. Load data
        X, y = load_xy(args.train, args.label_column)
        tests = [load_xy(path, args.label_column) for path in args.valid]
        logger.info(f"Training data: {X.shape[0]} rows, {X.shape[1]} features; {len(tests)} validation set(s)")

        # 4. Fit
        orchestrator = FitOrchestrator(config, logger)
        orchestrator.execute(
            estimator, X, y, *tests,
            verbosity=verbosity,
            is_row_major=training_cfg.get('is_row_major', False),
        )
        result = orchestrator.last_result
        logger.info(f"Training finished: {result.state.value} after {result.iterations_run} iterations")

        if len(result.scores):
            summary = summarize(result.scores)
            print(summary.to_string(index=False))

        # 5. Optional prediction
        if args.predict:
            pred_X = load_features(args.predict, args.label_column)
            preds = PredictionEngine(config, logger, orchestrator.engine).execute(estimator, pred_X, "predict")
            logger.info(f"Generated {len(preds)} predictions")

        return 0

    except LGBMFitException as e:
        msg = f"Training Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Training interrupted by user.")
        if logger:
            logger.warning("Training interrupted by user (Ctrl+C)")
        return 130


if __name__ == "__main__":
    sys.exit(main())
