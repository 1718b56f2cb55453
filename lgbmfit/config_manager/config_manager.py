import json
import os
import hashlib
import sys
import logging
import jsonschema
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from lgbmfit.estimators import ESTIMATOR_TYPES, LGBMEstimator
from lgbmfit.utils.exceptions import ConfigError
from lgbmfit.utils import constants

_INT = {"type": "integer"}
_NUMBER = {"type": "number"}
_BOOL = {"type": "boolean"}

DEFAULT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "estimator": {
            "type": "object",
            "properties": {
                "type": {"type": "string"},
                "num_iterations": _INT,
                "metric_freq": _INT,
                "early_stopping_round": _INT,
                "is_training_metric": _BOOL,
                "metric": {"type": "array", "items": {"type": "string"}},
                "ndcg_at": {"type": "array", "items": _INT},
                "categorical_feature": {"type": "array", "items": _INT},
                "learning_rate": _NUMBER,
                "num_leaves": _INT,
                "max_depth": _INT,
                "num_class": _INT,
                "feature_fraction": _NUMBER,
                "bagging_fraction": _NUMBER,
            },
            "required": ["type"],
        },
        "training": {
            "type": "object",
            "properties": {
                "verbosity": _INT,
                "is_row_major": _BOOL,
            },
        },
        "logging": {"type": "object", "properties": {"level": {"type": "string"}}},
        "outputs": {"type": "object", "properties": {"base_results_dir": {"type": "string"}}},
    },
    "required": ["estimator"],
}


class ConfigurationManager:
    """
    Manages run configuration loading, validation, and estimator construction.
    Acts as the single source of truth for a training run.
    """

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: Optional[str] = None):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to a JSON schema; the built-in schema is used when None.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Main entry point. Loads config, validates schema and logic.

        Returns:
            Dict[str, Any]: The validated configuration.

        Raises:
            ConfigError: If any validation step fails.
        """
        self.config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path) if self.schema_path else DEFAULT_SCHEMA

        self._validate_schema()
        self._validate_logic()

        return self.config

    def build_estimator(self) -> LGBMEstimator:
        """Instantiate the estimator described by the `estimator` section."""
        section = dict(self.config.get('estimator', {}))
        estimator_type = section.pop('type', None)
        if estimator_type not in ESTIMATOR_TYPES:
            raise ConfigError(
                f"Unknown estimator type: {estimator_type}. Available: {sorted(ESTIMATOR_TYPES)}"
            )

        estimator_cls = ESTIMATOR_TYPES[estimator_type]
        unknown = sorted(set(section) - set(estimator_cls.parameter_names()))
        if unknown:
            raise ConfigError(f"Unrecognized parameters for {estimator_type} estimator: {unknown}")

        estimator = estimator_cls(**section)
        self.logger.debug(f"Built {estimator_cls.__name__} from configuration")
        return estimator

    def generate_run_id(self) -> str:
        """
        Generate or retrieve a unique run identifier based on timestamp.
        Used for directory naming and metadata.
        """
        if not self.run_id:
            self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory for reproducibility.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. config_hash.txt: SHA256 hash for versioning.
        3. run_metadata.json: Environment details (Python version, Platform, etc.).
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        with open(config_dir / constants.CONFIG_USED_FILE, 'w') as f:
            json.dump(self.config, f, indent=2)

        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        with open(config_dir / constants.CONFIG_HASH_FILE, 'w') as f:
            f.write(config_hash)

        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }

        with open(config_dir / constants.RUN_METADATA_FILE, 'w') as f:
            json.dump(metadata, f, indent=2)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Logical validation of hyperparameter bounds."""
        est = self.config.get('estimator', {})

        if est.get('type') not in ESTIMATOR_TYPES:
            raise ConfigError(
                f"estimator.type must be one of {sorted(ESTIMATOR_TYPES)}, got {est.get('type')}"
            )
        if est.get('num_iterations', 10) < 1:
            raise ConfigError(f"num_iterations must be >= 1, got {est['num_iterations']}")
        if est.get('metric_freq', 1) < 1:
            raise ConfigError(f"metric_freq must be >= 1, got {est['metric_freq']}")
        if est.get('early_stopping_round', 0) < 0:
            raise ConfigError(
                f"early_stopping_round must be >= 0 (0 disables), got {est['early_stopping_round']}"
            )
        if est.get('learning_rate', 0.1) <= 0:
            raise ConfigError(f"learning_rate must be > 0, got {est['learning_rate']}")

        for key in ('feature_fraction', 'bagging_fraction'):
            value = est.get(key, 1.0)
            if not (0.0 < value <= 1.0):
                raise ConfigError(f"{key} must be in (0, 1], got {value}")

        if est.get('type') == 'multiclass' and est.get('num_class', 2) < 2:
            raise ConfigError(f"num_class must be >= 2 for multiclass, got {est['num_class']}")

        if any(position < 1 for position in est.get('categorical_feature', [])):
            raise ConfigError("categorical_feature positions are one-based and must be >= 1")

        level = self.config.get('logging', {}).get('level', 'INFO')
        if not isinstance(logging.getLevelName(level.upper()), int):
            raise ConfigError(f"logging.level is not a valid level name: {level}")

        verbosity = self.config.get('training', {}).get('verbosity', 1)
        if not isinstance(verbosity, int):
            raise ConfigError(f"training.verbosity must be an integer, got {verbosity}")
