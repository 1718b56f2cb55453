# lgbmfit/utils/constants.py

# --- Score History Naming ---
# Dataset slot 0 is always the training set; validation sets follow in the
# order they were attached to the booster.
TRAINING_SET_NAME = "training"
TEST_SET_PREFIX = "test_"
TRAINING_SLOT = 0

# --- Metric Direction ---
# Base names (text before any '@') of metrics where larger values are better.
MAXIMIZE_METRICS = frozenset({"auc", "ndcg", "map", "average_precision"})

# --- Output Directories ---
CONFIG_DIR = "01_RunConfiguration"       # Run config, hash, metadata
TRAINING_DIR = "02_TrainingHistory"      # Score history and training metadata
PREDICTIONS_DIR = "03_Predictions"       # Predictions written by the CLI

# --- File Names ---
CONFIG_USED_FILE = "config_used.json"
CONFIG_HASH_FILE = "config_hash.txt"
RUN_METADATA_FILE = "run_metadata.json"
SCORE_HISTORY_FILE = "score_history.json"
SCORE_TABLE_FILE = "score_history.csv"
TRAINING_METADATA_FILE = "training_metadata.json"

# --- Engine Fields ---
LABEL_FIELD = "label"


def validation_set_name(index: int) -> str:
    """Name of the validation set attached at one-based position `index`."""
    return f"{TEST_SET_PREFIX}{index}"
