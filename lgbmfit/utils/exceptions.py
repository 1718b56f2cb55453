"""
Custom exception hierarchy for the lgbmfit training driver.
"""

class LGBMFitException(Exception):
    """Base exception for all training driver errors."""
    pass

class ConfigError(LGBMFitException):
    """Malformed or incompatible input data, or invalid configuration."""
    pass

class EngineError(LGBMFitException):
    """The boosting engine failed while building datasets, boosters or iterating."""
    pass

class PredictionError(LGBMFitException):
    """Prediction generation failed."""
    pass
