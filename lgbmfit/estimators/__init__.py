"""
Estimators Module
=================

Responsibility:
- Hyperparameter bags for the supported boosting objectives.
- Holds the booster handle attached by a fit call.
"""

from .estimators import (
    LGBMEstimator,
    LGBMRegression,
    LGBMBinary,
    LGBMMulticlass,
    ESTIMATOR_TYPES,
)

__all__ = ['LGBMEstimator', 'LGBMRegression', 'LGBMBinary', 'LGBMMulticlass', 'ESTIMATOR_TYPES']
