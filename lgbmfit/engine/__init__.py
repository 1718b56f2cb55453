"""
Boosting Engine Module
======================

Responsibility:
- Declares the operations the training driver needs from a boosting engine.
- Provides the LightGBM-backed implementation used in production.
"""

from .base_engine import BoostingEngine
from .lightgbm_engine import LightGBMEngine, parse_param_string

__all__ = ['BoostingEngine', 'LightGBMEngine', 'parse_param_string']
