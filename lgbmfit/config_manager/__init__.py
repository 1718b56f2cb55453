"""
Configuration Manager Module
============================

Responsibility:
- Centralized loading and validation of JSON run configurations.
- Enforcement of schema constraints and hyperparameter bounds.
- Construction of the configured estimator.
"""

from .config_manager import ConfigurationManager, DEFAULT_SCHEMA

__all__ = ['ConfigurationManager', 'DEFAULT_SCHEMA']
