"""
Fit Orchestrator Module
=======================

Responsibility:
- Validates feature matrices and labels for training and validation sets.
- Builds engine datasets and the booster, attaching it to the estimator.
- Runs the training loop and returns the recorded score history.
- Optionally persists the score history and training metadata (.json).
"""

from .fit_orchestrator import FitOrchestrator, fit

__all__ = ['FitOrchestrator', 'fit']
