from .training_loop import TrainingLoop, TrainingResult, TrainingState

__all__ = ['TrainingLoop', 'TrainingResult', 'TrainingState']
