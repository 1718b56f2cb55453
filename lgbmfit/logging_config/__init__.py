from .logging_config import LoggingConfigurator, verbosity_to_level, get_training_logger

__all__ = ['LoggingConfigurator', 'verbosity_to_level', 'get_training_logger']
