import abc
import logging
from pathlib import Path
from typing import Dict, Any, Optional

class BaseEngine(abc.ABC):
    """
    Abstract base class for all training-driver engines.

    Provides common functionality for:
    - Configuration and logger attachment.
    - Optional output directory management for run artifacts.
    """

    def __init__(self, config: Dict[str, Any], logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.output_dir: Optional[Path] = None

        base_dir = self.config.get('outputs', {}).get('base_results_dir')
        if base_dir:
            self.output_dir = Path(base_dir) / self._get_engine_directory_name()
            self._setup_directories()

    @abc.abstractmethod
    def _get_engine_directory_name(self) -> str:
        """
        Determines the directory name for the engine's output.
        e.g., '02_TrainingHistory'
        This should be implemented by subclasses.
        """
        raise NotImplementedError("Subclasses must implement _get_engine_directory_name.")

    def _setup_directories(self):
        """
        Creates the output directory for the engine.
        """
        skip_dirs = self.config.get('outputs', {}).get('skip_dir_creation', False)
        if skip_dirs:
            # Directory creation explicitly disabled (compute-only helpers)
            return

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"Output directory for {self.__class__.__name__}: {self.output_dir}")

    @abc.abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """
        Main execution method for the engine.
        This must be implemented by all subclasses.
        """
        pass
