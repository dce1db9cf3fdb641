"""
Base output formatter - Abstract base class for formatters.
"""

from abc import ABC, abstractmethod
from ..services import BatchResult


class OutputFormatter(ABC):
    """
    Abstract base class for output formatters.

    Design Pattern: Strategy Pattern
    Different formatters for different output styles (list, table, JSON).
    """

    @abstractmethod
    def format(self, result: BatchResult) -> str:
        """
        Format a batch result for output.

        Args:
            result: Batch result to format

        Returns:
            Formatted string for output
        """
        pass
