"""
Output formatters - Strategy Pattern for different output styles.
"""

from .base_formatter import OutputFormatter
from .report_formatter import BatchReportFormatter

__all__ = [
    'OutputFormatter',
    'BatchReportFormatter',
]
