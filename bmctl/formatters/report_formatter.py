"""
Batch report formatter - per-host outcome of a batch operation.

Output format (list):
power-status: 2 host(s), 1 failed

  master-0    OK      On
  worker-0    FAILED  Redfish client error: ...
"""

import json
from typing import Any, Dict
from .base_formatter import OutputFormatter
from ..services import BatchResult, HostResult


def _display_value(value: Any) -> str:
    if value is None:
        return ""
    # enums (PowerState) print their raw value
    return str(getattr(value, "value", value))


class BatchReportFormatter(OutputFormatter):
    """
    Formatter listing each host with its status and value or error.

    Design Pattern: Strategy Pattern implementation
    """

    def __init__(self, output_format: str = "list"):
        """
        Initialize formatter.

        Args:
            output_format: Output format type ('list', 'table', 'json')
        """
        self.output_format = output_format

    def format(self, result: BatchResult) -> str:
        if self.output_format == "json":
            return self._format_json(result)
        elif self.output_format == "table":
            return self._format_table(result)
        else:  # list (default)
            return self._format_list(result)

    def _summary(self, result: BatchResult) -> str:
        failed = len(result.failures)
        summary = f"{result.operation.value}: {len(result)} host(s)"
        if failed:
            summary += f", {failed} failed"
        return summary

    def _format_list(self, result: BatchResult) -> str:
        """Format as simple list, one host per line"""
        if not len(result):
            return "No hosts processed."

        width = max(len(h) for h in result.hosts)
        lines = [self._summary(result), ""]
        for host_result in result.results:
            status = "OK" if host_result.succeeded else "FAILED"
            lines.append(f"  {host_result.host:<{width}}  {status:<6}  {self._detail(host_result)}".rstrip())

        return "\n".join(lines)

    def _format_table(self, result: BatchResult) -> str:
        """Format as table with host/status/detail columns"""
        lines = []

        # Header
        lines.append("\n{:<30} {:<10} {:<50}".format("HOST", "STATUS", "DETAIL"))
        lines.append("=" * 90)

        for host_result in result.results:
            lines.append("{:<30} {:<10} {:<50}".format(
                host_result.host,
                "OK" if host_result.succeeded else "FAILED",
                self._detail(host_result)
            ).rstrip())

        if not len(result):
            lines.append("No hosts processed.")

        return "\n".join(lines)

    def _format_json(self, result: BatchResult) -> str:
        """Format as JSON keyed by qualified host name"""
        output: Dict[str, Any] = {
            "operation": result.operation.value,
            "succeeded": result.succeeded,
            "hosts": {}
        }

        for host_result in result.results:
            entry = {"status": "succeeded" if host_result.succeeded else "failed"}
            if host_result.succeeded:
                if host_result.value is not None:
                    entry["value"] = _display_value(host_result.value)
            else:
                entry["error"] = str(host_result.error)
                entry["error_type"] = type(host_result.error).__name__
            output["hosts"][host_result.host] = entry

        return json.dumps(output, indent=2)

    @staticmethod
    def _detail(host_result: HostResult) -> str:
        if host_result.succeeded:
            return _display_value(host_result.value)
        return str(host_result.error)
