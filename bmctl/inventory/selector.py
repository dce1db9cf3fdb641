"""
Host selectors.

A selector is an immutable predicate over host documents. Building one has no
side effects, so the same selector can be reused across inventories and calls.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import ConfigurationError


def parse_label_selector(expression: str) -> Tuple[Tuple[str, str], ...]:
    """
    Parse 'key=value[,key2=value2]' into sorted (key, value) pairs.

    Raises:
        ConfigurationError: If a term is not of the form key=value
    """
    pairs = {}
    for term in expression.split(","):
        term = term.strip()
        if not term:
            continue
        key, sep, value = term.partition("=")
        # tolerate the 'key==value' equality form
        if value.startswith("="):
            value = value[1:]
        key, value = key.strip(), value.strip()
        if not sep or not key:
            raise ConfigurationError(
                "label selector",
                f"Malformed label selector '{expression}': expected key=value, got '{term}'"
            )
        pairs[key] = value
    return tuple(sorted(pairs.items()))


@dataclass(frozen=True)
class HostSelector:
    """
    Predicate over host documents.

    Attributes:
        name: Exact document name to match (None matches any name)
        labels: (key, value) pairs that must all be present on the document

    An empty selector matches every host.
    """
    name: Optional[str] = None
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def by_name(cls, name: str) -> "HostSelector":
        return cls().with_name(name)

    @classmethod
    def by_label(cls, expression: str) -> "HostSelector":
        return cls().with_labels(expression)

    def with_name(self, name: str) -> "HostSelector":
        """New selector that additionally requires the given name"""
        if not name:
            raise ConfigurationError("host name", "Host name selector cannot be empty")
        return replace(self, name=name)

    def with_labels(self, expression: str) -> "HostSelector":
        """New selector that additionally requires the labels in expression"""
        merged = dict(self.labels)
        merged.update(parse_label_selector(expression))
        return replace(self, labels=tuple(sorted(merged.items())))

    @property
    def label_selector(self) -> Optional[str]:
        """Labels rendered as a Kubernetes label selector string"""
        if not self.labels:
            return None
        return ",".join(f"{k}={v}" for k, v in self.labels)

    def matches_labels(self, labels: Optional[Mapping[str, Any]]) -> bool:
        labels = labels or {}
        return all(k in labels and str(labels[k]) == v for k, v in self.labels)

    def matches(self, document: Dict[str, Any]) -> bool:
        """
        Check a host document against this selector.

        Args:
            document: Host document (dict with a 'metadata' section)
        """
        metadata = document.get("metadata") or {}
        if self.name is not None and metadata.get("name") != self.name:
            return False
        return self.matches_labels(metadata.get("labels"))

    def __str__(self) -> str:
        parts = []
        if self.name is not None:
            parts.append(f"name={self.name}")
        if self.labels:
            parts.append(f"labels={self.label_selector}")
        return " ".join(parts) or "all hosts"
