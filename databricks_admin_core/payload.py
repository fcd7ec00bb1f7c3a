"""
Request Payload - field insertion policies

Builds request bodies (or query maps) field by field. Each field is written
according to an insertion policy so that unset optional inputs never reach
the wire, while fields the API requires to be present always do.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

DEFAULT_SENTINEL = -1


class InsertionPolicy(Enum):
    """How a field is written into the outgoing payload."""

    SKIP_IF_EMPTY = "skip_if_empty"  # None, "", [], {} are dropped
    FORCE = "force"  # always written, even when empty
    SENTINEL_SKIP = "sentinel_skip"  # dropped when equal to the sentinel (and when None)


@dataclass(frozen=True)
class FieldSpec:
    """Insertion rule for one named payload field."""

    name: str
    policy: InsertionPolicy = InsertionPolicy.SKIP_IF_EMPTY
    sentinel: Any = DEFAULT_SENTINEL
    default: Any = None  # written for FORCE fields the caller omitted


def is_empty(value: Any) -> bool:
    """True for values treated as "not supplied". ``0`` and ``False`` are real values."""
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict, set)) and len(value) == 0:
        return True
    return False


class RequestPayload(Mapping[str, Any]):
    """
    Incrementally built request payload.

    Example::

        payload = RequestPayload()
        payload.add("cluster_name", "etl").add("spark_conf", {})
        payload.add("num_workers", 0).add("max_results", -1, InsertionPolicy.SENTINEL_SKIP)
        payload.to_dict()  # {"cluster_name": "etl", "num_workers": 0}
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._fields: Dict[str, Any] = {}
        if initial:
            for name, value in initial.items():
                self.add(name, value)

    def add(
        self,
        name: str,
        value: Any,
        policy: InsertionPolicy = InsertionPolicy.SKIP_IF_EMPTY,
        sentinel: Any = DEFAULT_SENTINEL,
    ) -> "RequestPayload":
        """
        Write one field according to its insertion policy.

        Args:
            name: Field name in the payload
            value: Caller-supplied value
            policy: Insertion policy for this field
            sentinel: Value meaning "unset" under SENTINEL_SKIP

        Returns:
            self, for chaining
        """
        if policy is InsertionPolicy.FORCE:
            self._fields[name] = value
        elif policy is InsertionPolicy.SENTINEL_SKIP:
            if value is not None and value != sentinel:
                self._fields[name] = value
        elif not is_empty(value):
            self._fields[name] = value
        return self

    def force(self, name: str, value: Any) -> "RequestPayload":
        """Write a field even when its value is empty."""
        return self.add(name, value, InsertionPolicy.FORCE)

    def add_spec(self, spec: FieldSpec, value: Any) -> "RequestPayload":
        return self.add(spec.name, value, spec.policy, spec.sentinel)

    def update(self, values: Mapping[str, Any], specs: Iterable[FieldSpec] = ()) -> "RequestPayload":
        """Add many fields; fields named in ``specs`` use their own policy, the rest skip-if-empty."""
        by_name = {spec.name: spec for spec in specs}
        for name, value in values.items():
            spec = by_name.get(name)
            if spec is not None:
                self.add_spec(spec, value)
            else:
                self.add(name, value)
        # Forced fields are written even when the caller never mentioned them
        for spec in by_name.values():
            if spec.policy is InsertionPolicy.FORCE and spec.name not in values:
                self.force(spec.name, spec.default)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._fields)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"RequestPayload({self._fields!r})"


def build_payload(values: Mapping[str, Any], specs: Iterable[FieldSpec] = ()) -> Dict[str, Any]:
    """Build a payload dict from ``values`` applying the policies in ``specs``."""
    return RequestPayload().update(values, specs).to_dict()
