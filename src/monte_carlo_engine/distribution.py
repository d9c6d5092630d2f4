"""
Probability-space model: dimensions, samples and caller callback contracts
"""
import logging
import math
import numbers
from collections.abc import Mapping
from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence, runtime_checkable

from utils.constants import DEFAULT_DIMENSION_KEY, DEFAULT_DIMENSION_WEIGHT
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class DistributionDimension:
    """One named, weighted axis of a probability space"""
    key: str
    weight: float
    amplitude: Optional[float] = None
    phase: float = 0.0
    coherence: float = 1.0

    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise ValidationError(f"Dimension key must be a non-empty string, got {self.key!r}")
        if not isinstance(self.weight, (int, float)) or not math.isfinite(self.weight) \
                or not 0.0 <= self.weight <= 1.0:
            raise ValidationError(f"Dimension {self.key!r} weight must lie in [0, 1], got {self.weight!r}")
        if self.amplitude is None:
            object.__setattr__(self, "amplitude", math.sqrt(self.weight))

class Sample(Mapping):
    """
    One draw across all dimensions

    Read-only mapping of dimension key to a value in [0, 1], with an
    importance weight used for weighted aggregation.
    """

    __slots__ = ("_values", "_weight")

    def __init__(self, values: Dict[str, float], weight: float = 1.0):
        if not weight >= 0.0:
            raise ValidationError(f"Importance weight must be non-negative, got {weight!r}")
        self._values = dict(values)
        self._weight = float(weight)

    @property
    def weight(self) -> float:
        return self._weight

    def __getitem__(self, key: str) -> float:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def replace(self, key: str, value: float) -> "Sample":
        """Copy of this sample with one dimension's value swapped"""
        values = dict(self._values)
        values[key] = value
        return Sample(values, self._weight)

    def __repr__(self) -> str:
        return f"Sample({self._values!r}, weight={self._weight!r})"

@dataclass(frozen=True)
class EvaluatedSample:
    """A sample paired with its payoff"""
    sample: Sample
    value: float

    @property
    def weight(self) -> float:
        return self.sample.weight

@runtime_checkable
class PayoffFunction(Protocol):
    """Maps a sample to a scalar payoff"""
    def __call__(self, sample: Sample) -> float: ...

@runtime_checkable
class ExpansionFunction(Protocol):
    """Maps a search state to its child records ``{state, action, prior}``"""
    def __call__(self, state: Any) -> Sequence[Any]: ...

@runtime_checkable
class RolloutFunction(Protocol):
    """Maps a search state to a reward, conventionally in [0, 1]"""
    def __call__(self, state: Any) -> float: ...

def _coerce_weight(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        return DEFAULT_DIMENSION_WEIGHT
    return float(value)

def _dimension_from_record(record: Any) -> DistributionDimension:
    if isinstance(record, DistributionDimension):
        return record
    if not isinstance(record, Mapping) or "key" not in record:
        raise ValidationError(f"Dimension record must be a mapping with a 'key', got {record!r}")

    weight = record.get("probability", record.get("weight", DEFAULT_DIMENSION_WEIGHT))
    coherence = record.get("coherence")
    return DistributionDimension(
        key=str(record["key"]),
        weight=_coerce_weight(weight),
        amplitude=record.get("amplitude"),
        phase=float(record.get("phase") or 0.0),
        coherence=1.0 if coherence is None else float(coherence),
    )

def _from_records(records: Sequence[Any]) -> List[DistributionDimension]:
    dimensions = [_dimension_from_record(r) for r in records]
    keys = [d.key for d in dimensions]
    if len(set(keys)) != len(keys):
        raise ValidationError(f"Duplicate dimension keys in {keys}")
    return dimensions

def _from_mapping(probabilities: Mapping) -> List[DistributionDimension]:
    return [
        DistributionDimension(key=str(key), weight=_coerce_weight(value))
        for key, value in probabilities.items()
    ]

def default_distribution() -> List[DistributionDimension]:
    return [DistributionDimension(key=DEFAULT_DIMENSION_KEY, weight=DEFAULT_DIMENSION_WEIGHT)]

def extract_distribution(space: Any) -> List[DistributionDimension]:
    """
    Convert a caller-supplied probability space to a list of dimensions

    Accepted shapes, in order of preference:

    1. a list of dimension records (``DistributionDimension`` or mappings
       with ``key`` and ``probability``/``weight``), or a mapping holding
       such a list under ``dimensions``
    2. a key -> probability mapping, either flat or under ``probabilities``
    3. anything else yields the single ``default`` dimension

    Args:
        space: Probability space in any of the shapes above

    Returns:
        Dimensions with unique keys, in input order
    """
    if isinstance(space, (list, tuple)):
        if space:
            return _from_records(space)
    elif isinstance(space, Mapping):
        dimensions = space.get("dimensions")
        if isinstance(dimensions, (list, tuple)) and dimensions:
            return _from_records(dimensions)

        probabilities = space.get("probabilities")
        if isinstance(probabilities, Mapping) and probabilities:
            return _from_mapping(probabilities)

        if space:
            return _from_mapping(space)

    logger.debug("Unrecognised probability space %r, using default dimension", type(space).__name__)
    return default_distribution()

def default_payoff(sample: Mapping, distribution: Sequence[DistributionDimension]) -> float:
    """Average closeness ``1 - |value - weight|`` across dimensions"""
    score = 0.0
    for dim in distribution:
        score += 1.0 - abs(sample.get(dim.key, 0.0) - dim.weight)
    return score / len(distribution)
