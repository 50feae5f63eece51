"""
Batched call context.

Snapshot of the batch currently being assembled, reported to the flow
control logic that decides whether more elements may join the batch.
"""

from dataclasses import dataclass
from typing import List, Optional


class MissingFieldError(ValueError):
    """Raised when a builder is finalized before all fields were set."""

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing required properties: {', '.join(missing)}")
        self.missing = missing


def _check_count(name: str, value: int) -> int:
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class BatchedCallContext:
    """
    Counters of the batch currently being assembled.

    Only built through ``BatchedCallContext.Builder``.

    Attributes:
        element_count: Number of elements in the batch
        byte_count: Total size of the batch elements in bytes
        total_throttled_time_ms: Time the batch spent waiting on flow control
    """

    element_count: int
    byte_count: int
    total_throttled_time_ms: int

    @staticmethod
    def new_builder() -> "BatchedCallContext.Builder":
        """Create an empty builder."""
        return BatchedCallContext.Builder()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "element_count": self.element_count,
            "byte_count": self.byte_count,
            "total_throttled_time_ms": self.total_throttled_time_ms,
        }

    class Builder:
        """
        Mutable builder of a BatchedCallContext.

        Not safe for concurrent use; confine one builder to one
        accumulation sequence.
        """

        def __init__(self):
            self._element_count: Optional[int] = None
            self._byte_count: Optional[int] = None
            self._total_throttled_time_ms: Optional[int] = None

        def set_element_count(self, element_count: int) -> "BatchedCallContext.Builder":
            """Set the element count of the current batch."""
            self._element_count = _check_count("element_count", element_count)
            return self

        def set_byte_count(self, byte_count: int) -> "BatchedCallContext.Builder":
            """Set the byte count of the current batch."""
            self._byte_count = _check_count("byte_count", byte_count)
            return self

        def set_total_throttled_time_ms(
            self,
            throttled_time_ms: int,
        ) -> "BatchedCallContext.Builder":
            """Set the total throttled time of the current batch."""
            self._total_throttled_time_ms = _check_count(
                "total_throttled_time_ms", throttled_time_ms
            )
            return self

        def build(self) -> "BatchedCallContext":
            """
            Create the snapshot.

            Raises:
                MissingFieldError: If any counter was never set
            """
            missing = [
                name
                for name, value in (
                    ("element_count", self._element_count),
                    ("byte_count", self._byte_count),
                    ("total_throttled_time_ms", self._total_throttled_time_ms),
                )
                if value is None
            ]
            if missing:
                raise MissingFieldError(missing)

            return BatchedCallContext(
                element_count=self._element_count,
                byte_count=self._byte_count,
                total_throttled_time_ms=self._total_throttled_time_ms,
            )
