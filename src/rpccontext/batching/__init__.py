"""
Batching support.

Contains the snapshot type a batcher reports to flow control.
"""

from rpccontext.batching.context import BatchedCallContext, MissingFieldError

__all__ = [
    "BatchedCallContext",
    "MissingFieldError",
]
