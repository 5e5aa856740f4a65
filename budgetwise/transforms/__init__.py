"""Bulk transform package."""

from budgetwise.transforms.bulk import (
    AmountTransform,
    BulkTransformPass,
    TransformFailure,
    TransformReport,
    identity,
    scale,
)

__all__ = [
    "AmountTransform",
    "BulkTransformPass",
    "TransformFailure",
    "TransformReport",
    "identity",
    "scale",
]
