"""
Pydantic schemas for updater configuration, results and the HTTP API.

Schemas:
    descriptor: SourceDescriptor, TransformConfig and the field transform variants
    result: UpdaterResult and the standard result messages
    api: Health, dataset listing and error response models

Features:
    - Dataset configuration is plain data (no callables), so descriptors can
      be serialised, compared and validated like any other model
    - Field transforms are a tagged union discriminated on ``kind``

Usage:
    from schemas.descriptor import SourceDescriptor, TransformConfig, NumericTransform
    from schemas.result import UpdaterResult

Example:
    descriptor = SourceDescriptor(
        name="deregistrations",
        url="https://example.com/deregistrations.zip",
        table="deregistrations",
        key_fields=["month", "category"],
        transform=TransformConfig(fields={"number": NumericTransform()}),
    )
"""

__all__ = [
    "SourceDescriptor",
    "TransformConfig",
    "FieldTransform",
    "UppercaseTransform",
    "NumericTransform",
    "SeparatorJoinTransform",
    "UpdaterResult",
    "HealthCheckResponse",
    "DatasetListResponse",
]
