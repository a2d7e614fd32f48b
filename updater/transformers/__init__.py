"""
Row transformation: CSV and workbook parsing plus per-field value transforms.
"""

from schemas.descriptor import SourceDescriptor
from updater.transformers.csv_transformer import CSVTransformer, RawRecord
from updater.transformers.field_transforms import apply_transform
from updater.transformers.xlsx_transformer import CarCostTransformer


def get_transformer(descriptor: SourceDescriptor):
    """Pick the parser for the descriptor's source format."""
    if descriptor.source_format == "xlsx":
        return CarCostTransformer()
    return CSVTransformer(descriptor.transform)


__all__ = ["CSVTransformer", "CarCostTransformer", "RawRecord", "apply_transform", "get_transformer"]
