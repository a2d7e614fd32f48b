"""
Pydantic schemas describing one dataset updater run
"""

from pydantic import BaseModel, Field, validator
from typing import Annotated, Dict, List, Literal, Optional, Union


# ============================================================================
# Field transforms
# ============================================================================

class UppercaseTransform(BaseModel):
    """Remove the listed characters, strip whitespace and uppercase the value."""
    kind: Literal["uppercase"] = "uppercase"
    remove: str = ""

    class Config:
        frozen = True


class NumericTransform(BaseModel):
    """
    Parse a number from a CSV cell.

    Thousands separators are stripped and blank cells become ``0``: the LTA
    files use blank cells for "no registrations", not for missing data.
    """
    kind: Literal["numeric"] = "numeric"
    as_float: bool = False

    class Config:
        frozen = True


class SeparatorJoinTransform(BaseModel):
    """Split on a separator, strip each part and join the parts back together."""
    kind: Literal["separator_join"] = "separator_join"
    separator: str = Field(..., min_length=1)
    join_separator: Optional[str] = None

    class Config:
        frozen = True


FieldTransform = Annotated[
    Union[UppercaseTransform, NumericTransform, SeparatorJoinTransform],
    Field(discriminator="kind"),
]


class TransformConfig(BaseModel):
    """
    CSV transform options.

    ``column_mapping`` renames source headers to destination fields; ``fields``
    is keyed by destination field name, after renaming.
    """
    column_mapping: Dict[str, str] = Field(default_factory=dict)
    fields: Dict[str, FieldTransform] = Field(default_factory=dict)

    class Config:
        frozen = True


# ============================================================================
# Source descriptor
# ============================================================================

class SourceDescriptor(BaseModel):
    """
    Immutable configuration for one dataset.

    ``source_format`` picks the fetch and parse path: "zip_csv" for a ZIP
    archive holding CSV files, "xlsx" for a single car cost workbook.
    ``checksum_key`` overrides the change-cache key, which defaults to the
    selected file name.

    Ensures:
    - At least one key field is declared
    - Key fields are unique
    """
    name: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1)
    table: str = Field(..., min_length=1)
    key_fields: List[str] = Field(..., min_length=1)
    source_format: Literal["zip_csv", "xlsx"] = "zip_csv"
    csv_file: Optional[str] = None
    checksum_key: Optional[str] = None
    transform: TransformConfig = Field(default_factory=TransformConfig)

    @validator("key_fields")
    def validate_key_fields(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("key_fields must not contain duplicates")
        return v

    class Config:
        frozen = True
