"""
Parse the LTA car cost workbook into records ready for persistence
"""

from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd

from core.exceptions import LocalIOError, ParseError
from updater.transformers.csv_transformer import RawRecord
from updater.transformers.field_transforms import to_number
import logging

logger = logging.getLogger(__name__)

MONTHS = {
    "Jan": "01", "Feb": "02", "Mar": "03", "Apr": "04", "May": "05", "Jun": "06",
    "Jul": "07", "Aug": "08", "Sep": "09", "Oct": "10", "Nov": "11", "Dec": "12",
}

# Worksheet columns in order, starting at column A
COLUMNS = [
    "sn",
    "make",
    "model",
    "coe_cat",
    "engine_capacity",
    "max_power_output",
    "fuel_type",
    "co2",
    "ves_banding",
    "omv",
    "gst_excise_duty",
    "arf",
    "ves_surcharge_rebate",
    "eeai",
    "registration_fee",
    "coe_premium",
    "total_basic_cost_without_coe",
    "total_basic_cost_with_coe",
    "selling_price_without_coe",
    "selling_price_with_coe",
    "difference_without_coe",
    "difference_with_coe",
]

TEXT_COLUMNS = {"make", "model", "coe_cat", "engine_capacity", "fuel_type", "ves_banding"}

# "-" in these columns means "not applicable"
NULLABLE_NUMERIC_COLUMNS = {"difference_without_coe", "difference_with_coe"}
MAX_MAKE_LENGTH = 30


def month_from_sheet_name(sheet_name: str) -> str:
    """ "Jan 2026" -> "2026-01" """
    parts = sheet_name.split()
    if len(parts) != 2:
        raise ValueError(f"Unexpected sheet name format: {sheet_name!r}")
    abbreviation, year = parts
    if abbreviation not in MONTHS:
        raise ValueError(f"Unknown month abbreviation: {abbreviation!r}")
    return f"{year}-{MONTHS[abbreviation]}"


def _cell(value: Any) -> Any:
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CarCostTransformer:
    """
    Turn the first worksheet of a car cost workbook into records.

    The sheet name carries the month. Title and header rows at the top and
    footnotes below the table are skipped: a data row has a numeric serial
    number in column A and a make of at most 30 characters in column B.
    """

    def transform(self, file_path: Union[str, Path]) -> List[RawRecord]:
        """
        Raises:
            ParseError: Unreadable workbook, unexpected sheet name or a cell
                that is not a number where one is required
            LocalIOError: If the file cannot be read
        """
        file_path = Path(file_path)
        logger.info(f"Reading workbook from {file_path}")

        sheet_name, frame = self._read(file_path)
        try:
            month = month_from_sheet_name(sheet_name)
        except ValueError as e:
            raise ParseError(
                str(e),
                context={"file_path": str(file_path), "sheet_name": sheet_name},
                original_exception=e
            )

        records: List[RawRecord] = []
        for row in frame.itertuples(index=False, name=None):
            cells = [_cell(value) for value in row]
            cells += [None] * (len(COLUMNS) - len(cells))
            if not self._is_data_row(cells):
                continue
            records.append(self._to_record(month, cells, file_path))

        logger.info(f"Parsed {len(records)} car cost records for {month} from sheet {sheet_name!r}")
        return records

    def _read(self, file_path: Path):
        try:
            with pd.ExcelFile(file_path, engine="openpyxl") as workbook:
                if not workbook.sheet_names:
                    raise ParseError(
                        "No worksheets found in workbook",
                        context={"file_path": str(file_path)}
                    )
                sheet_name = workbook.sheet_names[0]
                frame = workbook.parse(sheet_name, header=None, dtype=object)
        except ParseError:
            raise
        except FileNotFoundError as e:
            raise LocalIOError(
                "Failed to read workbook",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except Exception as e:
            # openpyxl reports a corrupt file through zipfile, XML and KeyError exceptions
            raise ParseError(
                "Failed to read workbook",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        return sheet_name, frame.iloc[:, :len(COLUMNS)]

    def _is_data_row(self, cells: List[Any]) -> bool:
        if not _is_number(cells[0]):
            return False
        make = "" if cells[1] is None else str(cells[1]).strip()
        return 0 < len(make) <= MAX_MAKE_LENGTH

    def _to_record(self, month: str, cells: List[Any], file_path: Path) -> RawRecord:
        record: RawRecord = {"month": month}
        for column, value in zip(COLUMNS, cells):
            try:
                record[column] = self._convert(column, value)
            except (ValueError, TypeError) as e:
                raise ParseError(
                    f"Failed to transform field {column}",
                    context={
                        "file_path": str(file_path),
                        "sn": cells[0],
                        "field_name": column,
                        "field_value": value
                    },
                    original_exception=e
                )
        return record

    @staticmethod
    def _convert(column: str, value: Any) -> Optional[Any]:
        if column == "sn":
            return int(value)
        if column in TEXT_COLUMNS:
            text = None if value is None else str(value).strip()
            return text or None
        if column in NULLABLE_NUMERIC_COLUMNS:
            if value is None or (isinstance(value, str) and value.strip() in ("", "-")):
                return None
            return to_number(value)
        if value is None:
            return 0
        return to_number(value)
