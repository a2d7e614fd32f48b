"""
Parse delimited text files into records ready for persistence
"""

import csv
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from core.exceptions import LocalIOError, ParseError
from schemas.descriptor import TransformConfig
from updater.transformers.field_transforms import apply_transform
import logging

logger = logging.getLogger(__name__)

RawRecord = Dict[str, Any]


class CSVTransformer:
    """
    Turn a CSV file with a header row into a list of records.

    Handles:
    - Header remapping (source column -> destination field)
    - Per-field value transforms; other fields stay raw strings
    - Strict structure: a row with the wrong number of columns fails the run
    """

    def __init__(self, config: TransformConfig = None):
        self.config = config or TransformConfig()

    def transform(self, file_path: Union[str, Path]) -> List[RawRecord]:
        """
        Read ``file_path`` and return its rows in file order.

        Raises:
            ParseError: Malformed rows, an empty file, duplicate fields or a
                failed value transform
            LocalIOError: If the file cannot be read
        """
        file_path = Path(file_path)
        logger.info(f"Reading CSV from {file_path}")

        line_numbers = self._scan_rows(file_path)
        frame = self._read(file_path)
        if len(frame) != len(line_numbers):
            raise ParseError(
                f"CSV parser found {len(frame)} rows, expected {len(line_numbers)}",
                context={"file_path": str(file_path)}
            )
        fields = self._map_header(frame.iloc[0].tolist(), file_path)

        records: List[RawRecord] = []
        data = frame.iloc[1:]
        for line_number, row in zip(line_numbers[1:], data.itertuples(index=False, name=None)):
            record = dict(zip(fields, row))
            records.append(self._apply_transforms(record, file_path, line_number))

        logger.info(f"Read {len(records)} records from CSV")
        return records

    def _scan_rows(self, file_path: Path) -> List[int]:
        """
        Check every row against the header width before parsing.

        Returns the physical line number each row starts on, header included.
        Blank and whitespace-only lines are skipped the same way ``_read``
        skips them.
        """
        line_numbers: List[int] = []
        width = None
        try:
            with open(file_path, encoding="utf-8-sig", newline="") as handle:
                reader = csv.reader(handle)
                start = 1
                for row in reader:
                    line_number, start = start, reader.line_num + 1
                    if not row or (len(row) == 1 and not row[0].strip()):
                        continue
                    if width is None:
                        width = len(row)
                    elif len(row) != width:
                        problem = "fewer" if len(row) < width else "more"
                        raise ParseError(
                            f"Row has {problem} columns than the header ({width} expected, got {len(row)})",
                            context={"file_path": str(file_path), "line_number": line_number}
                        )
                    line_numbers.append(line_number)
        except csv.Error as e:
            raise ParseError(
                "Malformed CSV",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except UnicodeDecodeError as e:
            raise ParseError(
                "CSV file is not valid UTF-8",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except OSError as e:
            raise LocalIOError(
                "Failed to read CSV file",
                context={"file_path": str(file_path)},
                original_exception=e
            )

        if not line_numbers:
            raise ParseError(
                "CSV file is empty; a header row is required",
                context={"file_path": str(file_path)}
            )
        return line_numbers

    def _read(self, file_path: Path) -> pd.DataFrame:
        # header=None keeps the header row as frame row 0 so frame rows line up
        # with the scanned line numbers
        try:
            frame = pd.read_csv(
                file_path,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig"
            )
        except pd.errors.EmptyDataError as e:
            raise ParseError(
                "CSV file is empty; a header row is required",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except pd.errors.ParserError as e:
            raise ParseError(
                "Malformed CSV",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except UnicodeDecodeError as e:
            raise ParseError(
                "CSV file is not valid UTF-8",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        except OSError as e:
            raise LocalIOError(
                "Failed to read CSV file",
                context={"file_path": str(file_path)},
                original_exception=e
            )

        if frame.empty:
            raise ParseError(
                "CSV file is empty; a header row is required",
                context={"file_path": str(file_path)}
            )
        return frame

    def _map_header(self, header: List[Any], file_path: Path) -> List[str]:
        mapping = self.config.column_mapping
        fields = []
        for column in header:
            name = str(column).strip()
            fields.append(mapping.get(name, name))

        duplicates = sorted({name for name in fields if fields.count(name) > 1})
        if duplicates:
            raise ParseError(
                f"Duplicate fields after column mapping: {', '.join(duplicates)}",
                context={"file_path": str(file_path), "line_number": 1}
            )
        return fields

    def _apply_transforms(self, record: RawRecord, file_path: Path, line_number: int) -> RawRecord:
        for field_name, transform in self.config.fields.items():
            if field_name not in record:
                continue
            try:
                record[field_name] = apply_transform(transform, record[field_name])
            except (ValueError, TypeError) as e:
                raise ParseError(
                    f"Failed to transform field {field_name}",
                    context={
                        "file_path": str(file_path),
                        "line_number": line_number,
                        "field_name": field_name,
                        "field_value": record[field_name]
                    },
                    original_exception=e
                )
        return record
