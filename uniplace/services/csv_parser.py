"""
CSV parsing for result-sheet uploads.

Turns an uploaded comma-separated file into header-keyed rows:
- First row is the header
- Every cell is kept as a string (no type or NA coercion)
- Blank lines and rows with only empty cells are skipped
- Structural problems raise ParseError with the offending line
"""

import io
import re
import warnings
from typing import BinaryIO, Dict, Iterator, Union

import pandas as pd

from uniplace.exceptions import ParseError

# Rows read per pandas chunk
CHUNK_SIZE = 500

# "Expected 2 fields in line 4, saw 3"
_LINE_PATTERN = re.compile(r"line (\d+)")
# "... saw 3" - the first unexpected field is column expected + 1
_FIELDS_PATTERN = re.compile(r"Expected (\d+) fields")


def _location_from_message(message: str) -> tuple:
    """Pull line/column numbers out of a pandas tokenizer error."""
    line = column = None
    match = _LINE_PATTERN.search(message)
    if match:
        line = int(match.group(1))
    match = _FIELDS_PATTERN.search(message)
    if match:
        column = int(match.group(1)) + 1
    return line, column


def _as_stream(source: Union[bytes, BinaryIO]) -> BinaryIO:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def _strict(read, *args, **kwargs):
    """Call a pandas reader with header/row length warnings raised as errors."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", pd.errors.ParserWarning)
        return read(*args, **kwargs)


def parse_csv(source: Union[bytes, BinaryIO]) -> Iterator[Dict[str, str]]:
    """
    Lazily parse a CSV upload into row dictionaries.

    Args:
        source: Raw file bytes or a binary file-like object

    Yields:
        dict mapping header -> cell value (always a string)

    Raises:
        ParseError: if the file has no header or rows have too many fields
    """
    try:
        reader = _strict(
            pd.read_csv,
            _as_stream(source),
            sep=",",
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            # never promote the first column to an index on long rows
            index_col=False,
            chunksize=CHUNK_SIZE,
        )
        with reader:
            while True:
                # Filter scope ends before each yield
                chunk = _strict(next, reader, None)
                if chunk is None:
                    break
                # Short rows come back padded with NaN
                chunk = chunk.fillna("")
                for record in chunk.to_dict(orient="records"):
                    row = {str(k): str(v) for k, v in record.items()}
                    if not any(value.strip() for value in row.values()):
                        continue
                    yield row
    except pd.errors.ParserWarning as e:
        # pandas only warns when the first data row is longer than the header
        raise ParseError(f"Malformed CSV: {e}", line=2)
    except pd.errors.EmptyDataError:
        raise ParseError("CSV file is empty or has no header row", line=1)
    except pd.errors.ParserError as e:
        line, column = _location_from_message(str(e))
        raise ParseError(f"Malformed CSV: {e}", line=line, column=column)
    except UnicodeDecodeError as e:
        raise ParseError(f"CSV file is not valid UTF-8: {e.reason}")
