"""
CSV ingestion for merchant exports.

Exports come from different sources with different headers and encodings;
this module maps them onto RawRecord. Column names are resolved from a list
of known spellings (first non-empty value wins) and files that do not decode
cleanly as UTF-8 are re-read as Windows-1252.
"""

import csv
import io
from pathlib import Path
from typing import Dict, Iterator, List, Sequence, Tuple, Union

from junapedia.config import DEFAULT_CATEGORY, DEFAULT_NAME
from junapedia.models.store import RawRecord
from junapedia.utils.logging_config import logger

NAME_COLUMNS = ('Merchant Name', 'Merchant', 'name', 'Nombre', 'merchant')
ADDRESS_COLUMNS = ('Address', 'Dirección', 'address', 'Direccion')
CITY_COLUMNS = ('City', 'Ciudad', 'city')
CATEGORY_COLUMNS = ('Category', 'category', 'Categoria')
ID_COLUMNS = ('id', 'ID', 'Id')

REPLACEMENT_CHAR = '\ufffd'


def decode_csv_bytes(data: bytes) -> str:
    """
    Decodes a CSV payload.

    UTF-8 first; any replacement character means the file was not UTF-8, so
    the same bytes are decoded as Windows-1252, or Latin-1 when cp1252 has no
    mapping for a byte.
    """
    text = data.decode('utf-8', errors='replace')
    if REPLACEMENT_CHAR not in text:
        return text.lstrip('\ufeff')
    try:
        return data.decode('cp1252')
    except UnicodeDecodeError:
        logger.debug("cp1252 decode failed, falling back to latin-1")
        return data.decode('latin-1')


def pick_column(row: Dict[str, str], columns: Sequence[str]) -> str:
    for column in columns:
        value = row.get(column)
        if value and value.strip():
            return value.strip()
    return ""


def parse_csv_text(text: str) -> List[Dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text))
    rows = []
    for row in reader:
        # Skip blank lines and rows that are entirely empty
        if not any((v or '').strip() for v in row.values() if isinstance(v, str)):
            continue
        rows.append({k.strip(): v for k, v in row.items() if k and isinstance(v, str)})
    return rows


def row_to_record(row: Dict[str, str], source_file: str, index: int) -> RawRecord:
    """Maps one CSV row to a RawRecord; defaults cover missing name/category."""
    name = pick_column(row, NAME_COLUMNS)
    address = pick_column(row, ADDRESS_COLUMNS)
    city = pick_column(row, CITY_COLUMNS)
    category = pick_column(row, CATEGORY_COLUMNS)
    row_id = pick_column(row, ID_COLUMNS)

    full_address = ', '.join(part for part in (address, city) if part)
    return RawRecord(
        id=row_id or f"csv-{source_file}-{index}",
        name=name or DEFAULT_NAME,
        address=full_address,
        addresses=[full_address] if full_address else [],
        category=category or DEFAULT_CATEGORY,
        source_names=[name] if name else [],
    )


def iter_csv_files(directory: Union[str, Path]) -> List[Path]:
    path = Path(directory)
    if not path.is_dir():
        raise FileNotFoundError(f"CSV directory not found: '{directory}'")
    return sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() == '.csv')


def read_csv_file(path: Union[str, Path]) -> List[Dict[str, str]]:
    path = Path(path)
    text = decode_csv_bytes(path.read_bytes())
    rows = parse_csv_text(text)
    logger.debug(f"Read {len(rows)} rows from {path.name}")
    return rows


def load_csv_rows(directory: Union[str, Path]) -> Iterator[Tuple[Dict[str, str], str, int]]:
    """Yields (row, file name, row index) for every CSV file in the directory."""
    for path in iter_csv_files(directory):
        for index, row in enumerate(read_csv_file(path)):
            yield row, path.name, index


def load_csv_directory(directory: Union[str, Path]) -> List[RawRecord]:
    """
    Reads every ``*.csv`` file in a directory into RawRecords.

    Raises:
        FileNotFoundError: if the directory does not exist.
    """
    records = [row_to_record(row, name, index) for row, name, index in load_csv_rows(directory)]
    logger.info(f"Loaded {len(records)} CSV rows from {directory}")
    return records
