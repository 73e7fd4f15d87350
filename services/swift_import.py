import io
import os
from typing import List, Union

import pandas as pd

from core.exceptions import ImportFileError, InvalidCodeError
from core.logger import get_logger
from models import SwiftCodeRecord
from services.code_identity import classify
from services.registry_store import RegistryStore
from services.swift_service import SwiftCodeService

logger = get_logger(__name__)

UNKNOWN = "UNKNOWN"

# Spreadsheet column -> SwiftCodeRecord field
COLUMN_MAP = {
    'COUNTRY ISO2 CODE': 'countryISO2',
    'SWIFT CODE': 'swiftCode',
    'CODE TYPE': 'codeType',
    'NAME': 'name',
    'ADDRESS': 'address',
    'TOWN NAME': 'townName',
    'COUNTRY NAME': 'countryName',
    'TIME ZONE': 'timeZone',
}
REQUIRED_COLUMNS = ['SWIFT CODE', 'COUNTRY ISO2 CODE']
UPPERCASE_FIELDS = {'countryISO2', 'swiftCode', 'countryName'}


def clean_value(value) -> str:
    """Trim a cell, mapping blanks and NaN to UNKNOWN."""
    if value is None or pd.isna(value):
        return UNKNOWN
    text = str(value).strip()
    return text if text else UNKNOWN


def read_sheet(source: Union[str, bytes]) -> pd.DataFrame:
    try:
        if isinstance(source, bytes):
            df = pd.read_excel(io.BytesIO(source), dtype=str)
        else:
            if not os.path.exists(source):
                raise ImportFileError(f"SWIFT codes file not found: {source}")
            df = pd.read_excel(source, dtype=str)
    except ImportFileError:
        raise
    except Exception as e:
        raise ImportFileError(f"Failed to parse Excel: {e}") from e

    # Normalize columns
    df.columns = [str(c).strip().upper() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ImportFileError(f"Missing required columns: {missing}")
    return df


def parse_swift_codes(source: Union[str, bytes]) -> List[SwiftCodeRecord]:
    """
    Parse the first sheet of a SWIFT codes workbook into records.

    Args:
        source: path to the workbook or its raw bytes (e.g. an upload).

    Returns:
        One record per usable row, in sheet order. ``isHeadquarter`` is derived
        from the code and ``branches`` is left empty for the resolver.
    """
    df = read_sheet(source)

    records = []
    for index, row in df.iterrows():
        fields = {
            field: clean_value(row.get(column))
            for column, field in COLUMN_MAP.items()
        }
        for field in UPPERCASE_FIELDS:
            fields[field] = fields[field].upper()

        if fields['swiftCode'] == UNKNOWN:
            logger.warning(f"Skipping row {index} due to missing SWIFT code")
            continue
        try:
            identity = classify(fields['swiftCode'])
        except InvalidCodeError as e:
            logger.warning(f"Skipping row {index}: {e.message}")
            continue

        records.append(SwiftCodeRecord(**fields, isHeadquarter=identity.is_headquarter))

    logger.info(f"Parsed {len(records)} SWIFT codes from {len(df)} rows")
    return records


def load_swift_codes(source: Union[str, bytes], store: RegistryStore) -> int:
    """Parse a workbook, resolve its hierarchy and replace the registry contents."""
    records = parse_swift_codes(source)
    return SwiftCodeService(store).import_swift_codes(records)
