"""
Record schema for the road-safety enforcement extracts.

The ETL exports are flat tables with a header row. Header spelling drifts
between exports (``COUNT`` vs ``Sum(COUNT)``, ``Fines`` vs ``FINES``), so
headers are normalised before validation. After validation every frame has:

- ``YEAR`` as int (rows without a parseable year are dropped)
- ``COUNT``, ``FINES``, ``ARRESTS``, ``CHARGES`` as int, missing/invalid -> 0
- categorical columns filled, blanks become ``"Unknown"``
- ``JURISDICTION`` normalised to a state/territory code where recognisable
- derived ``SUBSTANCE`` (alcohol/drug/other) and ``OUTCOME_TOTAL`` columns
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from core.logging_config import get_logger

logger = get_logger(__name__)


UNKNOWN = "Unknown"
ALL_AGES = "All ages"

JURISDICTION_NAMES = {
    "ACT": "Australian Capital Territory",
    "NSW": "New South Wales",
    "NT": "Northern Territory",
    "QLD": "Queensland",
    "SA": "South Australia",
    "TAS": "Tasmania",
    "VIC": "Victoria",
    "WA": "Western Australia",
}
JURISDICTION_CODES = tuple(JURISDICTION_NAMES)

_NAME_TO_CODE = {name.upper(): code for code, name in JURISDICTION_NAMES.items()}

COUNT_COLUMNS = ("COUNT", "FINES", "ARRESTS", "CHARGES")
CATEGORY_COLUMNS = ("JURISDICTION", "AGE_GROUP", "METRIC", "DETECTION_METHOD", "DRUG_TYPE", "LOCATION")
TEXT_COLUMNS = ("START_DATE", "END_DATE")

# Columns each dataset cannot be charted without
REQUIRED_COLUMNS = {
    "tests": ("YEAR", "JURISDICTION", "METRIC", "COUNT"),
    "fines": ("YEAR", "JURISDICTION", "METRIC", "FINES", "ARRESTS", "CHARGES"),
    "positive_breath": ("YEAR", "JURISDICTION", "AGE_GROUP", "COUNT"),
    "positive_drug": ("YEAR", "JURISDICTION", "COUNT"),
}
DEFAULT_REQUIRED_COLUMNS = ("YEAR",)

# ETL aggregate headers such as "Sum(COUNT)"
_AGGREGATE_HEADER = re.compile(r"^\s*(?:sum|count|mean|avg|max|min)\s*\(\s*(.+?)\s*\)\s*$", re.IGNORECASE)


def normalise_column_name(name) -> str:
    """Return the canonical spelling of a header: 'Sum(COUNT)' -> 'COUNT', 'Age Group' -> 'AGE_GROUP'."""
    text = str(name).strip()
    match = _AGGREGATE_HEADER.match(text)
    if match:
        text = match.group(1)
    return re.sub(r"\s+", "_", text).upper()


def normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename headers to their canonical form, keeping the first of any duplicates."""
    renamed = df.rename(columns=normalise_column_name)
    duplicated = renamed.columns.duplicated()
    if duplicated.any():
        logger.warning(
            f"Dropping duplicate columns after normalisation: {list(renamed.columns[duplicated])}"
        )
        renamed = renamed.loc[:, ~duplicated]
    return renamed


def required_columns(dataset: str) -> tuple[str, ...]:
    """Columns a dataset must provide."""
    return REQUIRED_COLUMNS.get(dataset, DEFAULT_REQUIRED_COLUMNS)


def missing_columns(df: pd.DataFrame, dataset: str) -> list[str]:
    """List required columns absent from an already-normalised frame."""
    return [col for col in required_columns(dataset) if col not in df.columns]


def resolve_jurisdiction(name) -> Optional[str]:
    """
    Map a free-text state name or code to its jurisdiction code.

    Tries the code itself, then the full-name table, then a full name
    contained in the text ("STATE OF NEW SOUTH WALES"), then a code appearing
    as a whole word ("NSW Police"). Returns None when nothing matches.
    """
    if name is None:
        return None
    key = str(name).strip().upper()
    if not key:
        return None

    if key in JURISDICTION_NAMES:
        return key
    if key in _NAME_TO_CODE:
        return _NAME_TO_CODE[key]

    for full_name, code in _NAME_TO_CODE.items():
        if full_name in key:
            return code

    tokens = set(re.findall(r"[A-Z]+", key))
    for code in JURISDICTION_CODES:
        if code in tokens:
            return code

    return None


def normalise_jurisdiction(value) -> str:
    """Jurisdiction value for grouping: a code, the original text, or 'Unknown' when blank."""
    if _is_blank(value):
        return UNKNOWN
    code = resolve_jurisdiction(value)
    return code if code is not None else str(value).strip()


def derive_substance(metric) -> str:
    """Classify a METRIC value as alcohol, drug or other."""
    text = str(metric).lower()
    if any(word in text for word in ("breath", "alcohol", "drink")):
        return "alcohol"
    if "drug" in text:
        return "drug"
    return "other"


def _is_blank(value) -> bool:
    if value is None:
        return True
    if not isinstance(value, str) and pd.isna(value):
        return True
    return str(value).strip() == ""


def coerce_frame(df: pd.DataFrame) -> tuple[pd.DataFrame, int]:
    """
    Coerce a normalised frame to the typed schema.

    Args:
        df: Frame whose headers have been through normalise_columns()

    Returns:
        Tuple of (typed frame, number of rows dropped for an invalid YEAR).
    """
    out = df.copy()

    years = pd.to_numeric(out["YEAR"], errors="coerce").astype("float64")
    invalid = years.isna()
    dropped = int(invalid.sum())
    if dropped:
        logger.warning(f"Dropping {dropped} row(s) with a missing or invalid YEAR")
    out = out.loc[~invalid].copy()
    out["YEAR"] = years.loc[~invalid].round().astype("int64")

    for col in COUNT_COLUMNS:
        if col in out.columns:
            values = pd.to_numeric(out[col], errors="coerce").astype("float64").fillna(0)
            out[col] = values.round().astype("int64")
        else:
            out[col] = 0

    for col in CATEGORY_COLUMNS:
        if col in out.columns:
            out[col] = out[col].map(lambda v: UNKNOWN if _is_blank(v) else str(v).strip())
        else:
            out[col] = UNKNOWN

    out["JURISDICTION"] = out["JURISDICTION"].map(normalise_jurisdiction)

    for col in TEXT_COLUMNS:
        if col in out.columns:
            out[col] = out[col].map(lambda v: None if _is_blank(v) else str(v).strip()).astype(object)
        else:
            out[col] = None

    out["SUBSTANCE"] = out["METRIC"].map(derive_substance)
    out["OUTCOME_TOTAL"] = out["FINES"] + out["ARRESTS"] + out["CHARGES"]

    return out.reset_index(drop=True), dropped


@dataclass(frozen=True)
class EnforcementRecord:
    """One row of an enforcement extract after validation."""
    year: int
    jurisdiction: str
    metric: str = UNKNOWN
    age_group: str = UNKNOWN
    detection_method: str = UNKNOWN
    drug_type: str = UNKNOWN
    location: str = UNKNOWN
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    count: int = 0
    fines: int = 0
    arrests: int = 0
    charges: int = 0

    @property
    def substance(self) -> str:
        return derive_substance(self.metric)

    @property
    def outcome_total(self) -> int:
        return self.fines + self.arrests + self.charges


# Record attribute -> frame column
_RECORD_COLUMNS = {
    "year": "YEAR",
    "jurisdiction": "JURISDICTION",
    "metric": "METRIC",
    "age_group": "AGE_GROUP",
    "detection_method": "DETECTION_METHOD",
    "drug_type": "DRUG_TYPE",
    "location": "LOCATION",
    "start_date": "START_DATE",
    "end_date": "END_DATE",
    "count": "COUNT",
    "fines": "FINES",
    "arrests": "ARRESTS",
    "charges": "CHARGES",
}


def records_from_frame(df: pd.DataFrame) -> list[EnforcementRecord]:
    """Build immutable records from a coerced frame."""
    records = []
    for row in df.to_dict(orient="records"):
        kwargs = {attr: row[col] for attr, col in _RECORD_COLUMNS.items() if col in row}
        for attr in ("year", "count", "fines", "arrests", "charges"):
            if attr in kwargs:
                kwargs[attr] = int(kwargs[attr])
        records.append(EnforcementRecord(**kwargs))
    return records


def frame_from_records(records: Iterable[EnforcementRecord]) -> pd.DataFrame:
    """Build a typed frame (with derived columns) from records."""
    rows = [
        {col: getattr(record, attr) for attr, col in _RECORD_COLUMNS.items()}
        for record in records
    ]
    df = pd.DataFrame(rows, columns=list(_RECORD_COLUMNS.values()))
    df, _ = coerce_frame(df)
    return df
