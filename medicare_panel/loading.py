"""
CMS Medicare Physician PUF loading.

Reads the yearly "by Provider" extracts, renames the columns used by the
report, tags each row with its data year, and stacks the years into a
single table.
"""

from pathlib import Path
from typing import Optional

import duckdb
import pandas as pd

from .config import AMOUNT_COLUMNS, CMS_COLUMNS, CMS_FILE_PATTERNS, CMS_RAW_DIR


def find_source_file(year: int, raw_dir: Optional[Path] = None) -> Path:
    """
    Locate the CMS Provider PUF file for a data year.

    Args:
        year: Data year (e.g. 2022)
        raw_dir: Directory to search (default: data/raw/cms)

    Returns:
        Path to the provider-level PUF file

    Raises:
        FileNotFoundError: If no file for the year is found
    """
    raw_dir = raw_dir or CMS_RAW_DIR

    for pattern in CMS_FILE_PATTERNS:
        matches = list(raw_dir.glob(pattern.format(year=year)))
        if matches:
            # Return the most recent one if multiple
            return sorted(matches, key=lambda x: x.stat().st_mtime, reverse=True)[0]

    raise FileNotFoundError(
        f"No CMS Provider PUF file for {year} found in {raw_dir}. "
        f"Expected file matching pattern: {CMS_FILE_PATTERNS[0].format(year=year)}"
    )


def read_source_columns(path: Path) -> list[str]:
    """Return the header columns of a CSV file."""
    con = duckdb.connect()
    csv_path = str(path).replace("\\", "/")
    cols = con.execute(f"""
        SELECT column_name
        FROM (DESCRIBE SELECT * FROM read_csv_auto('{csv_path}', header=true, all_varchar=true))
    """).fetchdf()["column_name"].tolist()
    con.close()
    return cols


def load_year(
    path: Path,
    year: int,
    columns: Optional[dict[str, str]] = None,
    available_columns: Optional[set[str]] = None,
) -> pd.DataFrame:
    """
    Load one yearly extract with canonical column names.

    Every column is read as text; amounts are cast to DOUBLE so that blank
    or malformed cells become missing values rather than errors.

    Args:
        path: CSV file path
        year: Data year to tag the rows with
        columns: Source column -> canonical column mapping (default: CMS_COLUMNS)
        available_columns: Header columns already read by the caller (read
            from the file if None)

    Returns:
        DataFrame with npi, credentials, state, specialty, submitted_charge,
        allowed_amount and year

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required source column is missing
    """
    path = Path(path)
    columns = columns or CMS_COLUMNS

    if not path.exists():
        raise FileNotFoundError(f"Source file for {year} not found: {path}")

    if available_columns is None:
        available_columns = set(read_source_columns(path))
    missing = [c for c in columns if c not in available_columns]
    if missing:
        raise ValueError(f"{path.name} is missing required columns: {', '.join(missing)}")

    select_items = []
    for source, target in columns.items():
        if target in AMOUNT_COLUMNS:
            select_items.append(f'TRY_CAST("{source}" AS DOUBLE) AS {target}')
        else:
            select_items.append(f'TRIM("{source}") AS {target}')

    csv_path = str(path).replace("\\", "/")
    con = duckdb.connect()
    df = con.execute(f"""
        SELECT
            {", ".join(select_items)},
            CAST({int(year)} AS INTEGER) AS year
        FROM read_csv_auto('{csv_path}', header=true, all_varchar=true)
    """).fetchdf()
    con.close()

    return df


def load_panel_sources(
    sources: dict[int, Path],
    columns: Optional[dict[str, str]] = None,
) -> pd.DataFrame:
    """
    Load both yearly extracts and stack them into one table.

    Rows are concatenated as-is; no deduplication is done here.

    Args:
        sources: Mapping of data year -> CSV path (exactly two years)
        columns: Source column -> canonical column mapping

    Returns:
        Combined DataFrame, earlier year first

    Raises:
        ValueError: If not exactly two years are given or the two files
            do not share the same columns
    """
    if len(sources) != 2:
        raise ValueError(f"Expected exactly two yearly sources, got {len(sources)}")

    years = sorted(sources)
    for year in years:
        if not Path(sources[year]).exists():
            raise FileNotFoundError(f"Source file for {year} not found: {sources[year]}")

    schemas = {year: set(read_source_columns(Path(sources[year]))) for year in years}
    if schemas[years[0]] != schemas[years[1]]:
        diff = sorted(schemas[years[0]] ^ schemas[years[1]])
        raise ValueError(
            f"Schema mismatch between {years[0]} and {years[1]} extracts: {', '.join(diff)}"
        )

    frames = []
    for year in years:
        df = load_year(Path(sources[year]), year, columns, available_columns=schemas[year])
        print(f"  {year}: {len(df):,} rows from {Path(sources[year]).name}")
        frames.append(df)

    combined = pd.concat(frames, ignore_index=True)
    print(f"  Combined: {len(combined):,} rows")

    return combined
