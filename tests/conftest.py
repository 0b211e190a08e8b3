"""Shared test fixtures for the Medicare panel report tests."""

import numpy as np
import pandas as pd
import pytest

from medicare_panel.config import CMS_COLUMNS

COLUMNS = ["npi", "credentials", "state", "specialty", "submitted_charge", "allowed_amount", "year"]

# (npi, credentials, state, specialty, submitted, allowed) per year
ROWS_2022 = [
    # Balanced MD providers in the target states
    ("1000000001", "M.D.", "RI", "Cardiology", 100.0, 80.0),
    ("1000000002", "MD", "NH", "Cardiology", 200.0, 150.0),
    ("1000000003", "m d, phd", "RI", "Family Practice", 300.0, 200.0),
    ("1000000004", "M. D.", "NH", "Internal Medicine", 400.0, 250.0),
    # DO only: excluded by the MD filter
    ("1000000005", "D.O.", "RI", "Internal Medicine", 150.0, 90.0),
    # Out-of-state MD
    ("1000000006", "MD", "MA", "Cardiology", 600.0, 400.0),
    # Only billed in 2022
    ("1000000007", "MD", "RI", "Cardiology", 700.0, 500.0),
    # Missing allowed amount in 2023
    ("1000000009", "MD", "NH", "Dermatology", 500.0, 300.0),
    ("1000000010", "MD", "RI", "Family Practice", 250.0, 170.0),
    ("1000000011", "MD FACS", "RI", "Internal Medicine", 350.0, 220.0),
]

ROWS_2023 = [
    ("1000000001", "M.D.", "RI", "Cardiology", 120.0, 85.0),
    ("1000000002", "MD", "NH", "Cardiology", 210.0, 160.0),
    ("1000000003", "m d, phd", "RI", "Family Practice", 310.0, 205.0),
    ("1000000004", "M. D.", "NH", "Internal Medicine", 380.0, 240.0),
    ("1000000005", "D.O.", "RI", "Internal Medicine", 160.0, 95.0),
    ("1000000006", "MD", "MA", "Cardiology", 610.0, 410.0),
    # Two 2023 rows and no 2022 row
    ("1000000008", "MD", "NH", "Family Practice", 90.0, 60.0),
    ("1000000008", "MD", "NH", "Family Practice", 95.0, 65.0),
    ("1000000009", "MD", "NH", "Dermatology", 520.0, np.nan),
    ("1000000010", "MD", "RI", "Family Practice", 260.0, 180.0),
    ("1000000011", "MD FACS", "RI", "Internal Medicine", 360.0, 230.0),
]

COHORT_NPIS = {
    "1000000001", "1000000002", "1000000003", "1000000004",
    "1000000009", "1000000010", "1000000011",
}


def make_frame(rows_by_year: dict) -> pd.DataFrame:
    """Build a combined table in the loader's canonical layout."""
    records = []
    for year, rows in rows_by_year.items():
        for row in rows:
            records.append(dict(zip(COLUMNS, [*row, year])))
    return pd.DataFrame(records, columns=COLUMNS)


def write_cms_csv(df: pd.DataFrame, path) -> None:
    """Write canonical rows back out with CMS column names."""
    reverse = {v: k for k, v in CMS_COLUMNS.items()}
    out = df.drop(columns=["year"]).rename(columns=reverse)
    out.insert(1, "Rndrng_Prvdr_Last_Org_Name", "SMITH")
    out.to_csv(path, index=False)


@pytest.fixture
def cohort_npis():
    """Providers expected in the RI/NH MD cohort built from `combined`."""
    return set(COHORT_NPIS)


@pytest.fixture
def combined():
    """Stacked two-year table with balanced, unbalanced and out-of-cohort providers."""
    return make_frame({2022: ROWS_2022, 2023: ROWS_2023})


@pytest.fixture
def two_provider_combined():
    """Two providers, one per target state, both billing in both years."""
    return make_frame({
        2022: [
            ("A", "MD", "RI", "Cardiology", 100.0, 80.0),
            ("B", "MD", "NH", "Cardiology", 200.0, 150.0),
        ],
        2023: [
            ("A", "MD", "RI", "Cardiology", 120.0, 85.0),
            ("B", "MD", "NH", "Cardiology", 210.0, 160.0),
        ],
    })


@pytest.fixture
def source_files(tmp_path, combined):
    """Two CMS-format CSV extracts, one per year."""
    sources = {}
    for year in (2022, 2023):
        path = tmp_path / f"MUP_PHY_R24_P05_V10_D{year}_Prov.csv"
        write_cms_csv(combined[combined["year"] == year], path)
        sources[year] = path
    return sources


@pytest.fixture
def regression_cohort():
    """Larger synthetic cohort with a clear specialty ordering in allowed amounts."""
    rng = np.random.default_rng(7)
    base = {"Cardiology": 300.0, "Dermatology": 150.0, "Family Practice": 100.0, "Urology": 500.0}
    state_effect = {"NH": 0.0, "RI": 40.0}

    records = []
    npi = 0
    for state, s_eff in state_effect.items():
        for specialty, b in base.items():
            for _ in range(10):
                npi += 1
                for year in (2022, 2023):
                    allowed = b + s_eff + 10.0 * (year - 2022) + rng.normal(0, 5)
                    records.append({
                        "npi": f"{npi:010d}",
                        "credentials": "MD",
                        "state": state,
                        "specialty": specialty,
                        "submitted_charge": allowed * 1.5,
                        "allowed_amount": allowed,
                        "year": year,
                    })
    return pd.DataFrame(records, columns=COLUMNS)
