"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures used across multiple test modules:
small CSV extracts for every dataset, a dashboard config that never touches
the network, and a DashboardContext wired to both.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pandas as pd
import pytest

from config import DashboardConfig, GeographyConfig, RenderConfig
from core.config import PathConfig
from core.context import DashboardContext
from data_processing.schema import EnforcementRecord


TESTS_CSV = """YEAR,JURISDICTION,METRIC,Sum(COUNT)
2023,NSW,breath_tests_conducted,100
2023,NSW,drug_tests_conducted,20
2023,VIC,breath_tests_conducted,50
2022,NSW,breath_tests_conducted,80
2022,Queensland,drug_tests_conducted,30
2022,,breath_tests_conducted,5
"""

FINES_CSV = """YEAR,JURISDICTION,METRIC,AGE_GROUP,DETECTION_METHOD,FINES,ARRESTS,CHARGES
2023,NSW,drink_driving,17-25,Random breath test,40,5,10
2023,VIC,drug_driving,26-39,Roadside drug test,30,2,8
2024,NSW,drug_driving,All ages,Random breath test,25,1,4
2024,WA,drink_driving,40-64,,15,0,3
2024,SA,drink_driving,17-25,Targeted,5,1,1
"""

POSITIVE_BREATH_CSV = """YEAR,JURISDICTION,AGE_GROUP,COUNT
2023,NSW,17-25,12
2023,NSW,26-39,9
2024,NSW,17-25,14
2024,VIC,All ages,30
2024,VIC,26-39,7
2024,TAS,,3
"""

POSITIVE_DRUG_CSV = """YEAR,JURISDICTION,AGE_GROUP,DRUG_TYPE,COUNT,CHARGES
2022,NSW,26-39,CANNABIS,10,2
2023,NSW,17-25,METHYLAMPHETAMINE,15,5
2023,VIC,26-39,CANNABIS,8,1
2024,QLD,40-64,COCAINE,4,0
2024,NSW,17-25,CANNABIS,6,3
2024,WA,26-39,CANNABIS,9,2
2024,SA,26-39,ECSTASY,1,0
2024,TAS,26-39,CANNABIS,2,0
"""

DATASET_CSVS = {
    "tests": TESTS_CSV,
    "fines": FINES_CSV,
    "positive_breath": POSITIVE_BREATH_CSV,
    "positive_drug": POSITIVE_DRUG_CSV,
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dataset_files(temp_dir: Path) -> dict[str, Path]:
    """Write one small CSV extract per dataset; returns dataset name -> path."""
    data_dir = temp_dir / "extracts"
    data_dir.mkdir()
    files = {}
    for dataset, content in DATASET_CSVS.items():
        path = data_dir / f"{dataset}.csv"
        path.write_text(content, encoding="utf-8")
        files[dataset] = path
    return files


@pytest.fixture
def offline_config() -> DashboardConfig:
    """Dashboard config with the boundaries fetch disabled and a short debounce."""
    return DashboardConfig(
        geography=GeographyConfig(enabled=False),
        render=RenderConfig(resize_debounce_ms=20),
    )


@pytest.fixture
def context(
    temp_dir: Path, dataset_files: dict[str, Path], offline_config: DashboardConfig
) -> Generator[DashboardContext, None, None]:
    """DashboardContext reading the fixture CSVs, closed after the test."""
    ctx = DashboardContext(
        config=offline_config,
        paths=PathConfig(base_dir=temp_dir),
        sources=dataset_files,
    )
    yield ctx
    ctx.close()


@pytest.fixture
def tests_frame(context: DashboardContext) -> pd.DataFrame:
    """Typed frame for the tests-conducted fixture extract."""
    return context.load_dataset("tests").df


@pytest.fixture
def scenario_records() -> list[EnforcementRecord]:
    """NSW 100 breath + 20 drug tests, VIC 50 breath tests, all in 2023."""
    return [
        EnforcementRecord(year=2023, jurisdiction="NSW", metric="breath_tests_conducted", count=100),
        EnforcementRecord(year=2023, jurisdiction="NSW", metric="drug_tests_conducted", count=20),
        EnforcementRecord(year=2023, jurisdiction="VIC", metric="breath_tests_conducted", count=50),
    ]
