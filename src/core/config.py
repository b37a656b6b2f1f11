"""
Path configuration for the Road Safety Enforcement Dashboard.

Contains the PathConfig dataclass that centralises every dataset location.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class PathConfig:
    """
    Centralises the file paths of the enforcement extracts.

    The extracts are produced by upstream ETL workflows and dropped into a
    single data directory. Keeping their names here means a renamed export
    only needs changing in one place.

    Attributes:
        base_dir: Root directory of the application (defaults to current working directory)
        data_dir: Directory containing the enforcement extracts
    """

    base_dir: Path = field(default_factory=Path.cwd)
    _data_dir: Optional[Path] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Default the data directory relative to base_dir if not provided."""
        if self._data_dir is None:
            self._data_dir = self.base_dir / "data"

    @property
    def data_dir(self) -> Path:
        """Directory containing the enforcement extracts."""
        assert self._data_dir is not None
        return self._data_dir

    @property
    def tests_xlsx(self) -> Path:
        """Breath and drug tests conducted, by jurisdiction and year."""
        return self.data_dir / "police_enforcement_2024_alcohol_drug_tests_TAMTONG.xlsx"

    @property
    def fines_xlsx(self) -> Path:
        """Fines, arrests and charges by offence, detection method and age."""
        return self.data_dir / "police_enforcement_2024_fines_TAMTONG.xlsx"

    @property
    def positive_breath_xlsx(self) -> Path:
        """Positive breath tests by jurisdiction, age group and year."""
        return self.data_dir / "police_enforcement_2024_positive_breath_tests.xlsx"

    @property
    def positive_drug_xlsx(self) -> Path:
        """Positive drug tests by jurisdiction, drug type, age group and year."""
        return self.data_dir / "police_enforcement_2024_positive_drug_tests.xlsx"

    def dataset_paths(self) -> dict[str, Path]:
        """Map of dataset name to extract path, as referenced by chart configs."""
        return {
            "tests": self.tests_xlsx,
            "fines": self.fines_xlsx,
            "positive_breath": self.positive_breath_xlsx,
            "positive_drug": self.positive_drug_xlsx,
        }

    def validate(self) -> list[str]:
        """
        Validate that the data directory and extracts exist.

        Returns:
            List of error messages. Empty list means all validations passed.
        """
        errors = []

        if not self.data_dir.exists():
            errors.append(f"Data directory not found: {self.data_dir}")

        required_files = [
            (self.tests_xlsx, "Tests conducted extract"),
            (self.fines_xlsx, "Fines extract"),
            (self.positive_breath_xlsx, "Positive breath tests extract"),
            (self.positive_drug_xlsx, "Positive drug tests extract"),
        ]

        for file_path, description in required_files:
            if not file_path.exists():
                errors.append(f"{description} not found: {file_path}")

        return errors

