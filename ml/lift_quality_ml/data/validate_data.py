"""
Data Validation for the Weight Lifting Quality Report.

Validates:
- Both input files are present and readable
- The training file carries the label column with only the five known classes
- Every class is represented
- The quiz file carries problem ids and the same sensor columns

Problems are collected and reported together; the run stops only on errors.
"""

import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from ..config import CONFIG
from ..utils import get_logger
from .loading import load_dataset


@dataclass
class ValidationResult:
    """Result of a validation check."""
    passed: bool
    message: str
    severity: str = 'error'  # 'error', 'warning', 'info'
    details: Optional[Dict] = None


@dataclass
class FileValidation:
    """Validation results for a single input file."""
    role: str  # 'train' or 'quiz'
    path: Path
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(r.severity == 'error' and not r.passed for r in self.results)

    @property
    def has_warnings(self) -> bool:
        return any(r.severity == 'warning' and not r.passed for r in self.results)


class DataValidator:
    """
    Validates the training and quiz exports before any modelling.
    """

    def __init__(self, config=None):
        """
        Initialize the data validator.

        Args:
            config: Configuration object
        """
        self.config = config or CONFIG
        self.logger = get_logger('validation')

        self.files: List[FileValidation] = [
            FileValidation(role='train', path=self.config.train_path),
            FileValidation(role='quiz', path=self.config.test_path),
        ]
        self.frames: Dict[str, pd.DataFrame] = {}

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if no check failed with severity 'error'
        """
        print("\n" + "="*70)
        print("DATA VALIDATION")
        print("="*70)

        for file_validation in self.files:
            df = self._load(file_validation)
            if df is not None:
                self.frames[file_validation.role] = df

        train, quiz = self.files
        if 'train' in self.frames:
            self._validate_labels(train, self.frames['train'])
        if 'quiz' in self.frames:
            self._validate_quiz(quiz, self.frames['quiz'], self.frames.get('train'))

        self._print_summary()
        return not any(f.has_errors for f in self.files)

    def _load(self, file_validation: FileValidation) -> Optional[pd.DataFrame]:
        """Check a file exists and parses."""
        if not file_validation.path.exists():
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Missing file: {file_validation.path}",
                severity='error'
            ))
            return None

        try:
            df = load_dataset(file_validation.path, self.config)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Could not parse {file_validation.path.name}: {e}",
                severity='error'
            ))
            return None

        file_validation.results.append(ValidationResult(
            passed=len(df) > 0,
            message=f"{len(df)} rows, {df.shape[1]} columns",
            severity='error' if len(df) == 0 else 'info',
            details={'rows': len(df), 'columns': df.shape[1]}
        ))
        return df

    def _validate_labels(self, file_validation: FileValidation, df: pd.DataFrame):
        """Check the label column against the fixed class set."""
        column = self.config.data.label_column
        classes = self.config.data.classes

        if column not in df.columns:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Label column '{column}' not found",
                severity='error'
            ))
            return

        n_missing = int(df[column].isna().sum())
        if n_missing:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"{n_missing} rows without a label",
                severity='error'
            ))

        values = set(df[column].dropna().astype(str).str.strip())
        unknown = sorted(values - set(classes))
        if unknown:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Unexpected label values: {unknown}",
                severity='error',
                details={'unknown': unknown}
            ))

        absent = [c for c in classes if c not in values]
        if absent:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Classes never observed: {absent}",
                severity='warning',
                details={'absent': absent}
            ))

        counts = df[column].value_counts().to_dict()
        file_validation.results.append(ValidationResult(
            passed=True,
            message="Class counts: " + ", ".join(f"{k}={counts.get(k, 0)}" for k in classes),
            severity='info',
            details={'counts': counts}
        ))

    def _validate_quiz(
        self,
        file_validation: FileValidation,
        df: pd.DataFrame,
        train_df: Optional[pd.DataFrame]
    ):
        """Check the quiz file lines up with the training file."""
        id_column = self.config.data.problem_id_column
        label = self.config.data.label_column

        if id_column not in df.columns:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Problem id column '{id_column}' not found",
                severity='error'
            ))
        elif df[id_column].duplicated().any():
            file_validation.results.append(ValidationResult(
                passed=False,
                message="Duplicate problem ids",
                severity='warning'
            ))

        if train_df is None:
            return

        train_columns = set(train_df.columns) - {label}
        quiz_columns = set(df.columns) - {id_column}

        missing = sorted(train_columns - quiz_columns)
        if missing:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"{len(missing)} training columns absent from quiz file",
                severity='error',
                details={'missing': missing}
            ))

        extra = sorted(quiz_columns - train_columns - {label})
        if extra:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"{len(extra)} quiz columns not in training file",
                severity='warning',
                details={'extra': extra}
            ))

    def _print_summary(self):
        """Print validation summary."""
        print("\n" + "-"*70)
        for file_validation in self.files:
            status = "FAILED" if file_validation.has_errors else "OK"
            print(f"  [{status}] {file_validation.role}: {file_validation.path}")
            for result in file_validation.results:
                if result.severity == 'info':
                    self.logger.debug(f"{file_validation.role}: {result.message} {result.details or ''}")
                    print(f"      {result.message}")
                elif not result.passed:
                    print(f"      {result.severity.upper()}: {result.message}")
                    if result.details:
                        print(f"        {self._format_details(result.details)}")
                    log = self.logger.error if result.severity == 'error' else self.logger.warning
                    log(f"{file_validation.role}: {result.message}")
        print("-"*70)

    @staticmethod
    def _format_details(details: Dict, limit: int = 10) -> str:
        parts = []
        for key, value in details.items():
            if isinstance(value, (list, tuple)) and len(value) > limit:
                value = list(value[:limit]) + [f"... {len(value) - limit} more"]
            parts.append(f"{key}: {value}")
        return "; ".join(parts)

    def get_errors(self) -> List[str]:
        return [
            f"{f.role}: {r.message}"
            for f in self.files for r in f.results
            if r.severity == 'error' and not r.passed
        ]


def validate_dataset(config=None) -> bool:
    """
    Validate both input files.

    Args:
        config: Configuration object

    Returns:
        True if the files can be used for the report
    """
    validator = DataValidator(config)
    return validator.validate_all()
