"""
Centralized Configuration Module for the Weight Lifting Quality Report.

All paths, filtering thresholds, cross-validation settings and model tuning
grids are defined here. Only a handful of fields can be overridden via the
command line (input files, models, seed).
"""

from pathlib import Path
from typing import Dict, List, Any, Optional, Tuple
from dataclasses import dataclass, field, asdict
import json


# =============================================================================
# BASE PATHS
# =============================================================================

# Working directory the report is run from
PROJECT_ROOT = Path.cwd()

# Input files live here unless overridden
DATA_DIR = PROJECT_ROOT / "data"

# Output directories
OUTPUT_DIR = PROJECT_ROOT / "output"
LOGS_DIR = OUTPUT_DIR / "logs"
RESULTS_DIR = OUTPUT_DIR / "results"
PLOTS_DIR = OUTPUT_DIR / "plots"
PREDICTIONS_DIR = OUTPUT_DIR / "predictions"


# =============================================================================
# DATASET CONSTANTS
# =============================================================================

# Quality-of-execution labels: A is the correct lift, B-E are common mistakes
CLASSES: List[str] = ['A', 'B', 'C', 'D', 'E']

# Markers the raw export uses for missing values
NA_VALUES: List[str] = ['NA', '', '#DIV/0!']

# Row index, subject and timing columns; they identify a recording, not a movement
BOOKKEEPING_COLUMNS: List[str] = [
    'X',
    'user_name',
    'raw_timestamp_part_1',
    'raw_timestamp_part_2',
    'cvtd_timestamp',
    'new_window',
    'num_window',
]

MODEL_NAMES: List[str] = ['glmnet', 'lda', 'ctree', 'rf']


# =============================================================================
# DATA CONFIGURATION
# =============================================================================

@dataclass
class DataConfig:
    """Data loading, filtering and partitioning configuration."""

    # Input files
    data_dir: Path = DATA_DIR
    train_file: str = 'pml-training.csv'
    test_file: str = 'pml-testing.csv'

    # Columns
    label_column: str = 'classe'
    problem_id_column: str = 'problem_id'
    classes: List[str] = field(default_factory=lambda: list(CLASSES))
    na_values: List[str] = field(default_factory=lambda: list(NA_VALUES))
    bookkeeping_columns: List[str] = field(default_factory=lambda: list(BOOKKEEPING_COLUMNS))
    drop_bookkeeping_columns: bool = True

    # Column filters
    missing_threshold: float = 0.7  # drop if more than 70% of rows are missing
    nzv_freq_cut: float = 95 / 5
    nzv_unique_cut: float = 10.0
    remove_near_zero_variance: bool = False  # inspected, not removed

    # Descriptive statistics
    correlation_cutoff: float = 0.8
    pca_variance_threshold: float = 0.95

    # Train/held-out split
    train_fraction: float = 0.7
    random_seed: int = 42


# =============================================================================
# CROSS-VALIDATION CONFIGURATION
# =============================================================================

@dataclass
class ValidationConfig:
    """Resampling used inside model fitting."""

    n_splits: int = 10
    n_repeats: int = 3
    scoring: str = 'accuracy'
    n_jobs: Optional[int] = None


# =============================================================================
# MODEL CONFIGURATION
# =============================================================================

@dataclass
class ModelSpec:
    """Settings for one classifier."""

    enabled: bool = True
    pca: bool = False
    params: Dict[str, Any] = field(default_factory=dict)
    param_grid: Dict[str, List[Any]] = field(default_factory=dict)

    # Per-model resampling override (None = use ValidationConfig)
    n_splits: Optional[int] = None
    n_repeats: Optional[int] = None


@dataclass
class ModelsConfig:
    """The four classifiers compared by the report."""

    # Elastic-net penalised multinomial logistic regression
    glmnet: ModelSpec = field(default_factory=lambda: ModelSpec(
        params={'max_iter': 2000, 'tol': 1e-3, 'l1_ratio': 0.5},
        param_grid={
            'C': [0.1, 1.0, 10.0],
            'l1_ratio': [0.1, 0.5, 1.0],
        }
    ))

    # Linear discriminant analysis, no tuning parameters
    lda: ModelSpec = field(default_factory=lambda: ModelSpec())

    # Single tree grown until splits stop reducing impurity meaningfully
    ctree: ModelSpec = field(default_factory=lambda: ModelSpec(
        params={'criterion': 'entropy', 'min_samples_leaf': 7},
        param_grid={
            'min_impurity_decrease': [0.0, 0.0005, 0.005],
        }
    ))

    # Random forest, tuned on the number of features tried per split
    rf: ModelSpec = field(default_factory=lambda: ModelSpec(
        params={'n_estimators': 150},
        param_grid={
            'max_features': [0.05, 0.15, 0.5],
        },
        n_splits=5,
        n_repeats=1
    ))

    def get(self, name: str) -> ModelSpec:
        if name not in MODEL_NAMES:
            raise ValueError(f"Unknown model '{name}'. Available: {', '.join(MODEL_NAMES)}")
        return getattr(self, name)


# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================

@dataclass
class OutputConfig:
    """Output paths and logging configuration."""

    # Directories
    output_dir: Path = OUTPUT_DIR
    logs_dir: Path = LOGS_DIR
    results_dir: Path = RESULTS_DIR
    plots_dir: Path = PLOTS_DIR
    predictions_dir: Path = PREDICTIONS_DIR

    # File names
    metrics_filename: str = 'evaluation_metrics.json'
    comparison_filename: str = 'model_comparison.csv'
    predictions_filename: str = 'quiz_predictions.csv'
    report_filename: str = 'evaluation_report.txt'
    training_log_filename: str = 'training.csv'
    config_filename: str = 'config.json'

    # Report options
    save_plots: bool = True
    write_answer_files: bool = True

    # Logging
    log_level: str = 'INFO'
    verbose_console: bool = False  # Only show essential info in terminal

    def ensure_directories(self):
        """Create output directories if they don't exist."""
        for dir_path in [self.output_dir, self.logs_dir, self.results_dir,
                         self.plots_dir, self.predictions_dir]:
            Path(dir_path).mkdir(parents=True, exist_ok=True)


# =============================================================================
# MASTER CONFIGURATION CLASS
# =============================================================================

@dataclass
class Config:
    """Master configuration container."""

    data: DataConfig = field(default_factory=DataConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    models: ModelsConfig = field(default_factory=ModelsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def train_path(self) -> Path:
        return Path(self.data.data_dir) / self.data.train_file

    @property
    def test_path(self) -> Path:
        return Path(self.data.data_dir) / self.data.test_file

    def enabled_models(self) -> List[str]:
        """Get list of enabled model names, in report order."""
        return [name for name in MODEL_NAMES if self.models.get(name).enabled]

    def validate(self) -> Tuple[List[str], List[str]]:
        """Validate configuration settings."""
        errors = []
        warnings = []

        if not self.train_path.exists():
            errors.append(f"Training file does not exist: {self.train_path}")

        if not self.test_path.exists():
            warnings.append(f"Quiz file does not exist: {self.test_path}")

        if not 0.0 < self.data.missing_threshold <= 1.0:
            errors.append("missing_threshold must be in (0, 1]")

        if not 0.0 < self.data.train_fraction < 1.0:
            errors.append("train_fraction must be strictly between 0 and 1")

        if not 0.0 < self.data.pca_variance_threshold <= 1.0:
            errors.append("pca_variance_threshold must be in (0, 1]")

        if len(set(self.data.classes)) != len(self.data.classes):
            errors.append("classes contains duplicates")

        if self.validation.n_splits < 2:
            errors.append("n_splits must be at least 2")

        if not self.enabled_models():
            errors.append("No models enabled")

        # Warnings
        if self.validation.n_splits * self.validation.n_repeats > 50:
            warnings.append("More than 50 resampling fits per grid point; training will be slow")

        if self.data.train_fraction < 0.5:
            warnings.append("Less than half the rows are used for training")

        return errors, warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""

        def convert(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert(v) for v in obj]
            return obj

        return {
            'data': convert(asdict(self.data)),
            'validation': asdict(self.validation),
            'models': {name: convert(asdict(self.models.get(name))) for name in MODEL_NAMES},
            'output': convert(asdict(self.output)),
        }

    def save(self, filepath: Path):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load(cls, filepath: Path) -> 'Config':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        config = cls()

        for key, value in data.get('data', {}).items():
            if hasattr(config.data, key):
                if key == 'data_dir':
                    value = Path(value)
                setattr(config.data, key, value)

        for key, value in data.get('validation', {}).items():
            if hasattr(config.validation, key):
                setattr(config.validation, key, value)

        for name, spec in data.get('models', {}).items():
            if name in MODEL_NAMES:
                setattr(config.models, name, ModelSpec(**spec))

        for key, value in data.get('output', {}).items():
            if hasattr(config.output, key):
                if key.endswith('_dir'):
                    value = Path(value)
                setattr(config.output, key, value)

        return config

    def print_summary(self):
        """Print a summary of the current configuration."""
        print("\n" + "="*70)
        print("CONFIGURATION SUMMARY")
        print("="*70)

        print(f"\nTraining file: {self.train_path}")
        print(f"Quiz file:     {self.test_path}")
        print(f"Label column:  {self.data.label_column} ({', '.join(self.data.classes)})")

        print(f"\nColumn filters:")
        print(f"  Drop bookkeeping columns: {self.data.drop_bookkeeping_columns}")
        print(f"  Missing threshold: {self.data.missing_threshold * 100:.0f}%")
        print(f"  NZV freq cut / unique cut: {self.data.nzv_freq_cut:.1f} / {self.data.nzv_unique_cut:.1f}")
        print(f"  Remove NZV columns: {self.data.remove_near_zero_variance}")

        print(f"\nSplit: {self.data.train_fraction * 100:.0f}% train, seed {self.data.random_seed}")
        print(f"Cross-validation: {self.validation.n_splits}-fold x {self.validation.n_repeats}")

        print("\nModels:")
        for name in MODEL_NAMES:
            spec = self.models.get(name)
            status = 'on ' if spec.enabled else 'off'
            grid = ', '.join(f"{k}={v}" for k, v in spec.param_grid.items()) or '-'
            print(f"  {name:8s} [{status}] pca={spec.pca} grid: {grid}")

        print("="*70)


# =============================================================================
# DEFAULT CONFIGURATION INSTANCE
# =============================================================================

CONFIG = Config()


def get_config() -> Config:
    """Get the default configuration instance."""
    return CONFIG


def set_models(names: List[str], config: Config = None):
    """Enable only the given models (CLI override)."""
    config = config or CONFIG
    unknown = [n for n in names if n not in MODEL_NAMES]
    if unknown:
        raise ValueError(f"Unknown model(s): {', '.join(unknown)}")
    for name in MODEL_NAMES:
        config.models.get(name).enabled = name in names


def set_seed(seed: int, config: Config = None):
    """Set the split/resampling seed (CLI override)."""
    config = config or CONFIG
    config.data.random_seed = seed
