"""
Loading of the raw sensor exports.

The training export holds one row per sensor sample with the quality label in
the last column; the quiz export has the same sensor columns but carries a
problem id instead of the label.
"""

import pandas as pd
from pathlib import Path
from typing import Tuple

from ..config import CONFIG
from ..utils import get_logger

logger = get_logger('data')

# Name pandas gives the unlabeled leading index column of the export
UNNAMED_INDEX_COLUMN = 'Unnamed: 0'


def load_dataset(path: Path, config=None) -> pd.DataFrame:
    """
    Read one delimited export into a DataFrame.

    Args:
        path: Path to the CSV file
        config: Configuration object

    Returns:
        DataFrame with missing-value markers converted to NaN
    """
    config = config or CONFIG
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    df = pd.read_csv(path, na_values=config.data.na_values, low_memory=False)

    if UNNAMED_INDEX_COLUMN in df.columns:
        df = df.rename(columns={UNNAMED_INDEX_COLUMN: 'X'})

    logger.info(f"Loaded {path.name}: {df.shape[0]} rows x {df.shape[1]} columns")
    return df


def load_raw_data(config=None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Load the training export and the quiz export."""
    config = config or CONFIG
    train_df = load_dataset(config.train_path, config)
    test_df = load_dataset(config.test_path, config)
    return train_df, test_df


def label_series(df: pd.DataFrame, config=None) -> pd.Series:
    """
    Extract the label column, checked against the fixed class set.

    Raises:
        KeyError: If the label column is absent
        ValueError: If labels are missing or outside the class set
    """
    config = config or CONFIG
    column = config.data.label_column
    classes = config.data.classes

    if column not in df.columns:
        raise KeyError(f"Label column '{column}' not found")

    labels = df[column].astype(str).str.strip()
    if df[column].isna().any():
        raise ValueError(f"{int(df[column].isna().sum())} rows have no label")

    unknown = sorted(set(labels.unique()) - set(classes))
    if unknown:
        raise ValueError(f"Unexpected label values: {unknown} (expected {classes})")

    return labels.rename(column)
