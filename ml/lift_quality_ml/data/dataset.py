"""
Stratified train/held-out partitioning of the filtered sensor table.
"""

import pandas as pd
from typing import List
from dataclasses import dataclass
from sklearn.model_selection import train_test_split

from ..utils import get_logger

logger = get_logger('data')


@dataclass
class DatasetSplit:
    """Container for the two disjoint row partitions."""
    X_train: pd.DataFrame
    X_test: pd.DataFrame
    y_train: pd.Series
    y_test: pd.Series

    @property
    def n_train(self) -> int:
        return len(self.X_train)

    @property
    def n_test(self) -> int:
        return len(self.X_test)


def split_dataset(
    features: pd.DataFrame,
    labels: pd.Series,
    train_fraction: float = 0.7,
    seed: int = 42
) -> DatasetSplit:
    """
    Split rows into a training and a held-out partition, stratified by label.

    The same seed always yields the same partition.

    Args:
        features: Filtered predictor frame
        labels: Label series aligned with features
        train_fraction: Share of rows kept for training
        seed: Random seed

    Returns:
        DatasetSplit
    """
    if len(features) != len(labels):
        raise ValueError(f"features has {len(features)} rows but labels has {len(labels)}")

    X_train, X_test, y_train, y_test = train_test_split(
        features,
        labels,
        train_size=train_fraction,
        stratify=labels,
        random_state=seed
    )

    logger.info(f"Split: {len(X_train)} training rows, {len(X_test)} held-out rows "
                f"(seed {seed})")

    return DatasetSplit(X_train=X_train, X_test=X_test, y_train=y_train, y_test=y_test)


def class_distribution(labels: pd.Series, classes: List[str]) -> pd.Series:
    """Proportion of rows per class, in the fixed class order."""
    counts = pd.Series(labels).astype(str).value_counts()
    counts = counts.reindex(classes, fill_value=0)
    total = counts.sum()
    return counts / total if total else counts.astype(float)


def stratification_report(
    split: DatasetSplit,
    labels: pd.Series,
    classes: List[str]
) -> pd.DataFrame:
    """
    Compare class proportions across the full data and both partitions.

    Returns:
        Frame indexed by class with full/train/held_out proportions and
        the largest absolute deviation from the full-data proportion
    """
    report = pd.DataFrame({
        'full': class_distribution(labels, classes),
        'train': class_distribution(split.y_train, classes),
        'held_out': class_distribution(split.y_test, classes),
    })
    report['max_deviation'] = (
        report[['train', 'held_out']].sub(report['full'], axis=0).abs().max(axis=1)
    )
    return report
