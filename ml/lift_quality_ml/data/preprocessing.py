"""
Column filtering and descriptive statistics for the sensor table.

Handles:
- Removal of bookkeeping columns (row index, subject, timestamps, windows)
- Missing-value filter (drop columns mostly empty)
- Near-zero-variance inspection (frequency ratio / percent unique)
- Correlation matrix and highly correlated pairs
- PCA summary of the retained predictors

Filters only ever remove columns; the row count is left untouched.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional
from dataclasses import dataclass
from sklearn.decomposition import PCA
from sklearn.impute import SimpleImputer
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from ..config import CONFIG
from ..utils import get_logger

logger = get_logger('data')


@dataclass
class PCASummary:
    """Container for the outcome of a PCA on the predictors."""
    n_components: int
    n_features: int
    variance_threshold: float
    explained_variance_ratio: np.ndarray

    @property
    def cumulative_variance(self) -> np.ndarray:
        return np.cumsum(self.explained_variance_ratio)


def drop_bookkeeping_columns(df: pd.DataFrame, config=None) -> pd.DataFrame:
    """Remove row index, subject and timing columns that are present."""
    config = config or CONFIG
    present = [c for c in config.data.bookkeeping_columns if c in df.columns]
    if present:
        logger.info(f"Dropping {len(present)} bookkeeping columns: {', '.join(present)}")
    return df.drop(columns=present)


def missing_value_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column count and fraction of missing values, worst first."""
    counts = df.isna().sum()
    n_rows = len(df)
    summary = pd.DataFrame({
        'missing': counts,
        'fraction': counts / n_rows if n_rows else 0.0
    })
    return summary.sort_values('missing', ascending=False)


def drop_missing_columns(df: pd.DataFrame, threshold: float = 0.7) -> pd.DataFrame:
    """
    Drop every column whose missing count exceeds threshold * n_rows.

    Args:
        df: Input frame
        threshold: Fraction of rows (0-1) a column may be missing

    Returns:
        Frame with the same rows and the remaining columns
    """
    limit = threshold * len(df)
    missing = df.isna().sum()
    to_drop = missing[missing > limit].index.tolist()

    logger.info(f"Missing-value filter: dropping {len(to_drop)} of {df.shape[1]} columns "
                f"(> {threshold * 100:.0f}% missing)")
    if to_drop:
        logger.debug(f"Dropped: {to_drop}")

    return df.drop(columns=to_drop)


def _frequency_metrics(values: pd.Series) -> Dict[str, float]:
    """Frequency ratio and percent unique for one column."""
    n_rows = len(values)
    counts = values.dropna().value_counts()
    n_unique = len(counts)

    if n_unique > 1:
        freq_ratio = counts.iloc[0] / counts.iloc[1]
    else:
        freq_ratio = 0.0

    # Missing rows count towards the denominator
    percent_unique = 100.0 * n_unique / n_rows if n_rows else 0.0

    return {
        'freq_ratio': float(freq_ratio),
        'percent_unique': float(percent_unique),
        'zero_var': n_unique <= 1
    }


def near_zero_variance(
    df: pd.DataFrame,
    freq_cut: float = 95 / 5,
    unique_cut: float = 10.0
) -> pd.DataFrame:
    """
    Flag near-constant predictors.

    A column is near-zero-variance when the most common value is more than
    freq_cut times as frequent as the second most common AND distinct values
    make up at most unique_cut percent of the rows, or when it has a single
    distinct value.

    Returns:
        Frame indexed by column with freq_ratio, percent_unique, zero_var, nzv
    """
    rows = {col: _frequency_metrics(df[col]) for col in df.columns}
    metrics = pd.DataFrame.from_dict(rows, orient='index',
                                     columns=['freq_ratio', 'percent_unique', 'zero_var'])
    metrics['zero_var'] = metrics['zero_var'].astype(bool)
    metrics['nzv'] = (
        (metrics['freq_ratio'] > freq_cut) & (metrics['percent_unique'] <= unique_cut)
    ) | metrics['zero_var']

    n_flagged = int(metrics['nzv'].sum())
    logger.info(f"Near-zero-variance check: {n_flagged} of {len(metrics)} columns flagged")
    return metrics


class FeatureFilter:
    """
    Learns which columns to keep from the training frame and applies the same
    selection to other frames (held-out rows, quiz rows).
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.feature_columns: Optional[List[str]] = None
        self.nzv_report: Optional[pd.DataFrame] = None
        self.dropped_missing: List[str] = []
        self.dropped_nzv: List[str] = []

    def fit(self, df: pd.DataFrame) -> 'FeatureFilter':
        """
        Decide the feature columns from a labelled training frame.

        Args:
            df: Raw training frame including the label column

        Returns:
            self
        """
        cfg = self.config.data
        label = cfg.label_column

        work = df.drop(columns=[c for c in (label, cfg.problem_id_column) if c in df.columns])
        work = work.replace(list(cfg.na_values), np.nan)
        if cfg.drop_bookkeeping_columns:
            work = drop_bookkeeping_columns(work, self.config)

        before = set(work.columns)
        work = drop_missing_columns(work, cfg.missing_threshold)
        self.dropped_missing = sorted(before - set(work.columns))

        # Only numeric sensor readings are usable as predictors
        non_numeric = work.select_dtypes(exclude=[np.number]).columns.tolist()
        if non_numeric:
            logger.warning(f"Ignoring non-numeric columns: {non_numeric}")
            work = work.drop(columns=non_numeric)

        self.nzv_report = near_zero_variance(work, cfg.nzv_freq_cut, cfg.nzv_unique_cut)
        flagged = self.nzv_report.index[self.nzv_report['nzv']].tolist()
        if cfg.remove_near_zero_variance and flagged:
            work = work.drop(columns=flagged)
            self.dropped_nzv = flagged
            logger.info(f"Removed {len(flagged)} near-zero-variance columns")

        self.feature_columns = work.columns.tolist()
        logger.info(f"Keeping {len(self.feature_columns)} feature columns")
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Select the fitted feature columns, in training order."""
        if self.feature_columns is None:
            raise RuntimeError("FeatureFilter has not been fitted yet. Call fit() first.")

        missing = [c for c in self.feature_columns if c not in df.columns]
        if missing:
            raise KeyError(f"Frame lacks {len(missing)} feature columns, e.g. {missing[:5]}")

        return df[self.feature_columns].copy()

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)


def correlation_matrix(df: pd.DataFrame) -> pd.DataFrame:
    return df.corr(numeric_only=True)


def highly_correlated_pairs(df: pd.DataFrame, cutoff: float = 0.8) -> pd.DataFrame:
    """
    List predictor pairs whose absolute correlation exceeds cutoff.

    Returns:
        Frame with feature_1, feature_2, correlation sorted by |correlation|
    """
    corr = correlation_matrix(df)
    cols = corr.columns
    upper = np.triu(np.ones(corr.shape, dtype=bool), k=1)

    pairs = []
    for i, j in zip(*np.where(upper & (corr.abs().values > cutoff))):
        pairs.append((cols[i], cols[j], corr.iat[i, j]))

    result = pd.DataFrame(pairs, columns=['feature_1', 'feature_2', 'correlation'])
    if not result.empty:
        result = (result.reindex(result['correlation'].abs().sort_values(ascending=False).index)
                  .reset_index(drop=True))

    logger.info(f"{len(result)} predictor pairs with |r| > {cutoff}")
    return result


def pca_summary(df: pd.DataFrame, variance_threshold: float = 0.95) -> PCASummary:
    """Number of principal components needed to retain variance_threshold."""
    # Median imputation matches the model pipelines
    pipeline = make_pipeline(SimpleImputer(strategy='median'), StandardScaler(), PCA())
    pipeline.fit(df.values)
    ratio = pipeline[-1].explained_variance_ratio_

    cumulative = np.cumsum(ratio)
    n_components = int(np.searchsorted(cumulative, variance_threshold) + 1)
    n_components = min(n_components, len(ratio))

    logger.info(f"PCA: {n_components} of {df.shape[1]} components capture "
                f"{variance_threshold * 100:.0f}% of the variance")

    return PCASummary(
        n_components=n_components,
        n_features=df.shape[1],
        variance_threshold=variance_threshold,
        explained_variance_ratio=ratio
    )
