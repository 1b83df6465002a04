import numpy as np
import pandas as pd
import pytest

from lift_quality_ml.data import (
    FeatureFilter,
    drop_bookkeeping_columns,
    drop_missing_columns,
    missing_value_summary,
    near_zero_variance,
    highly_correlated_pairs,
    load_dataset,
    pca_summary,
)
from tests.conftest import SENSORS


def test_drop_missing_columns_keeps_rows_and_uses_strict_threshold():
    df = pd.DataFrame({
        'complete': np.arange(10.0),
        'seventy': [np.nan] * 7 + [1.0, 2.0, 3.0],
        'eighty': [np.nan] * 8 + [1.0, 2.0],
    })

    filtered = drop_missing_columns(df, threshold=0.7)

    assert len(filtered) == len(df)
    assert list(filtered.columns) == ['complete', 'seventy']


def test_missing_value_summary_orders_worst_first():
    df = pd.DataFrame({'a': [1, np.nan, np.nan, 4], 'b': [1, 2, 3, np.nan]})
    summary = missing_value_summary(df)
    assert summary.index[0] == 'a'
    assert summary.loc['a', 'fraction'] == pytest.approx(0.5)
    assert summary.loc['b', 'missing'] == 1


def test_near_zero_variance_metrics():
    df = pd.DataFrame({
        'constant': np.zeros(100),
        'mostly_zero': [0.0] * 96 + [1.0] * 4,
        'continuous': np.arange(100.0),
    })

    metrics = near_zero_variance(df)

    assert metrics.loc['constant', 'zero_var']
    assert metrics.loc['constant', 'freq_ratio'] == 0.0
    assert metrics.loc['constant', 'nzv']

    assert metrics.loc['mostly_zero', 'freq_ratio'] == pytest.approx(24.0)
    assert metrics.loc['mostly_zero', 'percent_unique'] == pytest.approx(2.0)
    assert metrics.loc['mostly_zero', 'nzv']
    assert not metrics.loc['mostly_zero', 'zero_var']

    assert metrics.loc['continuous', 'freq_ratio'] == pytest.approx(1.0)
    assert not metrics.loc['continuous', 'nzv']


def test_near_zero_variance_respects_cutoffs():
    df = pd.DataFrame({'skewed': [0.0] * 90 + [1.0] * 10})
    # ratio 9 is below the default cut of 19 but above a cut of 5
    assert not near_zero_variance(df).loc['skewed', 'nzv']
    assert near_zero_variance(df, freq_cut=5).loc['skewed', 'nzv']


def test_drop_bookkeeping_columns_only_drops_present(config, train_frame):
    df = train_frame.drop(columns=['num_window'])
    out = drop_bookkeeping_columns(df, config)
    assert 'user_name' not in out.columns
    assert 'roll_belt' in out.columns


def test_feature_filter_selects_sensor_columns(config, train_frame):
    feature_filter = FeatureFilter(config)
    features = feature_filter.fit_transform(train_frame)

    assert len(features) == len(train_frame)
    assert features.shape[1] < train_frame.shape[1]
    for name in SENSORS:
        assert name in features.columns
    for dropped in ('classe', 'user_name', 'cvtd_timestamp', 'kurtosis_roll_belt', 'max_roll_belt'):
        assert dropped not in features.columns
    assert set(feature_filter.dropped_missing) == {'kurtosis_roll_belt', 'max_roll_belt'}


def test_feature_filter_only_flags_near_zero_variance_by_default(config, train_frame):
    feature_filter = FeatureFilter(config).fit(train_frame)

    flagged = set(feature_filter.nzv_report.index[feature_filter.nzv_report['nzv']])
    assert flagged == {'amplitude_yaw_belt', 'gyros_dumbbell_z'}
    assert 'amplitude_yaw_belt' in feature_filter.feature_columns
    assert feature_filter.dropped_nzv == []


def test_feature_filter_can_remove_near_zero_variance(config, train_frame):
    config.data.remove_near_zero_variance = True
    feature_filter = FeatureFilter(config).fit(train_frame)

    assert 'amplitude_yaw_belt' not in feature_filter.feature_columns
    assert 'gyros_dumbbell_z' not in feature_filter.feature_columns
    assert sorted(feature_filter.dropped_nzv) == ['amplitude_yaw_belt', 'gyros_dumbbell_z']


def test_feature_filter_applies_same_columns_to_quiz(config, train_frame, quiz_frame):
    feature_filter = FeatureFilter(config).fit(train_frame)
    quiz = feature_filter.transform(quiz_frame)

    assert list(quiz.columns) == feature_filter.feature_columns
    assert len(quiz) == len(quiz_frame)


def test_feature_filter_transform_errors(config, train_frame):
    with pytest.raises(RuntimeError):
        FeatureFilter(config).transform(train_frame)

    feature_filter = FeatureFilter(config).fit(train_frame)
    with pytest.raises(KeyError):
        feature_filter.transform(train_frame.drop(columns=['roll_belt']))


def test_highly_correlated_pairs():
    rng = np.random.default_rng(0)
    base = rng.normal(size=200)
    df = pd.DataFrame({
        'a': base,
        'b': base * 2 + rng.normal(scale=0.01, size=200),
        'c': -base + rng.normal(scale=0.01, size=200),
        'd': rng.normal(size=200),
    })

    pairs = highly_correlated_pairs(df, cutoff=0.8)

    found = {frozenset((r.feature_1, r.feature_2)) for r in pairs.itertuples()}
    assert found == {frozenset('ab'), frozenset('ac'), frozenset('bc')}
    assert pairs['correlation'].abs().is_monotonic_decreasing


def test_pca_summary_counts_components():
    rng = np.random.default_rng(1)
    base = rng.normal(size=(300, 2))
    df = pd.DataFrame({
        'x1': base[:, 0],
        'x2': base[:, 0] + rng.normal(scale=0.01, size=300),
        'y1': base[:, 1],
        'y2': base[:, 1] + rng.normal(scale=0.01, size=300),
    })

    summary = pca_summary(df, variance_threshold=0.95)

    assert summary.n_components == 2
    assert summary.n_features == 4
    assert summary.cumulative_variance[-1] == pytest.approx(1.0)


def test_near_zero_variance_percent_unique_counts_missing_rows():
    df = pd.DataFrame({'sparse': [1.0, 2.0] + [np.nan] * 8})
    metrics = near_zero_variance(df)
    assert metrics.loc['sparse', 'percent_unique'] == pytest.approx(20.0)


def test_feature_filter_on_loaded_frame(config):
    df = load_dataset(config.train_path, config)
    feature_filter = FeatureFilter(config).fit(df)

    assert set(feature_filter.dropped_missing) == {'kurtosis_roll_belt', 'max_roll_belt'}
    assert 'X' not in feature_filter.feature_columns


def test_pca_summary_imputes_missing_values(train_frame):
    features = train_frame[SENSORS].copy()
    features.loc[features.index[:60], 'roll_belt'] = np.nan

    summary = pca_summary(features, 0.95)

    assert 1 <= summary.n_components <= len(SENSORS)
    assert not np.isnan(summary.explained_variance_ratio).any()
