import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from lift_quality_ml.config import Config, CLASSES

SENSORS = ['roll_belt', 'pitch_belt', 'yaw_belt', 'accel_arm_x',
           'magnet_dumbbell_y', 'gyros_forearm_z']
ROWS_PER_CLASS = 60
N_QUIZ = 20


def _sensor_block(rng, class_index, n):
    """Readings whose means shift with the class so the labels are learnable."""
    block = {}
    for k, name in enumerate(SENSORS):
        centre = class_index * (3.0 + k) if k % 2 == 0 else -class_index * 2.0
        block[name] = np.round(rng.normal(centre, 1.0, n), 3)
    return block


def make_sensor_frame(rng, labels, include_label=True):
    n = len(labels)
    frame = {
        'user_name': rng.choice(['adelmo', 'carlitos', 'pedro'], n),
        'raw_timestamp_part_1': rng.integers(1322489605, 1323095000, n),
        'raw_timestamp_part_2': rng.integers(0, 999999, n),
        'cvtd_timestamp': ['05/12/2011 11:23'] * n,
        'new_window': ['no'] * n,
        'num_window': rng.integers(1, 864, n),
    }

    sensors = {name: np.empty(n) for name in SENSORS}
    for i, cls in enumerate(CLASSES):
        mask = np.asarray(labels) == cls
        block = _sensor_block(rng, i, int(mask.sum()))
        for name in SENSORS:
            sensors[name][mask] = block[name]
    frame.update(sensors)

    # Summary statistics only filled on window boundary rows
    kurtosis = np.full(n, '', dtype=object)
    max_roll = np.full(n, 'NA', dtype=object)
    boundary = rng.choice(n, size=max(1, n // 40), replace=False)
    kurtosis[boundary] = '#DIV/0!'
    kurtosis[boundary[:1]] = '-0.0168'
    max_roll[boundary] = '-94.3'
    frame['kurtosis_roll_belt'] = kurtosis
    frame['max_roll_belt'] = max_roll

    # Constant and near-constant columns
    frame['amplitude_yaw_belt'] = np.zeros(n)
    gyros = np.zeros(n)
    gyros[: max(1, n // 50)] = 0.02
    frame['gyros_dumbbell_z'] = gyros

    df = pd.DataFrame(frame)
    if include_label:
        df['classe'] = list(labels)
    return df


@pytest.fixture
def rng():
    return np.random.default_rng(2011)


@pytest.fixture
def train_frame(rng):
    labels = np.repeat(CLASSES, ROWS_PER_CLASS)
    rng.shuffle(labels)
    return make_sensor_frame(rng, labels)


@pytest.fixture
def quiz_frame(rng):
    labels = rng.choice(CLASSES, N_QUIZ)
    df = make_sensor_frame(rng, labels, include_label=False)
    df['kurtosis_roll_belt'] = ''
    df['max_roll_belt'] = 'NA'
    df['problem_id'] = range(1, N_QUIZ + 1)
    return df


@pytest.fixture
def data_files(tmp_path, train_frame, quiz_frame):
    """Write both exports the way the original CSVs look (unnamed row index first)."""
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    train_frame.index = range(1, len(train_frame) + 1)
    quiz_frame.index = range(1, len(quiz_frame) + 1)
    train_frame.to_csv(data_dir / 'pml-training.csv')
    quiz_frame.to_csv(data_dir / 'pml-testing.csv')
    return data_dir


@pytest.fixture
def config(tmp_path, data_files):
    """Small, fast configuration pointed at the temporary files."""
    cfg = Config()
    cfg.data.data_dir = data_files

    cfg.validation.n_splits = 3
    cfg.validation.n_repeats = 1

    cfg.models.glmnet.params = {'max_iter': 500, 'tol': 1e-2, 'l1_ratio': 0.5}
    cfg.models.glmnet.param_grid = {'C': [1.0], 'l1_ratio': [0.5, 1.0]}
    cfg.models.ctree.param_grid = {'min_impurity_decrease': [0.0, 0.01]}
    cfg.models.rf.params = {'n_estimators': 20}
    cfg.models.rf.param_grid = {'max_features': [0.3, 0.6]}
    cfg.models.rf.n_splits = 3

    out = tmp_path / 'output'
    cfg.output.output_dir = out
    cfg.output.logs_dir = out / 'logs'
    cfg.output.results_dir = out / 'results'
    cfg.output.plots_dir = out / 'plots'
    cfg.output.predictions_dir = out / 'predictions'
    return cfg
