import json

import numpy as np
import pandas as pd
import pytest

from lift_quality_ml.main import main, run_analysis


def test_run_analysis_end_to_end(config):
    report = run_analysis(config)

    assert report.n_rows == 300
    assert len(report.feature_columns) < report.n_raw_columns
    assert report.split.n_train + report.split.n_test == report.n_rows
    assert list(report.results) == ['glmnet', 'lda', 'ctree', 'rf']
    assert report.best_model == report.comparison.index[0]
    assert report.comparison['accuracy'].between(0, 1).all()
    assert len(report.quiz_predictions) == 20
    assert report.pca.n_components <= len(report.feature_columns)

    out = config.output
    assert (out.results_dir / out.metrics_filename).exists()
    assert (out.results_dir / 'near_zero_variance.csv').exists()
    assert (out.plots_dir / 'model_comparison.png').exists()
    assert len(list(out.predictions_dir.glob('problem_id_*.txt'))) == 20
    assert (out.logs_dir / out.training_log_filename).exists()


def test_run_analysis_without_outputs(config):
    config.models.glmnet.enabled = False
    config.models.rf.enabled = False

    report = run_analysis(config, save_outputs=False)

    assert list(report.results) == ['lda', 'ctree']
    assert report.artifacts == {}
    assert not config.output.results_dir.exists()


def test_run_analysis_with_partly_missing_sensor(config):
    path = config.train_path
    df = pd.read_csv(path, index_col=0)
    df.loc[df.index[:60], 'roll_belt'] = np.nan
    df.to_csv(path)

    report = run_analysis(config, save_outputs=False)

    assert 'roll_belt' in report.feature_columns
    assert report.pca.n_components >= 1
    assert len(report.quiz_predictions) == 20


@pytest.fixture
def config_file(config, tmp_path):
    path = tmp_path / 'settings.json'
    config.save(path)
    return path


def test_cli_summary(config_file, capsys):
    assert main(['--config', str(config_file), '--summary']) == 0
    assert 'CONFIGURATION SUMMARY' in capsys.readouterr().out


def test_cli_validate_only(config_file, config):
    assert main(['--config', str(config_file), '--validate']) == 0
    assert not config.output.results_dir.exists()


def test_cli_missing_training_file(config_file, tmp_path):
    assert main(['--config', str(config_file), '--train-file', str(tmp_path / 'missing.csv')]) == 1


def test_cli_full_run_with_model_subset(config_file, config):
    code = main(['--config', str(config_file), '--models', 'lda', 'ctree',
                 '--seed', '5', '--no-plots'])

    assert code == 0
    metrics = json.loads((config.output.results_dir / config.output.metrics_filename).read_text())
    assert set(metrics) == {'lda', 'ctree'}
    assert not list(config.output.plots_dir.glob('*.png'))
    saved = json.loads((config.output.results_dir / config.output.config_filename).read_text())
    assert saved['data']['random_seed'] == 5
