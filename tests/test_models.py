import pytest
from sklearn.decomposition import PCA
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.tree import DecisionTreeClassifier

from lift_quality_ml.config import Config
from lift_quality_ml.models import available_models, create_model, param_grid


@pytest.mark.parametrize('name, estimator_type', [
    ('glmnet', LogisticRegression),
    ('lda', LinearDiscriminantAnalysis),
    ('ctree', DecisionTreeClassifier),
    ('rf', RandomForestClassifier),
])
def test_create_model_builds_pipeline(name, estimator_type):
    pipeline = create_model(name, Config())
    assert isinstance(pipeline.named_steps['classifier'], estimator_type)
    assert 'imputer' in pipeline.named_steps
    assert 'pca' not in pipeline.named_steps


def test_linear_models_are_standardised_and_trees_are_not():
    config = Config()
    assert 'scaler' in create_model('glmnet', config).named_steps
    assert 'scaler' in create_model('lda', config).named_steps
    assert 'scaler' not in create_model('rf', config).named_steps


def test_glmnet_uses_elastic_net_penalty():
    clf = create_model('glmnet', Config()).named_steps['classifier']
    assert clf.penalty == 'elasticnet'
    assert clf.solver == 'saga'


def test_pca_option_inserts_scaler_and_pca():
    config = Config()
    config.models.rf.pca = True
    config.data.pca_variance_threshold = 0.9

    pipeline = create_model('rf', config)

    assert list(pipeline.named_steps) == ['imputer', 'scaler', 'pca', 'classifier']
    assert isinstance(pipeline.named_steps['pca'], PCA)
    assert pipeline.named_steps['pca'].n_components == 0.9


def test_seed_is_passed_to_randomised_models():
    config = Config()
    config.data.random_seed = 99
    assert create_model('rf', config).named_steps['classifier'].random_state == 99
    assert create_model('ctree', config).named_steps['classifier'].random_state == 99


def test_param_grid_is_prefixed():
    grid = param_grid('rf', Config())
    assert list(grid) == ['classifier__max_features']
    assert param_grid('lda', Config()) == {}


def test_unknown_model_raises():
    with pytest.raises(ValueError):
        create_model('svm', Config())
    with pytest.raises(ValueError):
        param_grid('svm', Config())


def test_available_models():
    assert available_models() == ['glmnet', 'lda', 'ctree', 'rf']
