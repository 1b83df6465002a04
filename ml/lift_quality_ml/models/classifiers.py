"""
Classifier registry for the Weight Lifting Quality Report.

Each model is a scikit-learn Pipeline:

    impute -> [scale] -> [PCA] -> classifier

- glmnet: elastic-net penalised multinomial logistic regression
- lda:    linear discriminant analysis
- ctree:  single decision tree with an impurity-decrease stopping rule
- rf:     random forest

Tuning grids come from the config and are returned with the pipeline step
prefix so they can be handed directly to GridSearchCV.
"""

from typing import Any, Dict, List
from sklearn.pipeline import Pipeline
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import StandardScaler
from sklearn.decomposition import PCA
from sklearn.linear_model import LogisticRegression
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.tree import DecisionTreeClassifier
from sklearn.ensemble import RandomForestClassifier

from ..config import CONFIG, MODEL_NAMES

CLASSIFIER_STEP = 'classifier'


def _glmnet(params: Dict[str, Any], seed: int):
    return LogisticRegression(
        penalty='elasticnet',
        solver='saga',
        random_state=seed,
        **params
    )


def _lda(params: Dict[str, Any], seed: int):
    return LinearDiscriminantAnalysis(**params)


def _ctree(params: Dict[str, Any], seed: int):
    return DecisionTreeClassifier(random_state=seed, **params)


def _rf(params: Dict[str, Any], seed: int):
    return RandomForestClassifier(random_state=seed, **params)


# name -> (estimator factory, needs standardised inputs)
MODEL_BUILDERS: Dict[str, tuple] = {
    'glmnet': (_glmnet, True),
    'lda': (_lda, True),
    'ctree': (_ctree, False),
    'rf': (_rf, False),
}

MODEL_DESCRIPTIONS: Dict[str, str] = {
    'glmnet': 'Elastic-net logistic regression',
    'lda': 'Linear discriminant analysis',
    'ctree': 'Decision tree',
    'rf': 'Random forest',
}


def available_models() -> List[str]:
    return list(MODEL_NAMES)


def _builder(name: str) -> tuple:
    if name not in MODEL_BUILDERS:
        raise ValueError(f"Unknown model '{name}'. Available: {', '.join(MODEL_BUILDERS)}")
    return MODEL_BUILDERS[name]


def create_model(name: str, config=None) -> Pipeline:
    """
    Build an unfitted pipeline for the named model.

    Args:
        name: One of glmnet, lda, ctree, rf
        config: Configuration object

    Returns:
        sklearn Pipeline ending in a 'classifier' step
    """
    config = config or CONFIG
    factory, needs_scaling = _builder(name)
    spec = config.models.get(name)

    steps = [('imputer', SimpleImputer(strategy='median'))]
    if needs_scaling or spec.pca:
        steps.append(('scaler', StandardScaler()))
    if spec.pca:
        steps.append(('pca', PCA(
            n_components=config.data.pca_variance_threshold,
            svd_solver='full'
        )))
    steps.append((CLASSIFIER_STEP, factory(dict(spec.params), config.data.random_seed)))

    return Pipeline(steps)


def param_grid(name: str, config=None) -> Dict[str, List[Any]]:
    """Tuning grid for the named model, keyed by pipeline parameter."""
    config = config or CONFIG
    _builder(name)
    spec = config.models.get(name)
    return {f"{CLASSIFIER_STEP}__{key}": list(values) for key, values in spec.param_grid.items()}


def describe_model(name: str) -> str:
    return MODEL_DESCRIPTIONS.get(name, name)
