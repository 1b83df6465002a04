"""
Training Module for the Weight Lifting Quality Report.

Features:
- Grid search over each model's tuning grid
- Repeated stratified k-fold resampling, seeded from the config
- Per-model timing and cross-validated accuracy
- Comprehensive logging
"""

import time
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from sklearn.model_selection import GridSearchCV, RepeatedStratifiedKFold
from sklearn.pipeline import Pipeline
from tqdm import tqdm

from ..config import CONFIG
from ..models import create_model, param_grid
from ..utils import get_logger, TrainingLogger


@dataclass
class TrainedModel:
    """A fitted model together with its resampling results."""
    name: str
    estimator: Pipeline
    best_params: Dict[str, Any]
    cv_accuracy: float
    cv_std: float
    fit_seconds: float
    cv_results: pd.DataFrame = field(default_factory=pd.DataFrame)

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.estimator.predict(X)


class Trainer:
    """
    Fits every requested model through the cross-validated training wrapper.
    """

    def __init__(self, config=None, log_file: Optional[Path] = None):
        """
        Initialize trainer.

        Args:
            config: Configuration object
            log_file: Optional CSV file receiving one row per fitted model
        """
        self.config = config or CONFIG
        self.logger = get_logger('train')
        self.training_logger = TrainingLogger(log_file=log_file)

    def _create_cv(self, name: str) -> RepeatedStratifiedKFold:
        """Resampling scheme for one model (per-model override wins)."""
        spec = self.config.models.get(name)
        cfg = self.config.validation
        return RepeatedStratifiedKFold(
            n_splits=spec.n_splits or cfg.n_splits,
            n_repeats=spec.n_repeats or cfg.n_repeats,
            random_state=self.config.data.random_seed
        )

    def fit_model(self, name: str, X: pd.DataFrame, y: pd.Series) -> TrainedModel:
        """
        Tune and fit one model.

        Args:
            name: Model name (glmnet, lda, ctree, rf)
            X: Training predictors
            y: Training labels

        Returns:
            TrainedModel holding the refitted best pipeline
        """
        pipeline = create_model(name, self.config)
        grid = param_grid(name, self.config)
        cv = self._create_cv(name)

        self.logger.debug(f"Fitting {name}: grid={grid}, {cv.get_n_splits()} resampling fits per candidate")

        search = GridSearchCV(
            pipeline,
            param_grid=grid or [{}],
            scoring=self.config.validation.scoring,
            cv=cv,
            n_jobs=self.config.validation.n_jobs,
            refit=True,
            error_score='raise'
        )

        start = time.time()
        search.fit(X, y)
        fit_seconds = time.time() - start

        best = search.best_index_
        trained = TrainedModel(
            name=name,
            estimator=search.best_estimator_,
            best_params={k.split('__', 1)[-1]: v for k, v in search.best_params_.items()},
            cv_accuracy=float(search.cv_results_['mean_test_score'][best]),
            cv_std=float(search.cv_results_['std_test_score'][best]),
            fit_seconds=fit_seconds,
            cv_results=pd.DataFrame(search.cv_results_)
        )

        self.training_logger.log_model(
            name,
            trained.cv_accuracy,
            trained.cv_std,
            trained.fit_seconds,
            trained.best_params
        )
        return trained

    def fit_all(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        names: Optional[List[str]] = None
    ) -> Dict[str, TrainedModel]:
        """
        Fit each model in turn.

        Args:
            X: Training predictors
            y: Training labels
            names: Models to fit (default: all enabled in the config)

        Returns:
            Dictionary name -> TrainedModel, in fitting order
        """
        names = names or self.config.enabled_models()
        self.logger.info(f"Training {len(names)} models on {X.shape[0]} rows x {X.shape[1]} features")

        trained = {}
        for name in tqdm(names, desc="Models", leave=False):
            trained[name] = self.fit_model(name, X, y)

        return trained

    def get_history(self) -> Dict[str, list]:
        return self.training_logger.get_history()


def train_models(
    X: pd.DataFrame,
    y: pd.Series,
    config=None,
    names: Optional[List[str]] = None,
    log_file: Optional[Path] = None
) -> Dict[str, TrainedModel]:
    """
    Convenience function to fit all requested models.

    Args:
        X: Training predictors
        y: Training labels
        config: Configuration object
        names: Models to fit (default: all enabled)
        log_file: Optional CSV log of per-model results

    Returns:
        Dictionary name -> TrainedModel
    """
    trainer = Trainer(config, log_file=log_file)
    return trainer.fit_all(X, y, names)
