"""
Evaluation Module for the Weight Lifting Quality Report.

Generates:
- Held-out accuracy with exact 95% confidence interval, kappa, error rate
- Confusion matrix and per-class sensitivity / specificity
- Model comparison table
- Quiz-set predictions and answer files
- Evaluation plots
"""

import json
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from scipy.stats import binomtest
from sklearn.metrics import accuracy_score, cohen_kappa_score, confusion_matrix

from ..config import CONFIG
from ..models import describe_model
from ..training import TrainedModel
from ..utils import get_logger


@dataclass
class ModelResult:
    """Held-out performance of one fitted model."""
    name: str
    accuracy: float
    ci_lower: float
    ci_upper: float
    kappa: float
    confusion_matrix: np.ndarray
    per_class: pd.DataFrame
    y_pred: np.ndarray
    n_samples: int
    cv_accuracy: Optional[float] = None
    fit_seconds: Optional[float] = None
    best_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def out_of_sample_error(self) -> float:
        return 1.0 - self.accuracy


class ModelEvaluator:
    """
    Scores fitted models against the held-out partition.
    """

    def __init__(self, classes: List[str] = None, config=None):
        """
        Initialize evaluator.

        Args:
            classes: Label order for confusion matrices
            config: Configuration object
        """
        self.config = config or CONFIG
        self.classes = list(classes or self.config.data.classes)
        self.logger = get_logger('eval')

    def evaluate(self, trained: TrainedModel, X_test: pd.DataFrame, y_test: pd.Series) -> ModelResult:
        """
        Predict the held-out rows and compute all metrics.

        Args:
            trained: Fitted model
            X_test: Held-out predictors
            y_test: Held-out labels

        Returns:
            ModelResult
        """
        y_true = np.asarray(y_test).astype(str)
        y_pred = np.asarray(trained.predict(X_test)).astype(str)
        result = self.score(trained.name, y_true, y_pred)
        result.cv_accuracy = trained.cv_accuracy
        result.fit_seconds = trained.fit_seconds
        result.best_params = dict(trained.best_params)

        self.logger.info(f"  {trained.name:8s} | Held-out Acc: {result.accuracy * 100:.2f}% "
                         f"[{result.ci_lower * 100:.2f}, {result.ci_upper * 100:.2f}] | "
                         f"Kappa: {result.kappa:.4f}")
        return result

    def score(self, name: str, y_true: np.ndarray, y_pred: np.ndarray) -> ModelResult:
        """Compute metrics from predicted vs. actual labels."""
        y_true = np.asarray(y_true)
        y_pred = np.asarray(y_pred)
        n = len(y_true)

        accuracy = float(accuracy_score(y_true, y_pred))
        n_correct = int(np.sum(y_true == y_pred))
        ci = binomtest(n_correct, n).proportion_ci(confidence_level=0.95, method='exact')

        cm = confusion_matrix(y_true, y_pred, labels=self.classes)

        return ModelResult(
            name=name,
            accuracy=accuracy,
            ci_lower=float(ci.low),
            ci_upper=float(ci.high),
            kappa=float(cohen_kappa_score(y_true, y_pred, labels=self.classes)),
            confusion_matrix=cm,
            per_class=self._per_class_metrics(cm),
            y_pred=y_pred,
            n_samples=n
        )

    def _per_class_metrics(self, cm: np.ndarray) -> pd.DataFrame:
        """Sensitivity, specificity and balanced accuracy per class (one vs rest)."""
        total = cm.sum()
        tp = np.diag(cm).astype(float)
        fn = cm.sum(axis=1) - tp
        fp = cm.sum(axis=0) - tp
        tn = total - tp - fn - fp

        with np.errstate(divide='ignore', invalid='ignore'):
            sensitivity = np.where(tp + fn > 0, tp / (tp + fn), np.nan)
            specificity = np.where(tn + fp > 0, tn / (tn + fp), np.nan)

        return pd.DataFrame({
            'sensitivity': sensitivity,
            'specificity': specificity,
            'balanced_accuracy': (sensitivity + specificity) / 2,
            'support': (tp + fn).astype(int)
        }, index=pd.Index(self.classes, name='class'))

    def evaluate_all(
        self,
        trained_models: Dict[str, TrainedModel],
        X_test: pd.DataFrame,
        y_test: pd.Series
    ) -> Dict[str, ModelResult]:
        """Evaluate every fitted model on the same held-out rows."""
        self.logger.info(f"Evaluating {len(trained_models)} models on {len(X_test)} held-out rows")
        return {name: self.evaluate(model, X_test, y_test) for name, model in trained_models.items()}

    def print_results(self, results: Dict[str, ModelResult]):
        """Print evaluation results to console."""
        print("\n" + "="*70)
        print("EVALUATION RESULTS")
        print("="*70)

        for result in results.values():
            print("\n" + "-"*70)
            print(f"{result.name.upper()} ({describe_model(result.name)})")
            print("-"*70)
            print(f"  Accuracy:         {result.accuracy * 100:.2f}% "
                  f"(95% CI {result.ci_lower * 100:.2f} - {result.ci_upper * 100:.2f})")
            print(f"  Kappa:            {result.kappa:.4f}")
            print(f"  Out-of-sample error: {result.out_of_sample_error * 100:.2f}%")
            if result.best_params:
                print(f"  Best params:      {result.best_params}")
            print("\n  Confusion matrix (rows = actual, columns = predicted):")
            cm = pd.DataFrame(result.confusion_matrix, index=self.classes, columns=self.classes)
            print("    " + cm.to_string().replace("\n", "\n    "))
            print("\n  Per-class sensitivity:")
            for cls, row in result.per_class.iterrows():
                print(f"    {cls}: {row['sensitivity']:.4f}")

        print("\n" + "="*70)


def compare_models(results: Dict[str, ModelResult]) -> pd.DataFrame:
    """
    Tabulate held-out performance of all models, best first.

    Returns:
        Frame indexed by model name
    """
    rows = []
    for name, r in results.items():
        rows.append({
            'model': name,
            'accuracy': r.accuracy,
            'ci_lower': r.ci_lower,
            'ci_upper': r.ci_upper,
            'kappa': r.kappa,
            'oos_error': r.out_of_sample_error,
            'cv_accuracy': r.cv_accuracy,
            'fit_seconds': r.fit_seconds,
        })

    table = pd.DataFrame(rows)
    if table.empty:
        return table
    return table.sort_values('accuracy', ascending=False, kind='stable').set_index('model')


def best_model(results: Dict[str, ModelResult]) -> str:
    """Name of the model with the highest held-out accuracy."""
    if not results:
        raise ValueError("No model results to compare")
    return compare_models(results).index[0]


def predict_quiz(
    trained_models: Dict[str, TrainedModel],
    quiz_features: pd.DataFrame,
    problem_ids: Optional[pd.Series] = None
) -> pd.DataFrame:
    """
    Predict the quiz rows with every model.

    Args:
        trained_models: Fitted models
        quiz_features: Filtered quiz predictors
        problem_ids: Identifier per quiz row (default 1..n)

    Returns:
        Frame indexed by problem id, one column per model plus 'agreement'
    """
    if problem_ids is None:
        problem_ids = pd.Series(range(1, len(quiz_features) + 1))

    predictions = pd.DataFrame(
        {name: np.asarray(model.predict(quiz_features)).astype(str)
         for name, model in trained_models.items()},
        index=pd.Index(np.asarray(problem_ids), name='problem_id')
    )
    predictions['agreement'] = predictions.nunique(axis=1) == 1
    return predictions


def write_answer_files(predictions: pd.Series, output_dir: Path) -> List[Path]:
    """
    Write one problem_id_<n>.txt file per quiz row holding the predicted label.

    Args:
        predictions: Series of labels indexed by problem id
        output_dir: Destination directory

    Returns:
        Paths of the files written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for problem_id, label in predictions.items():
        path = output_dir / f"problem_id_{problem_id}.txt"
        path.write_text(str(label))
        paths.append(path)
    return paths


def _to_builtin(obj):
    """Convert numpy / pandas values for JSON."""
    if isinstance(obj, np.ndarray):
        return [_to_builtin(v) for v in obj.tolist()]
    elif isinstance(obj, (np.integer,)):
        return int(obj)
    elif isinstance(obj, (np.floating, float)):
        return None if np.isnan(obj) else float(obj)
    elif isinstance(obj, (np.bool_,)):
        return bool(obj)
    elif isinstance(obj, dict):
        return {str(k): _to_builtin(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_builtin(v) for v in obj]
    return obj


def save_results(
    results: Dict[str, ModelResult],
    output_dir: Path,
    quiz_predictions: Optional[pd.DataFrame] = None,
    config=None
) -> Dict[str, Path]:
    """
    Save evaluation results to files.

    Returns:
        Dictionary of artifact name -> path written
    """
    config = config or CONFIG
    logger = get_logger('eval')
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    out = config.output
    written = {}

    metrics = {
        name: {
            'accuracy': r.accuracy,
            'ci_lower': r.ci_lower,
            'ci_upper': r.ci_upper,
            'kappa': r.kappa,
            'out_of_sample_error': r.out_of_sample_error,
            'cv_accuracy': r.cv_accuracy,
            'fit_seconds': r.fit_seconds,
            'best_params': r.best_params,
            'n_samples': r.n_samples,
            'confusion_matrix': r.confusion_matrix,
            'per_class': r.per_class.to_dict(orient='index'),
        }
        for name, r in results.items()
    }
    written['metrics'] = output_dir / out.metrics_filename
    with open(written['metrics'], 'w') as f:
        json.dump(_to_builtin(metrics), f, indent=2)

    comparison = compare_models(results)
    written['comparison'] = output_dir / out.comparison_filename
    comparison.to_csv(written['comparison'])

    if quiz_predictions is not None:
        written['predictions'] = output_dir / out.predictions_filename
        quiz_predictions.to_csv(written['predictions'])

    written['report'] = output_dir / out.report_filename
    with open(written['report'], 'w') as f:
        f.write("="*70 + "\n")
        f.write("EVALUATION REPORT\n")
        f.write("="*70 + "\n\n")
        f.write("MODEL COMPARISON (held-out partition)\n")
        f.write("-"*40 + "\n")
        f.write(comparison.to_string(float_format=lambda v: f"{v:.4f}") + "\n\n")

        for name, r in results.items():
            f.write(f"{name.upper()}\n")
            f.write("-"*40 + "\n")
            f.write(f"Accuracy: {r.accuracy * 100:.2f}% "
                    f"(95% CI {r.ci_lower * 100:.2f} - {r.ci_upper * 100:.2f})\n")
            f.write(f"Kappa: {r.kappa:.4f}\n")
            f.write(r.per_class.to_string(float_format=lambda v: f"{v:.4f}") + "\n\n")

        if quiz_predictions is not None:
            f.write("QUIZ PREDICTIONS\n")
            f.write("-"*40 + "\n")
            f.write(quiz_predictions.to_string() + "\n")

    logger.info(f"Results saved to {output_dir}")
    return written


class PlotGenerator:
    """
    Generate report plots.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.figsize = (10, 8)
        self.dpi = 150

    def _save(self, fig, output_path: Path):
        fig.tight_layout()
        fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)

    def plot_confusion_matrix(
        self,
        cm: np.ndarray,
        class_names: List[str],
        title: str,
        output_path: Path
    ):
        """Plot and save confusion matrix."""
        fig, ax = plt.subplots(figsize=self.figsize)
        sns.heatmap(cm, annot=True, fmt='d', cmap='Blues',
                    xticklabels=class_names, yticklabels=class_names,
                    cbar_kws={'label': 'Samples'}, ax=ax)
        ax.set_xlabel('Predicted class')
        ax.set_ylabel('True class')
        ax.set_title(title)
        self._save(fig, output_path)

    def plot_model_comparison(self, comparison: pd.DataFrame, output_path: Path):
        """Bar chart of held-out accuracy with confidence intervals."""
        fig, ax = plt.subplots(figsize=(8, 5))
        acc = comparison['accuracy']
        err = np.vstack([acc - comparison['ci_lower'], comparison['ci_upper'] - acc])
        ax.bar(comparison.index, acc, yerr=err, capsize=6, color=sns.color_palette('Blues_d', len(acc)))
        ax.set_ylim(0, 1)
        ax.set_ylabel('Held-out accuracy')
        ax.set_title('Model Comparison')
        ax.grid(True, axis='y', alpha=0.3)
        self._save(fig, output_path)

    def plot_correlation_matrix(self, corr: pd.DataFrame, output_path: Path):
        """Heatmap of predictor correlations."""
        fig, ax = plt.subplots(figsize=(14, 12))
        sns.heatmap(corr, cmap='RdBu_r', vmin=-1, vmax=1, square=True,
                    xticklabels=True, yticklabels=True, ax=ax)
        ax.tick_params(labelsize=6)
        ax.set_title('Predictor Correlation Matrix')
        self._save(fig, output_path)

    def plot_class_distribution(self, distribution: pd.DataFrame, output_path: Path):
        """Grouped bars of class proportions per partition."""
        fig, ax = plt.subplots(figsize=(8, 5))
        distribution[['full', 'train', 'held_out']].plot.bar(ax=ax, rot=0)
        ax.set_xlabel('Class')
        ax.set_ylabel('Proportion')
        ax.set_title('Class Distribution by Partition')
        ax.grid(True, axis='y', alpha=0.3)
        self._save(fig, output_path)

    def plot_pca_variance(self, cumulative: np.ndarray, threshold: float, output_path: Path):
        """Cumulative explained variance of the principal components."""
        fig, ax = plt.subplots(figsize=(8, 5))
        ax.plot(np.arange(1, len(cumulative) + 1), cumulative, linewidth=2)
        ax.axhline(y=threshold, color='r', linestyle='--', linewidth=1,
                   label=f'{threshold * 100:.0f}% variance')
        ax.set_xlabel('Components')
        ax.set_ylabel('Cumulative explained variance')
        ax.set_title('PCA Explained Variance')
        ax.legend()
        ax.grid(True, alpha=0.3)
        self._save(fig, output_path)

    def generate_all_plots(
        self,
        results: Dict[str, ModelResult],
        output_dir: Path,
        corr: Optional[pd.DataFrame] = None,
        distribution: Optional[pd.DataFrame] = None,
        cumulative_variance: Optional[np.ndarray] = None
    ) -> List[Path]:
        """Generate all report plots."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        classes = self.config.data.classes
        paths = []

        for name, result in results.items():
            path = output_dir / f'{name}_confusion_matrix.png'
            self.plot_confusion_matrix(result.confusion_matrix, classes,
                                       f'{name} Confusion Matrix', path)
            paths.append(path)

        if results:
            path = output_dir / 'model_comparison.png'
            self.plot_model_comparison(compare_models(results), path)
            paths.append(path)

        if corr is not None:
            path = output_dir / 'correlation_matrix.png'
            self.plot_correlation_matrix(corr, path)
            paths.append(path)

        if distribution is not None:
            path = output_dir / 'class_distribution.png'
            self.plot_class_distribution(distribution, path)
            paths.append(path)

        if cumulative_variance is not None:
            path = output_dir / 'pca_variance.png'
            self.plot_pca_variance(cumulative_variance, self.config.data.pca_variance_threshold, path)
            paths.append(path)

        get_logger('eval').info(f"Plots saved to {output_dir}")
        return paths


def evaluate_models(
    trained_models: Dict[str, TrainedModel],
    X_test: pd.DataFrame,
    y_test: pd.Series,
    config=None
) -> Dict[str, ModelResult]:
    """
    Evaluate fitted models on the held-out partition.

    Args:
        trained_models: Fitted models
        X_test: Held-out predictors
        y_test: Held-out labels
        config: Configuration object

    Returns:
        Dictionary name -> ModelResult
    """
    evaluator = ModelEvaluator(config=config)
    return evaluator.evaluate_all(trained_models, X_test, y_test)
