"""
Weight Lifting Quality Report

Classifies how well a dumbbell lift was performed (class A = correct, B-E =
common mistakes) from wearable accelerometer, gyroscope and magnetometer
readings, comparing four off-the-shelf classifiers.

Steps:
- Column filtering (missing values, near-zero variance)
- Correlation and PCA summaries
- Stratified train / held-out split
- Cross-validated fitting: elastic-net logistic regression, LDA,
  decision tree, random forest
- Held-out accuracy, confusion matrices, quiz predictions

Usage:
    lift-quality-report --train-file pml-training.csv --test-file pml-testing.csv
"""

__version__ = "1.0.0"

from .config import CONFIG, get_config, set_models, set_seed
from .models import create_model, available_models
from .training import Trainer, TrainedModel, train_models
from .evaluation import ModelEvaluator, evaluate_models, compare_models, predict_quiz
from .main import run_analysis, AnalysisReport

__all__ = [
    'CONFIG',
    'get_config',
    'set_models',
    'set_seed',
    'create_model',
    'available_models',
    'Trainer',
    'TrainedModel',
    'train_models',
    'ModelEvaluator',
    'evaluate_models',
    'compare_models',
    'predict_quiz',
    'run_analysis',
    'AnalysisReport',
]
