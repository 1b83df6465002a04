"""
Evaluation module for the Weight Lifting Quality Report.
"""

from .evaluate import (
    ModelEvaluator,
    ModelResult,
    PlotGenerator,
    compare_models,
    best_model,
    predict_quiz,
    write_answer_files,
    save_results,
    evaluate_models,
)

__all__ = [
    'ModelEvaluator',
    'ModelResult',
    'PlotGenerator',
    'compare_models',
    'best_model',
    'predict_quiz',
    'write_answer_files',
    'save_results',
    'evaluate_models',
]
