#!/usr/bin/env python3
"""
Main Entry Point for the Weight Lifting Quality Report.

Usage:
    lift-quality-report                         # Full report with default files
    lift-quality-report --validate              # Only validate the input files
    lift-quality-report --models lda rf         # Fit a subset of the models
    lift-quality-report --summary               # Print configuration and exit

Everything not exposed here is set in config/settings.py or a JSON file
passed with --config.
"""

import argparse
import sys
import traceback
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from .config import CONFIG, Config, MODEL_NAMES, set_models, set_seed
from .data import (
    DataValidator,
    FeatureFilter,
    PCASummary,
    DatasetSplit,
    load_raw_data,
    label_series,
    missing_value_summary,
    correlation_matrix,
    highly_correlated_pairs,
    pca_summary,
    split_dataset,
    stratification_report,
)
from .training import Trainer, TrainedModel
from .evaluation import (
    ModelEvaluator,
    ModelResult,
    PlotGenerator,
    compare_models,
    best_model,
    predict_quiz,
    write_answer_files,
    save_results,
)
from .utils import setup_logging, get_logger


@dataclass
class AnalysisReport:
    """Everything the report produces, kept in memory."""
    n_rows: int
    n_raw_columns: int
    feature_columns: List[str]
    missing_summary: pd.DataFrame
    nzv_report: pd.DataFrame
    correlated_pairs: pd.DataFrame
    pca: PCASummary
    split: DatasetSplit
    stratification: pd.DataFrame
    trained_models: Dict[str, TrainedModel]
    results: Dict[str, ModelResult]
    comparison: pd.DataFrame
    best_model: str
    quiz_predictions: Optional[pd.DataFrame] = None
    artifacts: Dict[str, Path] = field(default_factory=dict)


def _banner(title: str):
    print("\n" + "="*70)
    print(title)
    print("="*70)


def run_analysis(config: Config = None, save_outputs: bool = True) -> AnalysisReport:
    """
    Run the full report: load, filter, describe, split, train, evaluate, predict.

    Args:
        config: Configuration object
        save_outputs: Write result tables, plots and answer files

    Returns:
        AnalysisReport
    """
    config = config or CONFIG
    logger = get_logger('main')
    cfg = config.data

    # Step 1: Load
    _banner("STEP 1: DATA LOADING")
    train_df, quiz_df = load_raw_data(config)
    labels = label_series(train_df, config)
    n_rows, n_raw_columns = train_df.shape

    # Step 2: Column filters
    _banner("STEP 2: COLUMN FILTERING")
    missing = missing_value_summary(train_df)
    feature_filter = FeatureFilter(config)
    features = feature_filter.fit_transform(train_df)
    quiz_features = feature_filter.transform(quiz_df)

    if len(features) != n_rows:
        raise RuntimeError("Column filtering changed the row count")

    nzv = feature_filter.nzv_report
    logger.info(f"Columns: {n_raw_columns} raw -> {features.shape[1]} features "
                f"({len(feature_filter.dropped_missing)} mostly missing, "
                f"{int(nzv['nzv'].sum())} near-zero-variance flagged)")

    # Step 3: Descriptive statistics
    _banner("STEP 3: DESCRIPTIVE STATISTICS")
    corr = correlation_matrix(features)
    pairs = highly_correlated_pairs(features, cfg.correlation_cutoff)
    pca = pca_summary(features, cfg.pca_variance_threshold)
    if not pairs.empty:
        top = pairs.iloc[0]
        logger.info(f"Most correlated pair: {top['feature_1']} / {top['feature_2']} "
                    f"(r = {top['correlation']:.3f})")

    # Step 4: Partition
    _banner("STEP 4: TRAIN / HELD-OUT SPLIT")
    split = split_dataset(features, labels, cfg.train_fraction, cfg.random_seed)
    strat = stratification_report(split, labels, cfg.classes)
    logger.info(f"Largest class-proportion deviation: {strat['max_deviation'].max() * 100:.2f} pts")

    # Step 5: Train
    _banner("STEP 5: MODEL TRAINING")
    log_file = Path(config.output.logs_dir) / config.output.training_log_filename if save_outputs else None
    trainer = Trainer(config, log_file=log_file)
    trained = trainer.fit_all(split.X_train, split.y_train)

    # Step 6: Evaluate
    _banner("STEP 6: EVALUATION")
    evaluator = ModelEvaluator(config=config)
    results = evaluator.evaluate_all(trained, split.X_test, split.y_test)
    evaluator.print_results(results)
    comparison = compare_models(results)
    winner = best_model(results)
    logger.info(f"Best model: {winner} ({comparison.loc[winner, 'accuracy'] * 100:.2f}% held-out accuracy)")

    # Step 7: Quiz predictions
    _banner("STEP 7: QUIZ PREDICTIONS")
    problem_ids = quiz_df[cfg.problem_id_column] if cfg.problem_id_column in quiz_df.columns else None
    quiz_predictions = predict_quiz(trained, quiz_features, problem_ids)
    print(quiz_predictions.to_string())
    n_agree = int(quiz_predictions['agreement'].sum())
    logger.info(f"All models agree on {n_agree} of {len(quiz_predictions)} quiz rows")

    report = AnalysisReport(
        n_rows=n_rows,
        n_raw_columns=n_raw_columns,
        feature_columns=list(features.columns),
        missing_summary=missing,
        nzv_report=nzv,
        correlated_pairs=pairs,
        pca=pca,
        split=split,
        stratification=strat,
        trained_models=trained,
        results=results,
        comparison=comparison,
        best_model=winner,
        quiz_predictions=quiz_predictions
    )

    # Step 8: Save
    if save_outputs:
        _banner("STEP 8: SAVING REPORT")
        out = config.output
        out.ensure_directories()
        report.artifacts.update(save_results(results, out.results_dir, quiz_predictions, config))

        nzv_path = Path(out.results_dir) / 'near_zero_variance.csv'
        nzv.to_csv(nzv_path)
        report.artifacts['nzv'] = nzv_path

        config_path = Path(out.results_dir) / out.config_filename
        config.save(config_path)
        report.artifacts['config'] = config_path

        if out.write_answer_files:
            paths = write_answer_files(quiz_predictions[winner], out.predictions_dir)
            logger.info(f"Wrote {len(paths)} answer files to {out.predictions_dir}")

        if out.save_plots:
            PlotGenerator(config).generate_all_plots(
                results,
                out.plots_dir,
                corr=corr,
                distribution=strat,
                cumulative_variance=pca.cumulative_variance
            )

    return report


def run_validation(config: Config) -> int:
    """Run data validation only."""
    validator = DataValidator(config)
    return 0 if validator.validate_all() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Weight Lifting Quality Report - classifier comparison on sensor data',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    lift-quality-report --train-file data/pml-training.csv --test-file data/pml-testing.csv
    lift-quality-report --validate
    lift-quality-report --models lda ctree --seed 7
        """
    )

    parser.add_argument('--train-file', type=Path, default=None,
                        help='Labelled training CSV')
    parser.add_argument('--test-file', type=Path, default=None,
                        help='Unlabelled quiz CSV')
    parser.add_argument('--models', nargs='+', choices=MODEL_NAMES, default=None,
                        help='Models to fit (default: all)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for the split and resampling')
    parser.add_argument('--config', type=Path, default=None,
                        help='JSON configuration file')
    parser.add_argument('--validate', action='store_true',
                        help='Only validate the input files (no training)')
    parser.add_argument('--summary', action='store_true',
                        help='Print configuration summary and exit')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip plot generation')
    return parser


def _apply_file(config: Config, path: Path, attr: str):
    path = Path(path)
    config.data.data_dir = path.parent
    setattr(config.data, attr, path.name)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = Config.load(args.config) if args.config else CONFIG

    # The two files may live in different directories
    if args.train_file is not None:
        _apply_file(config, args.train_file, 'train_file')
    if args.test_file is not None:
        test_path = Path(args.test_file)
        if test_path.parent != Path(config.data.data_dir):
            config.data.test_file = str(test_path.resolve())
        else:
            config.data.test_file = test_path.name
    if args.models:
        set_models(args.models, config)
    if args.seed is not None:
        set_seed(args.seed, config)
    if args.no_plots:
        config.output.save_plots = False

    setup_logging(
        log_dir=config.output.logs_dir,
        log_level=config.output.log_level,
        verbose_console=config.output.verbose_console
    )
    logger = get_logger('main')

    print("\n" + "="*70)
    print("WEIGHT LIFTING QUALITY REPORT")
    print("Classifier comparison on wearable sensor data")
    print("="*70)

    if args.summary:
        config.print_summary()
        return 0

    errors, warnings = config.validate()
    for warning in warnings:
        logger.warning(f"  - {warning}")
    if errors:
        logger.error("Configuration validation failed!")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    if args.validate:
        return run_validation(config)

    if run_validation(config) != 0:
        logger.error("Data validation failed")
        return 1

    try:
        report = run_analysis(config)
    except (OSError, KeyError, ValueError, RuntimeError) as e:
        logger.error(f"Analysis failed: {e}")
        traceback.print_exc()
        return 1

    print("\n" + "="*70)
    print("REPORT COMPLETE")
    print("="*70)
    print(report.comparison.to_string(float_format=lambda v: f"{v:.4f}"))
    print(f"\nBest model: {report.best_model}")
    print(f"Results saved to: {config.output.results_dir}")
    print(f"Logs saved to: {config.output.logs_dir}")
    print("="*70)

    return 0


if __name__ == "__main__":
    sys.exit(main())
