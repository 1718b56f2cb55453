from .metric_evaluator import MetricEvaluator, BestScoreLedger, metric_direction

__all__ = ['MetricEvaluator', 'BestScoreLedger', 'metric_direction']
