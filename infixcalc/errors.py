class EvaluationError(Exception):
    """Base class for everything that can go wrong while evaluating an expression"""
