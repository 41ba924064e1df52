import math
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from infixcalc.constants import BUILTIN_CONSTANTS
from infixcalc.errors import EvaluationError
from infixcalc.parser import BinaryOperation, BinaryOperator, Expression, Identifier, UnaryOperation, UnaryOperator, parse
from infixcalc.tokenizer import tokenize


class CalcRuntimeError(EvaluationError):
    pass


@dataclass
class UnknownIdentifier(CalcRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"[Runtime error] Unknown identifier: {self.name!r}"


def evaluate(code: str, constants: Optional[Mapping[str, float]] = None) -> float:
    """Tokenize, parse and evaluate code, raising the first EvaluationError encountered

    Without explicit constants the built-in ones (pi, e) are used.
    """
    if constants is None:
        constants = BUILTIN_CONSTANTS
    return evaluate_expression(parse(tokenize(code)), constants)


def evaluate_expression(expression: Expression, constants: Mapping[str, float]) -> float:
    if isinstance(expression, float):
        return expression
    elif isinstance(expression, Identifier):
        if expression.name in constants:
            return float(constants[expression.name])
        else:
            raise UnknownIdentifier(expression.name)
    elif isinstance(expression, BinaryOperation):
        # left-associative chains like 1+2+3+... nest on the left, walk them in a loop
        chain: list[BinaryOperation] = []
        node: Expression = expression
        while isinstance(node, BinaryOperation):
            chain.append(node)
            node = node.left
        result = evaluate_expression(node, constants)
        for operation in reversed(chain):
            right_res = evaluate_expression(operation.right, constants)
            result = binary_operation_impls[operation.operator](result, right_res)
        return result
    elif isinstance(expression, UnaryOperation):
        operand = evaluate_expression(expression.operand, constants)
        return unary_operation_impls[expression.operator](operand)
    else:
        raise TypeError(f"Unexpected expression type: {expression!r}")


def _is_odd_integer(x: float) -> bool:
    return x.is_integer() and math.fmod(x, 2.0) != 0.0


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        # IEEE 754: x/±0 is ±inf, 0/0 and nan/0 are nan
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _pow(a: float, b: float) -> float:
    """Real power with C pow() results where math.pow raises"""
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0.0:
            # zero base, negative exponent
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        # negative base, non-integer exponent
        return math.nan


BinaryOperationImpl = Callable[[float, float], float]
UnaryOperationImpl = Callable[[float], float]

binary_operation_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _div,
    BinaryOperator.POW: _pow,
}

unary_operation_impls: dict[UnaryOperator, UnaryOperationImpl] = {
    UnaryOperator.NEG: lambda a: -a,
    UnaryOperator.POS: lambda a: a,
}
