import enum
from dataclasses import dataclass

from infixcalc.errors import EvaluationError
from infixcalc.tokenizer import Token, TokenType, untokenize
from infixcalc.utils import PrintableEnum


@dataclass
class ParserError(EvaluationError):
    tokens: list[Token]
    error_token_idx: int

    @property
    def errmsg(self) -> str:
        return "Invalid expression"

    def __str__(self) -> str:
        parsed_tokens = self.tokens[: self.error_token_idx]
        filler_whitespace = " " * len(untokenize(parsed_tokens)) + (" " if parsed_tokens else "")
        return "\n".join([f"[Parser error] {self.errmsg}", untokenize(self.tokens), filler_whitespace + "^"])


@dataclass
class UnexpectedToken(ParserError):
    expected: str

    @property
    def found(self) -> Token:
        return self.tokens[self.error_token_idx]

    @property
    def position(self) -> int:
        return self.found.position

    @property
    def errmsg(self) -> str:
        return f"Expected {self.expected}, found {self.found.lexeme!r}"


@dataclass
class UnexpectedEndOfInput(ParserError):
    expected: str

    @property
    def errmsg(self) -> str:
        return f"Unexpected end of input, expected {self.expected}"


@dataclass
class UnmatchedParenthesis(ParserError):
    @property
    def errmsg(self) -> str:
        return "Unclosed bracket"


@dataclass
class TrailingTokens(ParserError):
    @property
    def errmsg(self) -> str:
        if self.tokens[self.error_token_idx].type is TokenType.BRACKET_CLOSE:
            return "Closing bracket without matching opening one"
        return f"Unexpected {self.tokens[self.error_token_idx].lexeme!r} after complete expression"


@dataclass
class ExpressionTooDeep(ParserError):
    @property
    def errmsg(self) -> str:
        return "Expression is nested too deeply"


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    POW = enum.auto()


@dataclass(frozen=True)
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


class UnaryOperator(PrintableEnum):
    NEG = enum.auto()
    POS = enum.auto()


@dataclass(frozen=True)
class UnaryOperation:
    operator: UnaryOperator
    operand: "Expression"


@dataclass(frozen=True)
class Identifier:
    name: str


Expression = float | Identifier | BinaryOperation | UnaryOperation


SUM_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
}

PRODUCT_OPERATORS = {
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
}

POWER_OPERATORS = {TokenType.CARET, TokenType.DOUBLE_STAR}

UNARY_OPERATORS = {
    TokenType.PLUS: UnaryOperator.POS,
    TokenType.MINUS: UnaryOperator.NEG,
}

# tokens that can start an operand of implicit multiplication, e.g. 2pi or 3(4+5)
IMPLICIT_MUL_STARTS = {TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.BRACKET_OPEN}

OPERAND_EXPECTED = "number, identifier or '('"


def parse(tokens: list[Token]) -> Expression:
    expr, i = _consume_sum(tokens, 0)
    if i < len(tokens):
        raise TrailingTokens(tokens=tokens, error_token_idx=i)
    return expr


def _peek(tokens: list[Token], i: int) -> TokenType | None:
    return tokens[i].type if i < len(tokens) else None


def _consume_sum(tokens: list[Token], i: int) -> tuple[Expression, int]:
    left, i = _consume_product(tokens, i)
    while _peek(tokens, i) in SUM_OPERATORS:
        operator = SUM_OPERATORS[tokens[i].type]
        right, i = _consume_product(tokens, i + 1)
        left = BinaryOperation(operator=operator, left=left, right=right)
    return left, i


def _consume_product(tokens: list[Token], i: int) -> tuple[Expression, int]:
    left, i = _consume_unary(tokens, i)
    while True:
        next_type = _peek(tokens, i)
        if next_type in PRODUCT_OPERATORS:
            operator = PRODUCT_OPERATORS[next_type]
            right, i = _consume_unary(tokens, i + 1)
        elif next_type in IMPLICIT_MUL_STARTS:
            operator = BinaryOperator.MUL
            right, i = _consume_unary(tokens, i)
        else:
            return left, i
        left = BinaryOperation(operator=operator, left=left, right=right)


def _consume_unary(tokens: list[Token], i: int) -> tuple[Expression, int]:
    # every nesting (brackets, signs, exponents) passes through here
    try:
        next_type = _peek(tokens, i)
        if next_type in UNARY_OPERATORS:
            operand, i = _consume_unary(tokens, i + 1)
            return UnaryOperation(operator=UNARY_OPERATORS[next_type], operand=operand), i
        return _consume_power(tokens, i)
    except RecursionError:
        raise ExpressionTooDeep(tokens=tokens, error_token_idx=i) from None


def _consume_power(tokens: list[Token], i: int) -> tuple[Expression, int]:
    base, i = _consume_primary(tokens, i)
    if _peek(tokens, i) in POWER_OPERATORS:
        # the exponent goes through the unary level: 2^-1, and 2^3^2 nests to the right
        exponent, i = _consume_unary(tokens, i + 1)
        return BinaryOperation(operator=BinaryOperator.POW, left=base, right=exponent), i
    return base, i


def _consume_primary(tokens: list[Token], i: int) -> tuple[Expression, int]:
    if i >= len(tokens):
        raise UnexpectedEndOfInput(tokens=tokens, error_token_idx=i, expected=OPERAND_EXPECTED)
    first = tokens[i]
    if first.type is TokenType.NUMBER:
        return float(first.lexeme), i + 1
    elif first.type is TokenType.IDENTIFIER:
        return Identifier(first.lexeme), i + 1
    elif first.type is TokenType.BRACKET_OPEN:
        inner, j = _consume_sum(tokens, i + 1)
        # a sum only stops at the end of input or at a closing bracket
        if j >= len(tokens):
            raise UnmatchedParenthesis(tokens=tokens, error_token_idx=i)
        return inner, j + 1
    else:
        raise UnexpectedToken(tokens=tokens, error_token_idx=i, expected=OPERAND_EXPECTED)
