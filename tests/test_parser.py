import pytest

from infixcalc.errors import EvaluationError
from infixcalc.parser import (
    BinaryOperation,
    BinaryOperator,
    Expression,
    ExpressionTooDeep,
    Identifier,
    ParserError,
    TrailingTokens,
    UnaryOperation,
    UnaryOperator,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnmatchedParenthesis,
    parse,
)
from infixcalc.tokenizer import TokenType, tokenize

ADD = BinaryOperator.ADD
SUB = BinaryOperator.SUB
MUL = BinaryOperator.MUL
DIV = BinaryOperator.DIV
POW = BinaryOperator.POW


@pytest.mark.parametrize(
    "code, expected_ast",
    [
        pytest.param("42", 42.0),
        pytest.param("pi", Identifier("pi")),
        pytest.param("1+2*3", BinaryOperation(ADD, 1.0, BinaryOperation(MUL, 2.0, 3.0))),
        pytest.param("1-2-3", BinaryOperation(SUB, BinaryOperation(SUB, 1.0, 2.0), 3.0)),
        pytest.param("8/4/2", BinaryOperation(DIV, BinaryOperation(DIV, 8.0, 4.0), 2.0)),
        pytest.param("2^3^2", BinaryOperation(POW, 2.0, BinaryOperation(POW, 3.0, 2.0))),
        pytest.param("-2^2", UnaryOperation(UnaryOperator.NEG, BinaryOperation(POW, 2.0, 2.0))),
        pytest.param("2^-x", BinaryOperation(POW, 2.0, UnaryOperation(UnaryOperator.NEG, Identifier("x")))),
        pytest.param("+-1", UnaryOperation(UnaryOperator.POS, UnaryOperation(UnaryOperator.NEG, 1.0))),
        pytest.param("2*-3", BinaryOperation(MUL, 2.0, UnaryOperation(UnaryOperator.NEG, 3.0))),
        pytest.param("(1+2)*3", BinaryOperation(MUL, BinaryOperation(ADD, 1.0, 2.0), 3.0)),
        pytest.param(
            "( (1-pi)*3+e ) / 4",
            BinaryOperation(
                DIV,
                BinaryOperation(ADD, BinaryOperation(MUL, BinaryOperation(SUB, 1.0, Identifier("pi")), 3.0), Identifier("e")),
                4.0,
            ),
        ),
    ],
)
def test_parse(code: str, expected_ast: Expression) -> None:
    assert parse(tokenize(code)) == expected_ast


@pytest.mark.parametrize(
    "code, expected_ast",
    [
        pytest.param("2pi", BinaryOperation(MUL, 2.0, Identifier("pi"))),
        pytest.param("3(4+5)", BinaryOperation(MUL, 3.0, BinaryOperation(ADD, 4.0, 5.0))),
        pytest.param("(1+2)(3+4)", BinaryOperation(MUL, BinaryOperation(ADD, 1.0, 2.0), BinaryOperation(ADD, 3.0, 4.0))),
        pytest.param("2 3", BinaryOperation(MUL, 2.0, 3.0)),
        pytest.param("pi 2", BinaryOperation(MUL, Identifier("pi"), 2.0)),
        pytest.param("pi e", BinaryOperation(MUL, Identifier("pi"), Identifier("e"))),
        pytest.param("2pi/4", BinaryOperation(DIV, BinaryOperation(MUL, 2.0, Identifier("pi")), 4.0)),
        pytest.param("1/2pi", BinaryOperation(MUL, BinaryOperation(DIV, 1.0, 2.0), Identifier("pi"))),
        pytest.param("2pi^2", BinaryOperation(MUL, 2.0, BinaryOperation(POW, Identifier("pi"), 2.0))),
        pytest.param("1+2e", BinaryOperation(ADD, 1.0, BinaryOperation(MUL, 2.0, Identifier("e")))),
        # greedy identifiers are never split
        pytest.param("2pipi", BinaryOperation(MUL, 2.0, Identifier("pipi"))),
    ],
)
def test_parse_implicit_multiplication(code: str, expected_ast: Expression) -> None:
    assert parse(tokenize(code)) == expected_ast


def test_minus_after_operand_is_subtraction() -> None:
    assert parse(tokenize("2 -3")) == BinaryOperation(SUB, 2.0, 3.0)


@pytest.mark.parametrize(
    "code, error_token_idx",
    [
        pytest.param("(1+2", 0),
        pytest.param("((1+2)", 0),
        pytest.param("1 + (2 * (3)", 2),
    ],
)
def test_unmatched_parenthesis(code: str, error_token_idx: int) -> None:
    tokens = tokenize(code)
    with pytest.raises(UnmatchedParenthesis) as exc_info:
        parse(tokens)
    assert exc_info.value.error_token_idx == error_token_idx
    assert exc_info.value.tokens[error_token_idx].type is TokenType.BRACKET_OPEN


@pytest.mark.parametrize("code", ["1+", "", "   ", "2*", "-", "2^", "(", "1 + (2 -", "2("])
def test_unexpected_end_of_input(code: str) -> None:
    with pytest.raises(UnexpectedEndOfInput) as exc_info:
        parse(tokenize(code))
    assert exc_info.value.expected == "number, identifier or '('"
    assert exc_info.value.error_token_idx == len(exc_info.value.tokens)


@pytest.mark.parametrize(
    "code, found, position",
    [
        pytest.param("*2", "*", 0),
        pytest.param("1 + * 2", "*", 4),
        pytest.param("()", ")", 1),
        pytest.param("2 ^ ^ 3", "^", 4),
        pytest.param("1 / ) ", ")", 4),
        pytest.param("2 ** ** 3", "**", 5),
        pytest.param(")", ")", 0),
    ],
)
def test_unexpected_token(code: str, found: str, position: int) -> None:
    with pytest.raises(UnexpectedToken) as exc_info:
        parse(tokenize(code))
    assert exc_info.value.found.lexeme == found
    assert exc_info.value.position == position


@pytest.mark.parametrize("code, error_token_idx", [("1+2)", 3), ("(1))", 3)])
def test_trailing_tokens(code: str, error_token_idx: int) -> None:
    with pytest.raises(TrailingTokens) as exc_info:
        parse(tokenize(code))
    assert exc_info.value.error_token_idx == error_token_idx


@pytest.mark.parametrize("error_cls", [UnexpectedToken, UnexpectedEndOfInput, UnmatchedParenthesis, TrailingTokens, ExpressionTooDeep])
def test_parser_errors_are_evaluation_errors(error_cls: type) -> None:
    assert issubclass(error_cls, ParserError)
    assert issubclass(error_cls, EvaluationError)


def test_parser_error_points_at_token() -> None:
    with pytest.raises(UnexpectedToken) as exc_info:
        parse(tokenize("1+(2*/3)"))
    assert str(exc_info.value) == "\n".join(
        [
            "[Parser error] Expected number, identifier or '(', found '/'",
            "1 + ( 2 * / 3 )",
            "          ^",
        ]
    )


def test_unclosed_bracket_message() -> None:
    with pytest.raises(UnmatchedParenthesis) as exc_info:
        parse(tokenize("(1+2"))
    assert str(exc_info.value).splitlines() == ["[Parser error] Unclosed bracket", "( 1 + 2", "^"]


def test_stray_bracket_message() -> None:
    with pytest.raises(TrailingTokens) as exc_info:
        parse(tokenize("1+2)"))
    assert str(exc_info.value).splitlines()[0] == "[Parser error] Closing bracket without matching opening one"


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("(" * 2000 + "1" + ")" * 2000, id="brackets"),
        pytest.param("-" * 5000 + "1", id="signs"),
        pytest.param("2^" * 2000 + "1", id="exponents"),
        pytest.param("2(" * 2000 + "1" + ")" * 2000, id="implicit-multiplication"),
    ],
)
def test_expression_too_deep(code: str) -> None:
    tokens = tokenize(code)
    with pytest.raises(ExpressionTooDeep) as exc_info:
        parse(tokens)
    assert 0 < exc_info.value.error_token_idx < len(tokens)
    assert str(exc_info.value).splitlines()[0] == "[Parser error] Expression is nested too deeply"


def test_long_flat_expressions_parse() -> None:
    ast = parse(tokenize("1+" * 5000 + "1"))
    depth = 0
    while isinstance(ast, BinaryOperation):
        ast, depth = ast.left, depth + 1
    assert depth == 5000
