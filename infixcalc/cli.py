"""Command-line front end.

Usage:
    infixcalc 1+2*3/7                  # evaluate and print 1.8571428571428572
    infixcalc -c tau=2pi tau/4         # extend the constant table
    infixcalc -- -2^2                  # leading minus must follow --
    infixcalc                          # interactive prompt, one expression per line

Results are printed the way Python prints floats, so whole numbers keep their
fractional part (3.0, not 3), and inf and nan are printed as such.
"""

import logging
from typing import Mapping, Optional

import typer
from rich.console import Console

from infixcalc.constants import BUILTIN_CONSTANTS
from infixcalc.errors import EvaluationError
from infixcalc.parser import parse
from infixcalc.runtime import evaluate, evaluate_expression
from infixcalc.tokenizer import tokenize

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="infixcalc",
    help="Evaluate arithmetic expressions like 1+2*3/7 or 2pi",
    add_completion=False,
)
console = Console(stderr=True)


def _print_error(e: EvaluationError) -> None:
    console.print(str(e), markup=False, highlight=False, soft_wrap=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def parse_constants(definitions: list[str]) -> dict[str, float]:
    """Builds the constant table from NAME=EXPR definitions, each EXPR seeing the ones before it"""
    constants = dict(BUILTIN_CONSTANTS)
    for definition in definitions:
        name, sep, code = definition.partition("=")
        name = name.strip()
        if not sep or not name.isalpha():
            raise typer.BadParameter(f"expected NAME=EXPR with an alphabetic NAME, got {definition!r}")
        try:
            constants[name] = evaluate(code, constants)
        except EvaluationError as e:
            raise typer.BadParameter(f"can't evaluate {name!r}:\n{e}") from e
        logger.debug(f"Constant {name} = {constants[name]}")
    return constants


def run_expression(code: str, constants: Mapping[str, float]) -> float:
    tokens = tokenize(code)
    logger.debug(f"tokens: {' '.join(str(t) for t in tokens)}")
    expression = parse(tokens)
    logger.debug(f"ast: {expression}")
    result = evaluate_expression(expression, constants)
    logger.debug(f"result: {result!r}")
    return result


def repl(constants: Mapping[str, float]) -> None:
    while True:
        try:
            code = input("> ")
        except EOFError:
            return

        if not code.strip():
            continue

        try:
            result = run_expression(code, constants)
        except EvaluationError as e:
            _print_error(e)
            continue

        typer.echo(result)


@app.command()
def main(
    expression: Optional[list[str]] = typer.Argument(
        None, help="Expression to evaluate, all arguments are joined together. Starts a prompt if omitted."
    ),
    const: Optional[list[str]] = typer.Option(
        None, "--const", "-c", metavar="NAME=EXPR", help="Define an additional constant, may be repeated"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log tokens and expression tree"),
) -> None:
    """Evaluate an arithmetic expression."""
    _configure_logging(verbose)
    constants = parse_constants(const or [])

    if not expression:
        repl(constants)
        return

    try:
        result = run_expression("".join(expression), constants)
    except EvaluationError as e:
        _print_error(e)
        raise typer.Exit(1)

    typer.echo(result)
