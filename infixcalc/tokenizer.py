import enum
from dataclasses import dataclass

from infixcalc.errors import EvaluationError
from infixcalc.utils import PrintableEnum, point_at


@dataclass
class TokenizerError(EvaluationError):
    code: str
    error_char_idx: int

    @property
    def errmsg(self) -> str:
        return "Invalid input"

    @property
    def position(self) -> int:
        return self.error_char_idx

    def __str__(self) -> str:
        return "\n".join([f"[Tokenizer error] {self.errmsg}", *point_at(self.code, self.error_char_idx)])


@dataclass
class UnexpectedCharacter(TokenizerError):
    char: str

    @property
    def errmsg(self) -> str:
        return f"Unexpected character: {self.char!r}"


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    DOUBLE_STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    position: int

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


DIGITS = frozenset("0123456789")


def _is_digit(s: str) -> bool:
    # str.isdigit also accepts superscripts and other scripts, float() does not
    return s in DIGITS


def _is_valid_in_identifier(s: str) -> bool:
    return s.isalpha()


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
}


def _scan_digits(code: str, i: int) -> int:
    while i < len(code) and _is_digit(code[i]):
        i += 1
    return i


def _number_end_idx(code: str, i: int) -> int:
    """<number> ::= <digits> [ "." [ <digits> ] ] | "." <digits>"""
    if code[i] == ".":
        return _scan_digits(code, i + 1)
    end_idx = _scan_digits(code, i)
    if end_idx < len(code) and code[end_idx] == ".":
        end_idx = _scan_digits(code, end_idx + 1)
    return end_idx


def tokenize(code: str) -> list[Token]:
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        if _is_digit(code[i]) or (code[i] == "." and i + 1 < len(code) and _is_digit(code[i + 1])):
            number_end_idx = _number_end_idx(code, i)
            tokens.append(Token(type=TokenType.NUMBER, lexeme=code[i:number_end_idx], position=i))
            i = number_end_idx - 1  # to account for += 1 later
        elif _is_valid_in_identifier(code[i]):
            ident_end_idx = i + 1
            while ident_end_idx < len(code) and _is_valid_in_identifier(code[ident_end_idx]):
                ident_end_idx += 1
            tokens.append(Token(type=TokenType.IDENTIFIER, lexeme=code[i:ident_end_idx], position=i))
            i = ident_end_idx - 1  # to account for += 1 later
        elif code.startswith("**", i):
            tokens.append(Token(type=TokenType.DOUBLE_STAR, lexeme="**", position=i))
            i += 1
        elif code[i] in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[code[i]], lexeme=code[i], position=i))
        elif code[i].isspace():
            pass
        else:
            raise UnexpectedCharacter(code=code, error_char_idx=i, char=code[i])
        i += 1

    return tokens


def untokenize(tokens: list[Token]) -> str:
    return " ".join(t.lexeme for t in tokens)
