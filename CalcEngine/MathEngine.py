# MathEngine.py
"""""
Core calculation engine for the calculator.

Pipeline
--------
1) Tokenizer: converts a raw input string into a flat list of tokens.
2) Parser (AST): builds an Abstract Syntax Tree (recursive-descent, precedence aware).
3) Evaluator: walks the AST inside a decimal context scoped to the call and
   rounds the result to the configured number of significant digits.
4) Formatter: renders results for display.

Numbers stay Decimal (or their source digits) end to end; no float is involved.
"""""

import logging
from collections import namedtuple
from dataclasses import dataclass
from decimal import (Decimal, Context, localcontext, ROUND_HALF_EVEN,
                     Overflow, InvalidOperation, DivisionByZero)
from typing import Optional

from . import config_manager as config_manager
from . import ScientificEngine
from . import error as E

logger = logging.getLogger(__name__)

# Token kinds
NUMBER = "NUMBER"
OPERATOR = "OPERATOR"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
FUNCTION = "FUNCTION"
CONSTANT = "CONSTANT"
COMMA = "COMMA"

Operations = ["+", "-", "*", "/", "%", "^", "!"]
Constants = ["pi", "e"]

DIGITS = "0123456789"
IDENTIFIER_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"

Token = namedtuple("Token", ["kind", "text"])


# -----------------------------
# Tokenizer
# -----------------------------

def isDigit(char):
    return char != "" and char in DIGITS


def tokenize(problem):
    """Convert raw input string into a flat token list.

    Numbers keep their exact source digits; identifiers are lower-cased and
    split into constants (pi, e) and function names. Whether a function name
    exists is decided at evaluation time.
    """
    tokens = []
    b = 0

    while b < len(problem):
        current_char = problem[b]
        next_char = problem[b + 1] if b + 1 < len(problem) else ""

        # --- Whitespace (ignored) ---
        if current_char.isspace():
            pass

        # --- Numbers: digits and at most one decimal point ---
        elif isDigit(current_char) or (current_char == "." and isDigit(next_char)):
            str_number = current_char
            has_point = current_char == "."

            while b + 1 < len(problem):
                following = problem[b + 1]
                if following == ".":
                    if has_point:
                        break
                    has_point = True
                elif not isDigit(following):
                    break
                b += 1
                str_number += following

            tokens.append(Token(NUMBER, str_number))

        # --- Identifiers: constants and function names ---
        elif current_char in IDENTIFIER_CHARS:
            name = current_char
            while b + 1 < len(problem) and problem[b + 1] in IDENTIFIER_CHARS:
                b += 1
                name += problem[b]

            name = name.lower()
            tokens.append(Token(CONSTANT if name in Constants else FUNCTION, name))

        # --- Parentheses and separators ---
        elif current_char == "(":
            tokens.append(Token(LPAREN, "("))
        elif current_char == ")":
            tokens.append(Token(RPAREN, ")"))
        elif current_char == ",":
            tokens.append(Token(COMMA, ","))

        # --- Operators ---
        elif current_char in Operations:
            tokens.append(Token(OPERATOR, current_char))

        else:
            raise E.LexError(f"Unrecognized character: '{current_char}'", code="3001")

        b += 1

    logger.debug("Tokens: %s", tokens)
    return tokens


# -----------------------------
# AST node types
# -----------------------------

@dataclass(frozen=True)
class Literal:
    """AST node for a numeric literal, kept as its source digits."""
    value: str

    def evaluate(self, preferences):
        return Decimal(self.value)


@dataclass(frozen=True)
class Constant:
    """AST node for a named constant (pi, e)."""
    name: str

    def evaluate(self, preferences):
        constant = ScientificEngine.CONSTANTS.get(self.name)
        if constant is None:
            raise E.DomainError(f"Unknown constant: {self.name}", code="3010")
        return constant()


@dataclass(frozen=True)
class UnaryExpression:
    """AST node for a prefix sign."""
    operator: str
    operand: object

    def evaluate(self, preferences):
        value = self.operand.evaluate(preferences)
        if self.operator == "+":
            return value
        elif self.operator == "-":
            return -value
        raise E.DomainError(f"Unknown operator: {self.operator}", code="3005")


@dataclass(frozen=True)
class BinaryExpression:
    """AST node for a binary operation: left <operator> right."""
    operator: str
    left: object
    right: object

    def evaluate(self, preferences):
        left_value = self.left.evaluate(preferences)
        right_value = self.right.evaluate(preferences)

        if self.operator == "+":
            return left_value + right_value
        elif self.operator == "-":
            return left_value - right_value
        elif self.operator == "*":
            return left_value * right_value
        elif self.operator == "/":
            if right_value == 0:
                raise E.DomainError("Division by zero", code="3003")
            return left_value / right_value
        elif self.operator == "%":
            if right_value == 0:
                raise E.DomainError("Modulo by zero", code="3004")
            return left_value % right_value
        elif self.operator == "^":
            return ScientificEngine.power(left_value, right_value)
        else:
            raise E.DomainError(f"Unknown operator: {self.operator}", code="3005")


@dataclass(frozen=True)
class CallExpression:
    """AST node for a function call; arguments are evaluated eagerly, left to right."""
    callee: str
    arguments: tuple

    def evaluate(self, preferences):
        function = ScientificEngine.FUNCTIONS.get(self.callee)
        if function is None:
            raise E.DomainError(f"Unknown function: {self.callee}", code="2001")
        values = [argument.evaluate(preferences) for argument in self.arguments]
        return function(values[0], preferences, *values[1:])


# -----------------------------
# Parser (recursive descent)
# -----------------------------

def parse(tokens):
    """Parse a token stream into an AST.

    Precedence from lowest to highest: sum (+ -) → term (* / %) →
    power (^, right-associative) → unary (+ -) → postfix (!) → factor.
    An empty token stream parses to the literal 0.
    """
    tokens = list(tokens)
    if not tokens:
        return Literal("0")

    def is_operator(*operators):
        return bool(tokens) and tokens[0].kind == OPERATOR and tokens[0].text in operators

    def parse_sum():
        """Addition and subtraction."""
        tree = parse_term()
        while is_operator("+", "-"):
            operator = tokens.pop(0).text
            tree = BinaryExpression(operator, tree, parse_term())
        return tree

    def parse_term():
        """Multiplication, division and modulo."""
        tree = parse_power()
        while is_operator("*", "/", "%"):
            operator = tokens.pop(0).text
            tree = BinaryExpression(operator, tree, parse_power())
        return tree

    def parse_power():
        """Exponentiation; 2^3^2 is 2^(3^2)."""
        base = parse_unary()
        if is_operator("^"):
            tokens.pop(0)
            return BinaryExpression("^", base, parse_power())
        return base

    def parse_unary():
        if is_operator("+", "-"):
            operator = tokens.pop(0).text
            return UnaryExpression(operator, parse_unary())
        return parse_postfix()

    def parse_postfix():
        tree = parse_factor()
        while is_operator("!"):
            tokens.pop(0)
            tree = CallExpression("fact", (tree,))
        return tree

    def parse_factor():
        """Numbers, constants, function calls and sub-expressions in '()'."""
        if not tokens:
            raise E.ParseError("Unexpected end of input.", code="3002")
        token = tokens.pop(0)

        if token.kind == NUMBER:
            return Literal(token.text)
        elif token.kind == CONSTANT:
            return Constant(token.text)
        elif token.kind == FUNCTION:
            return parse_call(token.text)
        elif token.kind == LPAREN:
            tree = parse_sum()
            if not tokens or tokens.pop(0).kind != RPAREN:
                raise E.ParseError("Missing closing parenthesis ')'", code="3006")
            return tree
        else:
            raise E.ParseError(f"Unexpected token: {token.text}", code="3009")

    def parse_call(name):
        if not tokens or tokens.pop(0).kind != LPAREN:
            raise E.ParseError(f"Missing opening parenthesis after function '{name}'", code="3007")
        if tokens and tokens[0].kind == RPAREN:
            raise E.ParseError(f"Function needs at least one argument: {name}", code="3011")

        arguments = [parse_sum()]
        while tokens and tokens[0].kind == COMMA:
            tokens.pop(0)
            arguments.append(parse_sum())

        if not tokens or tokens.pop(0).kind != RPAREN:
            raise E.ParseError(f"Missing closing parenthesis after function '{name}'", code="3006")
        return CallExpression(name, tuple(arguments))

    tree = parse_sum()
    if tokens:
        raise E.ParseError(f"Trailing input: {tokens[0].text}", code="3008")

    logger.debug("Final AST: %r", tree)
    return tree


# -----------------------------
# Evaluator
# -----------------------------

def engine_context(preferences):
    """Decimal context for one evaluation, never below the precision floor."""
    precision = max(preferences.precision, config_manager.PRECISION_FLOOR)
    context = Context(prec=precision, rounding=ROUND_HALF_EVEN,
                      traps=[InvalidOperation, DivisionByZero, Overflow])
    return localcontext(context)


def evaluate(tree, preferences=None):
    """Reduce an AST to one Decimal rounded to the configured significant digits."""
    if preferences is None:
        preferences = config_manager.Preferences()

    try:
        with engine_context(preferences) as context:
            ergebnis = context.plus(tree.evaluate(preferences))
    except Overflow:
        raise E.OverflowError("Result out of range (arithmetic overflow).", code="3012")
    except DivisionByZero:
        raise E.DomainError("Division by zero", code="3003")
    except InvalidOperation:
        raise E.DomainError("Invalid operation: result is undefined.", code="2010")

    if not ergebnis.is_finite():
        raise E.OverflowError("Result out of range.", code="3012")
    return ergebnis


# -----------------------------
# Result formatting
# -----------------------------

def format_expression(problem):
    return str(problem or "").strip()


def cleanup(ergebnis, digits=12):
    """Render a Decimal for display.

    Returns:
        (rendered_value, rounding_flag)
    The value is rounded to ``digits`` significant digits (half-even) and
    written in plain notation, so the text tokenizes again.
    """
    with localcontext() as context:
        context.prec = digits
        context.rounding = ROUND_HALF_EVEN
        rounded = context.plus(ergebnis)

    if not rounded.is_finite():
        return str(rounded), True

    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text, rounded != ergebnis


def format_number(value, digits=12):
    return cleanup(value, digits)[0]


# -----------------------------
# Public entry points
# -----------------------------

@dataclass(frozen=True)
class Result:
    ok: bool
    value: Optional[Decimal] = None
    error: Optional[str] = None
    code: Optional[str] = None
    equation: Optional[str] = None


def calculate(problem, preferences=None):
    """Main API: tokenize → parse → evaluate. Errors come back as Result(ok=False)."""
    expression = format_expression(problem)
    if not expression:
        return Result(ok=True, value=Decimal(0))

    try:
        tokens = tokenize(expression)
        tree = parse(tokens)
        return Result(ok=True, value=evaluate(tree, preferences))

    except E.MathError as e:
        e.equation = expression
        logger.debug("Calculation of %r failed with %s: %s", expression, e.code, e.message)
        return Result(ok=False, error=e.message, code=e.code, equation=e.equation)
    # Convert unexpected Python exceptions to our unified error shape
    except Exception as e:
        logger.exception("Unexpected error while calculating %r", expression)
        return Result(ok=False, error=f"Unexpected Error: {e}", code="9999", equation=expression)


def validate_expression(problem):
    """Check that the text tokenizes and parses; nothing is evaluated."""
    expression = format_expression(problem)
    if not expression:
        return Result(ok=False, error="Expression is empty.", code="3013")
    try:
        parse(tokenize(expression))
    except E.MathError as e:
        return Result(ok=False, error=e.message, code=e.code, equation=expression)
    return Result(ok=True)


def is_valid_expression(problem):
    return validate_expression(problem).ok
