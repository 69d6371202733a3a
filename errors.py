"""
Error handling for the Pebble Programming Language
Includes diagnostics, error codes, and the exception hierarchy used by every stage
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional
from source_map import Span, get_source_map
from tokens import Token, TokenType

class Severity(Enum):
    """Error severity levels"""
    ERROR = "error"

@dataclass
class LabeledSpan:
    """A span with an optional label"""
    span: Span
    label: Optional[str] = None
    is_primary: bool = False

class ErrorCode:
    """Error code constants"""
    # Lexical errors (PBL1xxx)
    UNEXPECTED_CHARACTER = "PBL1001"
    UNTERMINATED_STRING = "PBL1002"

    # Syntax errors (PBL2xxx)
    EXPECTED_TOKEN = "PBL2002"
    EXPECTED_EXPRESSION = "PBL2003"
    INVALID_ASSIGNMENT_TARGET = "PBL2005"
    TOO_MANY_PARAMETERS = "PBL2006"
    TOO_MANY_ARGUMENTS = "PBL2007"

    # Resolution errors (PBL3xxx)
    ALREADY_DECLARED = "PBL3001"
    OWN_INITIALIZER = "PBL3002"
    TOP_LEVEL_RETURN = "PBL3003"

    # Runtime errors (PBL4xxx)
    UNDEFINED_VARIABLE = "PBL4001"
    OPERAND_NOT_NUMBER = "PBL4002"
    OPERANDS_NOT_NUMBERS = "PBL4003"
    CANNOT_ADD = "PBL4004"
    NOT_CALLABLE = "PBL4005"
    WRONG_ARITY = "PBL4006"
    STACK_OVERFLOW = "PBL4007"

@dataclass
class Diagnostic:
    """Everything needed to render one error"""
    code: str
    severity: Severity
    message: str
    labels: List[LabeledSpan] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    help: Optional[str] = None
    line: Optional[int] = None

    def __post_init__(self):
        # Ensure exactly one primary label
        primary_seen = False
        for label in self.labels:
            if label.is_primary and primary_seen:
                label.is_primary = False
            elif label.is_primary:
                primary_seen = True
        if not primary_seen and self.labels:
            self.labels[0].is_primary = True

    def primary_span(self) -> Optional[Span]:
        """Get the primary span for this diagnostic"""
        for label in self.labels:
            if label.is_primary:
                return label.span
        return None

def describe_token(token: Token) -> str:
    """Short location phrase used in token labels"""
    if token.type == TokenType.EOF:
        return "at end"
    return f"at '{token.lexeme}'"

class PebbleError(Exception):
    """Base exception class for all Pebble errors with diagnostics support"""

    def __init__(self, diagnostic: Diagnostic, token: Optional[Token] = None):
        self.diagnostic = diagnostic
        self.token = token
        super().__init__(self._format_simple_message())

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def line(self) -> Optional[int]:
        return self.diagnostic.line

    def _format_simple_message(self) -> str:
        header = f"{self.diagnostic.severity.value.title()} [{self.diagnostic.code}]: {self.diagnostic.message}"
        primary_span = self.diagnostic.primary_span()
        if primary_span:
            try:
                source_file, start_pos, _ = get_source_map().resolve_span(primary_span)
            except ValueError:
                return header
            file_name = source_file.path.split('/')[-1]
            return f"{header} at {file_name}:{start_pos.line}:{start_pos.column}"
        if self.diagnostic.line is not None:
            return f"{header} at line {self.diagnostic.line}"
        return header

    @classmethod
    def at_token(cls, code: str, token: Token, message: str, label: Optional[str] = None,
                 help_text: Optional[str] = None, notes: Optional[List[str]] = None):
        """Create an error located at one token"""
        labels = []
        if token.span:
            labels.append(LabeledSpan(token.span, label or describe_token(token), is_primary=True))

        diagnostic = Diagnostic(
            code=code,
            severity=Severity.ERROR,
            message=message,
            labels=labels,
            help=help_text,
            notes=notes or [],
            line=token.line
        )
        return cls(diagnostic, token)

class LexError(PebbleError):
    """Lexical analysis errors"""

    @classmethod
    def unexpected_character(cls, span: Span, line: int, char: str):
        diagnostic = Diagnostic(
            code=ErrorCode.UNEXPECTED_CHARACTER,
            severity=Severity.ERROR,
            message="Unexpected character.",
            labels=[LabeledSpan(span, f"unexpected character '{char}'", is_primary=True)],
            help="check for typos or unsupported characters",
            line=line
        )
        return cls(diagnostic)

    @classmethod
    def unterminated_string(cls, span: Span, line: int):
        diagnostic = Diagnostic(
            code=ErrorCode.UNTERMINATED_STRING,
            severity=Severity.ERROR,
            message="Unterminated string.",
            labels=[LabeledSpan(span, "string starts here", is_primary=True)],
            help="add a closing '\"' to terminate the string",
            line=line
        )
        return cls(diagnostic)

class ParseError(PebbleError):
    """Syntax errors; raising one unwinds the parser to the nearest statement"""

    @classmethod
    def expected_token(cls, token: Token, message: str):
        return cls.at_token(ErrorCode.EXPECTED_TOKEN, token, message)

    @classmethod
    def expected_expression(cls, token: Token):
        return cls.at_token(
            ErrorCode.EXPECTED_EXPRESSION, token, "Expect expression.",
            help_text="add a valid expression (variable, literal, or function call)"
        )

    @classmethod
    def invalid_assignment_target(cls, equals: Token):
        return cls.at_token(
            ErrorCode.INVALID_ASSIGNMENT_TARGET, equals, "Invalid assignment target.",
            label="cannot assign to the expression before '='",
            help_text="only variables can be assigned to"
        )

    @classmethod
    def too_many_parameters(cls, token: Token):
        return cls.at_token(ErrorCode.TOO_MANY_PARAMETERS, token, "Can't have more than 255 parameters.")

    @classmethod
    def too_many_arguments(cls, token: Token):
        return cls.at_token(ErrorCode.TOO_MANY_ARGUMENTS, token, "Can't have more than 255 arguments.")

class ResolveError(PebbleError):
    """Static scoping errors found before execution"""

    @classmethod
    def already_declared(cls, name: Token):
        return cls.at_token(
            ErrorCode.ALREADY_DECLARED, name, "Already a variable with this name in this scope.",
            label=f"'{name.lexeme}' redeclared here",
            help_text=f"assign with '{name.lexeme} = value;' or pick another name"
        )

    @classmethod
    def own_initializer(cls, name: Token):
        return cls.at_token(
            ErrorCode.OWN_INITIALIZER, name, "Can't read local variable in its own initializer.",
            label=f"'{name.lexeme}' is not defined yet",
            notes=[f"the new '{name.lexeme}' hides any outer one from the start of its declaration"]
        )

    @classmethod
    def top_level_return(cls, keyword: Token):
        return cls.at_token(
            ErrorCode.TOP_LEVEL_RETURN, keyword, "Can't return from top-level code.",
            help_text="'return' is only allowed inside a function body"
        )

class PebbleRuntimeError(PebbleError):
    """Errors raised while executing a program"""

    @classmethod
    def undefined_variable(cls, name: Token):
        return cls.at_token(
            ErrorCode.UNDEFINED_VARIABLE, name, f"Undefined variable '{name.lexeme}'.",
            label=f"'{name.lexeme}' not found",
            help_text=f"declare the variable with 'var {name.lexeme} = value;' before using it"
        )

    @classmethod
    def operand_not_number(cls, operator: Token):
        return cls.at_token(
            ErrorCode.OPERAND_NOT_NUMBER, operator, "Operand must be a number.",
            help_text=f"operator '{operator.lexeme}' requires a numeric operand"
        )

    @classmethod
    def operands_not_numbers(cls, operator: Token, left_type: str, right_type: str):
        help_text = f"operator '{operator.lexeme}' requires numeric operands"
        if operator.type in (TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL):
            help_text = "comparison operators require numeric operands"
        return cls.at_token(
            ErrorCode.OPERANDS_NOT_NUMBERS, operator, "Operands must be numbers.",
            label=f"cannot use '{operator.lexeme}' with {left_type} and {right_type}",
            help_text=help_text
        )

    @classmethod
    def cannot_add(cls, operator: Token, left_type: str, right_type: str):
        if left_type == "number" and right_type == "string":
            help_text = "the left operand is a number, the right a string; both must have the same type"
        elif left_type == "string" and right_type == "number":
            help_text = "the left operand is a string, the right a number; both must have the same type"
        else:
            help_text = "the + operator is only defined for numbers and strings"
        return cls.at_token(
            ErrorCode.CANNOT_ADD, operator, "Operands must be two numbers or two strings.",
            label=f"cannot add {left_type} and {right_type}",
            help_text=help_text
        )

    @classmethod
    def not_callable(cls, paren: Token, type_name: str):
        return cls.at_token(
            ErrorCode.NOT_CALLABLE, paren, "Can only call functions.",
            label=f"a {type_name} value is not callable"
        )

    @classmethod
    def wrong_arity(cls, paren: Token, expected: int, got: int):
        return cls.at_token(
            ErrorCode.WRONG_ARITY, paren, f"Expected {expected} arguments but got {got}.",
            label=f"called with {got} argument{'s' if got != 1 else ''}"
        )

    @classmethod
    def stack_overflow(cls, paren: Token):
        return cls.at_token(
            ErrorCode.STACK_OVERFLOW, paren, "Stack overflow.",
            label="call nested too deeply",
            help_text="check that the recursion has a reachable base case"
        )
