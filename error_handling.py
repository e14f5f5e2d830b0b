"""
Error handling for the Lox front-end and interpreter
Line-tagged error classes plus diagnostic rendering with source context
"""

from typing import List, Optional, Dict
from pyparsing import ParseException

from syntax import Token, TokenType


# ============================================================================
# ERROR CLASSES
# ============================================================================

class LoxError(Exception):
    """Base class for every error reported against a source line"""
    stage = "Error"

    def __init__(self, line: int, message: str, where: str = ""):
        self.line = line
        self.message = message
        self.where = where
        super().__init__(message)

    def __str__(self) -> str:
        return f"[line {self.line}] {self.stage}{self.where}: {self.message}"


class LoxScanError(LoxError):
    """Malformed lexical input"""
    stage = "Scan error"

    @classmethod
    def from_parse_exception(cls, exc: ParseException, line: int, text: str) -> 'LoxScanError':
        """Convert a pyparsing literal-decoding failure into a scan error"""
        return cls(line, f"Invalid number literal '{text}' ({exc.msg}).")


class LoxParseError(LoxError):
    """Grammar violation at a token"""
    stage = "Parse error"

    def __init__(self, token: Token, message: str):
        self.token = token
        where = " at end" if token.type == TokenType.EOF else f" at '{token.lexeme}'"
        super().__init__(token.line, message, where)


class LoxRuntimeError(LoxError):
    """Type mismatch or undefined variable during evaluation"""
    stage = "Runtime error"

    def __init__(self, token: Token, message: str):
        self.token = token
        super().__init__(token.line, message)


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_diagnostic(
    stage: str,
    message: str,
    line: int,
    where: str = "",
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable diagnostic structure"""
    return {
        'stage': stage,
        'message': message,
        'line': line,
        'where': where,
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_diagnostic(diagnostic: Dict) -> str:
    """Format diagnostic as string"""
    text = f"{diagnostic['stage']}{diagnostic['where']} at line {diagnostic['line']}:\n"
    text += f"  {diagnostic['message']}\n"

    if diagnostic['got']:
        text += f"  Got: {diagnostic['got']}\n"

    if diagnostic['context']:
        text += f"  Context:\n{diagnostic['context']}\n"

    if diagnostic['suggestions']:
        text += "  Suggestions:\n"
        for suggestion in diagnostic['suggestions']:
            text += f"    - {suggestion}\n"

    return text


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, context_lines: int = 1) -> str:
    """Get numbered source lines around the error line"""
    lines = source_text.split('\n')
    if not 1 <= line_num <= len(lines):
        return ""
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        marker = ">" if i == line_num - 1 else " "
        context_parts.append(f"  {marker}{i+1:4d}: {lines[i]}")

    return '\n'.join(context_parts)


def extract_got(error: LoxError) -> Optional[str]:
    """Extract the offending lexeme, if the error carries a token"""
    token = getattr(error, 'token', None)
    if token is None:
        return None
    if token.type == TokenType.EOF:
        return "end of input"
    return f"'{token.lexeme}'"


def generate_suggestions(error: LoxError) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []
    message = error.message

    if "Expect ';'" in message:
        suggestions.append("Every statement ends with ';'")

    if "initializer" in message:
        suggestions.append("Variables must be initialized: use 'var x = nil;' for an empty value")

    if "Undefined variable" in message:
        suggestions.append("Declare the variable with 'var' before using or assigning it")

    if "two numbers or two strings" in message:
        suggestions.append("Numbers are not converted to strings implicitly")

    if "Unterminated string" in message:
        suggestions.append("Close the string with a matching '\"'")

    if "Invalid assignment target" in message:
        suggestions.append("Only a variable name can appear left of '='")

    return suggestions


def enhance_error(error: LoxError, source_text: str) -> Dict:
    """Convert any Lox error into a diagnostic dict with source context"""
    return make_diagnostic(
        stage=error.stage,
        message=error.message,
        line=error.line,
        where=error.where,
        got=extract_got(error),
        context=get_context_lines(source_text, error.line),
        suggestions=generate_suggestions(error)
    )


def render_error(error: LoxError, source_text: Optional[str] = None) -> str:
    """Short form without source, full diagnostic with it"""
    if source_text is None:
        return str(error)
    return format_diagnostic(enhance_error(error, source_text))
