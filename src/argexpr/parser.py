"""
Recursive-descent parser for argument expressions (tokens -> AST).

Precedence, lowest to highest (all binary levels are left-associative):

    or-level        ||  ??
    and-level       &&
    equality        ==  !=
    comparison      >  >=  <  <=
    additive        +  -
    multiplicative  *  /
    unary           !  -
    call / primary  if(...)  contains(...)  length(...)  literals  (...)

The whole token list must be consumed; leftover tokens are a ParseError.
Nesting (grouping, call arguments, unary chains) is bounded by max_depth
so pathological input fails cleanly instead of exhausting the call
stack. Long operator chains (1 + 1 + ... + 1) are built in loops and do
not count as nesting.
"""

from typing import List

from argexpr.errors import ParseError
from argexpr.expressions import (
    Expression,
    BinaryExpression,
    BinaryOperator,
    UnaryExpression,
    UnaryOperator,
    Literal,
    ContextReference,
    Namespace,
    IfExpression,
    ContainsExpression,
    LengthExpression,
)
from argexpr.lexer import Token, TokenType


DEFAULT_MAX_DEPTH = 32


class Parser:
    """
    Builds one Expression from a token list.

    A Parser is single-use: create it, call parse() once, discard it.
    """

    def __init__(self, tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ParseError("Token list must end with EOF")
        self.tokens = tokens
        self.max_depth = max_depth
        self._current = 0
        self._depth = 0

    def parse(self) -> Expression:
        """
        Parse exactly one expression.

        Raises:
            ParseError: On a grammar mismatch, trailing tokens, or nesting
                deeper than max_depth
        """
        expr = self._expression()
        if not self._is_at_end():
            token = self._peek()
            raise ParseError(f"Unexpected token after expression: {token.raw!r}", token)
        return expr

    # =========================================================================
    # Grammar levels
    # =========================================================================

    def _expression(self) -> Expression:
        self._enter()
        try:
            return self._or()
        finally:
            self._depth -= 1

    def _or(self) -> Expression:
        # || and ?? share one tier
        expr = self._and()
        while self._match(TokenType.OR, TokenType.NULLISH):
            operator = BinaryOperator(self._previous().raw)
            right = self._and()
            expr = BinaryExpression(operator, expr, right)
        return expr

    def _and(self) -> Expression:
        expr = self._equality()
        while self._match(TokenType.AND):
            right = self._equality()
            expr = BinaryExpression(BinaryOperator.AND, expr, right)
        return expr

    def _equality(self) -> Expression:
        expr = self._comparison()
        while self._match(TokenType.EQ, TokenType.NEQ):
            operator = BinaryOperator(self._previous().raw)
            right = self._comparison()
            expr = BinaryExpression(operator, expr, right)
        return expr

    def _comparison(self) -> Expression:
        expr = self._term()
        while self._match(TokenType.GT, TokenType.GTE, TokenType.LT, TokenType.LTE):
            operator = BinaryOperator(self._previous().raw)
            right = self._term()
            expr = BinaryExpression(operator, expr, right)
        return expr

    def _term(self) -> Expression:
        expr = self._factor()
        while self._match(TokenType.PLUS, TokenType.MINUS):
            operator = BinaryOperator(self._previous().raw)
            right = self._factor()
            expr = BinaryExpression(operator, expr, right)
        return expr

    def _factor(self) -> Expression:
        expr = self._unary()
        while self._match(TokenType.STAR, TokenType.SLASH):
            operator = BinaryOperator(self._previous().raw)
            right = self._unary()
            expr = BinaryExpression(operator, expr, right)
        return expr

    def _unary(self) -> Expression:
        if self._match(TokenType.NOT, TokenType.MINUS):
            operator = UnaryOperator(self._previous().raw)
            self._enter()
            try:
                operand = self._unary()
            finally:
                self._depth -= 1
            return UnaryExpression(operator, operand)
        return self._call()

    def _call(self) -> Expression:
        if self._match(TokenType.IF):
            self._consume(TokenType.LPAREN, "Expected '(' after 'if'")
            condition = self._expression()

            if self._match(TokenType.COMMA):
                then_branch = self._expression()
                else_branch = None
                if self._match(TokenType.COMMA):
                    else_branch = self._expression()
            else:
                # if(cond) is the boolean form
                then_branch = Literal(True)
                else_branch = Literal(False)

            self._consume(TokenType.RPAREN, "Expected ')' after if arguments")
            return IfExpression(condition, then_branch, else_branch)

        if self._match(TokenType.CONTAINS):
            self._consume(TokenType.LPAREN, "Expected '(' after 'contains'")
            haystack = self._expression()
            self._consume(TokenType.COMMA, "Expected ',' after first argument")
            needle = self._expression()
            self._consume(TokenType.RPAREN, "Expected ')' after contains arguments")
            return ContainsExpression(haystack, needle)

        if self._match(TokenType.LENGTH):
            self._consume(TokenType.LPAREN, "Expected '(' after 'length'")
            operand = self._expression()
            self._consume(TokenType.RPAREN, "Expected ')' after length argument")
            return LengthExpression(operand)

        return self._primary()

    def _primary(self) -> Expression:
        if self._match(TokenType.BOOLEAN, TokenType.NUMBER, TokenType.STRING):
            return Literal(self._previous().value)

        if self._match(TokenType.FM_REF):
            return ContextReference(Namespace.FM, self._previous().value)

        if self._match(TokenType.FILE_REF):
            return ContextReference(Namespace.FILE, self._previous().value)

        # Bare words that are not keywords or references are plain text
        if self._match(TokenType.IDENTIFIER):
            return Literal(self._previous().value)

        if self._match(TokenType.LPAREN):
            expr = self._expression()
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        token = self._peek()
        if token.type == TokenType.EOF:
            raise ParseError("Unexpected end of expression", token)
        raise ParseError(f"Unexpected token: {token.raw!r}", token)

    # =========================================================================
    # Token helpers
    # =========================================================================

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            raise ParseError(f"Nesting exceeds limit of {self.max_depth}", self._peek())

    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self._current]

    def _previous(self) -> Token:
        return self.tokens[self._current - 1]

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise ParseError(message, self._peek())


def parse(tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    """
    Parse a token list into an Expression.

    Args:
        tokens: Output of argexpr.lexer.tokenize
        max_depth: Maximum nesting accepted

    Returns:
        Expression AST

    Raises:
        ParseError: If the tokens do not form exactly one expression
    """
    return Parser(tokens, max_depth=max_depth).parse()


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "Parser",
    "parse",
]
