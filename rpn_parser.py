#!/usr/bin/env python

# Copyright (C) 2015  JINMEI Tatuya
#
# Permission to use, copy, modify, and distribute this software for any
# purpose with or without fee is hereby granted, provided that the above
# copyright notice and this permission notice appear in all copies.
#
# THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES WITH
# REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF MERCHANTABILITY
# AND FITNESS.  IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR ANY SPECIAL, DIRECT,
# INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES WHATSOEVER RESULTING FROM
# LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION OF CONTRACT, NEGLIGENCE
# OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN CONNECTION WITH THE USE OR
# PERFORMANCE OF THIS SOFTWARE.

# Infix arithmetic parser enforcing the Digits puzzle rules.
#
# An expression goes through three stages: tokenize() turns the infix string
# into tokens, to_rpn() reorders them into reverse Polish notation with the
# shunting-yard algorithm, and calc_rpn() evaluates the result with an operand
# stack.  Every binary step of the evaluation is checked against the rules of
# the game: a subtraction must not go negative and a division must be exact.

from collections import namedtuple
from fractions import Fraction
from string import digits as DIGITS

class MalformedInput(ValueError):
    pass

# Operator catalog.  Precedence is "higher binds tighter"; all operators are
# left-associative, so an incoming operator pops every stacked operator of
# equal or higher precedence.  '(' sits on the operator stack with precedence
# 0 so that it's never popped by a precedence comparison.
Operator = namedtuple('Operator', ['symbol', 'name', 'arity', 'precedence'])

ADD = Operator('+', 'add', 2, 2)
SUB = Operator('-', 'sub', 2, 2)
MUL = Operator('*', 'mul', 2, 4)
DIV = Operator('/', 'div', 2, 4)
UNARY_PLUS = Operator('+', 'u+', 1, 6)
UNARY_MINUS = Operator('-', 'u-', 1, 6)

PAREN_PRECEDENCE = 0

BINARY_OPERATORS = {op.symbol: op for op in (ADD, SUB, MUL, DIV)}
UNARY_OPERATORS = {op.symbol: op for op in (UNARY_PLUS, UNARY_MINUS)}

# Token kinds
NUMBER = 'number'
OPERATOR = 'operator'
PAREN = 'paren'

Token = namedtuple('Token', ['kind', 'value'])

# Violation markers carried by Outcome
NEGATIVE = 'negative'
FRACTIONAL = 'fractional'
DIVIDE_BY_ZERO = 'divide-by-zero'
MALFORMED = 'malformed'

# Result of an evaluation: either a value or a violation marker.
class Outcome(namedtuple('Outcome', ['value', 'violation'])):
    __slots__ = ()

    @property
    def ok(self):
        return self.violation is None

def _check_separator(decimal_separator):
    if (len(decimal_separator) != 1 or decimal_separator in DIGITS or
            decimal_separator.isspace() or decimal_separator in '+-*/()'):
        raise ValueError('invalid decimal separator: %r' % decimal_separator)

# Build a number out of its whole and fractional parts (either may be empty,
# but not both).  We keep integral values as int so the common case never
# touches Fraction, which is expensive.
def _make_number(whole, frac):
    if not whole and not frac:
        raise MalformedInput('empty number')
    if not frac:
        return int(whole)
    value = Fraction(int(whole or '0') * 10 ** len(frac) + int(frac),
                     10 ** len(frac))
    return int(value) if value.denominator == 1 else value

def tokenize(expression, decimal_separator='.'):
    _check_separator(decimal_separator)
    if not expression or expression.isspace():
        raise MalformedInput('expression is empty')

    # parentheses balance is checked up front in a single pass.
    balance = 0
    for ch in expression:
        if ch == '(':
            balance += 1
        elif ch == ')':
            balance -= 1
    if balance != 0:
        raise MalformedInput('number of left and right parentheses differs')

    tokens = []
    pos = 0
    length = len(expression)
    while pos < length:
        ch = expression[pos]
        if ch.isspace():
            pos += 1
        elif ch in '()':
            tokens.append(Token(PAREN, ch))
            pos += 1
        elif ch in BINARY_OPERATORS:
            # '+' and '-' are unary at the very beginning or right after '('
            unary = ch in UNARY_OPERATORS and \
                (not tokens or tokens[-1] == Token(PAREN, '('))
            op = UNARY_OPERATORS[ch] if unary else BINARY_OPERATORS[ch]
            tokens.append(Token(OPERATOR, op))
            pos += 1
        elif ch in DIGITS or ch == decimal_separator:
            start = pos
            while pos < length and expression[pos] in DIGITS:
                pos += 1
            whole = expression[start:pos]
            frac = ''
            if pos < length and expression[pos] == decimal_separator:
                pos += 1
                start = pos
                while pos < length and expression[pos] in DIGITS:
                    pos += 1
                frac = expression[start:pos]
            tokens.append(Token(NUMBER, _make_number(whole, frac)))
        else:
            raise MalformedInput('unknown token %r at position %d' % (ch, pos))
    return tokens

# Convert infix tokens into RPN with the shunting-yard algorithm.  The
# operator stack is local to each call.
def to_rpn(tokens):
    output = []
    stack = []
    for token in tokens:
        if token.kind == NUMBER:
            output.append(token)
        elif token.kind == PAREN:
            if token.value == '(':
                stack.append(token)
                continue
            while True:
                if not stack:
                    raise MalformedInput("')' without matching '('")
                top = stack.pop()
                if top.kind == PAREN:
                    break
                output.append(top)
        else:
            prec = token.value.precedence
            while stack and _precedence(stack[-1]) >= prec:
                output.append(stack.pop())
            stack.append(token)

    while stack:
        top = stack.pop()
        if top.kind == PAREN:
            raise MalformedInput("'(' without matching ')'")
        output.append(top)
    return output

def _precedence(token):
    if token.kind == PAREN:
        return PAREN_PRECEDENCE
    return token.value.precedence

# Apply a binary operator, returning an Outcome.  This is where the rules of
# the game are enforced, so they hold for every intermediate result and not
# only for the final one.
def _apply(op, left, right):
    if op is ADD:
        return Outcome(left + right, None)
    if op is SUB:
        if right > left:
            return Outcome(None, NEGATIVE)
        return Outcome(left - right, None)
    if op is MUL:
        return Outcome(left * right, None)
    if right == 0:
        return Outcome(None, DIVIDE_BY_ZERO)
    if left % right != 0:
        return Outcome(None, FRACTIONAL)
    # exact, so floor division loses nothing and gives an int even for
    # Fraction operands.
    return Outcome(left // right, None)

def calc_rpn(rpn):
    stack = []
    for token in rpn:
        if token.kind == NUMBER:
            stack.append(token.value)
            continue
        op = token.value
        if len(stack) < op.arity:
            raise MalformedInput('missing operand for %s' % op.name)
        if op.arity == 1:
            arg = stack.pop()
            stack.append(-arg if op is UNARY_MINUS else arg)
            continue
        # Note that the order is important: the first popped value is the
        # right-hand operand.
        right = stack.pop()
        left = stack.pop()
        outcome = _apply(op, left, right)
        if not outcome.ok:
            return outcome
        stack.append(outcome.value)

    if not stack:
        raise MalformedInput('nothing to evaluate')
    if len(stack) > 1:
        return Outcome(None, MALFORMED)     # excess operand
    return Outcome(stack[0], None)

# Evaluate an infix expression under the rules of the game.  Malformed
# expressions are reported as an Outcome with the MALFORMED violation instead
# of an exception, same as rule violations.
def parse(expression, decimal_separator='.'):
    try:
        return calc_rpn(to_rpn(tokenize(expression, decimal_separator)))
    except MalformedInput:
        return Outcome(None, MALFORMED)

def rpn_to_str(rpn):
    items = []
    for token in rpn:
        if token.kind == NUMBER:
            items.append(str(token.value))
        elif token.value.arity == 1:
            items.append(token.value.name)
        else:
            items.append(token.value.symbol)
    return ' '.join(items)
