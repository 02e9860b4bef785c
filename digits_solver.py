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

from optparse import OptionParser
import itertools
import logging
import math
import sys
from multiprocessing import Process, Queue, Pipe
from multiprocessing.connection import wait

from rpn_parser import BINARY_OPERATORS, parse, rpn_to_str, to_rpn, tokenize

logger = logging.getLogger(__name__)

OPERATOR_SYMBOLS = ''.join(BINARY_OPERATORS)

class InvalidPuzzle(ValueError):
    pass

# Generate every ordered selection of 2..n distinct indices out of
# range(n).  We extend a prefix with each index not used yet and backtrack,
# tracking used indices in a bitmask, so no selection is produced twice and
# we never have to compare against the ones produced so far.  Selections
# come out in depth-first order: (0, 1), (0, 1, 2), ..., (0, 2), ...
def selections(n):
    prefix = []

    def extend(used):
        for i in range(n):
            if used & (1 << i):
                continue
            prefix.append(i)
            if len(prefix) >= 2:
                yield tuple(prefix)
            if len(prefix) < n:
                yield from extend(used | (1 << i))
            prefix.pop()

    if n < 2:
        return iter(())
    return extend(0)

def operator_sequences(length):
    return list(itertools.product(OPERATOR_SYMBOLS, repeat=length))

# Operator sequences for every selection length of an n-digit pool, keyed by
# the number of operators (1..n-1).  Computed once per solve.
def operator_table(n):
    return {length: operator_sequences(length) for length in range(1, n)}

# Number of (selection, operator sequence) pairs for an n-digit pool:
# sum_{k=2}^{n} n!/(n-k)! * 4^(k-1)
def count_candidates(n):
    total = 0
    for k in range(2, n + 1):
        total += (math.factorial(n) // math.factorial(n - k)) * \
            len(OPERATOR_SYMBOLS) ** (k - 1)
    return total

def candidates(n):
    table = operator_table(n)
    for selection in selections(n):
        for ops in table[len(selection) - 1]:
            yield selection, ops

def build_equation(digits, selection, ops):
    items = [str(digits[selection[0]])]
    for op, index in zip(ops, selection[1:]):
        items.append(op)
        items.append(str(digits[index]))
    return ' '.join(items)

def check_equation(equation, target):
    outcome = parse(equation)
    return outcome.ok and outcome.value == target

def _solve_selection(digits, selection, target, table):
    matches = []
    for ops in table[len(selection) - 1]:
        equation = build_equation(digits, selection, ops)
        if check_equation(equation, target):
            matches.append(equation)
    return matches

def _validate(digits, target):
    if not digits:
        raise InvalidPuzzle('no digits given')
    if target is None:
        raise InvalidPuzzle('no target given')
    if not isinstance(target, int) or isinstance(target, bool):
        raise InvalidPuzzle('target must be an integer: %r' % (target,))
    for d in digits:
        # a negative digit would render as a '-' the parser reads as binary
        if not isinstance(d, int) or isinstance(d, bool) or d < 0:
            raise InvalidPuzzle('digits must be non-negative integers: %r' %
                                (d,))

# The loop for worker processes.  Each task is a single selection; we send
# back the matches found for it, tagged with the selection so the master can
# put results back in generation order.
def run_worker(conn, digits, target, table, tasks):
    while True:
        selection = tasks.get()
        if selection is None:
            # received termination command.
            conn.send(None)
            break
        matches = _solve_selection(digits, selection, target, table)
        if matches:
            conn.send((selection, matches))
    conn.close()

def _solve_parallel(digits, target, table, num_workers):
    tasks = Queue()

    # create and start workers
    workers = []
    for i in range(num_workers):
        parent_conn, child_conn = Pipe()
        worker = Process(target=run_worker,
                         args=(child_conn, digits, target, table, tasks))
        worker.start()
        child_conn.close()
        workers.append((worker, parent_conn))
    logger.debug('started %d workers', num_workers)

    for selection in selections(len(digits)):
        tasks.put(selection)
    # Tell workers all data have been passed.
    for _ in workers:
        tasks.put(None)

    # Receive matches until every worker has reported completion.  Received
    # data of 'None' means the corresponding worker is done.
    found = {}
    conns = set(w[1] for w in workers)
    while conns:
        for c in wait(list(conns)):
            worker_data = c.recv()
            if worker_data is None:
                conns.remove(c)
                continue
            selection, matches = worker_data
            found[selection] = matches

    for w in workers:
        w[0].join()
        w[1].close()
    logger.debug('all workers completed')

    solutions = []
    for selection in selections(len(digits)):
        solutions.extend(found.get(selection, ()))
    return solutions

# Find all equations over 'digits' that evaluate to 'target'.  Each digit
# is used at most once, any subset of two or more digits in any order, with
# '+', '-', '*' and '/' between them and no parentheses.  An equation is
# accepted only if no subtraction along the way goes negative and every
# division is exact.  Equations are returned in candidate generation order,
# whether or not workers are used.
def solve(digits, target, num_workers=1):
    _validate(digits, target)
    digits = tuple(digits)
    table = operator_table(len(digits))
    logger.debug('%d candidate equations for %d digits',
                 count_candidates(len(digits)), len(digits))

    if num_workers > 1 and len(digits) > 1:
        solutions = _solve_parallel(digits, target, table, num_workers)
    else:
        solutions = []
        for selection in selections(len(digits)):
            solutions.extend(_solve_selection(digits, selection, target,
                                              table))
    logger.info('%d solutions for target %d', len(solutions), target)
    return solutions

def _print_evaluation(expression, separator):
    outcome = parse(expression, separator)
    if outcome.ok:
        print('%s = %s' % (expression, outcome.value))
    else:
        print('%s: %s' % (expression, outcome.violation))
    return 0 if outcome.ok else 1

def main(argv=None):
    parser = OptionParser(usage='usage: %prog [options] target digit ...')
    parser.add_option("-w", "--workers", dest='num_workers', type='int',
                      action="store", default=1,
                      help="number of worker processes [default: %default]")
    parser.add_option("-r", "--rpn", dest='show_rpn', action="store_true",
                      default=False,
                      help="also print each solution in postfix notation")
    parser.add_option("-c", "--count", dest='count_only', action="store_true",
                      default=False,
                      help="only print the number of candidate equations")
    parser.add_option("-e", "--evaluate", dest='expression', action="store",
                      default=None,
                      help="evaluate a single expression and exit")
    parser.add_option("-s", "--separator", dest='separator', action="store",
                      default='.',
                      help="decimal separator for --evaluate "
                      "[default: %default]")
    parser.add_option("-v", "--verbose", dest='verbose', action="store_true",
                      default=False, help="enable debug logging")
    (options, args) = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if options.expression is not None:
        try:
            return _print_evaluation(options.expression, options.separator)
        except ValueError as e:
            parser.error(str(e))

    if options.num_workers < 1:
        parser.error('number of workers must be positive')
    if len(args) < 2:
        parser.error('target and at least one digit are required')
    try:
        target = int(args[0])
        digits = [int(arg) for arg in args[1:]]
    except ValueError:
        parser.error('target and digits must be integers')

    if options.count_only:
        print(count_candidates(len(digits)))
        return 0

    try:
        solutions = solve(digits, target, options.num_workers)
    except InvalidPuzzle as e:
        parser.error(str(e))
    for solution in solutions:
        if options.show_rpn:
            print('%s    [%s]' % (solution, rpn_to_str(to_rpn(
                tokenize(solution)))))
        else:
            print(solution)
    print('%d total solutions found.' % len(solutions))
    return 0

if __name__ == '__main__':
    sys.exit(main())
