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

import sys
import os
sys.path.append(os.path.dirname(os.path.realpath(__file__)) + '/..')
import io
import unittest
from contextlib import redirect_stdout

# import definitions from the tested module.  this must be done after adjusting
# sys.path (see above)
from digits_solver import *

class GeneratorTest(unittest.TestCase):
    def test_selections(self):
        self.assertEqual([(0, 1), (1, 0)], list(selections(2)))

        result = list(selections(3))
        self.assertEqual(12, len(result))
        self.assertEqual(len(result), len(set(result)))
        for selection in result:
            self.assertTrue(2 <= len(selection) <= 3)
            self.assertEqual(len(selection), len(set(selection)))
        self.assertIn((0, 1), result)
        self.assertIn((1, 0), result)
        self.assertIn((2, 0, 1), result)

    def test_selections_too_short(self):
        self.assertEqual([], list(selections(0)))
        self.assertEqual([], list(selections(1)))

    def test_operator_sequences(self):
        self.assertEqual([('+',), ('-',), ('*',), ('/',)],
                         operator_sequences(1))
        sequences = operator_sequences(3)
        self.assertEqual(64, len(sequences))
        self.assertEqual(64, len(set(sequences)))
        self.assertEqual({}, operator_table(1))
        self.assertEqual([1, 2, 3], sorted(operator_table(4)))

    def test_count_candidates(self):
        self.assertEqual(0, count_candidates(1))
        self.assertEqual(8, count_candidates(2))
        # 12 * 4 + 24 * 16 + 24 * 64
        self.assertEqual(1968, count_candidates(4))
        for n in range(0, 6):
            pairs = list(candidates(n))
            self.assertEqual(count_candidates(n), len(pairs))
            self.assertEqual(len(pairs), len(set(pairs)))
            for selection, ops in pairs:
                self.assertEqual(len(selection) - 1, len(ops))

    def test_build_equation(self):
        digits = (4, 8, 5, 11, 15, 20)
        self.assertEqual('8 * 15 + 20 - 11 + 4',
                         build_equation(digits, (1, 4, 5, 3, 0),
                                        ('*', '+', '-', '+')))
        self.assertEqual('5 / 4', build_equation(digits, (2, 0), ('/',)))

class SolverTest(unittest.TestCase):
    def test_check_equation(self):
        self.assertTrue(check_equation('8 * 15 + 20 - 11 + 4', 133))
        self.assertFalse(check_equation('8 * 15 + 20 - 11 + 4', 134))
        self.assertFalse(check_equation('5 - 8 + 10', 7))
        self.assertFalse(check_equation('7 / 2 * 2', 7))
        self.assertFalse(check_equation('8 / 0', 0))

    def test_two_digits(self):
        self.assertEqual(['1 + 2', '2 + 1'], solve([1, 2], 3))
        self.assertEqual(['8 - 5'], solve([5, 8], 3))
        self.assertEqual(set(['8 * 0', '0 * 8', '0 / 8']),
                         set(solve([8, 0], 0)))

    def test_rules_apply_per_step(self):
        solutions = solve([5, 8, 10], 7)
        self.assertNotIn('5 - 8 + 10', solutions)
        for solution in ['10 - 8 + 5', '5 + 10 - 8', '10 + 5 - 8']:
            self.assertIn(solution, solutions)

    def test_no_solution(self):
        self.assertEqual([], solve([5], 5))
        self.assertEqual([], solve([3, 4], 100))

    def test_invalid_puzzle(self):
        self.assertRaises(InvalidPuzzle, solve, [], 1)
        self.assertRaises(InvalidPuzzle, solve, [1, 2], None)
        self.assertRaises(InvalidPuzzle, solve, [1, 2], 2.5)
        self.assertRaises(InvalidPuzzle, solve, [1, -2], 3)
        self.assertRaises(InvalidPuzzle, solve, [1, '2'], 3)
        # bool is an int subclass, but not a digit
        self.assertRaises(InvalidPuzzle, solve, [True, 2], 3)
        self.assertRaises(InvalidPuzzle, solve, [1, 2], True)
        # it's a ValueError for the caller
        self.assertRaises(ValueError, solve, [], 1)

    def test_idempotent(self):
        digits = [2, 3, 5, 7]
        first = solve(digits, 10)
        self.assertTrue(len(first) > 0)
        self.assertEqual(first, solve(digits, 10))
        for solution in first:
            self.assertTrue(check_equation(solution, 10))

    def test_parallel(self):
        digits = [2, 3, 5, 7]
        self.assertEqual(solve(digits, 10), solve(digits, 10, num_workers=3))
        self.assertEqual(['1 + 2', '2 + 1'], solve([1, 2], 3, num_workers=2))
        self.assertEqual([], solve([5], 5, num_workers=2))

    def test_digits_puzzle(self):
        # a full 6-digit puzzle; use workers as it's the biggest search here
        solutions = solve([4, 8, 5, 11, 15, 20], 133, num_workers=4)
        self.assertIn('8 * 15 + 20 - 11 + 4', solutions)
        self.assertEqual(len(solutions), len(set(solutions)))
        for solution in solutions:
            self.assertTrue(check_equation(solution, 133))

class MainTest(unittest.TestCase):
    def run_main(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(argv)
        return status, out.getvalue().splitlines()

    def test_solve(self):
        status, lines = self.run_main(['3', '1', '2'])
        self.assertEqual(0, status)
        self.assertEqual(['1 + 2', '2 + 1', '2 total solutions found.'],
                         lines)

    def test_rpn(self):
        status, lines = self.run_main(['-r', '3', '1', '2'])
        self.assertEqual('1 + 2    [1 2 +]', lines[0])

    def test_count(self):
        status, lines = self.run_main(['-c', '0', '1', '2', '3', '4'])
        self.assertEqual(['1968'], lines)

    def test_evaluate(self):
        status, lines = self.run_main(['-e', '8 * 15 + 20 - 11 + 4'])
        self.assertEqual(0, status)
        self.assertEqual(['8 * 15 + 20 - 11 + 4 = 133'], lines)

        status, lines = self.run_main(['-e', '5 - 8'])
        self.assertEqual(1, status)
        self.assertEqual(['5 - 8: negative'], lines)

        status, lines = self.run_main(['-s', ',', '-e', '2,5 * 2'])
        self.assertEqual(['2,5 * 2 = 5'], lines)

    def test_bad_arguments(self):
        with open(os.devnull, 'w') as devnull:
            saved_stderr = sys.stderr
            sys.stderr = devnull
            try:
                self.assertRaises(SystemExit, main, ['3'])
                self.assertRaises(SystemExit, main, ['x', '1', '2'])
                self.assertRaises(SystemExit, main, ['-w', '0', '3', '1'])
                self.assertRaises(SystemExit, main, ['3', '1', '-2'])
            finally:
                sys.stderr = saved_stderr

if '__main__' == __name__:
    unittest.main()
