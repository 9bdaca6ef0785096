"""
Tests the utility functions found in gradebatch.py.
"""

import io
import unittest

import basetest

import gradebatch
from gradebatch import printError, readLines, roundHalfUp, studentName
from core_type import GraderError


class GradebatchTest(basetest.GraderTestCase):

    def testPrintError(self):
        """ Known key -> code, message, key, and details. """
        out = io.StringIO()
        printError(GraderError('NO_STUDENTS_ROOT', 'subs'), file=out)
        self.assertEqual(out.getvalue(),
                         'Grader Error 401: ' +
                         gradebatch.STATUS['NO_STUDENTS_ROOT'][1] +
                         ' (NO_STUDENTS_ROOT: subs)\n')

    def testPrintNonstandardError(self):
        out = io.StringIO()
        printError('Something odd', file=out)
        printError(ValueError('bad'), file=out)
        self.assertEqual(out.getvalue().splitlines(),
                         ['Nonstandard Grader Error: Something odd',
                          'Nonstandard Grader Error: ValueError: bad'])

    def testStatusCodes(self):
        """ Codes are unique and in the 400s or 500s. """
        codes = [code for code, msg in gradebatch.STATUS.values()]
        self.assertEqual(len(codes), len(set(codes)))
        for code in codes:
            self.assertTrue(400 <= code < 600, code)

    def testStudentName(self):
        self.assertEqual(studentName('/subs/Jane_Q_Doe'), 'Jane Q Doe')
        self.assertEqual(studentName('subs/bob/'), 'bob')

    def testReadLines(self):
        path = self.write(self.path('a.txt'), 'one\r\ntwo\n\nthree')
        self.assertEqual(readLines(path), ['one', 'two', '', 'three'])
        self.assertEqual(readLines(self.path('missing.txt')), [])
        with open(self.path('b.txt'), 'wb') as f:
            f.write(b'caf\xe9\n')
        self.assertEqual(len(readLines(self.path('b.txt'))), 1)

    def testRoundHalfUp(self):
        tests = {0.5: 1, 1.5: 2, 2.5: 3, 7.69: 8, 7.4: 7, 0: 0}
        for value, rounded in tests.items():
            self.assertEqual(roundHalfUp(value), rounded, value)


if __name__ == "__main__":
    unittest.main()
