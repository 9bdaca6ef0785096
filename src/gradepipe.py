#!/usr/bin/env python3

## gradepipe.py

"""
Grades a folder of student folders from the command line.

    gradebatch MODE studentsRoot testsRoot entryPoint [options]

MODE picks how each submission is graded:
* output       - compare what the program prints to an answer file
* output-style - as output, plus a Checkstyle pass/fail column
* junit        - run a JUnit 4 test class and count passing tests
* junit-style  - as junit, plus a Checkstyle pass/fail column

For the output modes, testsRoot may be the answer file itself.  If it is a
folder instead, its files are copied in with each student's files, and the
answer file is either given by --answer or is <entryPoint>.out in testsRoot.

One CSV line per student is printed to stdout.  Logging goes to stderr;
pass --log-level DEBUG to see what is happening.

Exits with 0 once all students are graded, no matter their grades, or
with 1 if grading could not start at all.

Created: 19 Oct 2026.
"""
import argparse
import logging
import os
import sys

import gradebatch
from core_grade import GradePipe
from core_strategy import JUnitStrategy, OutputStrategy, StyleCheck
from core_type import GraderConfig, GraderError

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def millisValue(text):
    """ argparse type for a timeout: a whole number, 0 or more. """
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("must be a whole number of "
                                         "milliseconds: " + repr(text))
    if value < 0:
        raise argparse.ArgumentTypeError("must not be negative: " + text)
    return value


def percentValue(text):
    """ argparse type for a similarity threshold such as 90 or 90%. """
    return countValue(text[:-1] if text.endswith('%') else text)


def countValue(text):
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("must be a whole number: " +
                                         repr(text))


def buildParser():
    parser = argparse.ArgumentParser(
        prog='gradebatch',
        description="Compiles, runs, and grades every student folder in a "
                    "folder of student folders.")
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + gradebatch.GRADEBATCH_VERSION)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('studentsRoot',
                        help="the folder of student folders")
    common.add_argument('testsRoot',
                        help="folder of test files (or, for the output "
                             "modes, the answer file)")
    common.add_argument('entryPoint',
                        help="name of the class with main, without .java")
    common.add_argument('-t', '--timeout', type=millisValue,
                        default=gradebatch.DEFAULT_TIMEOUT,
                        help="milliseconds each program may run; 0 for no "
                             "limit (default: %(default)s)")
    common.add_argument('-p', '--policy',
                        help="security policy file to apply to the code "
                             "being graded")
    common.add_argument('--inplace', action='store_true',
                        help="compile and run in each student folder "
                             "instead of a temp folder")
    common.add_argument('--log-level', type=str.upper, default='WARNING',
                        choices=LOG_LEVELS,
                        help="how much to log to stderr "
                             "(default: %(default)s)")

    output = argparse.ArgumentParser(add_help=False)
    tolerance = output.add_mutually_exclusive_group()
    tolerance.add_argument('--similarity', type=percentValue,
                           metavar='PERCENT',
                           help="pass output at least this similar to "
                                "the answer")
    tolerance.add_argument('--mistakes', type=countValue, metavar='COUNT',
                           help="pass output within this many typos of "
                                "the answer")
    output.add_argument('--whitespace', action='store_true',
                        help="ignore all whitespace and blank lines")
    output.add_argument('--answer',
                        help="file of expected output, if testsRoot is a "
                             "folder")

    modes = parser.add_subparsers(dest='mode', metavar='MODE')
    modes.required = True
    modes.add_parser('output', parents=[common, output],
                     help="compare program output to an answer file")
    modes.add_parser('output-style', parents=[common, output],
                     help="output, plus a style check")
    modes.add_parser('junit', parents=[common],
                     help="count passing JUnit 4 tests")
    modes.add_parser('junit-style', parents=[common],
                     help="junit, plus a style check")
    return parser


def findAnswer(args):
    """ Where the expected output lives for the output modes. """
    if args.answer:
        return args.answer
    if os.path.isfile(args.testsRoot):
        return args.testsRoot
    return os.path.join(args.testsRoot,
                        args.entryPoint + '.' + gradebatch.ANSWER_EXT)


def buildStrategy(args):
    """ Returns the Strategy described by the parsed arguments. """
    if args.mode.startswith('junit'):
        strategy = JUnitStrategy()
    else:
        strategy = OutputStrategy(findAnswer(args),
                                  similarityThreshold=args.similarity,
                                  maxTypos=args.mistakes,
                                  ignoreWhitespace=args.whitespace)
    if args.mode.endswith('-style'):
        strategy = StyleCheck(strategy)
    return strategy


def buildConfig(args):
    return GraderConfig(args.studentsRoot, args.testsRoot, args.entryPoint,
                        timeout=args.timeout,
                        policy=os.path.abspath(args.policy) if args.policy
                        else None,
                        useTempDir=not args.inplace)


def main(argv=None):
    """
    Processes command line arguments and grades.  Returns the exit status.
    """
    args = buildParser().parse_args(argv)
    try:
        pipe = GradePipe(buildConfig(args), buildStrategy(args),
                         logLevel=args.log_level)
        pipe.run()
    except GraderError as err:
        gradebatch.printError(err)
        return 1
    except Exception as err:
        logging.getLogger('Grader').exception("Grading stopped early")
        gradebatch.printError(GraderError('UNHANDLED_ERROR', repr(err)))
        return 1
    return 0


if __name__ == "__main__":
    #running as a script (rather than as imported module)
    sys.exit(main())
