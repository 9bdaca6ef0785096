## gradebatch.py

"""
This is the core code of gradebatch shared by the other modules.
All configuration details are in this file.

gradebatch compiles and runs every student submission found in a folder of
student folders, grades the result, and prints one CSV row per student.
See gradepipe.py for the command line and core_grade.GradePipe for the
grading loop itself.

Created: 19 Oct 2026.
"""

import math
import os.path
import sys

##
## CONFIGURATION Globals
##

## ---TOOLS----
## The external programs gradebatch invokes.  Each is started as a separate
## process, so these may be bare names found on the PATH or full paths.
##

# The Java compiler.  Invoked as: JAVAC -cp <classpath> <source>
#
JAVAC = 'javac'

# The Java runtime.  Used both to run student code and to run the
# style checker jar.
#
JAVA = 'java'

# Extension of the source file compiled for each student and of the
# compiled artifact that the compiler leaves next to it.
#
SOURCE_EXT = 'java'
CLASS_EXT = 'class'


## ---TIMING----

# How many milliseconds a student's program may run before it is killed.
# Can be overridden with --timeout.  0 means no limit at all.
#
DEFAULT_TIMEOUT = 5000

# A few extra milliseconds added to every time limit to absorb scheduling
# jitter in both the child and this program.
#
TIMEOUT_BUFFER = 500


## ---FILES----
## Names of the log files written into each work directory and copied
## back into each student's folder.
##

COMPILE_LOG = 'compile.log'
OUTPUT_LOG = 'output.log'
ERROR_LOG = 'error.log'
TIMEOUT_LOG = 'timeout.log'
STYLE_LOG = 'style.log'
TEST_LOG = 'test.log'

# The logs that are cleared out of a student folder before staging so that
# artifacts from an earlier grading run never linger.
#
STALE_LOGS = (COMPILE_LOG, OUTPUT_LOG, ERROR_LOG, TIMEOUT_LOG)

# The folder of temp folders is created in the current directory as
# TEMP_ROOT_PREFIX + <epoch millis>.  Each student then gets
# TEMP_DIR_PREFIX + <student folder> + '-' + <epoch millis> within it.
#
TEMP_ROOT_PREFIX = 'tmp'
TEMP_DIR_PREFIX = 'temp-'

# Extension of the expected-output file looked for in the tests folder
# when no explicit answer file is given.
#
ANSWER_EXT = 'out'


## ---JUNIT----

# Main class that runs JUnit 4 tests from the command line.
#
JUNIT_RUNNER = 'org.junit.runner.JUnitCore'

# Jars (resolved against the work directory, so usually provided in the
# tests folder) added to the classpath when grading with JUnit.
#
JUNIT_JARS = ('junit-4.13.jar', 'hamcrest-core-1.3.jar')


## ---STYLE CHECKING----

# The Checkstyle jar and ruleset.  If these are found in the work directory
# (such as when provided in the tests folder), that copy is used.
# Otherwise, the given path is used as is.
#
STYLE_CHECKER_JAR = 'checkstyle-8.33-all.jar'
STYLE_RULESET = 'style_checks.xml'

# Everything Checkstyle prints (lines joined, then trimmed) when it
# finds nothing to complain about.
#
STYLE_SUCCESS = 'Starting audit...Audit done.'


## --- END OF CONFIGURATION SETTINGS ---


##
## PROGRAM CONSTANTS
## (Do not touch these as a user or admin!)
##

GRADEBATCH_VERSION = '1.0.0'

# Outcome codes shown in the CSV output.
#
PASS = 'P'
FAIL = 'F'
ERROR = 'E'
COMPILE_ERROR = 'C'
TIMEOUT = 'T'

# Placeholder for a numeric column that does not apply (or a threshold that
# has not been set).
#
IGNORE = -1

# Separator between fields of a result row.
#
FIELD_SEP = ', '

# Status Codes for GraderErrors
# stored as dictionary of tuples: {'KEY': (CODE, Message), 'KEY2': ...}
#
STATUS = {
    ## 400s: Error due to bad user input; could not proceed.
    'NO_STUDENTS_ROOT':
        (401, "The folder of student folders does not exist or is not "
         "a directory."),
    'NO_TESTS_ROOT':
        (402, "The given tests folder (or answer file) does not exist."),
    'NO_ANSWER_FILE':
        (403, "Could not find the file of expected output to compare "
         "student output against."),
    'INVALID_TIMEOUT':
        (404, "The timeout must be a whole number of milliseconds, "
         "0 or greater."),

    ## 500s: Error due to something wrong while grading; could not proceed.
    'UNHANDLED_ERROR':
        (500, "Sorry, but something unexpected just happened and "
         "the grader crashed."),
    'UNPREPABLE_TEMP_DIR':
        (511, "Could not create the folder that holds each student's "
         "temporary work folder."),
    'UNPREPABLE_WORKDIR':
        (512, "Could not create or fill a student's temporary work "
         "folder."),
    'COULD_NOT_STORE_RESULTS':
        (513, "Could not copy log files back into a student folder."),
    'GRADER_CRASH':
        (520, "A grading strategy just crashed unexpectedly. See the "
         "log for more information."),
}


##
## FUNCTIONS
##

from core_type import GraderError


def printError(error, file=None):
    """
    Prints both GraderError status code messages or other kinds of error
    messages.  Error should be a GraderError object or a string message.
    Prints to stderr unless another file is given.
    """
    if file is None:
        file = sys.stderr
    if not isinstance(error, GraderError):
        if isinstance(error, str):
            error = GraderError(error)
        else:
            error = GraderError(type(error).__name__, str(error))

    if error.key in STATUS:
        code, message = STATUS[error.key]
        line = 'Grader Error ' + str(code) + ': ' + message
        line += ' (' + error.key
        if error.details:
            line += ': ' + str(error.details)
        line += ')'
    else:
        line = 'Nonstandard Grader Error: ' + error.key
        if error.details:
            line += ': ' + str(error.details)
    print(line, file=file)


## ---Utility---

def studentName(studentDir):
    """
    Returns the name shown for the given student folder: its basename with
    every _ replaced by a space.
    """
    return os.path.basename(os.path.normpath(studentDir)).replace('_', ' ')


def readLines(path):
    """
    Returns the lines of the given text file without their line endings.
    Returns an empty list if the file does not exist.  Undecodable bytes
    are replaced rather than raising.
    """
    if not os.path.exists(path):
        return []
    with open(path, 'r', encoding='utf-8', errors='replace') as filein:
        return filein.read().splitlines()


def roundHalfUp(value):
    """ Rounds .5 away from zero for positive values, as Java's Math.round. """
    return int(math.floor(value + 0.5))
