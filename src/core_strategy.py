## core_strategy.py

"""
Defines how a compiled and executed submission is turned into a grade.

Contains the Strategy class, which defines the hooks the GradePipe calls at
each phase of grading a submission.  This superclass does nothing at every
hook, so a strategy only overrides the phases it cares about.

Also contains all specific strategies implemented so far:
* OutputStrategy - compares program output to an answer file, exactly or
  within an edit-distance tolerance
* JUnitStrategy - runs a JUnit 4 test class and tallies passes and failures
* StyleCheck - wraps any other strategy, adding a Checkstyle pass/fail column

Created: 19 Oct 2026.
"""

import logging
import os
import re
import shutil
import subprocess

import gradebatch
from core_type import GraderError


class Strategy:
    """
    A Strategy is handed to a GradePipe, which calls its hooks in this
    order for every submission:

        beforeCompile -> (compile) -> beforeExecute -> (execute) ->
        afterExecute | afterCompileError | afterTimeoutError ->
        afterEverything

    setup() is called once before the first submission and cleanup() once
    after the last.  configureRunner() is called whenever a JavaRunner is
    built for a submission, before any other per-submission hook.

    Each hook receives the submission's JavaRunner and the Submission
    itself (see core_type).  By the end of afterEverything, a strategy
    should have stored its result columns as a list of strings in
    submission.fields; result() then supplies them to the GradePipe.

    Any Strategy subclass has access to a common logger.
    """

    def __init__(self):
        self.logger = logging.getLogger('Grader.' + type(self).__name__)

    def columns(self):
        """ Names of the result columns that follow the Student column. """
        return ()

    def header(self):
        return ['Student'] + list(self.columns())

    def setup(self, config):
        pass

    def configureRunner(self, runner):
        pass

    def beforeCompile(self, runner, submission):
        pass

    def beforeExecute(self, runner, submission):
        pass

    def afterExecute(self, runner, submission):
        pass

    def afterCompileError(self, runner, submission):
        pass

    def afterTimeoutError(self, runner, submission):
        pass

    def afterEverything(self, runner, submission):
        pass

    def cleanup(self):
        pass

    def sourceUnderTest(self, runner):
        """ The student source file that this strategy is really grading. """
        return runner.entryPointFile()

    def result(self, submission):
        """
        Returns the result columns for the given submission: those set by
        the hooks or, if the hooks never got that far, crashFields().
        """
        if submission.fields is None:
            return self.crashFields()
        return [str(f) for f in submission.fields]

    def crashFields(self):
        """ An E, then the ignore value for every other column. """
        width = len(self.columns())
        if not width:
            return []
        return [gradebatch.ERROR] + \
            [str(gradebatch.IGNORE)] * (width - 1)


##
## Output comparison
##

def levenshtein(x, y):
    """
    Returns the edit distance between strings x and y: the fewest
    single-character insertions, deletions, and substitutions needed to
    turn one into the other.
    """
    previous = list(range(len(y) + 1))
    for i in range(1, len(x) + 1):
        current = [i] + [0] * len(y)
        for j in range(1, len(y) + 1):
            cost = 0 if x[i - 1] == y[j - 1] else 1
            current[j] = min(previous[j - 1] + cost,
                             previous[j] + 1,
                             current[j - 1] + 1)
        previous = current
    return previous[len(y)]


def similarity(distance, answerLength):
    """
    How similar (0 to 100) two texts are, given their edit distance and
    the length of the expected one.
    """
    if answerLength == 0:
        return 100 if distance == 0 else 0
    percent = 100 - gradebatch.roundHalfUp(100.0 * distance / answerLength)
    return max(0, min(100, percent))


def trimTrailingBlank(lines):
    """ Drops a single trailing line that is empty or all whitespace. """
    if lines and not lines[-1].strip():
        return lines[:-1]
    return list(lines)


def stripWhitespace(lines):
    """ Removes all whitespace within lines, then drops any empty lines. """
    stripped = [re.sub(r'\s+', '', line) for line in lines]
    return [line for line in stripped if line]


class OutputStrategy(Strategy):
    """
    Grades a program by comparing what it printed to an answer file.

    A submission passes if it printed exactly the lines of the answer file
    (ignoring one trailing blank line on either side).  If anything was
    printed to stderr, the result is E instead.

    If a similarity threshold or a maximum number of typos is set, a
    submission that doesn't match exactly can still pass if its output is
    close enough to the answer, as measured by the edit distance between
    the two texts.  The result then includes a second column: the distance
    (when using typos) or the similarity percentage.
    """

    def __init__(self, answerPath=None, similarityThreshold=None,
                 maxTypos=None, ignoreWhitespace=False):
        """
        answerPath is the file of expected output.  At most one of
        similarityThreshold (0-100) and maxTypos (0 or more) should be
        given; if both are, maxTypos wins.  If ignoreWhitespace, all
        whitespace and blank lines are ignored when comparing.
        """
        super().__init__()
        self.answerPath = answerPath
        self.similarityThreshold = gradebatch.IGNORE
        self.maxTypos = gradebatch.IGNORE
        self.ignoreWhitespace = ignoreWhitespace
        if similarityThreshold is not None:
            self.setSimilarityThreshold(similarityThreshold)
        if maxTypos is not None:
            self.setMaximumTypos(maxTypos)

    def setSimilarityThreshold(self, threshold):
        """ Passes outputs at least threshold% similar.  Clears maxTypos. """
        self.similarityThreshold = max(0, min(100, threshold))
        self.maxTypos = gradebatch.IGNORE

    def setMaximumTypos(self, count):
        """ Passes outputs within count edits.  Clears any threshold. """
        self.maxTypos = max(0, count)
        self.similarityThreshold = gradebatch.IGNORE

    def usingLevenshtein(self):
        return self.maxTypos != gradebatch.IGNORE or \
            self.similarityThreshold != gradebatch.IGNORE

    def columns(self):
        if self.maxTypos != gradebatch.IGNORE:
            return ('Test Result', 'Distance')
        elif self.similarityThreshold != gradebatch.IGNORE:
            return ('Test Result', 'Similarity')
        return ('Test Result',)

    def setup(self, config):
        """
        Makes sure the answer file exists and pins it as an absolute path,
        since submissions are run from other folders.
        """
        if not self.answerPath or not os.path.isfile(self.answerPath):
            raise GraderError('NO_ANSWER_FILE', self.answerPath)
        self.answerPath = os.path.abspath(self.answerPath)

    def afterExecute(self, runner, submission):
        outcome, distance = self.grade(runner.outputLog, runner.errorLog)
        self.logger.debug("%s: %s (%s)", submission.name, outcome, distance)
        self.record(submission, outcome, distance)

    def afterCompileError(self, runner, submission):
        self.record(submission, gradebatch.COMPILE_ERROR, gradebatch.IGNORE)

    def afterTimeoutError(self, runner, submission):
        self.record(submission, gradebatch.TIMEOUT, gradebatch.IGNORE)

    def record(self, submission, outcome, distance):
        submission.outcome = outcome
        submission.fields = [outcome]
        if self.usingLevenshtein():
            submission.fields.append(str(distance))

    def grade(self, outputLog, errorLog):
        """
        Returns the (outcome, distance) of the given logs.  The distance
        is the ignore value unless edit distance was used, in which case it
        is the raw distance (typos) or the similarity percentage.
        """
        for line in gradebatch.readLines(errorLog):
            if line.strip():
                return gradebatch.ERROR, gradebatch.IGNORE

        if not os.path.exists(outputLog):
            return gradebatch.FAIL, gradebatch.IGNORE

        lines = self.normalize(gradebatch.readLines(outputLog))
        answerLines = self.normalize(gradebatch.readLines(self.answerPath))

        matched = bool(lines) and bool(answerLines) and lines == answerLines
        if not self.usingLevenshtein():
            outcome = gradebatch.PASS if matched else gradebatch.FAIL
            return outcome, gradebatch.IGNORE

        output = '\n'.join(lines)
        answer = '\n'.join(answerLines)
        distance = 0 if matched else levenshtein(output, answer)
        if self.maxTypos != gradebatch.IGNORE:
            passed = matched or distance <= self.maxTypos
            score = distance
        else:
            score = similarity(distance, len(answer))
            passed = matched or score >= self.similarityThreshold
        return (gradebatch.PASS if passed else gradebatch.FAIL), score

    def normalize(self, lines):
        lines = trimTrailingBlank(lines)
        if self.ignoreWhitespace:
            lines = stripWhitespace(lines)
        return lines


##
## JUnit
##

def tally(results):
    """
    Counts the test progress line that JUnit 4's text runner prints as the
    second line of its output: a . as each test starts and an E (or other
    mark) for each failure.

    The number of tests is the number of dots, failures the number of
    other characters.  Returns (passed, failed, percent passed), with the
    percent truncated to an integer and 0 if there were no tests.
    """
    results = results.rstrip('\r\n')
    total = results.count('.')
    failed = len(results) - total
    passed = total - failed
    percent = int(passed * 100 / total) if total else 0
    return passed, failed, percent


class JUnitStrategy(Strategy):
    """
    Grades a submission by running a JUnit 4 test class against it.

    The entry point given to the grader should be the test class (usually
    provided in the tests folder).  The JUnit jars are added to the
    classpath, and the program executed is JUnitCore with the test class
    as its argument.  Results are #Pass, #Fail, and %Pass.
    """

    def __init__(self, jars=None, testSuffix='Test'):
        super().__init__()
        self.jars = tuple(jars) if jars else gradebatch.JUNIT_JARS
        self.testSuffix = testSuffix

    def columns(self):
        return ('#Pass', '#Fail', '%Pass')

    def configureRunner(self, runner):
        """ The test class needs the jars to compile, not just to run. """
        self.addJars(runner)

    def addJars(self, runner):
        for jar in self.jars:
            if runner.pathTo(jar) not in runner.classpath:
                runner.addLocalClasspath(jar)

    def beforeCompile(self, runner, submission):
        old = os.path.join(submission.studentDir, gradebatch.TEST_LOG)
        try:
            if os.path.exists(old):
                os.remove(old)
        except OSError:
            self.logger.exception("Could not delete %s", old)

    def beforeExecute(self, runner, submission):
        self.addJars(runner)
        runner.setEntryPoint(gradebatch.JUNIT_RUNNER + ' ' + runner.sourceName)

    def afterExecute(self, runner, submission):
        lines = gradebatch.readLines(runner.outputLog)
        results = lines[1] if len(lines) > 1 else ''
        passed, failed, percent = tally(results)
        self.logger.debug("%s: %d passed, %d failed", submission.name,
                          passed, failed)
        submission.outcome = gradebatch.PASS if failed == 0 and passed \
            else gradebatch.FAIL
        submission.fields = [str(passed), str(failed), str(percent)]

    def afterCompileError(self, runner, submission):
        self.fail(submission, gradebatch.COMPILE_ERROR)

    def afterTimeoutError(self, runner, submission):
        self.fail(submission, gradebatch.TIMEOUT)

    def fail(self, submission, outcome):
        submission.outcome = outcome
        submission.fields = [outcome, str(gradebatch.IGNORE),
                             str(gradebatch.IGNORE)]

    def sourceUnderTest(self, runner):
        """ The student's class: the test class without its Test suffix. """
        name = runner.sourceName
        if self.testSuffix and name.endswith(self.testSuffix) and \
                len(name) > len(self.testSuffix):
            name = name[:-len(self.testSuffix)]
        return runner.pathTo(name, gradebatch.SOURCE_EXT)


##
## Style checking
##

class StyleCheck(Strategy):
    """
    Adds a Style column (P or F) in front of the results of another
    strategy by running Checkstyle on the student's source before it is
    compiled.  Checkstyle's report is saved as style.log in the student's
    folder.  The column is ? if Checkstyle could not be run.

    Every hook is passed on to the wrapped strategy.
    """

    def __init__(self, inner, checkerJar=None, ruleset=None):
        super().__init__()
        self.inner = inner
        self.checkerJar = checkerJar if checkerJar \
            else gradebatch.STYLE_CHECKER_JAR
        self.ruleset = ruleset if ruleset else gradebatch.STYLE_RULESET

    def columns(self):
        return ('Style',) + tuple(self.inner.columns())

    def setup(self, config):
        self.inner.setup(config)

    def configureRunner(self, runner):
        self.inner.configureRunner(runner)

    def beforeCompile(self, runner, submission):
        self.inner.beforeCompile(runner, submission)
        submission.style = '?'
        submission.style = self.check(runner, submission)

    def beforeExecute(self, runner, submission):
        self.inner.beforeExecute(runner, submission)

    def afterExecute(self, runner, submission):
        self.inner.afterExecute(runner, submission)

    def afterCompileError(self, runner, submission):
        self.inner.afterCompileError(runner, submission)

    def afterTimeoutError(self, runner, submission):
        self.inner.afterTimeoutError(runner, submission)

    def afterEverything(self, runner, submission):
        self.inner.afterEverything(runner, submission)

    def cleanup(self):
        self.inner.cleanup()

    def sourceUnderTest(self, runner):
        return self.inner.sourceUnderTest(runner)

    def result(self, submission):
        return [submission.style or '?'] + self.inner.result(submission)

    def crashFields(self):
        return ['?'] + self.inner.crashFields()

    def check(self, runner, submission):
        """
        Runs Checkstyle on the source under test, writing its stdout to
        style.log in the work folder, and copies that log to the student's
        folder.  Returns P if the report is clean, F if not, or ? if there
        is no report.
        """
        styleLog = runner.pathTo(gradebatch.STYLE_LOG)
        runner.remove(styleLog)

        cmd = [runner.java, '-jar', self.locate(runner, self.checkerJar),
               '-c', self.locate(runner, self.ruleset),
               self.sourceUnderTest(runner)]
        self.logger.debug("Checking style: %s", ' '.join(cmd))
        try:
            with open(styleLog, 'wb') as log:
                checker = subprocess.Popen(cmd,
                                           stdin=subprocess.DEVNULL,
                                           stdout=log,
                                           stderr=subprocess.DEVNULL,
                                           cwd=runner.workDir)
                checker.communicate()
        except OSError:
            self.logger.exception("Couldn't run the style checker")
            return '?'

        report = ''.join(gradebatch.readLines(styleLog)).strip()
        if not report:
            self.logger.warning("Style checker gave no report for %s",
                                submission.name)
            style = '?'
        elif report == gradebatch.STYLE_SUCCESS:
            style = gradebatch.PASS
        else:
            style = gradebatch.FAIL

        dest = os.path.join(submission.studentDir, gradebatch.STYLE_LOG)
        if os.path.abspath(dest) != os.path.abspath(styleLog):
            try:
                if os.path.exists(dest):
                    os.remove(dest)
                shutil.copy(styleLog, dest)
            except OSError:
                self.logger.exception("Couldn't copy %s", styleLog)
        return style

    def locate(self, runner, filename):
        """
        filename in the work folder if it is there, else filename relative
        to the current directory, made absolute for the checker's cwd.
        """
        local = runner.pathTo(filename)
        return local if os.path.exists(local) else os.path.abspath(filename)
