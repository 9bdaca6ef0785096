## core_grade.py

"""
Defines the grading pipeline.

Contains the GradePipe class, which grades every student folder found in
a folder of student folders, one at a time.  For each student it stages a
work folder, builds a JavaRunner, and calls the hooks of its Strategy
around compiling and running the student's code.  Results are printed by a
ResultSink as each student finishes.

Created: 19 Oct 2026.
"""

import logging
import os

import gradebatch
from core_report import ResultSink
from core_run import JavaRunner
from core_stage import Stager
from core_type import GraderError, Submission


class GradePipe:
    """
    Grades all the submissions described by a GraderConfig using the given
    Strategy.

    The phases for each student folder are always, in order:

        stage -> beforeCompile -> compile -> beforeExecute -> execute ->
        afterExecute | afterCompileError | afterTimeoutError ->
        afterEverything -> print result -> copy logs back -> unstage

    where execute and its following hook happen only if the compile
    succeeded.  A crash in any hook is logged and ends that student's
    grading early, but afterEverything is still called and a result line
    is still printed.
    """

    def __init__(self, config, strategy, sink=None, logLevel=None,
                 tempParent='.'):
        """
        If logLevel is given (one of the standard level names from Python's
        logging module), run() sends all Grader logging to stderr at that
        level for the length of the run.  tempParent is where the folder of
        temp folders is created.
        """
        self.config = config
        self.strategy = strategy
        self.sink = sink if sink else ResultSink()
        self.logLevel = logLevel
        self.stager = Stager(config.testsRoot if config.testsRoot and
                             os.path.isdir(config.testsRoot) else None,
                             useTempDir=config.useTempDir,
                             parent=tempParent)
        self.graded = 0
        self.crashed = 0
        self.logger = logging.getLogger('Grader.GradePipe')

    def run(self):
        """
        Grades every student folder in config.studentsRoot.

        Raises a GraderError, before printing anything, if the config is
        unusable, the strategy can't be set up, or the folder of temp
        folders can't be made.  Otherwise prints the header and one line
        per student and returns the number of students graded.
        """
        handler = self.startLogging() if self.logLevel else None
        try:
            self.config.validate()
            self.strategy.setup(self.config)
            self.stager.open()
            try:
                self.sink.printHeader(self.strategy.header())
                for studentDir in self.getStudentDirs():
                    self.gradeStudent(studentDir)
                self.logger.info("%d submission(s) graded, %d with crashes.",
                                 self.graded, self.crashed)
            finally:
                self.stager.close()
                self.strategy.cleanup()
        finally:
            if handler:
                logging.getLogger('Grader').removeHandler(handler)
        return self.graded

    def startLogging(self):
        """ Sends all Grader logging to stderr; returns the handler. """
        topLogger = logging.getLogger('Grader')
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt='{name}-{levelname}: {message}',
                                      style='{')
        handler.setFormatter(formatter)
        topLogger.addHandler(handler)
        topLogger.setLevel(self.logLevel)
        return handler

    def getStudentDirs(self):
        """
        Returns the folders directly inside studentsRoot, sorted by name.
        Plain files are skipped, as is the folder of temp folders itself.
        """
        root = self.config.studentsRoot
        tempRoot = os.path.abspath(self.stager.tempRoot) \
            if self.stager.tempRoot else None
        dirs = []
        for name in sorted(os.listdir(root)):
            path = os.path.join(root, name)
            if os.path.isdir(path) and os.path.abspath(path) != tempRoot:
                dirs.append(path)
        return dirs

    def gradeStudent(self, studentDir):
        """
        Grades a single student folder and prints its result line.
        Returns the Submission.
        """
        submission = Submission(studentDir)
        self.logger.debug("%s - started grading...", submission.name)
        try:
            submission.workDir = self.stager.stage(studentDir)
        except GraderError as err:
            self.logger.error("%s: %r", submission.name, err)
            submission.crashed = True
            self.finish(submission)
            return submission

        try:
            runner = self.compileAndRun(submission)
            try:
                self.stager.publish(runner, studentDir)
            except GraderError as err:
                self.logger.error("%s: %r", submission.name, err)
        finally:
            self.stager.discard(submission.workDir, studentDir)
        return submission

    def compileAndRun(self, submission):
        """
        Builds a JavaRunner in the submission's work folder and walks it
        through every phase, calling the strategy's hooks along the way.
        Prints the result line once done.  Returns the runner.
        """
        config = self.config
        runner = JavaRunner(submission.workDir, config.entryPoint,
                            timeout=config.timeout, policy=config.policy,
                            javac=config.javac, java=config.java)
        submission.runner = runner
        strategy = self.strategy

        try:
            strategy.configureRunner(runner)
            strategy.beforeCompile(runner, submission)
            if runner.compile():
                strategy.beforeExecute(runner, submission)
                runner.execute(blocking=True)
                if runner.timedOut:
                    strategy.afterTimeoutError(runner, submission)
                else:
                    strategy.afterExecute(runner, submission)
            else:
                strategy.afterCompileError(runner, submission)
        except GraderError as err:
            self.logger.error("%s: %r", submission.name, err)
            submission.crashed = True
        except Exception:
            self.logger.exception("%s: %s", submission.name,
                                  gradebatch.STATUS['GRADER_CRASH'][1])
            submission.crashed = True

        try:
            strategy.afterEverything(runner, submission)
        except Exception:
            self.logger.exception("%s: afterEverything crashed!",
                                  submission.name)
            submission.crashed = True

        self.finish(submission)
        return runner

    def finish(self, submission):
        """ Prints the submission's result line. """
        fields = self.strategy.result(submission)
        self.sink.printRow(submission.name, fields)
        self.graded += 1
        if submission.crashed:
            self.crashed += 1
        self.logger.info("%s -> %s", submission.name,
                         gradebatch.FIELD_SEP.join(fields))
