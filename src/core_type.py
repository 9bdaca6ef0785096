## core_type.py

"""
The definition of core classes used by gradebatch.

Created: 19 Oct 2026.
"""

import os.path

# can't import gradebatch at module level due to circular dependency;
# imported in methods


class GraderError(Exception):
    """
    Represents some sort of error status code, usually in the 400s or 500s.
    See gradebatch.STATUS for more.
    """

    def __init__(self, key, details=None):
        """
        The first argument given should be a legal STATUS key for the
        specific error.  Additional details may also be given as an
        extra argument.

        If key is not valid, it may be treated as a special error message
        instead.

        Arguments may later be retrieved either as Exception args or
        instance variables.
        """
        Exception.__init__(self, key, details)
        self.key = key
        self.details = details


class GraderConfig:
    """
    The settings shared by every submission graded in a single run.

    * studentsRoot - folder containing one folder per student
    * testsRoot - folder of instructor files copied under each student's
                  files before compiling (may be None)
    * entryPoint - name (no extension) of the source file with main()
    * timeout - milliseconds a program may run; 0 disables the limit
    * policy - security policy file passed on to the Java runtime, or None
    * useTempDir - if True, compile and run each student in a fresh temp
                   folder; if False, work directly in the student's folder
    * javac, java - the compiler and runtime to invoke

    Treat as read-only once grading has started.
    """
    def __init__(self, studentsRoot, testsRoot, entryPoint, timeout=None,
                 policy=None, useTempDir=True, javac=None, java=None):
        import gradebatch
        self.studentsRoot = studentsRoot
        self.testsRoot = testsRoot
        self.entryPoint = entryPoint
        self.timeout = gradebatch.DEFAULT_TIMEOUT if timeout is None \
            else timeout
        self.policy = policy
        self.useTempDir = useTempDir
        self.javac = javac if javac else gradebatch.JAVAC
        self.java = java if java else gradebatch.JAVA

    def validate(self):
        """
        Raises a GraderError if this configuration cannot possibly be used
        to grade anything.
        """
        if not os.path.isdir(self.studentsRoot):
            raise GraderError('NO_STUDENTS_ROOT', self.studentsRoot)
        if self.testsRoot and not os.path.exists(self.testsRoot):
            raise GraderError('NO_TESTS_ROOT', self.testsRoot)
        if not isinstance(self.timeout, int) or self.timeout < 0:
            raise GraderError('INVALID_TIMEOUT', str(self.timeout))

    def __repr__(self):
        return ('GraderConfig(' + repr(self.studentsRoot) + ', ' +
                repr(self.testsRoot) + ', ' + repr(self.entryPoint) +
                ', timeout=' + str(self.timeout) + ')')


class Submission:
    """
    Everything known about one student's submission while it is graded.

    * studentDir - the student's original folder
    * workDir - where compiling and running happens; the same as studentDir
                unless staging into a temp folder
    * name - the student name shown in results (see gradebatch.studentName)
    * runner - the JavaRunner bound to workDir, once built
    * outcome - one of the gradebatch outcome codes, once known
    * fields - the result columns (after the student name) as strings;
               set by a Strategy
    * style - the style check outcome, if a StyleCheck ran
    * crashed - True if a grading hook raised an exception
    """
    def __init__(self, studentDir, workDir=None):
        import gradebatch
        self.studentDir = studentDir
        self.workDir = workDir if workDir else studentDir
        self.name = gradebatch.studentName(studentDir)
        self.runner = None
        self.outcome = None
        self.fields = None
        self.style = None
        self.crashed = False

    def __repr__(self):
        return 'Submission(' + repr(self.studentDir) + ')'
