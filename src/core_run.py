## core_run.py

"""
Compiles and runs a single Java program on behalf of the grading pipeline.

Contains the JavaRunner class.  A JavaRunner is bound to one work folder
and one entry point.  It compiles the entry point's source file with javac,
recording the compiler's complaints in compile.log, and then runs the
compiled program with java, copying the program's stdout into output.log
and its stderr into error.log.  A program that runs longer than its time
limit is killed and marked as timed out.

Created: 19 Oct 2026.
"""

import logging
import os
import shutil
import signal
import subprocess
import threading

import gradebatch

# a killed child's whole process group goes with it, so grandchildren
# can't keep the log pipes open
NEW_SESSION = os.name == 'posix'


class JavaRunner:
    """
    Compiles and then runs the program found in a work folder.

    Public instance variables (treat as read-only unless noted):
    * workDir - the folder (made absolute) the compiler and program see as
                their cwd
    * entryPoint - what follows the classpath when running java; may be
                   several space-separated tokens (see setEntryPoint)
    * sourceName - the original entry point: name of the compiled source
    * timeout - milliseconds the program may run; 0 for no limit
    * policy - security policy file handed to java, or None
    * classpath - extra classpath entries, after workDir, in order added
    * compileLog, outputLog, errorLog, timeoutLog - paths of the logs
    * lastCompileOk - whether the last compile() succeeded
    * timedOut - whether the last execute() was killed for running too long

    A runner is meant for a single submission.  It may execute more than
    once, but only one execution at a time.
    """

    def __init__(self, workDir, entryPoint, timeout=None, policy=None,
                 javac=None, java=None):
        self.workDir = os.path.abspath(workDir)
        self.entryPoint = entryPoint
        self.sourceName = entryPoint
        self.timeout = gradebatch.DEFAULT_TIMEOUT if timeout is None \
            else timeout
        self.policy = policy
        self.javac = javac if javac else gradebatch.JAVAC
        self.java = java if java else gradebatch.JAVA
        self.classpath = []

        self.compileLog = self.pathTo(gradebatch.COMPILE_LOG)
        self.outputLog = self.pathTo(gradebatch.OUTPUT_LOG)
        self.errorLog = self.pathTo(gradebatch.ERROR_LOG)
        self.timeoutLog = self.pathTo(gradebatch.TIMEOUT_LOG)

        self.lastCompileOk = False
        self.timedOut = False
        self.process = None
        self.worker = None
        self.logger = logging.getLogger('Grader.JavaRunner')

    ## ---Setup---

    def setEntryPoint(self, entryPoint):
        """
        Changes what the next execute() runs.  The string is split on
        whitespace and passed to java after the classpath, so a harness main
        class can be given first with the student's class as its argument.
        Does not change which file compile() compiles.
        """
        self.entryPoint = entryPoint

    def addClasspath(self, entry):
        """ Appends the given path, used as is, to the classpath. """
        self.classpath.append(entry)

    def addLocalClasspath(self, entry):
        """ Appends the given path, relative to workDir, to the classpath. """
        self.classpath.append(self.pathTo(entry))

    def getClasspath(self):
        """ Returns workDir and then all added entries as a single string. """
        return os.pathsep.join([self.workDir] + self.classpath)

    def pathTo(self, filename, ext=None):
        """ Returns workDir/filename, or workDir/filename.ext if given. """
        if ext:
            filename += '.' + ext
        return os.path.join(self.workDir, filename)

    def entryPointFile(self):
        """ The source file compiled by compile(). """
        return self.pathTo(self.sourceName, gradebatch.SOURCE_EXT)

    ## ---Compiling---

    def compile(self):
        """
        Compiles the entry point's source file.

        Deletes any old compile.log and compiled class first, then runs
        javac and records everything it writes to stderr in compile.log.
        Returns True (and sets lastCompileOk) only if javac exits with 0.
        """
        self.lastCompileOk = False
        self.remove(self.compileLog,
                    self.pathTo(self.sourceName, gradebatch.CLASS_EXT))

        cmd = [self.javac, '-cp', self.getClasspath(), self.entryPointFile()]
        self.logger.debug("Compiling: %s", ' '.join(cmd))
        try:
            with open(self.compileLog, 'wb') as log:
                try:
                    compiler = subprocess.Popen(cmd,
                                                stdin=subprocess.DEVNULL,
                                                stdout=subprocess.DEVNULL,
                                                stderr=log,
                                                cwd=self.workDir)
                except OSError as e:
                    self.logger.error("Couldn't spawn %s: %s", self.javac, e)
                    log.write(self.describe(self.javac, e))
                    return False
                compiler.wait()
        except OSError:
            self.logger.exception("Couldn't write %s", self.compileLog)
            return False

        self.lastCompileOk = compiler.returncode == 0
        self.logger.debug("%s compiled: %s (exit %d)", self.sourceName,
                          self.lastCompileOk, compiler.returncode)
        return self.lastCompileOk

    ## ---Running---

    def execute(self, blocking=True):
        """
        Runs the compiled program.

        If blocking, returns once the program has exited (or been killed)
        and output.log and error.log are complete.  Otherwise returns
        immediately; use isRunning(), waitFor(), and timedOut to follow the
        run from outside.
        """
        if self.isRunning():
            raise RuntimeError("JavaRunner is already executing")
        self.timedOut = False
        self.worker = threading.Thread(target=self.run,
                                       name='JavaRunner-' + self.sourceName,
                                       daemon=True)
        self.worker.start()
        if blocking:
            self.worker.join()

    def compileAndRun(self):
        """
        Compiles and, if that worked, starts the program without waiting
        for it.  Returns whether the compile succeeded.
        """
        if self.compile():
            self.execute(blocking=False)
            return True
        return False

    def isRunning(self):
        return self.worker is not None and self.worker.is_alive()

    def waitFor(self, timeout=None):
        """
        Waits for a non-blocking execute() to finish, or until timeout
        seconds pass.  Returns True if the execution is finished.
        """
        if self.worker is not None:
            self.worker.join(timeout)
        return not self.isRunning()

    def run(self):
        """
        Performs a single execution.  Do not call this directly; it is the
        body of the thread started by execute().

        1. Deletes output.log, error.log, and timeout.log
        2. Starts java with the classpath and entry point
        3. Copies the program's stdout to output.log & stderr to error.log
        4. Kills the program if it exceeds timeout + TIMEOUT_BUFFER millis
        """
        self.remove(self.outputLog, self.errorLog, self.timeoutLog)
        self.process = None

        cmd = [self.java]
        if self.policy:
            cmd.append('-Djava.security.policy=' + self.policy)
        cmd += ['-cp', self.getClasspath()] + self.entryPoint.split()
        self.logger.debug("Running: %s", ' '.join(cmd))

        timer = None
        try:
            with open(self.outputLog, 'wb') as out, \
                    open(self.errorLog, 'wb') as err:
                try:
                    self.process = subprocess.Popen(
                        cmd,
                        stdin=subprocess.DEVNULL,
                        stdout=subprocess.PIPE,
                        stderr=subprocess.PIPE,
                        cwd=self.workDir,
                        start_new_session=NEW_SESSION)
                except OSError as e:
                    self.logger.error("Couldn't spawn %s: %s", self.java, e)
                    err.write(self.describe(self.java, e))
                    return

                pumps = [
                    threading.Thread(target=self.pump,
                                     args=(self.process.stdout, out),
                                     daemon=True),
                    threading.Thread(target=self.pump,
                                     args=(self.process.stderr, err),
                                     daemon=True),
                ]
                for pump in pumps:
                    pump.start()

                if self.timeout > 0:
                    limit = self.timeout + gradebatch.TIMEOUT_BUFFER
                    timer = threading.Timer(limit / 1000, self.expire)
                    timer.daemon = True
                    timer.start()

                self.process.wait()
                if timer:
                    timer.cancel()
                for pump in pumps:
                    pump.join()
        except OSError:
            self.logger.exception("Couldn't write the logs in %s",
                                  self.workDir)
        finally:
            if timer:
                timer.cancel()
                timer.join()
            if self.process:
                for stream in (self.process.stdout, self.process.stderr):
                    if stream:
                        stream.close()
                if self.process.poll() is None:
                    self.kill(self.process)
                    self.process.wait()
                self.logger.debug("%s exited with %s%s", self.sourceName,
                                  self.process.returncode,
                                  " (timed out)" if self.timedOut else "")

    def pump(self, source, dest):
        """ Copies everything from the child's stream into a log file. """
        try:
            shutil.copyfileobj(source, dest)
        except (OSError, ValueError) as e:
            # killed mid-read; whatever arrived so far stays in the log
            self.logger.debug("Stream copy ended early: %s", e)

    def expire(self):
        """
        Called by the timer once the time limit is up.  Kills the program
        if it is still running, sets timedOut, and leaves a timeout.log.
        """
        proc = self.process
        if proc is None or proc.poll() is not None:
            return
        self.timedOut = True
        self.kill(proc)
        self.logger.debug("%s killed after %d ms", self.sourceName,
                          self.timeout)
        try:
            with open(self.timeoutLog, 'w') as log:
                log.write('Exceeded time limit (' + str(self.timeout) + ')')
        except OSError:
            self.logger.exception("Couldn't write %s", self.timeoutLog)

    def kill(self, proc):
        """ Forcibly ends proc and, where possible, its children. """
        try:
            if NEW_SESSION:
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except (ProcessLookupError, PermissionError):
            pass  # already gone

    ## ---Utility---

    def remove(self, *paths):
        """ Deletes each given file, if it exists. """
        for path in paths:
            try:
                if os.path.exists(path):
                    os.remove(path)
            except OSError:
                self.logger.exception("Couldn't delete %s", path)

    def describe(self, tool, error):
        """ A log line (as bytes) explaining why tool couldn't be run. """
        return ("Could not run " + tool + ": " + str(error) + "\n").encode()

    def __repr__(self):
        return ('JavaRunner(' + repr(self.workDir) + ', ' +
                repr(self.entryPoint) + ')')
