## core_stage.py

"""
Prepares and cleans up the folders that student code is compiled and run in.

Contains the Stager class, which creates a folder of temp folders for a
grading run, fills one temp folder per student with the instructor's test
files and then the student's own files, and copies the resulting logs back
into the student's folder afterwards.

Created: 19 Oct 2026.
"""

import logging
import os
import shutil
import time

import gradebatch
from core_type import GraderError


def millis():
    """ The current time in milliseconds since the epoch. """
    return int(time.time() * 1000)


class Stager:
    """
    Manages the work folders of a single grading run.

    If useTempDir is False, each student's own folder is the work folder:
    nothing is created, copied, or deleted.
    """

    def __init__(self, testsRoot=None, useTempDir=True, parent='.'):
        """
        testsRoot is the folder of instructor files to copy into each work
        folder first, if any.  parent is where the folder of temp folders
        is created (by default, the current directory).
        """
        self.testsRoot = testsRoot
        self.useTempDir = useTempDir
        self.parent = parent
        self.tempRoot = None
        self.logger = logging.getLogger('Grader.Stager')

    def open(self):
        """
        Creates the folder of temp folders (tmp<millis>).  Does nothing when
        not using temp folders.  Raises GraderError('UNPREPABLE_TEMP_DIR')
        if the folder can't be made.
        """
        if not self.useTempDir:
            return None
        path = os.path.join(self.parent,
                            gradebatch.TEMP_ROOT_PREFIX + str(millis()))
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise GraderError('UNPREPABLE_TEMP_DIR', str(e))
        self.tempRoot = path
        self.logger.debug("Created %s", path)
        return path

    def close(self):
        """ Deletes the folder of temp folders and everything left in it. """
        if self.tempRoot:
            self.removeTree(self.tempRoot)
            self.tempRoot = None

    def stage(self, studentDir):
        """
        Returns the work folder to use for the given student folder.

        When using temp folders, creates temp-<student>-<millis> inside the
        folder of temp folders and copies into it every file (not
        subfolder) of testsRoot and then every file of studentDir.  A
        student file replaces any test file of the same name.  Also deletes
        any logs left in studentDir by an earlier run.

        Raises GraderError('UNPREPABLE_WORKDIR') if the work folder can't be
        created or filled.
        """
        if not self.useTempDir:
            return studentDir
        if not self.tempRoot:
            self.open()

        student = os.path.basename(os.path.normpath(studentDir))
        workDir = os.path.join(self.tempRoot, gradebatch.TEMP_DIR_PREFIX +
                               student + '-' + str(millis()))
        try:
            os.mkdir(workDir)
        except OSError as e:
            raise GraderError('UNPREPABLE_WORKDIR', str(e))

        try:
            for log in gradebatch.STALE_LOGS:
                stale = os.path.join(studentDir, log)
                if os.path.exists(stale):
                    os.remove(stale)

            if self.testsRoot and os.path.isdir(self.testsRoot):
                copied = self.copyFiles(self.testsRoot, workDir)
                self.logger.debug("Copied %d test file(s) for %s",
                                  copied, student)
            copied = self.copyFiles(studentDir, workDir)
            self.logger.debug("Copied %d student file(s) for %s",
                              copied, student)
        except OSError as e:
            self.removeTree(workDir)
            raise GraderError('UNPREPABLE_WORKDIR', str(e))
        return workDir

    def copyFiles(self, sourceDir, destDir):
        """
        Copies the files directly inside sourceDir into destDir, replacing
        any file already there with the same name.  Returns how many files
        were copied.
        """
        count = 0
        for name in sorted(os.listdir(sourceDir)):
            path = os.path.join(sourceDir, name)
            if not os.path.isfile(path):
                continue
            dest = os.path.join(destDir, name)
            if os.path.exists(dest):
                os.remove(dest)
            shutil.copy(path, dest)
            count += 1
        return count

    def publish(self, runner, studentDir):
        """
        Copies the logs worth keeping from the runner's work folder into
        studentDir:
        * compiled: output.log, error.log (if not empty), timeout.log
        * did not compile: compile.log

        Does nothing when the work folder is the student folder.  Raises
        GraderError('COULD_NOT_STORE_RESULTS') if a copy fails.
        """
        if os.path.abspath(runner.workDir) == os.path.abspath(studentDir):
            return
        if runner.lastCompileOk:
            keep = [runner.outputLog, runner.timeoutLog]
            if os.path.exists(runner.errorLog) and \
                    os.path.getsize(runner.errorLog) > 0:
                keep.append(runner.errorLog)
        else:
            keep = [runner.compileLog]

        for log in keep:
            if not os.path.exists(log):
                continue
            try:
                shutil.copy(log, os.path.join(studentDir,
                                              os.path.basename(log)))
            except OSError as e:
                raise GraderError('COULD_NOT_STORE_RESULTS', str(e))

    def discard(self, workDir, studentDir):
        """ Deletes workDir, unless it is actually the student's folder. """
        if os.path.abspath(workDir) != os.path.abspath(studentDir):
            self.removeTree(workDir)

    def removeTree(self, path):
        """ Recursively deletes path, logging rather than raising. """
        try:
            shutil.rmtree(path)
            self.logger.debug("Deleted %s", path)
        except FileNotFoundError:
            pass
        except OSError:
            self.logger.exception("Could not delete %s", path)
