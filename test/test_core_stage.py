"""
Tests core_stage.py.
"""
import os
import unittest

import basetest

from core_run import JavaRunner
from core_stage import Stager
from core_type import GraderError


class StageTest(basetest.GraderTestCase):

    def setUp(self):
        super().setUp()
        self.tests = self.path('tests')
        self.student = self.path('students', 'Jane_Doe')
        self.write(os.path.join(self.tests, 'Hello.java'), 'instructor')
        self.write(os.path.join(self.tests, 'Helper.java'), 'helper')
        self.write(os.path.join(self.tests, 'data', 'nested.txt'), 'deep')
        self.write(os.path.join(self.student, 'Hello.java'), 'student')
        self.stager = Stager(self.tests, parent=self.tmp)

    def tearDown(self):
        self.stager.close()
        super().tearDown()

    def testTempFolderNames(self):
        """ tmp<millis> holding temp-<student>-<millis>. """
        root = self.stager.open()
        self.assertRegex(os.path.basename(root), r'^tmp\d+$')
        work = self.stager.stage(self.student)
        self.assertEqual(os.path.dirname(work), root)
        self.assertRegex(os.path.basename(work), r'^temp-Jane_Doe-\d+$')

    def testStudentFilesWin(self):
        """ Same name -> the student's bytes; others come from tests. """
        self.stager.open()
        work = self.stager.stage(self.student)
        self.assertEqual(self.read(os.path.join(work, 'Hello.java')),
                         'student')
        self.assertEqual(self.read(os.path.join(work, 'Helper.java')),
                         'helper')

    def testOnlyTopLevelFilesCopied(self):
        self.stager.open()
        work = self.stager.stage(self.student)
        self.assertFalse(os.path.exists(os.path.join(work, 'data')))

    def testStaleLogsDeleted(self):
        """ Logs from an earlier run leave the student folder first. """
        for log in ('compile.log', 'output.log', 'error.log'):
            self.write(os.path.join(self.student, log), 'old')
        self.stager.open()
        work = self.stager.stage(self.student)
        for log in ('compile.log', 'output.log', 'error.log'):
            self.assertFalse(os.path.exists(os.path.join(self.student, log)))
            self.assertFalse(os.path.exists(os.path.join(work, log)))

    def testNoTestsFolder(self):
        stager = Stager(None, parent=self.tmp)
        stager.open()
        try:
            work = stager.stage(self.student)
            self.assertEqual(os.listdir(work), ['Hello.java'])
        finally:
            stager.close()

    def testInPlace(self):
        """ Without temp folders, the student folder is the work folder. """
        stager = Stager(self.tests, useTempDir=False, parent=self.tmp)
        self.assertIsNone(stager.open())
        self.assertEqual(stager.stage(self.student), self.student)
        self.assertFalse(os.path.exists(os.path.join(self.student,
                                                     'Helper.java')))
        stager.discard(self.student, self.student)
        self.assertTrue(os.path.isdir(self.student))

    def testUnstageableStudent(self):
        self.stager.open()
        self.assertRaisesRegex(GraderError, 'UNPREPABLE_WORKDIR',
                               self.stager.stage, self.path('nobody'))

    def testUncreatableTempRoot(self):
        stager = Stager(self.tests, parent=os.path.join(self.tests,
                                                        'Hello.java'))
        self.assertRaisesRegex(GraderError, 'UNPREPABLE_TEMP_DIR',
                               stager.open)

    def testDiscardAndClose(self):
        """ Nothing named tmp* or temp-* is left behind. """
        root = self.stager.open()
        work = self.stager.stage(self.student)
        self.stager.discard(work, self.student)
        self.assertFalse(os.path.exists(work))
        self.stager.close()
        self.assertFalse(os.path.exists(root))
        self.assertEqual([f for f in os.listdir(self.tmp)
                          if f.startswith('tmp')], [])


class PublishTest(basetest.GraderTestCase):

    def setUp(self):
        super().setUp()
        self.student = self.path('students', 'jane')
        self.write(os.path.join(self.student, 'Hello.java'), 'code')
        self.stager = Stager(None, parent=self.tmp)
        self.stager.open()
        self.work = self.stager.stage(self.student)
        self.runner = JavaRunner(self.work, 'Hello')

    def tearDown(self):
        self.stager.close()
        super().tearDown()

    def studentHas(self, log):
        return os.path.exists(os.path.join(self.student, log))

    def testCompiledLogs(self):
        """ Compiled -> output.log and a non-empty error.log come back. """
        self.runner.lastCompileOk = True
        self.write(self.runner.compileLog, '')
        self.write(self.runner.outputLog, 'out')
        self.write(self.runner.errorLog, 'oops')
        self.stager.publish(self.runner, self.student)
        self.assertEqual(self.read(os.path.join(self.student, 'output.log')),
                         'out')
        self.assertTrue(self.studentHas('error.log'))
        self.assertFalse(self.studentHas('compile.log'))

    def testEmptyErrorLogStays(self):
        self.runner.lastCompileOk = True
        self.write(self.runner.outputLog, 'out')
        self.write(self.runner.errorLog, '')
        self.stager.publish(self.runner, self.student)
        self.assertTrue(self.studentHas('output.log'))
        self.assertFalse(self.studentHas('error.log'))

    def testTimeoutLog(self):
        self.runner.lastCompileOk = True
        self.write(self.runner.outputLog, '')
        self.write(self.runner.timeoutLog, 'Exceeded time limit (1000)')
        self.stager.publish(self.runner, self.student)
        self.assertTrue(self.studentHas('timeout.log'))

    def testCompileErrorLogs(self):
        """ Didn't compile -> only compile.log comes back. """
        self.runner.lastCompileOk = False
        self.write(self.runner.compileLog, 'error')
        self.write(self.runner.outputLog, 'old out')
        self.stager.publish(self.runner, self.student)
        self.assertTrue(self.studentHas('compile.log'))
        self.assertFalse(self.studentHas('output.log'))


if __name__ == "__main__":
    unittest.main()
