"""
Core helper code for all gradebatch unit-tests.

Includes a superclass for all gradebatch unit tests, which gives each test
its own scratch folder and can write fake javac and java programs into it.
The fakes are tiny shell scripts, so the tests need a POSIX shell but no
JDK:

* fake javac copies X.java to X.class, unless the source contains the text
  SYNTAX ERROR, in which case it complains on stderr and exits with 1.
* fake java skips its options and the classpath, then runs X.class as a
  shell script.  Given org.junit.runner.JUnitCore X, it runs X.class the
  same way.  Given -jar Y, it runs Y as a shell script with the remaining
  arguments.  Its full argument list is saved in java.args in its cwd.

So, in these tests, "Java source" is really shell script.

If run as a program, runs the full suite of all unit tests.
"""

import io
import os
import os.path
import shutil
import stat
import sys
import tempfile
import unittest

# the src files to be tested
SRC = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(
    __file__)), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

POSIX = os.name == 'posix'
needsShell = unittest.skipUnless(POSIX, "fake toolchain needs a POSIX shell")

FAKE_JAVAC = """\
#!/bin/sh
# fake javac: -cp <classpath> <source>
src="$3"
if [ ! -f "$src" ]; then
    echo "error: file not found: $src" >&2
    exit 2
fi
if grep -q 'SYNTAX ERROR' "$src"; then
    echo "$src:1: error: ';' expected" >&2
    exit 1
fi
cp "$src" "${src%.java}.class"
"""

FAKE_JAVA = """\
#!/bin/sh
# fake java: [-D...] -cp <classpath> <class> [args...]
echo "$@" > java.args
while [ $# -gt 0 ]; do
    case "$1" in
        -cp) shift 2 ;;
        -jar) jar="$2"; shift 2; exec sh "$jar" "$@" ;;
        -*) shift ;;
        *) break ;;
    esac
done
if [ "$1" = "org.junit.runner.JUnitCore" ]; then
    shift
fi
main="$1"
shift
exec sh "$main.class" "$@"
"""

# stands in for the Checkstyle jar: -c <ruleset> <source>
FAKE_CHECKSTYLE = """\
echo "Starting audit..."
if grep -q 'BAD STYLE' "$3"; then
    echo "[WARN] $3:1: Line has bad style. [BadStyle]"
fi
echo "Audit done."
"""

INFINITE_LOOP = "while :; do :; done\n"


class GraderTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp(prefix='gradebatch-test-')

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def path(self, *parts):
        """ A path within this test's scratch folder. """
        return os.path.join(self.tmp, *parts)

    def write(self, path, content=''):
        """ Writes content to path, creating its folder as needed. """
        folder = os.path.dirname(path)
        if folder and not os.path.isdir(folder):
            os.makedirs(folder)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def read(self, path):
        with open(path, 'r') as f:
            return f.read()

    def makeTools(self):
        """ Writes the fake javac and java; returns their paths. """
        javac = self.write(self.path('bin', 'javac'), FAKE_JAVAC)
        java = self.write(self.path('bin', 'java'), FAKE_JAVA)
        for tool in (javac, java):
            mode = os.stat(tool).st_mode
            os.chmod(tool, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return javac, java

    def program(self, folder, name, script):
        """ Writes a "Java" source file whose program is the shell script. """
        return self.write(os.path.join(folder, name + '.java'), script)

    def capture(self, fn, *args, **kwargs):
        """
        Calls fn with the given arguments, redirecting its stdout output.
        Returns (fn's return value, the output as a string).
        """
        original = sys.stdout
        sys.stdout = io.StringIO()
        try:
            value = fn(*args, **kwargs)
            output = sys.stdout.getvalue()
        finally:
            sys.stdout.close()
            sys.stdout = original
        return value, output


if __name__ == "__main__":
    unittest.main(argv=['', 'discover'])
