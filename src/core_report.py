## core_report.py

"""
Prints grading results as comma-separated lines.

Created: 19 Oct 2026.
"""

import sys

import gradebatch


class ResultSink:
    """
    Writes one header line and then one line per graded submission,
    each as fields joined by gradebatch.FIELD_SEP, to stdout (or the given
    file).  The header is only ever printed once.
    """

    def __init__(self, file=None):
        self.file = file
        self.headerPrinted = False

    def printHeader(self, columns):
        if self.headerPrinted:
            return
        self.emit(columns)
        self.headerPrinted = True

    def printRow(self, name, fields):
        self.emit([name] + list(fields))

    def emit(self, fields):
        out = self.file if self.file is not None else sys.stdout
        print(gradebatch.FIELD_SEP.join(str(f) for f in fields), file=out,
              flush=True)
