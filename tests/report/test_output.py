import unittest
from pathlib import Path

from namedup.errors import InvalidRootError
from namedup.report.duplicate_group import DuplicateGroup, DuplicateReport
from namedup.report.output import format_size

from ..test_utils import CollectingOutput


def make_report():
    return DuplicateReport(Path('/root'), (
        DuplicateGroup('x.txt', 'ab' * 32, (Path('/root/a/x.txt'), Path('/root/b/x.txt')), (5, 5)),
    ))


class FormatSizeTest(unittest.TestCase):
    def test_units(self):
        self.assertEqual("0 B", format_size(0))
        self.assertEqual("1023 B", format_size(1023))
        self.assertEqual("1.00 KB", format_size(1024))
        self.assertEqual("1.50 MB", format_size(1024 * 1024 * 3 // 2))
        self.assertEqual("2.00 GB", format_size(2 * 1024 ** 3))


class OutputTest(unittest.TestCase):
    def test_no_duplicates(self):
        output = CollectingOutput()
        output.describe_report(DuplicateReport(Path('/root')))

        self.assertEqual([["No duplicate files found."]], output.data)

    def test_invalid_root(self):
        output = CollectingOutput()
        output.describe_invalid_root(InvalidRootError('/missing'))

        self.assertEqual([["Root directory does not exist: /missing"]], output.data)

    def test_group_and_reclaimable(self):
        output = CollectingOutput()
        output.describe_report(make_report())

        self.assertEqual([
            "Duplicate files found for name: x.txt",
            " - /root/a/x.txt",
            " - /root/b/x.txt",
            "Reclaimable space: 5 bytes",
        ], output.lines)

    def test_verbose_shows_digest_and_sizes(self):
        output = CollectingOutput()
        output.verbosity = 1
        output.describe_report(make_report())

        self.assertIn("## sha256: " + 'ab' * 32, output.lines)
        self.assertIn(" - /root/a/x.txt (5 bytes)", output.lines)
        self.assertIn("## 2 duplicate files occupying 10 bytes", output.lines)

    def test_verbose_marks_vanished_file(self):
        report = DuplicateReport(Path('/root'), (
            DuplicateGroup('x.txt', 'ab' * 32, (Path('/root/a/x.txt'), Path('/root/b/x.txt')), (5, None)),
        ))
        output = CollectingOutput()
        output.verbosity = 1
        output.describe_report(report)

        self.assertIn(" - /root/b/x.txt (vanished)", output.lines)

    def test_human_readable_sizes(self):
        report = DuplicateReport(Path('/root'), (
            DuplicateGroup('x.bin', 'cd' * 32, (Path('/root/a/x.bin'), Path('/root/b/x.bin')), (2048, 2048)),
        ))
        output = CollectingOutput()
        output.use_bytes = False
        output.describe_report(report)

        self.assertEqual("Reclaimable space: 2.00 KB", output.lines[-1])


if __name__ == '__main__':
    unittest.main()
