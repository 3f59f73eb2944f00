"""Tests for edge cases and special scenarios.

This module contains tests for edge cases:
- Empty files
- Unreadable files and directories
- Deep nesting and multi-chunk files
"""
import os
import tempfile
import unittest
from pathlib import Path

from namedup import DuplicateScanner, Processor

from .test_utils import deny_listing, make_tree

running_as_root = hasattr(os, 'geteuid') and os.geteuid() == 0


class EdgeCaseTest(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self._tmpdir.name) / 'root'
        self.root.mkdir()

    def tearDown(self):
        for dirpath, dirnames, filenames in os.walk(self._tmpdir.name):
            for name in dirnames:
                os.chmod(os.path.join(dirpath, name), 0o700)
            for name in filenames:
                os.chmod(os.path.join(dirpath, name), 0o600)
        self._tmpdir.cleanup()

    def _scan(self):
        with Processor(2) as processor:
            return DuplicateScanner(processor).scan(self.root)

    def test_empty_files_with_same_name(self):
        make_tree(self.root, {'a/empty': b'', 'b/empty': b''})

        report = self._scan()

        self.assertEqual(1, len(report.groups))
        self.assertEqual(0, report.total_size)
        self.assertEqual(2, report.total_items)
        self.assertEqual(0, report.reclaimable_size)

    def test_deeply_nested(self):
        deep = Path(*[f'level{i}' for i in range(30)])
        make_tree(self.root, {str(deep / 'x.txt'): b'deep', 'x.txt': b'deep'})

        report = self._scan()

        self.assertEqual(1, len(report.groups))
        self.assertIn(self.root / deep / 'x.txt', report.groups[0].paths)

    def test_large_files_differing_in_last_byte(self):
        make_tree(self.root, {
            'a/big.bin': b'\xab' * 100000,
            'b/big.bin': b'\xab' * 100000,
            'c/big.bin': b'\xab' * 99999 + b'\xac',
        })

        report = self._scan()

        self.assertEqual(1, len(report.groups))
        self.assertEqual((self.root / 'a/big.bin', self.root / 'b/big.bin'), report.groups[0].paths)

    def test_three_copies(self):
        make_tree(self.root, {'a/x': b'abc', 'b/x': b'abc', 'c/x': b'abc'})

        report = self._scan()

        self.assertEqual(9, report.total_size)
        self.assertEqual(3, report.total_items)
        self.assertEqual(6, report.reclaimable_size)

    @unittest.skipIf(running_as_root, "root can read any file")
    def test_unreadable_files_do_not_match_each_other(self):
        make_tree(self.root, {
            'a/x.txt': b'one', 'b/x.txt': b'two',
            'c/y.txt': b'same', 'd/y.txt': b'same',
        })
        (self.root / 'a/x.txt').chmod(0)
        (self.root / 'b/x.txt').chmod(0)

        with self.assertLogs('namedup.commands.scan', level='WARNING'):
            report = self._scan()

        self.assertEqual(['y.txt'], [group.name for group in report.groups])
        self.assertEqual({self.root / 'a/x.txt', self.root / 'b/x.txt'}, {path for path, _ in report.skipped})

    @unittest.skipIf(running_as_root, "root ignores directory permissions")
    def test_unlistable_directory_does_not_abort_scan(self):
        make_tree(self.root, {
            'locked/x.txt': b'hidden', 'a/x.txt': b'hidden',
            'b/y.txt': b'seen', 'c/y.txt': b'seen',
        })
        (self.root / 'locked').chmod(0)

        with self.assertLogs('namedup.utils.walker', level='WARNING'):
            report = self._scan()

        self.assertEqual(['y.txt'], [group.name for group in report.groups])

    def test_denied_directory_does_not_abort_scan_for_any_user(self):
        make_tree(self.root, {
            'locked/x.txt': b'hidden', 'a/x.txt': b'hidden',
            'b/y.txt': b'seen', 'c/y.txt': b'seen',
        })

        with deny_listing(self.root / 'locked'):
            with self.assertLogs('namedup.utils.walker', level='WARNING') as logs:
                report = self._scan()

        self.assertEqual(['y.txt'], [group.name for group in report.groups])
        self.assertEqual((self.root / 'b/y.txt', self.root / 'c/y.txt'), report.groups[0].paths)
        self.assertTrue(any('locked' in message for message in logs.output))

    @unittest.skipUnless(hasattr(os, 'mkfifo'), "requires mkfifo")
    def test_special_files_are_not_recorded(self):
        make_tree(self.root, {'a/x': b'data'})
        (self.root / 'b').mkdir()
        os.mkfifo(self.root / 'b' / 'x')

        report = self._scan()

        self.assertFalse(report.has_duplicates())
        self.assertEqual((), report.skipped)


if __name__ == '__main__':
    unittest.main()
