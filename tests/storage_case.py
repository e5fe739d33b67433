import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_helper.storage import db  # noqa: E402


class TempStorageTestCase(unittest.TestCase):
    """Points the storage layer at a throwaway SQLite file for each test."""

    def setUp(self):
        super().setUp()
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self._tmp_dir.name) / "career_helper.db"
        self._db_patch = patch.object(db, "_get_db_path", return_value=self.db_path)
        self._db_patch.start()
        db.init_db()

    def tearDown(self):
        self._db_patch.stop()
        self._tmp_dir.cleanup()
        super().tearDown()
