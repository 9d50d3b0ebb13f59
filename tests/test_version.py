import importlib.metadata
import unittest

import linepick


class VersionTests(unittest.TestCase):
    def test_version_matches_metadata(self) -> None:
        meta_version = importlib.metadata.version("linepick")
        self.assertEqual(linepick.__version__, meta_version)


if __name__ == "__main__":
    unittest.main()
