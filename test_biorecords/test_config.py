"""
Tests for config module functions.
"""

import os
import unittest
from unittest.mock import patch
from tempfile import TemporaryDirectory
from pathlib import Path
import biorecords
from biorecords import config
from .test_common import TestBase


class TestConfig(TestBase):

    def setUp(self):
        self.config_root = Path(config.__file__).parent / "data"
        self.tmpdir = TemporaryDirectory()
        self.paths = []
        for idx, body in enumerate([
                "loglevel: null\nformats:\n  gaf: ['.gaf']\n  sam: ['.sam']\n",
                "loglevel: DEBUG\nformats:\n  gaf: ['.gaf', '.graf']\n"]):
            path = Path(self.tmpdir.name) / ("config%d.yml" % idx)
            path.write_text(body)
            self.paths.append(path)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_path_for_config(self):
        """path_for_config should give the absolute path of the packaged config."""
        path = config.path_for_config()
        self.assertTrue(path.is_absolute())
        self.assertEqual(path.relative_to(self.config_root), Path("config.yml"))
        self.assertTrue(path.exists())

    def test_path_for_config_no_suffix(self):
        """path_for_config takes no arguments."""
        with self.assertRaises(TypeError):
            config.path_for_config("nonexistent")

    def test_layer_configs(self):
        """layer_configs should combine the data from a list of config paths.

        The later entries take priority over the earlier ones.  Dicts are
        updated recursively, not replaced outright like dict.update does."""
        config_obs = config.layer_configs(self.paths)
        self.assertEqual(config_obs["loglevel"], "DEBUG")
        self.assertEqual(config_obs["formats"]["gaf"], [".gaf", ".graf"])
        self.assertEqual(config_obs["formats"]["sam"], [".sam"])
        config_obs = config.layer_configs(self.paths[::-1])
        self.assertIsNone(config_obs["loglevel"])
        self.assertEqual(config.layer_configs([]), {})
        # Missing entries and files are skipped.
        config_obs = config.layer_configs(
            [None] + self.paths + ["", Path(self.tmpdir.name) / "missing.yml"])
        self.assertEqual(config_obs["loglevel"], "DEBUG")

    def test_update_tree(self):
        """update_tree should combine dictionaries deeply."""
        tree_old = {"something": {"level2": {"attr_a": 1, "attr_b": 2}, "shallow": True}}
        tree_new = {"something": {"level2": {"attr_b": 3}}, "other": 4}
        tree_exp = {
            "something": {"level2": {"attr_a": 1, "attr_b": 3}, "shallow": True},
            "other": 4}
        config.update_tree(tree_old, tree_new)
        self.assertEqual(tree_old, tree_exp)

    def test_default_paths(self):
        """The environment variable names the highest-priority file."""
        with patch.dict(os.environ, {config.ENV_CONFIG: str(self.paths[1])}):
            paths = config.default_paths()
        self.assertEqual(
            paths,
            [config.path_for_config(), config.SYSTEM_CONFIG, str(self.paths[1])])
        with patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(config.default_paths()[-1])

    def test_package_config(self):
        """The packaged defaults should be loaded at import."""
        self.assertIn("formats", biorecords.CONFIG)
        self.assertIn(".gff3", biorecords.CONFIG["formats"]["gff3"])
        self.assertIn("warn_after", biorecords.CONFIG["collect"])


if __name__ == '__main__':
    unittest.main()
