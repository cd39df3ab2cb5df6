import pathlib
import sys
import tempfile
import unittest
from unittest import mock

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sweepscope.config import AppPaths, SweepConfig, config_from_mapping, load_config, save_config  # noqa: E402


class SweepConfigTest(unittest.TestCase):
    def test_defaults(self):
        cfg = config_from_mapping(None)
        self.assertEqual(cfg.alpha, 0.3)
        self.assertEqual(cfg.median_window, 5)
        self.assertEqual(cfg.outlier_k, 2.0)
        self.assertEqual(cfg.history_high_water, 1000)
        self.assertEqual(cfg.history_low_water, 800)
        self.assertEqual(cfg.replay_base_interval_ms, 30.0)

    def test_sections_are_flattened(self):
        payload = {
            "filter": {"alpha": 0.5, "median_window": 7},
            "history": {"history_high_water": 300, "history_low_water": 200},
            "replay": {"replay_speed": 2.5},
            "tick_hz": 40,
            "unknown_key": "ignored",
        }
        cfg = config_from_mapping(payload)
        self.assertEqual(cfg.alpha, 0.5)
        self.assertEqual(cfg.median_window, 7)
        self.assertEqual(cfg.history_high_water, 300)
        self.assertEqual(cfg.history_low_water, 200)
        self.assertEqual(cfg.replay_speed, 2.5)
        self.assertEqual(cfg.tick_hz, 40.0)

    def test_out_of_range_values_are_clamped(self):
        cfg = config_from_mapping(
            {
                "alpha": 3.0,
                "median_window": 1,
                "outlier_k": 50,
                "min_distance_cm": 300,
                "max_distance_cm": 100,
                "history_high_water": 10,
                "history_low_water": 50,
                "replay_speed": 0.0,
                "tick_hz": 5,
            }
        )
        self.assertEqual(cfg.alpha, 0.9)
        self.assertEqual(cfg.median_window, 3)
        self.assertEqual(cfg.outlier_k, 5.0)
        self.assertEqual(cfg.max_distance_cm, 300.0)
        self.assertEqual(cfg.history_low_water, 10)
        self.assertEqual(cfg.replay_speed, 0.1)
        self.assertEqual(cfg.tick_hz, 30.0)
        self.assertEqual(cfg.tick_interval_ms(), 33)

    def test_missing_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = load_config(pathlib.Path(tmpdir) / "missing.yaml")
        self.assertEqual(cfg, SweepConfig())
        self.assertEqual(load_config(None), SweepConfig())

    def test_save_then_load(self):
        original = SweepConfig(alpha=0.6, median_window=9, replay_speed=3.0).sanitized()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "cfg" / "sweepscope.yaml"
            save_config(path, original)
            loaded = load_config(path)
        self.assertEqual(loaded, original)

    def test_non_mapping_file_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "bad.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_app_paths_honour_environment(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with mock.patch.dict("os.environ", {"SWEEPSCOPE_DATA_ROOT": tmpdir}):
                paths = AppPaths()
                paths.ensure()
                self.assertEqual(paths.recordings, pathlib.Path(tmpdir) / "recordings")
                self.assertTrue(paths.recordings.is_dir())


if __name__ == "__main__":
    unittest.main()
