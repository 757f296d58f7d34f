import os
import tempfile
import unittest

import yaml

from src.utils.config_loader import AppConfig, ConfigError, load_app_config


def _write(tmpdir: str, payload) -> str:  # noqa: ANN001
    path = os.path.join(tmpdir, "app_config.yml")
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, allow_unicode=True)
    return path


class ConfigLoaderTestCase(unittest.TestCase):
    def test_repository_config_matches_defaults(self) -> None:
        config = load_app_config("configs/app_config.yml")
        defaults = AppConfig()

        self.assertEqual(config.domain, defaults.domain)
        self.assertEqual(config.domain.points, 100)
        self.assertEqual(config.domain.x_range, (-5.0, 5.0))
        self.assertEqual(config.expression.default, "x ** 2 + y ** 2")
        self.assertEqual(config.surfaces, defaults.surfaces)
        self.assertEqual(config.layout, defaults.layout)
        self.assertEqual(config.logging.get("level"), "INFO")

    def test_partial_file_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_app_config(_write(tmpdir, {"domain": {"points": 20}, "surfaces": {"grad_x": {"opacity": 0.4}}}))

        self.assertEqual(config.domain.points, 20)
        self.assertEqual(config.domain.y_range, (-5.0, 5.0))
        self.assertEqual(config.surfaces["grad_x"].opacity, 0.4)
        self.assertEqual(config.surfaces["grad_x"].colorscale[0], (0.0, "#80d6ff"))
        self.assertEqual(config.ui.copy_reset_seconds, 2.0)

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigError):
            load_app_config("configs/does_not_exist.yml")

    def test_invalid_values_raise(self) -> None:
        cases = [
            ["not", "a", "mapping"],
            {"domain": {"points": 1}},
            {"domain": {"x_range": [5, -5]}},
            {"domain": {"points": "many"}},
            {"ui": {"copy_reset_seconds": 0}},
            {"surfaces": {"grad_z": {}}},
            {"surfaces": {"value": {"colorscale": ["#fff"]}}},
        ]
        with tempfile.TemporaryDirectory() as tmpdir:
            for payload in cases:
                with self.subTest(payload=payload):
                    with self.assertRaises(ConfigError):
                        load_app_config(_write(tmpdir, payload))


if __name__ == "__main__":
    unittest.main()
