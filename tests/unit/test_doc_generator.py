import tempfile
import unittest

from src.utils.config_loader import AppConfig, DomainSettings
from src.utils.doc_generator import generate_config_docs


class DocGeneratorTestCase(unittest.TestCase):
    def test_generate_config_docs(self) -> None:
        config = AppConfig(domain=DomainSettings(x_range=(-2.0, 2.0), y_range=(0.0, 1.0), points=42))

        with tempfile.TemporaryDirectory() as tmpdir:
            output = generate_config_docs(config, f"{tmpdir}/docs/CONFIGURATION.md")
            with open(output, "r", encoding="utf-8") as handle:
                content = handle.read()

        self.assertIn("- points: 42", content)
        self.assertIn("- x_range: [-2.0, 2.0]", content)
        self.assertIn("### grad_y", content)
        self.assertIn("#ffcb80 -> #ff9500 -> #ff7b00", content)


if __name__ == "__main__":
    unittest.main()
