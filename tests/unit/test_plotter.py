import os
import tempfile
import unittest

from src.pipeline.surface import SamplingSettings, compute_surface_bundle
from src.tools.plotter import build_figure, build_layout, build_surface_traces, export_figure_html, plot_surface_png
from src.utils.config_loader import AppConfig


class PlotterTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        settings = SamplingSettings(x_range=(-1.0, 1.0), y_range=(-1.0, 1.0), points=5)
        cls.bundle = compute_surface_bundle("x^2 + y", settings=settings)

    def test_traces_follow_surface_schema(self) -> None:
        traces = build_surface_traces(self.bundle)

        self.assertEqual(len(traces), 3)
        self.assertTrue(all(trace["type"] == "surface" for trace in traces))
        self.assertTrue(all(trace["showlegend"] for trace in traces))
        self.assertEqual(traces[0]["name"], "f(x,y) = x ** 2 + y")
        self.assertEqual(traces[0]["colorscale"][1], [0.5, "#ff9500"])
        self.assertTrue(traces[0]["showscale"])
        self.assertEqual(traces[1]["opacity"], 0.7)
        self.assertFalse(traces[1]["showscale"])
        self.assertEqual(traces[2]["colorscale"][-1], [1.0, "#e60052"])
        self.assertIs(traces[1]["z"], self.bundle.grad_x.z)

    def test_layout_titles_and_legend(self) -> None:
        layout = build_layout(revision="x")
        self.assertEqual(layout["title"]["text"], "3D Surface Plot with Gradient Visualization")
        self.assertEqual(layout["scene"]["zaxis"]["title"]["text"], "f")
        self.assertEqual(layout["legend"]["font"]["size"], 15)
        self.assertEqual(layout["datarevision"], "x")
        self.assertNotIn("datarevision", build_layout())

    def test_build_figure_has_three_surfaces(self) -> None:
        figure = build_figure(self.bundle, AppConfig())
        self.assertEqual(len(figure.data), 3)
        self.assertEqual([trace.type for trace in figure.data], ["surface"] * 3)
        self.assertEqual(figure.data[2].name, "∂f/∂y (gradient w.r.t y)")

    def test_exports_write_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            html = export_figure_html(build_figure(self.bundle), os.path.join(tmpdir, "out", "surface.html"))
            png = plot_surface_png(self.bundle, os.path.join(tmpdir, "surface.png"))

            self.assertTrue(html["ok"], html)
            self.assertTrue(png["ok"], png)
            self.assertTrue(os.path.exists(html["result"]))
            self.assertGreater(os.path.getsize(png["result"]), 0)


if __name__ == "__main__":
    unittest.main()
