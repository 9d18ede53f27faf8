import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock
import tempfile
import os

from gpsavg.analysis import analyze
from gpsavg.config import GpsavgConfig
from gpsavg.geometry import Position
from gpsavg.nmea import read_positions
from gpsavg.visualization import (
    DISCARDED_COLOR,
    RETAINED_COLOR,
    create_fix_map,
)

FIXTURES = Path(__file__).parent / "fixtures"


class TestCreateFixMapLayers(unittest.TestCase):

    def setUp(self):
        self.summary = analyze(read_positions(str(FIXTURES / "sample.nmea")))
        self.config = GpsavgConfig()

    @patch('gpsavg.visualization.folium.LayerControl')
    @patch('gpsavg.visualization.folium.TileLayer')
    @patch('gpsavg.visualization.folium.Map')
    @patch('gpsavg.visualization.FixLegend')
    @patch('gpsavg.visualization.folium.Circle')
    @patch('gpsavg.visualization.folium.CircleMarker')
    @patch('gpsavg.visualization.folium.Marker')
    def test_create_fix_map_adds_layers_and_markers(
        self,
        mock_folium_marker,
        mock_folium_circle_marker,
        mock_folium_circle,
        mock_fix_legend,
        mock_folium_map,
        mock_folium_tilelayer,
        mock_folium_layercontrol,
    ):
        mock_map_instance = MagicMock(name="map_instance")
        mock_folium_map.return_value = mock_map_instance

        create_fix_map(self.summary, "test_fix_map.html", self.config)

        # Two base layers plus a layer control
        self.assertEqual(mock_folium_tilelayer.call_count, 2)
        mock_folium_layercontrol.return_value.add_to.assert_called_once_with(
            mock_map_instance
        )

        # One circle marker per fix, outliers drawn in the discarded color
        self.assertEqual(mock_folium_circle_marker.call_count, 21)
        colors = [c.kwargs["color"] for c in mock_folium_circle_marker.call_args_list]
        self.assertEqual(colors.count(DISCARDED_COLOR), 1)
        self.assertEqual(colors.count(RETAINED_COLOR), 20)

        # Mean marker and 1-sigma circle centred on the filtered mean
        mean = self.summary.stats.mean
        mock_folium_marker.assert_called_once()
        self.assertEqual(
            mock_folium_marker.call_args[0][0], [mean.latitude, mean.longitude]
        )
        self.assertEqual(
            mock_folium_circle.call_args[0][0], [mean.latitude, mean.longitude]
        )
        self.assertGreater(mock_folium_circle.call_args.kwargs["radius"], 0)

        mock_fix_legend.assert_called_once_with(self.summary)
        mock_map_instance.add_child.assert_called_once_with(
            mock_fix_legend.return_value
        )
        mock_map_instance.fit_bounds.assert_called_once()
        mock_map_instance.save.assert_called_once_with("test_fix_map.html")

    def test_empty_summary_is_rejected(self):
        empty = self.summary._replace(positions=[], retained=[])
        with self.assertRaises(ValueError):
            create_fix_map(empty, "unused.html", self.config)


class TestCreateFixMapOutput(unittest.TestCase):

    def test_map_is_saved_as_html(self):
        positions = [
            Position(48.1173 + i * 1e-6, 11.5167 - i * 1e-6, 545.0 + i * 0.1)
            for i in range(15)
        ]
        summary = analyze(positions)

        with tempfile.TemporaryDirectory() as tmp_dir:
            output = os.path.join(tmp_dir, "fixes map.html")
            create_fix_map(summary, output, GpsavgConfig())

            with open(output, encoding="utf-8") as f:
                html = f.read()

        self.assertIn("Retained fixes (15)", html)
        self.assertIn("fix-legend", html)


if __name__ == "__main__":
    unittest.main()
