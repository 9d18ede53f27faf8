#!/usr/bin/env python3
"""
Fix visualization using folium maps.
"""

import logging
import math
import folium
from folium.template import Template

from .analysis import AnalysisSummary
from .config import GpsavgConfig
from .outliers import outlier_axes

logger = logging.getLogger(__name__)

RETAINED_COLOR = "#2E86AB"
DISCARDED_COLOR = "#D23C4C"
SIGMA_COLOR = "#69498F"


class FixLegend(folium.MacroElement):
    """Custom legend for fix visualization with dynamic counts."""

    def __init__(self, summary: AnalysisSummary):
        super().__init__()
        self.retained_count = len(summary.retained)
        self.discarded_count = summary.discarded_count

        # Use folium's template string approach
        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="fix-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 210px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
            box-sizing: border-box;
        ">
            <b>Legend</b><br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #2E86AB; font-size: 18px;">&#9679;</span>
                Retained fixes ({{ this.retained_count }})
            </div>
            {% if this.discarded_count > 0 %}
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #D23C4C; font-size: 18px;">&#9679;</span>
                Discarded fixes ({{ this.discarded_count }})
            </div>
            {% endif %}
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #69498F; font-size: 18px;">&#9711;</span>
                1&sigma; horizontal
            </div>
        </div>
        {% endmacro %}
        """
        )


def create_fix_map(
    summary: AnalysisSummary,
    output_filename: str,
    config: GpsavgConfig,
) -> None:
    """
    Create an interactive map of the fixes, the filtered mean and its spread, save as HTML.

    Args:
        summary: Result of analyze()
        output_filename: Path where HTML map file should be saved
        config: Settings (outlier cutoff used to label discarded fixes)

    Raises:
        ValueError: If the summary holds no positions
    """
    if not summary.positions:
        raise ValueError("Cannot create map without positions")

    mean = summary.stats.mean
    logger.debug(f"Creating map centered at ({mean.latitude:.6f}, {mean.longitude:.6f})")

    fix_map = folium.Map(location=[mean.latitude, mean.longitude], tiles=None)

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(fix_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(fix_map)

    folium.LayerControl().add_to(fix_map)

    for i, pos in enumerate(summary.positions):
        violated = (
            outlier_axes(pos, summary.raw_stats, config.outlier_sigma)
            if summary.discarded_count
            else []
        )
        color = DISCARDED_COLOR if violated else RETAINED_COLOR
        popup = (
            f"<b>Fix {i + 1}</b><br>{pos.latitude:.7f}, {pos.longitude:.7f}<br>"
            f"{pos.altitude:.1f} m"
        )
        if violated:
            popup += "<br>Outlier in: " + ", ".join(str(axis) for axis in violated)

        folium.CircleMarker(
            [pos.latitude, pos.longitude],
            radius=3,
            color=color,
            fill=True,
            fill_opacity=0.7,
            popup=folium.Popup(popup, max_width=300),
        ).add_to(fix_map)

    east, north, _ = summary.stddev_enu
    folium.Circle(
        [mean.latitude, mean.longitude],
        radius=math.hypot(east, north),
        color=SIGMA_COLOR,
        weight=2,
        fill=False,
        popup=f"1 sigma: ~({north:.2f}m N, {east:.2f}m E)",
    ).add_to(fix_map)

    folium.Marker(
        [mean.latitude, mean.longitude],
        popup=(
            f"<b>Average</b><br>{mean.latitude:.7f}, {mean.longitude:.7f}<br>"
            f"{mean.altitude:.1f} m"
        ),
        icon=folium.Icon(color="green", icon="screenshot"),
    ).add_to(fix_map)

    fix_map.add_child(FixLegend(summary))

    latitudes = [pos.latitude for pos in summary.positions]
    longitudes = [pos.longitude for pos in summary.positions]
    fix_map.fit_bounds(
        [[min(latitudes), min(longitudes)], [max(latitudes), max(longitudes)]]
    )

    fix_map.save(output_filename)

    logger.debug(
        f"Map saved to {output_filename} with {len(summary.retained)}/{len(summary.positions)} fixes retained"
    )
