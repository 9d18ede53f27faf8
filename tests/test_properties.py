import pytest
from hypothesis import given, strategies as st, assume

from gpsavg.geometry import Axis, Position
from gpsavg.histogram import build_histogram
from gpsavg.nmea import nmea_checksum, parse_line
from gpsavg.outliers import filter_outliers
from gpsavg.stats import compute_stats

# Strategies for plausible fixes
valid_lat = st.floats(-89.0, 89.0)
valid_lon = st.floats(-179.0, 179.0)
valid_alt = st.floats(-500.0, 9000.0)
valid_position = st.builds(
    Position, latitude=valid_lat, longitude=valid_lon, altitude=valid_alt
)
position_sets = st.lists(valid_position, min_size=2, max_size=60)


def gga_sentence(lat_deg, lat_min, ns, lon_deg, lon_min, ew, alt):
    body = (
        f"GPGGA,123519,{lat_deg:02d}{lat_min:07.4f},{ns},"
        f"{lon_deg:03d}{lon_min:07.4f},{ew},1,08,0.9,{alt:.1f},M,46.9,M,,"
    )
    return f"${body}*{nmea_checksum(body):02X}"


class TestParserProperties:

    @given(
        st.integers(0, 89),
        st.floats(0.0, 59.9999),
        st.sampled_from("NS"),
        st.integers(0, 179),
        st.floats(0.0, 59.9999),
        st.sampled_from("EW"),
        st.floats(-500.0, 9000.0),
    )
    def test_degrees_plus_minutes_with_sign(
        self, lat_deg, lat_min, ns, lon_deg, lon_min, ew, alt
    ):
        """Decoded values are degrees + minutes/60, negated for S and W."""
        line = gga_sentence(lat_deg, lat_min, ns, lon_deg, lon_min, ew, alt)
        pos = parse_line(line, verify_checksum=True)

        lat_sign = 1 if ns == "N" else -1
        lon_sign = 1 if ew == "E" else -1
        assert pos.latitude == pytest.approx(
            lat_sign * (lat_deg + round(lat_min, 4) / 60), abs=1e-9
        )
        assert pos.longitude == pytest.approx(
            lon_sign * (lon_deg + round(lon_min, 4) / 60), abs=1e-9
        )
        assert pos.altitude == pytest.approx(round(alt, 1), abs=1e-9)

    @given(st.text())
    def test_lines_without_dollar_are_ignored(self, line):
        assume(not line.startswith("$"))
        assert parse_line(line) is None

    @given(st.sampled_from("ABCDFGHIJKLMOPQRTUVXYZ"))
    def test_bad_hemisphere_always_fails(self, letter):
        line = gga_sentence(48, 7.038, letter, 11, 31.0, "E", 545.4)
        with pytest.raises(ValueError):
            parse_line(line)


class TestStatisticsProperties:

    @given(valid_position, st.integers(1, 50))
    def test_identical_positions(self, pos, count):
        stats = compute_stats([pos] * count)
        assert stats.mean == pos
        assert stats.stddev == Position(0.0, 0.0, 0.0)

    @given(position_sets)
    def test_stddev_is_non_negative(self, positions):
        stats = compute_stats(positions)
        assert all(value >= 0 for value in stats.stddev)


class TestFilterProperties:

    @given(position_sets, st.floats(0.5, 5.0))
    def test_filter_returns_an_ordered_subset(self, positions, k):
        retained = filter_outliers(positions, compute_stats(positions), k)

        remaining = iter(positions)
        assert all(any(pos == other for other in remaining) for pos in retained)

    @given(position_sets)
    def test_wider_band_keeps_at_least_as_much(self, positions):
        stats = compute_stats(positions)
        assert len(filter_outliers(positions, stats, 2.0)) <= len(
            filter_outliers(positions, stats, 4.0)
        )


class TestHistogramProperties:

    @given(position_sets, st.sampled_from(list(Axis)))
    def test_counts_match_values_above_first_boundary(self, positions, axis):
        stats = compute_stats(positions)
        histogram = build_histogram(positions, stats, axis.value_of)

        first = histogram.bins[0].low
        expected = sum(1 for pos in positions if axis.value_of(pos) >= first)
        assert histogram.total() == expected
        assert histogram.total() + histogram.underflow == len(positions)
