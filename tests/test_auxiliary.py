import pytest

from dmote import auxiliary, matrix
from dmote.place import wall_corner_position

THICK_HOME = {
    'parameters': {'wall': {'thickness': 1}},
    'clusters': {'main': {'columns': {'0': {'rows': {'0': {
        'parameters': {'wall': {'thickness': 3}}}}}}}},
}

LEDS = {'leds': {'include': True, 'amount': 2, 'housing_size': 3,
                 'emitter_diameter': 2, 'interval': 6}}


def test_led_channel_follows_wall_thickness_per_key(single_cluster):
    getopt = single_cluster((0, 1), by_key=THICK_HOME, case=LEDS)
    points = auxiliary.west_wall_west_points(getopt)
    rows = getopt('derived', 'by_cluster', 'main', 'row_indices_by_column')[0]
    assert len(points) == 2 * len(rows)
    for index, row in enumerate(rows):
        thickness = 3 if row == 0 else 1
        for offset, corner in enumerate((matrix.WSW, matrix.WNW)):
            x, y, _ = wall_corner_position(getopt, 'main', (0, row), corner)
            assert points[2 * index + offset] == pytest.approx([x + thickness, y])


def test_led_channel_is_as_deep_as_promised(single_cluster):
    getopt = single_cluster((0, 1), case=LEDS)
    west = auxiliary.west_wall_west_points(getopt)
    east = auxiliary.west_wall_east_points(getopt)
    for (wx, wy), (ex, ey) in zip(west, east):
        assert ex - wx == pytest.approx(auxiliary.CHANNEL_DEPTH)
        assert ey == wy


def test_led_holes_are_spaced_by_interval(single_cluster):
    getopt = single_cluster((0, 1), case=LEDS)
    first = auxiliary.led_hole_position(getopt, 0)
    second = auxiliary.led_hole_position(getopt, 1)
    assert second[1] - first[1] == pytest.approx(6)
    assert first[2] == pytest.approx(5 + 3 / 2)


def test_led_holes_in_the_keyboard(single_cluster, node_names):
    getopt = single_cluster((0, 1), case=LEDS)
    names = node_names(auxiliary.led_holes(getopt))
    assert names.count('cylinder') == 2
    assert 'linear_extrude' in names
