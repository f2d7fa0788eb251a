"""Auxiliary features: an LED strip along the west wall of a key cluster."""
import logging

from numpy import pi

from . import matrix
from .place import rad2deg, wall_corner_position

log = logging.getLogger(__name__)

# Depth of the channel into the case from the inside of the wall.
CHANNEL_DEPTH = 10
CHANNEL_HEIGHT = 50
HOLE_LENGTH = 50


def _led_cluster(getopt):
    return getopt('case', 'leds', 'position', 'cluster')


def west_wall_west_points(getopt):
    cluster = _led_cluster(getopt)
    rows = getopt('derived', 'by_cluster', cluster, 'row_indices_by_column')[0]
    points = []
    for row in rows:
        thickness = getopt.most_specific(('wall', 'thickness'), cluster, (0, row))
        for corner in (matrix.WSW, matrix.WNW):
            x, y, _ = wall_corner_position(getopt, cluster, (0, row), corner)
            points.append([x + thickness, y])
    return points


def west_wall_east_points(getopt):
    return [[x + CHANNEL_DEPTH, y] for x, y in west_wall_west_points(getopt)]


def west_wall_led_channel(getopt):
    helpers = getopt.helpers
    outline = west_wall_west_points(getopt) + west_wall_east_points(getopt)[::-1]
    return helpers.extrude_poly(helpers.polygon(outline), height=CHANNEL_HEIGHT)


def led_hole_position(getopt, ordinal):
    cluster = _led_cluster(getopt)
    row = getopt('derived', 'by_cluster', cluster, 'row_indices_by_column')[0][0]
    x0, y0, _ = wall_corner_position(getopt, cluster, (0, row), matrix.WNW)
    h = 5 + getopt('case', 'leds', 'housing_size') / 2
    return [x0, y0 + getopt('case', 'leds', 'interval') * ordinal, h]


def led_emitter_channel(getopt, ordinal):
    helpers = getopt.helpers
    emitter = helpers.cylinder(getopt('case', 'leds', 'emitter_diameter') / 2,
                               HOLE_LENGTH)
    emitter = helpers.rotate(emitter, [0, rad2deg(pi / 2), 0])
    return helpers.translate(emitter, led_hole_position(getopt, ordinal))


def led_housing_channel(getopt, ordinal):
    h = getopt('case', 'leds', 'housing_size')
    return getopt.helpers.translate(getopt.helpers.box(HOLE_LENGTH, h, h),
                                    led_hole_position(getopt, ordinal))


def led_holes(getopt):
    log.info('led_holes()')
    helpers = getopt.helpers
    holes = range(getopt('case', 'leds', 'amount'))
    housings = helpers.union([led_housing_channel(getopt, i) for i in holes])
    emitters = helpers.union([led_emitter_channel(getopt, i) for i in holes])
    return helpers.union([
        helpers.intersect(west_wall_led_channel(getopt), housings),
        emitters])
