"""Compass arithmetic on the key matrix and the edge walker.

Matrix coordinates are (column, row) tuples. Columns grow eastward, rows grow
northward, away from the typist. Directions are the strings 'north', 'east',
'south' and 'west'. A corner is a pair of directions: the side of a key mount
first, then the half of that side.
"""
import logging
from collections import namedtuple
from math import pi

from .errors import LandscapeError

log = logging.getLogger(__name__)

# Clockwise.
COMPASS_TO_GRID = {
    'north': (0, 1),
    'east': (1, 0),
    'south': (0, -1),
    'west': (-1, 0),
}
DIRECTIONS = tuple(COMPASS_TO_GRID)

COMPASS_RADIANS = {
    'north': 0,
    'east': pi / 2,
    'south': pi,
    'west': -pi / 2,
}

NNE = ('north', 'east')
ENE = ('east', 'north')
SSE = ('south', 'east')
ESE = ('east', 'south')
SSW = ('south', 'west')
WSW = ('west', 'south')
NNW = ('north', 'west')
WNW = ('west', 'north')

CORNERS = {
    'NNE': NNE, 'ENE': ENE, 'SSE': SSE, 'ESE': ESE,
    'SSW': SSW, 'WSW': WSW, 'NNW': NNW, 'WNW': WNW,
}

OUTER = 'outer'
INNER = 'inner'

BoundaryEdge = namedtuple('BoundaryEdge', ['coordinates', 'direction', 'corner'])

START = ((0, 0), 'north')


def compass_delta(axis, *directions):
    """Find a delta on one axis (0 for x, 1 for y) for any of the directions.

    The first direction that moves along the axis wins.
    """
    for direction in directions:
        value = COMPASS_TO_GRID[direction][axis]
        if value:
            return value
    return 0


def compass_dx(*directions):
    return compass_delta(0, *directions)


def compass_dy(*directions):
    return compass_delta(1, *directions)


def left(direction):
    return DIRECTIONS[(DIRECTIONS.index(direction) - 1) % len(DIRECTIONS)]


def right(direction):
    return DIRECTIONS[(DIRECTIONS.index(direction) + 1) % len(DIRECTIONS)]


def walk(coordinates, *directions):
    """The position an orthogonal walk from coordinates would lead to."""
    column, row = coordinates
    for direction in directions:
        dx, dy = COMPASS_TO_GRID[direction]
        column, row = column + dx, row + dy
    return (column, row)


def coordinate_pairs(columns, rows, selector=None):
    pairs = [(column, row) for column in columns for row in rows]
    if selector is None:
        return pairs
    return [pair for pair in pairs if selector(pair)]


def cube_vertex_offset(directions, dimensions, bottom=False):
    """An offset from the middle of a cuboid to one of its vertices."""
    x, y, z = dimensions
    return [compass_dx(*directions) * x,
            compass_dy(*directions) * y,
            -z if bottom else z]


def _step(occluded, coordinates, direction):
    """Classify one position and find the next.

    The landscape is sampled to the left, ahead-left and ahead of the walker.
    Anything to the left means the walker is not on the edge.
    """
    turn = left(direction)
    neighbours = (walk(coordinates, turn),
                  walk(coordinates, direction, turn),
                  walk(coordinates, direction))
    landscape = tuple(bool(occluded(neighbour)) for neighbour in neighbours)
    if landscape == (False, False, False):
        return OUTER, (coordinates, right(direction))
    if landscape == (False, False, True):
        return None, (neighbours[2], direction)
    if landscape == (False, True, True):
        return INNER, (neighbours[1], turn)
    raise LandscapeError(coordinates, direction, landscape)


def trace_edge(occluded, start=START):
    """Walk the edge of the occluded area clockwise, forever.

    Yield a BoundaryEdge for each position before it is left behind. The
    walk keeps the edge on its left hand, so the wall at each position
    faces left of the direction of travel.
    """
    coordinates, direction = start
    coordinates = tuple(coordinates)
    if not occluded(coordinates):
        raise ValueError(
            'Edge walk must start on an occupied position, not {}'.format(
                coordinates))
    while True:
        corner, (next_coordinates, next_direction) = _step(
            occluded, coordinates, direction)
        yield BoundaryEdge(coordinates, direction, corner)
        coordinates, direction = next_coordinates, next_direction


def trace_between(occluded, start=None, stop=None):
    """One stretch of the edge, from start up to but excluding stop.

    By default, this is one full lap, starting and stopping at the home key
    facing north.
    """
    if start is None:
        start = START
    start = (tuple(start[0]), start[1])
    if stop is None:
        stop = start
    stop = (tuple(stop[0]), stop[1])
    edges = []
    for edge in trace_edge(occluded, start):
        state = (edge.coordinates, edge.direction)
        if edges and state == stop:
            break
        if edges and state == start:
            raise ValueError('Stop {} is not on the edge walked from {}'.format(
                stop, start))
        edges.append(edge)
    log.debug('trace_between(): %d edges from %s', len(edges), start)
    return edges
