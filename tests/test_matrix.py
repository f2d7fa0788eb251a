import pytest

from dmote import matrix
from dmote.errors import LandscapeError


def occupancy(*positions):
    occupied = set(positions)
    return lambda coordinates: tuple(coordinates) in occupied


def corner_count(edges, corner):
    return sum(1 for edge in edges if edge.corner == corner)


@pytest.mark.parametrize('direction', matrix.DIRECTIONS)
def test_turns_are_inverse(direction):
    assert matrix.left(matrix.right(direction)) == direction
    assert matrix.right(matrix.left(direction)) == direction


def test_four_turns_come_full_circle():
    direction = 'north'
    for _ in range(4):
        direction = matrix.right(direction)
    assert direction == 'north'


@pytest.mark.parametrize('first', matrix.DIRECTIONS)
@pytest.mark.parametrize('second', matrix.DIRECTIONS)
def test_walk_composes(first, second):
    start = (2, -3)
    assert matrix.walk(matrix.walk(start, first), second) == \
        matrix.walk(start, first, second)


def test_walk_without_directions_stays():
    assert matrix.walk((4, 1)) == (4, 1)


def test_compass_delta_first_axis_match_wins():
    assert matrix.compass_dx('north', 'east') == 1
    assert matrix.compass_dy('north', 'east') == 1
    assert matrix.compass_dx('north', 'north') == 0
    assert matrix.compass_dy('west', 'south') == -1


def test_cube_vertex_offset():
    assert matrix.cube_vertex_offset(matrix.WSW, [1, 2, 3]) == [-1, -2, 3]
    assert matrix.cube_vertex_offset(matrix.NNE, [1, 2, 3], bottom=True) == [1, 2, -3]


def test_single_key_is_a_quadrilateral():
    edges = matrix.trace_between(occupancy((0, 0)))
    assert [edge.direction for edge in edges] == ['north', 'east', 'south', 'west']
    assert corner_count(edges, matrix.OUTER) == 4
    assert corner_count(edges, matrix.INNER) == 0


def test_l_shape_has_one_inner_corner():
    edges = matrix.trace_between(occupancy((0, 0), (0, 1), (1, 0)))
    inner = [edge for edge in edges if edge.corner == matrix.INNER]
    assert len(inner) == 1
    # The concave junction between the tall and the short column.
    assert inner[0].coordinates == (0, 1)
    assert inner[0].direction == 'south'
    assert corner_count(edges, matrix.OUTER) == 5


def test_t_shape_has_two_inner_corners():
    edges = matrix.trace_between(occupancy((0, -1), (0, 0), (0, 1), (1, 0)))
    assert corner_count(edges, matrix.INNER) == 2
    assert corner_count(edges, matrix.OUTER) == 6


@pytest.mark.parametrize('positions', [
    [(0, 0), (1, 0), (2, 0)],
    [(0, 0), (0, 1), (1, 1), (2, 1), (2, 0)],
    [(x, y) for x in range(4) for y in range(-2, 3) if (x, y) != (3, 2)],
    [(column, row)
     for column, (low, high) in enumerate([(-2, 1), (-2, 1), (-2, 2), (-1, 1), (-1, 0)])
     for row in range(low, high + 1)],
])
def test_one_lap_has_four_more_outer_corners(positions):
    edges = matrix.trace_between(occupancy(*positions))
    assert corner_count(edges, matrix.OUTER) - corner_count(edges, matrix.INNER) == 4
    states = [(edge.coordinates, edge.direction) for edge in edges]
    assert len(states) == len(set(states))
    assert all(edge.coordinates in positions for edge in edges)


def test_trace_edge_continues_past_start():
    walker = matrix.trace_edge(occupancy((0, 0)))
    lap = [next(walker) for _ in range(5)]
    assert lap[4] == lap[0]


def test_trace_between_stops_short():
    edges = matrix.trace_between(occupancy((0, 0), (1, 0)),
                                 stop=((1, 0), 'south'))
    assert [(edge.coordinates, edge.direction) for edge in edges] == [
        ((0, 0), 'north'), ((0, 0), 'east'), ((1, 0), 'east')]


def test_checkered_landscape_is_refused():
    with pytest.raises(LandscapeError) as info:
        matrix.trace_between(occupancy((0, 0), (1, 1)))
    assert info.value.coordinates == (0, 0)
    assert info.value.direction == 'east'


def test_start_must_be_occupied():
    with pytest.raises(ValueError):
        next(matrix.trace_edge(occupancy((1, 1))))


def test_trace_between_refuses_a_stop_off_the_edge():
    with pytest.raises(ValueError):
        matrix.trace_between(occupancy((0, 0)), stop=((5, 5), 'north'))
