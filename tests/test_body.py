import pytest

from dmote import body, matrix


def occupancy(*positions):
    occupied = set(positions)
    return lambda coordinates: tuple(coordinates) in occupied


def wall_extent(extent):
    return {'parameters': {'wall': {direction: {'extent': extent}
                                    for direction in matrix.DIRECTIONS}}}


# Column 0 has a key above and below home. Column 1 has only home.
TALL_AND_SHORT = occupancy((0, -1), (0, 0), (0, 1), (1, 0))


def test_no_column_web_beside_an_empty_position():
    sets = body.web_post_sets((0, 1), TALL_AND_SHORT)
    assert [web.kind for web in sets] == ['fill']
    assert sets[0].posts == [((0, 1), matrix.ENE)]


def test_full_web_at_a_junction():
    sets = body.web_post_sets((0, 0), TALL_AND_SHORT)
    assert [web.kind for web in sets] == ['column', 'row', 'fill']
    column, row, fill = sets
    assert column.posts == [((0, 0), matrix.ENE), ((1, 0), matrix.WNW),
                            ((0, 0), matrix.ESE), ((1, 0), matrix.WSW)]
    assert row.posts == [((0, 0), matrix.WNW), ((0, 1), matrix.WSW),
                         ((0, 0), matrix.ENE), ((0, 1), matrix.ESE)]
    # The northeast neighbor is empty, so its post is left out.
    assert fill.posts == [((0, 0), matrix.ENE), ((0, 1), matrix.ESE),
                          ((1, 0), matrix.WNW)]


def test_fill_reaches_from_an_empty_position():
    sets = body.web_post_sets((1, -1), TALL_AND_SHORT)
    assert [web.kind for web in sets] == ['fill']
    assert sets[0].posts == [((1, 0), matrix.ESE)]
    assert body.web_post_sets((1, 1), TALL_AND_SHORT) == []


def resolved(anchors):
    return [(coordinates, (direction, turning_fn(direction)))
            for coordinates, direction, turning_fn in anchors]


def test_wall_parts_by_corner():
    here = (0, 1)
    assert resolved(body.connecting_wall(
        matrix.BoundaryEdge(here, 'north', None))) == [
            (here, matrix.WNW), ((0, 2), matrix.WSW)]
    assert resolved(body.connecting_wall(
        matrix.BoundaryEdge(here, 'north', matrix.OUTER))) == [
            (here, matrix.WNW), (here, matrix.NNW)]
    assert resolved(body.connecting_wall(
        matrix.BoundaryEdge(here, 'south', matrix.INNER))) == [
            (here, matrix.ESE), ((1, 0), matrix.NNW)]


def test_straight_body_spans_one_side():
    assert resolved(body.wall_straight_body((2, 0), 'east')) == [
        ((2, 0), matrix.NNE), ((2, 0), matrix.NNW)]


@pytest.mark.parametrize('extent, upper, lower', [
    ('full', [0, 1, 2, 3, 4], [2, 3, 4]),
    (3, [0, 1, 2, 3], []),
    (1, [0, 1], []),
    (0, [], []),
    ('none', [], []),
])
def test_wall_segments_by_extent(single_cluster, extent, upper, lower):
    getopt = single_cluster((0, 0), by_key=wall_extent(extent))
    anchor = ((0, 0), 'north', matrix.right)
    assert body.wall_segments(getopt, 'main', True, anchor) == upper
    assert body.wall_segments(getopt, 'main', False, anchor) == lower


def test_each_anchor_honors_its_own_extent(single_cluster):
    by_key = {'clusters': {'main': {'columns': {1: {'parameters': {
        'wall': {'north': {'extent': 2}}}}}}}}
    getopt = single_cluster((0, 0), (0, 0), by_key=by_key)
    west, east = ((0, 0), 'north', matrix.right), ((1, 0), 'north', matrix.left)
    assert body.wall_segments(getopt, 'main', True, west) == [0, 1, 2, 3, 4]
    assert body.wall_segments(getopt, 'main', True, east) == [0, 1, 2]
    assert body.wall_segments(getopt, 'main', False, east) == []


def test_partial_wall_has_no_hem(single_cluster):
    getopt = single_cluster((0, 0), by_key=wall_extent(3))
    slab = body.wall_slab(getopt, 'main', body.wall_straight_body((0, 0), 'north'))
    assert slab.name == 'hull'
    assert len(slab.children) == 8


def test_full_wall_has_a_hem(single_cluster):
    getopt = single_cluster((0, 0))
    slab = body.wall_slab(getopt, 'main', body.wall_straight_body((0, 0), 'north'))
    assert slab.name == 'union'
    skirt, hem = slab.children
    assert len(skirt.children) == 10
    # Three segments per anchor, plus the shadow on the floor.
    assert len(hem.children) == 7


def test_single_key_is_walled_on_four_sides(single_cluster):
    getopt = single_cluster((0, 0))
    walls = body.cluster_wall(getopt, 'main')
    assert len(walls.children) == 8


def test_cluster_web_for_a_lone_key(single_cluster):
    getopt = single_cluster((0, 0))
    assert body.cluster_web(getopt, 'main') is not None


def test_mask_rises_for_a_bottom_plate(single_cluster, solid_point):
    getopt = single_cluster((0, 0), case={'bottom_plate': {'thickness': 2}})
    helpers = getopt.helpers
    plain = body.mask(getopt, [helpers.sphere(1)])
    raised = body.mask(getopt, [helpers.sphere(1)], bottom_plate=True)
    assert solid_point(plain.children[0])[2] == pytest.approx(500)
    assert solid_point(raised.children[0])[2] == pytest.approx(502)


def tweak_cluster(configure, tweaks):
    return configure(
        key_clusters={'main': {
            'matrix_columns': [{'rows_above_home': 1}, {'rows_above_home': 1}],
            'aliases': {'a': [0, 0], 'b': [1, 0], 'c': [1, 1], 'd': [0, 1]}}},
        case={'tweaks': tweaks})


def test_tweak_leaf_hulls_its_segments(configure):
    getopt = tweak_cluster(configure, [['a', 'WSW', 1, 3]])
    shape = body.wall_tweaks(getopt)
    assert shape.name == 'hull'
    assert len(shape.children) == 3


def test_tweak_leaf_without_corner(configure, solid_point):
    getopt = tweak_cluster(configure, [['a']])
    post = body.wall_tweaks(getopt)
    assert solid_point(post)[:2] == pytest.approx([0, 0])


def test_tweak_chunks_overlap(configure):
    getopt = tweak_cluster(configure, [{
        'hull_around': [['a', 'WSW'], ['b', 'ESE'], ['c', 'ENE'], ['d', 'WNW']],
        'chunk_size': 2}])
    shape = body.wall_tweaks(getopt)
    assert shape.name == 'union'
    assert len(shape.children) == 3
    assert all(child.name == 'hull' for child in shape.children)


def test_tweak_at_ground_hulls_to_the_floor(configure, node_names):
    getopt = tweak_cluster(configure, [{
        'hull_around': [['a', 'WSW'], ['b', 'ESE']], 'at_ground': True}])
    assert 'projection' in node_names(body.wall_tweaks(getopt))


def test_tweaks_below_ground_only_are_left_out(configure):
    getopt = tweak_cluster(configure, [
        {'hull_around': [['a', 'WSW'], ['b', 'ESE']], 'above_ground': False},
        ['c', 'NNE'],
    ])
    shape = body.wall_tweaks(getopt)
    assert shape.name == 'translate'
