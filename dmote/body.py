"""Keyboard case body: webbing between key mounts, walls and tweaks."""
import logging
from collections import namedtuple

from . import matrix
from .access import get_key_alias
from .key import mount_corner_post, web_post
from .place import cluster_place, mount_corner_offset, wall_segment_offset

log = logging.getLogger(__name__)


#############
## Masking ##
#############

def mask(getopt, shapes, bottom_plate=False):
    """Implement overall limits on passed shapes.

    With a bottom plate, the mask rises to leave room for the plate.
    """
    helpers = getopt.helpers
    center = list(getopt('mask', 'center'))
    if bottom_plate:
        center[2] += getopt('case', 'bottom_plate', 'thickness')
    limit = helpers.translate(helpers.box(*getopt('mask', 'size')), center)
    return helpers.intersect(limit, helpers.union(shapes))


#######################
## Key Mount Webbing ##
#######################

# One set of corner posts to hull: kind is 'column', 'row' or 'fill'; posts
# is a list of (coordinates, corner) pairs.
WebHull = namedtuple('WebHull', ['kind', 'posts'])


def web_post_sets(coordinates, spotter):
    """Decide which corner posts to hull around one position in a matrix."""
    here = tuple(coordinates)
    north = matrix.walk(here, 'north')
    east = matrix.walk(here, 'east')
    northeast = matrix.walk(here, 'north', 'east')
    fill_here = spotter(here)
    fill_north = spotter(north)
    fill_east = spotter(east)
    fill_northeast = spotter(northeast)
    sets = []
    # Connecting columns.
    if fill_here and fill_east:
        sets.append(WebHull('column', [(here, matrix.ENE), (east, matrix.WNW),
                                       (here, matrix.ESE), (east, matrix.WSW)]))
    # Connecting rows.
    if fill_here and fill_north:
        sets.append(WebHull('row', [(here, matrix.WNW), (north, matrix.WSW),
                                    (here, matrix.ENE), (north, matrix.ESE)]))
    # Selectively filling the area between all four possible mounts.
    fill = [(position, corner) for filled, position, corner in (
                (fill_here, here, matrix.ENE),
                (fill_north, north, matrix.ESE),
                (fill_east, east, matrix.WNW),
                (fill_northeast, northeast, matrix.WSW)) if filled]
    if fill:
        sets.append(WebHull('fill', fill))
    return sets


def web_shapes(getopt, coordinate_sequence, spotter, placer, corner_finder):
    """A list of shapes covering the interstices between points in a matrix."""
    shapes = []
    for coordinates in coordinate_sequence:
        for web_hull in web_post_sets(coordinates, spotter):
            shapes.append(getopt.helpers.triangle_hulls(
                [placer(position, corner_finder(corner))
                 for position, corner in web_hull.posts]))
    return shapes


def walk_and_web(getopt, columns, rows, spotter, placer, corner_finder):
    return web_shapes(getopt, matrix.coordinate_pairs(columns, rows), spotter,
                      placer, corner_finder)


def cluster_web(getopt, cluster):
    log.info('cluster_web(%s)', cluster)
    prop = getopt('derived', 'by_cluster', cluster)
    return getopt.helpers.union(walk_and_web(
        getopt,
        prop['column_range'],
        prop['row_range'],
        prop['key_requested'],
        lambda coordinates, shape: cluster_place(getopt, cluster, coordinates, shape),
        lambda corner: mount_corner_post(getopt, corner)))


###################
## Wall-Building ##
###################

# Each wall part yields two anchors: (coordinates, direction, turning_fn).
# The corner post of an anchor is (direction, turning_fn(direction)).

def wall_straight_body(coordinates, direction):
    """The part of a case wall that runs along the side of a key mount on the
    edge of the board."""
    facing = matrix.left(direction)
    return [(coordinates, facing, matrix.right),
            (coordinates, facing, matrix.left)]


def wall_straight_join(coordinates, direction):
    """The part of a case wall that runs between two key mounts in a straight line."""
    facing = matrix.left(direction)
    return [(coordinates, facing, matrix.right),
            (matrix.walk(coordinates, direction), facing, matrix.left)]


def wall_outer_corner(coordinates, direction):
    """The part of a case wall that smooths out an outer, sharp corner."""
    return [(coordinates, matrix.left(direction), matrix.right),
            (coordinates, direction, matrix.left)]


def wall_inner_corner(coordinates, direction):
    """The part of a case wall that covers any gap in an inner corner.

    Here it is important to pick not only the right corner but the right
    direction moving out from that corner.
    """
    opposite = matrix.walk(coordinates, matrix.left(direction), direction)
    reverse = matrix.left(matrix.left(direction))
    return [(coordinates, matrix.left(direction), lambda _: direction),
            (opposite, reverse, matrix.left)]


WALL_PARTS = {
    None: wall_straight_join,
    matrix.OUTER: wall_outer_corner,
    matrix.INNER: wall_inner_corner,
}


def connecting_wall(edge):
    """The anchors of the wall part that follows a traced position."""
    return WALL_PARTS[edge.corner](edge.coordinates, edge.direction)


def wall_segments(getopt, cluster, upper, anchor):
    """Segment IDs for the upper or lower part of one edge of a wall slab."""
    coordinates, direction, _ = anchor
    extent = getopt.most_specific(('wall', direction, 'extent'), cluster,
                                  coordinates)
    last_upper_segment = {'full': 4, 'none': 0}.get(extent, extent)
    if last_upper_segment == 0:
        return []
    if upper:
        return list(range(last_upper_segment + 1))
    if extent == 'full':
        return [2, 3, 4]
    return []


def wall_edge(getopt, cluster, upper, anchor):
    """Produce a sequence of corner posts for the upper or lower part of the
    edge of one wall slab."""
    coordinates, direction, turning_fn = anchor
    corner = (direction, turning_fn(direction))
    posts = []
    for segment in wall_segments(getopt, cluster, upper, anchor):
        post = getopt.helpers.translate(
            mount_corner_post(getopt, corner),
            wall_segment_offset(getopt, cluster, coordinates, direction, segment))
        posts.append(cluster_place(getopt, cluster, coordinates, post))
    return posts


def wall_slab(getopt, cluster, anchors):
    """Produce a single shape joining some (two) edges."""
    helpers = getopt.helpers
    upper = [post for anchor in anchors
             for post in wall_edge(getopt, cluster, True, anchor)]
    lower = [post for anchor in anchors
             for post in wall_edge(getopt, cluster, False, anchor)]
    return helpers.union([helpers.hull_from_shapes(upper),
                          helpers.bottom_hull(lower)])


def cluster_wall(getopt, cluster):
    """Walk the edge of a key cluster clockwise. Wall it in."""
    log.info('cluster_wall(%s)', cluster)
    occluded = getopt('derived', 'by_cluster', cluster, 'key_requested')
    shapes = []
    for edge in matrix.trace_between(occluded):
        shapes.append(wall_slab(getopt, cluster,
                                wall_straight_body(edge.coordinates, edge.direction)))
        shapes.append(wall_slab(getopt, cluster, connecting_wall(edge)))
    return getopt.helpers.union(shapes)


###################
## Tweak Plating ##
###################

def tweak_posts(getopt, alias, directions, first_segment, last_segment):
    """(The hull of) one or more corner posts from a single key mount.

    Without directions, the post is at the middle of the mount.
    """
    helpers = getopt.helpers
    key = get_key_alias(getopt, alias)
    cluster, coordinates = key['cluster'], key['coordinates']
    if directions is None:
        post = helpers.translate(
            web_post(getopt), [0, 0, mount_corner_offset(getopt, matrix.NNE)[2]])
        return cluster_place(getopt, cluster, coordinates, post)
    posts = []
    for segment in range(first_segment, last_segment + 1):
        post = helpers.translate(
            mount_corner_post(getopt, directions),
            wall_segment_offset(getopt, cluster, coordinates, directions[0],
                                segment))
        posts.append(cluster_place(getopt, cluster, coordinates, post))
    if len(posts) == 1:
        return posts[0]
    return helpers.hull_from_shapes(posts)


def tweak_map(getopt, node):
    """Treat a map-type node in the configuration."""
    helpers = getopt.helpers
    hull_fn = helpers.bottom_hull if node['at_ground'] else helpers.hull_from_shapes
    shapes = [tweak_plating(getopt, child) for child in node['hull_around']]
    size = node['chunk_size']
    if size:
        shape = helpers.union([hull_fn(shapes[i: i + size])
                               for i in range(len(shapes) - size + 1)])
    else:
        shape = hull_fn(shapes)
    if node['highlight']:
        shape = helpers.highlight(shape)
    return shape


def tweak_plating(getopt, node):
    if isinstance(node, dict):
        return tweak_map(getopt, node)
    return tweak_posts(getopt, *node)


def wall_tweaks(getopt):
    """User-requested additional shapes."""
    nodes = [node for node in getopt('case', 'tweaks')
             if not isinstance(node, dict) or node['above_ground']]
    log.info('wall_tweaks(): %d nodes', len(nodes))
    return getopt.helpers.union([tweak_plating(getopt, node) for node in nodes])
