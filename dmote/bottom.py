"""Bottom plating and foot plates.

Floor-level outlines are reckoned as points, not projected from 3D shapes,
so that the same code serves both engines.
"""
import logging

from . import matrix
from .access import all_clusters, get_key_alias
from .body import connecting_wall
from .errors import TessellationError
from .place import reckon_from_anchor, wall_corner_position

log = logging.getLogger(__name__)


##########
## Case ##
##########

def floor_finder(getopt, cluster, anchors):
    """Return xy-coordinate pairs for exterior wall vertices, None for partial walls."""
    points = []
    for coordinates, direction, turning_fn in anchors:
        extent = getopt.most_specific(('wall', direction, 'extent'), cluster,
                                      coordinates)
        if extent != 'full':
            points.append(None)
            continue
        position = wall_corner_position(
            getopt, cluster, coordinates,
            directions=(direction, turning_fn(direction)), vertex=True)
        points.append(list(position[:2]))
    return points


def cluster_floor_points(getopt, cluster):
    """Vertices of a polygon approximating a floor-level projection of a
    key cluster's wall."""
    occluded = getopt('derived', 'by_cluster', cluster, 'key_requested')
    points = []
    for edge in matrix.trace_between(occluded):
        points.extend(point for point in floor_finder(getopt, cluster,
                                                      connecting_wall(edge))
                      if point is not None)
    return points


def _tessellated(points, message):
    if len(points) < 3:
        raise TessellationError(message, points)
    return points


def cluster_floor_polygon(getopt, cluster):
    points = cluster_floor_points(getopt, cluster)
    if not points:
        # No full walls, nothing to cover.
        return None
    return getopt.helpers.polygon(_tessellated(
        points, 'Too few full walls for a bottom plate of {}'.format(cluster)))


def tweak_floor_vertex(getopt, leaf, pick_segment, bottom):
    """A corner vertex on a tweak wall, extending from a key mount."""
    alias, directions, first_segment, last_segment = leaf
    key = get_key_alias(getopt, alias)
    segment = pick_segment(list(range(first_segment, last_segment + 1)))
    position = wall_corner_position(getopt, key['cluster'], key['coordinates'],
                                    directions=directions, segment=segment,
                                    vertex=directions is not None, bottom=bottom)
    return list(position[:2])


def _dig_to_leaves(node):
    if isinstance(node, dict):
        return _dig_to_leaves(node['hull_around'][0])
    return node


def tweak_plate_shadows(getopt, nodes):
    """Versions of the footprint of a tweak.

    It is not easy to identify which vertices shape the outside of the case
    at floor level, so each combination of first and last is tried.
    """
    shadows = []
    first, last = (lambda coll: coll[0]), (lambda coll: coll[-1])
    for pick_post in (first, last):
        for pick_segment in (first, last):
            for bottom in (False, True):
                points = []
                for node in nodes:
                    if isinstance(node, dict):
                        # Pick just one post in the subordinate node.
                        leaf = _dig_to_leaves(pick_post(node['hull_around']))
                    else:
                        leaf = node
                    points.append(tweak_floor_vertex(getopt, leaf,
                                                     pick_segment, bottom))
                shadows.append(points)
    return shadows


def tweak_floor_polygons(getopt):
    """The footprint of all user-requested additional shapes that go to the floor."""
    polygons = []
    for node in getopt('case', 'tweaks'):
        if isinstance(node, dict) and node['at_ground']:
            for points in tweak_plate_shadows(getopt, node['hull_around']):
                if len(points) >= 3:
                    polygons.append(getopt.helpers.polygon(points))
    return polygons


def case_positive(getopt):
    """A model of a bottom plate for the entire case. Screw holes not included."""
    log.info('case_positive()')
    helpers = getopt.helpers
    thickness = getopt('case', 'bottom_plate', 'thickness')
    outlines = [cluster_floor_polygon(getopt, cluster)
                for cluster in all_clusters(getopt)]
    outlines += tweak_floor_polygons(getopt)
    return helpers.union([helpers.extrude_poly(outline, height=thickness)
                          for outline in outlines if outline is not None])


#################
## Foot Plates ##
#################

def foot_plate_points(getopt, polygon):
    """Floor-level points for one foot plate, each anchored to a named feature."""
    points = []
    for point in polygon['points']:
        base = reckon_from_anchor(getopt, point['anchor'], corner=point['corner'],
                                  segment=point['segment'])
        points.append([base[0] + point['offset'][0], base[1] + point['offset'][1]])
    return points


def foot_plates(getopt):
    """Model plates from polygons."""
    helpers = getopt.helpers
    height = getopt('case', 'foot_plates', 'height')
    plates = []
    for polygon in getopt('case', 'foot_plates', 'polygons'):
        points = _tessellated(foot_plate_points(getopt, polygon),
                              'A foot plate needs at least 3 points')
        plates.append(helpers.extrude_poly(helpers.polygon(points), height=height))
    return helpers.union(plates)
