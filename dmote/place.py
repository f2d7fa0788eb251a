"""Placement of shapes and points on the curved key surface.

Several features can be positioned in relation to other features, so this
module carries both the key placement transform and the delegating
reckoning of named anchors that builds on it.
"""
import logging

import numpy as np
from numpy import pi

from . import matrix
from .access import key_properties, resolve_anchor
from .errors import CircularDependencyError

log = logging.getLogger(__name__)


#############################
## Basic Dimensional Facts ##
#############################

KEY_WIDTH_1U = 18.25
MOUNT_1U = 19.05

# Mount plates are a bit wider than typical keycaps.
MOUNT_WIDTH = KEY_WIDTH_1U + 0.15
MOUNT_DEPTH = MOUNT_WIDTH


def key_length(units):
    """The length of a keycap in mm, from its size in units."""
    return units * MOUNT_1U - 0.8


def deg2rad(degrees: float) -> float:
    return degrees * pi / 180


def rad2deg(rad: float) -> float:
    return rad * 180 / pi


########################
## Position Reckoning ##
########################

def rotate_around_x(position, angle):
    t_matrix = np.array(
        [
            [1, 0, 0],
            [0, np.cos(angle), -np.sin(angle)],
            [0, np.sin(angle), np.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_y(position, angle):
    t_matrix = np.array(
        [
            [np.cos(angle), 0, np.sin(angle)],
            [0, 1, 0],
            [-np.sin(angle), 0, np.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_z(position, angle):
    t_matrix = np.array(
        [
            [np.cos(angle), -np.sin(angle), 0],
            [np.sin(angle), np.cos(angle), 0],
            [0, 0, 1],
        ]
    )
    return np.matmul(t_matrix, position)


def add_translate(position, xyz):
    vals = []
    for i in range(len(position)):
        vals.append(position[i] + xyz[i])
    return vals


def rotate_position(position, angles):
    """Rotate a point about x, then y, then z, like a rotation of a shape."""
    x, y, z = angles
    position = rotate_around_x(position, x)
    position = rotate_around_y(position, y)
    position = rotate_around_z(position, z)
    return list(position)


def _shape_translate(getopt):
    def translate(shape, vector):
        if not any(vector):
            return shape
        return getopt.helpers.translate(shape, vector)
    return translate


def _shape_rotate(getopt):
    def rotate(shape, angles):
        if not any(angles):
            return shape
        return getopt.helpers.rotate(shape, [rad2deg(a) for a in angles])
    return rotate


################
## Key Mounts ##
################

def mount_corner_offset(getopt, directions):
    """Produce a mm coordinate offset for a corner of a switch mount."""
    m = getopt('case', 'key_mount_corner_margin')
    return [
        matrix.compass_dx(*directions) * (MOUNT_WIDTH / 2 - m / 2),
        matrix.compass_dy(*directions) * (MOUNT_DEPTH / 2 - m / 2),
        -getopt('case', 'web_thickness') / 2 + getopt('case', 'key_mount_thickness'),
    ]


def curvature_radius(getopt, cluster, coordinates, angle_factor, separation):
    resting = key_properties(getopt, cluster, coordinates)['resting_clearance']
    return (getopt('case', 'key_mount_thickness') + resting
            + ((MOUNT_1U + separation) / 2) / np.sin(angle_factor / 2))


def _curver(getopt, cluster, coordinates, subject, translate_fn, rotate_fn,
            dimension, orthographic=False):
    """Apply progressive curvature along one dimension. Else lay keys out flat.

    Dimension 1 is the column, curving by pitch over row indices. Dimension 0
    is the row, curving by roll over column indices.
    """
    def most(*end_path):
        return getopt.most_specific(end_path, cluster, coordinates)

    subject_name = ('column', 'row')[dimension]
    rotation_name = ('roll', 'pitch')[dimension]
    index = coordinates[dimension]
    angle_factor = most('layout', rotation_name, 'progressive')
    neutral = most('layout', 'matrix', 'neutral', subject_name)
    separation = most('layout', 'matrix', 'separation', subject_name)
    if dimension == 1:
        delta_f = index - neutral
    else:
        delta_f = neutral - index
    delta_r = -delta_f
    angle_product = angle_factor * delta_f

    if angle_factor == 0:
        flat = [0, 0, 0]
        flat[dimension] = MOUNT_1U * (index - neutral)
        return translate_fn(subject, flat)

    angles = [0, 0, 0]
    angles[1 - dimension] = angle_product
    radius = curvature_radius(getopt, cluster, coordinates, angle_factor,
                              separation)
    if orthographic:
        subject = rotate_fn(subject, angles)
        return translate_fn(subject, [
            -(delta_r * (-1 - radius * np.sin(angle_factor))),
            0,
            radius * (1 - np.cos(angle_product)),
        ])
    subject = translate_fn(subject, [0, 0, -radius])
    subject = rotate_fn(subject, angles)
    return translate_fn(subject, [0, 0, radius])


def put_in_column(getopt, cluster, coordinates, subject, translate_fn, rotate_fn):
    """Place a key in relation to its column."""
    return _curver(getopt, cluster, coordinates, subject, translate_fn,
                   rotate_fn, 1)


def put_in_row(getopt, cluster, coordinates, subject, translate_fn, rotate_fn):
    """Place a key in relation to its row."""
    style = getopt('derived', 'by_cluster', cluster, 'style')
    if style == 'fixed':
        angle = getopt.most_specific(('layout', 'fixed', 'angle'),
                                     cluster, coordinates)
        offset = getopt.most_specific(('layout', 'fixed', 'offset'),
                                      cluster, coordinates)
        subject = rotate_fn(subject, [0, angle, 0])
        return translate_fn(subject, offset)
    return _curver(getopt, cluster, coordinates, subject, translate_fn,
                   rotate_fn, 0, orthographic=(style == 'orthographic'))


def apply_key_geometry(getopt, subject, translate_fn, rotate_fn, cluster,
                       coordinates):
    log.debug('apply_key_geometry()')

    def most(*end_path):
        return getopt.most_specific(('layout',) + end_path, cluster, coordinates)

    subject = translate_fn(subject, most('translation', 'early'))
    subject = rotate_fn(subject, [most('pitch', 'intrinsic'),
                                  most('roll', 'intrinsic'),
                                  most('yaw', 'intrinsic')])
    subject = put_in_column(getopt, cluster, coordinates, subject,
                            translate_fn, rotate_fn)
    subject = put_in_row(getopt, cluster, coordinates, subject,
                         translate_fn, rotate_fn)
    subject = translate_fn(subject, most('translation', 'mid'))
    subject = rotate_fn(subject, [most('pitch', 'base'),
                                  most('roll', 'base'),
                                  most('yaw', 'base')])
    subject = translate_fn(subject,
                           [0, MOUNT_1U * most('matrix', 'neutral', 'row'), 0])
    subject = translate_fn(subject, most('translation', 'late'))
    return translate_fn(subject,
                        getopt('derived', 'by_cluster', cluster, 'origin'))


def cluster_place(getopt, cluster, coordinates, shape):
    """Place and tilt a shape as if into a key cluster."""
    return apply_key_geometry(getopt, shape, _shape_translate(getopt),
                              _shape_rotate(getopt), cluster,
                              tuple(coordinates))


def cluster_position(getopt, cluster, coordinates, position=(0, 0, 0)):
    """Like cluster_place but for a point: an offset from a key's middle."""
    return list(apply_key_geometry(getopt, list(position), add_translate,
                                   rotate_position, cluster,
                                   tuple(coordinates)))


###################
## Wall Segments ##
###################

def wall_segment_offset(getopt, cluster, coordinates, direction, segment):
    """Compute a 3D offset from one corner of a switch mount to a part of its wall."""
    def most(*end_path):
        return getopt.most_specific(('wall',) + end_path, cluster, coordinates)

    thickness = most('thickness')
    bevel_factor = most('bevel')
    parallel = most(direction, 'parallel')
    perpendicular = most(direction, 'perpendicular')
    dx, dy = matrix.COMPASS_TO_GRID[direction]
    if perpendicular == 0:
        bevel = bevel_factor
    else:
        bevel = bevel_factor * np.sign(perpendicular)

    if segment == 0:
        return [0, 0, 0]
    if segment == 1:
        return [dx * thickness, dy * thickness, bevel]
    if segment == 2:
        return [dx * parallel, dy * parallel, perpendicular]
    if segment == 3:
        return [dx * (parallel + thickness), dy * (parallel + thickness),
                perpendicular]
    if segment == 4:
        return [dx * parallel, dy * parallel, perpendicular + bevel]
    raise ValueError('No such wall segment: {}'.format(segment))


def wall_vertex_offset(getopt, directions, bottom=False):
    """Compute a 3D offset from the center of a web post to a vertex on it."""
    xy = getopt('case', 'key_mount_corner_margin') / 2
    z = getopt('case', 'key_mount_thickness') / 2
    return matrix.cube_vertex_offset(directions, [xy, xy, z], bottom)


def wall_corner_offset(getopt, cluster, coordinates, directions, segment=3,
                       vertex=False, bottom=False):
    """Combined [x y z] offset from the center of a switch mount.

    By default, this goes to one corner of the hem of the mount's skirt of
    walling and therefore finds the base of full walls.
    """
    if directions is None:
        return [0, 0, 0]
    offset = add_translate(
        mount_corner_offset(getopt, directions),
        wall_segment_offset(getopt, cluster, coordinates, directions[0],
                            segment))
    if vertex:
        offset = add_translate(offset,
                               wall_vertex_offset(getopt, directions, bottom))
    return offset


def wall_corner_position(getopt, cluster, coordinates, directions=None,
                         segment=3, vertex=False, bottom=False):
    """Absolute position of the lower wall around a key mount."""
    return cluster_position(
        getopt, cluster, coordinates,
        wall_corner_offset(getopt, cluster, coordinates, directions,
                           segment=segment, vertex=vertex, bottom=bottom))


def wall_slab_center_offset(getopt, cluster, coordinates, direction):
    """Combined [x y z] offset to the center of a vertical wall.

    Computed as the arithmetic average of its two corners.
    """
    corners = [
        wall_corner_offset(getopt, cluster, coordinates, (direction, turn(direction)))
        for turn in (matrix.left, matrix.right)]
    return [(a + b) / 2 for a, b in zip(*corners)]


#############
## Anchors ##
#############

def reckon_feature(getopt, feature, corner=None, segment=3, offset=(0, 0, 0)):
    """Find a point in relation to a named feature.

    For keys, a corner names the outside of a wall post at the given segment.
    Without a corner, the point is the middle of the key mounting plate.
    """
    kind = feature['type']
    if kind == 'origin':
        return list(offset)
    if kind == 'key':
        cluster, coordinates = feature['cluster'], feature['coordinates']
        return cluster_position(
            getopt, cluster, coordinates,
            add_translate(wall_corner_offset(getopt, cluster, coordinates,
                                             corner, segment=segment),
                          offset))
    if kind == 'secondary':
        primary = resolve_anchor(getopt, feature['anchor'])
        base = reckon_feature(getopt, primary, corner=feature['corner'],
                              segment=feature['segment'])
        return add_translate(add_translate(base, feature['offset']), offset)
    raise ValueError('Unknown type of feature: {}'.format(kind))


def reckon_from_anchor(getopt, anchor, corner=None, segment=3, offset=(0, 0, 0)):
    """Find a position corresponding to a named point."""
    return reckon_feature(getopt, resolve_anchor(getopt, anchor),
                          corner=corner, segment=segment, offset=offset)


def _upstream_cluster(getopt, cluster):
    """The cluster whose layout determines the origin of another, if any."""
    name = getopt('key_clusters', cluster, 'position', 'anchor')
    while True:
        feature = resolve_anchor(getopt, name)
        if feature['type'] == 'key':
            return feature['cluster']
        if feature['type'] != 'secondary':
            return None
        name = feature['anchor']


def derive_cluster_origins(getopt):
    """Compute the origin of each key cluster, in order of dependency.

    Origins are stored in the derived properties of each cluster as they are
    found, because later clusters may be anchored to keys in earlier ones.
    """
    by_cluster = getopt('derived', 'by_cluster')
    done = set()

    def visit(cluster, trail):
        if cluster in done:
            return
        if cluster in trail:
            raise CircularDependencyError(
                trail[trail.index(cluster):] + [cluster],
                ('key_clusters', cluster, 'position', 'anchor'))
        upstream = _upstream_cluster(getopt, cluster)
        if upstream is not None:
            visit(upstream, trail + [cluster])
        position = getopt('key_clusters', cluster, 'position')
        by_cluster[cluster]['origin'] = reckon_from_anchor(
            getopt, position['anchor'], offset=position['offset'])
        log.debug('derive_cluster_origins(): %s at %s', cluster,
                  by_cluster[cluster]['origin'])
        done.add(cluster)

    for cluster in getopt('key_clusters'):
        visit(cluster, [])
    return {cluster: by_cluster[cluster]['origin'] for cluster in by_cluster}
