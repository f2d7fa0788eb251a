"""Key clusters, switch mounts and keycaps."""
import logging

from . import matrix
from .access import all_clusters, key_properties
from .errors import CircularDependencyError, ConfigurationError
from .place import (MOUNT_DEPTH, MOUNT_WIDTH, cluster_place, key_length,
                    mount_corner_offset)

log = logging.getLogger(__name__)


#################
## Switch Data ##
#################

SWITCH_DIMENSIONS = {
    'alps': {
        'hole_x': 15.5,
        'hole_y': 12.6,
        'overhang_x': 17.25,  # Width of notches.
        'overhang_y': 14.25,
        'overhang_z': 1,  # Height of notch above hole/plate.
        'underhang_z': 4.5,  # Height of body up to plate top.
        'travel': 3.5,
        'stem_top_height': 10.4,  # From plate top, at rest.
    },
    'mx': {
        'hole_x': 13.9954,
        'hole_y': 13.9954,
        'overhang_x': 15.494,
        'overhang_y': 15.494,
        'overhang_z': 1,  # Estimated, dimension not included in datasheet.
        'underhang_z': 5.004,
        'travel': 4,
        'stem_top_height': 11.6,
    },
}


def resting_clearance(switch_type, skirt_length):
    """Distance from the plate top to the bottom of a keycap skirt at rest."""
    return max(0, SWITCH_DIMENSIONS[switch_type]['stem_top_height'] - skirt_length)


def derive_style_properties(getopt):
    """Combine each configured key style with data for its switch type."""
    styles = {}
    for name, style in getopt('keys', 'styles').items():
        properties = dict(style)
        properties.update(SWITCH_DIMENSIONS[style['switch_type']])
        properties['resting_clearance'] = resting_clearance(
            style['switch_type'], style['skirt_length'])
        styles[name] = properties
    return styles


##################
## Key Clusters ##
##################

def chart_cluster(getopt, cluster):
    """Derive some properties about a key cluster from raw configuration info."""
    settings = getopt('key_clusters', cluster)
    columns = settings['matrix_columns']
    column_range = list(range(len(columns)))
    max_above = max(column['rows_above_home'] for column in columns)
    max_below = max(column['rows_below_home'] for column in columns)
    row_range = list(range(-max_below, max_above + 1))

    def key_requested(coordinates):
        """True if specified key is requested."""
        column, row = coordinates
        if not 0 <= column < len(columns):
            return False
        if row < 0:
            return columns[column]['rows_below_home'] >= abs(row)
        if row > 0:
            return columns[column]['rows_above_home'] >= row
        return True

    row_indices_by_column = {
        c: [r for r in row_range if key_requested((c, r))] for c in column_range}
    column_indices_by_row = {
        r: [c for c in column_range if key_requested((c, r))] for r in row_range}
    return {
        'style': settings['style'],
        'last_column': column_range[-1],
        'column_range': column_range,
        'row_range': row_range,
        'key_requested': key_requested,
        'key_coordinates': matrix.coordinate_pairs(column_range, row_range,
                                                   key_requested),
        'row_indices_by_column': row_indices_by_column,
        'coordinates_by_column': {
            c: [(c, r) for r in rows] for c, rows in row_indices_by_column.items()},
        'column_indices_by_row': column_indices_by_row,
        'coordinates_by_row': {
            r: [(c, r) for c in cols] for r, cols in column_indices_by_row.items()},
    }


def derive_cluster_properties(getopt):
    """Derive basic properties for each key cluster."""
    return {cluster: chart_cluster(getopt, cluster)
            for cluster in all_clusters(getopt)}


def resolve_flex(getopt, cluster, coordinates):
    """Resolve 'first' and 'last' in a coordinate pair to integers.

    Columns are resolved first, then rows within the resolved column.
    """
    column, row = coordinates
    columns = getopt('derived', 'by_cluster', cluster, 'column_range')
    if column == 'first':
        column = columns[0]
    elif column == 'last':
        column = columns[-1]
    rows = getopt('derived', 'by_cluster', cluster,
                  'row_indices_by_column').get(column, [])
    if row in ('first', 'last') and not rows:
        raise ConfigurationError(
            'No rows to pick from in column', ('key_clusters', cluster),
            raw_value=coordinates)
    if row == 'first':
        row = rows[0]
    elif row == 'last':
        row = rows[-1]
    return (column, row)


def collect_key_aliases(getopt):
    """Unify cluster-specific key aliases into a single global map.

    Each alias keeps its cluster of origin. Symbolic coordinates are resolved.
    """
    aliases = {}
    for cluster in all_clusters(getopt):
        for alias, flex in getopt('key_clusters', cluster, 'aliases').items():
            path = ('key_clusters', cluster, 'aliases', alias)
            if alias in aliases:
                raise ConfigurationError('Duplicate key alias', path)
            coordinates = resolve_flex(getopt, cluster, flex)
            requested = getopt('derived', 'by_cluster', cluster, 'key_requested')
            if not requested(coordinates):
                raise ConfigurationError(
                    'Key alias refers to a position without a key', path,
                    raw_value=list(flex), parsed_value=coordinates)
            aliases[alias] = {'type': 'key', 'cluster': cluster,
                              'coordinates': coordinates}
    return aliases


def collect_anchors(getopt):
    """Gather names for the placement of features relative to one another."""
    anchors = {'origin': {'type': 'origin'}}
    anchors.update(getopt('derived', 'aliases'))
    for index, secondary in enumerate(getopt('secondaries')):
        alias = secondary['alias']
        if alias in anchors:
            raise ConfigurationError('Duplicate anchor name',
                                     ('secondaries', index, 'alias'),
                                     raw_value=alias)
        anchors[alias] = dict(secondary, type='secondary')
    for index, secondary in enumerate(getopt('secondaries')):
        if secondary['anchor'] not in anchors:
            raise ConfigurationError(
                'Unknown anchor', ('secondaries', index, 'anchor'),
                raw_value=secondary['anchor'], accepted_keys=sorted(anchors))
    for index, secondary in enumerate(getopt('secondaries')):
        _check_secondary_chain(anchors, index, secondary)
    for cluster in all_clusters(getopt):
        anchor = getopt('key_clusters', cluster, 'position', 'anchor')
        if anchor not in anchors:
            raise ConfigurationError(
                'Unknown anchor', ('key_clusters', cluster, 'position', 'anchor'),
                raw_value=anchor, accepted_keys=sorted(anchors))
    return anchors


def _check_secondary_chain(anchors, index, secondary):
    """Follow a secondary through other secondaries to a key or the origin."""
    chain = [secondary['alias']]
    name = secondary['anchor']
    while anchors[name]['type'] == 'secondary':
        if name in chain:
            raise CircularDependencyError(
                chain[chain.index(name):] + [name],
                ('secondaries', index, 'anchor'))
        chain.append(name)
        name = anchors[name]['anchor']


def matrix_picture(getopt, cluster):
    """A schematic picture of a key cluster, north up."""
    prop = getopt('derived', 'by_cluster', cluster)
    lines = []
    for row in reversed(prop['row_range']):
        lines.append(''.join('□' if prop['key_requested']((column, row)) else '·'
                             for column in prop['column_range']))
    return '\n'.join(lines)


###################
## Keycap Models ##
###################

def cap_clearance(getopt, cluster, coordinates, pressed=False):
    """Keycap clearance above the bottom of a key mounting plate."""
    properties = key_properties(getopt, cluster, coordinates)
    clearance = properties['resting_clearance']
    if pressed:
        clearance -= properties['travel']
    return clearance + getopt('case', 'key_mount_thickness')


def cap_channel_negative(getopt, cluster, coordinates):
    """The shape of a channel for a keycap to move in."""
    helpers = getopt.helpers

    def most(*end_path):
        return getopt.most_specific(end_path, cluster, coordinates)

    def step(width, depth, height):
        return helpers.translate(helpers.box(width, depth, 1), [0, 0, height])

    properties = key_properties(getopt, cluster, coordinates)
    margin = most('channel', 'margin')
    top_width = most('channel', 'top_width')
    hole = max(properties['hole_x'], properties['hole_y'])
    width, depth = [key_length(units) + margin for units in properties['unit_size']]
    pressed = cap_clearance(getopt, cluster, coordinates, pressed=True)
    resting = cap_clearance(getopt, cluster, coordinates)
    return helpers.pairwise_hulls([
        # A bottom plate for ease of mounting a switch.
        step(hole, hole, getopt('case', 'key_mount_thickness') + 0.5),
        # Space for the keycap's edges in travel.
        step(width, depth, pressed),
        step(width, depth, resting),
        # Space for the upper body of a keycap at rest.
        step(top_width, top_width,
             getopt('case', 'key_mount_thickness') + most('channel', 'height')),
    ])


def single_cap(getopt, style):
    """One keycap of a named style. Rectangular base, sized in units."""
    helpers = getopt.helpers
    properties = getopt('derived', 'key_styles', style)
    width, depth = [key_length(units) for units in properties['unit_size']]
    outline = helpers.polygon([[-width / 2, -depth / 2], [width / 2, -depth / 2],
                               [width / 2, depth / 2], [-width / 2, depth / 2]])
    return helpers.extrude_poly(outline, height=properties['body_height'],
                                scale=properties['top_scale'])


def cap_positive(getopt, cluster, coordinates):
    """The shape of one keycap at rest, over its mount."""
    clearance = cap_clearance(getopt, cluster, coordinates)
    style = getopt.most_specific(('key_style',), cluster, coordinates)
    return getopt.helpers.translate(single_cap(getopt, style), [0, 0, clearance])


###################
## Switch Mounts ##
###################

def single_switch_plate(getopt):
    t = getopt('case', 'key_mount_thickness')
    return getopt.helpers.translate(
        getopt.helpers.box(MOUNT_WIDTH, MOUNT_DEPTH, t), [0, 0, t / 2])


def single_switch_cutout(getopt, properties):
    """Negative space for the insertion of a key switch through a mounting plate."""
    helpers = getopt.helpers
    t = getopt('case', 'key_mount_thickness')
    h = 2 * properties['underhang_z'] - t
    # Space for the part of a switch above the mounting hole.
    shapes = [helpers.translate(
        helpers.box(properties['overhang_x'], properties['overhang_y'], t),
        [0, 0, t])]
    # The hole through the plate.
    shapes.append(helpers.box(properties['hole_x'], properties['hole_y'], h))
    if properties['switch_type'] == 'alps':
        # Space for wings to flare out.
        shapes.append(helpers.translate(
            helpers.box(properties['hole_x'] + 1, properties['hole_y'], t),
            [0, 0, -1.5]))
    return helpers.translate(helpers.union(shapes), [0, 0, t / 2])


def single_switch_nubs(getopt, properties):
    """MX-specific nubs that hold the keyswitch in place."""
    if properties['switch_type'] != 'mx':
        return None
    helpers = getopt.helpers
    t = getopt('case', 'key_mount_thickness')
    nub = helpers.cylinder(1, 2.75, segments=20)
    nub = helpers.rotate(nub, [90, 0, 0])
    nub = helpers.translate(nub, [properties['hole_x'] / 2, 0, 1])
    nub = helpers.hull_from_shapes([
        nub,
        helpers.translate(helpers.box(1.5, 2.75, t),
                          [0.75 + properties['hole_y'] / 2, 0, t / 2])])
    return helpers.union([nub, helpers.mirror(helpers.mirror(nub, 'YZ'), 'XZ')])


def web_post(getopt):
    """A shape for attaching things to a corner of a switch mount."""
    m = getopt('case', 'key_mount_corner_margin')
    return getopt.helpers.box(m, m, getopt('case', 'web_thickness'))


def mount_corner_post(getopt, directions):
    """A post shape that comes offset for one corner of a key mount."""
    return getopt.helpers.translate(web_post(getopt),
                                    mount_corner_offset(getopt, directions))


#########################
## Interface Functions ##
#########################

def _each_key(getopt, cluster, shape_fn):
    helpers = getopt.helpers
    shapes = []
    for coordinates in getopt('derived', 'by_cluster', cluster, 'key_coordinates'):
        shape = shape_fn(coordinates)
        if shape is not None:
            shapes.append(cluster_place(getopt, cluster, coordinates, shape))
    return helpers.union(shapes)


def cluster_plates(getopt, cluster):
    log.info('cluster_plates(%s)', cluster)
    return _each_key(getopt, cluster, lambda _: single_switch_plate(getopt))


def cluster_cutouts(getopt, cluster):
    return _each_key(getopt, cluster, lambda coordinates: single_switch_cutout(
        getopt, key_properties(getopt, cluster, coordinates)))


def cluster_nubs(getopt, cluster):
    return _each_key(getopt, cluster, lambda coordinates: single_switch_nubs(
        getopt, key_properties(getopt, cluster, coordinates)))


def cluster_channels(getopt, cluster):
    return _each_key(getopt, cluster, lambda coordinates: cap_channel_negative(
        getopt, cluster, coordinates))


def cluster_keycaps(getopt, cluster):
    return _each_key(getopt, cluster, lambda coordinates: cap_positive(
        getopt, cluster, coordinates))


def metacluster(function, getopt):
    """Apply a modelling function to all key clusters."""
    return getopt.helpers.union([function(getopt, cluster)
                                 for cluster in all_clusters(getopt)])
