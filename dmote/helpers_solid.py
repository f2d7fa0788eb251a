import logging

import solid as sl

log = logging.getLogger(__name__)

FILE_EXTENSION = '.scad'


def box(width, height, depth):
    return sl.cube([width, height, depth], center=True)


def cylinder(radius, height, segments=100):
    return sl.cylinder(r=radius, h=height, segments=segments, center=True)


def sphere(radius):
    return sl.sphere(radius)


def polygon(points):
    return sl.polygon([list(point)[:2] for point in points])


def polyhedron(points, faces):
    return sl.polyhedron(points=[list(point) for point in points], faces=faces)


def rotate(shape, angle):
    return sl.rotate(list(angle))(shape)


def translate(shape, vector):
    return sl.translate([float(v) for v in vector])(shape)


def mirror(shape, plane=None):
    log.debug('mirror()')
    planes = {
        'XY': [0, 0, 1],
        'YX': [0, 0, -1],
        'XZ': [0, 1, 0],
        'ZX': [0, -1, 0],
        'YZ': [1, 0, 0],
        'ZY': [-1, 0, 0],
    }
    return sl.mirror(planes[plane])(shape)


def union(shapes):
    log.debug('union()')
    shapes = [shape for shape in shapes if shape is not None]
    if not shapes:
        return None
    if len(shapes) == 1:
        return shapes[0]
    return sl.union()(*shapes)


def difference(shape, shapes):
    log.debug('difference()')
    shapes = [item for item in shapes if item is not None]
    if shape is None or not shapes:
        return shape
    return sl.difference()(shape, *shapes)


def intersect(shape1, shape2):
    if shape1 is None or shape2 is None:
        return None
    return sl.intersection()(shape1, shape2)


def hull_from_shapes(shapes):
    shapes = [shape for shape in shapes if shape is not None]
    if not shapes:
        return None
    return sl.hull()(*shapes)


def triangle_hulls(shapes):
    """Hull each run of three consecutive shapes. Missing shapes are skipped."""
    log.debug('triangle_hulls()')
    shapes = [shape for shape in shapes if shape is not None]
    if len(shapes) < 3:
        return hull_from_shapes(shapes)
    hulls = []
    for i in range(len(shapes) - 2):
        hulls.append(hull_from_shapes(shapes[i: (i + 3)]))
    return union(hulls)


def pairwise_hulls(shapes):
    """Hull each pair of consecutive shapes."""
    shapes = [shape for shape in shapes if shape is not None]
    if len(shapes) < 2:
        return hull_from_shapes(shapes)
    return union([hull_from_shapes(shapes[i: (i + 2)])
                  for i in range(len(shapes) - 1)])


def bottom_hull(shapes, height=0.001):
    """Hull shapes together with their own shadow on the floor."""
    log.debug('bottom_hull()')
    shapes = [shape for shape in shapes if shape is not None]
    if not shapes:
        return None
    shadow = sl.linear_extrude(height=height, twist=0, convexity=0, center=False)(
        sl.projection()(union(shapes)))
    return sl.hull()(*shapes, shadow)


def extrude_poly(outer_poly, inner_polys=None, height=1, scale=1, center=False):
    if inner_polys is not None:
        return sl.linear_extrude(height=height, scale=scale, center=center)(
            outer_poly, *inner_polys)
    return sl.linear_extrude(height=height, scale=scale, center=center)(outer_poly)


def highlight(shape):
    """Mark a shape for display as a debugging aid."""
    if shape is None:
        return None
    return shape.set_modifier('#')


def export_file(shape, fname):
    log.info('Exporting to %s%s', fname, FILE_EXTENSION)
    sl.scad_render_to_file(shape, fname + FILE_EXTENSION, include_orig_code=False)
    return fname + FILE_EXTENSION
