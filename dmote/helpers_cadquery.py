import logging

import cadquery as cq
import numpy as np
from scipy.spatial import ConvexHull as sphull

log = logging.getLogger(__name__)

FILE_EXTENSION = '.step'


def box(width, height, depth):
    return cq.Workplane('XY').box(width, height, depth)


def cylinder(radius, height, segments=100):
    shape = cq.Workplane('XY').union(
        cq.Solid.makeCylinder(radius=radius, height=height))
    return translate(shape, (0, 0, -height / 2))


def sphere(radius):
    return cq.Workplane('XY').sphere(radius)


def polygon(points):
    return cq.Workplane('XY').polyline([tuple(point[:2]) for point in points]).close()


def polyhedron(points, faces):
    faces = [face_from_points([points[i] for i in face]) for face in faces]
    shape = cq.Solid.makeSolid(cq.Shell.makeShell(faces))
    return cq.Workplane('XY').union(shape)


def rotate(shape, angle):
    origin = (0, 0, 0)
    shape = shape.rotate(axisStartPoint=origin, axisEndPoint=(1, 0, 0), angleDegrees=angle[0])
    shape = shape.rotate(axisStartPoint=origin, axisEndPoint=(0, 1, 0), angleDegrees=angle[1])
    shape = shape.rotate(axisStartPoint=origin, axisEndPoint=(0, 0, 1), angleDegrees=angle[2])
    return shape


def translate(shape, vector):
    return shape.translate(tuple(float(v) for v in vector))


def mirror(shape, plane=None):
    log.debug('mirror()')
    return shape.mirror(mirrorPlane=plane)


def union(shapes):
    log.debug('union()')
    shape = None
    for item in shapes:
        if item is None:
            continue
        if shape is None:
            shape = item
        else:
            shape = shape.union(item)
    return shape


def difference(shape, shapes):
    log.debug('difference()')
    if shape is None:
        return None
    for item in shapes:
        if item is not None:
            shape = shape.cut(item)
    return shape


def intersect(shape1, shape2):
    if shape1 is None or shape2 is None:
        return None
    return shape1.intersect(shape2)


def face_from_points(points):
    edges = []
    num_pnts = len(points)
    for i in range(num_pnts):
        p1 = points[i]
        p2 = points[(i + 1) % num_pnts]
        edges.append(cq.Edge.makeLine(cq.Vector(*p1), cq.Vector(*p2)))
    return cq.Face.makeFromWires(cq.Wire.assembleEdges(edges))


def hull_from_points(points):
    log.debug('hull_from_points()')
    points = np.array(points, dtype=float)
    hull_calc = sphull(points)
    faces = []
    for simplex in hull_calc.simplices:
        faces.append(face_from_points([tuple(points[item]) for item in simplex]))
    shape = cq.Solid.makeSolid(cq.Shell.makeShell(faces))
    return cq.Workplane('XY').union(shape)


def _vertices(shapes):
    vertices = []
    for shape in shapes:
        for vert in shape.vertices().objects:
            vertices.append(np.array(vert.toTuple()))
    return vertices


def hull_from_shapes(shapes, points=None):
    log.debug('hull_from_shapes()')
    shapes = [shape for shape in shapes if shape is not None]
    vertices = _vertices(shapes)
    if points is not None:
        vertices.extend(np.array(point) for point in points)
    if len(vertices) < 4:
        return union(shapes)
    return hull_from_points(vertices)


def triangle_hulls(shapes):
    log.debug('triangle_hulls()')
    shapes = [shape for shape in shapes if shape is not None]
    if len(shapes) < 3:
        return hull_from_shapes(shapes)
    return union([hull_from_shapes(shapes[i: (i + 3)])
                  for i in range(len(shapes) - 2)])


def pairwise_hulls(shapes):
    shapes = [shape for shape in shapes if shape is not None]
    if len(shapes) < 2:
        return hull_from_shapes(shapes)
    return union([hull_from_shapes(shapes[i: (i + 2)])
                  for i in range(len(shapes) - 1)])


def bottom_hull(shapes, height=0.001):
    """Hull shapes together with copies of their vertices on the floor."""
    log.debug('bottom_hull()')
    shapes = [shape for shape in shapes if shape is not None]
    if not shapes:
        return None
    floor = [np.array([x, y, 0.0]) for x, y, _ in _vertices(shapes)]
    return hull_from_shapes(shapes, points=floor)


def extrude_poly(outer_poly, inner_polys=None, height=1, scale=1, center=False):
    if scale != 1:
        outline = outer_poly.vertices().objects
        top = [(v.X * scale, v.Y * scale, height) for v in outline]
        bottom = [(v.X, v.Y, 0) for v in outline]
        shape = hull_from_points(top + bottom)
    else:
        shape = outer_poly.extrude(height)
        for inner in inner_polys or []:
            shape = shape.cut(inner.extrude(height))
    if center:
        shape = translate(shape, (0, 0, -height / 2))
    return shape


def highlight(shape):
    log.debug('highlight() is a no-op for CadQuery')
    return shape


def export_file(shape, fname):
    log.info('Exporting to %s%s', fname, FILE_EXTENSION)
    cq.exporters.export(shape, fname + FILE_EXTENSION)
    return fname + FILE_EXTENSION
