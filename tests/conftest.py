import numpy as np
import pytest

from dmote import dactyl_manuform, place


def columns(*heights):
    """Matrix columns from (rows_below_home, rows_above_home) pairs."""
    return [{'rows_below_home': below, 'rows_above_home': above}
            for below, above in heights]


@pytest.fixture
def configure():
    """Build an accessor from partial raw settings, like a loaded file."""
    def build(key_clusters=None, by_key=None, **sections):
        raws = dict(sections)
        if key_clusters is not None:
            raws['key_clusters'] = key_clusters
        if by_key is not None:
            raws['by_key'] = by_key
        return dactyl_manuform.build_accessor(raws)
    return build


@pytest.fixture
def single_cluster(configure):
    """One cluster named main, laid out from column heights."""
    def build(*heights, style='standard', by_key=None, **sections):
        cluster = {'matrix_columns': columns(*heights), 'style': style}
        return configure(key_clusters={'main': cluster}, by_key=by_key,
                         **sections)
    return build


@pytest.fixture
def solid_point():
    """Find where the local origin of the innermost child of a chain of
    SolidPython transforms ends up."""
    def walk(shape):
        chain = []
        node = shape
        while node.name in ('translate', 'rotate'):
            chain.append(node)
            node = node.children[0]
        point = np.zeros(3)
        for node in reversed(chain):
            if node.name == 'translate':
                point = point + np.array(node.params['v'], dtype=float)
            else:
                angles = [place.deg2rad(a) for a in node.params['a']]
                point = np.array(place.rotate_position(point, angles))
        return point
    return walk


@pytest.fixture
def node_names():
    """All operator and primitive names in a SolidPython tree."""
    def collect(shape):
        names = [shape.name]
        for child in shape.children:
            names.extend(collect(child))
        return names
    return collect
