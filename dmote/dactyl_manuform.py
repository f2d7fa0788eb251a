import logging
import os
import os.path as path
import re
import subprocess
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from . import auxiliary, body, bottom, key, params, place
from .access import OptionAccessor
from .errors import GeometryError, RenderError

log = logging.getLogger(__name__)

save_path = path.join("things")

DEFAULT_RENDERER = 'openscad'


def load_helpers(engine):
    if engine == 'cadquery':
        from . import helpers_cadquery as helpers
    else:
        from . import helpers_solid as helpers
    return helpers


# Mind the order. One of these may depend upon earlier steps.
DERIVERS = [
    ('key_styles', key.derive_style_properties),
    ('by_cluster', key.derive_cluster_properties),
    ('aliases', key.collect_key_aliases),
    ('anchors', key.collect_anchors),
]


def enrich_option_metadata(build_options, helpers=None):
    """Derive properties that are implicit in the user configuration.

    The results are stored under the 'derived' section, after which the
    options are not changed again.
    """
    build_options['derived'] = {}
    getopt = OptionAccessor(build_options, helpers)
    for name, deriver in DERIVERS:
        build_options['derived'][name] = deriver(getopt)
    place.derive_cluster_origins(getopt)
    for cluster in getopt('key_clusters'):
        log.debug('Key cluster %s:\n%s', cluster, key.matrix_picture(getopt, cluster))
    return getopt


def build_accessor(raws):
    """Validate raw settings and derive everything else. Return an accessor."""
    validated = params.checked_configuration(raws)
    log.info('Using engine %s', validated['engine'])
    return enrich_option_metadata(validated, load_helpers(validated['engine']))


############
## Models ##
############

def masked_inner_positive(getopt):
    """Parts of the keyboard that are subject to the mask and all negatives."""
    shapes = [
        key.metacluster(key.cluster_plates, getopt),
        key.metacluster(body.cluster_web, getopt),
        key.metacluster(body.cluster_wall, getopt),
        body.wall_tweaks(getopt),
    ]
    if getopt('case', 'foot_plates', 'include'):
        shapes.append(bottom.foot_plates(getopt))
    return body.mask(getopt, shapes,
                     bottom_plate=getopt('case', 'bottom_plate', 'include'))


def build_keyboard_right(getopt):
    """Right-hand-side keyboard model."""
    helpers = getopt.helpers
    shape = masked_inner_positive(getopt)
    if (getopt('case', 'bottom_plate', 'include')
            and getopt('case', 'bottom_plate', 'preview')):
        shape = helpers.union([shape, bottom.case_positive(getopt)])

    negatives = [
        key.metacluster(key.cluster_cutouts, getopt),
        key.metacluster(key.cluster_channels, getopt),
    ]
    if getopt('case', 'leds', 'include'):
        negatives.append(auxiliary.led_holes(getopt))
    shape = helpers.difference(shape, negatives)
    shape = helpers.union([shape, key.metacluster(key.cluster_nubs, getopt)])

    if getopt('keys', 'preview'):
        shape = helpers.union([shape, key.metacluster(key.cluster_keycaps, getopt)])
    return shape


def build_keycap_preview(getopt):
    return key.metacluster(key.cluster_keycaps, getopt)


Model = namedtuple('Model', ['name', 'precursor', 'chiral', 'rotation'])


def model_roster(getopt):
    """The central roster of files and the models that go into each."""
    roster = [
        Model('preview-keycap-clusters', build_keycap_preview, False, None),
        Model('case-main', build_keyboard_right, True, None),
    ]
    if getopt('case', 'bottom_plate', 'include'):
        roster.append(Model('bottom-plate-case', bottom.case_positive, True,
                            [0, 180, 0]))
    for style in getopt('keys', 'styles'):
        precursor = (lambda style: lambda g: key.single_cap(g, style))(style)
        roster.append(Model('keycap-' + style, precursor, False, None))
        roster.append(Model('keycap-' + style + '-rotated', precursor, False,
                            [0, 180, 0]))
    return roster


def model_variants(getopt, model):
    """Build one model. Yield file names and shapes, mirroring where chiral."""
    helpers = getopt.helpers
    shape = model.precursor(getopt)
    if model.rotation is not None:
        shape = helpers.rotate(shape, model.rotation)
    if not model.chiral:
        yield model.name, shape
        return
    yield 'right-hand-' + model.name, shape
    yield 'left-hand-' + model.name, helpers.mirror(shape, 'YZ')


def _variant_names(model):
    if model.chiral:
        return ['right-hand-' + model.name, 'left-hand-' + model.name]
    return [model.name]


###############
## Rendering ##
###############

def render_file(renderer, source, target):
    log.info('Rendering %s', target)
    try:
        result = subprocess.run([renderer, '-o', target, source],
                                stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                                universal_newlines=True)
    except OSError as exc:
        raise RenderError(source, None, str(exc)) from exc
    if result.returncode != 0:
        raise RenderError(source, result.returncode, result.stdout)
    return target


def render_all(filepaths, renderer, target_dir):
    """Render scene files to meshes in parallel. Return the number of failures."""
    if not path.isdir(target_dir):
        os.makedirs(target_dir)
    failures = 0
    with ThreadPoolExecutor() as executor:
        futures = {}
        for source in filepaths:
            stem = path.splitext(path.basename(source))[0]
            target = path.join(target_dir, stem + '.stl')
            futures[executor.submit(render_file, renderer, source, target)] = source
        for future, source in futures.items():
            try:
                future.result()
            except RenderError as exc:
                log.error('%s\n%s', exc, exc.output)
                failures += 1
    return failures


def run(opts):
    """Build and write every whitelisted model. Return the number of failures."""
    raws = params.load_configuration(opts['config']['paths'])
    log.debug('Received settings without built-in defaults: %s', raws)
    getopt = build_accessor(raws)
    helpers = getopt.helpers

    base_path = save_path
    if getopt('save_dir') not in ['', None, '.']:
        base_path = path.join(save_path, getopt('save_dir'))
    scad_path = path.join(base_path, 'scad')
    if not path.isdir(scad_path):
        os.makedirs(scad_path)

    whitelist = re.compile(opts['whitelist'])
    failures = 0
    written = []
    for model in model_roster(getopt):
        if not any(whitelist.search(name) for name in _variant_names(model)):
            continue
        try:
            for name, shape in model_variants(getopt, model):
                if not whitelist.search(name):
                    continue
                if shape is None:
                    log.warning('Nothing to write for %s', name)
                    continue
                written.append(helpers.export_file(
                    shape=shape, fname=path.join(scad_path, name)))
        except GeometryError as exc:
            log.error('Failed to build %s: %s', model.name, exc)
            failures += 1

    if opts['render']:
        if getopt('engine') != 'solid':
            log.warning('Rendering is only supported for the solid engine')
        else:
            failures += render_all(written, opts['renderer'],
                                   path.join(base_path, 'stl'))
    return failures
