import json
import subprocess

import pytest

from dmote import dactyl_manuform
from dmote.dactyl_manuform import Model
from dmote.errors import RenderError


def names(roster):
    return [model.name for model in roster]


def test_roster_of_a_default_build(configure):
    getopt = configure()
    assert names(dactyl_manuform.model_roster(getopt)) == [
        'preview-keycap-clusters', 'case-main',
        'keycap-default', 'keycap-default-rotated']


def test_roster_with_bottom_plate_and_styles(configure):
    getopt = configure(
        keys={'styles': {'default': {}, 'wide': {'unit_size': [2, 1]}}},
        case={'bottom_plate': {'include': True}})
    assert names(dactyl_manuform.model_roster(getopt)) == [
        'preview-keycap-clusters', 'case-main', 'bottom-plate-case',
        'keycap-default', 'keycap-default-rotated',
        'keycap-wide', 'keycap-wide-rotated']


def test_chiral_models_come_in_pairs(configure):
    getopt = configure()
    model = Model('thing', lambda g: g.helpers.sphere(1), True, None)
    variants = list(dactyl_manuform.model_variants(getopt, model))
    assert [name for name, _ in variants] == ['right-hand-thing', 'left-hand-thing']
    assert variants[0][1].name == 'sphere'
    assert variants[1][1].name == 'mirror'


def test_models_are_rotated_for_printing(configure):
    getopt = configure()
    model = Model('thing', lambda g: g.helpers.sphere(1), False, [0, 180, 0])
    [(name, shape)] = dactyl_manuform.model_variants(getopt, model)
    assert name == 'thing'
    assert shape.name == 'rotate'
    assert shape.params['a'] == [0, 180, 0]


def test_keyboard_with_every_feature(configure, node_names):
    getopt = configure(
        keys={'preview': True,
              'styles': {'default': {'switch_type': 'mx', 'skirt_length': 8}}},
        key_clusters={'main': {
            'matrix_columns': [{'rows_above_home': 1, 'rows_below_home': 1},
                               {'rows_above_home': 1}],
            'aliases': {'home': [0, 0]}}},
        by_key={'parameters': {'wall': {
            'thickness': 2,
            'north': {'perpendicular': -4}, 'east': {'perpendicular': -4},
            'south': {'perpendicular': -4}, 'west': {'perpendicular': -4}}}},
        case={
            'bottom_plate': {'include': True, 'preview': True},
            'leds': {'include': True, 'amount': 2, 'housing_size': 3,
                     'emitter_diameter': 2, 'interval': 6},
            'tweaks': [{'hull_around': [['home', 'WSW'], ['home', 'WNW']],
                        'at_ground': True}],
            'foot_plates': {'include': True, 'polygons': [{'points': [
                {'anchor': 'origin'}, {'anchor': 'origin', 'offset': [5, 0]},
                {'anchor': 'home', 'corner': 'NNE'}]}]},
        })
    shape = dactyl_manuform.build_keyboard_right(getopt)
    found = set(node_names(shape))
    assert {'difference', 'intersection', 'hull', 'linear_extrude'} <= found
    assert 'cylinder' in found  # Nubs and LED emitters.


def write_config(tmp_path, document):
    filepath = tmp_path / 'config.json'
    filepath.write_text(json.dumps(document))
    return str(filepath)


def run_options(config_path, whitelist='', render=False):
    return {'config': {'paths': [config_path]}, 'whitelist': whitelist,
            'render': render, 'renderer': 'openscad'}


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    target = tmp_path / 'things'
    monkeypatch.setattr(dactyl_manuform, 'save_path', str(target))
    return target


def test_run_writes_whitelisted_models(tmp_path, output_dir):
    config = write_config(tmp_path, {'save_dir': 'pad'})
    failures = dactyl_manuform.run(run_options(config, whitelist='^keycap-default$'))
    assert failures == 0
    written = sorted(path.name for path in (output_dir / 'pad' / 'scad').iterdir())
    assert written == ['keycap-default.scad']


def test_run_reports_a_broken_model_and_goes_on(tmp_path, output_dir):
    config = write_config(tmp_path, {'case': {'foot_plates': {
        'include': True, 'polygons': [{'points': [{'anchor': 'origin'}]}]}}})
    failures = dactyl_manuform.run(run_options(config, whitelist='case-main|^keycap'))
    assert failures == 1
    written = sorted(path.name for path in (output_dir / 'scad').iterdir())
    assert written == ['keycap-default-rotated.scad', 'keycap-default.scad']


def test_render_failures_are_counted_per_file(tmp_path, output_dir, monkeypatch):
    def fake_run(command, **kwargs):
        source = command[-1]
        returncode = 1 if 'rotated' in source else 0
        return subprocess.CompletedProcess(command, returncode, stdout='oops')

    monkeypatch.setattr(dactyl_manuform.subprocess, 'run', fake_run)
    config = write_config(tmp_path, {})
    failures = dactyl_manuform.run(run_options(config, whitelist='keycap',
                                               render=True))
    assert failures == 1


def test_empty_configuration_builds_a_single_key():
    getopt = dactyl_manuform.build_accessor({})
    properties = getopt('derived', 'by_cluster', 'main')
    assert [tuple(c) for c in properties['key_coordinates']] == [(0, 0)]
    assert dactyl_manuform.build_keyboard_right(getopt) is not None


def test_missing_renderer_is_a_render_failure(tmp_path, output_dir, monkeypatch):
    def no_renderer(command, **kwargs):
        raise FileNotFoundError(2, 'No such file or directory', command[0])

    monkeypatch.setattr(dactyl_manuform.subprocess, 'run', no_renderer)
    config = write_config(tmp_path, {})
    failures = dactyl_manuform.run(run_options(config, whitelist='^keycap-default$',
                                               render=True))
    assert failures == 1


def test_render_error_without_exit_status(monkeypatch):
    def no_renderer(command, **kwargs):
        raise FileNotFoundError(2, 'No such file or directory', command[0])

    monkeypatch.setattr(dactyl_manuform.subprocess, 'run', no_renderer)
    with pytest.raises(RenderError) as info:
        dactyl_manuform.render_file('openscad', 'a.scad', 'a.stl')
    assert info.value.returncode is None
