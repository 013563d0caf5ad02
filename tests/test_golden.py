"""Golden hit-count regression tests.

Runs the CI comparison (ci/golden_tests/compare.py) and the rasterize script
(scripts/rasterize.py) against the shipped vector files.

Golden files:
    ci/golden_tests/vectors/*.v1.yaml    # triangles + expected_hits

Usage:
    pytest tests/test_golden.py
    pytest -m golden
"""

import importlib.util
import logging
import logging.handlers
import sys
from pathlib import Path

import pytest
import yaml

from src.utils import fs, hashing, logging_config, validators

pytestmark = pytest.mark.golden

ROOT = Path(__file__).resolve().parents[1]
VECTORS_DIR = ROOT / 'ci' / 'golden_tests' / 'vectors'
BASIC = VECTORS_DIR / 'basic.v1.yaml'


def _load_module(name, path):
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope='module')
def compare():
    return _load_module('golden_compare', ROOT / 'ci' / 'golden_tests' / 'compare.py')


@pytest.fixture(scope='module')
def rasterize_script():
    return _load_module('rasterize_script', ROOT / 'scripts' / 'rasterize.py')


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level, saved_hook = list(root.handlers), root.level, sys.excepthook
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    sys.excepthook = saved_hook
    logging_config.pop_context()
    logging.captureWarnings(False)


# ============================================================================
# COMPARISON
# ============================================================================

@pytest.mark.parametrize("path", sorted(VECTORS_DIR.glob('*.v1.yaml')), ids=lambda p: p.name)
def test_vectors_pass(compare, path):
    report = compare.compare_file(str(path), parity=True)
    failed = [r for r in report['results'] if not r['passed']]
    assert report['passed'], f"Failed vectors: {failed}"


def test_basic_hit_counts(compare):
    report = compare.compare_file(str(BASIC))
    hits = {r['name']: r['hits'] for r in report['results']}
    assert hits['cw_right_400'] == 210
    assert hits['cw_right_200'] == 55
    assert hits['ccw_right_400'] == 0
    assert hits['offscreen_negative'] == 0


def test_mismatch_fails(compare, tmp_path):
    doc = fs.load_yaml(BASIC)
    doc['vectors'][0]['expected_hits'] = 211
    bad = tmp_path / 'bad.v1.yaml'
    fs.atomic_yaml_dump(doc, bad)

    report = compare.compare_file(str(bad))
    assert not report['passed']
    assert [r['passed'] for r in report['results']][0] is False
    assert compare.main(['--vectors', str(bad), '--log-level', 'WARNING']) == 1


def test_missing_expected_fails(compare, tmp_path):
    doc = fs.load_yaml(BASIC)
    del doc['vectors'][0]['expected_hits']
    path = tmp_path / 'noexp.v1.yaml'
    fs.atomic_yaml_dump(doc, path)
    assert not compare.compare_file(str(path))['passed']


def test_main_writes_report(compare, tmp_path):
    report_path = tmp_path / 'report.yaml'
    code = compare.main(['--all', '--parity', '--report', str(report_path), '--log-level', 'WARNING'])
    assert code == 0
    report = yaml.safe_load(report_path.read_text())
    assert report['passed'] is True
    assert report['files']


def test_regenerate(compare, tmp_path):
    doc = fs.load_yaml(BASIC)
    for vec in doc['vectors']:
        vec.pop('expected_hits', None)
    src = tmp_path / 'fresh.v1.yaml'
    fs.atomic_yaml_dump(doc, src)

    out = tmp_path / 'regen.v1.yaml'
    compare.regenerate(str(src), str(out))
    regen = validators.load_vectors(out)
    assert {v.name: v.expected_hits for v in regen.vectors} == {
        v.name: v.expected_hits for v in validators.load_vectors(BASIC).vectors
    }
    assert compare.compare_file(str(out))['passed']


# ============================================================================
# RASTERIZE SCRIPT
# ============================================================================

def test_rasterize_main_outputs(rasterize_script, tmp_path):
    summary = rasterize_script.rasterize_main(str(BASIC), output_dir=str(tmp_path))

    assert summary['hits']['cw_right_400'] == 210
    assert summary['total_hits'] == 265
    zb = summary['zbuffer']
    assert zb['writes'] + zb['rejected'] + zb['dropped'] == summary['total_hits']

    image_path = Path(summary['outputs']['image'])
    summary_path = Path(summary['outputs']['summary'])
    assert image_path.name == 'basic_resolved.png'
    assert image_path.exists() and summary_path.exists()
    assert fs.load_yaml(summary_path)['total_hits'] == 265

    img = fs.load_image(image_path)
    assert img.shape == (37, 50, 3)
    # cw_right_200 (z=5, green) is nearer than cw_right_400 (z=10, red) where they overlap
    assert img[0, 0].tolist() == [0, 255, 0]
    assert img[0, 15].tolist() == [255, 0, 0]
    assert img[0, 25].tolist() == [0, 0, 0]


def test_rasterize_main_deterministic(rasterize_script):
    a = rasterize_script.rasterize_main(str(BASIC))
    b = rasterize_script.rasterize_main(str(BASIC))
    assert a['zbuffer']['depth_sha256'] == b['zbuffer']['depth_sha256']
    assert a['zbuffer']['color_sha256'] == b['zbuffer']['color_sha256']
    assert a['outputs'] == {}


def test_rasterize_coverage_only(rasterize_script, tmp_path):
    summary = rasterize_script.rasterize_main(str(BASIC), output_dir=str(tmp_path), coverage_only=True)
    assert summary['zbuffer'] is None
    assert 'image' not in summary['outputs']
    assert summary['total_hits'] == 265


def test_rasterize_with_external_config(rasterize_script, compare, tmp_path):
    doc = fs.load_yaml(BASIC)
    raster = doc.pop('raster')
    vec_path = tmp_path / 'bare.v1.yaml'
    cfg_path = tmp_path / 'raster.v1.yaml'
    fs.atomic_yaml_dump(doc, vec_path)
    fs.atomic_yaml_dump(raster, cfg_path)

    with pytest.raises(ValueError, match="no inline 'raster' block"):
        rasterize_script.rasterize_main(str(vec_path))

    summary = rasterize_script.rasterize_main(str(vec_path), config_path=str(cfg_path))
    assert summary['hits']['cw_right_200'] == 55

    with pytest.raises(ValueError, match="no inline 'raster' block"):
        compare.compare_file(str(vec_path))
    assert compare.compare_file(str(vec_path), str(cfg_path))['passed']


def test_rasterize_provenance(rasterize_script, tmp_path):
    summary = rasterize_script.rasterize_main(str(BASIC), output_dir=str(tmp_path))
    prov = summary['provenance']
    assert prov['vectors_sha256'] == hashing.sha256_file(BASIC)
    assert prov['config_sha256'] == hashing.hash_dict({'r_shift': 4, 'ss_w_lg2': 0, 'ss_i': 16})
    assert fs.load_yaml(summary['outputs']['summary'])['provenance'] == prov


def test_rasterize_preloaded_run(rasterize_script, monkeypatch):
    loaded = rasterize_script.loaders.load_run(str(BASIC))

    def fail(*args, **kwargs):
        raise AssertionError("vector file reloaded")

    monkeypatch.setattr(validators, 'load_vectors', fail)
    summary = rasterize_script.rasterize_main(str(BASIC), loaded=loaded)
    assert summary['total_hits'] == 265


def test_rasterize_cli_uses_config_logging(rasterize_script, tmp_path, monkeypatch, restore_logging):
    doc = fs.load_yaml(BASIC)
    raster = doc.pop('raster')
    log_path = tmp_path / 'logs' / 'raster.log'
    raster['logging'] = {
        'log_level': 'INFO',
        'log_file': str(log_path),
        'color': False,
        'rotate': {'mode': 'size', 'max_bytes': 1000, 'backup_count': 2},
    }
    vec_path = tmp_path / 'bare.v1.yaml'
    cfg_path = tmp_path / 'raster.v1.yaml'
    fs.atomic_yaml_dump(doc, vec_path)
    fs.atomic_yaml_dump(raster, cfg_path)

    loads = []
    real_load_vectors = validators.load_vectors

    def counting_load_vectors(path):
        loads.append(path)
        return real_load_vectors(path)

    monkeypatch.setattr(validators, 'load_vectors', counting_load_vectors)

    code = rasterize_script.main(['--vectors', str(vec_path), '--config', str(cfg_path),
                                  '--coverage-only'])
    assert code == 0
    assert len(loads) == 1

    rotating = [h for h in logging.getLogger().handlers
                if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(rotating) == 1
    assert rotating[0].maxBytes == 1000
    assert rotating[0].backupCount == 2
    assert rotating[0].baseFilename == str(log_path)
    rotating[0].flush()
    assert "265 hits" in log_path.read_text()
