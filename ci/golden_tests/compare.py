"""Golden test comparison script for CI.

Checks the reference rasterizer against golden hit counts:
    - Loads a raster_vectors.v1 file (triangles + expected_hits)
    - Rasterizes each triangle with the scalar reference path
    - Optionally cross-checks the numpy coverage path (--parity)
    - Reports pass/fail per vector and writes an optional YAML report

CLI:
    python ci/golden_tests/compare.py --vectors ci/golden_tests/vectors/basic.v1.yaml
    python ci/golden_tests/compare.py --all --parity
    python ci/golden_tests/compare.py --vectors new.v1.yaml --regen new.v1.yaml

Regeneration (--regen PATH) writes the vectors back with expected_hits set
to the current scalar result. Only use it after an intended behaviour change
has been confirmed against the hardware.

Expected format (ci/golden_tests/vectors/*.v1.yaml):
    schema: raster_vectors.v1
    raster:
      schema: raster.v1
      screen: {width: 800, height: 600}
      config: {r_shift: 4, ss_w_lg2: 0, ss_i: 16}
    vectors:
      - name: cw_right_400
        vertices: [{x: 0, y: 0}, {x: 0, y: 400}, {x: 400, y: 0}]
        expected_hits: 210

Exit codes:
    0: All vectors passed
    1: One or more vectors failed (or had no expected value)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from src.rasterizer import coverage_mask, loaders, rasterize_triangle
from src.utils import fs, logging_config, validators

logger = logging.getLogger(__name__)

VECTORS_DIR = Path(__file__).parent / 'vectors'


def compare_file(
    vectors_path: str,
    config_path: Optional[str] = None,
    parity: bool = False,
) -> Dict[str, Any]:
    """Rasterize every vector in a file and compare with expected_hits.

    Returns
    -------
    dict
        {file, passed: bool, results: [{name, hits, expected, passed, ...}]}
    """
    vectors, run = loaders.load_run(vectors_path, config_path)
    screen, cfg = loaders.raster_setup(run)

    results: List[Dict[str, Any]] = []
    for vec in vectors.vectors:
        tri = loaders.triangle_from_schema(vec)
        hits = rasterize_triangle(tri, None, screen, cfg)

        result: Dict[str, Any] = {
            'name': vec.name,
            'hits': hits,
            'expected': vec.expected_hits,
        }
        ok = vec.expected_hits is not None and hits == vec.expected_hits

        if parity:
            vec_hits = coverage_mask(tri, screen, cfg).hit_count
            result['vectorized_hits'] = vec_hits
            ok = ok and vec_hits == hits

        result['passed'] = ok
        results.append(result)

        status = "PASS" if ok else "FAIL"
        logger.info(f"[{status}] {vec.name}: hits={hits} expected={vec.expected_hits}")

    return {
        'file': str(vectors_path),
        'passed': all(r['passed'] for r in results),
        'results': results,
    }


def regenerate(vectors_path: str, out_path: str, config_path: Optional[str] = None) -> None:
    """Write ``vectors_path`` to ``out_path`` with expected_hits refreshed."""
    vectors = validators.load_vectors(vectors_path)
    report = compare_file(vectors_path, config_path)
    by_name = {r['name']: r['hits'] for r in report['results']}

    updated = [v.model_copy(update={'expected_hits': by_name[v.name]}) for v in vectors.vectors]
    doc = validators.vectors_to_dict(updated)
    if vectors.raster is not None:
        doc['raster'] = vectors.raster.model_dump(mode='json', by_alias=True, exclude_none=True)
    fs.atomic_yaml_dump(doc, out_path)
    logger.info(f"Regenerated {len(updated)} vectors → {out_path}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Compare rasterizer hit counts with golden values")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--vectors', help="raster_vectors.v1 YAML file")
    group.add_argument('--all', action='store_true', help=f"All *.v1.yaml files in {VECTORS_DIR}")
    parser.add_argument('--config', default=None, help="raster.v1 YAML (overrides inline config)")
    parser.add_argument('--parity', action='store_true', help="Also check the numpy coverage path")
    parser.add_argument('--report', default=None, help="Write YAML report to this path")
    parser.add_argument('--regen', default=None, metavar='PATH',
                        help="Write vectors with refreshed expected_hits to PATH (single file only)")
    parser.add_argument('--log-level', default='INFO')
    args = parser.parse_args(argv)

    logging_config.setup_logging(log_level=args.log_level, context={'app': 'golden'})

    if args.regen:
        if args.all:
            parser.error("--regen needs a single --vectors file")
        regenerate(args.vectors, args.regen, args.config)
        return 0

    paths = sorted(VECTORS_DIR.glob('*.v1.yaml')) if args.all else [Path(args.vectors)]
    reports = []
    for path in paths:
        logging_config.push_context(file=path.name)
        try:
            reports.append(compare_file(str(path), args.config, args.parity))
        finally:
            logging_config.pop_context(keys=['file'])

    passed = all(r['passed'] for r in reports)
    n_vec = sum(len(r['results']) for r in reports)
    n_fail = sum(not res['passed'] for r in reports for res in r['results'])
    logger.info(f"{n_vec - n_fail}/{n_vec} vectors passed across {len(reports)} files")

    if args.report:
        fs.atomic_yaml_dump({'passed': passed, 'files': reports}, args.report)

    return 0 if passed else 1


if __name__ == "__main__":
    sys.exit(main())
