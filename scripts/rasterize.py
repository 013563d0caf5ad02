"""Rasterize a vector file into the reference z-buffer.

Runs the reference pipeline over every triangle in a raster_vectors.v1 file:
    1. Load and validate vectors (and the raster config, inline or --config)
    2. Create a ZBuffer for the screen/config
    3. rasterize_triangle() once per triangle, in file order
    4. Log per-triangle hit counts and z-buffer statistics
    5. Optionally save the resolved image and a YAML summary with buffer hashes

Refactored architecture:
    - rasterize_main(vectors_path, config_path, output_dir, loaded=None) → dict
        * Callable function (used by tests and CI)
    - CLI entry point: if __name__ == "__main__"

CLI:
    python scripts/rasterize.py --vectors ci/golden_tests/vectors/basic.v1.yaml
    python scripts/rasterize.py --vectors my.v1.yaml --config configs/raster/default.v1.yaml \\
                                --output outputs/raster/my/
    python scripts/rasterize.py --vectors my.v1.yaml --coverage-only

Output structure:
    <output_dir>/
        <stem>_resolved.png
        <stem>_summary.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.rasterizer import loaders, rasterize_triangle
from src.utils import fs, hashing, logging_config, validators

logger = logging.getLogger(__name__)


def rasterize_main(
    vectors_path: str,
    config_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    coverage_only: bool = False,
    loaded: Optional[Tuple[validators.VectorsFileV1, validators.RasterV1]] = None,
) -> Dict[str, Any]:
    """Rasterize every vector and return a summary.

    Parameters
    ----------
    vectors_path : str
        raster_vectors.v1 YAML file
    config_path : str, optional
        raster.v1 YAML file; defaults to the vector file's inline block
    output_dir : str, optional
        Where to write the resolved PNG and summary YAML; None writes nothing
    coverage_only : bool
        Count hits without a z-buffer (no image, no buffer hashes)
    loaded : (VectorsFileV1, RasterV1), optional
        Result of loaders.load_run() for these paths; skips reloading

    Returns
    -------
    dict
        {hits: {name: int}, total_hits, zbuffer: {...} or None, outputs: {...},
        provenance: {vectors_sha256, config_sha256}}
    """
    vectors, run = loaded if loaded is not None else loaders.load_run(vectors_path, config_path)
    screen, cfg = loaders.raster_setup(run)
    zbuf = None if coverage_only else loaders.zbuffer_from_schema(run.zbuffer, screen, cfg)

    logger.info(
        f"Rasterizing {len(vectors.vectors)} triangles: screen={screen.width}x{screen.height} "
        f"r_shift={cfg.r_shift} ss_w_lg2={cfg.ss_w_lg2} ss_i={cfg.ss_i}"
    )

    hits = {}
    for name, tri in loaders.named_triangles(vectors):
        logging_config.push_context(vector=name)
        try:
            hits[name] = rasterize_triangle(tri, zbuf, screen, cfg)
            logger.info(f"{hits[name]} hits")
        finally:
            logging_config.pop_context(keys=["vector"])

    summary: Dict[str, Any] = {
        'vectors': str(vectors_path),
        'config': {'r_shift': cfg.r_shift, 'ss_w_lg2': cfg.ss_w_lg2, 'ss_i': cfg.ss_i},
        'screen': {'width': screen.width, 'height': screen.height},
        'hits': hits,
        'total_hits': sum(hits.values()),
        'zbuffer': None,
        'outputs': {},
    }
    summary['provenance'] = {
        'vectors_sha256': hashing.sha256_file(vectors_path),
        'config_sha256': hashing.hash_dict(summary['config']),
    }

    if zbuf is not None:
        summary['zbuffer'] = {
            **zbuf.stats(),
            'depth_sha256': hashing.sha256_array(zbuf.depth),
            'color_sha256': hashing.sha256_array(zbuf.color),
        }
        if zbuf.dropped:
            logger.warning(f"{zbuf.dropped} fragments fell outside the pixel grid")

    if output_dir is not None:
        out = fs.ensure_dir(output_dir)
        stem = Path(vectors_path).name.split('.')[0]
        if zbuf is not None:
            image_path = out / f"{stem}_resolved.png"
            fs.atomic_save_image(zbuf.resolve(), image_path)
            summary['outputs']['image'] = str(image_path)
        summary_path = out / f"{stem}_summary.yaml"
        summary['outputs']['summary'] = str(summary_path)
        fs.atomic_yaml_dump(summary, summary_path)
        logger.info(f"Wrote {summary_path}")

    logger.info(f"Total: {summary['total_hits']} hits")
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Rasterize triangle vectors with the reference model")
    parser.add_argument('--vectors', required=True, help="raster_vectors.v1 YAML file")
    parser.add_argument('--config', default=None, help="raster.v1 YAML file (overrides inline config)")
    parser.add_argument('--output', default=None, help="Output directory for image and summary")
    parser.add_argument('--coverage-only', action='store_true', help="Count hits without a z-buffer")
    parser.add_argument('--log-level', default=None, help="Overrides the config's logging.log_level")
    args = parser.parse_args(argv)

    loaded = loaders.load_run(args.vectors, args.config)
    log_cfg = loaded[1].logging
    logging_config.setup_logging(
        log_level=args.log_level or log_cfg.log_level,
        log_file=log_cfg.log_file,
        json=log_cfg.json_format,
        color=log_cfg.color,
        rotate=log_cfg.rotate,
        context={'app': 'rasterize'},
    )
    logging_config.install_excepthook()

    rasterize_main(args.vectors, args.config, args.output, args.coverage_only, loaded=loaded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
