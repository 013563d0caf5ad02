"""Convert validated YAML schemas into rasterizer primitives.

Usage:
    from src.rasterizer import loaders
    from src.utils import validators

    run = validators.load_raster_config("configs/raster/default.v1.yaml")
    screen, cfg = loaders.screen_from_schema(run.screen), loaders.config_from_schema(run.config)
    zbuf = loaders.zbuffer_from_schema(run.zbuffer, screen, cfg)

    vectors, run = loaders.load_run("my.v1.yaml")   # inline raster block
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from src.utils import validators

from .primitives import RasterConfig, Screen, Triangle, Vertex
from .zbuffer import CLEAR_DEPTH_MAX, ZBuffer


def screen_from_schema(s: validators.ScreenV1) -> Screen:
    return Screen(width=s.width, height=s.height)


def config_from_schema(c: validators.SubsampleConfigV1) -> RasterConfig:
    r_shift, ss_w_lg2, ss_i = c.resolved()
    return RasterConfig(r_shift=r_shift, ss_w_lg2=ss_w_lg2, ss_i=ss_i)


def vertex_from_schema(v: validators.VertexV1) -> Vertex:
    return Vertex(x=v.x, y=v.y, z=v.z, r=v.r, g=v.g, b=v.b)


def triangle_from_schema(t: validators.TriangleVectorV1) -> Triangle:
    return Triangle(*(vertex_from_schema(v) for v in t.vertices))


def zbuffer_from_schema(z: validators.ZBufferV1, screen: Screen, config: RasterConfig) -> ZBuffer:
    clear_depth = CLEAR_DEPTH_MAX if z.clear_depth is None else z.clear_depth
    return ZBuffer(
        screen,
        config,
        clear_depth=clear_depth,
        clear_color=z.clear_color,
        depth_test=z.depth_test,
    )


def raster_setup(run: validators.RasterV1) -> Tuple[Screen, RasterConfig]:
    """(Screen, RasterConfig) for a validated raster.v1 document."""
    return screen_from_schema(run.screen), config_from_schema(run.config)


def named_triangles(vectors: validators.VectorsFileV1) -> List[Tuple[str, Triangle]]:
    """[(name, Triangle)] in file order."""
    return [(vec.name, triangle_from_schema(vec)) for vec in vectors.vectors]


def load_run(
    vectors_path: Union[str, Path],
    config_path: Optional[Union[str, Path]] = None,
) -> Tuple[validators.VectorsFileV1, validators.RasterV1]:
    """Load a vector file and the raster config it runs under.

    ``config_path`` overrides the vector file's inline ``raster`` block.

    Raises
    ------
    ValueError
        If neither a config file nor an inline block is available, or if
        either document fails validation
    """
    vectors = validators.load_vectors(vectors_path)
    if config_path is not None:
        run = validators.load_raster_config(config_path)
    elif vectors.raster is not None:
        run = vectors.raster
    else:
        raise ValueError(
            f"{vectors_path} has no inline 'raster' block; pass a raster.v1 config"
        )
    return vectors, run
