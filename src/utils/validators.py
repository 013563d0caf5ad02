"""YAML schema validation and config loading.

Provides centralized validation for all YAML inputs using pydantic:
    - Raster schema (raster.v1): screen extent, subsampling config, z-buffer, logging
    - Vector schema (raster_vectors.v1): named triangles with optional expected hits

All entrypoints must load YAML through these validators for fail-fast error
detection with actionable messages (file path, offending keys, expected ranges).
Conversion to the frozen core dataclasses lives in src.rasterizer.loaders
(utils never imports upper layers).

Units:
    - Positions and screen extent: fixed-point integers (scaled by 2**r_shift)
    - Depth: integer, smaller is nearer for the default 'less' depth test
    - Color: integer channels, 0-255 after resolve

Usage:
    from src.utils import validators

    raster_cfg = validators.load_raster_config("configs/raster/default.v1.yaml")
    vectors = validators.load_vectors("ci/golden_tests/vectors/basic.v1.yaml")
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from . import fixed_point, fs


# ============================================================================
# RASTER SCHEMA V1
# ============================================================================

class ScreenV1(BaseModel):
    """Screen extent in fixed-point units."""
    width: int = Field(..., ge=0, description="Screen width (fixed point)")
    height: int = Field(..., ge=0, description="Screen height (fixed point)")


class SubsampleConfigV1(BaseModel):
    """Subsampling grid.

    Either give ``ss_w_lg2`` and ``ss_i`` explicitly, or ``subsamples``
    (per pixel, a power of four) and let both be derived.
    """
    r_shift: int = Field(..., ge=0, le=30, description="Fractional bits of coordinates")
    ss_w_lg2: Optional[int] = Field(None, ge=0, description="log2 of grid fineness")
    ss_i: Optional[int] = Field(None, gt=0, description="Subsample step (fixed point)")
    subsamples: Optional[int] = Field(None, ge=1, description="Subsamples per pixel")

    @model_validator(mode='after')
    def validate_grid(self) -> 'SubsampleConfigV1':
        explicit = self.ss_w_lg2 is not None or self.ss_i is not None
        if self.subsamples is not None and explicit:
            raise ValueError("Give either 'subsamples' or 'ss_w_lg2'/'ss_i', not both")
        if self.subsamples is None and (self.ss_w_lg2 is None or self.ss_i is None):
            raise ValueError("Both 'ss_w_lg2' and 'ss_i' are required without 'subsamples'")
        fixed_point.check_subsample_grid(*self.resolved())
        return self

    def resolved(self) -> Tuple[int, int, int]:
        """(r_shift, ss_w_lg2, ss_i) with ``subsamples`` expanded."""
        if self.subsamples is not None:
            return (self.r_shift,) + fixed_point.subsample_grid(self.r_shift, self.subsamples)
        return self.r_shift, self.ss_w_lg2, self.ss_i


class ZBufferV1(BaseModel):
    """Reference z-buffer settings."""
    clear_depth: Optional[int] = Field(None, description="Initial depth; None = int64 max")
    clear_color: Tuple[int, int, int] = Field((0, 0, 0), description="Initial RGB")
    depth_test: Literal['less', 'less_equal', 'greater', 'always'] = 'less'

    @field_validator('clear_color')
    @classmethod
    def validate_color(cls, v: Tuple[int, int, int]) -> Tuple[int, int, int]:
        for c in v:
            if not (0 <= c <= 255):
                raise ValueError(f"clear_color channels must be in [0, 255], got {v}")
        return v


class LoggingV1(BaseModel):
    """Keyword arguments for logging_config.setup_logging()."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = Field(False, alias="json")
    color: bool = True
    rotate: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        levels = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        if v.upper() not in levels:
            raise ValueError(f"log_level must be one of {levels}, got '{v}'")
        return v.upper()


class RasterV1(BaseModel):
    """Raster run configuration (raster.v1.yaml schema)."""
    schema_version: str = Field("raster.v1", alias="schema", description="Schema version")
    screen: ScreenV1
    config: SubsampleConfigV1
    zbuffer: ZBufferV1 = Field(default_factory=ZBufferV1)
    logging: LoggingV1 = Field(default_factory=LoggingV1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "raster.v1":
            raise ValueError(f"Expected schema 'raster.v1', got '{v}'")
        return v


# ============================================================================
# VECTOR SCHEMA V1
# ============================================================================

class VertexV1(BaseModel):
    """Vertex: fixed-point position, depth and color."""
    x: int
    y: int
    z: int = 0
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)


class TriangleVectorV1(BaseModel):
    """One test vector: a triangle and optionally its golden hit count."""
    name: str = Field(..., min_length=1)
    vertices: List[VertexV1] = Field(..., min_length=3, max_length=3)
    expected_hits: Optional[int] = Field(None, ge=0)


class VectorsFileV1(BaseModel):
    """Container for test vectors (raster_vectors.v1 YAML file)."""
    schema_version: str = Field("raster_vectors.v1", alias="schema")
    raster: Optional[RasterV1] = Field(None, description="Inline raster config")
    vectors: List[TriangleVectorV1] = Field(..., min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "raster_vectors.v1":
            raise ValueError(f"Expected schema 'raster_vectors.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_unique_names(self) -> 'VectorsFileV1':
        seen = set()
        for vec in self.vectors:
            if vec.name in seen:
                raise ValueError(f"Duplicate vector name '{vec.name}'")
            seen.add(vec.name)
        return self


# ============================================================================
# LOADERS
# ============================================================================

def _validate(model: type, data: Any, path: Union[str, Path]):
    if data is None:
        raise ValueError(f"{path}: file is empty")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"{path}: invalid {model.__name__}:\n{e}") from e


def load_raster_config(path: Union[str, Path]) -> RasterV1:
    """Load and validate a raster.v1 YAML file.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    ValueError
        If validation fails (message names the file and offending keys)
    """
    return _validate(RasterV1, fs.load_yaml(path), path)


def load_vectors(path: Union[str, Path]) -> VectorsFileV1:
    """Load and validate a raster_vectors.v1 YAML file."""
    return _validate(VectorsFileV1, fs.load_yaml(path), path)


def vectors_to_dict(vectors: List[TriangleVectorV1]) -> Dict[str, Any]:
    """Serialize vectors back to a raster_vectors.v1 document."""
    return {
        'schema': 'raster_vectors.v1',
        'vectors': [v.model_dump(exclude_none=True) for v in vectors],
    }
