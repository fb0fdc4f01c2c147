# ============================================================================
# GRID MODEL
# ============================================================================
# STATUS: Core - Immutable gridded field with spatial indexing
# PURPOSE: Map (row, col) to cell rectangles and serve per-layer cell values
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: Bounds, GridWindow, Grid
# DEPENDENCIES: numpy
# ============================================================================
"""
Grid model.

A Grid is a regular north-up raster: `origin` is the top-left corner, row 0
is the northernmost row and rows increase southwards. Cell (r, c) spans

    x in [x0 + c*dx, x0 + (c+1)*dx]
    y in [y0 - (r+1)*dy, y0 - r*dy]

Layers are stored as one read-only float64 array of shape
(n_layers, rows, cols). Missing cells are NaN; a numeric nodata sentinel
given at construction is converted to NaN.

Usage:
    grid = Grid(origin=(0.0, 2.0), cell_size=(1.0, 1.0), layers=[[1, 2], [3, 4]])
    grid.cell_bounds(0, 0)          # Bounds(minx=0.0, miny=1.0, maxx=1.0, maxy=2.0)
    grid.value_at(0, 1, 1)          # 4.0
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from gridzonal.exceptions import GridValidationError, OutOfBoundsError


class Bounds(NamedTuple):
    """Axis-aligned rectangle (minx, miny, maxx, maxy)."""
    minx: float
    miny: float
    maxx: float
    maxy: float

    @property
    def width(self) -> float:
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        return self.maxy - self.miny

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self)

    def intersects(self, other: 'Bounds') -> bool:
        """Closed-rectangle intersection (shared edges count)."""
        return not (
            self.maxx < other.minx or other.maxx < self.minx or
            self.maxy < other.miny or other.maxy < self.miny
        )

    def intersection(self, other: 'Bounds') -> Optional['Bounds']:
        """Overlapping rectangle, or None when the rectangles are disjoint."""
        if not self.intersects(other):
            return None
        return Bounds(
            max(self.minx, other.minx),
            max(self.miny, other.miny),
            min(self.maxx, other.maxx),
            min(self.maxy, other.maxy)
        )


class GridWindow(NamedTuple):
    """Half-open block of cells [row_start, row_stop) x [col_start, col_stop)."""
    row_start: int
    row_stop: int
    col_start: int
    col_stop: int

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.row_stop - self.row_start, self.col_stop - self.col_start)

    @property
    def size(self) -> int:
        rows, cols = self.shape
        return rows * cols

    def indices(self) -> Tuple[np.ndarray, np.ndarray]:
        """Row and column index arrays of every cell in the window, row-major."""
        rr, cc = np.meshgrid(
            np.arange(self.row_start, self.row_stop),
            np.arange(self.col_start, self.col_stop),
            indexing="ij"
        )
        return rr.ravel(), cc.ravel()


LayerInput = Union[np.ndarray, Sequence[Sequence[float]], Sequence[np.ndarray]]


class Grid:
    """
    Immutable gridded field with one or more layers.

    Args:
        origin: (x, y) of the top-left corner
        cell_size: (dx, dy), both > 0
        layers: 2-D array (single layer), 3-D array (layers, rows, cols)
                or a sequence of equally shaped 2-D arrays
        layer_names: One label per layer (default layer_1..layer_n)
        nodata: Sentinel value marking missing cells
        crs: Spatial reference label, carried for diagnostics only

    Raises:
        GridValidationError: Invalid cell size, shape or layer names
    """

    def __init__(
        self,
        origin: Tuple[float, float],
        cell_size: Tuple[float, float],
        layers: LayerInput,
        layer_names: Optional[Sequence[str]] = None,
        nodata: Optional[float] = None,
        crs: Optional[str] = None
    ):
        x0, y0 = (float(v) for v in origin)
        dx, dy = (float(v) for v in cell_size)
        if not (math.isfinite(x0) and math.isfinite(y0)):
            raise GridValidationError(f"Grid origin must be finite, got {origin}")
        if not (math.isfinite(dx) and math.isfinite(dy)) or dx <= 0 or dy <= 0:
            raise GridValidationError(f"Cell size must be strictly positive, got {cell_size}")

        data = self._stack_layers(layers)
        if nodata is not None and not math.isnan(nodata):
            data[data == nodata] = np.nan
        data.flags.writeable = False

        n_layers = data.shape[0]
        if layer_names is None:
            names = tuple(f"layer_{i + 1}" for i in range(n_layers))
        else:
            names = tuple(str(name) for name in layer_names)
            if len(names) != n_layers:
                raise GridValidationError(
                    f"Got {len(names)} layer names for {n_layers} layers"
                )
            if len(set(names)) != len(names):
                raise GridValidationError(f"Layer names must be unique: {list(names)}")

        self._origin = (x0, y0)
        self._cell_size = (dx, dy)
        self._data = data
        self._layer_names = names
        self._nodata = nodata
        self._crs = crs

    @staticmethod
    def _stack_layers(layers: LayerInput) -> np.ndarray:
        """Normalise layer input into a fresh (n_layers, rows, cols) float64 array."""
        if isinstance(layers, np.ndarray):
            arr = layers
        else:
            items = [np.ma.filled(np.ma.asarray(layer, dtype=np.float64), np.nan) for layer in layers]
            if not items:
                raise GridValidationError("Grid needs at least one layer")
            if items[0].ndim == 1:
                # Plain nested list: a single 2-D layer
                if len({item.shape for item in items}) != 1:
                    raise GridValidationError("Rows of a nested-list layer must have equal length")
                arr = np.stack(items)
            else:
                shapes = {item.shape for item in items}
                if len(shapes) != 1 or items[0].ndim != 2:
                    raise GridValidationError(
                        f"All layers must be 2-D with identical dimensions, got shapes {sorted(shapes)}"
                    )
                arr = np.stack(items)

        if np.ma.isMaskedArray(arr):
            arr = np.ma.filled(arr.astype(np.float64), np.nan)

        if arr.ndim == 2:
            arr = arr[np.newaxis, :, :]
        if arr.ndim != 3:
            raise GridValidationError(f"Layers must be 2-D or 3-D, got {arr.ndim} dimensions")
        if min(arr.shape) < 1:
            raise GridValidationError(f"Grid dimensions must be at least 1, got {arr.shape}")

        return np.array(arr, dtype=np.float64, copy=True)

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def origin(self) -> Tuple[float, float]:
        return self._origin

    @property
    def cell_size(self) -> Tuple[float, float]:
        return self._cell_size

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self._data.shape[1], self._data.shape[2])

    @property
    def rows(self) -> int:
        return self._data.shape[1]

    @property
    def cols(self) -> int:
        return self._data.shape[2]

    @property
    def n_layers(self) -> int:
        return self._data.shape[0]

    @property
    def layer_names(self) -> Tuple[str, ...]:
        return self._layer_names

    @property
    def layers(self) -> np.ndarray:
        """Read-only (n_layers, rows, cols) array; missing cells are NaN."""
        return self._data

    @property
    def nodata(self) -> Optional[float]:
        return self._nodata

    @property
    def crs(self) -> Optional[str]:
        return self._crs

    @property
    def cell_area(self) -> float:
        return self._cell_size[0] * self._cell_size[1]

    @property
    def extent(self) -> Bounds:
        x0, y0 = self._origin
        dx, dy = self._cell_size
        return Bounds(x0, y0 - self.rows * dy, x0 + self.cols * dx, y0)

    # ========================================================================
    # INDEX CHECKS
    # ========================================================================

    def _check_cell(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfBoundsError(
                f"Cell ({row}, {col}) outside grid of {self.rows} rows x {self.cols} cols"
            )

    def _check_layer(self, layer_index: int) -> None:
        if not 0 <= layer_index < self.n_layers:
            raise OutOfBoundsError(
                f"Layer {layer_index} outside grid with {self.n_layers} layers"
            )

    def _check_indices(self, rows: np.ndarray, cols: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        rows = np.asarray(rows, dtype=np.intp)
        cols = np.asarray(cols, dtype=np.intp)
        if rows.shape != cols.shape:
            raise OutOfBoundsError(f"Row/col index arrays differ in shape: {rows.shape} vs {cols.shape}")
        if rows.size and (
            rows.min() < 0 or rows.max() >= self.rows or
            cols.min() < 0 or cols.max() >= self.cols
        ):
            raise OutOfBoundsError(
                f"Cell indices outside grid of {self.rows} rows x {self.cols} cols"
            )
        return rows, cols

    # ========================================================================
    # QUERIES
    # ========================================================================

    def cell_bounds(self, row: int, col: int) -> Bounds:
        """Bounding rectangle of cell (row, col)."""
        self._check_cell(row, col)
        x0, y0 = self._origin
        dx, dy = self._cell_size
        maxy = y0 - row * dy
        minx = x0 + col * dx
        return Bounds(minx, maxy - dy, minx + dx, maxy)

    def value_at(self, layer_index: int, row: int, col: int) -> Optional[float]:
        """Cell value, or None when the cell is missing."""
        self._check_layer(layer_index)
        self._check_cell(row, col)
        value = self._data[layer_index, row, col]
        return None if np.isnan(value) else float(value)

    def window_for_bounds(self, bounds: Bounds) -> Optional[GridWindow]:
        """
        Cells whose rectangles overlap `bounds` with positive area.

        Broad-phase pruning only: the window may include a cell whose
        rectangle merely touches `bounds` after floating-point rounding.

        Returns:
            GridWindow, or None when `bounds` does not overlap the grid extent
        """
        bounds = Bounds(*bounds)
        if not bounds.is_finite:
            return None
        clipped = bounds.intersection(self.extent)
        if clipped is None or clipped.width <= 0 or clipped.height <= 0:
            return None

        x0, y0 = self._origin
        dx, dy = self._cell_size
        col_start = max(int(math.floor((clipped.minx - x0) / dx)), 0)
        col_stop = min(int(math.ceil((clipped.maxx - x0) / dx)), self.cols)
        row_start = max(int(math.floor((y0 - clipped.maxy) / dy)), 0)
        row_stop = min(int(math.ceil((y0 - clipped.miny) / dy)), self.rows)

        if col_start >= col_stop or row_start >= row_stop:
            return None
        return GridWindow(row_start, row_stop, col_start, col_stop)

    def cell_centers(self, rows: np.ndarray, cols: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """x and y coordinates of the centres of the given cells."""
        rows, cols = self._check_indices(rows, cols)
        x0, y0 = self._origin
        dx, dy = self._cell_size
        return x0 + (cols + 0.5) * dx, y0 - (rows + 0.5) * dy

    def cell_rectangles(
        self,
        rows: np.ndarray,
        cols: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """minx, miny, maxx, maxy arrays of the given cells."""
        rows, cols = self._check_indices(rows, cols)
        x0, y0 = self._origin
        dx, dy = self._cell_size
        minx = x0 + cols * dx
        maxy = y0 - rows * dy
        return minx, maxy - dy, minx + dx, maxy

    def layer_values(self, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        """Values of the given cells for every layer, shape (n_layers, n_cells)."""
        rows, cols = self._check_indices(rows, cols)
        return self._data[:, rows, cols]

    def __repr__(self) -> str:
        return (
            f"Grid(origin={self._origin}, cell_size={self._cell_size}, "
            f"dimensions={self.dimensions}, layers={self.n_layers})"
        )
