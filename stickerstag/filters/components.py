# StickerStag Filters - Connected Components
"""
Silhouette cleanup: keep the dominant connected blob of a cutout.

After background removal a cutout usually still carries stray dots, stipple and
antialiasing specks. These filters label the 8-connected foreground
components, keep the largest one and despeckle its edge.

Labeling uses an explicit queue rather than recursion so large images can not
exhaust the interpreter stack.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging

import numpy as np
from scipy import ndimage

from stickerstag.pixel_buffer import Mask

logger = logging.getLogger(__name__)

_NEIGHBORS_8 = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))


@dataclass
class ComponentLabeling:
    """Component id per pixel (0 = background, ids start at 1 in scan order)."""
    labels: np.ndarray
    sizes: list[int] = field(default_factory=list)  # sizes[i] belongs to id i + 1

    @property
    def count(self) -> int:
        return len(self.sizes)


@dataclass
class ComponentStats:
    """What :func:`select_largest` kept and dropped."""
    components: int = 0  # All components found
    candidates: int = 0  # Components of at least min_size
    kept_size: int = 0  # Pixel count of the kept component, 0 if none
    cleared_pixels: int = 0


def label_components(foreground: np.ndarray) -> ComponentLabeling:
    """Label 8-connected components of a boolean mask.

    Components are discovered in scan order (top to bottom, left to right), so
    component 1 is the one containing the first foreground pixel.
    """
    height, width = foreground.shape
    fg = foreground.astype(bool).ravel().tolist()
    labels = [0] * (width * height)
    sizes: list[int] = []

    for start in range(width * height):
        if not fg[start] or labels[start]:
            continue
        label = len(sizes) + 1
        labels[start] = label
        queue = deque([start])
        size = 0
        while queue:
            i = queue.popleft()
            size += 1
            y, x = divmod(i, width)
            for dy, dx in _NEIGHBORS_8:
                ny = y + dy
                nx = x + dx
                if ny < 0 or ny >= height or nx < 0 or nx >= width:
                    continue
                j = ny * width + nx
                if fg[j] and not labels[j]:
                    labels[j] = label
                    queue.append(j)
        sizes.append(size)

    return ComponentLabeling(
        labels=np.array(labels, dtype=np.int32).reshape(height, width),
        sizes=sizes,
    )


def select_largest(alpha: np.ndarray, min_size: int = 10, opaque_threshold: int = 128,
                   clear_threshold: int = 50) -> tuple[np.ndarray, ComponentStats]:
    """Keep only the largest connected silhouette of an alpha channel.

    Pixels with alpha above ``opaque_threshold`` form the foreground. Components
    smaller than ``min_size`` are never candidates. When several candidates
    share the maximum size the first one in scan order wins. Every pixel outside
    the winner whose alpha exceeds ``clear_threshold`` is made transparent; if
    there is no candidate the alpha is returned unchanged.

    :param alpha: (height, width) uint8 alpha channel
    :param min_size: Smallest component size that is considered
    :param opaque_threshold: Alpha above which a pixel counts as foreground
    :param clear_threshold: Alpha above which a non-selected pixel is cleared
    :return: New alpha channel and statistics
    """
    labeling = label_components(alpha > opaque_threshold)
    stats = ComponentStats(components=labeling.count)

    best_label = 0
    best_size = 0
    for index, size in enumerate(labeling.sizes):
        if size < min_size:
            continue
        stats.candidates += 1
        if size > best_size:
            best_label, best_size = index + 1, size

    result = alpha.copy()
    if best_label == 0:
        logger.debug(f"No component of at least {min_size} px among {labeling.count}")
        return result, stats

    clear = (alpha > clear_threshold) & (labeling.labels != best_label)
    result[clear] = 0
    stats.kept_size = best_size
    stats.cleared_pixels = int(clear.sum())
    logger.debug(
        f"Kept component of {best_size} px, cleared {stats.cleared_pixels} px "
        f"from {labeling.count - 1} other components"
    )
    return result, stats


def despeckle(alpha: np.ndarray, min_transparent: int = 6, clear_threshold: int = 50) -> np.ndarray:
    """Erase edge specks surrounded mostly by transparency.

    An interior pixel with alpha >= ``clear_threshold`` becomes transparent when
    at least ``min_transparent`` of its 8 neighbors have alpha below the
    threshold. Neighbors are read from the input, not the partially updated
    output. The outermost ring of pixels is left as is.
    """
    result = alpha.copy()
    height, width = alpha.shape
    if height < 3 or width < 3:
        return result
    transparent = (alpha < clear_threshold).astype(np.uint8)
    counts = np.zeros((height - 2, width - 2), dtype=np.uint8)
    for dy, dx in _NEIGHBORS_8:
        counts += transparent[1 + dy:height - 1 + dy, 1 + dx:width - 1 + dx]
    inner = result[1:-1, 1:-1]
    inner[(alpha[1:-1, 1:-1] >= clear_threshold) & (counts >= min_transparent)] = 0
    return result


def smooth_alpha_edges(alpha: np.ndarray, sigma: float, low: int = 30, high: int = 220) -> Mask:
    """Blur the alpha slightly, then snap near-transparent and near-opaque values.

    Values between ``low`` and ``high`` are kept for antialiasing.
    """
    if sigma <= 0:
        return alpha.copy()
    blurred = ndimage.gaussian_filter(alpha.astype(np.float32), sigma=sigma, mode="nearest")
    result = np.clip(np.rint(blurred), 0, 255).astype(np.uint8)
    result[result < low] = 0
    result[result > high] = 255
    return result
