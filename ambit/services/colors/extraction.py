"""
Color extraction from decoded pixel buffers.

Three extractors are provided:

- random sampling, seeded and reproducible
- bucket-frequency dominance over a coarse quantized RGB cube, optionally
  split across a thread pool
- weighted Lab clustering with a confidence score, used by palette
  generation
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger
from sklearn.cluster import MiniBatchKMeans

from .errors import ColorEngineError, EmptyInputError, validate_count
from .pixels import PixelBuffer, Region
from .space import Color
from ..observability import performance_monitor


# Dark-pixel rejection
DARK_LIGHTNESS_THRESHOLD = 0.12
MAX_DARK_RETRIES = 10

# Clustered extraction filters and weights
NEAR_BLACK_CHANNEL = 0.03
NEAR_WHITE_SATURATION = 0.06
NEAR_WHITE_CHANNEL = 0.94
CENTER_WEIGHT_GAIN = 1.6
SATURATION_WEIGHT_BASE = 0.5
SATURATION_WEIGHT_GAIN = 1.5


def _hsl_lightness(rgb_u8: np.ndarray) -> np.ndarray:
    """HSL lightness for an (N, 3+) uint8 array."""
    rgb = rgb_u8[:, :3].astype(np.float32) / 255.0
    return (rgb.max(axis=1) + rgb.min(axis=1)) / 2.0


def _index_stream(rng: np.random.Generator, n: int) -> Iterator[int]:
    """Endless stream of pixel indices: each pass is a fresh permutation."""
    while True:
        for idx in rng.permutation(n):
            yield int(idx)


def extract_random_colors(pixels: PixelBuffer, count: int, avoid_dark: bool = False,
                          rng_seed: Optional[int] = None) -> List[Color]:
    """
    Sample colors at random pixel positions.

    Positions are drawn without replacement until every pixel has been used,
    then a fresh shuffle starts, so small images still yield `count` colors.

    Args:
        pixels: Source pixel buffer
        count: Number of colors to return (>= 1)
        avoid_dark: Reject samples with HSL lightness below
            DARK_LIGHTNESS_THRESHOLD, retrying up to MAX_DARK_RETRIES times
            per slot before keeping the lightest candidate seen
        rng_seed: Seed for reproducible sampling; None draws fresh entropy

    Returns:
        Exactly `count` colors, pixel alpha preserved

    Raises:
        InvalidCountError: If count < 1
    """
    count = validate_count(count)
    flat = pixels.flat_pixels()
    n = flat.shape[0]

    lightness = _hsl_lightness(flat)
    if avoid_dark and not np.any(lightness >= DARK_LIGHTNESS_THRESHOLD):
        logger.info("No pixel passes the dark filter, sampling without it")
        avoid_dark = False

    rng = np.random.default_rng(rng_seed)
    stream = _index_stream(rng, n)

    chosen = []
    for _ in range(count):
        idx = next(stream)
        if avoid_dark:
            best = idx
            retries = 0
            while lightness[idx] < DARK_LIGHTNESS_THRESHOLD and retries < MAX_DARK_RETRIES:
                idx = next(stream)
                retries += 1
                if lightness[idx] > lightness[best]:
                    best = idx
            if lightness[idx] < DARK_LIGHTNESS_THRESHOLD:
                idx = best
        chosen.append(idx)

    colors = [Color.from_rgb255(*(int(v) for v in flat[idx])) for idx in chosen]
    logger.debug(f"Random extraction sampled {len(colors)} colors from {n} pixels")
    return colors


def _bucket_table(block: np.ndarray, offset: int, bucket_bits: int
                  ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Frequency table for a block of pixels.

    Returns:
        (counts, channel sums of shape (buckets, 3), first pixel index per bucket)
    """
    n_buckets = 1 << (3 * bucket_bits)
    shift = 8 - bucket_bits
    q = (block[:, :3] >> shift).astype(np.int64)
    keys = (q[:, 0] << (2 * bucket_bits)) | (q[:, 1] << bucket_bits) | q[:, 2]

    counts = np.bincount(keys, minlength=n_buckets).astype(np.int64)
    sums = np.stack(
        [np.bincount(keys, weights=block[:, c].astype(np.float64), minlength=n_buckets) for c in range(3)],
        axis=1,
    )
    first = np.full(n_buckets, np.iinfo(np.int64).max, dtype=np.int64)
    if keys.size:
        present, first_pos = np.unique(keys, return_index=True)
        first[present] = first_pos + offset
    return counts, sums, first


def _merge_tables(tables):
    """Merge partial tables: counts and sums add, first index takes the minimum."""
    counts, sums, first = tables[0]
    counts = counts.copy()
    sums = sums.copy()
    first = first.copy()
    for c, s, f in tables[1:]:
        counts += c
        sums += s
        np.minimum(first, f, out=first)
    return counts, sums, first


def extract_prominent_colors(pixels: PixelBuffer, count: int, avoid_dark: bool = False,
                             region: Optional[Region] = None, bucket_bits: int = 4,
                             workers: int = 1) -> List[Color]:
    """
    Extract the most frequent colors by coarse RGB bucketing.

    Each pixel falls into one of 2**(3*bucket_bits) buckets. Buckets are
    ranked by pixel count, ties broken by the first pixel that landed in
    them, and reported as the mean RGB of their pixels.

    Args:
        pixels: Source pixel buffer
        count: Number of colors to return (>= 1)
        avoid_dark: Drop buckets whose mean lightness is below
            DARK_LIGHTNESS_THRESHOLD, unless that would drop all of them
        region: Optional sub-rectangle, clipped to the image
        bucket_bits: Quantization depth per channel (1-8)
        workers: Thread count for the frequency pass; results are identical
            to the single-threaded pass

    Returns:
        Exactly `count` opaque colors. When fewer distinct buckets exist the
        ranked list repeats.

    Raises:
        InvalidCountError: If count < 1
        EmptyInputError: If the clipped region is empty
    """
    count = validate_count(count)
    if not 1 <= int(bucket_bits) <= 8:
        raise ColorEngineError(f"bucket_bits must be within 1-8, got {bucket_bits}")
    bucket_bits = int(bucket_bits)
    workers = max(1, int(workers))

    image = pixels.array
    if region is not None:
        bounds = region.clip(pixels.width, pixels.height)
        if bounds is None:
            raise EmptyInputError(f"Region {region} does not overlap the {pixels.width}x{pixels.height} image")
        x0, y0, x1, y1 = bounds
        image = image[y0:y1, x0:x1]

    rows, cols = image.shape[0], image.shape[1]

    with performance_monitor("extract_prominent", pixel_count=rows * cols, color_count=count):
        if workers == 1 or rows < 2:
            tables = [_bucket_table(image.reshape(-1, 4), 0, bucket_bits)]
        else:
            bands = np.array_split(np.arange(rows), min(workers, rows))
            jobs = [(int(band[0]), int(band[-1]) + 1) for band in bands if band.size]
            with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
                futures = [
                    pool.submit(_bucket_table, image[r0:r1].reshape(-1, 4), r0 * cols, bucket_bits)
                    for r0, r1 in jobs
                ]
                tables = [f.result() for f in futures]

        counts, sums, first = _merge_tables(tables)

        candidates = np.nonzero(counts)[0]
        means = sums[candidates] / counts[candidates][:, None]

        if avoid_dark:
            mean_lightness = (means.max(axis=1) + means.min(axis=1)) / 2.0 / 255.0
            keep = mean_lightness >= DARK_LIGHTNESS_THRESHOLD
            if np.any(keep):
                candidates = candidates[keep]
                means = means[keep]
            else:
                logger.info("All buckets are dark, ignoring avoid_dark")

        order = np.lexsort((first[candidates], -counts[candidates]))
        ranked = [
            Color(float(means[i, 0]) / 255.0, float(means[i, 1]) / 255.0, float(means[i, 2]) / 255.0)
            for i in order
        ]

    logger.debug(f"Prominent extraction found {len(ranked)} buckets in {rows}x{cols} pixels")
    return [ranked[i % len(ranked)] for i in range(count)]


def _center_weights(height: int, width: int) -> np.ndarray:
    """Per-pixel weight favoring the image center, flattened row-major."""
    ys, xs = np.divmod(np.arange(height * width), width)
    cy, cx = (height - 1) / 2.0, (width - 1) / 2.0
    d = np.hypot(xs - cx, ys - cy)
    dmax = float(np.hypot(cx, cy)) or 1.0
    return 1.0 + (1.0 - d / dmax) * CENTER_WEIGHT_GAIN


def extract_clustered_colors(pixels: PixelBuffer, count: int, avoid_dark: bool = True,
                             rng_seed: int = 42, max_samples: int = 20000
                             ) -> Tuple[List[Color], float]:
    """
    Extract representative colors by weighted clustering in CIE Lab.

    Near-black pixels (only with avoid_dark) and near-white low-saturation
    pixels are filtered out. Remaining pixels are weighted toward the image
    center and toward saturated colors, then clustered with MiniBatchKMeans.

    Args:
        pixels: Source pixel buffer
        count: Maximum number of colors (>= 1)
        avoid_dark: Drop near-black pixels before clustering
        rng_seed: Seed for sampling and clustering
        max_samples: Cap on pixels fed to the clusterer

    Returns:
        Tuple of (colors ordered by cluster weight, confidence) where
        confidence is the top cluster's share of the total weight. At most
        `count` colors; fewer when the image has fewer distinct colors.

    Raises:
        InvalidCountError: If count < 1
    """
    count = validate_count(count)
    height, width = pixels.height, pixels.width
    rgb_u8 = pixels.flat_pixels()[:, :3]
    rgb = rgb_u8.astype(np.float32) / 255.0

    with performance_monitor("extract_clustered", pixel_count=height * width, color_count=count):
        hls = cv2.cvtColor(rgb.reshape(-1, 1, 3), cv2.COLOR_RGB2HLS).reshape(-1, 3)
        saturation = hls[:, 2]
        max_channel = rgb.max(axis=1)

        near_black = np.all(rgb < NEAR_BLACK_CHANNEL, axis=1) if avoid_dark else np.zeros(len(rgb), dtype=bool)
        near_white = (saturation < NEAR_WHITE_SATURATION) & (max_channel > NEAR_WHITE_CHANNEL)

        keep = ~(near_black | near_white)
        if not np.any(keep):
            keep = ~near_black
            logger.info("Near-white filter removed every pixel, relaxing")
        if not np.any(keep):
            keep = np.ones(len(rgb), dtype=bool)
            logger.info("Near-black filter removed every pixel, relaxing")

        weights = _center_weights(height, width) * (SATURATION_WEIGHT_BASE + SATURATION_WEIGHT_GAIN * saturation)

        idx = np.nonzero(keep)[0]
        if idx.size > max_samples:
            rng = np.random.default_rng(rng_seed)
            idx = np.sort(rng.choice(idx, size=max_samples, replace=False))

        sample_rgb = rgb[idx]
        sample_w = weights[idx].astype(np.float64)
        unique_count = np.unique(rgb_u8[idx], axis=0).shape[0]
        k = min(count, unique_count)

        if k == 1:
            labels = np.zeros(idx.size, dtype=np.int64)
        else:
            lab = cv2.cvtColor(sample_rgb.reshape(-1, 1, 3), cv2.COLOR_RGB2Lab).reshape(-1, 3)
            kmeans = MiniBatchKMeans(
                n_clusters=k,
                random_state=rng_seed,
                n_init="auto",
                batch_size=min(2048, max(256, idx.size)),
            )
            kmeans.fit(lab, sample_weight=sample_w)
            labels = kmeans.predict(lab)

        cluster_weight = np.bincount(labels, weights=sample_w, minlength=k)
        ranked = [c for c in np.lexsort((np.arange(k), -cluster_weight)) if cluster_weight[c] > 0]

        colors = []
        for c in ranked:
            members = labels == c
            mean = np.average(sample_rgb[members], axis=0, weights=sample_w[members])
            colors.append(Color(float(mean[0]), float(mean[1]), float(mean[2])))

        total = float(cluster_weight.sum())
        confidence = float(cluster_weight[ranked[0]]) / total if total > 0 else 0.0

    logger.info(f"Clustered extraction: {len(colors)} colors, confidence {confidence:.2f}")
    return colors, confidence
