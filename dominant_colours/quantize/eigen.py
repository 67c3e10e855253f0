# dominant_colours/quantize/eigen.py
from __future__ import annotations

"""
Eigenvector split quantizer.

Grows a binary tree over the pixel population in CIE Lab: the leaf with the
largest principal scatter eigenvalue is cut in two by the plane through its
mean, orthogonal to its principal axis. Leaves become palette colours.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np

from ..colour_convert import gamma_decode, gamma_encode, lab_to_cie, rgb_to_lab, u8_to_unit
from ..core_types import QuantizationResult, U8Image, assert_u8_image_rgb
from ..utils import debug_log

# Scatter eigenvalues at or below this are treated as a single colour
MIN_SPLIT_EIGENVALUE = 1e-9


@dataclass(eq=False)
class ColourNode:
    """
    One tree node. Owns its children.

    mean    : Lab mean (CIE units) of the member pixels
    scatter : 3x3 un-normalised covariance of the member pixels
    """

    class_id: int
    mean: np.ndarray
    scatter: np.ndarray
    count: int
    left: Optional["ColourNode"] = None
    right: Optional["ColourNode"] = None
    eigenvalue: float = field(init=False, default=0.0)
    eigenvector: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        values, vectors = np.linalg.eigh(self.scatter)
        self.eigenvalue = float(values[-1])
        self.eigenvector = vectors[:, -1]

    @property
    def is_leaf(self) -> bool:
        return self.left is None or self.right is None

    def leaves(self) -> Iterator["ColourNode"]:
        """Leaves in breadth-first order."""
        queue: List[ColourNode] = [self]
        while queue:
            node = queue.pop(0)
            if node.is_leaf:
                yield node
            else:
                queue.append(node.left)  # type: ignore[arg-type]
                queue.append(node.right)  # type: ignore[arg-type]


def _make_node(class_id: int, lab: np.ndarray) -> ColourNode:
    mean = lab.mean(axis=0)
    centred = lab - mean
    return ColourNode(
        class_id=class_id,
        mean=mean,
        scatter=centred.T @ centred,
        count=int(lab.shape[0]),
    )


def _max_eigen_leaf(root: ColourNode) -> Optional[ColourNode]:
    best: Optional[ColourNode] = None
    for leaf in root.leaves():
        if leaf.eigenvalue <= MIN_SPLIT_EIGENVALUE:
            continue
        if best is None or leaf.eigenvalue > best.eigenvalue:
            best = leaf
    return best


def eigen_split_quantize(
    image: U8Image, n_colours: int, *, debug: bool = False
) -> QuantizationResult:
    """
    Quantize an RGB image to at most n_colours by recursive eigen splits.

    Returns cluster ids in leaf breadth-first order. Each colour is the
    linear-light mean of the leaf's pixels. Fewer colours come back when
    the image runs out of splittable leaves.
    """
    rgb = assert_u8_image_rgb(image)
    height, width = rgb.shape[:2]
    if height * width == 0:
        return QuantizationResult(
            labels=np.zeros((height, width), dtype=np.int32),
            colours=np.zeros((0, 3), dtype=np.float64),
        )

    n_colours = max(1, int(n_colours))
    unit = u8_to_unit(rgb.reshape(-1, 3))
    lab = lab_to_cie(rgb_to_lab(unit))

    classes = np.zeros(unit.shape[0], dtype=np.int32)
    root = _make_node(0, lab)
    next_id = 1

    for _ in range(n_colours - 1):
        leaf = _max_eigen_leaf(root)
        if leaf is None:
            if debug:
                debug_log("[eigen] no splittable leaf left")
            break

        members = np.flatnonzero(classes == leaf.class_id)
        projection = lab[members] @ leaf.eigenvector
        cut = float(leaf.mean @ leaf.eigenvector)
        go_left = projection <= cut
        if go_left.all() or not go_left.any():
            # Rounding put every member on one side; the leaf stays whole.
            leaf.eigenvalue = 0.0
            continue

        left_ids = members[go_left]
        right_ids = members[~go_left]
        classes[left_ids] = next_id
        classes[right_ids] = next_id + 1
        leaf.left = _make_node(next_id, lab[left_ids])
        leaf.right = _make_node(next_id + 1, lab[right_ids])
        if debug:
            debug_log(
                f"[eigen] split {leaf.class_id} (lambda={leaf.eigenvalue:.1f}) "
                f"-> {next_id}:{left_ids.size} / {next_id + 1}:{right_ids.size}"
            )
        next_id += 2

    leaves = list(root.leaves())
    remap = np.zeros(next_id, dtype=np.int32)
    linear = gamma_decode(unit)
    colours = np.empty((len(leaves), 3), dtype=np.float64)
    for out_id, leaf in enumerate(leaves):
        remap[leaf.class_id] = out_id
        colours[out_id] = gamma_encode(linear[classes == leaf.class_id].mean(axis=0))

    labels = remap[classes].reshape(height, width)
    return QuantizationResult(labels=labels, colours=np.clip(colours, 0.0, 1.0))


__all__ = ["ColourNode", "eigen_split_quantize"]
