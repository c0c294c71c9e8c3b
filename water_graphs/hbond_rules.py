"""
Hydrogen bond detection rules.

The graph builder never decides which molecules are hydrogen bonded; it
asks a rule. :class:`DistanceAngleRule` is the usual geometric criterion
(O...O distance plus H-O...O angle) for callers holding parsed coordinates.
"""

from typing import List, Tuple

import numpy as np


class DistanceAngleRule:
    """
    Geometric hydrogen bond criterion.

    Molecule ``i`` donates to molecule ``j`` when one of the hydrogens of
    ``i`` points at the oxygen of ``j``: the O...O distance is at most
    ``max_oo_distance`` and the angle between the O-H bond and the O...O
    vector is at most ``max_angle`` degrees.
    """

    def __init__(self, max_oo_distance: float = 3.5, max_angle: float = 30.0):
        if max_oo_distance <= 0:
            raise ValueError(f"max_oo_distance must be positive, got {max_oo_distance}")
        if not 0 < max_angle <= 180:
            raise ValueError(f"max_angle must be in (0, 180], got {max_angle}")
        self.max_oo_distance = max_oo_distance
        self.max_angle = max_angle

    def __call__(self, oxygens: np.ndarray, hydrogens: np.ndarray) -> List[Tuple[int, int]]:
        """
        Detect hydrogen bonds.

        Args:
            oxygens: Oxygen positions, shape (n, 3)
            hydrogens: Hydrogen positions, shape (n, 2, 3)

        Returns:
            List[Tuple[int, int]]: Sorted (donor, acceptor) pairs, each reported once
        """
        oxygens = np.asarray(oxygens, dtype=float)
        hydrogens = np.asarray(hydrogens, dtype=float)
        n = oxygens.shape[0]
        if n < 2:
            return []

        # oo[i, j] = O_j - O_i
        oo = oxygens[np.newaxis, :, :] - oxygens[:, np.newaxis, :]
        oo_dist = np.linalg.norm(oo, axis=-1)

        # oh[i, k] = H_ik - O_i
        oh = hydrogens - oxygens[:, np.newaxis, :]
        oh_len = np.linalg.norm(oh, axis=-1)

        with np.errstate(invalid="ignore", divide="ignore"):
            cosines = np.einsum("ikx,ijx->ikj", oh, oo) / (
                oh_len[:, :, np.newaxis] * oo_dist[:, np.newaxis, :]
            )
        angles = np.degrees(np.arccos(np.clip(cosines, -1.0, 1.0)))

        close = (oo_dist <= self.max_oo_distance) & ~np.eye(n, dtype=bool)
        aligned = np.nan_to_num(angles, nan=180.0) <= self.max_angle
        donates = close & aligned.any(axis=1)

        return [(int(i), int(j)) for i, j in zip(*np.nonzero(donates))]
