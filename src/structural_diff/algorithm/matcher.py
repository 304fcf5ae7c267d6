"""Matching primitives: Hungarian assignment and ordered sequence alignment.

``hungarian_match`` wraps scipy's ``linear_sum_assignment`` so that
infinite-cost cells never reach the solver (which would raise
``ValueError``).  After assignment, pairs that landed on originally-infinite
positions are filtered out.

Guard value formula: ``finite_max * 2.0 + 1.0``

``align_sequences`` is the classic edit-distance DP (insert/delete cost 1,
substitution cost from the matrix) with a backtracking pass that returns
the alignment itself, not just its cost.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.optimize import linear_sum_assignment  # type: ignore[import-untyped]

__all__ = ["align_sequences", "hungarian_match"]

# (expected_index, actual_index); None on one side marks a delete or insert
AlignmentStep = tuple[int | None, int | None]


def hungarian_match(
    cost_matrix: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Compute optimal bipartite assignment with np.inf guard.

    Args:
        cost_matrix: 2-D cost matrix of shape ``(m, n)``.  May contain
            ``np.inf`` to mark forbidden assignments.

    Returns:
        Tuple ``(row_ind, col_ind)`` of 1-D integer arrays giving the
        optimal assignment, with any pair whose *original* cost was
        infinite removed.  Empty arrays are returned when no valid
        assignment exists.
    """
    if cost_matrix.size == 0:
        return np.array([], dtype=int), np.array([], dtype=int)

    cost = np.asarray(cost_matrix, dtype=float)
    inf_mask = np.isinf(cost)

    if inf_mask.all():
        return np.array([], dtype=int), np.array([], dtype=int)

    if inf_mask.any():
        finite_max = float(cost[~inf_mask].max())
        guard_value = finite_max * 2.0 + 1.0
        cost = np.where(inf_mask, guard_value, cost)

    row_ind, col_ind = linear_sum_assignment(cost)

    if inf_mask.any():
        keep = ~inf_mask[row_ind, col_ind]
        row_ind = row_ind[keep]
        col_ind = col_ind[keep]

    return row_ind, col_ind


def align_sequences(
    cost_matrix: np.ndarray,
    gap_cost: float = 1.0,
) -> tuple[float, list[AlignmentStep]]:
    """Minimum-cost alignment of two ordered sequences.

    Args:
        cost_matrix: Substitution costs of shape ``(m, n)``; cell ``[i, j]``
            is the cost of aligning expected ``i`` with actual ``j``.
        gap_cost: Cost of leaving one element unaligned (insert or delete).

    Returns:
        ``(total_cost, steps)`` where ``steps`` lists the alignment in
        sequence order: ``(i, j)`` for an aligned pair, ``(i, None)`` for an
        expected element with no counterpart and ``(None, j)`` for an actual
        element with no counterpart.
    """
    m, n = cost_matrix.shape

    # dp[i][j] = min cost to align expected[:i] with actual[:j]
    dp = np.zeros((m + 1, n + 1), dtype=float)
    dp[1:, 0] = np.arange(1, m + 1) * gap_cost
    dp[0, 1:] = np.arange(1, n + 1) * gap_cost

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            dp[i, j] = min(
                dp[i - 1, j] + gap_cost,  # delete
                dp[i, j - 1] + gap_cost,  # insert
                dp[i - 1, j - 1] + cost_matrix[i - 1, j - 1],  # substitute
            )

    steps: list[AlignmentStep] = []
    i, j = m, n
    while i > 0 or j > 0:
        if (
            i > 0
            and j > 0
            and math.isclose(dp[i, j], dp[i - 1, j - 1] + cost_matrix[i - 1, j - 1])
        ):
            steps.append((i - 1, j - 1))
            i, j = i - 1, j - 1
        elif i > 0 and math.isclose(dp[i, j], dp[i - 1, j] + gap_cost):
            steps.append((i - 1, None))
            i -= 1
        else:
            steps.append((None, j - 1))
            j -= 1

    steps.reverse()
    return float(dp[m, n]), steps
