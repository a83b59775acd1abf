"""
Periodic-orbit sweep: how often does the slope family actually close up?

For each even N:
  1. Enumerate candidate slopes m*B / (n*A)
  2. Simulate each with N + slack bounces
  3. Count corner hits and near-returns to the start

Then plot the chosen orbit for a few N, folded and unfolded.
"""
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import os

from billiards.geometry import segment_lengths
from billiards.orbits import find_periodic_orbit, rank_candidates
from billiards.rectangle import TableConfig
from billiards.unfold import tile_bounds, unfold


def sweep(n_values, table):
    rows = []
    for N in n_values:
        ranked = rank_candidates(N, table)
        rows.append({
            'N': N,
            'candidates': len(ranked),
            'corner': sum(c.corner_hit for c in ranked),
            'returned': sum(c.returned_near_start for c in ranked),
        })
        print(f"N={N:3d}: {rows[-1]['candidates']:3d} candidates, "
              f"{rows[-1]['corner']:3d} corner hits, {rows[-1]['returned']:3d} near-returns")
    return rows


def plot_orbit(ax_fold, ax_unfold, result):
    traj = result.chosen.trajectory
    a, b = traj.table.width, traj.table.height
    U = unfold(traj)

    ax_fold.add_patch(Rectangle((0, 0), a, b, fill=False, color='#111', lw=2))
    ax_fold.plot(traj.points[:, 0], traj.points[:, 1], color='blue', lw=1)
    ax_fold.plot(*traj.points[0], 'o', color='red')
    ax_fold.set_aspect('equal')
    ax_fold.set_title(f"N={result.n_bounces}, slope={result.chosen.candidate.slope:.4g}")

    ti, tj = tile_bounds(U, a, b)
    for i in ti:
        for j in tj:
            ax_unfold.add_patch(Rectangle((i * a, j * b), a, b, fill=False, color='#bbb', lw=0.5))
    ax_unfold.plot(U[:, 0], U[:, 1], color='blue', lw=1)
    ax_unfold.plot(*U[0], 'o', color='red')
    ax_unfold.set_aspect('equal')
    ax_unfold.autoscale_view()

    drift = np.max(np.abs(segment_lengths(U) - segment_lengths(traj.points)), initial=0.0)
    ax_unfold.set_title(f"unfolded (max length drift {drift:.1e})")


def evaluate():
    table = TableConfig()
    os.makedirs('results/plots', exist_ok=True)

    rows = sweep(range(4, 42, 2), table)
    Ns = [r['N'] for r in rows]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(Ns, [r['candidates'] for r in rows], 'o-', label='candidates')
    ax.plot(Ns, [r['corner'] for r in rows], 's-', label='corner hits')
    ax.plot(Ns, [r['returned'] for r in rows], '^-', label='near-returns')
    ax.set_xlabel('N (target bounces)')
    ax.set_ylabel('count')
    ax.legend()
    fig.tight_layout()
    fig.savefig('results/plots/orbit_sweep.png', dpi=150)
    plt.close(fig)

    shown = [4, 8, 12]
    fig, axes = plt.subplots(len(shown), 2, figsize=(12, 3.5 * len(shown)))
    for row, N in zip(axes, shown):
        result = find_periodic_orbit(N, table)
        if result is None:
            continue
        plot_orbit(row[0], row[1], result)
    fig.tight_layout()
    fig.savefig('results/plots/orbit_unfold.png', dpi=150)
    plt.close(fig)
    print("Saved results/plots/orbit_sweep.png, results/plots/orbit_unfold.png")


if __name__ == "__main__":
    evaluate()
