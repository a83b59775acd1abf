"""
Quick demo: watch the billiard trace its orbit.
Run: venv/bin/python demo.py disk --angle pi/4 --bounces 12
     venv/bin/python demo.py slope --slope sqrt(2)/5
     venv/bin/python demo.py bounces -n 8
     venv/bin/python demo.py unfold --direction 2,1 --hits 8
     venv/bin/python demo.py --save-frames results/frames slope --slope 1/3
Press Q or close window to exit.
"""
import argparse
import logging
import math

import billiards as P
from billiards.arclength import ArcLengthParametrizer
from billiards.disk import simulate_disk
from billiards.errors import ErrorKind, ExpressionError, SimulationError, invalid
from billiards.expr import parse_scalar_expr
from billiards.orbits import find_periodic_orbit
from billiards.rectangle import clamp_max_bounces, simulate_rectangle
from billiards.unfold import tile_bounds, unfold_hits


def show(args, renderer, draw, total, speed, caption, loop=False):
    """Play in a window, or write one pass of frames when --save-frames is set."""
    if args.save_frames:
        from billiards.renderer import save_frames
        written = save_frames(renderer.record(draw, total, speed=speed), args.save_frames)
        print(f"Saved {len(written)} frames to {args.save_frames}")
        return
    renderer.play(draw, total, speed=speed, loop=loop, caption=caption)


def slope_caption(slope):
    return 'slope = ∞' if math.isinf(slope) else f'slope = {slope:.6g}'


def run_disk(args, renderer):
    alpha = parse_scalar_expr(args.angle)
    traj = simulate_disk(alpha, args.bounces, seed=args.seed)
    print(f"alpha={alpha:.6f} rad, bounces={traj.bounces}, caustic radius={traj.caustic_radius:.8f}")
    if renderer is None:
        return
    path = ArcLengthParametrizer(traj.points)
    show(args, renderer, lambda u: renderer.render_disk(traj, path, u), path.total,
         args.speed, 'Circular billiard')


def run_slope(args, renderer):
    slope = parse_scalar_expr(args.slope, allow_infinity=True)
    traj = simulate_rectangle(slope, clamp_max_bounces(args.max_bounces))
    print(f"Bounces shown: {traj.bounces}" + (" (corner hit)" if traj.corner_hit else ""))
    if renderer is None:
        return
    path = ArcLengthParametrizer(traj.points)
    show(args, renderer, lambda u: renderer.render_rectangle(traj, path, u), path.total,
         args.speed, slope_caption(slope))


def run_bounces(args, renderer):
    result = find_periodic_orbit(args.n)
    if result is None:
        print(f"No candidates found for N={args.n} ({ErrorKind.NO_CANDIDATES.value}).")
        return
    c = result.chosen
    status = " (corner hit)" if c.corner_hit else (
        " (returns near start)" if c.returned_near_start else " (no near-return detected)")
    print(f"Candidate slopes: {len(result.ranked)}. Showing m={c.candidate.m}, n={c.candidate.n}, "
          f"slope={c.candidate.slope:.6g}{status}")
    if args.verbose:
        for check in result.ranked:
            print(f"  m={check.candidate.m:3d} n={check.candidate.n:3d} slope={check.candidate.slope:.6g} "
                  f"corner={check.corner_hit} returned={check.returned_near_start}")
    if renderer is None:
        return
    path = ArcLengthParametrizer(c.trajectory.points)
    show(args, renderer, lambda u: renderer.render_rectangle(c.trajectory, path, u), path.total,
         args.speed, f'N={args.n}')


def run_unfold(args, renderer):
    parts = [s.strip() for s in args.direction.split(',')]
    if len(parts) != 2:
        raise invalid("Direction must look like: 2,1", args.direction)
    direction = [parse_scalar_expr(s) for s in parts]
    result = unfold_hits(direction, args.hits)
    end = result.unfolded[-1]
    print(f"Hits: {result.folded.bounces}, unfolded end point=({end[0]:.6f}, {end[1]:.6f})")
    if renderer is None:
        return
    folded = ArcLengthParametrizer(result.folded.points)
    unfolded = ArcLengthParametrizer(result.unfolded)
    tiles = tile_bounds(result.unfolded, result.folded.table.width, result.folded.table.height)
    # one sweep per UNFOLD_PERIOD seconds
    show(args, renderer, lambda u: renderer.render_unfold(result, folded, unfolded, u, tiles),
         unfolded.total, unfolded.total / P.UNFOLD_PERIOD, 'Unfolding', loop=True)


def build_parser():
    parser = argparse.ArgumentParser(description="Point-particle billiards in a disk and a rectangle.")
    parser.add_argument("--speed", type=float, default=P.SPEED, help="Animation speed in arc length per second.")
    parser.add_argument("--seed", type=int, default=P.SEED, help="Seed for the disk start offset.")
    parser.add_argument("--no-window", action="store_true", help="Print the summary only.")
    parser.add_argument("--save-frames", metavar="DIR", help="Write one pass as PNG frames instead of playing.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="mode", required=True)

    p = sub.add_parser("disk", help="Circular billiard with a fixed impact angle.")
    p.add_argument("--angle", default="pi/4", help="Impact angle expression, e.g. pi/4.")
    p.add_argument("--bounces", type=int, default=12)
    p.set_defaults(run=run_disk)

    p = sub.add_parser("slope", help="Rectangle billiard from a slope.")
    p.add_argument("--slope", default="sqrt(2)/5", help="Slope expression or inf.")
    p.add_argument("--max-bounces", type=int, default=P.MAX_BOUNCES)
    p.set_defaults(run=run_slope)

    p = sub.add_parser("bounces", help="Search a slope returning after N bounces.")
    p.add_argument("-n", type=int, default=8, help="Even bounce count >= 2.")
    p.set_defaults(run=run_bounces)

    p = sub.add_parser("unfold", help="Folded path next to its unfolding.")
    p.add_argument("--direction", default="2,1")
    p.add_argument("--hits", type=int, default=P.UNFOLD_HITS)
    p.set_defaults(run=run_unfold)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    renderer = None
    if not args.no_window:
        from billiards.renderer import Renderer
        renderer = Renderer()

    try:
        args.run(args, renderer)
    except (ExpressionError, SimulationError) as e:
        parser.exit(2, f"error: {e}\n")


if __name__ == "__main__":
    main()
