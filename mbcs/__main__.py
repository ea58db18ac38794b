"""
MBCS CLI Entry Point

Run with: python -m mbcs [options]
"""

import argparse
import sys
from pathlib import Path
import time

from .config import SECTIONS, RunConfig, load_config, parse_overrides
from .stemcells import DivisionModes, StemCellParameters
from .experiments import (
    SectionResults,
    run_diversity,
    run_networks,
    run_landscapes,
    run_growth,
    run_stemcells,
    run_kinetics,
)
from .report import generate_report, save_results_json


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mbcs",
        description="Mathematical Biology & Complex Systems worked examples",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("--section", type=str, default="all",
                        choices=SECTIONS + ["all"],
                        help="Section to run")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON file with run parameters")
    parser.add_argument("--params", type=str, default=None,
                        help="JSON string of parameter overrides (applied last)")

    # Diversity
    parser.add_argument("--counts", type=int, nargs="+", default=None,
                        help="Custom species counts")

    # Growth
    parser.add_argument("--r", type=float, default=None,
                        help="Growth factor of the iterative models (default 1.1)")
    parser.add_argument("--N0", type=float, default=None,
                        help="Initial population (default 200)")
    parser.add_argument("--K", type=float, default=None,
                        help="Carrying capacity (default 400)")

    # Stem cells
    parser.add_argument("--pp", type=float, default=None,
                        help="Probability of proliferative division (default 0.6)")
    parser.add_argument("--dd", type=float, default=None,
                        help="Probability of differentiative division (default 0.2)")
    parser.add_argument("--apoptosis", type=float, default=None,
                        help="Probability of apoptosis (default 0)")
    parser.add_argument("--cycle-length", dest="cycle_length", type=float, default=None,
                        help="Cell cycle length T (default 24)")

    # Kinetics
    parser.add_argument("--k1", type=float, default=None,
                        help="Dimerization (marriage) rate")
    parser.add_argument("--k2", type=float, default=None,
                        help="Release (divorce) rate")
    parser.add_argument("--b0", type=float, default=None,
                        help="Initial [b] for a + b <-> c (default 1)")
    parser.add_argument("--Ea", type=float, default=None,
                        help="Activation energy (default 10)")

    # Output
    parser.add_argument("--outdir", type=str, default="outputs",
                        help="Output directory for plots and results")
    parser.add_argument("--show", action="store_true",
                        help="Display plots interactively")
    parser.add_argument("--no-plots", dest="no_plots", action="store_true",
                        help="Skip plotting")
    parser.add_argument("--quiet", action="store_true",
                        help="Suppress progress output")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RunConfig:
    """Combine defaults, --config file, flags and --params into a RunConfig."""
    config = load_config(Path(args.config)) if args.config else RunConfig()

    flags = {name: getattr(args, name)
             for name in ("counts", "r", "N0", "K", "pp", "dd", "apoptosis",
                          "cycle_length", "k1", "k2", "b0", "Ea")}
    if args.section != "all":
        flags["sections"] = [args.section]
    config = config.updated(flags)

    return config.updated(parse_overrides(args.params))


def run_sections(config: RunConfig, quiet: bool = False) -> SectionResults:
    """Run the configured sections and print a short summary of each."""
    results = SectionResults(parameters=config.to_dict())

    def banner(title: str) -> None:
        if not quiet:
            print("\n" + "=" * 60)
            print(title)
            print("=" * 60)

    if "diversity" in config.sections:
        banner("Diversity indices")
        results.diversity = run_diversity(counts=config.counts)
        if not quiet:
            for name, s in results.diversity.summaries.items():
                print(f"  {name:15s}: N={s.total:4d}  R={s.richness:2d}  "
                      f"D={s.dominance:.4f}  S={s.simpson:.4f}  E={s.evenness:.4f}")

    if "networks" in config.sections:
        banner("Network metrics")
        results.networks = run_networks()
        if not quiet:
            for name, r in results.networks.items():
                s = r.summary
                print(f"  {name:10s}: {s.kind:20s} E={s.n_links:2d}  "
                      f"D={s.density:.3f}  <k>={s.average_degree:.2f}")

    if "landscapes" in config.sections:
        banner("Fitness landscapes")
        results.landscapes = run_landscapes()
        if not quiet:
            for name, r in results.landscapes.items():
                print(f"  {name:8s}: {len(r.peaks):3d} peaks, climb of {len(r.climb) - 1} steps "
                      f"reaches z={r.Z[r.climb[-1]]:.3f} (max {r.Z.max():.3f})")

    if "growth" in config.sections:
        banner("Population growth")
        results.growth = run_growth(r=config.r, N0=config.N0, K=config.K,
                                    cycle_lengths=config.cycle_lengths)
        if not quiet:
            for name, traj in results.growth.iterative.items():
                print(f"  {name:20s}: final = {traj.final:.4g}")
            for T, T_hat in results.growth.recovered_cycle_length.items():
                print(f"  logistic T={T:g}: recovered T = {T_hat:.4f}")

    if "stemcells" in config.sections:
        banner("Stem cells")
        params = StemCellParameters(
            modes=DivisionModes(pp=config.pp, dd=config.dd, apoptosis=config.apoptosis),
            P0=config.P0,
            D0=config.D0,
            cycle_length=config.cycle_length,
            t_max=config.t_max,
        )
        results.stemcells = run_stemcells(params, apoptosis=config.apoptosis)
        if not quiet:
            for name, traj in results.stemcells.trajectories.items():
                print(f"  {name:16s}: P={traj.P[-1]:10.2f}  D={traj.D[-1]:10.2f}  A={traj.A[-1]:8.2f}")
            for name, est in results.stemcells.estimates.items():
                ppdd, T = est.median()
                print(f"  estimate {name:20s}: pp-dd = {ppdd:.4f}, T = {T:.2f}")

    if "kinetics" in config.sections:
        banner("Chemical kinetics")
        results.kinetics = run_kinetics(k1=config.k1, k2=config.k2, b0=config.b0, Ea=config.Ea)
        if not quiet:
            for name, run in results.kinetics.runs.items():
                final = ", ".join(f"{s}={c:.4f}" for s, c in run.final.items())
                print(f"  {run.reaction.description:35s}: {final}")
            for name, value in results.kinetics.equilibrium_constants.items():
                print(f"  K_eq {name:18s} = {value:.4g} {results.kinetics.equilibrium_units[name]}")

    return results


def make_plots(results: SectionResults, outdir: Path, show: bool = False) -> None:
    """Save the figures of every section that was run."""
    from .plot import (
        plot_diversity,
        plot_networks,
        plot_landscapes,
        plot_growth_iterative,
        plot_growth_continuous,
        plot_stemcells,
        plot_parameter_estimates,
        plot_mass_action,
        plot_arrhenius,
    )

    if results.diversity is not None:
        plot_diversity(results.diversity, outdir, show=show)
    if results.networks is not None:
        plot_networks(results.networks, outdir, show=show)
    if results.landscapes is not None:
        plot_landscapes(results.landscapes, outdir, show=show)
    if results.growth is not None:
        plot_growth_iterative(results.growth, outdir, show=show)
        plot_growth_continuous(results.growth, outdir, show=show)
    if results.stemcells is not None:
        plot_stemcells(results.stemcells, outdir, show=show)
        plot_parameter_estimates(results.stemcells, outdir, show=show)
    if results.kinetics is not None:
        plot_mass_action(results.kinetics, outdir, show=show)
        plot_arrhenius(results.kinetics, outdir, show=show)


def run(args: argparse.Namespace) -> SectionResults:
    """Run the selected sections and write plots, report and JSON."""
    config = build_config(args)
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    start_time = time.time()
    results = run_sections(config, quiet=args.quiet)

    if not args.no_plots:
        make_plots(results, outdir, show=args.show)

    generate_report(results, outdir)
    save_results_json(results, outdir)

    if not args.quiet:
        elapsed = time.time() - start_time
        print(f"\nCompleted in {elapsed:.1f} seconds")
        print(f"Results saved to: {outdir.absolute()}")
        print(f"  - report.md")
        print(f"  - results.json")
        if not args.no_plots:
            print(f"  - *.png plots")

    return results


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    try:
        run(args)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
