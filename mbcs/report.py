"""
MBCS Report Generation

This module generates the markdown report and the JSON results file.
"""

from datetime import datetime
from pathlib import Path
import json
import numpy as np

from .experiments import SectionResults, summarize_results
from .landscapes import LANDSCAPE_MEDIA


def _fmt(value: float, fmt: str = ".4f") -> str:
    return format(value, fmt) if np.isfinite(value) else str(value)


def _diversity_section(results: SectionResults) -> list[str]:
    report = ["## Diversity", ""]
    report.append("$$D = \\frac{\\sum_i n_i (n_i - 1)}{N (N - 1)}, \\quad S = 1 - D, \\quad E = \\frac{1}{D \\cdot R}$$")
    report.append("")
    report.append("| Community | N | R | D | S | E |")
    report.append("|-----------|---|---|---|---|---|")
    for name, s in results.diversity.summaries.items():
        report.append(f"| {name} | {s.total} | {s.richness} | {_fmt(s.dominance)} | "
                      f"{_fmt(s.simpson)} | {_fmt(s.evenness)} |")
    report.append("")
    return report


def _networks_section(results: SectionResults) -> list[str]:
    report = ["## Networks", ""]
    report.append("$$D = \\frac{E - (N - 1)}{E_{max} - (N - 1)}$$")
    report.append("")
    report.append("| Network | Type | N | E | $E_{min}$ | $E_{max}$ | Density | $\\langle k \\rangle$ | $p_k$ |")
    report.append("|---------|------|---|---|-----------|-----------|---------|---------------------|-------|")
    for name, r in results.networks.items():
        s = r.summary
        p_k = ", ".join(f"{p:.2f}" for p in s.degree_distribution.p_k)
        report.append(f"| {name} | {s.kind} | {s.n_nodes} | {s.n_links} | {s.min_links} | "
                      f"{s.max_links} | {_fmt(s.density, '.3f')} | {s.average_degree:.2f} | {p_k} |")
    report.append("")
    report.append("Mean shortest distance from each node (lower is more central):")
    report.append("")
    for name, r in results.networks.items():
        dists = ", ".join(_fmt(d, ".2f") for d in r.mean_distances)
        report.append(f"- **{name}**: {dists}")
    report.append("")
    return report


def _landscapes_section(results: SectionResults) -> list[str]:
    report = ["## Fitness Landscapes", ""]
    report.append("| Landscape | Peaks | Climb steps | Height reached | Global max |")
    report.append("|-----------|-------|-------------|----------------|------------|")
    for name, r in results.landscapes.items():
        report.append(f"| {name} | {len(r.peaks)} | {len(r.climb) - 1} | "
                      f"{r.Z[r.climb[-1]]:.3f} | {r.Z.max():.3f} |")
    report.append("")
    report.append("A greedy climb ends on the nearest peak, which on a rugged landscape is")
    report.append("usually not the highest one.")
    report.append("")
    report.append("References:")
    report.append("")
    for key, url in LANDSCAPE_MEDIA.items():
        report.append(f"- {key.replace('_', ' ')}: <{url}>")
    report.append("")
    return report


def _growth_section(results: SectionResults) -> list[str]:
    g = results.growth
    report = ["## Population Growth", ""]
    report.append("$$N(t) = \\frac{K N_0}{N_0 + (K - N_0) e^{-\\mu t}}, \\quad \\mu = \\frac{\\ln 2}{T}$$")
    report.append("")
    report.append(f"Iterative models with r = {g.r}:")
    report.append("")
    report.append("| Model | Final population |")
    report.append("|-------|------------------|")
    for name, traj in g.iterative.items():
        report.append(f"| {traj.label} | {traj.final:.4g} |")
    report.append("")
    report.append(f"Logistic growth with $N_0$ = {g.N0:g}, K = {g.K:g}:")
    report.append("")
    report.append("| T | N(t_max) | Recovered T |")
    report.append("|---|----------|-------------|")
    for T, values in g.logistic.items():
        report.append(f"| {T:g} | {values[-1]:.2f} | {_fmt(g.recovered_cycle_length[T])} |")
    report.append("")
    report.append(f"Max difference between closed form and ODE solution: {g.logistic_numeric_error:.2e}")
    report.append("")
    return report


def _stemcells_section(results: SectionResults) -> list[str]:
    s = results.stemcells
    report = ["## Stem Cells", ""]
    report.append("$$P_t = P_0 (1 + pp - dd - ø)^{t/T}, \\quad D_t = D_0 + (P_t - P_0) \\frac{1 - pp + dd - ø}{pp - dd - ø}$$")
    report.append("")
    report.append("| Scenario | pp | dd | ø | $P(t_{max})$ | $D(t_{max})$ | $A(t_{max})$ |")
    report.append("|----------|----|----|---|--------------|--------------|--------------|")
    for name, traj in s.trajectories.items():
        m = traj.params.modes
        report.append(f"| {name} | {m.pp:g} | {m.dd:g} | {m.apoptosis:g} | {traj.P[-1]:.2f} | "
                      f"{traj.D[-1]:.2f} | {traj.A[-1]:.2f} |")
    report.append("")
    report.append("### Parameter estimation")
    report.append("")
    report.append("| Case | true pp - dd | estimated | true T | estimated |")
    report.append("|------|--------------|-----------|--------|-----------|")
    for name, est in s.estimates.items():
        ppdd, T = est.median()
        truth = s.estimation_truth[name]
        report.append(f"| {name} | {truth['pp'] - truth['dd']:.4f} | {_fmt(ppdd)} | "
                      f"{truth['cycle_length']:g} | {_fmt(T, '.2f')} |")
    report.append("")
    return report


def _kinetics_section(results: SectionResults) -> list[str]:
    k = results.kinetics
    report = ["## Chemical Kinetics", ""]
    report.append("$$v = k_1 \\prod [\\text{reactant}]^{\\nu} - k_2 \\prod [\\text{product}]^{\\nu}, \\quad K_{eq} = k_1 / k_2$$")
    report.append("")
    report.append("| Reaction | $k_1$ | $k_2$ | $k_1/k_2$ | Q at $t_{max}$ | Units |")
    report.append("|----------|-------|-------|-----------|----------------|-------|")
    for name, run in k.runs.items():
        Q = float(run.quotient[-1])
        report.append(f"| {run.reaction.description} | {run.k_forward:g} | {run.k_backward:g} | "
                      f"{run.k_forward / run.k_backward:.4f} | {_fmt(Q)} | {k.equilibrium_units[name]} |")
    report.append("")
    report.append("Equilibrium constants from equilibrium concentrations:")
    report.append("")
    for name, value in k.equilibrium_constants.items():
        report.append(f"- **{name}**: $K_{{eq}}$ = {value:.4g} {k.equilibrium_units[name]}")
    report.append("")
    report.append(f"Arrhenius law $k = A e^{{-E_a / (R T)}}$ with $E_a$ = {k.Ea:g}: "
                  f"k ranges from {k.rate_constant.min():.3e} to {k.rate_constant.max():.3e} "
                  f"over T in [{k.temperature.min():g}, {k.temperature.max():g}].")
    report.append("")
    return report


def generate_report(results: SectionResults, outdir: Path) -> str:
    """Generate the full markdown report.

    Args:
        results: Results of the sections that were run
        outdir: Output directory for report

    Returns:
        Report content as string
    """
    report = []

    report.append("# Mathematical Biology & Complex Systems Report")
    report.append("")
    report.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}*")
    report.append("")

    if results.parameters:
        report.append("## Parameters Used")
        report.append("")
        report.append("| Parameter | Value |")
        report.append("|-----------|-------|")
        for key, value in results.parameters.items():
            report.append(f"| {key} | {value} |")
        report.append("")

    if results.diversity is not None:
        report.extend(_diversity_section(results))
    if results.networks is not None:
        report.extend(_networks_section(results))
    if results.landscapes is not None:
        report.extend(_landscapes_section(results))
    if results.growth is not None:
        report.extend(_growth_section(results))
    if results.stemcells is not None:
        report.extend(_stemcells_section(results))
    if results.kinetics is not None:
        report.extend(_kinetics_section(results))

    report_content = "\n".join(report)
    report_path = outdir / "report.md"
    report_path.write_text(report_content)

    return report_content


def save_results_json(results: SectionResults, outdir: Path) -> dict:
    """Save all numerical results to JSON.

    Args:
        results: Results of the sections that were run
        outdir: Output directory

    Returns:
        Results dictionary
    """
    data = summarize_results(results)
    data["timestamp"] = datetime.now().isoformat()

    json_path = outdir / "results.json"
    with open(json_path, 'w') as f:
        json.dump(data, f, indent=2)

    return data
