"""
Real-Time Task Scheduling Simulator (command-line host)

Runs the discrete-time simulator under RMS, EDF, Hybrid or Energy-Hybrid,
prints the metrics and optionally draws a Gantt chart of the run.

Dependencies:
- Python 3.8+
- numpy
- matplotlib

Examples:
    python main.py --scheduler energy-hybrid --total-time 200 --plot
    python main.py --scheduler all --tasks my_tasks.json
"""

import argparse
import json
import sys
from typing import Optional, Dict, Sequence

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from app import TaskLoadError, get_sample_tasks, load_tasks_from_file
from logging_config import LoggingFlags, log_if
from metrics import SimulationResult
from schedulers import SCHEDULERS
from simulator import (DEFAULT_LAXITY_THRESHOLD, DEFAULT_TOTAL_TIME, compare_schedulers,
                       run_simulation)
from task_model import CPUState

COLOR_CRITICAL = "#2563eb"
COLOR_DEADLINE = "#ff3333"

# ------------------------------
# Visualization
# ------------------------------

def plot_gantt(result: SimulationResult, title: str = "Gantt", show: bool = True, save_path: Optional[str] = None):
    """Gantt of every task's run segments plus a power strip for energy runs."""
    tasks = result.tasks
    energy_run = result.scheduler == "energy-hybrid"
    horizon = max(1, result.total_sim_time)

    plt.style.use('dark_background')
    rows = 2 if energy_run else 1
    fig, axes = plt.subplots(rows, 1, figsize=(12, 2 + max(1, len(tasks)) * 0.5 + (2 if energy_run else 0)),
                             sharex=True, squeeze=False)
    fig.suptitle(title, fontsize=16, color="#00e5ff", fontweight='bold')
    ax = axes[0][0]

    cmap = plt.get_cmap('cool')
    shades = [cmap(i) for i in np.linspace(0.1, 0.9, max(1, len(tasks)))]

    for row, t in enumerate(tasks):
        color = COLOR_CRITICAL if t.is_critical else shades[row]
        for seg in t.history:
            ax.barh(row, seg.end_tick - seg.start_tick, left=seg.start_tick, height=0.6,
                    color=color, edgecolor='black')
        if 0 <= t.abs_deadline <= horizon:
            ax.vlines(t.abs_deadline, row - 0.4, row + 0.4, colors=COLOR_DEADLINE, linestyles=':')
        if t.completed and t.completion_time > t.abs_deadline:
            ax.text(t.completion_time, row, "MISS", color='red', fontsize=8)

    ax.set_yticks(range(len(tasks)))
    ax.set_yticklabels([f"{t.id} (C)" if t.is_critical else t.id for t in tasks], color="white")
    ax.set_xlim(0, horizon)
    ax.invert_yaxis()
    ax.grid(True, axis='x', linestyle=':', alpha=0.2)
    ax.legend(handles=[mpatches.Patch(color=COLOR_CRITICAL, label="critical"),
                       mpatches.Patch(color=COLOR_DEADLINE, label="deadline")],
              loc="upper right", fontsize=8)

    if energy_run:
        power = {s.label: s.power for s in CPUState}
        p_ax = axes[1][0]
        ticks = [e.tick for e in result.timeline]
        vals = [power[e.cpu_state] for e in result.timeline]
        p_ax.step(ticks, vals, where='post', color='#00e5ff')
        p_ax.fill_between(ticks, vals, step='post', color='#00e5ff', alpha=0.2)
        p_ax.set_ylabel("Power", color="#00e5ff")

    summary = (f"ENG: {result.total_energy:.1f} | UTIL: {result.cpu_utilization * 100:.1f}% | "
               f"MISS: {result.deadline_miss_ratio * 100:.1f}%")
    fig.text(0.02, 0.02, summary, fontsize=10, color="#00e5ff", fontfamily="monospace")
    plt.tight_layout(rect=[0, 0.05, 1, 0.95])

    if save_path:
        fig.savefig(save_path)
    if show:
        plt.show()
    return fig

# ------------------------------
# Reporting
# ------------------------------

def print_metrics(result: SimulationResult):
    log_if(LoggingFlags.RUN_SUMMARY, f"Scheduler: {result.scheduler}")
    log_if(LoggingFlags.RUN_SUMMARY, f"  Total sim time: {result.total_sim_time} ticks")
    log_if(LoggingFlags.RUN_SUMMARY, f"  CPU busy ticks: {result.cpu_busy_time}")
    log_if(LoggingFlags.RUN_SUMMARY, f"  CPU utilization: {result.cpu_utilization * 100:.2f}%")
    log_if(LoggingFlags.RUN_SUMMARY, f"  Total energy: {result.total_energy}")
    log_if(LoggingFlags.RUN_SUMMARY, f"  Average turnaround: {result.avg_turnaround:.2f}")
    log_if(LoggingFlags.RUN_SUMMARY, f"  Deadline miss ratio: {result.deadline_miss_ratio * 100:.2f}%")
    for miss in result.deadline_misses:
        log_if(LoggingFlags.RUN_SUMMARY, f"    missed {miss['id']} (completed={miss['completed']}, "
                                         f"at {miss['completion_time']}, deadline {miss['abs_deadline']})")

def print_comparison(results: Dict[str, SimulationResult]):
    header_fmt = "{:<14} {:>9} {:>9} {:>10} {:>8} {:>8}"
    row_fmt = "{:<14} {:>9.1f} {:>9.3f} {:>10.2f} {:>8.3f} {:>8}"
    log_if(LoggingFlags.RUN_SUMMARY, header_fmt.format("Scheduler", "Energy", "MissRate", "Turnaround", "Util", "SimTime"))
    for name, r in results.items():
        log_if(LoggingFlags.RUN_SUMMARY, row_fmt.format(name, r.total_energy, r.deadline_miss_ratio,
                                                        r.avg_turnaround, r.cpu_utilization, r.total_sim_time))

# ------------------------------
# CLI
# ------------------------------

def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Discrete-time real-time scheduling simulator.")
    parser.add_argument("--scheduler", default="edf",
                        help=f"One of {', '.join(SCHEDULERS)} or 'all'. Unknown names fall back to edf.")
    parser.add_argument("--total-time", default=DEFAULT_TOTAL_TIME,
                        help="Simulation horizon in ticks (invalid values use 200).")
    parser.add_argument("--laxity-threshold", default=DEFAULT_LAXITY_THRESHOLD,
                        help="Slack above which energy-hybrid drops to the power saver state.")
    parser.add_argument("--tasks", default=None, help="JSON or CSV task file. Defaults to the bundled sample.")
    parser.add_argument("--reselect-on-block", action="store_true",
                        help="Try the next candidate when the selected task is blocked on a resource.")
    parser.add_argument("--log", action="store_true", help="Print the execution trace.")
    parser.add_argument("--plot", action="store_true", help="Show a Gantt chart of the run.")
    parser.add_argument("--plot-file", default=None, help="Save the Gantt chart to this file instead of showing it.")
    parser.add_argument("--export", default=None, help="Write the result bundle as JSON.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable all console debug output.")
    verbosity.add_argument("--quiet", action="store_true", help="Only print the summary.")
    return parser.parse_args(argv)

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    if args.verbose: LoggingFlags.enable_all_debug()
    elif args.quiet: LoggingFlags.set_production_mode()

    try:
        tasks = load_tasks_from_file(args.tasks) if args.tasks else get_sample_tasks()
    except TaskLoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.scheduler.strip().lower() == "all":
        results = compare_schedulers(tasks, total_time=args.total_time, laxity_threshold=args.laxity_threshold,
                                     reselect_on_block=args.reselect_on_block)
        print_comparison(results)
        if args.export:
            with open(args.export, "w") as f:
                json.dump({name: r.to_dict() for name, r in results.items()}, f, indent=2)
        return 0

    result = run_simulation(tasks, args.scheduler, args.total_time, args.laxity_threshold, args.reselect_on_block)
    print_metrics(result)
    if args.log:
        for line in result.log: print(line)
    if args.export:
        with open(args.export, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
    if args.plot or args.plot_file:
        plot_gantt(result, f"{result.scheduler.upper()} | {len(result.tasks)} tasks",
                   show=args.plot and not args.plot_file, save_path=args.plot_file)
    return 0

if __name__ == "__main__":
    sys.exit(main())
