# main.py
import click

from benchmark import BenchmarkRunner
from config import CacheConfig, ConfigError, load_config
from simulator import CacheSimulator
from tracefile import TraceError, read_trace
from visualize import plot_hit_miss_rate, plot_sweep

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    """LRU set-associative cache simulator."""


@cli.command("run", context_settings=CONTEXT_SETTINGS)
@click.option("-s", "s", type=int, required=True, help="Number of set index bits (S = 2^s is the number of sets).")
@click.option("-E", "E", type=int, required=True, help="Number of lines per set (associativity).")
@click.option("-b", "b", type=int, required=True, help="Number of block offset bits (B = 2^b is the block size).")
@click.option("-t", "trace_file", type=click.Path(dir_okay=False), required=True, help="Trace file to replay.")
@click.option("-v", "verbose", is_flag=True, help="Print the outcome of every trace record.")
@click.option("--strict", is_flag=True, help="Reject the whole trace on a malformed line instead of skipping it.")
def run(s, E, b, trace_file, verbose, strict):
    """Replay a Valgrind trace and print hits, misses and evictions.

    \b
    Examples:
      csim run -s 4 -E 1 -b 4 -t traces/yi.trace
      csim run -v -s 8 -E 2 -b 4 -t traces/yi.trace
    """
    try:
        config = CacheConfig(s, b, E)
    except ConfigError as e:
        raise click.UsageError(str(e))
    try:
        records, skipped = read_trace(trace_file, strict=strict)
    except TraceError as e:
        raise click.ClickException(str(e))

    on_record = None
    if verbose:
        def on_record(record, outcomes):
            click.echo(f"{record} {' '.join(r.value for r in outcomes)}")

    stats = CacheSimulator(config).replay(records, on_record=on_record)
    if skipped:
        click.echo(f"skipped {skipped} malformed trace line(s)", err=True)
    click.echo(stats.summary())


@cli.command("benchmark", context_settings=CONTEXT_SETTINGS)
@click.option("--config", "config_path", default="config.json", show_default=True,
              type=click.Path(dir_okay=False), help="JSON benchmark configuration.")
@click.option("--no-plots", is_flag=True, help="Skip writing plots.")
def benchmark(config_path, no_plots):
    """Run a synthetic or trace-driven benchmark and geometry sweep."""
    try:
        cfg = load_config(config_path)
        runner = BenchmarkRunner(cfg)
    except ConfigError as e:
        raise click.UsageError(str(e))
    click.echo(f"Starting benchmark with cache {runner.config.label()}")
    try:
        summary, stats, sweep_results = runner.run()
    except TraceError as e:
        raise click.ClickException(str(e))
    out_cfg = runner.output
    results_path = runner.save_results(summary, sweep_results, out_cfg)
    click.echo(stats.summary())
    click.echo(f"Results saved to: {results_path}")

    if not no_plots:
        plot_hit_miss_rate(stats, out_cfg.get("hitmiss_plot", "results/hit_miss_rate.png"))
        if sweep_results:
            plot_sweep(sweep_results, out_cfg.get("sweep_plot", "results/sweep_miss_rate.png"))
        click.echo("Plots saved in " + out_cfg.get("results_dir", "results") + "/")


if __name__ == "__main__":
    cli()
