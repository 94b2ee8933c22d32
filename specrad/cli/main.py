"""
Main CLI entry point for specrad.
"""

import argparse
import sys
from pathlib import Path

from specrad import __version__
from specrad.core.logging_config import setup_logging, get_logger

logger = get_logger("cli.main")


def _build(config_path: str):
    from specrad.core.config import load_config
    from specrad.radiation.builder import build_radiation

    logger.info(f"Loading configuration from {config_path}")
    config = load_config(config_path)
    return build_radiation(config, base_dir=Path(config_path).parent)


def _emit(df, output, header: str) -> None:
    from specrad.io.output import save_dataframe

    if output:
        save_dataframe(df, output, header=header)
        print(f"Results saved to {output}")
    else:
        print(f"# {header}")
        print(df.to_csv(index=False), end="")


def flux_cmd(args):
    """Flux command."""
    from specrad.io.column import load_column
    from specrad.io.output import flux_dataframe

    radiation = _build(args.config)
    column = load_column(args.column)

    logger.info("Computing fluxes...")
    radiation.cal_flux(column, 0)
    _emit(flux_dataframe(radiation, 0), args.output, "Fluxes in W m^-2, level 0 at the top")
    logger.info("Flux calculation complete")


def radiance_cmd(args):
    """Radiance command."""
    from specrad.io.column import load_column
    from specrad.io.output import radiance_dataframe

    radiation = _build(args.config)
    column = load_column(args.column)

    logger.info("Computing radiances...")
    radiation.cal_radiance(column, 0)
    _emit(radiance_dataframe(radiation, 0), args.output, "TOA radiance in W m^-2 sr^-1")
    logger.info("Radiance calculation complete")


def info_cmd(args):
    """Print the configured bands."""
    radiation = _build(args.config)

    print(f"Layers: {radiation.nlayer}, columns: {radiation.ncol}")
    print(f"Directions (mu, phi): {radiation.directions.tolist()}")
    for band in radiation:
        grid = band.grid
        solver = band.solver.solver_type if band.solver is not None else "none"
        print(f"\nBand {band.name}:")
        print(f"  Grid: {grid.grid_type}, {len(grid)} bins, {grid.wmin:.6g}-{grid.wmax:.6g} cm^-1")
        print(f"  Phase moments: {band.npmom}")
        print(f"  Solver: {solver}")
        for absorber in band.absorbers:
            print(f"  Absorber: {absorber.name} ({absorber.absorber_type})")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="specrad: spectral optical properties and band fluxes of atmospheric columns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Flux command
    flux_parser = subparsers.add_parser("flux", help="Compute band and total fluxes per level")
    flux_parser.add_argument("config", type=str, help="Path to configuration file (YAML or JSON)")
    flux_parser.add_argument("column", type=str, help="Path to column CSV file")
    flux_parser.add_argument(
        "--output", type=str, default=None, help="Output CSV path (default: print to stdout)"
    )
    flux_parser.set_defaults(func=flux_cmd)

    # Radiance command
    radiance_parser = subparsers.add_parser(
        "radiance", help="Compute top-of-atmosphere radiance per band and direction"
    )
    radiance_parser.add_argument(
        "config", type=str, help="Path to configuration file (YAML or JSON)"
    )
    radiance_parser.add_argument("column", type=str, help="Path to column CSV file")
    radiance_parser.add_argument(
        "--output", type=str, default=None, help="Output CSV path (default: print to stdout)"
    )
    radiance_parser.set_defaults(func=radiance_cmd)

    # Info command
    info_parser = subparsers.add_parser("info", help="Show bands, grids and absorbers")
    info_parser.add_argument("config", type=str, help="Path to configuration file (YAML or JSON)")
    info_parser.set_defaults(func=info_cmd)

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(level=args.log_level)

    # Execute command
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Error executing command: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
