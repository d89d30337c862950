"""
lootforge - Main Entry Point

Command-line front end: load a loot catalog (or the built-in demo catalog),
generate a batch of items and write it as JSON.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lootforge.content_loader.config_import import ConfigImportError
from lootforge.content_loader.demo_catalog import build_demo_catalog
from lootforge.content_loader.item_export import items_to_json, save_items
from lootforge.data_models import (
    GenerationOptions,
    GenerationOverrides,
    Item,
    LootRoller,
    ScalingMode,
)
from lootforge.items.loot_generator import LootGenerator
from lootforge.observability.run_log import RunLog
from lootforge.tables.weighted_selector import InvalidDataError


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for one command-line generation run."""

    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    use_demo: bool = False
    run_log_path: Optional[Path] = None
    seed: Optional[int] = None
    verbose: bool = False

    options: GenerationOptions = field(default_factory=GenerationOptions)
    overrides: GenerationOverrides = field(default_factory=GenerationOverrides)

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.input_path, str):
            self.input_path = Path(self.input_path)
        if isinstance(self.output_path, str):
            self.output_path = Path(self.output_path)
        if isinstance(self.run_log_path, str):
            self.run_log_path = Path(self.run_log_path)


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lootforge",
        description="Generate random, level-scaled loot items from a loot catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lootforge -i data/loot/example_loot.toml -n 10 -o loot.json
  lootforge --demo -n 5 --exponential -s 1.1
  lootforge --demo -n 20 --quality legendary --type weapon --seed 42
        """
    )

    parser.add_argument(
        "-i", "--input",
        type=Path,
        help="Loot catalog file (.toml or .json); required unless --demo is given",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write generated items to this JSON file (default: stdout)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the built-in demo catalog instead of a file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    gen_group = parser.add_argument_group("Generation Options")
    gen_group.add_argument(
        "-n", "--num-items",
        type=int,
        required=True,
        help="Number of items to generate",
    )
    gen_group.add_argument(
        "-b", "--base-level",
        type=float,
        default=10.0,
        help="Average item level (default: 10.0)",
    )
    gen_group.add_argument(
        "-v", "--level-variance",
        type=float,
        default=5.0,
        help="Range around the base level (default: 5.0)",
    )
    gen_group.add_argument(
        "-a", "--affix-chance",
        type=float,
        default=0.75,
        help="Probability of prefixes, suffixes and optional attributes, 0.0-1.0 (default: 0.75)",
    )
    gen_group.add_argument(
        "--exponential",
        action="store_true",
        help="Use exponential attribute scaling instead of linear",
    )
    gen_group.add_argument(
        "-s", "--scaling-factor",
        type=float,
        default=1.0,
        help="Attribute scaling factor (default: 1.0)",
    )
    gen_group.add_argument(
        "--seed",
        type=int,
        help="Seed the random source for a reproducible batch",
    )

    override_group = parser.add_argument_group("Overrides")
    override_group.add_argument("--quality", default="", help="Force every item to this quality")
    override_group.add_argument("--type", dest="item_type", default="", help="Force every item to this type")
    override_group.add_argument("--subtype", default="", help="Force every item to this subtype")

    parser.add_argument(
        "--run-log",
        type=Path,
        help="Save a run log of selections and items to this JSON file",
    )
    return parser


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.demo and args.input is None:
        parser.error("--input is required unless --demo is specified")
    return args


def create_config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """
    Create GeneratorConfig from parsed arguments.

    Raises:
        ValueError: If the generation options are out of range
    """
    return GeneratorConfig(
        input_path=args.input,
        output_path=args.output,
        use_demo=args.demo,
        run_log_path=args.run_log,
        seed=args.seed,
        verbose=args.verbose,
        options=GenerationOptions(
            number_of_items=args.num_items,
            base_level=args.base_level,
            level_variance=args.level_variance,
            affix_chance=args.affix_chance,
            scaling_mode=ScalingMode.EXPONENTIAL if args.exponential else ScalingMode.LINEAR,
            scaling_factor=args.scaling_factor,
        ),
        overrides=GenerationOverrides(
            quality=args.quality,
            item_type=args.item_type,
            subtype=args.subtype,
        ),
    )


# =============================================================================
# RUNNING
# =============================================================================

def run(config: GeneratorConfig) -> list[Item]:
    """
    Generate a batch for a configuration.

    Returns:
        The generated items

    Raises:
        ConfigImportError: If the catalog file is malformed
        InvalidDataError: If the catalog cannot produce items
    """
    run_log = RunLog() if config.run_log_path else None
    generator = LootGenerator(
        catalog=build_demo_catalog() if config.use_demo else None,
        roller=LootRoller(seed=config.seed),
        run_log=run_log,
    )
    if not config.use_demo:
        generator.load_config(config.input_path)

    try:
        return generator.generate_loot(config.options, config.overrides)
    finally:
        if run_log is not None:
            run_log.save(str(config.run_log_path))


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    try:
        config = create_config_from_args(args)
        items = run(config)
    except (ConfigImportError, InvalidDataError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if config.output_path is not None:
        count = save_items(items, config.output_path)
        print(f"Generated {count} items and saved to {config.output_path}", file=sys.stderr)
    else:
        print(items_to_json(items, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
