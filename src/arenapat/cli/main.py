"""Pattern file command-line tool.

Usage:
    arenapat inspect G6_2x10_grating_G6.pat
    arenapat verify PAT0001.pat --generation G4.1
    arenapat upgrade old_G4.pat new_G4.pat --arena-id 3
    arenapat --config scripts/user_config.py verify G6_2x10_grating_G6.pat

Commands read the same Param < User < CLI configuration as library code:
``--config`` names a Python file with a ``CONFIG`` dict.
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from arenapat import __version__
from arenapat.arena.generations import HeaderFamily
from arenapat.codec.headers import HeaderVersion
from arenapat.codec.pattern_codec import PatternCodec
from arenapat.patfile import load_pattern, read_pattern_header
from arenapat.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: str = "INFO") -> None:
    """Send log records to the console with the standard formatter."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add a console handler
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_config(args: argparse.Namespace) -> InternalConfig:
    """Resolve Param < User < CLI configuration for parsed arguments."""
    param_cfg = ParamConfig()

    if args.config:
        user_cfg = UserConfig.model_validate(load_user_config_dict(args.config))
    else:
        user_cfg = UserConfig()

    cli_cfg = CLIConfig.model_validate({
        k: v
        for k, v in {
            "header_version": getattr(args, "header_version", None),
            "overwrite": True if getattr(args, "overwrite", False) else None,
            "log_level": "DEBUG" if args.verbose else args.log_level,
        }.items()
        if v is not None
    })

    return resolve_config(param_cfg, user_cfg, cli_cfg)


# =============================================================================
# Commands
# =============================================================================

def cmd_inspect(args: argparse.Namespace, config: InternalConfig) -> int:
    """Print the header fields of a pattern file."""
    header = read_pattern_header(args.file)
    fields = header.describe()

    print(f"\n{'='*60}")
    print(f"Pattern file: {args.file}")
    print('='*60)
    for key, value in fields.items():
        print(f"{key:16s}: {value}")
    print('='*60)

    if args.json:
        print(json.dumps(fields, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace, config: InternalConfig) -> int:
    """Fully decode a pattern file; exit 0 only when every check passes."""
    decoded = load_pattern(
        args.file,
        expected_generation=args.generation,
        geometry=config.geometry(),
    )
    pattern = decoded.pattern
    print(
        f"OK: {args.file} - {decoded.geometry.name}, {pattern.x_num}x{pattern.y_num} frames, "
        f"{pattern.bit_depth.name.lower()}, header V{decoded.header.version:d}"
    )
    return 0


def cmd_upgrade(args: argparse.Namespace, config: InternalConfig) -> int:
    """Re-encode a pattern file, typically from a V1 to a V2 header."""
    out = Path(args.out)
    if out.exists() and not config.codec.overwrite:
        raise FileExistsError(f"Output file already exists: {out} (use --overwrite)")

    decoded = load_pattern(args.file, geometry=config.geometry())
    geometry = decoded.geometry
    version = HeaderVersion.coerce(config.codec.header_version)

    ids = {}
    if args.arena_id is not None:
        ids["arena_id"] = args.arena_id
    if args.observer_id is not None:
        ids["observer_id"] = args.observer_id
    if (
        version is HeaderVersion.V2
        and geometry.generation.family is HeaderFamily.G4
        and decoded.pattern.generation_id == 0
    ):
        # V2 G4 headers identify their generation.
        ids["generation_id"] = geometry.generation.generation_id
    pattern = decoded.pattern.with_ids(**ids) if ids else decoded.pattern

    data = PatternCodec(geometry, version).encode(pattern)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    logger.info(
        "Upgraded %s (V%d) -> %s (V%d, %d bytes)",
        args.file, decoded.header.version, out, version, len(data),
    )
    return 0


COMMANDS = {
    "inspect": cmd_inspect,
    "verify": cmd_verify,
    "upgrade": cmd_upgrade,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arenapat",
        description="Inspect, verify and upgrade LED arena pattern files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to user config file (Python, CONFIG dict)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Override log level")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Print header fields")
    p_inspect.add_argument("file", help="Pattern file (.pat)")
    p_inspect.add_argument("--json", action="store_true", help="Also print fields as JSON")

    p_verify = sub.add_parser("verify", help="Decode the whole file and check every frame")
    p_verify.add_argument("file", help="Pattern file (.pat)")
    p_verify.add_argument("--generation", help="Expected generation (G4, G4.1, G6)")

    p_upgrade = sub.add_parser("upgrade", help="Re-encode with another header version")
    p_upgrade.add_argument("file", help="Input pattern file (.pat)")
    p_upgrade.add_argument("out", help="Output pattern file (.pat)")
    p_upgrade.add_argument("--header-version", type=int, choices=[1, 2], help="Header version to write")
    p_upgrade.add_argument("--arena-id", type=int, help="Arena id to embed")
    p_upgrade.add_argument("--observer-id", type=int, help="Observer id to embed (G6)")
    p_upgrade.add_argument("--overwrite", action="store_true", help="Replace an existing output file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``arenapat`` console script. Returns the exit status."""
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else (args.log_level or "INFO"))

    try:
        config = build_config(args)
        setup_logging(config.logging.level)
        return COMMANDS[args.command](args, config)
    except (ValueError, FileNotFoundError, FileExistsError) as e:
        # PatternCodecError and pydantic.ValidationError are ValueErrors.
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
