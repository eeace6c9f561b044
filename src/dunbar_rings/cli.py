"""CLI for dunbar-rings."""

import argparse
import json
import logging
from pathlib import Path

from .layout import (
    DEFAULT_RINGS,
    HtmlRenderSink,
    RenderBudget,
    ViewportState,
    capacity_status,
    group_by_ring,
    normalize_contacts,
)
from .logging_config import setup_logging
from .visualizer import CircularVisualizer

# Config file key -> argparse dest
CONFIG_KEYS = {
    "threshold": "threshold",
    "fringe-buffer": "fringe_buffer",
    "max-rendered-items": "max_rendered_items",
    "visible-radius": "visible_radius",
    "scale": "scale",
    "output": "output",
    "groups-file": "groups_file",
}


def load_config(config_path: Path) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dictionary of configuration values.
    """
    try:
        import yaml

        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    except ImportError as err:
        raise ImportError("PyYAML required for config files: pip install pyyaml") from err


def load_contacts(contacts_path: Path) -> tuple[list[dict], list]:
    """Load contacts (and optional groups) from a JSON file.

    The file holds either a list of contacts or an object with a "contacts"
    list and an optional "groups" list.

    Returns:
        Tuple of (contacts, groups).
    """
    with open(contacts_path) as f:
        data = json.load(f)

    if isinstance(data, list):
        return data, []
    if isinstance(data, dict) and isinstance(data.get("contacts"), list):
        return data["contacts"], data.get("groups") or []
    raise ValueError(f"{contacts_path}: expected a list of contacts or a 'contacts' key")


def load_groups(groups_path: Path) -> list:
    """Load group records ({"id", "name"}) or plain group ids from a JSON list."""
    with open(groups_path) as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"{groups_path}: expected a list of groups")
    return data


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments shared between subcommands."""
    parser.add_argument("--contacts", type=Path, help="JSON file with contacts")
    parser.add_argument("--config", type=Path, help="Path to YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def resolve_common_args(args: argparse.Namespace, parser: argparse.ArgumentParser) -> dict:
    """Load config, validate and resolve paths. Returns the loaded config."""
    config = load_config(args.config) if args.config else {}

    if not args.contacts and "contacts" in config:
        args.contacts = Path(config["contacts"])
    if not args.contacts:
        parser.error("--contacts is required")
    args.contacts = args.contacts.resolve()
    if not args.contacts.exists():
        parser.error(f"contacts file not found: {args.contacts}")

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    return config


def apply_config(args: argparse.Namespace, config: dict) -> None:
    """Fill unset render options from config. Command line flags win."""
    for key, dest in CONFIG_KEYS.items():
        if getattr(args, dest, None) is None and key in config:
            setattr(args, dest, config[key])
    if args.center is None and "center-x" in config and "center-y" in config:
        args.center = [config["center-x"], config["center-y"]]
    if not args.no_virtualization and config.get("virtualization") is False:
        args.no_virtualization = True
    if args.hysteresis is None:
        args.hysteresis = bool(config.get("hysteresis", False))


def build_visualizer(args: argparse.Namespace) -> CircularVisualizer:
    """Construct the visualizer and its HTML sink from resolved args."""
    defaults = RenderBudget()
    budget = RenderBudget(
        threshold=int(args.threshold if args.threshold is not None else defaults.threshold),
        fringe_buffer=float(
            args.fringe_buffer if args.fringe_buffer is not None else defaults.fringe_buffer
        ),
        max_rendered_items=int(
            args.max_rendered_items
            if args.max_rendered_items is not None
            else defaults.max_rendered_items
        ),
        hysteresis=args.hysteresis,
    )

    viewport_defaults = ViewportState()
    center_x, center_y = (
        args.center
        if args.center is not None
        else (viewport_defaults.center_x, viewport_defaults.center_y)
    )
    viewport = ViewportState(
        center_x=float(center_x),
        center_y=float(center_y),
        visible_radius=float(
            args.visible_radius
            if args.visible_radius is not None
            else viewport_defaults.visible_radius
        ),
        scale=float(args.scale if args.scale is not None else viewport_defaults.scale),
    )

    output = Path(args.output or "rings.html").resolve()
    return CircularVisualizer(
        sink=HtmlRenderSink(output),
        budget=budget,
        viewport=viewport,
        virtualization_enabled=not args.no_virtualization,
        group_filter=args.group,
    )


def print_distribution(distribution: dict[str, int], dropped: int) -> None:
    """Print per-ring counts against recommended and maximum sizes."""
    print("\n=== RING DISTRIBUTION ===")
    for ring in DEFAULT_RINGS:
        capacity = capacity_status(ring, distribution.get(ring.id, 0))
        print(
            f"  {ring.name:<16} {capacity.current_size:5d} / {capacity.recommended_size:<5d}"
            f" (max {capacity.max_size}) {capacity.status}"
        )
    if dropped:
        print(f"  {dropped} contact(s) without a known ring were not placed")


def cmd_render(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Run the render subcommand."""
    config = resolve_common_args(args, parser)
    apply_config(args, config)

    try:
        contacts, groups = load_contacts(args.contacts)
        if args.groups_file is not None:
            groups = load_groups(args.groups_file)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    try:
        visualizer = build_visualizer(args)
    except ValueError as e:
        parser.error(str(e))

    print(f"Rendering {len(contacts)} contacts from {args.contacts}...")
    visualizer.render(contacts, groups)

    metrics = visualizer.get_performance_metrics()
    print_distribution(visualizer.get_ring_distribution(), metrics.dropped_contacts)

    mode = "virtualized" if metrics.virtualization_active else "full"
    print(
        f"\nRendered {metrics.rendered_contacts}/{metrics.total_contacts} contacts"
        f" ({mode}) in {metrics.last_render_time_ms:.2f}ms"
    )
    if metrics.render_count:
        print(f"Wrote {visualizer.sink.output_path}")


def cmd_distribution(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Run the distribution subcommand."""
    resolve_common_args(args, parser)

    try:
        contacts, _ = load_contacts(args.contacts)
    except ValueError as e:
        parser.error(str(e))

    grouping = group_by_ring(normalize_contacts(contacts))
    print(f"{len(contacts)} contacts in {args.contacts}")
    print_distribution(grouping.distribution(), len(grouping.dropped))


def main() -> None:
    """Main entry point for dunbar-rings CLI."""
    parser = argparse.ArgumentParser(
        description="Arrange contacts on concentric closeness rings"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser(
        "render",
        help="Lay out contacts and write an interactive HTML diagram",
    )
    add_common_args(render_parser)
    render_parser.add_argument(
        "--output",
        type=Path,
        help="Output HTML file (default: rings.html)",
    )
    render_parser.add_argument(
        "--threshold",
        type=int,
        help="Contact count at which viewport culling kicks in (default: 100)",
    )
    render_parser.add_argument(
        "--max-rendered-items",
        type=int,
        help="Maximum contacts drawn at once when culling (default: 200)",
    )
    render_parser.add_argument(
        "--fringe-buffer",
        type=float,
        help="Extra distance beyond the visible radius still drawn (default: 20)",
    )
    render_parser.add_argument(
        "--center",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        help="Viewport center (default: 450 450)",
    )
    render_parser.add_argument(
        "--visible-radius",
        type=float,
        help="Viewport visible radius (default: 500)",
    )
    render_parser.add_argument("--scale", type=float, help="Viewport zoom scale")
    render_parser.add_argument(
        "--hysteresis",
        action="store_const",
        const=True,
        help="Keep previously drawn contacts until 2x fringe buffer",
    )
    render_parser.add_argument(
        "--no-virtualization",
        action="store_true",
        help="Always draw every contact",
    )
    render_parser.add_argument(
        "--group",
        type=str,
        help="Only draw members of this group id",
    )
    render_parser.add_argument(
        "--groups-file",
        type=Path,
        help="JSON list of groups; overrides groups in the contacts file",
    )

    distribution_parser = subparsers.add_parser(
        "distribution",
        help="Show how many contacts sit in each ring",
    )
    add_common_args(distribution_parser)

    args = parser.parse_args()

    if args.command == "render":
        cmd_render(args, render_parser)
    elif args.command == "distribution":
        cmd_distribution(args, distribution_parser)
    else:
        # No subcommand provided - show help
        parser.print_help()


if __name__ == "__main__":
    main()
