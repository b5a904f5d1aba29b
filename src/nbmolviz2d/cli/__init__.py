"""nbmolviz2d CLI: lay out molecules and replay view traffic headlessly.

Entry point for the `nbmolviz2d` command. Requires ``pip install nbmolviz2d[cli]``.

Commands:
    render    Run the layout for a graph and write SVG/HTML or positions
    inspect   Show node/link counts and the visual index of a graph
    replay    Feed recorded messages to a view and show its responses
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install nbmolviz2d[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all commands."""
    _require_typer()

    import typer

    from nbmolviz2d.cli.render_cmd import register_commands as register_render
    from nbmolviz2d.cli.replay_cmd import register_commands as register_replay

    app = typer.Typer(
        name="nbmolviz2d",
        help="Headless 2D molecule layout and view message replay.",
        no_args_is_help=True,
    )
    register_render(app)
    register_replay(app)

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
