"""
Confluence MCP CLI — process entry point

Commands:
    confluence-mcp               Start the MCP server (stdio mode)
    confluence-mcp server        Same, spelled out
    confluence-mcp check-config  Report which Confluence settings are present
    confluence-mcp mcp-config    Print an MCP client JSON config
"""

import asyncio
import json
import shutil
import sys

import click

from confluence_mcp import __version__
from confluence_mcp.config import Config


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="confluence-mcp")
@click.pass_context
def main(ctx):
    """Confluence read/search tools for MCP clients."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(server)


@main.command()
def server():
    """Start the Confluence MCP server (stdio mode)."""
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        click.echo(f"Fatal error: {exc}", err=True)
        sys.exit(1)


async def _serve():
    # Validate before importing modules that open log files.
    Config.validate()

    from confluence_mcp.api.client import ConfluenceClient
    from confluence_mcp.server.server import RawMCPServer
    from confluence_mcp.tools import ALL_TOOLS, confluence_tools, dispatch

    client = ConfluenceClient.from_config()
    confluence_tools.set_client(client)

    srv = RawMCPServer()
    srv.register_tools(ALL_TOOLS, dispatch)
    srv.on_shutdown(client.aclose)
    await srv.run()


@main.command("check-config")
def check_config():
    """Report which required Confluence settings are present."""
    click.echo("Confluence MCP configuration")
    click.echo("=" * 40)
    for env, attr in Config.REQUIRED.items():
        value = getattr(Config, attr)
        if not value:
            shown = "MISSING"
        elif env == "CONFLUENCE_API_TOKEN":
            shown = "set"
        else:
            shown = value
        click.echo(f"{env}: {shown}")
    click.echo(f"Default limit: {Config.DEFAULT_LIMIT}")
    click.echo(f"Logs:          {Config.LOG_DIR}")

    missing = Config.missing()
    if missing:
        click.echo()
        click.echo(f"Missing: {', '.join(missing)}", err=True)
        sys.exit(1)


@main.command("mcp-config")
def mcp_config():
    """Print MCP config JSON for an MCP client."""
    command, args = _find_executable()
    config = {
        "mcpServers": {
            "confluence": {
                "command": command,
                "args": args,
                "env": {
                    "CONFLUENCE_BASE_URL": Config.BASE_URL or "https://your-site.atlassian.net/wiki",
                    "CONFLUENCE_EMAIL": Config.EMAIL or "you@example.com",
                    "CONFLUENCE_API_TOKEN": "<api token>",
                },
            }
        }
    }

    click.echo("Add this to your MCP client settings:\n")
    click.echo(json.dumps(config, indent=2))


def _find_executable():
    """Find the confluence-mcp command path, falling back to python -m."""
    path = shutil.which("confluence-mcp")
    if path:
        return path, ["server"]
    return sys.executable, ["-m", "confluence_mcp", "server"]


if __name__ == "__main__":
    main()
