# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""'crossgate check' and 'crossgate preflight' — inspect a CORS configuration."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from crossgate.cli.console import console
from crossgate.core.config import Config
from crossgate.cors.evaluator import evaluate
from crossgate.cors.policy import CORSPolicy
from crossgate.cors.request import CORSRequest
from crossgate.kernel.exceptions import ConfigurationException
from crossgate.logging.structlog_adapter import StructlogAdapter


def _load_policy(config_file: Path, profiles: tuple[str, ...]) -> CORSPolicy:
    try:
        config = Config.from_file(config_file, active_profiles=list(profiles))
        StructlogAdapter(default_level="WARNING").configure(config)
        return CORSPolicy.from_config(config)
    except ConfigurationException as exc:
        console.print(f"  [error]✗[/error] {escape(str(exc))}")
        if exc.code:
            console.print(f"    [dim]code: {exc.code}[/dim]")
        raise SystemExit(1) from exc


_CONFIG_ARG = click.argument(
    "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
_PROFILE_OPT = click.option(
    "--profile", "-p", "profiles", multiple=True, help="Profile overlay to merge (repeatable)."
)


@click.command()
@_CONFIG_ARG
@_PROFILE_OPT
def check_command(config_file: Path, profiles: tuple[str, ...]) -> None:
    """Validate the crossgate.cors section of CONFIG_FILE."""
    policy = _load_policy(config_file, profiles)

    table = Table(title="[crossgate]CORS policy[/crossgate]", border_style="dim")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("allowed_origins", policy.describe_origins())
    table.add_row("allowed_methods", policy.allow_methods_value or "<none>")
    table.add_row("allowed_headers", policy.allow_headers_value or "<none>")
    table.add_row("allow_credentials", str(policy.allow_credentials).lower())
    table.add_row("max_age", "<unset>" if policy.max_age is None else f"{policy.max_age}s")
    table.add_row("exposed_headers", policy.expose_headers_value or "<none>")

    console.print(table)
    console.print("  [success]✓[/success] Policy is valid\n")


@click.command()
@_CONFIG_ARG
@_PROFILE_OPT
@click.option("--origin", required=True, help="Value of the Origin request header.")
@click.option("--method", "requested_method", default="GET", show_default=True,
              help="Value of Access-Control-Request-Method.")
@click.option("--header", "requested_headers", multiple=True,
              help="Header name for Access-Control-Request-Headers (repeatable).")
def preflight_command(
    config_file: Path,
    profiles: tuple[str, ...],
    origin: str,
    requested_method: str,
    requested_headers: tuple[str, ...],
) -> None:
    """Show the response a preflight from ORIGIN would get."""
    policy = _load_policy(config_file, profiles)

    headers = {"origin": origin, "access-control-request-method": requested_method}
    if requested_headers:
        headers["access-control-request-headers"] = ", ".join(requested_headers)
    decision = evaluate(policy, CORSRequest.from_headers("OPTIONS", headers))

    console.print(f"\n  [info]HTTP 204 No Content[/info] [dim](origin {origin})[/dim]")
    emitted = decision.as_dict()
    if not emitted:
        console.print("  [dim](no CORS headers)[/dim]")
    for name, value in emitted.items():
        console.print(f"  {name}: {escape(value)}")

    console.print()
    if decision.allow_origin is None:
        console.print("  [warning]![/warning] Origin is not allowed; the browser will block the request")
    elif not decision.method_allowed:
        console.print(f"  [warning]![/warning] Method {requested_method} is not in the allow-list")
    elif not decision.headers_allowed:
        console.print("  [warning]![/warning] Some requested headers are not in the allow-list")
    else:
        console.print("  [success]✓[/success] Browser will send the actual request")
    console.print()
