"""
CLI interface for the Bamboo REST API client.

Commands:
- branches: List the branches of a plan
- roles: Inspect and change project plan role permissions

Connection settings come from the environment:
BAMBOO_URL, BAMBOO_USERNAME, BAMBOO_PASSWORD, BAMBOO_TIMEOUT.
"""

import logging
from typing import Annotated, Callable

import typer
from rich.console import Console
from rich.table import Table

from src.bamboo import BambooAPIError, BambooClient, PermissionAction, PermissionChange

app = typer.Typer(
    name="bamboo",
    help="Query plan branches and manage project plan permissions on a Bamboo server",
)
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log HTTP requests and permission changes")
    ] = False,
):
    """Bamboo REST API tooling."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _run(action: Callable[[BambooClient], object]) -> object:
    """Run an API action, turning API errors into a red message and exit code 1."""
    try:
        with BambooClient.from_env() as client:
            return action(client)
    except BambooAPIError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _print_change(change: PermissionChange) -> None:
    if change.changed:
        verb = "Granted" if change.action == PermissionAction.GRANT else "Revoked"
        console.print(
            f"[green]{verb} {', '.join(change.permissions)} for {change.role} "
            f"on {change.project_key}[/green]"
        )
    else:
        console.print(
            f"[yellow]{change.role} on {change.project_key} unchanged "
            f"(already in requested state)[/yellow]"
        )


# ============================================================================
# Branch Commands
# ============================================================================

branches_app = typer.Typer(help="Query plan branches")
app.add_typer(branches_app, name="branches")


@branches_app.command("list")
def branches_list(
    plan_key: Annotated[str, typer.Argument(help="Plan key, e.g. PROJ-PLAN")],
):
    """List all branches of a plan."""
    branches = _run(lambda client: client.plan_branches.list_plan_branches(plan_key))

    table = Table(title=f"Branches of {plan_key}")
    table.add_column("Short Name", style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Enabled", justify="center")
    table.add_column("Workflow", style="dim")
    table.add_column("Description")

    for branch in branches:
        table.add_row(
            branch.short_name,
            branch.key or "",
            "yes" if branch.enabled else "no",
            branch.workflow_type,
            branch.description,
        )

    console.print(table)
    console.print(f"\n[dim]Found {len(branches)} branches[/dim]")


# ============================================================================
# Role Commands
# ============================================================================

roles_app = typer.Typer(help="Manage project plan role permissions")
app.add_typer(roles_app, name="roles")


@roles_app.command("list")
def roles_list(
    project_key: Annotated[str, typer.Argument(help="Project key, e.g. PROJ")],
):
    """List roles and their plan permissions on a project."""
    roles = _run(lambda client: client.project_plan.role_permissions_list(project_key))

    table = Table(title=f"Plan permissions for {project_key}")
    table.add_column("Role", style="cyan")
    table.add_column("Permissions", style="green")

    for role in roles:
        table.add_row(role.name, ", ".join(role.permissions))

    console.print(table)


@roles_app.command("grant-logged-in")
def roles_grant_logged_in(
    project_key: Annotated[str, typer.Argument(help="Project key, e.g. PROJ")],
    permissions: Annotated[list[str], typer.Argument(help="Permissions to grant, e.g. READ BUILD")],
):
    """Grant plan permissions to logged in users."""
    _print_change(_run(
        lambda client: client.project_plan.set_logged_in_user_permissions(project_key, permissions)
    ))


@roles_app.command("revoke-logged-in")
def roles_revoke_logged_in(
    project_key: Annotated[str, typer.Argument(help="Project key, e.g. PROJ")],
    permissions: Annotated[list[str], typer.Argument(help="Permissions to revoke, e.g. BUILD")],
):
    """Revoke plan permissions from logged in users."""
    _print_change(_run(
        lambda client: client.project_plan.remove_logged_in_users_permissions(project_key, permissions)
    ))


@roles_app.command("grant-anonymous-read")
def roles_grant_anonymous_read(
    project_key: Annotated[str, typer.Argument(help="Project key, e.g. PROJ")],
):
    """Allow anonymous users to view the project's plans."""
    _print_change(_run(lambda client: client.project_plan.set_anonymous_read_permission(project_key)))


@roles_app.command("revoke-anonymous-read")
def roles_revoke_anonymous_read(
    project_key: Annotated[str, typer.Argument(help="Project key, e.g. PROJ")],
):
    """Stop anonymous users from viewing the project's plans."""
    _print_change(_run(lambda client: client.project_plan.remove_anonymous_read_permission(project_key)))


if __name__ == "__main__":
    app()
