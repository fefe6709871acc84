"""Example usage of the Bamboo API client.

This demonstrates common workflows for plan branches and project plan
permissions. Connection settings come from BAMBOO_URL, BAMBOO_USERNAME
and BAMBOO_PASSWORD.
"""

import logging

from src.bamboo import (
    BUILD_PERMISSION,
    READ_PERMISSION,
    BambooAuthorizationError,
    BambooClient,
    PermissionChange,
)


def example_list_branches(plan_key: str = "PROJ-PLAN"):
    """Example: List the branches of a plan."""
    print("=" * 60)
    print("Example 1: Plan Branches")
    print("=" * 60)

    with BambooClient.from_env() as client:
        branches = client.plan_branches.list_plan_branches(plan_key)

        for branch in branches:
            state = "enabled" if branch.enabled else "disabled"
            print(f"{branch.key or '?':<16} {branch.short_name:<30} {state}")

        print(f"\n{len(branches)} branches")


def example_open_project(project_key: str = "PROJ"):
    """Example: Make a project's plans visible and buildable, reporting what changed."""
    print("=" * 60)
    print("Example 2: Project Plan Permissions")
    print("=" * 60)

    def report(change: PermissionChange):
        status = "changed" if change.changed else "already set"
        print(f"  {change.action.value} {change.permissions} on {change.role}: {status}")

    with BambooClient.from_env(on_permission_change=report) as client:
        try:
            for role in client.project_plan.role_permissions_list(project_key):
                print(f"{role.name}: {', '.join(role.permissions) or '-'}")

            client.project_plan.set_anonymous_read_permission(project_key)
            client.project_plan.set_logged_in_user_permissions(
                project_key, [READ_PERMISSION, BUILD_PERMISSION]
            )
        except BambooAuthorizationError as e:
            print(f"Not allowed: {e}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    example_list_branches()
    print()
    example_open_project()
