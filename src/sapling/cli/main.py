"""
sapling CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import tree, watch


@click.group()
@click.version_option(package_name="sapling-tree")
def main():
    """sapling: component trees for React applications.

    Follows the imports of an entry file and shows which components
    render which, resolving tsconfig and webpack aliases.

    \b
    Quick Start:
      sapling tree src/index.tsx
      sapling tree src/App.jsx --tsconfig tsconfig.json --json
      sapling watch src/index.tsx
    """
    pass


# Register commands
main.add_command(tree.tree)
main.add_command(watch.watch)

if __name__ == "__main__":
    main()
