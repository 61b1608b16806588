"""
safe-gh - Permission-checked gateway between automated agents and GitHub.

safe-gh decides allow-or-deny for every issue, pull request, search and
project operation an agent asks for, before the call reaches the gh CLI.
It provides:
- Ordered, per-resource rules with AND-combined conditions
- A global owner allow list and a default-permission fallback
- Post-action enforcement of labels and assignees
- Dry-run reporting of every decision

Example usage:
    $ safe-gh --dry-run issue close 12 -R my-org/app
    $ safe-gh pr merge 34 -R my-org/app --squash
    $ safe-gh config show
"""

__version__ = "0.1.0"
__author__ = "safe-gh Contributors"

__all__ = [
    "__version__",
    "__author__",
]
