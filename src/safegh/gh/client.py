"""
Thin wrapper over the gh CLI.

Every call to GitHub goes through GhClient.run(), which runs gh as a
child process.

Security Note:
    - Arguments are always passed as a list (NO shell=True)
    - Each element is passed to gh as a separate argument, so titles,
      bodies and queries are never interpreted by a shell
"""

import json
import logging
import shutil
import subprocess
from typing import Any

from safegh.errors import GhCliError, GraphQLError

logger = logging.getLogger(__name__)

NOT_FOUND_EXIT_CODE = 127


class GhClient:
    """
    Runs gh subcommands and surfaces failures as SafeGhError.

    Example:
        client = GhClient()
        stdout = client.run(["issue", "view", "12", "-R", "octo/repo"])

    Attributes:
        executable: Name or path of the gh binary
    """

    def __init__(self, executable: str = "gh") -> None:
        self.executable = executable

    def available(self) -> bool:
        """Whether the gh binary can be found on PATH."""
        return shutil.which(self.executable) is not None

    def run(self, args: list[str]) -> str:
        """
        Run gh with the given arguments.

        Args:
            args: Arguments after the executable name

        Returns:
            stdout of the process

        Raises:
            GhCliError: If gh cannot be started or exits non-zero
        """
        cmd = [self.executable, *args]
        logger.debug("Running %s", " ".join(cmd[:3]))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                shell=False,
            )
        except FileNotFoundError:
            raise GhCliError(
                stderr=f"Executable not found: {self.executable}",
                exit_code=NOT_FOUND_EXIT_CODE,
                suggestion="Install the GitHub CLI and run 'gh auth login'",
            ) from None
        except OSError as e:
            raise GhCliError(stderr=f"OS error executing gh: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            logger.debug("gh exited %d: %s", result.returncode, stderr)
            raise GhCliError(stderr=stderr, exit_code=result.returncode)

        return result.stdout

    def graphql(
        self,
        query: str,
        variables: dict[str, str | int] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Run a GraphQL query or mutation through `gh api graphql`.

        String variables are sent with -f (raw) and integers with -F
        (typed), so that values are never read as @file references.

        Returns:
            The decoded response body

        Raises:
            GhCliError: If gh exits non-zero
            GraphQLError: If the response carries errors or is not JSON
        """
        args = ["api", "graphql", "-f", f"query={query}"]
        for key, value in (variables or {}).items():
            flag = "-F" if isinstance(value, int) else "-f"
            args.extend([flag, f"{key}={value}"])
        for key, value in (headers or {}).items():
            args.extend(["-H", f"{key}: {value}"])

        stdout = self.run(args)
        try:
            response = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise GraphQLError(message=f"Invalid JSON in GraphQL response: {e}") from e

        errors = response.get("errors") if isinstance(response, dict) else None
        if errors:
            raise GraphQLError(
                errors=[
                    error.get("message", str(error)) if isinstance(error, dict) else str(error)
                    for error in errors
                ]
            )
        return response

    def current_login(self) -> str:
        """Login of the authenticated gh user."""
        return self.run(["api", "user", "--jq", ".login"]).strip()

    def current_repo(self) -> str:
        """owner/repo of the repository in the working directory."""
        return self.run(
            ["repo", "view", "--json", "nameWithOwner", "--jq", ".nameWithOwner"]
        ).strip()
