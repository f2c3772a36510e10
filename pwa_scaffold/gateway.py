"""Gateway to the external tools the scaffolder drives.

The skeleton generator and the dependency installer are long-running,
interactive Node.js processes.  They inherit the terminal so the user sees
their output, are awaited to completion with no timeout, and are opaque
beyond their exit status.
"""

from __future__ import annotations

from pathlib import Path

from .config import Config
from .errors import ExternalProcessError
from .utils import run_command


class ExternalProcessGateway:
    """Runs the skeleton generator and dependency installer from ``Config``."""

    def __init__(self, config: Config) -> None:
        self.config = config

    async def generate_skeleton(self, project_name: str) -> int:
        """Run the skeleton generator inside ``config.output_dir``.

        Returns:
            The generator's exit status (always 0; non-zero raises).

        Raises:
            ExternalProcessError: If the generator exits non-zero.
        """
        cmd = self.config.render_generator_command(project_name)
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        return await self._run(cmd, self.config.output_dir)

    async def install(self, project_root: str | Path) -> int:
        """Run the dependency installer inside *project_root*.

        Raises:
            ExternalProcessError: If the installer exits non-zero.
        """
        return await self._run(list(self.config.install_command), Path(project_root))

    async def _run(self, cmd: list[str], cwd: Path) -> int:
        returncode, _, stderr = await run_command(cmd, cwd=cwd, timeout=None, capture=False)
        if returncode != 0:
            raise ExternalProcessError(cmd, returncode, stderr)
        return returncode
