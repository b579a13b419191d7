# ============================================================================
# BUILD INTEGRITY HEALTH CHECK
# ============================================================================
# STATUS: Infrastructure - Runtime, project, env var and artifact checks
# PURPOSE: Verify the deployed build is complete and configured
# CREATED: 18 OCT 2026
# ============================================================================
"""
Build Integrity Health Check

Group node "build" with children:
- python_version     Interpreter version (always Up)
- project_metadata   pyproject.toml present and parseable
- env_vars           Critical / optional environment variables
                     (Down if any critical variable is missing)
- build_artifacts    Configured files / directories present

The env_vars and build_artifacts ids are stable: the sanitizer relies
on them to redact variable names and artifact details.
"""

import os
import platform
import tomllib
from pathlib import Path
from typing import List, Optional, Sequence

from __version__ import __version__
from core.contracts import BUILD_ARTIFACTS_NODE_ID, ENV_VARS_NODE_ID, HealthStatus
from core.logging import ComponentType, get_logger
from core.models import StatusNode
from health.aggregator import create_group_node, create_status_node, measure_time
from health.core import HealthCheck

logger = get_logger(__name__, ComponentType.CHECK)


class BuildCheck(HealthCheck):
    """
    Build integrity check.

    Args:
        critical_env: Variables that must be set (missing -> Down)
        optional_env: Variables reported but never failing
        artifacts: Paths (relative to root) expected to exist
        check_project_file: Validate pyproject.toml under root
        root: Project root (defaults to the working directory)
    """

    id = "build"
    name = "Build Integrity"

    def __init__(
        self,
        critical_env: Optional[Sequence[str]] = None,
        optional_env: Optional[Sequence[str]] = None,
        artifacts: Optional[Sequence[str]] = None,
        check_project_file: bool = True,
        root: Optional[Path] = None,
    ):
        self.critical_env = list(critical_env or [])
        self.optional_env = list(optional_env or [])
        self.artifacts = list(artifacts or [])
        self.check_project_file = check_project_file
        self.root = Path(root) if root is not None else None

    async def run(self) -> StatusNode:
        try:
            checks, duration_ms = await measure_time(self._run_checks)
            return create_group_node(
                self.id,
                self.name,
                checks,
                metadata={"duration": round(duration_ms, 1), "version": __version__},
            )
        except Exception as e:
            logger.error(f"Build check failed: {e}")
            return create_status_node(
                self.id,
                self.name,
                HealthStatus.UNKNOWN,
                f"Build check failed: {e}",
            )

    async def _run_checks(self) -> List[StatusNode]:
        checks = [self._python_version()]
        if self.check_project_file:
            checks.append(self._project_metadata())
        if self.critical_env or self.optional_env:
            checks.append(self._env_vars())
        if self.artifacts:
            checks.append(self._build_artifacts())
        return checks

    def _root(self) -> Path:
        return self.root if self.root is not None else Path.cwd()

    def _python_version(self) -> StatusNode:
        version = platform.python_version()
        return create_status_node(
            "python_version",
            "Python Version",
            HealthStatus.UP,
            f"Python {version}",
            metadata={
                "version": version,
                "implementation": platform.python_implementation(),
            },
        )

    def _project_metadata(self) -> StatusNode:
        path = self._root() / "pyproject.toml"
        if not path.exists():
            return create_status_node(
                "project_metadata",
                "Project Metadata",
                HealthStatus.DOWN,
                "pyproject.toml not found",
                metadata={"valid": False},
            )
        try:
            with path.open("rb") as f:
                project = tomllib.load(f).get("project", {})
        except (OSError, tomllib.TOMLDecodeError) as e:
            return create_status_node(
                "project_metadata",
                "Project Metadata",
                HealthStatus.PARTIAL,
                f"Error reading pyproject.toml: {e}",
                metadata={"valid": False},
            )
        return create_status_node(
            "project_metadata",
            "Project Metadata",
            HealthStatus.UP,
            "Valid pyproject.toml",
            metadata={
                "valid": True,
                "name": project.get("name"),
                "version": project.get("version"),
            },
        )

    def _env_vars(self) -> StatusNode:
        critical = _split_env(self.critical_env)
        optional = _split_env(self.optional_env)
        missing_critical = len(critical["missing"])

        if missing_critical:
            status = HealthStatus.DOWN
            message = f"Missing {missing_critical} critical vars"
        else:
            status = HealthStatus.UP
            message = (
                f"All {len(critical['present'])} critical vars present, "
                f"{len(optional['present'])}/{optional['total']} optional"
            )

        return create_status_node(
            ENV_VARS_NODE_ID,
            "Environment Variables",
            status,
            message,
            metadata={"critical": critical, "optional": optional},
        )

    def _build_artifacts(self) -> StatusNode:
        root = self._root()
        checks = [
            {"path": artifact, "exists": (root / artifact).exists()}
            for artifact in self.artifacts
        ]
        found = sum(1 for c in checks if c["exists"])

        if found == len(checks):
            status = HealthStatus.UP
        elif found == 0:
            status = HealthStatus.DOWN
        else:
            status = HealthStatus.PARTIAL

        return create_status_node(
            BUILD_ARTIFACTS_NODE_ID,
            "Build Artifacts",
            status,
            f"{found}/{len(checks)} artifacts present",
            metadata={"checks": checks},
        )


def _split_env(names: Sequence[str]) -> dict:
    present = [name for name in names if os.environ.get(name)]
    missing = [name for name in names if not os.environ.get(name)]
    return {"present": present, "missing": missing, "total": len(names)}


__all__ = ["BuildCheck"]
