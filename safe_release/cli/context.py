from __future__ import annotations

from dataclasses import dataclass

import typer

from safe_release.core.config import Config, load_config
from safe_release.core.errors import ErrorCode
from safe_release.core.result import Err
from safe_release.core.workspace import ReleasePaths, Workspace, detect_workspace
from safe_release.output.console import ConsoleProtocol, RichConsole
from safe_release.output.errors import print_error
from safe_release.release.registry import (
    DEFAULT_RELEASE_HOST_COMPONENTS,
    BinaryRegistry,
    default_registry,
)
from safe_release.release.targets import TargetMatrix, default_target_matrix


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Everything a command needs, loaded once per invocation."""

    workspace: Workspace
    config: Config
    paths: ReleasePaths
    matrix: TargetMatrix
    registry: BinaryRegistry
    console: ConsoleProtocol

    @property
    def release_host_components(self) -> frozenset[str]:
        configured = self.config.release_host.components
        if configured is None:
            return DEFAULT_RELEASE_HOST_COMPONENTS
        return frozenset(configured)


def build_context() -> CLIContext:
    console = RichConsole()

    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        print_error(workspace_result.error, console)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    workspace = workspace_result.value

    config = Config()
    if workspace.config_path.exists():
        config_result = load_config(workspace.config_path)
        if isinstance(config_result, Err):
            print_error(config_result.error, console)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        config = config_result.value

    return CLIContext(
        workspace=workspace,
        config=config,
        paths=ReleasePaths.from_workspace(workspace, config),
        matrix=default_target_matrix(),
        registry=default_registry(),
        console=console,
    )
