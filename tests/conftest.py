from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from dockforge.managers.config_manager import (
    ImageDefinition,
    ProjectSettings,
    RegistryCredentials,
    RunOptions,
)
from dockforge.managers.image_manager import ImageManager

TIMESTAMP = "2024-05-01T02:03:04.567Z"


class FakeRunner:
    """记录所有外部命令，按前缀返回预设结果"""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.responses: List[Tuple[List[str], Tuple[int, str, str]]] = []
        self.stream_failures: List[Tuple[str, int, Optional[str]]] = []

    def respond(self, prefix: Sequence[str], return_code: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses.append(([str(arg) for arg in prefix], (return_code, stdout, stderr)))

    def fail_stream(self, token: str, return_code: int = 1, subcommand: Optional[str] = None) -> None:
        self.stream_failures.append((str(token), return_code, subcommand))

    def run(self, command, cwd=None, input_text=None):
        args = [str(arg) for arg in command]
        self.calls.append(args)
        self.inputs.append(input_text)
        for prefix, response in reversed(self.responses):
            if args[: len(prefix)] == prefix:
                return response
        return 0, "", ""

    def stream(self, command, cwd=None, stdout=None):
        args = [str(arg) for arg in command]
        self.calls.append(args)
        for token, return_code, subcommand in self.stream_failures:
            if token in args and (subcommand is None or args[1:2] == [subcommand]):
                if stdout is not None:
                    stdout.write(b"trunc")
                return return_code
        if stdout is not None:
            stdout.write(b"image-archive")
        return 0

    def commands(self, *prefix: str) -> List[List[str]]:
        return [call for call in self.calls if call[: len(prefix)] == list(prefix)]

    def index_of(self, *prefix: str) -> int:
        for index, call in enumerate(self.calls):
            if call[: len(prefix)] == list(prefix):
                return index
        return -1


@pytest.fixture
def runner() -> FakeRunner:
    fake = FakeRunner()
    fake.respond(["git", "describe", "--dirty"], stdout="1.2.0\n")
    fake.respond(["git", "log"], stdout="62d1a77")
    return fake


def make_definition(project_dir: Path, short_name: str, **kwargs) -> ImageDefinition:
    dockerfile = project_dir / "src" / short_name / "Dockerfile"
    dockerfile.parent.mkdir(parents=True, exist_ok=True)
    dockerfile.write_text("FROM scratch\n", encoding="utf-8")
    return ImageDefinition(source_file=dockerfile, name=f"brightsparklabs/{short_name}", **kwargs)


@pytest.fixture
def definitions(tmp_path) -> List[ImageDefinition]:
    return [
        make_definition(tmp_path, "alpha", tags=("awesome-ant",)),
        make_definition(tmp_path, "bravo"),
        make_definition(tmp_path, "charlie"),
    ]


@pytest.fixture
def settings(tmp_path) -> ProjectSettings:
    return ProjectSettings(project_dir=tmp_path, project_version="1.0.0")


@pytest.fixture
def credentials() -> RegistryCredentials:
    return RegistryCredentials(server="registry.example.com", username="builder", password="s3cret")


@pytest.fixture
def make_manager(runner, settings):
    def factory(definitions, **option_kwargs) -> ImageManager:
        return ImageManager(definitions, RunOptions(**option_kwargs), settings, runner=runner)

    return factory
