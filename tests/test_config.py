import json

import pytest

from dockforge.cli_utils import find_config_file, resolve_credentials
from dockforge.managers.config_manager import (
    ConfigError,
    ConfigManager,
    RegistryCredentials,
    resolve_image_name,
)
from dockforge.utils import split_names

CONFIG = """
project:
  version: "2.0"
images:
  - name: brightsparklabs/alpha
    dockerfile: src/alpha/Dockerfile
    tags: [awesome-ant]
    target: runtime
    context_dir: src
    build_args: ["--pull"]
  - repository: brightsparklabs/bravo
    dockerfile: src/bravo/Dockerfile
options:
  continue_on_failure: true
  exclude_images: [brightsparklabs/charlie]
registry:
  server: registry.example.com
  username: builder
  password: from-config
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


def test_load_yaml_definitions(config_file, tmp_path):
    manager = ConfigManager(config_file)
    manager.load_config()

    alpha, bravo = manager.get_definitions()
    assert alpha.name == "brightsparklabs/alpha"
    assert alpha.source_file == tmp_path / "src" / "alpha" / "Dockerfile"
    assert alpha.tags == ("awesome-ant",)
    assert alpha.target == "runtime"
    assert alpha.effective_context_dir == tmp_path / "src"
    assert alpha.build_args == ("--pull",)

    assert bravo.name == "brightsparklabs/bravo"
    assert bravo.effective_context_dir == tmp_path / "src" / "bravo"
    assert bravo.target is None


def test_settings_and_options(config_file, tmp_path):
    manager = ConfigManager(config_file)
    manager.load_config()

    settings = manager.get_settings()
    assert settings.project_version == "2.0"
    assert settings.image_tag_dir == tmp_path / "build" / "imageTags"
    assert settings.images_dir == tmp_path / "build" / "images"
    assert manager.get_settings("3.1.4").project_version == "3.1.4"

    options = manager.get_run_options()
    assert options.continue_on_failure is True
    assert options.delete_older_images is False
    assert options.exclude_names == ("brightsparklabs/charlie",)
    assert options.registry.is_complete

    overridden = manager.get_run_options(continue_on_failure=False, include_names=None)
    assert overridden.continue_on_failure is False
    assert overridden.include_names == ()


def test_json_config(tmp_path):
    path = tmp_path / "dockforge.json"
    path.write_text(
        json.dumps({"images": [{"name": "brightsparklabs/alpha", "dockerfile": "Dockerfile"}]}),
        encoding="utf-8",
    )
    manager = ConfigManager(path)
    manager.load_config()

    (alpha,) = manager.get_definitions()
    assert alpha.source_file == tmp_path / "Dockerfile"
    assert manager.get_settings().project_version == "unspecified"


def test_missing_name_and_repository(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text("images:\n  - dockerfile: Dockerfile\n", encoding="utf-8")
    manager = ConfigManager(path)
    manager.load_config()

    with pytest.raises(ConfigError):
        manager.get_definitions()


def test_missing_dockerfile(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text("images:\n  - name: brightsparklabs/alpha\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigManager(path).load_config()


def test_unknown_image_key(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text("images:\n  - name: a\n    dockerfile: D\n    tag: [x]\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        ConfigManager(path).load_config()
    assert "tag" in str(excinfo.value)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        ConfigManager(tmp_path / "dockforge.yml").load_config()


def test_resolve_image_name():
    assert resolve_image_name("brightsparklabs/alpha", "ignored") == "brightsparklabs/alpha"
    assert resolve_image_name(None, "brightsparklabs/bravo") == "brightsparklabs/bravo"
    assert resolve_image_name("  ", "brightsparklabs/bravo") == "brightsparklabs/bravo"
    with pytest.raises(ConfigError):
        resolve_image_name("", None)


def test_find_config_file_searches_parents(config_file, tmp_path, monkeypatch):
    nested = tmp_path / "src" / "alpha"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    assert find_config_file() == config_file.resolve()


def test_split_names():
    assert split_names("alpha, bravo,,alpha") == ("alpha", "bravo")
    assert split_names(["alpha,bravo", "charlie"]) == ("alpha", "bravo", "charlie")
    assert split_names(None) == ()


def test_credentials_precedence(monkeypatch):
    configured = RegistryCredentials(server="registry.example.com", username="builder", password="from-config")
    for name in ("DOCKER_USERNAME", "DOCKER_PASSWORD", "DOCKER_PASSWORD_BUILDER", "DOCKER_PASSWORD_CI"):
        monkeypatch.delenv(name, raising=False)

    assert resolve_credentials(configured) == configured

    monkeypatch.setenv("DOCKER_PASSWORD", "generic")
    assert resolve_credentials(configured).password == "generic"

    monkeypatch.setenv("DOCKER_PASSWORD_BUILDER", "specific")
    assert resolve_credentials(configured).password == "specific"

    monkeypatch.setenv("DOCKER_USERNAME", "ci")
    monkeypatch.setenv("DOCKER_PASSWORD_CI", "ci-secret")
    credentials = resolve_credentials(configured)
    assert credentials.username == "ci"
    assert credentials.password == "ci-secret"

    credentials = resolve_credentials(configured, server="other", username="me", password="pw")
    assert credentials == RegistryCredentials(server="other", username="me", password="pw")


def test_partial_credentials():
    assert RegistryCredentials(server="r", username="u").is_partial
    assert not RegistryCredentials().is_partial
    assert not RegistryCredentials(server="r", username="u", password="p").is_partial


@pytest.mark.parametrize(
    "content",
    [
        "project:\n  version: 1.10\nimages:\n  - name: a\n    dockerfile: D\n",
        "images:\n  - name: a\n    dockerfile: D\n    tags: [2.10]\n",
        "images:\n  - name: a\n    dockerfile: D\n    tags: [stable, 3]\n",
    ],
)
def test_unquoted_numbers_are_rejected(tmp_path, content):
    path = tmp_path / "dockforge.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        ConfigManager(path).load_config()
    assert "引号" in str(excinfo.value)


def test_quoted_versions_are_kept_verbatim(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text(
        'project:\n  version: "1.10"\nimages:\n  - name: a\n    dockerfile: D\n    tags: ["2.10"]\n',
        encoding="utf-8",
    )
    manager = ConfigManager(path)
    manager.load_config()

    assert manager.get_settings().project_version == "1.10"
    assert manager.get_definitions()[0].tags == ("2.10",)


def test_comma_separated_filters_in_config(tmp_path):
    path = tmp_path / "dockforge.yml"
    path.write_text(
        "images:\n  - name: a\n    dockerfile: D\n"
        "options:\n  include_images: 'brightsparklabs/alpha, brightsparklabs/bravo'\n"
        "  exclude_images: brightsparklabs/bravo\n",
        encoding="utf-8",
    )
    manager = ConfigManager(path)
    manager.load_config()

    options = manager.get_run_options()
    assert options.include_names == ("brightsparklabs/alpha", "brightsparklabs/bravo")
    assert options.exclude_names == ("brightsparklabs/bravo",)
