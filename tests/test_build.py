from dockforge.managers.image.build import ImageBuilder, build_command
from dockforge.managers.image.tag import BuildContext, ImageTagger, derive_tags

from .conftest import TIMESTAMP, make_definition

CONTEXT = BuildContext(repository_version="1.2.0", project_version="1.0.0", build_timestamp=TIMESTAMP)


def test_build_command_layout(tmp_path):
    context_dir = tmp_path / "src"
    alpha = make_definition(
        tmp_path,
        "alpha",
        tags=("awesome-ant",),
        target="runtime",
        context_dir=context_dir,
        build_args=("--pull", "--build-arg", "EXTRA=1"),
    )
    tags = derive_tags(alpha, CONTEXT, "62d1a77")

    command = build_command(alpha, tags, CONTEXT, "62d1a77")

    expected = ["build"]
    for tag in tags:
        expected += ["-t", tag]
    expected += [
        "--build-arg", f"BUILD_DATE={TIMESTAMP}",
        "--build-arg", "VCS_REF=62d1a77",
        "--build-arg", "APP_VERSION=1.0.0",
        "-f", str(alpha.source_file), str(context_dir),
        "--target", "runtime",
        "--pull", "--build-arg", "EXTRA=1",
    ]
    assert command == expected


def test_context_defaults_to_dockerfile_directory_and_target_is_omitted(tmp_path):
    bravo = make_definition(tmp_path, "bravo")
    command = build_command(bravo, derive_tags(bravo, CONTEXT, "abc1234"), CONTEXT, "abc1234")

    assert "--target" not in command
    assert command[-3:] == ["-f", str(bravo.source_file), str(bravo.source_file.parent)]


def test_successful_build_writes_tag_record(tmp_path, runner):
    alpha = make_definition(tmp_path, "alpha")
    tag_dir = tmp_path / "build" / "imageTags"
    builder = ImageBuilder(ImageTagger(runner, tmp_path), tag_dir, runner)

    outcome = builder.build(alpha, CONTEXT)

    assert outcome.succeeded
    assert outcome.error_message is None
    assert outcome.tags_applied[0] == "brightsparklabs/alpha:latest"
    record = tag_dir / "VERSION.DOCKER-IMAGE.brightsparklabs-alpha"
    assert record.read_text(encoding="utf-8") == "1.2.0"
    assert runner.commands("docker", "build")[0][:3] == ["docker", "build", "-t"]


def test_failed_build_reports_dockerfile(tmp_path, runner):
    alpha = make_definition(tmp_path, "alpha")
    runner.fail_stream(str(alpha.source_file))
    tag_dir = tmp_path / "build" / "imageTags"
    builder = ImageBuilder(ImageTagger(runner, tmp_path), tag_dir, runner)

    outcome = builder.build(alpha, CONTEXT)

    assert not outcome.succeeded
    assert str(alpha.source_file) in outcome.error_message
    assert outcome.tags_applied == []
    assert not (tag_dir / "VERSION.DOCKER-IMAGE.brightsparklabs-alpha").exists()


def test_custom_docker_binary(tmp_path, runner):
    alpha = make_definition(tmp_path, "alpha")
    builder = ImageBuilder(ImageTagger(runner, tmp_path), tmp_path / "tags", runner, docker_binary="podman")
    builder.build(alpha, CONTEXT)
    assert runner.commands("podman", "build")
