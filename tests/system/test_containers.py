from __future__ import annotations

from result import Err, Ok

from rcleaner.system.commands import CommandOutput, split_lines
from rcleaner.system.containers import ContainerImage, ContainerRuntime
from tests.fakes import FakeRunner

IMAGES = "docker images --format {{.Repository}}:{{.Tag}}\t{{.Size}}"


def test_list_images_skips_dangling() -> None:
    runner = FakeRunner().add(IMAGES, "nginx:latest\t187MB\n<none>:<none>\t12MB\nredis:7\t1.5GB\n")
    images = ContainerRuntime("docker", runner).list_images().unwrap()
    assert images == [
        ContainerImage("nginx:latest", 187 * 1000**2),
        ContainerImage("redis:7", int(1.5 * 1000**3)),
    ]


def test_list_images_daemon_down_is_error() -> None:
    runner = FakeRunner().add(IMAGES, stderr="Cannot connect to the Docker daemon", returncode=1)
    assert isinstance(ContainerRuntime("docker", runner).list_images(), Err)


def test_remove_images() -> None:
    runner = FakeRunner().add("podman rmi -f a:1 b:2")
    runtime = ContainerRuntime("podman", runner)

    assert isinstance(runtime.remove_images(["a:1", "b:2"], dry_run=True), Ok)
    assert runner.calls == []
    assert isinstance(runtime.remove_images(["a:1", "b:2"], dry_run=False), Ok)
    assert runner.calls == ["podman rmi -f a:1 b:2"]


def test_availability_follows_binary() -> None:
    assert ContainerRuntime("docker", FakeRunner(installed=["docker"])).is_available()
    assert not ContainerRuntime("podman", FakeRunner(installed=["docker"])).is_available()


def test_command_output_message_prefers_stderr() -> None:
    assert CommandOutput("out\n", "  err \n", 1).message == "err"
    assert CommandOutput("out\n", "", 1).message == "out"
    assert not CommandOutput("", "", 2).success


def test_split_lines_drops_blanks() -> None:
    assert split_lines("  a \n\n b\n") == ["a", "b"]
