from typing import List

import pytest

from container_identity.exceptions import MalformedLine
from container_identity.linux.cgroups import CgroupLine, iter_cgroup_lines, parse_cgroup_line, parse_cgroup_lines


@pytest.mark.parametrize(
    "line,hier_id,controllers,path",
    [
        ("4:cpu,cpuacct:/docker/abc", 4, ["cpu", "cpuacct"], "/docker/abc"),
        ("12:name=systemd:/system.slice/docker.service", 12, ["name=systemd"], "/system.slice/docker.service"),
        # cgroup v2 unified hierarchy
        ("0::/init.scope", 0, [], "/init.scope"),
        ("0::/", 0, [], "/"),
        # only the first two colons separate fields
        (
            "3:pids:/kubepods.slice/x.slice:cri-containerd:abc",
            3,
            ["pids"],
            "/kubepods.slice/x.slice:cri-containerd:abc",
        ),
        ("7:memory:/docker/abc\n", 7, ["memory"], "/docker/abc"),
    ],
)
def test_parse_cgroup_line(line: str, hier_id: int, controllers: List[str], path: str) -> None:
    assert parse_cgroup_line(line) == CgroupLine(hier_id, controllers, path)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "hello",
        "1:cpu",
        "1:cpu:",
        "cpu:1:/docker/abc",
        "-1:cpu:/docker/abc",
        " 1:cpu:/docker/abc",
    ],
)
def test_parse_malformed_cgroup_line(line: str) -> None:
    with pytest.raises(MalformedLine) as exception:
        parse_cgroup_line(line)
    assert exception.value.line == line
    assert exception.value.args[0] == f"Unable to match cgroup line {line!r}"


def test_parse_cgroup_lines_lenient_skips_malformed() -> None:
    lines = ["1:cpu:/a", "", "garbage", "0::/b"]
    assert parse_cgroup_lines(lines) == [CgroupLine(1, ["cpu"], "/a"), CgroupLine(0, [], "/b")]


def test_parse_cgroup_lines_strict_raises() -> None:
    with pytest.raises(MalformedLine) as exception:
        parse_cgroup_lines(["1:cpu:/a", "garbage", "0::/b"], strict=True)
    assert exception.value.line == "garbage"


def test_iter_cgroup_lines_is_lazy() -> None:
    def lines():
        yield "1:cpu:/a"
        raise AssertionError("should not be consumed")

    parsed = iter_cgroup_lines(lines())
    assert next(parsed) == CgroupLine(1, ["cpu"], "/a")
