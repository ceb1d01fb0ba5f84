# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from sgres_lib.core.config import CFG
from sgres_lib.core.error import ParseError, SourceUnavailable
from sgres_lib.properties.gres import GresCount
from sgres_lib.properties.size import Size
from sgres_lib.properties.states import NodeState
from sgres_lib.source.common import (
    entries_for_node,
    parse_int,
    parse_slurm_dump_to_dictionary,
    run_scontrol,
)


@patch("sgres_lib.source.common.subprocess.run")
def test_run_scontrol_success(mock_run):
    mock_run.return_value = MagicMock(returncode=0, stdout="output", stderr="")

    assert run_scontrol(["show", "node", "-o"]) == "output"
    mock_run.assert_called_once_with(
        [CFG.slurm_options.scontrol, "show", "node", "-o"],
        text=True,
        check=False,
        capture_output=True,
        errors="replace",
        timeout=CFG.timeouts.query,
    )


@patch("sgres_lib.source.common.subprocess.run")
def test_run_scontrol_failure_raises_source_unavailable(mock_run):
    mock_run.return_value = MagicMock(
        returncode=1, stdout="", stderr="slurm_load_node error: Unable to contact slurm controller\n"
    )

    with pytest.raises(SourceUnavailable, match="Unable to contact slurm controller"):
        run_scontrol(["show", "node", "-o"])


@patch("sgres_lib.source.common.subprocess.run")
def test_run_scontrol_timeout_raises_source_unavailable(mock_run):
    mock_run.side_effect = subprocess.TimeoutExpired(cmd="scontrol", timeout=10)

    with pytest.raises(SourceUnavailable, match="timed out"):
        run_scontrol(["show", "node", "-o"])


@patch("sgres_lib.source.common.subprocess.run")
def test_run_scontrol_missing_executable_raises_source_unavailable(mock_run):
    mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

    with pytest.raises(SourceUnavailable, match="Could not run"):
        run_scontrol(["show", "node", "-o"])


def test_parse_slurm_dump_to_dictionary():
    text = "NodeName=node1 Arch=x86_64 OS=Linux 5.14.0 Gres=gpu:a100:4(S:0-1) State=MIXED+DRAIN"

    assert parse_slurm_dump_to_dictionary(text) == {
        "NodeName": "node1",
        "Arch": "x86_64",
        "OS": "Linux",
        "Gres": "gpu:a100:4(S:0-1)",
        "State": "MIXED+DRAIN",
    }


def test_parse_slurm_dump_to_dictionary_keeps_equal_signs_in_values():
    text = "AllocTRES=cpu=4,gres/gpu=1 CPUTot=64"

    assert parse_slurm_dump_to_dictionary(text) == {
        "AllocTRES": "cpu=4,gres/gpu=1",
        "CPUTot": "64",
    }


def test_parse_slurm_dump_to_dictionary_with_separator():
    assert parse_slurm_dump_to_dictionary("A=1|B=2", "|") == {"A": "1", "B": "2"}


@pytest.mark.parametrize(
    "value, expected",
    [("64", 64), (64, 64), (None, 0), ("", 0)],
)
def test_parse_int(value, expected):
    assert parse_int(value, "CPUTot", "node1") == expected


@pytest.mark.parametrize("value", ["many", True, "1.5"])
def test_parse_int_invalid_raises(value):
    with pytest.raises(ParseError, match="CPUTot"):
        parse_int(value, "CPUTot", "node1")


def test_entries_for_node_matches_used_counts_by_name():
    entries = entries_for_node(
        node="node1",
        partition="gpu",
        state_flags=("MIXED",),
        total=[GresCount("gpu:a100", 4), GresCount("gpu:v100", 2)],
        used=[GresCount("gpu:v100", 1)],
        cpus=64,
        free_cpus=32,
        memory_mb=1024,
        free_memory_mb=512,
    )

    assert [(e.name, e.count, e.used) for e in entries] == [
        ("gpu:a100", 4, 0),
        ("gpu:v100", 2, 1),
    ]
    assert all(e.node == "node1" and e.partition == "gpu" for e in entries)
    assert all(e.state == NodeState.MIXED for e in entries)
    assert entries[0].memory == Size(1, "gb")
    assert entries[0].free_memory == Size(512, "mb")


def test_entries_for_node_clamps_negative_free_resources():
    entries = entries_for_node(
        node="node1",
        partition="gpu",
        state_flags=(),
        total=[GresCount("gpu", 1)],
        used=[],
        cpus=4,
        free_cpus=-2,
        memory_mb=100,
        free_memory_mb=-50,
    )

    assert entries[0].free_cpus == 0
    assert entries[0].free_memory == Size(0)
    assert entries[0].state == NodeState.UNKNOWN


def test_entries_for_node_without_gres():
    assert (
        entries_for_node("node1", "gpu", ("IDLE",), [], [], 4, 4, 100, 100) == []
    )
