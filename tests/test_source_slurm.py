# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import patch

import pytest

from sgres_lib.core.error import ParseError, SourceUnavailable
from sgres_lib.properties.size import Size
from sgres_lib.properties.states import NodeState
from sgres_lib.source.slurm import SlurmSource

NODE_A100 = (
    "NodeName=gpu01 Arch=x86_64 CoresPerSocket=32 CPUAlloc=16 CPUEfctv=64 CPUTot=64 "
    "CPULoad=3.01 AvailableFeatures=a100 ActiveFeatures=a100 Gres=gpu:a100:4(S:0-1) "
    "GresUsed=gpu:a100:1(IDX:0) NodeAddr=gpu01 NodeHostName=gpu01 OS=Linux 5.14.0 "
    "RealMemory=515000 AllocMem=128000 FreeMem=400000 Sockets=2 Boards=1 "
    "State=MIXED ThreadsPerCore=1 TmpDisk=0 Weight=1 Partitions=gpu,gpu-long "
    "CfgTRES=cpu=64,mem=515000M,billing=64,gres/gpu=4 "
    "AllocTRES=cpu=16,mem=128000M,gres/gpu=1"
)

NODE_MULTI = (
    "NodeName=gpu02 CPUAlloc=0 CPUTot=32 Gres=gpu:a6000:2,gpu:v100:2 "
    "RealMemory=256000 AllocMem=0 State=IDLE+DRAIN Partitions=gpu "
    "AllocTRES=(null)"
)

NODE_TRES_ONLY = (
    "NodeName=gpu03 CPUAlloc=64 CPUTot=64 Gres=gpu:h100:8 RealMemory=1000000 "
    "AllocMem=1000000 State=ALLOCATED Partitions=gpu "
    "AllocTRES=cpu=64,mem=1000000M,gres/gpu=8,gres/gpu:h100=8"
)

NODE_CPU = (
    "NodeName=cpu01 CPUAlloc=0 CPUTot=128 Gres=(null) RealMemory=256000 "
    "AllocMem=0 State=IDLE Partitions=batch"
)


def test_env_name():
    assert SlurmSource.envName() == "slurm"


@patch("sgres_lib.source.slurm.shutil.which", return_value="/usr/bin/scontrol")
def test_is_available(mock_which):
    assert SlurmSource.isAvailable()


@patch("sgres_lib.source.slurm.shutil.which", return_value=None)
def test_is_not_available(mock_which):
    assert not SlurmSource.isAvailable()


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_parses_node_with_gres_used(mock_run):
    mock_run.return_value = NODE_A100 + "\n"

    entries = SlurmSource.fetch()

    mock_run.assert_called_once_with(["show", "node", "-o"])
    assert len(entries) == 1
    entry = entries[0]
    assert entry.name == "gpu:a100"
    assert entry.node == "gpu01"
    assert entry.partition == "gpu,gpu-long"
    assert entry.count == 4
    assert entry.used == 1
    assert entry.state == NodeState.MIXED
    assert entry.state_flags == ("MIXED",)
    assert entry.cpus == 64
    assert entry.free_cpus == 48
    assert entry.memory == Size(515000, "mb")
    assert entry.free_memory == Size(387000, "mb")


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_preserves_order_and_skips_nodes_without_gres(mock_run):
    mock_run.return_value = "\n".join([NODE_CPU, NODE_MULTI, NODE_A100, ""])

    entries = SlurmSource.fetch()

    assert [(e.node, e.name) for e in entries] == [
        ("gpu02", "gpu:a6000"),
        ("gpu02", "gpu:v100"),
        ("gpu01", "gpu:a100"),
    ]
    assert entries[0].state == NodeState.DRAINED
    assert entries[0].state_flags == ("IDLE", "DRAIN")
    assert entries[0].used == 0


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_falls_back_to_alloc_tres(mock_run):
    mock_run.return_value = NODE_TRES_ONLY

    entries = SlurmSource.fetch()

    assert len(entries) == 1
    assert entries[0].used == 8
    assert entries[0].free == 0
    assert entries[0].free_cpus == 0


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_skips_informational_lines(mock_run):
    mock_run.return_value = "No nodes in the system\n"

    assert SlurmSource.fetch() == []


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_without_node_name_raises_parse_error(mock_run):
    mock_run.return_value = "Arch=x86_64 Gres=gpu:1"

    with pytest.raises(ParseError, match="without a node name"):
        SlurmSource.fetch()


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_malformed_gres_raises_parse_error(mock_run):
    mock_run.return_value = "NodeName=gpu01 Gres=gpu::4 State=IDLE"

    with pytest.raises(ParseError):
        SlurmSource.fetch()


@patch("sgres_lib.source.slurm.run_scontrol")
def test_fetch_malformed_number_raises_parse_error(mock_run):
    mock_run.return_value = "NodeName=gpu01 Gres=gpu:4 CPUTot=lots State=IDLE"

    with pytest.raises(ParseError, match="CPUTot"):
        SlurmSource.fetch()


@patch(
    "sgres_lib.source.slurm.run_scontrol",
    side_effect=SourceUnavailable("Unable to contact slurm controller"),
)
def test_fetch_propagates_source_unavailable(mock_run):
    with pytest.raises(SourceUnavailable):
        SlurmSource.fetch()
