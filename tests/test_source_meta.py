# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from sgres_lib.core.config import CFG
from sgres_lib.core.error import SourceUnavailable
from sgres_lib.source import SlurmJsonSource, SlurmSource, SourceMeta


def test_builtin_sources_are_registered():
    assert SourceMeta.names()[:2] == ["slurm", "slurm-json"]
    assert SourceMeta.fromStr("slurm") is SlurmSource
    assert SourceMeta.fromStr("slurm-json") is SlurmJsonSource


def test_str_of_source_class():
    assert str(SlurmSource) == "slurm"
    assert str(SlurmJsonSource) == "slurm-json"


def test_from_str_unknown_raises_with_choices():
    with pytest.raises(SourceUnavailable, match="slurm, slurm-json"):
        SourceMeta.fromStr("lsf")


def test_from_env_var(monkeypatch):
    monkeypatch.setenv(CFG.env_vars.source, "slurm-json")

    assert SourceMeta.fromEnvVarOrConfig() is SlurmJsonSource


def test_from_config_when_env_var_unset(monkeypatch):
    monkeypatch.delenv(CFG.env_vars.source, raising=False)
    monkeypatch.setattr(CFG.source, "backend", "slurm-json")

    assert SourceMeta.fromEnvVarOrConfig() is SlurmJsonSource


def test_obtain_prefers_explicit_name(monkeypatch):
    monkeypatch.setenv(CFG.env_vars.source, "slurm-json")

    assert SourceMeta.obtain("slurm") is SlurmSource


def test_obtain_without_name_uses_env_var(monkeypatch):
    monkeypatch.setenv(CFG.env_vars.source, "slurm-json")

    assert SourceMeta.obtain(None) is SlurmJsonSource
