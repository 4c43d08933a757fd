"""Tests for core.stageplan.config -- Pydantic v2 configuration model."""

import math
from datetime import date

import pytest
from pydantic import ValidationError

from core.stageplan import DEFAULT_STAGE_WEIGHTS, DEFAULT_TIMEZONE, StagePlanConfig


class TestDefaults:
    def test_default_timezone(self):
        assert StagePlanConfig().timezone == "Asia/Taipei"
        assert DEFAULT_TIMEZONE == "Asia/Taipei"

    def test_default_weights_sum_to_one(self):
        assert math.isclose(sum(StagePlanConfig().stage_weights.values()), 1.0)

    def test_default_weights_match_canonical(self):
        cfg = StagePlanConfig()
        assert [cfg.stage_weights[i] for i in range(1, 9)] == [
            0.03, 0.05, 0.03, 0.10, 0.20, 0.15, 0.32, 0.12,
        ]

    def test_today_is_a_date(self):
        assert isinstance(StagePlanConfig().today(), date)

    def test_tzinfo(self):
        assert StagePlanConfig(timezone="UTC").tzinfo.key == "UTC"

    def test_frozen(self):
        cfg = StagePlanConfig()
        with pytest.raises(ValidationError):
            cfg.timezone = "UTC"


class TestValidation:
    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            StagePlanConfig(timezone="Mars/Olympus_Mons")

    def test_negative_weight(self):
        weights = dict(DEFAULT_STAGE_WEIGHTS)
        weights[3] = -0.01
        with pytest.raises(ValidationError):
            StagePlanConfig(stage_weights=weights)

    def test_missing_stage_weight(self):
        weights = dict(DEFAULT_STAGE_WEIGHTS)
        del weights[8]
        with pytest.raises(ValidationError):
            StagePlanConfig(stage_weights=weights)

    def test_extra_stage_name(self):
        names = {i: f"S{i}" for i in range(1, 10)}
        with pytest.raises(ValidationError):
            StagePlanConfig(stage_names=names)

    def test_blank_stage_name(self):
        names = {i: f"S{i}" for i in range(1, 9)}
        names[4] = " "
        with pytest.raises(ValidationError):
            StagePlanConfig(stage_names=names)

    def test_string_keys_are_coerced(self):
        cfg = StagePlanConfig(stage_weights={str(i): 0.125 for i in range(1, 9)})
        assert cfg.stage_weights[1] == 0.125


class TestFromEnv:
    def test_empty_env_gives_defaults(self):
        assert StagePlanConfig.from_env({}) == StagePlanConfig()

    def test_timezone_from_env(self):
        cfg = StagePlanConfig.from_env({"STAGEPLAN_TIMEZONE": "Europe/Berlin"})
        assert cfg.timezone == "Europe/Berlin"

    def test_weights_from_env(self):
        cfg = StagePlanConfig.from_env({"STAGEPLAN_WEIGHTS": ",".join(["0.125"] * 8)})
        assert set(cfg.stage_weights.values()) == {0.125}

    def test_wrong_weight_count(self):
        with pytest.raises(ValueError):
            StagePlanConfig.from_env({"STAGEPLAN_WEIGHTS": "0.5,0.5"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("STAGEPLAN_TIMEZONE", "UTC")
        monkeypatch.delenv("STAGEPLAN_WEIGHTS", raising=False)
        assert StagePlanConfig.from_env().timezone == "UTC"
