"""Tests for the headless block builder script."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from domain.sharing.services import decode_share_token
from scripts.build_block import main

pytestmark = pytest.mark.integration


def test_build_from_extent(dem_4326: Path, capsys):
    code = main([str(dem_4326), "--extent", "8.005", "46.005", "8.015", "46.015", "--fidelity", "4"])

    summary = json.loads(capsys.readouterr().out)
    assert code == 0
    assert len(summary["walls"]) == 4
    assert summary["walls"]["Block Wall South"]["vertices"] == 10
    assert summary["camera"] is not None
    payload = decode_share_token(summary["share_token"])
    assert payload.extent.as_tuple() == (8.005, 46.005, 8.015, 46.015)


def test_build_from_token_keeps_challenge_mode(dem_4326: Path, capsys):
    main([str(dem_4326), "--extent", "8.005", "46.005", "8.015", "46.015", "--hide-map"])
    token = json.loads(capsys.readouterr().out)["share_token"]

    code = main([str(dem_4326), "--token", token, "--fidelity", "2"])

    summary = json.loads(capsys.readouterr().out)
    assert code == 0
    assert decode_share_token(summary["share_token"]).hide_map is True


def test_invalid_extent_exits_with_error(dem_4326: Path, capsys):
    code = main([str(dem_4326), "--extent", "9", "46", "8", "47"])

    assert code == 2
    assert "invalid extent" in capsys.readouterr().out
