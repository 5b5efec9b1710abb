"""Unit tests for the flowgazer command-line entry point."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from flowgazer.__main__ import main, parse_args
from tests.fixtures.events import ALICE, BOB, ME, make_event


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def dump(tmp_path):
    path = tmp_path / "events.jsonl"
    lines = [
        make_event(1, pubkey=ALICE, created_at=100, content="first").to_json(),
        "",
        "{not json",
        make_event(2, pubkey=BOB, created_at=200, content="second\nline").to_json(),
        make_event(3, pubkey=ME, created_at=150, content="mine").to_json(),
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def no_config(tmp_path):
    return str(tmp_path / "absent.yaml")


@pytest.fixture
def hex_pubkeys():
    """Make ``--pubkey`` accept any hex value without real curve points."""

    def _parse(value):
        parsed = MagicMock()
        parsed.to_hex.return_value = value.lower()
        return parsed

    with patch("flowgazer.utils.keys.PublicKey") as mock_pk:
        mock_pk.parse.side_effect = _parse
        yield mock_pk


class TestParseArgs:
    def test_replay_defaults(self):
        args = parse_args(["replay", "events.jsonl"])
        assert args.command == "replay"
        assert args.tab == "global"
        assert args.client_only is False
        assert args.no_verify is False

    def test_rejects_unknown_tab(self):
        with pytest.raises(SystemExit):
            parse_args(["replay", "events.jsonl", "--tab", "trending"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestReplay:
    @pytest.mark.asyncio
    async def test_prints_global_tab(self, dump, no_config, hex_pubkeys, capsys):
        code = await main(
            ["--config", no_config, "--pubkey", ME, "replay", str(dump), "--no-verify"]
        )
        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == f"200 k1 {BOB[:8]}: second line"
        assert f"100 k1 {ALICE[:8]}: first" in lines
        assert all("mine" not in line for line in lines)

    @pytest.mark.asyncio
    async def test_without_identity_own_notes_are_ordinary(self, dump, no_config, capsys):
        await main(["--config", no_config, "replay", str(dump), "--no-verify"])
        assert f"150 k1 {ME[:8]}: mine" in capsys.readouterr().out.splitlines()

    @pytest.mark.asyncio
    async def test_stats(self, dump, no_config, capsys):
        await main(["--config", no_config, "replay", str(dump), "--no-verify", "--stats"])
        out = capsys.readouterr().out
        assert '"total_events": 3' in out
        assert '"active_tab": "global"' in out

    @pytest.mark.asyncio
    async def test_client_only_hides_untagged(self, dump, no_config, capsys):
        await main(["--config", no_config, "replay", str(dump), "--no-verify", "--client-only"])
        assert capsys.readouterr().out.strip() == ""

    @pytest.mark.asyncio
    async def test_pubkey_selects_personal_tab(self, dump, no_config, hex_pubkeys, capsys):
        code = await main(
            ["--config", no_config, "--pubkey", ME, "replay", str(dump), "--no-verify", "--tab", "myposts"]
        )
        assert code == 0
        assert capsys.readouterr().out.splitlines() == [f"150 k1 {ME[:8]}: mine"]

    @pytest.mark.asyncio
    async def test_missing_dump(self, tmp_path, no_config):
        assert await main(["--config", no_config, "replay", str(tmp_path / "nope.jsonl")]) == 1


class TestFilters:
    @pytest.mark.asyncio
    async def test_prints_json(self, no_config, capsys):
        assert await main(["--config", no_config, "filters"]) == 0
        assert json.loads(capsys.readouterr().out) == [{"kinds": [1, 6], "limit": 150}]

    @pytest.mark.asyncio
    async def test_reads_config(self, tmp_path, capsys):
        path = tmp_path / "feed.yaml"
        path.write_text("tabs:\n  show_channel_messages: true\npagination:\n  main_timeline_limit: 20\n")
        assert await main(["--config", str(path), "filters"]) == 0
        assert json.loads(capsys.readouterr().out) == [{"kinds": [1, 6, 42], "limit": 20}]


class TestConfigErrors:
    @pytest.mark.asyncio
    async def test_invalid_config(self, tmp_path):
        path = tmp_path / "feed.yaml"
        path.write_text("render:\n  delay: -1\n")
        assert await main(["--config", str(path), "filters"]) == 1

    @pytest.mark.asyncio
    async def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "feed.yaml"
        path.write_text("- render\n")
        assert await main(["--config", str(path), "filters"]) == 1
