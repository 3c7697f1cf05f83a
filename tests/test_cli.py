"""Tests for the wavesync command line."""

import json

import pytest
from click.testing import CliRunner

from wavesync.cli.main import cli
from wavesync.utils.io import read_yaml, write_yaml
from tests.conftest import noise, shifted, write_wav


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "wavesync.yaml"
    write_yaml(path, config.model_dump(mode="json"))
    return path


class TestConfigCommands:
    def test_init_writes_defaults(self, runner, tmp_path):
        target = tmp_path / "sync.yaml"

        result = runner.invoke(cli, ["config", "init", "-o", str(target)])

        assert result.exit_code == 0
        data = read_yaml(target)
        assert data["offset"]["max_offset_seconds"] == 5.0
        assert data["suggestions"]["method_weights"]["mfcc"] == 0.5

    def test_init_refuses_to_overwrite(self, runner, tmp_path):
        target = tmp_path / "sync.yaml"
        target.write_text("keep: me\n")

        result = runner.invoke(cli, ["config", "init", "-o", str(target)])

        assert result.exit_code == 1
        assert target.read_text() == "keep: me\n"

    def test_init_force(self, runner, tmp_path):
        target = tmp_path / "sync.yaml"
        target.write_text("keep: me\n")

        result = runner.invoke(cli, ["config", "init", "-o", str(target), "--force"])

        assert result.exit_code == 0
        assert "decoder" in read_yaml(target)

    def test_check_valid(self, runner, config_file):
        assert runner.invoke(cli, ["config", "check", str(config_file)]).exit_code == 0

    def test_check_invalid(self, runner, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("features:\n  hop_size: 1\n")

        assert runner.invoke(cli, ["config", "check", str(bad)]).exit_code == 1

    def test_check_missing(self, runner, tmp_path):
        assert runner.invoke(cli, ["config", "check", str(tmp_path / "nope.yaml")]).exit_code == 1


class TestAnalyzeCommand:
    def test_writes_report(self, runner, tmp_path, wav_pair, config_file):
        video, audio = wav_pair
        report_path = tmp_path / "report.json"

        result = runner.invoke(
            cli,
            ["analyze", str(video), str(audio), "-c", str(config_file), "-o", str(report_path)],
        )

        assert result.exit_code == 0, result.output
        report = json.loads(report_path.read_text())
        assert report["offset_seconds"] == report["suggestions"]["selected"]
        assert 0.0 in report["suggestions"]["offsets"]
        assert set(report["tracks"]) == {"video", "audio"}
        assert len(report["tracks"]["video"]["waveform"]) == 150
        assert report["tracks"]["audio"]["placeholder"] is False

    def test_bad_config(self, runner, tmp_path, wav_pair):
        bad = tmp_path / "bad.yaml"
        bad.write_text("correlation:\n  mfcc_time_base: sideways\n")

        result = runner.invoke(cli, ["analyze", *map(str, wav_pair), "-c", str(bad)])

        assert result.exit_code == 1


class TestPreviewCommand:
    @pytest.fixture
    def short_pair(self, tmp_path):
        base = noise(0.4, seed=4)
        return (
            write_wav(tmp_path / "short_video.wav", base),
            write_wav(tmp_path / "short_audio.wav", shifted(base, 0.1)),
        )

    def test_dry_run(self, runner, short_pair, config_file):
        video, audio = short_pair

        result = runner.invoke(
            cli,
            ["preview", str(video), str(audio), "--offset", "0.1", "--dry-run", "-c", str(config_file)],
        )

        assert result.exit_code == 0, result.output

    def test_single_track_dry_run(self, runner, short_pair, config_file):
        video, audio = short_pair

        result = runner.invoke(
            cli,
            ["preview", str(video), str(audio), "--mode", "secondary-only", "--dry-run", "-c", str(config_file)],
        )

        assert result.exit_code == 0, result.output

    def test_offset_and_auto_conflict(self, runner, short_pair):
        video, audio = short_pair

        result = runner.invoke(cli, ["preview", str(video), str(audio), "--offset", "1", "--auto"])

        assert result.exit_code == 2

    def test_unknown_mode(self, runner, short_pair):
        result = runner.invoke(cli, ["preview", *map(str, short_pair), "--mode", "loud"])

        assert result.exit_code == 2


class TestRootCommand:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "wavesync" in result.output
