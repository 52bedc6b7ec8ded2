"""Tests for the qkview-doctor CLI."""

import json

from click.testing import CliRunner

from conftest import SAMPLE_BIGIP_CONF
from qkview_doctor import __version__
from qkview_doctor.cli import main


def test_version():
    result = CliRunner().invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_analyze_writes_metadata_next_to_archive(qkview_archive):
    result = CliRunner().invoke(main, ["analyze", str(qkview_archive)])

    assert result.exit_code == 0, result.output
    metadata = qkview_archive.parent / "metadata.json"
    data = json.loads(metadata.read_text())
    assert data["summary"] == {"critical": 2, "warning": 2, "healthy": 0, "certsExpiringSoon": 1}
    assert len(data["entryLogs"]) == 5


def test_analyze_output_option(qkview_archive, tmp_path):
    out = tmp_path / "reports" / "report.json"

    result = CliRunner().invoke(main, ["analyze", str(qkview_archive), "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text())["virtualServers"][0]["name"] == "vs_api"
    assert not (qkview_archive.parent / "metadata.json").exists()


def test_analyze_stdout(qkview_archive):
    result = CliRunner().invoke(main, ["analyze", str(qkview_archive), "--stdout"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [e["date"] for e in data["errorTimeline"]] == ["2024-10-14", "2024-10-15", "2024-10-16"]
    assert not (qkview_archive.parent / "metadata.json").exists()


def test_analyze_rich_format(qkview_archive):
    result = CliRunner().invoke(main, ["analyze", str(qkview_archive), "--format", "rich"])

    assert result.exit_code == 0, result.output
    assert "Qkview Summary" in result.output
    assert (qkview_archive.parent / "metadata.json").exists()


def test_analyze_default_year_applies_to_yearless_lines(tmp_path):
    from conftest import build_qkview

    archive = build_qkview(tmp_path, {"var/log/ltm": "Mar 3 08:15:00 bigip error: pool down\n"})
    out = tmp_path / "out.json"

    result = CliRunner().invoke(
        main,
        [
            "analyze",
            str(archive),
            "--output",
            str(out),
            "--default-year",
            "2021",
            "--reference-time",
            "2030-01-01T00:00:00Z",
        ],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text())["entryLogs"][0]["date"] == "2021-03-03T08:15:00Z"


def test_analyze_config_file(qkview_archive, tmp_path):
    out = tmp_path / "from-config.json"
    config = tmp_path / "settings.yaml"
    config.write_text(f"output_path: {out}\n")

    result = CliRunner().invoke(main, ["analyze", str(qkview_archive), "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert out.exists()


def test_analyze_broken_archive(tmp_path):
    bogus = tmp_path / "bogus.tar.gz"
    bogus.write_text("not an archive")

    result = CliRunner().invoke(main, ["analyze", str(bogus)])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_analyze_bad_reference_time(qkview_archive):
    result = CliRunner().invoke(main, ["analyze", str(qkview_archive), "--reference-time", "soon"])

    assert result.exit_code == 1
    assert "invalid reference time" in result.output


def test_analyze_missing_file(tmp_path):
    result = CliRunner().invoke(main, ["analyze", str(tmp_path / "absent.tar.gz")])

    assert result.exit_code == 2


def test_parse_config_table(tmp_path):
    conf = tmp_path / "bigip.conf"
    conf.write_text(SAMPLE_BIGIP_CONF)

    result = CliRunner().invoke(main, ["parse-config", str(conf)])

    assert result.exit_code == 0, result.output
    assert "Virtual Servers (4)" in result.output
    assert "Pools (2)" in result.output
    assert "pool_web" in result.output


def test_parse_config_json(tmp_path):
    conf = tmp_path / "bigip.conf"
    conf.write_text(SAMPLE_BIGIP_CONF + "ltm virtual /Common/vs_cut {\n")

    result = CliRunner().invoke(main, ["parse-config", str(conf), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["virtual_servers"]["vs_web"]["pool"] == "pool_web"
    assert data["pools"]["pool_web"]["members"][1]["disabled"] is True
    assert len(data["errors"]) == 1
