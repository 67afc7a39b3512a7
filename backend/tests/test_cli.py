# backend/tests/test_cli.py
"""CLI 測試"""

from click.testing import CliRunner

from sizhu.cli import cli


runner = CliRunner()


def test_chart():
    result = runner.invoke(cli, ["chart", "1967", "10", "9", "10", "45"])
    assert result.exit_code == 0
    assert "四柱: 丁未 庚戌 丙午 癸巳" in result.output
    assert "寒露 1967-10-09 10:45" in result.output
    assert "資料來源: table" in result.output


def test_chart_invalid_date():
    result = runner.invoke(cli, ["chart", "2025", "2", "30"])
    assert result.exit_code != 0
    assert "日期不合法" in result.output


def test_solar_terms_jie_only():
    result = runner.invoke(cli, ["solar-terms", "2025", "--jie-only"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "2025 年節氣（資料來源: table）"
    assert len(lines) == 13
    assert "  2025-02-03 22:10  立春  第  1 月" in lines


def test_solar_terms_unsupported_year():
    result = runner.invoke(cli, ["solar-terms", "1700"])
    assert result.exit_code != 0


def test_build_table_rejects_reversed_range(tmp_path):
    result = runner.invoke(
        cli,
        ["build-table", "--start", "2030", "--end", "2020", "--output", str(tmp_path / "out.json")],
    )
    assert result.exit_code != 0
    assert "大於結束年份" in result.output
    assert not (tmp_path / "out.json").exists()
