"""CLI 命令列工具

提供排盤、節氣表查詢與節氣表產生等命令列功能。
"""

import logging
from pathlib import Path

import click

from sizhu.config import settings
from sizhu.exceptions import InvalidInputError, UnsupportedYearError
from sizhu.services.chart import calculate_chart
from sizhu.services.ephemeris import build_solar_term_table
from sizhu.services.term_source import get_solar_term_source


@click.group()
@click.option("--log-level", default=None, help="日誌等級（預設取自設定）")
def cli(log_level):
    """四柱排盤 CLI 工具"""
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.argument("day", type=int)
@click.argument("hour", type=int, default=0)
@click.argument("minute", type=int, default=0)
def chart(year, month, day, hour, minute):
    """推算八字命盤（時刻為 UTC+8）"""
    try:
        result = calculate_chart(year, month, day, hour, minute)
    except (InvalidInputError, UnsupportedYearError) as e:
        raise click.ClickException(str(e))

    click.echo(f"時刻: {result.formatted}")
    click.echo(
        "四柱: "
        + " ".join(pillar.ganzhi for pillar in result.pillars)
    )
    click.echo(f"  年柱: {result.year_pillar.pillar} (八字年 {result.year_pillar.effective_year})")
    click.echo(
        f"  月柱: {result.month_pillar.pillar} "
        f"(第 {result.month_pillar.month_index} 月，{result.solar_term} "
        f"{result.month_pillar.term_timestamp:%Y-%m-%d %H:%M})"
    )
    click.echo(f"  日柱: {result.day_pillar}")
    click.echo(f"  時柱: {result.hour_pillar.pillar} ({result.hour_pillar.double_hour})")
    click.echo(f"生肖: {result.zodiac}  日主: {result.day_master}")
    click.echo(f"資料來源: {result.provenance.value}")
    if result.lunar_date:
        lunar = result.lunar_date
        click.echo(f"農曆: {lunar['year_cn']}{lunar['month_cn']}{lunar['day_cn']}")


@cli.command("solar-terms")
@click.argument("year", type=int)
@click.option("--jie-only", is_flag=True, help="只列出十二節")
def solar_terms(year, jie_only):
    """列出某一年的節氣表"""
    try:
        table = get_solar_term_source().lookup(year)
    except UnsupportedYearError as e:
        raise click.ClickException(str(e))

    click.echo(f"{year} 年節氣（資料來源: {table.provenance.value}）")
    entries = table.jie_entries if jie_only else table.entries
    for entry in entries:
        month = f"第 {entry.month_index:>2} 月" if entry.is_jie else ""
        click.echo(f"  {entry.timestamp:%Y-%m-%d %H:%M}  {entry.name}  {month}".rstrip())


@cli.command("build-table")
@click.option("--start", "start_year", type=int, required=True, help="起始年份")
@click.option("--end", "end_year", type=int, required=True, help="結束年份（含）")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="輸出檔案（預設覆寫設定中的節氣表）",
)
@click.option("--merge/--no-merge", default=True, help="是否保留既有節氣表中的其他年份")
def build_table(start_year, end_year, output, merge):
    """以 skyfield 星曆表產生精確節氣表"""
    output = output or settings.solar_terms_file
    merge_with = get_solar_term_source().precomputed if merge else None

    click.echo(f"正在產生 {start_year}-{end_year} 年節氣表...")
    try:
        count = build_solar_term_table(start_year, end_year, output, settings.ephemeris_dir, merge_with)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo("產生完成！")
    click.echo(f"  輸出檔案: {output}")
    click.echo(f"  年份數: {count}")


if __name__ == "__main__":
    cli()
