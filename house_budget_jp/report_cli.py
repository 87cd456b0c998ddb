"""CLI entry point for report generation (Markdown + charts)."""

import argparse
import sys
from pathlib import Path

from house_budget_jp.charts import plot_budget_breakdown, plot_loan_balance
from house_budget_jp.config import parse_args
from house_budget_jp.params import validate_config
from house_budget_jp.report import render_report
from house_budget_jp.simulation import calculate_simulation


def _add_report_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--output", type=Path, default=Path("reports"),
        help="レポート出力ディレクトリ (default: reports)",
    )
    parser.add_argument(
        "--chart-dir", type=Path, default=None,
        help="チャート出力ディレクトリ (default: <output>/charts)",
    )
    parser.add_argument(
        "--no-charts", action="store_true",
        help="チャートを生成しない",
    )
    parser.add_argument(
        "--suffix", type=str, default="",
        help="出力ファイル名のサフィックス（例: tanaka → report-tanaka.md）",
    )


def main():
    try:
        inp, config, args = parse_args("家づくり予算シミュレーション レポート生成", _add_report_args)
    except ValueError as e:
        print(f"設定エラー: {e}", file=sys.stderr)
        raise SystemExit(1)

    for message in validate_config(config):
        print(f"  設定の確認: {message}", file=sys.stderr)

    try:
        result = calculate_simulation(inp, config)
    except ValueError as e:
        print(f"計算できませんでした: {e}", file=sys.stderr)
        raise SystemExit(1)

    output_dir: Path = args.output
    chart_dir: Path = args.chart_dir or output_dir / "charts"
    suffix = f"-{args.suffix}" if args.suffix else ""

    chart_paths = []
    if not args.no_charts:
        print("チャート生成...", file=sys.stderr)
        for plot in (plot_budget_breakdown, plot_loan_balance):
            path = plot(result, chart_dir, name=args.suffix)
            print(f"  → {path}", file=sys.stderr)
            chart_paths.append(path)

    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / f"report{suffix}.md"
    out_path.write_text(
        render_report(inp, config, result, chart_paths=chart_paths, base_dir=output_dir),
        encoding="utf-8",
    )
    print(f"レポート出力: {out_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
