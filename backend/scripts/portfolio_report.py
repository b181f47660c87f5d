"""Print KPIs, positions, a monthly report and rebalance advice from an exported snapshot."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from pydantic import ValidationError

from app.schemas import PortfolioState
from app.services.portfolio import equity_series_for, kpis_for, rebalance_for, report_for, today_in
from invest_ledger import month_key


def _load(path: Path) -> PortfolioState:
    if not path.exists():
        raise SystemExit(f"Snapshot file not found: {path}")
    try:
        return PortfolioState.model_validate(json.loads(path.read_text()))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise SystemExit(f"Invalid snapshot {path}: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarise an Invest Ledger snapshot export")
    parser.add_argument("snapshot_file")
    parser.add_argument("--month", default=None, help="Report month as YYYY-MM (defaults to the current month)")
    parser.add_argument("--days", type=int, default=30, help="Trailing days of the equity curve to print")
    args = parser.parse_args()

    state = _load(Path(args.snapshot_file))
    today = today_in()
    month = args.month or month_key(today)

    kpis = kpis_for(state)
    print(f"Equity {kpis.equity:,.2f} | Cash {kpis.cash:,.2f} | "
          f"Unrealized {kpis.unrealized:,.2f} | Realized {kpis.realized:,.2f}")
    for asset in sorted(kpis.positions):
        lot = kpis.positions[asset]
        print(f"  {asset:<10} qty {lot.quantity:>12,.4f}  avg {lot.average_cost:>12,.4f}  "
              f"basis {lot.cost_basis:>14,.2f}  realized {lot.realized_pnl:>12,.2f}")

    report, budget = report_for(state, month)
    print(f"Month {report.month}: {report.count} transactions, net cash flow {report.net_cash_flow:,.2f}")
    print(f"  deposits {report.deposits:,.2f} dividends {report.dividends:,.2f} "
          f"withdraws {report.withdraws:,.2f} fees {report.fees:,.2f} "
          f"buys {report.buys:,.2f} sells {report.sells:,.2f}")
    if budget is not None:
        print(f"  budget {budget.budget:,.2f}, deposited {budget.deposited:,.2f} ({budget.pct:.1f}%)")

    advice = rebalance_for(state)
    print(advice.note)
    for line in advice.lines:
        print(f"  {line.asset:<10} {line.current_pct:5.1f}% -> {line.target_pct:5.1f}%  "
              f"{line.action} ~{line.amount:,.2f}")

    if args.days > 0:
        for point in equity_series_for(state, args.days, today=today):
            print(f"  {point.date.isoformat()} {point.equity:,.2f}")


if __name__ == "__main__":
    main()
