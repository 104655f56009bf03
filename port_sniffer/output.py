from __future__ import annotations

from .models import ScanReport


def format_summary(report: ScanReport) -> str:
    return (
        f"Scanned {report.completed} ports on {report.address} "
        f"in {report.elapsed_s:.2f}s | open={len(report.open_ports)}"
    )


def print_results(report: ScanReport) -> None:
    if not report.open_ports:
        print("No open ports found.")
    else:
        print("Open ports: ")
        for p in report.open_ports:
            print(p)
    print(format_summary(report))
