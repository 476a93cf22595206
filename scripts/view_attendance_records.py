#!/usr/bin/env python3
"""Script to view stored attendance records, optionally for one employee."""

import sys
import os
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError
from rich.console import Console
from rich.table import Table
from rich.pretty import pprint

# This assumes the script is in the 'scripts' directory next to the packages
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.session import engine
from models.attendance_record import AttendanceRecord, AttendanceStatus

console = Console()

STATUS_STYLES = {
    AttendanceStatus.NORMAL: "green",
    AttendanceStatus.LATE: "yellow",
    AttendanceStatus.EARLY_LEAVE: "yellow",
    AttendanceStatus.ANOMALOUS: "bold red",
}


def format_optional(value):
    return str(value) if value is not None else "-"


def view_attendance_records(employee_id=None):
    """Connects to the database and prints attendance records, newest first."""
    console.print("[bold cyan]Fetching attendance records...[/bold cyan]")

    try:
        with Session(engine) as session:
            statement = select(AttendanceRecord).order_by(AttendanceRecord.timestamp.desc())
            if employee_id:
                statement = statement.where(AttendanceRecord.employee_id == employee_id)
            records = session.exec(statement).all()

            if not records:
                console.print("[yellow]No attendance records found.[/yellow]")
                return

            table = Table(title="[bold green]Attendance Records[/bold green]", show_lines=True)

            columns = [
                "ID", "Employee", "Store", "Type", "Time (UTC)", "Distance (m)",
                "Status", "Minutes", "Remark", "Fingerprint",
            ]
            for col in columns:
                table.add_column(col, overflow="fold")

            for r in records:
                style = STATUS_STYLES.get(r.status, "white")
                table.add_row(
                    str(r.id),
                    r.employee_id,
                    r.store_id,
                    r.check_type.value if r.check_type else "-",
                    r.timestamp.strftime("%Y-%m-%d %H:%M:%S") if r.timestamp else "-",
                    format_optional(r.distance_meters),
                    f"[{style}]{r.status.value}[/{style}]",
                    format_optional(r.minutes),
                    format_optional(r.remark),
                    r.fingerprint_hash[:8] + "...",
                )

            console.print(table)
            console.print(f"\n[bold cyan]Total records found: {len(records)}[/bold cyan]")

    except SQLAlchemyError as e:
        console.print("[bold red]Database error occurred:[/bold red]")
        pprint(e)


if __name__ == "__main__":
    view_attendance_records(sys.argv[1] if len(sys.argv) > 1 else None)
