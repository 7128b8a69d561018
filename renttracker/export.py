# export.py
import csv
import io

from flask import Response

CSV_HEADER = ["Tenant", "Month", "Amount", "Date", "Notes"]


def _one_line(value) -> str:
    return str(value or "").replace("\r", " ").replace("\n", " ")


def records_to_csv(records) -> str:
    """One header line plus one fully quoted line per record.

    Amount and date are written exactly as stored; embedded quotes are
    doubled so names and notes cannot break the row.
    """
    si = io.StringIO()
    cw = csv.writer(si, quoting=csv.QUOTE_ALL, lineterminator="\n")
    cw.writerow(CSV_HEADER)
    for r in records:
        cw.writerow([
            _one_line(r.tenant_name),
            _one_line(r.month),
            str(r.amount),
            _one_line(r.date_collected),
            _one_line(r.notes),
        ])
    return si.getvalue()


def make_csv_response(csv_text: str, filename="export.csv"):
    return Response(csv_text, mimetype="text/csv",
                    headers={"Content-disposition": f"attachment; filename={filename}"})
