import csv

from openpyxl import Workbook

from .models import HRVAnalysis
from .serializers import METRIC_FIELDS, METRIC_COLUMNS, QUALITY_FIELDS, STRESS_FIELDS, analysis_row, poincare_rows, rr_rows
from .utils.date_converter import epoch_ms_to_iso

WINDOW_COLUMNS = ("window_start", "window_end")
HEADERS_2_DECIMALS = ("mean_rr", "bpm", "overall_stress_score")
SAMPLE_COLUMNS = ("timestamp", "ir", "red", "green", "spo2", "hr", "temp", "battery")


def format_cell(header, val):
    if val is None:
        return ""
    if isinstance(val, float):
        return f"{val:.2f}" if header in HEADERS_2_DECIMALS else f"{val:.3f}"
    return val


def write_metrics_csv(rows, path):
    rows = list(rows)
    headers = list(METRIC_COLUMNS)
    if rows and all(h in rows[0] for h in WINDOW_COLUMNS):
        headers = list(WINDOW_COLUMNS) + headers

    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(headers)
        for r in rows:
            w.writerow([format_cell(h, r.get(h)) for h in headers])

    return path


def write_analysis_workbook(analysis: HRVAnalysis, path, samples=None, tz_name=None):
    wb = Workbook()
    row = analysis_row(analysis)

    # --- Sheet 1: HRV metrics ---
    wsm = wb.active
    wsm.title = "Metrics"
    wsm.append(["metric", "value"])
    for k in ("peak_count", "rr_count") + METRIC_FIELDS:
        wsm.append([k, row[k]])

    # --- Sheet 2: stress indices ---
    wst = wb.create_sheet("Stress")
    wst.append(["index", "value"])
    for k in STRESS_FIELDS:
        wst.append([k, row[k]])

    # --- Sheet 3: signal quality and heart-rate candidates ---
    wsq = wb.create_sheet("Quality")
    wsq.append(["field", "value"])
    for k in QUALITY_FIELDS:
        wsq.append([k, row[k]])
    if analysis.quality is not None and analysis.quality.candidates:
        wsq.append([])
        wsq.append(["method", "hr_bpm", "sqi"])
        for c in analysis.quality.candidates:
            wsq.append([c.method, c.value, c.sqi])

    # --- Sheet 4: RR tachogram ---
    wsr = wb.create_sheet("RR")
    wsr.append(["index", "rr_ms"])
    for r in rr_rows(analysis):
        wsr.append([r["index"], r["rr"]])

    # --- Sheet 5: Poincare points ---
    wsp = wb.create_sheet("Poincare")
    wsp.append(["rr_n", "rr_n1"])
    for p in poincare_rows(analysis):
        wsp.append([p["x"], p["y"]])

    # --- Sheet 6: raw samples ---
    if samples is not None:
        wss = wb.create_sheet("Samples")
        wss.append(list(SAMPLE_COLUMNS))
        for s in samples:
            wss.append([epoch_ms_to_iso(s.timestamp, tz_name)] + [getattr(s, c) for c in SAMPLE_COLUMNS[1:]])

    wb.save(path)
    return path
