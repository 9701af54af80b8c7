#!/usr/bin/env python3
"""
Sage EAS compliance log pipeline.

Commands:
  python -m sage_log_builder.core run      --infile sage_log.xml [--outfile logs.zip] [--config config.yaml] [--manifest]
  python -m sage_log_builder.core validate --infile sage_log.xml [--outfile validation_report.json]
  python -m sage_log_builder.core detect   --infile sage_log.xml

`run` writes one workbook per calendar month found in the log, zipped as
<year>/<month>/Sage_Log_<year>-<month>.xlsx.
"""
from __future__ import annotations
import argparse, io, json, sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

import pandas as pd
import yaml

from .compliance import RMT_WINDOW_MINUTES
from .dates import month_key
from .entries import LogEntry, SourceLabels, classify_all
from .grouping import group_by_month
from .helpers import build_zip_deterministic, write_manifest
from .sections import ReportGrid, build_month_grid
from .workbook import render_workbook

HERE = Path(__file__).resolve().parent
DEFAULT_CONFIG = HERE / "config.yaml"
SNIFF_CHARS = 4000


class EmptyLogError(ValueError):
    """The decoded input holds no records at all."""


# --- Config ---
@dataclass(frozen=True)
class AppConfig:
    labels: SourceLabels = field(default_factory=SourceLabels)
    station_name: str = ""
    signature: str = ""
    window_minutes: float = RMT_WINDOW_MINUTES
    archive_prefix: str = "Sage_Log"

def load_config_dict(path: Path | None = None) -> dict:
    p = Path(path) if path else DEFAULT_CONFIG
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {p} must be a YAML mapping, got {type(data).__name__}")
    return data

def load_config(path: Path | None = None) -> AppConfig:
    cfg = load_config_dict(path)
    return AppConfig(
        labels=SourceLabels(cfg.get("source_labels") or {}),
        station_name=str(cfg.get("station_name") or ""),
        signature=str(cfg.get("signature") or ""),
        window_minutes=float(cfg.get("rmt_window_minutes", RMT_WINDOW_MINUTES)),
        archive_prefix=str(cfg.get("archive_prefix") or "Sage_Log"),
    )


# --- Format detection ---
@dataclass(frozen=True)
class SchemaMapping:
    root: str
    row: str
    date_field: str
    fields: Tuple[str, ...] = ()
    is_sage: bool = False

SAGE_MAPPING = SchemaMapping(root="log", row="entry", date_field="date", is_sage=True)
GENERIC_MAPPING = SchemaMapping(root="root", row="row", date_field="date", fields=("date", "details"))

def detect_sage_format(snippet: str) -> SchemaMapping:
    """Fast-path check for a Sage ENDEC log; anything else gets the generic mapping."""
    s = (snippet or "").lower()
    if ("<log>" in s and "<entry>" in s) or "<zczc>" in s or "sage" in s:
        return SAGE_MAPPING
    return GENERIC_MAPPING

def sniff_file(path: Path) -> SchemaMapping:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return detect_sage_format(f.read(SNIFF_CHARS))


# --- Ingest ---
def read_log_records(source, row_xpath: str = ".//entry") -> List[Dict[str, str]]:
    """Decode the XML log (path, bytes or file object) into flat str->str records, one per row element."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)
    try:
        df = pd.read_xml(source, xpath=row_xpath, parser="etree", dtype=str)
    except ValueError:
        print(f"[warn] no {row_xpath!r} rows, falling back to children of the root element", file=sys.stderr)
        if hasattr(source, "seek"):
            source.seek(0)
        try:
            df = pd.read_xml(source, xpath="./*", parser="etree", dtype=str)
        except ValueError:
            df = pd.DataFrame()
    if df.empty:
        raise EmptyLogError(f"No records found. ({getattr(source, 'name', source)})")
    return df.fillna("").to_dict(orient="records")


# --- Assembler ---
@dataclass(frozen=True)
class ProcessingStats:
    total_entries: int
    files_created: int
    months_found: Tuple[str, ...]
    dropped: Mapping[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"total_entries": self.total_entries, "files_created": self.files_created,
                "months_found": list(self.months_found), "dropped": dict(self.dropped)}


@dataclass(frozen=True)
class RunResult:
    grids: Dict[str, ReportGrid]
    files: Dict[str, bytes]
    stats: ProcessingStats
    entries: Tuple[LogEntry, ...] = ()

def archive_path(year: int, month: int, prefix: str = "Sage_Log") -> str:
    return f"{year:04d}/{month:02d}/{prefix}_{year:04d}-{month:02d}.xlsx"

def assemble(records: Sequence[Mapping], config: AppConfig | None = None, *,
             render: Callable[[ReportGrid, str], bytes] | None = render_workbook) -> RunResult:
    """Classify -> group by month -> lay out -> render. Pass render=None to skip rendering."""
    cfg = config or AppConfig()
    if not records:
        raise EmptyLogError("No records found.")
    entries, dropped = classify_all(records, cfg.labels)
    grids: Dict[str, ReportGrid] = {}
    files: Dict[str, bytes] = {}
    for key, group in group_by_month(entries).items():
        grid = build_month_grid(group.entries, group.year, group.month, signature=cfg.signature,
                                station_name=cfg.station_name, window_minutes=cfg.window_minutes)
        grids[key] = grid
        if render is not None:
            files[archive_path(group.year, group.month, cfg.archive_prefix)] = render(grid, group.sheet_name)
    stats = ProcessingStats(total_entries=len(entries), files_created=len(files),
                            months_found=tuple(grids), dropped=dropped)
    return RunResult(grids=grids, files=files, stats=stats, entries=tuple(entries))

def build_archive(files: Mapping[str, bytes]) -> bytes:
    return build_zip_deterministic(files)

def validation_report(records: Sequence[Mapping], config: AppConfig | None = None) -> dict:
    """Kept/dropped counts plus per-month direction x kind counts."""
    cfg = config or AppConfig()
    entries, dropped = classify_all(records, cfg.labels)
    per_month: Dict[str, Dict[str, int]] = {}
    if entries:
        df = pd.DataFrame({
            "month": [month_key(e.timestamp) for e in entries],
            "event": [f"{e.direction.value} {e.kind.value}" for e in entries],
        })
        counts = df.groupby(["month", "event"]).size()
        for (month, event), n in counts.items():
            per_month.setdefault(month, {})[event] = int(n)
    return {
        "total_records": len(records),
        "kept_rows": len(entries),
        "dropped_rows": len(records) - len(entries),
        "dropped_reasons": dropped,
        "months_found": sorted(per_month),
        "per_month": per_month,
    }


# --- Stages ---
def _check_format(infile: Path) -> None:
    if not sniff_file(infile).is_sage:
        print(f"[warn] {infile.name}: no <log>/<entry>, <zczc> or 'sage' marker in the first {SNIFF_CHARS} chars, reading as a Sage log anyway", file=sys.stderr)

def default_outfile(months: Sequence[str]) -> Path:
    if not months:
        return Path("Sage_Logs.zip")
    first, last = months[0].replace("/", "-"), months[-1].replace("/", "-")
    return Path(f"Sage_Logs_{first}.zip" if first == last else f"Sage_Logs_{first}_{last}.zip")

def stage_run(infile: Path, outfile: Path | None, config: AppConfig, manifest: bool = False) -> RunResult:
    _check_format(infile)
    records = read_log_records(str(infile))
    print(f"[read] {len(records)} records from {infile.name}")
    result = assemble(records, config)
    st = result.stats
    print(f"[classify] kept {st.total_entries} dropped {sum(st.dropped.values())} {st.dropped}")
    for key in result.grids:
        y, m = key.split("/")
        print(f"[month] {key} -> {archive_path(int(y), int(m), config.archive_prefix)}")
    out = outfile or default_outfile(st.months_found)
    out.write_bytes(build_archive(result.files))
    print(f"[archive] {out} ({st.files_created} files, months: {', '.join(st.months_found) or '-'})")
    if manifest:
        man = write_manifest(out.with_name("manifest.json"), out, result.files, st.as_dict())
        print(f"[manifest] {man}")
    return result

def stage_validate(infile: Path, outfile: Path | None, config: AppConfig) -> dict:
    _check_format(infile)
    rep = validation_report(read_log_records(str(infile)), config)
    rep["input"] = infile.name
    text = json.dumps(rep, ensure_ascii=False, indent=2)
    if outfile:
        outfile.write_text(text, encoding="utf-8")
        print(f"[validate] {outfile}")
    else:
        print(text)
    return rep


# --- CLI ---
def _infile(args) -> Path:
    p = Path(args.infile)
    if not p.exists():
        raise SystemExit(f"Input XML not found: {p}")
    return p

def cmd_run(args):
    stage_run(_infile(args), Path(args.outfile) if args.outfile else None,
              load_config(args.config), manifest=args.manifest)

def cmd_validate(args):
    stage_validate(_infile(args), Path(args.outfile) if args.outfile else None, load_config(args.config))

def cmd_detect(args):
    m = sniff_file(_infile(args))
    print(json.dumps({"root": m.root, "row": m.row, "date_field": m.date_field,
                      "fields": list(m.fields), "is_sage": m.is_sage}, indent=2))

def main(argv=None):
    ap = argparse.ArgumentParser(prog="sage-log-builder", description="Monthly EAS RWT/RMT compliance logs from a Sage ENDEC export")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_run = sub.add_parser("run", help="classify -> monthly workbooks -> zip")
    ap_run.add_argument("--infile", required=True, help="Sage log XML export")
    ap_run.add_argument("--outfile", required=False, help="zip path (default: Sage_Logs_<first>_<last>.zip)")
    ap_run.add_argument("--config", required=False, help="config.yaml (default: packaged config)")
    ap_run.add_argument("--manifest", action="store_true", help="also write manifest.json next to the zip")
    ap_run.set_defaults(func=cmd_run)

    ap_v = sub.add_parser("validate", help="classification report (kept/dropped, per-month counts)")
    ap_v.add_argument("--infile", required=True)
    ap_v.add_argument("--outfile", required=False)
    ap_v.add_argument("--config", required=False)
    ap_v.set_defaults(func=cmd_validate)

    ap_d = sub.add_parser("detect", help="print the detected input mapping")
    ap_d.add_argument("--infile", required=True)
    ap_d.set_defaults(func=cmd_detect)

    args = ap.parse_args(argv)
    args.func(args)

if __name__ == "__main__":
    main()
