# Archive and hashing helpers with fixed metadata for reproducible outputs.
from __future__ import annotations
from typing import Dict, List, Mapping
import hashlib, io, json, time, zipfile
from pathlib import Path

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

def sha256_bytes(b: bytes) -> str:
    h = hashlib.sha256(); h.update(b); return h.hexdigest()

def sha256_file(p: Path) -> str:
    h = hashlib.sha256()
    with open(p, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()

def build_zip_deterministic(files: Mapping[str, bytes], compresslevel: int = 9) -> bytes:
    """Pack {arcname: bytes} into a zip with sorted names and a fixed timestamp/mode."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=compresslevel) as zf:
        for name in sorted(files):
            zi = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
            zi.compress_type = zipfile.ZIP_DEFLATED
            zi.external_attr = 0o644 << 16
            zf.writestr(zi, files[name])
    return buf.getvalue()

def write_manifest(out: Path, archive: Path, files: Mapping[str, bytes], stats: dict) -> Path:
    """manifest.json: archive + per-workbook name/size/sha256 and the run stats."""
    items: List[Dict] = [{"name": n, "size": len(b), "sha256": sha256_bytes(b)} for n, b in sorted(files.items())]
    manifest = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "archive": {"name": archive.name, "size": archive.stat().st_size, "sha256": sha256_file(archive)},
        "files": items,
        "stats": stats,
    }
    out.write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
    return out
