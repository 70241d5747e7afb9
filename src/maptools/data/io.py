from __future__ import annotations
import json, pathlib
from typing import Any, Dict, Iterable, List
import pandas as pd

def write_jsonl(path: str, records: Iterable[Any]) -> int:
    p = pathlib.Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with p.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
            n += 1
    return n

def records_to_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    # nested dicts become dotted columns, lists stay as cell values
    return pd.json_normalize(records, sep=".")

def write_table(path: str, records: List[Dict[str, Any]]) -> pd.DataFrame:
    """Write output records as CSV or Parquet, chosen by file suffix."""
    p = pathlib.Path(path)
    suffix = p.suffix.lower()
    if suffix not in (".csv", ".parquet"):
        raise ValueError(f"Unsupported table format: {p.suffix!r} (use .csv or .parquet)")
    bad = [i for i, r in enumerate(records) if not isinstance(r, dict)]
    if bad:
        raise ValueError(f"Tabular output needs mapping records; record {bad[0]} is not a mapping")
    p.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(records)
    if suffix == ".csv":
        df.to_csv(p, index=False)
    else:
        df.to_parquet(p, index=False)
    return df
