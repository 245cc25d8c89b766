from __future__ import annotations
from pathlib import Path
from typing import Dict
import pandas as pd

from .aggregate import bundle_frames
from .models import StatisticsBundle

def export_table(df: pd.DataFrame, out: str) -> str:
    p = Path(out)
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = p.suffix.lower()
    if suffix in [".parquet", ".pq"]:
        df.to_parquet(p, index=False)
    elif suffix == ".csv":
        df.to_csv(p, index=False)
    elif suffix == ".json":
        df.to_json(p, orient="records", indent=2)
    else:
        # default parquet
        df.to_parquet(p.with_suffix(".parquet"), index=False)
        return str(p.with_suffix(".parquet"))
    return str(p)


def export_bundle(bundle: StatisticsBundle, out_dir: str, fmt: str = "csv") -> Dict[str, str]:
    """Write one file per bundle series into ``out_dir``; returns name -> path."""
    out = Path(out_dir)
    return {
        name: export_table(df, str(out / f"{name}.{fmt}"))
        for name, df in bundle_frames(bundle).items()
    }
