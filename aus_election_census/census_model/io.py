import json
import os
from pathlib import Path
from typing import Any, Dict

import pandas as pd

def ensure_dir(path) -> None:
    os.makedirs(path, exist_ok=True)

def write_csv(df: pd.DataFrame, path) -> Path:
    ensure_dir(os.path.dirname(str(path)) or ".")
    df.to_csv(path, index=False)
    return Path(path)

def write_json(obj: Dict[str, Any], path) -> Path:
    ensure_dir(os.path.dirname(str(path)) or ".")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, default=str)
    return Path(path)
