# verify_all.py
from pathlib import Path
import pandas as pd

out = Path("outputs")

def load(path):
    return pd.read_csv(path, dtype=str, keep_default_na=False)

def show(label, path, cols=None):
    if not path.exists():
        print(f"{label}: MISSING -> {path}")
        return None
    df = load(path)
    print(f"{label}: {path} -> rows={len(df)}")
    if cols:
        missing = [c for c in cols if c not in df.columns]
        if missing:
            print(f"  Missing cols: {missing}")
    return df

print("== References ==")
refs = show("references", out/"references.csv", cols=[
    "item_id","source","index","year","authors","title","doi","text"
])

print("\n== Matches ==")
matches = show("matches", out/"matches.csv", cols=[
    "item_id","ref_index","rank","match_item_id","match_title","similarity","in_library"
])

print("\n== Exports ==")
for name in ["library.bib", "library.csl.json", "library.txt", "graph.json", "filenames.csv"]:
    p = out/name
    print(f"{name}: {'ok' if p.exists() and p.stat().st_size else 'MISSING'}")

if refs is not None:
    print("\n== Per-item reference counts ==")
    counts = refs.groupby(["item_id","source"]).size()
    print(counts.to_string())
    short = counts[counts < 5]
    if len(short):
        print(f"Likely incomplete (<5 references): {len(short)} item(s)")

if refs is not None and matches is not None:
    rk = set(refs[["item_id","index"]].apply(tuple, axis=1))
    mk = set(matches[["item_id","ref_index"]].apply(tuple, axis=1))
    print("\n== Cross-check ==")
    print("Every match points at an extracted reference:", mk <= rk)
    top = matches[matches["rank"] == "1"]
    print("Matched references:", len(top), "of", len(refs))
    print("In library:", int((top["in_library"] == "True").sum()))
    bad = matches[(matches["match_item_id"] == matches["item_id"])]
    if len(bad):
        print(f"Self matches found: {len(bad)}")
