"""Leaderboard store — writes finished-session results to PostgreSQL.

Also holds the pure statistics the results screen and viewer show:
percentiles, fixed-range histograms, per-deck grouping.
"""

from __future__ import annotations

import json
import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, Optional

import psycopg2

from .config import get_database_url

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS reroll_results (
    id            SERIAL PRIMARY KEY,
    deck          TEXT NOT NULL,
    spent         INTEGER NOT NULL,
    reroll_count  INTEGER NOT NULL DEFAULT 0,
    time_sec      DOUBLE PRECISION NOT NULL,
    date          TEXT NOT NULL,
    targets       JSONB NOT NULL DEFAULT '{}'::jsonb,
    overlap_mode  TEXT,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS reroll_results_deck_idx ON reroll_results (deck, created_at DESC);
"""

RESULT_COLUMNS = (
    "id", "deck", "spent", "reroll_count", "time_sec",
    "date", "targets", "overlap_mode", "created_at",
)

# Fixed histogram ranges per metric: (min, max)
HISTOGRAM_RANGES: dict[str, tuple[float, float]] = {
    "timeSec": (0, 600),
    "spent": (0, 1000),
    "rerollCount": (0, 500),
}
HISTOGRAM_BINS = 24


def _get_conn():
    return psycopg2.connect(get_database_url())


def result_from_columns(d: dict) -> dict:
    """Map a reroll_results row (column name -> value) to the result payload shape."""
    targets = d["targets"]
    if isinstance(targets, str):
        targets = json.loads(targets)
    return {
        "id": d["id"],
        "deck": d["deck"],
        "spent": d["spent"],
        "rerollCount": d["reroll_count"] or 0,
        "timeSec": d["time_sec"],
        "date": d["date"],
        "targets": targets or {},
        "overlapMode": d["overlap_mode"] or "none",
        "createdAt": d["created_at"],
    }


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

def ensure_schema() -> None:
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(SCHEMA)
    conn.commit()
    conn.close()


def submit_result(payload: dict) -> int:
    """Insert one result payload and return its id."""
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        """INSERT INTO reroll_results (deck, spent, reroll_count, time_sec, date, targets, overlap_mode)
           VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING id""",
        (
            payload["deck"],
            payload["spent"],
            payload.get("rerollCount", 0),
            payload["timeSec"],
            payload["date"],
            json.dumps(payload.get("targets") or {}),
            payload.get("overlapMode") or "none",
        ),
    )
    result_id = cur.fetchone()[0]
    conn.commit()
    conn.close()
    logger.info("Submitted result %s for deck %s", result_id, payload["deck"])
    return result_id


def fetch_all_results(limit: int = 100) -> list[dict]:
    """Most recent results first."""
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        f"SELECT {', '.join(RESULT_COLUMNS)} FROM reroll_results ORDER BY created_at DESC LIMIT %s",
        (limit,),
    )
    rows = cur.fetchall()
    conn.close()
    return [result_from_columns(dict(zip(RESULT_COLUMNS, r))) for r in rows]


def fetch_deck_results(deck: str, limit: int = 50) -> list[dict]:
    conn = _get_conn()
    cur = conn.cursor()
    cur.execute(
        f"SELECT {', '.join(RESULT_COLUMNS)} FROM reroll_results WHERE deck = %s "
        "ORDER BY created_at DESC LIMIT %s",
        (deck, limit),
    )
    rows = cur.fetchall()
    conn.close()
    return [result_from_columns(dict(zip(RESULT_COLUMNS, r))) for r in rows]


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def percentile(value: float, values: Iterable[float]) -> Optional[int]:
    """Share (0-100) of results ranked before the first one at or above ``value``.

    A value beyond every result ranks at the last position. None for no data.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    i = next((idx for idx, x in enumerate(ordered) if x >= value), len(ordered) - 1)
    return _round_half_up(i / len(ordered) * 100)


def time_percentile(time_sec: float, results: list[dict]) -> Optional[int]:
    """Like percentile() on finish times, but slower than everyone scores 100."""
    times = sorted(r["timeSec"] for r in results)
    if not times:
        return None
    i = next((idx for idx, t in enumerate(times) if t >= time_sec), -1)
    if i == -1:
        return 100
    return _round_half_up(i / len(times) * 100)


@dataclass
class Histogram:
    counts: list[int]
    lo: float
    hi: float
    overflow: int = 0
    bars: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "counts": list(self.counts),
            "bars": list(self.bars),
            "min": self.lo,
            "max": self.hi,
            "overMax": self.overflow,
        }


def histogram(values: Iterable[float], lo: float, hi: float, bins: int = HISTOGRAM_BINS) -> Histogram:
    """Fixed-range histogram. Values above ``hi`` are counted as overflow only.

    ``bars`` are percentages of the tallest bin.
    """
    span = hi - lo
    if span <= 0 or bins <= 0:
        raise ValueError(f"Bad histogram range: [{lo}, {hi}] with {bins} bins")
    counts = [0] * bins
    overflow = 0
    for v in values:
        if v > hi:
            overflow += 1
            continue
        clamped = max(lo, v)
        idx = min(bins - 1, max(0, int(math.floor((clamped - lo) / span * bins))))
        counts[idx] += 1
    top = max(counts + [1])
    bars = [c / top * 100 for c in counts]
    return Histogram(counts=counts, lo=lo, hi=hi, overflow=overflow, bars=bars)


def metric_histograms(results: list[dict], bins: int = HISTOGRAM_BINS) -> dict[str, Histogram]:
    return {
        metric: histogram([r.get(metric) or 0 for r in results], lo, hi, bins)
        for metric, (lo, hi) in HISTOGRAM_RANGES.items()
    }


def filter_overlap(results: list[dict], mode: str = "all") -> list[dict]:
    """Results played in overlap ``mode`` ("all" keeps everything)."""
    if mode == "all":
        return list(results)
    return [r for r in results if (r.get("overlapMode") or "none") == mode]


def group_by_deck(results: list[dict]) -> "OrderedDict[str, list[dict]]":
    """Results per deck, decks in first-seen order."""
    groups: OrderedDict[str, list[dict]] = OrderedDict()
    for r in results:
        groups.setdefault(r["deck"], []).append(r)
    return groups


def deck_summary(results: list[dict]) -> list[dict]:
    """One row per deck: result count, best time, average spend and rerolls."""
    rows = []
    for deck, group in group_by_deck(results).items():
        n = len(group)
        rows.append({
            "deck": deck,
            "count": n,
            "bestTime": min(r["timeSec"] for r in group),
            "avgSpent": sum(r["spent"] for r in group) / n,
            "avgRerolls": sum(r.get("rerollCount") or 0 for r in group) / n,
        })
    rows.sort(key=lambda row: (-row["count"], row["deck"]))
    return rows
