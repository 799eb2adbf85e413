"""Reroll Simulator leaderboard - FastAPI backend (read-only)."""

import os

import asyncpg
from fastapi import FastAPI, HTTPException, Query
from contextlib import asynccontextmanager

from reroll_sim.config import get_database_url
from reroll_sim.leaderboard import (
    HISTOGRAM_BINS, RESULT_COLUMNS, deck_summary, filter_overlap,
    metric_histograms, percentile, result_from_columns, time_percentile,
)

MAX_RESULTS = int(os.environ.get("REROLL_VIEWER_MAX_RESULTS", "100"))
OVERLAP_PATTERN = "^(all|none|with)$"

db_pool: asyncpg.Pool | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global db_pool
    db_pool = await asyncpg.create_pool(get_database_url(), min_size=1, max_size=5,
                                         statement_cache_size=0)
    yield
    if db_pool:
        await db_pool.close()


app = FastAPI(title="Reroll Simulator Leaderboard", lifespan=lifespan)


async def _fetch_results(deck: str | None = None, limit: int = MAX_RESULTS) -> list[dict]:
    columns = ", ".join(RESULT_COLUMNS)
    if deck:
        rows = await db_pool.fetch(
            f"SELECT {columns} FROM reroll_results WHERE deck = $1 ORDER BY created_at DESC LIMIT $2",
            deck, limit,
        )
    else:
        rows = await db_pool.fetch(
            f"SELECT {columns} FROM reroll_results ORDER BY created_at DESC LIMIT $1",
            limit,
        )
    return [result_from_columns(dict(r)) for r in rows]


# ── Results ───────────────────────────────────────────────────────────

@app.get("/api/results")
async def list_results(
    deck: str | None = None,
    overlap: str = Query("all", pattern=OVERLAP_PATTERN),
    limit: int = Query(MAX_RESULTS, ge=1, le=500),
):
    """Most recent results, optionally for one deck and one overlap mode."""
    results = filter_overlap(await _fetch_results(deck, limit), overlap)
    return {"results": results, "total": len(results)}


@app.get("/api/decks")
async def list_decks(overlap: str = Query("all", pattern=OVERLAP_PATTERN)):
    """Per-deck counts, best time and average spend over recent results."""
    results = filter_overlap(await _fetch_results(), overlap)
    return {"decks": deck_summary(results)}


@app.get("/api/decks/{deck}/stats")
async def deck_stats(
    deck: str,
    overlap: str = Query("all", pattern=OVERLAP_PATTERN),
    time_sec: float | None = None,
    spent: int | None = None,
    rerolls: int | None = None,
    bins: int = Query(HISTOGRAM_BINS, ge=1, le=100),
):
    """Histograms for one deck, plus where a given run would rank."""
    results = filter_overlap(await _fetch_results(deck), overlap)
    if not results:
        raise HTTPException(404, "No results for deck")

    ranks = {}
    if time_sec is not None:
        ranks["timeSec"] = percentile(time_sec, [r["timeSec"] for r in results])
    if spent is not None:
        ranks["spent"] = percentile(spent, [r["spent"] for r in results])
    if rerolls is not None:
        ranks["rerollCount"] = percentile(rerolls, [r["rerollCount"] for r in results])

    return {
        "deck": deck,
        "count": len(results),
        "histograms": {k: h.to_dict() for k, h in metric_histograms(results, bins).items()},
        "percentiles": ranks,
    }


@app.get("/api/percentile")
async def get_percentile(
    time_sec: float = Query(..., ge=0),
    deck: str | None = None,
    overlap: str = Query("all", pattern=OVERLAP_PATTERN),
):
    """Finish-time percentile against recent results."""
    results = filter_overlap(await _fetch_results(deck), overlap)
    return {"timeSec": time_sec, "percentile": time_percentile(time_sec, results), "total": len(results)}


@app.get("/api/health")
async def health():
    return {"ok": db_pool is not None}
