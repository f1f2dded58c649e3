#!/usr/bin/env python
# coding: utf-8
"""
============================================================
ENRON MAIL ACTIVITY — PEOPLE BUCKETER
============================================================
Purpose: Turn the exported Enron message and people tables
         into per-month, per-person e-mail activity.

Stages:
  1. determine_active_interval — months with enough mail
  2. collect_people            — canonical, deduplicated names
  3. bucket_mail               — sent / received per person
                                 per active month
  4. export_results            — CSV tables for the viz step
============================================================
"""

import argparse
import os
import sys
from collections import Counter
from typing import Dict, Optional

import pandas as pd
from pydantic import BaseModel, Field

from active_months import active_range, count_months, filter_active, format_month
from mail_bucket import MailBucket
from parse import DEFAULT_CHUNK_SIZE, bucket_events_csv, read_actors_csv, read_timestamps_csv
from people import Person, people_frame, resolve_people, unified_ids


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_THRESHOLD = 10_000
DEFAULT_TOP_N = 50


def _default_workers() -> int:
    raw = os.environ.get("ACTIVITY_WORKERS", "1")
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"ACTIVITY_WORKERS must be an integer, got {raw!r}") from None


class PipelineConfig(BaseModel):
    events_csv: str = Field(description="CSV of (timestamp, sender_id, recipient_id), one row per recipient.")
    people_csv: str = Field(description="CSV of (person_id, email, name), one row per people record.")
    output_dir: str = Field(default="data/stats", description="Directory receiving the exported tables.")
    threshold: int = Field(
        default=DEFAULT_THRESHOLD, ge=0,
        description="A month is active only with strictly more e-mails than this.",
    )
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, description="Rows per CSV chunk.")
    workers: int = Field(default_factory=_default_workers, ge=1, description="Processes bucketing chunks.")
    unify: bool = Field(default=True, description="Merge activity of duplicate people under their unified id.")
    top_n: int = Field(default=DEFAULT_TOP_N, gt=0, description="People listed in top_people.csv.")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class PeopleBucketer:
    """
    End-to-end pipeline:
      1. determine_active_interval
      2. collect_people
      3. bucket_mail
      4. export_results
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        os.makedirs(self.config.output_dir, exist_ok=True)

        self.per_month: Dict[int, int] = {}
        self.people: Dict[int, Person] = {}
        self.bucket: Optional[MailBucket] = None
        self.skipped: Counter = Counter()

    def _path(self, name: str) -> str:
        return os.path.join(self.config.output_dir, name)

    # ------------------------------------------------------------------
    # Stage 1: Active interval
    # ------------------------------------------------------------------

    def determine_active_interval(self) -> Dict[int, int]:
        print("📅 Determining the Active Interval …")

        counts, skipped = count_months(
            read_timestamps_csv(self.config.events_csv, self.config.chunk_size)
        )
        self.per_month = filter_active(counts, self.config.threshold)
        self.skipped.update(skipped)

        path = self._path("activeMonths.csv")
        print(f"   Writing: {path}")
        pd.DataFrame(
            list(self.per_month.items()), columns=["stamp", "count"]
        ).to_csv(path, index=False)

        report = " ".join(f"{format_month(ms)}={cnt}" for ms, cnt in self.per_month.items())
        print(f"   Activity per Month: {report or '(none)'}")
        if skipped:
            print(f"   Skipped {sum(skipped.values()):,} invalid time stamps")
        return self.per_month

    # ------------------------------------------------------------------
    # Stage 2: People
    # ------------------------------------------------------------------

    def collect_people(self) -> Dict[int, Person]:
        print("👥 Collecting People …")

        self.people = resolve_people(read_actors_csv(self.config.people_csv))

        path = self._path("people.csv")
        print(f"   Writing: {path}")
        people_frame(self.people).to_csv(path, index=False)

        n_unified = sum(1 for p in self.people.values() if p.is_primary)
        print(f"   {len(self.people):,} people, {n_unified:,} unique names")
        return self.people

    # ------------------------------------------------------------------
    # Stage 3: Mail bucketing
    # ------------------------------------------------------------------

    def bucket_mail(self) -> MailBucket:
        print("📬 Bucketing mail per person …")

        bucket, skipped = bucket_events_csv(
            self.config.events_csv,
            months=self.per_month.keys(),
            chunk_size=self.config.chunk_size,
            workers=self.config.workers,
        )
        self.skipped.update(skipped)

        if self.config.unify and self.people:
            bucket = bucket.unify(unified_ids(self.people))
        self.bucket = bucket

        if bucket.is_empty():
            print("   No mail inside the active interval")
        else:
            first, last = bucket.time_range()
            print(f"   {len(bucket)} months ({format_month(first)} – {format_month(last)}), "
                  f"{len(bucket.actors()):,} people")
        return bucket

    # ------------------------------------------------------------------
    # Stage 4: Export
    # ------------------------------------------------------------------

    def export_results(self) -> None:
        print("💾 Exporting …")
        bucket = self.bucket if self.bucket is not None else MailBucket()
        stamps = bucket.stamps()

        monthly_rows = []
        for ms in stamps:
            act = bucket.total_period_activity(ms)
            monthly_rows.append((ms, format_month(ms), act.sent, act.recv, act.total))
        monthly = pd.DataFrame(monthly_rows, columns=["stamp", "month", "sent", "recv", "total"])
        monthly.to_csv(self._path("monthly_totals.csv"), index=False)

        ranked = bucket.total_personal_activity()
        top = ranked[: self.config.top_n]
        top_people = pd.DataFrame(
            [
                (pa.actor_id, self.people[pa.actor_id].name if pa.actor_id in self.people else "",
                 pa.sent, pa.recv, pa.total)
                for pa in top
            ],
            columns=["pid", "name", "sent", "recv", "total"],
        )
        top_people.to_csv(self._path("top_people.csv"), index=False)

        # One column per month so series line up index-for-index.
        series = pd.DataFrame(
            {
                pa.actor_id: [act.total for act in bucket.personal_activity(pa.actor_id)]
                for pa in top
            },
            index=pd.Index([format_month(ms) for ms in stamps], name="month"),
        ).T
        series.index.name = "pid"
        series.to_csv(self._path("personal_activity.csv"))

        stats = {
            "active_months": len(self.per_month),
            "people": len(self.people),
            "people_with_mail": len(ranked),
            "skipped_rows": sum(self.skipped.values()),
        }
        print(f"\n✅  Done! Files in: {self.config.output_dir}/")
        _col_w = max(len(k) for k in stats) + 2
        for k, v in stats.items():
            print(f"   {k:<{_col_w}} {v}")

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def run(self) -> MailBucket:
        """Execute the full pipeline."""
        self.determine_active_interval()
        if active_range(self.per_month) is None:
            print("⚠️  No month passes the threshold; nothing to bucket.")
        self.collect_people()
        bucket = self.bucket_mail()
        self.export_results()
        return bucket


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Per-month e-mail activity of the Enron people.")
    p.add_argument("--events", default="data/events.csv", help="timestamp,sender_id,recipient_id CSV")
    p.add_argument("--people", default="data/people.csv", help="person_id,email,name CSV")
    p.add_argument("--out", default="data/stats")
    p.add_argument("--threshold", type=int, default=DEFAULT_THRESHOLD)
    p.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE)
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--top", type=int, default=DEFAULT_TOP_N)
    p.add_argument("--no-unify", action="store_true", help="keep duplicate people apart")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = dict(
        events_csv=args.events,
        people_csv=args.people,
        output_dir=args.out,
        threshold=args.threshold,
        chunk_size=args.chunk_size,
        unify=not args.no_unify,
        top_n=args.top,
    )
    if args.workers is not None:
        settings["workers"] = args.workers
    config = PipelineConfig(**settings)

    for path in (config.events_csv, config.people_csv):
        if not os.path.exists(path):
            print(f"❌ Error: {path} not found.")
            return 1

    PeopleBucketer(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
