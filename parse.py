import os
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from typing import Collection, Iterator, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from active_months import month_start
from mail_bucket import MailBucket
from rows import Skip, SkipReason, parse_event_row

# Column layout of the exported tables:
#   SELECT messagedt, senderid, personid FROM recipients, messages ...
#   SELECT personid, email, name FROM people
EVENT_COLUMNS = ["timestamp", "sender_id", "recipient_id"]
ACTOR_COLUMNS = ["person_id", "email", "name"]

DEFAULT_CHUNK_SIZE = 25_000


def process_chunk(chunk: pd.DataFrame, months: Optional[Collection[int]] = None) -> Tuple[MailBucket, Counter]:
    """
    Worker function: buckets one chunk of events by month into a private MailBucket.
    When months is given, events outside those month stamps are left out.
    """
    bucket = MailBucket()
    skipped: Counter = Counter()

    for row in chunk[EVENT_COLUMNS].itertuples(index=False, name=None):
        event = parse_event_row(row)
        if isinstance(event, Skip):
            skipped[event.reason] += 1
            continue
        try:
            stamp = month_start(event.timestamp)
        except OverflowError:
            skipped[SkipReason.BAD_TIMESTAMP] += 1
            continue
        if months is not None and stamp not in months:
            skipped[SkipReason.OUTSIDE_ACTIVE] += 1
            continue
        bucket.record(stamp, event.sender_id, event.recipient_id)

    return bucket, skipped


def _read_chunks(path: str, columns: List[str], chunk_size: int) -> Iterator[pd.DataFrame]:
    # Everything as text; per-row parsing decides what is usable.
    return pd.read_csv(
        path,
        usecols=columns,
        chunksize=chunk_size,
        dtype=str,
        keep_default_na=False,
        na_values=[""],
        engine="c",
        on_bad_lines="skip",
    )


def bucket_events_csv(
    path: str,
    months: Optional[Collection[int]] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    workers: int = 1,
) -> Tuple[MailBucket, Counter]:
    """
    Stream the events CSV in chunks, bucket each chunk on its own (in parallel
    when workers > 1) and merge the per-chunk buckets.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    months = frozenset(months) if months is not None else None
    reader = _read_chunks(path, EVENT_COLUMNS, chunk_size)
    skipped: Counter = Counter()
    buckets: List[MailBucket] = []

    if workers <= 1:
        for chunk in tqdm(reader, desc="  Chunks"):
            bucket, skips = process_chunk(chunk, months)
            buckets.append(bucket)
            skipped.update(skips)
    else:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(process_chunk, chunk, months) for chunk in reader]
            with tqdm(total=len(futures), desc="  Chunks") as pbar:
                for future in futures:
                    bucket, skips = future.result()
                    buckets.append(bucket)
                    skipped.update(skips)
                    pbar.update(1)

    return MailBucket.merge_all(buckets), skipped


def read_timestamps_csv(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Optional[str]]:
    """Raw timestamp values of every event, malformed ones included."""
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    for chunk in _read_chunks(path, ["timestamp"], chunk_size):
        yield from chunk["timestamp"]


def read_actors_csv(path: str) -> Iterator[Tuple]:
    """(person id, e-mail, name) rows in file order."""
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    for chunk in _read_chunks(path, ACTOR_COLUMNS, DEFAULT_CHUNK_SIZE):
        yield from chunk[ACTOR_COLUMNS].itertuples(index=False, name=None)
