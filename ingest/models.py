# ingest/models.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Article:
    title: str
    article: str   # body text
    date: str
    link: str      # SBS end-page URL built from the document id
