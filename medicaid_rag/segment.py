"""Splitting documents into tagged, retrievable segments."""

from __future__ import annotations

import re
from typing import List

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .config import SegmenterConfig
from .schemas import RawDocument, Segment

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def document_id(document: RawDocument) -> str:
    """Return the source-stable identity of a document.

    Built from the source URL/path and the title only, so loading the same page
    again yields the same identifier and overwrites its previous segments.
    """

    source = str(document.metadata.get("source", ""))
    title = str(document.metadata.get("title", ""))
    return f"{source}_{_NON_ALPHANUMERIC.sub('_', title)}"


class DocumentSegmenter:
    """Segment documents with a recursive character splitter."""

    def __init__(self, config: SegmenterConfig):
        self.config = config
        self.text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
        )

    def segment(self, document: RawDocument) -> List[Segment]:
        """Return the ordered segments of ``document`` tagged with ``document_id`` and ``segment_index``."""

        doc_id = document_id(document)
        chunks = [chunk.strip() for chunk in self.text_splitter.split_text(document.text)]
        chunks = [chunk for chunk in chunks if chunk]

        return [
            Segment(
                text=chunk,
                metadata={**document.metadata, "document_id": doc_id, "segment_index": index},
            )
            for index, chunk in enumerate(chunks)
        ]
