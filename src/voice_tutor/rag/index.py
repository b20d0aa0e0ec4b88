"""Vector index over textbook passages."""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol, Sequence

import numpy as np

from ..models.document import Passage, ScoredPassage

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Turns texts into embedding vectors."""

    def embed(self, texts: Sequence[str]) -> np.ndarray: ...


class CorpusIndex(Protocol):
    """Narrow interface the ingestion and retrieval paths use."""

    def add(self, passages: Sequence[Passage], persist: bool = True) -> None: ...

    def flush(self) -> None: ...

    def search(self, query: str, k: int, score_threshold: float) -> list[ScoredPassage]: ...

    def count(self) -> int: ...


class FastEmbedEmbedder:
    """On-device embeddings via fastembed; the model is loaded on first use."""

    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._lock = threading.Lock()

    def _get_model(self):
        with self._lock:
            if self._model is None:
                from fastembed import TextEmbedding

                logger.info(f"Loading embedding model {self.model_name}")
                self._model = TextEmbedding(model_name=self.model_name)
            return self._model

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        vectors = list(self._get_model().embed(list(texts)))
        return np.asarray(vectors, dtype=np.float32)


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms


class LocalCorpusIndex:
    """In-memory cosine-similarity index persisted to a directory.

    Layout under ``store_path``: ``passages.json`` (passage metadata, in row
    order) and ``embeddings.npy`` (L2-normalized float32 matrix).
    """

    PASSAGES_FILE = "passages.json"
    EMBEDDINGS_FILE = "embeddings.npy"

    def __init__(self, embedder: Embedder, store_path: Path | None = None):
        self.embedder = embedder
        self.store_path = Path(store_path) if store_path else None
        self._lock = threading.Lock()
        self._passages: list[Passage] = []
        self._embeddings: np.ndarray | None = None
        self._dirty = False
        self._load()

    def _load(self) -> None:
        if not self.store_path:
            return
        passages_file = self.store_path / self.PASSAGES_FILE
        embeddings_file = self.store_path / self.EMBEDDINGS_FILE
        if not passages_file.exists() or not embeddings_file.exists():
            return
        with open(passages_file, encoding="utf-8") as f:
            passages = [Passage(**item) for item in json.load(f)]
        embeddings = np.load(embeddings_file)

        # Row i of the matrix belongs to passage i; a save cut short leaves a longer prefix in one file.
        if len(passages) != len(embeddings):
            keep = min(len(passages), len(embeddings))
            logger.warning(
                f"Corpus files in {self.store_path} disagree ({len(passages)} passages, "
                f"{len(embeddings)} embeddings); keeping the first {keep}"
            )
            passages = passages[:keep]
            embeddings = embeddings[:keep]

        self._passages = passages
        self._embeddings = embeddings
        logger.info(f"Loaded {len(self._passages)} passages from {self.store_path}")

    def _replace_file(self, name: str, write) -> None:
        target = self.store_path / name
        tmp = target.with_name(target.name + ".tmp")
        with open(tmp, "wb") as f:
            write(f)
        os.replace(tmp, target)

    def _save(self, passages: list[Passage], embeddings: np.ndarray) -> None:
        if not self.store_path:
            return
        self.store_path.mkdir(parents=True, exist_ok=True)
        # Embeddings go first so an interrupted save never leaves passages without vectors.
        self._replace_file(self.EMBEDDINGS_FILE, lambda f: np.save(f, embeddings))
        payload = json.dumps([p.model_dump() for p in passages]).encode("utf-8")
        self._replace_file(self.PASSAGES_FILE, lambda f: f.write(payload))

    def add(self, passages: Sequence[Passage], persist: bool = True) -> None:
        """Index ``passages``; with ``persist=False`` they stay in memory until ``flush``.

        A failed save raises and leaves the index unchanged.
        """
        if not passages:
            return
        vectors = _normalize_rows(self.embedder.embed([p.text for p in passages]))
        with self._lock:
            if self._embeddings is None or len(self._embeddings) == 0:
                embeddings = vectors
            else:
                embeddings = np.vstack([self._embeddings, vectors])
            combined = self._passages + list(passages)
            if persist:
                self._save(combined, embeddings)
            self._passages = combined
            self._embeddings = embeddings
            self._dirty = not persist

    def flush(self) -> None:
        """Write passages added with ``persist=False`` to disk."""
        with self._lock:
            if not self._dirty:
                return
            self._save(self._passages, self._embeddings)
            self._dirty = False

    def search(self, query: str, k: int = 5, score_threshold: float = 0.0) -> list[ScoredPassage]:
        with self._lock:
            if not self._passages:
                return []
            embeddings = self._embeddings
            passages = list(self._passages)

        query_vector = _normalize_rows(self.embedder.embed([query]))[0]
        scores = embeddings @ query_vector
        top = np.argsort(-scores)[:k]
        return [
            ScoredPassage(passage=passages[i], score=float(scores[i]))
            for i in top
            if scores[i] >= score_threshold
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._passages)
