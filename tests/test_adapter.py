"""Tests for embedding pooling and the anchor cache."""

import numpy as np
import pytest

from reflecta.embeddings.adapter import EmbeddingAdapter, build_entry_vectors, pool_embedding
from reflecta.errors import BackendUnavailableError

from conftest import FakeEmbedder


class _Proxy:
    def __init__(self, data, dims):
        self.data = data
        self.dims = dims


def test_pool_flat_vector():
    assert np.allclose(pool_embedding([1.0, 2.0, 3.0]), [1, 2, 3])


def test_pool_token_matrix():
    assert np.allclose(pool_embedding([[1.0, 3.0], [3.0, 5.0]]), [2, 4])


def test_pool_batched_tokens():
    assert np.allclose(pool_embedding(np.array([[[0.0, 2.0], [2.0, 4.0]]])), [1, 3])


def test_pool_data_dims_object():
    out = pool_embedding(_Proxy([1, 2, 3, 5], dims=[1, 2, 2]))
    assert np.allclose(out, [2, 3.5])


def test_pool_ragged_rows():
    assert np.allclose(pool_embedding([[1.0, 1.0], [3.0, 3.0], [7.0]]), [2, 2])


def test_pool_unknown_shape_is_empty():
    assert len(pool_embedding(np.zeros((2, 2, 2)))) == 0
    assert len(pool_embedding(None)) == 0


def test_embed_without_backend():
    adapter = EmbeddingAdapter(None)
    assert not adapter.available
    with pytest.raises(BackendUnavailableError):
        adapter.embed_mean("hello")


def test_embed_wraps_load_errors():
    class Broken(FakeEmbedder):
        def embed(self, text):
            raise OSError("model files missing")

    with pytest.raises(BackendUnavailableError, match="model files missing"):
        EmbeddingAdapter(Broken()).embed_mean("hello")


def test_anchor_cache_and_reset():
    backend = FakeEmbedder()
    adapter = EmbeddingAdapter(backend)
    adapter.anchor_centroid("demo", ["a b", "b c"])
    adapter.anchor_centroid("demo", ["a b", "b c"])
    assert len(backend.calls) == 2

    adapter.reset()
    adapter.anchor_vectors("demo", ["a b", "b c"])
    assert len(backend.calls) == 4


def test_entry_vectors_salience():
    adapter = EmbeddingAdapter(FakeEmbedder())
    entry = adapter.embed_entry("Only one sentence here.")
    assert len(entry) == 1
    assert entry.sentences[0].salience == 0.5

    entry = build_entry_vectors(["a", "b", "c"], [[1, 0], [1, 0.1], [0, 1]])
    assert max(entry.saliences) == 1.0
    assert min(entry.saliences) == 0.0
