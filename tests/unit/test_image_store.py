"""Unit tests for the Image Set Store."""

import pytest

from studio.pipeline.image_store import ImageSetStore
from studio.pipeline.models import CandidateFile

from tests.fakes import make_candidate


class TestAdd:
    """Tests for ImageSetStore.add filtering and ordering."""

    def test_appends_in_batch_order(self):
        """Accepted files keep their batch order after existing entries."""
        store = ImageSetStore()
        store.add([make_candidate(0), make_candidate(1)])
        store.add([make_candidate(2)])

        names = [img.display_name for img in store]
        assert names == ["frame_00.png", "frame_01.png", "frame_02.png"]

    def test_reads_full_payload_and_type(self):
        store = ImageSetStore()
        kept = store.add([make_candidate(7, mime_type="image/webp")])

        assert kept[0].payload == b"image-bytes-7"
        assert kept[0].mime_type == "image/webp"

    def test_assigns_fresh_unique_ids(self):
        store = ImageSetStore()
        store.add([make_candidate(0), make_candidate(0)])

        ids = [img.id for img in store]
        assert len(set(ids)) == 2

    def test_non_images_are_dropped_silently(self):
        """Types not starting with image/ never enter the set."""
        store = ImageSetStore()
        kept = store.add([
            make_candidate(0),
            CandidateFile(name="clip.mp4", mime_type="video/mp4", data=b"v"),
            CandidateFile(name="notes.txt", mime_type="text/plain", data=b"t"),
            CandidateFile(name="unknown", mime_type="", data=b"?"),
        ])

        assert len(kept) == 1
        assert all(img.mime_type.startswith("image/") for img in store)

    @pytest.mark.parametrize("batch_size", [39, 40, 41, 100])
    def test_never_exceeds_cap(self, batch_size):
        store = ImageSetStore(max_images=40)
        store.add([make_candidate(i) for i in range(batch_size)])

        assert len(store) == min(batch_size, 40)

    def test_truncation_keeps_oldest(self):
        """Over the cap, the first entries win and the batch tail is dropped."""
        store = ImageSetStore(max_images=3)
        store.add([make_candidate(0), make_candidate(1)])
        kept = store.add([make_candidate(2), make_candidate(3), make_candidate(4)])

        assert [img.display_name for img in kept] == ["frame_02.png"]
        assert [img.payload for img in store] == [
            b"image-bytes-0", b"image-bytes-1", b"image-bytes-2",
        ]

    def test_full_store_accepts_nothing(self):
        store = ImageSetStore(max_images=2)
        store.add([make_candidate(0), make_candidate(1)])

        assert store.add([make_candidate(2)]) == []
        assert len(store) == 2


class TestRemoveAndClear:
    """Tests for remove / clear."""

    def test_add_then_remove_restores_previous_content(self):
        store = ImageSetStore()
        store.add([make_candidate(0), make_candidate(1)])
        before = store.snapshot()

        added = store.add([make_candidate(2)])
        store.add([make_candidate(3)])
        store.remove(added[0].id)

        assert store.snapshot()[:2] == before
        assert added[0].id not in [img.id for img in store]
        assert len(store) == 3

    def test_remove_unknown_id_is_noop(self, filled_store):
        before = filled_store.snapshot()
        filled_store.remove("does-not-exist")
        assert filled_store.snapshot() == before

    def test_clear_empties_the_set(self, filled_store):
        filled_store.clear()
        assert len(filled_store) == 0
        assert filled_store.snapshot() == ()

    def test_get_by_id(self, filled_store):
        first = filled_store.snapshot()[0]
        assert filled_store.get(first.id) == first
        assert filled_store.get("missing") is None

    def test_snapshot_is_detached(self, filled_store):
        """A snapshot does not change when the store does."""
        snap = filled_store.snapshot()
        filled_store.clear()
        assert len(snap) == 5
