"""Tests for the playback queue."""

import random
from collections import Counter
from itertools import permutations

import pytest

from amethyst.domain.playback.queue import (
    QueueEvent,
    QueueManager,
    extension_of,
    fisher_yates_shuffle,
    flatten,
)


def make_queue(tracks, index=-1):
    queue = QueueManager(tracks)
    queue.set_index(index)
    events = []
    queue.subscribe(events.append)
    return queue, events


class TestFlatten:
    def test_nested_batches_flatten_depth_first(self) -> None:
        nested = ["a.mp3", ["b.mp3", ["c.mp3", "d.mp3"]], [], "e.mp3", [["f.mp3"]]]
        assert flatten(nested) == ["a.mp3", "b.mp3", "c.mp3", "d.mp3", "e.mp3", "f.mp3"]

    def test_flatten_is_idempotent(self) -> None:
        nested = [["x", ["y"]], "z", [["x"]]]
        once = flatten(nested)
        assert flatten(once) == once

    def test_strings_are_not_split(self) -> None:
        assert flatten(["song.flac"]) == ["song.flac"]

    def test_empty_input(self) -> None:
        assert flatten([]) == []
        assert flatten([[], [[]]]) == []


class TestSetQueue:
    def test_replaces_queue_and_emits_once(self) -> None:
        queue, events = make_queue(["old.mp3"])
        queue.set_queue([["a.mp3", "b.mp3"], "c.mp3"])

        assert queue.tracks == ["a.mp3", "b.mp3", "c.mp3"]
        assert events == [QueueEvent(contents_changed=True)]

    def test_tracks_returns_copy(self) -> None:
        queue, _ = make_queue(["a.mp3"])
        queue.tracks.append("b.mp3")
        assert queue.tracks == ["a.mp3"]


class TestPrependAndSelect:
    def test_allowed_extension_is_prepended_and_selected(self) -> None:
        queue, events = make_queue(["a.mp3", "c.flac"], index=1)

        assert queue.prepend_and_select("new.ogg") is True
        assert queue.tracks == ["new.ogg", "a.mp3", "c.flac"]
        assert queue.index == 0
        assert events == [QueueEvent(contents_changed=True, index_changed=True)]

    def test_extension_match_is_case_insensitive(self) -> None:
        queue, _ = make_queue([])
        assert queue.prepend_and_select("/music/LOUD.FLAC") is True
        assert queue.current_path() == "/music/LOUD.FLAC"

    @pytest.mark.parametrize("path", ["b.txt", "README", "cover.jpg", "song.mp3.part"])
    def test_rejected_extension_changes_nothing(self, path) -> None:
        queue, events = make_queue(["a.mp3", "b.txt", "c.flac"], index=2)

        assert queue.prepend_and_select(path) is False
        assert queue.tracks == ["a.mp3", "b.txt", "c.flac"]
        assert queue.index == 2
        assert events == []

    def test_extension_of_uses_final_dot(self) -> None:
        assert extension_of("/a.b/c.Tar.MP3") == "mp3"
        assert extension_of("noext") == "noext"


class TestNavigation:
    def test_next_advances(self) -> None:
        queue, events = make_queue(["a", "b", "c"], index=0)
        assert queue.next() is True
        assert queue.index == 1
        assert events == [QueueEvent(index_changed=True)]

    def test_next_does_not_reach_last_position(self) -> None:
        # index + skip < length - skip: 1 + 1 < 2 is false
        queue, events = make_queue(["a", "b", "c"], index=1)
        assert queue.next() is False
        assert queue.index == 1
        assert events == []

    def test_next_at_end_is_noop(self) -> None:
        queue, _ = make_queue(["a", "b", "c"], index=2)
        assert queue.next() is False
        assert queue.index == 2

    def test_next_on_empty_queue_keeps_no_track(self) -> None:
        queue, events = make_queue([])
        assert queue.next() is False
        assert queue.index == -1
        assert queue.current_path() is None
        assert events == []

    def test_next_from_no_track_selects_first(self) -> None:
        queue, _ = make_queue(["a", "b", "c"])
        assert queue.next() is True
        assert queue.current_path() == "a"

    def test_next_moves_by_skip(self) -> None:
        queue, _ = make_queue(list("abcdef"), index=0)
        assert queue.next(skip=2) is True
        assert queue.index == 2
        assert queue.next(skip=2) is False  # 2 + 2 < 4 is false
        assert queue.index == 2

    def test_previous_goes_back(self) -> None:
        queue, _ = make_queue(["a", "b", "c"], index=2)
        assert queue.previous() is True
        assert queue.index == 1

    def test_previous_does_not_reach_first_position(self) -> None:
        queue, events = make_queue(["a", "b", "c"], index=1)
        assert queue.previous() is False
        assert queue.index == 1
        assert events == []

    def test_navigation_never_leaves_bounds(self) -> None:
        rng = random.Random(7)
        for _ in range(500):
            length = rng.randint(0, 8)
            queue = QueueManager([f"{i}.mp3" for i in range(length)])
            queue.set_index(rng.randint(-1, length - 1) if length else -1)
            for _ in range(20):
                before = queue.index
                skip = rng.randint(1, 3)
                moved = queue.next(skip) if rng.random() < 0.5 else queue.previous(skip)
                if moved:
                    assert 0 <= queue.index < length
                else:
                    assert queue.index == before

    def test_set_index_is_unchecked(self) -> None:
        queue, events = make_queue(["a", "b"])
        assert queue.set_index(10) is True
        assert queue.index == 10
        assert queue.current_path() is None
        assert events == [QueueEvent(index_changed=True)]

    def test_set_same_index_emits_nothing(self) -> None:
        queue, events = make_queue(["a", "b"], index=1)
        assert queue.set_index(1) is False
        assert events == []


class TestClear:
    def test_clear_empties_and_keeps_index(self) -> None:
        queue, events = make_queue(["a", "b"], index=1)
        queue.clear()
        assert queue.tracks == []
        assert queue.index == 1
        assert queue.current_path() is None
        assert events == [QueueEvent(contents_changed=True)]


class TestShuffle:
    def test_shuffle_is_a_permutation(self) -> None:
        tracks = ["a", "b", "b", "c", "d", "d", "d"]
        queue, events = make_queue(tracks)
        queue.shuffle()

        assert Counter(queue.tracks) == Counter(tracks)
        assert events == [QueueEvent(reordered=True)]

    def test_shuffle_handles_short_lists(self) -> None:
        assert fisher_yates_shuffle([]) == []
        assert fisher_yates_shuffle(["only"]) == ["only"]

    def test_every_permutation_equally_likely(self) -> None:
        rng = random.Random(1234)
        trials = 6000
        counts = Counter(
            tuple(fisher_yates_shuffle(["a", "b", "c"], rng)) for _ in range(trials)
        )

        assert set(counts) == set(permutations(["a", "b", "c"]))
        expected = trials / 6
        for count in counts.values():
            # ~5 standard deviations
            assert abs(count - expected) < 150

    def test_each_position_occupant_is_uniform(self) -> None:
        rng = random.Random(99)
        items = list(range(5))
        trials = 5000
        positions = [Counter() for _ in items]
        for _ in range(trials):
            for position, value in enumerate(fisher_yates_shuffle(list(items), rng)):
                positions[position][value] += 1

        expected = trials / len(items)
        for counter in positions:
            for value in items:
                assert abs(counter[value] - expected) < 150
