import threading
import unittest
from datetime import datetime, timezone

from recipes_api import ids
from recipes_api.ids import IdGenerator


class FakeClock:
    def __init__(self, value: float) -> None:
        self.value = value

    def __call__(self) -> float:
        return self.value


class IdGeneratorTests(unittest.TestCase):
    def test_ids_have_fixed_length_and_alphabet(self) -> None:
        recipe_id = IdGenerator().new_id()

        self.assertEqual(len(recipe_id), ids.ID_LENGTH)
        self.assertTrue(set(recipe_id) <= set(ids.ALPHABET))

    def test_sequential_ids_sort_in_creation_order(self) -> None:
        generator = IdGenerator()
        generated = [generator.new_id() for _ in range(500)]

        self.assertEqual(generated, sorted(generated))
        self.assertEqual(len(set(generated)), len(generated))

    def test_ids_within_same_millisecond_are_distinct_and_ordered(self) -> None:
        generator = IdGenerator(clock=FakeClock(1_700_000_000.0), fingerprint=b"abc")
        first = generator.new_id()
        second = generator.new_id()

        self.assertLess(first, second)

    def test_clock_moving_backwards_keeps_order(self) -> None:
        clock = FakeClock(1_700_000_000.0)
        generator = IdGenerator(clock=clock, fingerprint=b"abc")
        first = generator.new_id()
        clock.value -= 5
        second = generator.new_id()

        self.assertLess(first, second)

    def test_later_time_sorts_after_earlier_time(self) -> None:
        clock = FakeClock(1_700_000_000.0)
        generator = IdGenerator(clock=clock, fingerprint=b"zzz")
        first = generator.new_id()
        clock.value += 1
        other = IdGenerator(clock=clock, fingerprint=b"\x00\x00\x00")

        self.assertLess(first, other.new_id())

    def test_timestamp_round_trips(self) -> None:
        generator = IdGenerator(clock=FakeClock(1_700_000_000.5), fingerprint=b"abc")

        self.assertEqual(
            IdGenerator.timestamp_of(generator.new_id()),
            datetime(2023, 11, 14, 22, 13, 20, 500000, tzinfo=timezone.utc),
        )

    def test_timestamp_of_rejects_malformed_ids(self) -> None:
        with self.assertRaises(ValueError):
            IdGenerator.timestamp_of("short")
        with self.assertRaises(ValueError):
            IdGenerator.timestamp_of("z" * ids.ID_LENGTH)

    def test_fingerprint_must_be_three_bytes(self) -> None:
        with self.assertRaises(ValueError):
            IdGenerator(fingerprint=b"ab")

    def test_concurrent_generation_yields_unique_ids(self) -> None:
        generator = IdGenerator()
        results: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [generator.new_id() for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(set(results)), 1600)

    def test_module_level_helper(self) -> None:
        self.assertNotEqual(ids.new_id(), ids.new_id())
