import unittest

from roster_sync.core.identity import IdentityRegistry, RosterRow, strict_key


def _row(row, last, first, person_id=None):
    return RosterRow(row=row, last_name=last, first_name=first, person_id=person_id)


class TestIdentityRegistry(unittest.TestCase):
    def test_generates_lowest_unused_ids(self) -> None:
        registry = IdentityRegistry()
        registry.scan([_row(4, "Smith", "John", 3), _row(5, "Doe", "Jane", 7)])

        self.assertEqual(registry.generate_id(), 1)
        self.assertEqual(registry.generate_id(), 2)
        self.assertEqual(registry.generate_id(), 4)

    def test_generated_ids_never_repeat_within_a_run(self) -> None:
        registry = IdentityRegistry()
        handed_out = [registry.generate_id() for _ in range(5)]
        self.assertEqual(handed_out, sorted(set(handed_out)))
        self.assertEqual(registry.generated, handed_out)

    def test_first_binding_wins(self) -> None:
        registry = IdentityRegistry()
        registry.scan([_row(4, "Smith", "John", 1)])
        registry.scan([_row(6, "SMITH", "john", 2)])

        self.assertEqual(registry.resolve(strict_key("Smith", "John")), 1)
        # the later number is still reserved
        self.assertEqual(registry.generate_id(), 3)
        self.assertEqual(len(registry), 1)

    def test_rows_without_key_reserve_their_id(self) -> None:
        registry = IdentityRegistry()
        registry.scan([_row(4, "", "", 1), _row(5, "123", "", 2)])

        self.assertEqual(len(registry), 0)
        self.assertEqual(registry.generate_id(), 3)

    def test_resolve_reuses_existing_binding(self) -> None:
        registry = IdentityRegistry()
        registry.scan([_row(4, "Smith", "John", 3)])

        self.assertEqual(registry.resolve("smith_john"), 3)
        first = registry.resolve("doe_jane")
        self.assertEqual(registry.resolve("doe_jane"), first)
        self.assertEqual(registry.generated, [first])

    def test_ids_stay_unique_across_identities(self) -> None:
        registry = IdentityRegistry()
        registry.scan([_row(4, "Smith", "John", 2)])
        ids = [registry.resolve(key) for key in ("a_a", "b_b", "c_c", "smith_john")]
        self.assertEqual(len(set(ids)), 4)
        self.assertEqual(ids[-1], 2)


if __name__ == "__main__":
    unittest.main()
