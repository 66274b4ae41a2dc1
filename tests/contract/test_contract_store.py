import json
import tempfile
import unittest
from pathlib import Path

from walletgate.contract_store import ContractStore
from walletgate.resources import schema_path


class TestContractStore(unittest.TestCase):
    def test_shipped_schemas_are_valid(self) -> None:
        store = ContractStore()
        store.load()
        self.assertIn("policy_config.schema.json", store.list_schema_names())
        self.assertEqual(store.check_schemas(), [])
        self.assertTrue(schema_path("policy_config.schema.json").exists())

    def test_validate_reports_paths(self) -> None:
        store = ContractStore()
        store.load()
        self.assertEqual(store.validate("policy_config.schema.json", {"version": "1", "policies": []}), [])

        errors = store.validate("policy_config.schema.json", {"version": "1", "policies": [{"rule": "deny"}]})
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].startswith("policies/0: "))

    def test_unknown_schema_and_missing_dir(self) -> None:
        store = ContractStore()
        store.load()
        with self.assertRaises(KeyError):
            store.validate("nope.schema.json", {})

        with self.assertRaises(FileNotFoundError):
            ContractStore(Path("/nonexistent/schemas")).load()

    def test_check_schemas_reports_broken_schema(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "broken.schema.json").write_text(json.dumps({"type": 12}), encoding="utf-8")
            store = ContractStore(Path(td))
            store.load()
            errors = store.check_schemas()
        self.assertEqual([name for name, _ in errors], ["broken.schema.json"])


if __name__ == "__main__":
    unittest.main()
