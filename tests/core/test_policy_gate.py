import gc
import unittest

from walletgate.core.errors import GateError, PolicyViolation
from walletgate.core.method_resolver import read_only
from walletgate.core.policy import Policy
from walletgate.core.policy_gate import PolicyGate
from walletgate.core.scope import PolicyTarget


class Account:
    def __init__(self) -> None:
        self.invoked = []

    async def transfer(self, params):
        self.invoked.append("transfer")
        return {"type": "transfer", "params": params}

    def sign(self, message, *, encoding="utf-8"):
        self.invoked.append("sign")
        return f"signed:{message}:{encoding}"

    @read_only
    def get_balance(self):
        return 42


class SlottedAccount:
    __slots__ = ("name",)

    def transfer(self, params):
        return params


SCOPE = PolicyTarget(wallet="ethereum")


class TestPolicyGate(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.policies = []
        self.gate = PolicyGate(self.policies)

    async def test_rejection_prevents_original_call(self) -> None:
        self.policies.append(Policy("deny-transfer", lambda r: False, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)

        with self.assertRaises(PolicyViolation):
            await account.transfer({"value": 1})
        self.assertEqual(account.invoked, [])

    async def test_pass_returns_original_result_unchanged(self) -> None:
        self.policies.append(Policy("allow", lambda r: True, method=["transfer", "sign"]))
        account = self.gate.apply(Account(), SCOPE)

        out = await account.transfer({"value": 1})
        self.assertEqual(out, {"type": "transfer", "params": {"value": 1}})
        # Sync methods become awaitable once gated; arguments pass through.
        self.assertEqual(await account.sign("hi", encoding="ascii"), "signed:hi:ascii")

    async def test_params_capture(self) -> None:
        seen = []
        self.policies.append(Policy("record", lambda r: seen.append(r.params) or True, method="sign"))
        account = self.gate.apply(Account(), SCOPE)

        await account.sign("msg")
        await account.sign(message="kw")
        self.assertEqual(seen, ["msg", {"message": "kw"}])

    async def test_wrapping_is_idempotent(self) -> None:
        calls = []
        self.policies.append(Policy("count", lambda r: calls.append(r.method) or True, method="transfer"))
        account = Account()
        self.gate.apply(account, SCOPE)
        first = account.transfer
        self.gate.apply(account, SCOPE)

        self.assertIs(account.transfer, first)
        self.assertEqual(len(self.gate.chain(account, "transfer")), 1)
        await account.transfer({})
        self.assertEqual(calls, ["transfer"])

    async def test_unknown_and_non_callable_methods_are_skipped(self) -> None:
        self.policies.append(Policy("p", lambda r: False, method=["bridge", "invoked", "transfer"]))
        account = self.gate.apply(Account(), SCOPE)
        self.assertEqual(self.gate.wrapped_methods(account), ("transfer",))

    async def test_untargeted_policy_skips_read_only_members(self) -> None:
        self.policies.append(Policy("block-all", lambda r: False))
        account = self.gate.apply(Account(), SCOPE)

        self.assertEqual(account.get_balance(), 42)
        self.assertEqual(self.gate.wrapped_methods(account), ("sign", "transfer"))

    async def test_chains_are_per_instance(self) -> None:
        a = self.gate.apply(Account(), SCOPE)
        self.policies.append(Policy("deny", lambda r: False, method="transfer"))
        b = self.gate.apply(Account(), SCOPE)

        # `a` was gated before any policy existed, so nothing was wrapped on it.
        self.assertEqual(await a.transfer({}), {"type": "transfer", "params": {}})
        with self.assertRaises(PolicyViolation):
            await b.transfer({})
        self.assertEqual(self.gate.chain(a, "transfer"), ())

    async def test_late_policy_applies_to_already_wrapped_method(self) -> None:
        self.policies.append(Policy("allow", lambda r: True, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)

        self.policies.append(Policy("late-deny", lambda r: False, method="transfer"))
        with self.assertRaises(PolicyViolation) as ctx:
            await account.transfer({})
        self.assertEqual(ctx.exception.policy, "late-deny")
        self.assertEqual([p.name for p in self.gate.chain(account, "transfer")], ["allow", "late-deny"])

    async def test_late_policy_for_other_scope_is_ignored(self) -> None:
        self.policies.append(Policy("allow", lambda r: True, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)

        self.policies.append(Policy("ton-deny", lambda r: False, target=PolicyTarget(wallet="ton"), method="transfer"))
        await account.transfer({})
        self.assertEqual(account.invoked, ["transfer"])

    async def test_chain_order_follows_registration_order(self) -> None:
        order = []
        first = Policy("first", lambda r: order.append("first") or True, method="transfer")
        second = Policy("second", lambda r: order.append("second") or True, method="transfer")
        self.policies.extend([first, second])
        account = Account()
        # Apply with the later policy only; the call-time lookup restores order.
        self.gate.apply(account, SCOPE, candidates=[second])

        await account.transfer({})
        self.assertEqual(order, ["first", "second"])

    async def test_instance_type_is_not_mutated(self) -> None:
        self.policies.append(Policy("deny", lambda r: False, method="transfer"))
        self.gate.apply(Account(), SCOPE)
        plain = Account()
        self.assertEqual(await plain.transfer({}), {"type": "transfer", "params": {}})

    async def test_state_is_created_lazily(self) -> None:
        account = self.gate.apply(Account(), SCOPE)
        self.assertEqual(self.gate.wrapped_methods(account), ())
        self.assertNotIn(id(account), self.gate._states)

    async def test_release_and_collection_drop_state(self) -> None:
        self.policies.append(Policy("allow", lambda r: True, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)
        self.gate.release(account)
        self.assertEqual(self.gate.chain(account, "transfer"), ())

        other = self.gate.apply(Account(), SCOPE)
        key = id(other)
        self.assertIn(key, self.gate._states)
        del other
        gc.collect()
        self.assertNotIn(key, self.gate._states)

    async def test_release_removes_checkpoints(self) -> None:
        self.policies.append(Policy("deny", lambda r: False, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)
        self.gate.release(account)

        self.assertNotIn("transfer", vars(account))
        self.assertEqual((await account.transfer({}))["type"], "transfer")

    async def test_regating_after_release_wraps_once(self) -> None:
        calls = []
        self.policies.append(Policy("count", lambda r: calls.append(r.method) or True, method="transfer"))
        account = self.gate.apply(Account(), SCOPE)
        self.gate.release(account)
        self.gate.apply(account, SCOPE)

        await account.transfer({})
        self.assertEqual(calls, ["transfer"])
        self.assertEqual(account.invoked, ["transfer"])

    async def test_release_restores_instance_level_methods(self) -> None:
        account = Account()

        def own_transfer(params):
            return "own"

        account.transfer = own_transfer
        self.policies.append(Policy("allow", lambda r: True, method="transfer"))
        self.gate.apply(account, SCOPE)
        self.assertIsNot(vars(account)["transfer"], own_transfer)

        self.gate.release(account)
        self.assertIs(vars(account)["transfer"], own_transfer)

    async def test_failed_install_leaves_no_chain_entry(self) -> None:
        class ReadOnlyAttribute(Account):
            @property
            def approve(self):
                return self.sign

        self.policies.append(Policy("p", lambda r: True, method="approve"))
        account = ReadOnlyAttribute()
        with self.assertRaises(GateError) as ctx:
            self.gate.apply(account, SCOPE)
        self.assertEqual(ctx.exception.code, "gate.unsupported_instance")
        self.assertEqual(self.gate.chain(account, "approve"), ())
        self.assertEqual(self.gate.wrapped_methods(account), ())

    async def test_unsupported_instance(self) -> None:
        self.policies.append(Policy("p", lambda r: True, method="transfer"))
        with self.assertRaises(GateError) as ctx:
            self.gate.apply(SlottedAccount(), SCOPE)
        self.assertEqual(ctx.exception.code, "gate.unsupported_instance")

    async def test_wrapped_method_errors_propagate(self) -> None:
        class Failing(Account):
            async def transfer(self, params):
                raise ValueError("insufficient funds")

        self.policies.append(Policy("allow", lambda r: True, method="transfer"))
        account = self.gate.apply(Failing(), SCOPE)
        with self.assertRaises(ValueError):
            await account.transfer({})


if __name__ == "__main__":
    unittest.main()
