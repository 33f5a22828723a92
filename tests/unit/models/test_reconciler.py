"""Tests for the diff/apply engine."""

from datetime import date

import httpx
import pytest

from modelprovisioner.core.config import BackendConfig
from modelprovisioner.models.discovery.capabilities import CapabilityPolicy
from modelprovisioner.models.discovery.collector import BackendHandle, Inventory
from modelprovisioner.models.discovery.types import CandidateEntry, ModelKey, RegisteredEntry
from modelprovisioner.models.providers.gateway import GatewayClient
from modelprovisioner.models.runtime.reconciler import Reconciler, plan_changes
from tests.test_doubles import FakeBackend, FakeGateway

URL_X = "http://backend-x:8000/v1"
URL_Y = "http://backend-y:8000/v1"


def _candidate(model, url=URL_X, **capabilities):
    return CandidateEntry(
        model_name=model,
        api_base=url,
        api_key="BLANK",
        provider_model=f"openai/{model}",
        backend="x",
        capabilities=capabilities,
    )


def _registered(model, url, model_id):
    return RegisteredEntry(model_name=model, api_base=url, model_id=model_id)


def _inventory(candidates, configured=(URL_X,), unavailable=(), backends=None):
    return Inventory(
        candidates=list(candidates),
        configured=set(configured),
        unavailable=set(unavailable),
        backends=backends or {},
    )


def _names(entries):
    return [entry.model_name for entry in entries]


class TestPlanChanges:
    def test_adds_new_model_and_ignores_unconfigured_backend(self):
        registered = [_registered("modelA", URL_X, "7"), _registered("modelC", URL_Y, "9")]
        inventory = _inventory([_candidate("modelA"), _candidate("modelB")])

        plan = plan_changes(inventory, registered)

        assert _names(plan.additions) == ["modelB"]
        assert plan.removals == []

    def test_removes_model_missing_from_inventory(self):
        registered = [_registered("modelA", URL_X, "7"), _registered("modelZ", URL_X, "8")]
        inventory = _inventory([_candidate("modelA")])

        plan = plan_changes(inventory, registered)

        assert plan.additions == []
        assert [(e.model_name, e.model_id) for e in plan.removals] == [("modelZ", "8")]

    def test_out_of_scope_registrations_are_never_removed(self):
        registered = [_registered("modelC", URL_Y, "9"), _registered("modelD", "http://other", "10")]

        plan = plan_changes(_inventory([]), registered)

        assert plan.removals == []

    def test_unavailable_backend_is_protected(self):
        registered = [_registered("modelA", URL_X, "7"), _registered("modelQ", URL_Y, "11")]
        inventory = _inventory(
            [_candidate("modelA")], configured=(URL_X, URL_Y), unavailable=(URL_Y,)
        )

        plan = plan_changes(inventory, registered)

        assert plan.empty

    def test_candidates_of_unavailable_backend_are_not_added(self):
        inventory = _inventory(
            [_candidate("modelA", URL_Y)], configured=(URL_X, URL_Y), unavailable=(URL_Y,)
        )

        assert plan_changes(inventory, []).additions == []

    def test_same_model_on_two_backends_is_two_keys(self):
        registered = [_registered("llama3", URL_X, "1")]
        inventory = _inventory(
            [_candidate("llama3", URL_X), _candidate("llama3", URL_Y)], configured=(URL_X, URL_Y)
        )

        plan = plan_changes(inventory, registered)

        assert [e.key for e in plan.additions] == [ModelKey("llama3", URL_Y)]
        assert plan.removals == []

    def test_trailing_slash_does_not_split_identity(self):
        registered = [_registered("llama3", URL_X + "/", "1")]

        plan = plan_changes(_inventory([_candidate("llama3")]), registered)

        assert plan.empty

    def test_key_never_both_added_and_removed(self):
        registered = [
            _registered("a", URL_X, "1"),
            _registered("b", URL_X, "2"),
            _registered("b", URL_X, "3"),
        ]
        inventory = _inventory([_candidate("b"), _candidate("c"), _candidate("c")])

        plan = plan_changes(inventory, registered)

        added = {e.key for e in plan.additions}
        removed = {e.key for e in plan.removals}
        assert added == {ModelKey("c", URL_X)}
        assert removed == {ModelKey("a", URL_X)}
        assert not added & removed

    def test_changes_are_sorted(self):
        inventory = _inventory([_candidate("zeta"), _candidate("alpha"), _candidate("mid")])

        assert _names(plan_changes(inventory, []).additions) == ["alpha", "mid", "zeta"]


class TestReconciler:
    def test_second_run_is_idempotent(self):
        gateway = FakeGateway([_registered("modelA", URL_X, "7"), _registered("old", URL_X, "8")])
        inventory = _inventory([_candidate("modelA"), _candidate("modelB")])
        reconciler = Reconciler(gateway)

        first = reconciler.reconcile(inventory, gateway.list_models())
        second = reconciler.reconcile(inventory, gateway.list_models())

        assert first.added == [ModelKey("modelB", URL_X)]
        assert first.removed == [ModelKey("old", URL_X)]
        assert second.added == [] and second.removed == []
        assert gateway.deleted == ["8"]

    def test_failures_do_not_block_other_entries(self):
        gateway = FakeGateway(
            [_registered("r1", URL_X, "1"), _registered("r2", URL_X, "2")],
            fail_add={"a1"},
            fail_delete={"1"},
        )
        inventory = _inventory([_candidate("a1"), _candidate("a2")])

        report = Reconciler(gateway).reconcile(inventory, gateway.list_models())

        assert report.added == [ModelKey("a2", URL_X)]
        assert report.failed_additions == [ModelKey("a1", URL_X)]
        assert report.removed == [ModelKey("r2", URL_X)]
        assert report.failed_removals == [ModelKey("r1", URL_X)]
        assert report.failed
        assert gateway.deleted == ["2"]

    def test_entry_without_gateway_id_is_reported(self):
        gateway = FakeGateway([_registered("ghost", URL_X, None)])

        report = Reconciler(gateway).reconcile(_inventory([]), gateway.list_models())

        assert report.failed_removals == [ModelKey("ghost", URL_X)]
        assert gateway.deleted == []

    def _discovery_inventory(self, backend, candidates, **config):
        config.setdefault("discovery", True)
        backend_config = BackendConfig(name="x", url=URL_X, **config)
        handle = BackendHandle(
            config=backend_config,
            policy=CapabilityPolicy.from_backend(backend_config),
            client=backend,
        )
        return _inventory(candidates, backends={URL_X: handle})

    def test_discovery_runs_for_additions_before_add(self):
        backend = FakeBackend(URL_X, tool_use=True, vision=False)
        gateway = FakeGateway()
        inventory = self._discovery_inventory(backend, [_candidate("new")])

        Reconciler(gateway).reconcile(inventory, [])

        assert gateway.added[0].capabilities == {
            "supports_function_calling": True,
            "supports_vision": False,
        }
        assert backend.probed == [("tool_use", "new"), ("vision", "new")]

    def test_discovery_respects_configured_capabilities(self):
        backend = FakeBackend(URL_X, tool_use=True, vision=True)
        gateway = FakeGateway()
        inventory = self._discovery_inventory(
            backend,
            [_candidate("new", supports_vision=False)],
            model_info_defaults={"supports_vision": False},
        )

        Reconciler(gateway).reconcile(inventory, [])

        assert gateway.added[0].capabilities == {
            "supports_vision": False,
            "supports_function_calling": True,
        }
        assert backend.probed == [("tool_use", "new")]

    def test_registered_models_are_never_probed(self):
        backend = FakeBackend(URL_X, tool_use=True, vision=True)
        gateway = FakeGateway([_registered("known", URL_X, "1")])
        inventory = self._discovery_inventory(backend, [_candidate("known")])

        report = Reconciler(gateway).reconcile(inventory, gateway.list_models())

        assert report.added == [] and report.removed == []
        assert backend.probed == []

    @pytest.mark.parametrize("discovery", [False, True])
    def test_no_probe_without_discovery(self, discovery):
        backend = FakeBackend(URL_X, tool_use=True)
        gateway = FakeGateway()
        inventory = self._discovery_inventory(backend, [_candidate("new")], discovery=discovery)

        Reconciler(gateway).reconcile(inventory, [])

        assert bool(backend.probed) is discovery

    def test_unencodable_addition_does_not_abandon_the_rest(self, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json={}))
        gateway = GatewayClient("http://gateway:4000", "sk", timeout=1.0, transport=transport)
        inventory = _inventory(
            [_candidate("a", released=date(2024, 1, 1)), _candidate("b")]
        )

        report = Reconciler(gateway).reconcile(inventory, [_registered("old", URL_X, "9")])

        assert report.failed_additions == [ModelKey("a", URL_X)]
        assert report.added == [ModelKey("b", URL_X)]
        assert report.removed == [ModelKey("old", URL_X)]
        assert [str(r.url) for r in transport.requests] == [
            "http://gateway:4000/model/new",
            "http://gateway:4000/model/delete",
        ]
