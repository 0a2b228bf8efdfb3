import asyncio
from typing import List

from stargallery.domain.permissions import AuthorizationStatus, PermissionPrompt, PermissionState
from stargallery.domain.save import SaveOutcome, SaveRequest, SaveResult
from stargallery.permissions.consent import ConsentPermissionService
from stargallery.platforms.capabilities import PlatformCapabilities
from stargallery.saver.gate import PermissionGate
from tests.fakes import FakePermissionService


class Continuations:
    """Records which continuation the gate ran, and with which request."""

    def __init__(self) -> None:
        self.granted: List[SaveRequest] = []
        self.denied: List[SaveRequest] = []

    async def on_granted(self, request: SaveRequest) -> SaveResult:
        self.granted.append(request)
        return SaveResult.success(request.id)

    async def on_denied(self, request: SaveRequest) -> SaveResult:
        self.denied.append(request)
        return SaveResult.permission_denied()


def run_gate(
    gate: PermissionGate, request: SaveRequest, continuations: Continuations
) -> SaveResult:
    return asyncio.run(
        gate.ensure_write_access(request, continuations.on_granted, continuations.on_denied)
    )


def test_scoped_storage_never_queries_permissions(scoped_android: PlatformCapabilities) -> None:
    permissions = FakePermissionService(state=PermissionState.DENIED)
    gate = PermissionGate(capabilities=scoped_android, permissions=permissions)
    continuations = Continuations()

    result = run_gate(gate, SaveRequest(source_path="/tmp/photo.jpg"), continuations)

    assert result.ok
    assert permissions.checks == 0, "No OS query where no grant is required"
    assert permissions.requests == []


def test_existing_grant_skips_prompt(legacy_android: PlatformCapabilities) -> None:
    permissions = FakePermissionService(state=PermissionState.GRANTED)
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions)
    continuations = Continuations()

    result = run_gate(gate, SaveRequest(source_path="/tmp/photo.jpg"), continuations)

    assert result.ok
    assert permissions.checks == 1
    assert permissions.requests == [], "No prompt when access is already granted"


def test_user_grant_resumes_original_request(legacy_android: PlatformCapabilities) -> None:
    permissions = FakePermissionService(decision=PermissionState.GRANTED)
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions)
    continuations = Continuations()
    request = SaveRequest(source_path="/tmp/first.jpg")

    result = run_gate(gate, request, continuations)

    assert result.ok
    assert permissions.requests == [request.id]
    assert [r.source_path for r in continuations.granted] == ["/tmp/first.jpg"]
    assert continuations.denied == []
    assert gate.pending() == []


def test_user_denial_reports_permission_denied(legacy_android: PlatformCapabilities) -> None:
    permissions = FakePermissionService(decision=PermissionState.DENIED)
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions)
    continuations = Continuations()

    result = run_gate(gate, SaveRequest(source_path="/tmp/x.jpg"), continuations)

    assert result.outcome is SaveOutcome.PERMISSION_DENIED
    assert continuations.granted == [], "Nothing may be persisted without a grant"
    assert gate.pending() == []


def run_concurrently(
    gate: PermissionGate,
    permissions: ConsentPermissionService,
    continuations: Continuations,
    requests: List[SaveRequest],
    decision: AuthorizationStatus,
) -> List[SaveResult]:
    """Suspend every request on the gate, then answer only the first prompt."""

    async def scenario() -> List[SaveResult]:
        tasks = [
            asyncio.create_task(
                gate.ensure_write_access(r, continuations.on_granted, continuations.on_denied)
            )
            for r in requests
        ]
        await asyncio.sleep(0)

        assert {p.request.id for p in gate.pending()} == {r.id for r in requests}
        prompts = {p.request_id: p for p in permissions.pending_prompts()}
        assert len(prompts) == len(requests)

        permissions.resolve(prompts[requests[0].id].id, decision)
        return list(await asyncio.wait_for(asyncio.gather(*tasks), timeout=5))

    return asyncio.run(scenario())


def test_one_grant_resumes_every_suspended_request(ios: PlatformCapabilities) -> None:
    permissions = ConsentPermissionService(reprompt_after_denial=False)
    gate = PermissionGate(capabilities=ios, permissions=permissions)
    continuations = Continuations()
    first = SaveRequest(source_path="/tmp/first.jpg")
    second = SaveRequest(source_path="/tmp/second.jpg")

    results = run_concurrently(
        gate, permissions, continuations, [first, second], AuthorizationStatus.AUTHORIZED
    )

    assert all(result.ok for result in results)
    assert {r.id for r in continuations.granted} == {first.id, second.id}
    assert [r.source_path for r in continuations.granted if r.id == second.id] == [
        "/tmp/second.jpg"
    ]
    assert permissions.pending_prompts() == []
    assert gate.pending() == []


def test_one_denial_settles_every_suspended_request(
    legacy_android: PlatformCapabilities,
) -> None:
    permissions = ConsentPermissionService()
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions)
    continuations = Continuations()
    requests = [SaveRequest(source_path=f"/tmp/{name}.jpg") for name in ("a", "b", "c")]

    results = run_concurrently(
        gate, permissions, continuations, requests, AuthorizationStatus.DENIED
    )

    assert all(result.outcome is SaveOutcome.PERMISSION_DENIED for result in results)
    assert continuations.granted == [], "Nothing may be persisted without a grant"
    assert len(continuations.denied) == 3
    assert gate.pending() == []


def test_unanswered_prompt_times_out_as_denied(legacy_android: PlatformCapabilities) -> None:
    prompts: List[PermissionPrompt] = []
    permissions = ConsentPermissionService(on_prompt=prompts.append)
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions, timeout=0.05)
    continuations = Continuations()

    result = run_gate(gate, SaveRequest(source_path="/tmp/photo.jpg"), continuations)

    assert result.outcome is SaveOutcome.PERMISSION_DENIED
    assert len(prompts) == 1
    assert permissions.pending_prompts() == [], "Abandoned prompt should be withdrawn"
    assert gate.pending() == []


class GrantAfterDeadline(FakePermissionService):
    """Records a grant but never delivers the answer before the gate gives up."""

    async def request_write_access(self, request_id: str) -> PermissionState:
        self.requests.append(request_id)
        self.state = PermissionState.GRANTED
        await asyncio.sleep(10)
        return self.state


def test_grant_recorded_before_timeout_is_honoured(
    legacy_android: PlatformCapabilities,
) -> None:
    permissions = GrantAfterDeadline()
    gate = PermissionGate(capabilities=legacy_android, permissions=permissions, timeout=0.05)
    continuations = Continuations()
    request = SaveRequest(source_path="/tmp/photo.jpg")

    result = run_gate(gate, request, continuations)

    assert result.ok
    assert [r.id for r in continuations.granted] == [request.id]
    assert gate.pending() == []
