import pytest

from transport_admin.core.exceptions import NotFoundError
from transport_admin.models.shared.enums import SessionType, WorkflowState
from transport_admin.services.precheck.media_service import MediaUploadService
from transport_admin.services.precheck.pre_check_form import PreCheckFormFactory
from transport_admin.services.session.workflow_registry import WorkflowRegistry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(fake_backend, fake_storage, preview_store, validator, audit_recorder, clock):
    factory = PreCheckFormFactory(
        media_service=MediaUploadService(fake_storage, "VEHICLE_DOCUMENTS"),
        preview_store=preview_store,
        validator=validator,
    )
    return WorkflowRegistry(
        backend=fake_backend,
        form_factory=factory,
        tardiness_reporter=None,
        audit_logger=audit_recorder,
        ttl_minutes=1,
        clock=clock,
    )


@pytest.mark.asyncio
class TestWorkflowRegistry:
    async def test_create_and_get(self, registry):
        workflow = await registry.create("tok-1")
        assert workflow.state == WorkflowState.READY
        assert registry.get(workflow.workflow_id) is workflow

    async def test_unknown_workflow(self, registry):
        with pytest.raises(NotFoundError):
            registry.get("missing")

    async def test_idle_workflows_expire_and_release_resources(self, registry, clock):
        workflow = await registry.create("tok-1")
        await workflow.choose_session_type(SessionType.AM)
        form = workflow.pre_check
        form.start_recording()

        clock.now += 61
        assert registry.sweep() == 1

        assert len(registry) == 0
        assert not form.capture_device.in_use
        with pytest.raises(NotFoundError):
            registry.get(workflow.workflow_id)

    async def test_access_keeps_workflow_alive(self, registry, clock):
        workflow = await registry.create("tok-1")
        clock.now += 50
        registry.get(workflow.workflow_id)
        clock.now += 50
        assert registry.sweep() == 0

    async def test_discard(self, registry):
        workflow = await registry.create("tok-1")
        assert registry.discard(workflow.workflow_id)
        assert not registry.discard(workflow.workflow_id)
