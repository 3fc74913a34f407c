"""
Tests for the stage / ownership workflow
"""
import pytest
from sqlalchemy.exc import DataError

from po_tracker.application.workflow import (
    CreateWorkflowPOUseCase, UpdateWorkflowPOUseCase, ChangeStageUseCase, AddWorkflowDocumentUseCase,
    WorkflowReadService, WorkflowValidationError, WorkflowPONotFoundError,
)
from po_tracker.infrastructure.db.models import WorkflowPOModel, StageTransitionModel


def _create(db, clock, title="IT-045 New Laptop", **kwargs):
    return CreateWorkflowPOUseCase(db, clock).execute(title=title, **kwargs)


class TestCreateWorkflowPO:
    def test_defaults(self, db_session, clock):
        po_id = _create(db_session, clock)
        po = db_session.get(WorkflowPOModel, po_id)
        assert po.stage == "NEW"
        assert po.owner_role == "INTERN"
        assert po.it_ref_no == "IT-045"
        assert po.next_action is None

    def test_creation_is_journaled(self, db_session, clock):
        po_id = _create(db_session, clock, actor="alex")
        t = db_session.query(StageTransitionModel).filter(StageTransitionModel.po_id == po_id).one()
        assert (t.from_stage, t.to_stage, t.actor) == (None, "NEW", "alex")

    def test_explicit_fields(self, db_session, clock):
        po_id = _create(
            db_session, clock, title="Monitors", it_ref_no="it-7",
            stage="quotation", owner_role="vendor", next_action="Send quote",
        )
        po = db_session.get(WorkflowPOModel, po_id)
        assert (po.it_ref_no, po.stage, po.owner_role, po.next_action) == (
            "IT-7", "QUOTATION", "VENDOR", "Send quote",
        )

    def test_empty_title_rejected(self, db_session, clock):
        with pytest.raises(WorkflowValidationError, match="title"):
            _create(db_session, clock, title="  ")

    def test_unknown_owner_role_rejected(self, db_session, clock):
        with pytest.raises(WorkflowValidationError, match="owner_role"):
            _create(db_session, clock, owner_role="CEO")


class TestChangeStage:
    def test_any_stage_to_any_stage(self, db_session, clock):
        po_id = _create(db_session, clock)
        use_case = ChangeStageUseCase(db_session, clock)
        use_case.execute(po_id, "closed", note="paid", actor="admin")
        use_case.execute(po_id, "new")  # reopening is allowed

        detail = WorkflowReadService(db_session, clock).get_po(po_id)
        assert detail["po"]["stage"] == "NEW"
        journal = [(t["from_stage"], t["to_stage"]) for t in detail["transitions"]]
        assert journal == [("CLOSED", "NEW"), ("NEW", "CLOSED"), (None, "NEW")]
        assert detail["transitions"][1]["note"] == "paid"

    def test_new_stage_becomes_suggestion(self, db_session, clock):
        po_id = _create(db_session, clock)
        ChangeStageUseCase(db_session, clock).execute(po_id, "waiting vendor")
        assert "WAITING_VENDOR" in WorkflowReadService(db_session, clock).stage_suggestions()

    def test_blank_stage_rejected(self, db_session, clock):
        po_id = _create(db_session, clock)
        with pytest.raises(WorkflowValidationError):
            ChangeStageUseCase(db_session, clock).execute(po_id, " ")

    def test_unknown_po(self, db_session, clock):
        with pytest.raises(WorkflowPONotFoundError):
            ChangeStageUseCase(db_session, clock).execute(77, "CLOSED")


class TestStuck:
    def test_stuck_after_seven_days_without_update(self, db_session, clock):
        po_id = _create(db_session, clock, stage="APPROVAL")
        service = WorkflowReadService(db_session, clock)

        clock.advance(days=6)
        assert service.list_pos()[0]["is_stuck"] is False

        clock.advance(days=1)
        item = service.list_pos()[0]
        assert item["is_stuck"] is True
        assert item["days_since_update"] == 7
        assert [p["id"] for p in service.list_pos(stuck_only=True)] == [po_id]

        UpdateWorkflowPOUseCase(db_session, clock).execute(po_id, next_action="Chase manager")
        assert service.list_pos()[0]["is_stuck"] is False

    def test_closed_never_stuck(self, db_session, clock):
        _create(db_session, clock, stage="CLOSED")
        clock.advance(days=60)
        assert WorkflowReadService(db_session, clock).list_pos()[0]["is_stuck"] is False


class TestDocumentsAndFilters:
    def test_add_document_bumps_updated_at(self, db_session, clock):
        po_id = _create(db_session, clock)
        clock.advance(days=3)
        AddWorkflowDocumentUseCase(db_session, clock).execute(po_id, "https://files.example.com/q.pdf", "Quote")
        detail = WorkflowReadService(db_session, clock).get_po(po_id)
        assert detail["documents"][0]["label"] == "Quote"
        assert detail["po"]["days_since_update"] == 0

    def test_document_label_defaults_to_url(self, db_session, clock):
        po_id = _create(db_session, clock)
        AddWorkflowDocumentUseCase(db_session, clock).execute(po_id, "https://x.example.com/a")
        assert WorkflowReadService(db_session, clock).get_po(po_id)["documents"][0]["label"] == "https://x.example.com/a"

    def test_non_http_url_rejected(self, db_session, clock):
        po_id = _create(db_session, clock)
        with pytest.raises(WorkflowValidationError, match="url"):
            AddWorkflowDocumentUseCase(db_session, clock).execute(po_id, "javascript:alert(1)")

    def test_filters(self, db_session, clock):
        _create(db_session, clock, title="A", stage="APPROVAL", owner_role="MANAGER")
        _create(db_session, clock, title="B", stage="PAYMENT", owner_role="ADMIN")
        service = WorkflowReadService(db_session, clock)
        assert [p["title"] for p in service.list_pos(stage="approval")] == ["A"]
        assert [p["title"] for p in service.list_pos(owner_role="admin")] == ["B"]

    def test_update_owner_role(self, db_session, clock):
        po_id = _create(db_session, clock)
        UpdateWorkflowPOUseCase(db_session, clock).execute(po_id, owner_role="manager")
        assert db_session.get(WorkflowPOModel, po_id).owner_role == "MANAGER"
        with pytest.raises(WorkflowValidationError):
            UpdateWorkflowPOUseCase(db_session, clock).execute(po_id, owner_role="nobody")


def _value_too_long():
    raise DataError("UPDATE workflow_pos ...", {}, Exception("value too long for type character varying(64)"))


class TestDatabaseErrors:
    def test_create_rolls_back(self, db_session, clock, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _value_too_long)
        with pytest.raises(WorkflowValidationError, match="value too long"):
            _create(db_session, clock, actor="a" * 100)
        monkeypatch.undo()
        assert db_session.query(WorkflowPOModel).count() == 0
        assert db_session.query(StageTransitionModel).count() == 0

    def test_stage_change_rolls_back(self, db_session, clock, monkeypatch):
        po_id = _create(db_session, clock)
        monkeypatch.setattr(db_session, "commit", _value_too_long)
        with pytest.raises(WorkflowValidationError):
            ChangeStageUseCase(db_session, clock).execute(po_id, "s" * 100)
        monkeypatch.undo()
        assert db_session.get(WorkflowPOModel, po_id).stage == "NEW"
        assert db_session.query(StageTransitionModel).count() == 1

    def test_update_and_document_errors(self, db_session, clock, monkeypatch):
        po_id = _create(db_session, clock)
        monkeypatch.setattr(db_session, "commit", _value_too_long)
        with pytest.raises(WorkflowValidationError):
            UpdateWorkflowPOUseCase(db_session, clock).execute(po_id, title="t" * 300)
        with pytest.raises(WorkflowValidationError):
            AddWorkflowDocumentUseCase(db_session, clock).execute(po_id, "https://example.com/a", "l" * 300)
