import pytest

from portal.errors import NotFound, ValidationError
from portal.models.enums import NotificationType
from portal.services.document_service import DocumentService
from portal.services.notification_service import NotificationDispatcher


class TestDispatcher:
    def test_notify_prepends(self, services):
        dispatcher = services["dispatcher"]
        first = dispatcher.notify("stu-1", NotificationType.COMMENT, "first")
        second = dispatcher.notify("stu-1", "comment", "second")
        assert [n.id for n in dispatcher.list("stu-1")] == [second.id, first.id]

    def test_unread_count_matches_listing(self, services, make_document, professor, student):
        workflow = services["workflow"]
        dispatcher = services["dispatcher"]
        docs = [make_document(title=f"doc {i}") for i in range(3)]
        workflow.approve(docs[0].id, professor)
        workflow.reject(docs[1].id, professor, "Missing references")
        workflow.approve(docs[2].id, professor, "Nice")

        def consistent():
            listed = dispatcher.list(student.id)
            return dispatcher.unread_count(student.id) == sum(1 for n in listed if not n.read)

        assert dispatcher.unread_count(student.id) == 3
        assert consistent()

        newest = dispatcher.list(student.id)[0]
        dispatcher.mark_read(newest.id)
        assert dispatcher.unread_count(student.id) == 2
        assert consistent()

        dispatcher.mark_read(newest.id)
        assert dispatcher.unread_count(student.id) == 2

        assert dispatcher.mark_all_read(student.id) == 2
        assert dispatcher.unread_count(student.id) == 0
        assert consistent()
        assert len(dispatcher.list(student.id)) == 3

    def test_mark_all_read_only_touches_recipient(self, services):
        dispatcher = services["dispatcher"]
        dispatcher.notify("stu-1", NotificationType.APPROVAL, "mine")
        dispatcher.notify("stu-2", NotificationType.APPROVAL, "theirs")
        dispatcher.mark_all_read("stu-1")
        assert dispatcher.unread_count("stu-2") == 1

    def test_mark_read_unknown(self, services):
        with pytest.raises(NotFound):
            services["dispatcher"].mark_read("missing")

    def test_failed_review_creates_no_notification(self, services, make_document, professor, student):
        doc = make_document()
        with pytest.raises(ValidationError):
            services["workflow"].reject(doc.id, professor, "")
        assert services["dispatcher"].list(student.id) == []


def test_reviewers_hear_about_new_uploads(memory_store, student):
    dispatcher = NotificationDispatcher(memory_store)
    documents = DocumentService(memory_store, dispatcher, reviewer_ids=["prof-1", "prof-2"])
    doc = documents.upload(
        student,
        title="Thesis draft",
        subject="Machine Learning",
        document_type="thesis",
        year="4",
        branch="CSE",
        file_name="thesis.docx",
        file_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        file_size=50_000,
        file_location="uploads/stu-1/thesis.docx",
    )

    for reviewer_id in ("prof-1", "prof-2"):
        notes = dispatcher.list(reviewer_id)
        assert len(notes) == 1
        assert notes[0].type is NotificationType.NEW_DOCUMENT
        assert notes[0].document_id == doc.id
        assert "Asha Rao" in notes[0].message
    assert dispatcher.list(student.id) == []
