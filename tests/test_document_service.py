import pytest

from portal.errors import NotFound, ValidationError
from portal.models.enums import DocumentStatus, DocumentType


class TestUpload:
    def test_upload_records_metadata(self, make_document, student):
        doc = make_document(title="  Sorting Algorithms  ", document_type="project")
        assert doc.title == "Sorting Algorithms"
        assert doc.document_type is DocumentType.PROJECT
        assert doc.status is DocumentStatus.SUBMITTED
        assert doc.uploaded_by.id == student.id
        assert doc.uploaded_by.roll_number == "CS-042"
        assert doc.file_location == "uploads/test/sorting.pdf"

    @pytest.mark.parametrize("field", ["title", "subject", "year", "branch"])
    def test_missing_classification(self, services, make_document, field):
        with pytest.raises(ValidationError):
            make_document(**{field: "  "})
        assert services["store"].list() == []

    def test_unknown_document_type(self, make_document):
        with pytest.raises(ValidationError):
            make_document(document_type="essay")

    def test_disallowed_mime_type(self, make_document):
        with pytest.raises(ValidationError):
            make_document(file_name="photo.png", file_type="image/png")

    def test_word_documents_accepted(self, make_document):
        doc = make_document(file_name="notes.doc", file_type="application/msword")
        assert doc.file_type == "application/msword"

    def test_size_limits(self, make_document):
        with pytest.raises(ValidationError):
            make_document(file_size=0)
        with pytest.raises(ValidationError):
            make_document(file_size=10 * 1024 * 1024 + 1)
        assert make_document(file_size=10 * 1024 * 1024).file_size == 10 * 1024 * 1024


class TestReads:
    def test_my_documents(self, services, make_document, student, other_student):
        mine = make_document()
        make_document(uploader=other_student)
        assert [d.id for d in services["documents"].get_my_documents(student.id)] == [mine.id]

    def test_location(self, services, make_document):
        doc = make_document(file_location="uploads/stu-1/abc_sorting.pdf")
        assert services["documents"].get_location(doc.id) == "uploads/stu-1/abc_sorting.pdf"

    def test_location_missing(self, services):
        with pytest.raises(NotFound):
            services["documents"].get_location("nope")
