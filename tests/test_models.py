import pydantic
import pytest

from catalog.models import (
    CatalogStats,
    IngestionRequest,
    OperationState,
    Posting,
    ResultPage,
    SearchQuery,
)
from conftest import page_payload, posting_payload


class TestSearchQuery:
    def test_to_params_omits_absent_filters(self):
        params = SearchQuery(title="Engineer").to_params()
        assert params == {
            "title": "Engineer",
            "page": "0",
            "size": "20",
            "sortBy": "createdAt",
            "sortDir": "desc",
        }

    def test_to_params_full(self):
        query = SearchQuery(
            title="Engineer",
            company="Acme",
            location="Berlin",
            min_salary=50000,
            max_salary=90000,
            is_remote=True,
            source="adzuna",
            page=2,
            size=10,
            sort_by="title",
            sort_dir="asc",
        )
        params = query.to_params()
        assert params["minSalary"] == "50000"
        assert params["maxSalary"] == "90000"
        assert params["isRemote"] == "true"
        assert params["source"] == "adzuna"
        assert params["page"] == "2"
        assert params["sortDir"] == "asc"

    def test_remote_false_is_unset(self):
        assert SearchQuery(is_remote=False).is_remote is None

    def test_salary_range_must_be_ordered(self):
        with pytest.raises(pydantic.ValidationError):
            SearchQuery(min_salary=10, max_salary=5)

    def test_page_size_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            SearchQuery(size=0)

    def test_unfiltered(self):
        query = SearchQuery.unfiltered(page=1, size=5)
        assert not query.has_filters()
        assert (query.page, query.size, query.sort_by, query.sort_dir) == (1, 5, "createdAt", "desc")


class TestResultPage:
    def test_45_matches_with_page_size_20(self):
        page = ResultPage.from_payload(page_payload(["Engineer"] * 20, 45), requested_size=20)
        assert len(page.content) == 20
        assert page.total_elements == 45
        assert page.total_pages == 3
        assert page.number == 0

    def test_empty(self):
        page = ResultPage.empty()
        assert page.to_dict() == {
            "content": [],
            "totalElements": 0,
            "totalPages": 0,
            "number": 0,
            "size": 0,
        }

    def test_missing_fields_degrade_to_zero(self):
        page = ResultPage.from_payload({"content": None}, requested_size=20)
        assert page.content == []
        assert page.total_elements == 0
        assert page.total_pages == 0
        assert page.number == 0
        assert page.size == 20

    @pytest.mark.parametrize("payload", [None, "oops", [1, 2, 3]])
    def test_non_mapping_payload_is_empty_page(self, payload):
        page = ResultPage.from_payload(payload, requested_size=10)
        assert page.total_pages == 0
        assert page.size == 10

    def test_malformed_postings_are_skipped(self):
        payload = page_payload(["Engineer"], 2)
        payload["content"].append(posting_payload(99, createdAt="not a date"))
        payload["content"].append("garbage")
        page = ResultPage.from_payload(payload)
        assert [p.id for p in page.content] == [1]

    def test_out_of_range_number_is_clamped(self):
        page = ResultPage.from_payload(
            {"content": [], "totalElements": 45, "number": 7, "size": 20}
        )
        assert page.total_pages == 3
        assert page.number == 2

    def test_number_is_zero_without_pages(self):
        page = ResultPage.from_payload({"content": [], "totalElements": 0, "number": 4, "size": 20})
        assert page.number == 0

    def test_invariant_enforced_on_construction(self):
        with pytest.raises(pydantic.ValidationError):
            ResultPage(total_elements=10, total_pages=1, number=1, size=10)
        with pytest.raises(pydantic.ValidationError):
            ResultPage(total_pages=0, number=1)

    def test_string_counters_are_accepted(self):
        page = ResultPage.from_payload(
            {"content": [], "totalElements": "41", "number": "1", "size": "20"}
        )
        assert page.total_elements == 41
        assert page.total_pages == 3
        assert page.number == 1


class TestPosting:
    def test_parses_catalog_fields(self):
        posting = Posting.model_validate(posting_payload(7, isRemote=True, location=None))
        assert posting.external_id == "ext-7"
        assert posting.is_remote is True
        assert posting.location is None
        assert posting.created_at.year == 2024

    def test_nullable_fields_default(self):
        posting = Posting.model_validate({"id": 1, "skills": None, "description": None, "isRemote": None})
        assert posting.skills == []
        assert posting.description == ""
        assert posting.is_remote is False

    def test_skill_preview(self):
        posting = Posting(skills=[f"s{i}" for i in range(9)])
        shown, hidden = posting.skill_preview()
        assert shown == ["s0", "s1", "s2", "s3", "s4", "s5"]
        assert hidden == 3

    def test_skill_preview_short_list(self):
        assert Posting(skills=["Go"]).skill_preview() == (["Go"], 0)


class TestOperationState:
    def test_error_required_when_failed(self):
        with pytest.raises(pydantic.ValidationError):
            OperationState(status="failed")

    def test_error_forbidden_otherwise(self):
        with pytest.raises(pydantic.ValidationError):
            OperationState(status="succeeded", error="boom")


class TestIngestionRequest:
    def test_accepts_catalog_field_names(self):
        request = IngestionRequest.model_validate({"jobTitle": " React Developer ", "maxResults": 25})
        assert request.job_title == "React Developer"
        assert request.max_results == 25
        assert request.is_submittable

    def test_defaults_and_payload(self):
        request = IngestionRequest(job_title="Data Engineer", location="  ")
        assert request.location is None
        assert request.to_payload() == {"jobTitle": "Data Engineer", "maxResults": 50}

    def test_payload_includes_location(self):
        payload = IngestionRequest(job_title="Data Engineer", location="Remote").to_payload()
        assert payload["location"] == "Remote"

    def test_blank_title_is_not_submittable(self):
        assert not IngestionRequest(job_title="   ").is_submittable

    def test_max_results_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            IngestionRequest(job_title="x", max_results=0)


def test_catalog_stats_lenient():
    stats = CatalogStats.model_validate({"totalJobs": "12", "jSearchJobs": 7, "serviceType": "MOCK"})
    assert stats.total_jobs == 12
    assert stats.jsearch_jobs == 7
    assert stats.adzuna_jobs == 0
    assert stats.service_type == "MOCK"
