"""
Tests for Enrichment Module.
============================

Tests for:
- Enricher: not-found records, local defaults, trend, merging
- Provider: payload parsing, Gemini provider without a key
- Prompts: prompt content
- Cache: memoization
"""

import pytest


@pytest.fixture
def steady_estimator():
    """Estimator without jitter."""
    from deptcompass.search.estimator import AdmissionEstimator

    return AdmissionEstimator(jitter=0)


@pytest.fixture
def make_enricher(sample_catalog, steady_estimator):
    """Factory for a DetailEnricher over the sample catalog."""
    from deptcompass.enrichment.cache import EnrichmentCache
    from deptcompass.enrichment.enricher import DetailEnricher

    def _make(provider=None, timeout=2.0):
        return DetailEnricher(
            sample_catalog,
            provider=provider,
            cache=EnrichmentCache(),
            estimator=steady_estimator,
            timeout=timeout,
            target_year=2025,
        )

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Local Defaults
# ─────────────────────────────────────────────────────────────────────────────


class TestFallbackDescription:
    """Tests for keyword-selected descriptions."""

    def test_keyword_template(self):
        """Test a profession template."""
        from deptcompass.enrichment.enricher import fallback_description

        text = fallback_description("남서울대학교", "간호학과")

        assert text.startswith("남서울대학교 간호학과는 ")
        assert "간호사" in text

    def test_template_order(self):
        """Test that the first matching keyword group wins."""
        from deptcompass.enrichment.enricher import fallback_description

        assert "의료인" in fallback_description("서울대학교", "의예과")
        assert "소프트웨어" in fallback_description("서울대학교", "AI융합전자공학과")

    def test_generic_deterministic(self):
        """Test that the generic sentence is stable per identity."""
        from deptcompass.enrichment.enricher import fallback_description

        first = fallback_description("서울대학교", "고고학과")
        second = fallback_description("서울대학교", "고고학과")

        assert first == second
        assert "은(는)" in fallback_description("서울대학교", "사학과")


class TestApproximateSpecs:
    """Tests for tuition / employment estimates."""

    def test_reference_table_wins(self):
        """Test that reference figures are used verbatim."""
        from deptcompass.enrichment.enricher import approximate_specs
        from deptcompass.shared.schemas import Tier

        assert approximate_specs("서울대학교", Tier.SKY, "공학") == ("601만원", "71.1%")

    def test_reference_table_loaded_once(self):
        """Test that the reference table is read from disk once."""
        from deptcompass.enrichment.enricher import approximate_specs, load_reference_stats
        from deptcompass.shared.schemas import Tier

        load_reference_stats.cache_clear()
        approximate_specs("서울대학교", Tier.SKY, "공학")
        approximate_specs("연세대학교", Tier.SKY, "인문")

        assert load_reference_stats.cache_info().misses == 1
        assert load_reference_stats() is load_reference_stats()

    @pytest.mark.parametrize(
        "tier,field,tuition,employment",
        [
            ("InSeoul", "인문", "700~780만원 (예상)", "60~70% (예상)"),
            ("InSeoul", "공학", "900~950만원 (예상)", "70~80% (예상)"),
            ("Metro", "자연", "800~850만원 (예상)", "60~70% (예상)"),
            ("Metro", "예체능", "900~950만원 (예상)", "60~70% (예상)"),
            ("Regional", "간호", "400~450만원 (예상)", "70~80% (예상)"),
            ("Edu", "교육", "400~450만원 (예상)", "60~70% (임용 포함)"),
            ("Top15", "사회", "700~780만원 (예상)", "70~80% (예상)"),
        ],
    )
    def test_bands(self, tier, field, tuition, employment):
        """Test tier and field bands for universities without reference data."""
        from deptcompass.enrichment.enricher import approximate_specs
        from deptcompass.shared.schemas import Tier

        assert approximate_specs("어딘가대학교", Tier(tier), field) == (tuition, employment)


class TestAdmissionTrend:
    """Tests for the three-year trend."""

    def test_years_and_tags(self, steady_estimator):
        """Test labels and provenance tags per slot."""
        from deptcompass.enrichment.enricher import admission_trend
        from deptcompass.shared.schemas import Tier

        trend = admission_trend(Tier.SKY, "의예과", 2025, steady_estimator)

        assert [e.year for e in trend] == ["2025학년도", "2024학년도", "2023학년도"]
        assert trend[0].jeongsi.endswith("(예상)")
        assert trend[1].jeongsi.endswith("(추정)")
        assert trend[2].jeongsi.endswith("(결과)")

    def test_holistic_offset(self, steady_estimator):
        """Test that the holistic value sits above the category value."""
        from deptcompass.enrichment.enricher import admission_trend
        from deptcompass.shared.schemas import Tier

        entry = admission_trend(Tier.REGIONAL, "사학과", 2025, steady_estimator)[0]

        assert entry.susi_gyogwa == "4.45 (예상)"
        assert entry.susi_jonghap == "4.95 (예상)"


# ─────────────────────────────────────────────────────────────────────────────
# Detail Enricher
# ─────────────────────────────────────────────────────────────────────────────


class TestDetailEnricher:
    """Tests for detail records without external enrichment."""

    def test_not_found(self, make_enricher):
        """Test the explicit not-found placeholder."""
        record = make_enricher().enrich("없는대학교", "없는학과")

        assert record.not_found
        assert record.description == "정보 없음"
        assert record.tuition_fee == "-"
        assert record.admission_data == []

    def test_base_record(self, make_enricher):
        """Test a fully populated local record."""
        record = make_enricher().enrich("서울대학교", "의예과")

        assert not record.not_found
        assert record.field == "의예"
        assert record.location == "서울"
        assert record.tuition_fee == "601만원"
        assert len(record.admission_data) == 3
        assert record.description.startswith("서울대학교 의예과는")

    def test_cleaned_department_resolves_college(self, make_enricher):
        """Test that a cleaned name finds its raw catalog entry."""
        record = make_enricher().enrich("남서울대학교", "간호학과")

        assert record.field == "간호"
        assert record.tuition_fee == "400~450만원 (예상)"

    def test_idempotent_without_provider(self, make_enricher):
        """Test that repeated calls agree on the descriptive fields."""
        enricher = make_enricher()
        first = enricher.enrich("경희대학교", "경영학과")
        second = enricher.enrich("경희대학교", "경영학과")

        assert first.description == second.description
        assert first.tuition_fee == second.tuition_fee
        assert first.employment_rate == second.employment_rate

    def test_provider_disabled_by_settings(self, sample_catalog):
        """Test that no provider is created when enrichment is disabled."""
        from deptcompass.enrichment.enricher import DetailEnricher

        assert DetailEnricher(sample_catalog).provider is None


class TestDetailEnricherWithProvider:
    """Tests for merging provider results."""

    def test_payload_merged(self, make_enricher, stub_provider_factory, sample_payload):
        """Test description, summary and middle-year overrides."""
        stub = stub_provider_factory(payload=sample_payload)
        record = make_enricher(stub).enrich("서울대학교", "컴퓨터공학부")

        assert record.description == sample_payload.description
        assert record.ai_summary == sample_payload.summary
        assert record.admission_data[1].susi_gyogwa == "1.10 (70%컷)"
        assert record.admission_data[1].jeongsi == "98.1 (평균)"
        assert record.admission_data[0].jeongsi.endswith("(예상)")
        assert record.admission_data[2].jeongsi.endswith("(결과)")

    def test_provider_receives_local_stats(self, make_enricher, stub_provider_factory):
        """Test that the raw department's stats are passed along."""
        stub = stub_provider_factory()
        make_enricher(stub).enrich("남서울대학교", "간호학과")

        university, department, stats = stub.calls[0]
        assert (university, department) == ("남서울대학교", "간호학과")
        assert stats.recruit == 30

    def test_short_description_ignored(self, make_enricher, stub_provider_factory):
        """Test the minimum description length."""
        from deptcompass.shared.schemas import EnrichmentPayload

        stub = stub_provider_factory(payload=EnrichmentPayload(description="짧음", summary="요약"))
        record = make_enricher(stub).enrich("서울대학교", "국어국문학과")

        assert record.description.startswith("서울대학교 국어국문학과는")
        assert record.ai_summary == "요약"

    def test_partial_admission_override(self, make_enricher, stub_provider_factory):
        """Test that only returned sub-fields replace defaults."""
        from deptcompass.shared.schemas import EnrichmentPayload

        payload = EnrichmentPayload.model_validate({"admissionPrevYear": {"jeongsi": "97.0"}})
        stub = stub_provider_factory(payload=payload)
        record = make_enricher(stub).enrich("서울대학교", "의예과")
        middle = record.admission_data[1]

        assert middle.jeongsi == "97.0"
        assert middle.susi_gyogwa.endswith("(추정)")
        assert middle.susi_jonghap.endswith("(추정)")

    def test_timeout_keeps_defaults(self, make_enricher, stub_provider_factory, sample_payload):
        """Test that a slow provider is abandoned."""
        stub = stub_provider_factory(payload=sample_payload, delay=0.5)
        enricher = make_enricher(stub, timeout=0.05)

        record = enricher.enrich("서울대학교", "컴퓨터공학부")

        assert record.description != sample_payload.description
        assert record.ai_summary is None
        assert len(enricher.cache) == 0

    def test_error_keeps_defaults(self, make_enricher, stub_provider_factory):
        """Test that provider exceptions never reach the caller."""
        stub = stub_provider_factory(error=RuntimeError("connection reset"))

        record = make_enricher(stub).enrich("서울대학교", "의예과")

        assert record.description.startswith("서울대학교 의예과는")
        assert len(record.admission_data) == 3

    def test_cache_hit(self, make_enricher, stub_provider_factory, sample_payload):
        """Test that a second detail call reuses the cached payload."""
        stub = stub_provider_factory(payload=sample_payload)
        enricher = make_enricher(stub)

        enricher.enrich("서울대학교", "컴퓨터공학부")
        record = enricher.enrich("서울대학교", "컴퓨터공학부")

        assert len(stub.calls) == 1
        assert record.ai_summary == sample_payload.summary

    def test_empty_result_not_cached(self, make_enricher, stub_provider_factory):
        """Test that a provider returning nothing is asked again."""
        stub = stub_provider_factory(payload=None)
        enricher = make_enricher(stub)

        enricher.enrich("서울대학교", "의예과")
        enricher.enrich("서울대학교", "의예과")

        assert len(stub.calls) == 2

    def test_enrichment_switched_off(self, make_enricher, stub_provider_factory, sample_payload):
        """Test the per-call switch."""
        stub = stub_provider_factory(payload=sample_payload)

        record = make_enricher(stub).enrich("서울대학교", "의예과", use_enrichment=False)

        assert stub.calls == []
        assert record.ai_summary is None


class TestMergeEnrichment:
    """Tests for the field-by-field merge."""

    @pytest.fixture
    def base(self, make_enricher):
        return make_enricher().enrich("연세대학교", "컴퓨터과학과")

    def test_never_loses_fields(self, base, sample_payload):
        """Test that populated fields survive any payload."""
        from deptcompass.enrichment.enricher import merge_enrichment
        from deptcompass.shared.schemas import EnrichmentPayload

        for patch in (None, EnrichmentPayload(), EnrichmentPayload(summary="요약"), sample_payload):
            merged = merge_enrichment(base, patch, min_description_length=5)
            assert base.populated_fields() <= merged.populated_fields()

    def test_base_not_modified(self, base, sample_payload):
        """Test that the merge returns a new record."""
        from deptcompass.enrichment.enricher import merge_enrichment

        before = base.model_dump()
        merge_enrichment(base, sample_payload, min_description_length=5)

        assert base.model_dump() == before

    def test_standing_untouched(self, base, sample_payload):
        """Test that enrichment does not touch the standing field."""
        from deptcompass.enrichment.enricher import merge_enrichment

        merged = merge_enrichment(base, sample_payload, min_description_length=5)

        assert merged.department_ranking == base.department_ranking

    def test_apply_detail(self, base):
        """Test overlaying only populated fields."""
        from deptcompass.enrichment.enricher import apply_detail
        from deptcompass.shared.schemas import DepartmentRecord

        sparse = DepartmentRecord(
            university_name=base.university_name,
            department_name=base.department_name,
            tuition_fee="1,000만원",
        )
        merged = apply_detail(base, sparse)

        assert merged.tuition_fee == "1,000만원"
        assert merged.description == base.description
        assert merged.admission_data == base.admission_data

    def test_apply_detail_copies_every_populated_field(self, base):
        """Test that a fully populated detail replaces every content field."""
        from deptcompass.enrichment.enricher import apply_detail
        from deptcompass.shared.schemas import CONTENT_FIELDS, DepartmentRecord

        bare = DepartmentRecord(
            university_name=base.university_name,
            department_name=base.department_name,
        )
        merged = apply_detail(bare, base)

        assert merged.populated_fields() == base.populated_fields()
        assert merged.populated_fields() <= set(CONTENT_FIELDS)


# ─────────────────────────────────────────────────────────────────────────────
# Provider
# ─────────────────────────────────────────────────────────────────────────────


class TestParsePayload:
    """Tests for tolerant model-output parsing."""

    def test_fenced_json(self):
        """Test that Markdown fences are removed."""
        from deptcompass.enrichment.provider import parse_payload

        text = '```json\n{"summary": "요약", "description": "학과 소개 문장입니다."}\n```'
        payload = parse_payload(text)

        assert payload.summary == "요약"
        assert payload.description == "학과 소개 문장입니다."

    @pytest.mark.parametrize("text", ["", "not json", "[1, 2]", "{}", '{"summary": "  "}'])
    def test_unusable(self, text):
        """Test that unusable output counts as nothing returned."""
        from deptcompass.enrichment.provider import parse_payload

        assert parse_payload(text) is None

    def test_malformed_fields_dropped(self):
        """Test that a malformed field does not discard the rest."""
        from deptcompass.enrichment.provider import parse_payload

        payload = parse_payload('{"admissionPrevYear": "bad", "summary": "요약"}')

        assert payload.admission_prev_year is None
        assert payload.summary == "요약"

    def test_numeric_values(self):
        """Test that numbers are kept as text."""
        from deptcompass.enrichment.provider import parse_payload

        payload = parse_payload('{"admissionPrevYear": {"jeongsi": 95.5}}')

        assert payload.admission_prev_year.jeongsi == "95.5"


class TestGeminiEnrichmentProvider:
    """Tests for the Gemini-backed provider without network access."""

    def test_no_key_returns_none(self):
        """Test that a missing key short-circuits."""
        from deptcompass.enrichment.provider import GeminiEnrichmentProvider

        provider = GeminiEnrichmentProvider(api_key="")

        assert not provider.is_available
        assert provider.fetch("서울대학교", "컴퓨터공학부") is None

    def test_no_key_client_raises(self):
        """Test that the client refuses to load without a key."""
        from deptcompass.enrichment.provider import GeminiEnrichmentProvider

        with pytest.raises(ValueError):
            GeminiEnrichmentProvider(api_key="").client

    def test_parses_response(self):
        """Test fetch with a stubbed generation call."""
        from deptcompass.enrichment.provider import GeminiEnrichmentProvider

        provider = GeminiEnrichmentProvider(api_key="test-key")
        prompts = []

        def fake_generate(prompt):
            prompts.append(prompt)
            return '```json\n{"summary": "요약"}\n```'

        provider._generate_content = fake_generate
        payload = provider.fetch("서울대학교", "컴퓨터공학부")

        assert payload.summary == "요약"
        assert "서울대학교" in prompts[0]

    def test_transport_error_returns_none(self):
        """Test that API errors are swallowed."""
        from deptcompass.enrichment.provider import EnrichmentProvider, GeminiEnrichmentProvider

        provider = GeminiEnrichmentProvider(api_key="test-key")

        def fail(prompt):
            raise ConnectionError("unreachable")

        provider._generate_content = fail

        assert provider.fetch("서울대학교", "컴퓨터공학부") is None
        assert isinstance(provider, EnrichmentProvider)


# ─────────────────────────────────────────────────────────────────────────────
# Prompts
# ─────────────────────────────────────────────────────────────────────────────


class TestPromptBuilder:
    """Tests for the enrichment prompt."""

    def test_prompt_without_stats(self):
        """Test identity, unknown context and summary format."""
        from deptcompass.enrichment.prompts import PromptBuilder

        system, user = PromptBuilder(target_year=2025).build_prompt("서울대학교", "컴퓨터공학부")

        assert "JSON" in system
        assert '"컴퓨터공학부" at "서울대학교"' in user
        assert "Recruit: Unknown" in user
        assert "2025(예상/확정)" in user
        assert "2024(결과)" in user

    def test_prompt_with_stats(self, snu):
        """Test that local figures appear in the context."""
        from deptcompass.enrichment.prompts import PromptBuilder

        _, user = PromptBuilder(target_year=2025).build_prompt("서울대학교", "의예과", snu.stats["의예과"])

        assert "Recruit: 135" in user
        assert "Applicants: 1200" in user
        assert "Rate: 8.89 : 1" in user

    def test_description_limit(self):
        """Test the description length instruction."""
        from deptcompass.enrichment.prompts import PromptBuilder

        system, user = PromptBuilder(target_year=2025, max_description_chars=80).build_prompt("a", "b")

        assert "80" in system
        assert "Under 80 characters" in user


# ─────────────────────────────────────────────────────────────────────────────
# Cache
# ─────────────────────────────────────────────────────────────────────────────


class TestEnrichmentCache:
    """Tests for the enrichment memo."""

    def test_set_get(self, sample_payload):
        """Test storing and reading one entry."""
        from deptcompass.enrichment.cache import EnrichmentCache

        cache = EnrichmentCache()
        cache.set("서울대학교", "컴퓨터공학부", sample_payload)

        assert cache.get("서울대학교", "컴퓨터공학부") is sample_payload
        assert cache.get("서울대학교", "의예과") is None
        assert len(cache) == 1

    def test_clear(self, sample_payload):
        """Test clearing the cache."""
        from deptcompass.enrichment.cache import EnrichmentCache

        cache = EnrichmentCache()
        cache.set("서울대학교", "컴퓨터공학부", sample_payload)
        cache.clear()

        assert len(cache) == 0

    def test_global_instance(self):
        """Test the process-wide cache singleton."""
        from deptcompass.enrichment.cache import get_enrichment_cache

        assert get_enrichment_cache() is get_enrichment_cache()


class TestConvenienceFunctions:
    """Tests for module-level wrappers."""

    def test_build_enrichment_prompt(self):
        """Test the combined single-string prompt."""
        from deptcompass.enrichment.prompts import build_enrichment_prompt

        prompt = build_enrichment_prompt("서울대학교", "컴퓨터공학부")

        assert prompt.startswith("Act as a Korean university admissions expert.")
        assert "컴퓨터공학부" in prompt

    def test_get_department_details(self, sample_catalog, stub_provider_factory, sample_payload):
        """Test the detail wrapper with an explicit provider."""
        from deptcompass.enrichment.enricher import get_department_details

        stub = stub_provider_factory(payload=sample_payload)
        record = get_department_details(sample_catalog, "연세대학교", "의예과", provider=stub)

        assert record.ai_summary == sample_payload.summary
        assert len(stub.calls) == 1
