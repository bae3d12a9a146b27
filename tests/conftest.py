"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Source CSV cell rows and a CSV file on disk
- A catalog built from those rows
- Mock enrichment providers
- Temporary directories
- Singleton / cache resets
"""

import csv
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Isolation
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch) -> Generator[None, None, None]:
    """Run every test without an API key and with fresh singletons."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("TARGET_YEAR", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.setenv("ENRICHMENT_ENABLED", "false")

    from deptcompass.enrichment import cache, provider
    from deptcompass.ingestion.catalog import get_catalog
    from deptcompass.shared.config import get_settings

    get_settings.cache_clear()
    get_catalog.cache_clear()
    cache.get_enrichment_cache().clear()
    provider._provider = None

    yield

    get_settings.cache_clear()
    get_catalog.cache_clear()
    cache.get_enrichment_cache().clear()
    provider._provider = None


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return project_root / "config" / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Source Data Fixtures
# ─────────────────────────────────────────────────────────────────────────────


ROW_WIDTH = 26


def _make_cells(
    university: str,
    department: str,
    category: str = "공학계열",
    fine: str = "",
    location: str = "서울 관악구",
    institution_type: str = "사립",
    school_type: str = "대학교",
    program_type: str = "대학과정",
    year: str = "2025",
    seats: str = "30",
    applicants: str = "300",
) -> list[str]:
    cells = [""] * ROW_WIDTH
    cells[0] = year
    cells[1] = school_type
    cells[4] = university
    cells[7] = location
    cells[9] = institution_type
    cells[16] = program_type
    cells[17] = category
    cells[18] = fine
    cells[21] = department
    cells[23] = seats
    cells[24] = applicants
    return cells


@pytest.fixture
def make_cells() -> Callable[..., list[str]]:
    """Factory for one raw CSV row with cells at the configured positions."""
    return _make_cells


@pytest.fixture
def sample_rows() -> list[list[str]]:
    """Raw rows covering every university kind and every skip reason."""
    snu = dict(location="서울 관악구", institution_type="국립대법인")
    yonsei = dict(location="서울 서대문구")
    khu = dict(location="서울 동대문구")
    kku = dict(location="서울 광진구")
    cau = dict(location="서울 동작구")
    nsu = dict(location="충남 천안시")
    cbnu = dict(location="충북 청주시", institution_type="국립")
    snue = dict(location="서울 서초구", institution_type="국립", school_type="교육대학")

    return [
        # 서울대학교 (SKY, curated computer science record)
        _make_cells("서울대학교", "컴퓨터공학부", "공학계열", "컴퓨터·통신", seats="50", applicants="500", **snu),
        _make_cells("서울대학교", "국어국문학과", "인문계열", "언어·문학", **snu),
        _make_cells("서울대학교", "의예과", "의약계열", "의료", seats="135", applicants="1,200", **snu),
        _make_cells("서울대학교", "자유전공학부", "사회계열", "", **snu),
        _make_cells("서울대학교", "전기정보공학부 반도체전공", "공학계열", "전기·전자", **snu),
        # 남서울대학교 (regional private)
        _make_cells("남서울대학교", "컴퓨터소프트웨어학과", "공학계열", "컴퓨터·통신", **nsu),
        _make_cells("남서울대학교", "간호학과(4년제)", "의약계열", "간호", **nsu),
        # 경희대학교 (every regulated profession)
        _make_cells("경희대학교", "한의예과", "의약계열", "의료", **khu),
        _make_cells("경희대학교", "치의예과", "의약계열", "의료", **khu),
        _make_cells("경희대학교", "약학과", "의약계열", "약학", **khu),
        _make_cells("경희대학교", "의예과", "의약계열", "의료", **khu),
        _make_cells("경희대학교", "경영학과", "사회계열", "경영·경제", **khu),
        # 연세대학교
        _make_cells("연세대학교", "의예과", "의약계열", "의료", **yonsei),
        _make_cells("연세대학교", "치의예과", "의약계열", "의료", **yonsei),
        _make_cells("연세대학교", "컴퓨터과학과", "공학계열", "컴퓨터·통신", **yonsei),
        # 건국대학교
        _make_cells("건국대학교", "수의예과", "의약계열", "수의", **kku),
        _make_cells("건국대학교", "경영학과", "사회계열", "경영·경제", **kku),
        # 중앙대학교
        _make_cells("중앙대학교", "약학부", "의약계열", "약학", **cau),
        # 충북대학교 (national, pharmaceutical engineering)
        _make_cells("충북대학교", "제약학과", "공학계열", "화공", **cbnu),
        _make_cells("충북대학교", "수의예과", "의약계열", "수의", **cbnu),
        # 서울교육대학교 (education tier)
        _make_cells("서울교육대학교", "초등교육과", "교육계열", "", **snue),
        # 대학원대학교 (graduate-only school)
        _make_cells("KDI국제정책대학원대학교", "경제학과", "사회계열", "경영·경제", location="세종 세종시"),
        # Rows the builder must skip
        ["2025", "대학교", "", "", "잘린대학교"],
        _make_cells("서울대학교", "물리학과", "자연계열", year="2024", **snu),
        _make_cells("서울전문대학", "간호학과", "의약계열", school_type="전문대학"),
        _make_cells("서울대학교", "컴퓨터공학과", "공학계열", program_type="대학원과정", **snu),
        _make_cells("서울대학교", "소속학과없음", "공학계열", **snu),
    ]


@pytest.fixture
def sample_csv(temp_dir: Path, sample_rows: list[list[str]]) -> Path:
    """The sample rows written as a CSV behind the configured 15 header lines."""
    path = temp_dir / "admissions.csv"
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        writer = csv.writer(f)
        for i in range(15):
            writer.writerow([f"header {i}"])
        writer.writerows(sample_rows)
    return path


@pytest.fixture
def sample_catalog(sample_rows: list[list[str]]):
    """Catalog built from the sample rows for 2025."""
    from deptcompass.ingestion.catalog import CatalogBuilder

    builder = CatalogBuilder(target_year=2025, filter_year=True)
    builder.add_cells(sample_rows)
    return builder.build(source_file="sample.csv")


@pytest.fixture
def snu(sample_catalog):
    """서울대학교 from the sample catalog."""
    return sample_catalog.get("서울대학교")


# ─────────────────────────────────────────────────────────────────────────────
# Enrichment Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_payload():
    """A complete enrichment payload."""
    from deptcompass.shared.schemas import EnrichmentPayload

    return EnrichmentPayload.model_validate(
        {
            "admissionPrevYear": {
                "susiGyogwa": "1.10 (70%컷)",
                "susiJonghap": "1.32 (50%컷)",
                "jeongsi": "98.1 (평균)",
            },
            "summary": "2025(예상/확정): 모집 50명 / 지원 500명 / 경쟁률 10:1\n2024(결과): 모집 48명 / 지원 470명 / 경쟁률 9.8:1",
            "description": "컴퓨터 과학의 이론과 실무를 아우르는 교육으로 소프트웨어 분야의 리더를 양성합니다.",
        }
    )


class StubProvider:
    """Provider returning a fixed payload and recording its calls."""

    def __init__(self, payload=None, delay: float = 0.0, error: Exception = None):
        self.payload = payload
        self.delay = delay
        self.error = error
        self.calls = []

    def fetch(self, university_name, department_name, stats=None):
        import time

        self.calls.append((university_name, department_name, stats))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def stub_provider_factory():
    """Factory for StubProvider instances."""
    return StubProvider
