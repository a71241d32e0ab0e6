"""
Tests for the detail page enrichment pass.
"""

import asyncio
import json

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobscraper.base import (
    DescriptionOutcome,
    EnrichmentStats,
    JobListing,
    DESCRIPTION_ERROR,
    FETCH_FAILED,
    NO_DESCRIPTION,
)
from jobscraper.enricher import (
    DetailEnricher,
    apply_detail_metadata,
    batched,
    extract_description,
    extract_detail_metadata,
)

from tests.fakes import FakeBrowser, FakeResult


DETAIL_PAGE = """
<html><body>
  <div class="job_description">
    <p>We are hiring a backend engineer.</p>
  </div>
</body></html>
"""

FLYER_PAGE = """
<html><body>
  <div class="job_description">
    <img src="/flyers/page-1.png">
    <img src="https://cdn.x.test/flyers/page-2.png">
  </div>
</body></html>
"""

UNICEF_DETAIL_PAGE = """
<html><body>
  <div class="open-date"><time>12 Jun 2024</time></div>
  <div class="close-date"><time>30 Jun 2024</time></div>
  <span class="work-type">Temporary Appointment</span>
  <div id="job-details">Support the immunization programme.</div>
  <div class="job_description">Generic board text.</div>
</body></html>
"""


def job(n, source='testboard', **fields):
    return JobListing(
        link=f'https://x.test/job/{n}',
        source=source,
        position=f'Position {n}',
        date_posted='N/A',
        application_deadline='N/A',
        job_type='Full Time',
        **fields,
    )


def enricher(settings, browser, batch_size=None):
    return DetailEnricher(
        settings=settings,
        browser_factory=lambda s: browser,
        batch_size=batch_size,
    )


class TestExtractDescription:
    """Test description extraction from a parsed detail page."""

    def _extract(self, html, selector='.job_description'):
        soup = BeautifulSoup(html, 'html.parser')
        return extract_description(soup, selector, 'https://x.test/job/1')

    def test_text_description(self):
        text, outcome = self._extract(DETAIL_PAGE)
        assert text == 'We are hiring a backend engineer.'
        assert outcome == DescriptionOutcome.TEXT

    def test_image_fallback_joins_all_images(self):
        text, outcome = self._extract(FLYER_PAGE)
        assert text == 'https://x.test/flyers/page-1.png, https://cdn.x.test/flyers/page-2.png'
        assert outcome == DescriptionOutcome.IMAGES

    def test_missing_container(self):
        text, outcome = self._extract('<html><body><p>Gone</p></body></html>')
        assert text == NO_DESCRIPTION
        assert outcome == DescriptionOutcome.MISSING

    def test_empty_container_without_images(self):
        text, _ = self._extract('<div class="job_description">   </div>')
        assert text == NO_DESCRIPTION

    def test_invalid_selector_reports_error(self):
        text, outcome = self._extract(DETAIL_PAGE, selector='div[')
        assert text == DESCRIPTION_ERROR
        assert outcome == DescriptionOutcome.MISSING


class TestDetailMetadata:
    """Test supplementary metadata read from detail pages."""

    def test_only_present_fields_returned(self):
        soup = BeautifulSoup(
            '<div class="open-date"><time>12 Jun 2024</time></div>'
            '<div class="close-date"><time> </time></div>',
            'html.parser',
        )
        found = extract_detail_metadata(soup, {
            'datePosted': '.open-date > time',
            'applicationDeadline': '.close-date > time',
            'jobType': '.work-type',
        })
        assert found == {'datePosted': '12 Jun 2024'}

    def test_apply_normalizes_date(self):
        listing = job(1)
        apply_detail_metadata(listing, {'datePosted': '12 Jun 2024', 'jobType': 'Consultancy'})
        assert listing.date_posted == '2024-06-12'
        assert listing.job_type == 'Consultancy'
        assert listing.application_deadline == 'N/A'


class TestBatched:
    """Test batch splitting."""

    def test_batches(self):
        assert batched(list(range(5)), 2) == [[0, 1], [2, 3], [4]]
        assert batched([], 20) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            batched([1], 0)


class TestEnrich:
    """Test enrichment of listings against fake detail pages."""

    def test_descriptions_added(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE))
        stats = EnrichmentStats()
        results = asyncio.run(enricher(fast_settings, browser).enrich([job(1), job(2)], stats))

        assert [r.job_description for r in results] == ['We are hiring a backend engineer.'] * 2
        assert stats.described == 2
        assert stats.total == 2
        assert browser.closed

    def test_failed_job_isolated_within_batch(self, fast_settings):
        browser = FakeBrowser(
            routes={'https://x.test/job/7': [PlaywrightTimeoutError("Timeout 30000ms exceeded")]},
            default=FakeResult(DETAIL_PAGE),
        )
        listings = [job(n) for n in range(1, 21)]
        stats = EnrichmentStats()
        results = asyncio.run(enricher(fast_settings, browser, batch_size=20).enrich(listings, stats))

        assert [r.link for r in results] == [listing.link for listing in listings]
        assert results[6].job_description == FETCH_FAILED
        others = [r for i, r in enumerate(results) if i != 6]
        assert all(r.job_description == 'We are hiring a backend engineer.' for r in others)
        assert stats.failed == 1
        assert stats.described == 19

    def test_http_error_page_is_fetch_failure(self, fast_settings):
        error_page = '<div class="job_description">404 Not Found - page missing</div>'
        browser = FakeBrowser(
            routes={'https://x.test/job/2': [FakeResult(error_page, status=404)]},
            default=FakeResult(DETAIL_PAGE),
        )
        stats = EnrichmentStats()
        results = asyncio.run(enricher(fast_settings, browser).enrich([job(1), job(2)], stats))

        assert results[0].job_description == 'We are hiring a backend engineer.'
        assert results[1].job_description == FETCH_FAILED
        assert stats.failed == 1

    def test_missing_response_is_fetch_failure(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE, status=None))
        results = asyncio.run(enricher(fast_settings, browser).enrich([job(1)]))
        assert results[0].job_description == FETCH_FAILED

    def test_concurrency_bounded_by_batch_size(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE), navigation_delay=0.01)
        listings = [job(n) for n in range(45)]
        asyncio.run(enricher(fast_settings, browser, batch_size=20).enrich(listings))

        assert browser.contexts_opened == 45
        assert browser.max_open_contexts == 20
        assert browser.open_contexts == 0

    def test_image_fallback_counted(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(FLYER_PAGE))
        stats = EnrichmentStats()
        results = asyncio.run(enricher(fast_settings, browser).enrich([job(1)], stats))

        assert results[0].job_description == (
            'https://x.test/flyers/page-1.png, https://cdn.x.test/flyers/page-2.png'
        )
        assert stats.image_fallback == 1
        assert stats.described == 1

    def test_missing_selector_is_not_failure(self, fast_settings):
        browser = FakeBrowser(default=FakeResult('<html><body><p>Expired</p></body></html>'))
        stats = EnrichmentStats()
        results = asyncio.run(enricher(fast_settings, browser).enrich([job(1)], stats))

        assert results[0].job_description == NO_DESCRIPTION
        assert stats.missing == 1
        assert stats.failed == 0

    def test_metadata_override_only_for_configured_source(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(UNICEF_DETAIL_PAGE))
        unicef = job(1, source='unicef-careers')
        other = job(2, source='careersmw')
        unicef_result, other_result = asyncio.run(
            enricher(fast_settings, browser).enrich([unicef, other])
        )

        assert unicef_result.job_description == 'Support the immunization programme.'
        assert unicef_result.date_posted == '2024-06-12'
        assert unicef_result.application_deadline == '30 Jun 2024'
        assert unicef_result.job_type == 'Temporary Appointment'

        assert other_result.job_description == 'Generic board text.'
        assert other_result.date_posted == 'N/A'
        assert other_result.job_type == 'Full Time'

    def test_enriching_twice_gives_same_result(self, fast_settings):
        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE))
        runner = enricher(fast_settings, browser)
        once = asyncio.run(runner.enrich([job(1), job(2)]))
        first = [r.to_dict() for r in once]
        twice = asyncio.run(runner.enrich(once))
        assert [r.to_dict() for r in twice] == first

    def test_empty_input(self, fast_settings):
        browser = FakeBrowser()
        stats = EnrichmentStats()
        assert asyncio.run(enricher(fast_settings, browser).enrich([], stats)) == []
        assert stats.processed == 0


class TestEnrichmentRun:
    """Test the file-in, file-out run."""

    def test_file_enriched_in_place(self, fast_settings, tmp_path):
        path = tmp_path / "current_jobs.json"
        original = [
            job(1).to_dict(),
            {**job(2).to_dict(), 'salary': 'Negotiable'},
        ]
        path.write_text(json.dumps(original), encoding='utf-8')

        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE))
        asyncio.run(enricher(fast_settings, browser).run(path))

        with open(path, encoding='utf-8') as f:
            data = json.load(f)
        assert [d['link'] for d in data] == ['https://x.test/job/1', 'https://x.test/job/2']
        assert all(d['jobDescription'] == 'We are hiring a backend engineer.' for d in data)
        assert data[1]['salary'] == 'Negotiable'
        assert data[0]['position'] == 'Position 1'

    def test_defaults_to_settings_file(self, fast_settings):
        fast_settings.enrich_file.parent.mkdir(parents=True)
        fast_settings.enrich_file.write_text(json.dumps([job(1).to_dict()]), encoding='utf-8')

        browser = FakeBrowser(default=FakeResult(DETAIL_PAGE))
        results = asyncio.run(enricher(fast_settings, browser).run())
        assert results[0].job_description == 'We are hiring a backend engineer.'

    def test_missing_file_raises(self, fast_settings, tmp_path):
        browser = FakeBrowser()
        with pytest.raises(FileNotFoundError):
            asyncio.run(enricher(fast_settings, browser).run(tmp_path / "absent.json"))

    def test_non_array_file_raises(self, fast_settings, tmp_path):
        path = tmp_path / "jobs.json"
        path.write_text('{"link": "https://x.test/"}', encoding='utf-8')
        with pytest.raises(ValueError):
            asyncio.run(enricher(fast_settings, FakeBrowser()).run(path))
