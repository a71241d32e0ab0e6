"""
Pytest configuration and fixtures for pipeline tests.
"""

import pytest

from jobscraper.base import SiteConfig, LoadStrategy, ExtractionVariant
from jobscraper.settings import Settings


@pytest.fixture(scope="function")
def fast_settings(tmp_path):
    """Settings with every delay zeroed and output under tmp_path."""
    return Settings(
        output_file=tmp_path / "out" / "current_jobs.json",
        enrich_file=tmp_path / "out" / "current_jobs.json",
        retry_delay=0,
        site_delay=0,
        scroll_settle_ms=0,
        partial_scroll_settle_ms=0,
        load_more_retry_ms=0,
    )


@pytest.fixture
def generic_site():
    """A generic-variant board that needs no interaction."""
    return SiteConfig(
        name='testboard',
        url='https://x.test/jobs',
        output_file='testboard.json',
        listing_selector='li.job',
        field_selectors={
            'link': 'a',
            'companyLogo': 'img.logo',
            'position': '.position',
            'companyName': '.company',
            'location': '.location',
            'jobType': '.job-type',
            'datePosted': 'time',
            'applicationDeadline': '.deadline',
        },
        load_strategy=LoadStrategy.NONE,
        variant=ExtractionVariant.GENERIC,
    )


GENERIC_PAGE = """
<html><body><ul>
  <li class="job">
    <a href="/job/1">
      <img class="logo" src="/logos/acme.png">
      <h3 class="position">Backend Engineer</h3>
      <div class="company">Acme &amp; Co.</div>
      <div class="location">  Lilongwe,
          Malawi </div>
      <span class="job-type">Full Time</span>
      <time datetime="2024-03-01">March 1, 2024</time>
      <span class="deadline">Closes: 15 Mar 2024</span>
    </a>
  </li>
  <li class="job">
    <a href="/job/2"><h3 class="position">Go</h3></a>
  </li>
  <li class="job">
    <h3 class="position">No Link Here</h3>
  </li>
</ul></body></html>
"""


@pytest.fixture
def generic_page():
    """Listing page with one valid record and two invalid ones."""
    return GENERIC_PAGE
