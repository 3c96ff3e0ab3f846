"""
Tests for the job posting scraper.

End-to-end runs on a fake browser, failure normalization, and browser
cleanup on every exit path.
"""

from unittest.mock import patch

import pytest

from sales_tracker.core.exceptions import (
    InvalidUrlException,
    NavigationException,
    NavigationTimeoutException,
)
from sales_tracker.scrapers.browser import BrowserSessionDriver
from sales_tracker.scrapers.job_scraper import JobPostingScraper, normalize_error_message

from tests.fakes import FakeDriverFactory, FakePageDriver, no_delay


TIMEOUT_MESSAGE = "Request timed out. The page took too long to load. Please try again or enter details manually."
NAVIGATION_MESSAGE = "Could not load the page. Please check the URL or enter details manually."
INVALID_URL_MESSAGE = "Invalid URL. Please check the URL and try again."

GREENHOUSE_HTML = """
<html><body>
  <h1 class="app-title">Senior Data Engineer</h1>
  <div class="pay-range">$160,000 - $190,000</div>
  <p>Build data pipelines in the cloud.</p>
</body></html>
"""

LINKEDIN_HTML = """
<html><head><title>Account Executive | Globex | LinkedIn</title></head><body>
  <h1 class="top-card-layout__title">Account Executive</h1>
  <a class="topcard__org-name-link">Globex</a>
  <div class="description__text">Retail sales role. $70,000 - $90,000 base.</div>
</body></html>
"""


def make_scraper(session_store, launch_config, driver=None, factory=None):
    factory = factory or FakeDriverFactory(driver or FakePageDriver())
    browser = BrowserSessionDriver(launch_config, session_store, factory, no_delay)
    return JobPostingScraper(browser)


@pytest.mark.scraper
@pytest.mark.integration
class TestJobPostingScraper:
    """Test JobPostingScraper.scrape."""

    async def test_greenhouse_success(self, session_store, launch_config):
        driver = FakePageDriver(html=GREENHOUSE_HTML)
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://boards.greenhouse.io/acme-corp/jobs/1")

        assert result.success is True
        assert result.source == "greenhouse"
        assert result.data.job_title == "Senior Data Engineer"
        assert result.data.company_name == "Acme Corp"
        assert result.data.salary_min == 160000
        assert result.data.salary_max == 190000
        assert result.data.experience_level == "Senior"
        assert result.data.aligned_sector == ["Software Engineer"]
        assert driver.close_count == 1

    async def test_linkedin_uses_owner_session(self, session_store, launch_config, sample_cookies):
        await session_store.save("user-x", sample_cookies, user_agent="UA-X")
        driver = FakePageDriver(html=LINKEDIN_HTML, title="Account Executive | Globex | LinkedIn")
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://www.linkedin.com/jobs/view/3812345678", user_id="user-x")

        assert result.success is True
        assert result.source == "linkedin"
        assert result.data.company_name == "Globex"
        assert result.data.salary_min == 70000
        assert result.data.aligned_sector == ["Retail"]
        assert driver.user_agent == "UA-X"
        assert driver.close_count == 1

    async def test_linkedin_without_session(self, session_store, launch_config):
        driver = FakePageDriver()
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://www.linkedin.com/jobs/view/1", user_id="user-x")

        assert result.success is False
        assert result.data is None
        assert "LinkedIn authentication required" in result.error
        assert "goto" not in driver.calls
        assert driver.close_count == 1

    async def test_linkedin_does_not_borrow_another_users_session(self, session_store, launch_config, sample_cookies):
        await session_store.save("user-x", sample_cookies, user_agent="UA-X")
        driver = FakePageDriver(html=LINKEDIN_HTML)
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://www.linkedin.com/jobs/view/1", user_id="user-y")

        assert result.success is False
        assert "LinkedIn authentication required" in result.error
        assert driver.installed_cookies == []
        assert driver.user_agent is None

    async def test_linkedin_login_wall(self, session_store, launch_config, sample_cookies):
        await session_store.save("user-x", sample_cookies)
        driver = FakePageDriver(final_url="https://www.linkedin.com/uas/login?trk=guest")
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://www.linkedin.com/jobs/view/1", user_id="user-x")

        assert result.success is False
        assert result.error.startswith("LinkedIn authentication expired or invalid.")
        assert driver.close_count == 1

    async def test_result_dict_shape(self, session_store, launch_config):
        scraper = make_scraper(session_store, launch_config, FakePageDriver(html=GREENHOUSE_HTML))

        ok = (await scraper.scrape("https://boards.greenhouse.io/acme/jobs/1")).to_dict()
        failed = (await make_scraper(session_store, launch_config).scrape("https://www.linkedin.com/jobs/view/1")).to_dict()

        assert set(ok) == {"success", "data", "source"}
        assert set(ok["data"]) == {
            "job_title", "company_name", "salary_range", "salary_min",
            "salary_max", "experience_level", "aligned_sector",
        }
        assert set(failed) == {"success", "error"}


@pytest.mark.scraper
@pytest.mark.unit
class TestScraperCleanup:
    """The browser is closed exactly once whichever step fails."""

    @pytest.mark.parametrize("step", ["set_user_agent", "add_init_script", "goto", "content", "title"])
    async def test_failure_after_launch_closes_once(self, session_store, launch_config, step):
        driver = FakePageDriver(fail_on={step: RuntimeError(f"{step} broke")})
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://jobs.example.com/1")

        assert result.success is False
        assert result.error == f"{step} broke"
        assert driver.close_count == 1

    async def test_extraction_failure_closes_once(self, session_store, launch_config):
        driver = FakePageDriver(html="<html><body><h1>Analyst</h1></body></html>")
        scraper = make_scraper(session_store, launch_config, driver)

        with patch("sales_tracker.scrapers.extractors.GenericExtractor.extract_company", side_effect=RuntimeError("bad DOM")):
            result = await scraper.scrape("https://jobs.example.com/1")

        assert result.success is False
        assert result.error == "bad DOM"
        assert driver.close_count == 1

    async def test_launch_failure_returns_error(self, session_store, launch_config):
        factory = FakeDriverFactory(error=RuntimeError("chrome not found"))
        scraper = make_scraper(session_store, launch_config, factory=factory)

        result = await scraper.scrape("https://jobs.example.com/1")

        assert result.success is False
        assert result.error == "chrome not found"
        assert factory.driver.close_count == 0

    async def test_classification_failure_returns_error(self, session_store, launch_config):
        factory = FakeDriverFactory()
        scraper = make_scraper(session_store, launch_config, factory=factory)

        with patch("sales_tracker.scrapers.job_scraper.detect_job_site", side_effect=RuntimeError("bad url")):
            result = await scraper.scrape("https://jobs.example.com/1")

        assert result.success is False
        assert factory.configs == []

    async def test_close_failure_does_not_mask_result(self, session_store, launch_config):
        driver = FakePageDriver(html=GREENHOUSE_HTML, fail_on={"close": RuntimeError("already closed")})
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://boards.greenhouse.io/acme/jobs/1")

        assert result.success is True
        assert driver.close_count == 1


@pytest.mark.scraper
@pytest.mark.unit
class TestErrorNormalization:
    """Test normalize_error_message and its use in scrape."""

    @pytest.mark.parametrize("error,expected", [
        (TimeoutError(), TIMEOUT_MESSAGE),
        (RuntimeError("Navigation timeout of 30000 ms exceeded"), TIMEOUT_MESSAGE),
        (RuntimeError("Navigation failed because browser has disconnected"), NAVIGATION_MESSAGE),
        (RuntimeError("net::ERR_NAME_NOT_RESOLVED at https://nope.invalid"), INVALID_URL_MESSAGE),
        (RuntimeError("something odd"), "something odd"),
        (NavigationTimeoutException("page navigation", 30), TIMEOUT_MESSAGE),
        (NavigationException("https://x.com", "net::ERR_CONNECTION_RESET"), NAVIGATION_MESSAGE),
        (InvalidUrlException("https://nope.invalid"), INVALID_URL_MESSAGE),
    ])
    def test_messages(self, error, expected):
        assert normalize_error_message(error) == expected

    @pytest.mark.parametrize("error,expected", [
        (NavigationTimeoutException("page navigation", 30), TIMEOUT_MESSAGE),
        (InvalidUrlException("https://nope.invalid/job"), INVALID_URL_MESSAGE),
        (NavigationException("https://x.com/job", "net::ERR_CONNECTION_REFUSED"), NAVIGATION_MESSAGE),
    ])
    async def test_navigation_errors_surface_user_messages(self, session_store, launch_config, error, expected):
        driver = FakePageDriver(fail_on={"goto": error})
        scraper = make_scraper(session_store, launch_config, driver)

        result = await scraper.scrape("https://jobs.example.com/1")

        assert result.error == expected
        assert driver.close_count == 1
