"""Tests for report categories, button ids and resolution."""

import pytest

from peechi.exceptions import NotFoundError, ValidationError
from peechi.reports.report_registry import ReportRegistry
from peechi.reports.report_resolution import (
    ReportCategory,
    build_report_button_id,
    parse_report_button_id,
    resolve_report,
)


class TestButtonIds:
    def test_build(self):
        assert build_report_button_id("abc", ReportCategory.SPAM) == "report/abc/Spam & Ads"

    def test_parse(self):
        assert parse_report_button_id("report/abc/Illegal or NSFW") == ("abc", "Illegal or NSFW")

    @pytest.mark.parametrize("custom_id", ["report", "report/abc", "report//Other", "verify/abc/Other", ""])
    def test_parse_rejects_malformed(self, custom_id):
        with pytest.raises(ValidationError) as exc_info:
            parse_report_button_id(custom_id)
        assert exc_info.value.user_message == "Invalid report button."


class TestResolveReport:
    def test_invalid_category_then_valid_category(self, clock):
        registry = ReportRegistry(clock=clock)
        report_id = registry.create_report("origin", "message")

        with pytest.raises(ValidationError) as exc_info:
            resolve_report(registry, report_id, "Rude")
        assert exc_info.value.user_message == "Invalid category"
        assert report_id in registry

        resolution = resolve_report(registry, report_id, "Offensive")
        assert resolution.category is ReportCategory.OFFENSIVE
        assert resolution.report.id == report_id
        assert resolution.report.message == "message"
        assert report_id not in registry

    def test_unknown_report(self, clock):
        with pytest.raises(NotFoundError) as exc_info:
            resolve_report(ReportRegistry(clock=clock), "missing", "Other")
        assert exc_info.value.user_message == "Report not found"

    def test_second_resolution_fails(self, clock):
        registry = ReportRegistry(clock=clock)
        report_id = registry.create_report("origin", "message")
        resolve_report(registry, report_id, "Other")

        with pytest.raises(NotFoundError):
            resolve_report(registry, report_id, "Other")

    def test_expired_report_is_not_found(self, clock):
        registry = ReportRegistry(ttl_seconds=60, clock=clock)
        report_id = registry.create_report("origin", "message")
        clock.advance(61)

        with pytest.raises(NotFoundError):
            resolve_report(registry, report_id, "Spam & Ads")


def test_every_category_has_style_and_color():
    for category in ReportCategory:
        assert category.button_style is not None
        assert category.color is not None
