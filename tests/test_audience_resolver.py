"""
Tests for campaign_service.services.audience_resolver.
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy import true
from sqlalchemy.exc import OperationalError

from campaign_service.core.exceptions import StoreUnavailableException
from campaign_service.services.audience_resolver import AudienceResolver
from campaign_service.services.rule_translator import build_customer_filter


class TestResolveIds:

    def test_all_customers_for_empty_predicate(self, session, customers):
        resolver = AudienceResolver(session)
        assert resolver.resolve_ids(true()) == ["C001", "C002", "C003", "C004", "C005"]

    def test_ids_follow_predicate(self, session, customers):
        predicate = build_customer_filter([{"field": "gender", "operator": "equals", "value": "M"}])
        assert AudienceResolver(session).resolve_ids(predicate) == ["C002", "C004"]

    def test_no_matches(self, session, customers):
        predicate = build_customer_filter([{"field": "age", "operator": "greater_than", "value": 99}])
        assert AudienceResolver(session).resolve_ids(predicate) == []

    def test_empty_store(self, session):
        assert AudienceResolver(session).resolve_ids(true()) == []


class TestResolveCustomers:

    def test_returns_full_records(self, session, customers):
        predicate = build_customer_filter([{"field": "city", "operator": "equals", "value": "LA"}])
        records = AudienceResolver(session).resolve_customers(predicate)
        assert len(records) == 1
        assert records[0].customer_id == "C003"
        assert records[0].name == "Carol"
        assert records[0].total_spend == 5400.0

    def test_read_only(self, session, customers):
        AudienceResolver(session).resolve_customers(true())
        assert not session.dirty
        assert not session.new


class TestStoreFailures:

    def _broken_session(self):
        broken = MagicMock()
        broken.exec.side_effect = OperationalError("SELECT", {}, Exception("database is unreachable"))
        return broken

    def test_resolve_ids_raises_store_unavailable(self):
        with pytest.raises(StoreUnavailableException):
            AudienceResolver(self._broken_session()).resolve_ids(true())

    def test_resolve_customers_raises_store_unavailable(self):
        with pytest.raises(StoreUnavailableException) as exc_info:
            AudienceResolver(self._broken_session()).resolve_customers(true())
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, OperationalError)
