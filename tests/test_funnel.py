"""Tests for the brief, payment and confirmation flows."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from atelier.config import SiteConfig
from atelier.models.checkout import PurchaseSummary
from atelier.models.forms import AssetFile
from atelier.models.route import Route
from atelier.services.catalog import CATALOG
from atelier.services.checkout import CheckoutUnavailableError, SummaryUnavailableError
from atelier.services.forms import SubmissionError
from atelier.services.funnel import (
    BriefFlow,
    ConfirmationFlow,
    FailureReason,
    FunnelState,
    PaymentFlow,
    open_brief,
)
from atelier.services.location import LocationNotifier, NavigationBridge, SessionStorage
from atelier.services.widget import WidgetSlot

_CONFIG = SiteConfig(site_origin="https://studio.test")
_GROWTH = CATALOG.lookup("growth")


class FakeWidget:
    def __init__(self, token, log):
        self.token = token
        self.log = log

    def mount(self, container_id):
        self.log.append(("mount", self.token, container_id))

    def destroy(self):
        self.log.append(("destroy", self.token))


def _slot():
    log = []
    return WidgetSlot(lambda token: FakeWidget(token, log)), log


def _fill(flow: BriefFlow) -> None:
    flow.update(
        company="Harbor & Sage",
        contact_name="Ada",
        email="ada@example.com",
        phone="555",
        pages="6",
        goal="Leads",
        assets_note="Logo attached later",
    )


# ---------------------------------------------------------------------------
# Brief
# ---------------------------------------------------------------------------

class TestOpenBrief:
    def test_known_package_starts_drafting(self):
        flow = open_brief("growth", config=_CONFIG, submit=AsyncMock())
        assert flow.state is FunnelState.DRAFTING
        assert flow.brief.package_slug == "growth"

    def test_unknown_package_is_rejected(self):
        assert open_brief("unknown", config=_CONFIG) is None


class TestBriefFlow:
    def test_total_follows_rush(self):
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=AsyncMock())
        assert flow.total == 2300
        flow.set_rush(True)
        assert flow.total == 2700

    def test_unknown_field_rejected(self):
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=AsyncMock())
        with pytest.raises(AttributeError):
            flow.update(budget="lots")

    def test_invalid_brief_is_not_sent(self):
        submit = AsyncMock()
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=submit)

        assert asyncio.run(flow.submit()) is False
        assert flow.state is FunnelState.DRAFTING
        assert len(flow.errors) == 7
        submit.assert_not_awaited()

    def test_invalid_email_only(self):
        submit = AsyncMock()
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=submit)
        _fill(flow)
        flow.update(email="abc")

        assert asyncio.run(flow.submit()) is False
        assert flow.errors == {"email": "Enter a valid email"}
        submit.assert_not_awaited()

    def test_success_navigates_to_payment(self):
        location = LocationNotifier("#/brief/growth")
        navigator = NavigationBridge(location, SessionStorage())
        submit = AsyncMock()
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=submit, navigator=navigator)
        _fill(flow)
        flow.set_rush(True)

        assert asyncio.run(flow.submit()) is True
        assert flow.state is FunnelState.AWAITING_CHECKOUT_SESSION
        assert location.fragment == "#/pay/growth?rush=1"
        submit.assert_awaited_once()
        sent_brief, sent_package = submit.await_args.args
        assert sent_brief.rush_requested is True
        assert sent_package is _GROWTH

    def test_without_rush_query_is_zero(self):
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=AsyncMock())
        assert flow.next_fragment == "/pay/growth?rush=0"

    def test_transport_failure(self):
        location = LocationNotifier("#/brief/growth")
        navigator = NavigationBridge(location, SessionStorage())
        submit = AsyncMock(side_effect=SubmissionError("offline"))
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=submit, navigator=navigator)
        _fill(flow)

        assert asyncio.run(flow.submit()) is False
        assert flow.state is FunnelState.FAILED
        assert flow.failure is FailureReason.SUBMISSION_FAILED
        assert flow.message == "Submission failed. Please email contact@citeks.net"
        assert location.fragment == "#/brief/growth"
        submit.assert_awaited_once()

    def test_files_are_dropped_after_attempt(self):
        flow = BriefFlow(_GROWTH, config=_CONFIG, submit=AsyncMock(side_effect=SubmissionError("x")))
        _fill(flow)
        flow.update(files=[AssetFile(filename="a.png", content=b"png")])

        asyncio.run(flow.submit())
        assert flow.brief.files == []


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------

class TestPaymentFlow:
    def test_rush_seeded_from_query(self):
        flow = PaymentFlow.from_route(_GROWTH, Route(page="pay", params=["growth"], query={"rush": "1"}), config=_CONFIG)
        assert flow.rush_requested is True
        assert flow.total == 2700

    def test_other_rush_values_mean_no_rush(self):
        flow = PaymentFlow.from_route(_GROWTH, Route(page="pay", query={"rush": "yes"}), config=_CONFIG)
        assert flow.rush_requested is False

    def test_session_mounts_widget(self):
        slot, log = _slot()
        create = AsyncMock(return_value="secret-1")
        flow = PaymentFlow(_GROWTH, True, config=_CONFIG, create_session=create, widget_slot=slot)

        asyncio.run(flow.start())

        assert flow.state is FunnelState.CHECKOUT_PRESENTED
        assert flow.client_secret == "secret-1"
        assert log == [("mount", "secret-1", "checkout")]
        pending = create.await_args.args[0]
        assert pending.to_payload() == {"slug": "growth", "rush": True, "origin": "https://studio.test"}

    def test_failure_leaves_no_widget(self):
        slot, log = _slot()
        create = AsyncMock(side_effect=CheckoutUnavailableError("Stripe is down"))
        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create, widget_slot=slot)

        asyncio.run(flow.start())

        assert flow.state is FunnelState.FAILED
        assert flow.failure is FailureReason.CHECKOUT_UNAVAILABLE
        assert flow.error == "Stripe is down"
        assert not flow.widget_mounted
        assert log == []

    def test_retry_clears_previous_failure(self):
        """A rush toggle after a failed request reads as pending, not failed."""
        release = asyncio.Event()
        calls = []

        async def create(pending):
            calls.append(pending.rush_requested)
            if len(calls) == 1:
                raise CheckoutUnavailableError("Stripe is down")
            await release.wait()
            return "secret-2"

        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create)
        seen = {}

        async def _scenario():
            await flow.start()
            assert flow.state is FunnelState.FAILED
            retry = asyncio.create_task(flow.set_rush(True))
            await asyncio.sleep(0)
            seen.update(state=flow.state, failure=flow.failure, error=flow.error)
            release.set()
            await retry

        asyncio.run(_scenario())

        assert seen == {"state": FunnelState.AWAITING_CHECKOUT_SESSION, "failure": None, "error": ""}
        assert flow.state is FunnelState.CHECKOUT_PRESENTED
        assert flow.client_secret == "secret-2"
        assert flow.failure is None

    def test_new_token_replaces_widget(self):
        slot, log = _slot()
        create = AsyncMock(side_effect=["secret-1", "secret-2"])
        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create, widget_slot=slot)

        async def _scenario():
            await flow.start()
            await flow.set_rush(True)

        asyncio.run(_scenario())

        assert log == [
            ("mount", "secret-1", "checkout"),
            ("destroy", "secret-1"),
            ("mount", "secret-2", "checkout"),
        ]
        assert flow.client_secret == "secret-2"

    def test_close_destroys_widget(self):
        slot, log = _slot()
        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=AsyncMock(return_value="s"), widget_slot=slot)
        asyncio.run(flow.start())
        flow.close()
        assert log[-1] == ("destroy", "s")
        assert not flow.widget_mounted

    def test_only_latest_request_is_applied(self):
        """Toggling rush twice before any response lands shows the last toggle's session."""
        slot, log = _slot()
        gates = {}

        async def create(pending):
            index = len(gates)
            gates[index] = asyncio.Event()
            await gates[index].wait()
            return f"secret-{index}-rush-{pending.rush_requested}"

        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create, widget_slot=slot)

        async def _scenario():
            first = asyncio.create_task(flow.start())
            await asyncio.sleep(0)
            second = asyncio.create_task(flow.set_rush(True))
            await asyncio.sleep(0)
            third = asyncio.create_task(flow.set_rush(False))
            await asyncio.sleep(0)
            # complete newest first, then the stale ones
            gates[2].set()
            await third
            gates[1].set()
            await second
            gates[0].set()
            await first

        asyncio.run(_scenario())

        assert flow.rush_requested is False
        assert flow.client_secret == "secret-2-rush-False"
        assert flow.state is FunnelState.CHECKOUT_PRESENTED
        assert log == [("mount", "secret-2-rush-False", "checkout")]

    def test_stale_failure_is_ignored(self):
        gates = []

        async def create(pending):
            gate = asyncio.Event()
            gates.append(gate)
            await gate.wait()
            if not pending.rush_requested:
                raise CheckoutUnavailableError("old request failed")
            return "secret-rush"

        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create)

        async def _scenario():
            first = asyncio.create_task(flow.start())
            await asyncio.sleep(0)
            second = asyncio.create_task(flow.set_rush(True))
            await asyncio.sleep(0)
            gates[1].set()
            await second
            gates[0].set()
            await first

        asyncio.run(_scenario())

        assert flow.state is FunnelState.CHECKOUT_PRESENTED
        assert flow.client_secret == "secret-rush"
        assert flow.error == ""

    def test_response_after_close_is_dropped(self):
        slot, log = _slot()
        gate = asyncio.Event()

        async def create(pending):
            await gate.wait()
            return "late"

        flow = PaymentFlow(_GROWTH, config=_CONFIG, create_session=create, widget_slot=slot)

        async def _scenario():
            task = asyncio.create_task(flow.start())
            await asyncio.sleep(0)
            flow.close()
            gate.set()
            await task

        asyncio.run(_scenario())
        assert flow.client_secret is None
        assert log == []


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------

class TestConfirmationFlow:
    def test_without_session_id(self):
        fetch = AsyncMock()
        flow = ConfirmationFlow.from_route(Route(page="thank-you"), config=_CONFIG, fetch_summary=fetch)

        asyncio.run(flow.load())

        assert flow.state is FunnelState.GENERIC_THANK_YOU
        assert flow.summary is None
        fetch.assert_not_awaited()

    def test_summary_loaded(self):
        summary = PurchaseSummary(
            payment_status="paid", amount_total_minor_units=230000, currency="usd"
        )
        fetch = AsyncMock(return_value=summary)
        flow = ConfirmationFlow("cs_1", config=_CONFIG, fetch_summary=fetch)

        asyncio.run(flow.load())

        assert flow.state is FunnelState.COMPLETE
        assert flow.summary.display_total == "$2300.00 USD"
        fetch.assert_awaited_once_with("cs_1")

    def test_summary_failure_is_not_fatal(self):
        fetch = AsyncMock(side_effect=SummaryUnavailableError("boom"))
        flow = ConfirmationFlow("cs_1", config=_CONFIG, fetch_summary=fetch)

        asyncio.run(flow.load())

        assert flow.state is FunnelState.FAILED
        assert flow.failure is FailureReason.SUMMARY_UNAVAILABLE
        assert "We received your payment" in flow.error
        assert "contact@citeks.net" in flow.acknowledgement
