"""Shared BDD fixtures and step definitions for payment notifications."""

import json
import re

from pytest_bdd import given, parsers, then

from vouchers.webhook.processor import NotificationProcessor

_VOUCHER_CODE = re.compile(r"^KSP-\d{4}-[A-HJ-NP-Z2-9]{12}$")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pending order for "{service_name}" worth {amount:d}'), target_fixture="order")
def _(place_order, service_name, amount):
    return place_order(service_name=service_name, total_amount=amount)


@given(parsers.cfparse('the gateway has already reported "{transaction_status}"'))
def _(order, signed_notification, transaction_status):
    body = signed_notification(order.external_reference, transaction_status=transaction_status)
    NotificationProcessor().process(json.dumps(body).encode())


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the response is {status_code:d} with message "{message}"'))
def _(result, status_code, message):
    assert result.status_code == status_code
    assert result.message == message


@then(parsers.cfparse('the order payment status is "{status}"'))
def _(order, reload, status):
    assert reload(order).payment_status == status


@then(parsers.re(r"the order has exactly (?P<count>\d+) vouchers?"))
def _(order, vouchers_of, count):
    assert len(vouchers_of(order)) == int(count)


@then("the voucher code matches the issued code format")
def _(order, vouchers_of):
    assert _VOUCHER_CODE.match(vouchers_of(order)[0].code)


@then("the voucher was emailed to the recipient")
def _(order, email_channel, vouchers_of):
    assert len(email_channel.sent_emails) == 1
    sent = email_channel.sent_emails[0]
    assert sent["to"] == order.recipient_email
    assert vouchers_of(order)[0].code in sent["body"]
