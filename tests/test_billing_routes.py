from decimal import Decimal

import pytest

from gymflow.models.audit import AuditLog
from gymflow.models.payment import MemberPayment


@pytest.fixture
def packages(make_service):
    return make_service(name="Pilates", price="3000.00"), make_service(name="Yoga", price="1000.00")


def pay(client, member, service_ids, card="0", cash="0", **extra):
    data = {"service_ids": service_ids, "credit_card_paid": card, "cash_paid": cash}
    data.update(extra)
    return client.post(f"/billing/members/{member.id}/payments", json=data)


def test_payment_is_split_per_package(client, make_member, packages):
    pilates, yoga = packages
    member = make_member([pilates, yoga])

    response = pay(client, member, [pilates.id, yoga.id], card="2000", cash="1500",
                   payment_date="2024-06-01")
    assert response.status_code == 201
    body = response.get_json()
    assert body["summary"]["total_amount"] == 4000.0
    assert body["summary"]["remaining_amount"] == 500.0
    assert [(p["package_name"], p["credit_card_paid"], p["cash_paid"]) for p in body["payments"]] == [
        ("Pilates", 1500.0, 1125.0),
        ("Yoga", 500.0, 375.0),
    ]
    assert MemberPayment.query.count() == 2
    assert AuditLog.query.filter_by(entity_type="member_payment").count() == 1


def test_commission_added_to_card_share(app, client, make_member, packages):
    app.config["CARD_COMMISSION_RATE"] = Decimal("0.02")
    pilates, yoga = packages
    member = make_member([pilates, yoga])

    body = pay(client, member, [pilates.id, yoga.id], card="2000").get_json()
    assert body["summary"]["commission"] == 40.0
    assert body["summary"]["credit_card_with_commission"] == 2040.0
    assert [p["commission"] for p in body["payments"]] == [30.0, 10.0]
    assert [p["credit_card_paid"] for p in body["payments"]] == [1530.0, 510.0]


def test_repeated_package_gets_two_rows(client, make_member, packages):
    pilates, _ = packages
    member = make_member([pilates, pilates])
    body = pay(client, member, [pilates.id, pilates.id], cash="6000").get_json()
    assert [p["cash_paid"] for p in body["payments"]] == [3000.0, 3000.0]


def test_rejections(client, make_member, packages):
    pilates, _ = packages
    member = make_member([pilates])

    response = pay(client, member, [], cash="100")
    assert response.status_code == 400
    assert "service_ids" in response.get_json()["errors"]

    response = pay(client, member, [pilates.id], cash="-5")
    assert "cash_paid" in response.get_json()["errors"]

    response = pay(client, member, [999], cash="100")
    assert response.status_code == 400
    assert "service_ids" in response.get_json()["errors"]

    response = pay(client, member, [pilates.id], cash="3500")
    assert response.status_code == 400
    assert response.get_json()["errors"]["cash_paid"] == ["Payment exceeds the package total"]

    assert client.post("/billing/members/999/payments", json={}).status_code == 404
    assert MemberPayment.query.count() == 0


def test_preview_writes_nothing(client, packages):
    pilates, yoga = packages
    response = client.post("/billing/payment-summary", json={
        "service_ids": [pilates.id, yoga.id], "credit_card_paid": "1000", "cash_paid": "1000",
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body["summary"]["applied_amount"] == 2000.0
    assert [record["package_name"] for record in body["records"]] == ["Pilates", "Yoga"]
    assert MemberPayment.query.count() == 0


def test_list_update_delete(client, make_member, packages):
    pilates, yoga = packages
    first = make_member([pilates, yoga])
    second = make_member([yoga], first_name="Elif")
    pay(client, first, [pilates.id, yoga.id], cash="4000", payment_date="2024-05-01")
    pay(client, second, [yoga.id], card="1000", payment_date="2024-06-01")

    assert len(client.get("/billing/payments").get_json()) == 3
    assert len(client.get(f"/billing/payments?member_id={second.id}").get_json()) == 1
    assert len(client.get("/billing/payments?package=Yoga").get_json()) == 2
    june = client.get("/billing/payments?date_from=2024-06-01&date_to=2024-06-30").get_json()
    assert [p["member_id"] for p in june] == [second.id]
    assert client.get("/billing/payments?date_to=june").status_code == 400

    payment_id = june[0]["id"]
    response = client.patch(f"/billing/payments/{payment_id}", json={"cash_paid": "100"})
    assert response.status_code == 200
    assert response.get_json()["cash_paid"] == 100.0
    assert response.get_json()["credit_card_paid"] == 1000.0

    response = client.patch(f"/billing/payments/{payment_id}", json={"cash_paid": "-1"})
    assert response.status_code == 400

    assert client.delete(f"/billing/payments/{payment_id}").status_code == 204
    assert client.delete(f"/billing/payments/{payment_id}").status_code == 404
